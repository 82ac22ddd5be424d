"""Creator sites: slugs, theming, countdowns, layouts and the site service."""
