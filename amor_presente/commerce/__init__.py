"""Cart, Stripe checkout and orders."""
