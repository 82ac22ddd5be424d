"""Guest RSVPs for event sites."""
