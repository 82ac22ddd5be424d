"""Transactional emails sent through Resend."""
