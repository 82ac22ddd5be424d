"""Clients for managed services (Supabase, Stripe) and shared HTTP helpers."""
