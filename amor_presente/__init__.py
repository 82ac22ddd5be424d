"""Amor&Presente backend: gift registry and event site builder."""

__version__ = "0.1.0"
