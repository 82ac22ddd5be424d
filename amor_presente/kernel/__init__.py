"""Kernel utilities shared across modules.

Rules:
- Kernel code must not import from presentation layers (e.g. FastAPI routes).
- Keep these helpers small; no business logic here.
"""
