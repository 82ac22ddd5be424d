"""Global product catalog and per-site product lists."""
