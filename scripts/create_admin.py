#!/usr/bin/env python3
"""
Create Admin Account

CLI script to provision (or rotate the password of) a platform admin.

Usage:
    python scripts/create_admin.py --email admin@amorepresente.com.br

The password is prompted for unless --password is given.
"""

import argparse
import asyncio
import getpass
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from amor_presente.auth.admin_accounts import create_admin_account
from amor_presente.db.client import close_db, init_db
from amor_presente.db.rls import rls_context


async def main() -> int:
    parser = argparse.ArgumentParser(description="Create or update an admin account")
    parser.add_argument("--email", required=True, help="Admin email (login)")
    parser.add_argument("--password", help="Admin password (prompted when omitted)")
    args = parser.parse_args()

    password = args.password or getpass.getpass("Password: ")
    if len(password) < 8:
        print("Password must have at least 8 characters", file=sys.stderr)
        return 1

    await init_db()
    try:
        with rls_context(None, is_internal=True):
            admin_id = await create_admin_account(args.email, password)
    finally:
        await close_db()

    print(f"Admin ready: {args.email.strip().lower()} ({admin_id})")
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
