#!/usr/bin/env python3
"""
Create the storefront admin account.

Usage:
    python scripts/init_admin.py
    python scripts/init_admin.py --username alice --password s3cret --email alice@example.com
"""
import argparse
import os
import sys

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from textilehome.db import SessionLocal, init_db
from textilehome.services.admin_service import AdminExists, AdminService


def main(argv=None):
    parser = argparse.ArgumentParser()
    parser.add_argument("--username", default="admin")
    parser.add_argument("--password", default="admin123")
    parser.add_argument("--email", default="admin@textilehome.com")
    args = parser.parse_args(argv)

    init_db()
    db = SessionLocal()
    try:
        AdminService(db).create_admin(args.username, args.password, args.email)
    except AdminExists:
        print(f"Admin user {args.username!r} already exists")
        return 0
    finally:
        db.close()

    print("Admin user created:")
    print(f"   Username: {args.username}")
    print(f"   Email: {args.email}")
    print("Change the password after first login!")
    return 0


if __name__ == "__main__":
    sys.exit(main())
