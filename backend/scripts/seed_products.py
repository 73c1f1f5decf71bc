#!/usr/bin/env python3
"""
Seed the product catalogue.

With no --file the built-in sample catalogue (bedsheets, pillow covers,
table covers) is loaded. A JSON file may hold a list of products or an
object with an "items" list; camelCase and snake_case keys both work.
Nothing is inserted when the products table already has rows, unless
--reset drops and recreates the schema first.

Usage:
    python scripts/seed_products.py
    python scripts/seed_products.py --file catalogue.json --reset
"""
import argparse
import json
import os
import sys

# allow running from repo/scripts
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from textilehome.db import SessionLocal, init_db
from textilehome.seed import seed_products


def load_entries(path: str):
    with open(path, "r", encoding="utf-8") as f:
        try:
            data = json.load(f)
        except ValueError as e:
            raise RuntimeError(f"Failed to parse JSON from {path}: {e}")
    if isinstance(data, dict):
        if "items" in data and isinstance(data["items"], list):
            return data["items"]
        return list(data.values())
    if isinstance(data, list):
        return data
    return []


def main(argv=None):
    parser = argparse.ArgumentParser()
    parser.add_argument("--file", "-f", default=None, help="Path to a product JSON file")
    parser.add_argument("--reset", action="store_true", help="Drop and recreate all tables first")
    args = parser.parse_args(argv)

    entries = None
    if args.file:
        if not os.path.exists(args.file):
            print("File not found:", args.file)
            return 1
        entries = load_entries(args.file)

    init_db(reset=args.reset)
    db = SessionLocal()
    try:
        created = seed_products(db, entries)
    finally:
        db.close()

    if created:
        print("Seeded products:", created)
    else:
        print("Products table already populated; nothing seeded (use --reset to reload)")
    return 0


if __name__ == "__main__":
    sys.exit(main())
