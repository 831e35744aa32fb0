#!/usr/bin/env python3
"""
Connection Check Script

Run this to verify the record store and the email relay are configured.
Usage: python scripts/check_connections.py
"""

from app.core.config import get_settings
from app.db.mongodb import init_mongo_indexes, test_mongo_connection


def main():
    settings = get_settings()
    print("=" * 50)
    print("CAMPUS PLACEMENT PORTAL - CONNECTION CHECK")
    print("=" * 50)

    # MongoDB
    print("\n[1] Testing MongoDB...")
    print(f"    Backend: {settings.store_backend}")
    print(f"    URI: {settings.mongodb_uri}")
    print(f"    Database: {settings.mongodb_db}")
    if test_mongo_connection():
        print("    ✅ MongoDB: CONNECTED")
        init_mongo_indexes()
        print("    ✅ Indexes: CREATED")
    else:
        print("    ❌ MongoDB: FAILED")

    # Web3Forms
    print("\n[2] Checking Web3Forms...")
    if settings.web3forms_key:
        print(f"    URL: {settings.web3forms_url}")
        print(f"    From: {settings.notification_from_name}")
        print("    ✅ Web3Forms: KEY CONFIGURED")
    else:
        print("    ⚠️  Web3Forms: key not configured, status emails will be skipped")

    print("\n" + "=" * 50)
    print("Connection check complete!")
    print("=" * 50)


if __name__ == "__main__":
    main()
