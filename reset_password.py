#!/usr/bin/env python3
"""
Reset a user's password in the PetMinder SQLite database.

This script does not read or reveal existing passwords.  It stores a
new PBKDF2 hash for the user with the given email, using the same
format the API itself writes.

Usage:
    python reset_password.py --db ./pet_minder_api/pet_minder.db --email admin@example.com --password "NewStrongPass!234"

If --password is omitted, you will be prompted to enter it securely.
"""

import argparse
import getpass
import os
import sqlite3
import sys

from pet_minder_api.app.core.security import hash_password


def main() -> None:
    ap = argparse.ArgumentParser(description="Reset a PetMinder user password (SQLite).")
    ap.add_argument("--db", required=True, help="Path to SQLite DB file (e.g., ./pet_minder_api/pet_minder.db)")
    ap.add_argument("--email", required=True, help="User email to update")
    ap.add_argument("--password", help="New password. If omitted, you'll be prompted securely.")
    args = ap.parse_args()

    if not os.path.exists(args.db):
        print(f"[!] DB not found: {args.db}", file=sys.stderr)
        sys.exit(1)

    new_password = args.password or getpass.getpass("Enter NEW password: ")
    if not new_password:
        print("[!] Empty password is not allowed.", file=sys.stderr)
        sys.exit(1)

    conn = sqlite3.connect(args.db)
    try:
        cur = conn.cursor()
        cur.execute("SELECT id FROM users WHERE email = ?", (args.email,))
        if not cur.fetchone():
            print(f"[!] No user found with email: {args.email}", file=sys.stderr)
            sys.exit(2)

        cur.execute(
            "UPDATE users SET password = ?, updated_at = CURRENT_TIMESTAMP WHERE email = ?",
            (hash_password(new_password), args.email),
        )
        conn.commit()
        print(f"[+] Password updated for user: {args.email}")
    finally:
        conn.close()


if __name__ == "__main__":
    main()
