#!/usr/bin/env python3
"""
build_bank.py - Encrypt plaintext JSON question banks.

Usage with key file:
    python tools/build_bank.py --in contest.json --out banks/contest.enc --key-file CONTEST.key

Usage with password:
    python tools/build_bank.py --in contest.json --out banks/contest.enc --password
"""

import argparse
import getpass
import hashlib
import json
import os
import sys
from pathlib import Path

from utils import encrypt_bank
from judge.bank import validate_bank


def build_bank(in_file: str, out_file: str, key_file: str = None, use_password: bool = False) -> None:
    """Encrypt a plaintext JSON question bank."""
    try:
        with open(in_file, 'rb') as f:
            plaintext = f.read()

        # Verify JSON and bank structure before encrypting
        try:
            bank_data = json.loads(plaintext)
        except json.JSONDecodeError as e:
            print(f"[ERROR] Invalid JSON in input file: {e}", file=sys.stderr)
            sys.exit(1)

        errors = validate_bank(bank_data)
        if errors:
            for err in errors:
                print(f"[ERROR] {err}", file=sys.stderr)
            sys.exit(1)

        events = bank_data['events']
        question_count = sum(len(e.get('questions', [])) for e in events)
        print(f"[OK] Input bank validated")
        print(f"  Version: {bank_data.get('version', 'unknown')}")
        print(f"  Users: {len(bank_data['users'])}, Events: {len(events)}, Questions: {question_count}")

        if use_password:
            password = getpass.getpass("Enter encryption password: ")
            password_confirm = getpass.getpass("Confirm password: ")

            if password != password_confirm:
                print("[ERROR] Passwords do not match", file=sys.stderr)
                sys.exit(1)

            if len(password) < 8:
                print("[ERROR] Password must be at least 8 characters", file=sys.stderr)
                sys.exit(1)

            final_data = encrypt_bank(plaintext, password=password, salt=os.urandom(16))
            print("[OK] Using password-based encryption")
        else:
            with open(key_file, 'rb') as f:
                key = f.read().strip()
            final_data = encrypt_bank(plaintext, key=key)
            print("[OK] Using key file encryption")

        sha256_hash = hashlib.sha256(final_data).hexdigest()

        Path(out_file).parent.mkdir(parents=True, exist_ok=True)
        with open(out_file, 'wb') as f:
            f.write(final_data)

        print(f"\n[OK] Success: Bank encrypted")
        print(f"  Input: {in_file} ({len(plaintext)} bytes)")
        print(f"  Output: {out_file} ({len(final_data)} bytes)")
        print(f"  Method: {'Password-based' if use_password else 'Key file'}")
        print(f"  SHA256: {sha256_hash}")

    except FileNotFoundError as e:
        print(f"[ERROR] File not found: {e}", file=sys.stderr)
        sys.exit(1)
    except ValueError as e:
        print(f"[ERROR] Error encrypting bank: {e}", file=sys.stderr)
        sys.exit(1)


def main():
    parser = argparse.ArgumentParser(
        description="Encrypt a plaintext JSON question bank.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python tools/build_bank.py --in contest.json --out banks/contest.enc --key-file CONTEST.key
  python tools/build_bank.py --in contest.json --out banks/contest.enc --password

Notes:
  - Input file must be a valid bank (users, events, questions with test cases)
  - Output directory will be created if it doesn't exist
  - Produces SHA256 checksum for verification
        """
    )
    parser.add_argument("--in", dest="in_file", required=True, help="Input plaintext JSON file")
    parser.add_argument("--out", required=True, help="Output encrypted bank file (.enc)")
    parser.add_argument("--key-file", help="File containing the encryption key (mutually exclusive with --password)")
    parser.add_argument("--password", action="store_true", help="Use password-based encryption instead of key file")

    args = parser.parse_args()

    if args.password and args.key_file:
        print("[ERROR] Cannot use both --password and --key-file", file=sys.stderr)
        sys.exit(1)

    if not args.password and not args.key_file:
        print("[ERROR] Must specify either --password or --key-file", file=sys.stderr)
        sys.exit(1)

    build_bank(args.in_file, args.out, args.key_file, args.password)


if __name__ == "__main__":
    main()
