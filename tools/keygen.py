#!/usr/bin/env python3
"""
keygen.py - Generate Fernet encryption keys for question banks.

Usage:
    python tools/keygen.py --out CONTEST.key

Note: You can also use passwords directly with build_bank.py --password
      instead of generating key files.
"""

import argparse
import sys
from cryptography.fernet import Fernet


def generate_key(output_file: str) -> None:
    """Generate a new Fernet key and save it to file."""
    try:
        key = Fernet.generate_key()

        with open(output_file, 'wb') as f:
            f.write(key)

        print(f"[OK] Success: Encryption key generated")
        print(f"  Output: {output_file}")
        print(f"\n[!] SECURITY: Banks hold hidden test cases. Never commit this key to version control.")
        print(f"\n[i] Pass it to the judge with --key-file {output_file}")

    except OSError as e:
        print(f"[ERROR] Error generating key: {e}", file=sys.stderr)
        sys.exit(1)


def main():
    parser = argparse.ArgumentParser(
        description="Generate a new Fernet encryption key for question banks.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python tools/keygen.py --out CONTEST.key

Security Notes:
  - Store keys in a secure password manager
  - Never distribute keys with encrypted banks
        """
    )
    parser.add_argument(
        "--out",
        required=True,
        help="Output file path for the key (e.g., CONTEST.key)"
    )

    args = parser.parse_args()
    generate_key(args.out)


if __name__ == "__main__":
    main()
