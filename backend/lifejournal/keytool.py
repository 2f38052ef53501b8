#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# Master key helper for the lifejournal backend.
# - generate: print a fresh 32-byte key as 64 hex characters.
# - check:    validate ENCRYPTION_MASTER_KEY (or --key) and run a seal/unseal self check.
#
# Exit codes:
#   0  - success
#   1  - key missing/invalid or self check failed
#
# Usage examples:
#   echo "ENCRYPTION_MASTER_KEY=$(lifejournal-keytool generate)" >> .env
#   ENCRYPTION_MASTER_KEY=... lifejournal-keytool check

import sys
import argparse
from typing import Optional

from lifejournal.crypto import self_check
from lifejournal.errors import ConfigurationError, EncryptionError
from lifejournal.keys import KeyProvider, MASTER_KEY_ENV, generate_master_key

def _check(key: Optional[str]) -> int:
    provider = KeyProvider(key) if key is not None else KeyProvider.from_env()
    try:
        master_key = provider.get_master_key()
    except ConfigurationError as e:
        print(f"INVALID: {e}", file=sys.stderr)
        return 1
    try:
        ok = self_check(master_key)
    except EncryptionError as e:
        print(f"FAILED: {type(e).__name__}", file=sys.stderr)
        return 1
    if not ok:
        print("FAILED: round trip mismatch", file=sys.stderr)
        return 1
    print("VALID: key accepted, encryption working")
    return 0

def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Generate or check the encryption master key.")
    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("generate", help="Print a new random 64-hex-character key")
    check = sub.add_parser("check", help=f"Validate ${MASTER_KEY_ENV} and run a seal/unseal self check")
    check.add_argument("--key", help=f"Key to check instead of ${MASTER_KEY_ENV}", default=None)
    args = parser.parse_args(argv)

    if args.command == "generate":
        print(generate_master_key())
        return 0
    return _check(args.key)

if __name__ == "__main__":
    sys.exit(main())
