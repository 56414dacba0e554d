"""
feistelcipher command line.

Usage:
  feistelcipher genkey PASSWORD KEYFILE [--kdf md5|argon2id] [--salt HEX]
  feistelcipher encrypt INPUT KEYFILE OUTPUT
  feistelcipher decrypt INPUT KEYFILE OUTPUT

Global options:
  --log-level LEVEL  Logging level (default: $FEISTELCIPHER_LOG_LEVEL or WARNING)
"""

import argparse
import logging
import os
from typing import List, Optional

from .des import DES
from .kdf_km import derive_key, generate_salt, genkey, read_key_file, write_key_file

logger = logging.getLogger(__name__)

LOG_LEVEL_ENV = 'FEISTELCIPHER_LOG_LEVEL'
DEFAULT_LOG_LEVEL = 'WARNING'


def _build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog='feistelcipher',
        description='DES file encryption in CBC mode',
    )
    ap.add_argument('--log-level', default=os.environ.get(LOG_LEVEL_ENV, DEFAULT_LOG_LEVEL),
                    choices=('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'), type=str.upper,
                    help=f"Logging level (default: ${LOG_LEVEL_ENV} or {DEFAULT_LOG_LEVEL})")

    sub = ap.add_subparsers(dest='cmd', required=True)

    p_key = sub.add_parser('genkey', help='Derive a key file from a password')
    p_key.add_argument('password')
    p_key.add_argument('keyfile')
    p_key.add_argument('--kdf', choices=('md5', 'argon2id'), default='md5',
                       help='Key derivation (default: md5)')
    p_key.add_argument('--salt', default=None, help='Argon2id salt as hex (default: random)')

    p_enc = sub.add_parser('encrypt', help='Encrypt a file')
    p_enc.add_argument('input')
    p_enc.add_argument('keyfile')
    p_enc.add_argument('output')

    p_dec = sub.add_parser('decrypt', help='Decrypt a file')
    p_dec.add_argument('input')
    p_dec.add_argument('keyfile')
    p_dec.add_argument('output')

    return ap


def _genkey(args: argparse.Namespace) -> None:
    if args.kdf == 'argon2id':
        salt = bytes.fromhex(args.salt) if args.salt else generate_salt()
        key = derive_key(args.password, salt, hash_len=DES.KEY_WIDTH // 8)
        print(f"Salt: {salt.hex()}")
    else:
        key = genkey(args.password)

    try:
        write_key_file(args.keyfile, key)
    finally:
        key[:] = bytes(len(key))


def _run_cipher(args: argparse.Namespace) -> None:
    cipher = DES()
    key = read_key_file(args.keyfile, cipher.key_bytes)
    try:
        with open(args.input, 'rb') as source, open(args.output, 'wb') as dest:
            if args.cmd == 'encrypt':
                cipher.encrypt(source, key, dest)
            else:
                cipher.decrypt(source, key, dest)
    finally:
        key[:] = bytes(len(key))

    logger.info(f"{args.cmd.capitalize()}ed {args.input} into {args.output}")


def main(argv: Optional[List[str]] = None) -> int:
    """
    Run the command line.

    Args:
        argv: Arguments (default: sys.argv[1:])

    Returns:
        Exit status, 0 on success
    """
    args = _build_parser().parse_args(argv)
    logging.basicConfig(level=args.log_level,
                        format='%(asctime)s %(levelname)s %(name)s: %(message)s')

    if args.cmd == 'genkey':
        _genkey(args)
    else:
        _run_cipher(args)
    return 0


if __name__ == '__main__':
    raise SystemExit(main())
