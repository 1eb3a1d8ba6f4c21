"""
Key loading for client signers.

EVM keys come from a keystore file, a hex string, the PRIVATE_KEY
environment variable or stdin (in that order). Solana keypairs come from a
JSON byte-array file (solana-keygen format) or a base58 string.
"""

import getpass
import json
import logging
import os
import sys
from pathlib import Path
from typing import TextIO

import base58
from eth_account import Account
from solders.keypair import Keypair

from x402_multichain.exceptions import KeyLoadError
from x402_multichain.signers.client.evm_signer import EvmClientSigner
from x402_multichain.signers.client.solana_signer import SolanaClientSigner

logger = logging.getLogger(__name__)

PRIVATE_KEY_ENV = "PRIVATE_KEY"
SOLANA_KEYPAIR_LENGTH = 64


# ---------------------------------------------------------------------------
# EVM
# ---------------------------------------------------------------------------


def load_evm_private_key(
    keystore_path: str | Path | None = None,
    hex_key: str | None = None,
    from_stdin: bool = False,
    password: str | None = None,
    stdin: TextIO | None = None,
) -> EvmClientSigner:
    """Load an EVM signer from the first available source.

    Priority: keystore file, explicit hex key, PRIVATE_KEY env, stdin.

    Raises:
        KeyLoadError: no source given, or the chosen source is unusable
    """
    if keystore_path:
        logger.info(f"Loading EVM key from keystore {keystore_path}")
        return load_from_keystore(keystore_path, password)

    if hex_key:
        return load_from_hex(hex_key)

    env_key = os.getenv(PRIVATE_KEY_ENV)
    if env_key:
        logger.info(f"Loading EVM key from {PRIVATE_KEY_ENV} environment variable")
        return load_from_hex(env_key)

    if from_stdin:
        return load_from_stdin(stdin)

    raise KeyLoadError(
        "no private key source provided "
        f"(use a keystore, a hex key, {PRIVATE_KEY_ENV} env, or pipe to stdin)"
    )


def load_from_hex(hex_key: str) -> EvmClientSigner:
    """Load an EVM signer from a 32-byte hex key (0x prefix optional)"""
    key = hex_key.strip()
    if key.startswith("0x"):
        key = key[2:]
    try:
        key_bytes = bytes.fromhex(key)
    except ValueError as e:
        raise KeyLoadError(f"invalid hex private key: {e}") from e
    if len(key_bytes) != 32:
        raise KeyLoadError(f"invalid private key: expected 32 bytes, got {len(key_bytes)}")
    try:
        return EvmClientSigner(key)
    except Exception as e:
        raise KeyLoadError(f"invalid private key: {e}") from e


def load_from_keystore(path: str | Path, password: str | None = None) -> EvmClientSigner:
    """Decrypt a Web3 Secret Storage (keystore v3) file.

    Prompts for the password on the terminal when none is given.
    """
    try:
        keystore = json.loads(Path(path).read_text())
    except OSError as e:
        raise KeyLoadError(f"failed to read keystore file: {e}") from e
    except ValueError as e:
        raise KeyLoadError(f"keystore file is not valid JSON: {e}") from e

    if password is None:
        password = getpass.getpass("Enter keystore password: ")

    try:
        key_bytes = Account.decrypt(keystore, password)
    except Exception as e:
        raise KeyLoadError(f"failed to decrypt keystore (wrong password?): {e}") from e
    return EvmClientSigner(key_bytes.hex())


def load_from_stdin(stdin: TextIO | None = None) -> EvmClientSigner:
    """Read a hex key from the first line of piped stdin"""
    stream = stdin or sys.stdin
    if stream.isatty():
        raise KeyLoadError("no private key piped to stdin")
    line = stream.readline().strip()
    if not line:
        raise KeyLoadError("failed to read private key from stdin: empty input")
    return load_from_hex(line)


# ---------------------------------------------------------------------------
# Solana
# ---------------------------------------------------------------------------


def _keypair_from_bytes(key_bytes: bytes) -> SolanaClientSigner:
    if len(key_bytes) != SOLANA_KEYPAIR_LENGTH:
        raise KeyLoadError(
            f"invalid keypair length: expected {SOLANA_KEYPAIR_LENGTH} bytes, got {len(key_bytes)}"
        )
    try:
        return SolanaClientSigner(Keypair.from_bytes(key_bytes))
    except ValueError as e:
        raise KeyLoadError(f"invalid keypair: {e}") from e


def load_solana_keypair(path: str | Path) -> SolanaClientSigner:
    """Load a keypair file: a JSON array of 64 byte values, or base58 text"""
    try:
        data = Path(path).read_text()
    except OSError as e:
        raise KeyLoadError(f"failed to read keypair file: {e}") from e

    try:
        values = json.loads(data)
    except ValueError:
        values = None

    if isinstance(values, list):
        try:
            key_bytes = bytes(values)
        except (TypeError, ValueError) as e:
            raise KeyLoadError(f"invalid keypair byte array: {e}") from e
        return _keypair_from_bytes(key_bytes)

    try:
        decoded = base58.b58decode(data.strip())
    except ValueError as e:
        raise KeyLoadError("invalid keypair format: not JSON array or base58 encoded") from e
    return _keypair_from_bytes(decoded)


def load_solana_keypair_from_base58(base58_key: str) -> SolanaClientSigner:
    try:
        decoded = base58.b58decode(base58_key.strip())
    except ValueError as e:
        raise KeyLoadError(f"invalid base58 private key: {e}") from e
    return _keypair_from_bytes(decoded)
