"""
Encoding utilities for x402 protocol
"""

import base64
import json
from typing import Any


def encode_base64(data: str | bytes) -> str:
    """Encode data to base64"""
    if isinstance(data, str):
        data = data.encode("utf-8")
    return base64.b64encode(data).decode("utf-8")


def decode_base64_bytes(data: str) -> bytes:
    """Decode base64 to bytes, rejecting characters outside the alphabet"""
    return base64.b64decode(data, validate=True)


def encode_payment_payload(payload: Any) -> str:
    """Encode payment payload to base64 for HTTP header"""
    if hasattr(payload, "model_dump"):
        json_str = json.dumps(payload.model_dump(by_alias=True, exclude_none=True))
    else:
        json_str = json.dumps(payload)
    return encode_base64(json_str)


def hex_to_bytes(hex_str: str) -> bytes:
    """Convert hex string to bytes"""
    if hex_str.startswith("0x"):
        hex_str = hex_str[2:]
    return bytes.fromhex(hex_str)
