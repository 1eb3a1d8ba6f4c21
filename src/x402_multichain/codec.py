"""
x402 wire codec: parse 402 responses, build payment headers, read settlements.

The protocol version is decided by transport, never guessed from content:
v2 servers put the requirements in the PAYMENT-REQUIRED header, v1 servers
put them in the response body.
"""

import binascii
import json
import logging
from dataclasses import dataclass
from typing import Any

import httpx
from pydantic import ValidationError

from x402_multichain.encoding import decode_base64_bytes, encode_payment_payload
from x402_multichain.exceptions import ProtocolError
from x402_multichain.types import (
    AcceptedOption,
    Authorization,
    ChainKind,
    ExactPayloadData,
    PaymentPayloadV1,
    PaymentPayloadV2,
    PaymentRequired,
    PaymentRequirements,
    ResourceInfo,
    SettleResponse,
    SignResult,
)

logger = logging.getLogger(__name__)

PROTOCOL_V1 = 1
PROTOCOL_V2 = 2

# v2 headers
PAYMENT_REQUIRED_HEADER = "PAYMENT-REQUIRED"
PAYMENT_SIGNATURE_HEADER = "PAYMENT-SIGNATURE"
PAYMENT_RESPONSE_HEADER = "PAYMENT-RESPONSE"

# v1 headers
X_PAYMENT_HEADER = "X-PAYMENT"
X_PAYMENT_RESPONSE_HEADER = "X-PAYMENT-RESPONSE"


@dataclass
class ParseResult:
    """Parsed payment requirements plus the raw material they came from"""

    payment_required: PaymentRequired
    protocol_version: int
    raw_header: str = ""
    raw_body: bytes = b""


def _load_json(data: bytes, source: str) -> Any:
    try:
        return json.loads(data)
    except ValueError as e:
        raise ProtocolError(f"invalid JSON in {source}: {e}") from e


def _decode_header(value: str, header_name: str) -> Any:
    try:
        decoded = decode_base64_bytes(value)
    except (binascii.Error, ValueError) as e:
        raise ProtocolError(f"invalid base64 in {header_name} header: {e}") from e
    return _load_json(decoded, f"{header_name} header")


def parse_payment_required(response: httpx.Response) -> ParseResult:
    """Extract payment requirements from a 402 response.

    Reads the body exactly once; the bytes are kept on the result so callers
    never need to touch the response body again.

    Raises:
        ProtocolError: bad base64, bad JSON, empty v1 body, wrong shape,
            or an empty ``accepts`` list
    """
    body = response.content
    header_value = response.headers.get(PAYMENT_REQUIRED_HEADER)

    if header_value:
        logger.debug(f"Found {PAYMENT_REQUIRED_HEADER} header, decoding as v2")
        version = PROTOCOL_V2
        data = _decode_header(header_value, PAYMENT_REQUIRED_HEADER)
    else:
        logger.debug("No %s header, decoding response body as v1", PAYMENT_REQUIRED_HEADER)
        version = PROTOCOL_V1
        if not body:
            raise ProtocolError("empty response body (expected JSON payment requirements)")
        data = _load_json(body, "response body")

    try:
        payment_required = PaymentRequired.model_validate(data)
    except ValidationError as e:
        raise ProtocolError(f"invalid payment requirements: {e}") from e

    if not payment_required.accepts:
        raise ProtocolError("no payment options in accepts[] array")

    logger.info(
        "Parsed PaymentRequired: version=%d, options=%d",
        version,
        len(payment_required.accepts),
    )
    return ParseResult(
        payment_required=payment_required,
        protocol_version=version,
        raw_header=header_value or "",
        raw_body=body,
    )


def payment_response_header(version: int) -> str:
    return PAYMENT_RESPONSE_HEADER if version == PROTOCOL_V2 else X_PAYMENT_RESPONSE_HEADER


def payment_signature_header(version: int) -> str:
    return PAYMENT_SIGNATURE_HEADER if version == PROTOCOL_V2 else X_PAYMENT_HEADER


def parse_payment_response(response: httpx.Response, version: int) -> SettleResponse | None:
    """Read the settlement record from a paid response.

    A missing header is not an error: some servers omit it on success.
    """
    header_name = payment_response_header(version)
    header_value = response.headers.get(header_name)
    if not header_value:
        logger.debug("No %s header on response", header_name)
        return None

    data = _decode_header(header_value, header_name)
    try:
        return SettleResponse.model_validate(data)
    except ValidationError as e:
        raise ProtocolError(f"invalid settlement in {header_name} header: {e}") from e


def build_payload(
    version: int,
    resource: ResourceInfo | None,
    requirements: PaymentRequirements,
    signature: str,
    authorization: Authorization,
    transaction: str | None = None,
) -> PaymentPayloadV1 | PaymentPayloadV2:
    """Build the version-specific payment payload model"""
    data = ExactPayloadData(
        signature=signature,
        authorization=authorization.to_wire(),
        transaction=transaction,
    )
    if version == PROTOCOL_V2:
        return PaymentPayloadV2(
            x402Version=PROTOCOL_V2,
            resource=resource or ResourceInfo(),
            accepted=AcceptedOption.from_requirements(requirements),
            payload=data,
        )
    if version == PROTOCOL_V1:
        return PaymentPayloadV1(
            x402Version=PROTOCOL_V1,
            scheme=requirements.scheme,
            network=requirements.network,
            payload=data,
        )
    raise ProtocolError(f"unsupported x402 version: {version}")


def build_and_encode_payload(
    version: int,
    resource: ResourceInfo | None,
    requirements: PaymentRequirements,
    signature: str,
    authorization: Authorization,
    transaction: str | None = None,
) -> tuple[str, str]:
    """Build, JSON-encode and base64-encode a payment payload.

    Returns:
        (header_name, header_value)
    """
    payload = build_payload(version, resource, requirements, signature, authorization, transaction)
    header_name = payment_signature_header(version)
    header_value = encode_payment_payload(payload)
    logger.debug(f"Encoded {header_name} payload length: {len(header_value)} chars")
    return header_name, header_value


def encode_sign_result(
    version: int,
    resource: ResourceInfo | None,
    requirements: PaymentRequirements,
    sign_result: SignResult,
) -> tuple[str, str]:
    """Encode a signer's output; Solana transactions are mirrored under ``transaction``"""
    transaction = sign_result.signature if sign_result.chain == ChainKind.SOLANA else None
    return build_and_encode_payload(
        version,
        resource,
        requirements,
        sign_result.signature,
        sign_result.authorization,
        transaction,
    )
