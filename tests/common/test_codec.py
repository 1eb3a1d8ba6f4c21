"""
Wire codec tests: 402 parsing, payload building, settlement parsing
"""

import base64
import json

import httpx
import pytest

from x402_multichain.codec import (
    PAYMENT_REQUIRED_HEADER,
    PAYMENT_RESPONSE_HEADER,
    PAYMENT_SIGNATURE_HEADER,
    PROTOCOL_V1,
    PROTOCOL_V2,
    X_PAYMENT_HEADER,
    X_PAYMENT_RESPONSE_HEADER,
    build_and_encode_payload,
    build_payload,
    encode_sign_result,
    parse_payment_required,
    parse_payment_response,
)
from x402_multichain.exceptions import ProtocolError
from x402_multichain.types import (
    Authorization,
    ChainKind,
    PaymentRequirements,
    ResourceInfo,
    SignResult,
)


def _b64json(data) -> str:
    return base64.b64encode(json.dumps(data).encode()).decode()


def _decode_header(value: str) -> dict:
    return json.loads(base64.b64decode(value))


@pytest.fixture
def authorization():
    return Authorization(
        **{
            "from": "0xpayer",
            "to": "0xdef",
            "value": "1000",
            "validAfter": "0",
            "validBefore": "1700000300",
            "nonce": "0x" + "11" * 32,
        }
    )


class TestParsePaymentRequired:
    def test_v2_header(self):
        header = _b64json(
            {
                "x402Version": 2,
                "accepts": [
                    {
                        "scheme": "exact",
                        "network": "eip155:84532",
                        "amount": "1000",
                        "asset": "0xabc",
                        "payTo": "0xdef",
                    }
                ],
            }
        )
        response = httpx.Response(402, headers={PAYMENT_REQUIRED_HEADER: header})

        result = parse_payment_required(response)

        assert result.protocol_version == PROTOCOL_V2
        assert len(result.payment_required.accepts) == 1
        assert result.payment_required.accepts[0].get_amount() == "1000"
        assert result.raw_header == header

    def test_v2_header_wins_over_body(self):
        header = _b64json(
            {"x402Version": 2, "accepts": [{"scheme": "exact", "network": "base", "amount": "1"}]}
        )
        response = httpx.Response(
            402, headers={PAYMENT_REQUIRED_HEADER: header}, content=b"not json at all"
        )
        result = parse_payment_required(response)
        assert result.protocol_version == PROTOCOL_V2
        assert result.raw_body == b"not json at all"

    def test_v1_body(self):
        body = {
            "x402Version": 1,
            "error": "X-PAYMENT header is required",
            "accepts": [
                {
                    "scheme": "exact",
                    "network": "base-sepolia",
                    "maxAmountRequired": "10000",
                    "resource": "https://api.example.com/data",
                    "description": "premium data",
                    "mimeType": "application/json",
                    "payTo": "0xdef",
                    "maxTimeoutSeconds": 60,
                    "asset": "0xabc",
                    "extra": {"name": "USDC", "version": "2"},
                }
            ],
        }
        response = httpx.Response(402, json=body)

        result = parse_payment_required(response)

        assert result.protocol_version == PROTOCOL_V1
        req = result.payment_required.accepts[0]
        assert req.get_amount() == "10000"
        assert req.resource == "https://api.example.com/data"
        assert result.payment_required.error == "X-PAYMENT header is required"

    def test_invalid_base64(self):
        response = httpx.Response(402, headers={PAYMENT_REQUIRED_HEADER: "!!!not-base64!!!"})
        with pytest.raises(ProtocolError, match="invalid base64"):
            parse_payment_required(response)

    def test_invalid_json_in_header(self):
        header = base64.b64encode(b"{not json").decode()
        response = httpx.Response(402, headers={PAYMENT_REQUIRED_HEADER: header})
        with pytest.raises(ProtocolError, match="invalid JSON"):
            parse_payment_required(response)

    def test_invalid_json_in_body(self):
        response = httpx.Response(402, content=b"<html>pay me</html>")
        with pytest.raises(ProtocolError, match="invalid JSON"):
            parse_payment_required(response)

    def test_empty_v1_body(self):
        response = httpx.Response(402)
        with pytest.raises(ProtocolError, match="empty response body"):
            parse_payment_required(response)

    def test_empty_accepts(self):
        response = httpx.Response(402, json={"x402Version": 1, "accepts": []})
        with pytest.raises(ProtocolError, match="no payment options"):
            parse_payment_required(response)

    def test_wrong_shape(self):
        response = httpx.Response(402, json={"accepts": "nope"})
        with pytest.raises(ProtocolError, match="invalid payment requirements"):
            parse_payment_required(response)


class TestParsePaymentResponse:
    def test_missing_header_is_not_error(self):
        assert parse_payment_response(httpx.Response(200), PROTOCOL_V2) is None

    def test_v2_header(self):
        header = _b64json({"success": True, "transaction": "0xtx", "network": "eip155:8453"})
        response = httpx.Response(200, headers={PAYMENT_RESPONSE_HEADER: header})
        settle = parse_payment_response(response, PROTOCOL_V2)
        assert settle.success is True
        assert settle.transaction == "0xtx"

    def test_header_selected_by_version(self):
        header = _b64json({"success": True, "transaction": "0xtx"})
        response = httpx.Response(200, headers={X_PAYMENT_RESPONSE_HEADER: header})
        assert parse_payment_response(response, PROTOCOL_V2) is None
        assert parse_payment_response(response, PROTOCOL_V1).transaction == "0xtx"

    def test_malformed_header(self):
        response = httpx.Response(200, headers={PAYMENT_RESPONSE_HEADER: "%%%"})
        with pytest.raises(ProtocolError, match="invalid base64"):
            parse_payment_response(response, PROTOCOL_V2)


class TestBuildPayload:
    def test_v2_shape(self, authorization):
        req = PaymentRequirements(
            scheme="exact",
            network="eip155:84532",
            amount="1000",
            asset="0xabc",
            payTo="0xdef",
            maxTimeoutSeconds=60,
            extra={"name": "USDC", "version": "2"},
        )
        resource = ResourceInfo(url="https://api.example.com/data", mimeType="application/json")

        header_name, value = build_and_encode_payload(
            PROTOCOL_V2, resource, req, "0xsig", authorization
        )

        assert header_name == PAYMENT_SIGNATURE_HEADER
        decoded = _decode_header(value)
        assert decoded["x402Version"] == 2
        assert decoded["resource"] == {
            "url": "https://api.example.com/data",
            "mimeType": "application/json",
        }
        assert decoded["accepted"]["payTo"] == "0xdef"
        assert decoded["accepted"]["amount"] == "1000"
        assert decoded["payload"]["signature"] == "0xsig"
        assert decoded["payload"]["authorization"] == authorization.to_wire()
        assert "transaction" not in decoded["payload"]

    def test_v1_shape(self, authorization):
        req = PaymentRequirements.model_validate(
            {"scheme": "exact", "network": "base", "maxAmountRequired": "1000", "payTo": "0xdef"}
        )

        header_name, value = build_and_encode_payload(
            PROTOCOL_V1, ResourceInfo(url="https://x"), req, "0xsig", authorization
        )

        assert header_name == X_PAYMENT_HEADER
        decoded = _decode_header(value)
        assert decoded == {
            "x402Version": 1,
            "scheme": "exact",
            "network": "base",
            "payload": {"signature": "0xsig", "authorization": authorization.to_wire()},
        }

    def test_unsupported_version(self, authorization):
        req = PaymentRequirements(scheme="exact", network="base", amount="1")
        with pytest.raises(ProtocolError, match="unsupported x402 version"):
            build_payload(3, None, req, "0xsig", authorization)

    def test_round_trip_preserves_requirement(self, authorization):
        served = {
            "x402Version": 2,
            "resource": {"url": "https://api.example.com/r"},
            "accepts": [
                {
                    "scheme": "exact",
                    "network": "eip155:8453",
                    "amount": "250000",
                    "asset": "0x833589fcd6edb6e08f4c7c32d4f71b54bda02913",
                    "payTo": "0x209693bc6afc0c5328ba36faf03c514ef312287c",
                }
            ],
        }
        parsed = parse_payment_required(
            httpx.Response(402, headers={PAYMENT_REQUIRED_HEADER: _b64json(served)})
        )
        req = parsed.payment_required.accepts[0]

        _, value = build_and_encode_payload(
            parsed.protocol_version, parsed.payment_required.resource, req, "0xsig", authorization
        )
        accepted = _decode_header(value)["accepted"]
        for key in ("scheme", "network", "amount", "asset", "payTo"):
            assert accepted[key] == served["accepts"][0][key]

    def test_solana_sign_result_mirrors_transaction(self):
        req = PaymentRequirements(
            scheme="exact", network="solana-devnet", amount="1", asset="Mint", payTo="Payee"
        )
        result = SignResult(
            signature="dHgtYnl0ZXM=",
            authorization=Authorization(
                **{"from": "Owner", "to": "Payee", "value": "1", "validBefore": "123"},
                reference_block="aGFzaA==",
            ),
            display_nonce="Hash111",
            chain=ChainKind.SOLANA,
        )

        _, value = encode_sign_result(PROTOCOL_V2, ResourceInfo(url="https://x"), req, result)

        payload = _decode_header(value)["payload"]
        assert payload["transaction"] == "dHgtYnl0ZXM="
        assert payload["signature"] == "dHgtYnl0ZXM="
        assert payload["authorization"]["nonce"] == "aGFzaA=="
