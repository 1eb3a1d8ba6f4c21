"""
Type definitions for x402 protocol
"""

from enum import Enum
from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, Field, field_validator, model_validator

from x402_multichain.exceptions import InvalidAmount


class ChainKind(str, Enum):
    """Which signing flow a payment option needs"""

    EVM = "evm"
    SOLANA = "solana"


class ResourceInfo(BaseModel):
    """Resource information"""

    url: Optional[str] = None
    description: Optional[str] = None
    mime_type: Optional[str] = Field(None, alias="mimeType")

    class Config:
        populate_by_name = True


class PaymentRequirementsExtra(BaseModel):
    """Chain-specific metadata attached to a payment option.

    ``name``/``version`` feed the EVM EIP-712 domain, ``fee_payer`` is the
    Solana account that will pay network fees. Any other key is kept as-is
    and is available through ``raw``.
    """

    name: Optional[str] = None
    version: Optional[str] = None
    fee_payer: Optional[str] = Field(None, alias="feePayer")

    class Config:
        populate_by_name = True
        extra = "allow"

    @field_validator("name", "version", "fee_payer", mode="before")
    @classmethod
    def _only_strings(cls, value: Any) -> Any:
        return value if isinstance(value, str) else None

    @property
    def raw(self) -> dict[str, Any]:
        """All keys, known and unknown, under their wire names"""
        return self.model_dump(by_alias=True, exclude_none=True)

    def get_string(self, key: str) -> str:
        value = self.raw.get(key)
        return value if isinstance(value, str) else ""


class PaymentRequirements(BaseModel):
    """One acceptable payment option from the server.

    v1 servers send ``maxAmountRequired`` and v2 servers send ``amount``;
    both are folded into ``amount`` at parse time.
    """

    scheme: str
    network: str
    amount: str = ""
    asset: str = ""
    pay_to: str = Field("", alias="payTo")
    max_timeout_seconds: Optional[int] = Field(None, alias="maxTimeoutSeconds")
    extra: Optional[PaymentRequirementsExtra] = None

    # v1 carries the resource descriptor on each option
    resource: Optional[str] = None
    description: Optional[str] = None
    mime_type: Optional[str] = Field(None, alias="mimeType")

    class Config:
        populate_by_name = True

    @model_validator(mode="before")
    @classmethod
    def _fold_amount(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        legacy = data.pop("maxAmountRequired", None)
        if not data.get("amount"):
            data["amount"] = legacy or ""
        if isinstance(data["amount"], int):
            data["amount"] = str(data["amount"])
        return data

    def get_amount(self) -> str:
        """Payment amount in atomic units, or "" if the server sent none"""
        return self.amount or ""

    def amount_int(self) -> int:
        """Parse the amount as an arbitrary-precision integer"""
        value = self.get_amount()
        if not value or not (value.isascii() and value.isdigit()):
            raise InvalidAmount(f"invalid payment value: {value!r}")
        return int(value)

    def get_extra_string(self, key: str) -> str:
        if self.extra is None:
            return ""
        return self.extra.get_string(key)


class PaymentRequired(BaseModel):
    """Payment required response (402)"""

    x402_version: int = Field(1, alias="x402Version")
    error: Optional[str] = None
    resource: Optional[ResourceInfo] = None
    accepts: list[PaymentRequirements] = Field(default_factory=list)

    class Config:
        populate_by_name = True


class Authorization(BaseModel):
    """Signed transfer intent embedded in the payment header.

    EVM authorizations carry a random ``nonce``; Solana authorizations carry
    the recent blockhash in ``reference_block``. On the wire both travel
    under the ``nonce`` key.
    """

    from_address: str = Field(alias="from")
    to: str
    value: str
    valid_after: str = Field("0", alias="validAfter")
    valid_before: str = Field(alias="validBefore")
    nonce: Optional[str] = None
    reference_block: Optional[str] = None

    class Config:
        populate_by_name = True

    def to_wire(self) -> dict[str, str]:
        nonce = self.nonce if self.nonce is not None else self.reference_block
        return {
            "from": self.from_address,
            "to": self.to,
            "value": self.value,
            "validAfter": self.valid_after,
            "validBefore": self.valid_before,
            "nonce": nonce or "",
        }


class SignResult(BaseModel):
    """Signer output"""

    signature: str
    authorization: Authorization
    display_nonce: str
    chain: ChainKind


class SettleResponse(BaseModel):
    """Settlement record returned in the payment response header"""

    success: bool = False
    transaction: Optional[str] = None
    network: Optional[str] = None
    error: Optional[str] = Field(None, validation_alias=AliasChoices("error", "errorReason"))

    class Config:
        populate_by_name = True


# ---------------------------------------------------------------------------
# Outgoing payload shapes
# ---------------------------------------------------------------------------


class AcceptedOption(BaseModel):
    """Mirror of the chosen requirement inside a v2 payment payload"""

    scheme: str
    network: str
    amount: str
    asset: str
    pay_to: str = Field(alias="payTo")
    max_timeout_seconds: Optional[int] = Field(None, alias="maxTimeoutSeconds")
    extra: Optional[dict[str, Any]] = None

    class Config:
        populate_by_name = True

    @classmethod
    def from_requirements(cls, requirements: PaymentRequirements) -> "AcceptedOption":
        return cls(
            scheme=requirements.scheme,
            network=requirements.network,
            amount=requirements.get_amount(),
            asset=requirements.asset,
            payTo=requirements.pay_to,
            maxTimeoutSeconds=requirements.max_timeout_seconds or None,
            extra=requirements.extra.raw if requirements.extra else None,
        )


class ExactPayloadData(BaseModel):
    """Signature, authorization and (Solana only) the serialized transaction"""

    signature: str
    authorization: dict[str, str]
    transaction: Optional[str] = None


class PaymentPayloadV2(BaseModel):
    """v2 payload sent in the PAYMENT-SIGNATURE header"""

    x402_version: int = Field(2, alias="x402Version")
    resource: ResourceInfo
    accepted: AcceptedOption
    payload: ExactPayloadData

    class Config:
        populate_by_name = True


class PaymentPayloadV1(BaseModel):
    """v1 payload sent in the X-PAYMENT header"""

    x402_version: int = Field(1, alias="x402Version")
    scheme: str
    network: str
    payload: ExactPayloadData

    class Config:
        populate_by_name = True
