"""Domain models - immutable dataclasses representing credit card facilities"""

import asyncio
import re
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Mapping, Optional, Tuple


class CardRole(str, Enum):
    """Role of an issued card within a facility"""

    PRIMARY = "Primary"
    ADDITIONAL = "Additional"


class AmountType(str, Enum):
    """BIAN amount type classification"""

    PRINCIPAL = "Principal"
    ACTUAL = "Actual"
    ESTIMATED = "Estimated"
    MAXIMUM = "Maximum"
    DEFAULT = "Default"
    REPLACEMENT = "Replacement"
    INCREMENTAL = "Incremental"
    DECREMENTAL = "Decremental"
    RESERVED = "Reserved"
    AVAILABLE = "Available"
    USED = "Used"
    DUE_PAYABLE = "DuePayable"
    MINIMUM = "Minimum"
    OPEN = "Open"
    UNKNOWN = "Unknown"
    FIXED = "Fixed"


# Plain decimal literal: no whitespace, exponent, underscores or special values
_DECIMAL_PATTERN = re.compile(r"-?[0-9]+(?:\.(?P<fraction>[0-9]+))?")
_DIGITS_PATTERN = re.compile(r"[0-9]+")


@dataclass(frozen=True)
class Amount:
    """Monetary value with explicit decimal placement, all parts string-encoded"""

    value: Optional[str] = None
    currency_code: Optional[str] = None
    decimal_point_position: Optional[str] = None
    amount_type: Optional[AmountType] = None

    def __post_init__(self) -> None:
        if self.value is None or self.decimal_point_position is None:
            return

        match = _DECIMAL_PATTERN.fullmatch(self.value)
        if match is None or _DIGITS_PATTERN.fullmatch(self.decimal_point_position) is None:
            raise ValueError(f"Malformed amount {self.value!r}/{self.decimal_point_position!r}")

        expected = int(self.decimal_point_position)
        fractional_digits = len(match.group("fraction") or "")
        if fractional_digits != expected:
            raise ValueError(
                f"Amount {self.value!r} has {fractional_digits} fractional digits, "
                f"decimal point position is {expected}"
            )

    @classmethod
    def from_decimal(cls, value: Decimal, currency_code: str, amount_type: AmountType, places: int = 2) -> "Amount":
        """Build an amount quantized to a fixed number of fractional digits"""
        quantized = value.quantize(Decimal(1).scaleb(-places))
        return cls(
            value=f"{quantized:f}",
            currency_code=currency_code,
            decimal_point_position=str(places),
            amount_type=amount_type,
        )


@dataclass(frozen=True)
class CardNetwork:
    network_id: Optional[str] = None
    network_name: Optional[str] = None


@dataclass(frozen=True)
class IssuedDevice:
    """Physical or virtual card; the identifier is always masked"""

    device_id: Optional[str] = None
    masked_identifier: Optional[str] = None
    network: Optional[CardNetwork] = None
    role: Optional[CardRole] = None


@dataclass(frozen=True)
class StatementSchedule:
    schedule_type: Optional[str] = None


@dataclass(frozen=True)
class ProductAgreement:
    card_amount: Optional[Amount] = None


@dataclass(frozen=True)
class InteractionSession:
    session_id: Optional[str] = None


@dataclass(frozen=True)
class CreditCardFacility:
    """One customer-held card product and its current billing state"""

    issued_device: Optional[IssuedDevice] = None
    statement_schedule: Optional[StatementSchedule] = None
    billing_amount: Optional[Amount] = None  # amount currently used/owed
    billing_minimum_payment: Optional[Amount] = None
    payment_due_date: Optional[str] = None  # YYYY-MM-DD
    product_agreement: Optional[ProductAgreement] = None
    interaction_session: Optional[InteractionSession] = None


FacilityCollection = Tuple[CreditCardFacility, ...]


@dataclass(frozen=True)
class ErrorBody:
    """Uniform failure body returned to callers"""

    code: str
    category: str  # "Validation" | "Processing"
    message: str
    details: Tuple[str, ...] = ()

    def to_dict(self) -> dict:
        return {
            "code": self.code,
            "category": self.category,
            "message": self.message,
            "details": list(self.details),
        }


@dataclass(frozen=True)
class RequestContext:
    """
    Per-request state threaded through every pipeline stage.

    headers is expected to be a case-insensitive mapping (Starlette Headers);
    cancelled is set when the caller goes away so in-flight upstream work can abort.
    """

    headers: Mapping[str, str]
    request_id: str = "unknown"
    cancelled: asyncio.Event = field(default_factory=asyncio.Event)

    def header(self, name: str) -> Optional[str]:
        return self.headers.get(name)

    @property
    def correlation_id(self) -> Optional[str]:
        return self.header("x-correlation-id")

    @property
    def channel_id(self) -> Optional[str]:
        return self.header("x-channel-id")
