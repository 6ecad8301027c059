"""In-memory, read-only substitute for the legacy proxy"""

from decimal import Decimal
from types import MappingProxyType
from typing import Mapping, Optional

from bian_facade.domain.exceptions import CustomerNotFoundError
from bian_facade.domain.models import (
    Amount,
    AmountType,
    CardNetwork,
    CardRole,
    CreditCardFacility,
    FacilityCollection,
    InteractionSession,
    IssuedDevice,
    ProductAgreement,
    StatementSchedule,
)


class FallbackStore:
    """
    Case-insensitive lookup from customer id to a canned facility collection.

    The store is built once by the composition root and shared by all requests.
    Collections are tuples of frozen records, so handing them out needs no copy.
    """

    def __init__(self, entries: Mapping[str, FacilityCollection]):
        self._entries = MappingProxyType(
            {customer_id.casefold(): tuple(collection) for customer_id, collection in entries.items()}
        )

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, customer_id: object) -> bool:
        return isinstance(customer_id, str) and customer_id.casefold() in self._entries

    def lookup(self, customer_id: str) -> Optional[FacilityCollection]:
        return self._entries.get(customer_id.casefold())

    def get(self, customer_id: str) -> FacilityCollection:
        """
        Fetch the facilities for a customer.

        Raises:
            CustomerNotFoundError: If the customer has no entry
        """
        collection = self.lookup(customer_id)
        if collection is None:
            raise CustomerNotFoundError(customer_id)
        return collection


def _money(value: str, amount_type: AmountType, currency: str = "USD") -> Amount:
    return Amount.from_decimal(Decimal(value), currency, amount_type)


def build_card(
    issued_device_id: str,
    masked_pan: str,
    network_id: str,
    network_name: str,
    role: CardRole,
    used_amount: str,
    min_payment: str,
    due_date: str,
    session_id: str,
) -> CreditCardFacility:
    """Build a monthly-statement USD card facility"""
    return CreditCardFacility(
        issued_device=IssuedDevice(
            device_id=issued_device_id,
            masked_identifier=masked_pan,
            network=CardNetwork(network_id=network_id, network_name=network_name),
            role=role,
        ),
        statement_schedule=StatementSchedule(schedule_type="Monthly"),
        billing_amount=_money(used_amount, AmountType.USED),
        billing_minimum_payment=_money(min_payment, AmountType.MINIMUM),
        payment_due_date=due_date,
        product_agreement=ProductAgreement(card_amount=_money(used_amount, AmountType.USED)),
        interaction_session=InteractionSession(session_id=session_id),
    )


def build_default_store() -> FallbackStore:
    """Seed data served when no legacy proxy is configured"""
    return FallbackStore(
        {
            "CUST-123": (
                build_card(
                    issued_device_id="ABC12345678",
                    masked_pan="4562 **** **** 2365",
                    network_id="VS012",
                    network_name="Visa",
                    role=CardRole.PRIMARY,
                    used_amount="125.50",
                    min_payment="25.00",
                    due_date="2026-01-05",
                    session_id="00000000-0000-0000-0000-000000000001",
                ),
                build_card(
                    issued_device_id="XYZ98765432",
                    masked_pan="4111 **** **** 1111",
                    network_id="MC001",
                    network_name="Mastercard",
                    role=CardRole.ADDITIONAL,
                    used_amount="980.00",
                    min_payment="80.00",
                    due_date="2026-01-05",
                    session_id="00000000-0000-0000-0000-000000000001",
                ),
            ),
            "CUST-1234": (
                build_card(
                    issued_device_id="QWE11122233",
                    masked_pan="5100 **** **** 9921",
                    network_id="MC001",
                    network_name="Mastercard",
                    role=CardRole.PRIMARY,
                    used_amount="35.00",
                    min_payment="10.00",
                    due_date="2026-01-12",
                    session_id="00000000-0000-0000-0000-000000000999",
                ),
            ),
        }
    )
