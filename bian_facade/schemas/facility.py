"""
Pydantic schemas for the BIAN wire format.

Wire names are idiosyncratic ("Currencycode", "cardNetworkid", "Text" wrappers),
so each schema maps to and from its domain record explicitly and the domain
layer never sees an alias.
"""

from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

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

# Response header carrying the number of facilities available
TOTAL_COUNT_HEADER = "Total-Count"


class WireModel(BaseModel):
    """Base for wire schemas: alias-first, immutable, case-insensitive on input"""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    @model_validator(mode="before")
    @classmethod
    def _match_aliases_ignoring_case(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        aliases = {(info.alias or name).lower(): info.alias or name for name, info in cls.model_fields.items()}
        return {
            aliases.get(key.lower(), key) if isinstance(key, str) else key: value for key, value in data.items()
        }


class TextSchema(WireModel):
    text: Optional[str] = Field(None, alias="Text")


class ValueSchema(WireModel):
    value: Optional[str] = Field(None, alias="Value")


class CurrencyCodeSchema(WireModel):
    currency_code: Optional[str] = Field(None, alias="Currencycode")


class AmountSchema(WireModel):
    amount_value: Optional[ValueSchema] = Field(None, alias="amountValue")
    amount_currency: Optional[CurrencyCodeSchema] = Field(None, alias="amountCurrency")
    decimal_point_position: Optional[TextSchema] = Field(None, alias="decimalPointPosition")
    amount_type: Optional[AmountType] = Field(None, alias="amountType")

    def to_domain(self) -> Amount:
        """Raises ValueError when value and decimal point position disagree"""
        return Amount(
            value=self.amount_value.value if self.amount_value else None,
            currency_code=self.amount_currency.currency_code if self.amount_currency else None,
            decimal_point_position=self.decimal_point_position.text if self.decimal_point_position else None,
            amount_type=self.amount_type,
        )

    @classmethod
    def from_domain(cls, amount: Amount) -> "AmountSchema":
        return cls(
            amount_value=ValueSchema(value=amount.value),
            amount_currency=CurrencyCodeSchema(currency_code=amount.currency_code),
            decimal_point_position=TextSchema(text=amount.decimal_point_position),
            amount_type=amount.amount_type,
        )


class CardNetworkSchema(WireModel):
    card_network_id: Optional[str] = Field(None, alias="cardNetworkid")
    card_network: Optional[str] = Field(None, alias="cardNetwork")


class IssuedDeviceSchema(WireModel):
    issued_device_id: Optional[str] = Field(None, alias="issuedDeviceId")
    device_property_setting: Optional[str] = Field(None, alias="devicePropertySetting")
    card_network: Optional[CardNetworkSchema] = Field(None, alias="cardNetwork")
    card_role: Optional[CardRole] = Field(None, alias="cardRole")

    def to_domain(self) -> IssuedDevice:
        network = None
        if self.card_network is not None:
            network = CardNetwork(
                network_id=self.card_network.card_network_id,
                network_name=self.card_network.card_network,
            )
        return IssuedDevice(
            device_id=self.issued_device_id,
            masked_identifier=self.device_property_setting,
            network=network,
            role=self.card_role,
        )

    @classmethod
    def from_domain(cls, device: IssuedDevice) -> "IssuedDeviceSchema":
        network = None
        if device.network is not None:
            network = CardNetworkSchema(
                card_network_id=device.network.network_id,
                card_network=device.network.network_name,
            )
        return cls(
            issued_device_id=device.device_id,
            device_property_setting=device.masked_identifier,
            card_network=network,
            card_role=device.role,
        )


class ScheduleSchema(WireModel):
    schedule_type: Optional[TextSchema] = Field(None, alias="scheduleType")


class CardPaymentAgreementSchema(WireModel):
    card_amount: Optional[AmountSchema] = Field(None, alias="cardAmount")


class InteractionSessionSchema(WireModel):
    idsession: Optional[str] = Field(None, alias="idsession")


class CreditCardFacilitySchema(WireModel):
    """Single credit card facility as exposed by the BIAN contract"""

    issued_device: Optional[IssuedDeviceSchema] = Field(None, alias="issuedDevice")
    statement_schedule: Optional[ScheduleSchema] = Field(None, alias="statementSchedule")
    billing_transaction_amount: Optional[AmountSchema] = Field(None, alias="billingTransactionAmount")
    billing_transaction_minimum_required_payment: Optional[AmountSchema] = Field(
        None, alias="billingTransactionMinimumRequiredPayment"
    )
    billing_transaction_payment_due_date: Optional[str] = Field(None, alias="billingTransactionPaymentDueDate")
    product_instance_reference: Optional[CardPaymentAgreementSchema] = Field(None, alias="productInstanceReference")
    customer_interaction: Optional[InteractionSessionSchema] = Field(None, alias="customerInteraction")

    def to_domain(self) -> CreditCardFacility:
        schedule = None
        if self.statement_schedule is not None:
            schedule_type = self.statement_schedule.schedule_type
            schedule = StatementSchedule(schedule_type=schedule_type.text if schedule_type else None)

        agreement = None
        if self.product_instance_reference is not None:
            card_amount = self.product_instance_reference.card_amount
            agreement = ProductAgreement(card_amount=card_amount.to_domain() if card_amount else None)

        session = None
        if self.customer_interaction is not None:
            session = InteractionSession(session_id=self.customer_interaction.idsession)

        return CreditCardFacility(
            issued_device=self.issued_device.to_domain() if self.issued_device else None,
            statement_schedule=schedule,
            billing_amount=_amount_to_domain(self.billing_transaction_amount),
            billing_minimum_payment=_amount_to_domain(self.billing_transaction_minimum_required_payment),
            payment_due_date=self.billing_transaction_payment_due_date,
            product_agreement=agreement,
            interaction_session=session,
        )

    @classmethod
    def from_domain(cls, facility: CreditCardFacility) -> "CreditCardFacilitySchema":
        schedule = None
        if facility.statement_schedule is not None:
            schedule = ScheduleSchema(schedule_type=TextSchema(text=facility.statement_schedule.schedule_type))

        agreement = None
        if facility.product_agreement is not None:
            agreement = CardPaymentAgreementSchema(
                card_amount=_amount_from_domain(facility.product_agreement.card_amount)
            )

        session = None
        if facility.interaction_session is not None:
            session = InteractionSessionSchema(idsession=facility.interaction_session.session_id)

        return cls(
            issued_device=IssuedDeviceSchema.from_domain(facility.issued_device) if facility.issued_device else None,
            statement_schedule=schedule,
            billing_transaction_amount=_amount_from_domain(facility.billing_amount),
            billing_transaction_minimum_required_payment=_amount_from_domain(facility.billing_minimum_payment),
            billing_transaction_payment_due_date=facility.payment_due_date,
            product_instance_reference=agreement,
            customer_interaction=session,
        )


class RetrieveCreditCardFacilitiesResponse(WireModel):
    """Response for GET /credit-card/customer/{customerId}/retrieve"""

    credit_card_facilities: List[CreditCardFacilitySchema] = Field(default_factory=list, alias="creditCardFacilities")

    def to_domain(self) -> FacilityCollection:
        return tuple(facility.to_domain() for facility in self.credit_card_facilities)

    @classmethod
    def from_domain(cls, collection: FacilityCollection) -> "RetrieveCreditCardFacilitiesResponse":
        return cls(credit_card_facilities=[CreditCardFacilitySchema.from_domain(f) for f in collection])

    def to_wire(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


class ErrorResponse(BaseModel):
    """Uniform error body"""

    code: str
    category: str
    message: str
    details: List[str] = Field(default_factory=list)


def _amount_to_domain(schema: Optional[AmountSchema]) -> Optional[Amount]:
    return schema.to_domain() if schema is not None else None


def _amount_from_domain(amount: Optional[Amount]) -> Optional[AmountSchema]:
    return AmountSchema.from_domain(amount) if amount is not None else None
