"""Bidding example records.

Bids and bidders show each validation style once: a field hook
(`validate_bid_amount`), a whole-record hook (`BidderSerializer.validate`),
a reusable validator function (`reject_reserved_names`), and nesting
(`BidWithBidderSerializer`).
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any

from core.domain.errors import ValidationError
from core.fields import CharField, DateTimeField, DecimalField, IntegerField
from core.serializers import Serializer

RESERVED_BIDDER_NAMES = frozenset({"admin", "auctioneer", "system"})


def reject_reserved_names(value: str) -> None:
    if value.strip().lower() in RESERVED_BIDDER_NAMES:
        raise ValidationError("This bidder name is reserved.", code="reserved")


@dataclass
class Bidder:
    bidder_id: int
    bidder_name: str | None = None


@dataclass
class Bid:
    bid_amount: Decimal
    bid_id: int | None = None
    placed_at: datetime | None = None
    bidder: Bidder | None = None


class BidderSerializer(Serializer):
    bidder_id = IntegerField()
    bidder_name = CharField(required=False, max_length=100, validators=[reject_reserved_names])

    def validate(self, attrs: dict[str, Any]) -> dict[str, Any]:
        if attrs.get("bidder_id") == 0:
            raise ValidationError("Bidder ID cannot be zero.")
        return attrs

    def create(self, validated_data: dict[str, Any]) -> Bidder:
        return Bidder(**validated_data)


class BidSerializer(Serializer):
    bid_id = IntegerField(read_only=True)
    bid_amount = DecimalField(max_digits=12, decimal_places=2)
    placed_at = DateTimeField(required=False)

    def validate_bid_amount(self, value: Decimal) -> Decimal:
        if value <= 0:
            raise ValidationError("Bid amount must be greater than zero.")
        return value

    def create(self, validated_data: dict[str, Any]) -> Bid:
        return Bid(**validated_data)

    def update(self, instance: Bid, validated_data: dict[str, Any]) -> Bid:
        for key, value in validated_data.items():
            setattr(instance, key, value)
        return instance


class BidWithBidderSerializer(BidSerializer):
    """A bid carrying its bidder.

    The context key `max_bid_amount` caps the amount.
    """

    bidder = BidderSerializer()

    def validate(self, attrs: dict[str, Any]) -> dict[str, Any]:
        ceiling = self.context.get("max_bid_amount")
        amount = attrs.get("bid_amount")
        # Partial updates may leave the amount out.
        if ceiling is not None and amount is not None and amount > Decimal(str(ceiling)):
            raise ValidationError(
                {"bid_amount": f"Bid amount exceeds the allowed maximum of {ceiling}."},
                code="max_bid_amount",
            )
        return attrs

    def create(self, validated_data: dict[str, Any]) -> Bid:
        bidder = Bidder(**validated_data.pop("bidder"))
        return Bid(bidder=bidder, **validated_data)
