"""Checkout draft remembered between screens."""

from __future__ import annotations

from enum import StrEnum
from typing import Protocol, runtime_checkable


class DeliveryMethod(StrEnum):
    PICKUP = "pickup"
    DELIVERY = "delivery"


@runtime_checkable
class CheckoutStorage(Protocol):
    delivery_method: DeliveryMethod
    delivery_address: str | None
    receiver_phone_e164: str | None

    def reset(self) -> None: ...


class InMemoryCheckoutStorage:
    def __init__(self):
        self.reset()

    def reset(self) -> None:
        self.delivery_method = DeliveryMethod.PICKUP
        self.delivery_address: str | None = None
        self.receiver_phone_e164: str | None = None
