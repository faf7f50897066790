from __future__ import annotations

import logging
import uuid
from typing import Protocol

from models import ChargeResult

logger = logging.getLogger("library.ports")


class PaymentPort(Protocol):
    def charge(self, amount: float, card: str) -> ChargeResult:
        ...


class NotifierPort(Protocol):
    def send(self, to: str, subject: str, body: str) -> bool:
        ...


class FakePaymentProvider:
    """
    Stand-in for a card processor. Every charge succeeds and gets a random
    transaction id.
    """

    def charge(self, amount: float, card: str) -> ChargeResult:
        txn = uuid.uuid4().hex[:12]
        logger.info("Charging card | amount=%.2f card=%s txn=%s", amount, card, txn)
        return ChargeResult(ok=True, txn=txn)


class ConsoleNotifier:
    """Writes notifications to the log instead of sending email."""

    def send(self, to: str, subject: str, body: str) -> bool:
        logger.info("Email | to=%s subject=%s body=%s", to, subject, body)
        return True
