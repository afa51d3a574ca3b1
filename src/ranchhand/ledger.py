"""Ranch fund: the shared cash balance and its log."""

import logging
from decimal import Decimal
from typing import Any, Callable, Iterable

from . import config
from .activity import ActivityFeed
from .auth import Actor, Capability, require
from .errors import ConcurrentUpdateError, InvalidAmountError
from .events import OrderStatusChanged
from .models import FundLogEntry, _utc_now, parse_money
from .pricing import ZERO, format_currency, quantize_money
from .store import DocumentStore

logger = logging.getLogger(__name__)

FUND_COLLECTION = "ranch_fund"
FUND_DOC_ID = "balance"
LOG_COLLECTION = "ranch_fund_log"


def replay_balance(entries: Iterable[FundLogEntry]) -> Decimal:
    """
    Fold log entries (oldest first) into a balance.

    Deposits add, withdrawals subtract, adjustments replace the running value.
    """
    balance = ZERO
    for entry in entries:
        if entry.type == "deposit":
            balance += entry.amount
        elif entry.type == "withdrawal":
            balance -= entry.amount
        elif entry.type == "adjustment":
            balance = entry.amount
    return balance


class RanchFund:
    """
    The ranch fund balance.

    The balance document is versioned, and every operation is a
    compare-and-swap: read balance and version, compute, write only if the
    version is unchanged, otherwise re-read and retry.
    """

    def __init__(
        self,
        store: DocumentStore,
        feed: ActivityFeed,
        max_attempts: int = config.FUND_CAS_RETRIES,
    ):
        self.store = store
        self.feed = feed
        self.max_attempts = max_attempts

    def _load(self) -> dict[str, Any]:
        return self.store.ensure(
            FUND_COLLECTION,
            FUND_DOC_ID,
            {"balance": "0.00", "applied_transitions": [], "updated_at": _utc_now()},
        )

    def balance(self) -> Decimal:
        """Current balance; reading never creates the balance document."""
        doc = self.store.find(FUND_COLLECTION, FUND_DOC_ID)
        return quantize_money(parse_money(doc["balance"]) if doc else ZERO)

    def history(self, limit: int | None = None) -> list[FundLogEntry]:
        """Log entries, newest first."""
        docs = self.store.list(LOG_COLLECTION, order_by="at", descending=True, limit=limit)
        return [FundLogEntry.from_dict(d) for d in docs]

    def deposit(self, amount: Any, description: str, actor: Actor) -> FundLogEntry:
        require(actor, Capability.MANAGE_FUND)
        value = self._positive(amount)
        return self._apply("deposit", value, lambda current: current + value, description, actor)

    def withdraw(self, amount: Any, description: str, actor: Actor) -> FundLogEntry:
        require(actor, Capability.MANAGE_FUND)
        value = self._positive(amount)
        return self._apply("withdrawal", value, lambda current: current - value, description, actor)

    def adjust(self, new_balance: Any, description: str, actor: Actor) -> FundLogEntry:
        """Set the balance outright. The log records the new balance, not a delta."""
        require(actor, Capability.MANAGE_FUND)
        value = quantize_money(parse_money(new_balance))
        if value < ZERO:
            raise InvalidAmountError(new_balance, "balance can't be set below zero")
        return self._apply("adjustment", value, lambda current: value, description, actor)

    def deposit_for_transition(
        self, amount: Any, description: str, actor: Actor, transition_id: str
    ) -> FundLogEntry | None:
        """
        Deposit at most once per transition id.

        Returns None if the transition was already applied.
        """
        value = quantize_money(parse_money(amount))
        if value <= ZERO:
            logger.info("Skipping zero deposit for transition %s", transition_id)
            return None
        return self._apply(
            "deposit", value, lambda current: current + value, description, actor,
            transition_id=transition_id,
        )

    @staticmethod
    def _positive(amount: Any) -> Decimal:
        value = quantize_money(parse_money(amount))
        if value <= ZERO:
            raise InvalidAmountError(amount, "must be greater than zero")
        return value

    def _apply(
        self,
        op_type: str,
        amount: Decimal,
        compute: Callable[[Decimal], Decimal],
        description: str,
        actor: Actor,
        transition_id: str | None = None,
    ) -> FundLogEntry | None:
        for attempt in range(1, self.max_attempts + 1):
            doc = self._load()
            applied = doc.get("applied_transitions", [])
            if transition_id is not None and transition_id in applied:
                logger.info("Transition %s already deposited", transition_id)
                return None

            current = parse_money(doc["balance"])
            new_balance = compute(current)
            fields: dict[str, Any] = {"balance": str(new_balance), "updated_at": _utc_now()}
            if transition_id is not None:
                fields["applied_transitions"] = applied + [transition_id]

            try:
                self.store.update(
                    FUND_COLLECTION, FUND_DOC_ID, fields, expected_version=doc["version"]
                )
            except ConcurrentUpdateError:
                logger.debug("Ranch fund changed underneath %s (attempt %d)", op_type, attempt)
                continue
            break
        else:
            raise ConcurrentUpdateError(FUND_COLLECTION, FUND_DOC_ID, attempts=self.max_attempts)

        if new_balance < ZERO:
            logger.warning("Ranch fund overdrawn: balance is now %s", new_balance)

        log_doc = self.store.insert(
            LOG_COLLECTION,
            {
                "type": op_type,
                "amount": str(amount),
                "description": description,
                "balance_after": str(new_balance),
                "actor_id": actor.id,
                "actor_name": actor.name,
                "at": _utc_now(),
            },
        )
        entry = FundLogEntry.from_dict(log_doc)

        verbs = {"deposit": "Deposited", "withdrawal": "Withdrew", "adjustment": "Adjusted fund to"}
        action = f"{verbs[op_type]} {format_currency(amount)}"
        if description:
            action = f"{action}: {description}"
        self.feed.record(actor, action, "ranch_fund", entry.id)
        return entry


class DeliveryDepositHandler:
    """Deposits an order's price when it is marked delivered."""

    def __init__(self, fund: RanchFund):
        self.fund = fund

    def __call__(self, event: OrderStatusChanged) -> None:
        if event.new_status != "delivered" or event.old_status == "delivered":
            return
        self.fund.deposit_for_transition(
            event.price,
            f"Order delivered: {event.customer_name}",
            event.actor,
            event.transition_id,
        )
