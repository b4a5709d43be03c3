"""Filtered ledger view with stale-response protection.

Every refresh is stamped with a ticket from a monotonic counter. When the
results come back they are applied only if no newer refresh has been
issued in the meantime; older results are dropped without touching the
visible state.
"""

import logging
import threading
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Optional

from fincontrol.database.base import LedgerStore
from fincontrol.domain.balance import (
    compute_balance_map,
    compute_previous_balances,
    resolve_seed,
)
from fincontrol.domain.entities import (
    PreviousBalances,
    Transaction,
    TransactionFilter,
)
from fincontrol.domain.errors import StaleResponseDiscarded

logger = logging.getLogger(__name__)


class RequestSequencer:
    """Hands out increasing request tickets and tracks the latest one."""

    def __init__(self):
        self._lock = threading.Lock()
        self._latest = 0

    def issue(self) -> int:
        """Stamp a new request and make it the latest."""
        with self._lock:
            self._latest += 1
            return self._latest

    @property
    def latest(self) -> int:
        with self._lock:
            return self._latest

    def is_current(self, ticket: int) -> bool:
        with self._lock:
            return ticket == self._latest

    def ensure_current(self, ticket: int) -> None:
        """Raise StaleResponseDiscarded if a newer request was issued."""
        with self._lock:
            latest = self._latest
        if ticket != latest:
            raise StaleResponseDiscarded(ticket, latest)


@dataclass(frozen=True)
class LedgerSnapshot:
    """What a ledger view shows for one filter."""

    filter: TransactionFilter
    transactions: tuple[Transaction, ...] = ()
    previous_balances: PreviousBalances = field(default_factory=PreviousBalances)
    balance_map: dict[str, Decimal] = field(default_factory=dict)

    @property
    def seed(self) -> Decimal:
        return resolve_seed(self.previous_balances, self.filter.bank_id)


class LedgerViewService:
    """Keeps the currently visible ledger page consistent with the last filter."""

    def __init__(self, store: LedgerStore):
        """Initialize ledger view service.

        Args:
            store: Ledger store instance
        """
        self.store = store
        self.sequencer = RequestSequencer()
        self._state_lock = threading.Lock()
        self.snapshot: Optional[LedgerSnapshot] = None

    @property
    def transactions(self) -> tuple[Transaction, ...]:
        return self.snapshot.transactions if self.snapshot else ()

    @property
    def previous_balances(self) -> PreviousBalances:
        return self.snapshot.previous_balances if self.snapshot else PreviousBalances()

    @property
    def balance_map(self) -> dict[str, Decimal]:
        return self.snapshot.balance_map if self.snapshot else {}

    @property
    def filter(self) -> Optional[TransactionFilter]:
        return self.snapshot.filter if self.snapshot else None

    def begin(self) -> int:
        """Start a refresh and return its ticket."""
        return self.sequencer.issue()

    def fetch(self, filter: TransactionFilter) -> LedgerSnapshot:
        """Read the store and compute balances for a filter.

        The previous balances are computed over the whole ledger, so a
        date-filtered page starts at the true running balance.
        """
        transactions = self.store.list_transactions(filter)

        previous = PreviousBalances()
        if filter.start_date is not None:
            previous = compute_previous_balances(
                self.store.list_transactions(),
                filter.start_date,
                wallet_id=filter.wallet_id,
            )

        balance_map = compute_balance_map(
            transactions,
            bank_id=filter.bank_id,
            wallet_id=filter.wallet_id,
            seed=resolve_seed(previous, filter.bank_id),
        )
        return LedgerSnapshot(
            filter=filter,
            transactions=tuple(transactions),
            previous_balances=previous,
            balance_map=balance_map,
        )

    def complete(self, ticket: int, snapshot: LedgerSnapshot) -> Optional[LedgerSnapshot]:
        """Apply a fetched snapshot if its ticket is still the latest.

        Returns:
            The applied snapshot, or None if the response was superseded
        """
        with self._state_lock:
            try:
                self.sequencer.ensure_current(ticket)
            except StaleResponseDiscarded as e:
                logger.debug("Dropping ledger response: %s", e)
                return None
            self.snapshot = snapshot
        return snapshot

    def refresh(self, filter: Optional[TransactionFilter] = None) -> Optional[LedgerSnapshot]:
        """Fetch and apply the view for a filter.

        Store errors propagate unchanged and leave the visible state as it
        was.

        Returns:
            The applied snapshot, or None if a newer refresh superseded it
        """
        if filter is None:
            filter = TransactionFilter()
        ticket = self.begin()
        snapshot = self.fetch(filter)
        return self.complete(ticket, snapshot)
