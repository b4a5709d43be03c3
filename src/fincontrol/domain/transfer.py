"""Transfer coordination between two banks.

A transfer is stored as two ordinary transactions (legs) sharing a
``linked_id``: a DEBIT on the source bank and a CREDIT on the destination
bank. The store knows nothing about the relationship; this module keeps the
two legs consistent on create and edit and tells callers how to find the
counterpart on delete.
"""

import logging
import uuid
from dataclasses import dataclass, field, replace
from datetime import date
from decimal import Decimal
from typing import Iterable, Optional

from fincontrol.domain.entities import (
    Transaction,
    TransactionStatus,
    TransactionType,
)
from fincontrol.domain.errors import ValidationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TransferRequest:
    """Form state describing a transfer between two banks."""

    source_bank_id: str
    destination_bank_id: str
    value: Decimal
    date: date
    wallet_id: str = ""
    status: TransactionStatus = TransactionStatus.PAID
    category_id: str = ""
    cost_center_id: str = ""
    participant_id: str = ""
    doc_number: str = ""
    description: Optional[str] = None


@dataclass(frozen=True)
class TransferPair:
    """The two legs of a transfer."""

    debit: Transaction
    credit: Transaction

    @property
    def linked_id(self) -> Optional[str]:
        return self.debit.linked_id

    def legs(self) -> list[Transaction]:
        return [self.debit, self.credit]


@dataclass(frozen=True)
class TransferEdit:
    """Result of editing a transfer.

    ``legs`` holds the transactions to persist: both legs normally, only the
    edited one when its counterpart could not be found.
    """

    legs: tuple[Transaction, ...]
    warnings: tuple[str, ...] = field(default_factory=tuple)


def new_linked_id() -> str:
    """Generate a fresh transfer correlation id."""
    return str(uuid.uuid4())


def _bank_label(bank_id: str, bank_names: Optional[dict[str, str]]) -> str:
    if bank_names and bank_id in bank_names:
        return bank_names[bank_id]
    return bank_id


def validate_request(request: TransferRequest) -> None:
    """Check that a transfer request names two distinct banks.

    Raises:
        ValidationError: If a bank is unset, both banks are equal or the
            value is negative
    """
    if not request.source_bank_id:
        raise ValidationError("Transfer source bank is required")
    if not request.destination_bank_id:
        raise ValidationError("Transfer destination bank is required")
    if request.source_bank_id == request.destination_bank_id:
        raise ValidationError("Transfer source and destination banks must differ")
    if request.value < 0:
        raise ValidationError(f"Transfer value must be non-negative, got {request.value}")


def _build_legs(
    request: TransferRequest,
    linked_id: str,
    debit_id: str = "",
    credit_id: str = "",
    bank_names: Optional[dict[str, str]] = None,
    suffix: str = "",
) -> TransferPair:
    source = _bank_label(request.source_bank_id, bank_names)
    destination = _bank_label(request.destination_bank_id, bank_names)
    if request.description:
        debit_description = credit_description = request.description
    else:
        debit_description = f"Transfer to {destination}"
        credit_description = f"Transfer from {source}"
    if suffix:
        debit_description = f"{debit_description} {suffix}"
        credit_description = f"{credit_description} {suffix}"

    shared = dict(
        date=request.date,
        value=request.value,
        status=request.status,
        doc_number=request.doc_number,
        wallet_id=request.wallet_id,
        category_id=request.category_id,
        cost_center_id=request.cost_center_id,
        participant_id=request.participant_id,
        linked_id=linked_id,
    )
    debit = Transaction(
        id=debit_id,
        description=debit_description,
        type=TransactionType.DEBIT,
        bank_id=request.source_bank_id,
        **shared,
    )
    credit = Transaction(
        id=credit_id,
        description=credit_description,
        type=TransactionType.CREDIT,
        bank_id=request.destination_bank_id,
        **shared,
    )
    return TransferPair(debit=debit, credit=credit)


def create_transfer(
    request: TransferRequest,
    bank_names: Optional[dict[str, str]] = None,
    suffix: str = "",
) -> TransferPair:
    """Build both legs of a new transfer, each with an empty id.

    Args:
        request: Transfer form state
        bank_names: Optional bank id to name map used in leg descriptions
        suffix: Optional text appended to both descriptions (e.g. "(2/12)")

    Returns:
        TransferPair with a fresh linked_id

    Raises:
        ValidationError: If the banks are missing or equal
    """
    validate_request(request)
    return _build_legs(request, new_linked_id(), bank_names=bank_names, suffix=suffix)


def find_counterpart(
    transaction: Transaction, candidates: Iterable[Transaction]
) -> Optional[Transaction]:
    """Find the other leg of a transfer: same linked_id, different id."""
    if not transaction.linked_id:
        return None
    for candidate in candidates:
        if candidate.linked_id == transaction.linked_id and candidate.id != transaction.id:
            return candidate
    return None


def edit_transfer(
    edited: Transaction,
    counterpart: Optional[Transaction],
    request: TransferRequest,
    bank_names: Optional[dict[str, str]] = None,
) -> TransferEdit:
    """Recompute the legs of a transfer from edited form state.

    Both existing ids and the shared linked_id are kept. The form state
    applies to both legs; banks of origin and destination may change.

    When the counterpart cannot be resolved the edit applies to the edited
    leg only and a warning is returned. The missing leg is not recreated.
    A plain transaction being turned into a transfer gets a new linked_id
    and keeps its id on the DEBIT leg.

    Raises:
        ValidationError: If the request is invalid
    """
    if not edited.linked_id:
        validate_request(request)
        pair = _build_legs(request, new_linked_id(), debit_id=edited.id, bank_names=bank_names)
        return TransferEdit(legs=tuple(pair.legs()))

    if counterpart is None:
        return _edit_orphan(edited, request)

    if counterpart.linked_id != edited.linked_id:
        raise ValidationError(
            f"Transaction {counterpart.id} is not linked to transaction {edited.id}"
        )
    validate_request(request)

    if edited.type == TransactionType.DEBIT:
        debit_id, credit_id = edited.id, counterpart.id
    else:
        debit_id, credit_id = counterpart.id, edited.id

    pair = _build_legs(
        request,
        edited.linked_id,
        debit_id=debit_id,
        credit_id=credit_id,
        bank_names=bank_names,
    )
    return TransferEdit(legs=tuple(pair.legs()))


def _edit_orphan(edited: Transaction, request: TransferRequest) -> TransferEdit:
    """Apply form state to a leg whose counterpart is gone.

    Only the edited leg's own bank is read from the request. Its
    description is kept unless the request sets one.
    """
    if edited.type == TransactionType.DEBIT:
        bank_id = request.source_bank_id
    else:
        bank_id = request.destination_bank_id
    if not bank_id:
        raise ValidationError("Transfer bank is required")
    if request.value < 0:
        raise ValidationError(f"Transfer value must be non-negative, got {request.value}")

    kept = replace(
        edited,
        date=request.date,
        value=request.value,
        status=request.status,
        doc_number=request.doc_number,
        wallet_id=request.wallet_id,
        category_id=request.category_id,
        cost_center_id=request.cost_center_id,
        participant_id=request.participant_id,
        bank_id=bank_id,
        description=request.description or edited.description,
    )
    warning = (
        f"Counterpart of transfer {edited.linked_id} not found; "
        f"only transaction {edited.id} was updated"
    )
    logger.warning(warning)
    return TransferEdit(legs=(kept,), warnings=(warning,))


def delete_targets(
    transaction: Transaction,
    candidates: Iterable[Transaction],
    cascade: bool,
) -> list[str]:
    """Return ids to delete for a delete request on one leg.

    The counterpart is only included when the caller asks to cascade.
    """
    ids = [transaction.id]
    if cascade:
        counterpart = find_counterpart(transaction, candidates)
        if counterpart is not None:
            ids.append(counterpart.id)
    return ids


def check_pair(first: Transaction, second: Transaction) -> None:
    """Validate the two-leg transfer invariant.

    Raises:
        ValidationError: If the legs are not a consistent transfer pair
    """
    if not first.linked_id or first.linked_id != second.linked_id:
        raise ValidationError("Transfer legs must share a linked_id")
    if first.type == second.type:
        raise ValidationError("Transfer legs must have opposite types")
    if first.date != second.date:
        raise ValidationError("Transfer legs must share the same date")
    if first.value != second.value:
        raise ValidationError("Transfer legs must share the same value")
    if first.wallet_id != second.wallet_id:
        raise ValidationError("Transfer legs must share the same wallet")
    if first.bank_id == second.bank_id:
        raise ValidationError("Transfer legs must use different banks")


def request_from_legs(debit: Transaction, credit: Transaction) -> TransferRequest:
    """Rebuild the form state of an existing transfer pair."""
    return TransferRequest(
        source_bank_id=debit.bank_id,
        destination_bank_id=credit.bank_id,
        value=debit.value,
        date=debit.date,
        wallet_id=debit.wallet_id,
        status=debit.status,
        category_id=debit.category_id,
        cost_center_id=debit.cost_center_id,
        participant_id=debit.participant_id,
        doc_number=debit.doc_number,
        description=None,
    )


def with_status(pair: TransferPair, status: TransactionStatus) -> TransferPair:
    """Return a copy of a pair with both legs set to a status."""
    return TransferPair(
        debit=replace(pair.debit, status=status),
        credit=replace(pair.credit, status=status),
    )
