"""Recurrence expansion of a single entry into a dated series."""

from dataclasses import dataclass, replace
from datetime import date, timedelta
from enum import Enum
from typing import Optional

from dateutil.relativedelta import relativedelta

from fincontrol.domain.entities import Transaction, TransactionStatus
from fincontrol.domain.errors import ValidationError
from fincontrol.domain.transfer import (
    TransferPair,
    TransferRequest,
    create_transfer,
    validate_request,
    with_status,
)

MAX_RECURRENCES = 360


class Frequency(str, Enum):
    """How far each instance of a series advances."""

    DAILY = "DAILY"
    WEEKLY = "WEEKLY"
    MONTHLY = "MONTHLY"
    YEARLY = "YEARLY"
    BUSINESS_DAYS = "BUSINESS_DAYS"


@dataclass(frozen=True)
class RecurrenceRule:
    """Frequency plus exactly one end condition (count or end date)."""

    frequency: Frequency
    count: Optional[int] = None
    end_date: Optional[date] = None

    def __post_init__(self):
        if (self.count is None) == (self.end_date is None):
            raise ValidationError("Recurrence needs either a count or an end date")
        if self.count is not None and self.count > MAX_RECURRENCES:
            raise ValidationError(
                f"Recurrence count {self.count} exceeds the maximum of {MAX_RECURRENCES}"
            )
        if self.frequency == Frequency.BUSINESS_DAYS and self.end_date is None:
            raise ValidationError("Business-day recurrence requires an end date")


def is_business_day(day: date) -> bool:
    return day.weekday() < 5


def advance_date(start: date, step: int, frequency: Frequency) -> date:
    """Return the date ``step`` periods after ``start``.

    MONTHLY and YEARLY clamp the day to the last valid day of the target
    month (Jan 31 + 1 month is Feb 28/29, Feb 29 + 1 year is Feb 28).
    """
    if frequency == Frequency.DAILY:
        return start + timedelta(days=step)
    if frequency == Frequency.WEEKLY:
        return start + timedelta(days=7 * step)
    if frequency == Frequency.MONTHLY:
        return start + relativedelta(months=step)
    if frequency == Frequency.YEARLY:
        return start + relativedelta(years=step)
    if frequency == Frequency.BUSINESS_DAYS:
        current = start
        remaining = step
        while remaining > 0:
            current += timedelta(days=1)
            if is_business_day(current):
                remaining -= 1
        return current
    raise ValidationError(f"Unknown frequency: {frequency}")


def expand_dates(start: date, rule: RecurrenceRule) -> list[date]:
    """Build the ordered date ladder for a rule.

    An end date earlier than the start date yields an empty list.
    """
    if rule.count is not None:
        if rule.count <= 1:
            return [start]
        return [advance_date(start, i, rule.frequency) for i in range(rule.count)]

    if rule.end_date < start:
        return []

    if rule.frequency == Frequency.BUSINESS_DAYS:
        dates = []
        current = start
        while current <= rule.end_date and len(dates) < MAX_RECURRENCES:
            if is_business_day(current):
                dates.append(current)
            current += timedelta(days=1)
        return dates

    dates = []
    step = 0
    while len(dates) < MAX_RECURRENCES:
        current = advance_date(start, step, rule.frequency)
        if current > rule.end_date:
            break
        dates.append(current)
        step += 1
    return dates


def expand(template: Transaction, rule: Optional[RecurrenceRule]) -> list[Transaction]:
    """Project one transaction into a dated series.

    Each instance is a copy of the template with its date advanced and its
    description suffixed with ``(i/N)``. Every instance after the first is
    PENDING. A series of one returns the template unchanged.
    """
    if rule is None:
        return [template]

    dates = expand_dates(template.date, rule)
    if len(dates) == 1 and dates[0] == template.date:
        return [template]

    total = len(dates)
    instances = []
    for index, day in enumerate(dates):
        status = template.status if index == 0 else TransactionStatus.PENDING
        instances.append(
            replace(
                template,
                id=template.id if index == 0 else "",
                date=day,
                description=f"{template.description} ({index + 1}/{total})",
                status=status,
                linked_id=None,
            )
        )
    return instances


def expand_transfer(
    request: TransferRequest,
    rule: Optional[RecurrenceRule],
    bank_names: Optional[dict[str, str]] = None,
) -> list[TransferPair]:
    """Produce one full transfer pair per generated date.

    Each pair gets its own linked_id.

    Raises:
        ValidationError: If the transfer request is invalid
    """
    validate_request(request)
    if rule is None:
        return [create_transfer(request, bank_names=bank_names)]

    dates = expand_dates(request.date, rule)
    if len(dates) == 1 and dates[0] == request.date:
        return [create_transfer(request, bank_names=bank_names)]

    total = len(dates)
    pairs = []
    for index, day in enumerate(dates):
        pair = create_transfer(
            replace(request, date=day),
            bank_names=bank_names,
            suffix=f"({index + 1}/{total})",
        )
        if index > 0:
            pair = with_status(pair, TransactionStatus.PENDING)
        pairs.append(pair)
    return pairs
