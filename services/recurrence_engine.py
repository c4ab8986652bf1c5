"""Recurring-series generation.

Pure functions shared by the create and edit flows. Nothing here touches the
store; callers persist what these functions return.
"""
import uuid
from dataclasses import dataclass, replace
from typing import Iterable, Iterator

from dateutil.relativedelta import relativedelta

from models.recurrence_rule import Frequency, RecurrenceRule
from models.transaction import Transaction
from utils.constants import (
    DEFAULT_END_MONTHS,
    DEFAULT_END_WEEKS,
    DEFAULT_END_YEARS,
    HORIZON_MONTHS,
    HORIZON_WEEKS,
    HORIZON_YEARS,
    MAX_SERIES_INSTANCES,
)
from utils.date_helpers import format_date, parse_date
from utils.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class SeriesRegeneration:
    anchor: Transaction                 # edited instance, updated in place by the caller
    to_delete: frozenset[int]
    to_create: tuple[Transaction, ...]


def new_series_id() -> str:
    return uuid.uuid4().hex


def _step(frequency: Frequency, count: int) -> relativedelta:
    if frequency is Frequency.WEEKLY:
        return relativedelta(weeks=count)
    if frequency is Frequency.MONTHLY:
        return relativedelta(months=count)
    return relativedelta(years=count)


def _shift(start: str, delta: relativedelta) -> str:
    d = parse_date(start)
    if d is None:
        raise ValueError(f"Invalid date: {start}")
    try:
        return format_date(d + delta)
    except (OverflowError, ValueError):
        logger.warning("Calendar arithmetic overflowed for %s + %s; keeping input date", start, delta)
        return start


def next_occurrence(from_date: str, rule: RecurrenceRule) -> str:
    """Advance from_date by one rule step.

    Month and year steps clamp the day to the target month, so Jan 31 + 1 month
    is the last day of February. If the result cannot be represented the input
    is returned unchanged; callers treat that as "no further progress".
    """
    return _shift(from_date, _step(rule.frequency, rule.interval))


def horizon_cap(start: str, frequency: Frequency) -> str:
    """Default stop date when a rule has no end date."""
    if frequency is Frequency.WEEKLY:
        return _shift(start, relativedelta(weeks=HORIZON_WEEKS))
    if frequency is Frequency.MONTHLY:
        return _shift(start, relativedelta(months=HORIZON_MONTHS))
    return _shift(start, relativedelta(years=HORIZON_YEARS))


def default_end_date(start: str, rule: RecurrenceRule) -> str:
    """Suggested end date offered when the user turns on an end date without picking one."""
    if rule.frequency is Frequency.WEEKLY:
        return _shift(start, relativedelta(weeks=DEFAULT_END_WEEKS * rule.interval))
    if rule.frequency is Frequency.MONTHLY:
        return _shift(start, relativedelta(months=DEFAULT_END_MONTHS * rule.interval))
    return _shift(start, relativedelta(years=DEFAULT_END_YEARS * rule.interval))


def effective_stop_date(start: str, rule: RecurrenceRule) -> str:
    if rule.end_date:
        end = parse_date(rule.end_date)
        if end is None:
            raise ValueError(f"Invalid end date: {rule.end_date}")
        return format_date(end)
    return horizon_cap(start, rule.frequency)


def materialize(base: Transaction, rule: RecurrenceRule) -> Iterator[Transaction]:
    """Yield the followers of base, strictly after base.date.

    Stops at the first date past the stop date, after MAX_SERIES_INSTANCES
    followers, or when the date stops advancing.
    """
    stop = parse_date(effective_stop_date(base.date, rule))
    current = base.date
    created = 0
    while created < MAX_SERIES_INSTANCES:
        nxt = next_occurrence(current, rule)
        if nxt == current:
            logger.warning("Recurrence made no progress from %s; stopping series %s", current, base.series_id)
            return
        if parse_date(nxt) > stop:
            return
        yield replace(
            base,
            id=None,
            date=nxt,
            is_recurring=True,
            recurrence=rule,
            created_at="",
            updated_at="",
        )
        created += 1
        current = nxt


def regenerate_future_tail(
    edited: Transaction,
    series: Iterable[Transaction],
    new_rule: RecurrenceRule,
) -> SeriesRegeneration:
    """Work out the cascade for an edited series member.

    Every member dated on or after the edited instance is scheduled for deletion,
    except the edited instance itself, and a fresh tail is generated from it.
    Earlier members are left alone.
    """
    series_id = edited.series_id or new_series_id()
    anchor = replace(edited, series_id=series_id, is_recurring=True, recurrence=new_rule)
    start = parse_date(anchor.date)
    if start is None:
        raise ValueError(f"Invalid date: {anchor.date}")

    to_delete = frozenset(
        tx.id
        for tx in series
        if tx.id is not None
        and tx.id != edited.id
        and tx.series_id == series_id
        and parse_date(tx.date) >= start
    )
    return SeriesRegeneration(
        anchor=anchor,
        to_delete=to_delete,
        to_create=tuple(materialize(anchor, new_rule)),
    )
