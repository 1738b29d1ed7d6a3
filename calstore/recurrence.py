# calstore/recurrence.py - Recurring Events Logic
"""
Materializes the occurrences of a recurring base event.

Occurrence i (1 <= i < rule.times) is the base event shifted by i intervals.
Every offset is measured from the base start, so month arithmetic does not
drift: Jan 31 + 1 month is Feb 28 (or 29), Jan 31 + 2 months is Mar 31.
A day of month that does not exist in the target month is clamped to the
month's last day; the same applies to Feb 29 + 1 year.
"""

import calendar
from datetime import datetime, timedelta

from .models import Event, Interval, Occurrence


def add_months(moment, months):
    """Add calendar months, clamping the day to the target month's length"""
    month_index = moment.month - 1 + months
    year = moment.year + month_index // 12
    month = month_index % 12 + 1
    max_day = calendar.monthrange(year, month)[1]
    return moment.replace(year=year, month=month, day=min(moment.day, max_day))


def shift(moment, interval, steps):
    """Move `moment` forward by `steps` whole intervals"""
    if interval is Interval.DAILY:
        return moment + timedelta(days=steps)
    if interval is Interval.WEEKLY:
        return moment + timedelta(weeks=steps)
    if interval is Interval.MONTHLY:
        return add_months(moment, steps)
    if interval is Interval.YEARLY:
        return add_months(moment, 12 * steps)
    if interval is Interval.NONE:
        return moment
    raise ValueError(f"Unhandled interval: {interval!r}")


def expand(base, rule, honor_end_date=False):
    """
    Generate the occurrences that follow `base` under `rule`.

    The base event itself is not part of the result. Repetition is bounded by
    rule.times only, unless honor_end_date is set and the rule has an end
    date, in which case generation also stops at the first occurrence starting
    after that day.
    """
    if not rule.repeats:
        return []

    limit = None
    if honor_end_date and rule.end_date is not None:
        limit = datetime.combine(rule.end_date, datetime.max.time())

    occurrences = []
    for index in range(1, rule.times):
        start = shift(base.start, rule.interval, index)
        if limit is not None and start > limit:
            break
        moved = Event(
            id=base.id,
            user_id=base.user_id,
            title=base.title,
            description=base.description,
            start=start,
            end=shift(base.end, rule.interval, index),
            category=base.category,
        )
        occurrences.append(Occurrence(event=moved, occurrence_index=index))
    return occurrences


def expand_all(events, rules, honor_end_date=False):
    """Each base event (index 0) followed by its generated occurrences"""
    listing = []
    for event in events:
        listing.append(Occurrence(event=event))
        rule = rules.get(event.id)
        if rule is not None:
            listing.extend(expand(event, rule, honor_end_date))
    return listing


def describe(rule):
    """Generate human-readable recurrence description"""
    heads = {
        Interval.DAILY: 'Daily',
        Interval.WEEKLY: 'Weekly',
        Interval.MONTHLY: 'Monthly',
        Interval.YEARLY: 'Yearly',
    }
    if not rule.repeats:
        return 'Does not repeat'
    text = f"{heads[rule.interval]}, {rule.times} times"
    if rule.end_date:
        text += f", until {rule.end_date.isoformat()}"
    return text
