# calstore/rule_store.py - Recurrence Rule Store
import logging

from .csv_table import CsvTable
from .models import Interval, RecurrenceRule, parse_int, parse_optional_date

logger = logging.getLogger(__name__)

RULES_FILE = 'recurrent.csv'
RULE_HEADER = ('eventId', 'recurrentInterval', 'recurrentTimes', 'recurrentEndDate')


class RuleStore(CsvTable):
    """At most one recurrence rule per event, keyed by event id"""

    filename = RULES_FILE
    header = RULE_HEADER

    def parse_row(self, row):
        times = parse_int(row[2], 'recurrentTimes') if row[2].strip() else 1
        return RecurrenceRule(
            event_id=parse_int(row[0], 'eventId'),
            interval=Interval.parse(row[1]),
            times=times,
            end_date=parse_optional_date(row[3] if len(row) > 3 else '', 'recurrentEndDate'),
        )

    def format_row(self, rule):
        return [
            str(rule.event_id),
            rule.interval.value,
            str(rule.times),
            rule.end_date.isoformat() if rule.end_date else '',
        ]

    def record_key(self, rule):
        return rule.event_id

    def list(self):
        return dict(self._current())

    def get(self, event_id):
        return super().get(event_id)

    def upsert(self, event_id, rule):
        """
        Store `rule` for `event_id`, replacing any existing one.

        A rule that does not repeat (interval None or times <= 1) is not
        written and an existing rule is left as it is; returns None then.
        """
        if not rule.repeats:
            logger.debug(f"Ignoring non-repeating rule for event {event_id}")
            return None
        stored = self._put(RecurrenceRule(
            event_id=event_id,
            interval=rule.interval,
            times=rule.times,
            end_date=rule.end_date,
        ))
        logger.info(f"Saved recurrence rule for event {event_id}: {rule.interval.value} x{rule.times}")
        return stored

    def delete(self, event_id):
        return self._remove([event_id]) > 0

    def delete_many(self, event_ids):
        count = self._remove(event_ids)
        if count:
            logger.info(f"Deleted {count} recurrence rules")
        return count
