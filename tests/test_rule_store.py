"""Unit tests for the recurrence rule store."""
from datetime import date

from calstore.models import Interval, RecurrenceRule
from calstore.rule_store import RULE_HEADER, RuleStore


def rule(event_id=1, interval=Interval.DAILY, times=3, end_date=None):
    return RecurrenceRule(event_id=event_id, interval=interval, times=times, end_date=end_date)


def test_get_missing_rule(rule_store):
    assert rule_store.get(1) is None


def test_upsert_and_get(rule_store):
    stored = rule_store.upsert(4, rule(event_id=0, interval=Interval.WEEKLY, times=5))
    assert stored == rule(event_id=4, interval=Interval.WEEKLY, times=5)
    assert rule_store.get(4) == stored


def test_upsert_replaces_existing_rule(rule_store):
    rule_store.upsert(4, rule(times=3))
    rule_store.upsert(4, rule(interval=Interval.MONTHLY, times=6))
    assert rule_store.list() == {4: rule(event_id=4, interval=Interval.MONTHLY, times=6)}


def test_non_repeating_rule_is_not_written(rule_store):
    assert rule_store.upsert(1, rule(interval=Interval.NONE, times=5)) is None
    assert rule_store.upsert(2, rule(times=1)) is None
    assert rule_store.list() == {}


def test_non_repeating_rule_leaves_existing_rule(rule_store):
    rule_store.upsert(1, rule(times=4))
    rule_store.upsert(1, rule(interval=Interval.NONE, times=1))
    assert rule_store.get(1).times == 4


def test_round_trip_with_end_date(data_dir, rule_store):
    rule_store.upsert(1, rule(end_date=date(2026, 3, 1)))
    rule_store.upsert(2, rule(interval=Interval.YEARLY, times=10))
    reloaded = RuleStore(data_dir).list()
    assert reloaded == {
        1: rule(event_id=1, end_date=date(2026, 3, 1)),
        2: rule(event_id=2, interval=Interval.YEARLY, times=10),
    }


def test_delete_and_delete_many(rule_store):
    for event_id in (1, 2, 3, 4):
        rule_store.upsert(event_id, rule())
    assert rule_store.delete(2) is True
    assert rule_store.delete(2) is False
    assert rule_store.delete_many([1, 4, 99]) == 2
    assert list(rule_store.list()) == [3]


def test_legacy_rows_are_read(rule_store):
    with open(rule_store.path, 'w', encoding='utf-8') as f:
        f.write(','.join(RULE_HEADER) + '\n')
        f.write('7,1w,4,null\n')
        f.write('8,1m,2,2026-12-31\n')
        f.write('9,2x,2,\n')
    rules = rule_store.list()
    assert rules[7] == rule(event_id=7, interval=Interval.WEEKLY, times=4)
    assert rules[8].end_date == date(2026, 12, 31)
    assert 9 not in rules
