"""Unit tests for the CSV event store."""
import os
import threading
from dataclasses import replace
from datetime import datetime

import pytest

from calstore.errors import NotFoundError, StorageError
from calstore.event_store import EVENT_HEADER, EventStore
from calstore.models import Category


def deny_read(self):
    raise OSError('permission denied')


def write_raw(store, text):
    with open(store.path, 'w', encoding='utf-8') as f:
        f.write(text)


class TestInitialization:
    def test_creates_file_with_header(self, event_store):
        with open(event_store.path, encoding='utf-8') as f:
            assert f.read() == ','.join(EVENT_HEADER) + '\n'

    def test_missing_file_lists_empty(self, event_store):
        os.remove(event_store.path)
        assert event_store.list() == []

    def test_empty_file_lists_empty(self, event_store):
        write_raw(event_store, '')
        assert event_store.list() == []


class TestCreate:
    def test_ids_start_at_one(self, event_store, make_event):
        created = event_store.create(make_event(event_id=42))
        assert created.id == 1

    def test_ids_increase(self, event_store, make_event):
        ids = [event_store.create(make_event(title=f'e{i}')).id for i in range(4)]
        assert ids == [1, 2, 3, 4]

    def test_ids_unique_after_out_of_order_deletes(self, event_store, make_event):
        for i in range(5):
            event_store.create(make_event(title=f'e{i}'))
        event_store.delete(2)
        event_store.delete(1)
        event_store.delete(4)
        created = [event_store.create(make_event(title='new')).id for _ in range(2)]
        assert created == [6, 7]
        ids = [event.id for event in event_store.list()]
        assert len(ids) == len(set(ids))

    def test_concurrent_creates_never_share_an_id(self, event_store, make_event):
        results = []

        def worker(n):
            results.append(event_store.create(make_event(title=f'thread {n}')).id)

        threads = [threading.Thread(target=worker, args=(n,)) for n in range(20)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert sorted(results) == list(range(1, 21))
        assert len(event_store.list()) == 20

    def test_interleaved_store_instances_never_share_an_id(self, data_dir, make_event):
        first = EventStore(data_dir)
        second = EventStore(data_dir)
        assert first.list() == [] and second.list() == []

        a = first.create(make_event(title='a'))
        b = second.create(make_event(title='b'))
        c = first.create(make_event(title='c'))

        assert [a.id, b.id, c.id] == [1, 2, 3]
        assert [event.title for event in EventStore(data_dir).list()] == ['a', 'b', 'c']


class TestUpdate:
    def test_update_replaces_every_field(self, event_store, make_event):
        original = event_store.create(make_event())
        changed = make_event(
            title='Retro', user_id=2, description='Sprint 4',
            start='2026-02-01T14:00:00', end='2026-02-01T15:30:00',
            category=Category.PROFESSIONAL, event_id=999,
        )

        updated = event_store.update(original.id, changed)

        assert updated == replace(changed, id=original.id)
        assert event_store.find_by_id(original.id) == replace(changed, id=original.id)

    def test_update_unknown_id(self, event_store, make_event):
        event_store.create(make_event())
        before = event_store.list()
        with pytest.raises(NotFoundError):
            event_store.update(77, make_event(title='Ghost'))
        assert event_store.list() == before


class TestDelete:
    def test_delete_then_find(self, event_store, make_event):
        created = event_store.create(make_event())
        assert event_store.delete(created.id) is True
        assert event_store.find_by_id(created.id) is None

    def test_delete_unknown_id_leaves_store_alone(self, event_store, make_event):
        event_store.create(make_event())
        with open(event_store.path, encoding='utf-8') as f:
            before = f.read()
        assert event_store.delete(55) is False
        with open(event_store.path, encoding='utf-8') as f:
            assert f.read() == before

    def test_delete_by_user(self, event_store, make_event):
        event_store.create(make_event(user_id=1))
        event_store.create(make_event(user_id=2))
        event_store.create(make_event(user_id=1))
        assert event_store.delete_by_user(1) == 2
        assert [event.user_id for event in event_store.list()] == [2]


class TestQueries:
    def test_find_by_user_keeps_insertion_order(self, event_store, make_event):
        for title, user in [('a', 1), ('b', 2), ('c', 1), ('d', 2), ('e', 1)]:
            event_store.create(make_event(title=title, user_id=user))
        assert [event.title for event in event_store.find_by_user(1)] == ['a', 'c', 'e']
        assert event_store.ids_by_user(2) == [2, 4]

    def test_find_by_category(self, event_store, make_event):
        event_store.create(make_event(title='run', category=Category.HEALTH))
        event_store.create(make_event(title='tax', category=Category.FINANCE))
        found = event_store.find_by_category(Category.HEALTH)
        assert [event.title for event in found] == ['run']


class TestPersistence:
    def test_round_trip_through_a_new_instance(self, data_dir, event_store, make_event):
        originals = [
            event_store.create(make_event(title='Lunch, with Sam', description='says "hi"')),
            event_store.create(make_event(title='Gym', category=Category.HEALTH, user_id=3)),
            event_store.create(make_event(title='Exam', category=Category.EDUCATION,
                                          start='2026-06-01T09:00:00', end='2026-06-01T12:00:00')),
        ]
        assert EventStore(data_dir).list() == originals

    def test_malformed_rows_are_skipped(self, event_store):
        write_raw(event_store, '\n'.join([
            ','.join(EVENT_HEADER),
            '1,1,Good,,2026-01-01T09:00:00,2026-01-01T10:00:00,WORKSHOP',
            'x,1,Bad id,,2026-01-01T09:00:00,2026-01-01T10:00:00,PERSONAL',
            '2,1,Bad date,,not-a-date,2026-01-01T10:00:00,PERSONAL',
            '3,1,Short row',
            '4,1,Fine,,2026-01-02,2026-01-02T10:00,',
            '',
        ]))
        events = event_store.list()
        assert [event.id for event in events] == [4]
        assert events[0].start == datetime(2026, 1, 2, 0, 0)
        assert events[0].category is Category.PERSONAL

    def test_no_temporary_files_left_behind(self, data_dir, event_store, make_event):
        event_store.create(make_event())
        event_store.create(make_event())
        assert [name for name in os.listdir(data_dir) if name.endswith('.tmp')] == []

    def test_write_failure_raises(self, event_store, make_event, monkeypatch):
        def broken_replace(src, dst):
            raise PermissionError('read-only filesystem')

        monkeypatch.setattr(os, 'replace', broken_replace)
        with pytest.raises(StorageError):
            event_store.create(make_event())
        monkeypatch.undo()
        assert event_store.list() == []


class TestReadFailures:
    def test_lenient_read_treats_store_as_empty(self, event_store, make_event, monkeypatch):
        event_store.create(make_event())
        event_store.reload()
        monkeypatch.setattr(EventStore, '_read_file', deny_read)
        assert event_store.list() == []

    def test_write_after_failed_read_does_not_clobber_file(self, event_store, make_event, monkeypatch):
        event_store.create(make_event())
        event_store.reload()
        monkeypatch.setattr(EventStore, '_read_file', deny_read)
        assert event_store.list() == []
        with pytest.raises(StorageError):
            event_store.create(make_event(title='Second'))
        monkeypatch.undo()
        event_store.reload()
        assert [event.title for event in event_store.list()] == ['Standup']

    def test_strict_reads_raise(self, data_dir, make_event, monkeypatch):
        store = EventStore(data_dir, strict_reads=True)
        store.create(make_event())
        store.reload()
        monkeypatch.setattr(EventStore, '_read_file', deny_read)
        with pytest.raises(StorageError):
            store.list()
