"""Shared fixtures for the calendar tests."""
from datetime import datetime

import pytest

from app import create_app
from calstore.event_store import EventStore
from calstore.models import Category, Event
from calstore.rule_store import RuleStore
from calstore.service import CalendarService
from calstore.user_store import UserStore


@pytest.fixture
def data_dir(tmp_path):
    """Empty data directory for one test."""
    path = tmp_path / 'data'
    path.mkdir()
    return str(path)


@pytest.fixture
def event_store(data_dir):
    return EventStore(data_dir)


@pytest.fixture
def rule_store(data_dir):
    return RuleStore(data_dir)


@pytest.fixture
def user_store(data_dir):
    return UserStore(data_dir)


@pytest.fixture
def service(data_dir, tmp_path):
    return CalendarService(data_dir, backup_dir=str(tmp_path / 'backups'))


@pytest.fixture
def make_event():
    """Factory for events with sensible defaults."""
    def _make(title='Standup', user_id=1, start='2026-01-15T10:00:00',
              end='2026-01-15T11:00:00', category=Category.PERSONAL,
              description='', event_id=0):
        return Event(
            id=event_id,
            user_id=user_id,
            title=title,
            description=description,
            start=datetime.fromisoformat(start),
            end=datetime.fromisoformat(end),
            category=category,
        )
    return _make


@pytest.fixture
def app(data_dir):
    app = create_app({'TESTING': True, 'DATA_DIR': data_dir})
    yield app


@pytest.fixture
def client(app):
    return app.test_client()
