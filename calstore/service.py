# calstore/service.py - Calendar operations spanning several stores
import logging
import os

from .backup import BackupManager
from .errors import NotFoundError
from .event_store import EventStore
from .recurrence import expand_all
from .rule_store import RuleStore
from .user_store import UserStore

logger = logging.getLogger(__name__)


class CalendarService:
    """
    Owns one store per record type and the operations that join them.

    Writes to different stores are independent: creating an event and saving
    its rule are two separate commits, and deleting an event leaves its rule
    in place. Because ids are reused once the highest one is deleted, a new
    event first drops any rule still filed under its id.
    """

    def __init__(self, data_dir, backup_dir=None, strict_reads=False, honor_end_date=False):
        self.events = EventStore(data_dir, strict_reads=strict_reads)
        self.rules = RuleStore(data_dir, strict_reads=strict_reads)
        self.users = UserStore(data_dir, strict_reads=strict_reads)
        self.backups = BackupManager(
            backup_dir or os.path.join(data_dir, 'backups'),
            self.events, self.rules, self.users,
        )
        self.honor_end_date = honor_end_date

    def create_event(self, event, rule=None):
        created = self.events.create(event)
        if self.rules.delete(created.id):
            logger.info(f"Dropped stale recurrence rule left under reused id {created.id}")
        if rule is not None:
            self.rules.upsert(created.id, rule)
        return created

    def set_rule(self, event_id, rule):
        if self.events.find_by_id(event_id) is None:
            raise NotFoundError(f"Event {event_id} not found")
        return self.rules.upsert(event_id, rule)

    def list_with_occurrences(self, user_id=None):
        """Base events plus generated occurrences, optionally for one user"""
        events = self.events.list() if user_id is None else self.events.find_by_user(user_id)
        return expand_all(events, self.rules.list(), honor_end_date=self.honor_end_date)

    def delete_user(self, user_id):
        """Remove a user together with their events and those events' rules"""
        if self.users.get(user_id) is None:
            return False
        event_ids = self.events.ids_by_user(user_id)
        if event_ids:
            self.rules.delete_many(event_ids)
        self.events.delete_by_user(user_id)
        removed = self.users.delete(user_id)
        logger.info(f"Deleted user {user_id} with {len(event_ids)} events")
        return removed
