# calstore/event_store.py - Event Store
import logging

from .csv_table import CsvTable
from .errors import NotFoundError
from .models import Category, Event, format_timestamp, parse_int, parse_timestamp

logger = logging.getLogger(__name__)

EVENTS_FILE = 'events.csv'
EVENT_HEADER = ('id', 'userId', 'title', 'description', 'startDateTime', 'endDateTime', 'category')


class EventStore(CsvTable):
    """Base events, one row per event in events.csv"""

    filename = EVENTS_FILE
    header = EVENT_HEADER

    def parse_row(self, row):
        return Event(
            id=parse_int(row[0], 'id'),
            user_id=parse_int(row[1], 'userId'),
            title=row[2],
            description=row[3],
            start=parse_timestamp(row[4], 'startDateTime'),
            end=parse_timestamp(row[5], 'endDateTime'),
            category=Category.parse(row[6] if len(row) > 6 else ''),
        )

    def format_row(self, event):
        return [
            str(event.id),
            str(event.user_id),
            event.title,
            event.description,
            format_timestamp(event.start),
            format_timestamp(event.end),
            event.category.code,
        ]

    def record_key(self, event):
        return event.id

    def list(self):
        return self.all()

    def find_by_id(self, event_id):
        return self.get(event_id)

    def find_by_user(self, user_id):
        return [event for event in self.all() if event.user_id == user_id]

    def find_by_category(self, category):
        return [event for event in self.all() if event.category is category]

    def ids_by_user(self, user_id):
        return [event.id for event in self.find_by_user(user_id)]

    def create(self, event):
        """Store a new event under a freshly allocated id; any id on `event` is ignored"""
        with self._lock:
            created = self._put(event.with_id(self.next_id()))
        logger.info(f"Created event {created.id} for user {created.user_id}")
        return created

    def update(self, event_id, event):
        """Replace every field of the stored event; raises NotFoundError"""
        with self._lock:
            if self.get(event_id) is None:
                raise NotFoundError(f"Event {event_id} not found")
            updated = self._put(event.with_id(event_id))
        logger.info(f"Updated event {event_id}")
        return updated

    def delete(self, event_id):
        removed = self._remove([event_id]) > 0
        if removed:
            logger.info(f"Deleted event {event_id}")
        return removed

    def delete_by_user(self, user_id):
        count = self._remove(self.ids_by_user(user_id))
        logger.info(f"Deleted {count} events of user {user_id}")
        return count
