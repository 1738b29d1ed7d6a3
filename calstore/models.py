# calstore/models.py - Calendar data model
"""
Records persisted by the CSV stores and the derived occurrences built from them.

JSON payloads use the camelCase field names the calendar clients send:
  Event:          id, userId, title, description, startDateTime, endDateTime, category
  RecurrenceRule: eventId, recurrentInterval, recurrentTimes, recurrentEndDate
  User:           id, name, email, password
"""
from dataclasses import dataclass, field, replace
from datetime import date, datetime
from enum import Enum
from typing import Optional

from .errors import ValidationError

TIMESTAMP_FORMAT = '%Y-%m-%dT%H:%M:%S'


class Category(Enum):
    PROFESSIONAL = ('PROFESSIONAL', 'Professional & Work', '#F44336')
    PERSONAL = ('PERSONAL', 'Personal & Lifestyle', '#FF9800')
    HEALTH = ('HEALTH', 'Health', '#FFEB3B')
    EDUCATION = ('EDUCATION', 'Education', '#4CAF50')
    SOCIAL = ('SOCIAL', 'Social & Entertainment', '#2196F3')
    FINANCE = ('FINANCE', 'Finance', '#3F51B5')
    HOLIDAY = ('HOLIDAY', 'Holiday & Events', '#9C27B0')

    def __init__(self, code, display_name, color):
        self.code = code
        self.display_name = display_name
        self.color = color

    @classmethod
    def parse(cls, value):
        """Case-insensitive lookup; blank means PERSONAL"""
        if value is None or not str(value).strip():
            return cls.PERSONAL
        code = str(value).strip().upper()
        for category in cls:
            if category.code == code:
                return category
        raise ValidationError(f"Unknown category: {value}")

    def to_dict(self):
        return {'id': self.code, 'name': self.display_name, 'color': self.color}


class Interval(Enum):
    NONE = 'None'
    DAILY = '1d'
    WEEKLY = '1w'
    MONTHLY = '1m'
    YEARLY = '1y'

    @classmethod
    def parse(cls, value):
        if value is None:
            return cls.NONE
        code = str(value).strip()
        if not code or code.lower() in ('none', 'null'):
            return cls.NONE
        for interval in cls:
            if interval.value == code.lower():
                return interval
        raise ValidationError(f"Unknown recurrence interval: {value}")


def parse_timestamp(value, field_name='timestamp'):
    """Parse YYYY-MM-DDTHH:mm[:ss]; a bare date is taken as midnight"""
    if isinstance(value, datetime):
        return value.replace(microsecond=0)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if value is None or not str(value).strip():
        raise ValidationError(f"{field_name} is required")
    text = str(value).strip()
    try:
        if 'T' not in text and ' ' not in text:
            return datetime.combine(date.fromisoformat(text), datetime.min.time())
        return datetime.fromisoformat(text).replace(microsecond=0, tzinfo=None)
    except ValueError:
        raise ValidationError(f"{field_name} is not a valid timestamp: {text}")


def format_timestamp(value):
    return value.strftime(TIMESTAMP_FORMAT)


def parse_optional_date(value, field_name='date'):
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    if not text or text.lower() == 'null':
        return None
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        raise ValidationError(f"{field_name} is not a valid date: {text}")


def parse_int(value, field_name):
    if isinstance(value, bool):
        raise ValidationError(f"{field_name} must be an integer")
    if isinstance(value, int):
        return value
    if value is None or not str(value).strip():
        raise ValidationError(f"{field_name} is required")
    try:
        return int(str(value).strip())
    except ValueError:
        raise ValidationError(f"{field_name} must be an integer")


def text_field(data, key, errors):
    """Return data[key] as a string ('' when absent); non-strings are recorded in errors"""
    value = data.get(key)
    if value is None:
        return ''
    if not isinstance(value, str):
        errors.append(f"{key} must be a string")
        return ''
    return value


@dataclass(frozen=True)
class Event:
    id: int
    user_id: int
    title: str
    description: str
    start: datetime
    end: datetime
    category: Category = Category.PERSONAL

    @classmethod
    def from_dict(cls, data):
        """Build an event from a JSON payload, collecting every field error"""
        errors = []

        def attempt(parser, *args):
            try:
                return parser(*args)
            except ValidationError as e:
                errors.extend(e.errors)
                return None

        title_ok = isinstance(data.get('title'), (str, type(None)))
        title = text_field(data, 'title', errors).strip()
        if title_ok and not title:
            errors.append('Event title is required')
        description = text_field(data, 'description', errors)
        user_id = attempt(parse_int, data.get('userId'), 'userId')
        start = attempt(parse_timestamp, data.get('startDateTime'), 'startDateTime')
        raw_end = data.get('endDateTime')
        if raw_end is None or not str(raw_end).strip():
            end = start
        else:
            end = attempt(parse_timestamp, raw_end, 'endDateTime')
        category = attempt(Category.parse, data.get('category'))
        if start and end and end < start:
            errors.append('endDateTime must not be before startDateTime')

        if errors:
            raise ValidationError(errors[0], errors)

        raw_id = data.get('id')
        return cls(
            id=raw_id if isinstance(raw_id, int) and not isinstance(raw_id, bool) else 0,
            user_id=user_id,
            title=title,
            description=description,
            start=start,
            end=end,
            category=category,
        )

    def with_id(self, event_id):
        return replace(self, id=event_id)

    def to_dict(self):
        return {
            'id': self.id,
            'userId': self.user_id,
            'title': self.title,
            'description': self.description,
            'startDateTime': format_timestamp(self.start),
            'endDateTime': format_timestamp(self.end),
            'category': self.category.code,
        }


@dataclass(frozen=True)
class RecurrenceRule:
    event_id: int
    interval: Interval
    times: int = 1
    end_date: Optional[date] = None

    @property
    def repeats(self):
        return self.interval is not Interval.NONE and self.times > 1

    @classmethod
    def from_dict(cls, data, event_id=None):
        interval = Interval.parse(data.get('recurrentInterval'))
        raw_times = data.get('recurrentTimes')
        if raw_times is None or str(raw_times).strip() == '':
            times = 1
        else:
            times = parse_int(raw_times, 'recurrentTimes')
        if times < 1:
            raise ValidationError('recurrentTimes must be at least 1')
        if event_id is None:
            event_id = parse_int(data.get('eventId'), 'eventId')
        return cls(
            event_id=event_id,
            interval=interval,
            times=times,
            end_date=parse_optional_date(data.get('recurrentEndDate'), 'recurrentEndDate'),
        )

    def to_dict(self):
        return {
            'eventId': self.event_id,
            'recurrentInterval': self.interval.value,
            'recurrentTimes': self.times,
            'recurrentEndDate': self.end_date.isoformat() if self.end_date else None,
        }


@dataclass(frozen=True)
class Occurrence:
    """An event as it appears in a listing, base (index 0) or generated"""
    event: Event
    occurrence_index: int = 0

    @property
    def base_event_id(self):
        return self.event.id

    @property
    def key(self):
        return (self.event.id, self.occurrence_index)

    @property
    def start(self):
        return self.event.start

    @property
    def end(self):
        return self.event.end

    def to_dict(self):
        data = self.event.to_dict()
        data['baseEventId'] = self.base_event_id
        data['occurrenceIndex'] = self.occurrence_index
        data['isOccurrence'] = self.occurrence_index > 0
        data['key'] = f"{self.base_event_id}:{self.occurrence_index}"
        return data


@dataclass(frozen=True)
class User:
    id: int
    name: str
    email: str
    password: str = field(repr=False, default='')

    @classmethod
    def from_dict(cls, data):
        errors = []
        name = text_field(data, 'name', errors).strip()
        email = text_field(data, 'email', errors).strip()
        password = text_field(data, 'password', errors)
        if not email and isinstance(data.get('email'), (str, type(None))):
            errors.append('Email is required')
        if not password and isinstance(data.get('password'), (str, type(None))):
            errors.append('Password is required')
        if errors:
            raise ValidationError(errors[0], errors)
        return cls(id=0, name=name, email=email, password=password)

    def to_dict(self):
        return {'id': self.id, 'name': self.name, 'email': self.email}
