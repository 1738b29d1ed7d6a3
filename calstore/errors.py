# calstore/errors.py - Storage and validation errors


class CalendarError(Exception):
    """Base class for errors raised by the calendar stores"""


class ValidationError(CalendarError):
    """A required field is missing or malformed"""

    def __init__(self, message, errors=None):
        super().__init__(message)
        self.message = message
        self.errors = errors or [message]


class NotFoundError(CalendarError):
    """No stored record has the requested id"""


class ConflictError(CalendarError):
    """The record clashes with an existing one (e.g. duplicate email)"""


class AuthenticationError(CalendarError):
    """Credentials did not match a stored user"""


class StorageError(CalendarError):
    """The backing file could not be read or written"""
