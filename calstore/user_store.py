# calstore/user_store.py - User Store
import logging
from dataclasses import replace

from .csv_table import CsvTable
from .errors import ConflictError, NotFoundError
from .models import User, parse_int

logger = logging.getLogger(__name__)

USERS_FILE = 'users.csv'
USER_HEADER = ('id', 'name', 'email', 'password')


class UserStore(CsvTable):
    """Registered users. Passwords are kept and compared in clear text."""

    filename = USERS_FILE
    header = USER_HEADER

    def parse_row(self, row):
        return User(id=parse_int(row[0], 'id'), name=row[1], email=row[2], password=row[3])

    def format_row(self, user):
        return [str(user.id), user.name, user.email, user.password]

    def record_key(self, user):
        return user.id

    def list(self):
        return self.all()

    def find_by_email(self, email):
        if not email:
            return None
        for user in self.all():
            if user.email == email:
                return user
        return None

    def email_exists(self, email):
        return self.find_by_email(email) is not None

    def register(self, user):
        with self._lock:
            if self.email_exists(user.email):
                raise ConflictError('Email already exists')
            created = self._put(replace(user, id=self.next_id()))
        logger.info(f"Registered user {created.id}")
        return created

    def authenticate(self, email, password):
        user = self.find_by_email(email)
        if user is None or user.password != password:
            return None
        return user

    def update(self, user_id, user):
        with self._lock:
            existing = self.get(user_id)
            if existing is None:
                raise NotFoundError(f"User {user_id} not found")
            if user.email != existing.email and self.email_exists(user.email):
                raise ConflictError('Email already exists')
            updated = self._put(replace(user, id=user_id))
        logger.info(f"Updated user {user_id}")
        return updated

    def delete(self, user_id):
        removed = self._remove([user_id]) > 0
        if removed:
            logger.info(f"Deleted user {user_id}")
        return removed
