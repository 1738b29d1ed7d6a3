# calstore/backup.py - Backup and restore of the calendar data
"""
A backup is one CSV-like text file holding every table in its own section:

    #BACKUP_VERSION=1
    #EVENTS
    id,userId,title,description,startDateTime,endDateTime,category
    ...
    #RECURRENTS
    eventId,recurrentInterval,recurrentTimes,recurrentEndDate
    ...
    #USERS
    id,name,email,password
    ...
"""
import csv
import io
import logging
import os
import time

from .csv_table import ensure_data_directory, write_atomically
from .errors import NotFoundError, StorageError, ValidationError

logger = logging.getLogger(__name__)

BACKUP_VERSION = 1
BACKUP_SUFFIX = '.csv'


def normalize_backup_name(name):
    """Strip directories and add the .csv suffix; blank names get a timestamped default"""
    if name is not None and not isinstance(name, str):
        raise ValidationError('Backup name must be a string')
    if name is None or not name.strip():
        name = f"backup_{int(time.time() * 1000)}"
    name = os.path.basename(name.strip().replace('\\', '/'))
    if not name or name in ('.', '..'):
        raise ValidationError('Invalid backup name')
    if not name.endswith(BACKUP_SUFFIX):
        name += BACKUP_SUFFIX
    return name


class BackupManager:
    def __init__(self, backup_dir, events, rules, users):
        self.backup_dir = backup_dir
        self.sections = [
            ('EVENTS', events),
            ('RECURRENTS', rules),
            ('USERS', users),
        ]
        ensure_data_directory(backup_dir)

    def _path(self, name):
        return os.path.join(self.backup_dir, name)

    def create(self, name=None):
        """Write a backup of every table and return its path"""
        name = normalize_backup_name(name)
        path = self._path(name)

        contents = [(section, table.header, table.export_rows()) for section, table in self.sections]

        def fill(f):
            f.write(f"#BACKUP_VERSION={BACKUP_VERSION}\n")
            writer = csv.writer(f, lineterminator='\n')
            for section, header, rows in contents:
                f.write(f"#{section}\n")
                writer.writerow(header)
                writer.writerows(rows)

        write_atomically(path, fill)
        logger.info(f"Created backup {path}")
        return path

    def _read_sections(self, path):
        known = {section for section, _ in self.sections}
        lines = {section: [] for section in known}
        current = None
        skip_header = False
        with open(path, 'r', newline='', encoding='utf-8-sig') as f:
            for raw in f:
                line = raw.strip()
                if not line or line.startswith('#BACKUP_VERSION'):
                    continue
                if line.startswith('#'):
                    marker = line[1:]
                    current = marker if marker in known else None
                    skip_header = current is not None
                    continue
                if current is None:
                    continue
                if skip_header:
                    skip_header = False
                    continue
                lines[current].append(line)
        return {
            section: list(csv.reader(io.StringIO('\n'.join(body))))
            for section, body in lines.items()
        }

    def restore(self, name, append=False):
        """
        Load a backup into the stores.

        Replace mode swaps the contents of every table. Append mode keeps the
        current records and adds restored ones whose ids are still free.
        Returns the number of records written per section.
        """
        if name is None or (isinstance(name, str) and not name.strip()):
            raise ValidationError('Backup name is required')
        name = normalize_backup_name(name)
        path = self._path(name)
        if not os.path.isfile(path):
            raise NotFoundError(f"Backup file not found: {name}")
        try:
            sections = self._read_sections(path)
        except (OSError, UnicodeDecodeError, csv.Error) as e:
            raise StorageError(f"Cannot read backup {name}: {e}") from e

        if append:
            logger.warning(f"Restoring {name} in append mode; colliding ids are skipped")
        restored = {}
        for section, table in self.sections:
            records = table.parse_rows(sections[section])
            if append:
                restored[section.lower()] = table.merge(records)
            else:
                restored[section.lower()] = table.replace_all(records)
        logger.info(f"Restored backup {name}: {restored}")
        return restored

    def list(self):
        if not os.path.isdir(self.backup_dir):
            return []
        backups = []
        with os.scandir(self.backup_dir) as it:
            entries = sorted(it, key=lambda e: e.name)
        for entry in entries:
            if entry.is_file() and entry.name.endswith(BACKUP_SUFFIX):
                stat = entry.stat()
                backups.append({
                    'name': entry.name,
                    'size': stat.st_size,
                    'lastModified': int(stat.st_mtime * 1000),
                })
        return backups

    def delete(self, name):
        path = self._path(normalize_backup_name(name))
        if not os.path.isfile(path):
            return False
        try:
            os.remove(path)
        except OSError as e:
            raise StorageError(f"Cannot delete backup {name}: {e}") from e
        logger.info(f"Deleted backup {path}")
        return True
