# calstore/csv_table.py - CSV Data Storage Management
"""
Shared machinery for the CSV-backed stores.

Each table keeps its records in an insertion-ordered dict keyed by integer id,
loaded lazily from disk and re-read whenever the file on disk has been
replaced by someone else. Every mutation runs under the table's lock, builds a
new dict, writes it to a temporary file next to the target and renames it into
place, then swaps the in-memory copy.
"""

import contextlib
import csv
import logging
import os
import tempfile
import threading

from .errors import StorageError, ValidationError

logger = logging.getLogger(__name__)


def ensure_data_directory(data_dir):
    """Ensure the data directory exists"""
    try:
        os.makedirs(data_dir, exist_ok=True)
    except OSError as e:
        raise StorageError(f"Cannot create data directory {data_dir}: {e}") from e


def write_atomically(path, fill):
    """
    Write a file by calling fill(f) on a temporary file in the same directory,
    then renaming it over `path`. On failure the temporary file is removed and
    `path` is left untouched.
    """
    directory = os.path.dirname(path) or '.'
    tmp_path = None
    try:
        fd, tmp_path = tempfile.mkstemp(
            prefix=f".{os.path.basename(path)}.", suffix='.tmp', dir=directory
        )
        with os.fdopen(fd, 'w', newline='', encoding='utf-8') as f:
            fill(f)
        os.replace(tmp_path, path)
    except OSError as e:
        if tmp_path:
            with contextlib.suppress(OSError):
                os.remove(tmp_path)
        raise StorageError(f"Cannot write {path}: {e}") from e


class CsvTable:
    filename = ''
    header = ()

    def __init__(self, data_dir, strict_reads=False):
        self.path = os.path.join(data_dir, self.filename)
        self.strict_reads = strict_reads
        self._lock = threading.RLock()
        self._records = None
        self._read_failed = False
        self._loaded_signature = None
        ensure_data_directory(data_dir)
        if not os.path.exists(self.path):
            self._write_rows([])
            logger.info(f"Initialized {self.path}")

    # Row codec, provided by each store
    def parse_row(self, row):
        raise NotImplementedError

    def format_row(self, record):
        raise NotImplementedError

    def record_key(self, record):
        raise NotImplementedError

    # Reading

    def _read_file(self):
        records = {}
        with open(self.path, 'r', newline='', encoding='utf-8-sig') as f:
            reader = csv.reader(f)
            next(reader, None)  # header
            for line_no, row in enumerate(reader, start=2):
                if not any(cell.strip() for cell in row):
                    continue
                try:
                    record = self.parse_row(row)
                except (ValidationError, IndexError) as e:
                    logger.warning(f"Skipping malformed row {line_no} in {self.path}: {e}")
                    continue
                key = self.record_key(record)
                if key in records:
                    logger.warning(f"Duplicate id {key} at row {line_no} in {self.path}; keeping the later row")
                records[key] = record
        return records

    def _signature(self):
        try:
            st = os.stat(self.path)
        except OSError:
            return None
        return (st.st_ino, st.st_mtime_ns, st.st_size)

    def _load(self, strict):
        self._loaded_signature = self._signature()
        try:
            if not os.path.exists(self.path) or os.path.getsize(self.path) == 0:
                self._read_failed = False
                return {}
            records = self._read_file()
        except (OSError, UnicodeDecodeError, csv.Error) as e:
            if strict:
                raise StorageError(f"Cannot read {self.path}: {e}") from e
            logger.error(f"Error loading {self.path}, treating it as empty: {e}")
            self._read_failed = True
            return {}
        self._read_failed = False
        return records

    def _stale(self):
        # another writer (process or store instance) replaced the file
        return (self._records is None or self._read_failed
                or self._signature() != self._loaded_signature)

    def _current(self):
        with self._lock:
            if self._stale():
                self._records = self._load(self.strict_reads)
            return self._records

    def _current_for_write(self):
        # never rewrite a file we failed to read
        if self._stale():
            self._records = self._load(strict=True)
        return self._records

    def all(self):
        return list(self._current().values())

    def get(self, key):
        return self._current().get(key)

    def reload(self):
        """Drop the in-memory copy; the next access reads the file again"""
        with self._lock:
            self._records = None

    # Writing

    def _write_rows(self, rows):
        def fill(f):
            writer = csv.writer(f, lineterminator='\n')
            writer.writerow(self.header)
            writer.writerows(rows)
        write_atomically(self.path, fill)

    def _commit(self, records):
        self._write_rows(self.format_row(record) for record in records.values())
        self._records = records
        self._loaded_signature = self._signature()

    def next_id(self):
        with self._lock:
            return max(self._current_for_write(), default=0) + 1

    def _put(self, record):
        with self._lock:
            records = dict(self._current_for_write())
            records[self.record_key(record)] = record
            self._commit(records)
            return record

    def _remove(self, keys):
        with self._lock:
            current = self._current_for_write()
            doomed = set(keys) & current.keys()
            if not doomed:
                return 0
            self._commit({k: v for k, v in current.items() if k not in doomed})
            return len(doomed)

    # Bulk import/export, used by backups

    def export_rows(self):
        return [self.format_row(record) for record in self.all()]

    def parse_rows(self, rows):
        records = []
        for row in rows:
            try:
                records.append(self.parse_row(row))
            except (ValidationError, IndexError) as e:
                logger.warning(f"Skipping malformed {self.filename} row {row}: {e}")
        return records

    def replace_all(self, records):
        with self._lock:
            replacement = {self.record_key(r): r for r in records}
            self._commit(replacement)
            return len(replacement)

    def merge(self, records):
        """Add records whose ids are not taken yet; returns how many were added"""
        with self._lock:
            merged = dict(self._current_for_write())
            added = 0
            for record in records:
                key = self.record_key(record)
                if key in merged:
                    logger.warning(f"Id {key} already present in {self.filename}; skipping restored row")
                    continue
                merged[key] = record
                added += 1
            if added:
                self._commit(merged)
            return added
