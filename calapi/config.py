# calapi/config.py - Application settings
import os
from dotenv import load_dotenv

load_dotenv()

_TRUE = ('1', 'true', 'yes', 'on')


def _flag(name, default=False):
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in _TRUE


def load_settings():
    """Read settings from the environment (and .env, if present)"""
    data_dir = os.getenv('CAL_DATA_DIR', './data')
    return {
        'DATA_DIR': data_dir,
        'BACKUP_DIR': os.getenv('CAL_BACKUP_DIR', os.path.join(data_dir, 'backups')),
        'LOG_LEVEL': os.getenv('LOG_LEVEL', 'INFO'),
        'LOG_FORMAT': os.getenv('LOG_FORMAT', 'text'),
        'STRICT_READS': _flag('STRICT_READS'),
        'HONOR_RECURRENCE_END_DATE': _flag('HONOR_RECURRENCE_END_DATE'),
        'CORS_ORIGINS': os.getenv('CORS_ORIGINS', '*'),
    }
