# calapi/backup.py - Backup API Blueprint
import os
from flask import Blueprint
from calstore.errors import NotFoundError, ValidationError
from calapi.responses import calendar, fail, json_body, ok

backup_bp = Blueprint('backup', __name__)


@backup_bp.route('/backup/create', methods=['POST'])
def create_backup():
    data = json_body()
    try:
        path = calendar().backups.create(data.get('backupName'))
    except ValidationError as e:
        return fail(e.message, 400, e.errors)
    return ok({'backupName': os.path.basename(path), 'backupPath': path},
              'Backup created successfully', 201)


@backup_bp.route('/backup/restore', methods=['POST'])
def restore_backup():
    """Restore a backup, replacing current data unless append is true"""
    data = json_body()
    append = data.get('append', False)
    if not isinstance(append, bool):
        return fail('append must be a boolean')
    try:
        restored = calendar().backups.restore(data.get('backupName'), append=append)
    except ValidationError as e:
        return fail(e.message, 400, e.errors)
    except NotFoundError as e:
        return fail(str(e), 404)
    return ok(restored, 'Backup restored successfully')


@backup_bp.route('/backup/list', methods=['GET'])
def list_backups():
    return ok(calendar().backups.list())


@backup_bp.route('/backup/<backup_name>', methods=['DELETE'])
def delete_backup(backup_name):
    try:
        deleted = calendar().backups.delete(backup_name)
    except ValidationError as e:
        return fail(e.message, 400, e.errors)
    if not deleted:
        return fail('Backup file not found', 404)
    return ok(None, 'Backup deleted successfully')
