# calapi/responses.py - JSON envelope helpers
from flask import current_app, jsonify, request


def calendar():
    """The CalendarService attached to the running app"""
    return current_app.extensions['calendar']


def ok(data=None, message='OK', status=200):
    return jsonify({'success': True, 'message': message, 'data': data}), status


def fail(message, status=400, errors=None):
    return jsonify({'success': False, 'message': message, 'errors': errors or [message]}), status


def json_body():
    """Request JSON as a dict; anything else counts as an empty body"""
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}
