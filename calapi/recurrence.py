# calapi/recurrence.py - Recurrence Rules API Blueprint
from flask import Blueprint
from calstore.errors import NotFoundError, ValidationError
from calstore.models import RecurrenceRule
from calstore.recurrence import describe
from calapi.responses import calendar, fail, json_body, ok

recurrence_bp = Blueprint('recurrence', __name__)


def rule_payload(rule):
    payload = rule.to_dict()
    payload['recurrenceText'] = describe(rule)
    return payload


@recurrence_bp.route('/recurrent', methods=['GET'])
def get_rules():
    """Get all recurrence rules"""
    rules = calendar().rules.list()
    return ok([rule_payload(rule) for rule in rules.values()])


@recurrence_bp.route('/recurrent/<int:event_id>', methods=['GET'])
def get_rule(event_id):
    rule = calendar().rules.get(event_id)
    if rule is None:
        return fail('Recurrence rule not found', 404)
    return ok(rule_payload(rule))


@recurrence_bp.route('/recurrent', methods=['POST'])
def create_rule():
    """Create the rule of the event named by eventId in the body"""
    data = json_body()
    if data.get('recurrentInterval') is None:
        return fail('recurrentInterval is required')
    try:
        rule = RecurrenceRule.from_dict(data)
        stored = calendar().set_rule(rule.event_id, rule)
    except ValidationError as e:
        return fail(e.message, 400, e.errors)
    except NotFoundError:
        return fail('Event not found', 404)

    if stored is None:
        return ok(None, 'Rule does not repeat; nothing was stored')
    return ok(rule_payload(stored), 'Recurrence rule created successfully', 201)


@recurrence_bp.route('/recurrent/<int:event_id>', methods=['PUT'])
def set_rule(event_id):
    """
    Create or replace the rule of an event.

    A rule that does not repeat is accepted but not stored; any existing rule
    stays as it is (delete it explicitly to stop repetition).
    """
    try:
        rule = RecurrenceRule.from_dict(json_body(), event_id=event_id)
        stored = calendar().set_rule(event_id, rule)
    except ValidationError as e:
        return fail(e.message, 400, e.errors)
    except NotFoundError:
        return fail('Event not found', 404)

    if stored is None:
        return ok(None, 'Rule does not repeat; nothing was stored')
    return ok(rule_payload(stored), 'Recurrence rule saved successfully')


@recurrence_bp.route('/recurrent/<int:event_id>', methods=['DELETE'])
def delete_rule(event_id):
    if not calendar().rules.delete(event_id):
        return fail('Recurrence rule not found', 404)
    return ok(None, 'Recurrence rule deleted successfully')
