# calapi/events.py - Events API Blueprint
from flask import Blueprint, request
from calstore.errors import NotFoundError, ValidationError
from calstore.models import Category, Event, RecurrenceRule
from calapi.responses import calendar, fail, json_body, ok

events_bp = Blueprint('events', __name__)


@events_bp.route('/events', methods=['GET'])
def get_events():
    """Get all base events"""
    events = calendar().events.list()
    return ok([event.to_dict() for event in events])


@events_bp.route('/events/occurrences', methods=['GET'])
def get_events_with_occurrences():
    """Get base events plus the occurrences generated from their recurrence rules"""
    user_id = request.args.get('userId', type=int)
    if 'userId' in request.args and user_id is None:
        return fail('userId must be an integer')
    listing = calendar().list_with_occurrences(user_id)
    return ok([occurrence.to_dict() for occurrence in listing])


@events_bp.route('/events/user/<int:user_id>', methods=['GET'])
def get_events_by_user(user_id):
    events = calendar().events.find_by_user(user_id)
    return ok([event.to_dict() for event in events])


@events_bp.route('/events/category/<category>', methods=['GET'])
def get_events_by_category(category):
    try:
        wanted = Category.parse(category)
    except ValidationError as e:
        return fail(e.message, 400, e.errors)
    events = calendar().events.find_by_category(wanted)
    return ok([event.to_dict() for event in events])


@events_bp.route('/events/<int:event_id>', methods=['GET'])
def get_event(event_id):
    event = calendar().events.find_by_id(event_id)
    if event is None:
        return fail('Event not found', 404)
    return ok(event.to_dict())


@events_bp.route('/events', methods=['POST'])
def create_event():
    """Create a new event, plus its recurrence rule when one is given"""
    data = json_body()
    try:
        event = Event.from_dict(data)
        rule = None
        if data.get('recurrentInterval') is not None:
            rule = RecurrenceRule.from_dict(data, event_id=0)
    except ValidationError as e:
        return fail(e.message, 400, e.errors)

    created = calendar().create_event(event, rule)
    return ok(created.to_dict(), 'Event created successfully', 201)


@events_bp.route('/events/<int:event_id>', methods=['PUT'])
def update_event(event_id):
    """Replace every field of an event"""
    try:
        event = Event.from_dict(json_body())
        updated = calendar().events.update(event_id, event)
    except ValidationError as e:
        return fail(e.message, 400, e.errors)
    except NotFoundError:
        return fail('Event not found', 404)
    return ok(updated.to_dict(), 'Event updated successfully')


@events_bp.route('/events/<int:event_id>', methods=['DELETE'])
def delete_event(event_id):
    """Delete an event; its recurrence rule is left in place"""
    if not calendar().events.delete(event_id):
        return fail('Event not found', 404)
    return ok(None, 'Event deleted successfully')
