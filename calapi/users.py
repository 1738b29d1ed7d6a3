# calapi/users.py - Users API Blueprint
from dataclasses import replace
from flask import Blueprint, request
from calstore.errors import ConflictError, NotFoundError, ValidationError
from calstore.models import User
from calapi.responses import calendar, fail, json_body, ok

users_bp = Blueprint('users', __name__)


@users_bp.route('/users', methods=['GET'])
def get_users():
    """Get all users (passwords are never returned)"""
    users = calendar().users.list()
    return ok([user.to_dict() for user in users])


@users_bp.route('/users/register', methods=['POST'])
def register_user():
    try:
        user = calendar().users.register(User.from_dict(json_body()))
    except ValidationError as e:
        return fail(e.message, 400, e.errors)
    except ConflictError as e:
        return fail(str(e), 409)
    return ok(user.to_dict(), 'User registered successfully', 201)


@users_bp.route('/users/login', methods=['POST'])
def login_user():
    data = json_body()
    email = data.get('email')
    password = data.get('password')
    if not email or not password:
        return fail('Email and password are required')

    user = calendar().users.authenticate(email, password)
    if user is None:
        return fail('Invalid email or password', 401)
    return ok(user.to_dict(), 'Login successful')


@users_bp.route('/users/check-email', methods=['GET'])
def check_email():
    email = request.args.get('email', '')
    return ok({'exists': calendar().users.email_exists(email)})


@users_bp.route('/users/<int:user_id>', methods=['PUT'])
def update_user(user_id):
    """Update a user; an omitted password keeps the current one"""
    users = calendar().users
    existing = users.get(user_id)
    if existing is None:
        return fail('User not found', 404)

    data = json_body()
    try:
        user = User.from_dict({**data, 'password': data.get('password') or existing.password})
        if not data.get('name'):
            user = replace(user, name=existing.name)
        updated = users.update(user_id, user)
    except ValidationError as e:
        return fail(e.message, 400, e.errors)
    except ConflictError as e:
        return fail(str(e), 409)
    except NotFoundError:
        return fail('User not found', 404)
    return ok(updated.to_dict(), 'User updated successfully')


@users_bp.route('/users/<int:user_id>', methods=['DELETE'])
def delete_user(user_id):
    """Delete a user and all of their events and recurrence rules"""
    if not calendar().delete_user(user_id):
        return fail('User not found', 404)
    return ok(None, 'User and all associated events and recurrent rules deleted successfully')
