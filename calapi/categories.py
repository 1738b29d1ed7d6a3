# calapi/categories.py - Categories and Statistics API Blueprint
from flask import Blueprint, request
from calstore.models import Category
from calstore.statistics import category_counts
from calapi.responses import calendar, ok

categories_bp = Blueprint('categories', __name__)


@categories_bp.route('/categories', methods=['GET'])
def get_categories():
    """Get the fixed category list with display names and colors"""
    return ok([category.to_dict() for category in Category])


@categories_bp.route('/statistics/<int:user_id>', methods=['GET'])
def get_statistics(user_id):
    """Count a user's events per category"""
    include_occurrences = request.args.get('includeOccurrences', 'false').lower() in ('1', 'true', 'yes')
    service = calendar()
    if include_occurrences:
        items = service.list_with_occurrences(user_id)
    else:
        items = service.events.find_by_user(user_id)
    counts = category_counts(items)
    return ok({
        'userId': user_id,
        'total': sum(counts.values()),
        'categories': [
            {**category.to_dict(), 'count': counts[category]} for category in Category
        ],
    })
