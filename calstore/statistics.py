# calstore/statistics.py - Event statistics
from .models import Category, Occurrence


def category_counts(items):
    """Count events per category; every category is present, zero-filled"""
    counts = {category: 0 for category in Category}
    for item in items:
        event = item.event if isinstance(item, Occurrence) else item
        counts[event.category] += 1
    return counts
