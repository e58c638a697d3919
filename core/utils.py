"""
Utility functions for Sentinel
"""
import math


def get_client_ip(request):
    """Get client IP address from request."""
    if request is None:
        return None
    x_forwarded_for = request.META.get('HTTP_X_FORWARDED_FOR')
    if x_forwarded_for:
        ip = x_forwarded_for.split(',')[0].strip()
    else:
        ip = request.META.get('REMOTE_ADDR')
    return ip or None


def get_user_agent(request):
    if request is None:
        return None
    return request.META.get('HTTP_USER_AGENT', '') or None


def parse_positive_int(value, default, maximum=None):
    """Parse a query-string integer, falling back to default on bad input"""
    try:
        number = int(value)
    except (TypeError, ValueError):
        return default
    if number < 1:
        return default
    if maximum is not None:
        number = min(number, maximum)
    return number


def total_pages(total, limit):
    if limit <= 0:
        return 0
    return math.ceil(total / limit)
