import calendar
from flask import jsonify

# Mirrored in tracker/stats.py for the client, which must not import server modules
SLEEP_HOURS = (4, 4.5, 5, 5.5, 6, 6.5, 7, 7.5, 8)

def days_in_month(year, month):
    return calendar.monthrange(year, month)[1]

def error_response(message, status=400):
    return jsonify({'message': message}), status

def parse_day(key, year, month):
    """Turn a completion/sleep map key into a day number within the month.

    JSON object keys always arrive as strings, so '7' and 7 are both accepted.
    Returns None for keys that are not integers or fall outside the month.
    """
    if isinstance(key, bool):
        return None
    try:
        day = int(key)
    except (TypeError, ValueError):
        return None
    if str(day) != str(key).strip():
        return None
    if day < 1 or day > days_in_month(year, month):
        return None
    return day
