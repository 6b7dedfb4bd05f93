# --- app/utils/api.py ---
from datetime import datetime, timezone
from flask import jsonify


def _api_time():
    return datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S")


def iso_utc(dt):
    """ISO-8601 with a Z suffix; naive datetimes are stored as UTC."""
    if dt is None:
        return None
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc).replace(tzinfo=None)
    return dt.isoformat() + "Z"


def api_ok(message, data=None):
    return {
        "status": True,
        "message": message,
        "data": {
            **(data or {}),
            "API_TIME_HUMAN": _api_time(),
        },
    }


def api_error(message, data=None):
    return {
        "status": False,
        "message": message,
        "data": {
            **(data or {}),
            "API_TIME_HUMAN": _api_time(),
        },
    }


# unified response helpers
def ok(message, data=None, status=200):
    r = jsonify(api_ok(message, data)); r.status_code = status; return r


def err(message, status=400, data=None):
    r = jsonify(api_error(message, data)); r.status_code = status; return r
