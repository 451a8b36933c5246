# server/inkwell/utils/helpers.py

import hashlib
import re
from datetime import datetime
from typing import Dict, Optional

from inkwell.errors import ValidationError


def hash_string(value: str) -> str:
    return hashlib.sha256(value.encode()).hexdigest()


def truncate_string(value: str, max_length: int = 100, suffix: str = "...") -> str:
    if not value or len(value) <= max_length:
        return value or ""

    return value[:max_length - len(suffix)] + suffix


def time_ago(dt: datetime, now: Optional[datetime] = None) -> str:
    if not dt:
        return "never"

    now = now or datetime.utcnow()
    diff = now - dt

    seconds = int(diff.total_seconds())

    if seconds < 60:
        return "just now"
    elif seconds < 3600:
        minutes = seconds // 60
        return f"{minutes}m ago"
    elif seconds < 86400:
        hours = seconds // 3600
        return f"{hours}h ago"
    elif seconds < 604800:
        days = seconds // 86400
        return f"{days}d ago"
    elif seconds < 2592000:
        weeks = seconds // 604800
        return f"{weeks}w ago"
    else:
        return dt.strftime("%b %d, %Y")


def clean_dict(d: Dict, remove_none: bool = True, remove_empty: bool = False) -> Dict:
    result = {}
    for key, value in d.items():
        if remove_none and value is None:
            continue
        if remove_empty and value in ("", [], {}):
            continue
        result[key] = value
    return result


def is_valid_uuid(value: str) -> bool:
    uuid_pattern = re.compile(
        r'^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$',
        re.IGNORECASE
    )
    return bool(value) and bool(uuid_pattern.match(value))


def client_address(request) -> Optional[str]:
    ip_address = request.headers.get("X-Forwarded-For", request.remote_addr)
    if ip_address:
        ip_address = ip_address.split(",")[0].strip()
    return ip_address or None


def json_object(request) -> Dict:
    """Parsed JSON body, {} when absent; anything but an object is a 400."""
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object", details={"body": type(data).__name__})
    return data
