# server/inkwell/utils/__init__.py

from inkwell.utils.validators import InputValidator, ContentValidator
from inkwell.utils.slug import SlugGenerator
from inkwell.utils.helpers import (
    hash_string,
    truncate_string,
    time_ago,
    clean_dict,
    is_valid_uuid,
    client_address,
    json_object,
)

__all__ = [
    "InputValidator",
    "ContentValidator",
    "SlugGenerator",
    "hash_string",
    "truncate_string",
    "time_ago",
    "clean_dict",
    "is_valid_uuid",
    "client_address",
    "json_object",
]
