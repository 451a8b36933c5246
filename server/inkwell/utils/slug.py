# server/inkwell/utils/slug.py

import re
import time
from typing import Callable, Optional

from inkwell.errors import ValidationError

BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"


class SlugGenerator:
    """
    Derives URL-safe identifiers from titles and names.

    Only ASCII letters and digits survive. Anything else, including accented
    letters, is treated as a separator, so "Café Society" becomes "caf-society".
    """

    SEPARATOR_RUN = re.compile(r"[^a-z0-9]+")
    SLUG_REGEX = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")

    MAX_NUMBERED_SUFFIX = 20

    @classmethod
    def slugify(cls, value: Optional[str]) -> str:
        slug = cls.SEPARATOR_RUN.sub("-", (value or "").lower()).strip("-")

        if not slug:
            raise ValidationError(
                "Cannot derive a URL slug: use at least one letter or digit",
                details={"slug": "empty after normalization"},
            )

        return slug

    @classmethod
    def is_valid(cls, slug: str) -> bool:
        return bool(slug) and bool(cls.SLUG_REGEX.match(slug))

    @classmethod
    def unique(
        cls,
        base: str,
        is_taken: Callable[[str], bool],
        max_length: Optional[int] = None,
    ) -> str:
        if max_length:
            base = base[:max_length].rstrip("-")

        if not is_taken(base):
            return base

        for i in range(2, cls.MAX_NUMBERED_SUFFIX + 1):
            candidate = f"{base}-{i}"
            if not is_taken(candidate):
                return candidate

        return f"{base}-{cls.timestamp_suffix()}"

    @staticmethod
    def timestamp_suffix(millis: Optional[int] = None) -> str:
        if millis is None:
            millis = int(time.time() * 1000)

        digits = ""
        while millis:
            millis, rem = divmod(millis, 36)
            digits = BASE36[rem] + digits

        return digits or "0"
