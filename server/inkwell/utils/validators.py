# server/inkwell/utils/validators.py

import re
from typing import Dict, Optional, Tuple

from werkzeug.datastructures import FileStorage


class InputValidator:
    CONTROL_CHARS = re.compile(r'[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]')

    DANGEROUS_PATTERNS = [
        r'<script[^>]*>.*?</script>',
        r'javascript:',
        r'on\w+\s*=',
        r'<iframe[^>]*>',
        r'<object[^>]*>',
        r'<embed[^>]*>',
    ]

    @classmethod
    def sanitize_string(cls, value: str, max_length: int = 255) -> str:
        if not value:
            return ""

        value = value.strip()

        if len(value) > max_length:
            value = value[:max_length]

        value = cls.CONTROL_CHARS.sub('', value)

        return value

    @classmethod
    def sanitize_markdown(cls, value: str, max_length: int = 5000) -> str:
        if not value:
            return ""

        value = value.strip()

        if len(value) > max_length:
            value = value[:max_length]

        for pattern in cls.DANGEROUS_PATTERNS:
            value = re.sub(pattern, '', value, flags=re.IGNORECASE | re.DOTALL)

        return value.strip()


class ContentValidator:
    """
    Field checks run before anything touches the store or the media host.

    Each validate_* method returns (ok, cleaned, errors) where errors maps a
    field name to a human readable message.
    """

    CATEGORY_NAME_MIN = 3
    CATEGORY_NAME_MAX = 50
    TITLE_MIN = 5
    TITLE_MAX = 255
    DESCRIPTION_MIN = 20
    DESCRIPTION_MAX = 20000
    CODE_MAX = 200000
    ARTICLE_CATEGORY_MAX = 50
    COMMENT_USER_MAX = 60
    COMMENT_TEXT_MAX = 1000

    ARTICLE_FIELDS = ("category", "title", "description", "code")

    @classmethod
    def validate_category_name(cls, name) -> Tuple[bool, Optional[str], Optional[str]]:
        if not isinstance(name, str) or not name.strip():
            return False, None, "Category name is required"

        name = InputValidator.sanitize_string(name, max_length=200)

        if len(name) < cls.CATEGORY_NAME_MIN:
            return False, None, f"Category name must be at least {cls.CATEGORY_NAME_MIN} characters"

        if len(name) > cls.CATEGORY_NAME_MAX:
            return False, None, f"Category name must not exceed {cls.CATEGORY_NAME_MAX} characters"

        return True, name, None

    @classmethod
    def validate_article(cls, data: Dict, partial: bool = False) -> Tuple[bool, Dict, Dict]:
        cleaned = {}
        errors = {}

        for field in cls.ARTICLE_FIELDS:
            value = data.get(field)

            if value is None:
                if not partial:
                    errors[field] = f"{field.capitalize()} is required"
                continue

            if not isinstance(value, str):
                errors[field] = f"{field.capitalize()} must be text"
                continue

            if field == "code":
                if not value.strip():
                    errors[field] = "Code is required"
                elif len(value) > cls.CODE_MAX:
                    errors[field] = f"Code must not exceed {cls.CODE_MAX} characters"
                else:
                    cleaned[field] = value
                continue

            if field == "category":
                value = InputValidator.sanitize_string(value, max_length=200)
                if not value:
                    errors[field] = "Category is required"
                elif len(value) > cls.ARTICLE_CATEGORY_MAX:
                    errors[field] = f"Category must not exceed {cls.ARTICLE_CATEGORY_MAX} characters"
                else:
                    cleaned[field] = value
                continue

            if field == "title":
                value = InputValidator.sanitize_string(value, max_length=cls.TITLE_MAX * 2)
                if len(value) < cls.TITLE_MIN:
                    errors[field] = f"Title must be at least {cls.TITLE_MIN} characters"
                elif len(value) > cls.TITLE_MAX:
                    errors[field] = f"Title must not exceed {cls.TITLE_MAX} characters"
                else:
                    cleaned[field] = value
                continue

            value = InputValidator.sanitize_string(value, max_length=cls.DESCRIPTION_MAX * 2)
            if len(value) < cls.DESCRIPTION_MIN:
                errors[field] = f"Description must be at least {cls.DESCRIPTION_MIN} characters"
            elif len(value) > cls.DESCRIPTION_MAX:
                errors[field] = f"Description must not exceed {cls.DESCRIPTION_MAX} characters"
            else:
                cleaned[field] = value

        return not errors, cleaned, errors

    @classmethod
    def validate_comment(cls, data: Dict) -> Tuple[bool, Dict, Dict]:
        cleaned = {}
        errors = {}

        user = data.get("user")
        text = data.get("text")

        if not isinstance(user, str) or not user.strip():
            errors["user"] = "User name is required"
        else:
            user = InputValidator.sanitize_markdown(user, max_length=200)
            if not user:
                errors["user"] = "User name is required"
            elif len(user) > cls.COMMENT_USER_MAX:
                errors["user"] = f"User name must not exceed {cls.COMMENT_USER_MAX} characters"
            else:
                cleaned["user"] = user

        if not isinstance(text, str) or not text.strip():
            errors["text"] = "Comment text is required"
        elif len(text.strip()) > cls.COMMENT_TEXT_MAX:
            errors["text"] = f"Comment must not exceed {cls.COMMENT_TEXT_MAX} characters"
        else:
            text = InputValidator.sanitize_markdown(text, max_length=cls.COMMENT_TEXT_MAX)
            if not text:
                errors["text"] = "Comment must not be empty"
            else:
                cleaned["text"] = text

        return not errors, cleaned, errors

    @classmethod
    def validate_image(cls, file: Optional[FileStorage], max_size: int) -> Tuple[bool, Optional[bytes], Optional[str]]:
        if file is None or not file.filename:
            return False, None, "Image file is required"

        mimetype = (file.mimetype or "").lower()
        if not mimetype.startswith("image/"):
            return False, None, "Only image files are allowed"

        data = file.read()

        if not data:
            return False, None, "Image file is empty"

        if len(data) > max_size:
            return False, None, f"Image must not exceed {max_size // (1024 * 1024)}MB"

        return True, data, None

    @classmethod
    def validate_pagination(
        cls,
        page,
        limit,
        default_limit: int = 10,
        max_limit: int = 100,
    ) -> Tuple[bool, Tuple[int, int], Optional[str]]:
        try:
            page = int(page) if page not in (None, "") else 1
            limit = int(limit) if limit not in (None, "") else default_limit
        except (TypeError, ValueError):
            return False, (1, default_limit), "page and limit must be integers"

        if page < 1:
            return False, (1, default_limit), "page must be at least 1"

        if limit < 1:
            return False, (page, default_limit), "limit must be at least 1"

        return True, (page, min(limit, max_limit)), None
