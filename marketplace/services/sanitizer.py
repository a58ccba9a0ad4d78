"""
Text sanitizer for free-text fields

The cleaning policy is pluggable. The default only normalizes whitespace;
deployments that need profanity filtering install their own sanitizer
with ``set_sanitizer``.
"""
import re
from typing import Optional


class TextSanitizer:
    """Default sanitizer: collapse runs of whitespace and strip the ends"""

    _whitespace = re.compile(r"\s+")

    def sanitize(self, text: Optional[str]) -> Optional[str]:
        if not text or not isinstance(text, str):
            return text
        return self._whitespace.sub(" ", text).strip()


_sanitizer: TextSanitizer = TextSanitizer()


def get_sanitizer() -> TextSanitizer:
    return _sanitizer


def set_sanitizer(sanitizer: TextSanitizer):
    """Replace the process-wide sanitizer"""
    global _sanitizer
    _sanitizer = sanitizer
