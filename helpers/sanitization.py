"""
HTML stripping for free-text profile fields.

Question, answer and comment bodies are stored as written (Markdown with
code samples) and rendered by clients. Short profile fields never carry
markup, so any tags in them are removed before storage.
"""

from typing import Optional

import bleach


def sanitize_plain_text(content: Optional[str]) -> Optional[str]:
    """
    Strip all HTML tags and surrounding whitespace.

    Args:
        content: Raw content from user input

    Returns:
        Plain text with tags removed, or None if input is None

    Examples:
        >>> sanitize_plain_text('<b>Bold</b> text ')
        'Bold text'
    """
    if content is None:
        return None

    return bleach.clean(content, tags=[], strip=True).strip()


def sanitize_fields(**fields: Optional[str]) -> dict[str, str]:
    """Sanitize the given keyword fields, dropping the ones that are None."""
    return {
        name: sanitize_plain_text(value) or ""
        for name, value in fields.items()
        if value is not None
    }
