"""Text sanitization utilities."""

import re

_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f-\x9f]")


def sanitize_text(text: str | None, max_length: int = 500) -> str | None:
    """
    Sanitize untrusted text fields from data providers.

    Removes control characters and truncates to max_length.
    Apply to: headlines, summaries, risk titles/descriptions, company names.

    Args:
        text: Text to sanitize (may be None)
        max_length: Maximum length before truncation

    Returns:
        Sanitized text or None if input was None
    """
    if text is None:
        return None

    # Remove control characters (including \r, \x00-\x1f, \x7f-\x9f)
    text = _CONTROL_CHARS.sub("", text)

    return truncate(text, max_length).strip()


def truncate(text: str, max_length: int, suffix: str = "...") -> str:
    """Cut `text` to `max_length` characters and append `suffix` if anything was cut."""
    if len(text) > max_length:
        return text[:max_length] + suffix
    return text
