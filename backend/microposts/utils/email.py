"""Email format check used by registration."""

import re

# local@domain.tld with no whitespace and exactly one "@"
_EMAIL_RE = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")

# Punctuation that is legal in RFC 5322 quoted forms but never accepted here
_INVALID_CHARS_RE = re.compile(r'[!#$%^&*(),?":{}|<>]')


def validate_email(email: str) -> bool:
    """Return True when `email` looks like a deliverable address."""
    if not email or _INVALID_CHARS_RE.search(email):
        return False
    return _EMAIL_RE.fullmatch(email) is not None
