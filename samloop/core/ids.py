from __future__ import annotations

import itertools
import secrets
import string

_SESSION_ALPHABET = string.ascii_letters + string.digits
_SESSION_ID_LENGTH = 5

_counter = itertools.count(1)


def generate_unique_id() -> str:
    """Process-wide increasing id for history entries."""

    return str(next(_counter))


def generate_session_id() -> str:
    return "".join(secrets.choice(_SESSION_ALPHABET) for _ in range(_SESSION_ID_LENGTH))
