# backend/services/session_identity.py
"""
Anonymous Session Identity

Every visitor is identified by an opaque token that scopes all of their
records. There is no login: the token is generated on first contact, handed
back to the client (cookie + header) and sent with every later request.

The storage is whatever mutable mapping the caller passes in (a cookie jar,
a dict in tests), so no module-level state is involved.
"""

import random
import re
import string
import time
from typing import MutableMapping, Optional

SESSION_KEY = "career_session_id"
SESSION_HEADER = "X-Session-Id"

_TOKEN_RE = re.compile(r"^[A-Za-z0-9_-]{1,128}$")
_BASE36 = string.digits + string.ascii_lowercase


def generate_session_token() -> str:
    """Build a token from the current time in ms plus 13 random base36 chars."""
    entropy = "".join(random.choices(_BASE36, k=13))
    return f"session_{int(time.time() * 1000)}_{entropy}"


def is_valid_token(token: Optional[str]) -> bool:
    # tokens end up in storage paths, keep them to a safe alphabet
    return bool(token) and bool(_TOKEN_RE.match(token))


def get_or_create_token(store: MutableMapping[str, str]) -> str:
    """
    Return the token kept in `store`, creating and storing one if needed.

    A stored value that is not a well-formed token is replaced. There is no
    expiry or rotation.
    """
    token = store.get(SESSION_KEY)
    if not is_valid_token(token):
        token = generate_session_token()
        store[SESSION_KEY] = token
    return token


def clear_session(store: MutableMapping[str, str]) -> None:
    store.pop(SESSION_KEY, None)
