from __future__ import annotations

import secrets
import string

ID_ALPHABET = string.digits + string.ascii_uppercase
ID_LENGTH = 8


def generate_id() -> str:
    """Short random base-36 token. No uniqueness check against stored rows."""
    return "".join(secrets.choice(ID_ALPHABET) for _ in range(ID_LENGTH))
