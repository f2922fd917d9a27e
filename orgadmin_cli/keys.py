"""User key generation."""

import uuid
from typing import Callable

KeyGenerator = Callable[[], str]


def generate_key() -> str:
    """Generate a fresh random user key in canonical UUID form."""
    return str(uuid.uuid4())
