from __future__ import annotations

import secrets
import uuid


def new_uuid() -> str:
    """Generate a UUID4 string."""
    return str(uuid.uuid4())


def new_session_id() -> str:
    """Generate an id for a new proxy session."""
    return new_uuid()


def new_oauth_state() -> str:
    """Generate the CSRF state value sent with the consent redirect."""
    return secrets.token_hex(16)
