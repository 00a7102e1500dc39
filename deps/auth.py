import os
from typing import Annotated

from fastapi import Header, HTTPException

# Load once at module import
ADMIN_TOKEN = os.getenv("ADMIN_TOKEN", "")


def require_admin(
    x_admin_token: Annotated[str | None, Header(alias="x-admin-token")] = None,
) -> None:
    """
    Strict admin-only guard. Requires the X-Admin-Token header to match ADMIN_TOKEN.
    The environment is re-read so the token can be rotated without a restart.
    """
    expected = os.getenv("ADMIN_TOKEN", ADMIN_TOKEN)
    if not expected:
        raise HTTPException(status_code=500, detail="ADMIN_TOKEN not configured on server.")
    if x_admin_token != expected:
        raise HTTPException(status_code=401, detail="Unauthorized.")
