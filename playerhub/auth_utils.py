import secrets
from typing import Optional

from fastapi import Header, HTTPException, status

from . import constants

# -----------------------------
# FastAPI dependency helpers
# -----------------------------

def check_admin_token(token: Optional[str], expected: Optional[str] = None) -> bool:
    """Return *True* if *token* matches the configured shared admin secret."""
    expected = constants.ADMIN_TOKEN if expected is None else expected
    token = (token or "").strip()
    if not token or not expected:
        return False
    return secrets.compare_digest(token.encode(), expected.encode())


async def require_admin(x_admin_token: Optional[str] = Header(default=None)) -> None:
    """Reject the request unless ``x-admin-token`` carries the shared admin secret.

    Raises
    ------
    HTTPException
        If the token is missing or wrong.
    """
    if not check_admin_token(x_admin_token):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")


def user_token(x_user_token: Optional[str] = Header(default=None)) -> str:
    return (x_user_token or "").strip()


__all__ = ["check_admin_token", "require_admin", "user_token"]
