"""
User schemas - the identity view returned to the browser.

Only derived, non-secret fields are exposed: tokens stay in the session
store and the client only learns whether they exist.
"""

from typing import Optional

from pydantic import BaseModel


class MeUser(BaseModel):
    """
    Example:
    {
        "email": "ada@example.com",
        "name": "Ada Lovelace",
        "hasTokens": true
    }
    """
    email: str
    name: Optional[str] = None
    hasTokens: bool


class MeResponse(BaseModel):
    user: Optional[MeUser] = None


class LogoutResponse(BaseModel):
    success: bool = True
