"""
Member schemas - roster request/response formats.

Field names are camelCase on the wire ("calendarId") to match what the
front end already sends.
"""

from typing import List, Optional

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# RESPONSE SCHEMAS
# ---------------------------------------------------------------------------

class Member(BaseModel):
    """
    A roster entry.

    Example:
    {
        "id": 3,
        "name": "Ada",
        "email": "ada@example.com",
        "calendarId": "ada@example.com"
    }
    """
    id: int
    name: str
    email: str
    calendarId: str = Field(..., description="Google calendar address")


# ---------------------------------------------------------------------------
# REQUEST SCHEMAS
# ---------------------------------------------------------------------------

class MemberCreate(BaseModel):
    """
    Body of POST /api/members.

    Every field is optional at the schema level so a missing field is
    reported as our own 400, not FastAPI's 422.
    """
    name: Optional[str] = None
    email: Optional[str] = None
    calendarId: Optional[str] = None

    def missing_fields(self) -> List[str]:
        """Names of required fields that are absent or blank."""
        return [
            field
            for field in ("name", "email", "calendarId")
            if not (getattr(self, field) or "").strip()
        ]
