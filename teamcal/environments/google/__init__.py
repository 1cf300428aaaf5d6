"""
Google Environment Module - Google sign-in and Calendar integration.

Architecture:
=============
google/
├── __init__.py           # Module exports
├── auth/                 # OAuth sign-in
│   ├── __init__.py
│   ├── client.py         # Consent URL, code exchange, id_token check
│   └── schemas.py        # Token / claims structures, scopes
└── calendar/             # Google Calendar API
    ├── __init__.py
    └── client.py         # Read-only events.list

Usage:
======
    from teamcal.environments.google import GoogleAuthClient, GoogleCalendarClient, LOGIN_SCOPES

    auth_client = GoogleAuthClient()
    auth_url = auth_client.get_authorization_url(scopes=LOGIN_SCOPES)

    tokens = await auth_client.exchange_code_for_tokens(code)

    calendar = GoogleCalendarClient(access_token=tokens.access_token)
    events = await calendar.list_events("ada@example.com")
"""

from teamcal.environments.google.auth import GoogleAuthClient, LOGIN_SCOPES
from teamcal.environments.google.calendar import GoogleCalendarClient

__all__ = [
    "GoogleAuthClient",
    "GoogleCalendarClient",
    "LOGIN_SCOPES",
]
