"""
Teamcal - team calendar backend.

Google sign-in with server-side sessions, a small team roster, and a
read-only proxy to each member's Google Calendar.
"""

__version__ = "1.0.0"
