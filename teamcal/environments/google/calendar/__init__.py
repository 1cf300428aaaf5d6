"""
Google Calendar Module - read-only Calendar API integration.

Used by the availability endpoint to list a member's events in a time
window with the signed-in user's access token.
"""

from teamcal.environments.google.calendar.client import GoogleCalendarClient

__all__ = ["GoogleCalendarClient"]
