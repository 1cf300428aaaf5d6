"""
Routers module - API endpoint handlers organized by feature.

- auth: Google sign-in, /api/me, logout
- members: roster list / insert
- availability: calendar events for one member
"""
