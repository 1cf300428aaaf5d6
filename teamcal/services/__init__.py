"""
Services - the logic between routers and storage / Google.

- session_store / session_manager: server-side sessions and the cookie
- member_repository: the roster
- auth_service: OAuth login
- availability: calendar events for a member
"""
