"""
Environments Module - External Service Integrations

environments/
├── __init__.py           # Module exports
├── base.py               # Exceptions, token structures, provider ABC
└── google/               # Google sign-in + Calendar

The rest of the app only sees the exceptions and OAuthTokens defined in
base.py; services translate them into HTTP errors.
"""

from teamcal.environments.base import (
    APIError,
    AuthenticationError,
    EnvironmentError,
    EnvironmentProvider,
    OAuthTokens,
    TokenExpiredError,
    UserInfo,
)

__all__ = [
    "APIError",
    "AuthenticationError",
    "EnvironmentError",
    "EnvironmentProvider",
    "OAuthTokens",
    "TokenExpiredError",
    "UserInfo",
]
