"""
Auth service - the OAuth token broker between Google and the session.

    initiate()        Anonymous → PendingCallback (consent URL, no session change)
    complete_login()  PendingCallback → Authenticated (tokens into the session)

Terminate (logout) lives in SessionManager.destroy(); the transition back
to signed-out after Google rejects a token happens in AvailabilityService.
"""

import logging
from typing import Optional

from teamcal.core.errors import AuthenticationFailedError, ServiceUnavailableError
from teamcal.environments.base import AuthenticationError
from teamcal.environments.google.auth import LOGIN_SCOPES, GoogleAuthClient
from teamcal.schemas.session import SessionUser
from teamcal.services.session_manager import SessionContext


logger = logging.getLogger("teamcal.services.auth_service")


class AuthService:
    def __init__(self, auth_client: GoogleAuthClient):
        self.auth_client = auth_client

    def initiate(self) -> str:
        """
        Consent-screen URL requesting offline access with forced re-consent.

        Raises:
            ServiceUnavailableError: GOOGLE_CLIENT_ID is not configured
        """
        if not self.auth_client.is_configured:
            logger.error("Google OAuth not configured - missing GOOGLE_CLIENT_ID")
            raise ServiceUnavailableError(
                "Google OAuth is not configured",
                "Set GOOGLE_CLIENT_ID and GOOGLE_CLIENT_SECRET.",
            )
        return self.auth_client.get_authorization_url(scopes=LOGIN_SCOPES)

    async def complete_login(
        self,
        ctx: SessionContext,
        code: Optional[str],
        error: Optional[str] = None,
    ) -> SessionUser:
        """
        Exchange the one-time code, verify who signed in, and record the
        user in ctx. The caller persists ctx.

        ctx is left untouched on any failure.

        Raises:
            AuthenticationFailedError: provider error, missing code, failed
                                       exchange or unverifiable id_token
        """
        if error:
            logger.warning(f"Google OAuth error: {error}")
            raise AuthenticationFailedError(message=f"Google authorization failed: {error}")

        if not code:
            logger.warning("OAuth callback without a code")
            raise AuthenticationFailedError(message="Missing authorization code")

        logger.info("Received OAuth callback with code")

        try:
            tokens = await self.auth_client.exchange_code_for_tokens(code)
            logger.info("Verifying ID token...")
            identity = await self.auth_client.verify_id_token(tokens.id_token, tokens.access_token)
        except AuthenticationError as e:
            logger.error(f"Authentication error: {e}")
            raise AuthenticationFailedError(message=str(e))

        return ctx.sign_in(email=identity.email, name=identity.name, tokens=tokens)
