"""
Tests for the Google OAuth client.

Google is replaced by httpx.MockTransport; id_tokens are signed with a
throwaway RSA key whose public half is served as the JWKS.

These tests verify:
- Consent URL parameters
- Code exchange (form POST, expiry conversion, error handling)
- id_token verification: signature, audience, issuer, expiry, at_hash
- JWKS caching, and a refetch when Google rotates its keys
"""

import time
from urllib.parse import parse_qs, urlparse

import httpx
import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from jose import jwk, jwt

from teamcal.environments.base import AuthenticationError
from teamcal.environments.google.auth import LOGIN_SCOPES, GoogleAuthClient


CLIENT_ID = "test-client-id.apps.googleusercontent.com"
ACCESS_TOKEN = "ya29.test-access-token"


def _generate_key():
    private_key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    private_pem = private_key.private_bytes(
        serialization.Encoding.PEM,
        serialization.PrivateFormat.PKCS8,
        serialization.NoEncryption(),
    )
    public_pem = private_key.public_key().public_bytes(
        serialization.Encoding.PEM,
        serialization.PublicFormat.SubjectPublicKeyInfo,
    )
    return private_pem, public_pem


@pytest.fixture(scope="module")
def signing_key():
    """(private PEM, JWKS dict) for a key Google would publish."""
    private_pem, public_pem = _generate_key()
    public_jwk = jwk.construct(public_pem, "RS256").to_dict()
    public_jwk["kid"] = "test-key"
    public_jwk["use"] = "sig"
    return private_pem, {"keys": [public_jwk]}


def make_id_token(private_pem, **overrides) -> str:
    now = int(time.time())
    claims = {
        "iss": "https://accounts.google.com",
        "aud": CLIENT_ID,
        "sub": "1234567890",
        "email": "ada@example.com",
        "email_verified": True,
        "name": "Ada Lovelace",
        "iat": now,
        "exp": now + 3600,
    }
    claims.update(overrides)
    claims = {k: v for k, v in claims.items() if v is not None}
    return jwt.encode(claims, private_pem, algorithm="RS256", headers={"kid": "test-key"}, access_token=ACCESS_TOKEN)


class GoogleStub:
    """Minimal stand-in for Google's token and certs endpoints."""

    def __init__(self, jwks, token_status=200, token_body=None):
        self.jwks = jwks
        self.token_status = token_status
        self.token_body = token_body
        self.token_requests = []
        self.certs_requests = 0

    def __call__(self, request: httpx.Request) -> httpx.Response:
        if request.url == httpx.URL(GoogleAuthClient.TOKEN_URL):
            self.token_requests.append(parse_qs(request.content.decode()))
            return httpx.Response(self.token_status, json=self.token_body)
        if request.url == httpx.URL(GoogleAuthClient.CERTS_URL):
            self.certs_requests += 1
            return httpx.Response(200, json=self.jwks)
        return httpx.Response(404)


def make_client(stub) -> GoogleAuthClient:
    return GoogleAuthClient(
        client_id=CLIENT_ID,
        client_secret="test-client-secret",
        redirect_uri="http://localhost:5000/auth/callback",
        transport=httpx.MockTransport(stub),
    )


# ---------------------------------------------------------------------------
# AUTHORIZATION URL
# ---------------------------------------------------------------------------

class TestAuthorizationUrl:

    def test_login_url(self, signing_key):
        client = make_client(GoogleStub(signing_key[1]))

        url = urlparse(client.get_authorization_url(scopes=LOGIN_SCOPES))
        params = parse_qs(url.query)

        assert f"{url.scheme}://{url.netloc}{url.path}" == GoogleAuthClient.AUTHORIZATION_URL
        assert params["client_id"] == [CLIENT_ID]
        assert params["scope"] == [" ".join(LOGIN_SCOPES)]
        assert params["access_type"] == ["offline"]
        assert params["prompt"] == ["consent"]
        assert "state" not in params

    def test_state_is_passed_through(self, signing_key):
        client = make_client(GoogleStub(signing_key[1]))

        params = parse_qs(urlparse(client.get_authorization_url(LOGIN_SCOPES, state="xyz")).query)

        assert params["state"] == ["xyz"]

    def test_is_configured(self):
        assert GoogleAuthClient(client_id=CLIENT_ID, client_secret="s").is_configured is True


# ---------------------------------------------------------------------------
# TOKEN EXCHANGE
# ---------------------------------------------------------------------------

class TestExchangeCode:

    @pytest.mark.asyncio
    async def test_success(self, signing_key):
        stub = GoogleStub(
            signing_key[1],
            token_body={
                "access_token": ACCESS_TOKEN,
                "expires_in": 3599,
                "refresh_token": "1//refresh",
                "scope": " ".join(LOGIN_SCOPES),
                "token_type": "Bearer",
                "id_token": "header.payload.signature",
            },
        )
        client = make_client(stub)

        before_ms = int(time.time() * 1000)
        tokens = await client.exchange_code_for_tokens("auth-code")

        assert tokens.access_token == ACCESS_TOKEN
        assert tokens.refresh_token == "1//refresh"
        assert tokens.id_token == "header.payload.signature"
        assert tokens.get_scopes_list() == LOGIN_SCOPES
        assert before_ms + 3599 * 1000 <= tokens.expiry_date <= before_ms + 3599 * 1000 + 5000

        form = stub.token_requests[0]
        assert form["code"] == ["auth-code"]
        assert form["grant_type"] == ["authorization_code"]
        assert form["client_id"] == [CLIENT_ID]
        assert form["redirect_uri"] == ["http://localhost:5000/auth/callback"]

    @pytest.mark.asyncio
    async def test_invalid_code(self, signing_key):
        stub = GoogleStub(
            signing_key[1],
            token_status=400,
            token_body={"error": "invalid_grant", "error_description": "Bad Request"},
        )

        with pytest.raises(AuthenticationError) as exc_info:
            await make_client(stub).exchange_code_for_tokens("used-code")

        assert "Bad Request" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_malformed_response(self, signing_key):
        stub = GoogleStub(signing_key[1], token_body={"token_type": "Bearer"})

        with pytest.raises(AuthenticationError):
            await make_client(stub).exchange_code_for_tokens("auth-code")

    @pytest.mark.asyncio
    async def test_network_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        client = GoogleAuthClient(client_id=CLIENT_ID, client_secret="s", transport=httpx.MockTransport(handler))

        with pytest.raises(AuthenticationError) as exc_info:
            await client.exchange_code_for_tokens("auth-code")

        assert "Network error" in str(exc_info.value)


# ---------------------------------------------------------------------------
# ID TOKEN VERIFICATION
# ---------------------------------------------------------------------------

class TestVerifyIdToken:

    @pytest.mark.asyncio
    async def test_valid_token(self, signing_key):
        private_pem, jwks = signing_key
        client = make_client(GoogleStub(jwks))

        user = await client.verify_id_token(make_id_token(private_pem), ACCESS_TOKEN)

        assert user.provider_user_id == "1234567890"
        assert user.email == "ada@example.com"
        assert user.name == "Ada Lovelace"

    @pytest.mark.asyncio
    async def test_short_issuer_is_accepted(self, signing_key):
        private_pem, jwks = signing_key
        client = make_client(GoogleStub(jwks))

        user = await client.verify_id_token(make_id_token(private_pem, iss="accounts.google.com"), ACCESS_TOKEN)

        assert user.email == "ada@example.com"

    @pytest.mark.asyncio
    async def test_missing_token(self, signing_key):
        with pytest.raises(AuthenticationError):
            await make_client(GoogleStub(signing_key[1])).verify_id_token(None, ACCESS_TOKEN)

    @pytest.mark.asyncio
    async def test_wrong_audience(self, signing_key):
        private_pem, jwks = signing_key

        with pytest.raises(AuthenticationError):
            await make_client(GoogleStub(jwks)).verify_id_token(
                make_id_token(private_pem, aud="someone-else"), ACCESS_TOKEN
            )

    @pytest.mark.asyncio
    async def test_wrong_issuer(self, signing_key):
        private_pem, jwks = signing_key

        with pytest.raises(AuthenticationError):
            await make_client(GoogleStub(jwks)).verify_id_token(
                make_id_token(private_pem, iss="https://evil.example.com"), ACCESS_TOKEN
            )

    @pytest.mark.asyncio
    async def test_expired(self, signing_key):
        private_pem, jwks = signing_key
        past = int(time.time()) - 7200

        with pytest.raises(AuthenticationError):
            await make_client(GoogleStub(jwks)).verify_id_token(
                make_id_token(private_pem, iat=past, exp=past + 60), ACCESS_TOKEN
            )

    @pytest.mark.asyncio
    async def test_signed_by_unknown_key(self, signing_key):
        other_private_pem, _ = _generate_key()

        with pytest.raises(AuthenticationError):
            await make_client(GoogleStub(signing_key[1])).verify_id_token(
                make_id_token(other_private_pem), ACCESS_TOKEN
            )

    @pytest.mark.asyncio
    async def test_access_token_mismatch(self, signing_key):
        """at_hash binds the id_token to the access token it came with."""
        private_pem, jwks = signing_key

        with pytest.raises(AuthenticationError):
            await make_client(GoogleStub(jwks)).verify_id_token(make_id_token(private_pem), "ya29.other")

    @pytest.mark.asyncio
    async def test_no_email_claim(self, signing_key):
        private_pem, jwks = signing_key

        with pytest.raises(AuthenticationError):
            await make_client(GoogleStub(jwks)).verify_id_token(
                make_id_token(private_pem, email=None), ACCESS_TOKEN
            )

    @pytest.mark.asyncio
    async def test_certs_are_cached(self, signing_key):
        private_pem, jwks = signing_key
        stub = GoogleStub(jwks)
        client = make_client(stub)

        await client.verify_id_token(make_id_token(private_pem), ACCESS_TOKEN)
        await client.verify_id_token(make_id_token(private_pem), ACCESS_TOKEN)

        assert stub.certs_requests == 1

    @pytest.mark.asyncio
    async def test_unknown_kid_refetches_certs(self, signing_key):
        """A token signed with a key newer than the cache triggers one refetch."""
        private_pem, jwks = signing_key
        _, retired_public_pem = _generate_key()
        retired_jwk = jwk.construct(retired_public_pem, "RS256").to_dict()
        retired_jwk["kid"] = "retired-key"

        stub = GoogleStub({"keys": [retired_jwk]})
        client = make_client(stub)
        await client._get_certs()

        stub.jwks = jwks
        user = await client.verify_id_token(make_id_token(private_pem), ACCESS_TOKEN)

        assert user.email == "ada@example.com"
        assert stub.certs_requests == 2
