"""
Client Google OAuth 2.0 / Google OAuth 2.0 client.
Flux "authorization code": URL de consentement, echange du code, profil utilisateur.
Authorization code flow: consent URL, code exchange, user profile.
"""

import logging
from urllib.parse import urlencode

import httpx

from motormate.config import settings
from motormate.schemas.user import GoogleUserInfo

logger = logging.getLogger(__name__)

GOOGLE_AUTHORIZE_URL = "https://accounts.google.com/o/oauth2/v2/auth"
GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"
GOOGLE_USERINFO_URL = "https://openidconnect.googleapis.com/v1/userinfo"
GOOGLE_SCOPES = ["openid", "email", "profile"]


class GoogleOAuthError(Exception):
    """Echec d'un appel a Google / Google call failure."""


class GoogleOAuthClient:
    """Appels au fournisseur Google / Google provider calls."""

    def __init__(
        self,
        client_id: str | None = None,
        client_secret: str | None = None,
        redirect_uri: str | None = None,
        timeout: float | None = None,
    ):
        self.client_id = client_id or settings.GOOGLE_CLIENT_ID
        self.client_secret = client_secret or settings.GOOGLE_CLIENT_SECRET
        self.redirect_uri = redirect_uri or settings.GOOGLE_CALLBACK_URL
        self.timeout = timeout or settings.GOOGLE_HTTP_TIMEOUT_SECONDS

    def authorization_url(self, state: str) -> str:
        """URL de consentement Google / Google consent URL."""
        params = {
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
            "response_type": "code",
            "scope": " ".join(GOOGLE_SCOPES),
            "state": state,
            "access_type": "online",
            "prompt": "select_account",
        }
        return f"{GOOGLE_AUTHORIZE_URL}?{urlencode(params)}"

    async def exchange_code(self, code: str) -> dict:
        """Echanger le code contre des jetons / Exchange the code for tokens."""
        data = {
            "grant_type": "authorization_code",
            "code": code,
            "redirect_uri": self.redirect_uri,
            "client_id": self.client_id,
            "client_secret": self.client_secret,
        }
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(GOOGLE_TOKEN_URL, data=data, headers={"Accept": "application/json"})
                response.raise_for_status()
        except httpx.HTTPError as e:
            raise GoogleOAuthError(f"Token exchange failed: {e}") from e

        tokens = response.json()
        if "access_token" not in tokens:
            raise GoogleOAuthError("Token response has no access_token")
        return tokens

    async def fetch_userinfo(self, access_token: str) -> GoogleUserInfo:
        """Recuperer le profil Google / Fetch the Google profile."""
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.get(GOOGLE_USERINFO_URL, headers={"Authorization": f"Bearer {access_token}"})
                response.raise_for_status()
        except httpx.HTTPError as e:
            raise GoogleOAuthError(f"User info request failed: {e}") from e
        return GoogleUserInfo.model_validate(response.json())

    async def authenticate(self, code: str) -> GoogleUserInfo:
        """Code d'autorisation -> profil / Authorization code -> profile."""
        tokens = await self.exchange_code(code)
        return await self.fetch_userinfo(tokens["access_token"])


google_client = GoogleOAuthClient()
