"""Google OAuth sign-in: consent URL, code exchange and profile lookup."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional
from urllib.parse import urlencode

import requests

from services.errors import FederationError, Forbidden

logger = logging.getLogger(__name__)

GOOGLE_AUTH_URL = "https://accounts.google.com/o/oauth2/v2/auth"
GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"
GOOGLE_USERINFO_URL = "https://www.googleapis.com/oauth2/v2/userinfo"
GOOGLE_SCOPES = (
    "https://www.googleapis.com/auth/userinfo.email",
    "https://www.googleapis.com/auth/userinfo.profile",
)


@dataclass(frozen=True)
class GoogleOAuthSettings:
    client_id: str
    client_secret: str
    redirect_uri: str
    timeout: float = 30

    @classmethod
    def from_config(cls, config) -> "GoogleOAuthSettings":
        base_url = (config.get("BASE_URL") or "").rstrip("/")
        callback_path = config.get("GOOGLE_CALLBACK_PATH", "/api/v1/auth/google-redirect")
        return cls(
            client_id=config.get("GOOGLE_CLIENT_ID", ""),
            client_secret=config.get("GOOGLE_CLIENT_SECRET", ""),
            redirect_uri=f"{base_url}{callback_path}",
            timeout=config.get("GOOGLE_HTTP_TIMEOUT", 30),
        )


class GoogleOAuthClient:
    def __init__(self, settings: GoogleOAuthSettings):
        self.settings = settings

    def authorization_url(self, state: Optional[str] = None) -> str:
        """
        Generate the Google consent URL.

        Args:
            state: Optional opaque value echoed back to the callback

        Returns:
            URL to redirect the browser to
        """
        params = {
            "client_id": self.settings.client_id,
            "redirect_uri": self.settings.redirect_uri,
            "scope": " ".join(GOOGLE_SCOPES),
            "response_type": "code",
            "access_type": "offline",
            "prompt": "consent",
        }
        if state:
            params["state"] = state
        return f"{GOOGLE_AUTH_URL}?{urlencode(params)}"

    def exchange_code(self, code: str) -> Dict[str, Any]:
        """
        Exchange an authorization code for provider tokens.

        Raises:
            FederationError: If the token endpoint fails
        """
        payload = {
            "client_id": self.settings.client_id,
            "client_secret": self.settings.client_secret,
            "redirect_uri": self.settings.redirect_uri,
            "grant_type": "authorization_code",
            "code": code,
        }
        try:
            resp = requests.post(GOOGLE_TOKEN_URL, data=payload, timeout=self.settings.timeout)
            resp.raise_for_status()
            return resp.json()
        except (requests.RequestException, ValueError) as e:
            logger.error(f"Google code exchange failed: {e}")
            raise FederationError("Failed to exchange authorization code") from e

    def fetch_profile(self, access_token: str) -> Dict[str, Any]:
        headers = {"Authorization": f"Bearer {access_token}"}
        try:
            resp = requests.get(GOOGLE_USERINFO_URL, headers=headers, timeout=self.settings.timeout)
            resp.raise_for_status()
            return resp.json()
        except (requests.RequestException, ValueError) as e:
            logger.error(f"Google profile fetch failed: {e}")
            raise FederationError("Failed to fetch Google profile") from e

    def fetch_email(self, code: str) -> str:
        """Run the full code -> profile exchange and return the verified email."""
        token_data = self.exchange_code(code)
        access_token = token_data.get("access_token")
        if not access_token:
            raise FederationError("Google did not return an access token")

        profile = self.fetch_profile(access_token)
        email = profile.get("email")
        if not email:
            raise FederationError("Google profile has no email")
        if profile.get("verified_email") is False:
            raise Forbidden("Google account email is not verified")
        return email
