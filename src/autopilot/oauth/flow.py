"""OAuth authorization and callback handling for direct-adapter providers."""

from __future__ import annotations

import base64
import html
import json
import logging
import time
from datetime import datetime, timedelta, timezone
from typing import Any
from urllib.parse import urlencode

import httpx
from pydantic import BaseModel

from autopilot.adapters.base import response_payload
from autopilot.config.settings import Settings
from autopilot.exceptions import ConfigurationError
from autopilot.storage.credentials import CredentialStore

logger = logging.getLogger(__name__)

GOOGLE_AUTH_URL = "https://accounts.google.com/o/oauth2/v2/auth"
GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"
GOOGLE_USERINFO_URL = "https://www.googleapis.com/oauth2/v2/userinfo"


class OAuthProvider(BaseModel):
    auth_url: str
    token_url: str
    scopes: list[str]
    client_id_field: str
    client_secret_field: str
    userinfo_url: str | None = None


PROVIDERS: dict[str, OAuthProvider] = {
    "gmail": OAuthProvider(
        auth_url=GOOGLE_AUTH_URL,
        token_url=GOOGLE_TOKEN_URL,
        scopes=[
            "https://www.googleapis.com/auth/gmail.send",
            "https://www.googleapis.com/auth/gmail.readonly",
            "https://www.googleapis.com/auth/gmail.modify",
        ],
        client_id_field="google_client_id",
        client_secret_field="google_client_secret",
        userinfo_url=GOOGLE_USERINFO_URL,
    ),
    "google_sheets": OAuthProvider(
        auth_url=GOOGLE_AUTH_URL,
        token_url=GOOGLE_TOKEN_URL,
        scopes=["https://www.googleapis.com/auth/spreadsheets"],
        client_id_field="google_client_id",
        client_secret_field="google_client_secret",
        userinfo_url=GOOGLE_USERINFO_URL,
    ),
    "slack": OAuthProvider(
        auth_url="https://slack.com/oauth/v2/authorize",
        token_url="https://slack.com/api/oauth.v2.access",
        scopes=["chat:write", "channels:read", "users:read"],
        client_id_field="slack_client_id",
        client_secret_field="slack_client_secret",
    ),
}


def encode_state(provider: str, user_id: str) -> str:
    raw = json.dumps({"provider": provider, "userId": user_id, "timestamp": int(time.time() * 1000)})
    return base64.urlsafe_b64encode(raw.encode("utf-8")).decode("ascii")


def decode_state(state: str | None) -> dict[str, Any]:
    if not state:
        return {}
    try:
        decoded = json.loads(base64.urlsafe_b64decode(state.encode("ascii")))
    except ValueError:
        logger.warning("Failed to decode OAuth state")
        return {}
    return decoded if isinstance(decoded, dict) else {}


class OAuthFlow:
    def __init__(
        self,
        settings: Settings,
        credentials: CredentialStore,
        http: httpx.AsyncClient,
    ) -> None:
        self._settings = settings
        self._credentials = credentials
        self._http = http

    def redirect_uri(self, provider: str) -> str:
        return f"{self._settings.app_url.rstrip('/')}/api/oauth/{provider}/callback"

    def _provider(self, provider: str) -> OAuthProvider:
        config = PROVIDERS.get(provider)
        if config is None:
            raise ConfigurationError(f"Unknown OAuth provider: {provider}")
        return config

    def authorization_url(self, provider: str, user_id: str) -> str:
        config = self._provider(provider)
        client_id = getattr(self._settings, config.client_id_field)
        if not client_id:
            raise ConfigurationError(
                f"OAuth not configured: set AUTOPILOT_{config.client_id_field.upper()} "
                f"and AUTOPILOT_{config.client_secret_field.upper()}"
            )
        params = {
            "client_id": client_id,
            "redirect_uri": self.redirect_uri(provider),
            "response_type": "code",
            "scope": " ".join(config.scopes),
            "state": encode_state(provider, user_id),
            "access_type": "offline",
            "prompt": "consent",
        }
        return f"{config.auth_url}?{urlencode(params)}"

    async def handle_callback(
        self,
        provider: str,
        code: str | None,
        state: str | None,
        error: str | None = None,
    ) -> str:
        """Exchange the code, store the credential and render the popup page."""
        if error:
            return render_error_page(error)
        if not code:
            return render_error_page("No authorization code received")
        config = PROVIDERS.get(provider)
        if config is None:
            return render_error_page(f"Unknown provider: {provider}")

        user_id = decode_state(state).get("userId")
        if not user_id:
            return render_error_page("Missing user in OAuth state")

        try:
            response = await self._http.post(
                config.token_url,
                data={
                    "client_id": getattr(self._settings, config.client_id_field),
                    "client_secret": getattr(self._settings, config.client_secret_field),
                    "code": code,
                    "grant_type": "authorization_code",
                    "redirect_uri": self.redirect_uri(provider),
                },
            )
            tokens = response_payload(response)
            if tokens.get("error") or not tokens.get("access_token"):
                return render_error_page(
                    str(tokens.get("error_description") or tokens.get("error") or "Token exchange failed")
                )

            display_name = await self._display_name(config, provider, tokens["access_token"])
            expires_at = None
            if tokens.get("expires_in"):
                expires_at = datetime.now(timezone.utc) + timedelta(seconds=int(tokens["expires_in"]))

            await self._credentials.create(
                user_id,
                provider,
                display_name,
                tokens["access_token"],
                refresh_token=tokens.get("refresh_token"),
                expires_at=expires_at,
            )
        except httpx.HTTPError as exc:
            logger.error("OAuth callback error for %s: %s", provider, exc)
            return render_error_page(str(exc))

        logger.info("Credential saved for %s: %s", provider, display_name)
        return render_success_page(provider, display_name)

    async def _display_name(self, config: OAuthProvider, provider: str, access_token: str) -> str:
        if config.userinfo_url is None:
            return provider
        try:
            response = await self._http.get(
                config.userinfo_url,
                headers={"Authorization": f"Bearer {access_token}"},
            )
        except httpx.HTTPError as exc:
            logger.warning("Failed to get user info: %s", exc)
            return provider
        profile = response_payload(response)
        return str(profile.get("email") or profile.get("name") or provider)


_PAGE = """<!DOCTYPE html>
<html>
<head><title>{title}</title></head>
<body style="font-family: sans-serif; text-align: center; padding-top: 20vh;">
  <h2>{heading}</h2>
  <p>{detail}</p>
  {script}
</body>
</html>
"""


def render_success_page(provider: str, display_name: str) -> str:
    message = json.dumps(
        {"type": "oauth_success", "provider": provider, "displayName": display_name}
    ).replace("<", "\\u003c")
    script = (
        "<script>\n"
        f"    if (window.opener) {{ window.opener.postMessage({message}, '*'); }}\n"
        "    setTimeout(function () { window.close(); }, 2000);\n"
        "  </script>"
    )
    return _PAGE.format(
        title="Connected!",
        heading=f"{html.escape(provider.capitalize())} Connected!",
        detail=f"Account: {html.escape(display_name)}<br>This window will close automatically...",
        script=script,
    )


def render_error_page(error: str) -> str:
    return _PAGE.format(
        title="Connection Failed",
        heading="Connection Failed",
        detail=html.escape(error),
        script='<button onclick="window.close()">Close</button>',
    )
