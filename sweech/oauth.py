"""
sweech — OAuth 2.0 (PKCE) for Claude Code and Codex profiles

Flow:
  1. Build the authorization URL with a PKCE challenge + random state
  2. Open the browser; capture the code on a local callback listener
     (or let the user paste the redirect URL / code when --manual)
  3. Exchange the code for tokens (form POST)

Client credentials come from the environment:
  ANTHROPIC_CLIENT_ID / ANTHROPIC_CLIENT_SECRET
  OPENAI_CLIENT_ID    / OPENAI_CLIENT_SECRET
"""

import base64
import hashlib
import logging
import os
import secrets
import time
import webbrowser
from urllib.parse import parse_qs, urlencode, urlparse

import requests

from sweech.callback_server import capture_oauth_callback
from sweech.config import OAuthToken
from sweech.errors import OAuthError

logger = logging.getLogger(__name__)

REDIRECT_URI = "http://localhost:8888/callback"
DEFAULT_CLIENT_ID = "sweech-cli"
EXPIRY_SKEW_MS = 5 * 60 * 1000

ENDPOINTS = {
    "anthropic": {
        "authorize": "https://api.anthropic.com/oauth/authorize",
        "token": "https://api.anthropic.com/oauth/token",
        "scope": "claude:api:chat claude:api:usage",
    },
    "openai": {
        "authorize": "https://platform.openai.com/oauth/authorize",
        "token": "https://api.openai.com/oauth/token",
        "scope": "read:models",
    },
}

_CLI_PROVIDERS = {"claude": "anthropic", "codex": "openai"}


# ── PKCE ──────────────────────────────────────────────────────────────────────

def generate_code_verifier() -> str:
    # 32 random bytes -> 43 base64url chars (RFC 7636 allows 43..128)
    return secrets.token_urlsafe(32)


def generate_code_challenge(verifier: str) -> str:
    digest = hashlib.sha256(verifier.encode("ascii")).digest()
    return base64.urlsafe_b64encode(digest).rstrip(b"=").decode("ascii")


def _client_id(provider: str) -> str:
    return os.environ.get(f"{provider.upper()}_CLIENT_ID") or DEFAULT_CLIENT_ID


def _client_secret(provider: str) -> str | None:
    return (os.environ.get(f"{provider.upper()}_CLIENT_SECRET")
            or os.environ.get("ANTHROPIC_CLIENT_SECRET")
            or os.environ.get("OPENAI_CLIENT_SECRET"))


def build_authorization_url(provider: str, client_id: str, redirect_uri: str,
                            code_challenge: str, state: str) -> str:
    ep = ENDPOINTS[provider]
    params = {
        "client_id": client_id,
        "redirect_uri": redirect_uri,
        "response_type": "code",
        "scope": ep["scope"],
        "code_challenge": code_challenge,
        "code_challenge_method": "S256",
        "state": state,
    }
    return f"{ep['authorize']}?{urlencode(params)}"


# ── Code capture ──────────────────────────────────────────────────────────────

def parse_pasted_code(pasted: str, expected_state: str) -> str:
    """Accept either the full redirect URL or just the authorization code."""
    pasted = pasted.strip()
    if not pasted:
        raise OAuthError("No authorization code received")
    if "://" not in pasted and "code=" not in pasted:
        return pasted

    query = urlparse(pasted).query if "://" in pasted else pasted.lstrip("?")
    params = parse_qs(query)
    if "error" in params:
        raise OAuthError(f"OAuth error: {params['error'][0]}")
    if params.get("state", [None])[0] != expected_state:
        raise OAuthError("Invalid state parameter")
    code = params.get("code", [None])[0]
    if not code:
        raise OAuthError("No authorization code received")
    return code


def prompt_manual_code(expected_state: str) -> str:
    from sweech.interactive import ask
    pasted = ask("Paste the redirect URL (or the code) from your browser")
    return parse_pasted_code(pasted, expected_state)


def _open_browser(url: str):
    try:
        webbrowser.open(url)
    except webbrowser.Error as e:
        logger.debug("could not open browser: %s", e)


# ── Token endpoint ────────────────────────────────────────────────────────────

def _post_token(provider: str, params: dict, failure: str) -> dict:
    try:
        resp = requests.post(
            ENDPOINTS[provider]["token"],
            data=params,
            headers={"Content-Type": "application/x-www-form-urlencoded"},
            timeout=15,
        )
    except requests.RequestException as e:
        raise OAuthError(f"{failure}: {e}")

    if not resp.ok:
        detail = resp.text[:200] if resp.text else f"HTTP {resp.status_code}"
        raise OAuthError(f"{failure}: {detail}")

    try:
        data = resp.json()
    except ValueError:
        raise OAuthError(f"{failure}: invalid JSON response")
    if not isinstance(data, dict) or not data.get("access_token"):
        raise OAuthError(f"{failure}: response missing access_token")
    return data


def _expires_at(data: dict) -> int | None:
    expires_in = data.get("expires_in")
    return int(time.time() * 1000) + int(expires_in) * 1000 if expires_in else None


def exchange_code_for_token(client_id: str, redirect_uri: str, code: str,
                            code_verifier: str, provider: str) -> dict:
    client_secret = _client_secret(provider)
    if not client_secret:
        raise OAuthError(f"{provider.upper()}_CLIENT_SECRET environment variable not set")

    return _post_token(provider, {
        "grant_type": "authorization_code",
        "client_id": client_id,
        "client_secret": client_secret,
        "code": code,
        "redirect_uri": redirect_uri,
        "code_verifier": code_verifier,
    }, "Token exchange failed")


def get_oauth_token(cli_type: str, provider_name: str = "", manual: bool = False,
                    timeout: float = 300) -> OAuthToken:
    """Run the full browser flow for the CLI's OAuth provider."""
    provider = _CLI_PROVIDERS.get(cli_type)
    if not provider:
        raise OAuthError(f"OAuth not supported for CLI type: {cli_type}")

    print("\n  Starting OAuth authentication...\n")
    client_id = _client_id(provider)
    verifier = generate_code_verifier()
    state = secrets.token_hex(32)
    auth_url = build_authorization_url(provider, client_id, REDIRECT_URI,
                                       generate_code_challenge(verifier), state)

    print("  Please complete authentication in your browser")
    print(f"\n  If the browser doesn't open, visit:\n  {auth_url}\n")
    _open_browser(auth_url)
    logger.info("OAuth flow started for %s (requested for %s)", provider, provider_name or cli_type)

    if manual:
        code = prompt_manual_code(state)
    else:
        code = capture_oauth_callback(REDIRECT_URI, state, timeout=timeout)

    data = exchange_code_for_token(client_id, REDIRECT_URI, code, verifier, provider)
    return OAuthToken(
        access_token=data["access_token"],
        refresh_token=data.get("refresh_token"),
        expires_at=_expires_at(data),
        token_type=data.get("token_type") or "Bearer",
        provider=provider,
    )


def refresh_oauth_token(token: OAuthToken) -> OAuthToken:
    """
    Trade the refresh token for a new access token. Providers that do not
    rotate refresh tokens omit it from the response; the old one is kept.
    """
    if not token.refresh_token:
        raise OAuthError("No refresh token available")
    client_secret = _client_secret(token.provider)
    if not client_secret:
        raise OAuthError("Client secret not configured for token refresh")

    data = _post_token(token.provider, {
        "grant_type": "refresh_token",
        "client_id": _client_id(token.provider),
        "client_secret": client_secret,
        "refresh_token": token.refresh_token,
    }, "Token refresh failed")

    return OAuthToken(
        access_token=data["access_token"],
        refresh_token=data.get("refresh_token") or token.refresh_token,
        expires_at=_expires_at(data),
        token_type=data.get("token_type") or "Bearer",
        provider=token.provider,
    )


def is_token_expired(token: OAuthToken, now_ms: int | None = None) -> bool:
    if not token.expires_at:
        return False
    now_ms = int(time.time() * 1000) if now_ms is None else now_ms
    return token.expires_at - now_ms < EXPIRY_SKEW_MS


def oauth_token_to_env(token: OAuthToken, cli_type: str) -> dict:
    if cli_type == "claude":
        return {
            "ANTHROPIC_AUTH_TOKEN": f"bearer_{token.access_token}",
            "ANTHROPIC_BEARER_TOKEN": token.access_token,
        }
    if cli_type == "codex":
        return {
            "OPENAI_API_KEY": f"sk-oauth-{token.access_token}",
            "OPENAI_BEARER_TOKEN": token.access_token,
        }
    raise OAuthError(f"Unsupported CLI type: {cli_type}")
