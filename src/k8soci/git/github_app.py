"""
GitHub App installation token exchange.
"""

import time
from typing import Optional

import httpx
import jwt

from k8soci.constants import (
    DEFAULT_GITHUB_API_URL,
    DEFAULT_HTTP_TIMEOUT,
    GITHUB_APP_JWT_BACKDATE,
    GITHUB_APP_JWT_LIFETIME,
)
from k8soci.exceptions import AuthExchangeError
from k8soci.logging import get_logger, log_api_call

logger = get_logger("k8soci.git.github_app")


def create_app_jwt(app_id: str, private_key: str, now: Optional[int] = None) -> str:
    """
    Create the RS256 JWT a GitHub App authenticates with.

    Args:
        app_id: GitHub App ID (JWT issuer)
        private_key: PEM encoded private key of the app
        now: Current epoch seconds, defaults to time.time()

    Raises:
        AuthExchangeError: If the key cannot sign the token
    """
    if now is None:
        now = int(time.time())

    payload = {
        "iat": now - GITHUB_APP_JWT_BACKDATE,
        "exp": now + GITHUB_APP_JWT_LIFETIME,
        "iss": str(app_id),
    }

    try:
        return jwt.encode(payload, private_key, algorithm="RS256")
    except (ValueError, TypeError, jwt.PyJWTError) as e:
        raise AuthExchangeError(f"Failed to sign GitHub App JWT for app {app_id}: {e}")


def exchange_installation_token(
    app_id: str,
    installation_id: str,
    private_key: str,
    api_url: str = DEFAULT_GITHUB_API_URL,
    timeout: float = DEFAULT_HTTP_TIMEOUT,
) -> str:
    """
    Exchange an app JWT for an installation access token.

    Returns:
        str: Installation access token

    Raises:
        AuthExchangeError: If signing, the request or the response fails
    """
    signed_jwt = create_app_jwt(app_id, private_key)
    url = f"{api_url.rstrip('/')}/app/installations/{installation_id}/access_tokens"
    headers = {
        "Authorization": f"Bearer {signed_jwt}",
        "Accept": "application/vnd.github+json",
    }

    logger.debug(f"Requesting installation token for GitHub App {app_id}")
    started = time.monotonic()
    try:
        with httpx.Client() as client:
            resp = client.post(url, headers=headers, timeout=timeout)
    except httpx.HTTPError as e:
        log_api_call("POST", url, duration=time.monotonic() - started, error=str(e))
        raise AuthExchangeError(f"Network error during GitHub App token exchange: {e}")

    log_api_call("POST", url, status_code=resp.status_code, duration=time.monotonic() - started)

    if resp.status_code != 201:
        raise AuthExchangeError(
            f"GitHub App token exchange failed for installation {installation_id} "
            f"({resp.status_code})"
        )

    try:
        body = resp.json()
    except ValueError:
        body = None
    token = body.get("token") if isinstance(body, dict) else None
    if not token:
        raise AuthExchangeError("GitHub App token exchange returned no token")

    logger.info(f"Obtained installation token for GitHub App {app_id}")
    return token
