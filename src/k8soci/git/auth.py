"""
Git transport authentication.

A GitAuthChain holds the configured strategies in priority order and hands out
the credential of the first one that is configured. Strategies are immutable,
so a chain built at startup can be shared between threads.
"""

from dataclasses import dataclass
from typing import Optional, Tuple, Union

from k8soci.constants import (
    DEFAULT_GITHUB_API_URL,
    DEFAULT_HTTP_TIMEOUT,
    GITHUB_APP_AUTH_USERNAME,
    TOKEN_AUTH_USERNAME,
)
from k8soci.exceptions import AuthExchangeError
from k8soci.git.github_app import exchange_installation_token
from k8soci.logging import get_logger, log_authentication_event

logger = get_logger("k8soci.git.auth")


@dataclass(frozen=True)
class ResolvedGitAuth:
    """HTTP basic credentials for a Git remote"""

    username: str
    password: str

    def __repr__(self) -> str:
        return f"ResolvedGitAuth(username={self.username!r}, password='***')"


@dataclass(frozen=True)
class TokenAuth:
    token: str = ""

    kind = "token"

    def is_configured(self) -> bool:
        return bool(self.token)

    def resolve(self) -> ResolvedGitAuth:
        return ResolvedGitAuth(TOKEN_AUTH_USERNAME, self.token)


@dataclass(frozen=True)
class BasicAuth:
    username: str = ""
    password: str = ""

    kind = "basic"

    def is_configured(self) -> bool:
        return bool(self.username) and bool(self.password)

    def resolve(self) -> ResolvedGitAuth:
        return ResolvedGitAuth(self.username, self.password)


@dataclass(frozen=True)
class GitHubAppAuth:
    app_id: str = ""
    installation_id: str = ""
    private_key: str = ""
    api_url: str = DEFAULT_GITHUB_API_URL
    timeout: float = DEFAULT_HTTP_TIMEOUT

    kind = "github-app"

    def is_configured(self) -> bool:
        return all([self.app_id, self.installation_id, self.private_key])

    def resolve(self) -> ResolvedGitAuth:
        """
        Exchange the app credentials for an installation token.

        Each call performs a blocking round trip to the GitHub API.

        Raises:
            AuthExchangeError: If the exchange fails
        """
        token = exchange_installation_token(
            self.app_id,
            self.installation_id,
            self.private_key,
            api_url=self.api_url,
            timeout=self.timeout,
        )
        return ResolvedGitAuth(GITHUB_APP_AUTH_USERNAME, token)


GitAuthStrategy = Union[TokenAuth, BasicAuth, GitHubAppAuth]


class GitAuthChain:
    """Ordered Git authentication strategies, highest priority first"""

    def __init__(self, strategies: Tuple[GitAuthStrategy, ...] = ()):
        self._strategies = tuple(strategies)

    @classmethod
    def from_values(
        cls,
        token: str = "",
        username: str = "",
        password: str = "",
        github_app_id: str = "",
        github_app_installation_id: str = "",
        github_app_private_key: str = "",
        github_api_url: str = DEFAULT_GITHUB_API_URL,
    ) -> "GitAuthChain":
        """Build the chain in its fixed order: token, basic, GitHub App"""
        return cls((
            TokenAuth(token=token),
            BasicAuth(username=username, password=password),
            GitHubAppAuth(
                app_id=github_app_id,
                installation_id=github_app_installation_id,
                private_key=github_app_private_key,
                api_url=github_api_url,
            ),
        ))

    @property
    def strategies(self) -> Tuple[GitAuthStrategy, ...]:
        return self._strategies

    def selected(self) -> Optional[GitAuthStrategy]:
        """First configured strategy, or None for anonymous access"""
        for strategy in self._strategies:
            if strategy.is_configured():
                return strategy
        return None

    def resolve(self) -> Optional[ResolvedGitAuth]:
        """
        Resolve credentials from the first configured strategy.

        Returns:
            ResolvedGitAuth, or None when nothing is configured

        Raises:
            AuthExchangeError: If the selected strategy fails; lower priority
                strategies are not tried
        """
        strategy = self.selected()
        if strategy is None:
            logger.debug("No Git authentication configured, using anonymous access")
            return None

        try:
            resolved = strategy.resolve()
        except AuthExchangeError as e:
            log_authentication_event(strategy.kind, False, {"error": str(e)})
            raise

        log_authentication_event(strategy.kind, True, {"username": resolved.username})
        return resolved
