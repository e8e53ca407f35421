"""
Git authentication and working tree package.
"""

from k8soci.git.auth import (
    BasicAuth,
    GitAuthChain,
    GitAuthStrategy,
    GitHubAppAuth,
    ResolvedGitAuth,
    TokenAuth,
)

__all__ = [
    "BasicAuth",
    "GitAuthChain",
    "GitAuthStrategy",
    "GitHubAppAuth",
    "ResolvedGitAuth",
    "TokenAuth",
]
