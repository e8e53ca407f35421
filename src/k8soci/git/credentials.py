"""
Embedding resolved credentials into remote URLs.
"""

from typing import Optional
from urllib.parse import quote

from k8soci.git.auth import ResolvedGitAuth


def build_secure_url(repo_url: str, auth: Optional[ResolvedGitAuth]) -> str:
    """Build an HTTPS URL carrying the credentials, other URLs are unchanged"""
    if auth is None:
        return repo_url

    for scheme in ("https://", "http://"):
        if repo_url.startswith(scheme):
            rest = repo_url[len(scheme):].split("@", 1)[-1]
            user = quote(auth.username, safe="")
            password = quote(auth.password, safe="")
            return f"{scheme}{user}:{password}@{rest}"
    return repo_url


def strip_credentials(repo_url: str) -> str:
    """Remove any user info from an HTTP(S) URL"""
    for scheme in ("https://", "http://"):
        if repo_url.startswith(scheme):
            return scheme + repo_url[len(scheme):].split("@", 1)[-1]
    return repo_url
