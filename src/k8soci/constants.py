"""
Global constants for k8soci.
"""

# Docker Hub
DEFAULT_REGISTRY = "docker.io"
DEFAULT_AUTH_KEY = "https://index.docker.io/v1/"
DOCKER_HUB_HOSTS = frozenset(
    {
        "docker.io",
        "index.docker.io",
        "registry-1.docker.io",
        "registry.hub.docker.com",
    }
)
OFFICIAL_REPO_PREFIX = "library/"

# Kubernetes pull secret types and their data keys
SECRET_TYPE_DOCKER_CONFIG_JSON = "kubernetes.io/dockerconfigjson"
SECRET_TYPE_DOCKERCFG = "kubernetes.io/dockercfg"
DOCKER_CONFIG_JSON_KEY = ".dockerconfigjson"
DOCKERCFG_KEY = ".dockercfg"

# Git transport usernames
TOKEN_AUTH_USERNAME = "<token>"
GITHUB_APP_AUTH_USERNAME = "x-access-token"

# GitHub App token exchange
DEFAULT_GITHUB_API_URL = "https://api.github.com"
GITHUB_APP_JWT_BACKDATE = 60  # Clock drift allowance in seconds
GITHUB_APP_JWT_LIFETIME = 540  # GitHub rejects app JWTs living over 10 minutes
DEFAULT_HTTP_TIMEOUT = 15.0

# Configuration
CONFIG_DIR_NAME = "k8soci"
ENV_PREFIX = "K8SOCI_"
KEYRING_SERVICE = "k8soci:git"

# Logging constants
LOG_APP_NAME = "K8SOCI"
LOG_FILE_NAME = "k8soci"
LOG_RETENTION_DAYS = 7

# Sensitive data keys for sanitization
SENSITIVE_KEYS = (
    "password", "token", "access_token", "identitytoken", "registrytoken",
    "auth", "key", "secret", "private_key", "authorization", "bearer",
    "jwt", "cookie"
)
