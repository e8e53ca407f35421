"""
Error types raised by k8soci.
"""


class K8sOciError(Exception):
    """Base class for all k8soci errors"""


class DecodeError(K8sOciError):
    """A pull secret payload is malformed or not in the declared format"""


class InvalidReferenceError(K8sOciError):
    """An image reference cannot be parsed into host/repository/tag-or-digest"""


class AuthExchangeError(K8sOciError):
    """The GitHub App JWT could not be exchanged for an installation token"""


class GitError(K8sOciError):
    """A working-tree operation against a Git repository failed"""


class KubernetesError(K8sOciError):
    """A request to the Kubernetes API failed"""


class ConfigError(K8sOciError):
    """A configuration value is malformed"""
