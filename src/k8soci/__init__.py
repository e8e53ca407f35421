"""
k8soci - credential resolution for Git remotes and Kubernetes image pulls.
"""

__version__ = "0.1.0"
