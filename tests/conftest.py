"""Shared pytest configuration and fixtures for the k8soci test suite.

This module provides:
- Pull secret payload fixtures in both formats
- Test configuration (paths, markers)
"""
import base64
import json
import sys
from pathlib import Path

import pytest


# Add src/ to path so test modules can import the k8soci package
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root / "src"))


def b64(value: str) -> str:
    return base64.b64encode(value.encode("utf-8")).decode("ascii")


@pytest.fixture
def modern_payload():
    """A .dockerconfigjson payload with a Hub entry and a private registry."""
    return json.dumps(
        {
            "auths": {
                "https://index.docker.io/v1/": {"username": "u", "password": "p"},
                "registry.example.com": {"auth": b64("robot:s3cret")},
            }
        }
    ).encode("utf-8")


@pytest.fixture
def legacy_payload():
    """A .dockercfg payload."""
    return json.dumps(
        {
            "quay.io": {"auth": b64("quser:qpass"), "email": "q@example.com"},
        }
    ).encode("utf-8")


def pytest_configure(config):
    """Register custom pytest markers."""
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test (fast, isolated)"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test (slower)"
    )
    config.addinivalue_line(
        "markers", "slow: mark test as slow running"
    )


def pytest_collection_modifyitems(config, items):
    """Auto-mark tests based on their location."""
    for item in items:
        if "integration" not in item.nodeid:
            item.add_marker(pytest.mark.unit)
