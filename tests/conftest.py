"""
Pytest configuration for NodeDrain tests.

SPDX-License-Identifier: Apache-2.0
Copyright 2025 Sebastian Daberdaku
"""

import os
import sys
from pathlib import Path

import pytest
from kubernetes import client as k8s

# Add src directory to Python path for imports
project_root = Path(__file__).parent.parent
src_path = project_root / "src"
sys.path.insert(0, str(src_path))


class FakeClock:
    """Monotonic clock that only moves when advanced."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture(autouse=True)
def setup_test_environment():
    """Set up test environment variables."""
    os.environ["LOG_LEVEL"] = "DEBUG"
    os.environ["ENABLE_JSON_LOGS"] = "false"


@pytest.fixture
def fake_clock():
    """Fake monotonic clock."""
    return FakeClock()


@pytest.fixture
def make_deadline(fake_clock):
    """Factory for deadlines whose sleeps advance the fake clock instead of blocking."""
    from nodedrain.drain.deadline import Deadline

    class FakeDeadline(Deadline):
        def __init__(self, timeout, cancelled=None):
            super().__init__(timeout, cancelled=cancelled, clock=fake_clock)
            self.sleeps = []

        def _wait(self, seconds):
            self.sleeps.append(seconds)
            fake_clock.advance(seconds)

    return FakeDeadline


@pytest.fixture
def make_pod():
    """Factory for Kubernetes pod objects."""

    def _make_pod(
        name="test-pod",
        namespace="default",
        phase="Running",
        owner_kind=None,
        annotations=None,
        volumes=None,
        uid=None,
        node_name="test-node",
    ):
        owner_references = None
        if owner_kind:
            owner_references = [
                k8s.V1OwnerReference(
                    api_version="apps/v1", kind=owner_kind, name=f"{name}-owner", uid="owner-uid"
                )
            ]
        return k8s.V1Pod(
            metadata=k8s.V1ObjectMeta(
                name=name,
                namespace=namespace,
                uid=uid or f"{namespace}-{name}-uid",
                annotations=annotations,
                owner_references=owner_references,
            ),
            spec=k8s.V1PodSpec(containers=[], node_name=node_name, volumes=volumes),
            status=k8s.V1PodStatus(phase=phase),
        )

    return _make_pod


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "integration: mark test as integration test (requires Kubernetes cluster)"
    )


def pytest_collection_modifyitems(config, items):
    """Modify test collection to add markers automatically."""
    for item in items:
        # Add integration marker to tests in integration directory
        if "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)
