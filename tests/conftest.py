"""Test fixtures."""

from __future__ import annotations

import pytest

from seldonfake import (
    Clientset,
    FakeSeldonDeployments,
    FakeSettings,
    new_simple_clientset,
)


@pytest.fixture
def clientset() -> Clientset:
    return new_simple_clientset(settings=FakeSettings(watch_buffer_size=10))


@pytest.fixture
def client(clientset: Clientset) -> FakeSeldonDeployments:
    return clientset.machinelearning_v1alpha2().seldon_deployments("default")
