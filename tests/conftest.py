"""
Pytest fixtures shared by the test suite.
"""

import os

import pytest

# Qt objects in the controller tests need a platform even without a display
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from nexavisualize.model.graph import HeadlessScene
from nexavisualize.model.layers import LayerSpec
from nexavisualize.model.state import VisualizerState


@pytest.fixture
def scene():
    """Empty in-memory scene."""
    return HeadlessScene()


@pytest.fixture
def small_layers():
    """Three fully-connectable layers of 8 neurons."""
    return [LayerSpec(name=f"Layer {i}", neurons=8) for i in range(3)]


@pytest.fixture
def state():
    """Fresh visualizer state with the default architecture."""
    return VisualizerState()


@pytest.fixture(scope="session")
def qapp():
    """Shared Qt core application for timer-driven controllers."""
    from PySide6.QtCore import QCoreApplication

    app = QCoreApplication.instance() or QCoreApplication([])
    yield app
