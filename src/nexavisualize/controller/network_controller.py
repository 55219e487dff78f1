"""
Network Controller
==================
Owns the graph currently installed in the scene and rebuilds it when the
architecture changes.

Why is this file needed?
------------------------
1. Rebuild-and-swap: The previous graph is always released before the next one
   is installed, so two graphs never share the scene.
2. Debounce: Editing a spin box fires many change events. A single-shot QTimer
   collapses them into one rebuild; a new request cancels the pending one.
"""
from __future__ import annotations

import logging
from typing import Optional

from PySide6.QtCore import QObject, QTimer, Signal

from nexavisualize.config import REBUILD_DEBOUNCE_MS
from nexavisualize.model.builder import build_network
from nexavisualize.model.graph import NetworkGraph, Scene
from nexavisualize.model.state import VisualizerState

logger = logging.getLogger(__name__)


class NetworkController(QObject):
    graph_rebuilt = Signal(object)  # NetworkGraph

    def __init__(self, state: VisualizerState, scene: Optional[Scene], parent: Optional[QObject] = None) -> None:
        super().__init__(parent)
        self.state = state
        self.scene = scene
        self.graph: Optional[NetworkGraph] = None

        self._rebuild_timer = QTimer(self)
        self._rebuild_timer.setSingleShot(True)
        self._rebuild_timer.setInterval(REBUILD_DEBOUNCE_MS)
        self._rebuild_timer.timeout.connect(self.rebuild_now)

    @property
    def rebuild_pending(self) -> bool:
        return self._rebuild_timer.isActive()

    def schedule_rebuild(self) -> None:
        """Request a rebuild; restarting the timer drops any pending request."""
        self._rebuild_timer.start()

    def rebuild_now(self) -> NetworkGraph:
        self._rebuild_timer.stop()
        self.release()

        self.graph = build_network(
            self.scene,
            self.state.layers,
            family=self.state.family,
            seed=self.state.seed,
            max_connections=self.state.max_connections,
        )
        self.graph_rebuilt.emit(self.graph)
        return self.graph

    def release(self) -> None:
        if self.graph is not None:
            self.graph.release(self.scene)
            self.graph = None
