"""
PyVista Scene Adapter
=====================
Hosts graph nodes and edges as PyVista actors.

Why is this file needed?
------------------------
1. Rendering: The builder only talks to the Scene protocol. This class turns
   nodes into small spheres and edges into line segments on a plotter.
2. Resource lifetime: VTK actors live until they are removed from the
   renderer, so every handle returned here is released through `remove`.
3. Animation: `apply_frame` pushes per-layer highlights onto existing actors
   without rebuilding geometry.
"""
from __future__ import annotations

import logging
from typing import Optional

import numpy as np
import pyvista as pv

from nexavisualize.config import (
    EDGE_COLOR,
    EDGE_OPACITY,
    GROUND_PLANE_SIZE,
    GROUND_PLANE_Y,
    NEURON_SIZE,
    NODE_OPACITY,
    hex_to_rgb,
)
from nexavisualize.model.animation import AnimationFrame, EdgeSelection
from nexavisualize.model.graph import GraphEdge, GraphNode, NetworkGraph

logger = logging.getLogger(__name__)

GROUND_GRID_DIVISIONS: int = 20


class PyVistaScene:
    def __init__(self, plotter: pv.Plotter) -> None:
        self.plotter = plotter
        self._ground_actor: Optional[pv.Actor] = None

    # ------------------------------------------------------------------------------
    # Scene protocol
    # ------------------------------------------------------------------------------

    def add_node(self, node: GraphNode) -> pv.Actor:
        sphere = pv.Sphere(radius=NEURON_SIZE, center=node.position, theta_resolution=8, phi_resolution=6)
        actor = self.plotter.add_mesh(
            sphere,
            color=hex_to_rgb(node.color),
            opacity=NODE_OPACITY,
            smooth_shading=True,
            pickable=False,
            reset_camera=False,
        )
        # Scale about the node center, not the world origin
        actor.origin = node.position
        return actor

    def add_edge(self, edge: GraphEdge) -> pv.Actor:
        line = pv.Line(edge.from_node.position, edge.to_node.position)
        return self.plotter.add_mesh(
            line,
            color=hex_to_rgb(EDGE_COLOR),
            opacity=edge.opacity,
            line_width=1,
            pickable=False,
            reset_camera=False,
        )

    def remove(self, handle: pv.Actor) -> None:
        self.plotter.remove_actor(handle, render=False)

    # ------------------------------------------------------------------------------
    # Decorations
    # ------------------------------------------------------------------------------

    def show_ground_grid(self) -> None:
        """Floor grid below the graph (XZ plane at GROUND_PLANE_Y)."""
        if self._ground_actor is not None:
            self.plotter.remove_actor(self._ground_actor, render=False)

        half = GROUND_PLANE_SIZE / 2
        ticks = np.linspace(-half, half, GROUND_GRID_DIVISIONS + 1)
        n_lines = len(ticks) * 2
        points = np.empty((n_lines * 2, 3), dtype=float)
        cells = np.empty(n_lines * 3, dtype=int)

        pid, cid = 0, 0
        for t in ticks:
            for start, end in (((t, -half), (t, half)), ((-half, t), (half, t))):
                points[pid] = (start[0], GROUND_PLANE_Y, start[1])
                points[pid + 1] = (end[0], GROUND_PLANE_Y, end[1])
                cells[cid:cid + 3] = (2, pid, pid + 1)
                pid += 2
                cid += 3

        self._ground_actor = self.plotter.add_mesh(
            pv.PolyData(points, lines=cells),
            color="#444444",
            opacity=0.5,
            pickable=False,
            reset_camera=False,
        )

    # ------------------------------------------------------------------------------
    # Animation
    # ------------------------------------------------------------------------------

    def reset_appearance(self, graph: NetworkGraph) -> None:
        """Back to the resting look: base colors, no glow, unit scale."""
        for node in graph.nodes:
            if node.handle is None:
                continue
            prop = node.handle.prop
            prop.opacity = NODE_OPACITY
            prop.ambient = 0.0
            node.handle.scale = (1.0, 1.0, 1.0)
        for edge in graph.edges:
            if edge.handle is None:
                continue
            edge.handle.prop.color = hex_to_rgb(EDGE_COLOR)
            edge.handle.prop.opacity = edge.opacity

    def apply_frame(self, graph: NetworkGraph, frame: AnimationFrame) -> None:
        self.reset_appearance(graph)

        for layer_index, highlight in frame.layers.items():
            if layer_index >= len(graph.layers):
                continue
            for node in graph.layers[layer_index]:
                if node.handle is None:
                    continue
                prop = node.handle.prop
                # pv.Property is a vtkProperty; ambient color stands in for emissive glow
                prop.SetAmbientColor(hex_to_rgb(highlight.node_color))
                prop.ambient = highlight.emissive
                node.handle.scale = (highlight.node_scale,) * 3

        for edge in graph.edges:
            if edge.handle is None:
                continue
            highlight = None
            match frame.edges:
                case EdgeSelection.OUTGOING:
                    highlight = frame.layers.get(edge.from_layer)
                case EdgeSelection.INCOMING:
                    highlight = frame.layers.get(edge.to_layer)
                case EdgeSelection.ALL:
                    highlight = frame.layers.get(edge.from_layer) or frame.layers.get(edge.to_layer)
            if highlight is not None:
                edge.handle.prop.color = hex_to_rgb(highlight.edge_color)
                edge.handle.prop.opacity = highlight.edge_opacity

    def render(self) -> None:
        self.plotter.render()
