"""
Main Application Window
=======================
The primary GUI container: a control column on the left and the 3D viewport
on the right.

Why is this file needed?
------------------------
1. Layout: It organizes the high-level visual structure of the viewer.
2. Routing: It connects widget events to the NetworkController (rebuilds) and
   the TrainingLoop (simulation), and paints their results.
"""
from __future__ import annotations

import logging
from typing import Optional

from PySide6.QtCore import QElapsedTimer, Qt, QTimer
from PySide6.QtWidgets import (
    QComboBox, QDoubleSpinBox, QFormLayout, QHBoxLayout, QLabel, QMainWindow,
    QPushButton, QSpinBox, QSplitter, QTableWidget, QTableWidgetItem,
    QVBoxLayout, QWidget,
)
from pyvistaqt import QtInteractor

from nexavisualize.config import APP_VERSION
from nexavisualize.controller.network_controller import NetworkController
from nexavisualize.controller.training_loop import TrainingLoop
from nexavisualize.model.animation import completion_frame, compute_frame
from nexavisualize.model.camera import calculate_camera_distance
from nexavisualize.model.families import ModelFamily
from nexavisualize.model.graph import NetworkGraph
from nexavisualize.model.layers import derive_layer_configs
from nexavisualize.model.state import TrainingStatus, VisualizerState
from nexavisualize.model.status import progress_percent, status_badge, telemetry_label
from nexavisualize.model.training import GUIDED_PHASE_COPY, TrainingPhase, advance_progress
from nexavisualize.view.scene import PyVistaScene

logger = logging.getLogger(__name__)

VISIBLE_APP_NAME = "Nexa Visualize"
FRAME_INTERVAL_MS = 33
MAX_SEED = 2147483646


class MainWindow(QMainWindow):
    def __init__(self, state: VisualizerState) -> None:
        super().__init__()
        self.state = state
        self.setWindowTitle(f"{VISIBLE_APP_NAME} {APP_VERSION}")
        self.resize(1400, 900)

        splitter = QSplitter(Qt.Horizontal)
        self.setCentralWidget(splitter)

        # --- RIGHT SIDE: 3D viewport ---
        self.plotter = QtInteractor(splitter)
        splitter.addWidget(self.plotter)
        self.plotter.set_background("#101018")
        self.scene = PyVistaScene(self.plotter)
        self.scene.show_ground_grid()

        # --- LEFT SIDE: controls ---
        splitter.insertWidget(0, self._build_controls())
        splitter.setSizes([360, 1040])

        # --- Controllers ---
        self.network = NetworkController(state, self.scene, parent=self)
        self.network.graph_rebuilt.connect(self._on_graph_rebuilt)
        self.training = TrainingLoop(state, parent=self)
        self.training.ticked.connect(self._on_tick)
        self.training.completed.connect(self._on_complete)

        # Animation clock
        self._clock = QElapsedTimer()
        self._clock.start()
        self._fps: Optional[float] = None
        self._last_frame_ms = 0
        self._frame_timer = QTimer(self)
        self._frame_timer.setInterval(FRAME_INTERVAL_MS)
        self._frame_timer.timeout.connect(self._animate)
        self._frame_timer.start()

        self._sync_layer_table()
        self.network.rebuild_now()

    # ------------------------------------------------------------------------------
    # Layout
    # ------------------------------------------------------------------------------

    def _build_controls(self) -> QWidget:
        panel = QWidget()
        layout = QVBoxLayout(panel)

        form = QFormLayout()
        self.combo_family = QComboBox()
        for family in ModelFamily:
            self.combo_family.addItem(family.label, family)
        self.combo_family.setCurrentIndex(list(ModelFamily).index(self.state.family))
        self.combo_family.currentIndexChanged.connect(self._on_family_changed)
        form.addRow("Model", self.combo_family)

        self.spin_seed = QSpinBox()
        self.spin_seed.setRange(1, MAX_SEED)
        self.spin_seed.setValue(self.state.seed)
        self.spin_seed.valueChanged.connect(self._on_seed_changed)
        form.addRow("Seed", self.spin_seed)

        self.spin_lr = QDoubleSpinBox()
        self.spin_lr.setDecimals(4)
        self.spin_lr.setRange(0.0001, 0.04)
        self.spin_lr.setSingleStep(0.001)
        self.spin_lr.setValue(self.state.training_params.learning_rate)
        self.spin_lr.valueChanged.connect(self._on_learning_rate_changed)
        form.addRow("Learning rate", self.spin_lr)

        self.spin_speed = QDoubleSpinBox()
        self.spin_speed.setRange(0.1, 5.0)
        self.spin_speed.setSingleStep(0.1)
        self.spin_speed.setValue(self.state.animation_speed)
        self.spin_speed.valueChanged.connect(self._on_speed_changed)
        form.addRow("Speed", self.spin_speed)
        layout.addLayout(form)

        # Layer table: name / neurons
        self.table_layers = QTableWidget(0, 2)
        self.table_layers.setHorizontalHeaderLabels(["Layer", "Neurons"])
        self.table_layers.itemChanged.connect(self._on_layer_item_changed)
        layout.addWidget(self.table_layers)

        row = QHBoxLayout()
        btn_add = QPushButton("Add layer")
        btn_add.clicked.connect(self._on_add_layer)
        btn_remove = QPushButton("Remove layer")
        btn_remove.clicked.connect(self._on_remove_layer)
        row.addWidget(btn_add)
        row.addWidget(btn_remove)
        layout.addLayout(row)

        row = QHBoxLayout()
        self.btn_train = QPushButton("Start")
        self.btn_train.clicked.connect(self._on_toggle_training)
        btn_reset = QPushButton("Reset")
        btn_reset.clicked.connect(self._on_reset_training)
        row.addWidget(self.btn_train)
        row.addWidget(btn_reset)
        layout.addLayout(row)

        self.lbl_badge = QLabel()
        self.lbl_metrics = QLabel()
        self.lbl_phase = QLabel()
        self.lbl_phase.setWordWrap(True)
        self.lbl_telemetry = QLabel()
        for label in (self.lbl_badge, self.lbl_metrics, self.lbl_phase, self.lbl_telemetry):
            layout.addWidget(label)
        layout.addStretch()

        self._refresh_status(self.state.training)
        return panel

    def _sync_layer_table(self) -> None:
        self.table_layers.blockSignals(True)
        self.table_layers.setRowCount(len(self.state.layers))
        for row, layer in enumerate(self.state.layers):
            self.table_layers.setItem(row, 0, QTableWidgetItem(layer.name))
            self.table_layers.setItem(row, 1, QTableWidgetItem(str(layer.neurons)))
        self.table_layers.blockSignals(False)

    # ------------------------------------------------------------------------------
    # Slots
    # ------------------------------------------------------------------------------

    def _on_family_changed(self, index: int) -> None:
        self.training.stop()
        self.state.apply_preset(self.combo_family.itemData(index))
        self._sync_layer_table()
        self._refresh_status(self.state.training)
        self.network.schedule_rebuild()

    def _on_seed_changed(self, value: int) -> None:
        self.state.seed = value
        self.network.schedule_rebuild()

    def _on_learning_rate_changed(self, value: float) -> None:
        self.state.training_params.learning_rate = value

    def _on_speed_changed(self, value: float) -> None:
        self.training.set_speed(value)

    def _on_layer_item_changed(self, item: QTableWidgetItem) -> None:
        field_name = "name" if item.column() == 0 else "neurons"
        if self.state.update_layer(item.row(), field_name, item.text()):
            self.network.schedule_rebuild()
        self._sync_layer_table()

    def _on_add_layer(self) -> None:
        self.state.add_layer()
        self._sync_layer_table()
        self.network.schedule_rebuild()

    def _on_remove_layer(self) -> None:
        if self.state.remove_layer(self.table_layers.currentRow()):
            self._sync_layer_table()
            self.network.schedule_rebuild()

    def _on_toggle_training(self) -> None:
        if self.training.is_running:
            self.training.stop()
            self._rest_scene()
        else:
            self.training.start()
        self._refresh_status(self.state.training)

    def _on_reset_training(self) -> None:
        self.training.reset()
        self._rest_scene()
        self._refresh_status(self.state.training)

    def _on_graph_rebuilt(self, graph: NetworkGraph) -> None:
        distance = calculate_camera_distance(derive_layer_configs(self.state.layers), graph.family)
        self.plotter.camera_position = [(distance * 0.6, distance * 0.35, distance * 0.75), (0, 0, 0), (0, 1, 0)]
        self.plotter.render()

    def _on_tick(self, status: TrainingStatus) -> None:
        self._refresh_status(status)

    def _on_complete(self, status: TrainingStatus) -> None:
        if self.network.graph is not None:
            self.scene.apply_frame(self.network.graph, completion_frame(self.network.graph.stage_count))
        self._refresh_status(status)

    # ------------------------------------------------------------------------------
    # Painting
    # ------------------------------------------------------------------------------

    def _rest_scene(self) -> None:
        if self.network.graph is not None:
            self.scene.reset_appearance(self.network.graph)
            self.plotter.render()

    def _animate(self) -> None:
        now = self._clock.elapsed()
        delta = now - self._last_frame_ms
        self._last_frame_ms = now
        if delta > 0:
            self._fps = 1000.0 / delta

        graph = self.network.graph
        if graph is None:
            return
        if self.state.training.is_training:
            progress = advance_progress(now / 1000.0, self.state.animation_speed, graph.stage_count)
            frame = compute_frame(progress, graph.stage_count)
            self.scene.apply_frame(graph, frame)
            self.lbl_phase.setText(self._phase_text(frame.phase))
            self.plotter.render()
        self.lbl_telemetry.setText(telemetry_label(self._fps, graph.stats))

    @staticmethod
    def _phase_text(phase: TrainingPhase) -> str:
        copy = GUIDED_PHASE_COPY[phase]
        return f"<b>{copy.title}</b><br>{copy.description}"

    def _refresh_status(self, status: TrainingStatus) -> None:
        self.lbl_badge.setText(status_badge(status.is_training, status.is_complete))
        self.lbl_metrics.setText(
            f"Epoch {status.epoch} • Batch {status.batch} • Loss {status.loss:.4f} • "
            f"Accuracy {progress_percent(status.accuracy):.1f}%"
        )
        self.btn_train.setText("Stop" if status.is_training else "Start")
        if not status.is_training:
            self.lbl_phase.setText(self._phase_text(TrainingPhase.IDLE))

    def closeEvent(self, event) -> None:
        self._frame_timer.stop()
        self.training.stop()
        self.network.release()
        self.plotter.close()
        super().closeEvent(event)
