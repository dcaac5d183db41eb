"""
The main window for the block program simulator.
Loads a project, shows its generated code and animates the agent.
"""
from PySide6.QtWidgets import (QMainWindow, QWidget, QVBoxLayout, QHBoxLayout,
                               QPushButton, QFileDialog, QTextEdit, QSplitter,
                               QLabel, QComboBox, QSlider, QCheckBox)
from PySide6.QtCore import Qt, QTimer
from PySide6.QtGui import QFont
from .code_view import CodeView
from .viewport import Viewport
from block_processor import BlockProcessor
from config.simulation_config import ConfigManager
from core.simulation_controller import SimulationController
from core.executor import ExecutorState
from utils.geometry import normalize_angle, radians_to_degrees


SAMPLE_PROJECT = {
    "agent": "Robot",
    "blocks": [
        {"id": "start", "type": "onStart", "category": "events", "x": 40, "y": 20,
         "children": ["move"]},
        {"id": "move", "type": "moveForward", "category": "motion", "x": 40, "y": 60,
         "inputs": {"steps": 30}, "children": ["loop"]},
        {"id": "loop", "type": "repeat", "category": "control", "x": 40, "y": 100,
         "inputs": {"times": 4}, "children": ["turn", "step"]},
        {"id": "turn", "type": "turnRight", "category": "motion", "x": 80, "y": 140,
         "inputs": {"degrees": 90}},
        {"id": "step", "type": "moveForward", "category": "motion", "x": 80, "y": 180,
         "inputs": {"steps": 20}},
    ],
    "obstacles": [
        {"position": {"x": 3, "y": 0.5, "z": 2}, "size": {"x": 1, "y": 1, "z": 4}},
        {"position": {"x": 7, "y": 0.5, "z": -2}, "size": {"x": 1, "y": 1, "z": 4}},
    ],
}


class MainWindow(QMainWindow):
    def __init__(self):
        super().__init__()
        self.setWindowTitle("Block Program Simulator")
        self.setGeometry(100, 100, 1500, 950)

        self.processor = BlockProcessor()
        self.controller = SimulationController()
        self.project_data = None

        # Host animation tick driving the executor
        self.tick_timer = QTimer()
        self.tick_timer.timeout.connect(self.controller.tick)

        self.setup_ui()
        self.connect_signals()

        self.load_project_data(SAMPLE_PROJECT)
        self.tick_timer.start(self.controller.config.tick_interval_ms)

    def setup_ui(self):
        """Set up the user interface."""
        main_widget = QWidget()
        self.setCentralWidget(main_widget)
        main_layout = QVBoxLayout(main_widget)

        # Top toolbar
        toolbar_layout = QHBoxLayout()

        self.load_button = QPushButton("Load Project")
        self.run_button = QPushButton("Run")
        self.pause_button = QPushButton("Pause")
        self.stop_button = QPushButton("Stop")
        self.reset_button = QPushButton("Reset")

        self.agent_selector = QComboBox()
        self.agent_selector.addItems(ConfigManager.available_agents())

        # Slider works in tenths: 1..30 -> 0.1..3.0
        self.speed_slider = QSlider(Qt.Horizontal)
        self.speed_slider.setRange(1, 30)
        self.speed_slider.setValue(10)
        self.speed_slider.setFixedWidth(150)
        self.speed_label = QLabel("1.0x")

        self.status_label = QLabel("Ready")

        for button in (self.load_button, self.run_button, self.pause_button,
                       self.stop_button, self.reset_button):
            toolbar_layout.addWidget(button)
        toolbar_layout.addStretch()
        toolbar_layout.addWidget(QLabel("Agent:"))
        toolbar_layout.addWidget(self.agent_selector)
        toolbar_layout.addWidget(QLabel("Speed:"))
        toolbar_layout.addWidget(self.speed_slider)
        toolbar_layout.addWidget(self.speed_label)
        toolbar_layout.addWidget(self.status_label)

        main_layout.addLayout(toolbar_layout)

        # View options
        view_layout = QHBoxLayout()
        self.view_options = {}
        for option, label in (('grid', "Grid"), ('axes', "Axes"),
                              ('trail', "Trail"), ('follow', "Follow agent")):
            checkbox = QCheckBox(label)
            checkbox.setChecked(True)
            self.view_options[option] = checkbox
            view_layout.addWidget(checkbox)
        self.reset_view_button = QPushButton("Reset View")
        view_layout.addWidget(self.reset_view_button)
        view_layout.addStretch()
        main_layout.addLayout(view_layout)

        main_splitter = QSplitter(Qt.Vertical)
        main_layout.addWidget(main_splitter)

        workspace_splitter = QSplitter(Qt.Horizontal)

        self.code_view = CodeView()
        workspace_splitter.addWidget(self.code_view)

        self.viewport = Viewport()
        workspace_splitter.addWidget(self.viewport)

        info_panel = QWidget()
        info_layout = QVBoxLayout(info_panel)
        info_layout.setContentsMargins(5, 5, 5, 5)
        self.stats_label = QLabel("Statistics:\nNo program loaded")
        self.stats_label.setFont(QFont("Courier", 9))
        self.stats_label.setStyleSheet("QLabel { background-color: #f0f0f0; padding: 5px; }")
        info_layout.addWidget(self.stats_label)
        self.pose_label = QLabel("")
        self.pose_label.setFont(QFont("Courier", 9))
        info_layout.addWidget(self.pose_label)
        info_layout.addStretch()
        workspace_splitter.addWidget(info_panel)

        # Bottom pane with diagnostics and console
        console_splitter = QSplitter(Qt.Horizontal)

        diagnostics_widget = QWidget()
        diagnostics_layout = QVBoxLayout(diagnostics_widget)
        diagnostics_layout.setContentsMargins(0, 0, 0, 0)
        diagnostics_layout.addWidget(QLabel("Block Warnings:"))
        self.diagnostics_console = QTextEdit()
        self.diagnostics_console.setReadOnly(True)
        self.diagnostics_console.setMaximumHeight(150)
        diagnostics_layout.addWidget(self.diagnostics_console)
        console_splitter.addWidget(diagnostics_widget)

        console_widget = QWidget()
        console_layout = QVBoxLayout(console_widget)
        console_layout.setContentsMargins(0, 0, 0, 0)
        console_layout.addWidget(QLabel("Console Output:"))
        self.console = QTextEdit()
        self.console.setReadOnly(True)
        self.console.setMaximumHeight(150)
        console_layout.addWidget(self.console)
        console_splitter.addWidget(console_widget)

        main_splitter.addWidget(workspace_splitter)
        main_splitter.addWidget(console_splitter)

        workspace_splitter.setSizes([450, 800, 250])
        console_splitter.setSizes([500, 500])
        main_splitter.setSizes([750, 200])

    def connect_signals(self):
        """Connect all signal handlers."""
        self.load_button.clicked.connect(self.load_project_file)
        self.run_button.clicked.connect(self.run_program)
        self.pause_button.clicked.connect(self.toggle_pause)
        self.stop_button.clicked.connect(self.stop_program)
        self.reset_button.clicked.connect(self.reset_simulation)
        self.agent_selector.currentTextChanged.connect(self.change_agent)
        self.speed_slider.valueChanged.connect(self.change_speed)
        for option, checkbox in self.view_options.items():
            checkbox.toggled.connect(lambda checked, o=option: self.viewport.toggle_display_option(o))
        self.reset_view_button.clicked.connect(self.viewport.reset_view)

        self.controller.add_state_listener(self.on_robot_state_changed)
        self.controller.add_command_listener(self.on_command_complete)

    def load_project_file(self):
        """Load a block program from a JSON file."""
        file_path, _ = QFileDialog.getOpenFileName(
            self, "Open Block Project", "",
            "Block Projects (*.json);;All Files (*)"
        )

        if file_path:
            self.open_project(file_path)

    def open_project(self, file_path):
        data, error = self.controller.load_project_file(file_path)
        if error:
            self.console.append(f"Could not load {file_path}: {error}")
            return
        self.console.append(f"Loaded: {file_path}")
        self.load_project_data(data)

    def load_project_data(self, data):
        self.project_data = data
        self.controller.load_project(data)
        self.viewport.set_obstacles(self.controller.obstacles)
        if isinstance(data, dict) and data.get('agent'):
            index = self.agent_selector.findText(data['agent'])
            if index >= 0:
                self.agent_selector.blockSignals(True)
                self.agent_selector.setCurrentIndex(index)
                self.agent_selector.blockSignals(False)
            self.viewport.set_agent_size(self.controller.config.agent_size)
        self.process_program()

    def process_program(self):
        """Compile the loaded program and refresh the code and statistics."""
        self.processor.process_blocks(self.controller.blocks)
        self.code_view.set_code(self.processor.get_generated_code())
        self.update_diagnostics_display()
        self.update_statistics()

    def run_program(self):
        self.viewport.clear_trail()
        commands = self.controller.run()
        self.update_diagnostics_display()
        self.console.append(f"Running {len(commands)} commands")
        self.update_status()

    def toggle_pause(self):
        self.controller.toggle_pause()
        self.update_status()

    def stop_program(self):
        self.controller.stop()
        self.console.append("Stopped")
        self.update_status()

    def reset_simulation(self):
        self.controller.reset()
        self.viewport.clear_trail()
        self.speed_slider.setValue(int(round(self.controller.executor.speed * 10)))
        self.update_status()

    def change_agent(self, agent_name):
        self.controller.set_agent(agent_name)
        self.viewport.set_agent_size(self.controller.config.agent_size)
        self.viewport.clear_trail()
        self.console.append(f"Switched to {self.controller.config.name}")
        self.process_program()

    def change_speed(self, value):
        speed = self.controller.set_speed(value / 10.0)
        self.speed_label.setText(f"{speed:.1f}x")

    def on_robot_state_changed(self, state):
        self.viewport.set_robot_state(state)
        heading = radians_to_degrees(normalize_angle(state.heading))
        self.pose_label.setText(
            f"x: {state.position.x:7.2f}\n"
            f"z: {state.position.z:7.2f}\n"
            f"heading: {heading:7.1f}"
        )
        self.update_status()

    def on_command_complete(self, command):
        total = len(self.controller.commands)
        self.console.append(f"[{self.controller.executed_steps}/{total}] {command}")

    def update_status(self):
        state = self.controller.state
        self.pause_button.setText("Resume" if state == ExecutorState.PAUSED else "Pause")
        self.status_label.setText(state.value.capitalize())

    def update_diagnostics_display(self):
        diagnostics = self.processor.get_all_diagnostics()
        if not diagnostics:
            self.diagnostics_console.setText("No problems found.")
            return
        lines = [f"[{d.severity.value.upper()}] {d}" for d in diagnostics]
        self.diagnostics_console.setText("\n".join(lines))

    def update_statistics(self):
        """Update the statistics display."""
        stats = self.processor.get_statistics()
        counts = stats['command_counts']

        stats_text = f"""Statistics:
Blocks: {stats['total_blocks']}
Commands: {stats['total_commands']}
Warnings: {stats['diagnostics']}

Commands by type:
Forward: {counts['move_forward']}
Backward: {counts['move_backward']}
Turn left: {counts['turn_left']}
Turn right: {counts['turn_right']}
Wait: {counts['wait']}

Travel: {stats['travel_distance']:.2f}
Net turn: {stats['net_rotation_degrees']:.0f} deg
Run time (1x): {stats['estimated_duration_ms'] / 1000.0:.1f} s"""

        self.stats_label.setText(stats_text)
