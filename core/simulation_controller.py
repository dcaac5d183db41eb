"""
This class acts as the main controller for the simulation, bridging the GUI
and the compiler/executor backend.
"""
import json
from typing import Any, Callable, Dict, List, Optional, Tuple

from config.simulation_config import SimulationConfig, ConfigManager
from core.blocks import Block, load_blocks
from core.collision import Obstacle
from core.commands import SimulationCommand
from core.compiler import BlockCompiler
from core.executor import CommandExecutor, ExecutorState
from core.robot_state import RobotState
from utils.logging_utils import get_logger

logger = get_logger(__name__)


class SimulationController:
    def __init__(self, config: Optional[SimulationConfig] = None,
                 clock: Optional[Callable[[], float]] = None):
        self.config = config or ConfigManager.default_robot()
        self.compiler = BlockCompiler(self.config)
        self.executor = CommandExecutor(
            on_state_change=self._handle_state_change,
            on_command_complete=self._handle_command_complete,
            config=self.config,
            clock=clock
        )

        self.blocks: List[Block] = []
        self.obstacles: List[Obstacle] = []
        self.commands: List[SimulationCommand] = []
        self.executed_steps = 0

        self.state_listeners: List[Callable[[RobotState], None]] = []
        self.command_listeners: List[Callable[[SimulationCommand], None]] = []

    # Observers

    def add_state_listener(self, listener: Callable[[RobotState], None]):
        self.state_listeners.append(listener)

    def add_command_listener(self, listener: Callable[[SimulationCommand], None]):
        self.command_listeners.append(listener)

    def _handle_state_change(self, state: RobotState):
        for listener in self.state_listeners:
            listener(state)

    def _handle_command_complete(self, command: SimulationCommand):
        self.executed_steps += 1
        for listener in self.command_listeners:
            listener(command)

    # Project loading

    def load_project_file(self, file_path: str) -> Tuple[Optional[Dict[str, Any]], Optional[str]]:
        try:
            with open(file_path, 'r') as f:
                return json.load(f), None
        except (OSError, ValueError) as e:
            return None, str(e)

    def load_project(self, data: Any):
        """
        Load blocks, obstacles and the agent from a project.

        Args:
            data: A list of block dicts, or a dict with "blocks" and optional
                "obstacles" and "agent" keys
        """
        self.blocks = load_blocks(data)
        obstacles = []
        if isinstance(data, dict):
            obstacles = [Obstacle.from_dict(o) for o in data.get('obstacles') or []
                         if isinstance(o, dict)]
            if data.get('agent'):
                self.set_agent(data['agent'])
        self.set_obstacles(obstacles)
        logger.info(f"Loaded project with {len(self.blocks)} blocks and {len(obstacles)} obstacles")

    def set_obstacles(self, obstacles: List[Obstacle]):
        self.obstacles = list(obstacles)
        self.executor.set_obstacles(self.obstacles)

    def set_agent(self, name: str):
        """Switch agent preset: size, timing and resting height."""
        preset = ConfigManager.get_config(name)
        speed = self.executor.speed

        self.config = preset
        self.compiler.config = preset
        self.executor.config = preset
        self.executor.set_agent_size(preset.agent_size)
        self.executor.set_initial_state(position_y=preset.ground_height,
                                        rotation_y=preset.initial_heading)
        self.executor.set_speed(speed)
        logger.info(f"Switched agent to {preset.name}")

    # Run control

    def run(self, blocks: Optional[List[Any]] = None) -> List[SimulationCommand]:
        """Compile the program and start executing it, pre-empting any run."""
        if blocks is not None:
            self.blocks = load_blocks(blocks)
        self.commands = self.compiler.compile(self.blocks)
        self.executed_steps = 0
        self.executor.execute_commands(self.commands)
        return self.commands

    def tick(self, now: Optional[float] = None):
        self.executor.tick(now)

    def pause(self):
        self.executor.pause()

    def resume(self):
        self.executor.resume()

    def toggle_pause(self):
        if self.executor.state == ExecutorState.PAUSED:
            self.resume()
        else:
            self.pause()

    def stop(self):
        self.executor.stop()

    def reset(self):
        self.executed_steps = 0
        self.executor.reset()

    def set_speed(self, multiplier) -> float:
        return self.executor.set_speed(multiplier)

    @property
    def state(self) -> ExecutorState:
        return self.executor.state

    def get_robot_state(self) -> RobotState:
        return self.executor.get_robot_state()

    def get_diagnostics(self):
        return self.compiler.diagnostics.get_all()
