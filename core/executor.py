"""
Command executor: animates the agent through a compiled command list.

The executor never blocks. The host calls `tick()` once per animation frame
and each call advances the command at the head of the queue. All observer
callbacks fire synchronously from inside `tick()` or the control methods.
"""
import math
import time
from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Deque, Iterable, List, Optional

from config.simulation_config import SimulationConfig, ConfigManager
from core.collision import CollisionModel, Obstacle
from core.commands import SimulationCommand, CommandType
from core.robot_state import RobotState, Vector3
from utils.errors import SimulationError
from utils.geometry import ease_in_out_cubic, forward_offset, degrees_to_radians
from utils.logging_utils import get_logger

logger = get_logger(__name__)

# Clearance left between the agent and an obstacle it runs into
CONTACT_GAP = 1e-6


class ExecutorState(Enum):
    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"


@dataclass
class ActiveCommand:
    """Interpolation state of the in-flight command."""
    command: SimulationCommand
    start_time: float
    duration: float  # scaled milliseconds
    start_position: Vector3
    start_heading: float
    delta_x: float = 0.0
    delta_z: float = 0.0
    delta_heading: float = 0.0
    # Obstacles the agent already touched when the move started
    ignored: List[Obstacle] = field(default_factory=list)


def _monotonic_ms() -> float:
    return time.monotonic() * 1000.0


def _stop_before(start: Vector3, end: Vector3, contact: float) -> Vector3:
    """Pose just short of the first contact on the move from `start` to `end`."""
    length = math.hypot(end.x - start.x, end.z - start.z)
    fraction = max(contact - CONTACT_GAP / length, 0.0) if length > 0 else 0.0
    return Vector3(start.x + (end.x - start.x) * fraction,
                   start.y,
                   start.z + (end.z - start.z) * fraction)


class CommandExecutor:
    """State machine that drives the agent pose through a command queue."""

    def __init__(self,
                 on_state_change: Optional[Callable[[RobotState], None]] = None,
                 on_command_complete: Optional[Callable[[SimulationCommand], None]] = None,
                 config: Optional[SimulationConfig] = None,
                 obstacles: Iterable[Obstacle] = (),
                 clock: Optional[Callable[[], float]] = None):
        self.config = config or SimulationConfig()
        self.on_state_change = on_state_change or (lambda state: None)
        self.on_command_complete = on_command_complete or (lambda command: None)
        self.clock = clock or _monotonic_ms

        self.collision_model = CollisionModel(obstacles, self.config.agent_size)

        self.initial_state = RobotState(
            position=Vector3(0.0, self.config.ground_height, 0.0),
            rotation=Vector3(0.0, self.config.initial_heading, 0.0),
            speed=self.config.default_speed
        )
        self.robot_state = self.initial_state.copy()
        self.speed = self.initial_state.speed

        self.queue: Deque[SimulationCommand] = deque()
        self.active: Optional[ActiveCommand] = None
        self.state = ExecutorState.IDLE

    # Control

    def execute_commands(self, commands: List[SimulationCommand]):
        """Replace the queue and start running. Pre-empts any current run."""
        commands = list(commands)
        for command in commands:
            if not isinstance(command, SimulationCommand):
                raise SimulationError(f"Not a simulation command: {command!r}")
        if self.state == ExecutorState.RUNNING:
            logger.info("Pre-empting current run")
        self.queue = deque(commands)
        self.active = None
        self.state = ExecutorState.RUNNING
        logger.info(f"Executing {len(self.queue)} commands at speed {self.speed:g}")
        self._start_next(self.clock())

    def pause(self):
        """Halt in place. The in-flight command's remainder is dropped."""
        if self.state != ExecutorState.RUNNING:
            return
        self.state = ExecutorState.PAUSED
        self.active = None
        self.robot_state.is_moving = False
        logger.info(f"Paused with {len(self.queue)} commands queued")
        self._emit_state()

    def resume(self):
        """Continue with the next queued command."""
        if self.state != ExecutorState.PAUSED:
            return
        self.state = ExecutorState.RUNNING
        logger.info("Resumed")
        self._start_next(self.clock())

    def stop(self):
        """Abandon the run, keeping the current pose."""
        self.queue.clear()
        self.active = None
        self.state = ExecutorState.IDLE
        self.robot_state.is_moving = False
        self._emit_state()

    def reset(self):
        """Restore the initial state and clear the queue."""
        self.queue.clear()
        self.active = None
        self.state = ExecutorState.IDLE
        self.robot_state = self.initial_state.copy()
        self.speed = self.robot_state.speed
        self._emit_state()

    def set_initial_state(self, position_y: Optional[float] = None,
                          rotation_y: Optional[float] = None):
        """Override the resting height or heading used by reset, then reset."""
        if position_y is not None:
            self.initial_state.position.y = float(position_y)
        if rotation_y is not None:
            self.initial_state.rotation.y = float(rotation_y)
        self.reset()

    def set_speed(self, multiplier) -> float:
        """
        Set the speed multiplier for commands started from now on.

        Returns:
            The multiplier in effect after clamping
        """
        try:
            value = float(multiplier)
        except (TypeError, ValueError):
            logger.warning(f"Ignoring non-numeric speed: {multiplier!r}")
            return self.speed
        if math.isnan(value):
            logger.warning("Ignoring NaN speed")
            return self.speed

        self.speed = ConfigManager.clamp_speed(self.config, value)
        self.robot_state.speed = self.speed
        self._emit_state()
        return self.speed

    def set_obstacles(self, obstacles: Iterable[Obstacle]):
        self.collision_model.set_obstacles(obstacles)

    def set_agent_size(self, agent_size):
        self.collision_model.set_agent_size(agent_size)

    # Queries

    def get_robot_state(self) -> RobotState:
        """Get a snapshot of the agent state."""
        return self.robot_state.snapshot()

    @property
    def is_running(self) -> bool:
        return self.state == ExecutorState.RUNNING

    @property
    def pending_commands(self) -> int:
        return len(self.queue)

    @property
    def current_command(self) -> Optional[SimulationCommand]:
        return self.active.command if self.active else None

    # Animation

    def tick(self, now: Optional[float] = None):
        """Advance the in-flight command to time `now` (milliseconds)."""
        if self.state != ExecutorState.RUNNING or self.active is None:
            return
        if now is None:
            now = self.clock()

        active = self.active
        if active.duration <= 0:
            progress = 1.0
        else:
            progress = min(max((now - active.start_time) / active.duration, 0.0), 1.0)
        eased = ease_in_out_cubic(progress)

        command = active.command
        if command.is_motion():
            current = self.robot_state.position
            proposed = Vector3(
                active.start_position.x + active.delta_x * eased,
                active.start_position.y,
                active.start_position.z + active.delta_z * eased
            )
            contact = self.collision_model.sweep(current, proposed, active.ignored)
            if contact is None:
                self.robot_state.position = proposed
            else:
                self.robot_state.position = _stop_before(current, proposed, contact)
                logger.info(f"Collision during {command}; stopping at "
                            f"({self.robot_state.position.x:.2f}, "
                            f"{self.robot_state.position.z:.2f})")
                progress = 1.0  # the rest of the move is abandoned
            self._emit_state()
        elif command.is_rotation():
            self.robot_state.rotation.y = active.start_heading + active.delta_heading * eased
            self._emit_state()

        if progress >= 1.0 and self.active is active:
            self._complete(active, now)

    def _start_next(self, now: float):
        if not self.queue:
            self._finish()
            return

        command = self.queue.popleft()
        self.active = self._prepare(command, now)
        self.robot_state.is_moving = True
        self._emit_state()

    def _prepare(self, command: SimulationCommand, now: float) -> ActiveCommand:
        """Compute the target delta of a command from the current pose."""
        active = ActiveCommand(
            command=command,
            start_time=now,
            duration=command.duration / self.speed,
            start_position=self.robot_state.position.copy(),
            start_heading=self.robot_state.rotation.y
        )

        if command.is_motion():
            distance = command.value * self.config.units_per_step
            if command.type == CommandType.MOVE_BACKWARD:
                distance = -distance
            active.delta_x, active.delta_z = forward_offset(active.start_heading, distance)
            active.ignored = self.collision_model.overlapping(active.start_position)
        elif command.type == CommandType.TURN_RIGHT:
            active.delta_heading = degrees_to_radians(command.value)
        elif command.type == CommandType.TURN_LEFT:
            active.delta_heading = -degrees_to_radians(command.value)

        return active

    def _complete(self, active: ActiveCommand, now: float):
        self.active = None
        self.on_command_complete(active.command)
        # The callback may have stopped, paused or restarted the executor
        if self.state == ExecutorState.RUNNING and self.active is None:
            self._start_next(now)

    def _finish(self):
        self.state = ExecutorState.IDLE
        self.active = None
        self.robot_state.is_moving = False
        logger.info("Run finished")
        self._emit_state()

    def _emit_state(self):
        self.on_state_change(self.robot_state.snapshot())
