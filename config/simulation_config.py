"""
Simulation configuration for the block program simulator.
Simple, clean configuration system with presets for the selectable agents.
"""
from dataclasses import dataclass, field, asdict
from typing import Dict, List, Tuple
import json
import math


@dataclass
class SimulationConfig:
    """Configuration for one agent and the timing of its commands."""
    name: str = "Robot"

    # Agent bounding volume (width, height, depth) and resting height
    agent_size: Tuple[float, float, float] = (1.0, 0.5, 1.5)
    ground_height: float = 0.0
    initial_heading: float = 0.0

    # Base command durations in milliseconds at speed 1.0
    move_duration_ms: float = 1000.0
    turn_duration_ms: float = 800.0
    wait_ms_per_second: float = 1000.0

    # World units travelled per "step" of a move block
    units_per_step: float = 0.1

    # Speed multiplier bounds
    min_speed: float = 0.1
    max_speed: float = 3.0
    default_speed: float = 1.0

    # Defaults substituted for missing block inputs
    default_inputs: Dict[str, float] = field(default_factory=lambda: {
        'distance': 10.0,
        'angle': 90.0,
        'seconds': 1.0,
        'times': 10.0,
    })

    # Upper bound on unrolled loop iterations
    max_repeat: int = 1000

    # Upper bound on block visits in one compile, across all loops. Every
    # emitted command is one visit, so this also bounds the command count.
    max_block_visits: int = 20000

    # Host animation tick in milliseconds
    tick_interval_ms: int = 16


class ConfigManager:
    """Manages simulation configurations with simple agent presets."""

    @staticmethod
    def default_robot() -> SimulationConfig:
        """The box robot used when no character model is loaded."""
        return SimulationConfig()

    @staticmethod
    def fennec() -> SimulationConfig:
        return SimulationConfig(name="Fennec", agent_size=(0.8, 0.9, 1.2))

    @staticmethod
    def fish() -> SimulationConfig:
        """Fish swims above the floor."""
        return SimulationConfig(name="Fish", agent_size=(0.5, 0.5, 1.0),
                                ground_height=0.5)

    @staticmethod
    def mini_groot() -> SimulationConfig:
        return SimulationConfig(name="Mini Groot", agent_size=(0.7, 1.4, 0.7))

    @staticmethod
    def lava_golem() -> SimulationConfig:
        """Heavy golem: wider body, slower strides."""
        return SimulationConfig(
            name="Lava Golem",
            agent_size=(1.4, 2.0, 1.2),
            move_duration_ms=1400.0,
            turn_duration_ms=1100.0
        )

    @staticmethod
    def astronaut() -> SimulationConfig:
        return SimulationConfig(name="Astronaut", agent_size=(0.8, 1.8, 0.8))

    @staticmethod
    def available_agents() -> List[str]:
        return ["Robot", "Fennec", "Fish", "Mini Groot", "Lava Golem", "Astronaut"]

    @staticmethod
    def get_config(agent_name: str) -> SimulationConfig:
        """Get configuration by agent name."""
        configs = {
            "robot": ConfigManager.default_robot(),
            "fennec": ConfigManager.fennec(),
            "fish": ConfigManager.fish(),
            "mini groot": ConfigManager.mini_groot(),
            "lava golem": ConfigManager.lava_golem(),
            "astronaut": ConfigManager.astronaut()
        }
        return configs.get((agent_name or "").strip().lower(), ConfigManager.default_robot())

    @staticmethod
    def save_config(config: SimulationConfig, filepath: str):
        """Save configuration to JSON file."""
        data = asdict(config)
        data["agent_size"] = list(config.agent_size)

        with open(filepath, 'w') as f:
            json.dump(data, f, indent=2)

    @staticmethod
    def load_config(filepath: str) -> SimulationConfig:
        """Load configuration from JSON file."""
        try:
            with open(filepath, 'r') as f:
                data = json.load(f)

            # Convert list back to tuple
            if "agent_size" in data:
                data["agent_size"] = tuple(data["agent_size"])

            return SimulationConfig(**data)

        except (OSError, ValueError, TypeError):
            # Return default on error
            return ConfigManager.default_robot()

    @staticmethod
    def clamp_speed(config: SimulationConfig, speed: float) -> float:
        """Clamp a speed multiplier to the configured range."""
        if math.isnan(speed):
            return config.default_speed
        return max(config.min_speed, min(config.max_speed, speed))
