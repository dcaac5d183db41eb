"""
Defines the primitive simulation commands.

These are simple, immutable data classes that represent the fundamental
agent movements. The compiler's sole purpose is to convert a block graph into
a list of these commands. This creates a clean separation between the
compiler logic and the executor that animates them.
"""

from dataclasses import dataclass
from typing import Dict, Any, Optional
from enum import Enum


class CommandType(Enum):
    MOVE_FORWARD = "move_forward"
    MOVE_BACKWARD = "move_backward"
    TURN_LEFT = "turn_left"
    TURN_RIGHT = "turn_right"
    WAIT = "wait"


@dataclass(frozen=True)
class SimulationCommand:
    """One resolved primitive instruction."""
    type: CommandType
    value: float  # steps, degrees or seconds
    duration: float  # milliseconds at speed 1.0; scaled when executed
    source_block_id: Optional[str] = None

    def is_motion(self) -> bool:
        """Check if this command translates the agent."""
        return self.type in (CommandType.MOVE_FORWARD, CommandType.MOVE_BACKWARD)

    def is_rotation(self) -> bool:
        """Check if this command turns the agent."""
        return self.type in (CommandType.TURN_LEFT, CommandType.TURN_RIGHT)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'type': self.type.value,
            'value': self.value,
            'duration': self.duration,
            'sourceBlockId': self.source_block_id,
        }

    def __str__(self):
        return f"{self.type.value}({self.value:g})"
