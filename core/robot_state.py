"""
Agent state management for the command executor.
Tracks pose, motion flag and speed multiplier.
"""
from dataclasses import dataclass, field
from typing import Dict, Any


@dataclass
class Vector3:
    """Represents a position or rotation in 3D space."""
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    def copy(self) -> 'Vector3':
        """Create a copy of this vector."""
        return Vector3(x=self.x, y=self.y, z=self.z)

    def to_dict(self) -> Dict[str, float]:
        return {'x': self.x, 'y': self.y, 'z': self.z}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Vector3':
        return cls(
            x=float(data.get('x', 0.0)),
            y=float(data.get('y', 0.0)),
            z=float(data.get('z', 0.0))
        )


@dataclass
class RobotState:
    """Live pose record of the simulated agent. Rotation is in radians."""
    position: Vector3 = field(default_factory=Vector3)
    rotation: Vector3 = field(default_factory=Vector3)
    is_moving: bool = False
    speed: float = 1.0

    @property
    def heading(self) -> float:
        """Rotation about the vertical axis."""
        return self.rotation.y

    def copy(self) -> 'RobotState':
        """Create a deep copy of this state."""
        return RobotState(
            position=self.position.copy(),
            rotation=self.rotation.copy(),
            is_moving=self.is_moving,
            speed=self.speed
        )

    def snapshot(self) -> 'RobotState':
        """Read-only view handed to observers; never the live record."""
        return self.copy()

    def to_dict(self) -> Dict[str, Any]:
        return {
            'position': self.position.to_dict(),
            'rotation': self.rotation.to_dict(),
            'isMoving': self.is_moving,
            'speed': self.speed,
        }
