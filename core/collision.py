"""
Collision model for the simulated agent.
Axis-aligned bounding-box overlap between the agent and static obstacles.
"""
import math
from dataclasses import dataclass
from typing import List, Tuple, Any, Dict, Iterable, Optional
from core.robot_state import Vector3


@dataclass
class BoundingBox:
    """Axis-aligned box given by its minimum and maximum corners."""
    min_x: float
    min_y: float
    min_z: float
    max_x: float
    max_y: float
    max_z: float

    @classmethod
    def from_center(cls, center: Vector3, size: Vector3) -> 'BoundingBox':
        hx, hy, hz = size.x / 2.0, size.y / 2.0, size.z / 2.0
        return cls(center.x - hx, center.y - hy, center.z - hz,
                   center.x + hx, center.y + hy, center.z + hz)

    def intersects(self, other: 'BoundingBox') -> bool:
        """Closed-interval overlap: touching faces count as contact."""
        return (self.min_x <= other.max_x and self.max_x >= other.min_x and
                self.min_y <= other.max_y and self.max_y >= other.min_y and
                self.min_z <= other.max_z and self.max_z >= other.min_z)


@dataclass
class Obstacle:
    """Static rectangular prism supplied by the scene."""
    position: Vector3  # box centre
    size: Vector3      # full extents

    def __post_init__(self):
        self.bounds = BoundingBox.from_center(self.position, self.size)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Obstacle':
        return cls(
            position=Vector3.from_dict(data.get('position', {})),
            size=Vector3.from_dict(data.get('size', {'x': 1, 'y': 1, 'z': 1}))
        )

    def to_dict(self) -> Dict[str, Any]:
        return {'position': self.position.to_dict(), 'size': self.size.to_dict()}


class CollisionModel:
    """
    Tests agent positions and straight moves against the static obstacles.

    The agent footprint is a square of side max(width, depth) so that the
    result does not depend on heading; vertically it spans from its position
    up by its height.
    """

    def __init__(self, obstacles: Iterable[Obstacle] = (),
                 agent_size: Tuple[float, float, float] = (1.0, 0.5, 1.5)):
        self.obstacles: List[Obstacle] = list(obstacles)
        self.set_agent_size(agent_size)

    def set_agent_size(self, agent_size: Tuple[float, float, float]):
        width, height, depth = agent_size
        self.half_footprint = max(width, depth) / 2.0
        self.height = height

    def set_obstacles(self, obstacles: Iterable[Obstacle]):
        self.obstacles = list(obstacles)

    def _expanded(self, obstacle: Obstacle) -> BoundingBox:
        """Obstacle grown by the footprint, so the agent reduces to its position."""
        b = obstacle.bounds
        h = self.half_footprint
        return BoundingBox(b.min_x - h, b.min_y - self.height, b.min_z - h,
                           b.max_x + h, b.max_y, b.max_z + h)

    def overlapping(self, position: Vector3) -> List[Obstacle]:
        """Obstacles the agent placed at `position` touches."""
        touching = []
        for obstacle in self.obstacles:
            box = self._expanded(obstacle)
            if (box.min_x <= position.x <= box.max_x and
                    box.min_y <= position.y <= box.max_y and
                    box.min_z <= position.z <= box.max_z):
                touching.append(obstacle)
        return touching

    def collides(self, position: Vector3) -> bool:
        """Check if the agent placed at `position` touches any obstacle."""
        return bool(self.overlapping(position))

    def sweep(self, start: Vector3, end: Vector3,
              ignore: Iterable[Obstacle] = ()) -> Optional[float]:
        """
        First contact along a straight move on the ground plane.

        Args:
            start: Position the move leaves from
            end: Position the move would reach
            ignore: Obstacles to pass through, e.g. ones already touched at the start

        Returns:
            Fraction of the way from `start` to `end` at which the agent first
            touches an obstacle, or None if the whole move is clear
        """
        skipped = {id(o) for o in ignore}
        first = None
        for obstacle in self.obstacles:
            if id(obstacle) in skipped:
                continue
            box = self._expanded(obstacle)
            if not box.min_y <= start.y <= box.max_y:
                continue
            window = _slab(start.x, end.x, box.min_x, box.max_x)
            if window is None:
                continue
            depth = _slab(start.z, end.z, box.min_z, box.max_z)
            if depth is None:
                continue
            enter = max(window[0], depth[0], 0.0)
            leave = min(window[1], depth[1], 1.0)
            if enter <= leave and (first is None or enter < first):
                first = enter
        return first

    def agent_bounds(self, position: Vector3) -> BoundingBox:
        """Bounding box of the agent at `position`, for display."""
        return BoundingBox(
            position.x - self.half_footprint, position.y, position.z - self.half_footprint,
            position.x + self.half_footprint, position.y + self.height,
            position.z + self.half_footprint
        )


def _slab(start: float, end: float, low: float, high: float) -> Optional[Tuple[float, float]]:
    """Parameter interval over which start + (end - start) * t lies in [low, high]."""
    delta = end - start
    if delta == 0:
        if low <= start <= high:
            return -math.inf, math.inf
        return None
    t1 = (low - start) / delta
    t2 = (high - start) / delta
    return (t1, t2) if t1 <= t2 else (t2, t1)
