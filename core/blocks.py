"""
Block data model for visual programs.

A program is a flat list of blocks. Nesting is expressed by each block's
ordered `children` ids; whether a child is a loop/branch body or the
sequential continuation is decided by an explicit slot when the editor
recorded one, and by the child's x coordinate otherwise.
"""
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Any, Tuple
from enum import Enum


class BlockKind(Enum):
    START_EVENT = "start_event"
    MOVE_FORWARD = "move_forward"
    MOVE_BACKWARD = "move_backward"
    TURN_LEFT = "turn_left"
    TURN_RIGHT = "turn_right"
    WAIT = "wait"
    REPEAT = "repeat"
    CONDITIONAL = "conditional"
    SENSOR_QUERY = "sensor_query"
    UNKNOWN = "unknown"


class ChildSlot(Enum):
    BODY = "body"
    NEXT = "next"


# Type names used by the editor, keyed after normalisation (lower case,
# '_' and '-' removed). Both the camelCase and snake_case palettes map here.
BLOCK_TYPE_ALIASES = {
    'onstart': BlockKind.START_EVENT,
    'whenflagclicked': BlockKind.START_EVENT,
    'start': BlockKind.START_EVENT,
    'startevent': BlockKind.START_EVENT,

    'moveforward': BlockKind.MOVE_FORWARD,
    'movebackward': BlockKind.MOVE_BACKWARD,
    'turnleft': BlockKind.TURN_LEFT,
    'turnright': BlockKind.TURN_RIGHT,
    'wait': BlockKind.WAIT,

    'repeat': BlockKind.REPEAT,
    'if': BlockKind.CONDITIONAL,
    'conditional': BlockKind.CONDITIONAL,

    'touching': BlockKind.SENSOR_QUERY,
    'distance': BlockKind.SENSOR_QUERY,
    'sensorquery': BlockKind.SENSOR_QUERY,
}

CONTAINER_KINDS = {BlockKind.REPEAT, BlockKind.CONDITIONAL}


def resolve_block_kind(type_name: Any) -> BlockKind:
    """Map an editor type name to its block kind."""
    if not isinstance(type_name, str):
        return BlockKind.UNKNOWN
    key = type_name.strip().lower().replace('_', '').replace('-', '')
    return BLOCK_TYPE_ALIASES.get(key, BlockKind.UNKNOWN)


def _coerce_coordinate(value: Any) -> float:
    if isinstance(value, bool):
        return 0.0
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


@dataclass
class Block:
    """Represents one node of the visual program graph."""
    id: str
    type: str
    category: str = ""
    x: float = 0.0
    y: float = 0.0
    inputs: Dict[str, Any] = field(default_factory=dict)
    children: List[str] = field(default_factory=list)
    slots: Dict[str, ChildSlot] = field(default_factory=dict)

    @property
    def kind(self) -> BlockKind:
        return resolve_block_kind(self.type)

    def is_container(self) -> bool:
        """Check if this block has a body (repeat or conditional)."""
        return self.kind in CONTAINER_KINDS

    def sort_key(self) -> Tuple[float, float, str]:
        """Reading order: top-to-bottom, then left-to-right."""
        return (self.y, self.x, self.id)

    def slot_for(self, child: 'Block') -> ChildSlot:
        """Decide whether `child` is this block's body or its continuation."""
        if not self.is_container():
            return ChildSlot.NEXT
        explicit = self.slots.get(child.id)
        if explicit is not None:
            return explicit
        return ChildSlot.BODY if child.x > self.x else ChildSlot.NEXT

    def get_input(self, *names: str) -> Any:
        """Get the first present input among `names`."""
        for name in names:
            if name in self.inputs and self.inputs[name] is not None:
                return self.inputs[name]
        return None

    @classmethod
    def from_dict(cls, data: Dict[str, Any], index: int = 0) -> 'Block':
        """
        Build a block from editor JSON, tolerating missing or odd fields.

        Args:
            data: Mapping like {"id": "b1", "type": "moveForward", "x": 40, "y": 80}
            index: Position in the source list, used for generated ids

        Returns:
            The block
        """
        position = data.get('position')
        if isinstance(position, dict):
            x, y = position.get('x'), position.get('y')
        else:
            x, y = data.get('x'), data.get('y')

        block_id = data.get('id')
        block_id = str(block_id) if block_id is not None else f"block-{index}"

        children = []
        raw_children = data.get('children') or []
        if isinstance(raw_children, (list, tuple)):
            for child_id in raw_children:
                child_id = str(child_id)
                if child_id not in children:
                    children.append(child_id)

        slots = {}
        raw_slots = data.get('slots') or data.get('childSlots') or {}
        if isinstance(raw_slots, dict):
            for child_id, slot in raw_slots.items():
                try:
                    slots[str(child_id)] = ChildSlot(str(slot).lower())
                except ValueError:
                    continue

        inputs = data.get('inputs')
        return cls(
            id=block_id,
            type=str(data.get('type', '')),
            category=str(data.get('category', '')),
            x=_coerce_coordinate(x),
            y=_coerce_coordinate(y),
            inputs=dict(inputs) if isinstance(inputs, dict) else {},
            children=children,
            slots=slots
        )

    def to_dict(self) -> Dict[str, Any]:
        data = {
            'id': self.id,
            'type': self.type,
            'category': self.category,
            'x': self.x,
            'y': self.y,
            'inputs': dict(self.inputs),
            'children': list(self.children),
        }
        if self.slots:
            data['slots'] = {child_id: slot.value for child_id, slot in self.slots.items()}
        return data


def load_blocks(data: Any) -> List[Block]:
    """Accept a list of block dicts (or Blocks), or a project dict with 'blocks'."""
    if isinstance(data, dict):
        data = data.get('blocks') or []
    if not isinstance(data, (list, tuple)):
        return []

    blocks = []
    for index, item in enumerate(data):
        if isinstance(item, Block):
            blocks.append(item)
        elif isinstance(item, dict):
            blocks.append(Block.from_dict(item, index))
    return blocks


def find_block(blocks: List[Block], block_id: str) -> Optional[Block]:
    for block in blocks:
        if block.id == block_id:
            return block
    return None
