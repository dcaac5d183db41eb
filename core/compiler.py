"""
Block graph compiler that turns a visual program into primitive commands.
"""
import math
from itertools import chain, repeat
from typing import List, Dict, Any, Optional, Set, Iterable, Iterator
from core.blocks import Block, BlockKind, ChildSlot, load_blocks
from core.commands import SimulationCommand, CommandType
from config.simulation_config import SimulationConfig
from utils.errors import DiagnosticCollector, DiagnosticType
from utils.expressions import ConditionEvaluator
from utils.logging_utils import get_logger

logger = get_logger(__name__)


# block kind -> (command type, input names, default-input key)
COMMAND_BLOCKS = {
    BlockKind.MOVE_FORWARD: (CommandType.MOVE_FORWARD, ('steps', 'distance'), 'distance'),
    BlockKind.MOVE_BACKWARD: (CommandType.MOVE_BACKWARD, ('steps', 'distance'), 'distance'),
    BlockKind.TURN_LEFT: (CommandType.TURN_LEFT, ('degrees', 'angle'), 'angle'),
    BlockKind.TURN_RIGHT: (CommandType.TURN_RIGHT, ('degrees', 'angle'), 'angle'),
    BlockKind.WAIT: (CommandType.WAIT, ('seconds', 'duration'), 'seconds'),
}


class ProgramGraph:
    """
    Parent/child view over a flat block list.

    Each block gets at most one owner: claims are resolved in the reading
    order of the claiming parents, the first claim wins and later ones are
    ignored. Blocks owned by nobody are top-level.
    """

    def __init__(self, blocks: Iterable[Block], diagnostics: DiagnosticCollector):
        self.diagnostics = diagnostics
        self.blocks: Dict[str, Block] = {}
        self.owner: Dict[str, str] = {}
        self.children: Dict[str, List[Block]] = {}

        for block in blocks:
            if block.id in self.blocks:
                self.diagnostics.add(
                    block.id, "Duplicate block id; keeping the first occurrence",
                    DiagnosticType.STRUCTURE
                )
                continue
            self.blocks[block.id] = block

        self._resolve_ownership()

    def _resolve_ownership(self):
        for parent in sorted(self.blocks.values(), key=Block.sort_key):
            owned = []
            for child_id in parent.children:
                if child_id == parent.id:
                    self.diagnostics.add(parent.id, "Block lists itself as a child",
                                         DiagnosticType.STRUCTURE)
                    continue
                child = self.blocks.get(child_id)
                if child is None:
                    self.diagnostics.add(parent.id, f"Unknown child block: {child_id}",
                                         DiagnosticType.STRUCTURE)
                    continue
                if child_id in self.owner:
                    self.diagnostics.add(
                        child_id,
                        f"Already nested in block {self.owner[child_id]}; "
                        f"ignoring claim by {parent.id}",
                        DiagnosticType.STRUCTURE
                    )
                    continue
                self.owner[child_id] = parent.id
                owned.append(child)
            self.children[parent.id] = sorted(owned, key=Block.sort_key)

    def top_level(self) -> List[Block]:
        """Start events first, then every other root in reading order."""
        roots = sorted((b for b in self.blocks.values() if b.id not in self.owner),
                       key=Block.sort_key)
        starts = [b for b in roots if b.kind == BlockKind.START_EVENT]
        others = [b for b in roots if b.kind != BlockKind.START_EVENT]
        return starts + others

    def children_in_slot(self, block: Block, slot: ChildSlot) -> List[Block]:
        return [child for child in self.children.get(block.id, [])
                if block.slot_for(child) == slot]


class BlockCompiler:
    """Compiles a block graph into an ordered list of simulation commands."""

    def __init__(self, config: Optional[SimulationConfig] = None,
                 diagnostics: Optional[DiagnosticCollector] = None):
        self.config = config or SimulationConfig()
        self.diagnostics = diagnostics or DiagnosticCollector()
        self.condition_evaluator = ConditionEvaluator(self.diagnostics)
        self._visiting: Set[str] = set()
        self.graph: Optional[ProgramGraph] = None

    def compile(self, blocks: List[Any]) -> List[SimulationCommand]:
        """
        Compile blocks into commands.

        Args:
            blocks: Block objects or editor dicts

        Returns:
            Commands in execution order. Never raises for malformed blocks;
            problems are recorded in `self.diagnostics`.
        """
        self.diagnostics.clear()
        self._visiting.clear()
        self.graph = ProgramGraph(load_blocks(blocks), self.diagnostics)

        commands = self._walk(self.graph.top_level())

        for diagnostic in self.diagnostics.get_all():
            logger.warning(str(diagnostic))
        logger.debug(f"Compiled {len(self.graph.blocks)} blocks into {len(commands)} commands")
        return commands

    def _walk(self, roots: List[Block]) -> List[SimulationCommand]:
        """
        Depth-first walk with an explicit stack of (block, pending children).

        A block stays in `_visiting` until all of its pending children are
        done, so a block reached again through its own descendants is a cycle.
        """
        commands: List[SimulationCommand] = []
        stack = [(None, iter(roots))]
        visits = 0

        while stack:
            owner, pending = stack[-1]
            block = next(pending, None)
            if block is None:
                stack.pop()
                if owner is not None:
                    self._visiting.discard(owner.id)
                continue

            if block.id in self._visiting:
                self.diagnostics.add(block.id, "Cycle detected; block skipped",
                                     DiagnosticType.STRUCTURE)
                continue

            visits += 1
            if visits > self.config.max_block_visits:
                self.diagnostics.add(
                    block.id,
                    f"Program unrolls to more than {self.config.max_block_visits} "
                    f"blocks; the rest is skipped",
                    DiagnosticType.INPUT
                )
                break

            if block.kind == BlockKind.UNKNOWN:
                self.diagnostics.add(block.id, f"Unknown block type: {block.type!r}",
                                     DiagnosticType.UNKNOWN_BLOCK)

            command = self._command_for(block)
            if command is not None:
                commands.append(command)

            self._visiting.add(block.id)
            stack.append((block, self._children_to_visit(block)))

        self._visiting.clear()
        return commands

    def _children_to_visit(self, block: Block) -> Iterator[Block]:
        """Body children as many times as the block runs them, then the continuation."""
        body = self.graph.children_in_slot(block, ChildSlot.BODY)
        following = self.graph.children_in_slot(block, ChildSlot.NEXT)

        times = 0
        if block.kind == BlockKind.REPEAT:
            times = self._resolve_repeat_count(block)
        elif block.kind == BlockKind.CONDITIONAL:
            condition = block.get_input('condition')
            times = 1 if self.condition_evaluator.evaluate(condition, block.id) else 0

        return chain(chain.from_iterable(repeat(body, times)), following)

    def _command_for(self, block: Block) -> Optional[SimulationCommand]:
        """Build the single command a block emits, if any."""
        entry = COMMAND_BLOCKS.get(block.kind)
        if entry is None:
            return None

        command_type, input_names, default_key = entry
        value = self._resolve_number(block, input_names,
                                     self.config.default_inputs[default_key])

        if command_type in (CommandType.MOVE_FORWARD, CommandType.MOVE_BACKWARD):
            duration = self.config.move_duration_ms
        elif command_type == CommandType.WAIT:
            duration = value * self.config.wait_ms_per_second
        else:
            duration = self.config.turn_duration_ms

        return SimulationCommand(command_type, value, duration, block.id)

    def _resolve_repeat_count(self, block: Block) -> int:
        times = int(self._resolve_number(block, ('times', 'count'),
                                         self.config.default_inputs['times']))
        if times > self.config.max_repeat:
            self.diagnostics.add(
                block.id,
                f"Repeat count {times} limited to {self.config.max_repeat}",
                DiagnosticType.INPUT
            )
            times = self.config.max_repeat
        return times

    def _resolve_number(self, block: Block, names, default: float) -> float:
        """Read a numeric input, substituting the default or clamping at 0."""
        raw = block.get_input(*names)
        if raw is None:
            return float(default)

        value = None
        if not isinstance(raw, bool):
            try:
                value = float(raw)
            except (TypeError, ValueError):
                value = None

        if value is None or math.isnan(value) or math.isinf(value):
            self.diagnostics.add(
                block.id,
                f"Input {names[0]!r} is not a number ({raw!r}); using {default:g}",
                DiagnosticType.INPUT
            )
            return float(default)

        if value < 0:
            self.diagnostics.add(
                block.id, f"Input {names[0]!r} is negative ({value:g}); using 0",
                DiagnosticType.INPUT
            )
            return 0.0

        return value


def compile_blocks(blocks: List[Any], config: Optional[SimulationConfig] = None) -> List[SimulationCommand]:
    """Compile a block graph with a throwaway compiler."""
    return BlockCompiler(config).compile(blocks)
