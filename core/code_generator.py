"""
Readable Python-style rendering of a block program.

Uses the same ownership, ordering and body/continuation rules as the
compiler, but prints loops and conditionals instead of unrolling them.
"""
from typing import List, Any, Optional
from core.blocks import Block, BlockKind, ChildSlot, load_blocks
from core.compiler import ProgramGraph
from utils.errors import DiagnosticCollector

INDENT = "    "


def _format_number(value: Any, default: float) -> str:
    if value is None or isinstance(value, bool):
        value = default
    try:
        number = float(value)
    except (TypeError, ValueError):
        return repr(str(value))
    return str(int(number)) if number.is_integer() else str(number)


def _format_object(value: Any) -> str:
    text = str(value) if value is not None else "wall"
    return '"' + text.replace('\\', '\\\\').replace('"', '\\"') + '"'


class CodeGenerator:
    """Renders blocks as a small Python program driving a `robot` module."""

    def __init__(self):
        self.lines: List[str] = []
        self.graph: Optional[ProgramGraph] = None

    def generate(self, blocks: List[Any]) -> str:
        self.lines = []
        self.graph = ProgramGraph(load_blocks(blocks), DiagnosticCollector())

        self._emit_all(self.graph.top_level())
        if not self.lines:
            self.lines.append(INDENT + "pass")

        code = [
            "# Generated from visual blocks",
            "import robot",
            "import time",
            "",
            "def main():",
            *self.lines,
            "",
            'if __name__ == "__main__":',
            "    main()",
        ]
        return "\n".join(code)

    def _emit_all(self, roots: List[Block]):
        # Task stack: ('block', block, level), ('body_end', level, line count
        # when the body started) or ('leave', block id).
        tasks = [('block', block, 1) for block in reversed(roots)]
        visiting = set()

        while tasks:
            task = tasks.pop()
            if task[0] == 'leave':
                visiting.discard(task[1])
                continue
            if task[0] == 'body_end':
                _, level, start = task
                if len(self.lines) == start:
                    self.lines.append(INDENT * level + "pass")
                continue

            _, block, level = task
            if block.id in visiting:
                continue
            visiting.add(block.id)
            self._emit_line(block, level)

            tasks.append(('leave', block.id))
            for child in reversed(self.graph.children_in_slot(block, ChildSlot.NEXT)):
                tasks.append(('block', child, level))
            if block.is_container():
                tasks.append(('body_end', level + 1, len(self.lines)))
                for child in reversed(self.graph.children_in_slot(block, ChildSlot.BODY)):
                    tasks.append(('block', child, level + 1))

    def _emit_line(self, block: Block, level: int):
        indent = INDENT * level
        kind = block.kind

        if kind == BlockKind.MOVE_FORWARD:
            self.lines.append(f"{indent}robot.move_forward({_format_number(block.get_input('steps', 'distance'), 10)})")
        elif kind == BlockKind.MOVE_BACKWARD:
            self.lines.append(f"{indent}robot.move_backward({_format_number(block.get_input('steps', 'distance'), 10)})")
        elif kind == BlockKind.TURN_LEFT:
            self.lines.append(f"{indent}robot.turn_left({_format_number(block.get_input('degrees', 'angle'), 90)})")
        elif kind == BlockKind.TURN_RIGHT:
            self.lines.append(f"{indent}robot.turn_right({_format_number(block.get_input('degrees', 'angle'), 90)})")
        elif kind == BlockKind.WAIT:
            self.lines.append(f"{indent}time.sleep({_format_number(block.get_input('seconds', 'duration'), 1)})")
        elif kind == BlockKind.REPEAT:
            times = _format_number(block.get_input('times', 'count'), 10)
            self.lines.append(f"{indent}for i in range({times}):")
        elif kind == BlockKind.CONDITIONAL:
            condition = block.get_input('condition')
            condition = str(condition).strip() if condition is not None else ""
            self.lines.append(f"{indent}if {condition or 'True'}:")
        elif kind == BlockKind.SENSOR_QUERY:
            target = _format_object(block.get_input('object'))
            if block.type.strip().lower() == 'distance':
                self.lines.append(f"{indent}robot.distance_to({target})")
            else:
                self.lines.append(f"{indent}robot.is_touching({target})")


def generate_python_code(blocks: List[Any]) -> str:
    """Render blocks as readable pseudo-source."""
    return CodeGenerator().generate(blocks)
