"""
Main block program processor interface.
This is the compile-side entry point: commands, pseudo-source, diagnostics.
"""
from typing import List, Dict, Any, Optional
from config.simulation_config import SimulationConfig
from core.blocks import load_blocks
from core.code_generator import generate_python_code
from core.commands import SimulationCommand, CommandType
from core.compiler import BlockCompiler
from utils.errors import BlockDiagnostic


class BlockProcessor:
    """
    Main interface for block program processing.
    Provides a simple API for the block canvas and the code view.
    """

    def __init__(self, config: Optional[SimulationConfig] = None):
        self.compiler = BlockCompiler(config)
        self._commands: List[SimulationCommand] = []
        self._generated_code = ""
        self._block_count = 0
        self._processing_successful = False

    def process_blocks(self, blocks: Any) -> bool:
        """
        Compile a block program and render its pseudo-source.

        Args:
            blocks: List of block dicts, or a project dict with "blocks"

        Returns:
            True if compiling produced no error-level diagnostics
        """
        parsed = load_blocks(blocks)
        self._block_count = len(parsed)
        self._commands = self.compiler.compile(parsed)
        self._generated_code = generate_python_code(parsed)
        self._processing_successful = not self.compiler.diagnostics.has_errors()
        return self._processing_successful

    # Diagnostics for canvas integration

    def get_all_diagnostics(self) -> List[BlockDiagnostic]:
        return self.compiler.diagnostics.get_all()

    def get_diagnostics_for_block(self, block_id: str) -> List[BlockDiagnostic]:
        return self.compiler.diagnostics.get_for_block(block_id)

    def has_warnings(self) -> bool:
        return self.compiler.diagnostics.has_warnings()

    # Results

    def get_commands(self) -> List[SimulationCommand]:
        return list(self._commands)

    def get_commands_for_block(self, block_id: str) -> List[SimulationCommand]:
        """Get the commands a block produced (several when inside a loop)."""
        return [c for c in self._commands if c.source_block_id == block_id]

    def get_generated_code(self) -> str:
        return self._generated_code

    def was_processing_successful(self) -> bool:
        return self._processing_successful

    def get_statistics(self) -> Dict[str, Any]:
        """Get command counts, travel totals and run time at speed 1.0."""
        config = self.compiler.config
        counts = {command_type.value: 0 for command_type in CommandType}
        distance = 0.0
        rotation = 0.0
        duration = 0.0

        for command in self._commands:
            counts[command.type.value] += 1
            duration += command.duration
            if command.is_motion():
                distance += command.value * config.units_per_step
            elif command.type == CommandType.TURN_RIGHT:
                rotation += command.value
            elif command.type == CommandType.TURN_LEFT:
                rotation -= command.value

        return {
            'total_blocks': self._block_count,
            'total_commands': len(self._commands),
            'command_counts': counts,
            'travel_distance': distance,
            'net_rotation_degrees': rotation,
            'estimated_duration_ms': duration,
            'diagnostics': len(self.compiler.diagnostics.diagnostics),
        }

    def reset(self):
        """Reset processor to initial state."""
        self.compiler.diagnostics.clear()
        self._commands = []
        self._generated_code = ""
        self._block_count = 0
        self._processing_successful = False
