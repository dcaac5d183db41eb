"""
Diagnostic definitions and handling for the block compiler.

Compiling a learner's program never fails as a whole: malformed blocks are
recorded here and the compiler carries on with a default or skips the node.
"""
from enum import Enum
from dataclasses import dataclass
from typing import Optional, List


class DiagnosticType(Enum):
    STRUCTURE = "structure"
    INPUT = "input"
    UNKNOWN_BLOCK = "unknown_block"
    CONDITION = "condition"


class DiagnosticSeverity(Enum):
    WARNING = "warning"
    ERROR = "error"


class SimulationError(Exception):
    """Raised for host-level misuse of the simulator API."""


@dataclass
class BlockDiagnostic:
    """Represents a problem found in one block of the program graph."""
    block_id: Optional[str]
    message: str
    diagnostic_type: DiagnosticType
    severity: DiagnosticSeverity = DiagnosticSeverity.WARNING

    def __str__(self):
        if self.block_id is None:
            return self.message
        return f"Block {self.block_id}: {self.message}"


class DiagnosticCollector:
    """Collects and manages diagnostics during a compile pass."""

    def __init__(self):
        self.diagnostics: List[BlockDiagnostic] = []

    def add(self, block_id: Optional[str], message: str,
            diagnostic_type: DiagnosticType,
            severity: DiagnosticSeverity = DiagnosticSeverity.WARNING):
        """Add a diagnostic to the collection. Repeats of the same one are dropped."""
        diagnostic = BlockDiagnostic(block_id, message, diagnostic_type, severity)
        if diagnostic not in self.diagnostics:
            self.diagnostics.append(diagnostic)
        return diagnostic

    def get_for_block(self, block_id: str) -> List[BlockDiagnostic]:
        """Get all diagnostics for a specific block."""
        return [d for d in self.diagnostics if d.block_id == block_id]

    def has_errors(self) -> bool:
        """Check if there are any error-level diagnostics."""
        return any(d.severity == DiagnosticSeverity.ERROR for d in self.diagnostics)

    def has_warnings(self) -> bool:
        return any(d.severity == DiagnosticSeverity.WARNING for d in self.diagnostics)

    def clear(self):
        """Clear all diagnostics."""
        self.diagnostics.clear()

    def get_all(self) -> List[BlockDiagnostic]:
        """Get all diagnostics, errors first, then by block id."""
        return sorted(
            self.diagnostics,
            key=lambda d: (d.severity != DiagnosticSeverity.ERROR, d.block_id or ""),
        )
