"""
Timeline assembly - structural changes to the song timeline.

This module provides:
- StructureAssembler: Segment insertion with optional notification
- TimelineValidator: Layout and consistency validation
"""

from chuk_style_midi.arrangement.assembler import StructureAssembler
from chuk_style_midi.arrangement.validator import (
    TimelineValidator,
    ValidationIssue,
    ValidationResult,
    ValidationSeverity,
    validate_segments,
)

__all__ = [
    "StructureAssembler",
    "TimelineValidator",
    "ValidationIssue",
    "ValidationResult",
    "ValidationSeverity",
    "validate_segments",
]
