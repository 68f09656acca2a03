"""
Timeline Validator - validates a segment list before it is committed.

Validates:
- Segments are contiguous from bar 0 and do not overlap
- Each segment's chord slice spans exactly the segment
- All segments share one meter
- Segment names are unique
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum

from chuk_style_midi.models.timeline import TimelineSegment


class ValidationSeverity(str, Enum):
    """Severity level for validation issues."""

    ERROR = "error"  # Prevents the change
    WARNING = "warning"  # Change possible but suspicious
    INFO = "info"  # Informational only


@dataclass
class ValidationIssue:
    """A single validation issue."""

    severity: ValidationSeverity
    code: str
    message: str
    location: str | None = None

    def __str__(self) -> str:
        prefix = f"[{self.severity.value.upper()}]"
        location = f" at {self.location}" if self.location else ""
        return f"{prefix} {self.code}: {self.message}{location}"


class ValidationResult:
    """Result of validating a segment list."""

    def __init__(self) -> None:
        self.issues: list[ValidationIssue] = []

    def add(
        self,
        severity: ValidationSeverity,
        code: str,
        message: str,
        location: str | None = None,
    ) -> None:
        """Add an issue."""
        self.issues.append(ValidationIssue(severity, code, message, location))

    @property
    def is_valid(self) -> bool:
        """Return True if no errors (warnings/info are OK)."""
        return not self.errors

    @property
    def errors(self) -> list[ValidationIssue]:
        """Get all error issues."""
        return [i for i in self.issues if i.severity == ValidationSeverity.ERROR]

    @property
    def warnings(self) -> list[ValidationIssue]:
        """Get all warning issues."""
        return [i for i in self.issues if i.severity == ValidationSeverity.WARNING]

    def codes(self) -> list[str]:
        """Issue codes in the order found."""
        return [i.code for i in self.issues]

    def __bool__(self) -> bool:
        return self.is_valid

    def __str__(self) -> str:
        if not self.issues:
            return "Validation passed: no issues found"
        return "\n".join(str(issue) for issue in self.issues)


class TimelineValidator:
    """Validates timeline segment lists."""

    def validate(self, segments: Sequence[TimelineSegment]) -> ValidationResult:
        """
        Validate a complete, ordered segment list.

        Args:
            segments: Segments in timeline order

        Returns:
            ValidationResult with any issues found
        """
        result = ValidationResult()

        if not segments:
            result.add(ValidationSeverity.WARNING, "EMPTY", "Timeline has no segments")
            return result

        self._validate_layout(segments, result)
        self._validate_segments(segments, result)
        self._validate_meter(segments, result)

        return result

    def _validate_layout(
        self, segments: Sequence[TimelineSegment], result: ValidationResult
    ) -> None:
        """Check contiguity and overlap."""
        expected_start = 0
        previous: TimelineSegment | None = None
        for segment in segments:
            location = f"segments/{segment.name}"
            if previous is not None and segment.overlaps(previous):
                result.add(
                    ValidationSeverity.ERROR,
                    "OVERLAP",
                    f"Segment '{segment.name}' overlaps '{previous.name}'",
                    location,
                )
            elif segment.start_bar != expected_start:
                result.add(
                    ValidationSeverity.ERROR,
                    "GAP",
                    f"Segment '{segment.name}' starts at bar {segment.start_bar}, "
                    f"expected bar {expected_start}",
                    location,
                )
            expected_start = segment.end_bar
            previous = segment

        names = [s.name for s in segments]
        for name in sorted({n for n in names if names.count(n) > 1}):
            result.add(
                ValidationSeverity.WARNING,
                "DUPLICATE_SEGMENT",
                f"Duplicate segment name: {name}",
                f"segments/{name}",
            )

    def _validate_segments(
        self, segments: Sequence[TimelineSegment], result: ValidationResult
    ) -> None:
        """Check each segment's chord slice."""
        for segment in segments:
            location = f"segments/{segment.name}"
            if segment.progression.bars != segment.bars:
                result.add(
                    ValidationSeverity.ERROR,
                    "LENGTH_MISMATCH",
                    f"Segment '{segment.name}' spans {segment.bars} bars but its "
                    f"progression spans {segment.progression.bars}",
                    location,
                )
            if not segment.progression.events:
                result.add(
                    ValidationSeverity.INFO,
                    "NO_CHORDS",
                    f"Segment '{segment.name}' has no chord events",
                    location,
                )

    def _validate_meter(
        self, segments: Sequence[TimelineSegment], result: ValidationResult
    ) -> None:
        """All segments must share the first segment's meter."""
        meter = segments[0].style.get_time_signature()
        for segment in segments[1:]:
            if segment.style.get_time_signature() != meter:
                result.add(
                    ValidationSeverity.ERROR,
                    "METER_MISMATCH",
                    f"Segment '{segment.name}' is in {segment.style.time_signature}, "
                    f"timeline is in {meter}",
                    f"segments/{segment.name}",
                )


def validate_segments(segments: Sequence[TimelineSegment]) -> ValidationResult:
    """Convenience function to validate a segment list."""
    return TimelineValidator().validate(segments)
