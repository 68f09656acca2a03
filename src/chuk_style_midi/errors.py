"""
Error taxonomy for the export pipeline.

Every stage raises one of these. All of them are terminal for a run:
the CLI catches ExportPipelineError at its boundary, prints the message
and maps it to a non-zero exit status.
"""

from __future__ import annotations

from typing import Any


class ExportPipelineError(Exception):
    """
    Base class for pipeline failures.

    The context mapping carries whatever is needed to reproduce the
    failure (offending flag, voice name, file path, ...).
    """

    exit_code: int = 1

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(message)
        self.message = message
        self.context = context

    def __str__(self) -> str:
        if not self.context:
            return self.message
        details = ", ".join(f"{key}={value}" for key, value in self.context.items())
        return f"{self.message} ({details})"


class ConfigError(ExportPipelineError):
    """Missing or malformed command-line argument or request field."""

    exit_code = 2


class ValidationError(ExportPipelineError):
    """Unsupported meter or a bar count below the template span."""


class ResourceError(ExportPipelineError):
    """Style file missing, unreadable or malformed."""


class AllocationError(ExportPipelineError):
    """No free MIDI channel is compatible with a voice."""


class AssemblyError(ExportPipelineError):
    """Overlapping segment or inconsistent timeline."""


class ExportError(ExportPipelineError, OSError):
    """Rendering or writing the MIDI file failed."""
