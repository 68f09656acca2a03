"""
Export request - the immutable configuration of one pipeline run.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field

from chuk_style_midi.constants import DEFAULT_BARS, MAX_TEMPO, MIN_TEMPO


class ExportRequest(BaseModel):
    """
    Configuration for one export run.

    Bar count is only checked for positivity here; the >= 12 rule belongs
    to the progression builder so that it surfaces as a ValidationError.
    """

    style_path: Path = Field(..., description="Source style file")
    output_path: Path = Field(..., description="Destination MIDI file")
    tempo: int | None = Field(
        None, ge=MIN_TEMPO, le=MAX_TEMPO, description="Tempo override in BPM"
    )
    bars: int = Field(DEFAULT_BARS, description="Total timeline length in bars")
    exportable: bool = Field(False, description="Apply the exportable normalization pass")

    model_config = {"frozen": True}
