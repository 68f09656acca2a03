"""
Style loader - reads style descriptors from YAML files.

Styles can come from:
1. An explicit file path (the CLI's --style)
2. The built-in library shipped with the package, by name
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import pydantic
import yaml

from chuk_style_midi.constants import SUPPORTED_TIME_SIGNATURE, ErrorMessages
from chuk_style_midi.errors import ResourceError
from chuk_style_midi.models.style import Instrument, Style, Voice

logger = logging.getLogger(__name__)


class StyleLoader:
    """
    Loads style definitions.

    Loaded styles are cached by resolved path; a style is parsed once per
    loader and shared read-only afterwards.
    """

    def __init__(self, library_path: Path | None = None):
        """
        Initialize the style loader.

        Args:
            library_path: Path to built-in style library
        """
        self.library_path = library_path or (Path(__file__).parent / "library")
        self._cache: dict[Path, Style] = {}

    def load(self, path: Path | str) -> Style:
        """
        Load a style from a YAML file.

        Args:
            path: Style file path

        Returns:
            The parsed Style

        Raises:
            ResourceError: If the file is missing, unreadable or malformed
        """
        path = Path(path)
        if not path.is_file():
            raise ResourceError(
                ErrorMessages.STYLE_NOT_FOUND.format(path=path.absolute()), path=str(path)
            )

        resolved = path.resolve()
        if resolved in self._cache:
            return self._cache[resolved]

        try:
            with open(path, encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except (OSError, UnicodeDecodeError, yaml.YAMLError) as e:
            raise ResourceError(
                ErrorMessages.STYLE_UNREADABLE.format(path=path), path=str(path), reason=str(e)
            ) from e

        if not isinstance(data, dict):
            raise ResourceError(
                ErrorMessages.STYLE_UNREADABLE.format(path=path),
                path=str(path),
                reason="top level is not a mapping",
            )

        try:
            style = self._parse_style(data)
        except (pydantic.ValidationError, ValueError, TypeError, KeyError) as e:
            raise ResourceError(
                ErrorMessages.STYLE_UNREADABLE.format(path=path), path=str(path), reason=str(e)
            ) from e

        logger.debug("Loaded style %r (%d voices) from %s", style.name, len(style.voices), path)
        self._cache[resolved] = style
        return style

    def get_style(self, name: str) -> Style | None:
        """
        Get a built-in library style by name.

        Returns:
            Style if found, None otherwise
        """
        library_file = self.library_path / f"{name}.yaml"
        if not library_file.exists():
            return None
        return self.load(library_file)

    def list_styles(self) -> list[str]:
        """List the names of built-in library styles."""
        if not self.library_path.exists():
            return []
        return sorted(path.stem for path in self.library_path.glob("*.yaml"))

    def _parse_style(self, data: dict[str, Any]) -> Style:
        """Parse style from YAML data."""
        tokens = data.get("tokens") or {}
        if not isinstance(tokens, dict):
            raise ValueError("tokens must be a mapping")
        tempo_data = tokens.get("tempo", {})
        if isinstance(tempo_data, dict):
            tempo = tempo_data.get("default", 120)
        else:
            tempo = tempo_data

        voice_list = data.get("voices") or []
        if not isinstance(voice_list, list):
            raise ValueError("voices must be a list")
        voices = tuple(self._parse_voice(voice_data) for voice_data in voice_list)

        return Style(
            schema=data.get("schema", "style/v1"),
            name=data.get("name", "unknown"),
            description=data.get("description", ""),
            time_signature=str(tokens.get("time_signature", SUPPORTED_TIME_SIGNATURE)),
            preferred_tempo=tempo,
            voices=voices,
        )

    def _parse_voice(self, data: dict[str, Any]) -> Voice:
        """Parse one voice entry."""
        if not isinstance(data, dict):
            raise ValueError(f"voice entry must be a mapping, got {data!r}")
        instrument_data = data.get("instrument", {})
        if isinstance(instrument_data, int):
            # Bare program number
            instrument = Instrument(program=instrument_data)
        else:
            instrument = Instrument(**instrument_data)

        kind = data.get("kind", "melodic")
        return Voice(
            name=data["name"],
            channel=data.get("channel", 0),
            kind=kind,
            role=data.get("role", "drums" if kind == "drums" else "chord"),
            instrument=instrument,
        )

    def clear_cache(self) -> None:
        """Clear the style cache."""
        self._cache.clear()
