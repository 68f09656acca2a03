"""
Channel allocator - assigns every voice of a style to its own MIDI channel.

Voices are processed in declaration order. Each voice gets its preferred
channel when free, otherwise the first free channel of the same
classification (drum or melodic). Drum channels are the channels that the
style's drum voices ask for; every other channel is melodic.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence

from pydantic import BaseModel, Field, model_validator

from chuk_style_midi.constants import MIDI_CHANNEL_COUNT, ErrorMessages, VoiceKind
from chuk_style_midi.errors import AllocationError
from chuk_style_midi.models.style import Instrument, Voice

logger = logging.getLogger(__name__)


class ChannelAssignment(BaseModel):
    """One voice placed on one channel with its instrument."""

    channel: int = Field(..., ge=0, le=15)
    voice: Voice
    instrument: Instrument

    model_config = {"frozen": True}

    @property
    def moved(self) -> bool:
        """Return True if the voice did not get its preferred channel."""
        return self.channel != self.voice.preferred_channel


class InstrumentMap(BaseModel):
    """
    Channel to instrument assignments, one entry per voice.

    Entries keep voice declaration order. No two entries share a channel.
    """

    entries: tuple[ChannelAssignment, ...] = Field(default_factory=tuple)

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def validate_unique(self) -> InstrumentMap:
        """Channels and voice names must be unique."""
        channels = [entry.channel for entry in self.entries]
        if len(channels) != len(set(channels)):
            raise ValueError(f"Duplicate channel in instrument map: {channels}")
        names = [entry.voice.name for entry in self.entries]
        if len(names) != len(set(names)):
            raise ValueError(f"Duplicate voice in instrument map: {names}")
        return self

    def __len__(self) -> int:
        return len(self.entries)

    def channels(self) -> list[int]:
        """Assigned channels in voice order."""
        return [entry.channel for entry in self.entries]

    def channel_for(self, voice_name: str) -> int | None:
        """Get the channel of a voice."""
        for entry in self.entries:
            if entry.voice.name == voice_name:
                return entry.channel
        return None

    def get(self, channel: int) -> ChannelAssignment | None:
        """Get the assignment on a channel."""
        for entry in self.entries:
            if entry.channel == channel:
                return entry
        return None

    def as_dict(self) -> dict[int, ChannelAssignment]:
        """Channel → assignment, ordered by channel."""
        return {entry.channel: entry for entry in sorted(self.entries, key=lambda e: e.channel)}


class ChannelAllocator:
    """Allocates conflict-free MIDI channels for a style's voices."""

    def __init__(self, channel_count: int = MIDI_CHANNEL_COUNT):
        """
        Initialize the allocator.

        Args:
            channel_count: Number of channels to allocate from
        """
        self.channel_count = channel_count

    def allocate(self, voices: Sequence[Voice]) -> InstrumentMap:
        """
        Assign each voice to a unique channel.

        Args:
            voices: Voices in declaration order

        Returns:
            InstrumentMap with exactly one entry per voice

        Raises:
            AllocationError: If a voice has no compatible free channel
        """
        drum_channels = self.drum_channels(voices)
        occupied: list[int] = []
        entries: list[ChannelAssignment] = []

        for voice in voices:
            channel = voice.preferred_channel
            if channel in occupied or channel >= self.channel_count:
                channel = self._find_free_channel(voice, occupied, drum_channels)
                if channel is None:
                    raise AllocationError(
                        ErrorMessages.NO_FREE_CHANNEL.format(voice=voice.name),
                        voice=voice.name,
                        kind=voice.kind.value,
                        preferred_channel=voice.preferred_channel,
                    )
                logger.debug(
                    "Voice %r moved from channel %d to %d",
                    voice.name,
                    voice.preferred_channel,
                    channel,
                )

            occupied.append(channel)
            entries.append(
                ChannelAssignment(channel=channel, voice=voice, instrument=voice.instrument)
            )

        return InstrumentMap(entries=tuple(entries))

    def drum_channels(self, voices: Iterable[Voice]) -> list[int]:
        """Channels classified as drum channels: those the drum voices prefer."""
        channels: list[int] = []
        for voice in voices:
            if voice.kind == VoiceKind.DRUMS and voice.preferred_channel not in channels:
                channels.append(voice.preferred_channel)
        return channels

    def _find_free_channel(
        self, voice: Voice, occupied: list[int], drum_channels: list[int]
    ) -> int | None:
        """First unoccupied channel whose classification matches the voice."""
        for channel in range(self.channel_count):
            if channel in occupied:
                continue
            if (channel in drum_channels) == voice.is_drums:
                return channel
        return None
