"""
Instrument mixing - channel allocation for a style's voices.
"""

from chuk_style_midi.mixing.allocator import ChannelAllocator, ChannelAssignment, InstrumentMap

__all__ = [
    "ChannelAllocator",
    "ChannelAssignment",
    "InstrumentMap",
]
