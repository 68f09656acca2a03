"""
Style loading - YAML style descriptors.
"""

from chuk_style_midi.styles.loader import StyleLoader

__all__ = [
    "StyleLoader",
]
