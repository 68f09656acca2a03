"""Allow running as ``python -m chuk_style_midi``."""

import sys

from chuk_style_midi.cli import main

sys.exit(main())
