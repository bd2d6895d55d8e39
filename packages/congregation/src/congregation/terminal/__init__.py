"""Terminal boundary - mode ownership, key decoding and input sources.

PUBLIC API:
  - TerminalGuard: Scoped cbreak/alternate-screen/cursor ownership
  - InputListener: stdin key presses to KeyPressed events
  - SignalForwarder: SIGINT/SIGTERM to Interrupted events
  - decode_keys: Raw bytes to key names
"""

from .guard import TerminalGuard
from .input import InputListener, SignalForwarder
from .keys import decode_keys

__all__ = ["TerminalGuard", "InputListener", "SignalForwarder", "decode_keys"]
