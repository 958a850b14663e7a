"""Interactive input subsystem for termengine.

Public API:
    InputReader -- Suspendable prompts (line, password, confirm, select, number)
    ActiveInputRequest -- State of the pending read
    KEY_SEQUENCES -- Key names to terminal byte sequences
"""

from termengine.input.reader import KEY_SEQUENCES, ActiveInputRequest, InputReader, ReadKind

__all__ = ["KEY_SEQUENCES", "ActiveInputRequest", "InputReader", "ReadKind"]
