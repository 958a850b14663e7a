"""termengine -- Pluggable command engine for web-embedded terminals.

This package implements the command core of a browser terminal: the
parser that turns an input line into a structured command, the processor
registry, the dispatcher, persisted state stores, command history and the
interactive input reader. Rendering, key capture and storage are supplied
by the host through small abstract interfaces.
"""

__version__ = "0.1.0"
