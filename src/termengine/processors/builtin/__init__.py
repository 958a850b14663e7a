"""Built-in command processors."""

from termengine.processors.base import CommandProcessor
from termengine.processors.builtin.alias import AliasProcessor, UnaliasProcessor
from termengine.processors.builtin.misc import (
    ClipboardProcessor,
    EchoProcessor,
    JwtProcessor,
    SleepProcessor,
    YesNoProcessor,
)
from termengine.processors.builtin.system import (
    ClearProcessor,
    HelpProcessor,
    HistoryProcessor,
    PackagesProcessor,
    VersionProcessor,
)

__all__ = [
    "AliasProcessor",
    "ClearProcessor",
    "ClipboardProcessor",
    "EchoProcessor",
    "HelpProcessor",
    "HistoryProcessor",
    "JwtProcessor",
    "PackagesProcessor",
    "SleepProcessor",
    "UnaliasProcessor",
    "VersionProcessor",
    "YesNoProcessor",
    "default_processors",
]


def default_processors() -> list[CommandProcessor]:
    """Fresh instances of every built-in processor."""
    return [
        HelpProcessor(),
        VersionProcessor(),
        ClearProcessor(),
        HistoryProcessor(),
        PackagesProcessor(),
        EchoProcessor(),
        SleepProcessor(),
        AliasProcessor(),
        UnaliasProcessor(),
        JwtProcessor(),
        ClipboardProcessor(),
        YesNoProcessor(),
    ]
