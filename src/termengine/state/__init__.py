"""Named, persisted state stores.

Public API:
    StateStore -- One named store with shallow-merge updates
    StateSelection -- Restartable stream of projected values
    StateStoreManager -- Lazily created stores per session
"""

from termengine.state.manager import StateStoreManager
from termengine.state.store import StateSelection, StateStore

__all__ = ["StateSelection", "StateStore", "StateStoreManager"]
