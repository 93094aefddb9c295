"""Explorer state container: immutable state, actions and the reducer."""

from applytrack.state.actions import (
    Action,
    ApplicationsLoaded,
    BusyChanged,
    CursorChanged,
    CursorCleared,
    ErrorCleared,
    ErrorRaised,
    ExpansionToggled,
    ListingFailed,
    ListingLoaded,
    MultiSelectToggled,
    SelectionCleared,
    SelectionToggled,
    TreeLoaded,
)
from applytrack.state.models import ExplorerState, Listing, LoadStatus
from applytrack.state.reducer import reduce

__all__ = [
    "Action",
    "ApplicationsLoaded",
    "BusyChanged",
    "CursorChanged",
    "CursorCleared",
    "ErrorCleared",
    "ErrorRaised",
    "ExpansionToggled",
    "ExplorerState",
    "Listing",
    "ListingFailed",
    "ListingLoaded",
    "LoadStatus",
    "MultiSelectToggled",
    "SelectionCleared",
    "SelectionToggled",
    "TreeLoaded",
    "reduce",
]
