"""Actions understood by the explorer reducer.

Each action is a plain frozen dataclass describing something that already
happened (a fetch completed, the user clicked). Network effects are issued by
the services before an action is dispatched, never by the reducer.
"""

from dataclasses import dataclass
from typing import List, Optional, Union

from applytrack.schemas.base import Application
from applytrack.schemas.tree import FolderNode, NodeKind, NodeRef
from applytrack.state.models import Listing


@dataclass(frozen=True)
class ApplicationsLoaded:
    applications: List[Application]


@dataclass(frozen=True)
class TreeLoaded:
    """A full rebuild of one application's folder forest completed."""

    application_id: int
    folders: List[FolderNode]


@dataclass(frozen=True)
class CursorChanged:
    """The user moved to an application root or a folder.

    ``folder_name`` is only used for the breadcrumb when the folder is not in
    the tree yet.
    """

    selected: NodeRef
    application_id: int
    folder_id: Optional[int] = None
    folder_name: Optional[str] = None


@dataclass(frozen=True)
class CursorCleared:
    pass


@dataclass(frozen=True)
class ListingLoaded:
    listing: Listing


@dataclass(frozen=True)
class ListingFailed:
    message: str


@dataclass(frozen=True)
class ExpansionToggled:
    node_id: int
    kind: NodeKind


@dataclass(frozen=True)
class ErrorRaised:
    message: str


@dataclass(frozen=True)
class ErrorCleared:
    pass


@dataclass(frozen=True)
class BusyChanged:
    busy: bool


@dataclass(frozen=True)
class MultiSelectToggled:
    pass


@dataclass(frozen=True)
class SelectionToggled:
    ref: NodeRef


@dataclass(frozen=True)
class SelectionCleared:
    pass


Action = Union[
    ApplicationsLoaded,
    TreeLoaded,
    CursorChanged,
    CursorCleared,
    ListingLoaded,
    ListingFailed,
    ExpansionToggled,
    ErrorRaised,
    ErrorCleared,
    BusyChanged,
    MultiSelectToggled,
    SelectionToggled,
    SelectionCleared,
]
