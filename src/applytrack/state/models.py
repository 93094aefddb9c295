"""State held by the explorer.

ExplorerState is immutable. Transitions in applytrack.state.reducer return a
new instance, so a previously captured state never changes underneath a
caller.
"""

from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from applytrack.schemas.base import Application, Document, Folder
from applytrack.schemas.tree import ApplicationNode, BreadcrumbItem, NodeRef


class LoadStatus(str, Enum):
    """Lifecycle of an on-demand fetch."""

    IDLE = "idle"
    LOADING = "loading"
    LOADED = "loaded"
    ERROR = "error"


class Listing(BaseModel):
    """Immediate contents of the cursor: child folders and documents."""

    model_config = ConfigDict(frozen=True)

    application_id: int
    folder_id: Optional[int] = None
    folders: List[Folder] = Field(default_factory=list)
    files: List[Document] = Field(default_factory=list)

    def find_file(self, document_id: int) -> Optional[Document]:
        for doc in self.files:
            if doc.id == document_id:
                return doc
        return None


class ExplorerState(BaseModel):
    """Single source of truth for the browsing UI."""

    model_config = ConfigDict(frozen=True)

    applications: List[Application] = Field(default_factory=list)
    tree: List[ApplicationNode] = Field(default_factory=list)

    # Cursor
    selected: Optional[NodeRef] = None
    application_id: Optional[int] = None
    folder_id: Optional[int] = None
    breadcrumb: List[BreadcrumbItem] = Field(default_factory=list)
    listing: Optional[Listing] = None
    listing_status: LoadStatus = LoadStatus.IDLE

    # Multi-select
    multi_select: bool = False
    selection: Dict[str, NodeRef] = Field(default_factory=dict)

    error: Optional[str] = None
    busy: bool = False

    @property
    def selected_application(self) -> Optional[Application]:
        if self.application_id is None:
            return None
        for application in self.applications:
            if application.id == self.application_id:
                return application
        return None

    def is_selected(self, ref: NodeRef) -> bool:
        return ref.key in self.selection
