"""Schemas for the client-side application/folder tree.

Tree nodes are derived view models. They are rebuilt from the backend after
every mutation and replaced wholesale, never patched in place.
"""

from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from applytrack.schemas.base import Application, Folder

NodeKind = Literal["application", "folder", "file"]


class NodeRef(BaseModel):
    """Reference to any item shown in the explorer.

    ``key`` ("{kind}-{id}") identifies the item in selection sets. The owning
    application travels along so deletes and moves can build their URLs.
    """

    model_config = ConfigDict(frozen=True)

    kind: NodeKind
    id: int
    application_id: int

    @property
    def key(self) -> str:
        return f"{self.kind}-{self.id}"


class FolderNode(BaseModel):
    """Folder in the tree with its locally owned expansion flag."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["folder"] = "folder"
    folder: Folder
    expanded: bool = False
    children: List["FolderNode"] = Field(default_factory=list)

    @property
    def id(self) -> int:
        return self.folder.id

    @property
    def name(self) -> str:
        return self.folder.name

    @property
    def application_id(self) -> int:
        return self.folder.application_id

    @property
    def has_children(self) -> bool:
        return bool(self.children)

    @property
    def ref(self) -> NodeRef:
        return NodeRef(kind="folder", id=self.id, application_id=self.application_id)


class ApplicationNode(BaseModel):
    """Application root. ``loaded`` is False until its folders were fetched."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["application"] = "application"
    application: Application
    expanded: bool = False
    loaded: bool = False
    children: List[FolderNode] = Field(default_factory=list)

    @property
    def id(self) -> int:
        return self.application.id

    @property
    def name(self) -> str:
        return self.application.company_name

    @property
    def application_id(self) -> int:
        return self.application.id

    @property
    def has_children(self) -> bool:
        return bool(self.children)

    @property
    def ref(self) -> NodeRef:
        return NodeRef(kind="application", id=self.id, application_id=self.id)


TreeNode = Annotated[Union[ApplicationNode, FolderNode], Field(discriminator="kind")]


class BreadcrumbItem(BaseModel):
    """One step of the path from the application root to the cursor."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["application", "folder"]
    id: int
    name: str

    @property
    def folder_id(self) -> Optional[int]:
        return self.id if self.kind == "folder" else None


# Support for recursive model
FolderNode.model_rebuild()
