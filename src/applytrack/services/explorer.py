"""Explorer service: runs remote effects and feeds their results into the state.

The service owns the only ExplorerState. Every change goes through
``dispatch``, which applies the pure reducer and notifies subscribers.

Mutations follow one protocol:

1. issue the remote call
2. on success, rebuild the affected application's tree and reload the cursor
3. on failure, leave the tree untouched and set ``state.error``

There is no optimistic update. Fetches capture a generation number and their
result is dropped if a newer fetch for the same target started meanwhile.
"""

from typing import Awaitable, Callable, Dict, List, Optional, Sequence, TypeVar

from loguru import logger

from applytrack.clients.documents import FileSource
from applytrack.clients.store import RemoteStore
from applytrack.config import MAX_FOLDER_DEPTH
from applytrack.errors import ApplytrackError
from applytrack.schemas.base import ApplicationStatus, Document, Folder
from applytrack.schemas.response import UploadSummary
from applytrack.schemas.tree import ApplicationNode, FolderNode, NodeKind, NodeRef, TreeNode
from applytrack.services.tree_builder import TreeBuilder
from applytrack.state import (
    Action,
    ApplicationsLoaded,
    BusyChanged,
    CursorChanged,
    ErrorCleared,
    ErrorRaised,
    ExpansionToggled,
    ExplorerState,
    Listing,
    ListingFailed,
    ListingLoaded,
    TreeLoaded,
    reduce,
)
from applytrack.state.tree_ops import find_application, find_folder, locate_folder

T = TypeVar("T")

Listener = Callable[[ExplorerState], None]


class ExplorerService:
    """Single source of truth for the tree, the cursor and the selection."""

    def __init__(
        self,
        store: RemoteStore,
        tree_builder: Optional[TreeBuilder] = None,
        *,
        max_depth: int = MAX_FOLDER_DEPTH,
    ):
        """Initialize the explorer.

        Args:
            store: Typed clients for the backend
            tree_builder: Builder for folder forests, defaults to one over ``store.folders``
            max_depth: Folder levels to load when no builder is given
        """
        self.store = store
        self.tree_builder = tree_builder or TreeBuilder(store.folders, max_depth=max_depth)
        self.state = ExplorerState()
        self._listeners: List[Listener] = []
        self._cursor_generation = 0
        self._tree_generations: Dict[int, int] = {}

    # --- State plumbing ---

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call ``listener`` with the new state after every dispatch.

        Returns:
            A function that removes the listener
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def dispatch(self, action: Action) -> ExplorerState:
        self.state = reduce(self.state, action)
        for listener in list(self._listeners):
            listener(self.state)
        return self.state

    def _fail(self, description: str, error: ApplytrackError) -> None:
        message = f"Failed to {description}: {error}"
        logger.warning(message)
        self.dispatch(ErrorRaised(message))

    def _reject(self, message: str) -> None:
        logger.info(f"Rejected: {message}")
        self.dispatch(ErrorRaised(message))

    def clear_error(self) -> None:
        self.dispatch(ErrorCleared())

    # --- Loading ---

    async def load_applications(self) -> bool:
        """Fetch the application overview."""
        try:
            applications = await self.store.applications.list_overview()
        except ApplytrackError as e:
            self._fail("load applications", e)
            return False
        self.dispatch(ApplicationsLoaded(applications))
        return True

    async def rebuild_tree(self, application_id: int) -> bool:
        """Re-fetch the full folder hierarchy of an application.

        Returns:
            True when every level could be fetched and the result was applied
        """
        generation = self._tree_generations.get(application_id, 0) + 1
        self._tree_generations[application_id] = generation

        folders, report = await self.tree_builder.build_with_report(application_id)

        if generation != self._tree_generations[application_id]:
            logger.debug(
                f"Discarding stale tree application_id={application_id} generation={generation}"
            )
            return False

        self.dispatch(TreeLoaded(application_id=application_id, folders=folders))
        if not report.ok:
            self.dispatch(
                ErrorRaised(f"Some folders of application {application_id} could not be loaded")
            )
        return report.ok

    async def reload_listing(self) -> bool:
        """Fetch the immediate child folders and documents of the cursor."""
        application_id = self.state.application_id
        folder_id = self.state.folder_id
        if application_id is None:
            return False

        self._cursor_generation += 1
        generation = self._cursor_generation

        try:
            folders = await self.store.folders.list_folders(application_id, parent_id=folder_id)
            files = await self.store.documents.list_in_folder(application_id, folder_id)
        except ApplytrackError as e:
            if generation != self._cursor_generation:
                return False
            logger.warning(f"Failed to load folder contents: {e}")
            self.dispatch(ListingFailed(f"Failed to load folder contents: {e}"))
            return False

        if generation != self._cursor_generation:
            logger.debug(
                f"Discarding stale listing application_id={application_id} folder_id={folder_id}"
            )
            return False

        listing = Listing(
            application_id=application_id,
            folder_id=folder_id,
            folders=folders,
            files=files,
        )
        self.dispatch(ListingLoaded(listing))
        return True

    async def refresh(
        self, application_id: Optional[int], *, reload_applications: bool = False
    ) -> None:
        """Rebuild an application's tree and reload the cursor listing."""
        if reload_applications:
            await self.load_applications()

        tree_ok = False
        if application_id is not None and find_application(self.state.tree, application_id):
            tree_ok = await self.rebuild_tree(application_id)

        state = self.state
        if tree_ok and state.folder_id is not None and state.application_id == application_id:
            app_node = find_application(state.tree, application_id)
            if app_node is not None and find_folder(app_node.children, state.folder_id) is None:
                logger.info(
                    f"Folder {state.folder_id} no longer exists, moving to application root"
                )
                self.dispatch(CursorChanged(selected=app_node.ref, application_id=app_node.id))

        await self.reload_listing()

    # --- Cursor ---

    async def select_node(self, node: TreeNode) -> bool:
        """Move the cursor to an application root or a folder and load its contents."""
        match node:
            case ApplicationNode():
                self.dispatch(CursorChanged(selected=node.ref, application_id=node.id))
                if not node.loaded:
                    await self.rebuild_tree(node.id)
                return await self.reload_listing()
            case FolderNode():
                self.dispatch(
                    CursorChanged(
                        selected=node.ref,
                        application_id=node.application_id,
                        folder_id=node.id,
                        folder_name=node.name,
                    )
                )
                return await self.reload_listing()
            case _:  # pragma: no cover
                raise ValueError(f"Unexpected node: {node!r}")

    async def select_application(self, application_id: int) -> bool:
        """Select an application by id, loading the overview if needed."""
        node = find_application(self.state.tree, application_id)
        if node is None:
            await self.load_applications()
            node = find_application(self.state.tree, application_id)
        if node is None:
            self._reject(f"Application {application_id} not found")
            return False
        return await self.select_node(node)

    async def select_folder(self, folder_id: int) -> bool:
        """Select a folder by id. Its application tree must be loaded."""
        node = locate_folder(self.state.tree, folder_id)
        if node is None:
            self._reject(f"Folder {folder_id} not found")
            return False
        return await self.select_node(node)

    async def navigate_breadcrumb(self, index: int) -> bool:
        """Jump to one of the breadcrumb entries."""
        breadcrumb = self.state.breadcrumb
        if not 0 <= index < len(breadcrumb):
            self._reject(f"No breadcrumb entry at position {index}")
            return False

        item = breadcrumb[index]
        match item.kind:
            case "application":
                return await self.select_application(item.id)
            case "folder":
                node = locate_folder(self.state.tree, item.id)
                if node is not None:
                    return await self.select_node(node)
                application_id = self.state.application_id
                assert application_id is not None
                self.dispatch(
                    CursorChanged(
                        selected=self._folder_ref(item.id, application_id),
                        application_id=application_id,
                        folder_id=item.id,
                        folder_name=item.name,
                    )
                )
                return await self.reload_listing()
            case _:  # pragma: no cover
                raise ValueError(f"Unexpected breadcrumb kind: {item.kind}")

    def toggle_expansion(self, node_id: int, kind: NodeKind) -> ExplorerState:
        """Expand or collapse a node. Local only, no request is made."""
        return self.dispatch(ExpansionToggled(node_id=node_id, kind=kind))

    @staticmethod
    def _folder_ref(folder_id: int, application_id: int) -> NodeRef:
        return NodeRef(kind="folder", id=folder_id, application_id=application_id)

    def _application_of_folder(self, folder_id: int) -> Optional[int]:
        node = locate_folder(self.state.tree, folder_id)
        if node is not None:
            return node.application_id
        return self.state.application_id

    # --- Mutations ---

    async def _mutate(
        self,
        description: str,
        operation: Callable[[], Awaitable[T]],
        application_id: Optional[int],
        *,
        reload_applications: bool = False,
    ) -> Optional[T]:
        """Run a remote mutation, then rebuild on success.

        Returns:
            The operation's result, or None when it failed
        """
        self.dispatch(BusyChanged(True))
        try:
            try:
                result = await operation()
            except ApplytrackError as e:
                self._fail(description, e)
                return None
            logger.info(f"Completed: {description}")
            await self.refresh(application_id, reload_applications=reload_applications)
            return result
        finally:
            self.dispatch(BusyChanged(False))

    async def create_folder(self, name: str) -> Optional[Folder]:
        """Create a folder at the cursor."""
        application_id = self.state.application_id
        if application_id is None:
            self._reject("Select an application first")
            return None
        return await self.create_folder_in(application_id, name, parent_id=self.state.folder_id)

    async def create_folder_in(
        self, application_id: int, name: str, parent_id: Optional[int] = None
    ) -> Optional[Folder]:
        """Create a folder under ``parent_id`` (None for the application root)."""
        name = name.strip()
        if not name:
            self._reject("Folder name must not be empty")
            return None
        return await self._mutate(
            f"create folder '{name}'",
            lambda: self.store.folders.create_folder(application_id, name, parent_id=parent_id),
            application_id,
        )

    async def rename_folder(self, folder_id: int, new_name: str) -> bool:
        new_name = new_name.strip()
        if not new_name:
            self._reject("Folder name must not be empty")
            return False
        result = await self._mutate(
            f"rename folder {folder_id}",
            lambda: self.store.folders.rename_folder(folder_id, new_name),
            self._application_of_folder(folder_id),
        )
        return result is not None

    async def rename_application(self, application_id: int, new_name: str) -> bool:
        new_name = new_name.strip()
        if not new_name:
            self._reject("Application name must not be empty")
            return False
        result = await self._mutate(
            f"rename application {application_id}",
            lambda: self.store.applications.rename_application(application_id, new_name),
            application_id,
            reload_applications=True,
        )
        return result is not None

    async def update_application_status(
        self,
        application_id: int,
        status: ApplicationStatus,
        notes: Optional[str] = None,
    ) -> bool:
        result = await self._mutate(
            f"update status of application {application_id}",
            lambda: self.store.applications.update_status(application_id, status, notes),
            None,
            reload_applications=True,
        )
        return result is not None

    async def delete_application(self, application_id: int) -> bool:
        """Delete an application. The cursor is cleared if it was inside it."""
        result = await self._mutate(
            f"delete application {application_id}",
            lambda: self.store.applications.delete_application(application_id),
            None,
            reload_applications=True,
        )
        return result is not None

    async def delete_folder(self, folder_id: int) -> bool:
        result = await self._mutate(
            f"delete folder {folder_id}",
            lambda: self.store.folders.delete_folder(folder_id),
            self._application_of_folder(folder_id),
        )
        return result is not None

    async def delete_document(self, application_id: int, document_id: int) -> bool:
        result = await self._mutate(
            f"delete document {document_id}",
            lambda: self.store.documents.delete_document(application_id, document_id),
            application_id,
            reload_applications=True,
        )
        return result is not None

    async def index_document(
        self, document_id: int, application_id: Optional[int] = None
    ) -> bool:
        """Index a document and reload the cursor so its flag is current."""
        result = await self._mutate(
            f"index document {document_id}",
            lambda: self.store.documents.index_document(document_id),
            application_id if application_id is not None else self.state.application_id,
        )
        return result is not None

    async def index_folder(self, folder_id: int) -> bool:
        """Index every document below a folder."""
        result = await self._mutate(
            f"index folder {folder_id}",
            lambda: self.store.folders.index_folder(folder_id),
            self._application_of_folder(folder_id),
        )
        return result is not None

    async def move_document(
        self,
        application_id: int,
        document_id: int,
        target_folder_id: Optional[int],
    ) -> bool:
        result = await self._mutate(
            f"move document {document_id}",
            lambda: self.store.documents.move_document(
                application_id, document_id, target_folder_id
            ),
            application_id,
        )
        return result is not None

    async def move_folder(self, folder_id: int, target_parent_id: Optional[int]) -> bool:
        result = await self._mutate(
            f"move folder {folder_id}",
            lambda: self.store.folders.move_folder(folder_id, target_parent_id),
            self._application_of_folder(folder_id),
        )
        return result is not None

    async def upload_files(
        self,
        files: Sequence[FileSource],
        *,
        application_id: Optional[int] = None,
        company_name: Optional[str] = None,
    ) -> Optional[UploadSummary]:
        """Upload files into an application, or into a new one named ``company_name``.

        Without either argument the files go to the selected application.
        """
        if not files:
            return None
        if application_id is None and not company_name:
            application_id = self.state.application_id
        if application_id is None and not company_name:
            self._reject("Select an application first")
            return None

        self.dispatch(BusyChanged(True))
        try:
            try:
                summary = await self.store.documents.upload_files(
                    files, application_id=application_id, company_name=company_name
                )
            except ApplytrackError as e:
                self._fail("upload files", e)
                return None
            logger.info(
                f"Uploaded {len(files)} file(s) application_id="
                f"{summary.application_id or application_id}"
            )
            await self.refresh(
                summary.application_id or application_id, reload_applications=True
            )
            return summary
        finally:
            self.dispatch(BusyChanged(False))

    # --- Convenience ---

    @property
    def listed_documents(self) -> List[Document]:
        """Documents of the current listing, empty when nothing is loaded."""
        listing = self.state.listing
        return list(listing.files) if listing is not None else []
