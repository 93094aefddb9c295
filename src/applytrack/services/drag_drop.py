"""Drag/drop and multi-select handling on top of the explorer service."""

from dataclasses import dataclass, field
from typing import Awaitable, Callable, Dict, List, Literal, Optional

from loguru import logger

from applytrack.clients.store import RemoteStore
from applytrack.errors import (
    ApplytrackError,
    CrossApplicationMoveError,
    InvalidDropTargetError,
    PolicyViolationError,
)
from applytrack.schemas.tree import ApplicationNode, FolderNode, NodeRef, TreeNode
from applytrack.services.explorer import ExplorerService
from applytrack.state import (
    BusyChanged,
    ErrorRaised,
    MultiSelectToggled,
    SelectionCleared,
    SelectionToggled,
)
from applytrack.state.tree_ops import descendant_ids, locate_folder

BatchAction = Literal["delete", "index"]


@dataclass
class BatchResult:
    """Outcome of a bulk operation.

    Items are processed one by one in selection order. There is no rollback,
    so ``succeeded`` items stay applied even when others failed.
    """

    action: BatchAction
    succeeded: List[str] = field(default_factory=list)
    failed: Dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.failed

    @property
    def total(self) -> int:
        return len(self.succeeded) + len(self.failed)


def _target_location(target: TreeNode) -> tuple[int, Optional[int]]:
    """(application id, folder id) a drop on ``target`` moves into."""
    match target:
        case ApplicationNode():
            return target.id, None
        case FolderNode():
            return target.application_id, target.id
        case _:  # pragma: no cover
            raise ValueError(f"Unexpected drop target: {target!r}")


class DragDropController:
    """Turns drops and selection sets into move, delete and index calls."""

    def __init__(self, explorer: ExplorerService):
        self.explorer = explorer

    @property
    def store(self) -> RemoteStore:
        return self.explorer.store

    # --- Drag and drop ---

    def check_drop(self, source: NodeRef, target: TreeNode) -> None:
        """Validate a drop before anything is sent.

        Raises:
            CrossApplicationMoveError: If source and target belong to different applications
            InvalidDropTargetError: If the target cannot receive the source
        """
        application_id, folder_id = _target_location(target)

        match source.kind:
            case "application":
                raise InvalidDropTargetError("Applications cannot be moved")
            case "file":
                if source.application_id != application_id:
                    raise CrossApplicationMoveError(
                        "document", source.application_id, application_id
                    )
            case "folder":
                if source.application_id != application_id:
                    raise CrossApplicationMoveError(
                        "folder", source.application_id, application_id
                    )
                if folder_id is None:
                    return
                if folder_id == source.id:
                    raise InvalidDropTargetError("Cannot move a folder into itself")
                node = locate_folder(self.explorer.state.tree, source.id)
                if node is not None and folder_id in descendant_ids(node):
                    raise InvalidDropTargetError(
                        "Cannot move a folder into one of its own subfolders"
                    )

    async def drop(self, source: NodeRef, target: TreeNode) -> bool:
        """Move ``source`` into ``target``.

        Issues exactly one move request followed by a rebuild. Rejected drops
        set the error and send nothing.
        """
        try:
            self.check_drop(source, target)
        except PolicyViolationError as e:
            logger.info(f"Rejected drop of {source.key}: {e}")
            self.explorer.dispatch(ErrorRaised(str(e)))
            return False

        _, folder_id = _target_location(target)
        if source.kind == "file":
            return await self.explorer.move_document(source.application_id, source.id, folder_id)
        return await self.explorer.move_folder(source.id, folder_id)

    # --- Multi-select ---

    def toggle_multi_select(self) -> bool:
        """Switch multi-select mode. Leaving it clears the selection."""
        return self.explorer.dispatch(MultiSelectToggled()).multi_select

    def click(self, ref: NodeRef) -> bool:
        """Toggle ``ref`` in the selection. Ignored outside multi-select mode.

        Returns:
            Whether ``ref`` is selected afterwards
        """
        return self.explorer.dispatch(SelectionToggled(ref)).is_selected(ref)

    def clear_selection(self) -> None:
        self.explorer.dispatch(SelectionCleared())

    @property
    def selection(self) -> List[NodeRef]:
        return list(self.explorer.state.selection.values())

    # --- Bulk operations ---

    async def _delete_one(self, ref: NodeRef) -> None:
        match ref.kind:
            case "file":
                await self.store.documents.delete_document(ref.application_id, ref.id)
            case "folder":
                await self.store.folders.delete_folder(ref.id)
            case "application":
                await self.store.applications.delete_application(ref.id)

    async def _index_one(self, ref: NodeRef) -> None:
        match ref.kind:
            case "file":
                await self.store.documents.index_document(ref.id)
            case "folder":
                await self.store.folders.index_folder(ref.id)
            case "application":
                raise PolicyViolationError("Applications cannot be indexed as a whole")

    async def bulk_delete(self) -> BatchResult:
        """Delete every selected item, one request per item."""
        return await self._run_batch("delete", self._delete_one)

    async def bulk_index(self) -> BatchResult:
        """Index every selected document and folder, one request per item."""
        return await self._run_batch("index", self._index_one)

    async def _run_batch(
        self,
        action: BatchAction,
        operation: Callable[[NodeRef], Awaitable[None]],
    ) -> BatchResult:
        refs = self.selection
        result = BatchResult(action=action)
        if not refs:
            return result

        logger.info(f"Starting bulk {action} of {len(refs)} item(s)")
        self.explorer.dispatch(BusyChanged(True))
        try:
            try:
                for ref in refs:
                    try:
                        await operation(ref)
                    except ApplytrackError as e:
                        logger.warning(f"Bulk {action} failed for {ref.key}: {e}")
                        result.failed[ref.key] = str(e)
                    else:
                        result.succeeded.append(ref.key)
            finally:
                self.explorer.dispatch(SelectionCleared())

            application_ids = list(dict.fromkeys(ref.application_id for ref in refs))
            reload_applications = action == "delete"
            if reload_applications:
                await self.explorer.load_applications()
            for application_id in application_ids:
                await self.explorer.refresh(application_id)

            if result.failed:
                last_message = list(result.failed.values())[-1]
                self.explorer.dispatch(
                    ErrorRaised(
                        f"Bulk {action} failed for {len(result.failed)} of "
                        f"{result.total} item(s): {last_message}"
                    )
                )
        finally:
            self.explorer.dispatch(BusyChanged(False))

        logger.info(
            f"Bulk {action} finished: {len(result.succeeded)} succeeded, "
            f"{len(result.failed)} failed"
        )
        return result
