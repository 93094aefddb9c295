"""Tree builder: assembles an application's folder hierarchy from the backend."""

from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from loguru import logger

from applytrack.clients.folders import FolderClient
from applytrack.config import MAX_FOLDER_DEPTH
from applytrack.errors import ApplytrackError
from applytrack.schemas.base import Application
from applytrack.schemas.tree import ApplicationNode, FolderNode
from applytrack.state.tree_ops import count_folders


@dataclass
class TreeBuildReport:
    """What happened during one build.

    ``failed_parents`` lists the parents whose children could not be fetched
    (None stands for the application root). Those subtrees are empty in the
    result.
    """

    application_id: int
    folder_count: int = 0
    fetch_count: int = 0
    failed_parents: List[Optional[int]] = field(default_factory=list)
    truncated_parents: List[int] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed_parents

    @property
    def root_failed(self) -> bool:
        return None in self.failed_parents


class TreeBuilder:
    """Build folder forests by walking the backend level by level.

    Each level is one ``list_folders`` request. The walk is depth-first and
    keeps backend order. A failing request only empties the subtree it was
    for; the rest of the tree is still built.
    """

    def __init__(self, folder_client: FolderClient, max_depth: int = MAX_FOLDER_DEPTH):
        """Initialize the tree builder.

        Args:
            folder_client: Client used for the per-level folder listings
            max_depth: Number of folder levels below the application root to load
        """
        self.folder_client = folder_client
        self.max_depth = max_depth

    async def build(self, application_id: int) -> List[FolderNode]:
        """Build the folder forest of an application."""
        folders, _ = await self.build_with_report(application_id)
        return folders

    async def build_with_report(
        self, application_id: int
    ) -> Tuple[List[FolderNode], TreeBuildReport]:
        """Build the folder forest and report partial failures."""
        report = TreeBuildReport(application_id=application_id)
        folders = await self._build_level(application_id, None, 0, report)

        if report.ok:
            logger.debug(
                f"Built folder tree application_id={application_id} "
                f"folders={report.folder_count} fetches={report.fetch_count}"
            )
        else:
            logger.warning(
                f"Folder tree for application_id={application_id} is incomplete, "
                f"failed parents: {report.failed_parents}"
            )
        return folders, report

    async def build_forest(
        self, applications: Sequence[Application]
    ) -> List[ApplicationNode]:
        """Build one loaded ApplicationNode per application, keeping order."""
        forest = []
        for application in applications:
            folders = await self.build(application.id)
            forest.append(ApplicationNode(application=application, children=folders, loaded=True))
        return forest

    async def _build_level(
        self,
        application_id: int,
        parent_id: Optional[int],
        depth: int,
        report: TreeBuildReport,
    ) -> List[FolderNode]:
        report.fetch_count += 1
        try:
            folders = await self.folder_client.list_folders(application_id, parent_id=parent_id)
        except ApplytrackError as e:
            logger.warning(
                f"Failed to load folders application_id={application_id} "
                f"parent_id={parent_id}: {e}"
            )
            report.failed_parents.append(parent_id)
            return []

        report.folder_count += len(folders)
        nodes = []
        for folder in folders:
            if depth + 1 >= self.max_depth:
                logger.warning(
                    f"Folder {folder.id} is at depth {depth + 1}, not loading its children"
                )
                report.truncated_parents.append(folder.id)
                children: List[FolderNode] = []
            else:
                children = await self._build_level(application_id, folder.id, depth + 1, report)
            nodes.append(FolderNode(folder=folder, children=children))
        return nodes


def count_nodes(forest: Sequence[ApplicationNode]) -> int:
    """Total number of application and folder nodes in a forest."""
    return sum(1 + count_folders(node.children) for node in forest)
