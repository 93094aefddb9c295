"""Pure functions over the application/folder tree.

Nothing here mutates its input: every change returns new node objects and
shares untouched subtrees with the old tree.
"""

from typing import Dict, Iterator, List, Optional, Sequence, Set

from applytrack.schemas.tree import ApplicationNode, BreadcrumbItem, FolderNode, NodeKind


def iter_folders(nodes: Sequence[FolderNode]) -> Iterator[FolderNode]:
    """Walk folders depth-first, parents before children."""
    for node in nodes:
        yield node
        yield from iter_folders(node.children)


def count_folders(nodes: Sequence[FolderNode]) -> int:
    return sum(1 for _ in iter_folders(nodes))


def find_application(
    forest: Sequence[ApplicationNode], application_id: int
) -> Optional[ApplicationNode]:
    for node in forest:
        if node.id == application_id:
            return node
    return None


def find_folder(nodes: Sequence[FolderNode], folder_id: int) -> Optional[FolderNode]:
    for node in iter_folders(nodes):
        if node.id == folder_id:
            return node
    return None


def locate_folder(
    forest: Sequence[ApplicationNode], folder_id: int
) -> Optional[FolderNode]:
    """Find a folder anywhere in the forest."""
    for app_node in forest:
        found = find_folder(app_node.children, folder_id)
        if found is not None:
            return found
    return None


def folder_path(nodes: Sequence[FolderNode], folder_id: int) -> List[FolderNode]:
    """Chain of folders from a root folder down to ``folder_id``, inclusive.

    Returns an empty list when the folder is not in ``nodes``.
    """
    for node in nodes:
        if node.id == folder_id:
            return [node]
        below = folder_path(node.children, folder_id)
        if below:
            return [node, *below]
    return []


def descendant_ids(node: FolderNode) -> Set[int]:
    """Ids of every folder below ``node``, excluding ``node`` itself."""
    return {child.id for child in iter_folders(node.children)}


def _toggle_folders(nodes: List[FolderNode], folder_id: int) -> List[FolderNode]:
    result = []
    for node in nodes:
        if node.id == folder_id:
            node = node.model_copy(update={"expanded": not node.expanded})
        elif node.children:
            children = _toggle_folders(node.children, folder_id)
            if children is not node.children:
                node = node.model_copy(update={"children": children})
        result.append(node)
    # Hand back the same list when nothing changed so callers can detect a no-op
    if all(new is old for new, old in zip(result, nodes)):
        return nodes
    return result


def toggle_expansion(
    forest: List[ApplicationNode], node_id: int, kind: NodeKind
) -> List[ApplicationNode]:
    """Flip ``expanded`` on the matching node. Children are left untouched."""
    match kind:
        case "application":
            return [
                node.model_copy(update={"expanded": not node.expanded})
                if node.id == node_id
                else node
                for node in forest
            ]
        case "folder":
            result = []
            for app_node in forest:
                children = _toggle_folders(app_node.children, node_id)
                if children is not app_node.children:
                    app_node = app_node.model_copy(update={"children": children})
                result.append(app_node)
            return result
        case "file":
            # Files live in the listing, not in the tree
            return forest
        case _:  # pragma: no cover
            raise ValueError(f"Unexpected node kind: {kind}")


def expansion_flags(nodes: Sequence[FolderNode]) -> Dict[int, bool]:
    return {node.id: node.expanded for node in iter_folders(nodes)}


def carry_expansion(
    nodes: List[FolderNode], flags: Dict[int, bool]
) -> List[FolderNode]:
    """Copy expansion flags onto a freshly built tree by folder id.

    Folders that did not exist before keep their default (collapsed).
    """
    result = []
    for node in nodes:
        update: dict[str, object] = {}
        if node.id in flags and flags[node.id] != node.expanded:
            update["expanded"] = flags[node.id]
        if node.children:
            update["children"] = carry_expansion(node.children, flags)
        result.append(node.model_copy(update=update) if update else node)
    return result


def build_breadcrumb(
    forest: Sequence[ApplicationNode],
    application_id: Optional[int],
    folder_id: Optional[int],
    fallback_folder_name: Optional[str] = None,
) -> List[BreadcrumbItem]:
    """Path from the application root to the cursor.

    Resolves the full ancestor chain from the tree. When the folder is not in
    the tree (yet), falls back to ``[application, folder]`` using
    ``fallback_folder_name``.
    """
    if application_id is None:
        return []

    app_node = find_application(forest, application_id)
    if app_node is None:
        return []

    crumbs = [BreadcrumbItem(kind="application", id=app_node.id, name=app_node.name)]
    if folder_id is None:
        return crumbs

    chain = folder_path(app_node.children, folder_id)
    if chain:
        crumbs.extend(
            BreadcrumbItem(kind="folder", id=node.id, name=node.name) for node in chain
        )
    elif fallback_folder_name is not None:
        crumbs.append(BreadcrumbItem(kind="folder", id=folder_id, name=fallback_folder_name))
    return crumbs
