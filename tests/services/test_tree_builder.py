"""Tests for TreeBuilder."""

import random
from typing import Dict, List, Optional, Set

import pytest

from applytrack.errors import BackendServerError
from applytrack.schemas.base import Folder
from applytrack.schemas.tree import FolderNode
from applytrack.services.tree_builder import TreeBuilder, count_nodes
from applytrack.state.tree_ops import count_folders, iter_folders
from factories import make_folder


class FakeFolderClient:
    """Serves ``list_folders`` from a parent -> children map."""

    def __init__(self, folders: List[Folder], failing_parents: Set[Optional[int]] = frozenset()):
        self.children: Dict[Optional[int], List[Folder]] = {}
        for folder in folders:
            self.children.setdefault(folder.parent_id, []).append(folder)
        self.failing_parents = failing_parents
        self.calls: List[Optional[int]] = []

    async def list_folders(self, application_id: int, parent_id: Optional[int] = None):
        self.calls.append(parent_id)
        if parent_id in self.failing_parents:
            raise BackendServerError("boom", status_code=500)
        return list(self.children.get(parent_id, []))


def random_tree(size: int, seed: int) -> List[Folder]:
    """A random valid hierarchy of ``size`` folders, listed in shuffled order."""
    rng = random.Random(seed)
    folders = []
    for folder_id in range(1, size + 1):
        parent_id = rng.choice([None, *range(1, folder_id)])
        folders.append(make_folder(folder_id, parent_id=parent_id))
    rng.shuffle(folders)
    return folders


def parent_map(
    nodes: List[FolderNode], parent_id: Optional[int] = None
) -> Dict[int, Optional[int]]:
    result = {}
    for node in nodes:
        result[node.id] = parent_id
        result.update(parent_map(node.children, node.id))
    return result


@pytest.mark.asyncio
@pytest.mark.parametrize("size,seed", [(1, 0), (7, 1), (25, 2), (60, 3)])
async def test_build_preserves_every_folder_and_parent(size, seed):
    folders = random_tree(size, seed)
    builder = TreeBuilder(FakeFolderClient(folders), max_depth=size + 1)

    tree, report = await builder.build_with_report(1)

    assert report.ok
    assert count_folders(tree) == size
    assert report.folder_count == size
    assert parent_map(tree) == {f.id: f.parent_id for f in folders}
    # One request per folder plus one for the root level
    assert report.fetch_count == size + 1


@pytest.mark.asyncio
async def test_children_keep_backend_order_and_start_collapsed():
    folders = [
        make_folder(3, name="Zeta"),
        make_folder(1, name="Alpha"),
        make_folder(2, name="Mid", parent_id=3),
    ]
    tree = await TreeBuilder(FakeFolderClient(folders)).build(1)

    assert [node.name for node in tree] == ["Zeta", "Alpha"]
    assert [node.name for node in tree[0].children] == ["Mid"]
    assert not any(node.expanded for node in iter_folders(tree))


@pytest.mark.asyncio
async def test_failed_subtree_degrades_to_empty_children():
    folders = [
        make_folder(1, name="Resumes"),
        make_folder(2, name="Old", parent_id=1),
        make_folder(3, name="Letters"),
        make_folder(4, name="Drafts", parent_id=3),
    ]
    client = FakeFolderClient(folders, failing_parents={1})

    tree, report = await TreeBuilder(client).build_with_report(1)

    assert [node.name for node in tree] == ["Resumes", "Letters"]
    assert tree[0].children == []
    assert [node.name for node in tree[1].children] == ["Drafts"]
    assert report.failed_parents == [1]
    assert not report.ok
    assert not report.root_failed


@pytest.mark.asyncio
async def test_root_failure_yields_empty_tree():
    client = FakeFolderClient([make_folder(1)], failing_parents={None})

    tree, report = await TreeBuilder(client).build_with_report(1)

    assert tree == []
    assert report.root_failed


@pytest.mark.asyncio
async def test_depth_guard_stops_cyclic_backend():
    # A backend violating acyclicity: folder 1 lists itself as its own child
    looping = make_folder(1, name="Loop")

    class CyclicClient(FakeFolderClient):
        async def list_folders(self, application_id, parent_id=None):
            self.calls.append(parent_id)
            return [looping]

    client = CyclicClient([])
    tree, report = await TreeBuilder(client, max_depth=4).build_with_report(1)

    assert len(client.calls) == 4
    assert count_folders(tree) == 4
    assert report.truncated_parents == [1]


@pytest.mark.asyncio
async def test_build_forest_against_backend(store):
    applications = await store.applications.list_overview()

    forest = await TreeBuilder(store.folders).build_forest(applications)

    assert [node.name for node in forest] == ["Acme", "Globex"]
    assert all(node.loaded for node in forest)
    assert [f.name for f in forest[0].children] == ["Resumes", "Letters"]
    assert [f.name for f in forest[0].children[0].children] == ["Old"]
    assert count_nodes(forest) == 2 + 4


@pytest.mark.asyncio
async def test_unknown_application_reports_root_failure(store):
    tree, report = await TreeBuilder(store.folders).build_with_report(999)

    assert tree == []
    assert report.root_failed


def test_count_nodes_counts_applications_and_folders(sample_forest):
    assert count_nodes(sample_forest) == 6
    assert count_nodes([]) == 0
