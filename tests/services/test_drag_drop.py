"""Tests for drag/drop and bulk operations."""

import pytest
import pytest_asyncio

from applytrack.errors import CrossApplicationMoveError, InvalidDropTargetError
from applytrack.schemas.tree import NodeRef
from applytrack.services.drag_drop import DragDropController
from applytrack.state.tree_ops import find_application, locate_folder


def ref(kind, item_id, application_id=1) -> NodeRef:
    return NodeRef(kind=kind, id=item_id, application_id=application_id)


@pytest_asyncio.fixture
async def controller(explorer):
    await explorer.select_application(1)
    await explorer.rebuild_tree(2)
    return DragDropController(explorer)


def folder(controller, folder_id):
    return locate_folder(controller.explorer.state.tree, folder_id)


def application(controller, application_id):
    return find_application(controller.explorer.state.tree, application_id)


@pytest.mark.asyncio
async def test_cross_application_folder_drop_is_rejected_locally(controller, backend):
    requests = len(backend.requests)

    moved = await controller.drop(ref("folder", 11), folder(controller, 20))

    assert not moved
    assert len(backend.requests) == requests
    assert controller.explorer.state.error == (
        "Cannot move folder from application 1 to application 2"
    )
    assert backend.folders[11]["parent_id"] == 10


@pytest.mark.asyncio
async def test_cross_application_file_drop_is_rejected(controller, backend):
    with pytest.raises(CrossApplicationMoveError):
        controller.check_drop(ref("file", 100), application(controller, 2))

    assert not await controller.drop(ref("file", 100), application(controller, 2))
    assert backend.count("POST") == 0


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "target_id,message",
    [
        (10, "Cannot move a folder into itself"),
        (11, "Cannot move a folder into one of its own subfolders"),
    ],
)
async def test_folder_cannot_drop_into_itself_or_descendant(
    controller, backend, target_id, message
):
    with pytest.raises(InvalidDropTargetError, match=message):
        controller.check_drop(ref("folder", 10), folder(controller, target_id))

    assert not await controller.drop(ref("folder", 10), folder(controller, target_id))
    assert controller.explorer.state.error == message
    assert backend.count("POST") == 0


@pytest.mark.asyncio
async def test_applications_cannot_be_dragged(controller, backend):
    assert not await controller.drop(ref("application", 1), folder(controller, 12))
    assert controller.explorer.state.error == "Applications cannot be moved"
    assert backend.count("POST") == 0


@pytest.mark.asyncio
async def test_folder_drop_issues_one_move_and_rebuilds(controller, backend):
    assert await controller.drop(ref("folder", 12), folder(controller, 10))

    assert backend.count("POST") == 1
    assert backend.count("POST", "/folders/12/move") == 1
    resumes = folder(controller, 10)
    assert [node.name for node in resumes.children] == ["Old", "Letters"]
    assert controller.explorer.state.error is None


@pytest.mark.asyncio
async def test_file_drop_on_application_moves_to_root(controller, backend):
    assert await controller.drop(ref("file", 100), application(controller, 1))

    assert backend.count("POST", "/applications/1/documents/100/move") == 1
    assert backend.documents[100]["folder_id"] is None
    listed = [d.filename for d in controller.explorer.state.listing.files]
    assert listed == ["cv.pdf", "cover.txt"]


@pytest.mark.asyncio
async def test_click_outside_multi_select_is_ignored(controller):
    assert not controller.click(ref("file", 100))
    assert controller.selection == []

    assert controller.toggle_multi_select()
    assert controller.click(ref("file", 100))
    assert not controller.click(ref("file", 100))


@pytest.mark.asyncio
async def test_bulk_delete_continues_past_failures(controller, backend):
    controller.toggle_multi_select()
    for item in (ref("file", 100), ref("file", 101), ref("folder", 12)):
        controller.click(item)
    backend.fail("DELETE", "/applications/1/documents/101")

    result = await controller.bulk_delete()

    assert result.succeeded == ["file-100", "folder-12"]
    assert list(result.failed) == ["file-101"]
    assert not result.ok
    assert result.total == 3

    assert 100 not in backend.documents
    assert 101 in backend.documents
    assert 12 not in backend.folders

    state = controller.explorer.state
    assert state.selection == {}
    assert state.busy is False
    assert state.error.startswith("Bulk delete failed for 1 of 3 item(s)")
    assert locate_folder(state.tree, 12) is None
    assert [d.filename for d in state.listing.files] == ["cover.txt"]
    assert state.selected_application.document_count == 2


@pytest.mark.asyncio
async def test_bulk_index_across_applications(controller, backend):
    controller.toggle_multi_select()
    for item in (ref("file", 101), ref("application", 1), ref("folder", 20, 2)):
        controller.click(item)

    result = await controller.bulk_index()

    assert result.succeeded == ["file-101", "folder-20"]
    assert result.failed == {"application-1": "Applications cannot be indexed as a whole"}
    assert backend.documents[101]["indexed"] is True
    assert backend.documents[200]["indexed"] is True
    assert controller.explorer.state.listing.find_file(101).indexed is True
    assert controller.selection == []


@pytest.mark.asyncio
async def test_bulk_with_empty_selection_does_nothing(controller, backend):
    requests = len(backend.requests)

    result = await controller.bulk_delete()

    assert result.total == 0
    assert result.ok
    assert len(backend.requests) == requests
