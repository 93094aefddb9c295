"""Tests for ExplorerService against the fake backend."""

import asyncio

import httpx
import pytest

from applytrack.clients.store import RemoteStore
from applytrack.schemas.base import ApplicationStatus
from applytrack.services.explorer import ExplorerService
from applytrack.state import LoadStatus
from applytrack.state.tree_ops import find_application, locate_folder


async def open_acme(explorer):
    assert await explorer.select_application(1)
    return explorer.state


@pytest.mark.asyncio
async def test_select_application_loads_tree_and_root_listing(explorer):
    state = await open_acme(explorer)

    assert [a.company_name for a in state.applications] == ["Acme", "Globex"]
    acme = find_application(state.tree, 1)
    assert acme.loaded
    assert [node.name for node in acme.children] == ["Resumes", "Letters"]
    assert state.selected == acme.ref
    assert state.folder_id is None
    assert [c.name for c in state.breadcrumb] == ["Acme"]
    assert state.listing_status == LoadStatus.LOADED
    assert [f.name for f in state.listing.folders] == ["Resumes", "Letters"]
    assert [d.filename for d in state.listing.files] == ["cover.txt"]
    assert state.error is None


@pytest.mark.asyncio
async def test_select_folder_loads_its_contents(explorer):
    await open_acme(explorer)

    assert await explorer.select_folder(11)

    state = explorer.state
    assert state.folder_id == 11
    assert [c.name for c in state.breadcrumb] == ["Acme", "Resumes", "Old"]
    assert [d.filename for d in state.listing.files] == ["old_cv.pdf"]
    assert state.listing.folders == []


@pytest.mark.asyncio
async def test_unknown_ids_set_error(explorer):
    assert not await explorer.select_application(999)
    assert explorer.state.error == "Application 999 not found"

    await open_acme(explorer)
    assert not await explorer.select_folder(20)
    assert explorer.state.error == "Folder 20 not found"


@pytest.mark.asyncio
async def test_index_then_reload_marks_document_indexed(explorer, backend):
    await open_acme(explorer)
    await explorer.select_folder(10)
    assert explorer.state.listing.find_file(100).indexed is False

    assert await explorer.index_document(100)

    assert backend.count("POST", "/documents/100/index") == 1
    listing = explorer.state.listing
    assert listing.folder_id == 10
    assert listing.find_file(100).indexed is True


@pytest.mark.asyncio
async def test_failed_rename_leaves_tree_unchanged(explorer, backend):
    await open_acme(explorer)
    before = explorer.state.tree
    snapshot = [node.model_dump() for node in before]
    backend.fail("PATCH", "/folders/10/rename")
    fetches = backend.count("GET", "/applications/1/folders")

    assert not await explorer.rename_folder(10, "CVs")

    assert explorer.state.tree is before
    assert [node.model_dump() for node in explorer.state.tree] == snapshot
    assert backend.count("GET", "/applications/1/folders") == fetches
    assert "Injected failure" in explorer.state.error
    assert explorer.state.error.startswith("Failed to rename folder 10")
    assert explorer.state.busy is False


@pytest.mark.asyncio
async def test_successful_rename_rebuilds_once(explorer, backend, monkeypatch):
    await open_acme(explorer)
    rebuilds = []
    original = explorer.tree_builder.build_with_report

    async def counting_build(application_id):
        rebuilds.append(application_id)
        return await original(application_id)

    monkeypatch.setattr(explorer.tree_builder, "build_with_report", counting_build)

    assert await explorer.rename_folder(10, "CVs")

    assert rebuilds == [1]
    assert locate_folder(explorer.state.tree, 10).name == "CVs"
    assert [f.name for f in explorer.state.listing.folders] == ["CVs", "Letters"]
    assert explorer.state.error is None


@pytest.mark.asyncio
async def test_rename_rejects_blank_name_without_request(explorer, backend):
    await open_acme(explorer)

    assert not await explorer.rename_folder(10, "   ")

    assert backend.count("PATCH") == 0
    assert explorer.state.error == "Folder name must not be empty"


@pytest.mark.asyncio
async def test_expansion_survives_rebuild(explorer):
    await open_acme(explorer)
    explorer.toggle_expansion(10, "folder")

    await explorer.create_folder_in(1, "Drafts")

    assert locate_folder(explorer.state.tree, 10).expanded is True
    names = [node.name for node in find_application(explorer.state.tree, 1).children]
    assert names == ["Resumes", "Letters", "Drafts"]


@pytest.mark.asyncio
async def test_toggle_expansion_issues_no_request(explorer, backend):
    await open_acme(explorer)
    requests = len(backend.requests)

    explorer.toggle_expansion(1, "application")
    explorer.toggle_expansion(1, "application")

    assert len(backend.requests) == requests
    assert find_application(explorer.state.tree, 1).expanded is False


@pytest.mark.asyncio
async def test_create_folder_at_cursor(explorer, backend):
    await open_acme(explorer)
    await explorer.select_folder(10)

    folder = await explorer.create_folder("Drafts")

    assert folder.parent_id == 10
    assert [f.name for f in explorer.state.listing.folders] == ["Old", "Drafts"]
    assert [node.name for node in locate_folder(explorer.state.tree, 10).children] == [
        "Old",
        "Drafts",
    ]


@pytest.mark.asyncio
async def test_create_folder_needs_cursor(explorer, backend):
    assert await explorer.create_folder("Drafts") is None
    assert explorer.state.error == "Select an application first"
    assert backend.count("POST") == 0


@pytest.mark.asyncio
async def test_deleting_cursor_folder_moves_cursor_to_application_root(explorer):
    await open_acme(explorer)
    await explorer.select_folder(11)

    assert await explorer.delete_folder(10)

    state = explorer.state
    assert state.application_id == 1
    assert state.folder_id is None
    assert [c.name for c in state.breadcrumb] == ["Acme"]
    assert [f.name for f in state.listing.folders] == ["Letters"]
    assert locate_folder(state.tree, 11) is None


@pytest.mark.asyncio
async def test_delete_application_clears_cursor(explorer):
    await explorer.select_application(2)

    assert await explorer.delete_application(2)

    state = explorer.state
    assert state.application_id is None
    assert state.listing is None
    assert [node.name for node in state.tree] == ["Acme"]


@pytest.mark.asyncio
async def test_move_document_updates_listing(explorer, backend):
    await open_acme(explorer)
    await explorer.select_folder(12)

    assert await explorer.move_document(1, 100, 12)

    assert backend.documents[100]["folder_id"] == 12
    assert [d.filename for d in explorer.state.listing.files] == ["cv.pdf"]


@pytest.mark.asyncio
async def test_move_folder_rebuilds_tree(explorer):
    await open_acme(explorer)

    assert await explorer.move_folder(11, None)

    roots = [node.name for node in find_application(explorer.state.tree, 1).children]
    assert roots == ["Resumes", "Old", "Letters"]


@pytest.mark.asyncio
async def test_upload_into_selected_application(explorer, backend):
    await open_acme(explorer)

    summary = await explorer.upload_files([("notes.txt", b"call back monday")])

    assert summary.application_id == 1
    assert "notes.txt" in [d.filename for d in explorer.state.listing.files]
    assert explorer.state.selected_application.document_count == 4


@pytest.mark.asyncio
async def test_upload_for_new_company(explorer):
    await explorer.load_applications()

    summary = await explorer.upload_files([("cv.txt", b"cv")], company_name="Initech")

    assert summary is not None
    assert [a.company_name for a in explorer.state.applications] == ["Acme", "Globex", "Initech"]


@pytest.mark.asyncio
async def test_update_status_reloads_applications(explorer):
    await explorer.load_applications()

    assert await explorer.update_application_status(2, ApplicationStatus.OFFER, notes="yay")

    assert explorer.state.applications[1].status == ApplicationStatus.OFFER


@pytest.mark.asyncio
async def test_rename_application_updates_breadcrumb(explorer):
    await open_acme(explorer)
    await explorer.select_folder(10)

    assert await explorer.rename_application(1, "Acme Corp")

    assert [c.name for c in explorer.state.breadcrumb] == ["Acme Corp", "Resumes"]


@pytest.mark.asyncio
async def test_navigate_breadcrumb(explorer):
    await open_acme(explorer)
    await explorer.select_folder(11)

    assert await explorer.navigate_breadcrumb(1)
    assert explorer.state.folder_id == 10

    assert await explorer.navigate_breadcrumb(0)
    assert explorer.state.folder_id is None

    assert not await explorer.navigate_breadcrumb(5)
    assert explorer.state.error == "No breadcrumb entry at position 5"


@pytest.mark.asyncio
async def test_tree_failure_surfaces_error(explorer, backend):
    backend.fail("GET", "/applications/1/folders", status_code=500)

    await explorer.select_application(1)

    state = explorer.state
    assert find_application(state.tree, 1).children == []
    assert state.listing_status == LoadStatus.ERROR
    assert state.error.startswith("Failed to load folder contents")


@pytest.mark.asyncio
async def test_stale_listing_is_discarded(explorer, store, monkeypatch):
    await open_acme(explorer)
    started = asyncio.Event()
    release = asyncio.Event()
    original = store.documents.list_in_folder

    async def slow_list(application_id, folder_id):
        if folder_id == 10:
            started.set()
            await release.wait()
        return await original(application_id, folder_id)

    monkeypatch.setattr(store.documents, "list_in_folder", slow_list)

    slow = asyncio.create_task(explorer.select_folder(10))
    await started.wait()
    assert await explorer.select_folder(12)
    release.set()

    assert await slow is False
    state = explorer.state
    assert state.folder_id == 12
    assert state.listing.folder_id == 12
    assert [c.name for c in state.breadcrumb] == ["Acme", "Letters"]


@pytest.mark.asyncio
async def test_stale_tree_rebuild_is_discarded(explorer, backend, monkeypatch):
    await explorer.load_applications()
    original = explorer.tree_builder.build_with_report
    fetched = asyncio.Event()
    release = asyncio.Event()
    calls = []

    async def build(application_id):
        calls.append(application_id)
        result = await original(application_id)
        if len(calls) == 1:
            fetched.set()
            await release.wait()
        return result

    monkeypatch.setattr(explorer.tree_builder, "build_with_report", build)

    slow = asyncio.create_task(explorer.rebuild_tree(1))
    await fetched.wait()
    backend.folders[10]["name"] = "CVs"
    assert await explorer.rebuild_tree(1)
    release.set()

    assert await slow is False
    acme = find_application(explorer.state.tree, 1)
    assert [node.name for node in acme.children] == ["CVs", "Letters"]


@pytest.mark.asyncio
async def test_unknown_status_does_not_break_overview(explorer, backend):
    backend.applications[2]["status"] = "pending"

    assert await explorer.load_applications()

    assert explorer.state.error is None
    assert [a.status_label for a in explorer.state.applications] == ["Applied", "Pending"]


@pytest.mark.asyncio
async def test_malformed_responses_become_errors():
    def handler(request):
        if request.url.path.endswith("/overview"):
            return httpx.Response(200, json=[{"id": 1, "status": "applied"}])
        return httpx.Response(200, text="<html>maintenance</html>")

    async with httpx.AsyncClient(
        transport=httpx.MockTransport(handler), base_url="http://test/api"
    ) as client:
        explorer = ExplorerService(RemoteStore(client))

        assert await explorer.load_applications() is False
        assert explorer.state.error.startswith(
            "Failed to load applications: Unexpected response from backend"
        )

        assert await explorer.create_folder_in(1, "Drafts") is None
        assert explorer.state.error.startswith("Failed to create folder 'Drafts'")
        assert "body is not JSON" in explorer.state.error
        assert explorer.state.busy is False


@pytest.mark.asyncio
async def test_subscribers_see_every_state(explorer):
    seen = []
    unsubscribe = explorer.subscribe(lambda state: seen.append(state.listing_status))

    await open_acme(explorer)
    unsubscribe()
    explorer.clear_error()

    assert LoadStatus.LOADING in seen
    assert seen[-1] == LoadStatus.LOADED
