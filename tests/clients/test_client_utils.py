"""Tests for HTTP error mapping and the clients against the fake backend."""

import httpx
import pytest
from httpx import AsyncClient

from applytrack.clients.store import RemoteStore
from applytrack.clients.utils import (
    call_get,
    call_post,
    parse_status,
    resolve_error_detail,
    validate_response,
)
from applytrack.errors import (
    BackendServerError,
    BackendValidationError,
    InvalidResponseError,
    RemoteStoreError,
    TransportError,
)
from applytrack.schemas.base import ApplicationStatus, Folder


def mock_client(handler) -> AsyncClient:
    return AsyncClient(transport=httpx.MockTransport(handler), base_url="http://test/api")


@pytest.mark.asyncio
async def test_4xx_maps_to_validation_error():
    def handler(request):
        return httpx.Response(404, json={"detail": "Folder not found"})

    async with mock_client(handler) as client:
        with pytest.raises(BackendValidationError) as exc_info:
            await call_get(client, "/folders/99")

    error = exc_info.value
    assert error.status_code == 404
    assert error.detail == "Folder not found"
    assert error.method == "GET"
    assert str(error) == "Folder not found"


@pytest.mark.asyncio
async def test_5xx_maps_to_server_error():
    def handler(request):
        return httpx.Response(503, text="upstream down")

    async with mock_client(handler) as client:
        with pytest.raises(BackendServerError) as exc_info:
            await call_get(client, "/applications/overview")

    assert exc_info.value.status_code == 503
    assert exc_info.value.detail == "upstream down"
    assert isinstance(exc_info.value, RemoteStoreError)


@pytest.mark.asyncio
async def test_connection_failure_maps_to_transport_error():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    async with mock_client(handler) as client:
        with pytest.raises(TransportError) as exc_info:
            await call_get(client, "/applications/overview")

    assert exc_info.value.status_code is None
    assert "connection refused" in str(exc_info.value)


@pytest.mark.asyncio
async def test_timeout_maps_to_transport_error():
    def handler(request):
        raise httpx.ReadTimeout("too slow", request=request)

    async with mock_client(handler) as client:
        with pytest.raises(TransportError, match="timed out"):
            await call_get(client, "/applications/overview")


def test_resolve_error_detail_joins_validation_messages():
    response = httpx.Response(
        422,
        json={"detail": [{"msg": "field required"}, {"msg": "value is not an integer"}]},
    )
    assert resolve_error_detail(response) == "field required; value is not an integer"


def test_parse_status_handles_non_dict_bodies():
    assert parse_status(httpx.Response(204)) == {}
    assert parse_status(httpx.Response(200, json=[1, 2])) == {"result": [1, 2]}
    assert parse_status(httpx.Response(200, text="done")) == {}


@pytest.mark.asyncio
async def test_non_json_body_maps_to_invalid_response():
    def handler(request):
        return httpx.Response(200, text="<html>maintenance</html>")

    async with mock_client(handler) as client:
        response = await call_post(client, "/applications/1/folders", json={"name": "x"})
        with pytest.raises(InvalidResponseError, match="body is not JSON") as exc_info:
            validate_response(response, Folder)

    error = exc_info.value
    assert isinstance(error, RemoteStoreError)
    assert error.status_code == 200
    assert error.method == "POST"
    assert error.url.endswith("/applications/1/folders")


@pytest.mark.asyncio
async def test_schema_mismatch_maps_to_invalid_response():
    def handler(request):
        return httpx.Response(200, json=[{"id": "not-a-number", "name": "Resumes"}])

    async with mock_client(handler) as client:
        store = RemoteStore(client)
        with pytest.raises(InvalidResponseError, match="invalid field") as exc_info:
            await store.folders.list_folders(1)

    assert exc_info.value.method == "GET"
    assert "application_id" in exc_info.value.detail


@pytest.mark.asyncio
async def test_non_json_acknowledgement_is_tolerated():
    def handler(request):
        return httpx.Response(200, text="renamed")

    async with mock_client(handler) as client:
        result = await RemoteStore(client).folders.rename_folder(10, "CVs")

    assert result.status == "ok"


@pytest.mark.asyncio
async def test_store_round_trip_against_backend(store, backend):
    applications = await store.applications.list_overview()
    assert [a.company_name for a in applications] == ["Acme", "Globex"]
    assert applications[0].document_count == 3

    roots = await store.folders.list_folders(1)
    assert [f.name for f in roots] == ["Resumes", "Letters"]

    children = await store.folders.list_folders(1, parent_id=10)
    assert [(f.name, f.level, f.path) for f in children] == [("Old", 1, "Resumes/Old")]

    content = await store.documents.get_content(1, 100)
    assert content.content == "Curriculum vitae"


@pytest.mark.asyncio
async def test_backend_404_surfaces_detail(store):
    with pytest.raises(BackendValidationError, match="Application not found"):
        await store.folders.list_folders(999)


@pytest.mark.asyncio
async def test_upload_creates_application(store, backend):
    summary = await store.documents.upload_files(
        [("cv.txt", b"hello"), ("letter.txt", b"dear")], company_name="Initech"
    )
    assert summary.uploaded == 2
    assert summary.application_id in backend.applications
    assert backend.applications[summary.application_id]["company_name"] == "Initech"


@pytest.mark.asyncio
async def test_chat_history_round_trip(store):
    await store.chat.send_message("Any offers?", provider="ollama")
    history = await store.chat.get_history(limit=10)
    assert [m.role for m in history] == ["user", "assistant"]

    await store.chat.clear_history()
    assert await store.chat.get_history() == []


@pytest.mark.asyncio
async def test_status_change_shows_in_detail(store):
    await store.applications.update_status(2, ApplicationStatus.OFFER, notes="verbal offer")

    detail = await store.applications.get_detail(2)

    assert [d.filename for d in detail.documents] == ["offer.pdf"]
    assert len(detail.status_history) == 1
    entry = detail.status_history[0]
    assert (entry.old_status, entry.new_status, entry.notes) == (
        "interview",
        "offer",
        "verbal offer",
    )


@pytest.mark.asyncio
async def test_unknown_status_is_kept_as_text(store, backend):
    backend.applications[1]["status"] = "pending"

    applications = await store.applications.list_overview()

    assert applications[0].status == "pending"
    assert applications[0].status_label == "Pending"
    assert applications[1].status is ApplicationStatus.INTERVIEW
    assert applications[1].status_label == "Interview"
