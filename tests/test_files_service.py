import asyncio

import pytest
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from portfolio_api.core.exceptions import LockedError, ValidationError, WrongPasswordError
from portfolio_api.db.models.file import FileAccessLog as FileAccessLogModel
from portfolio_api.db.repositories.file_repository import FileRepository
from portfolio_api.domains.files.entities import AccessAction
from portfolio_api.domains.files.request_info import RequestInfo
from portfolio_api.domains.files.services import FileService
from portfolio_api.domains.identity.entities import Subject

ALICE = Subject(id="alice", email="alice@example.com")
BOB = Subject(id="bob", email="bob@example.com")


@pytest.fixture
def service(session, settings):
    return FileService(session, settings)


@pytest.fixture
def info():
    return RequestInfo.from_headers({"user-agent": "pytest", "x-forwarded-for": "203.0.113.7"}, method="POST")


async def test_versions_are_contiguous(service):
    versions = []
    for i in range(4):
        result = await service.save_file("doc", "notes.txt", f"text {i}")
        versions.append(result.version)

    assert versions == [1, 2, 3, 4]


async def test_file_name_required(service):
    with pytest.raises(ValidationError):
        await service.save_file("doc", "   ", "text")
    with pytest.raises(ValidationError):
        await service.save_file("doc", None, "text")


async def test_missing_content_stored_as_empty(service):
    await service.save_file("doc", "notes.txt", None)

    view = await service.read_file("doc")
    assert view.content == ""
    assert view.version == 1


async def test_read_absent_file_creates_nothing(service):
    view = await service.read_file("nothing-here")

    assert view.model_dump(exclude_unset=True) == {
        "file_id": "nothing-here", "content": "", "is_locked": False
    }
    assert await service.file_repository.get_by_file_id("nothing-here") is None


async def test_created_at_preserved_on_update(service):
    await service.save_file("doc", "notes.txt", "one")
    first = await service.file_repository.get_by_file_id("doc")

    await service.save_file("doc", "renamed.txt", "two")
    second = await service.file_repository.get_by_file_id("doc")

    assert second.created_at == first.created_at
    assert second.updated_at >= first.updated_at
    assert second.file_name == "renamed.txt"


async def test_lock_scenario(service):
    result = await service.save_file("doc1", "notes.txt", "hello", password="abc")
    assert result.version == 1
    assert result.is_locked

    with pytest.raises(WrongPasswordError):
        await service.save_file("doc1", "notes.txt", "hello v2", unlock_password="wrong")
    assert (await service.file_repository.get_by_file_id("doc1")).version == 1

    result = await service.save_file("doc1", "notes.txt", "hello v2", unlock_password="abc")
    assert result.version == 2
    assert result.is_locked


async def test_locked_write_without_password(service):
    await service.save_file("doc", "notes.txt", "secret", password="abc")

    with pytest.raises(LockedError) as exc_info:
        await service.save_file("doc", "notes.txt", "overwrite")

    assert exc_info.value.status_code == 403
    assert exc_info.value.to_dict()["isLocked"] is True


async def test_lock_failures_leave_no_trace(service):
    await service.save_file("doc", "notes.txt", "secret", password="abc", subject=ALICE)
    logs_before = await service.get_access_logs("doc")

    with pytest.raises(LockedError):
        await service.save_file("doc", "notes.txt", "x", subject=ALICE)
    with pytest.raises(WrongPasswordError):
        await service.save_file("doc", "notes.txt", "x", unlock_password="nope", subject=ALICE)

    assert len(await service.get_access_logs("doc")) == len(logs_before)
    assert await service.get_history("doc", ALICE) == []


@pytest.mark.parametrize("cleared", ["", "   ", None])
async def test_password_cleared(service, cleared):
    await service.save_file("doc", "notes.txt", "text", password="abc")

    result = await service.save_file("doc", "notes.txt", "text", password=cleared, unlock_password="abc")
    assert not result.is_locked

    view = await service.read_file("doc")
    assert view.content == "text"


async def test_password_replaced(service):
    await service.save_file("doc", "notes.txt", "text", password="abc")
    await service.save_file("doc", "notes.txt", "text", password="xyz", unlock_password="abc")

    with pytest.raises(WrongPasswordError):
        await service.save_file("doc", "notes.txt", "text", unlock_password="abc")

    result = await service.save_file("doc", "notes.txt", "text", unlock_password="xyz")
    assert result.is_locked


async def test_locked_read_hides_content(service):
    await service.save_file("doc", "notes.txt", "secret", password="abc")

    view = await service.read_file("doc")
    assert view.is_locked
    assert view.content is None
    assert view.file_name == "notes.txt"
    assert view.version == 1


async def test_unlock_reveals_content(service):
    await service.save_file("doc", "notes.txt", "secret", password="abc")

    with pytest.raises(LockedError):
        await service.unlock_file("doc", None)
    with pytest.raises(WrongPasswordError):
        await service.unlock_file("doc", "nope")

    view = await service.unlock_file("doc", "abc")
    assert view.content == "secret"
    assert view.is_locked


async def test_history_only_for_authenticated_writers(service):
    await service.save_file("doc", "notes.txt", "v1")
    await service.save_file("doc", "notes.txt", "v2")
    await service.save_file("doc", "notes.txt", "v3", subject=ALICE)
    await service.save_file("doc", "notes.txt", "v3", subject=ALICE)

    history = await service.get_history("doc", ALICE)

    # Снимок только при изменении текста и содержит предыдущее состояние
    assert [(h.version, h.content) for h in history] == [(2, "v2")]


async def test_history_scoped_to_writer(service):
    await service.save_file("doc", "notes.txt", "v1", subject=ALICE)
    await service.save_file("doc", "notes.txt", "v2", subject=ALICE)
    await service.save_file("doc", "notes.txt", "v3", subject=BOB)
    await service.save_file("doc", "notes.txt", "v4", subject=ALICE)

    alice = await service.get_history("doc", ALICE)
    bob = await service.get_history("doc", BOB)

    assert [h.version for h in alice] == [3, 1]
    assert [h.content for h in bob] == ["v2"]


async def test_access_log_records_every_operation(service, info):
    await service.save_file("doc", "notes.txt", "hello", subject=ALICE, info=info)
    await service.save_file("doc", "notes.txt", "hello world", info=info)
    await service.read_file("doc", subject=BOB, info=info)
    await service.delete_file("doc", subject=ALICE, info=info)

    logs = await service.get_access_logs("doc")

    assert [entry.action for entry in logs] == [
        AccessAction.DELETE, AccessAction.VIEW, AccessAction.EDIT, AccessAction.CREATE
    ]
    assert [entry.user_id for entry in logs] == ["alice", "bob", "guest", "alice"]
    assert all(entry.ip_address == "203.0.113.7" for entry in logs)
    assert all(entry.file_name == "notes.txt" for entry in logs)


async def test_view_of_absent_file_is_logged(service):
    await service.read_file("ghost")

    logs = await service.get_access_logs("ghost")
    assert len(logs) == 1
    assert logs[0].action == AccessAction.VIEW
    assert logs[0].user_id == "guest"
    assert logs[0].ip_address == "unknown"


async def test_delete_cascades_history_but_keeps_audit(service):
    await service.save_file("doc", "notes.txt", "v1", subject=ALICE)
    await service.save_file("doc", "notes.txt", "v2", subject=ALICE)
    assert len(await service.get_history("doc", ALICE)) == 1

    await service.delete_file("doc", subject=ALICE)

    assert await service.file_repository.get_by_file_id("doc") is None
    assert await service.get_history("doc", ALICE) == []
    assert (await service.get_access_logs("doc"))[0].action == AccessAction.DELETE


async def test_delete_is_idempotent(service):
    await service.delete_file("never-existed")
    await service.delete_file("never-existed")

    logs = await service.get_access_logs("never-existed")
    assert [entry.action for entry in logs] == [AccessAction.DELETE, AccessAction.DELETE]


async def test_recreate_after_delete_starts_at_version_one(service):
    await service.save_file("doc", "notes.txt", "v1")
    await service.save_file("doc", "notes.txt", "v2")
    await service.delete_file("doc")

    result = await service.save_file("doc", "notes.txt", "again")
    assert result.version == 1


async def test_audit_records_sizes(service, session):
    headers = {
        "user-agent": "Mozilla/5.0 (X11; Linux x86_64; rv:121.0) Gecko/20100101 Firefox/121.0",
        "content-length": "64",
    }
    info = RequestInfo.from_headers(headers, peer="10.0.0.2", method="POST")

    await service.save_file("doc", "notes.txt", "hello", info=info)
    await service.save_file("doc", "notes.txt", "hello world", info=info)
    await service.read_file("ghost")

    result = await session.execute(select(FileAccessLogModel).order_by(FileAccessLogModel.id))
    rows = {(row.file_id, row.action): row for row in result.scalars().all()}

    created = rows[("doc", "create")]
    assert (created.file_size, created.length_change) == (5, 5)

    edited = rows[("doc", "edit")]
    assert (edited.file_size, edited.length_change) == (11, 6)
    assert edited.content_length == 64
    assert edited.browser_version == "121.0"
    assert edited.request_method == "POST"

    viewed = rows[("ghost", "view")]
    assert viewed.file_size == 0
    assert viewed.length_change is None

    logs = await service.get_access_logs("doc")
    assert [(entry.file_size, entry.length_change) for entry in logs] == [(11, 6), (5, 5)]
    assert logs[0].content_length == 64


async def test_shrinking_edit_has_negative_length_change(service):
    await service.save_file("doc", "notes.txt", "hello world")
    await service.save_file("doc", "notes.txt", "hi")

    edit = (await service.get_access_logs("doc"))[0]
    assert edit.action == AccessAction.EDIT
    assert (edit.file_size, edit.length_change) == (2, -9)


async def test_concurrent_first_writes_last_one_wins(database, settings, monkeypatch):
    load = FileRepository.get_by_file_id
    seen = []
    both_loaded = asyncio.Event()

    async def load_then_wait(self, file_id):
        document = await load(self, file_id)
        seen.append(document)
        if len(seen) >= 2:
            both_loaded.set()
        await both_loaded.wait()
        return document

    monkeypatch.setattr(FileRepository, "get_by_file_id", load_then_wait)

    async with database.session_factory() as first, database.session_factory() as second:
        results = await asyncio.gather(
            FileService(first, settings).save_file("doc", "first.txt", "from first"),
            FileService(second, settings).save_file("doc", "second.txt", "from second"),
        )

    # Оба писателя видели документ отсутствующим
    assert seen[:2] == [None, None]
    assert [result.version for result in results] == [1, 1]

    monkeypatch.setattr(FileRepository, "get_by_file_id", load)
    async with database.session_factory() as session:
        service = FileService(session, settings)
        stored = await service.file_repository.get_by_file_id("doc")
        logs = await service.get_access_logs("doc")

    assert (stored.file_name, stored.content) in {
        ("first.txt", "from first"), ("second.txt", "from second")
    }
    assert stored.version == 1
    assert [entry.action for entry in logs] == [AccessAction.CREATE, AccessAction.CREATE]


async def test_failed_write_leaves_no_history(service, database, monkeypatch):
    await service.save_file("doc", "notes.txt", "v1", subject=ALICE)

    async def unavailable(self, document):
        raise SQLAlchemyError("store unavailable")

    monkeypatch.setattr(FileRepository, "save", unavailable)

    with pytest.raises(SQLAlchemyError):
        await service.save_file("doc", "notes.txt", "v2", subject=ALICE)

    async with database.session_factory() as session:
        assert await FileService(session).get_history("doc", ALICE) == []
        assert (await FileService(session).file_repository.get_by_file_id("doc")).version == 1
