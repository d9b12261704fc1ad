"""
Tests for the conversation stores and local blob storage.
Both store backends run against the same contract.
"""

import asyncio
from datetime import datetime, timezone
from unittest.mock import patch

import pytest

from l2coach.core.exceptions import MessageNotFoundError, SessionNotFoundError, StorageError
from l2coach.models import MessageCreate, MessageType, Mode, Role
from l2coach.storage import (
    FileConversationStore,
    InMemoryConversationStore,
    LocalStorage,
    create_conversation_store,
)


def user_text(content):
    return MessageCreate(role=Role.USER, type=MessageType.TEXT, content=content)


def coach_read(content, mode=Mode.TLDR):
    return MessageCreate(role=Role.COACH, type=MessageType.ANALYSIS, content=content, mode=mode)


class TestSessions:
    """Session lifecycle on every backend."""

    @pytest.mark.asyncio
    async def test_empty_store_lists_nothing(self, store):
        assert await store.list_sessions() == []

    @pytest.mark.asyncio
    async def test_create_and_get(self, store):
        created = await store.create_session("Morning tape")
        fetched = await store.get_session(created.id)
        assert fetched.id == created.id
        assert fetched.title == "Morning tape"
        assert fetched.created_at.tzinfo is not None

    @pytest.mark.asyncio
    async def test_ids_are_unique(self, store):
        first = await store.create_session("A")
        second = await store.create_session("B")
        assert first.id != second.id

    @pytest.mark.asyncio
    async def test_list_newest_first(self, store):
        first = await store.create_session("first")
        second = await store.create_session("second")
        third = await store.create_session("third")
        sessions = await store.list_sessions()
        assert [s.id for s in sessions] == [third.id, second.id, first.id]

    @pytest.mark.asyncio
    async def test_get_unknown_raises(self, store):
        with pytest.raises(SessionNotFoundError):
            await store.get_session("missing")

    @pytest.mark.asyncio
    async def test_rename(self, store):
        session = await store.create_session("old")
        renamed = await store.rename_session(session.id, "new")
        assert renamed.title == "new"
        assert renamed.created_at == session.created_at
        assert (await store.get_session(session.id)).title == "new"

    @pytest.mark.asyncio
    async def test_rename_unknown_raises(self, store):
        with pytest.raises(SessionNotFoundError):
            await store.rename_session("missing", "title")

    @pytest.mark.asyncio
    async def test_delete_cascades_messages(self, store):
        session = await store.create_session("doomed")
        await store.append_message(session.id, user_text("hello"))

        await store.delete_session(session.id)

        assert await store.list_sessions() == []
        with pytest.raises(SessionNotFoundError):
            await store.list_messages(session.id)
        with pytest.raises(SessionNotFoundError):
            await store.append_message(session.id, user_text("again"))

    @pytest.mark.asyncio
    async def test_delete_unknown_raises(self, store):
        with pytest.raises(SessionNotFoundError):
            await store.delete_session("missing")


class TestMessages:
    """Message log behavior on every backend."""

    @pytest.mark.asyncio
    async def test_append_assigns_identity(self, store):
        session = await store.create_session("s")
        message = await store.append_message(session.id, user_text("what is the tape saying"))
        assert message.id
        assert message.session_id == session.id
        assert message.role == Role.USER
        assert message.type == MessageType.TEXT
        assert message.timestamp.tzinfo is not None

    @pytest.mark.asyncio
    async def test_list_in_append_order(self, store):
        session = await store.create_session("s")
        contents = ["one", "two", "three", "four"]
        for content in contents:
            await store.append_message(session.id, user_text(content))

        messages = await store.list_messages(session.id)
        assert [m.content for m in messages] == contents
        timestamps = [m.timestamp for m in messages]
        assert timestamps == sorted(timestamps)

    @pytest.mark.asyncio
    async def test_timestamps_strictly_increase_when_clock_stalls(self, store):
        session = await store.create_session("s")
        frozen = datetime(2024, 1, 2, 9, 30, tzinfo=timezone.utc)

        with patch("l2coach.storage.conversation_store.datetime") as mock_datetime:
            mock_datetime.now.return_value = frozen
            first = await store.append_message(session.id, user_text("a"))
            second = await store.append_message(session.id, user_text("b"))
            third = await store.append_message(session.id, coach_read("c"))

        assert first.timestamp < second.timestamp < third.timestamp
        messages = await store.list_messages(session.id)
        assert [m.content for m in messages] == ["a", "b", "c"]

    @pytest.mark.asyncio
    async def test_concurrent_appends_keep_every_message(self, store):
        session = await store.create_session("s")
        await asyncio.gather(*[
            store.append_message(session.id, user_text(f"msg {i}")) for i in range(20)
        ])

        messages = await store.list_messages(session.id)
        assert len(messages) == 20
        timestamps = [m.timestamp for m in messages]
        assert len(set(timestamps)) == 20
        assert timestamps == sorted(timestamps)

    @pytest.mark.asyncio
    async def test_sessions_do_not_share_messages(self, store):
        first = await store.create_session("first")
        second = await store.create_session("second")
        await store.append_message(first.id, user_text("only in first"))

        assert len(await store.list_messages(first.id)) == 1
        assert await store.list_messages(second.id) == []

    @pytest.mark.asyncio
    async def test_coach_message_keeps_mode(self, store):
        session = await store.create_session("s")
        await store.append_message(session.id, coach_read("> FULL TAPE REVIEW", Mode.FULL))
        [message] = await store.list_messages(session.id)
        assert message.mode == Mode.FULL
        assert message.role == Role.COACH

    @pytest.mark.asyncio
    async def test_delete_message(self, store):
        session = await store.create_session("s")
        keep = await store.append_message(session.id, user_text("keep"))
        drop = await store.append_message(session.id, user_text("drop"))

        await store.delete_message(drop.id)

        messages = await store.list_messages(session.id)
        assert [m.id for m in messages] == [keep.id]

    @pytest.mark.asyncio
    async def test_delete_unknown_message_raises(self, store):
        await store.create_session("s")
        with pytest.raises(MessageNotFoundError):
            await store.delete_message("missing")

    @pytest.mark.asyncio
    async def test_delete_all_messages_keeps_session(self, store):
        session = await store.create_session("s")
        await store.append_message(session.id, user_text("a"))
        await store.append_message(session.id, coach_read("b"))

        await store.delete_all_messages(session.id)

        assert await store.list_messages(session.id) == []
        assert (await store.get_session(session.id)).title == "s"

    @pytest.mark.asyncio
    async def test_append_after_clear_orders_after_old_messages(self, store):
        session = await store.create_session("s")
        old = await store.append_message(session.id, user_text("old"))
        await store.delete_all_messages(session.id)
        new = await store.append_message(session.id, user_text("new"))
        assert new.timestamp > old.timestamp


class TestFileConversationStore:
    """File-backend specifics."""

    @pytest.mark.asyncio
    async def test_unprovisioned_root_lists_empty(self, tmp_path):
        store = FileConversationStore(LocalStorage(str(tmp_path / "fresh")))
        assert await store.list_sessions() == []

    @pytest.mark.asyncio
    async def test_survives_restart(self, tmp_path):
        storage = LocalStorage(str(tmp_path / "data"))
        store = FileConversationStore(storage)
        session = await store.create_session("persisted")
        last = await store.append_message(session.id, user_text("before restart"))

        reopened = FileConversationStore(storage)
        [loaded] = await reopened.list_sessions()
        assert loaded.id == session.id
        messages = await reopened.list_messages(session.id)
        assert [m.content for m in messages] == ["before restart"]

        later = await reopened.append_message(session.id, user_text("after restart"))
        assert later.timestamp > last.timestamp

    @pytest.mark.asyncio
    async def test_layout_on_disk(self, tmp_path):
        root = tmp_path / "data"
        store = FileConversationStore(LocalStorage(str(root)))
        session = await store.create_session("s")
        await store.append_message(session.id, user_text("line one"))
        await store.append_message(session.id, user_text("line two"))

        session_dir = root / "sessions" / session.id
        assert (session_dir / "session.json").is_file()
        lines = (session_dir / "messages.jsonl").read_text(encoding="utf-8").splitlines()
        assert len(lines) == 2

        await store.delete_session(session.id)
        assert not session_dir.exists()

    @pytest.mark.asyncio
    async def test_path_like_ids_are_unknown(self, tmp_path):
        store = FileConversationStore(LocalStorage(str(tmp_path / "data")))
        for bad_id in ["../etc", "a/b", "", "x.y"]:
            with pytest.raises(SessionNotFoundError):
                await store.get_session(bad_id)

    @pytest.mark.asyncio
    async def test_corrupt_session_document_raises_storage_error(self, tmp_path):
        root = tmp_path / "data"
        store = FileConversationStore(LocalStorage(str(root)))
        session = await store.create_session("s")
        (root / "sessions" / session.id / "session.json").write_text("{not json", encoding="utf-8")

        with pytest.raises(StorageError):
            await store.get_session(session.id)


class TestLocalStorage:
    """Tests for the aiofiles-backed blob storage."""

    @pytest.mark.asyncio
    async def test_save_and_load(self, tmp_path):
        storage = LocalStorage(str(tmp_path))
        await storage.save("a/b.txt", "hello")
        await storage.save("a/c.bin", b"\x00\x01")
        assert await storage.load("a/b.txt") == b"hello"
        assert await storage.load("a/c.bin") == b"\x00\x01"
        assert await storage.exists("a/b.txt")

    @pytest.mark.asyncio
    async def test_load_missing_returns_none(self, tmp_path):
        storage = LocalStorage(str(tmp_path))
        assert await storage.load("nope.txt") is None

    @pytest.mark.asyncio
    async def test_append(self, tmp_path):
        storage = LocalStorage(str(tmp_path))
        await storage.append("log.jsonl", "1\n")
        await storage.append("log.jsonl", "2\n")
        assert await storage.load("log.jsonl") == b"1\n2\n"

    @pytest.mark.asyncio
    async def test_list_missing_dir_is_empty(self, tmp_path):
        storage = LocalStorage(str(tmp_path))
        assert await storage.list("nothing-here", pattern="*.json", recursive=True) == []

    @pytest.mark.asyncio
    async def test_list_recursive_relative_sorted(self, tmp_path):
        storage = LocalStorage(str(tmp_path))
        await storage.save("root/b/x.json", "{}")
        await storage.save("root/a/x.json", "{}")
        await storage.save("root/a/y.txt", "")
        assert await storage.list("root", pattern="x.json", recursive=True) == [
            "root/a/x.json", "root/b/x.json"
        ]

    @pytest.mark.asyncio
    async def test_delete_and_delete_tree(self, tmp_path):
        storage = LocalStorage(str(tmp_path))
        await storage.save("dir/file.txt", "x")
        assert await storage.delete("dir/file.txt") is True
        assert await storage.delete("dir/file.txt") is False

        await storage.save("tree/sub/file.txt", "x")
        assert await storage.delete_tree("tree") is True
        assert not await storage.exists("tree")
        assert await storage.delete_tree("tree") is False

    @pytest.mark.asyncio
    async def test_path_escape_rejected(self, tmp_path):
        storage = LocalStorage(str(tmp_path / "root"))
        with pytest.raises(StorageError):
            await storage.save("../outside.txt", "x")

    @pytest.mark.asyncio
    async def test_refuses_to_delete_root(self, tmp_path):
        storage = LocalStorage(str(tmp_path))
        with pytest.raises(StorageError):
            await storage.delete_tree(".")

    @pytest.mark.asyncio
    async def test_os_error_becomes_storage_error(self, tmp_path):
        storage = LocalStorage(str(tmp_path))
        with patch("aiofiles.open", side_effect=PermissionError("read-only")):
            with pytest.raises(StorageError, match="save"):
                await storage.save("file.txt", "x")


class TestStoreFactory:
    """Tests for create_conversation_store."""

    def test_memory(self):
        assert isinstance(create_conversation_store("memory"), InMemoryConversationStore)

    def test_local(self, tmp_path):
        store = create_conversation_store("local", local_storage_path=str(tmp_path))
        assert isinstance(store, FileConversationStore)

    def test_unsupported_raises(self):
        with pytest.raises(ValueError):
            create_conversation_store("s3")


class TestSessionLocks:
    """Per-session write locks are only held for sessions that exist."""

    @pytest.mark.asyncio
    async def test_unknown_ids_allocate_no_locks(self, store):
        for i in range(50):
            with pytest.raises(SessionNotFoundError):
                await store.append_message(f"bogus{i}", user_text("x"))
            with pytest.raises(SessionNotFoundError):
                await store.rename_session(f"bogus{i}", "title")
            with pytest.raises(SessionNotFoundError):
                await store.delete_all_messages(f"bogus{i}")
            with pytest.raises(SessionNotFoundError):
                await store.delete_session(f"bogus{i}")
        assert store._locks == {}

    @pytest.mark.asyncio
    async def test_delete_releases_lock(self, store):
        session = await store.create_session("s")
        await store.append_message(session.id, user_text("x"))
        assert session.id in store._locks

        await store.delete_session(session.id)
        with pytest.raises(SessionNotFoundError):
            await store.append_message(session.id, user_text("late"))

        assert store._locks == {}

    @pytest.mark.asyncio
    async def test_waiter_on_deleted_session_releases_lock(self, store):
        session = await store.create_session("s")
        await store.append_message(session.id, user_text("warm the lock"))

        deleting = asyncio.create_task(store.delete_session(session.id))
        appending = asyncio.create_task(store.append_message(session.id, user_text("queued")))
        await deleting
        with pytest.raises(SessionNotFoundError):
            await appending

        assert store._locks == {}
