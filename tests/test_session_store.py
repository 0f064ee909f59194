import asyncio

from models.session_models import ConversationTurn, GenerationRecord, Role
from services.session_store import SessionStore
from tests.common import png_blob


class TestSessionStore:
    """Thread and record storage keyed by message id"""

    def test_missing_keys_return_none(self):
        store = SessionStore()
        assert store.get_thread("1") is None
        assert store.get_record("1") is None

    def test_thread_stored_under_two_keys_is_identical(self):
        store = SessionStore()
        turns = [ConversationTurn(Role.USER, "hi"), ConversationTurn(Role.MODEL, "hello")]

        thread = store.put_thread("user-1", turns)
        store.put_thread("bot-1", thread)

        assert store.get_thread("user-1") == store.get_thread("bot-1") == tuple(turns)

    def test_thread_snapshot_is_not_affected_by_caller_mutation(self):
        store = SessionStore()
        turns = [ConversationTurn(Role.USER, "hi")]
        store.put_thread("1", turns)
        turns.append(ConversationTurn(Role.MODEL, "later"))
        assert len(store.get_thread("1")) == 1

    def test_record_replaced_per_id(self):
        store = SessionStore()
        store.put_record("bot-1", GenerationRecord("a dog", (png_blob(),)))
        store.put_record("bot-1", GenerationRecord("a cat"))
        assert store.get_record("bot-1").prompt == "a cat"
        assert store.stats() == {"threads": 0, "records": 1}

    def test_no_eviction_by_default(self):
        store = SessionStore()
        for i in range(500):
            store.put_record(str(i), GenerationRecord(f"p{i}"))
        assert store.get_record("0") is not None

    def test_lru_eviction_when_bounded(self):
        store = SessionStore(max_entries=2)
        store.put_record("a", GenerationRecord("a"))
        store.put_record("b", GenerationRecord("b"))
        store.get_record("a")
        store.put_record("c", GenerationRecord("c"))

        assert store.get_record("b") is None
        assert store.get_record("a") is not None
        assert store.get_record("c") is not None

    async def test_locked_serializes_read_modify_write(self):
        store = SessionStore()
        store.put_thread("anchor", [])

        async def append(text):
            async with store.locked("anchor"):
                current = store.get_thread("anchor")
                await asyncio.sleep(0.01)
                store.put_thread("anchor", current + (ConversationTurn(Role.USER, text),))

        await asyncio.gather(append("one"), append("two"), append("three"))

        assert sorted(t.text for t in store.get_thread("anchor")) == ["one", "three", "two"]
        assert store._locks == {}

    async def test_locks_for_different_keys_do_not_block(self):
        store = SessionStore()
        async with store.locked("a"):
            await asyncio.wait_for(_enter(store, "b"), timeout=1)


async def _enter(store, key):
    async with store.locked(key):
        return True
