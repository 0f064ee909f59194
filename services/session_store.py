"""In-memory store for conversation threads and image generation records."""

from __future__ import annotations

import asyncio
from collections import OrderedDict
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict, Generic, Optional, Sequence, TypeVar

from models.session_models import ConversationThread, ConversationTurn, GenerationRecord

V = TypeVar("V")


class _KeyedMap(Generic[V]):
	"""Dict keyed by message id with optional least-recently-used eviction."""

	def __init__(self, max_entries: Optional[int] = None) -> None:
		self._items: "OrderedDict[str, V]" = OrderedDict()
		self.max_entries = max_entries or None

	def get(self, key: str) -> Optional[V]:
		value = self._items.get(key)
		if value is not None:
			self._items.move_to_end(key)
		return value

	def put(self, key: str, value: V) -> None:
		self._items[key] = value
		self._items.move_to_end(key)
		if self.max_entries is not None:
			while len(self._items) > self.max_entries:
				self._items.popitem(last=False)

	def __contains__(self, key: str) -> bool:
		return key in self._items

	def __len__(self) -> int:
		return len(self._items)


class SessionStore:
	"""Keep threads and generation records addressed by chat message ids.

	Reads and writes are plain dict operations and therefore atomic on the event
	loop. Read-modify-write sequences that await in between (a model call) must
	run inside `locked(key)` so two replies to the same anchor do not lose each
	other's turns. Locks are per key; unrelated anchors never wait on each other.
	"""

	def __init__(self, max_entries: Optional[int] = None) -> None:
		self._threads: _KeyedMap[ConversationThread] = _KeyedMap(max_entries)
		self._records: _KeyedMap[GenerationRecord] = _KeyedMap(max_entries)
		self._locks: Dict[str, asyncio.Lock] = {}
		self._lock_users: Dict[str, int] = {}

	def get_thread(self, message_id: str) -> Optional[ConversationThread]:
		"""Return the thread stored under a message id, if any."""
		return self._threads.get(message_id)

	def put_thread(self, message_id: str, thread: Sequence[ConversationTurn]) -> ConversationThread:
		"""Store a snapshot of the thread under a message id and return it."""
		snapshot: ConversationThread = tuple(thread)
		self._threads.put(message_id, snapshot)
		return snapshot

	def get_record(self, message_id: str) -> Optional[GenerationRecord]:
		"""Return the generation record behind a bot reply, if any."""
		return self._records.get(message_id)

	def put_record(self, message_id: str, record: GenerationRecord) -> None:
		"""Store the generation record for a bot reply, replacing any previous one."""
		self._records.put(message_id, record)

	@asynccontextmanager
	async def locked(self, key: str) -> AsyncIterator[None]:
		"""Serialize updates for one key across awaits."""
		lock = self._locks.get(key)
		if lock is None:
			lock = self._locks[key] = asyncio.Lock()
		self._lock_users[key] = self._lock_users.get(key, 0) + 1
		try:
			async with lock:
				yield
		finally:
			self._lock_users[key] -= 1
			if not self._lock_users[key]:
				del self._lock_users[key]
				del self._locks[key]

	def stats(self) -> Dict[str, int]:
		"""Return entry counts for health reporting."""
		return {"threads": len(self._threads), "records": len(self._records)}
