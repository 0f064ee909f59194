"""Threaded text replies that remember their history per reply chain."""

from __future__ import annotations

import logging
from typing import Optional

from models.chat_models import ChatChannel
from models.request_models import InboundMessage, TextRequest, TextContinuation
from models.session_models import ConversationTurn, Role
from services.error_classifier import ErrorClassifier
from services.openai.text_generator import TextGenerator
from services.session_store import SessionStore
from utils.heartbeat import typing_heartbeat

LOGGER = logging.getLogger(__name__)


class TextConversation:
	"""Answer a text request and store the thread under both ends of the exchange.

	The thread is keyed by the anchor (the replied-to bot message, or the user's
	own message when starting fresh) and by the bot's reply, so replying to
	either continues the same conversation.
	"""

	def __init__(
		self,
		text_generator: TextGenerator,
		store: SessionStore,
		errors: Optional[ErrorClassifier] = None,
		heartbeat_interval: float = 5.0,
	) -> None:
		self.text_generator = text_generator
		self.store = store
		self.errors = errors or ErrorClassifier(text_model=text_generator.model)
		self.heartbeat_interval = heartbeat_interval

	async def respond(self, request: TextRequest, inbound: InboundMessage, channel: ChatChannel) -> None:
		anchor = request.anchor_id if isinstance(request, TextContinuation) else inbound.id
		try:
			await channel.send_typing()
		except Exception as exc:
			LOGGER.debug("Typing signal failed: %s", exc)

		try:
			async with self.store.locked(anchor):
				# Re-read under the lock: another reply may have extended the thread.
				history = self.store.get_thread(anchor) or ()
				turns = history + (ConversationTurn(Role.USER, request.content),)
				async with typing_heartbeat(channel.send_typing, self.heartbeat_interval):
					answer = await self.text_generator.reply(turns)
				reply = await channel.reply(inbound.id, answer)
				thread = self.store.put_thread(anchor, turns + (ConversationTurn(Role.MODEL, answer),))
				self.store.put_thread(reply.id, thread)
		except Exception as exc:
			LOGGER.exception("Text conversation error")
			await channel.reply(inbound.id, self.errors.describe(exc, image=False))
