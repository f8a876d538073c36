"""
Turn boundary for the conversation.

Read the session, dispatch, write the session, then deliver messages. Turns
of the same user are serialized in-process with a keyed lock; the store's
compare-and-swap covers writers in other processes. Nothing is sent before
the new state is stored, so a retried turn never double-sends.
"""

import logging
from typing import Optional

from pedido_bot.core.conversation import replies
from pedido_bot.core.conversation.locks import KeyedLock
from pedido_bot.core.conversation.machine import ConversationStateMachine
from pedido_bot.core.conversation.messages import OutboundMessage, TextMessage, render_plain
from pedido_bot.core.conversation.ports import ConversationLog, Messenger, SessionStore
from pedido_bot.core.errors import SessionConflictError, SessionCorruptionError
from pedido_bot.core.orders.states import ConversationState

logger = logging.getLogger(__name__)


class ConversationEngine:
    """Runs one inbound message through the state machine for a user."""

    def __init__(
        self,
        machine: ConversationStateMachine,
        sessions: SessionStore,
        messenger: Messenger,
        conversation_log: Optional[ConversationLog] = None,
        conflict_retries: int = 3,
    ):
        self.machine = machine
        self.sessions = sessions
        self.messenger = messenger
        self.conversation_log = conversation_log
        self.conflict_retries = max(1, conflict_retries)
        self._locks = KeyedLock()

    async def handle_message(self, user_id: str, text: str) -> list[OutboundMessage]:
        """
        Process one inbound message end to end.

        Always produces at least one outbound message.

        Returns:
            Messages that were handed to the messenger
        """
        user_id = str(user_id)
        async with self._locks.acquire(user_id):
            messages = await self._run_turn(user_id, text)
            # Replies of one user go out in turn order
            await self._deliver(user_id, messages)

        await self._record(user_id, text, messages)
        return messages

    async def _run_turn(self, user_id: str, text: str) -> list[OutboundMessage]:
        for attempt in range(1, self.conflict_retries + 1):
            try:
                record = await self.sessions.get_state(user_id)
                state = ConversationState.decode(record.tag, record.data, record.version)

                result = await self.machine.dispatch(user_id, state, text)

                tag, data = result.state.encode()
                await self.sessions.set_state(user_id, tag, data, expected_version=record.version)
                return result.messages or [replies.main_menu()]

            except SessionConflictError as e:
                logger.warning(f"{e} (attempt {attempt}/{self.conflict_retries})")
                continue

            except SessionCorruptionError as e:
                logger.error(f"Corrupted session for {user_id}: {e}")
                await self._force_idle(user_id)
                return [TextMessage(replies.SESSION_ERROR), replies.main_menu()]

            except Exception as e:
                logger.error(f"Turn failed for {user_id}: {e}", exc_info=True)
                await self._force_idle(user_id)
                return [TextMessage(replies.TURN_ERROR)]

        logger.error(f"Giving up on turn for {user_id} after {self.conflict_retries} conflicts")
        return [TextMessage(replies.TURN_ERROR)]

    async def _deliver(self, user_id: str, messages: list[OutboundMessage]) -> None:
        for message in messages:
            try:
                await self.messenger.send(user_id, message)
            except Exception as e:
                logger.error(f"Delivery to {user_id} failed: {e}", exc_info=True)

    async def _force_idle(self, user_id: str) -> None:
        try:
            await self.sessions.reset_state(user_id)
        except Exception as e:
            logger.error(f"Could not reset session for {user_id}: {e}", exc_info=True)

    async def _record(self, user_id: str, text: str, messages: list[OutboundMessage]) -> None:
        if self.conversation_log is None:
            return
        try:
            await self.conversation_log.record(
                user_id, text, "\n\n".join(render_plain(m) for m in messages)
            )
        except Exception as e:
            logger.error(f"Failed to record conversation for {user_id}: {e}")
