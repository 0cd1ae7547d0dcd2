"""Conversational assistant over the stored financial data."""
import uuid
from typing import Optional

from finwise.config.settings import AppSettings, get_settings
from finwise.llm.gateway import LLMGateway
from finwise.llm.prompts import chat_prompt
from finwise.models import ChatMessage
from finwise.storage.store import StateStore
from finwise.utils.logger import get_logger
from finwise.utils.exceptions import LLMError

logger = get_logger()

ERROR_REPLY = "Sorry, I encountered an error. Please try again."


def _message_id() -> str:
    return f"msg-{uuid.uuid4().hex[:12]}"


class ChatAssistant:
    """Answers free-text questions; every exchange is kept in the chat history."""

    def __init__(self, gateway: LLMGateway, store: StateStore, settings: Optional[AppSettings] = None):
        self.gateway = gateway
        self.store = store
        self.settings = settings or get_settings()

    def ask(self, question: str) -> ChatMessage:
        """Answer a question and return the assistant's message."""
        state = self.store.load()
        question_message = ChatMessage(id=_message_id(), role="user", content=question)

        prompt = chat_prompt(
            question,
            state.user_profile,
            state.transactions,
            analysis=state.analysis_result,
            recommendations=state.recommendations,
            limit=self.settings.chat_transaction_limit,
        )
        params = self.settings.stage("chat")

        try:
            answer = self.gateway.call(
                prompt.system,
                prompt.user,
                max_tokens=params.max_tokens,
                temperature=params.temperature
            ).strip()
        except LLMError as e:
            logger.error(f"Chat request failed: {e}")
            answer = ERROR_REPLY

        reply = ChatMessage(id=_message_id(), role="assistant", content=answer)
        self.store.add_chat_messages([question_message, reply])
        return reply
