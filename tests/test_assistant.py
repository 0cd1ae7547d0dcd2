"""Tests for the chat assistant."""
import unittest
from datetime import date

from finwise.llm.assistant import ERROR_REPLY, ChatAssistant
from finwise.llm.gateway import LLMGateway
from finwise.storage import InMemoryRepository, StateStore
from finwise.utils.exceptions import LLMTransportError

from helpers import FakeTransport, make_analysis, make_transaction


class TestChatAssistant(unittest.TestCase):
    """Test question answering and chat history."""

    def setUp(self):
        self.store = StateStore(InMemoryRepository())
        self.store.add_transactions([make_transaction(date(2024, 6, 1), 450, merchant="Swiggy")])
        self.store.save_analysis(make_analysis(savings_rate=12.5))

    def test_answer_is_stored_with_question(self):
        transport = FakeTransport({"Chat Assistant": "  You saved 12.5% last month.\n"})
        reply = ChatAssistant(LLMGateway(transport), self.store).ask("How much did I save?")

        self.assertEqual(reply.role, "assistant")
        self.assertEqual(reply.content, "You saved 12.5% last month.")

        history = self.store.chat_history()
        self.assertEqual([m.role for m in history], ["user", "assistant"])
        self.assertEqual(history[0].content, "How much did I save?")
        self.assertNotEqual(history[0].id, history[1].id)

    def test_prompt_carries_stored_context(self):
        transport = FakeTransport({"Chat Assistant": "ok"})
        ChatAssistant(LLMGateway(transport), self.store).ask("Where does my money go?")

        request = transport.requests[0]
        self.assertIn("Savings Rate: 12.5%", request["prompt"]["user"])
        self.assertIn("Swiggy", request["prompt"]["user"])
        self.assertEqual(request["maxTokens"], 1024)

    def test_gateway_failure_gives_apology(self):
        transport = FakeTransport({"Chat Assistant": LLMTransportError("offline")})
        reply = ChatAssistant(LLMGateway(transport), self.store).ask("Hello?")

        self.assertEqual(reply.content, ERROR_REPLY)
        self.assertEqual(len(self.store.chat_history()), 2)


if __name__ == "__main__":
    unittest.main()
