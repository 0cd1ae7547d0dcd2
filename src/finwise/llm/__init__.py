from .gateway import (
    GeminiTransport,
    LLMGateway,
    ProxyTransport,
    build_gateway,
    chunk_text,
    parse_json,
)
from .prompts import PromptPair
from .assistant import ChatAssistant

__all__ = [
    "LLMGateway",
    "GeminiTransport",
    "ProxyTransport",
    "build_gateway",
    "chunk_text",
    "parse_json",
    "PromptPair",
    "ChatAssistant",
]
