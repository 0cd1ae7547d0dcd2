"""LLM gateway: one completion request per call, plus JSON and chunking helpers."""
import json
import re
from typing import Any, Dict, List, Optional

import requests
from google import genai
from google.genai import types

from finwise.config.settings import AppSettings, get_settings
from finwise.utils.logger import get_logger
from finwise.utils.exceptions import InvalidJSONError, LLMTransportError

logger = get_logger()

_FENCE_OPEN = re.compile(r"^```(?:json)?[ \t]*\n?", re.IGNORECASE)
_FENCE_CLOSE = re.compile(r"\n?```$")


class GeminiTransport:
    """Sends gateway requests straight to Gemini through the google-genai SDK."""

    def __init__(self, api_key: str, settings: Optional[AppSettings] = None):
        self.settings = settings or get_settings()
        self.client = genai.Client(api_key=api_key)

    def send(self, request: Dict[str, Any]) -> Dict[str, Any]:
        """Return a response body shaped like ``{choices: [...], usage: {...}}``."""
        try:
            response = self.client.models.generate_content(
                model=request["model"],
                contents=request["prompt"]["user"],
                config=types.GenerateContentConfig(
                    system_instruction=request["prompt"]["system"],
                    temperature=request["temperature"],
                    max_output_tokens=request["maxTokens"],
                    top_p=self.settings.llm_top_p,
                    top_k=self.settings.llm_top_k,
                )
            )
        except Exception as e:
            raise LLMTransportError(f"Gemini API call failed: {e}")

        usage = response.usage_metadata
        return {
            "choices": [
                {"message": {"role": "assistant", "content": response.text}}
            ],
            "usage": {
                "prompt_tokens": getattr(usage, "prompt_token_count", None) or 0,
                "completion_tokens": getattr(usage, "candidates_token_count", None) or 0,
                "total_tokens": getattr(usage, "total_token_count", None) or 0,
            },
        }


class ProxyTransport:
    """Posts gateway requests to an HTTP proxy that holds the vendor API key."""

    def __init__(self, endpoint: str):
        self.endpoint = endpoint
        self._session = requests.Session()
        self._session.headers.update({"Content-Type": "application/json"})

    def send(self, request: Dict[str, Any]) -> Dict[str, Any]:
        try:
            response = self._session.post(self.endpoint, json=request)
        except requests.RequestException as e:
            raise LLMTransportError(str(e))

        if not response.ok:
            try:
                payload = response.json()
            except ValueError:
                payload = {}
            raise LLMTransportError(payload.get("error") or "LLM API call failed")

        try:
            return response.json()
        except ValueError:
            raise LLMTransportError("LLM API returned a non-JSON body")


class LLMGateway:
    """Wraps one call to the text-generation endpoint."""

    def __init__(self, transport, settings: Optional[AppSettings] = None, model: Optional[str] = None):
        self.transport = transport
        self.settings = settings or get_settings()
        self.model = model or self.settings.llm_model_name

    def call(
        self,
        system_prompt: str,
        user_prompt: str,
        model: Optional[str] = None,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None
    ) -> str:
        """Send a system+user prompt pair and return the completion text."""
        request = {
            "prompt": {"system": system_prompt, "user": user_prompt},
            "model": model or self.model,
            "maxTokens": max_tokens or self.settings.llm_max_tokens,
            "temperature": self.settings.llm_temperature if temperature is None else temperature,
        }

        logger.debug(
            f"LLM request: model={request['model']} maxTokens={request['maxTokens']} "
            f"temperature={request['temperature']} user_chars={len(user_prompt)}"
        )
        body = self.transport.send(request)

        try:
            content = body["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError):
            content = None

        if content is None:
            error = body.get("error") if isinstance(body, dict) else None
            raise LLMTransportError(error or "LLM response has no completion")
        return content

    def call_in_chunks(self, text: str, system_prompt: str, chunk_size: Optional[int] = None) -> List[str]:
        """Call the endpoint once per line-aligned chunk, in order."""
        results = []
        for chunk in chunk_text(text, chunk_size or self.settings.chunk_size):
            results.append(self.call(system_prompt, chunk))
        return results

    @staticmethod
    def parse_json(text: str) -> Any:
        return parse_json(text)


def parse_json(text: str) -> Any:
    """Parse a JSON completion, stripping one surrounding markdown code fence."""
    cleaned = text.strip()

    if cleaned.startswith("```"):
        cleaned = _FENCE_OPEN.sub("", cleaned, count=1)
        cleaned = _FENCE_CLOSE.sub("", cleaned, count=1)

    try:
        return json.loads(cleaned)
    except json.JSONDecodeError as e:
        logger.error(f"Failed to parse LLM response as JSON: {e}")
        logger.debug(f"Raw response: {text[:500]}")
        raise InvalidJSONError(raw_response=text)


def chunk_text(text: str, max_chunk_size: int = 2000) -> List[str]:
    """Split text into chunks of whole lines, each at most max_chunk_size long.

    A line longer than the limit becomes a chunk of its own. Joining the
    chunks gives back the original text.
    """
    chunks = []
    current = ""

    for line in text.splitlines(keepends=True):
        if current and len(current) + len(line) > max_chunk_size:
            chunks.append(current)
            current = line
        else:
            current += line

    if current:
        chunks.append(current)

    return chunks


def build_gateway(config, settings: Optional[AppSettings] = None) -> LLMGateway:
    """Pick the proxy transport when an endpoint is configured, else the Gemini SDK."""
    settings = settings or get_settings()
    if config.llm_endpoint:
        logger.info(f"Using LLM proxy endpoint {config.llm_endpoint}")
        transport = ProxyTransport(config.llm_endpoint)
    else:
        logger.info("Using Gemini SDK transport")
        transport = GeminiTransport(config.gemini_api_key, settings)
    return LLMGateway(transport, settings, model=config.model_name)
