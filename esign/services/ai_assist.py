"""OpenAI adapter for the contract builder's assistant.

Sends the chat history plus the current contract payload to the Chat
Completions API in JSON mode and returns the suggested field values as a
validated AssistSuggestion.
"""

import json
import logging
import os
from typing import Any, Optional

from openai import (
    APIConnectionError,
    APITimeoutError,
    AuthenticationError,
    BadRequestError,
    InternalServerError,
    OpenAI,
    RateLimitError,
)
from pydantic import ValidationError as PydanticValidationError
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from esign.lifecycle.errors import Timeout
from esign.schemas.domain import AssistSuggestion

logger = logging.getLogger(__name__)

# Environment configuration with defaults
AI_MODEL = os.environ.get("AI_MODEL", "gpt-4o-mini")
AI_MAX_CONTEXT_CHARS = int(os.environ.get("AI_MAX_CONTEXT_CHARS", "20000"))
AI_TEMPERATURE = float(os.environ.get("AI_TEMPERATURE", "0.3"))
AI_TIMEOUT_S = int(os.environ.get("AI_TIMEOUT_S", "60"))
AI_MAX_RETRIES = int(os.environ.get("AI_MAX_RETRIES", "3"))

# Errors that are safe to retry (transient)
RETRYABLE_ERRORS = (
    RateLimitError,
    APIConnectionError,
    APITimeoutError,
    InternalServerError,
)

SYSTEM_PROMPT = """You are an expert contract creation assistant. Help freelancers write professional contracts by filling in contract fields based on their requests.

A contract covers: title; the freelancer and the client (name, email, phone, address); scope of work; payment terms and amount; project timeline with start and end dates; intellectual property; confidentiality; service level agreement; termination and dispute resolution; and an agreement introduction.

Reply with a single JSON object. Include only the fields you are filling in or changing, chosen from:
title, freelancer_name, freelancer_email, freelancer_phone, freelancer_address,
client_name, client_email, client_phone, client_address, scope_of_work,
payment_terms, contract_amount (number), project_timeline,
start_date (YYYY-MM-DD), end_date (YYYY-MM-DD), ip_terms,
confidentiality_terms, sla_terms, termination_terms, agreement_intro,
and always an "explanation" string describing what you filled in.

Keep the language professional and legally precise.

Current contract data:
{contract}"""


class AssistError(RuntimeError):
    """Raised when the assistant cannot produce a suggestion."""

    def __init__(self, message: str, status_code: int = 502):
        self.status_code = status_code
        super().__init__(message)


# Lazy client initialization
_client: Optional[OpenAI] = None


def _get_client() -> OpenAI:
    """Get or create OpenAI client (lazy initialization)."""
    global _client
    if _client is None:
        _client = OpenAI(timeout=AI_TIMEOUT_S)
    return _client


def _contract_context(contract: dict[str, Any], max_chars: int) -> str:
    """Serialize the current payload for the prompt, cut to max_chars."""
    text = json.dumps(contract, default=str, ensure_ascii=False)
    if len(text) <= max_chars:
        return text
    logger.warning("Contract context truncated from %d to %d chars", len(text), max_chars)
    return text[:max_chars]


def _make_retry_decorator():
    """Create tenacity retry decorator with configured settings."""
    return retry(
        retry=retry_if_exception_type(RETRYABLE_ERRORS),
        stop=stop_after_attempt(AI_MAX_RETRIES),
        wait=wait_exponential(multiplier=1, min=1, max=30),
        reraise=True,
    )


def _call_openai(client: OpenAI, messages: list[dict[str, str]]) -> tuple[AssistSuggestion, Optional[int]]:
    response = client.chat.completions.create(
        model=AI_MODEL,
        temperature=AI_TEMPERATURE,
        messages=messages,
        response_format={"type": "json_object"},
    )

    content = response.choices[0].message.content
    if not content:
        raise AssistError("Empty response from assistant")

    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        raise AssistError(f"Invalid JSON response: {e}")
    if not isinstance(data, dict):
        raise AssistError("Assistant response is not a JSON object")

    try:
        suggestion = AssistSuggestion.model_validate(data)
    except PydanticValidationError as e:
        raise AssistError(f"Assistant response failed validation: {e.error_count()} errors")

    usage = getattr(response, "usage", None)
    tokens = getattr(usage, "total_tokens", None)
    return suggestion, tokens if isinstance(tokens, int) else None


def suggest_fields(
    messages: list[dict[str, str]],
    contract: dict[str, Any],
    client: Optional[OpenAI] = None,
) -> tuple[AssistSuggestion, Optional[int]]:
    """Ask the assistant for contract field values.

    Args:
        messages: Chat history as {"role", "content"} dicts, oldest first.
        contract: The builder's current payload, passed through as context.
        client: Optional OpenAI client (for testing). If None, uses default client.

    Returns:
        The validated suggestion and the total tokens used, when reported.

    Raises:
        AssistError: API failure, invalid output or exhausted retries.
        Timeout: The API kept timing out.
    """
    if not messages or not any(m.get("content", "").strip() for m in messages):
        raise AssistError("No message provided", status_code=400)

    actual_client = client if client is not None else _get_client()

    prompt = SYSTEM_PROMPT.format(contract=_contract_context(contract, AI_MAX_CONTEXT_CHARS))
    full_messages = [{"role": "system", "content": prompt}, *messages]

    retryable_call = _make_retry_decorator()(_call_openai)

    try:
        return retryable_call(actual_client, full_messages)
    except APITimeoutError as e:
        logger.warning("Assistant timed out after %d attempts: %s", AI_MAX_RETRIES, e)
        raise Timeout("Assistant timed out, please try again") from e
    except RateLimitError as e:
        raise AssistError("Rate limits exceeded, please try again later.", status_code=429) from e
    except RETRYABLE_ERRORS as e:
        raise AssistError(f"API error after {AI_MAX_RETRIES} retries: {e}") from e
    except (AuthenticationError, BadRequestError) as e:
        raise AssistError(f"Non-retryable API error: {e}") from e


__all__ = ["AssistError", "suggest_fields"]
