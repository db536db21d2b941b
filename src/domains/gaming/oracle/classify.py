# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Pure classification and text extraction for oracle responses.

Both provider response shapes are handled here:

    Gemini:  {"candidates": [{"content": {"parts": [{"text": "..."}]}}]}
    OpenAI:  {"choices": [{"message": {"content": "..."}}]}

Nothing in this module performs I/O, so the failover loop can be tested by
feeding (status, payload) pairs directly.
"""

from typing import Any

from src.domains.gaming.oracle.models import EndpointOutcome

STATUS_OUTCOMES = {
    404: EndpointOutcome.NOT_FOUND,
    429: EndpointOutcome.RATE_LIMITED,
    503: EndpointOutcome.SERVICE_UNAVAILABLE,
}


def classify_response(status_code: int, payload: Any) -> EndpointOutcome:
    """Classify one endpoint call.

    Args:
        status_code: HTTP status code.
        payload: Decoded JSON body, or None if the body was not JSON.

    Returns:
        The endpoint outcome.
    """
    if 200 <= status_code < 300:
        text = extract_text(payload)
        if text and text.strip():
            return EndpointOutcome.OK
        return EndpointOutcome.EMPTY

    return STATUS_OUTCOMES.get(status_code, EndpointOutcome.ERROR)


def extract_text(payload: Any) -> str | None:
    """Extract the model text from either response shape.

    Args:
        payload: Decoded JSON body.

    Returns:
        The concatenated text, or None if the payload holds none.
    """
    if not isinstance(payload, dict):
        return None

    candidates = payload.get("candidates")
    if isinstance(candidates, list) and candidates:
        content = candidates[0].get("content") if isinstance(candidates[0], dict) else None
        parts = content.get("parts") if isinstance(content, dict) else None
        if isinstance(parts, list):
            texts = [
                part["text"]
                for part in parts
                if isinstance(part, dict) and isinstance(part.get("text"), str)
            ]
            if texts:
                return "".join(texts)
        return None

    choices = payload.get("choices")
    if isinstance(choices, list) and choices:
        message = choices[0].get("message") if isinstance(choices[0], dict) else None
        content = message.get("content") if isinstance(message, dict) else None
        if isinstance(content, str):
            return content
        # Content may be a list of typed parts
        if isinstance(content, list):
            texts = [
                part["text"]
                for part in content
                if isinstance(part, dict) and isinstance(part.get("text"), str)
            ]
            if texts:
                return "".join(texts)

    return None


def block_reason(payload: Any) -> str | None:
    """Get the safety block reason of an empty Gemini answer, if any."""
    if not isinstance(payload, dict):
        return None

    feedback = payload.get("promptFeedback")
    if isinstance(feedback, dict) and feedback.get("blockReason"):
        return str(feedback["blockReason"])

    candidates = payload.get("candidates")
    if isinstance(candidates, list) and candidates and isinstance(candidates[0], dict):
        finish_reason = candidates[0].get("finishReason")
        if finish_reason in ("SAFETY", "RECITATION", "BLOCKLIST", "PROHIBITED_CONTENT"):
            return str(finish_reason)

    return None


def error_message(payload: Any) -> str | None:
    """Get the provider error message from an error body, if any.

    Both providers use {"error": {"message": "..."}}.
    """
    if not isinstance(payload, dict):
        return None

    error = payload.get("error")
    if isinstance(error, dict) and error.get("message"):
        return str(error["message"])
    if isinstance(error, str):
        return error

    return None
