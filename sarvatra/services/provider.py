"""AI provider client (OpenAI-compatible HTTP API) called with each user's own API key."""

import json
import logging
import time
from typing import TYPE_CHECKING, Any, Literal

import httpx

if TYPE_CHECKING:
    from sarvatra.core.config import Settings

logger = logging.getLogger(__name__)

ProviderErrorKind = Literal["invalid_key", "quota", "unreachable", "timeout", "bad_response"]


class ProviderError(Exception):
    """Raised when the provider cannot complete a request (bad key, quota, network, bad body)."""

    def __init__(
        self, message: str, kind: ProviderErrorKind, cause: Exception | None = None
    ) -> None:
        self.message = message
        self.kind = kind
        self.cause = cause
        super().__init__(message)


def _raise_for_status(response: httpx.Response) -> None:
    if response.status_code == 401:
        raise ProviderError(
            "Invalid API key. Please check your key in Settings.", "invalid_key"
        )
    if response.status_code == 429:
        raise ProviderError(
            "API quota exceeded. Please check your provider account.", "quota"
        )
    if response.status_code >= 400:
        raise ProviderError(
            f"Provider returned status {response.status_code}.", "bad_response"
        )


async def _send(
    method: Literal["get", "post"],
    endpoint: str,
    api_key: str,
    settings: "Settings",
    **kwargs: Any,
) -> httpx.Response:
    """Issue one request; map transport failures to ProviderError and log latency."""
    url = f"{settings.PROVIDER_BASE_URL.rstrip('/')}/{endpoint}"
    headers = {"Authorization": f"Bearer {api_key}"}
    timeout = httpx.Timeout(settings.PROVIDER_REQUEST_TIMEOUT_SEC)
    start = time.perf_counter()
    try:
        async with httpx.AsyncClient(timeout=timeout) as client:
            response = await getattr(client, method)(url, headers=headers, **kwargs)
    except httpx.ConnectError as e:
        logger.info(
            "Provider request failed",
            extra={"provider_latency_seconds": time.perf_counter() - start, "endpoint": endpoint},
        )
        raise ProviderError(
            "AI provider is unreachable. Check PROVIDER_BASE_URL.", "unreachable", cause=e
        ) from e
    except httpx.TimeoutException as e:
        logger.info(
            "Provider request timed out",
            extra={"provider_latency_seconds": time.perf_counter() - start, "endpoint": endpoint},
        )
        raise ProviderError("AI provider request timed out.", "timeout", cause=e) from e
    except httpx.HTTPError as e:
        raise ProviderError("AI provider request failed.", "unreachable", cause=e) from e

    logger.info(
        "Provider request completed",
        extra={
            "provider_latency_seconds": time.perf_counter() - start,
            "endpoint": endpoint,
            "status_code": response.status_code,
        },
    )
    return response


async def complete_text(
    api_key: str,
    prompt: str,
    text: str,
    temperature: float,
    settings: "Settings",
) -> str:
    """Run a command prompt (system message) against the user's text; return the completion."""
    payload = {
        "model": settings.PROVIDER_CHAT_MODEL,
        "messages": [
            {"role": "system", "content": prompt},
            {"role": "user", "content": text},
        ],
        "temperature": temperature,
        "max_tokens": settings.PROVIDER_MAX_TOKENS,
    }
    response = await _send("post", "chat/completions", api_key, settings, json=payload)
    _raise_for_status(response)
    try:
        body = response.json()
    except json.JSONDecodeError as e:
        raise ProviderError(
            "Provider response body is not valid JSON.", "bad_response", cause=e
        ) from e
    try:
        content = body["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError) as e:
        raise ProviderError(
            "Provider response missing completion content.", "bad_response", cause=e
        ) from e
    return content or ""


async def transcribe_audio(
    api_key: str, audio: bytes, audio_format: str, settings: "Settings"
) -> str:
    """Send recorded audio for transcription; return plain text."""
    files = {"file": (f"audio.{audio_format}", audio, f"audio/{audio_format}")}
    data = {"model": settings.PROVIDER_TRANSCRIPTION_MODEL, "response_format": "text"}
    response = await _send(
        "post", "audio/transcriptions", api_key, settings, data=data, files=files
    )
    _raise_for_status(response)
    return response.text.strip()


async def check_api_key(api_key: str, settings: "Settings") -> bool:
    """Return True if the provider accepts the key (lists models), False if it rejects it."""
    response = await _send("get", "models", api_key, settings)
    if response.status_code in (401, 403):
        return False
    _raise_for_status(response)
    return True
