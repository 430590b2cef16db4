"""AI processing endpoints: run a published command or transcribe speech with the caller's own key."""

import base64
import binascii
import logging

from fastapi import APIRouter, HTTPException, status
from fastapi.concurrency import run_in_threadpool

from sarvatra.api.deps import CipherDep, CurrentUser, SettingsDep, StoreDep
from sarvatra.api.errors import provider_http_exception, to_http_exception
from sarvatra.core.crypto import CredentialCipher
from sarvatra.core.errors import SarvatraError
from sarvatra.schemas.command import (
    SpeechProcessRequest,
    SpeechProcessResponse,
    TextProcessRequest,
    TextProcessResponse,
)
from sarvatra.services import accounts, commands
from sarvatra.services.provider import ProviderError, complete_text, transcribe_audio
from sarvatra.stores.base import Store

logger = logging.getLogger(__name__)

router = APIRouter()

# Whisper-style upload limit.
MAX_AUDIO_BYTES = 25 * 1024 * 1024


def _load_api_key(store: Store, cipher: CredentialCipher, account_id: str) -> str:
    account = accounts.get_account(store, account_id)
    return accounts.reveal_credential(cipher, account)


@router.post("/process-text", response_model=TextProcessResponse)
async def process_text(
    body: TextProcessRequest,
    current_user: CurrentUser,
    store: StoreDep,
    cipher: CipherDep,
    settings: SettingsDep,
) -> TextProcessResponse:
    """
    Run a published command's prompt against the submitted text.

    Uses the caller's stored API key; the key is decrypted for this request only.
    """
    try:
        command = await run_in_threadpool(commands.get_published_command, store, body.command_id)
        api_key = await run_in_threadpool(_load_api_key, store, cipher, current_user.id)
    except SarvatraError as e:
        raise to_http_exception(e) from e

    try:
        processed = await complete_text(
            api_key, command.prompt, body.text, command.temperature, settings
        )
    except ProviderError as e:
        logger.warning(
            "Text processing failed: %s",
            e.kind,
            extra={"account_id": current_user.id, "command_id": command.id},
        )
        raise provider_http_exception(e) from e

    return TextProcessResponse(processed_text=processed, output_type=command.output_type)


@router.post("/speech-to-text", response_model=SpeechProcessResponse)
async def speech_to_text(
    body: SpeechProcessRequest,
    current_user: CurrentUser,
    store: StoreDep,
    cipher: CipherDep,
    settings: SettingsDep,
) -> SpeechProcessResponse:
    """Transcribe base64-encoded audio with the caller's stored API key."""
    try:
        audio = base64.b64decode(body.audio_data, validate=True)
    except (binascii.Error, ValueError) as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="audio_data must be valid base64.",
        ) from e
    if not audio:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="audio_data is empty."
        )
    if len(audio) > MAX_AUDIO_BYTES:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail="Audio exceeds the 25 MB limit.",
        )

    try:
        api_key = await run_in_threadpool(_load_api_key, store, cipher, current_user.id)
    except SarvatraError as e:
        raise to_http_exception(e) from e

    try:
        transcription = await transcribe_audio(api_key, audio, body.format, settings)
    except ProviderError as e:
        logger.warning(
            "Transcription failed: %s", e.kind, extra={"account_id": current_user.id}
        )
        raise provider_http_exception(e) from e

    return SpeechProcessResponse(transcription=transcription)
