"""Voice proxy — speech-to-text (Whisper) and text-to-speech through LiteLLM."""

from __future__ import annotations

import litellm

from chatrelay.config import SpeechCfg
from chatrelay.errors import ValidationError
from chatrelay.logging_config import get_logger
from chatrelay.proxies.base import FilePart
from chatrelay.rag.llm_client import translate_error, validate_api_key

logger = get_logger(__name__)

TRANSCRIBE_OPERATION = "transcribe"
SPEAK_OPERATION = "speak"
OPERATIONS = frozenset([TRANSCRIBE_OPERATION, SPEAK_OPERATION])


class VoiceProxy:
    """Forward voice requests to the vendor.

    Args:
        config:      Speech defaults (transcription model, TTS model, voice).
        api_key_env: Environment variable holding the vendor key.
    """

    def __init__(self, config: SpeechCfg | None = None, api_key_env: str = "OPENAI_API_KEY") -> None:
        self._config = config or SpeechCfg()
        self._api_key_env = api_key_env

    def check_operation(self, operation: str | None) -> None:
        if operation not in OPERATIONS:
            raise ValidationError('Invalid operation. Use "transcribe" or "speak"')

    def transcribe(self, audio: FilePart | None) -> dict:
        """Return ``{"text": transcript}`` for *audio*."""
        api_key = validate_api_key(self._api_key_env)
        if audio is None:
            raise ValidationError("No audio file provided")

        logger.info("Transcribing %s (%d bytes)", audio[0], len(audio[1]))
        try:
            response = litellm.transcription(
                model=self._config.transcription_model,
                file=audio,
                response_format="json",
                api_key=api_key,
            )
        except Exception as exc:
            raise translate_error(exc, "Transcription") from exc
        return {"text": response.text or ""}

    def speak(self, text: str | None, voice: str | None = None, model: str | None = None) -> bytes:
        """Synthesise *text* and return MP3 bytes."""
        api_key = validate_api_key(self._api_key_env)
        if not text:
            raise ValidationError("No text provided")

        logger.info("Synthesising %d chars (voice=%s)", len(text), voice or self._config.voice)
        try:
            response = litellm.speech(
                model=model or self._config.tts_model,
                input=text,
                voice=voice or self._config.voice,
                response_format="mp3",
                api_key=api_key,
            )
        except Exception as exc:
            raise translate_error(exc, "Speech synthesis") from exc
        return response.content
