"""Text-to-speech HTTP client"""

import httpx

from inova_gateway.config import settings
from inova_gateway.domain.exceptions import SpeechSynthesisError
from inova_gateway.infrastructure.observability.metrics import speech_failures_counter, upstream_latency_histogram

MAX_TEXT_LENGTH = 5000


class SpeechClient:
    """Client for an ElevenLabs-compatible synthesis API"""

    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        voice_id: str | None = None,
        timeout: float | None = None,
    ):
        self.base_url = base_url or settings.tts_api_base
        self.api_key = api_key if api_key is not None else settings.tts_api_key
        self.voice_id = voice_id or settings.tts_voice_id
        self.timeout = timeout or settings.http_timeout_seconds

    async def synthesize(self, text: str) -> bytes:
        """
        Render text as MP3 audio.

        Raises:
            SpeechSynthesisError: missing key, empty text, or upstream failure
        """
        if not self.api_key:
            raise SpeechSynthesisError("TTS API key not configured")
        text = (text or "").strip()
        if not text:
            raise SpeechSynthesisError("Nothing to say")

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            try:
                with upstream_latency_histogram.labels(service="speech").time():
                    response = await client.post(
                        f"{self.base_url}/text-to-speech/{self.voice_id}",
                        json={
                            "text": text[:MAX_TEXT_LENGTH],
                            "model_id": "eleven_multilingual_v2",
                            "voice_settings": {"stability": 0.5, "similarity_boost": 0.75},
                        },
                        headers={"xi-api-key": self.api_key, "Accept": "audio/mpeg"},
                    )
                response.raise_for_status()
                return response.content

            except httpx.TimeoutException as e:
                speech_failures_counter.inc()
                raise SpeechSynthesisError(f"TTS timeout after {self.timeout}s") from e
            except httpx.HTTPStatusError as e:
                speech_failures_counter.inc()
                raise SpeechSynthesisError(f"TTS error: {e.response.status_code}") from e
            except httpx.RequestError as e:
                speech_failures_counter.inc()
                raise SpeechSynthesisError(f"TTS unreachable: {e}") from e
