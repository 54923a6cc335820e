"""
Gemini image generation.
Returns images as data: URLs so they can be stored and rendered directly.
"""
import base64
import logging
import time
from typing import Optional

from google import genai
from google.genai import types

from genius.exceptions import ProviderCallError
from genius.utils.logging import log_provider_request, log_provider_failure
from genius.utils.metrics import (
    ai_provider_requests_total,
    ai_provider_failures_total,
    ai_provider_latency_seconds,
)

logger = logging.getLogger(__name__)

IMAGE_MODEL = "gemini-2.0-flash-preview-image-generation"


class ImageGenerator:
    """Image generation through the Gemini image model."""

    provider = "gemini"
    model = IMAGE_MODEL

    def __init__(self, api_key: Optional[str] = None):
        self.api_key = api_key
        self.client = genai.Client(api_key=api_key) if api_key else None

    def is_configured(self) -> bool:
        return bool(self.api_key) and self.client is not None

    async def generate(self, prompt: str) -> Optional[str]:
        """
        Generate one image for the prompt.

        Args:
            prompt: Full image prompt (style already applied)

        Returns:
            data: URL of the first image part, or None if the model returned no image

        Raises:
            ProviderCallError: If not configured or the API call fails
        """
        if not self.is_configured():
            raise ProviderCallError(self.provider, "GEMINI_API_KEY is not configured")

        start_time = time.time()
        ai_provider_requests_total.labels(provider=self.provider, operation="generate_image").inc()

        try:
            response = await self.client.aio.models.generate_content(
                model=self.model,
                contents=prompt,
                config=types.GenerateContentConfig(response_modalities=["TEXT", "IMAGE"]),
            )
        except Exception as e:
            duration = time.time() - start_time
            ai_provider_failures_total.labels(provider=self.provider, operation="generate_image").inc()
            log_provider_failure(
                logger,
                provider=self.provider,
                operation="generate_image",
                error=str(e),
                duration_ms=duration * 1000,
                model=self.model,
            )
            raise ProviderCallError(self.provider, str(e)) from e

        duration = time.time() - start_time
        ai_provider_latency_seconds.labels(provider=self.provider, operation="generate_image").observe(duration)
        log_provider_request(
            logger,
            provider=self.provider,
            operation="generate_image",
            duration_ms=duration * 1000,
            model=self.model,
        )

        for candidate in response.candidates or []:
            content = candidate.content
            if not content or not content.parts:
                continue
            for part in content.parts:
                inline = part.inline_data
                if inline and inline.data:
                    data = inline.data
                    if isinstance(data, bytes):
                        data = base64.b64encode(data).decode("ascii")
                    return f"data:{inline.mime_type or 'image/png'};base64,{data}"

        return None
