"""Vision service backed by an OpenAI multimodal chat model."""

from __future__ import annotations

import base64
import logging
import mimetypes
from pathlib import Path

from openai import AsyncOpenAI

from src.errors import VisionServiceError
from src.vision.service import COMPARE_PROMPT, DESCRIBE_PROMPT

logger = logging.getLogger(__name__)


class OpenAIVisionService:
    """Ask a GPT vision model to compare and describe pet photos.

    Args:
        api_key: OpenAI API key (falls back to ``OPENAI_API_KEY``).
        model: Chat model with image input support.
        client: Preconfigured client, mainly for tests.
    """

    def __init__(
        self,
        api_key: str | None = None,
        model: str = "gpt-4o",
        client: AsyncOpenAI | None = None,
    ) -> None:
        self.model = model
        self.client = client or AsyncOpenAI(api_key=api_key)

    async def compare(self, image_a: str, image_b: str) -> str:
        content = [
            {"type": "text", "text": COMPARE_PROMPT},
            {"type": "image_url", "image_url": {"url": to_image_url(image_a)}},
            {"type": "image_url", "image_url": {"url": to_image_url(image_b)}},
        ]
        response = await self.client.chat.completions.create(
            model=self.model,
            messages=[{"role": "user", "content": content}],
            max_tokens=10,
            temperature=0,
        )
        return response.choices[0].message.content or ""

    async def describe(self, image: str) -> str:
        content = [
            {"type": "text", "text": DESCRIBE_PROMPT},
            {"type": "image_url", "image_url": {"url": to_image_url(image)}},
        ]
        response = await self.client.chat.completions.create(
            model=self.model,
            messages=[{"role": "user", "content": content}],
            max_tokens=300,
            temperature=0,
            response_format={"type": "json_object"},
        )
        return response.choices[0].message.content or ""


def to_image_url(ref: str) -> str:
    """Turn an image reference into something the API can fetch.

    Remote and data URLs pass through; local files are inlined as base64
    data URLs.

    Args:
        ref: URL or filesystem path of the image.

    Returns:
        URL string for an ``image_url`` content part.

    Raises:
        VisionServiceError: If *ref* is neither a URL nor an existing file.
    """
    if ref.startswith(("http://", "https://", "data:")):
        return ref

    path = Path(ref)
    if not path.is_file():
        raise VisionServiceError(f"Image not reachable: {ref}")

    mime_type = mimetypes.guess_type(path.name)[0] or "image/jpeg"
    encoded = base64.b64encode(path.read_bytes()).decode("ascii")
    logger.debug("Inlining local image %s (%s)", ref, mime_type)
    return f"data:{mime_type};base64,{encoded}"
