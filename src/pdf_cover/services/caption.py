"""Alt text generation for cover images using an OpenAI vision model."""

import base64
import logging
from typing import Any, Optional

import httpx
from openai import OpenAI

from ..config import Settings
from ..models import FALLBACK_CAPTION, ExtractedImage
from ..utils import truncate_text

logger = logging.getLogger(__name__)

# Prompt template for cover alt text
ALT_TEXT_PROMPT = (
    "Generate a concise alternative text description for this book cover image. "
    'The book title is: "{title}". '
    "The alt text should be suitable for screen readers and accessibility purposes. "
    "Describe the key visual elements, colors, and any text visible on the cover. "
    "Keep the description under 150 characters if possible. "
    "Respond with only the alt text, no additional explanation."
)


class CaptionGenerator:
    """Produces alt text for an extracted cover image.

    ``generate`` never raises: a missing API key, an image that cannot be
    rendered, a failed request or an unexpected response all produce
    ``FALLBACK_CAPTION``. Failures are logged as warnings.
    """

    def __init__(
        self,
        api_key: str = "",
        model: str = "gpt-4o",
        base_url: Optional[str] = None,
        timeout: Optional[float] = 60.0,
        max_tokens: int = 300,
        client: Any = None,
    ):
        self.api_key = api_key or ""
        self.model = model
        self.base_url = base_url
        self.timeout = timeout
        self.max_tokens = max_tokens
        self._client = client

    @classmethod
    def from_settings(cls, settings: Settings) -> "CaptionGenerator":
        """Build a generator from application settings."""
        return cls(
            api_key=settings.openai_api_key if settings.caption_enabled else "",
            model=settings.openai_model,
            base_url=settings.openai_base_url,
            timeout=settings.openai_timeout_seconds,
            max_tokens=settings.openai_max_tokens,
        )

    @property
    def enabled(self) -> bool:
        """Whether a credential is configured."""
        return bool(self.api_key.strip())

    def generate(self, image: ExtractedImage, title: str) -> str:
        """Return alt text for ``image``, or the fallback caption.

        Args:
            image: Cover image from the source document.
            title: Document title given to the model as context.

        Returns:
            Non-empty caption string.
        """
        if not self.enabled:
            return FALLBACK_CAPTION

        try:
            png_bytes = image.to_png()
            image_base64 = base64.b64encode(png_bytes).decode("utf-8")
            response = self._get_client().chat.completions.create(
                **build_request(image_base64, "image/png", title, self.model, self.max_tokens)
            )
        except Exception as e:
            logger.warning(f"Failed to generate alt text via OpenAI: {truncate_text(str(e), 300)}")
            return FALLBACK_CAPTION

        caption = parse_caption(response)
        logger.info(f"Generated alt text for image /{image.name}: {truncate_text(caption, 80)}")
        return caption

    def _get_client(self):
        if self._client is None:
            self._client = OpenAI(
                api_key=self.api_key,
                base_url=self.base_url,
                timeout=httpx.Timeout(self.timeout),
                max_retries=0,
            )
        return self._client


def build_prompt(title: str) -> str:
    """Build the alt text instruction for a given title."""
    return ALT_TEXT_PROMPT.format(title=title)


def build_request(
    image_base64: str,
    mime_type: str,
    title: str,
    model: str = "gpt-4o",
    max_tokens: int = 300,
) -> dict:
    """Build chat completion arguments with the image as a low-detail data URL."""
    return {
        "model": model,
        "max_tokens": max_tokens,
        "messages": [
            {
                "role": "user",
                "content": [
                    {"type": "text", "text": build_prompt(title)},
                    {
                        "type": "image_url",
                        "image_url": {
                            "url": f"data:{mime_type};base64,{image_base64}",
                            "detail": "low",
                        },
                    },
                ],
            }
        ],
    }


def parse_caption(response: Any) -> str:
    """Extract the first choice's message text from a chat completion."""
    choices = getattr(response, "choices", None) or []
    if not choices:
        logger.warning("OpenAI response contained no choices, using default alt text")
        return FALLBACK_CAPTION

    message = getattr(choices[0], "message", None)
    content = getattr(message, "content", None) if message is not None else None
    if not isinstance(content, str) or not content.strip():
        logger.warning("OpenAI response contained no message text, using default alt text")
        return FALLBACK_CAPTION

    return content.strip()
