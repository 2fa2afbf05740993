"""Anthropic Claude vision backend for handwriting recognition."""

import base64
import logging
from typing import Optional

import anthropic

from notes_export.preprocessing import crop_to_ink, encode_png
from notes_export.prompt import handwriting_prompt
from notes_export.providers.base import Ink, InkRecognizer
from notes_export.renderer import PageRenderer

logger = logging.getLogger(__name__)


class AnthropicInkRecognizer(InkRecognizer):
    def __init__(self, api_key: str, model: str, renderer: Optional[PageRenderer] = None) -> None:
        self.api_key = api_key
        self.model = model
        self.renderer = renderer or PageRenderer()
        self.client: Optional[anthropic.Anthropic] = None
        self.system_prompt = ""

    def provision(self, language: str) -> None:
        if not self.api_key:
            raise RuntimeError(
                "No API key for anthropic. "
                "Set ANTHROPIC_API_KEY in your environment or .env file."
            )
        self.client = anthropic.Anthropic(api_key=self.api_key)
        self.system_prompt = handwriting_prompt(language)
        logger.info("Handwriting model ready: anthropic/%s (%s)", self.model, language)

    def recognize(self, ink: Ink) -> list[str]:
        if self.client is None:
            raise RuntimeError("AnthropicInkRecognizer used before provision()")
        png = encode_png(crop_to_ink(self.renderer.render_ink(ink)))
        b64 = base64.standard_b64encode(png).decode("utf-8")

        response = self.client.messages.create(
            model=self.model,
            max_tokens=1024,
            system=self.system_prompt,
            messages=[{
                "role": "user",
                "content": [
                    {
                        "type": "image",
                        "source": {
                            "type": "base64",
                            "media_type": "image/png",
                            "data": b64,
                        },
                    },
                    {"type": "text", "text": "Transcribe the handwriting above."},
                ],
            }],
        )

        return [block.text for block in response.content if getattr(block, "text", None)]
