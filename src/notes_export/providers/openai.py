"""OpenAI GPT-4o vision backend for handwriting recognition."""

import base64
import logging
from typing import Optional

from openai import OpenAI

from notes_export.preprocessing import crop_to_ink, encode_png
from notes_export.prompt import handwriting_prompt
from notes_export.providers.base import Ink, InkRecognizer
from notes_export.renderer import PageRenderer

logger = logging.getLogger(__name__)


class OpenAIInkRecognizer(InkRecognizer):
    def __init__(self, api_key: str, model: str, renderer: Optional[PageRenderer] = None) -> None:
        self.api_key = api_key
        self.model = model
        self.renderer = renderer or PageRenderer()
        self.client: Optional[OpenAI] = None
        self.system_prompt = ""

    def provision(self, language: str) -> None:
        if not self.api_key:
            raise RuntimeError(
                "No API key for openai. "
                "Set OPENAI_API_KEY in your environment or .env file."
            )
        self.client = OpenAI(api_key=self.api_key)
        self.system_prompt = handwriting_prompt(language)
        logger.info("Handwriting model ready: openai/%s (%s)", self.model, language)

    def recognize(self, ink: Ink) -> list[str]:
        if self.client is None:
            raise RuntimeError("OpenAIInkRecognizer used before provision()")
        png = encode_png(crop_to_ink(self.renderer.render_ink(ink)))
        b64 = base64.standard_b64encode(png).decode("utf-8")

        response = self.client.chat.completions.create(
            model=self.model,
            max_tokens=1024,
            n=1,
            messages=[
                {"role": "system", "content": self.system_prompt},
                {"role": "user", "content": [
                    {
                        "type": "image_url",
                        "image_url": {
                            "url": f"data:image/png;base64,{b64}",
                            "detail": "high",
                        },
                    },
                    {"type": "text", "text": "Transcribe the handwriting above."},
                ]},
            ],
        )

        return [c.message.content for c in response.choices if c.message.content]
