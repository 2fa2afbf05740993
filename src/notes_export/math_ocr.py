"""Math recognition client for a SimpleTex-compatible LaTeX OCR service.

Wire format: ``POST`` a ``multipart/form-data`` body with a single ``file``
field holding a JPEG, optionally authorised through a ``token`` header.
The service answers ``{"res": {"latex": "<markup>"}}``.
"""

import asyncio
import logging
from typing import Any, Optional

import requests
from PIL import Image

from notes_export.models import ABSENT, RecognitionResult
from notes_export.postprocessing import wrap_inline_math
from notes_export.preprocessing import has_ink, prepare_math_image

logger = logging.getLogger(__name__)

DEFAULT_MATH_URL = "https://server.simpletex.net/api/latex_ocr"
DEFAULT_TIMEOUT = 30.0


def decode_latex(payload: Any) -> Optional[str]:
    """Pull ``res.latex`` out of a decoded response body."""
    if not isinstance(payload, dict):
        return None
    res = payload.get("res")
    if not isinstance(res, dict):
        return None
    latex = res.get("latex")
    return latex if isinstance(latex, str) else None


class MathRecognitionClient:
    def __init__(
        self,
        url: str = DEFAULT_MATH_URL,
        token: Optional[str] = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self.url = url
        self.token = token
        self.timeout = timeout

    def _post(self, jpeg: bytes) -> Optional[str]:
        headers = {"token": self.token} if self.token else {}
        files = {"file": ("image.jpg", jpeg, "image/jpeg")}
        try:
            response = requests.post(self.url, headers=headers, files=files, timeout=self.timeout)
            response.raise_for_status()
            payload = response.json()
        except requests.RequestException as e:
            logger.warning("Math recognition request failed: %s", e)
            return None
        except ValueError as e:
            logger.warning("Math recognition response is not JSON: %s", e)
            return None
        latex = decode_latex(payload)
        if latex is None:
            logger.warning("Math recognition response has no res.latex field")
        return latex

    async def recognize(self, image: Image.Image) -> RecognitionResult:
        """Send *image* to the service once and return the wrapped markup."""
        if not has_ink(image):
            return ABSENT
        jpeg = prepare_math_image(image)
        latex = await asyncio.to_thread(self._post, jpeg)
        if latex is None:
            return ABSENT
        wrapped = wrap_inline_math(latex)
        return RecognitionResult(wrapped) if wrapped else ABSENT
