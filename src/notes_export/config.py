"""Configuration loading from environment variables and CLI flags."""

import os
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from notes_export.handwriting import DEFAULT_LANGUAGE
from notes_export.math_ocr import DEFAULT_MATH_URL, DEFAULT_TIMEOUT


class Provider(str, Enum):
    ANTHROPIC = "anthropic"
    OPENAI = "openai"


DEFAULTS = {
    Provider.ANTHROPIC: "claude-sonnet-4-6",
    Provider.OPENAI: "gpt-4o",
}

ENV_KEYS = {
    Provider.ANTHROPIC: "ANTHROPIC_API_KEY",
    Provider.OPENAI: "OPENAI_API_KEY",
}

MATH_TOKEN_ENV = "SIMPLETEX_API_KEY"
MATH_URL_ENV = "NOTES_MATH_OCR_URL"


@dataclass
class Config:
    provider: Provider
    model: str
    api_key: str
    math_token: Optional[str] = None
    math_url: str = DEFAULT_MATH_URL
    math_timeout: float = DEFAULT_TIMEOUT
    language: str = DEFAULT_LANGUAGE

    @classmethod
    def from_env(
        cls,
        provider: Provider,
        model_override: Optional[str] = None,
        api_key_override: Optional[str] = None,
        math_token_override: Optional[str] = None,
    ) -> "Config":
        # A missing handwriting key is not fatal: recognition just comes back
        # empty once provisioning fails.
        return cls(
            provider=provider,
            model=model_override or DEFAULTS[provider],
            api_key=api_key_override or os.environ.get(ENV_KEYS[provider], ""),
            math_token=math_token_override or os.environ.get(MATH_TOKEN_ENV) or None,
            math_url=os.environ.get(MATH_URL_ENV) or DEFAULT_MATH_URL,
        )
