"""Shared handwriting transcription prompt used by all ink providers."""

HANDWRITING_PROMPT = """\
You are a handwriting recognition engine for digital ink.

The image shows pen strokes drawn on a tablet, rendered black on white. \
Transcribe the handwriting exactly as written, in the language with tag \
{language}.

Rules:
- Output plain text only: no markdown, no LaTeX, no quotation marks.
- Keep the writer's line breaks; do not reflow or correct spelling.
- Do not add commentary, interpretation, or content not present in the image.
- If the strokes contain no legible writing, output nothing at all.
"""


def handwriting_prompt(language: str) -> str:
    return HANDWRITING_PROMPT.format(language=language)
