"""The live page collection and the snapshot handed to export.

Pages grow as the user draws: when the last page receives its first stroke
a fresh blank page is appended.  Export never reads the live collection; it
works on a :class:`DocumentSnapshot` taken through :meth:`Notebook.snapshot`.
"""

import json
from pathlib import Path

from notes_export.models import DocumentSnapshot, Page, Stroke


class Notebook:
    def __init__(self) -> None:
        self._pages: list[list[Stroke]] = [[]]

    def __len__(self) -> int:
        return len(self._pages)

    def add_stroke(self, page_index: int, stroke: Stroke) -> None:
        if not 0 <= page_index < len(self._pages):
            raise IndexError(f"No page {page_index} (notebook has {len(self._pages)})")
        strokes = self._pages[page_index]
        strokes.append(stroke)
        if page_index == len(self._pages) - 1 and len(strokes) == 1:
            self._pages.append([])

    def snapshot(self) -> DocumentSnapshot:
        return DocumentSnapshot(pages=tuple(Page(strokes=tuple(s)) for s in self._pages))


def load_document(path: Path) -> DocumentSnapshot:
    """Read a document snapshot from its JSON form."""
    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ValueError(f"{path} is not valid JSON: {e}") from e
    return DocumentSnapshot.from_dict(data)
