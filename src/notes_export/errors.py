"""Exceptions raised by the export pipeline.

Recognition failures are never raised: they resolve to an absent result.
Only a failure of the export as a whole reaches the caller.
"""


class RenderError(RuntimeError):
    """A page could not be rasterized."""


class ExportError(RuntimeError):
    """The export failed as a whole; no document was produced."""


class ExportCancelled(ExportError):
    pass


class ExportTimeout(ExportError):
    pass
