"""Exception hierarchy for copyright sheet generation."""
from __future__ import annotations


class CopyrightSheetError(Exception):
    """Base class for all errors raised by this package."""


class DataError(CopyrightSheetError):
    """The content store could not supply content blocks."""


class ProductsNotFoundError(DataError):
    """No content blocks matched the requested product codes."""

    def __init__(self, message: str = "no copyrights found for the provided product codes") -> None:
        super().__init__(message)


class AssetError(CopyrightSheetError):
    """A single logo could not be fetched or decoded."""


class TransportError(AssetError):
    """A logo download failed (bad status, timeout or network error)."""


class LayoutError(CopyrightSheetError):
    """An internal layout invariant was violated."""


class RenderError(CopyrightSheetError):
    """Drawing or serializing the document failed."""


class PipeClosedError(CopyrightSheetError):
    """The output pipe was closed by the consumer."""
