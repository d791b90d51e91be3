"""Copyright service: block lookup and streamed PDF production."""
from __future__ import annotations

import logging
from typing import Callable, List, Optional, Protocol, Sequence

from .asset_fetcher import AssetTransport, HttpxTransport, fetch_logos
from .canvas import ReportLabCanvas, prepare_fonts
from .config import FetchSettings, LayoutOptions, MODES, options_for_mode, type_codes_for
from .errors import DataError, ProductsNotFoundError
from .models import ContentBlock
from .pipe import PipeReader
from .pipeline import CanvasFactory, RenderJob, RenderState, start_render
from .store import ContentStore

logger = logging.getLogger(__name__)


class CopyrightService(Protocol):
    def get_copyright_by(self, product_codes: Sequence[str], mode: str) -> List[ContentBlock]: ...

    async def stream_copyright(self, blocks: Sequence[ContentBlock], mode: str) -> PipeReader: ...


class CopyrightManager:
    """Production `CopyrightService`."""

    def __init__(
        self,
        store: ContentStore,
        transport: Optional[AssetTransport] = None,
        fetch_settings: Optional[FetchSettings] = None,
        options_factory: Callable[[str], LayoutOptions] = options_for_mode,
        canvas_factory: CanvasFactory = ReportLabCanvas,
    ) -> None:
        self.store = store
        self.fetch_settings = fetch_settings or FetchSettings.from_env()
        self.transport = transport
        self.options_factory = options_factory
        self.canvas_factory = canvas_factory

    def get_copyright_by(self, product_codes: Sequence[str], mode: str) -> List[ContentBlock]:
        """
        Look up the copyright blocks for `product_codes` in the given mode.

        Raises:
            DataError: If the content store fails
        """
        try:
            return self.store.fetch(product_codes, type_codes_for(mode))
        except DataError:
            logger.error("fetching fileset copyrights failed", exc_info=True)
            raise

    async def start_copyright(self, blocks: Sequence[ContentBlock], mode: str) -> RenderJob:
        """
        Download logos, then start rendering in the background.

        Raises:
            ProductsNotFoundError: If `blocks` is empty; nothing is started
        """
        if not blocks:
            raise ProductsNotFoundError()
        if mode not in MODES:
            raise ValueError(f"invalid mode {mode!r}")

        options = prepare_fonts(self.options_factory(mode))
        job = RenderJob()
        job.transition(RenderState.FETCHING)
        if self.transport is not None:
            downloaded = await fetch_logos(blocks, self.transport, self.fetch_settings)
        else:
            # One client, and one connection pool, per request
            async with HttpxTransport(self.fetch_settings.timeout) as transport:
                downloaded = await fetch_logos(blocks, transport, self.fetch_settings)
        return start_render(blocks, downloaded, options, self.canvas_factory, job=job)

    async def stream_copyright(self, blocks: Sequence[ContentBlock], mode: str) -> PipeReader:
        """
        Produce the copyright PDF for `blocks` as a stream.

        The returned reader yields PDF bytes while the document is being
        written; a rendering failure is raised from the reader.
        """
        job = await self.start_copyright(blocks, mode)
        return job.reader
