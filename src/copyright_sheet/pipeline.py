"""Producer side of the streaming render: estimate, pair, place, serialize."""
from __future__ import annotations

import logging
import threading
from enum import Enum
from pathlib import Path
from typing import Callable, Mapping, Optional, Sequence

from .canvas import DocumentCanvas, ReportLabCanvas
from .config import LayoutOptions
from .errors import CopyrightSheetError, PipeClosedError, RenderError
from .heights import estimate_heights
from .image_tools import resolve_logos
from .layout import place_pairs
from .models import ContentBlock
from .packer import find_pairs, page_capacity
from .pipe import DEFAULT_MAX_CHUNKS, PipeReader, PipeWriter, create_pipe

logger = logging.getLogger(__name__)

CanvasFactory = Callable[[LayoutOptions], DocumentCanvas]


class RenderState(str, Enum):
    IDLE = "idle"
    FETCHING = "fetching"
    ESTIMATING = "estimating"
    PAIRING = "pairing"
    PLACING = "placing"
    STREAMING = "streaming"
    DONE = "done"
    FAILED = "failed"


class RenderJob:
    """Tracks one request's progress through the render stages."""

    def __init__(self) -> None:
        self.state = RenderState.IDLE
        self.error: Optional[BaseException] = None
        self.reader: Optional[PipeReader] = None
        self._finished = threading.Event()

    def transition(self, state: RenderState) -> None:
        logger.debug("render %s -> %s", self.state.value, state.value)
        self.state = state

    def finish(self, error: Optional[BaseException] = None) -> None:
        self.error = error
        self.transition(RenderState.FAILED if error is not None else RenderState.DONE)
        self._finished.set()

    @property
    def finished(self) -> bool:
        return self._finished.is_set()

    def join(self, timeout: Optional[float] = None) -> bool:
        """Wait for the producer to reach DONE or FAILED."""
        return self._finished.wait(timeout)


def produce_document(
    writer: PipeWriter,
    blocks: Sequence[ContentBlock],
    downloaded: Mapping[str, Path],
    options: LayoutOptions,
    canvas: DocumentCanvas,
    job: Optional[RenderJob] = None,
) -> None:
    """
    Render `blocks` into `canvas` and write the serialized document to `writer`.

    Does not close the writer; the caller decides between a clean close
    and closing with an error.
    """
    job = job or RenderJob()

    job.transition(RenderState.ESTIMATING)
    logos = resolve_logos(blocks, downloaded, options)
    heights = estimate_heights(canvas, blocks, logos, options)

    job.transition(RenderState.PAIRING)
    pairs = find_pairs(heights, page_capacity(options))

    job.transition(RenderState.PLACING)
    pages = place_pairs(canvas, pairs, blocks, heights, logos, options)
    data = canvas.serialize()
    logger.debug("rendered %d cards on %d pages (%d bytes)", len(blocks), pages, len(data))

    job.transition(RenderState.STREAMING)
    writer.write(data)


def start_render(
    blocks: Sequence[ContentBlock],
    downloaded: Mapping[str, Path],
    options: LayoutOptions,
    canvas_factory: CanvasFactory = ReportLabCanvas,
    job: Optional[RenderJob] = None,
    max_chunks: int = DEFAULT_MAX_CHUNKS,
) -> RenderJob:
    """
    Start the producer thread and return its job; read from `job.reader`.

    Any failure closes the pipe with that error so the consumer sees it
    instead of a clean end of stream. Unexpected exceptions are wrapped
    in RenderError.
    """
    job = job or RenderJob()
    reader, writer = create_pipe(max_chunks=max_chunks)
    job.reader = reader

    def run() -> None:
        try:
            canvas = canvas_factory(options)
            produce_document(writer, blocks, downloaded, options, canvas, job)
        except PipeClosedError as e:
            logger.info("consumer closed the stream; render aborted")
            writer.close_with_error(e)
            job.finish(e)
        except CopyrightSheetError as e:
            logger.error("generating PDF failed: %s", e)
            writer.close_with_error(e)
            job.finish(e)
        except Exception as e:
            logger.exception("generating PDF failed")
            error = RenderError(f"generating PDF: {type(e).__name__}: {e}")
            error.__cause__ = e
            writer.close_with_error(error)
            job.finish(error)
        else:
            writer.close()
            job.finish()

    thread = threading.Thread(target=run, name="copyright-render", daemon=True)
    thread.start()
    return job
