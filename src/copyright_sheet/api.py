"""HTTP layer (FastAPI) for copyright sheets."""
from __future__ import annotations

import asyncio
import logging
from typing import Iterator, List, Optional

from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.responses import JSONResponse, StreamingResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config import MODES
from .errors import DataError, ProductsNotFoundError
from .models import package_id
from .pipe import PipeReader
from .service import CopyrightService

logger = logging.getLogger(__name__)

FORMAT_PDF = "pdf"
FORMAT_JSON = "json"
FORMATS = (FORMAT_PDF, FORMAT_JSON)

STATUS_MESSAGE = "copyright-sheet service is running!"


def validate_request(products: List[str], fmt: str, mode: str) -> None:
    """Raise a 400 HTTPException describing the first invalid parameter."""
    if not products:
        raise HTTPException(status_code=400, detail="products are required")
    if fmt not in FORMATS:
        raise HTTPException(
            status_code=400,
            detail=f"invalid format: {fmt!r}, only 'pdf' or 'json' is supported",
        )
    if mode not in MODES:
        raise HTTPException(
            status_code=400,
            detail=f"invalid mode: {mode!r}, only 'audio', 'video', or 'text' are supported",
        )


def iter_pipe(reader: PipeReader) -> Iterator[bytes]:
    """Yield the reader's chunks, closing it when the response ends or is abandoned."""
    try:
        yield from reader
    except Exception:
        logger.error("streaming PDF failed", exc_info=True)
        raise
    finally:
        reader.close()


def create_app(service: CopyrightService) -> FastAPI:
    app = FastAPI(title="copyright-sheet")

    @app.exception_handler(StarletteHTTPException)
    async def not_found_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404 and exc.detail == "Not Found":
            return JSONResponse(
                status_code=404,
                content={"code": "PAGE_NOT_FOUND", "message": "Page not found"},
            )
        return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})

    @app.get("/api/status")
    async def status():
        return STATUS_MESSAGE

    @app.get("/api/copyright")
    async def get_copyright(
        productCode: Optional[List[str]] = Query(default=None),
        format: str = Query(default=FORMAT_PDF),
        mode: str = Query(default="audio"),
    ):
        products = [code for code in (productCode or []) if code]
        validate_request(products, format, mode)

        try:
            blocks = await asyncio.to_thread(service.get_copyright_by, products, mode)
        except DataError as e:
            raise HTTPException(status_code=500, detail=f"failed to get copyrights: {e}")

        if not blocks:
            raise HTTPException(
                status_code=404,
                detail="No copyrights found for the provided products",
            )

        if format == FORMAT_JSON:
            return [block.to_dict() for block in blocks]

        try:
            reader = await service.stream_copyright(blocks, mode)
        except ProductsNotFoundError as e:
            raise HTTPException(status_code=404, detail=str(e))

        return StreamingResponse(
            iter_pipe(reader),
            media_type="application/pdf",
            headers={"Content-Disposition": f'inline; filename="{package_id(products)}.pdf"'},
        )

    return app
