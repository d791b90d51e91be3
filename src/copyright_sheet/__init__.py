"""
Package initialization for copyright_sheet.

This package assembles copyright information for a set of products into a
printable PDF of cards, two columns per page, and streams the document to
the caller while it is produced.

Modules:
    - asset_fetcher: Bounded, deduplicated logo downloads (httpx)
    - image_tools: Logo format detection, SVG rasterizing (PyMuPDF), scaling
    - heights: Card height estimation
    - packer: Greedy pairing of cards under a page-height budget
    - layout: Placement of paired cards onto pages
    - canvas: Drawing surface (ReportLab)
    - pipe / pipeline: Streaming render producer and byte pipe
    - store / service / api: Content lookup, service contract, HTTP layer
"""

from .asset_fetcher import HttpxTransport, collect_logo_urls, fetch_logos
from .config import FetchSettings, LayoutOptions, configuration, options_for_mode
from .errors import (
    AssetError,
    CopyrightSheetError,
    DataError,
    LayoutError,
    PipeClosedError,
    ProductsNotFoundError,
    RenderError,
    TransportError,
)
from .image_tools import scale_dimensions
from .models import ContentBlock, LogoAsset, Organization, Pairing, package_id
from .packer import find_pairs, page_capacity
from .pipe import PipeReader, PipeWriter, create_pipe
from .pipeline import RenderJob, RenderState, start_render
from .service import CopyrightManager, CopyrightService
from .store import JsonContentStore

__all__ = [
    # Data classes
    "ContentBlock",
    "LogoAsset",
    "Organization",
    "Pairing",
    "package_id",
    # Configuration
    "FetchSettings",
    "LayoutOptions",
    "configuration",
    "options_for_mode",
    # Core functions
    "collect_logo_urls",
    "fetch_logos",
    "scale_dimensions",
    "find_pairs",
    "page_capacity",
    "start_render",
    # Streaming
    "PipeReader",
    "PipeWriter",
    "create_pipe",
    "RenderJob",
    "RenderState",
    # Service
    "CopyrightManager",
    "CopyrightService",
    "HttpxTransport",
    "JsonContentStore",
    # Errors
    "AssetError",
    "CopyrightSheetError",
    "DataError",
    "LayoutError",
    "PipeClosedError",
    "ProductsNotFoundError",
    "RenderError",
    "TransportError",
]
