"""Content store: where copyright blocks come from."""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Dict, Iterable, List, Protocol

from .errors import DataError
from .models import ContentBlock, Organization

logger = logging.getLogger(__name__)


class ContentStore(Protocol):
    """Looks up copyright blocks by product code and fileset type code."""

    def fetch(self, product_codes: Iterable[str], type_codes: Iterable[str]) -> List[ContentBlock]: ...


def parse_organization_ids(raw: str) -> List[int]:
    """
    Parse a comma separated organization id list such as "12, 7".

    Raises:
        DataError: If any entry is not a non-negative integer
    """
    ids: List[int] = []
    for part in (raw or "").split(","):
        text = part.strip()
        if not text:
            continue
        if not text.isdigit():
            raise DataError(f"parsing org ID {text!r}")
        ids.append(int(text))
    return ids


class JsonContentStore:
    """
    Content store backed by a JSON export.

    Expected shape::

        {
          "filesets": [{"product_code": "...", "type_code": "audio",
                        "copyright": "...", "copyright_date": "2001",
                        "organization_ids": "1,2"}],
          "organizations": [{"id": 1, "slug": "...", "name": "...",
                             "logo_url": "https://..."}]
        }
    """

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def _load(self) -> dict:
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.error("reading content file %s failed: %s", self.path, e)
            raise DataError(f"reading content file {self.path}: {e}") from e
        if not isinstance(data, dict):
            raise DataError(f"content file {self.path} must hold a JSON object")
        return data

    def fetch(self, product_codes: Iterable[str], type_codes: Iterable[str]) -> List[ContentBlock]:
        wanted_codes = set(product_codes)
        wanted_types = set(type_codes)
        data = self._load()

        try:
            organizations: Dict[int, Organization] = {
                int(org["id"]): Organization(
                    organization_id=int(org["id"]),
                    name=str(org.get("name") or ""),
                    logo_url=str(org.get("logo_url") or ""),
                    slug=str(org.get("slug") or ""),
                )
                for org in data.get("organizations", [])
            }
        except (KeyError, TypeError, ValueError) as e:
            raise DataError(f"invalid organization record: {e}") from e

        blocks: List[ContentBlock] = []
        seen: set[str] = set()
        for row in data.get("filesets", []):
            code = row.get("product_code", "")
            if code not in wanted_codes or row.get("type_code") not in wanted_types:
                continue
            if code in seen:
                continue
            seen.add(code)

            org_ids = parse_organization_ids(row.get("organization_ids", ""))
            blocks.append(
                ContentBlock(
                    product_code=code,
                    copyright=row.get("copyright") or "",
                    copyright_date=row.get("copyright_date") or "",
                    organizations=tuple(
                        organizations[org_id] for org_id in org_ids if org_id in organizations
                    ),
                )
            )

        return blocks
