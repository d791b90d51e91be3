"""Data classes shared by the fetch, estimate, pairing and layout stages."""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, NamedTuple, Optional, Tuple

SLASH = "/"
DASH = "-"
UNDERSCORE = "_"


@dataclass(frozen=True)
class Organization:
    """An organization credited on one or more content blocks."""

    organization_id: int
    name: str
    logo_url: str = ""
    slug: str = ""

    def to_dict(self) -> dict:
        return {
            "organizationId": self.organization_id,
            "organizationSlug": self.slug,
            "organizationName": self.name,
            "organizationLogoUrl": self.logo_url,
        }


@dataclass(frozen=True)
class ContentBlock:
    """Copyright information for one product code, rendered as one card."""

    product_code: str
    copyright: str
    copyright_date: str = ""
    organizations: Tuple[Organization, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict:
        return {
            "productCode": self.product_code,
            "copyrightDate": self.copyright_date,
            "copyright": self.copyright,
            "organizations": [org.to_dict() for org in self.organizations],
        }


@dataclass(frozen=True)
class LogoAsset:
    """A downloaded organization logo, probed and scaled for a card."""

    url: str
    path: Optional[Path] = None
    format: str = ""
    natural_width: float = 0.0
    natural_height: float = 0.0
    width: float = 0.0
    height: float = 0.0

    @property
    def has_valid_path(self) -> bool:
        return self.path is not None


class Pairing(NamedTuple):
    """Product codes sharing one column of a page; `second` is empty when unpaired."""

    first: str
    second: str = ""

    @property
    def is_single(self) -> bool:
        return not self.second


def package_id(product_codes: Iterable[str]) -> str:
    """
    Build a file-name friendly identifier for a set of product codes.

    Codes are joined with "-" and any "/" is replaced with "_".
    """
    return DASH.join(code.replace(SLASH, UNDERSCORE) for code in product_codes)
