"""Tests for the JSON content store."""

import json

import pytest

from copyright_sheet.config import type_codes_for
from copyright_sheet.errors import DataError
from copyright_sheet.store import JsonContentStore, parse_organization_ids


CONTENT = {
    "filesets": [
        {"product_code": "N2ENG/NIV", "type_code": "audio", "copyright": "(c) Biblica",
         "copyright_date": "2011", "organization_ids": "2, 1"},
        {"product_code": "N2ENG/NIV", "type_code": "audio_drama", "copyright": "(c) duplicate row",
         "copyright_date": "2012", "organization_ids": "1"},
        {"product_code": "N2ENG/NIV", "type_code": "video_stream", "copyright": "(c) Jesus Film",
         "copyright_date": "2003", "organization_ids": "3"},
        {"product_code": "P1PUI/LAN", "type_code": "audio_drama", "copyright": "(c) Hosanna",
         "copyright_date": "", "organization_ids": "2,99"},
    ],
    "organizations": [
        {"id": 1, "slug": "biblica", "name": "Biblica", "logo_url": "https://cdn/biblica.png"},
        {"id": 2, "slug": "hosanna", "name": "Hosanna", "logo_url": "https://cdn/hosanna.svg"},
        {"id": 3, "slug": "jesus-film", "name": "Jesus Film Project", "logo_url": ""},
    ],
}


@pytest.fixture
def store(tmp_path):
    path = tmp_path / "content.json"
    path.write_text(json.dumps(CONTENT), encoding="utf-8")
    return JsonContentStore(path)


class TestParseOrganizationIds:

    def test_parses_list(self):
        assert parse_organization_ids("12, 7,3") == [12, 7, 3]

    def test_empty(self):
        assert parse_organization_ids("") == []
        assert parse_organization_ids(None) == []

    def test_invalid_entry(self):
        with pytest.raises(DataError, match="abc"):
            parse_organization_ids("1,abc")


class TestJsonContentStore:

    def test_filters_by_mode(self, store):
        blocks = store.fetch(["N2ENG/NIV", "P1PUI/LAN"], type_codes_for("audio"))

        assert [b.product_code for b in blocks] == ["N2ENG/NIV", "P1PUI/LAN"]
        assert blocks[0].copyright == "(c) Biblica"

    def test_video_mode(self, store):
        blocks = store.fetch(["N2ENG/NIV", "P1PUI/LAN"], type_codes_for("video"))

        assert len(blocks) == 1
        assert blocks[0].organizations[0].name == "Jesus Film Project"

    def test_organizations_keep_listed_order(self, store):
        block = store.fetch(["N2ENG/NIV"], type_codes_for("audio"))[0]

        assert [org.organization_id for org in block.organizations] == [2, 1]
        assert block.organizations[1].slug == "biblica"

    def test_unknown_organization_ids_skipped(self, store):
        block = store.fetch(["P1PUI/LAN"], type_codes_for("audio"))[0]

        assert [org.name for org in block.organizations] == ["Hosanna"]

    def test_unknown_codes(self, store):
        assert store.fetch(["NOPE"], type_codes_for("audio")) == []

    def test_to_dict_uses_camel_case(self, store):
        block = store.fetch(["P1PUI/LAN"], type_codes_for("audio"))[0]

        assert block.to_dict() == {
            "productCode": "P1PUI/LAN",
            "copyrightDate": "",
            "copyright": "(c) Hosanna",
            "organizations": [{
                "organizationId": 2,
                "organizationSlug": "hosanna",
                "organizationName": "Hosanna",
                "organizationLogoUrl": "https://cdn/hosanna.svg",
            }],
        }

    def test_missing_file(self, tmp_path):
        with pytest.raises(DataError):
            JsonContentStore(tmp_path / "missing.json").fetch(["A"], ["audio"])

    def test_malformed_json(self, tmp_path):
        path = tmp_path / "content.json"
        path.write_text("{not json")

        with pytest.raises(DataError):
            JsonContentStore(path).fetch(["A"], ["audio"])

    def test_invalid_organization_record(self, tmp_path):
        path = tmp_path / "content.json"
        path.write_text(json.dumps({"filesets": [], "organizations": [{"name": "no id"}]}))

        with pytest.raises(DataError, match="organization"):
            JsonContentStore(path).fetch(["A"], ["audio"])
