"""Tests for the command line entry point."""

import json
import logging

import pytest

from copyright_sheet.__main__ import get_file_size_str, main


@pytest.fixture(autouse=True)
def isolated(monkeypatch, tmp_path):
    monkeypatch.setenv("COPYRIGHT_SCRATCH_DIR", str(tmp_path / "scratch"))
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def content_file(tmp_path):
    path = tmp_path / "content.json"
    path.write_text(json.dumps({
        "filesets": [
            {"product_code": "N2ENG/NIV", "type_code": "audio", "copyright": "(c) Biblica",
             "copyright_date": "2011", "organization_ids": "1"},
            {"product_code": "P1PUI/LAN", "type_code": "audio_drama", "copyright": "(c) Hosanna",
             "copyright_date": "1998", "organization_ids": ""},
        ],
        "organizations": [{"id": 1, "name": "Biblica", "logo_url": ""}],
    }))
    return path


def test_build_writes_pdf(content_file, tmp_path):
    output = tmp_path / "out" / "sheet.pdf"

    status = main([
        "build",
        "--content", str(content_file),
        "--product", "N2ENG/NIV",
        "--product", "P1PUI/LAN",
        "--output", str(output),
    ])

    assert status == 0
    assert output.read_bytes().startswith(b"%PDF-")


def test_build_without_matches_fails(content_file, tmp_path):
    output = tmp_path / "sheet.pdf"

    status = main([
        "build",
        "--content", str(content_file),
        "--product", "N2ENG/NIV",
        "--mode", "video",
        "--output", str(output),
    ])

    assert status == 1
    assert not output.exists()


def test_build_with_missing_content_fails(tmp_path):
    status = main([
        "build",
        "--content", str(tmp_path / "missing.json"),
        "--product", "A",
        "--output", str(tmp_path / "sheet.pdf"),
    ])

    assert status == 1


def test_no_command_prints_help(capsys):
    assert main([]) == 2


def test_file_size_str(tmp_path):
    small = tmp_path / "small.bin"
    small.write_bytes(b"x" * 2048)
    big = tmp_path / "big.bin"
    big.write_bytes(b"x" * (3 * 1024 * 1024))

    assert get_file_size_str(small) == "2.0 KB"
    assert get_file_size_str(big) == "3.0 MB"
