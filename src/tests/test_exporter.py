# src/tests/test_exporter.py
import csv
import json

import pytest

from otpvault.common.exporter import DataExporter
from otpvault.common.models import Credential
from otpvault.importer.uri import parse_credential_uri


@pytest.fixture
def credentials():
    return [
        Credential(label="GitHub", account="octocat", secret=b"Hello!\xde\xad\xbe\xef"),
        Credential(label="Bank", secret=b"password", digits=8),
    ]


def test_json_export_keeps_reloadable_uris(tmp_path, credentials):
    out = tmp_path / "accounts.json"
    DataExporter().export(credentials, out, "json")

    data = json.loads(out.read_text(encoding="utf-8"))
    assert data["metadata"]["count"] == 2
    assert data["accounts"][0]["secret"] == "JBSWY3DPEHPK3PXP"
    assert [parse_credential_uri(row["uri"]) for row in data["accounts"]] == credentials


def test_csv_export(tmp_path, credentials):
    out = tmp_path / "accounts.csv"
    DataExporter().export(credentials, out, "csv")

    with open(out, newline="", encoding="utf-8-sig") as f:
        rows = list(csv.DictReader(f))
    assert [r["label"] for r in rows] == ["GitHub", "Bank"]
    assert rows[1]["digits"] == "8"


def test_markdown_and_text_export(tmp_path, credentials):
    md = tmp_path / "accounts.md"
    txt = tmp_path / "accounts.txt"
    exporter = DataExporter(banner="REPORT")
    exporter.export(credentials, md, "md")
    exporter.export(credentials, txt, "txt")

    md_text = md.read_text(encoding="utf-8")
    assert "### 1. GitHub (octocat)" in md_text
    assert "`JBSWY3DPEHPK3PXP`" in md_text
    assert txt.read_text(encoding="utf-8").startswith("REPORT")


def test_export_rejects_unknown_format(tmp_path, credentials):
    with pytest.raises(ValueError, match="Unsupported export format"):
        DataExporter().export(credentials, tmp_path / "out.xml", "xml")


def test_empty_export_writes_nothing(tmp_path):
    out = tmp_path / "empty.json"
    DataExporter().export([], out, "json")
    assert not out.exists()
