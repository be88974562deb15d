# src/otpvault/common/exporter.py
import json
import csv
from pathlib import Path
from datetime import datetime
from typing import Dict, List, Any, Sequence

from otpvault.common.models import Credential
from otpvault.importer.uri import build_credential_uri

VERSION = "0.1.0"
CSV_FIELDS = ["label", "account", "type", "algorithm", "digits", "period", "counter", "secret", "uri"]


class DataExporter:
    """Writes imported accounts as a json / csv / md / txt report."""

    def __init__(self, banner: str = ""):
        self.banner = banner.strip() if banner else ""
        self.timestamp = datetime.now().strftime('%Y-%m-%d %H:%M:%S')

    def export(self, credentials: Sequence[Credential], output_path: Path, fmt: str):
        if not credentials:
            return

        rows = [self._to_row(c) for c in credentials]
        fmt = fmt.lower()
        if fmt == "json": self._to_json(rows, output_path)
        elif fmt == "csv": self._to_csv(rows, output_path)
        elif fmt == "md": self._to_markdown(rows, output_path)
        elif fmt == "txt": self._to_text(rows, output_path)
        else:
            raise ValueError(f"Unsupported export format: {fmt}")

    @staticmethod
    def _to_row(cred: Credential) -> Dict[str, Any]:
        row = cred.to_dict()
        row["uri"] = build_credential_uri(cred)
        return row

    def _to_json(self, rows: List[Dict], path: Path):
        payload = {
            "metadata": {"generated_at": self.timestamp, "version": VERSION, "count": len(rows)},
            "accounts": rows,
        }
        path.write_text(json.dumps(payload, indent=4, ensure_ascii=False), encoding='utf-8')

    def _to_csv(self, rows: List[Dict], path: Path):
        with open(path, "w", newline="", encoding="utf-8-sig") as f:
            writer = csv.DictWriter(f, fieldnames=CSV_FIELDS, extrasaction="ignore")
            writer.writeheader()
            writer.writerows(rows)

    def _to_markdown(self, rows: List[Dict], path: Path):
        lines = [f"```\n{self.banner}\n```\n" if self.banner else "# otpvault Account Report"]
        lines.append(f"> **Export Time**: `{self.timestamp}`  \n> **Accounts**: {len(rows)}\n")

        for i, row in enumerate(rows, 1):
            title = row["label"] if not row["account"] else f"{row['label']} ({row['account']})"
            lines.append(f"\n### {i}. {title}")
            for k, v in row.items():
                # Title fields are already in the heading
                if v in ("", None) or k in ("label", "account"):
                    continue
                label = k.replace('_', ' ').title()
                if k in ("secret", "uri"):
                    lines.append(f"- **{label}**: 🔐 `{v}`")
                else:
                    lines.append(f"- **{label}**: {v}")
            lines.append("\n---")
        path.write_text("\n".join(lines), encoding='utf-8')

    def _to_text(self, rows: List[Dict], path: Path):
        lines = [self.banner if self.banner else "OTPVAULT REPORT"]
        lines.append(f"Export Time: {self.timestamp}\n" + "=" * 40)
        for row in rows:
            lines.append("-" * 30)
            for k, v in row.items():
                label = k.replace('_', ' ').title()
                lines.append(f"{label:<18}: {v}")
        path.write_text("\n".join(lines), encoding='utf-8')
