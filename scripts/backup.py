"""Backup the JSON data file.

Note: The copy is taken through JsonStore, so a corrupt data file fails here
instead of producing a backup that cannot be restored.
"""

from __future__ import annotations

import importlib
import json
from datetime import datetime
from pathlib import Path

from config import get_settings_module

from src.class_attendance.class_attendance.database.json_store import JsonStore


def backup(data_path: Path, out_dir: Path, now: datetime | None = None) -> Path:
    out_dir.mkdir(parents=True, exist_ok=True)
    ts = (now or datetime.now()).strftime("%Y%m%d_%H%M%S")
    out_file = out_dir / f"attendance_data_{ts}.json"

    doc = JsonStore(data_path).snapshot()
    out_file.write_text(json.dumps(doc, indent=2, ensure_ascii=False), encoding="utf-8")
    return out_file


def main() -> None:
    settings = importlib.import_module(get_settings_module())
    data_path = Path(settings.DATA_PATH)
    if not data_path.exists():
        raise SystemExit(f"Data file not found: {data_path}")

    out_file = backup(data_path, Path(__file__).resolve().parents[1] / "backups")
    print(f"OK: Backup created: {out_file}")


if __name__ == "__main__":
    main()
