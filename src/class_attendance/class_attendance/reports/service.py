from __future__ import annotations

import io
import re
from contextlib import nullcontext
from dataclasses import dataclass
from typing import Callable, ContextManager, Iterable, Optional, Sequence

import pandas as pd
import qrcode

from ..attendance.model import AttendanceRecord
from ..attendance.repository import AttendanceRepository
from ..core.constants import EXPORT_COLUMNS
from ..core.exceptions import ValidationError
from ..sessions.model import ClassSession
from ..sessions.repository import SessionRepository

XLSX_MIMETYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

_COLUMN_WIDTHS = [14, 25, 16, 30, 8, 9, 9, 30, 12, 10]


def natural_key(value: str) -> tuple:
    """'2046UGCM9' sorts before '2046UGCM10'."""
    return tuple(int(part) if part.isdigit() else part.lower() for part in re.split(r"(\d+)", value or ""))


def safe_filename(name: str) -> str:
    return re.sub(r"[^a-zA-Z0-9]", "_", name)


@dataclass(frozen=True)
class ExportFile:
    filename: str
    content: bytes
    mimetype: str = XLSX_MIMETYPE


class ReportService:
    """Read side: response tables, spreadsheet exports and session QR codes."""

    def __init__(
        self,
        attendance: AttendanceRepository,
        sessions: SessionRepository,
        *,
        transaction: Optional[Callable[[], ContextManager]] = None,
    ):
        self._attendance = attendance
        self._sessions = sessions
        self._transaction = transaction or nullcontext

    def responses(
        self,
        *,
        session_name: Optional[str] = None,
        session_id: Optional[int] = None,
    ) -> dict:
        """Rows for one session: by id, else by name, else the current active session."""

        with self._transaction():
            session = self._pick_session(session_name=session_name, session_id=session_id)
            records = self._attendance.list_for_sessions([session.session_id]) if session else []
            rows = self._rows(records)

        return {"responses": rows, "count": len(rows), "headers": list(EXPORT_COLUMNS)}

    def export_for_session_name(self, session_name: Optional[str] = None) -> ExportFile:
        with self._transaction():
            if session_name:
                session = self._sessions.find_latest_by_name(session_name)
                records = self._attendance.list_for_sessions([session.session_id]) if session else []
            else:
                records = self._attendance.list_all()
            rows = self._rows(records)

        filename = f"Attendance_{safe_filename(session_name)}.xlsx" if session_name else "Attendance_All.xlsx"
        return ExportFile(filename=filename, content=self.build_workbook(rows))

    def export_for_ids(self, session_ids: Iterable[int]) -> ExportFile:
        ids = [int(i) for i in session_ids]
        if not ids:
            raise ValidationError("Select at least one session to export")
        with self._transaction():
            rows = self._rows(self._attendance.list_for_sessions(ids))
        return ExportFile(filename=f"Attendance_{len(ids)}_sessions.xlsx", content=self.build_workbook(rows))

    @staticmethod
    def build_workbook(rows: Sequence[dict]) -> bytes:
        """Single 'Attendance' sheet with the fixed column order; header-only when empty."""

        df = pd.DataFrame(list(rows), columns=EXPORT_COLUMNS)
        out = io.BytesIO()
        with pd.ExcelWriter(out, engine="openpyxl") as writer:
            df.to_excel(writer, index=False, sheet_name="Attendance")
            sheet = writer.sheets["Attendance"]
            for idx, width in enumerate(_COLUMN_WIDTHS):
                sheet.column_dimensions[chr(ord("A") + idx)].width = width
        return out.getvalue()

    @staticmethod
    def qr_png(data: str) -> bytes:
        qr = qrcode.QRCode(
            version=1,
            error_correction=qrcode.constants.ERROR_CORRECT_L,
            box_size=10,
            border=2,
        )
        qr.add_data(data)
        qr.make(fit=True)

        img = qr.make_image(fill_color="black", back_color="white")
        buf = io.BytesIO()
        img.save(buf)
        return buf.getvalue()

    def _pick_session(self, *, session_name: Optional[str], session_id: Optional[int]) -> Optional[ClassSession]:
        if session_id is not None:
            return self._sessions.get_by_id(int(session_id))
        if session_name:
            return self._sessions.find_latest_by_name(session_name)
        active = sorted(self._sessions.list_active(), key=lambda s: s.session_id, reverse=True)
        return active[0] if active else None

    def _rows(self, records: Iterable[AttendanceRecord]) -> list[dict]:
        names = {s.session_id: s.name for s in self._sessions.list_all()}
        ordered = sorted(records, key=lambda r: (natural_key(r.roll_number), r.submitted_at))
        return [
            {
                "Roll No": r.roll_no,
                "Name": r.name,
                "Reg No": r.reg_no,
                "Email": r.email,
                "Year": r.year,
                "Program": r.program,
                "Branch": r.branch,
                "Session": names.get(r.session_id, "Unknown"),
                "Date": r.date,
                "Time": r.time,
            }
            for r in ordered
        ]
