from __future__ import annotations

import base64
import binascii
import csv
import io
import logging
from datetime import datetime
from typing import Optional, Sequence

import qrcode
from openpyxl import Workbook
from openpyxl.drawing.image import Image as XLImage
from openpyxl.styles import Font, PatternFill
from PIL import Image, UnidentifiedImageError

from ..attendance.model import RosterRow
from ..common.datetime_utils import format_date, format_time, utc_now
from ..core.constants import SHARE_SUMMARY_LIMIT
from ..sessions.model import AttendanceSession

logger = logging.getLogger(__name__)

HISTORY_HEADERS = ["Date", "Course Code", "PIN", "Status"]
REGISTRY_HEADERS = ["#", "Full Student Name", "Matriculation No", "Time Signed", "Digital Signature"]

_HEADER_FILL = PatternFill("solid", fgColor="4F46E5")
_SIGNATURE_SIZE = (72, 36)


def decode_signature(signature: str) -> Optional[bytes]:
    """Return PNG bytes of a base64 / data-URL signature, or None when it does not decode."""

    if not signature:
        return None
    payload = signature.split(",", 1)[1] if signature.startswith("data:") else signature
    try:
        raw = base64.b64decode(payload, validate=True)
        with Image.open(io.BytesIO(raw)) as img:
            img.load()
            out = io.BytesIO()
            img.convert("RGBA").save(out, format="PNG")
            return out.getvalue()
    except (binascii.Error, ValueError, UnidentifiedImageError, OSError):
        return None


class ExportService:
    """Export surfaces around the core: CSV history, registry workbook, QR and share text."""

    def session_history_csv(self, sessions: Sequence[AttendanceSession]) -> bytes:
        out = io.StringIO()
        writer = csv.writer(out)
        writer.writerow(HISTORY_HEADERS)
        for s in sessions:
            writer.writerow([format_date(s.created_at), s.course_code, s.unique_code, "Active" if s.is_active else "Closed"])
        return out.getvalue().encode("utf-8-sig")

    def history_filename(self, department: str, *, today: datetime | None = None) -> str:
        day = format_date(today or utc_now())
        return f"Session_History_{department.replace(' ', '_')}_{day}.csv"

    def attendance_registry_xlsx(
        self,
        session: AttendanceSession,
        roster: Sequence[RosterRow],
        *,
        exported_at: datetime | None = None,
    ) -> bytes:
        wb = Workbook()
        ws = wb.active
        ws.title = "Attendance"

        ws.append(["OFFICIAL ATTENDANCE LOG"])
        ws["A1"].font = Font(size=16, bold=True, color="4F46E5")
        ws.append([f"Course: {session.course_code}"])
        ws.append([f"Department: {session.department}"])
        ws.append([f"Date Created: {format_date(session.created_at)}"])
        ws.append([f"Exported: {(exported_at or utc_now()).strftime('%Y-%m-%d %H:%M')}"])
        ws.append([])

        ws.append(REGISTRY_HEADERS)
        header_row = ws.max_row
        for cell in ws[header_row]:
            cell.font = Font(bold=True, color="FFFFFF")
            cell.fill = _HEADER_FILL

        for width, col in zip((6, 32, 22, 14, 16), "ABCDE"):
            ws.column_dimensions[col].width = width

        for index, row in enumerate(roster, start=1):
            ws.append([index, row.full_name, row.matric_no, format_time(row.signed_at), ""])
            png = decode_signature(row.signature)
            if png is None:
                if row.signature:
                    logger.warning("Signature of student %s could not be decoded", row.student_id)
                continue
            image = XLImage(io.BytesIO(png))
            image.width, image.height = _SIGNATURE_SIZE
            ws.add_image(image, f"E{ws.max_row}")
            ws.row_dimensions[ws.max_row].height = 30

        out = io.BytesIO()
        wb.save(out)
        return out.getvalue()

    def registry_filename(self, session: AttendanceSession) -> str:
        return f"{session.course_code}_Attendance_Registry.xlsx"

    def join_qr_png(self, join_url: str) -> bytes:
        qr = qrcode.QRCode(
            version=1,
            error_correction=qrcode.constants.ERROR_CORRECT_L,
            box_size=10,
            border=2,
        )
        qr.add_data(join_url)
        qr.make(fit=True)

        img = qr.make_image(fill_color="black", back_color="white")
        buf = io.BytesIO()
        img.save(buf, format="PNG")
        return buf.getvalue()

    def share_text(self, session: AttendanceSession, join_url: str) -> str:
        return (
            f"Attendance PIN for {session.course_code or 'Class'}\n"
            f"PIN: {session.unique_code}\n"
            f"Fast Join: {join_url}"
        )

    def department_summary(self, department: str, sessions: Sequence[AttendanceSession]) -> str:
        lines = [f"Attendance Summary for {department}", ""]
        for s in sessions[:SHARE_SUMMARY_LIMIT]:
            lines.append(f"- {s.course_code}: PIN {s.unique_code} ({format_date(s.created_at)})")
        if len(sessions) > SHARE_SUMMARY_LIMIT:
            lines.append(f"...and {len(sessions) - SHARE_SUMMARY_LIMIT} more sessions.")
        return "\n".join(lines)
