import logging

import openpyxl

from Dojodesk.core import clock
from Dojodesk.data.repos.attendance_repo import get_group_attendance_matrix
from Dojodesk.data.repos.clients_repo import get_debtors

logger = logging.getLogger(__name__)

STATUS_LABELS = {"present": "+", "absent": "-", "sick": "S"}


def export_group_attendance(group_id, year, month, file_path):
    """One sheet: a row per member, a column per lesson of the month."""
    matrix = get_group_attendance_matrix(group_id, year, month)
    lessons = matrix["lessons"]

    wb = openpyxl.Workbook()
    ws = wb.active
    ws.title = f"{int(year)}-{int(month):02d}"

    ws.cell(row=1, column=1, value="Client")
    for col, lesson in enumerate(lessons, 2):
        ws.cell(row=1, column=col, value=lesson.lesson_date.isoformat())
    ws.cell(row=1, column=len(lessons) + 2, value="Present")

    for row_idx, member in enumerate(matrix["members"], start=2):
        ws.cell(row=row_idx, column=1, value=member["client_name"])
        present = 0
        for col, lesson in enumerate(lessons, 2):
            status = matrix["attendance"].get(lesson.id, {}).get(member["client_id"])
            present += status == "present"
            ws.cell(row=row_idx, column=col, value=STATUS_LABELS.get(status))
        ws.cell(row=row_idx, column=len(lessons) + 2, value=present)

    wb.save(file_path)
    logger.info("Attendance of group %s for %s-%s exported to %s", group_id, year, month, file_path)
    return file_path


def export_debtors(file_path, today=None):
    today = clock.resolve(today)
    headers = ["Client", "Phone", "Subscription", "End date", "Visits", "Status"]

    wb = openpyxl.Workbook()
    ws = wb.active
    ws.title = "Debtors"
    for col, header in enumerate(headers, 1):
        ws.cell(row=1, column=col, value=header)

    for row_idx, client in enumerate(get_debtors(today), start=2):
        current = client.current_subscription
        ws.cell(row=row_idx, column=1, value=client.full_name)
        ws.cell(row=row_idx, column=2, value=client.phone)
        ws.cell(row=row_idx, column=3, value=(current.subscription_name or "—") if current else "—")
        ws.cell(row=row_idx, column=4, value=current.end_date.isoformat() if current else "—")
        if current is None:
            visits = "—"
        elif current.is_unlimited:
            visits = f"{current.visits_used}/∞"
        else:
            visits = f"{current.visits_used}/{current.visits_total}"
        ws.cell(row=row_idx, column=5, value=visits)
        ws.cell(row=row_idx, column=6, value=client.subscription_status)

    wb.save(file_path)
    logger.info("Debtors list (%s) exported to %s", today, file_path)
    return file_path
