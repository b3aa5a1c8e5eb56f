# tests/test_reports.py

import openpyxl

from Dojodesk import reports
from Dojodesk.data.repos import (
    attendance_repo, clients_repo, groups_repo, lessons_repo, subscriptions_repo,
)


def test_group_attendance_export(tmp_path, group, client, plan):
    groups_repo.add_member(group.id, client.id, joined_at="2025-03-01")
    subscriptions_repo.assign_subscription(client.id, plan.id, "2025-03-01", is_paid=True)
    lessons = lessons_repo.generate_from_schedule(group.id, "2025-03-03", "2025-03-09")
    attendance_repo.set_status(lessons[0].id, client.id, "present")
    attendance_repo.set_status(lessons[1].id, client.id, "sick")

    out = tmp_path / "juniors.xlsx"
    reports.export_group_attendance(group.id, 2025, 3, str(out))

    ws = openpyxl.load_workbook(out).active
    assert ws.title == "2025-03"
    assert [c.value for c in ws[1]] == ["Client", "2025-03-03", "2025-03-05", "Present"]
    assert [c.value for c in ws[2]] == ["Ivan Petrov", "+", "S", 1]


def test_debtors_export(tmp_path, db, plan):
    unpaid = clients_repo.create_client("Unpaid", phone="+7 1")
    clients_repo.create_client("No Plan")
    subscriptions_repo.assign_subscription(unpaid.id, plan.id, "2025-03-01")

    out = tmp_path / "debtors.xlsx"
    reports.export_debtors(str(out))

    rows = list(openpyxl.load_workbook(out).active.iter_rows(values_only=True))
    assert rows[0] == ("Client", "Phone", "Subscription", "End date", "Visits", "Status")
    assert rows[1] == ("No Plan", None, "—", "—", "—", "none")
    assert rows[2] == ("Unpaid", "+7 1", "Monthly 8", "2025-03-31", "0/8", "unpaid")
