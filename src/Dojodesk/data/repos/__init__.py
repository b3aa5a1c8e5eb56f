"""Repositories: one module per table family, plain functions over tx()/read()."""

from .settings_repo import set_setting, get_setting, get_setting_int
from .subscriptions_repo import (
	fetch_plans, fetch_active_plans, get_plan_by_id, create_plan, update_plan, delete_plan,
	assign_subscription, mark_paid, increment_visit, fetch_client_subscriptions,
	get_current_for_client, get_active_for_client, get_client_status,
	remove_client_subscription, get_unpaid, get_expiring_soon
)
from .clients_repo import (
	create_client, get_client_by_id, update_client, update_payment_date, delete_client,
	fetch_clients, search_clients, get_debtors, add_parent, remove_parent
)
from .employees_repo import (
	fetch_employees, get_employee_by_id, create_employee, update_employee, delete_employee,
	authenticate
)
from .groups_repo import (
	get_group_by_id, fetch_groups, fetch_groups_by_trainer, create_group, update_group,
	delete_group, add_schedule, update_schedule, remove_schedule, get_schedule_for_day,
	add_member, remove_member
)
from .lessons_repo import (
	get_lesson_by_id, create_lesson, generate_from_schedule, delete_lesson, fetch_lessons,
	get_lessons_by_date, get_today_lessons, get_lessons_by_group_and_month
)
from .attendance_repo import (
	get_for_lesson, set_status, get_history_for_client, get_stats_by_group,
	get_group_attendance_matrix
)
