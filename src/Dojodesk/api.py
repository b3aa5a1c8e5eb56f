"""Channel table for the UI shell.

Every engine operation is reachable as HANDLERS["<area>:<action>"]; the shell
calls dispatch() and maps DojodeskError subclasses to its own messages.
"""
import logging

from Dojodesk import reports
from Dojodesk.core.errors import NotFound
from Dojodesk.data.repos import (
    attendance_repo,
    clients_repo,
    employees_repo,
    groups_repo,
    lessons_repo,
    settings_repo,
    subscriptions_repo,
)

logger = logging.getLogger(__name__)

HANDLERS = {
    # clients
    "clients:getAll": clients_repo.fetch_clients,
    "clients:search": clients_repo.search_clients,
    "clients:getById": clients_repo.get_client_by_id,
    "clients:create": clients_repo.create_client,
    "clients:update": clients_repo.update_client,
    "clients:updatePaymentDate": clients_repo.update_payment_date,
    "clients:delete": clients_repo.delete_client,
    "clients:getDebtors": clients_repo.get_debtors,
    "clients:addParent": clients_repo.add_parent,
    "clients:removeParent": clients_repo.remove_parent,

    # employees
    "employees:getAll": employees_repo.fetch_employees,
    "employees:getById": employees_repo.get_employee_by_id,
    "employees:create": employees_repo.create_employee,
    "employees:update": employees_repo.update_employee,
    "employees:delete": employees_repo.delete_employee,
    "auth:login": employees_repo.authenticate,

    # subscription plans and the assignment ledger
    "subscriptions:getAll": subscriptions_repo.fetch_plans,
    "subscriptions:getActive": subscriptions_repo.fetch_active_plans,
    "subscriptions:getById": subscriptions_repo.get_plan_by_id,
    "subscriptions:create": subscriptions_repo.create_plan,
    "subscriptions:update": subscriptions_repo.update_plan,
    "subscriptions:delete": subscriptions_repo.delete_plan,
    "subscriptions:assign": subscriptions_repo.assign_subscription,
    "subscriptions:markPaid": subscriptions_repo.mark_paid,
    "subscriptions:incrementVisit": subscriptions_repo.increment_visit,
    "subscriptions:getClientSubscriptions": subscriptions_repo.fetch_client_subscriptions,
    "subscriptions:getActiveForClient": subscriptions_repo.get_active_for_client,
    "subscriptions:getCurrentForClient": subscriptions_repo.get_current_for_client,
    "subscriptions:getClientStatus": subscriptions_repo.get_client_status,
    "subscriptions:removeClientSubscription": subscriptions_repo.remove_client_subscription,
    "subscriptions:getUnpaid": subscriptions_repo.get_unpaid,
    "subscriptions:getExpiringSoon": subscriptions_repo.get_expiring_soon,

    # groups, schedule and membership
    "groups:getAll": groups_repo.fetch_groups,
    "groups:getById": groups_repo.get_group_by_id,
    "groups:getByTrainer": groups_repo.fetch_groups_by_trainer,
    "groups:create": groups_repo.create_group,
    "groups:update": groups_repo.update_group,
    "groups:delete": groups_repo.delete_group,
    "groups:addSchedule": groups_repo.add_schedule,
    "groups:updateSchedule": groups_repo.update_schedule,
    "groups:removeSchedule": groups_repo.remove_schedule,
    "groups:getScheduleForDay": groups_repo.get_schedule_for_day,
    "groups:addMember": groups_repo.add_member,
    "groups:removeMember": groups_repo.remove_member,

    # lessons
    "lessons:getAll": lessons_repo.fetch_lessons,
    "lessons:getById": lessons_repo.get_lesson_by_id,
    "lessons:getByDate": lessons_repo.get_lessons_by_date,
    "lessons:getToday": lessons_repo.get_today_lessons,
    "lessons:getByGroupAndMonth": lessons_repo.get_lessons_by_group_and_month,
    "lessons:create": lessons_repo.create_lesson,
    "lessons:generateFromSchedule": lessons_repo.generate_from_schedule,
    "lessons:delete": lessons_repo.delete_lesson,

    # attendance
    "attendance:getByLesson": attendance_repo.get_for_lesson,
    "attendance:updateStatus": attendance_repo.set_status,
    "attendance:getClientAttendance": attendance_repo.get_history_for_client,
    "attendance:getStatsByGroup": attendance_repo.get_stats_by_group,
    "attendance:getGroupMatrix": attendance_repo.get_group_attendance_matrix,

    # settings
    "settings:get": settings_repo.get_setting,
    "settings:set": settings_repo.set_setting,

    # reports
    "reports:exportGroupAttendance": reports.export_group_attendance,
    "reports:exportDebtors": reports.export_debtors,
}


def dispatch(channel, *args, **kwargs):
    handler = HANDLERS.get(channel)
    if handler is None:
        logger.warning("⛔️ Unknown channel: %s", channel)
        raise NotFound(f"unknown channel {channel!r}")
    logger.debug("dispatch %s", channel)
    return handler(*args, **kwargs)
