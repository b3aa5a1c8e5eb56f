"""
Domain dataclasses built from sqlite3.Row results.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from datetime import date
from typing import List, Optional

from Dojodesk.core.utils import parse_date

# attendance status values; None means "not marked yet"
PRESENT = "present"
ABSENT = "absent"
SICK = "sick"
ATTENDANCE_STATUSES = (PRESENT, ABSENT, SICK, None)

# derived subscription status values
STATUS_NONE = "none"
STATUS_UNPAID = "unpaid"
STATUS_EXPIRED = "expired"
STATUS_PAID = "paid"


def _from_row(cls, row, **extra):
    keys = set(row.keys()) if row is not None else set()
    names = {f.name for f in fields(cls) if f.init}
    kwargs = {k: row[k] for k in keys if k in names}
    kwargs.update(extra)
    return cls(**kwargs)


@dataclass
class Employee:
    id: int
    full_name: str
    birth_year: Optional[int] = None
    phone: Optional[str] = None
    login: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @classmethod
    def from_row(cls, row) -> "Employee":
        # password hash stays in the store
        return _from_row(cls, row)


@dataclass
class ClientParent:
    id: int
    client_id: int
    full_name: str
    phone: Optional[str] = None

    @classmethod
    def from_row(cls, row) -> "ClientParent":
        return _from_row(cls, row)


@dataclass
class Plan:
    """A named billing plan; visit_limit 0 means unlimited."""
    id: int
    name: str
    price: float
    duration_days: int
    visit_limit: int = 0
    is_active: bool = True
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @classmethod
    def from_row(cls, row) -> "Plan":
        plan = _from_row(cls, row)
        plan.is_active = bool(plan.is_active)
        return plan


@dataclass
class ClientSubscription:
    """One purchase in a client's subscription ledger."""
    id: int
    client_id: int
    subscription_id: Optional[int]
    start_date: date
    end_date: date
    visits_used: int = 0
    visits_total: int = 0
    is_paid: bool = False
    payment_date: Optional[date] = None
    subscription_name: Optional[str] = None
    subscription_price: Optional[float] = None
    client_name: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @classmethod
    def from_row(cls, row) -> "ClientSubscription":
        cs = _from_row(cls, row)
        cs.start_date = parse_date(cs.start_date)
        cs.end_date = parse_date(cs.end_date)
        cs.payment_date = parse_date(cs.payment_date) if cs.payment_date else None
        cs.is_paid = bool(cs.is_paid)
        return cs

    @property
    def is_unlimited(self) -> bool:
        return self.visits_total == 0

    @property
    def is_exhausted(self) -> bool:
        return self.visits_total > 0 and self.visits_used >= self.visits_total

    @property
    def visits_left(self) -> Optional[int]:
        if self.is_unlimited:
            return None
        return max(self.visits_total - self.visits_used, 0)


@dataclass
class Client:
    id: int
    full_name: str
    birth_date: Optional[str] = None
    birth_year: Optional[int] = None
    phone: Optional[str] = None
    last_payment_date: Optional[str] = None
    doc_type: Optional[str] = None
    doc_series: Optional[str] = None
    doc_number: Optional[str] = None
    doc_issued_by: Optional[str] = None
    doc_issued_date: Optional[str] = None
    home_address: Optional[str] = None
    workplace: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    parents: List[ClientParent] = field(default_factory=list)
    current_subscription: Optional[ClientSubscription] = None
    subscription_status: str = STATUS_NONE

    @classmethod
    def from_row(cls, row, **extra) -> "Client":
        return _from_row(cls, row, **extra)


@dataclass
class ScheduleSlot:
    id: int
    group_id: int
    day_of_week: int  # 0=Monday … 6=Sunday
    start_time: str
    end_time: str

    @classmethod
    def from_row(cls, row) -> "ScheduleSlot":
        return _from_row(cls, row)


@dataclass
class GroupMember:
    id: int
    group_id: int
    client_id: int
    joined_at: str
    full_name: Optional[str] = None
    phone: Optional[str] = None

    @classmethod
    def from_row(cls, row) -> "GroupMember":
        return _from_row(cls, row)


@dataclass
class Group:
    id: int
    name: str
    start_date: Optional[str] = None
    trainer_id: Optional[int] = None
    trainer_name: Optional[str] = None
    member_count: int = 0
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    schedule: List[ScheduleSlot] = field(default_factory=list)
    members: List[GroupMember] = field(default_factory=list)

    @classmethod
    def from_row(cls, row, **extra) -> "Group":
        return _from_row(cls, row, **extra)


@dataclass
class Lesson:
    id: int
    group_id: int
    lesson_date: date
    start_time: str
    end_time: str
    group_name: Optional[str] = None
    trainer_name: Optional[str] = None
    attendance_count: int = 0
    total_members: int = 0
    created_at: Optional[str] = None

    @classmethod
    def from_row(cls, row) -> "Lesson":
        lesson = _from_row(cls, row)
        lesson.lesson_date = parse_date(lesson.lesson_date)
        return lesson


@dataclass
class Attendance:
    id: int
    lesson_id: int
    client_id: int
    status: Optional[str] = None
    updated_at: Optional[str] = None
    client_name: Optional[str] = None
    client_phone: Optional[str] = None
    lesson_date: Optional[str] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    group_name: Optional[str] = None

    @classmethod
    def from_row(cls, row) -> "Attendance":
        return _from_row(cls, row)
