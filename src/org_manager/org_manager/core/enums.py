from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """User roles used for authorization."""

    SUPER_ADMIN = "superAdmin"
    ATTENDANCE_DEPARTMENT = "attendanceDepartment"
    EMPLOYEE = "employee"


REVIEWER_ROLES = frozenset({Role.SUPER_ADMIN, Role.ATTENDANCE_DEPARTMENT})


class AssetCategory(str, Enum):
    LAPTOP = "Laptop"
    DESKTOP = "Desktop"
    MONITOR = "Monitor"
    KEYBOARD = "Keyboard"
    MOUSE = "Mouse"
    HEADPHONES = "Headphones"
    CABLE = "Cable/Wire"
    NETWORK = "Router/Switch"
    PRINTER = "Printer"
    SCANNER = "Scanner"
    WEBCAM = "Webcam"
    HARD_DRIVE = "Hard Drive"
    RAM = "RAM"
    OTHER = "Other"


class AssetCondition(str, Enum):
    EXCELLENT = "Excellent"
    GOOD = "Good"
    FAIR = "Fair"
    POOR = "Poor"


class AssetStatus(str, Enum):
    AVAILABLE = "Available"
    ASSIGNED = "Assigned"
    UNDER_REPAIR = "Under Repair"
    DAMAGED = "Damaged"
    RETIRED = "Retired"


# Manually set statuses that win over the quantity-derived one.
HOLD_STATUSES = frozenset({AssetStatus.UNDER_REPAIR, AssetStatus.DAMAGED, AssetStatus.RETIRED})


class AssignmentStatus(str, Enum):
    ACTIVE = "Active"
    RETURNED = "Returned"
    DAMAGED = "Damaged"
    LOST = "Lost"


class LeaveStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class LeaveType(str, Enum):
    SICK = "sick"
    CASUAL = "casual"
    ANNUAL = "annual"
    UNPAID = "unpaid"
    OTHER = "other"


class AttendanceStatus(str, Enum):
    """Normalized attendance states stored in the database."""

    PRESENT = "present"
    ABSENT = "absent"
    HALF_DAY = "half-day"
    LATE = "late"
    EARLY_ARRIVAL = "early-arrival"
    LATE_EARLY_ARRIVAL = "late-early-arrival"
    PENDING = "pending"
    LEAVE = "leave"


# Statuses an employee may justify after the fact.
JUSTIFIABLE_STATUSES = frozenset(
    {
        AttendanceStatus.ABSENT,
        AttendanceStatus.HALF_DAY,
        AttendanceStatus.LATE,
        AttendanceStatus.EARLY_ARRIVAL,
        AttendanceStatus.LATE_EARLY_ARRIVAL,
    }
)


class JustificationStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class NotificationType(str, Enum):
    LEAVE_APPLIED = "leave_applied"
    LEAVE_APPROVED = "leave_approved"
    LEAVE_REJECTED = "leave_rejected"
    LEAVE_CANCELLED = "leave_cancelled"
    TICKET_CREATED = "ticket_created"
    TICKET_ASSIGNED = "ticket_assigned"
    TICKET_RESOLVED = "ticket_resolved"
    TICKET_COMMENT = "ticket_comment"
    TASK_ASSIGNED = "task_assigned"
    TASK_UPDATED = "task_updated"
    TASK_COMPLETED = "task_completed"
    TASK_COMMENT = "task_comment"
    TASK_STATUS_CHANGED = "task_status_changed"
    ATTENDANCE_MARKED = "attendance_marked"
    ATTENDANCE_UPDATED = "attendance_updated"
    ASSET_ASSIGNED = "asset_assigned"
    ASSET_RETURNED = "asset_returned"
    SALARY_GENERATED = "salary_generated"
    FEEDBACK_RECEIVED = "feedback_received"
    ANNOUNCEMENT = "announcement"
    SYSTEM = "system"
    GENERAL = "general"
    DEPARTMENT_CREATED = "department_created"
    DEPARTMENT_UPDATED = "department_updated"
    EMPLOYEE_CREATED = "employee_created"
    EMPLOYEE_UPDATED = "employee_updated"
    PASSWORD_CHANGED = "password_changed"


class ReferenceKind(str, Enum):
    """Entity kinds a notification or audit entry may point at."""

    LEAVE = "Leave"
    TICKET = "Ticket"
    TASK = "Task"
    ATTENDANCE = "Attendance"
    ASSET = "Asset"
    SALARY = "Salary"
    FEEDBACK = "Feedback"
    EMPLOYEE = "Employee"
    TODO = "Todo"
    SYSTEM = "System"


class AuditAction(str, Enum):
    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    LOGIN = "LOGIN"
    LOGOUT = "LOGOUT"
    STATUS_CHANGE = "STATUS_CHANGE"
    ASSIGN = "ASSIGN"
    UNASSIGN = "UNASSIGN"
    LEAVE_APPLIED = "LEAVE_APPLIED"
    LEAVE_UPDATED = "LEAVE_UPDATED"
    LEAVE_APPROVED = "LEAVE_APPROVED"
    LEAVE_REJECTED = "LEAVE_REJECTED"
    LEAVE_CANCELLED = "LEAVE_CANCELLED"


class TodoStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"


class FeedbackCategory(str, Enum):
    BUG = "bug"
    FEATURE = "feature"
    IMPROVEMENT = "improvement"
    OTHER = "other"


class FeedbackStatus(str, Enum):
    NEW = "new"
    IN_REVIEW = "in-review"
    RESOLVED = "resolved"
    CLOSED = "closed"


class FeedbackPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
