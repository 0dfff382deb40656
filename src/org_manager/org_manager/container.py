from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .assets.analytics import AssetAnalyticsService
from .assets.mysql_asset_repository import MySQLAssetRepository
from .assets.repository import AssetRepository
from .assets.service import AssetService
from .attendance.factory import AttendanceStrategyFactory
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .audit.mysql_audit_repository import MySQLAuditRepository
from .audit.repository import AuditRepository
from .audit.service import AuditService
from .core.constants import DEFAULT_ASSET_WRITE_RETRIES
from .database.connection import DBConfig, DatabaseConnection
from .employees.mysql_employee_repository import MySQLEmployeeRepository
from .employees.repository import EmployeeRepository
from .employees.service import AuthService, EmployeeService
from .feedback.mysql_feedback_repository import MySQLFeedbackRepository
from .feedback.repository import FeedbackRepository
from .feedback.service import FeedbackService
from .leaves.mysql_leave_repository import MySQLLeaveRepository
from .leaves.repository import LeaveRepository
from .leaves.service import LeaveService
from .notifications.mysql_notification_repository import MySQLNotificationRepository
from .notifications.repository import NotificationRepository
from .notifications.service import NotificationService
from .settings.mysql_settings_repository import MySQLSettingsRepository
from .settings.repository import SettingsRepository
from .settings.service import SettingsService
from .sideeffects.outbox import SideEffectDispatcher
from .todos.mysql_todo_repository import MySQLTodoRepository
from .todos.repository import TodoRepository
from .todos.service import TodoService


@dataclass(frozen=True)
class Repositories:
    employees: EmployeeRepository
    assets: AssetRepository
    leaves: LeaveRepository
    attendance: AttendanceRepository
    notifications: NotificationRepository
    audit: AuditRepository
    todos: TodoRepository
    feedback: FeedbackRepository
    settings: SettingsRepository


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]
    repos: Repositories

    notification_service: NotificationService
    audit_service: AuditService
    effects: SideEffectDispatcher
    auth_service: AuthService
    employee_service: EmployeeService
    asset_service: AssetService
    asset_analytics_service: AssetAnalyticsService
    leave_service: LeaveService
    settings_service: SettingsService
    attendance_service: AttendanceService
    todo_service: TodoService
    feedback_service: FeedbackService


def wire(
    repos: Repositories,
    *,
    conn: Optional[DatabaseConnection] = None,
    asset_write_retries: int = DEFAULT_ASSET_WRITE_RETRIES,
) -> Container:
    """Build every service on top of the given repositories."""
    notification_service = NotificationService(repos.notifications)
    audit_service = AuditService(repos.audit)
    effects = SideEffectDispatcher(notification_service, audit_service)
    settings_service = SettingsService(repos.settings, effects)

    return Container(
        conn=conn,
        repos=repos,
        notification_service=notification_service,
        audit_service=audit_service,
        effects=effects,
        auth_service=AuthService(repos.employees, effects),
        employee_service=EmployeeService(repos.employees, effects),
        asset_service=AssetService(repos.assets, repos.employees, effects, write_retries=asset_write_retries),
        asset_analytics_service=AssetAnalyticsService(repos.assets, repos.employees),
        leave_service=LeaveService(repos.leaves, repos.employees, effects),
        settings_service=settings_service,
        attendance_service=AttendanceService(
            repos.attendance,
            repos.employees,
            settings_service,
            effects,
            strategy_factory=AttendanceStrategyFactory(),
        ),
        todo_service=TodoService(repos.todos, effects),
        feedback_service=FeedbackService(repos.feedback, repos.employees, effects),
    )


def build_container(*, db_config: dict, asset_write_retries: int = DEFAULT_ASSET_WRITE_RETRIES) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))
    repos = Repositories(
        employees=MySQLEmployeeRepository(conn),
        assets=MySQLAssetRepository(conn),
        leaves=MySQLLeaveRepository(conn),
        attendance=MySQLAttendanceRepository(conn),
        notifications=MySQLNotificationRepository(conn),
        audit=MySQLAuditRepository(conn),
        todos=MySQLTodoRepository(conn),
        feedback=MySQLFeedbackRepository(conn),
        settings=MySQLSettingsRepository(conn),
    )
    return wire(repos, conn=conn, asset_write_retries=asset_write_retries)
