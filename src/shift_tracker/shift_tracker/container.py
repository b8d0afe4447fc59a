from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Optional

from .core.constants import DEFAULT_NOTIFY_MAX_ATTEMPTS, DEFAULT_NOTIFY_RETRY_DELAY
from .database.connection import DatabaseConnection, DBConfig
from .notifications.dispatcher import NotificationDispatcher
from .notifications.mailer import EmailNotifier, SMTPConfig
from .notifications.notifier import NullNotifier, ShiftNotifier
from .shifts.mysql_shift_repository import MySQLShiftRepository
from .shifts.repository import ShiftRepository
from .shifts.service import ShiftService
from .users.mysql_user_repository import MySQLUserRepository
from .users.repository import UserRepository
from .users.service import AuthService, UserService


@dataclass(frozen=True)
class Container:
    users_repo: UserRepository
    shifts_repo: ShiftRepository
    notifier: ShiftNotifier

    auth_service: AuthService
    user_service: UserService
    shift_service: ShiftService


def build_services(
    *,
    users_repo: UserRepository,
    shifts_repo: ShiftRepository,
    notifier: Optional[ShiftNotifier] = None,
) -> Container:
    notifier = notifier or NullNotifier()
    return Container(
        users_repo=users_repo,
        shifts_repo=shifts_repo,
        notifier=notifier,
        auth_service=AuthService(users_repo),
        user_service=UserService(users_repo),
        shift_service=ShiftService(shifts_repo, users_repo, notifier=notifier),
    )


def build_notifier(smtp_config: Optional[Mapping], *, max_attempts: int, retry_delay: float) -> ShiftNotifier:
    config = SMTPConfig.from_mapping(smtp_config or {})
    if config is None:
        return NullNotifier()
    return NotificationDispatcher(EmailNotifier(config), max_attempts=max_attempts, retry_delay=retry_delay)


def build_container(
    *,
    db_config: Mapping,
    smtp_config: Optional[Mapping] = None,
    notify_max_attempts: int = DEFAULT_NOTIFY_MAX_ATTEMPTS,
    notify_retry_delay: float = DEFAULT_NOTIFY_RETRY_DELAY,
) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_mapping(db_config))
    return build_services(
        users_repo=MySQLUserRepository(conn),
        shifts_repo=MySQLShiftRepository(conn),
        notifier=build_notifier(smtp_config, max_attempts=notify_max_attempts, retry_delay=notify_retry_delay),
    )
