from __future__ import annotations

import logging
import smtplib
from dataclasses import dataclass
from datetime import datetime, timedelta
from email.message import EmailMessage
from html import escape
from typing import Callable, Mapping, Optional

from ..common.datetime_utils import format_duration
from ..shifts.accounting import compute_break_time
from ..shifts.model import Location, ShiftState
from ..users.model import User
from .notifier import ShiftNotifier

logger = logging.getLogger(__name__)

APP_NAME = "ShiftTracker"

_HTML_WRAPPER = '<div style="font-family: Arial, sans-serif; line-height: 1.6; color: #333;">{body}</div>'
_HTML_PANEL = (
    '<div style="margin: 20px 0; padding: 15px; background-color: #f0f9ff; '
    'border-left: 4px solid #0284c7; border-radius: 4px;">{body}</div>'
)


@dataclass(frozen=True)
class SMTPConfig:
    host: str
    port: int = 587
    user: Optional[str] = None
    password: Optional[str] = None
    sender: Optional[str] = None
    use_tls: bool = True

    @classmethod
    def from_mapping(cls, smtp_config: Mapping) -> Optional["SMTPConfig"]:
        """None when no SMTP host is configured."""
        host = (smtp_config or {}).get("host")
        if not host:
            return None
        return cls(
            host=str(host),
            port=int(smtp_config.get("port", 587)),
            user=smtp_config.get("user") or None,
            password=smtp_config.get("password") or None,
            sender=smtp_config.get("sender") or smtp_config.get("user") or None,
            use_tls=bool(smtp_config.get("use_tls", True)),
        )


def _fmt_time(value: datetime) -> str:
    return value.strftime("%Y-%m-%d %H:%M:%S")


def _fmt_location(location: Location) -> str:
    return f"Latitude {location.latitude:.6f}, Longitude {location.longitude:.6f}"


def shift_started_content(user: User, shift: ShiftState) -> tuple[str, str, str]:
    """(subject, text, html) for a shift-start confirmation."""
    started = _fmt_time(shift.interval.start)
    location = _fmt_location(shift.start_location)
    subject = f"Shift Started - {APP_NAME}"
    text = (
        f"Hello {user.name},\n\n"
        f"This is a confirmation that your shift has started at {started}.\n\n"
        f"Location: {location}\n\n"
        f"Thank you for using {APP_NAME}!\n"
    )
    html = _HTML_WRAPPER.format(
        body=(
            '<h2 style="color: #0284c7;">Shift Started</h2>'
            f"<p>Hello <strong>{escape(user.name)}</strong>,</p>"
            f"<p>This is a confirmation that your shift has started at <strong>{started}</strong>.</p>"
            + _HTML_PANEL.format(body=f'<p style="margin: 0;"><strong>Location:</strong> {location}</p>')
            + f"<p>Thank you for using {APP_NAME}!</p>"
        )
    )
    return subject, text, html


def shift_ended_content(user: User, shift: ShiftState) -> tuple[str, str, str]:
    """(subject, text, html) for a shift-end summary."""
    start = shift.interval.start
    end = shift.interval.end
    duration = end - start
    break_time = compute_break_time(shift, end)
    if shift.total_working_time is not None:
        working = timedelta(milliseconds=shift.total_working_time)
    else:
        working = duration - break_time

    summary = [
        ("Start Time", _fmt_time(start)),
        ("End Time", _fmt_time(end)),
        ("Total Duration", format_duration(duration)),
        ("Break Time", format_duration(break_time) if shift.breaks else "None"),
        ("Working Time", format_duration(working)),
    ]

    subject = f"Shift Ended - {APP_NAME}"
    text = (
        f"Hello {user.name},\n\n"
        f"This is a confirmation that your shift has ended at {_fmt_time(end)}.\n\n"
        "Shift Summary:\n"
        + "".join(f"- {label}: {value}\n" for label, value in summary)
        + f"\nThank you for using {APP_NAME}!\n"
    )
    html = _HTML_WRAPPER.format(
        body=(
            '<h2 style="color: #0284c7;">Shift Ended</h2>'
            f"<p>Hello <strong>{escape(user.name)}</strong>,</p>"
            f"<p>This is a confirmation that your shift has ended at <strong>{_fmt_time(end)}</strong>.</p>"
            + _HTML_PANEL.format(
                body='<h3 style="margin-top: 0; color: #0284c7;">Shift Summary</h3>'
                + "".join(f"<p><strong>{label}:</strong> {value}</p>" for label, value in summary)
            )
            + f"<p>Thank you for using {APP_NAME}!</p>"
        )
    )
    return subject, text, html


class EmailNotifier(ShiftNotifier):
    """Sends shift confirmations over SMTP. Raises on transport failure."""

    def __init__(self, config: SMTPConfig, *, smtp_factory: Callable[..., smtplib.SMTP] = smtplib.SMTP):
        self._config = config
        self._smtp_factory = smtp_factory

    def build_message(self, to: str, subject: str, text: str, html: str) -> EmailMessage:
        msg = EmailMessage()
        msg["Subject"] = subject
        msg["From"] = f'"{APP_NAME}" <{self._config.sender}>'
        msg["To"] = to
        msg.set_content(text)
        msg.add_alternative(html, subtype="html")
        return msg

    def send(self, msg: EmailMessage) -> None:
        with self._smtp_factory(self._config.host, self._config.port, timeout=30) as smtp:
            if self._config.use_tls:
                smtp.starttls()
            if self._config.user:
                smtp.login(self._config.user, self._config.password or "")
            smtp.send_message(msg)
        logger.info("Email %r sent to %s", msg["Subject"], msg["To"])

    def shift_started(self, user: User, shift: ShiftState) -> None:
        self.send(self.build_message(user.email, *shift_started_content(user, shift)))

    def shift_ended(self, user: User, shift: ShiftState) -> None:
        self.send(self.build_message(user.email, *shift_ended_content(user, shift)))
