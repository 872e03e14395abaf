from fastapi_mail import FastMail, MessageSchema, ConnectionConfig, MessageType
import datetime
import logging

import config
from analytics import CRITICAL_SEVERITIES

logger = logging.getLogger(__name__)

conf = ConnectionConfig(
    MAIL_USERNAME = config.MAIL_USERNAME,
    MAIL_PASSWORD = config.MAIL_PASSWORD,
    MAIL_FROM = config.MAIL_FROM,
    MAIL_PORT = config.MAIL_PORT,
    MAIL_SERVER = config.MAIL_SERVER,
    MAIL_STARTTLS = False,
    MAIL_SSL_TLS = True,
    USE_CREDENTIALS = True,
    VALIDATE_CERTS = True
)


def format_time_ago(moment, now=None):
    now = now or datetime.datetime.utcnow()
    minutes = int((now - moment).total_seconds() // 60)
    if minutes < 1:
        return "Just now"
    if minutes < 60:
        return f"{minutes}m ago"
    if minutes < 1440:
        return f"{minutes // 60}h ago"
    return f"{minutes // 1440}d ago"


def build_notification(report, now=None):
    now = now or datetime.datetime.utcnow()
    is_critical = report.severity in CRITICAL_SEVERITIES

    if is_critical:
        kind = "critical_report"
        title = f"{report.severity.upper()} Alert"
        message = f"Critical incident: {report.title}"
    else:
        kind = "new_report"
        title = "New Report Submitted"
        message = f"{report.title} reported in {report.location.split(',')[0]}"

    return {
        "id": f"notif-{report.id}",
        "type": kind,
        "title": title,
        "message": message,
        "report_id": report.id,
        "severity": report.severity,
        "category": report.category,
        # anything older than a day counts as already seen
        "read": report.created_at < now - datetime.timedelta(hours=24),
        "created_at": report.created_at,
        "time_ago": format_time_ago(report.created_at, now),
    }


def should_alert(report):
    return bool(config.ALERT_RECIPIENTS) and report.severity in config.ALERT_SEVERITIES


async def send_alert_email(recipients, title, severity, category, location, description):
    message = MessageSchema(
        subject=f"[RoadWatch] {severity.upper()} {category.replace('_', ' ')}: {title}",
        recipients=recipients,
        body=f"A {severity} severity report was submitted.\n\nLocation: {location}\n\n{description}",
        subtype=MessageType.plain
    )
    fm = FastMail(conf)
    try:
        await fm.send_message(message)
    except Exception:
        logger.exception("Alert email for %r failed", title)
