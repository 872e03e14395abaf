"""Aggregates computed over report rows already loaded from the database."""
from collections import Counter
import datetime

TIME_RANGES = {"7d": 7, "30d": 30, "90d": 90}
TREND_DAYS = 7
TOP_LOCATIONS = 5
CRITICAL_SEVERITIES = ("critical", "high")


def range_start(time_range, now=None):
    now = now or datetime.datetime.utcnow()
    try:
        days = TIME_RANGES[time_range]
    except KeyError:
        raise ValueError(f"Unknown time range: {time_range}")
    return now - datetime.timedelta(days=days)


def count_by(reports, attr):
    return dict(Counter(getattr(r, attr) for r in reports))


def daily_trend(reports, days=TREND_DAYS, now=None):
    """Reports per calendar day (UTC) for the last `days` days, oldest first."""
    today = (now or datetime.datetime.utcnow()).date()
    per_day = Counter(r.created_at.date() for r in reports)
    trend = []
    for offset in range(days - 1, -1, -1):
        day = today - datetime.timedelta(days=offset)
        trend.append({"date": day.isoformat(), "count": per_day.get(day, 0)})
    return trend


def top_locations(reports, limit=TOP_LOCATIONS):
    counts = Counter(r.location for r in reports if r.location)
    return [{"location": loc, "count": n} for loc, n in counts.most_common(limit)]


def build_analytics(reports, time_range, now=None):
    days = TIME_RANGES[time_range]
    total = len(reports)
    return {
        "time_range": time_range,
        "total_reports": total,
        "reports_by_category": count_by(reports, "category"),
        "reports_by_severity": count_by(reports, "severity"),
        "recent_trends": daily_trend(reports, now=now),
        "top_locations": top_locations(reports),
        "average_reports_per_day": round(total / days),
    }


def dashboard_stats(reports, now=None):
    """Headline counters; `reports` must be ordered newest first."""
    now = now or datetime.datetime.utcnow()
    today = datetime.datetime(now.year, now.month, now.day)
    last_24_hours = now - datetime.timedelta(hours=24)

    return {
        "total_reports": len(reports),
        "active_reports": sum(1 for r in reports if r.status == "active"),
        "resolved_today": sum(
            1 for r in reports
            if r.status == "resolved" and (r.updated_at or r.created_at) >= today
        ),
        "critical_reports": sum(1 for r in reports if r.severity in CRITICAL_SEVERITIES),
        "recent_activity": sum(1 for r in reports if r.created_at >= last_24_hours),
        "recent_reports": reports[:5],
    }
