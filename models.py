from sqlalchemy import Column, String, Float, DateTime, Text, CheckConstraint, Index
from database import Base
import datetime
import uuid

CATEGORIES = ("accident", "construction", "weather", "traffic", "road_damage", "other")
SEVERITIES = ("low", "medium", "high", "critical")
STATUSES = ("active", "resolved", "verified")


def _in_clause(column, values):
    quoted = ", ".join(f"'{v}'" for v in values)
    return f"{column} IN ({quoted})"


class Report(Base):
    __tablename__ = "reports"
    __table_args__ = (
        CheckConstraint(_in_clause("category", CATEGORIES), name="reports_category_check"),
        CheckConstraint(_in_clause("severity", SEVERITIES), name="reports_severity_check"),
        CheckConstraint(_in_clause("status", STATUSES), name="reports_status_check"),
        Index("idx_reports_location", "latitude", "longitude"),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    title = Column(Text, nullable=False)
    description = Column(Text, nullable=False)
    location = Column(Text, nullable=False)

    # Location
    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)

    category = Column(String, nullable=False, index=True)
    severity = Column(String, nullable=False, index=True)
    status = Column(String, nullable=False, default="active", index=True)

    reporter_name = Column(Text, nullable=True)
    reporter_email = Column(Text, nullable=True)

    created_at = Column(DateTime, nullable=False, default=datetime.datetime.utcnow, index=True)
    updated_at = Column(
        DateTime, nullable=False,
        default=datetime.datetime.utcnow,
        onupdate=datetime.datetime.utcnow,
    )
