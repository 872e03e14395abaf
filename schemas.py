from pydantic import BaseModel, Field
from typing import Dict, List, Literal, Optional
from datetime import datetime

Category = Literal["accident", "construction", "weather", "traffic", "road_damage", "other"]
Severity = Literal["low", "medium", "high", "critical"]
Status = Literal["active", "resolved", "verified"]


class ReportBase(BaseModel):
    title: str
    description: str
    location: str
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    category: Category
    severity: Severity
    reporter_name: Optional[str] = None
    reporter_email: Optional[str] = None


class ReportCreate(ReportBase):
    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1, max_length=5000)
    location: str = Field(..., min_length=1, max_length=500)
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)
    reporter_name: Optional[str] = Field(None, max_length=100)


class Report(ReportBase):
    id: str
    status: Status
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class StatusUpdate(BaseModel):
    status: Status


class DeleteResult(BaseModel):
    id: str
    # "deleted" when the row is gone, "resolved" when it was soft deleted
    mode: Literal["deleted", "resolved"]


class MapReport(Report):
    distance_km: Optional[float] = None
    distance: Optional[str] = None
    maps_url: Optional[str] = None


class MapData(BaseModel):
    center: List[float]
    zoom: int
    reports: List[MapReport]


class Cluster(BaseModel):
    lat: float
    lng: float
    count: int
    dominant_category: str
    severity: str
    report_ids: List[str]


class TrendPoint(BaseModel):
    date: str
    count: int


class LocationCount(BaseModel):
    location: str
    count: int


class Analytics(BaseModel):
    time_range: str
    total_reports: int
    reports_by_category: Dict[str, int]
    reports_by_severity: Dict[str, int]
    recent_trends: List[TrendPoint]
    top_locations: List[LocationCount]
    average_reports_per_day: int


class DashboardStats(BaseModel):
    total_reports: int
    active_reports: int
    resolved_today: int
    critical_reports: int
    recent_activity: int
    recent_reports: List[Report] = []


class Notification(BaseModel):
    id: str
    type: Literal["new_report", "critical_report"]
    title: str
    message: str
    report_id: str
    severity: str
    category: str
    read: bool
    created_at: datetime
    time_ago: str
