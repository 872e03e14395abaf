from fastapi import FastAPI, Depends, HTTPException, BackgroundTasks, Query, Request, WebSocket, WebSocketDisconnect
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool
from typing import List, Literal, Optional
import datetime
import logging

import analytics, config, database, geo, models, notifications, schemas
from database import engine
from realtime import manager, change_message, REPORTS, NOTIFICATIONS
from sanitize import sanitize_form_data

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

models.Base.metadata.create_all(bind=engine)

app = FastAPI(title="RoadWatch API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

StatusFilter = Literal["all", "active", "resolved", "verified"]
CategoryFilter = Literal["all", "accident", "construction", "weather", "traffic", "road_damage", "other"]

SEARCH_DATE_RANGES = {
    "24h": datetime.timedelta(hours=24),
    "7d": datetime.timedelta(days=7),
    "30d": datetime.timedelta(days=30),
}


def get_db():
    db = database.SessionLocal()
    try:
        yield db
    finally:
        db.close()


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError):
    logger.error("Database error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=503,
        content={"detail": "Database unavailable, please try again later"},
    )


def serialize(report: models.Report) -> dict:
    return jsonable_encoder(schemas.Report.model_validate(report))


def get_report_or_404(db: Session, report_id: str) -> models.Report:
    report = db.query(models.Report).filter(models.Report.id == report_id).first()
    if report is None:
        raise HTTPException(status_code=404, detail="Report not found")
    return report


def query_reports(
    db: Session,
    status: str = "active",
    category: str = "all",
    search: Optional[str] = None,
    sort: str = "newest",
):
    query = db.query(models.Report)

    if status != "all":
        query = query.filter(models.Report.status == status)

    if category != "all":
        query = query.filter(models.Report.category == category)

    if search:
        search_term = f"%{search}%"
        query = query.filter(or_(
            models.Report.title.ilike(search_term),
            models.Report.description.ilike(search_term),
            models.Report.location.ilike(search_term),
        ))

    if sort == "oldest":
        return query.order_by(models.Report.created_at.asc())
    return query.order_by(models.Report.created_at.desc())


def publish(background_tasks: BackgroundTasks, event: str, report: Optional[models.Report] = None, report_id: Optional[str] = None):
    if event == "DELETE":
        message = change_message("DELETE", old={"id": report_id})
    else:
        message = change_message(event, new=serialize(report))
    background_tasks.add_task(manager.broadcast, REPORTS, message)

    if event == "INSERT":
        notification = jsonable_encoder(notifications.build_notification(report))
        background_tasks.add_task(
            manager.broadcast, NOTIFICATIONS, {"type": "notification", "notification": notification}
        )


@app.get("/")
def root():
    return {"message": "RoadWatch API is running"}


@app.post("/reports/", response_model=schemas.Report)
def create_report(
    report: schemas.ReportCreate,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db)
):
    data = sanitize_form_data(report.model_dump())

    for field in ("title", "description", "location"):
        if not data[field]:
            raise HTTPException(status_code=400, detail=f"{field.capitalize()} is required")

    # Sanitizers return "" for rejected optional values
    data["reporter_name"] = data["reporter_name"] or None
    data["reporter_email"] = data["reporter_email"] or None

    db_report = models.Report(**data)
    db.add(db_report)
    db.commit()
    db.refresh(db_report)
    logger.info("Report %s created (%s/%s)", db_report.id, db_report.category, db_report.severity)

    publish(background_tasks, "INSERT", db_report)

    if notifications.should_alert(db_report):
        background_tasks.add_task(
            notifications.send_alert_email,
            config.ALERT_RECIPIENTS,
            db_report.title,
            db_report.severity,
            db_report.category,
            db_report.location,
            db_report.description,
        )

    return db_report


@app.get("/reports/", response_model=List[schemas.Report])
def read_reports(
    status: StatusFilter = "active",
    category: CategoryFilter = "all",
    search: Optional[str] = None,
    sort: Literal["newest", "oldest"] = "newest",
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
    db: Session = Depends(get_db)
):
    query = query_reports(db, status=status, category=category, search=search, sort=sort)
    return query.offset(skip).limit(limit).all()


@app.get("/reports/search", response_model=List[schemas.Report])
def search_reports(
    q: Optional[str] = None,
    categories: List[schemas.Category] = Query(default=[]),
    severities: List[schemas.Severity] = Query(default=[]),
    status: StatusFilter = "all",
    location: Optional[str] = None,
    date_range: Literal["all", "24h", "7d", "30d"] = "all",
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
    db: Session = Depends(get_db)
):
    query = query_reports(db, status=status, search=q.strip() if q else None)

    if categories:
        query = query.filter(models.Report.category.in_(categories))

    if severities:
        query = query.filter(models.Report.severity.in_(severities))

    if location and location.strip():
        query = query.filter(models.Report.location.ilike(f"%{location.strip()}%"))

    if date_range != "all":
        start = datetime.datetime.utcnow() - SEARCH_DATE_RANGES[date_range]
        query = query.filter(models.Report.created_at >= start)

    return query.offset(skip).limit(limit).all()


def _user_location(lat: Optional[float], lng: Optional[float]):
    if (lat is None) != (lng is None):
        raise HTTPException(status_code=400, detail="Both lat and lng are required for a user location")
    if lat is None:
        return None
    return (lat, lng)


def _map_query(db: Session, categories, severities):
    query = (
        db.query(models.Report)
        .filter(models.Report.status == "active")
        .filter(models.Report.latitude.isnot(None))
        .filter(models.Report.longitude.isnot(None))
    )
    if categories:
        query = query.filter(models.Report.category.in_(categories))
    if severities:
        query = query.filter(models.Report.severity.in_(severities))
    return query.order_by(models.Report.created_at.desc())


def _matches_map_search(report: models.Report, search: Optional[str]) -> bool:
    if not search or not search.strip():
        return True
    searchable = " ".join(
        part for part in (
            report.title, report.description, report.location,
            report.category, report.reporter_name,
        ) if part
    ).lower()
    return search.strip().lower() in searchable


@app.get("/reports/map", response_model=schemas.MapData)
def map_reports(
    lat: Optional[float] = Query(None, ge=-90, le=90),
    lng: Optional[float] = Query(None, ge=-180, le=180),
    categories: List[schemas.Category] = Query(default=[]),
    severities: List[schemas.Severity] = Query(default=[]),
    search: Optional[str] = None,
    sort: Literal["newest", "distance"] = "newest",
    db: Session = Depends(get_db)
):
    user_location = _user_location(lat, lng)
    if sort == "distance" and user_location is None:
        raise HTTPException(status_code=400, detail="Sorting by distance needs lat and lng")

    reports = [
        r for r in _map_query(db, categories, severities).all()
        if geo.has_valid_coordinates(r) and _matches_map_search(r, search)
    ]

    pins = []
    for r in reports:
        pin = schemas.MapReport(
            **schemas.Report.model_validate(r).model_dump(),
            maps_url=geo.maps_url(r.latitude, r.longitude),
        )
        if user_location is not None:
            km = geo.calculate_distance(user_location[0], user_location[1], r.latitude, r.longitude)
            pin.distance_km = round(km, 3)
            pin.distance = geo.format_distance(km)
        pins.append(pin)

    if sort == "distance":
        pins.sort(key=lambda p: p.distance_km)

    return {
        "center": list(geo.reports_center(reports, user_location)),
        "zoom": geo.zoom_level(len(reports), user_location),
        "reports": pins,
    }


@app.get("/reports/map/clusters", response_model=List[schemas.Cluster])
def map_clusters(
    zoom: int = Query(5, ge=1, le=18),
    categories: List[schemas.Category] = Query(default=[]),
    severities: List[schemas.Severity] = Query(default=[]),
    db: Session = Depends(get_db)
):
    return geo.cluster_reports(_map_query(db, categories, severities).all(), zoom)


@app.get("/reports/{report_id}", response_model=schemas.Report)
def read_report(report_id: str, db: Session = Depends(get_db)):
    return get_report_or_404(db, report_id)


@app.patch("/reports/{report_id}/status", response_model=schemas.Report)
def update_report_status(
    report_id: str,
    update: schemas.StatusUpdate,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db)
):
    report = get_report_or_404(db, report_id)
    if report.status == update.status:
        return report

    previous = report.status
    report.status = update.status
    db.commit()
    db.refresh(report)
    logger.info("Report %s moved %s -> %s", report.id, previous, report.status)

    publish(background_tasks, "UPDATE", report)
    return report


@app.delete("/reports/{report_id}", response_model=schemas.DeleteResult)
def delete_report(
    report_id: str,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db)
):
    report = get_report_or_404(db, report_id)

    if config.ALLOW_HARD_DELETE:
        try:
            db.delete(report)
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.warning("Hard delete of %s rejected, falling back to soft delete: %s", report_id, e)
            report = get_report_or_404(db, report_id)
        else:
            publish(background_tasks, "DELETE", report_id=report_id)
            return {"id": report_id, "mode": "deleted"}

    report.status = "resolved"
    db.commit()
    db.refresh(report)
    publish(background_tasks, "UPDATE", report)
    return {"id": report_id, "mode": "resolved"}


@app.get("/analytics", response_model=schemas.Analytics)
def read_analytics(
    time_range: Literal["7d", "30d", "90d"] = "30d",
    db: Session = Depends(get_db)
):
    start = analytics.range_start(time_range)
    reports = db.query(models.Report).filter(models.Report.created_at >= start).all()
    return analytics.build_analytics(reports, time_range)


@app.get("/dashboard", response_model=schemas.DashboardStats)
def read_dashboard(db: Session = Depends(get_db)):
    reports = db.query(models.Report).order_by(models.Report.created_at.desc()).all()
    stats = analytics.dashboard_stats(reports)
    stats["recent_reports"] = [schemas.Report.model_validate(r) for r in stats["recent_reports"]]
    return stats


@app.get("/notifications", response_model=List[schemas.Notification])
def read_notifications(
    limit: int = Query(10, ge=1, le=50),
    db: Session = Depends(get_db)
):
    reports = db.query(models.Report).order_by(models.Report.created_at.desc()).limit(limit).all()
    now = datetime.datetime.utcnow()
    return [notifications.build_notification(r, now) for r in reports]


# --- Realtime ---

def snapshot_reports(status: str, category: str) -> List[dict]:
    # Short-lived session so idle subscribers hold no pooled connection
    with database.SessionLocal() as db:
        return [serialize(r) for r in query_reports(db, status=status, category=category).all()]


@app.websocket("/ws/reports")
async def reports_channel(
    websocket: WebSocket,
    status: StatusFilter = "active",
    category: CategoryFilter = "all",
):
    subscription = await manager.connect(websocket, REPORTS, status=status, category=category)
    try:
        snapshot = await run_in_threadpool(snapshot_reports, status, category)
        await websocket.send_json({
            "type": "subscribed",
            "channel": subscription.channel,
            "reports": snapshot,
        })
        while True:
            data = await websocket.receive_text()
            if data == "ping":
                await websocket.send_json({"type": "pong"})
    except WebSocketDisconnect:
        logger.debug("Client left %s", subscription.channel)
    finally:
        manager.disconnect(subscription)


@app.websocket("/ws/notifications")
async def notifications_channel(websocket: WebSocket):
    subscription = await manager.connect(websocket, NOTIFICATIONS)
    try:
        await websocket.send_json({"type": "subscribed", "channel": subscription.channel})
        while True:
            data = await websocket.receive_text()
            if data == "ping":
                await websocket.send_json({"type": "pong"})
    except WebSocketDisconnect:
        logger.debug("Client left %s", subscription.channel)
    finally:
        manager.disconnect(subscription)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
