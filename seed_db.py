from database import SessionLocal, engine
import models
import datetime

# Ensure tables exist
models.Base.metadata.create_all(bind=engine)


def seed_data():
    db = SessionLocal()

    # Check if we already have reports
    if db.query(models.Report).count() > 0:
        print("Database already has data.")
        db.close()
        return

    now = datetime.datetime.utcnow()

    reports = [
        models.Report(
            title="Multi-car collision on FDR Drive",
            description="Three cars involved near the 23rd Street exit. Left lane blocked, emergency services on scene.",
            location="FDR Drive, Manhattan, NY",
            latitude=40.7359,
            longitude=-73.9748,
            category="accident",
            severity="critical",
            reporter_name="Dana",
            created_at=now - datetime.timedelta(minutes=20),
        ),
        models.Report(
            title="Lane closure for resurfacing",
            description="Two right lanes closed overnight for resurfacing work. Expect delays until 6am.",
            location="Atlantic Ave, Brooklyn, NY",
            latitude=40.6862,
            longitude=-73.9776,
            category="construction",
            severity="medium",
            created_at=now - datetime.timedelta(hours=5),
        ),
        models.Report(
            title="Deep pothole in right lane",
            description="Large pothole just past the intersection. Several cars have damaged tires here.",
            location="Queens Blvd, Queens, NY",
            latitude=40.7420,
            longitude=-73.9180,
            category="road_damage",
            severity="high",
            created_at=now - datetime.timedelta(days=2),
        ),
        models.Report(
            title="Flooded underpass",
            description="Drainage is blocked and the underpass is impassable after heavy rain.",
            location="Grand Concourse, Bronx, NY",
            latitude=40.8270,
            longitude=-73.9230,
            category="weather",
            severity="high",
            status="resolved",
            created_at=now - datetime.timedelta(days=6),
        ),
        models.Report(
            title="Signal outage causing backups",
            description="Traffic lights are dark at the junction. Traffic is backed up in all directions.",
            location="Canal St, Manhattan, NY",
            category="traffic",
            severity="low",
            status="verified",
            created_at=now - datetime.timedelta(days=12),
        ),
    ]

    for report in reports:
        db.add(report)

    db.commit()
    for report in reports:
        print(f"Added: {report.title} ({report.id})")
    print("Seeding Complete!")
    db.close()


if __name__ == "__main__":
    seed_data()
