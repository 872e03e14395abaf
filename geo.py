import math
from collections import defaultdict

from config import DEFAULT_MAP_CENTER

EARTH_RADIUS_KM = 6371
SEVERITY_RANK = {"critical": 0, "high": 1, "medium": 2, "low": 3}


def calculate_distance(lat1, lon1, lat2, lon2):
    """Great-circle distance in km between two points."""
    d_lat = math.radians(lat2 - lat1)
    d_lon = math.radians(lon2 - lon1)
    a = (math.sin(d_lat / 2) * math.sin(d_lat / 2) +
         math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) *
         math.sin(d_lon / 2) * math.sin(d_lon / 2))
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def format_distance(km):
    if km < 1:
        return f"{round(km * 1000)}m"
    return f"{km:.1f}km"


def has_valid_coordinates(report):
    lat, lng = report.latitude, report.longitude
    if lat is None or lng is None:
        return False
    if math.isnan(lat) or math.isnan(lng):
        return False
    return -90 <= lat <= 90 and -180 <= lng <= 180


def reports_center(reports, user_location=None):
    """Map center: the user's position first, then the mean report position."""
    if user_location is not None:
        return user_location
    valid = [r for r in reports if has_valid_coordinates(r)]
    if not valid:
        return DEFAULT_MAP_CENTER
    avg_lat = sum(r.latitude for r in valid) / len(valid)
    avg_lng = sum(r.longitude for r in valid) / len(valid)
    return (avg_lat, avg_lng)


def zoom_level(report_count, user_location=None):
    if user_location is not None:
        return 15
    return 12 if report_count > 1 else 13


def cluster_reports(reports, zoom):
    """Grid clustering; the cell edge halves with every zoom level."""
    cell_size = 180.0 / (2 ** zoom)
    buckets = defaultdict(list)
    for r in reports:
        if not has_valid_coordinates(r):
            continue
        key = (math.floor(r.latitude / cell_size), math.floor(r.longitude / cell_size))
        buckets[key].append(r)

    clusters = []
    for group in buckets.values():
        category_counts = defaultdict(int)
        for r in group:
            category_counts[r.category] += 1
        dominant = max(category_counts, key=category_counts.get)
        worst = min((r.severity for r in group), key=lambda s: SEVERITY_RANK.get(s, 4))
        clusters.append({
            "lat": sum(r.latitude for r in group) / len(group),
            "lng": sum(r.longitude for r in group) / len(group),
            "count": len(group),
            "dominant_category": dominant,
            "severity": worst,
            "report_ids": [r.id for r in group],
        })
    clusters.sort(key=lambda c: c["count"], reverse=True)
    return clusters


def maps_url(lat, lng):
    return f"https://www.google.com/maps?q={lat},{lng}"
