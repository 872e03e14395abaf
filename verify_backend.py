import requests
import time

BASE_URL = "http://127.0.0.1:8000"


def check_backend():
    print(f"Testing connectivity to {BASE_URL}...")
    try:
        # 1. Health/Docs Check
        resp = requests.get(f"{BASE_URL}/docs")
        print(f"Docs endpoint status: {resp.status_code}")
        if resp.status_code != 200:
            print("FAILED: Backend seems down or returning error.")
            return

        # 2. Submit a report
        title = f"Smoke test {int(time.time())}"
        print(f"Submitting report: {title}")
        create_resp = requests.post(f"{BASE_URL}/reports/", json={
            "title": title,
            "description": "Created by verify_backend.py",
            "location": "Test Street, Springfield",
            "latitude": 40.7128,
            "longitude": -74.0060,
            "category": "other",
            "severity": "low",
        })
        print(f"Create response: {create_resp.status_code}")
        if create_resp.status_code != 200:
            print("Create FAILED:", create_resp.text)
            return
        report_id = create_resp.json()["id"]

        # 3. It shows up in the active list
        listing = requests.get(f"{BASE_URL}/reports/", params={"search": title}).json()
        if any(r["id"] == report_id for r in listing):
            print("SUCCESS: Report listed.")
        else:
            print("FAILED: Report missing from list.")

        # 4. Verify it
        status_resp = requests.patch(f"{BASE_URL}/reports/{report_id}/status", json={"status": "verified"})
        print(f"Status response: {status_resp.status_code} - {status_resp.json().get('status')}")

        # 5. Delete it (hard or soft depending on server config)
        delete_resp = requests.delete(f"{BASE_URL}/reports/{report_id}")
        print(f"Delete response: {delete_resp.status_code} - {delete_resp.text}")

        # 6. Analytics still answer
        stats = requests.get(f"{BASE_URL}/analytics", params={"time_range": "7d"}).json()
        print(f"Reports in the last 7 days: {stats['total_reports']}")

    except requests.RequestException as e:
        print(f"EXCEPTION: {e}")


if __name__ == "__main__":
    check_backend()
