from dotenv import load_dotenv
import os

# Force reload to be sure
load_dotenv()

required_keys = [
    "DATABASE_URL",
]

# Only needed when ALERT_RECIPIENTS is set
mail_keys = [
    "MAIL_USERNAME",
    "MAIL_PASSWORD",
    "MAIL_FROM",
    "MAIL_PORT",
    "MAIL_SERVER"
]


def mask(key, value):
    if ("PASSWORD" in key or "DATABASE_URL" in key) and len(value) > 3:
        return value[:2] + "****" + value[-1]
    return value


def check(keys):
    all_present = True
    for key in keys:
        value = os.getenv(key)
        if value:
            print(f"✅ {key}: Found ({mask(key, value)})")
        else:
            print(f"❌ {key}: MISSING")
            all_present = False
    return all_present


if __name__ == "__main__":
    print("--- Checking Environment Variables ---")
    all_present = check(required_keys)

    if os.getenv("ALERT_RECIPIENTS"):
        print("\n--- Alert email enabled, checking mail settings ---")
        all_present = check(mail_keys) and all_present
    else:
        print("\nALERT_RECIPIENTS not set, alert emails are disabled.")

    if all_present:
        print("\nSUCCESS: All required variables are loaded.")
    else:
        print("\nFAILURE: Some variables are missing.")
