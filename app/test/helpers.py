ADMIN_EMAIL = "admin@zapshift.io"
SENDER_EMAIL = "sender@zapshift.io"
RIDER_EMAIL = "rider@zapshift.io"
OTHER_EMAIL = "stranger@zapshift.io"

TRACKING_ID_PATTERN = r"^PRCL-\d{8}-[0-9A-F]{6}$"


def auth_headers(email: str) -> dict[str, str]:
    return {"Authorization": f"Bearer token:{email}"}
