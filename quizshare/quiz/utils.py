from flask import current_app, request


def share_link(quiz_id: str) -> str:
    """Public link a teacher hands out; possession of it is the only access check."""
    base_url = (current_app.config.get("APP_BASE_URL") or request.host_url).rstrip("/")
    return f"{base_url}/quiz/{quiz_id}"


def json_payload() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}
