from datetime import date

from dashboard.data import api_client

_INVALIDATE_CALLBACK = None


def configure(invalidate_callback=None):
    global _INVALIDATE_CALLBACK
    _INVALIDATE_CALLBACK = invalidate_callback


def api_enabled():
    return api_client.is_enabled()


def _invalidate():
    if _INVALIDATE_CALLBACK is not None:
        _INVALIDATE_CALLBACK()


def _iso(day):
    return day.isoformat() if isinstance(day, date) else str(day)


def list_templates(include_archived=True):
    payload = api_client.request("GET", "/v1/templates", params={"include_archived": str(include_archived).lower()})
    return payload.get("items", [])


def create_template(fields):
    clean = {key: value for key, value in fields.items() if value not in (None, "")}
    for key in ("due_date", "due_time"):
        if key in clean and hasattr(clean[key], "isoformat"):
            clean[key] = clean[key].isoformat()
    record = api_client.request("POST", "/v1/templates", json=clean)
    _invalidate()
    return record


def update_template(template_id, patch):
    clean = dict(patch)
    for key in ("due_date", "due_time"):
        if clean.get(key) is not None and hasattr(clean[key], "isoformat"):
            clean[key] = clean[key].isoformat()
    record = api_client.request("PATCH", f"/v1/templates/{template_id}", json=clean)
    _invalidate()
    return record


def set_template_active(template_id, is_active):
    record = api_client.request("PUT", f"/v1/templates/{template_id}/active", json={"is_active": bool(is_active)})
    _invalidate()
    return record


def delete_template(template_id):
    api_client.request("DELETE", f"/v1/templates/{template_id}")
    _invalidate()


def get_checklist(day):
    return api_client.request("GET", f"/v1/checklist/{_iso(day)}")


def set_task_checked(day, template_id, checked):
    payload = api_client.request("PUT", f"/v1/checklist/{_iso(day)}/{template_id}", json={"checked": bool(checked)})
    _invalidate()
    return payload


def get_system_health(window=None):
    params = {"window": int(window)} if window else None
    return api_client.request("GET", "/v1/momentum/system-health", params=params)


def get_daily_range(start, end):
    return api_client.request("GET", "/v1/history/daily", params={"start": _iso(start), "end": _iso(end)})


def get_upcoming_tasks(days=7):
    return api_client.request("GET", "/v1/templates/upcoming", params={"days": int(days)})


def get_header_snapshot():
    return api_client.request("GET", "/v1/header")


def get_momentum_threshold():
    payload = api_client.request("GET", "/v1/settings/momentum-threshold")
    return int(payload.get("momentum_threshold", 5))


def set_momentum_threshold(value):
    payload = api_client.request("PUT", "/v1/settings/momentum-threshold", json={"momentum_threshold": value})
    _invalidate()
    return int(payload["momentum_threshold"])


def get_timezone():
    return api_client.request("GET", "/v1/settings/timezone").get("timezone")


def set_timezone(name):
    payload = api_client.request("PUT", "/v1/settings/timezone", json={"timezone": name})
    _invalidate()
    return payload["timezone"]


def export_csv():
    return api_client.request_text("/v1/settings/export")


def reset_logs():
    payload = api_client.request("DELETE", "/v1/settings/logs")
    _invalidate()
    return int(payload.get("deleted", 0))
