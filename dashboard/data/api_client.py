import logging
import os
from typing import Any

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

logger = logging.getLogger(__name__)

RETRY_TOTAL = 2
RETRY_BACKOFF = 0.5
RETRY_STATUSES = (502, 503, 504)
DEFAULT_EXPORT_NAME = "checklist-log-export.csv"

_secret_getter = None
_user_getter = None
_session = None


class ApiError(RuntimeError):
    def __init__(self, status_code, message):
        super().__init__(message)
        self.status_code = status_code


def configure(secret_getter, user_getter):
    global _secret_getter, _user_getter
    _secret_getter = secret_getter
    _user_getter = user_getter


def _http():
    global _session
    if _session is None:
        retry = Retry(
            total=RETRY_TOTAL,
            backoff_factor=RETRY_BACKOFF,
            status_forcelist=RETRY_STATUSES,
            allowed_methods=frozenset({"GET", "PUT", "PATCH", "DELETE", "POST"}),
            raise_on_status=False,
        )
        session = requests.Session()
        adapter = HTTPAdapter(max_retries=retry)
        for scheme in ("http://", "https://"):
            session.mount(scheme, adapter)
        _session = session
    return _session


def _config_value(name):
    """Streamlit secret ``app.<name>`` first, then the environment."""
    value = _secret_getter(("app", name), None) if _secret_getter else None
    return str(value or os.getenv(name) or "")


def api_base_url():
    return _config_value("API_BASE_URL").rstrip("/")


def backend_token():
    return _config_value("BACKEND_SESSION_SECRET")


def is_enabled():
    return bool(api_base_url() and backend_token())


def _auth_headers():
    token = backend_token()
    user_email = _user_getter() if _user_getter else None
    if not token:
        raise ApiError(None, "BACKEND_SESSION_SECRET is not set")
    if not user_email:
        raise ApiError(None, "No signed-in user for API request")
    return {"X-Backend-Token": token, "X-User-Email": user_email}


def _endpoint(path):
    base = api_base_url()
    if not base:
        raise ApiError(None, "API_BASE_URL is not set")
    return base + path


def _check(response):
    if response.ok:
        return
    try:
        detail = response.json().get("detail")
    except ValueError:
        detail = response.text
    logger.warning("%s %s -> %s: %s", response.request.method, response.url, response.status_code, detail)
    raise ApiError(response.status_code, str(detail or response.reason))


def request(method: str, path: str, params: dict | None = None, json: dict | None = None, timeout: int = 10) -> Any:
    response = _http().request(
        method,
        _endpoint(path),
        params=params,
        json=json,
        headers=_auth_headers(),
        timeout=timeout,
    )
    _check(response)
    if response.status_code == 204 or not response.content:
        return None
    return response.json()


def request_text(path: str, params: dict | None = None, timeout: int = 30) -> tuple[str, str]:
    """GET a non-JSON body, returning ``(text, filename)`` from Content-Disposition."""
    response = _http().get(_endpoint(path), params=params, headers=_auth_headers(), timeout=timeout)
    _check(response)
    _, _, tail = response.headers.get("Content-Disposition", "").partition("filename=")
    return response.text, tail.strip().strip('"') or DEFAULT_EXPORT_NAME
