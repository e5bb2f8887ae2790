from __future__ import annotations

import os

import streamlit as st

ENV_FALLBACK_KEYS = {
    ("app", "API_BASE_URL"): "API_BASE_URL",
    ("app", "BACKEND_SESSION_SECRET"): "BACKEND_SESSION_SECRET",
    ("app", "allowed_emails"): "ALLOWED_EMAILS",
    ("app", "local_user_email"): "LOCAL_USER_EMAIL",
}


def get_secret(path, default=None):
    env_key = ENV_FALLBACK_KEYS.get(tuple(path))
    if env_key:
        env_value = os.getenv(env_key)
        if env_value:
            return env_value
    try:
        current = st.secrets
        for key in path:
            if key not in current:
                return default
            current = current[key]
    except (FileNotFoundError, KeyError):
        return default
    return current


def _allowed_emails():
    raw = get_secret(("app", "allowed_emails")) or ""
    return {email.strip().lower() for email in str(raw).split(",") if email.strip()}


def _login_available():
    try:
        return "auth" in st.secrets
    except FileNotFoundError:
        return False


def enforce_login():
    """Gate the app behind Streamlit's OIDC login when it is configured."""
    if not _login_available():
        return

    if not st.user.is_logged_in:
        st.markdown("<div class='section-title'>Login Required</div>", unsafe_allow_html=True)
        st.markdown("Sign in to see your checklist and momentum.")
        if st.button("Login", key="auth.login"):
            st.login()
        st.stop()

    allowed = _allowed_emails()
    user_email = str(getattr(st.user, "email", "")).strip().lower()
    if allowed and user_email not in allowed:
        st.error("Access denied for this account.")
        if st.button("Logout", key="auth.logout_denied"):
            st.logout()
        st.stop()

    with st.sidebar:
        st.caption(f"Logged in as: {user_email or 'unknown'}")
        if st.button("Logout", key="auth.logout"):
            st.logout()


def get_current_user_email():
    user_email = ""
    if _login_available():
        user_email = str(getattr(st.user, "email", "") or "").strip().lower()
    if user_email:
        return user_email
    fallback = get_secret(("app", "local_user_email")) or ""
    if not fallback:
        allowed = sorted(_allowed_emails())
        fallback = allowed[0] if allowed else "local@offline"
    return str(fallback).strip().lower()


def get_display_name(user_email):
    user_name = ""
    if _login_available():
        user_name = str(getattr(st.user, "name", "") or "").strip()
    if user_name:
        return user_name.split()[0]
    local = (user_email or "").split("@")[0].replace(".", " ").strip()
    return local.title() if local else "User"
