"""
Utility functions for the ProofIQ Streamlit app
Includes the leads admin password gate and shared cached resources
"""

import hmac
import os
import time
from typing import List, Optional

import streamlit as st

from database import DatabaseConnection, get_database_connection

ADMIN_MAX_ATTEMPTS = 5
ADMIN_LOCKOUT_SECONDS = 300


@st.cache_resource
def get_cached_database_connection() -> DatabaseConnection:
    """Database connection shared across Streamlit sessions"""
    return get_database_connection()


def get_admin_password() -> Optional[str]:
    """APP_PASSWORD from the environment, else [app].password from secrets.toml"""
    password = os.environ.get('APP_PASSWORD')
    if password:
        return password
    try:
        return st.secrets['app']['password']
    except (KeyError, FileNotFoundError):
        return None


def password_matches(candidate: str, expected: str) -> bool:
    """Constant-time comparison of UTF-8 encoded passwords"""
    return hmac.compare_digest(candidate.encode('utf-8'), expected.encode('utf-8'))


def recent_failures(attempts: List[float], now: float,
                    window: int = ADMIN_LOCKOUT_SECONDS) -> List[float]:
    """Failed login timestamps still inside the lockout window"""
    return [t for t in attempts if now - t < window]


def check_authentication() -> bool:
    """
    Gate the leads admin page.

    Open when no admin password is configured. Otherwise asks for the
    password and locks out for five minutes after repeated failures.
    """
    password = get_admin_password()
    if not password or st.session_state.get('admin_authenticated'):
        return True

    now = time.time()
    failures = recent_failures(st.session_state.get('admin_failures', []), now)
    st.session_state.admin_failures = failures

    st.title("🔐 Leads admin")
    if len(failures) >= ADMIN_MAX_ATTEMPTS:
        wait = int(ADMIN_LOCKOUT_SECONDS - (now - failures[0]))
        st.error(f"Too many failed attempts. Try again in {wait} seconds.")
        return False

    with st.form("admin_login"):
        candidate = st.text_input("Password", type="password")
        submitted = st.form_submit_button("Log in", type="primary")

    if submitted:
        if password_matches(candidate, password):
            st.session_state.admin_authenticated = True
            st.session_state.admin_failures = []
            st.rerun()
        failures.append(now)
        st.error(f"Incorrect password. {ADMIN_MAX_ATTEMPTS - len(failures)} attempts remaining.")

    return False
