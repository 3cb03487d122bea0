"""Connection setup page: collect Jira credentials and initialize TriageService."""

from __future__ import annotations

import logging

import streamlit as st

from pitwall.app import register_page
from pitwall.core.config import DEFAULT_PROJECT_KEY, load_triage_config
from pitwall.core.jira_client import JiraAPI
from pitwall.core.service import TriageService

logger = logging.getLogger(__name__)


def read_jira_secrets() -> dict[str, str | None]:
    """Credentials from a ``[jira]`` secrets section, falling back to top-level keys."""
    jira_secrets = st.secrets.get("jira", {})

    def pick(*names: str) -> str | None:
        for name in names:
            value = jira_secrets.get(name) or st.secrets.get(name)
            if value:
                return value
        return None

    return {
        "server": pick("JIRA_SERVER"),
        "email": pick("JIRA_EMAIL"),
        "token": pick("JIRA_API_TOKEN", "JIRA_TOKEN"),
        "project": pick("JIRA_PROJECT_KEY"),
        "account_id": pick("JIRA_ACCOUNT_ID"),
    }


def connect_service(server: str, email: str, token: str, account_id: str | None = None) -> TriageService:
    """Build the Jira client and triage service and store them in session state."""
    api = JiraAPI(server, email, token)
    service = TriageService(api, load_triage_config())
    actor = account_id or api.current_account_id()
    st.session_state["jira_server"] = server
    st.session_state["jira_email"] = email
    st.session_state["actor_account_id"] = actor
    st.session_state["triage_service"] = service
    return service


@register_page("Setup / Connection")
def setup_page():
    st.title("Jira Connection Setup")
    st.caption("Enter credentials (use secrets manager in production).")

    secrets = read_jira_secrets()
    server = st.text_input(
        "Jira Server URL",
        value=st.session_state.get("jira_server") or secrets["server"] or "",
    )
    email = st.text_input(
        "Email / Username",
        value=st.session_state.get("jira_email") or secrets["email"] or "",
    )
    token = st.text_input("API Token", type="password", value=secrets["token"] or "")
    project = st.text_input(
        "Service project key",
        value=st.session_state.get("project_key") or secrets["project"] or DEFAULT_PROJECT_KEY,
    )
    init_btn = st.button("Initialize Connection", type="primary")

    if init_btn:
        if not (server and email and token and project):
            st.error("All fields required.")
            return
        try:
            connect_service(server, email, token, secrets["account_id"])
            st.session_state["project_key"] = project.strip().upper()
            st.success("Connection initialized.")
        except Exception as e:  # pragma: no cover
            logger.error("Jira connection failed: %s", e)
            st.error(f"Failed to initialize Jira client: {e}")

    if "triage_service" in st.session_state:
        actor = st.session_state.get("actor_account_id") or "unknown"
        st.info(f"TriageService ready (acting as {actor}).")
