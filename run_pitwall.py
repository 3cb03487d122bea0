"""Convenience launcher for the Pit Wall Streamlit app.

Usage:
  streamlit run run_pitwall.py

Every module in ``pitwall/pages`` is imported so pages decorated with
``@register_page`` register themselves.
"""

import logging
from importlib import import_module
from pathlib import Path

import streamlit as st

from pitwall.app import main

st.set_page_config(layout="wide")
logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger(__name__)


def _auto_init_triage_service():
    """Initialize the triage service from Streamlit secrets if available."""
    if "triage_service" in st.session_state:
        return

    from pitwall.pages.setup import connect_service, read_jira_secrets

    secrets = read_jira_secrets()
    if not (secrets["server"] and secrets["email"] and secrets["token"]):
        st.sidebar.warning("Jira secrets not found. Please use the Setup page.")
        return

    st.sidebar.info("Secrets found, attempting to connect to Jira...")
    try:
        connect_service(secrets["server"], secrets["email"], secrets["token"], secrets["account_id"])
        if secrets["project"]:
            st.session_state.setdefault("project_key", secrets["project"].strip().upper())
        st.sidebar.success("Jira connection successful!")
    except Exception as e:
        logger.error("Jira auto-connect failed: %s", e)
        st.sidebar.error(f"Jira connection failed: {e}")
        st.session_state.pop("triage_service", None)


PAGES_DIR = Path(__file__).parent / "pitwall" / "pages"
for py in sorted(PAGES_DIR.glob("[!_]*.py")):
    mod_name = f"pitwall.pages.{py.stem}"
    try:
        import_module(mod_name)
    except Exception as e:  # pragma: no cover
        logger.error("Failed importing page %s: %s", mod_name, e)

_auto_init_triage_service()

if __name__ == "__main__":
    main()
