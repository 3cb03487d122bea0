"""Application entry point: page registry and router."""

from __future__ import annotations

import streamlit as st

PAGES = {}

TRIAGE_PAGE = "Pit Wall"
SETUP_PAGE = "Setup / Connection"


def register_page(label):
    def decorator(func):
        PAGES[label] = func
        return func

    return decorator


def page_order(labels):
    """Triage first, setup second, anything else alphabetically after."""
    head = [name for name in (TRIAGE_PAGE, SETUP_PAGE) if name in labels]
    return head + sorted(name for name in labels if name not in head)


def main():
    st.sidebar.title("Pit Wall")
    if not PAGES:
        st.write("No pages registered yet.")
        return
    pages = page_order(list(PAGES))

    connected = "triage_service" in st.session_state
    if connected:
        st.sidebar.caption(
            f"Project {st.session_state.get('project_key') or '?'} · "
            f"acting as {st.session_state.get('actor_account_id') or 'unknown'}"
        )
    # nothing to triage until a service exists
    default = pages.index(SETUP_PAGE) if SETUP_PAGE in pages and not connected else 0
    page = st.sidebar.selectbox("Page", pages, index=default)
    PAGES[page]()


if __name__ == "__main__":
    main()
