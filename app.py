import streamlit as st

from infrastructure.observability import setup_observability
setup_observability()

from utils import session_manager
from use_cases import auth_flow, bootstrap
from views import login_view

st.set_page_config(page_title="Account", layout="centered")

session_manager.init_session_state()
store = session_manager.get_auth_store()
session_manager.persist_device_cookie()

# --- STARTUP ORCHESTRATION ---
if not st.session_state.startup_done:
    startup_result = bootstrap.run_startup(store=store, platforms=st.session_state.platforms)
    st.session_state.startup_done = True
    if startup_result.status == "STOP":
        st.error("No platform is configured.")
        st.stop()

# --- AUTH GATE ---
auth_result = auth_flow.ensure_authenticated_session(store)
if auth_result.status == "STOP":
    login_view.render_auth_screen()
    st.stop()

# === MAIN SCREEN ===
session = store.get().session
st.title(f"Welcome, {session.user.display_name or session.user.login}")
st.caption(f"Connected to {session.platform.display_name or session.platform.name}")

if session.public_info:
    with st.expander("Profile", expanded=False):
        st.json(dict(session.public_info))

if st.button("Log out", key="logout_btn", type="secondary"):
    session_manager.logout()
