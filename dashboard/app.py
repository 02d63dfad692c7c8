"""
Learner Analytics Dashboard
Run with: streamlit run dashboard/app.py
"""

import sys
import logging
from pathlib import Path
from typing import Dict

import streamlit as st
import yaml

ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(ROOT))

from learner_analytics.client import AnalyticsClient, MockAnalyticsClient
from learner_analytics.config import load_settings
from learner_analytics.controller import DashboardController
from learner_analytics.credentials import StaticTokenProvider, chain_providers, default_token_provider
from learner_analytics.state import TAB_ORDER, LoadStatus, Tab
from dashboard.components import inject_css, render_content

settings = load_settings()

logging.basicConfig(level=settings.log_level)
logger = logging.getLogger(__name__)

st.set_page_config(
    page_title="Learning Analytics Dashboard",
    layout="wide",
    initial_sidebar_state="expanded",
)

inject_css()


@st.cache_resource
def load_catalog() -> Dict:
    catalog_path = ROOT / "config" / "dashboard.yaml"
    with open(catalog_path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f)


catalog = load_catalog()


def get_client(backend_url: str, token: str, use_mock: bool) -> AnalyticsClient:
    if use_mock:
        return MockAnalyticsClient()
    provider = default_token_provider(settings)
    if token:
        provider = chain_providers(StaticTokenProvider(token), provider)
    return AnalyticsClient(
        base_url=backend_url,
        token_provider=provider,
        timeout=settings.timeout,
        max_retries=settings.max_retries,
    )


# ─────────────────────────────────────────────────────────────────────────────
# SIDEBAR
# ─────────────────────────────────────────────────────────────────────────────

with st.sidebar:
    st.markdown("#### Backend Connection")

    use_mock = st.toggle("Use Mock / Demo Data", value=settings.use_mock,
                         help="Toggle off to connect to the analytics backend")
    if not use_mock:
        backend_url = st.text_input("Backend URL", value=settings.backend_url)
        token = st.text_input("Bearer Token", type="password", value="",
                              help="Leave empty to use the saved session token")
    else:
        backend_url = token = ""

    st.divider()

# One controller per browser session; rebuilt when the connection settings change.
connection_key = (use_mock, backend_url, token)
if st.session_state.get("connection_key") != connection_key:
    previous = st.session_state.get("controller")
    if previous is not None:
        previous.client.close()
    st.session_state["controller"] = DashboardController(
        get_client(backend_url, token, use_mock),
        default_timeframe=settings.default_timeframe,
    )
    st.session_state["connection_key"] = connection_key

controller: DashboardController = st.session_state["controller"]
state = controller.state

with st.sidebar:
    st.markdown("#### View Cache")
    stats = controller.views.stats()
    st.caption(f"{stats['entries']} views cached · {stats['hits']} hits · {stats['misses']} misses")
    if st.button("Clear cache & refresh", use_container_width=True):
        controller.views.clear_all()
        with st.spinner(catalog["messages"]["loading"]):
            controller.refresh()

# ─────────────────────────────────────────────────────────────────────────────
# MAIN: Load data
# ─────────────────────────────────────────────────────────────────────────────

if not controller.mounted:
    with st.spinner(catalog["messages"]["loading"]):
        controller.mount()

# ─────────────────────────────────────────────────────────────────────────────
# HEADER
# ─────────────────────────────────────────────────────────────────────────────

col_title, col_timeframe, col_refresh = st.columns([4, 2, 1])
with col_title:
    st.markdown(f"## {catalog['title']}")
    st.caption(catalog["subtitle"])

with col_timeframe:
    options = {tf.id: tf.name for tf in state.timeframes}
    if state.selected_timeframe_id not in options:
        options[state.selected_timeframe_id] = state.selected_timeframe_id
    ids = list(options)
    selected = st.selectbox(
        "Timeframe",
        options=ids,
        index=ids.index(state.selected_timeframe_id),
        format_func=lambda tf_id: options[tf_id],
    )

with col_refresh:
    st.markdown("<div style='margin-top:28px;'></div>", unsafe_allow_html=True)
    refresh_clicked = st.button("Refresh", use_container_width=True)

if selected != state.selected_timeframe_id:
    with st.spinner(catalog["messages"]["loading"]):
        controller.select_timeframe(selected)
elif refresh_clicked:
    with st.spinner(catalog["messages"]["loading"]):
        controller.refresh()

if state.status is LoadStatus.LOADING:
    st.info(catalog["messages"]["loading"])

if state.status is LoadStatus.ERROR and state.error_message:
    st.error(state.error_message)

# ─────────────────────────────────────────────────────────────────────────────
# TABS
# ─────────────────────────────────────────────────────────────────────────────

tab_labels = {t: f"{catalog['tabs'][t.value]['icon']} {catalog['tabs'][t.value]['label']}" for t in TAB_ORDER}
active = st.radio(
    "Section",
    options=list(TAB_ORDER),
    index=TAB_ORDER.index(controller.tabs.active),
    format_func=lambda t: tab_labels[t],
    horizontal=True,
    label_visibility="collapsed",
)
controller.select_tab(Tab.parse(active))

st.divider()

render_content(controller.content(), catalog)

last_updated = controller.last_updated()
if last_updated:
    st.divider()
    st.caption(f"Last updated: {last_updated}")
