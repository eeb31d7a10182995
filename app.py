"""
Revenue-Cycle Reporting — Interactive Dashboard

Run with:  streamlit run app.py
"""

import asyncio

import streamlit as st

from rcm_dashboard.config import DATA_ROOT
from rcm_dashboard.dashboard import resolve_client
from rcm_dashboard.errors import ReportingError
from rcm_dashboard.figures import build_series_figure
from rcm_dashboard.loaders import load_client_registry

# ---------------------------------------------------------------------------
# Page config
# ---------------------------------------------------------------------------
st.set_page_config(
    page_title="Revenue Cycle Dashboard",
    layout="wide",
    initial_sidebar_state="expanded",
)


# ---------------------------------------------------------------------------
# Data loading (cached)
# ---------------------------------------------------------------------------
@st.cache_data
def load_registry(root: str) -> list[dict]:
    return asyncio.run(load_client_registry(root))


@st.cache_data
def load_client(client_id: str, root: str) -> dict:
    return asyncio.run(resolve_client(client_id, root)).to_dict()


# ---------------------------------------------------------------------------
# Sidebar
# ---------------------------------------------------------------------------
clients = load_registry(DATA_ROOT)

st.sidebar.title("Revenue Cycle")
st.sidebar.divider()

if not clients:
    st.warning("No clients configured.")
    st.stop()

labels = {c["id"]: c["shortName"] or c["name"] for c in clients}
client_id = st.sidebar.radio("Client", list(labels), format_func=labels.get)

# ---------------------------------------------------------------------------
# Client page
# ---------------------------------------------------------------------------
try:
    bundle = load_client(client_id, DATA_ROOT)
except ReportingError as e:
    st.error(str(e))
    st.stop()

st.title(bundle["config"]["name"])

if bundle["missingSources"]:
    st.caption(f"Data not available: {', '.join(bundle['missingSources'])}")

if "kpiCards" in bundle["config"]["layout"]["sections"]:
    cols = st.columns(4)
    for i, kpi in enumerate(bundle["kpis"]):
        with cols[i % 4]:
            delta = None if kpi["change"] == "N/A" else kpi["change"]
            st.metric(
                kpi["label"],
                kpi["value"],
                delta=delta,
                delta_color="inverse" if kpi["downBetter"] else "normal",
            )
    st.divider()

for section_id, points in bundle["chartData"].items():
    if not points:
        st.info(f"No data for {section_id}.")
        continue
    st.plotly_chart(build_series_figure(section_id, points), use_container_width=True)
