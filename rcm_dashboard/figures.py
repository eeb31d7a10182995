"""
Plotly figures for chart sections.

build_series_figure() turns the points of one section into a figure ready
for st.plotly_chart() or fig.show().
"""

import plotly.graph_objects as go

SECTION_TITLES = {
    "chargesByMonth": ("Charges by Month", "USD"),
    "claimsByMonth": ("Claims by Month", "Claims"),
    "paymentsByMonth": ("Payments by Month", "USD"),
    "arAging": ("Open A/R by Aging Bucket", "USD"),
    "denialsByReason": ("Denials by Reason", "Denials"),
}

SECTION_COLORS = {
    "chargesByMonth": "#3498db",
    "claimsByMonth": "#9b59b6",
    "paymentsByMonth": "#2ecc71",
    "arAging": "#f39c12",
    "denialsByReason": "#e74c3c",
}


def build_series_figure(section_id: str, points: list[dict]) -> go.Figure:
    """Bar chart for one section; denial reasons are drawn horizontally."""
    title, unit = SECTION_TITLES.get(section_id, (section_id, ""))
    labels = [p["label"] for p in points]
    values = [p["value"] for p in points]
    color = SECTION_COLORS.get(section_id, "#95a5a6")

    if section_id == "denialsByReason":
        # Largest reason on top
        bar = go.Bar(x=values[::-1], y=labels[::-1], orientation="h", marker_color=color)
        axis_titles = dict(xaxis_title=unit, yaxis_title="")
    else:
        bar = go.Bar(x=labels, y=values, marker_color=color)
        axis_titles = dict(xaxis_title="", yaxis_title=unit)

    fig = go.Figure(bar)
    fig.update_layout(
        title=title,
        height=360,
        plot_bgcolor="rgba(0,0,0,0)",
        margin=dict(l=10, r=10, t=40, b=40),
        **axis_titles,
    )
    if section_id.endswith("ByMonth"):
        fig.update_xaxes(type="category")
    return fig
