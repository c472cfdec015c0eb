from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict

import altair as alt
import pandas as pd

from core.geometry import BarGeometry, RadarGeometry

alt.data_transformers.disable_max_rows()

# SVG text-anchor -> Vega text align
TEXT_ALIGN = {"start": "left", "middle": "center", "end": "right"}


def to_vega_spec(chart: alt.TopLevelMixin) -> Dict[str, Any]:
    """Convert an Altair chart into a Vega-Lite spec dict (JSON-serializable)."""
    return chart.to_dict()


def _pixel(field: str) -> Dict[str, Any]:
    # scale=None: values are already pixel coordinates
    return {"field": field, "type": "quantitative", "scale": None, "axis": None}


def radar_chart(geometry: RadarGeometry) -> alt.LayerChart:
    if geometry.empty:
        raise ValueError("radar geometry has no points")
    size = geometry.center[0] * 2
    points = pd.DataFrame([asdict(p) for p in geometry.points])
    points["order"] = range(len(points))
    closed = pd.concat([points, points.head(1).assign(order=len(points))], ignore_index=True)

    outline = (
        alt.Chart(closed)
        .mark_line(color="#F97316", strokeWidth=2)
        .encode(
            x=alt.X(**_pixel("x")),
            y=alt.Y(**_pixel("y")),
            order="order:O",
        )
    )
    vertices = (
        alt.Chart(points)
        .mark_circle(color="#F97316", size=50, opacity=1)
        .encode(
            x=alt.X(**_pixel("x")),
            y=alt.Y(**_pixel("y")),
            tooltip=["label", alt.Tooltip("value:Q", format=",")],
        )
    )
    layers = [outline, vertices]
    for anchor, align in TEXT_ALIGN.items():
        subset = points[points["text_anchor"] == anchor]
        if subset.empty:
            continue
        layers.append(
            alt.Chart(subset)
            .mark_text(align=align, baseline="middle", fontSize=12)
            .encode(x=alt.X(**_pixel("label_x")), y=alt.Y(**_pixel("label_y")), text="label:N")
        )
    return alt.layer(*layers).properties(width=size, height=size)


def bar_chart(geometry: BarGeometry) -> alt.LayerChart:
    if not geometry.bars:
        raise ValueError("bar geometry has no bars")
    bars = pd.DataFrame([asdict(b) for b in geometry.bars])
    bars["x2"] = bars["x"] + bars["width"]
    bars["y2"] = bars["y"] + bars["height"]
    bars["center"] = bars["x"] + bars["width"] / 2

    rects = (
        alt.Chart(bars)
        .mark_rect(color="#8B5CF6", cornerRadius=3)
        .encode(
            x=alt.X(**_pixel("x")),
            x2="x2",
            y=alt.Y(**_pixel("y")),
            y2="y2",
            tooltip=["label", alt.Tooltip("value:Q", format=",")],
        )
    )
    values = (
        alt.Chart(bars)
        .mark_text(align="center", fontSize=13, fontWeight="bold")
        .encode(x=alt.X(**_pixel("center")), y=alt.Y(**_pixel("value_label_y")), text="value:Q")
    )
    labels = (
        alt.Chart(bars)
        .mark_text(align="center", fontSize=12)
        .encode(x=alt.X(**_pixel("center")), y=alt.Y(**_pixel("label_y")), text="label:N")
    )
    return alt.layer(rects, values, labels).properties(width=geometry.width, height=geometry.height)
