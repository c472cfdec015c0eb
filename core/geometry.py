"""Chart geometry for the skills radar and the tech-skill bar chart.

Coordinates are SVG-style: origin top left, y grows downwards. The rendering
layer draws these values as-is.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from core.config import BarLayout, RadarLayout
from core.skills import SkillSummary


HALF_PI = math.pi / 2


@dataclass(frozen=True)
class GeometryPoint:
    x: float
    y: float
    label: str
    value: float
    angle: float = 0.0
    label_x: float = 0.0
    label_y: float = 0.0
    text_anchor: str = "start"


@dataclass(frozen=True)
class RadarGeometry:
    center: Tuple[float, float]
    radius: float
    points: List[GeometryPoint] = field(default_factory=list)
    path: str = ""
    rings: List[float] = field(default_factory=list)
    axes: List[Tuple[float, float]] = field(default_factory=list)

    @property
    def empty(self) -> bool:
        return not self.points


@dataclass(frozen=True)
class GeometryBar:
    index: int
    x: float
    y: float
    width: float
    height: float
    label: str
    value: float
    value_label_y: float = 0.0
    label_y: float = 0.0


@dataclass(frozen=True)
class BarGeometry:
    bars: List[GeometryBar]
    width: float
    height: float
    max_amount: float
    scale: float


def radar_angle(index: int, count: int) -> float:
    return index * (2 * math.pi) / count - HALF_PI


def label_anchor(angle: float) -> str:
    if angle < -HALF_PI or angle > HALF_PI:
        return "end"
    if abs(angle) == HALF_PI:
        return "middle"
    return "start"


def polygon_path(points: Sequence[GeometryPoint]) -> str:
    if not points:
        return ""
    steps = [f"{'M' if i == 0 else 'L'} {p.x} {p.y}" for i, p in enumerate(points)]
    return " ".join(steps) + " Z"


def radar_geometry(
    skills: Sequence[SkillSummary],
    radius: Optional[float] = None,
    center: Optional[Tuple[float, float]] = None,
    *,
    layout: Optional[RadarLayout] = None,
) -> RadarGeometry:
    """Lay out ranked skills as radar vertices, skill 0 straight up, then clockwise.

    Each vertex sits at ``amount / max(amount) * radius`` along its spoke; when every
    amount is zero all vertices collapse onto the center.
    """
    layout = layout or RadarLayout()
    radius = layout.radius if radius is None else radius
    cx, cy = layout.center if center is None else center
    rings = [radius * scale for scale in layout.ring_scales]
    count = len(skills)
    if count == 0:
        return RadarGeometry(center=(cx, cy), radius=radius, rings=rings)

    amounts = [max(s.amount, 0) for s in skills]
    max_amount = max(amounts)
    label_radius = radius + layout.label_offset
    points: List[GeometryPoint] = []
    axes: List[Tuple[float, float]] = []
    for i, (skill, amount) in enumerate(zip(skills, amounts)):
        angle = radar_angle(i, count)
        value = (amount / max_amount) * radius if max_amount > 0 else 0.0
        cos_a, sin_a = math.cos(angle), math.sin(angle)
        points.append(
            GeometryPoint(
                x=cx + value * cos_a,
                y=cy + value * sin_a,
                label=skill.label or skill.category,
                value=amount,
                angle=angle,
                label_x=cx + label_radius * cos_a,
                label_y=cy + label_radius * sin_a,
                text_anchor=label_anchor(angle),
            )
        )
        axes.append((cx + radius * cos_a, cy + radius * sin_a))

    return RadarGeometry(
        center=(cx, cy),
        radius=radius,
        points=points,
        path=polygon_path(points),
        rings=rings,
        axes=axes,
    )


def bar_geometry(skills: Sequence[SkillSummary], layout: Optional[BarLayout] = None) -> BarGeometry:
    """Bars left to right in the given order; heights share one scale."""
    layout = layout or BarLayout()
    amounts = [max(s.amount, 0) for s in skills]
    max_amount = max(amounts + [1])
    scale = layout.max_bar_height / max_amount
    step = layout.bar_width + layout.gap
    bars: List[GeometryBar] = []
    for i, (skill, amount) in enumerate(zip(skills, amounts)):
        height = amount * scale
        y = layout.top_margin + (layout.max_bar_height - height)
        bars.append(
            GeometryBar(
                index=i,
                x=i * step,
                y=y,
                width=layout.bar_width,
                height=height,
                label=skill.label or skill.category,
                value=amount,
                value_label_y=y - 5,
                label_y=layout.max_bar_height + 35,
            )
        )
    return BarGeometry(
        bars=bars,
        width=len(bars) * step,
        height=layout.total_height,
        max_amount=max_amount,
        scale=scale,
    )
