# utils.py

import re
from typing import Dict, List

import plotly.graph_objects as go

from engine import Frame
from simulator import parse_address


def parse_address_sequence(text: str) -> List[int]:
    """Parse comma or whitespace separated addresses typed into the UI."""
    return [parse_address(tok) for tok in re.split(r"[,\s]+", text) if tok]


def get_color(frame: Frame, now: int) -> str:
    """Return a color for a frame: grey when free, greener the more recently used."""
    if frame.free:
        return "lightgray"
    # age 0 -> 40% lightness, very old -> 85%
    age = max(0, now - frame.last_access_time)
    lightness = min(85, 40 + age * 5)
    return f"hsl(120, 60%, {lightness}%)"


def build_frame_figure(frames: List[Frame], snapshot: Dict[int, int], now: int) -> go.Figure:
    """Bar chart of the frame table, one uniform bar per frame."""
    owner = {frame_no: page_no for page_no, frame_no in snapshot.items()}

    x, y, text, colors = [], [], [], []
    for f in frames:
        page_no = owner.get(f.frame_no)
        label = f"F{f.frame_no}: " + (f"P{page_no}" if page_no is not None else "Free")
        if not f.free:
            label += f" (t={f.last_access_time})"
        x.append(f.frame_no)
        y.append(1)
        text.append(label)
        colors.append(get_color(f, now))

    fig = go.Figure()
    fig.add_trace(go.Bar(x=x, y=y, text=text, marker_color=colors,
                         hovertext=text, hoverinfo="text"))
    fig.update_layout(height=150, showlegend=False, yaxis=dict(showticklabels=False))
    return fig


def build_stats_figure(stats: Dict[str, float]) -> go.Figure:
    fig = go.Figure()
    fig.add_trace(go.Bar(x=["Hits", "Faults", "Evictions"],
                         y=[stats["hits"], stats["faults"], stats["evictions"]]))
    fig.update_layout(height=300, title="Hits vs Faults")
    return fig
