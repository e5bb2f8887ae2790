from __future__ import annotations

import calendar as _calendar
from datetime import date, timedelta

from dashboard.constants import (
    DAY_LABELS,
    DAY_TYPE_COLORS,
    INTENSITY_COLORS,
    INTENSITY_LABELS,
    MONTH_NAMES,
)

PLOT_TEXT = "#1f2937"
PLOT_TEXT_SOFT = "#6b7280"
INTENSITY_ORDER = ["none", "light", "medium", "dark"]


def intensity_bucket(count):
    """gray (0) -> light green (1-3) -> medium green (4-7) -> dark green (8+)."""
    if count <= 0:
        return "none"
    if count <= 3:
        return "light"
    if count <= 7:
        return "medium"
    return "dark"


def color_value(count):
    return INTENSITY_COLORS[intensity_bucket(count)]


def color_label(count):
    return INTENSITY_LABELS[intensity_bucket(count)]


def text_color(count):
    # Only the darkest cells need white text.
    return "#ffffff" if count >= 7 else "#111827"


def momentum_bucket(count, momentum_threshold):
    if count <= 0:
        return "none"
    if count >= momentum_threshold:
        return "dark"
    return "light"


def momentum_label(count, momentum_threshold):
    if count <= 0:
        return "No activity"
    if count >= momentum_threshold:
        return "Meets momentum threshold"
    return "Below momentum threshold"


def generate_year_weeks(year):
    """Monday-first weeks covering ``year``; days outside the year are None."""
    start = date(year, 1, 1)
    end = date(year, 12, 31)
    current = start - timedelta(days=start.weekday())
    weeks = []
    while current <= end:
        week = []
        for _ in range(7):
            week.append(current if current.year == year else None)
            current += timedelta(days=1)
        weeks.append(week)
    return weeks


def month_labels_for_weeks(year, weeks):
    labels = []
    current_month = None
    month_start_week = 0
    for week_index, week in enumerate(weeks):
        first = next((day for day in week if day is not None), None)
        if first is None:
            continue
        if current_month is not None and first.month != current_month:
            labels.append(
                {
                    "month": MONTH_NAMES[current_month - 1],
                    "month_number": current_month,
                    "year": year,
                    "start_week": month_start_week,
                    "end_week": week_index - 1,
                }
            )
            month_start_week = week_index
        current_month = first.month
    if current_month is not None:
        labels.append(
            {
                "month": MONTH_NAMES[current_month - 1],
                "month_number": current_month,
                "year": year,
                "start_week": month_start_week,
                "end_week": len(weeks) - 1,
            }
        )
    return labels


def _bucket_index(count, momentum_threshold=None):
    if momentum_threshold is None:
        return INTENSITY_ORDER.index(intensity_bucket(count))
    return INTENSITY_ORDER.index(momentum_bucket(count, momentum_threshold))


def _hover(day, count, momentum_threshold=None):
    label = color_label(count) if momentum_threshold is None else momentum_label(count, momentum_threshold)
    noun = "task" if count == 1 else "tasks"
    return f"{day.isoformat()} • {count} {noun} • {label}"


def build_year_heatmap_grid(year, count_map, momentum_threshold=None):
    import numpy as np

    weeks = generate_year_weeks(year)
    z = np.full((7, len(weeks)), np.nan)
    text = [["" for _ in weeks] for _ in range(7)]
    for col, week in enumerate(weeks):
        for row, day in enumerate(week):
            if day is None:
                continue
            count = int(count_map.get(day.isoformat(), 0) or 0)
            z[row, col] = _bucket_index(count, momentum_threshold)
            text[row][col] = _hover(day, count, momentum_threshold)
    x_labels = [""] * len(weeks)
    for info in month_labels_for_weeks(year, weeks):
        x_labels[info["start_week"]] = info["month"][:3]
    return z, text, x_labels, list(DAY_LABELS)


def build_month_heatmap_grid(year, month, count_map, momentum_threshold=None):
    import numpy as np

    first = date(year, month, 1)
    days_in_month = _calendar.monthrange(year, month)[1]
    n_weeks = (first.weekday() + days_in_month + 6) // 7
    z = np.full((n_weeks, 7), np.nan)
    text = [["" for _ in range(7)] for _ in range(n_weeks)]
    for day_number in range(1, days_in_month + 1):
        current = date(year, month, day_number)
        slot = first.weekday() + day_number - 1
        row, col = divmod(slot, 7)
        count = int(count_map.get(current.isoformat(), 0) or 0)
        z[row, col] = _bucket_index(count, momentum_threshold)
        text[row][col] = _hover(current, count, momentum_threshold)
    return z, text, list(DAY_LABELS), [f"W{index + 1}" for index in range(n_weeks)]


def build_week_heatmap_grid(start, count_map, momentum_threshold=None):
    """One row of seven Monday-first cells for the week beginning ``start``."""
    import numpy as np

    z = np.zeros((1, 7))
    text = [[""] * 7]
    for col in range(7):
        current = start + timedelta(days=col)
        count = int(count_map.get(current.isoformat(), 0) or 0)
        z[0, col] = _bucket_index(count, momentum_threshold)
        text[0][col] = _hover(current, count, momentum_threshold)
    x_labels = [f"{DAY_LABELS[col]} {(start + timedelta(days=col)).day}" for col in range(7)]
    return z, text, x_labels, [""]


def apply_common_plot_style(fig, title):
    fig.update_layout(
        title=title,
        title_font=dict(color=PLOT_TEXT, size=16),
        paper_bgcolor="rgba(0,0,0,0)",
        plot_bgcolor="rgba(0,0,0,0)",
        font=dict(color=PLOT_TEXT),
        margin=dict(l=40, r=20, t=40, b=20),
    )
    return fig


def activity_heatmap(z, hover_text, x_labels, y_labels, title="", height=220):
    import plotly.graph_objects as go

    colorscale = []
    n = len(INTENSITY_ORDER)
    for i, bucket in enumerate(INTENSITY_ORDER):
        color = INTENSITY_COLORS[bucket]
        colorscale.append((i / n, color))
        colorscale.append(((i + 1) / n - 1e-6, color))
    colorscale[-1] = (1.0, colorscale[-1][1])

    fig = go.Figure(
        data=go.Heatmap(
            z=z,
            text=hover_text,
            hoverinfo="text",
            colorscale=colorscale,
            showscale=False,
            zmin=0,
            zmax=n - 1,
            xgap=3,
            ygap=3,
        )
    )
    apply_common_plot_style(fig, title)
    fig.update_layout(
        height=height,
        xaxis=dict(
            showgrid=False,
            zeroline=False,
            tickmode="array",
            tickvals=list(range(len(x_labels))),
            ticktext=x_labels,
            side="top",
            tickfont=dict(color=PLOT_TEXT_SOFT, size=10),
        ),
        yaxis=dict(
            showgrid=False,
            zeroline=False,
            tickmode="array",
            tickvals=list(range(len(y_labels))),
            ticktext=y_labels,
            autorange="reversed",
            tickfont=dict(color=PLOT_TEXT_SOFT, size=10),
        ),
    )
    return fig


def system_health_ring(percent, breakdown, title="System Health"):
    import plotly.graph_objects as go

    percent = max(0, min(100, int(percent or 0)))
    fig = go.Figure(
        data=go.Pie(
            values=[percent, 100 - percent],
            hole=0.75,
            sort=False,
            direction="clockwise",
            marker=dict(colors=[DAY_TYPE_COLORS["active"], DAY_TYPE_COLORS["inactive"]]),
            textinfo="none",
            hoverinfo="skip",
        )
    )
    apply_common_plot_style(fig, title)
    subtitle = " · ".join(f"{breakdown.get(kind, 0)} {kind}" for kind in ("active", "neutral", "inactive"))
    fig.update_layout(
        height=260,
        showlegend=False,
        annotations=[
            dict(text=f"<b>{percent}%</b>", x=0.5, y=0.55, font=dict(size=32, color=PLOT_TEXT), showarrow=False),
            dict(text=subtitle, x=0.5, y=0.38, font=dict(size=11, color=PLOT_TEXT_SOFT), showarrow=False),
        ],
    )
    return fig


def day_type_bar(days, title="Last days"):
    import plotly.graph_objects as go

    ordered = list(reversed(days))
    fig = go.Figure(
        data=go.Bar(
            x=[day["date"][5:] for day in ordered],
            y=[round(day["daily_score"] * 100) for day in ordered],
            marker=dict(color=[DAY_TYPE_COLORS.get(day["day_type"], "#e5e7eb") for day in ordered]),
            hovertext=[
                f"{day['date']} • {day['day_type']} • {day['completed_effort']}/{day['scheduled_effort']} effort"
                for day in ordered
            ],
            hoverinfo="text",
        )
    )
    apply_common_plot_style(fig, title)
    fig.update_layout(height=220, yaxis=dict(range=[0, 100], ticksuffix="%"))
    return fig


def weekly_trend_bar(series, title="Past weeks"):
    import plotly.graph_objects as go

    # Month labels only where the month changes.
    ticks = [index for index, week in enumerate(series) if index == 0 or week["label"] != series[index - 1]["label"]]
    colors = [INTENSITY_COLORS["medium"]] * len(series)
    if colors:
        colors[-1] = INTENSITY_COLORS["dark"]
    fig = go.Figure(
        data=go.Bar(
            x=list(range(len(series))),
            y=[week["total"] for week in series],
            marker=dict(color=colors),
            hovertext=[f"Week of {week['week_start'].isoformat()} • {week['total']} tasks" for week in series],
            hoverinfo="text",
        )
    )
    apply_common_plot_style(fig, title)
    fig.update_layout(
        height=220,
        xaxis=dict(
            tickmode="array",
            tickvals=ticks,
            ticktext=[series[index]["label"].upper() for index in ticks],
            tickfont=dict(color=PLOT_TEXT_SOFT, size=10),
        ),
        yaxis=dict(rangemode="tozero"),
    )
    return fig
