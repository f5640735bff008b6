from html import escape

from app.learning.radar import (
    CANVAS_SIZE,
    SCORE_RING_CIRCUMFERENCE,
    SCORE_RING_RADIUS,
    RadarChart,
    format_points,
    score_ring_dash_offset,
)


def radar_svg(chart: RadarChart, *, size_px: int = 260) -> str:
    parts = [
        f'<svg viewBox="-15 -8 {CANVAS_SIZE + 30:g} {CANVAS_SIZE + 16:g}" '
        f'width="{size_px}" height="{size_px}" xmlns="http://www.w3.org/2000/svg">'
    ]
    for ring in chart.grid_polygons:
        parts.append(
            f'<polygon points="{format_points(ring)}" fill="none" '
            'stroke="#cbd5e1" stroke-width="0.3"/>'
        )
    for axis in chart.axes:
        (x1, y1), (x2, y2) = axis.start, axis.end
        parts.append(
            f'<line x1="{x1:.3f}" y1="{y1:.3f}" x2="{x2:.3f}" y2="{y2:.3f}" '
            'stroke="#cbd5e1" stroke-width="0.3"/>'
        )
        lx, ly = axis.label_pos
        parts.append(
            f'<text x="{lx:.3f}" y="{ly:.3f}" font-size="4" text-anchor="middle" '
            f'dominant-baseline="middle" fill="#475569">{escape(axis.label)}</text>'
        )
    parts.append(
        f'<polygon points="{format_points(chart.value_points)}" '
        'fill="rgba(59,130,246,0.35)" stroke="#3b82f6" stroke-width="0.6"/>'
    )
    parts.append("</svg>")
    return "".join(parts)


def score_ring_svg(score: int, *, size_px: int = 120) -> str:
    offset = score_ring_dash_offset(score)
    c = SCORE_RING_RADIUS + 2
    return (
        f'<svg viewBox="0 0 {2 * c:g} {2 * c:g}" width="{size_px}" height="{size_px}" '
        'xmlns="http://www.w3.org/2000/svg">'
        f'<circle cx="{c:g}" cy="{c:g}" r="{SCORE_RING_RADIUS:g}" fill="none" '
        'stroke="#e2e8f0" stroke-width="3"/>'
        f'<circle cx="{c:g}" cy="{c:g}" r="{SCORE_RING_RADIUS:g}" fill="none" '
        'stroke="#22c55e" stroke-width="3" stroke-linecap="round" '
        f'stroke-dasharray="{SCORE_RING_CIRCUMFERENCE:.3f}" stroke-dashoffset="{offset:.3f}" '
        f'transform="rotate(-90 {c:g} {c:g})"/>'
        f'<text x="{c:g}" y="{c:g}" font-size="9" text-anchor="middle" '
        f'dominant-baseline="central" fill="#0f172a">{int(score)}</text>'
        "</svg>"
    )
