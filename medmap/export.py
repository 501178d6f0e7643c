"""Rasterize a mind map and save it as JPEG or single-page PDF"""

import textwrap
from typing import Iterable, Optional, Tuple

from PIL import Image, ImageDraw, ImageFont
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

from .helpers import ensure_directories_exist
from .models import EDGE_COLOR, Edge, Node, Verdict

NODE_WIDTH = 200
NODE_HEIGHT = 72
PADDING = 40
SCALE = 2
JPEG_QUALITY = 95
BACKGROUND = "#ffffff"
TEXT_COLOR = "#1f2937"

# (background, border)
UNVERIFIED_COLORS = ("#f3f4f6", "#9ca3af")
HIGH_COLORS = ("#d1fae5", "#10b981")
MEDIUM_COLORS = ("#fef3c7", "#f59e0b")
FLAGGED_COLORS = ("#fee2e2", "#ef4444")


def node_colors(verification: Optional[Verdict]) -> Tuple[str, str]:
    if verification is None:
        return UNVERIFIED_COLORS
    if verification.verified and verification.confidence == "high":
        return HIGH_COLORS
    if verification.verified and verification.confidence == "medium":
        return MEDIUM_COLORS
    return FLAGGED_COLORS


def _font(size: int):
    return ImageFont.load_default(size=size)


def _arrow(draw: ImageDraw.ImageDraw, tip: Tuple[float, float], size: float, color: str):
    x, y = tip
    draw.polygon([(x, y), (x - size, y - size * 1.6), (x + size, y - size * 1.6)], fill=color)


def render_canvas(
    nodes: Iterable[Node],
    edges: Iterable[Edge],
    scale: int = SCALE,
    background: str = BACKGROUND,
) -> Image.Image:
    """Draw nodes and edges onto a white canvas sized to the graph's bounding box"""
    nodes = list(nodes)
    if nodes:
        min_x = min(n.position.x for n in nodes)
        min_y = min(n.position.y for n in nodes)
        max_x = max(n.position.x for n in nodes) + NODE_WIDTH
        max_y = max(n.position.y for n in nodes) + NODE_HEIGHT
    else:
        min_x = min_y = max_x = max_y = 0

    width = int(round((max_x - min_x + 2 * PADDING) * scale))
    height = int(round((max_y - min_y + 2 * PADDING) * scale))
    image = Image.new("RGB", (width, height), background)
    draw = ImageDraw.Draw(image)

    def to_px(x: float, y: float) -> Tuple[float, float]:
        return (x - min_x + PADDING) * scale, (y - min_y + PADDING) * scale

    by_id = {n.id: n for n in nodes}
    for edge in edges:
        source, target = by_id.get(edge.source), by_id.get(edge.target)
        if source is None or target is None:
            continue
        sx, sy = to_px(source.position.x + NODE_WIDTH / 2, source.position.y + NODE_HEIGHT)
        tx, ty = to_px(target.position.x + NODE_WIDTH / 2, target.position.y)
        mid = (sy + ty) / 2
        color = edge.style.stroke or EDGE_COLOR
        draw.line(
            [(sx, sy), (sx, mid), (tx, mid), (tx, ty)],
            fill=color,
            width=max(1, int(edge.style.stroke_width * scale)),
            joint="curve",
        )
        _arrow(draw, (tx, ty), 5 * scale, color)

    label_font = _font(12 * scale)
    badge_font = _font(9 * scale)
    for node in nodes:
        fill, outline = node_colors(node.data.verification)
        left, top = to_px(node.position.x, node.position.y)
        right, bottom = to_px(node.position.x + NODE_WIDTH, node.position.y + NODE_HEIGHT)
        draw.rounded_rectangle(
            [left, top, right, bottom], radius=8 * scale, fill=fill, outline=outline, width=2 * scale
        )

        lines = textwrap.wrap(node.data.label, width=26)[:3] or [""]
        y = top + 8 * scale
        for line in lines:
            draw.text((left + 10 * scale, y), line, fill=TEXT_COLOR, font=label_font)
            y += 15 * scale

        verdict = node.data.verification
        if verdict is not None:
            badge = "Verified" if verdict.verified else "Unverified"
            draw.text(
                (left + 10 * scale, bottom - 14 * scale),
                f"{badge} - {verdict.confidence} confidence",
                fill=outline,
                font=badge_font,
            )

    return image


def export_jpeg(image: Image.Image, path: str) -> Tuple[int, int]:
    ensure_directories_exist(path)
    image.convert("RGB").save(path, "JPEG", quality=JPEG_QUALITY)
    return image.size


def export_pdf(image: Image.Image, path: str) -> Tuple[int, int]:
    """Single page PDF whose page is exactly the size of the image"""
    ensure_directories_exist(path)
    width, height = image.size
    pdf = canvas.Canvas(path, pagesize=(width, height))
    pdf.drawImage(ImageReader(image.convert("RGB")), 0, 0, width=width, height=height)
    pdf.showPage()
    pdf.save()
    return image.size
