"""Dashboard composer: self-refreshing HTML page and a PNG status card."""

from __future__ import annotations

import html
from io import BytesIO
from string import Template

from PIL import Image, ImageDraw, ImageFont

from pimonitor_telemetry.models import TelemetryRecord

from .formatting import build_view
from .models import DashboardView, ThemeConfig
from .themes import get_theme


_PAGE = Template(
    """<!DOCTYPE html>
<html><head>
<meta charset="UTF-8">
<meta http-equiv="refresh" content="$refresh">
<title>$title</title>
<style>
body { background-color: $background; color: #e0e0e0; font-family: 'Segoe UI', sans-serif; display: flex; justify-content: center; align-items: center; height: 100vh; margin: 0; }
.dashboard { background-color: $card_bg; padding: 2rem; border-radius: 10px; box-shadow: 0 4px 6px rgba(0,0,0,0.3); width: 400px; }
h2 { text-align: center; margin-bottom: 1.5rem; color: $text_primary; }
.metric { margin-bottom: 1.5rem; }
.label { display: flex; justify-content: space-between; margin-bottom: 0.5rem; font-weight: bold; }
.bar-bg { background-color: $bar_bg; height: 20px; border-radius: 10px; overflow: hidden; }
.bar-fill { height: 100%; transition: width 0.3s ease; }
.info-grid { display: grid; grid-template-columns: 1fr 1fr; gap: 1rem; text-align: center; margin-top: 1rem; }
.info-box { background: $tile_bg; padding: 10px; border-radius: 5px; }
.val { font-size: 1.2rem; color: $text_primary; }
.unit { font-size: 0.8rem; color: $text_secondary; }
</style>
</head><body>
<div class="dashboard">
  <h2>$title</h2>
  <div class="metric">
    <div class="label"><span>CPU Usage</span><span>$cpu_usage_text</span></div>
    <div class="bar-bg"><div class="bar-fill" style="width: $cpu_bar_pct%; background-color: $cpu_bar_color;"></div></div>
  </div>
  <div class="metric">
    <div class="label"><span>Memory</span><span>$mem_used_text</span></div>
    <div class="bar-bg"><div class="bar-fill" style="width: $mem_bar_pct%; background-color: $mem_bar_color;"></div></div>
  </div>
  <div class="info-grid">
    <div class="info-box"><div class="val">$temp_text</div><div class="unit">Temp</div></div>
    <div class="info-box"><div class="val">$uptime_text</div><div class="unit">Uptime</div></div>
    <div class="info-box"><div class="val">$free_mb MB</div><div class="unit">Free RAM</div></div>
    <div class="info-box"><div class="val">$total_mb MB</div><div class="unit">Total RAM</div></div>
  </div>
</div>
</body></html>
"""
)


def _rgb(hex_color: str) -> tuple[int, int, int]:
    return tuple(int(hex_color[i : i + 2], 16) for i in (1, 3, 5))  # type: ignore[return-value]


class DashboardRenderer:
    """Renders one telemetry record as an HTML page or a PNG card."""

    def __init__(self, theme_name: str | None = None, title: str = "Raspberry Pi Monitor") -> None:
        self.theme: ThemeConfig = get_theme(theme_name)
        self.title = title

    def view(self, record: TelemetryRecord) -> DashboardView:
        return build_view(record, self.theme)

    def render_html(self, record: TelemetryRecord, refresh_s: int = 1) -> str:
        v = self.view(record)
        t = self.theme
        return _PAGE.substitute(
            refresh=int(refresh_s),
            title=html.escape(self.title),
            background=t.background,
            card_bg=t.card_bg,
            tile_bg=t.tile_bg,
            bar_bg=t.bar_bg,
            text_primary=t.text_primary,
            text_secondary=t.text_secondary,
            cpu_usage_text=v.cpu_usage_text,
            cpu_bar_pct=f"{v.cpu_bar_pct:.1f}",
            cpu_bar_color=v.cpu_bar_color,
            mem_used_text=v.mem_used_text,
            mem_bar_pct=f"{v.mem_bar_pct:.1f}",
            mem_bar_color=v.mem_bar_color,
            temp_text=v.temp_text,
            uptime_text=v.uptime_text,
            free_mb=v.free_mb,
            total_mb=v.total_mb,
        )

    def render_image(self, record: TelemetryRecord, width: int = 480, height: int = 320) -> Image.Image:
        v = self.view(record)
        t = self.theme
        image = Image.new("RGB", (width, height), _rgb(t.background))
        draw = ImageDraw.Draw(image)

        draw.rounded_rectangle((12, 12, width - 12, height - 12), radius=12, fill=_rgb(t.card_bg))
        draw.text((28, 24), self.title, font=self._font(20), fill=_rgb(t.text_primary))

        self._draw_bar(draw, 28, 64, width - 56, "CPU Usage", v.cpu_usage_text, v.cpu_bar_pct, v.cpu_bar_color)
        self._draw_bar(draw, 28, 124, width - 56, "Memory", v.mem_used_text, v.mem_bar_pct, v.mem_bar_color)

        tiles = [
            (v.temp_text, "Temp"),
            (v.uptime_text, "Uptime"),
            (f"{v.free_mb} MB", "Free RAM"),
            (f"{v.total_mb} MB", "Total RAM"),
        ]
        tile_w = (width - 56 - 12) // 2
        for idx, (value, unit) in enumerate(tiles):
            x0 = 28 + (idx % 2) * (tile_w + 12)
            y0 = 188 + (idx // 2) * 56
            draw.rounded_rectangle((x0, y0, x0 + tile_w, y0 + 48), radius=5, fill=_rgb(t.tile_bg))
            draw.text((x0 + 10, y0 + 6), value, font=self._font(18, mono=True), fill=_rgb(t.text_primary))
            draw.text((x0 + 10, y0 + 30), unit, font=self._font(12), fill=_rgb(t.text_secondary))
        return image

    def render_png(self, record: TelemetryRecord) -> bytes:
        buf = BytesIO()
        self.render_image(record).save(buf, format="PNG")
        return buf.getvalue()

    def _draw_bar(
        self,
        draw: ImageDraw.ImageDraw,
        x: int,
        y: int,
        w: int,
        label: str,
        value: str,
        pct: float,
        color: str,
    ) -> None:
        t = self.theme
        font = self._font(14)
        draw.text((x, y), label, font=font, fill=_rgb(t.text_primary))
        draw.text((x + w - 60, y), value, font=font, fill=_rgb(t.text_primary))
        draw.rounded_rectangle((x, y + 24, x + w, y + 44), radius=10, fill=_rgb(t.bar_bg))
        fill_w = int(w * pct / 100.0)
        if fill_w > 0:
            draw.rounded_rectangle((x, y + 24, x + fill_w, y + 44), radius=min(10, fill_w // 2), fill=_rgb(color))

    def _font(self, size: int, mono: bool = False):
        preferred = "DejaVuSansMono.ttf" if mono else "DejaVuSans.ttf"
        try:
            return ImageFont.truetype(preferred, size)
        except Exception:
            return ImageFont.load_default()
