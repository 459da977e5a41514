"""
IconManager for rendering Lucide SVG icons as high-DPI QIcons.

https://lucide.dev/icons/

Icons are tinted to match the palette in aura/styles.py and rendered via
QSvgRenderer onto a QPixmap scaled by the screen's device pixel ratio.

Usage
-----
    from aura.icons import IconManager

    btn.setIcon(IconManager.get_icon("send", tint="primary"))
"""

from __future__ import annotations

from PyQt6.QtCore import QByteArray, QRectF, Qt
from PyQt6.QtGui import QIcon, QPainter, QPixmap
from PyQt6.QtSvg import QSvgRenderer
from PyQt6.QtWidgets import QApplication


# ---------------------------------------------------------------------------
# Colour constants – mirror the palette in aura/styles.py
# ---------------------------------------------------------------------------
_TINTS: dict[str, dict[bool, str]] = {
    # tint_name -> {is_dark: hex_colour}
    "default": {
        True:  "#E1E1E6",
        False: "#333333",
    },
    "primary": {
        True:  "#B39DFF",
        False: "#6D4FC2",
    },
    "on_primary": {
        True:  "#1A1A1E",
        False: "#FFFFFF",
    },
}

_SVG_HEADER = (
    '<svg xmlns="http://www.w3.org/2000/svg" width="24" height="24" '
    'viewBox="0 0 24 24" fill="none" stroke="currentColor" stroke-width="2" '
    'stroke-linecap="round" stroke-linejoin="round">'
)

# ---------------------------------------------------------------------------
# Raw Lucide SVG sources – stroke="currentColor" is replaced at render time
# ---------------------------------------------------------------------------
_SVG_SOURCES: dict[str, str] = {
    "message_circle": (
        _SVG_HEADER + '<path d="M7.9 20A9 9 0 1 0 4 16.1L2 22Z"/></svg>'
    ),
    "send": (
        _SVG_HEADER
        + '<path d="m22 2-7 20-4-9-9-4Z"/><path d="M22 2 11 13"/></svg>'
    ),
    "x": (
        _SVG_HEADER + '<path d="M18 6 6 18"/><path d="m6 6 12 12"/></svg>'
    ),
    "maximize": (
        _SVG_HEADER
        + '<path d="M15 3h6v6"/><path d="m21 3-7 7"/>'
        '<path d="m3 21 7-7"/><path d="M9 21H3v-6"/></svg>'
    ),
    "log_out": (
        _SVG_HEADER
        + '<path d="M9 21H5a2 2 0 0 1-2-2V5a2 2 0 0 1 2-2h4"/>'
        '<polyline points="16 17 21 12 16 7"/>'
        '<line x1="21" x2="9" y1="12" y2="12"/></svg>'
    ),
}


class IconManager:
    """Render Lucide SVG icons as theme-aware, high-DPI QIcons.

    Rendered icons are cached by ``(name, is_dark, tint, size)``; call
    :meth:`refresh` after a theme change to flush the cache.
    """

    _cache: dict[tuple[str, bool, str, int], QIcon] = {}

    @classmethod
    def get_icon(cls, name: str, *, is_dark: bool = False,
                 tint: str = "default", size: int = 24) -> QIcon:
        key = (name, is_dark, tint, size)
        if key not in cls._cache:
            cls._cache[key] = cls._render(name, is_dark, tint, size)
        return cls._cache[key]

    @classmethod
    def refresh(cls) -> None:
        cls._cache.clear()

    @classmethod
    def available_icons(cls) -> list[str]:
        return list(_SVG_SOURCES.keys())

    @classmethod
    def _tinted_svg(cls, name: str, is_dark: bool, tint: str) -> str:
        svg = _SVG_SOURCES[name]
        colour = _TINTS[tint][is_dark]
        return svg.replace('stroke="currentColor"', f'stroke="{colour}"')

    @classmethod
    def _render(cls, name: str, is_dark: bool, tint: str, size: int) -> QIcon:
        svg_str = cls._tinted_svg(name, is_dark, tint)

        dpr = 1.0
        app = QApplication.instance()
        if app is not None:
            screen = app.primaryScreen()
            if screen is not None:
                dpr = screen.devicePixelRatio()

        physical = int(size * dpr)

        renderer = QSvgRenderer(QByteArray(svg_str.encode("utf-8")))
        renderer.setAspectRatioMode(Qt.AspectRatioMode.KeepAspectRatio)

        pixmap = QPixmap(physical, physical)
        pixmap.fill(Qt.GlobalColor.transparent)
        pixmap.setDevicePixelRatio(dpr)

        # Paint into the full logical rect rather than the SVG's viewBox size.
        target = QRectF(0, 0, size, size)
        painter = QPainter(pixmap)
        renderer.render(painter, target)
        painter.end()
        return QIcon(pixmap)
