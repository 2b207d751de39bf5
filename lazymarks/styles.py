"""Display styles per bookmark category.

``Styles`` is built once from settings and passed to whatever renders nodes.
Unknown categories fall back to the ``default`` style.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from urllib.parse import quote

BLUE = "#157EFB"
GREEN = "#2FCE7C"
PURPLE = "#C679E0"
RED = "#F44336"

DEFAULT_STYLE = "default"

_BOOKMARK_SVG = (
    '<svg version="1" xmlns="http://www.w3.org/2000/svg" viewBox="0 0 48 48" '
    'enable-background="new 0 0 48 48"><path fill="{color}" '
    'd="M37,43l-13-6l-13,6V9c0-2.2,1.8-4,4-4h18c2.2,0,4,1.8,4,4V43z"/></svg>'
)


def bookmark_icon_uri(color: str) -> str:
    """Return a ``data:`` URI of the bookmark glyph filled with ``color``."""
    return "data:image/svg+xml," + quote(_BOOKMARK_SVG.format(color=color), safe="")


@dataclass(frozen=True)
class Style:
    name: str
    icon: str
    options: Mapping[str, object] = field(default_factory=dict)


def _default_style(name: str, color: str) -> Style:
    icon = bookmark_icon_uri(color)
    return Style(
        name=name,
        icon=icon,
        options={
            "gutterIconPath": icon,
            "overviewRulerColor": color + "B0",
            "light": {"fontWeight": "bold"},
            "dark": {"color": "Chocolate"},
        },
    )


def _custom_style(name: str, raw: Mapping[str, object], asset_root: Path | None) -> Style:
    """Normalize user style options.

    Without an icon path the icon color defaults to blue. An icon color always
    wins over an icon path; relative paths resolve against ``asset_root``.
    """
    options = dict(raw)
    if not options.get("gutterIconPath"):
        options["gutterIconColor"] = options.get("gutterIconColor") or BLUE

    color = options.get("gutterIconColor")
    if color:
        options["gutterIconPath"] = bookmark_icon_uri(str(color))
    else:
        icon_path = Path(str(options["gutterIconPath"]))
        if asset_root is not None and not icon_path.is_absolute():
            icon_path = asset_root / icon_path
        options["gutterIconPath"] = str(icon_path)

    if options.get("overviewRulerColor"):
        options["overviewRulerLane"] = "full"
    if options.get("backgroundColor"):
        options["isWholeLine"] = True
    return Style(name=name, icon=str(options["gutterIconPath"]), options=options)


class Styles:
    """Immutable category -> ``Style`` registry."""

    def __init__(self, styles: Mapping[str, Style]) -> None:
        self._styles = dict(styles)
        if DEFAULT_STYLE not in self._styles:
            self._styles[DEFAULT_STYLE] = _default_style(DEFAULT_STYLE, BLUE)

    @classmethod
    def from_settings(
        cls,
        custom_styles: Mapping[str, Mapping[str, object]] | None = None,
        asset_root: Path | None = None,
    ) -> Styles:
        styles = {
            DEFAULT_STYLE: _default_style(DEFAULT_STYLE, BLUE),
            "red": _default_style("red", RED),
            "blue": _default_style("blue", BLUE),
            "green": _default_style("green", GREEN),
            "purple": _default_style("purple", PURPLE),
        }
        for name, raw in (custom_styles or {}).items():
            styles[name] = _custom_style(name, raw, asset_root)
        return cls(styles)

    def __contains__(self, name: object) -> bool:
        return name in self._styles

    def names(self) -> list[str]:
        return list(self._styles)

    def get(self, category: str) -> Style:
        return self._styles.get(category) or self._styles[DEFAULT_STYLE]

    def icon_for(self, category: str) -> str:
        return self.get(category).icon
