"""Theme colors and color utilities for the UI."""


class CinemaColors:
    """Dark cinema palette: near-black background with gold accents."""

    BG_TOP = "#141414"
    BG_BOTTOM = "#0a0a0a"

    GOLD = "#f5c518"
    GOLD_DARK = "#c99a06"

    CARD_BG = "rgba(255, 255, 255, 0.05)"
    CARD_BORDER = "rgba(255, 255, 255, 0.10)"

    SLOT_EMPTY = "#262626"
    SLOT_FILLED = "#f5c518"
    TILE = "#2e2e2e"
    TILE_USED = "#1a1a1a"

    SUCCESS = "#22c55e"
    ERROR = "#ef4444"

    TEXT_PRIMARY = "#ffffff"
    TEXT_MUTED = "#8a8a8a"
    TEXT_ON_GOLD = "#0a0a0a"


def blend_hex(a: str, b: str, t: float) -> str:
    """Blend two #RRGGBB colors. t=0 -> a, t=1 -> b. Invalid input returns ``a``."""
    a = a.strip()
    b = b.strip()
    if not (a.startswith("#") and b.startswith("#") and len(a) == 7 and len(b) == 7):
        return a
    try:
        ca = [int(a[i : i + 2], 16) for i in (1, 3, 5)]
        cb = [int(b[i : i + 2], 16) for i in (1, 3, 5)]
    except ValueError:
        return a
    t = max(0.0, min(1.0, float(t)))
    mixed = [int(x + (y - x) * t) for x, y in zip(ca, cb)]
    return "#" + "".join(f"{c:02X}" for c in mixed)


def slot_colors(filled: bool, error: bool = False) -> tuple[str, str, str]:
    """Background, text and border colors for one answer slot."""
    if filled:
        bg, fg = CinemaColors.SLOT_FILLED, CinemaColors.TEXT_ON_GOLD
    else:
        bg, fg = CinemaColors.SLOT_EMPTY, CinemaColors.TEXT_PRIMARY
    border = CinemaColors.ERROR if error else blend_hex(bg, "#FFFFFF", 0.25)
    return bg, fg, border


def tile_colors(used: bool) -> tuple[str, str]:
    """Background and hover colors for a pool tile. Used tiles do not highlight."""
    bg = CinemaColors.TILE_USED if used else CinemaColors.TILE
    hover = bg if used else blend_hex(CinemaColors.TILE, CinemaColors.GOLD, 0.25)
    return bg, hover
