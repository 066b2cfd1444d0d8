"""Umrechnung zwischen Zeiger-Position und Prozent-Koordinaten auf dem Etagenbild."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Rect:
    """Sichtbares Rechteck des Kartencontainers (Bildschirmkoordinaten)."""

    left: float
    top: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.left + self.width

    @property
    def bottom(self) -> float:
        return self.top + self.height


@dataclass(frozen=True)
class Size:
    width: float
    height: float


@dataclass(frozen=True)
class ScrollOffset:
    left: float
    top: float


def _clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, value))


def point_to_percent(pointer_x: float, pointer_y: float, rect: Rect) -> tuple[float, float]:
    """Zeiger-Position → (x%, y%) relativ zum Container.

    Klicks außerhalb werden auf den Rand geklemmt, das Ergebnis liegt immer
    in [0, 100]. Gerundet auf zwei Nachkommastellen.
    """
    if rect.width <= 0 or rect.height <= 0:
        raise ValueError(f"Container ohne Fläche: {rect}")
    px = _clamp(pointer_x, rect.left, rect.right)
    py = _clamp(pointer_y, rect.top, rect.bottom)
    x = (px - rect.left) / rect.width * 100
    y = (py - rect.top) / rect.height * 100
    return round(x, 2), round(y, 2)


def percent_to_scroll_offset(
    x_percent: float,
    y_percent: float,
    container: Size,
    viewport: Size,
) -> ScrollOffset:
    """Scroll-Position, die (x%, y%) im Sichtfenster zentriert. Nie negativ.

    container = scrollbare Gesamtgröße (inkl. Zoom), viewport = sichtbarer Teil.
    """
    marker_x = x_percent / 100 * container.width
    marker_y = y_percent / 100 * container.height
    return ScrollOffset(
        left=max(0.0, marker_x - viewport.width / 2),
        top=max(0.0, marker_y - viewport.height / 2),
    )


def percent_to_cell(x_percent: float, y_percent: float, columns: int, rows: int) -> tuple[int, int]:
    """(x%, y%) → (Spalte, Zeile) in einem Zeichenraster."""
    col = min(columns - 1, int(_clamp(x_percent, 0, 100) / 100 * columns))
    row = min(rows - 1, int(_clamp(y_percent, 0, 100) / 100 * rows))
    return col, row


# ─── Zoom ───

def zoom_in(zoom: float, step: float, maximum: float) -> float:
    return min(maximum, zoom * step)


def zoom_out(zoom: float, step: float, minimum: float) -> float:
    return max(minimum, zoom / step)


def zoomed_size(viewport: Size, zoom: float) -> Size:
    """Scrollbare Größe des Containers bei gegebenem Zoom."""
    return Size(width=viewport.width * zoom, height=viewport.height * zoom)
