"""
Sample chart widget.

Plots the x/y/z series of a BINARY_LE channel with Braille dots, two
columns by four rows of dots per cell:

     2000 ⠀⠀⠀⢀⡠⠤⠒⠊⠉⠉⠑⠒⠤⢄⡀⠀
        0 ⠤⠔⠊⠁⠀⠀⠀⠀⠀⠀⠀⠀⠀⠀⠈⠑
    -2000 ⠀⠀⠀⠀⠀⠀⠀⠀⠀⠀⠀⠀⠀⠀⠀⠀
          0        64        128
"""

from typing import TYPE_CHECKING, Optional, Sequence

from rich.text import Text
from textual.widget import Widget

from ...rtt.channel import CHART_BOUNDS

if TYPE_CHECKING:
    from ...rtt.dashboard import Dashboard

BRAILLE_BASE = 0x2800

# Dot bit for (row, column) inside one Braille cell
BRAILLE_DOTS = (
    (0x01, 0x08),
    (0x02, 0x10),
    (0x04, 0x20),
    (0x40, 0x80),
)

SERIES_NAMES = ("x", "y", "z")
SERIES_COLORS = ("yellow", "blue", "green")

GUTTER = 7


def _fmt(value: float) -> str:
    return f"{value:g}"


def render_chart(
    series: Sequence[Sequence[tuple[float, float]]],
    width: int,
    height: int,
    y_bounds: tuple[float, float] = CHART_BOUNDS,
) -> Text:
    """
    Draw `series` into a `width` x `height` cell area.

    The first row is the legend, the last row the x axis labels, the y axis
    labels sit in a left gutter. The x axis spans 0..len(first series).
    """
    plot_width = max(1, width - GUTTER)
    plot_height = max(1, height - 2)

    count = max((len(points) for points in series), default=0)
    x_min, x_max = 0.0, float(max(1, count))
    y_min, y_max = y_bounds

    dot_cols = plot_width * 2
    dot_rows = plot_height * 4

    cells = [[0] * plot_width for _ in range(plot_height)]
    colors: list[list[Optional[str]]] = [[None] * plot_width for _ in range(plot_height)]

    for points, color in zip(series, SERIES_COLORS):
        for x, y in points:
            if not (x_min <= x <= x_max and y_min <= y <= y_max):
                continue
            col = round((x - x_min) / (x_max - x_min) * (dot_cols - 1))
            row = round((y_max - y) / (y_max - y_min) * (dot_rows - 1))
            cell_row, cell_col = row // 4, col // 2
            cells[cell_row][cell_col] |= BRAILLE_DOTS[row % 4][col % 2]
            colors[cell_row][cell_col] = color

    text = Text(no_wrap=True, overflow="crop")

    # Legend
    text.append(" " * GUTTER)
    for name, color in zip(SERIES_NAMES, SERIES_COLORS):
        text.append(f"● {name}  ", style=color)
    text.append("\n")

    # Plot area with y labels at top, middle and bottom
    labels = {0: _fmt(y_max), (plot_height - 1) // 2: _fmt((y_min + y_max) / 2), plot_height - 1: _fmt(y_min)}
    for r in range(plot_height):
        text.append(labels.get(r, "").rjust(GUTTER - 1) + " ", style="italic")
        for c in range(plot_width):
            text.append(chr(BRAILLE_BASE + cells[r][c]), style=colors[r][c] or "")
        text.append("\n")

    # X axis labels
    axis = [" "] * plot_width
    for position, label in ((0, _fmt(0)), (plot_width // 2, _fmt(x_max / 2)), (plot_width - 1, _fmt(x_max))):
        start = min(position, max(0, plot_width - len(label)))
        axis[start:start + len(label)] = list(label)
    text.append(" " * GUTTER + "".join(axis[:plot_width]), style="italic")

    return text


class SampleChart(Widget):
    """Live chart of the active tab's sample triples"""

    DEFAULT_CSS = """
    SampleChart {
        height: 1fr;
        border: round $accent;
        border-title-color: $accent;
    }
    """

    def __init__(self, dashboard: "Dashboard", *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.dashboard = dashboard
        self.border_title = "samples"

    def render(self) -> Text:
        return render_chart(
            self.dashboard.current.series(),
            self.size.width,
            self.size.height,
        )
