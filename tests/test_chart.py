"""Tests for the Braille sample chart."""

from rttdash.tui.widgets import render_chart
from rttdash.tui.widgets.chart import BRAILLE_BASE, GUTTER


def plot_rows(text):
    return text.plain.split("\n")[1:-1]


class TestRenderChart:
    """Test chart rendering."""

    def test_size(self):
        text = render_chart(([], [], []), width=40, height=10)
        rows = text.plain.split("\n")

        assert len(rows) == 10
        assert all(len(row) <= 40 for row in rows)

    def test_legend(self):
        legend = render_chart(([], [], []), width=40, height=5).plain.split("\n")[0]
        assert "x" in legend and "y" in legend and "z" in legend

    def test_empty_plot(self):
        rows = plot_rows(render_chart(([], [], []), width=20, height=6))
        assert all(set(row[GUTTER:]) == {chr(BRAILLE_BASE)} for row in rows)

    def test_points_plotted(self):
        series = ([(0.0, 2000.0)], [(0.0, 0.0)], [(0.0, -2000.0)])
        rows = plot_rows(render_chart(series, width=20, height=6))

        assert rows[0][GUTTER] != chr(BRAILLE_BASE)
        assert rows[-1][GUTTER] != chr(BRAILLE_BASE)

    def test_out_of_bounds_dropped(self):
        series = ([(0.0, 5000.0)], [], [])
        rows = plot_rows(render_chart(series, width=20, height=6))
        assert all(set(row[GUTTER:]) == {chr(BRAILLE_BASE)} for row in rows)

    def test_y_labels(self):
        rows = plot_rows(render_chart(([], [], []), width=30, height=7))
        assert rows[0].strip().startswith("2000")
        assert rows[-1].strip().startswith("-2000")
