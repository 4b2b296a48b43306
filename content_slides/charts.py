#!/usr/bin/env python3
"""
Chart data tabulation and the image-based chart renderer.

The native renderer (python-pptx chart parts) and the image renderer used
when it fails both read the same :class:`ChartTable`, so a chart looks the
same whichever path drew it.
"""
import logging
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

import matplotlib
matplotlib.use('Agg')  # Use non-interactive backend
import matplotlib.pyplot as plt
import numpy as np

from .css_utils import color_to_hex
from .models import ChartElement
from .paths import temp_path

logger = logging.getLogger(__name__)

LARGE_CHART_ROWS = 100
PIE_SERIES_NAME = "Values"


@dataclass
class ChartTable:
    """Categories plus named value series; missing or non-numeric values are None."""
    categories: List[str] = field(default_factory=list)
    series: List[Tuple[str, List[Optional[float]]]] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.categories or not self.series


def _number(cell: str) -> Optional[float]:
    try:
        return float(cell)
    except ValueError:
        return None


def _is_header(row: List[str]) -> bool:
    cells = [cell for cell in row[1:] if cell]
    return bool(cells) and all(_number(cell) is None for cell in cells)


def tabulate(element: ChartElement) -> ChartTable:
    """
    Turn a chart's ``a,b;c,d`` data block into categories and series.

    Pie charts read one ``category,value`` pair per row and skip rows with
    fewer than two cells. Every other type keeps the grid as written, one
    series per row named by its first cell. A first row whose remaining
    cells are all non-numeric is a header row holding the category labels
    (its first cell is the corner); otherwise categories are numbered 1..n.
    """
    rows = element.data_rows()
    if len(rows) > LARGE_CHART_ROWS:
        logger.warning("Large chart data detected (%d rows); rendering may be slow", len(rows))

    table = ChartTable()
    if element.is_pie:
        values = []
        for row in rows:
            if len(row) < 2:
                continue
            table.categories.append(row[0])
            values.append(_number(row[1]))
        if table.categories:
            table.series.append((PIE_SERIES_NAME, values))
        return table

    if not rows:
        return table

    if _is_header(rows[0]):
        table.categories = rows[0][1:]
        body = rows[1:]
    else:
        width = max(len(row) for row in rows) - 1
        table.categories = [str(index + 1) for index in range(width)]
        body = rows

    width = len(table.categories)
    for row in body:
        values = [_number(cell) for cell in row[1:1 + width]]
        values += [None] * (width - len(values))
        table.series.append((row[0], values))
    return table


def series_colors(element: ChartElement) -> List[Optional[str]]:
    """Matplotlib colour per series, in declaration order."""
    return [color_to_hex(spec.color) for spec in element.series]


def render_chart_figure(element: ChartElement, table: ChartTable, width_pt: float, height_pt: float):
    """
    Draw *table* as a matplotlib figure sized to the target box.

    Returns:
        matplotlib Figure object
    """
    if table.is_empty:
        raise ValueError("Chart has no data to plot")

    colors = series_colors(element)
    fig, ax = plt.subplots(figsize=(width_pt / 72, height_pt / 72))
    chart_type = element.chart_type.lower()

    if chart_type == 'pie':
        name, values = table.series[0]
        ax.pie([v or 0 for v in values], labels=table.categories, autopct='%1.0f%%')
        ax.axis('equal')
    elif chart_type == 'line':
        for index, (name, values) in enumerate(table.series):
            color = colors[index] if index < len(colors) else None
            ax.plot(table.categories, [np.nan if v is None else v for v in values],
                    label=name, color=color, linewidth=2, marker='o', markersize=4)
    else:
        x = np.arange(len(table.categories))
        bar_width = 0.8 / len(table.series)
        for index, (name, values) in enumerate(table.series):
            color = colors[index] if index < len(colors) else None
            ax.bar(x + index * bar_width - 0.4 + bar_width / 2, [v or 0 for v in values],
                   bar_width, label=name, color=color)
        ax.set_xticks(x)
        ax.set_xticklabels(table.categories)

    if chart_type != 'pie' and len(table.series) > 1:
        ax.legend()
    plt.tight_layout()
    return fig


def add_chart_picture(slide, element: ChartElement, table: ChartTable, left, top, width, height, dpi: int = 150):
    """
    Embed the chart as a PNG picture at the given EMU box.

    The intermediate image file only lives for the duration of this call.
    """
    fig = render_chart_figure(element, table, width.pt, height.pt)
    try:
        with temp_path(suffix='.png') as png_path:
            fig.savefig(png_path, dpi=dpi, facecolor='white')
            picture = slide.shapes.add_picture(str(png_path), left, top, width=width, height=height)
    finally:
        plt.close(fig)
    logger.info("Rendered %s chart as picture (%d series)", element.chart_type, len(table.series))
    return picture
