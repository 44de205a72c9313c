import io
import textwrap
from typing import List

from matplotlib.figure import Figure
from matplotlib.patches import Rectangle

from scoreboard.models import RankedPlayer, TournamentData

BASE_DPI = 96
PIXEL_RATIO = 2
CARD_WIDTH_IN = 6.0
ROW_HEIGHT_IN = 0.32
HEADER_HEIGHT_IN = 1.7
SUMMARY_LINE_HEIGHT_IN = 0.22
FOOTER_HEIGHT_IN = 0.9

# the card only has room for a full lobby
CARD_ROW_LIMIT = 12

BACKGROUND = "#111827"
TEXT_COLOR = "#e5e7eb"
MUTED = "#9ca3af"
ACCENT = "#facc15"
KILLS_COLOR = "#ef4444"
POINTS_COLOR = "#22d3ee"
ROW_COLORS = ("#3f3a1d", "#2f3136", "#3a2a1f", "#1f2937")  # gold, silver, bronze, rest

SUMMARY_PROMPT_TEXT = "Click 'Generate AI Summary' to create epic commentary!"
SUMMARY_DISABLED_TEXT = "AI Summary requires a configured API key."


class ExportError(Exception):
    """Raised when the results card cannot be rendered."""

    pass


def summary_text(summary: str, ai_available: bool) -> str:
    """Text shown in the card's summary box."""
    if summary:
        return summary
    return SUMMARY_PROMPT_TEXT if ai_available else SUMMARY_DISABLED_TEXT


def card_rows(ranked: List[RankedPlayer]) -> List[RankedPlayer]:
    return ranked[:CARD_ROW_LIMIT]


def _plain(text: str) -> str:
    # matplotlib treats paired dollar signs as mathtext
    return text.replace("$", r"\$")


def render_results_png(
    data: TournamentData,
    ranked: List[RankedPlayer],
    summary: str = "",
    ai_available: bool = True,
) -> bytes:
    """
    Draw the overall results card and return it as PNG bytes at 2x pixel density.

    Builds a standalone Figure (no pyplot state), so it is safe to call from a
    worker thread.

    Raises:
        ExportError: If matplotlib fails to render the card
    """
    rows = card_rows(ranked)
    summary_lines = textwrap.wrap(summary_text(summary, ai_available), width=80)
    height = (
        HEADER_HEIGHT_IN
        + (max(len(rows), 1) + 1) * ROW_HEIGHT_IN
        + (len(summary_lines) + 2) * SUMMARY_LINE_HEIGHT_IN
        + FOOTER_HEIGHT_IN
    )
    match_count = len(data.matches)

    try:
        fig = Figure(figsize=(CARD_WIDTH_IN, height), dpi=BASE_DPI, facecolor=BACKGROUND)
        ax = fig.add_axes([0, 0, 1, 1])
        ax.set_axis_off()
        ax.set_xlim(0, CARD_WIDTH_IN)
        ax.set_ylim(height, 0)
        center = CARD_WIDTH_IN / 2

        y = 0.45
        ax.text(center, y, "OVERALL STANDINGS", ha="center", va="center",
                fontsize=20, fontweight="bold", color=ACCENT)
        y += 0.45
        ax.text(center, y, _plain(data.title), ha="center", va="center",
                fontsize=14, color=TEXT_COLOR)
        y += 0.32
        subtitle = f"{data.date} ({match_count} " + ("Matches" if match_count > 1 else "Match") + ")"
        ax.text(center, y, _plain(subtitle), ha="center", va="center", fontsize=9, color=MUTED)

        y = HEADER_HEIGHT_IN
        columns = ((0.3, "#", "left"), (0.8, "Player", "left"),
                   (4.4, "Total Kills", "center"), (5.7, "Total Points", "right"))
        for x, label, align in columns:
            ax.text(x, y, label.upper(), ha=align, va="center", fontsize=8,
                    fontweight="bold", color=ACCENT)

        for i, p in enumerate(rows):
            y += ROW_HEIGHT_IN
            ax.add_patch(Rectangle(
                (0.15, y - ROW_HEIGHT_IN / 2 + 0.02), CARD_WIDTH_IN - 0.3, ROW_HEIGHT_IN - 0.04,
                color=ROW_COLORS[min(i, 3)], zorder=0,
            ))
            values = (str(p.rank), _plain(p.name), str(p.total_kills), str(p.total_points))
            colors = (ACCENT if i == 0 else MUTED, TEXT_COLOR, KILLS_COLOR, POINTS_COLOR)
            for (x, _, align), value, color in zip(columns, values, colors):
                ax.text(x, y, value, ha=align, va="center", fontsize=10,
                        fontweight="bold", color=color)

        y += ROW_HEIGHT_IN + SUMMARY_LINE_HEIGHT_IN
        ax.text(0.3, y, "AI Hype Summary", ha="left", va="center", fontsize=11,
                fontweight="bold", color=ACCENT)
        for line in summary_lines:
            y += SUMMARY_LINE_HEIGHT_IN
            ax.text(0.3, y, _plain(line), ha="left", va="center", fontsize=8, color=TEXT_COLOR)

        ax.text(center, height - FOOTER_HEIGHT_IN / 2, "BOOYAH!", ha="center", va="center",
                fontsize=14, fontweight="bold", color="white")

        buf = io.BytesIO()
        fig.savefig(buf, format="png", dpi=BASE_DPI * PIXEL_RATIO, facecolor=BACKGROUND)
    except (ValueError, RuntimeError, OSError) as e:
        raise ExportError(f"Could not render results card: {e}") from e

    return buf.getvalue()
