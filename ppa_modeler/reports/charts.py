"""Chart generation for PPA Deal Modeler reports.

Creates matplotlib charts for the 30-year savings projection and the
generation split. Charts are saved as PNG files for embedding in PDF
reports.
"""

from typing import Sequence

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import matplotlib.ticker as mticker
import numpy as np

from ppa_modeler.models.project import Phase, YearRecord

PPA_COLOR = "#10b981"
CLIENT_COLOR = "#8b5cf6"
HANDOVER_COLOR = "#f97316"


def create_savings_chart(
    records: Sequence[YearRecord],
    ppa_term_years: int,
    output_path: str,
) -> None:
    """Create the 30-year savings projection chart.

    Annual savings are drawn as bars coloured by phase, cumulative savings
    as a line, with a dashed marker at handover.

    Args:
        records: Year records of a projection.
        ppa_term_years: PPA term, used to place the handover marker.
        output_path: File path to save the PNG chart.
    """
    years = np.array([r.year for r in records])
    annual = np.array([r.annual_savings for r in records]) / 1e6
    cumulative = np.array([r.cumulative_savings for r in records]) / 1e6
    colors = [PPA_COLOR if r.phase is Phase.PPA_PHASE else CLIENT_COLOR for r in records]

    fig, ax = plt.subplots(figsize=(8, 4.5), dpi=150)
    ax.bar(years, annual, color=colors, alpha=0.85, label="Annual Savings")
    ax.plot(years, cumulative, color="#1e293b", linewidth=2, marker="o",
            markersize=3, label="Cumulative")

    if 0 < ppa_term_years < len(records):
        ax.axvline(x=ppa_term_years + 0.5, color=HANDOVER_COLOR, linestyle="--", linewidth=1.2)
        ax.text(ppa_term_years + 0.7, ax.get_ylim()[1] * 0.92, "Handover",
                color=HANDOVER_COLOR, fontsize=9)

    ax.set_xlabel("Year", fontsize=11)
    ax.set_ylabel("THB Millions", fontsize=11)
    ax.set_title("30-Year Savings Projection", fontsize=13, fontweight="bold")
    ax.axhline(y=0, color="black", linewidth=0.5)
    ax.yaxis.set_major_formatter(mticker.FuncFormatter(lambda x, _: f"{x:,.0f}M"))
    ax.grid(axis="y", alpha=0.3)
    ax.legend(fontsize=9, loc="upper left")

    fig.tight_layout()
    fig.savefig(output_path, bbox_inches="tight", facecolor="white")
    plt.close(fig)


def create_generation_chart(records: Sequence[YearRecord], output_path: str) -> None:
    """Create a stacked bar chart of consumed peak and off-peak energy.

    Args:
        records: Year records of a projection.
        output_path: File path to save the PNG chart.
    """
    years = np.array([r.year for r in records])
    peak = np.array([r.peak_generation for r in records]) / 1e6
    off_peak = np.array([r.off_peak_generation for r in records]) / 1e6

    fig, ax = plt.subplots(figsize=(8, 4), dpi=150)
    ax.bar(years, peak, color="#1565c0", alpha=0.85, label="Peak")
    ax.bar(years, off_peak, bottom=peak, color="#90caf9", alpha=0.85, label="Off-Peak")

    ax.set_xlabel("Year", fontsize=11)
    ax.set_ylabel("GWh", fontsize=11)
    ax.set_title("Consumed Solar Generation", fontsize=13, fontweight="bold")
    ax.legend(fontsize=9)
    ax.grid(axis="y", alpha=0.3)

    fig.tight_layout()
    fig.savefig(output_path, bbox_inches="tight", facecolor="white")
    plt.close(fig)
