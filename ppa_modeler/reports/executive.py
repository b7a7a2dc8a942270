"""Deal summary PDF report generation using ReportLab.

Generates a PDF for investment committee review containing the
deal overview, headline savings statistics, risk screening (curtailment
and counterparty credit), the savings projection chart, the 30-year
table, and the model assumptions.
"""

import logging
import tempfile
from pathlib import Path
from typing import Optional

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import inch
from reportlab.platypus import (
    Image,
    PageBreak,
    Paragraph,
    SimpleDocTemplate,
    Spacer,
    Table,
    TableStyle,
)

from ppa_modeler.data.libraries import SectorTaxonomy
from ppa_modeler.data.validators import require_valid_parameters
from ppa_modeler.models.calculations import calculate_savings_npv, project
from ppa_modeler.models.credit_risk import assess_credit
from ppa_modeler.models.curtailment import analyze_curtailment, curtailment_warnings
from ppa_modeler.models.project import Deal, Grade, Phase
from ppa_modeler.reports.charts import create_generation_chart, create_savings_chart
from ppa_modeler.utils.formatters import (
    format_currency,
    format_millions,
    format_number,
    format_percent,
    format_year,
)

logger = logging.getLogger(__name__)

PREFIX = "THB "
_GRADE_COLORS = {Grade.A: colors.green, Grade.B: colors.orange, Grade.C: colors.red}


def _grid_style(header_bg: str = "#e0e0e0") -> TableStyle:
    return TableStyle([
        ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
        ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor(header_bg)),
        ("FONTSIZE", (0, 0), (-1, -1), 9),
        ("GRID", (0, 0), (-1, -1), 0.5, colors.grey),
        ("BOTTOMPADDING", (0, 0), (-1, -1), 4),
        ("TOPPADDING", (0, 0), (-1, -1), 4),
        ("ALIGN", (1, 0), (-1, -1), "RIGHT"),
    ])


def generate_executive_summary(
    deal: Deal,
    output_path: str,
    discount_rate: float = 0.07,
    taxonomy: Optional[SectorTaxonomy] = None,
) -> None:
    """Generate a deal summary PDF report.

    Creates a PDF with:
    - Page 1: Deal overview, headline savings and risk screening
    - Page 2: Savings and generation charts, phase explanation
    - Page 3+: 30-year projection table and model assumptions

    Args:
        deal: Deal with all inputs populated.
        output_path: File path for the output PDF.
        discount_rate: Decimal rate for the present value of savings.
        taxonomy: Sector taxonomy for credit scoring; loads the packaged
            library when None.

    Raises:
        ValidationError: If the deal's projection parameters are out of domain.
    """
    params = require_valid_parameters(deal.parameters)
    records, summary = project(params)
    curtailment = analyze_curtailment(deal.operating_days)
    credit = assess_credit(
        deal.credit, taxonomy or SectorTaxonomy(),
        deal.sector, deal.industry, deal.sub_industry,
    )
    pv_savings = calculate_savings_npv(records, discount_rate)

    doc = SimpleDocTemplate(
        output_path,
        pagesize=A4,
        topMargin=0.75 * inch,
        bottomMargin=0.75 * inch,
        leftMargin=0.75 * inch,
        rightMargin=0.75 * inch,
    )

    styles = getSampleStyleSheet()
    title_style = ParagraphStyle(
        "CustomTitle", parent=styles["Title"], fontSize=18, spaceAfter=6
    )
    heading_style = ParagraphStyle(
        "CustomHeading", parent=styles["Heading2"], fontSize=14,
        spaceAfter=8, spaceBefore=12, textColor=colors.HexColor("#ea580c"),
    )
    body_style = styles["Normal"]
    small_style = ParagraphStyle(
        "Small", parent=body_style, fontSize=8, textColor=colors.grey,
    )

    elements = []

    # --- PAGE 1: Overview, headline numbers, risk ---
    elements.append(Paragraph("30-Year PPA Investment Model", title_style))
    elements.append(Paragraph("Investor Build-Own-Transfer Summary", styles["Heading3"]))
    elements.append(Spacer(1, 12))

    info_data = [
        ["Deal", deal.name or "Unnamed"],
        ["Account", deal.account_name or "Not specified"],
        ["Sector", " / ".join(s for s in (deal.sector, deal.industry, deal.sub_industry) if s)],
        ["Capacity", f"{format_number(params.capacity_kwp)} kWp"],
        ["PPA Term", f"{params.ppa_term_years} years"],
        ["Client Discount", format_percent(params.discount_percent, 0)],
        ["Peak / Off-Peak Rate", f"{params.peak_rate:.2f} / {params.off_peak_rate:.2f} THB/kWh"],
        ["Peak / Off-Peak CUF", f"{params.cuf_peak_percent:.0f}% / {params.cuf_off_peak_percent:.0f}%"],
        ["Year-1 O&M", format_currency(params.om_base_annual_cost, 1, PREFIX)],
    ]
    info_table = Table(info_data, colWidths=[2.2 * inch, 4.6 * inch])
    info_table.setStyle(TableStyle([
        ("FONTNAME", (0, 0), (0, -1), "Helvetica-Bold"),
        ("FONTSIZE", (0, 0), (-1, -1), 10),
        ("BOTTOMPADDING", (0, 0), (-1, -1), 4),
        ("TOPPADDING", (0, 0), (-1, -1), 4),
        ("LINEBELOW", (0, -1), (-1, -1), 1, colors.grey),
    ]))
    elements.append(info_table)
    elements.append(Spacer(1, 14))

    elements.append(Paragraph("Client Savings (THB millions)", heading_style))
    headline = [
        ["Metric", "Value"],
        ["30-Year Total", format_millions(summary.total_30_year_savings)],
        [f"PPA Phase (Years 1-{params.ppa_term_years})", format_millions(summary.ppa_phase_total)],
        [f"Post-Handover (Years {params.ppa_term_years + 1}-30)",
         format_millions(summary.post_handover_total)],
        ["Average Annual", format_millions(summary.average_annual_savings)],
        ["Break-Even", format_year(summary.break_even_year)],
        [f"Present Value @ {format_percent(discount_rate * 100)}", format_millions(pv_savings)],
    ]
    headline_table = Table(headline, colWidths=[4 * inch, 2.8 * inch])
    headline_table.setStyle(_grid_style("#fed7aa"))
    elements.append(headline_table)
    elements.append(Spacer(1, 14))

    elements.append(Paragraph("Risk Screening", heading_style))
    risk_data = [
        ["Indicator", "Value", "Assessment"],
        ["Operating Days", ", ".join(d.value for d in curtailment.operating_days) or "None", ""],
        ["Curtailment", format_percent(curtailment.curtailment_percent, 0), ""],
        ["Bankability Score", f"{curtailment.bankability_score:.0f}/100", curtailment.grade.label],
        ["Credit Scrutiny Score", f"{credit.score}/100", credit.verdict.label],
    ]
    risk_table = Table(risk_data, colWidths=[2.2 * inch, 2.2 * inch, 2.4 * inch])
    style = _grid_style()
    style.add("TEXTCOLOR", (2, 3), (2, 3), _GRADE_COLORS[curtailment.grade])
    risk_table.setStyle(style)
    elements.append(risk_table)
    elements.append(Spacer(1, 8))
    elements.append(Paragraph(f"<b>Security package:</b> {credit.verdict.requirement}", body_style))
    for warning in curtailment_warnings(curtailment):
        elements.append(Paragraph(f"<b>Warning:</b> {warning}", body_style))

    with tempfile.TemporaryDirectory() as tmpdir:
        chart_path = str(Path(tmpdir) / "savings.png")
        generation_path = str(Path(tmpdir) / "generation.png")

        # --- PAGE 2: Projection chart ---
        elements.append(PageBreak())
        elements.append(Paragraph("30-Year Savings Projection", heading_style))
        create_savings_chart(records, params.ppa_term_years, chart_path)
        elements.append(Image(chart_path, width=6.5 * inch, height=3.65 * inch))
        create_generation_chart(records, generation_path)
        elements.append(Image(generation_path, width=6.0 * inch, height=3.0 * inch))
        elements.append(Spacer(1, 12))

        elements.append(Paragraph("Phase 1: PPA Term", styles["Heading3"]))
        elements.append(Paragraph(
            f"During years 1-{params.ppa_term_years}, the investor owns and operates the "
            f"system. The client pays a discounted rate ({params.discount_percent:g}% below "
            f"grid tariff) for consumed energy. Savings represent the discount on energy costs.",
            body_style,
        ))
        elements.append(Paragraph("Phase 2: Post-Handover", styles["Heading3"]))
        elements.append(Paragraph(
            f"After year {params.ppa_term_years}, ownership transfers to the client. "
            f"Savings equal the full energy value minus O&amp;M costs and periodic major "
            f"maintenance.",
            body_style,
        ))

        # --- PAGE 3: Table and assumptions ---
        elements.append(PageBreak())
        elements.append(Paragraph("Annual Projection", heading_style))
        table_data = [["Year", "Phase", "Peak kWh", "Off-Peak kWh", "Savings", "Cumulative"]]
        for r in records:
            table_data.append([
                str(r.year),
                "PPA" if r.phase is Phase.PPA_PHASE else "Client",
                format_number(r.peak_generation),
                format_number(r.off_peak_generation),
                format_currency(r.annual_savings, 1, PREFIX),
                format_currency(r.cumulative_savings, 1, PREFIX),
            ])
        projection_table = Table(table_data, repeatRows=1)
        projection_table.setStyle(_grid_style())
        elements.append(projection_table)
        elements.append(Spacer(1, 12))

        elements.append(Paragraph("Model Assumptions", heading_style))
        for line in (
            "Year 1 degradation: 2.5%, thereafter: 0.5% annually",
            "Tariff escalation: 1% per year",
            "O&amp;M escalation: 3% per year",
            f"Major maintenance: {format_currency(params.major_maintenance_cost, 1, PREFIX)} "
            f"every 10 years after handover",
            "Peak/Off-Peak split: 67%/33%",
            f"Generation baseline: {params.baseline_generation_per_kwp:,.0f} kWh/kWp/yr",
        ):
            elements.append(Paragraph(f"&bull; {line}", body_style))

        elements.append(Spacer(1, 20))
        elements.append(Paragraph(
            "<i>Generated by PPA Deal Modeler. All figures are reproducible from the "
            "documented inputs and assumptions above.</i>",
            small_style,
        ))

        # Build PDF (must happen while tmpdir exists for chart images)
        doc.build(elements)

    logger.info("Wrote deal summary PDF to %s", output_path)
