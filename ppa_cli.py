#!/usr/bin/env python3
"""
PPA Deal Modeler CLI - 30-Year Solar PPA Investment Analysis Tool

A command-line interface for evaluating investor build-own-transfer rooftop
solar deals:
- Input projection parameters (capacity, tariffs, discount, CUF, O&M)
- Propose CUF from the facility operating schedule
- Project 30 years of client savings with PPA and post-handover phases
- Screen curtailment bankability and counterparty credit
- Sensitivity tables (client discount vs. PPA term)
- Generate PDF deal summary reports
- Export to Excel workbook
- Save/load deal scenarios as JSON

Usage:
    python ppa_cli.py                              # Default deal
    python ppa_cli.py --capacity 5000 --ppa-term 12
    python ppa_cli.py --schedule "7 Days"          # Apply CUF proposal
    python ppa_cli.py --load deal.json --report    # Load and generate report
    python ppa_cli.py --help                       # Show all options
"""

import argparse
import dataclasses
import json
import logging
import sys
from typing import List, Optional

import numpy as np

from ppa_modeler.data.libraries import SectorTaxonomy
from ppa_modeler.data.storage import load_deal, save_deal
from ppa_modeler.data.validators import ValidationError, require_valid_parameters, validate_parameters
from ppa_modeler.models.calculations import (
    SCHEDULE_LABELS,
    calculate_savings_npv,
    calculate_sensitivity,
    project,
    propose_cuf,
)
from ppa_modeler.models.credit_risk import (
    DEBT_ADJUSTMENTS,
    ESTATE_ADJUSTMENTS,
    OWNERSHIP_ADJUSTMENTS,
    PAYMENT_ADJUSTMENTS,
    CreditAssessment,
    assess_credit,
)
from ppa_modeler.models.curtailment import analyze_curtailment, curtailment_warnings, parse_weekdays
from ppa_modeler.models.project import CurtailmentResult, Deal, Phase, ProjectionResult
from ppa_modeler.utils.formatters import (
    format_currency,
    format_currency_exact,
    format_millions,
    format_number,
    format_percent,
    format_year,
)

logger = logging.getLogger("ppa_cli")

SENSITIVITY_DISCOUNTS = [10, 14, 18, 22, 26]
SENSITIVITY_TERMS = [10, 12, 15, 18, 20]

# CLI option -> ProjectionParameters field
PARAMETER_OPTIONS = {
    "capacity": "capacity_kwp",
    "ppa_term": "ppa_term_years",
    "om_cost": "om_base_annual_cost",
    "peak_rate": "peak_rate",
    "off_peak_rate": "off_peak_rate",
    "discount": "discount_percent",
    "cuf_peak": "cuf_peak_percent",
    "cuf_off_peak": "cuf_off_peak_percent",
    "gen_baseline": "baseline_generation_per_kwp",
    "maintenance_cost": "major_maintenance_cost",
}

# CLI option -> CreditProfile field
CREDIT_OPTIONS = {
    "years_in_business": "years_in_business",
    "ownership": "ownership",
    "estate": "estate_type",
    "debt_level": "debt_level",
    "payment_history": "payment_history",
}


# ============================================================================
# FORMATTING UTILITIES
# ============================================================================

def print_header(text: str, char: str = "=") -> None:
    """Print a formatted section header."""
    width = 70
    print(f"\n{char * width}")
    print(f" {text}")
    print(f"{char * width}")


def print_subheader(text: str) -> None:
    """Print a formatted subsection header."""
    print(f"\n--- {text} ---")


def print_table(headers: List[str], rows: List[List[str]],
                col_widths: Optional[List[int]] = None) -> None:
    """Print a formatted ASCII table."""
    if col_widths is None:
        col_widths = [max(len(str(row[i])) for row in [headers] + rows) + 2
                      for i in range(len(headers))]

    header_line = "|".join(h.center(w) for h, w in zip(headers, col_widths))
    separator = "+".join("-" * w for w in col_widths)
    print(f"+{separator}+")
    print(f"|{header_line}|")
    print(f"+{separator}+")

    for row in rows:
        row_line = "|".join(str(cell).rjust(w - 1) + " " for cell, w in zip(row, col_widths))
        print(f"|{row_line}|")
    print(f"+{separator}+")


# ============================================================================
# DISPLAY FUNCTIONS
# ============================================================================

def print_deal_summary(deal: Deal) -> None:
    """Display deal configuration summary."""
    p = deal.parameters

    print_header("DEAL CONFIGURATION", "=")
    print(f"\n  Deal:               {deal.name or 'Unnamed'}")
    print(f"  Account:            {deal.account_name or 'Not specified'}")
    print(f"  Sector:             {' / '.join(s for s in (deal.sector, deal.industry, deal.sub_industry) if s)}")

    print_subheader("Projection Inputs")
    print(f"  Capacity:           {format_number(p.capacity_kwp)} kWp")
    print(f"  PPA Term:           {p.ppa_term_years} years")
    print(f"  Year-1 O&M:         {format_currency_exact(p.om_base_annual_cost)}")
    print(f"  Peak Rate:          {p.peak_rate:.2f} /kWh")
    print(f"  Off-Peak Rate:      {p.off_peak_rate:.2f} /kWh")
    print(f"  Client Discount:    {format_percent(p.discount_percent)}")
    print(f"  CUF Peak/Off-Peak:  {format_percent(p.cuf_peak_percent, 0)} / "
          f"{format_percent(p.cuf_off_peak_percent, 0)}")
    print(f"  Generation:         {format_number(p.baseline_generation_per_kwp)} kWh/kWp/yr")
    print(f"  Major Maintenance:  {format_currency_exact(p.major_maintenance_cost)}")


def print_projection(result: ProjectionResult, npv_rate: float) -> None:
    """Display the 30-year table and headline statistics."""
    records, summary = result

    print_header("30-YEAR PROJECTION", "=")
    rows = []
    for r in records:
        rows.append([
            r.year,
            "PPA" if r.phase is Phase.PPA_PHASE else "Client",
            format_number(r.peak_generation),
            format_number(r.off_peak_generation),
            format_currency(r.annual_savings, 2),
            format_currency(r.cumulative_savings, 1),
        ])
    print_table(["Year", "Phase", "Peak kWh", "Off-Peak kWh", "Savings", "Cumulative"], rows)

    print_subheader("Client Savings")
    print(f"  30-Year Total:      {format_millions(summary.total_30_year_savings)}")
    print(f"  PPA Phase:          {format_millions(summary.ppa_phase_total)}")
    print(f"  Post-Handover:      {format_millions(summary.post_handover_total)}")
    print(f"  Average Annual:     {format_millions(summary.average_annual_savings)}")
    print(f"  Break-Even:         {format_year(summary.break_even_year)}")
    print(f"  NPV @ {format_percent(npv_rate * 100)}:       "
          f"{format_millions(calculate_savings_npv(records, npv_rate))}")


def print_risk(curtailment: CurtailmentResult, credit: CreditAssessment) -> None:
    """Display curtailment and credit screening results."""
    print_header("RISK SCREENING", "=")

    print_subheader("Load & Curtailment")
    days = ", ".join(d.value for d in curtailment.operating_days) or "None"
    print(f"  Operating Days:     {days}")
    print(f"  Curtailment:        {format_percent(curtailment.curtailment_percent)}")
    print(f"  Bankability Score:  {curtailment.bankability_score:.0f}/100")
    print(f"  Grade:              {curtailment.grade.label}")
    for warning in curtailment_warnings(curtailment):
        print(f"  [!] {warning}")

    print_subheader("Credit Scrutiny")
    entry = credit.taxonomy_entry
    if entry:
        print(f"  Taxonomy Match:     {entry.sub_industry} (points {entry.points})")
    else:
        print("  Taxonomy Match:     Not in taxonomy")
    print(f"  Score:              {credit.score}/100")
    print(f"  Verdict:            {credit.verdict.label}")
    print(f"  Requirement:        {credit.verdict.requirement}")


def print_sensitivity_tables(deal: Deal) -> None:
    """Print 30-year savings and break-even tables over discount x PPA term."""
    print_header("SENSITIVITY ANALYSIS", "=")

    grid = calculate_sensitivity(deal.parameters, SENSITIVITY_DISCOUNTS, SENSITIVITY_TERMS)

    print_subheader("30-YEAR SAVINGS (THB millions)")
    print(f"\n{'Discount':>10}", end="")
    for term in SENSITIVITY_TERMS:
        print(f" {term:>8}yr", end="")
    print()
    print("-" * 70)
    for i, discount in enumerate(SENSITIVITY_DISCOUNTS):
        print(f"{discount:>9}%", end="")
        for total in grid["total"][i]:
            print(f" {format_millions(total):>10}", end="")
        print()

    print_subheader("BREAK-EVEN YEAR")
    print(f"\n{'Discount':>10}", end="")
    for term in SENSITIVITY_TERMS:
        print(f" {term:>8}yr", end="")
    print()
    print("-" * 70)
    for i, discount in enumerate(SENSITIVITY_DISCOUNTS):
        print(f"{discount:>9}%", end="")
        for year in grid["break_even"][i]:
            cell = "--" if np.isnan(year) else f"{int(year)}"
            print(f" {cell:>10}", end="")
        print()


def print_methodology() -> None:
    """Print methodology documentation."""

    print_header("METHODOLOGY", "=")

    print("""
PROJECTION MODEL
----------------
Investor build-own-transfer: the investor owns and operates the rooftop
system for the PPA term and sells energy at a discount to the grid
tariff. At handover the client takes ownership.

KEY FORMULAS:

1. Generation
   G(1) = kWp x Baseline x (1 - 2.5%)
   G(t) = G(t-1) x (1 - 0.5%)

2. Consumed Energy
   Peak(t)     = G(t) x 67% x CUF_peak
   Off-Peak(t) = G(t) x 33% x CUF_off_peak

3. Escalation (from year 2)
   Tariffs +1%/yr, O&M +3%/yr

4. Client Savings
   PPA Phase:     Savings(t) = EnergyCost(t) x Discount
   Client Owned:  Savings(t) = EnergyCost(t) - O&M(t) - Maintenance(t)
   Maintenance is charged in client-owned years divisible by 10.

5. Break-Even
   First year with cumulative savings > 0.

RISK SCREENING:
  Curtailment = (7 - operating days) x 4.5 / 31.5
  Bankability = 100 - curtailment;  A > 90, B > 70, otherwise C
  Credit score = taxonomy points x 10 (30 if unknown) + adjustments
""")


# ============================================================================
# DEAL ASSEMBLY
# ============================================================================

def _weekday_list(value: str):
    try:
        return parse_weekdays(v for v in value.split(",") if v.strip())
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ppa_cli",
        description="PPA Deal Modeler CLI - 30-Year Solar PPA Investment Analysis",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python ppa_cli.py                              # Default 11.3 MWp deal
  python ppa_cli.py --capacity 5000 --discount 15
  python ppa_cli.py --schedule "6 Days" --days Mon,Tue,Wed,Thu,Fri,Sat
  python ppa_cli.py --load deal.json             # Load saved deal
  python ppa_cli.py --report deal.pdf            # Generate PDF report
  python ppa_cli.py --excel deal.xlsx            # Export to Excel
  python ppa_cli.py --sensitivity                # Show sensitivity tables
        """
    )

    # Deal identity
    parser.add_argument("--name", "-n", type=str, help="Deal name")
    parser.add_argument("--account", type=str, help="Client account name")

    # Projection parameters (None means keep the loaded/default value)
    parser.add_argument("--capacity", "-c", type=float, help="Capacity in kWp (default: 11300)")
    parser.add_argument("--ppa-term", type=int, help="PPA term in years (default: 15)")
    parser.add_argument("--om-cost", type=float, help="Year-1 O&M cost (default: 300000)")
    parser.add_argument("--peak-rate", type=float, help="Peak tariff per kWh (default: 4.18)")
    parser.add_argument("--off-peak-rate", type=float, help="Off-peak tariff per kWh (default: 2.60)")
    parser.add_argument("--discount", type=float, help="Client discount %% (default: 18)")
    parser.add_argument("--cuf-peak", type=float, help="Peak CUF %% (default: 99)")
    parser.add_argument("--cuf-off-peak", type=float, help="Off-peak CUF %% (default: 15)")
    parser.add_argument("--gen-baseline", type=float, help="Generation kWh/kWp/yr (default: 1592)")
    parser.add_argument("--maintenance-cost", type=float,
                        help="Major maintenance cost every 10th client-owned year")
    parser.add_argument("--schedule", choices=SCHEDULE_LABELS,
                        help="Operating schedule; proposes CUFs unless --cuf-* are given")
    parser.add_argument("--days", type=_weekday_list,
                        help="Operating days for curtailment, e.g. Mon,Tue,Wed,Thu,Fri")

    # Credit scrutiny
    parser.add_argument("--sector", type=str, help="Client sector")
    parser.add_argument("--industry", type=str, help="Client industry")
    parser.add_argument("--sub-industry", type=str, help="Client sub-industry")
    parser.add_argument("--years-in-business", type=float, help="Years in business")
    parser.add_argument("--ownership", choices=list(OWNERSHIP_ADJUSTMENTS))
    parser.add_argument("--estate", choices=list(ESTATE_ADJUSTMENTS))
    parser.add_argument("--debt-level", choices=list(DEBT_ADJUSTMENTS))
    parser.add_argument("--payment-history", choices=list(PAYMENT_ADJUSTMENTS))
    parser.add_argument("--financials", action=argparse.BooleanOptionalAction, default=None,
                        help="Audited financials available (--no-financials clears it)")

    # File operations
    parser.add_argument("--load", type=str, help="Load deal from JSON file")
    parser.add_argument("--save", type=str, help="Save deal to JSON file")
    parser.add_argument("--report", type=str, nargs="?", const="PPA_Deal_Report.pdf",
                        help="Generate PDF report (optional: specify filename)")
    parser.add_argument("--excel", type=str, nargs="?", const="PPA_Deal_Model.xlsx",
                        help="Export to Excel workbook")

    # Display options
    parser.add_argument("--sensitivity", "-s", action="store_true",
                        help="Show sensitivity analysis tables")
    parser.add_argument("--methodology", "-m", action="store_true",
                        help="Show calculation methodology")
    parser.add_argument("--npv-rate", type=float, default=0.07,
                        help="NPV discount rate as decimal (default: 0.07)")
    parser.add_argument("--quiet", "-q", action="store_true",
                        help="Suppress detailed output")
    parser.add_argument("--verbose", "-v", action="store_true",
                        help="Enable debug logging")
    return parser


def apply_overrides(deal: Deal, args: argparse.Namespace) -> Deal:
    """Layer explicit command-line values over a loaded or default deal."""
    if args.name is not None:
        deal.name = args.name
    if args.account is not None:
        deal.account_name = args.account
    for option in ("sector", "industry", "sub_industry"):
        value = getattr(args, option)
        if value is not None:
            setattr(deal, option, value)
    if args.days is not None:
        deal.operating_days = args.days

    overrides = {
        field: getattr(args, option)
        for option, field in PARAMETER_OPTIONS.items()
        if getattr(args, option) is not None
    }
    if args.schedule and args.cuf_peak is None and args.cuf_off_peak is None:
        peak, off_peak = propose_cuf(args.schedule)
        overrides["cuf_peak_percent"] = peak
        overrides["cuf_off_peak_percent"] = off_peak
        logger.debug("Applied CUF proposal for %s: %s/%s", args.schedule, peak, off_peak)
    deal.parameters = dataclasses.replace(deal.parameters, **overrides)

    credit = {
        field: getattr(args, option)
        for option, field in CREDIT_OPTIONS.items()
        if getattr(args, option) is not None
    }
    if args.financials is not None:
        credit["financials_available"] = args.financials
    if credit:
        deal.credit = dataclasses.replace(deal.credit, **credit)
    return deal


# ============================================================================
# ENTRY POINT
# ============================================================================

def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for CLI. Returns the process exit code."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.methodology:
        print_methodology()
        return 0

    if args.load:
        try:
            deal = load_deal(args.load)
        except (OSError, json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
            print(f"Error loading deal from {args.load}: {e}", file=sys.stderr)
            return 1
        if not args.quiet:
            print(f"Loaded deal from {args.load}")
    else:
        deal = Deal(name="PPA Deal")

    try:
        deal = apply_overrides(deal, args)
    except ValueError as e:
        print(f"Invalid deal input: {e}", file=sys.stderr)
        return 2

    try:
        require_valid_parameters(deal.parameters)
    except ValidationError as e:
        print("Invalid projection parameters:", file=sys.stderr)
        for field, message in e.errors.items():
            print(f"  {field}: {message}", file=sys.stderr)
        return 2

    _, messages = validate_parameters(deal.parameters)
    for message in messages:
        logger.warning(message)

    result = project(deal.parameters)
    curtailment = analyze_curtailment(deal.operating_days)
    credit = assess_credit(
        deal.credit, SectorTaxonomy(), deal.sector, deal.industry, deal.sub_industry
    )

    if not args.quiet:
        print_deal_summary(deal)
        print_projection(result, args.npv_rate)
        print_risk(curtailment, credit)

    if args.sensitivity:
        print_sensitivity_tables(deal)

    status = 0

    if args.save:
        try:
            save_deal(deal, args.save)
            print(f"\nDeal saved to {args.save}")
        except OSError as e:
            print(f"\nError saving deal: {e}", file=sys.stderr)
            status = 1

    if args.report:
        try:
            from ppa_modeler.reports.executive import generate_executive_summary
            generate_executive_summary(deal, args.report, args.npv_rate)
            print(f"\nPDF report generated: {args.report}")
        except Exception as e:
            print(f"\nError generating PDF: {e}", file=sys.stderr)
            status = 1

    if args.excel:
        try:
            from excel_generator import create_workbook
            path = create_workbook(deal, args.excel, args.npv_rate)
            print(f"\nExcel workbook generated: {path}")
        except Exception as e:
            print(f"\nError generating Excel: {e}", file=sys.stderr)
            status = 1

    if not args.quiet:
        summary = result.summary
        print_header("ANALYSIS COMPLETE", "=")
        print(f"\n  30-Year Savings: {format_millions(summary.total_30_year_savings)}  |  "
              f"Break-Even: {format_year(summary.break_even_year)}  |  "
              f"Grade: {curtailment.grade.value}  |  Credit: {credit.verdict.label}")
        print()

    return status


if __name__ == "__main__":
    sys.exit(main())
