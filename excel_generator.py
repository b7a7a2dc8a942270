"""Generate the Excel PPA Deal Workbook.

Creates a formula-driven Excel workbook (.xlsx) with:
- Inputs: deal identity, projection inputs, fixed model assumptions
- Projection: 30-year recurrence (generation, tariffs, O&M, savings)
- Summary: headline totals, break-even year, NPV and a savings chart
- Risk: curtailment bankability grade and counterparty credit verdict
- Methodology: formulas and assumptions

Every Projection and Summary cell is a live Excel formula over the Inputs
sheet, so analysts can change an input and recalculate. Cached results
from the Python engine are written alongside each formula so the file
shows correct values before Excel recalculates.

Usage:
    python excel_generator.py [output_path]
"""

import logging
import sys
from datetime import datetime
from pathlib import Path

import xlsxwriter

from ppa_modeler.data.libraries import SectorTaxonomy
from ppa_modeler.data.validators import require_valid_parameters
from ppa_modeler.models.calculations import calculate_savings_npv, project
from ppa_modeler.models.credit_risk import assess_credit
from ppa_modeler.models.curtailment import analyze_curtailment, curtailment_warnings
from ppa_modeler.models.project import (
    ANNUAL_DEGRADATION,
    FIRST_YEAR_DEGRADATION,
    MAJOR_MAINTENANCE_INTERVAL,
    OFF_PEAK_SHARE,
    OM_ESCALATION,
    PEAK_SHARE,
    PROJECTION_YEARS,
    TARIFF_ESCALATION,
    Deal,
    Grade,
    Phase,
)

logger = logging.getLogger(__name__)


# =============================================================================
# CELL REFERENCE REGISTRY  (Excel A1 addresses on the Inputs sheet)
# =============================================================================

class CellRefs:
    """Central registry for all Inputs-sheet cell addresses."""

    # Rows 6-10: Deal identity
    DEAL_NAME    = 'C6'
    ACCOUNT_NAME = 'C7'
    SECTOR       = 'C8'
    INDUSTRY     = 'C9'
    SUB_INDUSTRY = 'C10'

    # Rows 13-22: Projection inputs  (section header at row 12)
    CAPACITY      = 'C13'
    PPA_TERM      = 'C14'
    OM_BASE       = 'C15'
    PEAK_RATE     = 'C16'
    OFF_PEAK_RATE = 'C17'
    DISCOUNT      = 'C18'
    CUF_PEAK      = 'C19'
    CUF_OFF_PEAK  = 'C20'
    BASELINE      = 'C21'
    MAINTENANCE   = 'C22'

    # Rows 25-31: Fixed assumptions  (section header at row 24)
    FIRST_YEAR_DEG  = 'C25'
    ANNUAL_DEG      = 'C26'
    PEAK_SHARE      = 'C27'
    OFF_PEAK_SHARE  = 'C28'
    TARIFF_ESC      = 'C29'
    OM_ESC          = 'C30'
    MAINT_INTERVAL  = 'C31'

    # Row 34: NPV discount rate  (section header at row 33)
    NPV_RATE = 'C34'


def _abs(ref: str) -> str:
    """Absolute Inputs-sheet reference, e.g. 'C13' -> 'Inputs!$C$13'."""
    col = ''.join(ch for ch in ref if ch.isalpha())
    row = ''.join(ch for ch in ref if ch.isdigit())
    return f'Inputs!${col}${row}'


# Projection sheet column letters
P_COL = {
    'year':     'B',
    'gen':      'C',
    'peak':     'D',
    'off':      'E',
    'peak_t':   'F',
    'off_t':    'G',
    'cost':     'H',
    'om':       'I',
    'maint':    'J',
    'phase':    'K',
    'savings':  'L',
    'cum':      'M',
}

P_DATA_START = 5                              # Excel row of year 1
P_DATA_END = P_DATA_START + PROJECTION_YEARS - 1


# =============================================================================
# WORKBOOK ENTRY POINT
# =============================================================================

def create_workbook(deal: Deal, output_path: str, npv_rate: float = 0.07) -> str:
    """Create the complete PPA deal workbook with all sheets.

    Args:
        deal: Deal whose inputs seed the Inputs sheet.
        output_path: Target path; the suffix is forced to .xlsx.
        npv_rate: Decimal discount rate for the savings NPV.

    Returns:
        The path actually written.

    Raises:
        ValidationError: If the deal's projection parameters are out of domain.
    """
    params = require_valid_parameters(deal.parameters)
    if not output_path.endswith('.xlsx'):
        output_path = str(Path(output_path).with_suffix('.xlsx'))

    result = project(params)
    curtailment = analyze_curtailment(deal.operating_days)
    credit = assess_credit(
        deal.credit, SectorTaxonomy(), deal.sector, deal.industry, deal.sub_industry
    )

    workbook = xlsxwriter.Workbook(output_path)
    fmt = _create_formats(workbook)

    ws_inputs  = workbook.add_worksheet('Inputs')
    ws_proj    = workbook.add_worksheet('Projection')
    ws_summary = workbook.add_worksheet('Summary')
    ws_risk    = workbook.add_worksheet('Risk')
    ws_method  = workbook.add_worksheet('Methodology')

    _create_inputs_sheet(workbook, ws_inputs, fmt, deal, npv_rate)
    _create_projection_sheet(ws_proj, fmt, params, result.records)
    _create_summary_sheet(workbook, ws_summary, fmt, result, npv_rate)
    _create_risk_sheet(ws_risk, fmt, curtailment, credit)
    _create_methodology_sheet(ws_method, fmt)

    workbook.close()
    logger.info("Workbook created: %s", output_path)
    return output_path


# =============================================================================
# FORMATS
# =============================================================================

def _create_formats(wb) -> dict:
    f = {}
    orange = '#EA580C'
    lorange = '#FFEDD5'
    yel   = '#FFFDE7'
    grn   = '#E8F5E9'
    cur   = '"฿"#,##0'

    f['title']    = wb.add_format({'bold': True, 'font_size': 16, 'font_color': orange})
    f['subtitle'] = wb.add_format({'italic': True, 'font_color': '#555555', 'font_size': 10})
    f['section']  = wb.add_format({'bold': True, 'font_size': 11, 'font_color': orange,
                                    'bg_color': lorange, 'border': 1, 'valign': 'vcenter'})
    f['header']   = wb.add_format({'bold': True, 'font_color': 'white', 'bg_color': orange,
                                    'align': 'center', 'border': 1, 'valign': 'vcenter',
                                    'text_wrap': True})
    f['bold']     = wb.add_format({'bold': True})
    f['tooltip']  = wb.add_format({'italic': True, 'font_color': '#666666', 'font_size': 9})
    f['wrap']     = wb.add_format({'text_wrap': True, 'valign': 'top'})
    f['input']    = wb.add_format({'bg_color': yel, 'border': 1})
    f['input_pct']= wb.add_format({'bg_color': yel, 'border': 1, 'num_format': '0.0%'})
    f['input_cur']= wb.add_format({'bg_color': yel, 'border': 1, 'num_format': cur})
    f['input_rate']= wb.add_format({'bg_color': yel, 'border': 1, 'num_format': '0.00'})
    f['input_int']= wb.add_format({'bg_color': yel, 'border': 1, 'num_format': '#,##0'})
    f['fixed_pct']= wb.add_format({'border': 1, 'num_format': '0.0%'})
    f['fixed_int']= wb.add_format({'border': 1, 'num_format': '0'})
    f['currency'] = wb.add_format({'num_format': cur, 'border': 1})
    f['cur_red']  = wb.add_format({'num_format': cur, 'border': 1, 'font_color': '#C62828'})
    f['rate']     = wb.add_format({'num_format': '0.0000', 'border': 1})
    f['number']   = wb.add_format({'num_format': '#,##0', 'border': 1})
    f['result_big']= wb.add_format({'bold': True, 'font_size': 13, 'bg_color': lorange,
                                     'border': 2, 'num_format': cur, 'align': 'center'})
    f['result_num']= wb.add_format({'bold': True, 'font_size': 13, 'bg_color': lorange,
                                     'border': 2, 'num_format': '0', 'align': 'center'})
    f['pass_fmt'] = wb.add_format({'bold': True, 'font_color': '#1B5E20', 'bg_color': '#C8E6C9', 'border': 1})
    f['fail_fmt'] = wb.add_format({'bold': True, 'font_color': '#B71C1C', 'bg_color': '#FFCDD2', 'border': 1})
    f['warn_fmt'] = wb.add_format({'bold': True, 'font_color': '#E65100', 'bg_color': '#FFE0B2', 'border': 1})
    f['center']   = wb.add_format({'align': 'center', 'border': 1})
    f['ppa_fmt']  = wb.add_format({'align': 'center', 'border': 1, 'bg_color': '#D1FAE5'})
    f['client_fmt'] = wb.add_format({'align': 'center', 'border': 1, 'bg_color': '#EDE9FE'})
    f['formula']  = wb.add_format({'bg_color': grn, 'border': 1, 'bold': True})
    return f


# =============================================================================
# INPUTS SHEET
# =============================================================================

def _create_inputs_sheet(wb, ws, f, deal: Deal, npv_rate: float) -> None:
    ws.set_column('A:A', 3)
    ws.set_column('B:B', 32)
    ws.set_column('C:C', 22)
    ws.set_column('D:D', 48)

    R = CellRefs
    p = deal.parameters

    ws.merge_range('B2:D2', '30-Year PPA Investment Model', f['title'])
    ws.merge_range('B3:D3', f'Investor Build-Own-Transfer  |  Generated {datetime.now():%B %d, %Y}',
                   f['subtitle'])

    # ── Deal identity (rows 5-10) ──────────────────────────────────────────
    ws.merge_range('B5:D5', 'DEAL', f['section'])
    identity = [
        # (label, cell, value)
        ('Deal Name',    R.DEAL_NAME,    deal.name),
        ('Account',      R.ACCOUNT_NAME, deal.account_name),
        ('Sector',       R.SECTOR,       deal.sector),
        ('Industry',     R.INDUSTRY,     deal.industry),
        ('Sub-Industry', R.SUB_INDUSTRY, deal.sub_industry),
    ]
    for label, cell, value in identity:
        row = int(cell[1:]) - 1
        ws.write(row, 1, label, f['bold'])
        ws.write(cell, value, f['input'])

    # ── Projection inputs (rows 12-22) ─────────────────────────────────────
    ws.merge_range('B12:D12', 'PROJECTION INPUTS', f['section'])
    inputs = [
        # (label, cell, value, format, tooltip)
        ('Capacity (kWp)',              R.CAPACITY,      p.capacity_kwp,        f['input_int'],
         'Installed nameplate capacity'),
        ('PPA Term (years)',            R.PPA_TERM,      p.ppa_term_years,      f['input_int'],
         'Investor-owned years before handover (1-25)'),
        ('O&M Base Cost (Year 1)',      R.OM_BASE,       p.om_base_annual_cost, f['input_cur'],
         'Charged to the client after handover; escalates yearly'),
        ('Peak Rate (THB/kWh)',         R.PEAK_RATE,     p.peak_rate,           f['input_rate'],
         'Grid tariff, peak window'),
        ('Off-Peak Rate (THB/kWh)',     R.OFF_PEAK_RATE, p.off_peak_rate,       f['input_rate'],
         'Grid tariff, off-peak window'),
        ('Client Discount',             R.DISCOUNT,      p.discount_percent / 100, f['input_pct'],
         'Discount vs. grid tariff during the PPA'),
        ('Peak CUF',                    R.CUF_PEAK,      p.cuf_peak_percent / 100, f['input_pct'],
         'Share of peak generation consumed'),
        ('Off-Peak CUF',                R.CUF_OFF_PEAK,  p.cuf_off_peak_percent / 100, f['input_pct'],
         'Share of off-peak generation consumed'),
        ('Generation Baseline (kWh/kWp/yr)', R.BASELINE, p.baseline_generation_per_kwp, f['input_int'],
         'Annual yield before degradation'),
        ('Major Maintenance Cost',      R.MAINTENANCE,   p.major_maintenance_cost, f['input_cur'],
         'Charged in client-owned years divisible by 10'),
    ]
    for label, cell, value, fmt, tip in inputs:
        row = int(cell[1:]) - 1
        ws.write(row, 1, label, f['bold'])
        ws.write(cell, value, fmt)
        ws.write(row, 3, tip, f['tooltip'])

    # ── Fixed assumptions (rows 24-31) ─────────────────────────────────────
    ws.merge_range('B24:D24', 'FIXED ASSUMPTIONS', f['section'])
    fixed = [
        ('Year 1 Degradation',       R.FIRST_YEAR_DEG, FIRST_YEAR_DEGRADATION, f['fixed_pct']),
        ('Annual Degradation (Yr 2+)', R.ANNUAL_DEG,   ANNUAL_DEGRADATION,     f['fixed_pct']),
        ('Peak Share of Generation', R.PEAK_SHARE,     PEAK_SHARE,             f['fixed_pct']),
        ('Off-Peak Share',           R.OFF_PEAK_SHARE, OFF_PEAK_SHARE,         f['fixed_pct']),
        ('Tariff Escalation',        R.TARIFF_ESC,     TARIFF_ESCALATION,      f['fixed_pct']),
        ('O&M Escalation',           R.OM_ESC,         OM_ESCALATION,          f['fixed_pct']),
        ('Maintenance Interval (years)', R.MAINT_INTERVAL, MAJOR_MAINTENANCE_INTERVAL, f['fixed_int']),
    ]
    for label, cell, value, fmt in fixed:
        row = int(cell[1:]) - 1
        ws.write(row, 1, label, f['bold'])
        ws.write(cell, value, fmt)

    # ── NPV rate (rows 33-34) ──────────────────────────────────────────────
    ws.merge_range('B33:D33', 'VALUATION', f['section'])
    ws.write('B34', 'NPV Discount Rate', f['bold'])
    ws.write(R.NPV_RATE, npv_rate, f['input_pct'])
    ws.write('D34', 'Used for the present value of client savings', f['tooltip'])

    wb.define_name('PPA_Term', f'={_abs(R.PPA_TERM)}')
    wb.define_name('NPV_Rate', f'={_abs(R.NPV_RATE)}')


# =============================================================================
# PROJECTION SHEET
# =============================================================================

def _create_projection_sheet(ws, f, params, records) -> None:
    ws.set_column('A:A', 3)
    ws.set_column('B:B', 6)
    ws.set_column('C:E', 15)
    ws.set_column('F:G', 11)
    ws.set_column('H:J', 15)
    ws.set_column('K:K', 14)
    ws.set_column('L:M', 16)

    R = CellRefs
    C = P_COL

    ws.merge_range('B2:M2', '30-Year Projection', f['title'])

    headers = [
        'Year', 'Generation\n(kWh)', 'Peak\n(kWh)', 'Off-Peak\n(kWh)',
        'Peak\nTariff', 'Off-Peak\nTariff', 'Energy\nCost', 'O&M\n(escalated)',
        'Major\nMaintenance', 'Phase', 'Annual\nSavings', 'Cumulative\nSavings',
    ]
    ws.set_row(3, 30)
    for c, hdr in enumerate(headers):
        ws.write(3, 1 + c, hdr, f['header'])

    term = _abs(R.PPA_TERM)
    generation = params.capacity_kwp * params.baseline_generation_per_kwp

    for i, rec in enumerate(records):
        row = P_DATA_START - 1 + i          # 0-indexed
        erow = P_DATA_START + i             # Excel 1-based row
        prev = erow - 1
        first = i == 0
        client = rec.phase is Phase.CLIENT_OWNED

        ws.write(row, 1, rec.year, f['center'])

        if first:
            gen_f = f'={_abs(R.CAPACITY)}*{_abs(R.BASELINE)}*(1-{_abs(R.FIRST_YEAR_DEG)})'
            peak_t_f = f'={_abs(R.PEAK_RATE)}'
            off_t_f = f'={_abs(R.OFF_PEAK_RATE)}'
            om_f = f'={_abs(R.OM_BASE)}'
        else:
            gen_f = f'={C["gen"]}{prev}*(1-{_abs(R.ANNUAL_DEG)})'
            peak_t_f = f'={C["peak_t"]}{prev}*(1+{_abs(R.TARIFF_ESC)})'
            off_t_f = f'={C["off_t"]}{prev}*(1+{_abs(R.TARIFF_ESC)})'
            om_f = f'={C["om"]}{prev}*(1+{_abs(R.OM_ESC)})'

        generation *= 1 - (FIRST_YEAR_DEGRADATION if first else ANNUAL_DEGRADATION)
        escalation = (1 + TARIFF_ESCALATION) ** i
        ws.write_formula(f'{C["gen"]}{erow}', gen_f, f['number'], generation)
        ws.write_formula(f'{C["peak"]}{erow}',
                         f'={C["gen"]}{erow}*{_abs(R.PEAK_SHARE)}*{_abs(R.CUF_PEAK)}',
                         f['number'], rec.peak_generation)
        ws.write_formula(f'{C["off"]}{erow}',
                         f'={C["gen"]}{erow}*{_abs(R.OFF_PEAK_SHARE)}*{_abs(R.CUF_OFF_PEAK)}',
                         f['number'], rec.off_peak_generation)
        ws.write_formula(f'{C["peak_t"]}{erow}', peak_t_f, f['rate'],
                         params.peak_rate * escalation)
        ws.write_formula(f'{C["off_t"]}{erow}', off_t_f, f['rate'],
                         params.off_peak_rate * escalation)
        ws.write_formula(f'{C["cost"]}{erow}',
                         f'={C["peak"]}{erow}*{C["peak_t"]}{erow}'
                         f'+{C["off"]}{erow}*{C["off_t"]}{erow}',
                         f['currency'], rec.energy_cost)
        ws.write_formula(f'{C["om"]}{erow}', om_f, f['currency'],
                         params.om_base_annual_cost * (1 + OM_ESCALATION) ** i)
        ws.write_formula(f'{C["maint"]}{erow}',
                         f'=IF(AND({C["year"]}{erow}>{term},'
                         f'MOD({C["year"]}{erow},{_abs(R.MAINT_INTERVAL)})=0),'
                         f'{_abs(R.MAINTENANCE)},0)',
                         f['currency'], rec.maintenance_cost)
        ws.write_formula(f'{C["phase"]}{erow}',
                         f'=IF({C["year"]}{erow}<={term},"{Phase.PPA_PHASE.value}",'
                         f'"{Phase.CLIENT_OWNED.value}")',
                         f['client_fmt'] if client else f['ppa_fmt'], rec.phase.value)
        ws.write_formula(f'{C["savings"]}{erow}',
                         f'=IF({C["year"]}{erow}<={term},'
                         f'{C["cost"]}{erow}*{_abs(R.DISCOUNT)},'
                         f'{C["cost"]}{erow}-{C["om"]}{erow}-{C["maint"]}{erow})',
                         f['cur_red'] if rec.annual_savings < 0 else f['currency'],
                         rec.annual_savings)
        cum_f = f'={C["savings"]}{erow}' if first else f'={C["cum"]}{prev}+{C["savings"]}{erow}'
        ws.write_formula(f'{C["cum"]}{erow}', cum_f, f['currency'], rec.cumulative_savings)

    ws.freeze_panes(4, 2)


# =============================================================================
# SUMMARY SHEET
# =============================================================================

def _create_summary_sheet(wb, ws, f, result, npv_rate: float) -> None:
    ws.set_column('A:A', 3)
    ws.set_column('B:B', 34)
    ws.set_column('C:C', 22)
    ws.set_column('D:D', 50)

    C = P_COL
    summary = result.summary
    year_rng = f"Projection!${C['year']}${P_DATA_START}:${C['year']}${P_DATA_END}"
    phase_rng = f"Projection!${C['phase']}${P_DATA_START}:${C['phase']}${P_DATA_END}"
    sav_rng = f"Projection!${C['savings']}${P_DATA_START}:${C['savings']}${P_DATA_END}"
    cum_rng = f"Projection!${C['cum']}${P_DATA_START}:${C['cum']}${P_DATA_END}"

    ws.merge_range('B2:D2', 'Client Savings Summary', f['title'])
    ws.write('B3', 'Deal:', f['subtitle'])
    ws.write_formula('C3', f'={_abs(CellRefs.DEAL_NAME)}', f['subtitle'])

    ws.merge_range('B5:D5', 'KEY RESULTS', f['section'])
    ws.write('B6', 'Metric', f['header'])
    ws.write('C6', 'Value', f['header'])
    ws.write('D6', 'Definition', f['header'])

    metrics = [
        # (label, formula, fmt_key, cached, definition)
        ('30-Year Total Savings', f"=Projection!${C['cum']}${P_DATA_END}",
         'result_big', summary.total_30_year_savings, 'Cumulative savings at year 30'),
        ('PPA Phase Total', f'=SUMIF({phase_rng},"{Phase.PPA_PHASE.value}",{sav_rng})',
         'result_big', summary.ppa_phase_total, 'Discount on energy cost, years 1..term'),
        ('Post-Handover Total', f'=SUMIF({phase_rng},"{Phase.CLIENT_OWNED.value}",{sav_rng})',
         'result_big', summary.post_handover_total,
         'Energy value minus O&M and maintenance after handover'),
        ('Average Annual Savings', f'=C7/{PROJECTION_YEARS}',
         'result_big', summary.average_annual_savings, '30-year total / 30'),
        ('Break-Even Year',
         f'=IFERROR(INDEX({year_rng},MATCH(TRUE,INDEX({cum_rng}>0,0),0)),"Not achieved")',
         'result_num',
         summary.break_even_year if summary.break_even_year is not None else 'Not achieved',
         'First year with positive cumulative savings'),
        ('NPV of Savings', f'=NPV(NPV_Rate,{sav_rng})',
         'result_big', calculate_savings_npv(result.records, npv_rate),
         'Savings discounted from year 1 at the Inputs NPV rate'),
    ]
    for i, (label, formula, fmt_key, cached, definition) in enumerate(metrics):
        row = 6 + i
        ws.write(row, 1, label, f['bold'])
        ws.write_formula(row, 2, formula, f[fmt_key], cached)
        ws.write(row, 3, definition, f['tooltip'])

    chart = wb.add_chart({'type': 'column'})
    chart.add_series({
        'name': 'Annual Savings',
        'categories': f"=Projection!${C['year']}${P_DATA_START}:${C['year']}${P_DATA_END}",
        'values': f'={sav_rng}',
        'fill': {'color': '#10B981'},
    })
    line = wb.add_chart({'type': 'line'})
    line.add_series({
        'name': 'Cumulative Savings',
        'categories': f"=Projection!${C['year']}${P_DATA_START}:${C['year']}${P_DATA_END}",
        'values': f'={cum_rng}',
        'line': {'color': '#1E293B', 'width': 2},
    })
    chart.combine(line)
    chart.set_title({'name': '30-Year Savings Projection'})
    chart.set_x_axis({'name': 'Year'})
    chart.set_y_axis({'name': 'THB', 'num_format': '#,##0,,"M"'})
    chart.set_legend({'position': 'bottom'})
    chart.set_size({'width': 760, 'height': 380})
    ws.insert_chart('B15', chart)


# =============================================================================
# RISK SHEET
# =============================================================================

def _create_risk_sheet(ws, f, curtailment, credit) -> None:
    ws.set_column('A:A', 3)
    ws.set_column('B:B', 30)
    ws.set_column('C:C', 26)
    ws.set_column('D:D', 60)

    grade_fmt = {Grade.A: f['pass_fmt'], Grade.B: f['warn_fmt'], Grade.C: f['fail_fmt']}

    ws.merge_range('B2:D2', 'Risk Screening', f['title'])

    # ── Load & curtailment ────────────────────────────────────────────────
    ws.merge_range('B4:D4', 'LOAD & CURTAILMENT', f['section'])
    ws.write('B5', 'Operating Days', f['bold'])
    ws.write('C5', ', '.join(d.value for d in curtailment.operating_days) or 'None', f['center'])
    ws.write('B6', 'Curtailment', f['bold'])
    ws.write('C6', curtailment.curtailment_percent / 100, f['fixed_pct'])
    ws.write('D6', 'Unused share of the 7 x 4.5 h weekly solar window', f['tooltip'])
    ws.write('B7', 'Bankability Score', f['bold'])
    ws.write('C7', round(curtailment.bankability_score, 1), f['center'])
    ws.write('B8', 'Grade', f['bold'])
    ws.write('C8', curtailment.grade.label, grade_fmt[curtailment.grade])
    ws.write('D8', 'A > 90, B > 70, otherwise C', f['tooltip'])

    row = 9
    for warning in curtailment_warnings(curtailment):
        ws.write(row, 1, 'Warning', f['bold'])
        ws.merge_range(row, 2, row, 3, warning, f['wrap'])
        ws.set_row(row, 45)
        row += 1

    # ── Credit scrutiny ───────────────────────────────────────────────────
    row += 1
    ws.merge_range(row, 1, row, 3, 'CREDIT SCRUTINY', f['section'])
    entry = credit.taxonomy_entry
    lines = [
        ('Taxonomy Match',
         f'{entry.sector} / {entry.industry} / {entry.sub_industry}' if entry else 'Not in taxonomy'),
        ('Priority Points', entry.points if entry else 'n/a'),
        ('Credit Score', f'{credit.score}/100'),
    ]
    for label, value in lines:
        row += 1
        ws.write(row, 1, label, f['bold'])
        ws.write(row, 2, value, f['center'])
    row += 1
    verdict_fmt = f['pass_fmt'] if credit.score >= 65 else (
        f['warn_fmt'] if credit.score >= 45 else f['fail_fmt'])
    ws.write(row, 1, 'Verdict', f['bold'])
    ws.write(row, 2, credit.verdict.label, verdict_fmt)
    ws.write(row, 3, credit.verdict.requirement, f['wrap'])


# =============================================================================
# METHODOLOGY SHEET
# =============================================================================

def _create_methodology_sheet(ws, f) -> None:
    ws.set_column('A:A', 3)
    ws.set_column('B:B', 28)
    ws.set_column('C:C', 80)

    ws.merge_range('B2:C2', 'METHODOLOGY: Formulas and Assumptions', f['title'])
    ws.merge_range('B3:C3',
        'Every figure in this workbook is reproducible from the Inputs sheet.',
        f['subtitle'])

    sections = [
        ('GENERATION', [
            ('Degradation',
             'G(1) = kWp × Baseline × (1 − 2.5%)\n'
             'G(t) = G(t−1) × (1 − 0.5%)  for t ≥ 2'),
            ('Consumed Energy',
             'Peak(t) = G(t) × 67% × Peak CUF\n'
             'Off-Peak(t) = G(t) × 33% × Off-Peak CUF'),
        ]),
        ('COSTS', [
            ('Tariffs',
             'Peak and off-peak tariffs escalate 1% per year from year 2'),
            ('Energy Cost',
             'Cost(t) = Peak(t) × PeakTariff(t) + OffPeak(t) × OffPeakTariff(t)'),
            ('O&M',
             'O&M escalates 3% per year from year 2; charged to the client only after handover'),
            ('Major Maintenance',
             'Charged in client-owned years divisible by 10 (e.g. 20, 30)'),
        ]),
        ('SAVINGS', [
            ('PPA Phase (t ≤ term)',
             'Savings(t) = Cost(t) × Client Discount'),
            ('Client Owned (t > term)',
             'Savings(t) = Cost(t) − O&M(t) − Maintenance(t)'),
            ('Break-Even',
             'First year with cumulative savings > 0'),
            ('NPV',
             'NPV = Σ Savings(t) / (1 + r)^t  for t = 1..30'),
        ]),
        ('RISK', [
            ('Curtailment',
             'Curtailment = (7 − operating days) × 4.5 / (7 × 4.5)\n'
             'Bankability = 100 − curtailment %;  A > 90, B > 70, otherwise C'),
            ('Credit Scrutiny',
             'Score = taxonomy points × 10 (30 if unknown) + longevity + ownership\n'
             '+ estate + audited financials + leverage + payment history, clamped to 0-100'),
        ]),
    ]

    row = 4
    for section, items in sections:
        ws.merge_range(row, 1, row, 2, section, f['section'])
        row += 1
        for label, content in items:
            ws.write(row, 1, label, f['bold'])
            ws.write(row, 2, content, f['wrap'])
            ws.set_row(row, max(15, content.count('\n') * 15 + 15))
            row += 1
        row += 1


# =============================================================================
# ENTRY POINT
# =============================================================================

if __name__ == '__main__':
    logging.basicConfig(level=logging.INFO, format='%(levelname)s %(name)s: %(message)s')
    timestamp   = datetime.now().strftime('%Y%m%d_%H%M')
    default_out = f'PPA_Deal_Model_{timestamp}.xlsx'
    output_file = sys.argv[1] if len(sys.argv) > 1 else default_out
    create_workbook(Deal(name='Default Deal'), output_file)
