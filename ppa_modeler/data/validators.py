"""Input validation functions for the PPA Deal Modeler.

Each validator returns a tuple of (is_valid: bool, message: str).
Messages describe errors or warnings for user display.

The projection engine itself is permissive and never calls these checks;
they guard the boundary where parameters are built from user input,
scenario files or exports.
"""

from typing import Dict, List, Tuple

from ppa_modeler.models.project import ProjectionParameters


class ValidationError(ValueError):
    """Raised when one or more projection parameters are out of domain.

    Attributes:
        errors: Field name -> error message for every invalid field.
    """

    def __init__(self, errors: Dict[str, str]):
        self.errors = dict(errors)
        detail = "; ".join(f"{name}: {msg}" for name, msg in self.errors.items())
        super().__init__(f"Invalid projection parameters: {detail}")


def validate_capacity(capacity_kwp: float) -> Tuple[bool, str]:
    """Validate installed capacity in kWp.

    Args:
        capacity_kwp: Nameplate capacity.

    Returns:
        (is_valid, message) tuple.
    """
    if capacity_kwp <= 0:
        return False, "Capacity must be greater than 0 kWp."
    if capacity_kwp > 100_000:
        return True, f"Warning: {capacity_kwp:,.0f} kWp is unusually large for a rooftop PPA."
    return True, ""


def validate_ppa_term(years: int) -> Tuple[bool, str]:
    """Validate PPA term in years (1-25)."""
    if int(years) != years:
        return False, "PPA term must be a whole number of years."
    if years < 1:
        return False, "PPA term must be at least 1 year."
    if years > 25:
        return False, "PPA term cannot exceed 25 years."
    return True, ""


def validate_om_cost(om_cost: float, label: str = "O&M cost") -> Tuple[bool, str]:
    """Validate a non-negative annual cost."""
    if om_cost < 0:
        return False, f"{label} cannot be negative."
    return True, ""


def validate_rate(rate: float, label: str = "Tariff rate") -> Tuple[bool, str]:
    """Validate a grid tariff rate in currency/kWh.

    Args:
        rate: Tariff rate.
        label: Name used in messages.

    Returns:
        (is_valid, message) tuple.
    """
    if rate <= 0:
        return False, f"{label} must be greater than 0."
    if rate > 20:
        return True, f"Warning: {label} of {rate:.2f}/kWh is above typical grid tariffs."
    return True, ""


def validate_discount(discount_percent: float) -> Tuple[bool, str]:
    """Validate the client discount percentage."""
    if discount_percent < 0 or discount_percent > 100:
        return False, "Discount must be between 0% and 100%."
    if discount_percent > 50:
        return True, "Warning: Discount above 50% leaves little margin for the investor."
    return True, ""


def validate_cuf(cuf_percent: float, label: str = "CUF") -> Tuple[bool, str]:
    """Validate a capacity utilization factor percentage."""
    if cuf_percent < 0 or cuf_percent > 100:
        return False, f"{label} must be between 0% and 100%."
    return True, ""


def validate_generation_baseline(kwh_per_kwp: float) -> Tuple[bool, str]:
    """Validate the annual generation yield per kWp."""
    if kwh_per_kwp <= 0:
        return False, "Generation baseline must be greater than 0 kWh/kWp."
    if kwh_per_kwp < 800 or kwh_per_kwp > 2500:
        return True, (f"Warning: {kwh_per_kwp:,.0f} kWh/kWp/yr is outside the typical "
                      f"800-2,500 range. Verify this is correct.")
    return True, ""


def _field_checks(params: ProjectionParameters) -> List[Tuple[str, Tuple[bool, str]]]:
    return [
        ("capacity_kwp", validate_capacity(params.capacity_kwp)),
        ("ppa_term_years", validate_ppa_term(params.ppa_term_years)),
        ("om_base_annual_cost", validate_om_cost(params.om_base_annual_cost)),
        ("peak_rate", validate_rate(params.peak_rate, "Peak rate")),
        ("off_peak_rate", validate_rate(params.off_peak_rate, "Off-peak rate")),
        ("discount_percent", validate_discount(params.discount_percent)),
        ("cuf_peak_percent", validate_cuf(params.cuf_peak_percent, "Peak CUF")),
        ("cuf_off_peak_percent", validate_cuf(params.cuf_off_peak_percent, "Off-peak CUF")),
        ("baseline_generation_per_kwp",
         validate_generation_baseline(params.baseline_generation_per_kwp)),
        ("major_maintenance_cost",
         validate_om_cost(params.major_maintenance_cost, "Major maintenance cost")),
    ]


def validate_parameters(params: ProjectionParameters) -> Tuple[bool, List[str]]:
    """Run all validations on a parameter set.

    Args:
        params: Parameters to validate.

    Returns:
        (is_valid, messages) where messages includes all errors and warnings.
    """
    messages = []
    is_valid = True

    for _, (valid, msg) in _field_checks(params):
        if not valid:
            is_valid = False
        if msg:
            messages.append(msg)

    if params.cuf_peak_percent == 0 and params.cuf_off_peak_percent == 0:
        messages.append("Warning: Both CUFs are 0%. The client consumes no energy.")

    return is_valid, messages


def require_valid_parameters(params: ProjectionParameters) -> ProjectionParameters:
    """Return params unchanged, or raise ValidationError listing every bad field.

    Raises:
        ValidationError: If any field is out of domain.
    """
    errors = {name: msg for name, (valid, msg) in _field_checks(params) if not valid}
    if errors:
        raise ValidationError(errors)
    return params
