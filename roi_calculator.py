"""
ROI Calculator for ProofIQ

Estimates the annual value a Lifeline provider gets from automating
compliance review, from four numbers supplied on the lead form.

Rounding policy:
- Each component is rounded to cents (ROUND_HALF_UP on the float's shortest
  decimal representation).
- The annual total is the plain sum of the two rounded components.
- Display strings round to whole dollars, also ROUND_HALF_UP.
"""

from dataclasses import dataclass, asdict
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Optional, Union

from constants import (
    CALCULATOR_FIELDS,
    COMPLIANCE_STAFF_HOURLY_RATE,
    REVIEW_TIME_REDUCTION,
    SECONDS_PER_HOUR,
    VIOLATION_REDUCTION_RATE,
)

Number = Union[int, float]

_CENTS = Decimal('0.01')
_DOLLARS = Decimal('1')


@dataclass(frozen=True)
class CalculatorInputs:
    """Calculator values submitted with a lead."""
    annual_lifeline_enrollments: Number
    average_review_time_seconds: Number
    annual_order_volume: Number
    average_non_compliance_cost: Number

    @classmethod
    def from_dict(cls, data: Dict) -> Optional["CalculatorInputs"]:
        """Build inputs from a form/request dict.

        Returns None unless all four fields are present and non-zero,
        matching how the lead form decides whether a report was requested.
        """
        values = {}
        for field_name in CALCULATOR_FIELDS:
            value = data.get(field_name)
            if not value:
                return None
            values[field_name] = value
        return cls(**values)

    def to_dict(self) -> Dict[str, Number]:
        return asdict(self)


@dataclass(frozen=True)
class ROIResult:
    """Annual savings figures shown on the report."""
    efficiency_gains: float
    compliance_accuracy: float
    annual_value_save: float

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)

    def formatted(self) -> Dict[str, str]:
        """Currency strings keyed like to_dict(), as printed on the report."""
        return {key: format_currency(value) for key, value in self.to_dict().items()}


def round2(value: Number) -> float:
    """Round to cents, half-up."""
    return float(Decimal(str(value)).quantize(_CENTS, rounding=ROUND_HALF_UP))


def calculate_roi(inputs: CalculatorInputs) -> ROIResult:
    """
    Calculate ROI based on customer inputs.

    Efficiency gains assume 90% of manual review time is saved at $50/hour.
    Compliance accuracy assumes 5% of orders would otherwise be violations,
    each costing average_non_compliance_cost.

    Args:
        inputs: Calculator values from the lead form

    Returns:
        ROIResult; annual_value_save is the exact sum of the two components
    """
    hours_saved = (
        inputs.annual_order_volume
        * (inputs.average_review_time_seconds / SECONDS_PER_HOUR)
        * REVIEW_TIME_REDUCTION
    )
    efficiency_gains = round2(hours_saved * COMPLIANCE_STAFF_HOURLY_RATE)

    violations_prevented = inputs.annual_order_volume * VIOLATION_REDUCTION_RATE
    compliance_accuracy = round2(violations_prevented * inputs.average_non_compliance_cost)

    return ROIResult(
        efficiency_gains=efficiency_gains,
        compliance_accuracy=compliance_accuracy,
        annual_value_save=efficiency_gains + compliance_accuracy,
    )


def _whole_units(value: Number) -> int:
    return int(Decimal(str(value)).quantize(_DOLLARS, rounding=ROUND_HALF_UP))


def format_currency(amount: Number) -> str:
    """Format as whole US dollars, e.g. 10416.67 -> '$10,417', -1200 -> '-$1,200'."""
    dollars = _whole_units(amount)
    sign = '-' if dollars < 0 else ''
    return f"{sign}${abs(dollars):,}"


def format_number(value: Number) -> str:
    """Format with thousands separators and no decimals, e.g. 12345.6 -> '12,346'."""
    return f"{_whole_units(value):,}"


if __name__ == "__main__":
    sample = CalculatorInputs(
        annual_lifeline_enrollments=5000,
        average_review_time_seconds=300,
        annual_order_volume=10000,
        average_non_compliance_cost=500,
    )
    result = calculate_roi(sample)
    print("ROI Calculator - sample inputs")
    print("=" * 40)
    for key, value in result.formatted().items():
        print(f"  {key:22} {value}")
