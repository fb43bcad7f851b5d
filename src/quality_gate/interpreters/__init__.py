"""Result interpreters turning raw tool output into verdicts."""

from .chain import first_verdict
from .coverage import clamp_percent, interpret_coverage_output
from .unit_tests import interpret_unit_test_output

__all__ = [
    "clamp_percent",
    "first_verdict",
    "interpret_coverage_output",
    "interpret_unit_test_output",
]
