"""
Unit tests for risk factor input screening.
"""

import math

import pytest

from pricing_skills.risk_factor_scorer import RiskFactorInput
from proposal_pricing.pipeline.validation import is_suspicious, screen_risk_inputs


def screen(inputs, max_string_length=1000, unusual_threshold=1000):
    return screen_risk_inputs(inputs, max_string_length, unusual_threshold)


class TestSuspiciousContent:
    @pytest.mark.parametrize(
        "text",
        [
            "<script>alert(1)</script>",
            "javascript:void(0)",
            "<img src=x onerror=alert(1)>",
            "eval(payload)",
            "document.cookie",
            "localStorage.getItem('x')",
            "&#x3C;script",
            "<iframe src='x'>",
        ],
    )
    def test_detected(self, text):
        assert is_suspicious(text)

    @pytest.mark.parametrize(
        "text",
        [
            "High Risk (20-30 days)",
            "Curtain wall with operable windows.",
            "Fetching quotes from two suppliers",
            "Data: lead time per supplier document",
        ],
    )
    def test_ordinary_glazing_notes_pass(self, text):
        assert not is_suspicious(text)


class TestScreening:
    def test_clean_inputs_pass_unchanged(self):
        inputs = {
            "Weather Delays": RiskFactorInput(value="Low", notes="Dry season"),
            "Material Lead Times": RiskFactorInput(value=45),
        }
        screened = screen(inputs)

        assert screened.accepted == inputs
        assert screened.warnings == []

    def test_suspicious_name_is_dropped(self):
        screened = screen({"<script>x</script>": RiskFactorInput(value=1)})

        assert screened.accepted == {}
        assert screened.warnings[0].startswith("Invalid risk factor name")

    def test_blank_name_is_dropped(self):
        screened = screen({"   ": RiskFactorInput(value=1)})
        assert screened.accepted == {}
        assert len(screened.warnings) == 1

    @pytest.mark.parametrize("value", [math.inf, -math.inf, math.nan])
    def test_non_finite_numbers_are_dropped(self, value):
        screened = screen({"Material Lead Times": RiskFactorInput(value=value)})

        assert screened.accepted == {}
        assert "invalid numeric value" in screened.warnings[0]

    def test_long_string_is_dropped(self):
        screened = screen({"Weather Delays": RiskFactorInput(value="x" * 20)}, max_string_length=15)
        assert screened.accepted == {}
        assert "excessively long string value (20 characters)" in screened.warnings[0]

    def test_malicious_value_is_dropped(self):
        screened = screen({"Weather Delays": RiskFactorInput(value="javascript:alert(1)")})
        assert screened.warnings == [
            "Risk factor 'Weather Delays' contains potentially malicious content; input dropped"
        ]

    def test_malicious_notes_are_removed(self):
        screened = screen({"Weather Delays": RiskFactorInput(value="Low", notes="<script>x</script>")})

        assert screened.accepted["Weather Delays"].notes is None
        assert screened.accepted["Weather Delays"].value == "Low"
        assert "notes removed" in screened.warnings[0]

    def test_long_notes_are_truncated(self):
        screened = screen(
            {"Weather Delays": RiskFactorInput(value="Low", notes="n" * 50)},
            max_string_length=20,
        )
        assert screened.accepted["Weather Delays"].notes == "n" * 20

    def test_unusually_high_value_is_kept_with_warning(self):
        screened = screen({"Material Lead Times": RiskFactorInput(value=5000)})

        assert "Material Lead Times" in screened.accepted
        assert screened.warnings == ["Risk factor 'Material Lead Times' has an unusually high value (5000)"]

    def test_duplicate_names_warn_and_keep_first(self):
        screened = screen({
            "Weather Delays": RiskFactorInput(value="Low"),
            "Weather Delays ": RiskFactorInput(value="Critical"),
            "weather delays": RiskFactorInput(value="Medium"),
        })

        assert screened.accepted["Weather Delays"].value == "Low"
        assert len(screened.accepted) == 1
        assert screened.warnings == [
            "Duplicate risk factor names detected: Weather Delays, weather delays"
        ]

    def test_missing_value_passes_to_scorer(self):
        screened = screen({"Weather Delays": RiskFactorInput(notes="Awaiting forecast")})

        assert screened.accepted["Weather Delays"].value is None
        assert screened.warnings == []
