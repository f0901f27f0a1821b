"""Tests for power ratio metrics."""

import pytest

from endurance_analytics.exceptions import InvalidInputError
from endurance_analytics.metrics.power import (
    calculate_efficiency_factor,
    calculate_intensity_factor,
    calculate_power_to_weight,
    calculate_tss,
)


class TestEfficiencyFactor:
    """Tests for Efficiency Factor."""

    def test_ef_rounded_to_two_decimals(self):
        assert calculate_efficiency_factor(250, 145) == 1.72

    def test_zero_heart_rate_rejected(self):
        """A zero heart rate is invalid input, never a division by zero."""
        with pytest.raises(InvalidInputError) as exc_info:
            calculate_efficiency_factor(250, 0)

        assert exc_info.value.details["field"] == "avg_heart_rate"


class TestIntensityFactor:
    def test_at_ftp(self):
        assert calculate_intensity_factor(250, 250) == 1.0

    def test_unknown_ftp(self):
        assert calculate_intensity_factor(250, 0) == 0.0


class TestTSS:
    """Tests for power-based Training Stress Score."""

    def test_one_hour_at_ftp_is_100(self):
        assert calculate_tss(3600, 250, 250) == 100.0

    def test_half_hour_at_ftp(self):
        assert calculate_tss(1800, 250, 250) == 50.0

    def test_missing_inputs_give_zero(self):
        assert calculate_tss(3600, 250, 0) == 0.0
        assert calculate_tss(0, 250, 250) == 0.0


class TestPowerToWeight:
    def test_wkg(self):
        assert calculate_power_to_weight(280, 70) == 4.0
        assert calculate_power_to_weight(250, 72.5) == 3.45

    def test_zero_weight_rejected(self):
        with pytest.raises(InvalidInputError):
            calculate_power_to_weight(250, 0)
