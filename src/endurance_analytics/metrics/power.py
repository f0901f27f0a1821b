"""Cycling power ratios (EF, IF, TSS, W/kg)."""

from ..exceptions import InvalidInputError
from ..utils import round_half_up


def calculate_efficiency_factor(
    normalized_power: float,
    avg_hr: float,
) -> float:
    """
    Calculate Efficiency Factor (EF).

    EF measures aerobic efficiency - how much power you produce per
    heartbeat. Higher is better and indicates improving fitness.

    Formula: EF = NP / Avg HR

    Typical values: 1.0-2.0 for trained cyclists

    Args:
        normalized_power: Normalized Power in watts
        avg_hr: Average heart rate during activity

    Returns:
        Efficiency Factor in watts/bpm, rounded to 2 decimals

    Raises:
        InvalidInputError: If the heart rate is not positive
    """
    if avg_hr <= 0:
        raise InvalidInputError(
            f"Average heart rate must be positive, got {avg_hr}",
            field="avg_heart_rate",
        )

    return round_half_up(normalized_power / avg_hr, 2)


def calculate_intensity_factor(normalized_power: float, ftp: float) -> float:
    """
    Calculate Intensity Factor (IF).

    IF = NP / FTP; 1.0 means the normalized power equals FTP.

    Returns:
        Intensity Factor, or 0.0 when FTP is unknown
    """
    if ftp <= 0:
        return 0.0

    return round_half_up(normalized_power / ftp, 3)


def calculate_tss(
    duration_sec: int,
    normalized_power: float,
    ftp: float,
) -> float:
    """
    Calculate Training Stress Score from power.

    A TSS of 100 represents one hour at FTP.

    Formula: TSS = (duration_sec * NP * IF) / (FTP * 3600) * 100
    """
    if ftp <= 0 or duration_sec <= 0:
        return 0.0

    intensity_factor = calculate_intensity_factor(normalized_power, ftp)
    tss = (duration_sec * normalized_power * intensity_factor) / (ftp * 3600) * 100
    return round_half_up(tss, 1)


def calculate_power_to_weight(power: float, weight_kg: float) -> float:
    """
    Calculate power-to-weight ratio.

    Typical FTP values:
    - Recreational: 2.0-2.5 W/kg
    - Competitive amateur: 3.0-3.5 W/kg
    - Elite amateur: 4.0-4.5 W/kg
    - Professional: 5.0-6.5 W/kg

    Args:
        power: Power in watts
        weight_kg: Body weight in kilograms

    Returns:
        Power-to-weight ratio in W/kg, rounded to 2 decimals
    """
    if weight_kg <= 0:
        raise InvalidInputError(
            f"Body weight must be positive, got {weight_kg}",
            field="weight_kg",
        )

    return round_half_up(power / weight_kg, 2)
