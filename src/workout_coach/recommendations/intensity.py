"""
Workout intensity adjustment from a pre-workout check-in.

Returns a multiplier in [0.7, 1.1] applied to today's planned weights:
- Below 1.0: reduce intensity due to fatigue, poor sleep, or soreness
- Above 1.0: push a little harder when feeling great
"""

from ..models.actions import CheckIn

BASE_INTENSITY = 1.0
MIN_INTENSITY = 0.7
MAX_INTENSITY = 1.1


def adjust_intensity(check_in: CheckIn) -> float:
    """
    Calculate the workout intensity multiplier for a check-in.

    Each of energy, sleep and soreness is on a 1-5 scale. Soreness is
    inverted: 5 means very sore.

    Args:
        check_in: The user's check-in

    Returns:
        Multiplier clamped to [0.7, 1.1], rounded to two decimals
    """
    adjustment = BASE_INTENSITY

    if check_in.energy_level <= 2:
        adjustment -= 0.15
    elif check_in.energy_level >= 4:
        adjustment += 0.05

    if check_in.sleep_quality <= 2:
        adjustment -= 0.10
    elif check_in.sleep_quality >= 4:
        adjustment += 0.02

    if check_in.soreness_level >= 4:
        adjustment -= 0.10
    elif check_in.soreness_level <= 2:
        adjustment += 0.02

    # Rounding removes float noise such as 1.0900000000000001
    return round(max(MIN_INTENSITY, min(MAX_INTENSITY, adjustment)), 2)


def describe_adjustment(multiplier: float) -> str:
    """Sentence appended to a check-in reply for the given multiplier."""
    if multiplier < BASE_INTENSITY:
        return f" I'll dial back today's weights to {round(multiplier * 100)}% intensity."
    if multiplier > BASE_INTENSITY:
        return " You're feeling great! Let's push a bit harder today."
    return ""
