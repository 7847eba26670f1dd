def clamp(value: float, lower: float, upper: float) -> float:
    """Clamp value into the closed interval [lower, upper]."""
    return lower if value <= lower else (upper if value >= upper else value)

def round_to_2_decimals(number: float) -> str:
    """String of the number rounded to 2 decimal places, e.g. 0.5 -> '0.50'."""
    return f"{number:.2f}"
