"""Calendar helpers."""

from datetime import date


def years_before(reference: date, years: int) -> date:
    """
    Return the same calendar day `years` years before `reference`.

    February 29 falls back to February 28 when the target year is not a
    leap year.
    """
    try:
        return reference.replace(year=reference.year - years)
    except ValueError:
        return reference.replace(year=reference.year - years, day=28)
