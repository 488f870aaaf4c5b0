from datetime import date
from typing import Optional, Union

from backend.logic.records import Frequency


def _add_months(year: int, month: int, months: int):
    idx = (year * 12 + (month - 1)) + months
    return idx // 12, idx % 12 + 1


def next_due_date(frequency: Union[Frequency, str], today: Optional[date] = None) -> date:
    """
    Next occurrence of a filing, anchored to `today`:

        monthly   -> 11th of next month
        quarterly -> 15th of the month three months ahead
        annual    -> 30 March of next year
        other     -> 15th of next month

    Unrecognized frequencies take the fallback; they are not an error.
    """
    today = today or date.today()
    tag = frequency.value if isinstance(frequency, Frequency) else str(frequency)

    if tag == Frequency.MONTHLY.value:
        y, m = _add_months(today.year, today.month, 1)
        return date(y, m, 11)
    if tag == Frequency.QUARTERLY.value:
        y, m = _add_months(today.year, today.month, 3)
        return date(y, m, 15)
    if tag == Frequency.ANNUAL.value:
        return date(today.year + 1, 3, 30)

    y, m = _add_months(today.year, today.month, 1)
    return date(y, m, 15)
