import re
from datetime import date

MONTH_RE = re.compile(r"^(\d{4})-(0[1-9]|1[0-2])$")


def parse_month(month: str) -> tuple[int, int]:
    m = MONTH_RE.fullmatch(month or "")
    if not m:
        raise ValueError(f"Invalid month '{month}', expected YYYY-MM")
    return int(m.group(1)), int(m.group(2))


def format_month(year: int, month: int) -> str:
    return f"{year:04d}-{month:02d}"


def month_bounds(month: str) -> tuple[date, date]:
    """[primer dia del mes, primer dia del mes siguiente)"""
    year, m = parse_month(month)
    start = date(year, m, 1)
    end = date(year + 1, 1, 1) if m == 12 else date(year, m + 1, 1)
    return start, end


def current_month(today: date | None = None) -> str:
    today = today or date.today()
    return format_month(today.year, today.month)


def previous_month(today: date | None = None) -> str:
    today = today or date.today()
    if today.month == 1:
        return format_month(today.year - 1, 12)
    return format_month(today.year, today.month - 1)


def month_label(month: str) -> str:
    year, m = parse_month(month)
    return date(year, m, 1).strftime("%B %Y")
