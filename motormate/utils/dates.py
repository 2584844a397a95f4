"""
Utilitaires de dates / Date utilities.
Les dates sont stockees en texte YYYY-MM-DD / Dates are stored as YYYY-MM-DD text.
"""

from datetime import date, datetime, timedelta

# Plage maximale d'un filtre de dates (2 ans) / Max date filter span (2 years)
MAX_RANGE_DAYS = 730


def parse_iso_date(value: str | date) -> date:
    """Parser une date ISO, avec ou sans heure / Parse an ISO date, with or without time.

    Raises ValueError on malformed input.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    if len(text) > 10:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    return datetime.strptime(text, "%Y-%m-%d").date()


def month_key(value: str) -> str:
    """Cle de mois YYYY-MM / Month key YYYY-MM."""
    return value[:7]


def months_back(end: date, months: int) -> date:
    """Premier jour du mois situe `months` mois avant / First day of the month `months` months before."""
    index = end.year * 12 + (end.month - 1) - months
    return date(index // 12, index % 12 + 1, 1)


def resolve_window(start: date | None, end: date | None, months: int, today: date | None = None) -> tuple[date, date]:
    """Fenetre d'analyse inclusive / Inclusive analytics window.

    Par defaut: du premier jour du mois `months` mois avant la fin, jusqu'a aujourd'hui.
    Default: from the first day of the month `months` months before the end, up to today.
    """
    end = end or today or date.today()
    start = start or months_back(end, months)
    if start > end:
        raise ValueError("start_date must be before or equal to end_date")
    return start, end


def check_range(start: date | None, end: date | None, max_days: int = MAX_RANGE_DAYS) -> None:
    """Valider un filtre de dates / Validate a date filter. Raises ValueError."""
    if start and end:
        if start > end:
            raise ValueError("start_date must be before or equal to end_date")
        if end - start > timedelta(days=max_days):
            raise ValueError("Date range cannot exceed 2 years")
