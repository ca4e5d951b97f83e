from datetime import date, datetime

DISPLAY_DATE_FORMAT = "%b %d, %Y"


def format_display_date(value) -> str:
    """Render a date as ``MMM dd, yyyy``; missing or unparseable values give ``N/A``."""
    if value in (None, ""):
        return "N/A"
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value)
        except ValueError:
            return "N/A"
    if isinstance(value, (date, datetime)):
        return value.strftime(DISPLAY_DATE_FORMAT)
    return "N/A"
