from datetime import datetime

from dateutil import parser as date_parser


def parse_date(value) -> datetime | None:
    """Parse an invoice date string, returning None when it is not a recognisable date"""
    if not isinstance(value, str):
        return None
    text = value.strip()
    if not text:
        return None

    try:
        return datetime.fromisoformat(text)
    except ValueError:
        pass

    # Printed layouts: "03/15/2024", "15-Mar-2024", "March 15th, 2024", RFC 2822 ...
    try:
        return date_parser.parse(text, dayfirst=False, fuzzy=False)
    except (ValueError, OverflowError):
        return None


def is_valid_date(value) -> bool:
    return parse_date(value) is not None
