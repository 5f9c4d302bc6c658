from datetime import datetime


def to_int(value, default=None):
    if value is None or str(value).strip() == "":
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def parse_date(value):
    if not value:
        return None
    # Full ISO timestamps are cut down to their date part
    return datetime.strptime(str(value)[:10], "%Y-%m-%d").date()


def parse_time(value):
    if not value:
        return None
    text = str(value)
    fmt = "%H:%M:%S" if text.count(":") == 2 else "%H:%M"
    return datetime.strptime(text, fmt).time()
