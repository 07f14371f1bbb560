from courtbook.core.intervals import as_utc


def validate_timestamp(value):
    """Naive request timestamps are taken to be UTC."""
    if value is None:
        return value
    return as_utc(value)
