from datetime import datetime, timezone
from decimal import Decimal
from typing import Annotated, Union

from pydantic import AfterValidator, PlainSerializer


def decimal_to_number(value: Decimal) -> Union[int, float]:
    """Render a Decimal as a plain JSON number (integral amounts stay integers)."""
    if value == value.to_integral_value():
        return int(value)
    return float(value)


def assume_utc(value: datetime) -> datetime:
    # Timestamps written without an offset are treated as UTC.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


Money = Annotated[Decimal, PlainSerializer(decimal_to_number, when_used="json")]
UtcDatetime = Annotated[datetime, AfterValidator(assume_utc)]
