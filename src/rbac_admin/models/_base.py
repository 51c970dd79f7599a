import datetime
from typing import Optional

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass


def isoformat(value: Optional[datetime.datetime]) -> Optional[str]:
    if value is None:
        return None
    return value.isoformat()
