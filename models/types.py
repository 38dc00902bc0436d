from decimal import Decimal

from sqlalchemy import String
from sqlalchemy.types import TypeDecorator


class Money(TypeDecorator):
    """Decimal column stored as text so no dialect rounds it through a float."""

    impl = String(64)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        return str(Decimal(value))

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return Decimal(value)
