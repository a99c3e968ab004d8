from __future__ import annotations

from enum import Enum

from sqlalchemy import Enum as SAEnum


def _member_values(enum_cls: type[Enum]) -> list[str]:
    return [str(member.value) for member in enum_cls]


def db_enum(enum_cls: type[Enum], name: str) -> SAEnum:
    """Named PostgreSQL enum type persisting member values ("work"), not names ("WORK")."""
    return SAEnum(enum_cls, name=name, values_callable=_member_values, validate_strings=True)
