"""Data access helpers for derived global parameters."""
from __future__ import annotations

from sqlalchemy.orm import Session

from booru_stage.models.global_param import GlobalParam

__all__ = ["GlobalParamRepository"]


class GlobalParamRepository:
    """Key/value access to the ``global_param`` table."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, key: str) -> str | None:
        """Return the current value for ``key`` or None when unset."""
        param = self.session.get(GlobalParam, key)
        return param.value if param is not None else None

    def set(self, key: str, value: object) -> None:
        """Overwrite the value stored under ``key``."""
        param = self.session.get(GlobalParam, key)
        if param is None:
            param = GlobalParam(key=key)
            self.session.add(param)
        param.value = None if value is None else str(value)
        self.session.flush()
