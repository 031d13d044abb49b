"""System-wide counters for the Booru Stage API."""

from __future__ import annotations

from fastapi import APIRouter
from sqlalchemy.orm import Session

from booru_stage.api.v1.dependencies import SessionDep
from booru_stage.db.transaction import TransactionManager
from booru_stage.models.global_param import KEY_FEATURED_POST, KEY_POST_COUNT, KEY_POST_SIZE
from booru_stage.repositories.global_param_repo import GlobalParamRepository
from booru_stage.repositories.post_repo import PostRepository
from booru_stage.schemas.system import GlobalsResponse
from booru_stage.services.globals import GlobalCounterUpdater

router = APIRouter(prefix="/system", tags=["system"])


def _as_int(value: str | None) -> int | None:
    return int(value) if value is not None and value.isdigit() else None


def _read_globals(db: Session) -> GlobalsResponse:
    params = GlobalParamRepository(db)
    return TransactionManager(db).rollback(
        lambda: GlobalsResponse(
            featured_post_id=_as_int(params.get(KEY_FEATURED_POST)),
            post_count=_as_int(params.get(KEY_POST_COUNT)),
            post_size=_as_int(params.get(KEY_POST_SIZE)),
        )
    )


@router.get("/globals", response_model=GlobalsResponse)
def get_globals(db: SessionDep) -> GlobalsResponse:
    """Return the featured post pointer and the last computed counters."""
    return _read_globals(db)


@router.post("/globals/recompute", response_model=GlobalsResponse)
def recompute_globals(db: SessionDep) -> GlobalsResponse:
    """Recompute post count and total stored bytes from the store."""
    updater = GlobalCounterUpdater(
        TransactionManager(db),
        PostRepository(db),
        GlobalParamRepository(db),
    )
    updater.recompute()
    return _read_globals(db)
