from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from ...core.console import ConsoleSession
from ...core.processors.sorter import search_records
from ...utils.filters import normalize_filters
from ..dependencies import get_live_session
from ..schemas import (
    ActionResponse,
    ErrorResponse,
    InstanceDetailResponse,
    InstanceListResponse,
)


router = APIRouter(prefix="/api/instances", tags=["instances"])

ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    401: {"model": ErrorResponse},
    409: {"model": ErrorResponse},
    503: {"model": ErrorResponse},
}


@router.get("", response_model=InstanceListResponse, responses=ERROR_RESPONSES)
def list_instances(
    instance_ids: str = Query(default="", description="Comma or space separated instance ids"),
    tags: str = Query(default="", description="Tag expression, e.g. Team=infra|ops, Env=prod"),
    tag_key: str = "",
    tag_value: str = "",
    state: str = "all",
    search: str = Query(default="", description="Name or id substring applied to the fetched list"),
    session: ConsoleSession = Depends(get_live_session),
):
    normalized = normalize_filters(instance_ids, tags, tag_key, tag_value, state)
    records = session.refresh(normalized.filter, store_filters=True)
    if records is None:
        return JSONResponse(
            status_code=409,
            content={"success": False, "error": "A fetch is already in progress", "code": "FetchInProgress"},
        )
    return InstanceListResponse(
        instances=[record.to_dict() for record in search_records(records, search)],
        warnings=list(normalized.warnings),
    )


@router.get(
    "/{instance_id}",
    response_model=InstanceDetailResponse,
    responses={**ERROR_RESPONSES, 404: {"model": ErrorResponse}},
)
def get_instance(instance_id: str, session: ConsoleSession = Depends(get_live_session)) -> InstanceDetailResponse:
    record = session.describe(instance_id)
    return InstanceDetailResponse(instance=record.to_dict(extended=True))


def _run_action(session: ConsoleSession, action: str, instance_id: str) -> ActionResponse:
    result = session.dispatch(action, instance_id)
    if not result.success:
        raise result.error
    return ActionResponse(message=result.message)


@router.post("/{instance_id}/start", response_model=ActionResponse, responses=ERROR_RESPONSES)
def start_instance(instance_id: str, session: ConsoleSession = Depends(get_live_session)) -> ActionResponse:
    return _run_action(session, "start", instance_id)


@router.post("/{instance_id}/stop", response_model=ActionResponse, responses=ERROR_RESPONSES)
def stop_instance(instance_id: str, session: ConsoleSession = Depends(get_live_session)) -> ActionResponse:
    return _run_action(session, "stop", instance_id)


@router.post("/{instance_id}/reboot", response_model=ActionResponse, responses=ERROR_RESPONSES)
def reboot_instance(instance_id: str, session: ConsoleSession = Depends(get_live_session)) -> ActionResponse:
    return _run_action(session, "reboot", instance_id)
