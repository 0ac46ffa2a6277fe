"""Program creation, schedule and session logging routes."""

from typing import Any, Dict, List

from fastapi import APIRouter, Depends, Query

from ..deps import get_program_service
from ...models.schemas import (
    FatigueStateOutput,
    ProgramDefinitionInput,
    SessionOutcomeInput,
    SessionOutcomeResponse,
    SetPrescriptionOutput,
)
from ...services.program_service import ProgramService


router = APIRouter()


def _state_output(state) -> FatigueStateOutput:
    return FatigueStateOutput(
        muscle_group=state.muscle_group,
        score=state.score,
        status=state.status.value,
        trend=state.trend.value,
        consecutive_high_sessions=state.consecutive_high_sessions,
        at_risk=state.at_risk,
        version=state.version,
    )


def _schedule_response(service: ProgramService, program_id: str) -> Dict[str, Any]:
    program = service.get_program(program_id)
    response = program.to_dict()
    response["microcycles"] = [m.to_dict() for m in service.effective_schedule(program_id)]
    return response


@router.post("", status_code=201)
async def create_program(
    request: ProgramDefinitionInput,
    service: ProgramService = Depends(get_program_service),
) -> Dict[str, Any]:
    """Create a program and return its full schedule."""
    program = service.create_program(request.to_definition())
    return program.to_dict()


@router.get("/{program_id}")
async def get_program(
    program_id: str,
    service: ProgramService = Depends(get_program_service),
) -> Dict[str, Any]:
    """Program schedule with any fatigue-forced deloads applied."""
    return _schedule_response(service, program_id)


@router.get("/{program_id}/weeks/{week_index}")
async def get_week(
    program_id: str,
    week_index: int,
    service: ProgramService = Depends(get_program_service),
) -> Dict[str, Any]:
    """One effective week."""
    return service.effective_microcycle(program_id, week_index).to_dict()


@router.get(
    "/{program_id}/weeks/{week_index}/days/{day_index}/slots/{slot_id}",
    response_model=List[SetPrescriptionOutput],
)
async def get_effective_prescription(
    program_id: str,
    week_index: int,
    day_index: int,
    slot_id: str,
    service: ProgramService = Depends(get_program_service),
) -> List[SetPrescriptionOutput]:
    """Current set targets for one exercise slot."""
    sets = service.get_effective_prescription(program_id, week_index, day_index, slot_id)
    return [SetPrescriptionOutput(**s.to_dict()) for s in sets]


@router.post("/{program_id}/sessions", response_model=SessionOutcomeResponse)
async def record_session(
    program_id: str,
    request: SessionOutcomeInput,
    service: ProgramService = Depends(get_program_service),
) -> SessionOutcomeResponse:
    """Record a logged session and return the updated fatigue states."""
    states = service.record_session_outcome(
        request.user_id,
        program_id,
        request.muscle_group_set_counts,
        request.average_rir_per_group,
        performed_at=request.performed_at,
        week_index=request.week_index,
    )
    program = service.get_program(program_id)
    return SessionOutcomeResponse(
        program_id=program_id,
        states=[_state_output(s) for s in states],
        forced_deload_weeks=sorted(program.deload_overrides),
    )


@router.get("/{program_id}/fatigue", response_model=List[FatigueStateOutput])
async def get_fatigue(
    program_id: str,
    user_id: str = Query(..., min_length=1),
    service: ProgramService = Depends(get_program_service),
) -> List[FatigueStateOutput]:
    """Current fatigue state of every tracked muscle group."""
    service.get_program(program_id)
    return [_state_output(s) for s in service.get_fatigue_states(user_id, program_id)]
