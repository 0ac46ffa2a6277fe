"""Technique recommendation routes."""

from typing import List

from fastapi import APIRouter, Depends, Query

from ..deps import get_program_service
from ...models.schemas import TechniqueOutput
from ...services.program_service import ProgramService


router = APIRouter()


@router.get("", response_model=List[TechniqueOutput])
async def recommend_techniques(
    level: str = Query(..., description="beginner, intermediate, advanced, elite"),
    goal: str = Query(..., description="strength, hypertrophy, endurance, power, weight_loss, general_fitness"),
    exercise_category: str = Query(..., description="compound, isolation, machine, free_weights, cable, bodyweight"),
    service: ProgramService = Depends(get_program_service),
) -> List[TechniqueOutput]:
    """Techniques suitable for a level, goal and exercise category, ordered by name."""
    techniques = service.recommend_techniques(level, goal, exercise_category)
    return [TechniqueOutput(**t.to_dict()) for t in techniques]
