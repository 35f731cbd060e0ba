"""
Daily AI joke generation, triggered by a scheduler or an admin.
"""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends

from poor_jokes.api.dependencies import get_joke_generator, require_admin_or_cron
from poor_jokes.core.joke_generator import JokeGenerator
from poor_jokes.models.dtos import DailyGenerationReport, DailyGenerationStats

router = APIRouter(dependencies=[Depends(require_admin_or_cron)])


@router.post(
    "/generate-daily-jokes",
    response_model=DailyGenerationReport,
    summary="Generate today's jokes and queue them for moderation",
)
async def generate_daily_jokes(generator: JokeGenerator = Depends(get_joke_generator)) -> DailyGenerationReport:
    return await generator.run_daily()


@router.get("/daily-jokes/stats", response_model=DailyGenerationStats, summary="Generated joke counts for a day")
async def daily_joke_stats(
    day: Optional[date] = None,
    generator: JokeGenerator = Depends(get_joke_generator),
) -> DailyGenerationStats:
    return await generator.daily_stats(day)
