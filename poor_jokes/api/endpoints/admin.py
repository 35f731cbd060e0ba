"""
Admin maintenance endpoints.
"""

from fastapi import APIRouter, Depends

from poor_jokes.api.dependencies import get_datastore, require_admin
from poor_jokes.core.deduplication import deduplicate_jokes
from poor_jokes.models.dtos import DeduplicationReport

router = APIRouter(dependencies=[Depends(require_admin)])


@router.post("/deduplicate", response_model=DeduplicationReport, summary="Remove duplicate jokes (admin)")
async def deduplicate(datastore=Depends(get_datastore)) -> DeduplicationReport:
    return await deduplicate_jokes(datastore)
