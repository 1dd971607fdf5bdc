from fastapi import APIRouter, Depends

from foodshare.deps import get_repo
from foodshare.schemas import StatsOverview
from foodshare.services.stats import compute_overview

router = APIRouter(prefix="/api", tags=["stats"])


@router.get("/stats", response_model=StatsOverview)
async def stats(repo=Depends(get_repo)):
    return await compute_overview(repo)
