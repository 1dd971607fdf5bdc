# foodshare/services/stats.py
from foodshare.repos.base import Repository

# rough proxy, not a measured quantity
MEALS_PER_PICKUP = 25


async def compute_overview(repo: Repository) -> dict:
    """
    Summary counters for the landing page, recomputed from the store on every call:
      - totalMealsSaved: completed pickups x MEALS_PER_PICKUP
      - activeVolunteers: distinct volunteers on assigned or completed pickups
      - partnerNGOs: approved organizations
    """
    pickups = await repo.list_pickups()
    completed = sum(1 for p in pickups if p.status == "completed")
    volunteers = {
        p.volunteer_id for p in pickups
        if p.status in ("assigned", "completed") and p.volunteer_id is not None
    }
    approved = sum(1 for o in await repo.list_organizations() if o.is_approved)
    return {
        "totalMealsSaved": completed * MEALS_PER_PICKUP,
        "activeVolunteers": len(volunteers),
        "partnerNGOs": approved,
    }
