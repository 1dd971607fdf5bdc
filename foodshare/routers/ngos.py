# foodshare/routers/ngos.py
import logging
from typing import List

from fastapi import APIRouter, Depends

from foodshare.core import policy
from foodshare.core.errors import ForbiddenError, NotFoundError
from foodshare.deps import get_current_user, get_repo
from foodshare.models import Organization, User
from foodshare.repos.base import Repository

router = APIRouter(prefix="/api", tags=["ngos"])
logger = logging.getLogger(__name__)


@router.get("/ngos", response_model=List[Organization])
async def list_ngos(repo: Repository = Depends(get_repo)):
    return await repo.list_organizations()


@router.get("/ngos/{ngo_id}", response_model=Organization)
async def get_ngo(ngo_id: int, repo: Repository = Depends(get_repo)):
    org = await repo.get_organization(ngo_id)
    if org is None:
        raise NotFoundError("NGO not found")
    return org


@router.post("/admin/approve-ngo/{ngo_id}", response_model=Organization)
async def approve_ngo(ngo_id: int, user: User = Depends(get_current_user), repo: Repository = Depends(get_repo)):
    if not policy.can_approve_organizations(user):
        raise ForbiddenError("Only admins can approve NGOs")
    org = await repo.approve_organization(ngo_id)
    logger.info("NGO %s approved by admin %s", ngo_id, user.id)
    return org
