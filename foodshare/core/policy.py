"""Who may do what. Every role check in the API goes through these predicates."""

from typing import Optional

from foodshare.models import Organization, Pickup, User


def can_assign(user: User) -> bool:
    return user.role == "volunteer"


def can_approve_organizations(user: User) -> bool:
    return user.role == "admin"


def can_act_for_organization(user: User, ngo_id: int, own_org: Optional[Organization]) -> bool:
    """Admins act for any organization; an NGO representative only for its own."""
    if user.role == "admin":
        return True
    if user.role == "ngo":
        return own_org is not None and own_org.id == ngo_id
    return False


def can_act_on_pickup(user: User, pickup: Pickup, own_org: Optional[Organization]) -> bool:
    """Status changes: the assigned volunteer, the owning NGO, or an admin.

    ``own_org`` is the organization owned by ``user`` (None for non-NGO users).
    """
    if user.role == "volunteer":
        return pickup.volunteer_id is not None and pickup.volunteer_id == user.id
    return can_act_for_organization(user, pickup.ngo_id, own_org)
