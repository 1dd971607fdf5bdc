from .base import utcnow
from .organization import Organization
from .pickup import Pickup
from .user import Role, User

__all__ = ["Organization", "Pickup", "Role", "User", "utcnow"]
