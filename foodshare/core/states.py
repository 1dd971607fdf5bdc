from typing import Literal

PickupStatus = Literal["pending", "assigned", "completed", "cancelled"]

PICKUP_STATES = ["pending", "assigned", "completed", "cancelled"]
TERMINAL_STATES = {"completed", "cancelled"}

# (from, to) pairs reachable through POST /food-pickups/{id}/status.
# pending -> assigned only happens through assign(), never through a status write.
TRANSITIONS = {
    ("assigned", "completed"),
    ("assigned", "cancelled"),
    ("pending",  "cancelled"),
}


def is_terminal(status: str) -> bool:
    return status in TERMINAL_STATES


def can_transition(src: str, dst: str) -> bool:
    if is_terminal(src):
        return False
    return (src, dst) in TRANSITIONS
