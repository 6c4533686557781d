"""
Status transition tables for the marketplace lifecycle

Service requests: open → quoted → booked → in_progress → completed,
with cancelled reachable from any non-terminal state.
Bookings: scheduled → in_progress → completed, cancellable until terminal.
Quotes: pending → accepted/rejected/expired, all terminal.
Calls: initiated → ringing → in_progress → completed, or failed/cancelled.
"""

from ..errors import InvalidTransition

SERVICE_REQUEST_STATUSES = ("open", "quoted", "booked", "in_progress", "completed", "cancelled")
QUOTE_STATUSES = ("pending", "accepted", "rejected", "expired")
BOOKING_STATUSES = ("scheduled", "in_progress", "completed", "cancelled")

SERVICE_REQUEST_TRANSITIONS: dict[str, frozenset[str]] = {
    "open": frozenset({"quoted", "cancelled"}),
    "quoted": frozenset({"booked", "cancelled"}),
    "booked": frozenset({"in_progress", "cancelled"}),
    "in_progress": frozenset({"completed", "cancelled"}),
    "completed": frozenset(),
    "cancelled": frozenset(),
}

BOOKING_TRANSITIONS: dict[str, frozenset[str]] = {
    "scheduled": frozenset({"in_progress", "cancelled"}),
    "in_progress": frozenset({"completed", "cancelled"}),
    "completed": frozenset(),
    "cancelled": frozenset(),
}

QUOTE_TRANSITIONS: dict[str, frozenset[str]] = {
    "pending": frozenset({"accepted", "rejected", "expired"}),
    "accepted": frozenset(),
    "rejected": frozenset(),
    "expired": frozenset(),
}

CALL_STATUSES = ("initiated", "ringing", "in_progress", "completed", "failed", "cancelled")

CALL_TRANSITIONS: dict[str, frozenset[str]] = {
    "initiated": frozenset({"ringing", "in_progress", "completed", "failed", "cancelled"}),
    "ringing": frozenset({"in_progress", "completed", "failed", "cancelled"}),
    "in_progress": frozenset({"completed", "failed"}),
    "completed": frozenset(),
    "failed": frozenset(),
    "cancelled": frozenset(),
}

# Bookings that hold a provider's time slot
ACTIVE_BOOKING_STATUSES = ("scheduled", "in_progress")

# Calls that can still be ended
ACTIVE_CALL_STATUSES = ("initiated", "ringing", "in_progress")


def is_valid_transition(table: dict[str, frozenset[str]], current_status: str, new_status: str) -> bool:
    """True iff new_status is reachable from current_status in one step (no self-transitions)"""
    return new_status in table.get(current_status, frozenset())


def ensure_transition(
    table: dict[str, frozenset[str]], current_status: str, new_status: str, entity: str
) -> None:
    """Raise InvalidTransition unless the move is in the table"""
    if not is_valid_transition(table, current_status, new_status):
        raise InvalidTransition(f"Cannot transition {entity} from '{current_status}' to '{new_status}'")


def is_terminal(table: dict[str, frozenset[str]], status: str) -> bool:
    return not table.get(status)


def request_path_to(current_status: str, target_status: str) -> list[str]:
    """
    Shortest chain of legal service request transitions from current to target.

    Used to cascade booking status changes onto the parent request, e.g.
    booked → completed walks booked → in_progress → completed.
    Empty when already at the target. Raises InvalidTransition if the
    target is unreachable.
    """
    if target_status == current_status:
        return []

    frontier = [[current_status]]
    seen = {current_status}
    while frontier:
        path = frontier.pop(0)
        for nxt in sorted(SERVICE_REQUEST_TRANSITIONS.get(path[-1], ())):
            if nxt in seen:
                continue
            if nxt == target_status:
                return path[1:] + [nxt]
            seen.add(nxt)
            frontier.append(path + [nxt])
    raise InvalidTransition(
        f"Cannot transition service request from '{current_status}' to '{target_status}'"
    )
