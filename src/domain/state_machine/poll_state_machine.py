from src.domain.enums.poll_status import PollStatus


# Mapping of valid transitions: from_status -> set of allowed to_statuses
VALID_TRANSITIONS: dict[PollStatus, frozenset[PollStatus]] = {
    PollStatus.IDLE: frozenset({PollStatus.POLLING}),
    PollStatus.POLLING: frozenset(
        {PollStatus.RESOLVED, PollStatus.TIMED_OUT, PollStatus.CANCELLED}
    ),
    # Terminal states: only a fresh start() re-enters POLLING
    PollStatus.RESOLVED: frozenset({PollStatus.POLLING}),
    PollStatus.TIMED_OUT: frozenset({PollStatus.POLLING}),
    PollStatus.CANCELLED: frozenset({PollStatus.POLLING}),
}


class InvalidPollTransitionError(Exception):
    """Raised when an invalid poll status transition is attempted."""

    def __init__(self, from_status: PollStatus, to_status: PollStatus) -> None:
        self.from_status = from_status
        self.to_status = to_status
        super().__init__(
            f"Invalid transition from {from_status.value} to {to_status.value}. "
            f"Allowed transitions: {sorted(s.value for s in VALID_TRANSITIONS.get(from_status, frozenset()))}"
        )


class PollStateMachine:
    """
    Validates status transitions of a job poll.

    Stateless; call can_transition() or validate_transition() with explicit statuses.
    """

    def can_transition(self, from_status: PollStatus, to_status: PollStatus) -> bool:
        return to_status in VALID_TRANSITIONS.get(from_status, frozenset())

    def validate_transition(self, from_status: PollStatus, to_status: PollStatus) -> None:
        """Raise InvalidPollTransitionError if the transition is not permitted."""
        if not self.can_transition(from_status, to_status):
            raise InvalidPollTransitionError(from_status, to_status)

    def get_allowed_transitions(self, from_status: PollStatus) -> frozenset[PollStatus]:
        return VALID_TRANSITIONS.get(from_status, frozenset())
