"""Acting-user context for writes.

The user performing a write is passed explicitly to the service
methods that record it (``creator``, ``changed_by``, ``voided_by``).
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class ActorContext:
    """The user on whose behalf a write is made.

    Usage:
        actor = ActorContext(user_id=1)
        service.void_condition(condition, "Entered in error", actor)
    """

    user_id: int

    def __post_init__(self) -> None:
        if self.user_id is None:
            raise ValueError("ActorContext requires a user_id")
