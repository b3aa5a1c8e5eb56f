"""Error taxonomy raised by the engine.

The UI layer maps these to user-facing messages; nothing here formats copy
for end users.
"""


class DojodeskError(Exception):
    """Base class for all engine failures."""


class NotFound(DojodeskError):
    """An entity id does not resolve."""


class PlanNotFound(NotFound):
    pass


class Conflict(DojodeskError):
    """The operation collides with existing data."""


class PlanInUse(Conflict):
    """A plan is still referenced by an assignment ending today or later."""


class DuplicateClient(Conflict):
    pass


class InvalidState(DojodeskError):
    """The operation is not allowed in the current state of the data."""


class NoActiveSubscription(InvalidState):
    pass


class SubscriptionUnpaid(InvalidState):
    pass


class VisitLimitReached(InvalidState):
    pass


class ValidationError(DojodeskError):
    """Malformed input (unparseable date, out-of-range number, ...)."""
