"""Position tracker exception hierarchy."""


class TrackerError(Exception):
    """Base class for all position tracker errors."""


class ContractViolation(TrackerError, ValueError):
    """Caller supplied input the tracker refuses (state is left untouched)."""


class InternalInconsistency(TrackerError, RuntimeError):
    """Association produced a result that would break identity guarantees.

    Raised before the next track state is committed, so the tracker keeps
    its last consistent state.
    """
