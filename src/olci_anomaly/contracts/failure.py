"""Centralized failure types for the flagging pipeline.

Contracts fail fast, loud, and once. Input and runtime contract failures
share one base type so callers can handle them uniformly; cancellation is
a separate type because it is not a failure.
"""


class ContractViolation(RuntimeError):
    """Raised when a pipeline contract is violated.

    Key distinction:
    - ValueError: User/config error (handled by Pydantic)
    - ContractViolation: Malformed product or pipeline bug
    - TileCancelled: Upstream asked us to stop, nothing is wrong
    """
    pass


class MissingInputError(ContractViolation):
    """A required band or tie-point grid is absent from the input product.

    Raised by the validator before any tile work starts.
    """

    def __init__(self, name: str, kind: str, message: str):
        super().__init__(message)
        self.name = name
        self.kind = kind


class TileComputationError(ContractViolation):
    """A source tile could not be fetched while computing a target tile.

    Not retried: a malformed or incomplete product will not heal itself.
    """

    def __init__(self, message: str, rectangle=None):
        super().__init__(message)
        self.rectangle = rectangle


class TileCancelled(Exception):
    """Tile computation was abandoned because cancellation was requested."""

    def __init__(self, rectangle=None):
        msg = "Tile computation cancelled"
        if rectangle is not None:
            msg = f"{msg} for {rectangle}"
        super().__init__(msg)
        self.rectangle = rectangle
