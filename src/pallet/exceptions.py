"""Exception hierarchy for pallet.

Build-time and programming errors are raised immediately. Faults raised
while a single action runs are not represented here: they are converted
into ActionError results by the executor core.
"""


class PalletError(Exception):
    """Base class for pallet errors."""

    pass


class PlanStructureError(PalletError):
    """Raised when an action plan is used in a way its shape does not allow.

    Examples are closing a scope that was never opened, or scheduling into
    a plan that has already been closed.
    """

    pass


class UntranslatedPlanError(PalletError):
    """Raised when execute() is given a plan still in builder shape."""

    def __init__(self) -> None:
        super().__init__("Attempt to execute an untranslated action plan")


class NodeValueError(PalletError):
    """Raised when a node value is read before its action has run."""

    def __init__(self, path: str) -> None:
        """Initialize the error.

        Args:
            path: The node-value path that has no value yet.
        """
        self.path = path
        super().__init__(f"Node value '{path}' has not been set")


class ActionImplementationError(PalletError):
    """Raised when an executor cannot find an implementation for an action."""

    def __init__(self, action_name: str, implementation: str) -> None:
        """Initialize the error.

        Args:
            action_name: Name of the action being executed.
            implementation: Name of the implementation that was requested.
        """
        self.action_name = action_name
        self.implementation = implementation
        super().__init__(
            f"Action '{action_name}' has no '{implementation}' implementation"
        )


class NoSessionError(PalletError):
    """Raised when the ambient session is read outside a session scope."""

    def __init__(self) -> None:
        super().__init__(
            "No session is active; schedule actions inside session_scope()"
        )


class ConfigError(PalletError):
    """Raised when configuration cannot be loaded or is invalid."""

    pass
