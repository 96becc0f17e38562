"""Define the failure taxonomy and typed results returned by every core operation."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import Generic, TypeVar

ValueT = TypeVar("ValueT")

SUCCESS_CODE = 1  # Error code value that kinematics and path services use to report success


class FailureKind(Enum):
    """A kind of expected failure in the pick-and-place core."""

    SOLVER_ERROR = auto()  # Forward/inverse kinematics returned a non-success code
    PLAN_ERROR = auto()  # No feasible trajectory was found
    EXEC_ERROR = auto()  # The controller failed or aborted mid-trajectory
    PATH_ERROR = auto()  # Linear interpolation was infeasible or incomplete
    NOT_FOUND = auto()  # Scene error: no object with the requested id
    NOTHING_ATTACHED = auto()  # Scene error: detach requested with no attached object
    ALREADY_ATTACHED = auto()  # Scene error: only one object may be attached at a time
    UNCONFIRMED = auto()  # Scene error: a published diff was not observed before timeout
    CANCELLED = auto()  # Execution was halted by an explicit stop request

    @property
    def is_scene_error(self) -> bool:
        """Check whether this kind of failure concerns the scene model."""
        return self in (
            FailureKind.NOT_FOUND,
            FailureKind.NOTHING_ATTACHED,
            FailureKind.ALREADY_ATTACHED,
            FailureKind.UNCONFIRMED,
        )


@dataclass(frozen=True)
class Failure:
    """A classified failure, optionally carrying the error code returned by a remote service."""

    kind: FailureKind
    message: str = ""
    error_code: int | None = None

    def __str__(self) -> str:
        code = "" if self.error_code is None else f" (error code {self.error_code})"
        return f"{self.kind.name}: {self.message}{code}"


@dataclass(frozen=True)
class Result(Generic[ValueT]):
    """The outcome of a core operation: either a value or a classified failure."""

    value: ValueT | None = None
    failure: Failure | None = None

    @property
    def succeeded(self) -> bool:
        """Check whether the operation succeeded."""
        return self.failure is None

    @classmethod
    def ok(cls, value: ValueT | None = None) -> Result[ValueT]:
        """Construct a successful result holding the given value."""
        return cls(value=value)

    @classmethod
    def fail(cls, kind: FailureKind, message: str = "", error_code: int | None = None) -> Result:
        """Construct a failed result of the given kind."""
        return cls(failure=Failure(kind, message, error_code))

    def unwrap(self) -> ValueT:
        """Retrieve the value of a successful result.

        :raises: ValueError, if the result is a failure or holds no value
        """
        if self.failure is not None:
            raise ValueError(f"Cannot unwrap a failed result: {self.failure}")
        if self.value is None:
            raise ValueError("Cannot unwrap a result without a value.")
        return self.value


class InitializationError(RuntimeError):
    """Raised when required collaborators do not become available during startup."""


class OrchestratorBusyError(RuntimeError):
    """Raised when a motion is requested while another motion is still in flight."""
