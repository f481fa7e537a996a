"""
Custom exceptions for lexprob.

All engine failures are precondition violations detected eagerly at
construction or mutation time. They carry an error code so callers in the
rule-evaluation layer can map them without string matching.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional


class ErrorCode(str, Enum):
    """Standard error codes for lexprob."""
    # Validation errors (1xxx)
    UNKNOWN_ERROR = "E1000"
    INVALID_PROBABILITY = "E1001"
    PARENT_ARITY_MISMATCH = "E1002"
    INVALID_ITERATION_COUNT = "E1003"

    # Lookup errors (2xxx)
    UNKNOWN_NODE = "E2000"

    # Network structure errors (3xxx)
    NETWORK_FROZEN = "E3000"
    CYCLIC_NETWORK = "E3001"


@dataclass
class ErrorContext:
    """Context information for an error."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    node_id: Optional[str] = None
    additional: Dict[str, Any] = field(default_factory=dict)


class LexProbError(Exception):
    """
    Base exception for lexprob.

    All custom exceptions inherit from this class.
    """

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.UNKNOWN_ERROR,
        context: Optional[ErrorContext] = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.context = context or ErrorContext()

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging."""
        result = {
            "error_code": self.error_code.value,
            "message": self.message,
            "timestamp": self.context.timestamp.isoformat(),
        }
        if self.context.node_id:
            result["node_id"] = self.context.node_id
        if self.context.additional:
            result["details"] = dict(self.context.additional)
        return result

    def __str__(self) -> str:
        return f"[{self.error_code.value}] {self.message}"


class InvalidProbability(LexProbError):
    """A prior, conditional probability, threshold or confidence outside [0, 1]."""

    def __init__(self, value: Any, name: str = "probability", node_id: Optional[str] = None):
        super().__init__(
            message=f"{name.capitalize()} must be between 0 and 1, got {value!r}",
            error_code=ErrorCode.INVALID_PROBABILITY,
            context=ErrorContext(node_id=node_id, additional={"field": name, "value": value}),
        )
        self.value = value
        self.field = name


class ParentArityMismatch(LexProbError):
    """A CPT key whose length differs from the node's parent count."""

    def __init__(self, node_id: str, expected: int, actual: int):
        super().__init__(
            message=(
                f"Parent states for '{node_id}' must match number of parents: "
                f"expected {expected}, got {actual}"
            ),
            error_code=ErrorCode.PARENT_ARITY_MISMATCH,
            context=ErrorContext(
                node_id=node_id,
                additional={"expected": expected, "actual": actual},
            ),
        )
        self.expected = expected
        self.actual = actual


class InvalidIterationCount(LexProbError):
    """Simulation iteration counts must be positive integers."""

    def __init__(self, value: Any, name: str = "iterations"):
        super().__init__(
            message=f"{name.capitalize()} must be a positive integer, got {value!r}",
            error_code=ErrorCode.INVALID_ITERATION_COUNT,
            context=ErrorContext(additional={"field": name, "value": value}),
        )
        self.value = value


class UnknownNode(LexProbError):
    """Strict lookup of an identifier the network does not contain."""

    def __init__(self, node_id: str):
        super().__init__(
            message=f"Node '{node_id}' is not present in the network",
            error_code=ErrorCode.UNKNOWN_NODE,
            context=ErrorContext(node_id=node_id),
        )
        self.node_id = node_id


class NetworkFrozen(LexProbError):
    """Mutation attempted on a network that has been frozen."""

    def __init__(self, operation: str):
        super().__init__(
            message=f"Cannot {operation}: network is frozen",
            error_code=ErrorCode.NETWORK_FROZEN,
            context=ErrorContext(additional={"operation": operation}),
        )
        self.operation = operation


class CyclicNetwork(LexProbError):
    """Raised by explicit acyclicity validation."""

    def __init__(self, cycle: List[str]):
        super().__init__(
            message=f"Network contains a cycle: {' -> '.join(cycle)}",
            error_code=ErrorCode.CYCLIC_NETWORK,
            context=ErrorContext(node_id=cycle[0] if cycle else None),
        )
        self.cycle = cycle


def check_probability(value: float, name: str = "probability", node_id: Optional[str] = None) -> float:
    """Return ``value`` unchanged if it lies in [0, 1], else raise InvalidProbability."""
    # NaN fails both comparisons
    if not (0.0 <= value <= 1.0):
        raise InvalidProbability(value, name=name, node_id=node_id)
    return value


def check_iterations(value: int, name: str = "iterations") -> int:
    """Return ``value`` unchanged if it is a positive integer."""
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise InvalidIterationCount(value, name=name)
    return value
