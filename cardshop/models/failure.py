"""
Failure envelope and unified response classification.

Every error response leaving the API uses the same envelope, so the
storefront can render failures without parsing free text.

INVARIANT: No raw 500 errors may reach the client.

Response types:
- Success: Operation completed successfully
- Refusal: System chose not to proceed (an integrity constraint)
- KnownFailure: System knows why it failed
- UnknownFailure: System does not know why it failed

AUTHORITY BOUNDARY:
All error responses MUST pass through `finalize_response()`.
"""

from enum import Enum
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, Field, PrivateAttr


class FailureKind(str, Enum):
    """Classification of failure types."""

    # Caller identity
    NOT_AUTHENTICATED = "not_authenticated"
    NOT_AUTHORIZED = "not_authorized"

    # Input and resources
    VALIDATION_FAILED = "validation_failed"
    NOT_FOUND = "not_found"

    # Stock and integrity
    INSUFFICIENT_STOCK = "insufficient_stock"
    CONFLICT_ON_DELETE = "conflict_on_delete"
    TRANSACTION_FAILED = "transaction_failed"

    # Unknown
    UNKNOWN = "unknown"


class OutcomeType(str, Enum):
    """High-level outcome classification."""

    SUCCESS = "success"
    REFUSAL = "refusal"
    KNOWN_FAILURE = "known_failure"
    UNKNOWN_FAILURE = "unknown_failure"


T = TypeVar("T")


class FailureDetail(BaseModel):
    """Detailed information about a failure."""

    kind: FailureKind = Field(
        ...,
        description="Classification of the failure",
    )
    message: str = Field(
        ...,
        description="User-appropriate explanation of what went wrong",
    )
    detail: str | None = Field(
        default=None,
        description="Additional technical detail (optional)",
    )
    suggestion: str | None = Field(
        default=None,
        description="Suggested action for the user",
    )


class ApiResponse(BaseModel, Generic[T]):
    """
    Universal response envelope.

    Every response is classified into one of four outcome types,
    ensuring no failure reaches the user unexplained.
    """

    outcome: OutcomeType = Field(
        ...,
        description="High-level classification of the result",
    )
    data: T | None = Field(
        default=None,
        description="Response data (present on success)",
    )
    failure: FailureDetail | None = Field(
        default=None,
        description="Failure details (present on non-success)",
    )

    # Set only by finalize_response; never serialized
    _finalized: bool = PrivateAttr(default=False)

    @classmethod
    def refusal(
        cls,
        kind: FailureKind,
        message: str,
        detail: str | None = None,
        suggestion: str | None = None,
    ) -> "ApiResponse[Any]":
        """
        Create a refusal response.

        Use when the system chose not to proceed due to a constraint.
        Example: deleting a card that still has inventory.
        """
        return cls(
            outcome=OutcomeType.REFUSAL,
            failure=FailureDetail(
                kind=kind,
                message=message,
                detail=detail,
                suggestion=suggestion,
            ),
        )

    @classmethod
    def known_failure(
        cls,
        kind: FailureKind,
        message: str,
        detail: str | None = None,
        suggestion: str | None = None,
    ) -> "ApiResponse[Any]":
        """
        Create a known failure response.

        Use when the system knows exactly why the operation failed.
        Example: Resource not found, not enough stock.
        """
        return cls(
            outcome=OutcomeType.KNOWN_FAILURE,
            failure=FailureDetail(
                kind=kind,
                message=message,
                detail=detail,
                suggestion=suggestion,
            ),
        )


# Exception types that map to known failures


class KnownError(Exception):
    """
    Base class for exceptions that represent known, explainable failures.

    Subclass this for errors where the system knows exactly what went wrong.
    """

    def __init__(
        self,
        kind: FailureKind,
        message: str,
        detail: str | None = None,
        suggestion: str | None = None,
        status_code: int = 400,
    ):
        self.kind = kind
        self.message = message
        self.detail = detail
        self.suggestion = suggestion
        self.status_code = status_code
        super().__init__(message)

    def to_response(self) -> ApiResponse[Any]:
        """Convert to an ApiResponse."""
        return ApiResponse.known_failure(
            kind=self.kind,
            message=self.message,
            detail=self.detail,
            suggestion=self.suggestion,
        )


class RefusalError(KnownError):
    """
    Exception for constraint-based refusals.

    Use when the system refuses to proceed due to an integrity constraint.
    """

    def to_response(self) -> ApiResponse[Any]:
        """Convert to an ApiResponse."""
        return ApiResponse.refusal(
            kind=self.kind,
            message=self.message,
            detail=self.detail,
            suggestion=self.suggestion,
        )


class NotAuthenticatedError(KnownError):
    def __init__(self) -> None:
        super().__init__(
            kind=FailureKind.NOT_AUTHENTICATED,
            message="Not authenticated",
            suggestion="Sign in and retry.",
            status_code=401,
        )


class NotAuthorizedError(KnownError):
    def __init__(self, required_role: str = "ADMIN") -> None:
        self.required_role = required_role
        super().__init__(
            kind=FailureKind.NOT_AUTHORIZED,
            message="Not authorized",
            detail=f"Requires role {required_role}",
            status_code=403,
        )


class NotFoundError(KnownError):
    """Raised when an entity id does not resolve."""

    def __init__(self, entity: str, entity_id: object) -> None:
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(
            kind=FailureKind.NOT_FOUND,
            message=f"{entity} {entity_id} not found",
            status_code=404,
        )


class ValidationFailedError(KnownError):
    def __init__(self, message: str, detail: str | None = None) -> None:
        super().__init__(
            kind=FailureKind.VALIDATION_FAILED,
            message=message,
            detail=detail,
            suggestion="Check the request parameters and retry.",
            status_code=422,
        )


class InsufficientStockError(KnownError):
    """
    Raised when a requested quantity exceeds the stock of an inventory row.

    Names the card and condition so the storefront can point at the line.
    """

    def __init__(
        self,
        card_name: str,
        condition: str,
        requested: int,
        available: int,
    ) -> None:
        self.card_name = card_name
        self.condition = condition
        self.requested = requested
        self.available = available
        super().__init__(
            kind=FailureKind.INSUFFICIENT_STOCK,
            message=f"Insufficient inventory for {card_name} ({condition})",
            detail=f"Requested {requested}, available {available}",
            suggestion="Lower the quantity or remove the item from your cart.",
            status_code=409,
        )


class ConflictOnDeleteError(RefusalError):
    def __init__(self, message: str) -> None:
        super().__init__(
            kind=FailureKind.CONFLICT_ON_DELETE,
            message=message,
            status_code=409,
        )


class TransactionFailedError(KnownError):
    """
    Raised when the order write could not be committed atomically.

    Carries no internal detail.
    """

    def __init__(self) -> None:
        super().__init__(
            kind=FailureKind.TRANSACTION_FAILED,
            message="The order could not be completed",
            suggestion="Nothing was charged or reserved. Please retry.",
            status_code=409,
        )


# =============================================================================
# FAILURE AUTHORITY BOUNDARY
# =============================================================================
#
# All error responses MUST pass through this boundary.
#
# =============================================================================


# Standard messages, fixed per outcome

STANDARD_MESSAGES: dict[OutcomeType, str] = {
    OutcomeType.REFUSAL: (
        "The system cannot proceed with this request due to a constraint violation."
    ),
    OutcomeType.KNOWN_FAILURE: "The operation failed due to a known issue.",
    OutcomeType.UNKNOWN_FAILURE: "Something went wrong on our side. Please retry.",
}

STANDARD_SUGGESTIONS: dict[OutcomeType, str] = {
    OutcomeType.REFUSAL: "Please modify your request to satisfy the constraint.",
    OutcomeType.KNOWN_FAILURE: "Check the error details and adjust your request.",
    OutcomeType.UNKNOWN_FAILURE: "If this persists, please report the issue.",
}


def finalize_response(response: ApiResponse[Any]) -> ApiResponse[Any]:
    """
    Finalize a response through the authority boundary.

    Every response that passes through this function is guaranteed to:
    1. Have a valid outcome classification
    2. Have failure details if not successful

    Raises:
        ValueError: If response structure is invalid
    """
    if response.outcome == OutcomeType.SUCCESS:
        if response.failure is not None:
            raise ValueError("Success response must not have failure details")
    else:
        if response.failure is None:
            raise ValueError(f"{response.outcome.value} response must have failure details")

    response._finalized = True

    return response


def is_finalized(response: ApiResponse[Any]) -> bool:
    """Check if a response has passed through the authority boundary."""
    return response._finalized


def create_unknown_failure(
    exception: Exception,
    include_type: bool = True,
) -> ApiResponse[Any]:
    """
    Create an unknown failure response from an exception.

    The message is fixed and cannot be customized. Only the exception type
    name is exposed, never its text.
    """
    detail = None
    if include_type:
        detail = f"{type(exception).__name__}"

    response: ApiResponse[Any] = ApiResponse(
        outcome=OutcomeType.UNKNOWN_FAILURE,
        failure=FailureDetail(
            kind=FailureKind.UNKNOWN,
            message=STANDARD_MESSAGES[OutcomeType.UNKNOWN_FAILURE],
            detail=detail,
            suggestion=STANDARD_SUGGESTIONS[OutcomeType.UNKNOWN_FAILURE],
        ),
    )

    return finalize_response(response)


def create_known_failure(
    kind: FailureKind,
    reason: str,
) -> ApiResponse[Any]:
    """
    Create a known failure response.

    The message is standardized. Only the reason (technical detail) varies.
    """
    response: ApiResponse[Any] = ApiResponse(
        outcome=OutcomeType.KNOWN_FAILURE,
        failure=FailureDetail(
            kind=kind,
            message=STANDARD_MESSAGES[OutcomeType.KNOWN_FAILURE],
            detail=reason,
            suggestion=STANDARD_SUGGESTIONS[OutcomeType.KNOWN_FAILURE],
        ),
    )

    return finalize_response(response)
