"""
Tests for the Failure Authority Boundary.

These tests verify the core invariant:

    Every error response leaving the API is classified and finalized.
    No raw exception text reaches the client.
"""

import pytest
from httpx import ASGITransport, AsyncClient

from cardshop.db.database import get_session
from cardshop.main import app
from cardshop.models.failure import (
    STANDARD_MESSAGES,
    STANDARD_SUGGESTIONS,
    ApiResponse,
    ConflictOnDeleteError,
    FailureDetail,
    FailureKind,
    InsufficientStockError,
    NotFoundError,
    OutcomeType,
    TransactionFailedError,
    create_known_failure,
    create_unknown_failure,
    finalize_response,
    is_finalized,
)


class TestFinalizeResponse:
    """Tests for the finalize_response authority boundary."""

    def test_failure_response_is_finalized(self) -> None:
        response = ApiResponse.known_failure(kind=FailureKind.NOT_FOUND, message="Not found")
        finalized = finalize_response(response)

        assert is_finalized(finalized)

    def test_unfinalized_response_not_marked(self) -> None:
        """Responses that bypass the boundary are detectable."""
        response = ApiResponse.known_failure(kind=FailureKind.NOT_FOUND, message="Not found")

        assert not is_finalized(response)

    def test_mark_lives_on_the_response(self) -> None:
        """Discarded finalized responses never mark later ones."""
        for _ in range(200):
            finalize_response(
                ApiResponse.known_failure(kind=FailureKind.NOT_FOUND, message="Not found")
            )
            fresh = ApiResponse.known_failure(kind=FailureKind.NOT_FOUND, message="Not found")

            assert not is_finalized(fresh)

    def test_mark_is_not_serialized(self) -> None:
        response = finalize_response(
            ApiResponse.known_failure(kind=FailureKind.NOT_FOUND, message="Not found")
        )

        assert "_finalized" not in response.model_dump(mode="json")

    def test_success_with_failure_raises(self) -> None:
        response = ApiResponse(
            outcome=OutcomeType.SUCCESS,
            data={"key": "value"},
            failure=FailureDetail(kind=FailureKind.UNKNOWN, message="oops"),
        )

        with pytest.raises(ValueError, match="must not have failure"):
            finalize_response(response)

    def test_failure_without_details_raises(self) -> None:
        response = ApiResponse(outcome=OutcomeType.KNOWN_FAILURE, failure=None)

        with pytest.raises(ValueError, match="must have failure details"):
            finalize_response(response)


class TestStandardMessages:
    def test_unknown_failure_uses_standard_message(self) -> None:
        response = create_unknown_failure(ValueError("test"))

        assert response.failure is not None
        assert response.failure.message == STANDARD_MESSAGES[OutcomeType.UNKNOWN_FAILURE]
        assert response.failure.suggestion == STANDARD_SUGGESTIONS[OutcomeType.UNKNOWN_FAILURE]
        assert is_finalized(response)

    def test_unknown_failure_detail_is_type_only(self) -> None:
        """Unknown failure detail contains only exception type, not its message."""
        response = create_unknown_failure(ValueError("password=hunter2"))

        assert response.failure is not None
        assert response.failure.detail == "ValueError"

    def test_unknown_failure_without_type(self) -> None:
        response = create_unknown_failure(ValueError("test"), include_type=False)

        assert response.failure is not None
        assert response.failure.detail is None

    def test_known_failure_reason_goes_in_detail(self) -> None:
        response = create_known_failure(
            kind=FailureKind.VALIDATION_FAILED,
            reason="query.limit: Input should be less than or equal to 100",
        )

        assert response.failure is not None
        assert response.failure.message == STANDARD_MESSAGES[OutcomeType.KNOWN_FAILURE]
        assert response.failure.detail == "query.limit: Input should be less than or equal to 100"
        assert is_finalized(response)


class TestKnownErrors:
    def test_not_found(self) -> None:
        error = NotFoundError("Card", "base-set-4-charizard")

        assert error.status_code == 404
        assert error.message == "Card base-set-4-charizard not found"
        assert error.to_response().outcome == OutcomeType.KNOWN_FAILURE

    def test_insufficient_stock_names_the_line(self) -> None:
        error = InsufficientStockError("Charizard", "PLAYED", requested=1, available=0)
        failure = error.to_response().failure

        assert error.status_code == 409
        assert failure is not None
        assert failure.kind == FailureKind.INSUFFICIENT_STOCK
        assert failure.message == "Insufficient inventory for Charizard (PLAYED)"
        assert failure.detail == "Requested 1, available 0"

    def test_conflict_on_delete_is_refusal(self) -> None:
        response = ConflictOnDeleteError("Cannot delete card with existing inventory").to_response()

        assert response.outcome == OutcomeType.REFUSAL
        assert response.failure is not None
        assert response.failure.kind == FailureKind.CONFLICT_ON_DELETE

    def test_transaction_failed_carries_no_detail(self) -> None:
        failure = TransactionFailedError().to_response().failure

        assert failure is not None
        assert failure.kind == FailureKind.TRANSACTION_FAILED
        assert failure.detail is None


class TestManyRequests:
    async def test_repeated_errors_keep_the_envelope(self, client: AsyncClient) -> None:
        for i in range(50):
            response = await client.get(f"/cards/missing-{i}")

            assert response.status_code == 404
            assert response.json()["failure"]["kind"] == "not_found"
            assert "_finalized" not in response.json()


class TestUnhandledExceptions:
    async def test_unexpected_error_returns_unknown_failure(self) -> None:
        """An unexpected exception becomes a 500 envelope with no exception text."""

        async def override_get_session_broken():
            raise RuntimeError("postgres://admin:secret@db/cardshop unreachable")
            yield  # pragma: no cover

        app.dependency_overrides[get_session] = override_get_session_broken

        transport = ASGITransport(app=app, raise_app_exceptions=False)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            response = await client.get("/cards")

        app.dependency_overrides.clear()

        assert response.status_code == 500
        data = response.json()
        assert data["outcome"] == "unknown_failure"
        assert data["failure"]["kind"] == "unknown"
        assert data["failure"]["detail"] == "RuntimeError"
        assert "secret" not in response.text
