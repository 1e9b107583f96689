"""Tests for application exceptions and RFC 7807 rendering."""

import json

from app.core.exceptions import BadRequestError, TrendCastError, UnprocessableDataError
from app.core.problem_details import ERROR_TYPES, problem_response


class TestExceptionClasses:
    """Tests for exception hierarchy."""

    def test_bad_request_error(self):
        """BadRequestError maps to 400."""
        exc = BadRequestError("periods must be > 0")

        assert isinstance(exc, TrendCastError)
        assert exc.status_code == 400
        assert exc.code == "BAD_REQUEST"
        assert exc.title == "Bad Request"
        assert exc.error_type_uri == ERROR_TYPES["BAD_REQUEST"]

    def test_unprocessable_data_error(self):
        """UnprocessableDataError maps to 422 INSUFFICIENT_DATA."""
        exc = UnprocessableDataError(details={"n_observations": 1})

        assert exc.status_code == 422
        assert exc.code == "INSUFFICIENT_DATA"
        assert exc.message == "Not enough data for forecast"
        assert exc.details == {"n_observations": 1}
        assert exc.title == "Insufficient Data"

    def test_details_default_to_empty_dict(self):
        """Details should never be None."""
        assert TrendCastError("boom").details == {}


class TestProblemResponse:
    """Tests for problem_response helper."""

    def test_content_type_is_problem_json(self):
        """Responses use the RFC 7807 media type."""
        response = problem_response(status=400, title="Bad Request", error_code="BAD_REQUEST")

        assert response.media_type == "application/problem+json"
        assert response.status_code == 400

    def test_body_fields(self):
        """Body carries type URI, code and omits empty fields."""
        response = problem_response(
            status=422,
            title="Insufficient Data",
            detail="Need at least 2 observations",
            error_code="INSUFFICIENT_DATA",
        )
        body = json.loads(response.body)

        assert body["type"] == "/errors/insufficient-data"
        assert body["code"] == "INSUFFICIENT_DATA"
        assert body["detail"] == "Need at least 2 observations"
        assert "errors" not in body

    def test_unknown_code_builds_type_uri(self):
        """Unknown codes fall back to a derived type URI."""
        response = problem_response(status=418, title="Teapot", error_code="TEAPOT")
        body = json.loads(response.body)

        assert body["type"] == "/errors/teapot"
