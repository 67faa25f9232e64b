"""Tests for core.errors classification and formatting."""

import httpx

from core.errors import BackendError, GenericError, UnknownError, classify_error, format_error


def _status_error(status_code, **response_kwargs):
    request = httpx.Request("GET", "https://api.snyk.io/rest/orgs/org-1")
    response = httpx.Response(status_code, request=request, **response_kwargs)
    return httpx.HTTPStatusError(f"Client error '{status_code}'", request=request, response=response)


class TestFormatError:

    def test_backend_error_joins_details(self):
        error = _status_error(
            403,
            json={"errors": [{"detail": "Forbidden for org"}, {"title": "Second problem"}, {}]},
        )

        assert format_error(error) == "Backend Error (403): Forbidden for org; Second problem"

    def test_backend_error_without_structured_errors_uses_message(self):
        error = _status_error(502, text="<html>bad gateway</html>")

        assert format_error(error) == "Backend Error (502): Client error '502'"

    def test_raised_status_error_drops_documentation_link(self):
        request = httpx.Request("GET", "https://api.snyk.io/v1/user/me")
        response = httpx.Response(502, text="bad gateway", request=request)
        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as error:
            text = format_error(error)

        assert text.startswith("Backend Error (502): Server error '502 Bad Gateway'")
        assert "\n" not in text
        assert "developer.mozilla.org" not in text

    def test_transport_failure_has_no_status(self):
        request = httpx.Request("GET", "https://api.snyk.io/v1/user/me")
        error = httpx.ConnectTimeout("timed out", request=request)

        assert format_error(error) == "Backend Error (no response): timed out"

    def test_generic_exception_uses_message(self):
        assert format_error(ValueError("bad input")) == "bad input"

    def test_exception_without_message_uses_class_name(self):
        assert format_error(RuntimeError()) == "RuntimeError"

    def test_non_error_values_are_stringified(self):
        assert format_error(42) == "42"
        assert format_error(None) == "None"
        assert format_error({"a": 1}) == "{'a': 1}"

    def test_never_raises_on_broken_str(self):
        class Broken:
            def __str__(self):
                raise RuntimeError("no")

        text = format_error(Broken())

        assert text
        assert "Broken" in text


class TestClassifyError:

    def test_three_shapes(self):
        assert isinstance(classify_error(_status_error(404, json={})), BackendError)
        assert isinstance(classify_error(KeyError("x")), GenericError)
        assert isinstance(classify_error("plain"), UnknownError)

    def test_backend_error_fields(self):
        classified = classify_error(_status_error(404, json={"errors": [{"detail": "Project not found"}]}))

        assert classified.status == 404
        assert classified.details == ["Project not found"]
