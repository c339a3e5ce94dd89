"""Unit tests for endpoint descriptors and encoding helpers."""

import json
from dataclasses import dataclass

import httpx
import pytest
from pydantic import BaseModel, ValidationError

from webrepo.fetch.encoding import encodable_to_dict, to_query_params
from webrepo.fetch.endpoint import APICall, EndpointDescriptor, join_url
from webrepo.fetch.errors import DescriptorError, InvalidEndpointError


class SearchParams(BaseModel):
    q: str
    page: int = 1
    exact: bool = False
    cursor: str | None = None


@dataclass
class Filter:
    tag: str
    limit: int


class TestEncodableToDict:
    """Tests for encodable_to_dict."""

    def test_model(self) -> None:
        """Test encoding a pydantic model."""
        assert encodable_to_dict(SearchParams(q="x")) == {
            "q": "x",
            "page": 1,
            "exact": False,
            "cursor": None,
        }

    def test_dataclass(self) -> None:
        """Test encoding a dataclass."""
        assert encodable_to_dict(Filter(tag="a", limit=3)) == {"tag": "a", "limit": 3}

    def test_mapping(self) -> None:
        """Test encoding a plain mapping."""
        assert encodable_to_dict({"a": 1}) == {"a": 1}

    def test_non_object_values(self) -> None:
        """Test that values not encoding to an object give an empty dict."""
        assert encodable_to_dict([1, 2]) == {}
        assert encodable_to_dict("text") == {}
        assert encodable_to_dict(None) == {}

    def test_unsupported_type(self) -> None:
        """Test that types pydantic cannot handle give an empty dict."""

        class Opaque:
            pass

        assert encodable_to_dict(Opaque()) == {}


class TestToQueryParams:
    """Tests for query parameter flattening."""

    def test_flattens_model(self) -> None:
        """Test booleans, numbers and None handling."""
        params = to_query_params(SearchParams(q="cats", page=2, exact=True))

        assert params == {"q": "cats", "page": "2", "exact": "true"}

    def test_drops_nested_values(self) -> None:
        """Test that nested containers are skipped."""
        assert to_query_params({"a": 1, "b": [1, 2], "c": {"d": 1}}) == {"a": "1"}


class TestJoinUrl:
    """Tests for base URL and path joining."""

    def test_keeps_base_path(self) -> None:
        """Test that the base URL's path prefix is kept."""
        url = join_url("https://api.example.test/v1/", "/users/1")

        assert str(url) == "https://api.example.test/v1/users/1"

    def test_empty_path(self) -> None:
        """Test that an empty path targets the base URL."""
        assert str(join_url("https://api.example.test/v1", "")) == (
            "https://api.example.test/v1"
        )

    @pytest.mark.parametrize(
        "base_url",
        ["not a url", "ftp://files.example.test", "/relative/only", "https://"],
    )
    def test_invalid_base_url(self, base_url: str) -> None:
        """Test that malformed or non-http URLs are rejected."""
        with pytest.raises(InvalidEndpointError):
            join_url(base_url, "users")


class TestAPICall:
    """Tests for the APICall descriptor."""

    def test_satisfies_protocol(self) -> None:
        """Test that APICall is an EndpointDescriptor."""
        assert isinstance(APICall(path="users"), EndpointDescriptor)

    def test_builds_get_request(self) -> None:
        """Test a simple GET with query and headers."""
        call = APICall(path="users", query={"page": 2}, headers={"X-Trace": "abc"})

        request = call.build_request("https://api.example.test/v1")

        assert request.method == "GET"
        assert request.url == httpx.URL("https://api.example.test/v1/users?page=2")
        assert request.headers["X-Trace"] == "abc"

    def test_model_query(self) -> None:
        """Test that model-typed query parameters are flattened."""
        call = APICall(path="search", query=SearchParams(q="dogs"))

        request = call.build_request("https://api.example.test")

        assert request.url.params["q"] == "dogs"
        assert request.url.params["page"] == "1"
        assert "cursor" not in request.url.params

    def test_json_body(self) -> None:
        """Test that json_body is encoded as JSON."""
        call = APICall(path="users", method="post", json_body={"name": "x"})

        request = call.build_request("https://api.example.test")

        assert request.method == "POST"
        assert request.headers["Content-Type"] == "application/json"
        assert json.loads(request.content) == {"name": "x"}

    def test_raw_content(self) -> None:
        """Test sending raw bytes."""
        call = APICall(path="upload", method="PUT", content=b"raw")

        assert call.build_request("https://api.example.test").content == b"raw"

    def test_rejects_unknown_method(self) -> None:
        """Test that unsupported methods fail validation."""
        with pytest.raises(ValidationError):
            APICall(method="FETCH")

    def test_rejects_two_bodies(self) -> None:
        """Test that json_body and content are exclusive."""
        with pytest.raises(ValidationError):
            APICall(json_body={"a": 1}, content=b"a")

    def test_invalid_base_url_is_descriptor_error(self) -> None:
        """Test that build failures are DescriptorError subclasses."""
        with pytest.raises(DescriptorError):
            APICall(path="users").build_request("::not-a-url::")
