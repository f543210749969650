"""Tests for the HTTP form service client."""

import json

import httpx
import pytest

from dynform.config import Settings
from dynform.model.field import FieldKind
from dynform.net.client import AutosaveError, ConfigFetchError, FormServiceClient
from dynform.state.submission import SubmitError

BASE_URL = "https://forms.test"


def make_client(handler):
    settings = Settings(base_url=BASE_URL)
    transport = httpx.MockTransport(handler)
    return FormServiceClient(settings, client=httpx.Client(base_url=BASE_URL, transport=transport))


class TestFetchFieldConfig:
    """Tests for fetch_field_config."""

    def test_post_payload_builds_demo_fields(self):
        def handler(request):
            assert request.url.path == "/posts/1"
            return httpx.Response(200, json={"id": 1, "title": "sunt aut facere", "body": "quia et suscipit"})

        descriptors = make_client(handler).fetch_field_config()

        assert [d.name for d in descriptors] == ["name_8066616423", "age_12345", "terms_001"]
        assert descriptors[0].label == "sunt aut facere"
        assert descriptors[0].description == "quia et suscipit"
        assert descriptors[1].kind is FieldKind.NUMBER_INPUT
        assert descriptors[2].checked is False

    def test_list_payload_is_parsed(self):
        fields = [
            {"name": "b", "label": "B", "type": "checkbox", "variant": "Checkbox", "order": 2},
            {"name": "a", "label": "A", "type": "text", "variant": "Input", "order": 1},
        ]
        descriptors = make_client(lambda request: httpx.Response(200, json=fields)).fetch_field_config()
        assert [d.name for d in descriptors] == ["a", "b"]

    def test_fields_object_is_parsed(self):
        payload = {"fields": [{"name": "a", "type": "text", "variant": "Input"}]}
        descriptors = make_client(lambda request: httpx.Response(200, json=payload)).fetch_field_config()
        assert [d.name for d in descriptors] == ["a"]

    def test_http_error_raises(self):
        client = make_client(lambda request: httpx.Response(500))
        with pytest.raises(ConfigFetchError, match="Failed to fetch form configuration"):
            client.fetch_field_config()

    def test_connection_error_raises(self):
        def handler(request):
            raise httpx.ConnectError("unreachable", request=request)

        with pytest.raises(ConfigFetchError):
            make_client(handler).fetch_field_config()

    def test_invalid_json_raises(self):
        client = make_client(lambda request: httpx.Response(200, content=b"<html>"))
        with pytest.raises(ConfigFetchError):
            client.fetch_field_config()

    def test_duplicate_names_raise(self):
        fields = [
            {"name": "a", "type": "text", "variant": "Input"},
            {"name": "a", "type": "text", "variant": "Input"},
        ]
        client = make_client(lambda request: httpx.Response(200, json=fields))
        with pytest.raises(ConfigFetchError, match="Duplicate field name"):
            client.fetch_field_config()

    def test_scalar_payload_raises(self):
        client = make_client(lambda request: httpx.Response(200, json=3))
        with pytest.raises(ConfigFetchError):
            client.fetch_field_config()


class TestSubmitForm:
    """Tests for submit_form."""

    def test_posts_json_and_returns_response(self):
        def handler(request):
            assert request.method == "POST"
            assert request.url.path == "/posts"
            body = json.loads(request.content)
            return httpx.Response(201, json={"id": 101, **body})

        response = make_client(handler).submit_form({"name": "Ada", "age": 30})
        assert response["id"] == 101
        assert response["name"] == "Ada"

    def test_error_status_raises(self):
        client = make_client(lambda request: httpx.Response(503))
        with pytest.raises(SubmitError, match="Failed to submit form data"):
            client.submit_form({"name": "Ada"})

    def test_non_object_response_raises(self):
        client = make_client(lambda request: httpx.Response(200, json=[1, 2]))
        with pytest.raises(SubmitError):
            client.submit_form({"name": "Ada"})


class TestAutosave:
    """Tests for autosave."""

    def test_nan_is_sent_as_null(self):
        captured = {}

        def handler(request):
            captured.update(json.loads(request.content))
            return httpx.Response(201, json=captured)

        make_client(handler).autosave({"age": float("nan"), "name": "Ada"})
        assert captured == {"age": None, "name": "Ada"}

    def test_error_raises(self):
        client = make_client(lambda request: httpx.Response(500))
        with pytest.raises(AutosaveError):
            client.autosave({"name": "Ada"})
