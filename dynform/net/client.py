"""HTTP transport for field configuration, submissions and autosaves."""

from __future__ import annotations

import logging
import math
from typing import Any, Mapping

import httpx

from dynform.config import Settings
from dynform.model.field import (
    FieldConfigError,
    FieldDescriptor,
    FieldType,
    FieldVariant,
    FormValues,
    parse_descriptors,
)
from dynform.state.submission import SubmitError

logger = logging.getLogger(__name__)


class ConfigFetchError(RuntimeError):
    """Raised when the field configuration cannot be retrieved."""


class AutosaveError(RuntimeError):
    """Raised when an autosave request fails."""


def demo_fields(post: Mapping[str, Any]) -> list[FieldDescriptor]:
    """Build the sample form from a placeholder post (``title``/``body``)."""
    return [
        FieldDescriptor(
            name="name_8066616423",
            label=str(post.get("title") or "Name"),
            field_type=FieldType.TEXT.value,
            variant=FieldVariant.INPUT.value,
            required=True,
            placeholder="Enter your name",
            description=post.get("body"),
            order=0,
        ),
        FieldDescriptor(
            name="age_12345",
            label="Age",
            field_type=FieldType.NUMBER.value,
            variant=FieldVariant.INPUT.value,
            required=True,
            placeholder="Enter your age",
            order=1,
        ),
        FieldDescriptor(
            name="terms_001",
            label="Agree to terms",
            field_type=FieldType.CHECKBOX.value,
            variant=FieldVariant.CHECKBOX.value,
            required=True,
            checked=False,
            order=2,
        ),
    ]


class FormServiceClient:
    def __init__(self, settings: Settings, client: httpx.Client | None = None) -> None:
        self._settings = settings
        self._client = client or httpx.Client(
            base_url=settings.base_url,
            timeout=settings.http_timeout,
        )

    def fetch_field_config(self) -> list[FieldDescriptor]:
        try:
            payload = self._request("GET", self._settings.config_path)
        except httpx.HTTPError as exc:
            raise ConfigFetchError("Failed to fetch form configuration") from exc
        except ValueError as exc:
            raise ConfigFetchError("Form configuration is not valid JSON") from exc

        try:
            if isinstance(payload, list):
                return parse_descriptors(payload)
            if isinstance(payload, Mapping) and isinstance(payload.get("fields"), list):
                return parse_descriptors(payload["fields"])
            if isinstance(payload, Mapping):
                return demo_fields(payload)
        except FieldConfigError as exc:
            raise ConfigFetchError(f"Invalid form configuration: {exc}") from exc
        raise ConfigFetchError(f"Unexpected form configuration payload: {type(payload).__name__}")

    def submit_form(self, values: FormValues) -> Mapping[str, Any]:
        try:
            payload = self._request("POST", self._settings.submit_path, json=values)
        except (httpx.HTTPError, ValueError) as exc:
            raise SubmitError("Failed to submit form data") from exc
        if not isinstance(payload, Mapping):
            raise SubmitError("Submission response is not an object")
        return payload

    def autosave(self, values: FormValues) -> Any:
        try:
            return self._request("POST", self._settings.autosave_path, json=_json_safe(values))
        except (httpx.HTTPError, ValueError) as exc:
            raise AutosaveError("Failed to autosave form data") from exc

    def close(self) -> None:
        self._client.close()

    def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        logger.debug("%s %s", method, path)
        response = self._client.request(method, path, **kwargs)
        response.raise_for_status()
        return response.json()


def _json_safe(values: Mapping[str, Any]) -> dict[str, Any]:
    # Unparsed number input is held as NaN, which JSON cannot carry.
    return {
        name: None if isinstance(value, float) and not math.isfinite(value) else value
        for name, value in values.items()
    }
