"""Tests for payload validation and error translation."""

from typing import List

import pytest

from rbac_admin.errors import ValidationFailed
from rbac_admin.rbac.requests import (
    PermissionCreateRequest,
    RoleCreateRequest,
    RolePermissionRevokeRequest,
)
from rbac_admin.validation import ErrorBag, field_path, translate_errors, validate


class TestValidate:
    def test_returns_parsed_payload(self):
        items = validate(List[PermissionCreateRequest], [{"name": "view_users"}])

        assert len(items) == 1
        assert items[0].name == "view_users"
        assert items[0].guard_name is None

    def test_missing_field_is_required(self):
        with pytest.raises(ValidationFailed) as exc_info:
            validate(List[PermissionCreateRequest], [{"guard_name": "web"}])

        assert exc_info.value.errors == {"0.name": ["The 0.name field is required."]}
        assert exc_info.value.message == "Validation error."

    def test_empty_string_is_treated_as_missing(self):
        with pytest.raises(ValidationFailed) as exc_info:
            validate(List[PermissionCreateRequest], [{"name": "ok"}, {"name": ""}])

        assert exc_info.value.errors == {"1.name": ["The 1.name field is required."]}

    def test_name_longer_than_255_characters(self):
        with pytest.raises(ValidationFailed) as exc_info:
            validate(List[PermissionCreateRequest], [{"name": "x" * 256}])

        assert exc_info.value.errors == {
            "0.name": ["The 0.name field must not be greater than 255 characters."]
        }

    def test_empty_permission_list(self):
        with pytest.raises(ValidationFailed) as exc_info:
            validate(List[RoleCreateRequest], [{"name": "Admin", "permissions": []}])

        assert exc_info.value.errors == {
            "0.permissions": ["The 0.permissions field must have at least 1 items."]
        }

    def test_non_integer_permission_id(self):
        with pytest.raises(ValidationFailed) as exc_info:
            validate(RolePermissionRevokeRequest, {"permissions": ["abc"]})

        assert exc_info.value.errors == {
            "permissions.0": ["The permissions.0 field must be an integer."]
        }

    def test_object_where_list_expected(self):
        with pytest.raises(ValidationFailed) as exc_info:
            validate(List[PermissionCreateRequest], {"name": "view_users"})

        assert exc_info.value.errors == {"body": ["The body field must be an array."]}


class TestTranslateErrors:
    def test_strips_request_location(self):
        errors = [
            {"type": "missing", "loc": ("body", 0, "name"), "msg": "Field required"},
            {"type": "int_parsing", "loc": ("path", "role_id"), "msg": "bad"},
        ]

        translated = translate_errors(errors, strip_request_location=True)

        assert translated == {
            "0.name": ["The 0.name field is required."],
            "role_id": ["The role_id field must be an integer."],
        }

    def test_unknown_error_type_keeps_message(self):
        errors = [{"type": "enum", "loc": ("body", "kind"), "msg": "Input should be 'a'"}]

        assert translate_errors(errors, strip_request_location=True) == {
            "kind": ["Input should be 'a'"]
        }

    def test_malformed_json_is_reported_on_body(self):
        errors = [
            {
                "type": "json_invalid",
                "loc": ("body", 1),
                "msg": "JSON decode error",
                "ctx": {"error": "Expecting value"},
            }
        ]

        assert translate_errors(errors, strip_request_location=True) == {
            "body": ["The body field must be valid JSON."]
        }

    def test_field_path_defaults_to_body(self):
        assert field_path(()) == "body"
        assert field_path(("body",), strip_request_location=True) == "body"


class TestErrorBag:
    def test_collects_messages_per_field(self):
        bag = ErrorBag()
        bag.add("0.name", "first")
        bag.add("0.name", "second")
        bag.add("1.name", "third")

        assert bag
        assert bag.to_dict() == {"0.name": ["first", "second"], "1.name": ["third"]}

    def test_raise_if_any(self):
        bag = ErrorBag()
        bag.raise_if_any()

        bag.add("name", "The name has already been taken.")
        with pytest.raises(ValidationFailed) as exc_info:
            bag.raise_if_any()

        assert exc_info.value.errors == {"name": ["The name has already been taken."]}
        assert exc_info.value.status_code == 422
