"""Tests for the record sanitizer."""

import copy
import json

import pytest

from recsan import (
    NOT_LOADED,
    ConfigurationError,
    NotLoaded,
    Sanitizer,
    ValidationError,
    json_encoder,
    sanitize,
)
from recsan.config import Settings

from .models import Doctor, Hospital, Room


class TestShapes:
    def test_plain_mapping(self):
        data = {"name": "John", "password": "secret"}
        assert sanitize(data, remove=["password"]) == {"name": "John"}

    def test_dataclass_entity_is_flattened(self):
        hospital = Hospital(id=1, name="General", phone="123-456-7890")
        assert sanitize(hospital) == {
            "id": 1,
            "name": "General",
            "phone": "123-456-7890",
            "address": None,
            "rating": None,
        }

    def test_pydantic_entity_is_flattened(self):
        doctor = Doctor(id=3, name="House", email="h@example.com", password="x")
        assert sanitize(doctor, mask={"password": "****"}, except_=["email"]) == {
            "id": 3,
            "name": "House",
            "password": "****",
        }

    def test_named_tuple_is_treated_as_entity(self):
        room = Room(number=101, floor=1, hospital=Hospital(id=1, name="General"))
        assert sanitize(room, only=["number", "hospital", "name"]) == {
            "number": 101,
            "hospital": {"name": "General"},
        }

    def test_list_of_records(self):
        hospitals = [Hospital(id=1, name="General"), Hospital(id=2, name="Specialty")]
        assert sanitize(hospitals, only=["id", "name"]) == [
            {"id": 1, "name": "General"},
            {"id": 2, "name": "Specialty"},
        ]

    def test_sequence_mapping(self):
        r1 = {"a": 1, "secret": "x"}
        r2 = {"a": 2, "secret": "y", "extra": True}
        options = {"remove": ["secret"]}
        result = sanitize([r1, r2], options)
        assert len(result) == 2
        assert result[0] == sanitize(r1, options)
        assert result[1] == sanitize(r2, options)

    def test_pair_tuple(self):
        assert sanitize(("key", "value")) == {"key": "value"}

    def test_pair_tuple_value_is_sanitized(self):
        result = sanitize(("user", {"name": "John", "password": "s"}), remove=["password"])
        assert result == {"user": {"name": "John"}}

    @pytest.mark.parametrize("value", [42, "text", None, 3.5, b"raw", {1, 2}])
    def test_scalars_are_returned_unchanged(self, value):
        assert sanitize(value, remove=["password"]) == value

    def test_marker_outside_a_record_is_returned_unchanged(self):
        assert sanitize([NOT_LOADED]) == [NOT_LOADED]


class TestCompositeTuples:
    def test_without_encoder_raises(self):
        with pytest.raises(ConfigurationError) as exc_info:
            sanitize(("a", "b", 1))
        assert exc_info.value.details["config_key"] == "json_encoder"
        assert exc_info.value.context["tuple_size"] == 3

    def test_with_explicit_encoder(self):
        result = sanitize(("complex", "data", 123, {"nested": True}), encoder=json_encoder)
        assert result == '["complex","data",123,{"nested":true}]'

    def test_with_encoder_object(self):
        encoder = json.JSONEncoder(separators=(",", ":"))
        assert sanitize(("a", 1, None), encoder=encoder) == '["a",1,null]'

    def test_encoder_from_environment(self, monkeypatch):
        monkeypatch.setenv("RECSAN_JSON_ENCODER", "recsan.core.encoders:json_encoder")
        assert sanitize((1, 2, 3)) == "[1,2,3]"

    def test_encoder_from_settings(self):
        sanitizer = Sanitizer(settings=Settings(json_encoder="json:dumps"))
        assert sanitizer.sanitize(("a",)) == '["a"]'

    def test_encoder_class_from_settings(self):
        sanitizer = Sanitizer(settings=Settings(json_encoder="json:JSONEncoder"))
        assert sanitizer.sanitize(("a", "b", 1)) == '["a", "b", 1]'

    def test_unresolvable_encoder_setting(self, monkeypatch):
        monkeypatch.setenv("RECSAN_JSON_ENCODER", "no_such_module_xyz:encode")
        with pytest.raises(ConfigurationError):
            sanitize(("a", "b", "c"))

    def test_nested_composite_tuple_is_encoded(self):
        result = sanitize({"point": (1, 2, 3)}, encoder=json_encoder)
        assert result == {"point": "[1,2,3]"}

    def test_pair_tuples_do_not_need_an_encoder(self):
        assert sanitize({"pair": ("k", "v")}) == {"pair": {"k": "v"}}


class TestPipelineRules:
    def test_mask_sensitive_fields(self):
        data = {"email": "test@example.com", "password": "secret"}
        assert sanitize(data, mask={"email": "****@****", "password": "********"}) == {
            "email": "****@****",
            "password": "********",
        }

    def test_mask_accepts_pairs(self):
        assert sanitize({"password": "x"}, mask=[("password", "****")]) == {
            "password": "****"
        }

    def test_mask_never_inserts(self):
        result = sanitize({"name": "John"}, mask={"password": "****"})
        assert "password" not in result

    def test_only(self):
        data = {"name": "John", "email": "test@example.com", "age": 30}
        assert sanitize(data, only=["name", "age"]) == {"name": "John", "age": 30}

    def test_except(self):
        data = {"name": "John", "email": "test@example.com", "age": 30}
        assert sanitize(data, except_=["email"]) == {"name": "John", "age": 30}

    def test_except_from_options_mapping(self):
        data = {"name": "John", "email": "test@example.com"}
        assert sanitize(data, {"except": ["email"]}) == {"name": "John"}

    def test_only_dominates_except(self):
        data = {"a": 1, "b": 2, "c": 3}
        assert sanitize(data, only=["a"], except_=["b"]) == {"a": 1}

    def test_removed_field_cannot_be_masked_or_kept(self):
        data = {"name": "John", "password": "secret"}
        result = sanitize(
            data, remove=["password"], mask={"password": "****"}, only=["password"]
        )
        assert result == {}


class TestDeepSanitization:
    def test_nested_structures_when_deep(self):
        data = {
            "user": {
                "name": "John",
                "password": "secret",
                "profile": {"bio": "Test", "private": True},
            }
        }
        result = sanitize(data, mask={"password": "****"}, remove=["private"], deep=True)
        assert result == {
            "user": {
                "name": "John",
                "password": "****",
                "profile": {"bio": "Test"},
            }
        }

    def test_deep_toggle(self):
        data = {"user": {"password": "secret"}}
        assert sanitize(data, mask={"password": "****"}, deep=True) == {
            "user": {"password": "****"}
        }
        assert sanitize(data, mask={"password": "****"}, deep=False) == {
            "user": {"password": "secret"}
        }

    def test_unloaded_relation_is_pruned(self):
        assert sanitize({"rel": NOT_LOADED, "name": "x"}) == {"name": "x"}

    def test_unloaded_relation_kept_when_not_deep(self):
        result = sanitize({"rel": NOT_LOADED, "name": "x"}, deep=False)
        assert result == {"rel": NOT_LOADED, "name": "x"}

    def test_lists_of_nested_records(self):
        data = {"doctors": [{"name": "A", "password": "1"}, {"name": "B", "password": "2"}]}
        assert sanitize(data, remove=["password"]) == {
            "doctors": [{"name": "A"}, {"name": "B"}]
        }

    def test_lists_of_scalars_pass_through(self, user_record):
        assert sanitize(user_record)["tags"] == ["admin", "staff"]

    def test_nested_entities_are_flattened(self):
        room = Room(number=1, floor=2, hospital=Hospital(id=9, name="North"))
        result = sanitize({"room": room}, except_=["rating", "address", "phone"])
        assert result == {
            "room": {"number": 1, "floor": 2, "hospital": {"id": 9, "name": "North"}}
        }

    def test_custom_unloaded_predicate(self):
        class LazyRelation:
            pass

        sanitizer = Sanitizer(is_unloaded=lambda value: isinstance(value, LazyRelation))
        result = sanitizer.sanitize({"name": "x", "rel": LazyRelation(), "other": NOT_LOADED})
        assert result == {"name": "x", "other": NOT_LOADED}


class TestProperties:
    def test_purity(self, user_record):
        snapshot = copy.deepcopy(user_record)
        sanitize(
            user_record,
            mask={"password": "****"},
            remove=["private"],
            except_=["email"],
        )
        assert user_record == snapshot

    def test_purity_for_entities(self):
        hospital = Hospital(id=1, name="General", phone="123")
        sanitize(hospital, mask={"phone": "***"})
        assert hospital.phone == "123"

    @pytest.mark.parametrize(
        "options",
        [
            {"remove": ["password", "private"]},
            {"only": ["name", "profile", "bio"]},
            {"except": ["email", "orders"]},
        ],
    )
    def test_idempotence(self, user_record, options):
        once = sanitize(user_record, options)
        assert sanitize(once, options) == once

    def test_output_holds_no_entity_references(self):
        hospitals = [Hospital(id=1, name="General")]
        result = sanitize({"hospitals": hospitals})
        assert isinstance(result["hospitals"][0], dict)


class TestSanitizerConfiguration:
    def test_stage_replacement(self):
        def drop_private(record, options, sanitizer):
            return {k: v for k, v in record.items() if not str(k).startswith("_")}

        sanitizer = Sanitizer(stages={"filter": drop_private})
        result = sanitizer.sanitize({"name": "x", "_internal": 1, "nested": {"_id": 2}})
        assert result == {"name": "x", "nested": {}}

    def test_unknown_stage(self):
        with pytest.raises(ConfigurationError):
            Sanitizer(stages={"uppercase": lambda record, options, sanitizer: record})

    def test_subclass_override(self):
        class PublicFieldsSanitizer(Sanitizer):
            def project_entity(self, record):
                flat = super().project_entity(record)
                return {k: v for k, v in flat.items() if v is not None}

        result = PublicFieldsSanitizer().sanitize(Hospital(id=1, name="General"))
        assert result == {"id": 1, "name": "General"}

    def test_strict_mode_rejects_only_with_except(self):
        with pytest.raises(ValidationError) as exc_info:
            Sanitizer(strict=True).sanitize({"a": 1}, only=["a"], except_=["b"])
        assert exc_info.value.details["validation_rule"] == "only_excludes_except"

    def test_strict_mode_from_environment(self, monkeypatch):
        monkeypatch.setenv("RECSAN_STRICT_OPTIONS", "true")
        with pytest.raises(ValidationError):
            sanitize({"a": 1}, only=["a"], except_=["b"])

    def test_strict_mode_allows_single_filter(self):
        assert Sanitizer(strict=True).sanitize({"a": 1, "b": 2}, only=["a"]) == {"a": 1}

    def test_invalid_options_raise_validation_error(self):
        with pytest.raises(ValidationError):
            sanitize({"a": 1}, remove="a")

    def test_marker_subclasses_are_recognised(self):
        class HospitalRooms(NotLoaded):
            pass

        assert sanitize({"rooms": HospitalRooms(field="rooms"), "id": 1}) == {"id": 1}
