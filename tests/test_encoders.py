"""Tests for tuple encoders and encoder resolution."""

import json

import pytest

from recsan import ConfigurationError
from recsan.core.encoders import as_encoder, json_encoder, resolve_encoder


class TestJsonEncoder:
    def test_compact_array(self):
        assert (
            json_encoder(["complex", "data", 123, {"nested": True}])
            == '["complex","data",123,{"nested":true}]'
        )

    def test_keeps_unicode(self):
        assert json_encoder(["café"]) == '["café"]'

    def test_accepts_any_sequence(self):
        assert json_encoder(("a", 1)) == '["a",1]'


class TestAsEncoder:
    def test_plain_callable(self):
        assert as_encoder(json_encoder) is json_encoder

    def test_object_with_encode_method(self):
        encode = as_encoder(json.JSONEncoder(separators=(",", ":")))
        assert encode(["a", 1]) == '["a",1]'

    def test_rejects_other_values(self):
        with pytest.raises(ConfigurationError):
            as_encoder(42)
        with pytest.raises(ConfigurationError):
            as_encoder("json:dumps")


class TestResolveEncoder:
    def test_module_attribute_path(self):
        assert resolve_encoder("recsan.core.encoders:json_encoder") is json_encoder

    def test_dotted_path(self):
        assert resolve_encoder("json.dumps") is json.dumps

    def test_missing_module(self):
        with pytest.raises(ConfigurationError) as exc_info:
            resolve_encoder("no_such_module_xyz:encode")
        assert exc_info.value.details["config_key"] == "json_encoder"

    def test_missing_attribute(self):
        with pytest.raises(ConfigurationError):
            resolve_encoder("json:no_such_function")

    def test_class_path_is_instantiated(self):
        encode = resolve_encoder("json:JSONEncoder")
        assert encode(["a", "b", 1]) == '["a", "b", 1]'

    def test_class_needing_arguments(self):
        with pytest.raises(ConfigurationError) as exc_info:
            resolve_encoder("zipfile:ZipFile")
        assert exc_info.value.details["config_key"] == "json_encoder"

    def test_module_path(self):
        with pytest.raises(ConfigurationError):
            resolve_encoder("json")
