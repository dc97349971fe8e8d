"""
Tests for the Gehl field registry.
"""

import itertools

import pytest

from gehl.errors import UnknownFieldError, UnsupportedFieldSelectionError
from gehl.services.registry.fields import (
    ALL_GEHL_FIELDS,
    DATABASE_ENUMS,
    Encoding,
    TableSchema,
    domain_for,
    encoding_for,
    is_supported_selection,
    schema_for_fields,
)


class TestEncodingRules:

    @pytest.mark.parametrize("field,rule", [
        ("location", Encoding.GEOMETRY),
        ("age", Encoding.AGE_BAND),
        ("groups", Encoding.GROUP_BAND),
        ("activities", Encoding.ARRAY),
        ("gender", Encoding.PASSTHROUGH),
        ("note", Encoding.PASSTHROUGH),
        ("survey_id", Encoding.PASSTHROUGH),
    ])
    def test_rule_per_field(self, field, rule):
        assert encoding_for(field) is rule

    def test_unknown_field(self):
        with pytest.raises(UnknownFieldError):
            encoding_for("objects")

    def test_domains(self):
        assert domain_for("gender") == ("male", "female", "unknown")
        assert set(domain_for("age")) == {"child", "young", "adult", "elderly"}
        assert domain_for("posture") is None

    def test_groups_enum_holds_stored_values(self):
        assert "group_8+" in DATABASE_ENUMS["groups"]


class TestTableSchemas:

    def test_eleven_fields(self):
        assert len(ALL_GEHL_FIELDS) == 11

    def test_minimal_selection(self):
        assert schema_for_fields(["location", "gender"]) is TableSchema.GENDER_LOCATION

    def test_full_selection_any_order(self):
        fields = list(reversed(ALL_GEHL_FIELDS)) + ["gender"]
        assert schema_for_fields(fields) is TableSchema.FULL

    def test_every_other_subset_is_rejected(self):
        supported = {frozenset(s.fields) for s in TableSchema}
        checked = 0
        for n in range(len(ALL_GEHL_FIELDS) + 1):
            for combo in itertools.combinations(ALL_GEHL_FIELDS, n):
                if frozenset(combo) in supported:
                    continue
                assert not is_supported_selection(combo)
                with pytest.raises(UnsupportedFieldSelectionError):
                    schema_for_fields(combo)
                checked += 1
        assert checked == 2 ** 11 - 2

    def test_unknown_name_in_selection(self):
        with pytest.raises(UnsupportedFieldSelectionError):
            schema_for_fields(["gender", "location", "mood"])

    def test_columns_cover_selection_and_timestamps(self):
        for schema in TableSchema:
            assert set(schema.fields) <= set(schema.columns)
            assert {"creation_date", "last_updated"} <= set(schema.columns)
        assert TableSchema.GENDER_LOCATION.columns == ("gender", "location", "creation_date", "last_updated")
