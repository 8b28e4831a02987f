"""
Tests for property helpers — key routing and append semantics.
"""

import pytest
from pydantic import AliasChoices, BaseModel, Field

from suite_harness.core.engine.proptools import (
    accepted_keys,
    append_matching,
    append_value,
    first_unique,
)


class Listy(BaseModel):
    libs: list[str] = Field(default_factory=list)
    label: str = ""
    enabled: bool = False


class Aliased(BaseModel):
    flag: bool = Field(default=False, validation_alias=AliasChoices("flag", "flag_alt"))


class TestFirstUnique:
    def test_keeps_first_occurrence(self):
        assert first_unique(["b", "a", "b", "c", "a"]) == ["b", "a", "c"]

    def test_empty(self):
        assert first_unique([]) == []


class TestAcceptedKeys:
    def test_field_names(self):
        assert set(accepted_keys(Listy)) == {"libs", "label", "enabled"}

    def test_alias_choices(self):
        keys = accepted_keys(Aliased)
        assert keys["flag_alt"] == "flag"
        assert keys["flag"] == "flag"


class TestAppendValue:
    def test_lists_extend(self):
        assert append_value("k", ["a"], ["b", "c"]) == ["a", "b", "c"]

    def test_strings_concatenate(self):
        assert append_value("k", "ab", "cd") == "abcd"

    def test_bools_or(self):
        assert append_value("k", False, True) is True
        assert append_value("k", True, False) is True

    def test_none_replaced(self):
        assert append_value("k", None, ("x",)) == ["x"]
        assert append_value("k", None, 3) == 3

    def test_mismatched_type(self):
        with pytest.raises(TypeError, match="expects a list"):
            append_value("k", ["a"], "b")

    def test_unappendable_type(self):
        with pytest.raises(TypeError, match="cannot be appended"):
            append_value("k", 1, 2)


class TestAppendMatching:
    def test_appends_onto_matching_struct(self):
        listy = Listy(libs=["mine"])
        append_matching([listy, Aliased()], {"libs": ["theirs"], "label": "x"})
        assert listy.libs == ["mine", "theirs"]
        assert listy.label == "x"

    def test_alias_key(self):
        aliased = Aliased()
        append_matching([aliased], {"flag_alt": True})
        assert aliased.flag is True

    def test_unknown_key(self):
        with pytest.raises(KeyError):
            append_matching([Listy()], {"nope": []})
