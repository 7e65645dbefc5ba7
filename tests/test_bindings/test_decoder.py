from __future__ import annotations

import pytest

from bitbucket_provider.bindings.base import (
    boolean,
    integer,
    map_list,
    mapping,
    number,
    obj,
    object_list,
    scalar,
    string,
    string_list,
)
from bitbucket_provider.bindings.decoder import decode, zero_value
from bitbucket_provider.errors import ContractError, DecodeError

SAMPLE = scalar(
    "bitbucket_sample",
    "2.0/repositories/{workspace}/{repo_slug}/sample",
    string("name", required=True),
    integer("size"),
    number("ratio"),
    boolean("is_private"),
    string("owner_name", "owner.display_name"),
    mapping("links"),
    obj("mainbranch", string("name"), string("type")),
    string_list("labels"),
    map_list("reviewers"),
    object_list("parents", string("hash"), integer("depth")),
)


def test_missing_fields_take_zero_values() -> None:
    attributes = decode(SAMPLE, {"name": "api"})

    assert attributes == {
        "name": "api",
        "size": 0,
        "ratio": 0.0,
        "is_private": False,
        "owner_name": "",
        "links": {},
        "mainbranch": {"name": "", "type": ""},
        "labels": [],
        "reviewers": [],
        "parents": [],
    }


def test_null_is_treated_as_missing() -> None:
    attributes = decode(SAMPLE, {"name": "api", "size": None, "owner": None, "mainbranch": None})

    assert attributes["size"] == 0
    assert attributes["owner_name"] == ""
    assert attributes["mainbranch"] == {"name": "", "type": ""}


def test_nested_and_dotted_sources_are_flattened() -> None:
    document = {
        "name": "api",
        "size": 2048,
        "ratio": 0.5,
        "is_private": True,
        "owner": {"display_name": "Acme"},
        "mainbranch": {"name": "main", "type": "branch", "extra": 1},
        "labels": ["a", "b"],
        "parents": [{"hash": "abc", "depth": 1, "ignored": True}],
    }

    attributes = decode(SAMPLE, document)

    assert attributes["owner_name"] == "Acme"
    assert attributes["mainbranch"] == {"name": "main", "type": "branch"}
    assert attributes["labels"] == ["a", "b"]
    assert attributes["parents"] == [{"hash": "abc", "depth": 1}]


def test_unknown_top_level_fields_are_ignored() -> None:
    attributes = decode(SAMPLE, {"name": "api", "surprise": {"deep": [1, 2]}})

    assert "surprise" not in attributes


def test_missing_required_field_is_contract_error() -> None:
    with pytest.raises(ContractError) as exc_info:
        decode(SAMPLE, {"size": 1})

    assert "name" in str(exc_info.value)
    assert exc_info.value.binding == "bitbucket_sample"


@pytest.mark.parametrize(
    ("document", "field"),
    [
        ({"name": 5}, "name"),
        ({"name": "api", "size": "big"}, "size"),
        ({"name": "api", "size": True}, "size"),
        ({"name": "api", "is_private": "yes"}, "is_private"),
        ({"name": "api", "links": []}, "links"),
        ({"name": "api", "labels": "a"}, "labels"),
        ({"name": "api", "parents": ["abc"]}, "parents[0]"),
        ({"name": "api", "parents": [{"depth": "deep"}]}, "parents[0].depth"),
    ],
)
def test_type_mismatch_is_decode_error_naming_the_decoder(document: dict, field: str) -> None:
    with pytest.raises(DecodeError) as exc_info:
        decode(SAMPLE, document)

    message = str(exc_info.value)
    assert "bitbucket_sample decoder" in message
    assert repr(field) in message


def test_integral_float_is_accepted_as_integer() -> None:
    assert decode(SAMPLE, {"name": "api", "size": 3.0})["size"] == 3


def test_non_object_document_is_decode_error() -> None:
    with pytest.raises(DecodeError) as exc_info:
        decode(SAMPLE, [{"name": "api"}])

    assert "expected a JSON object, got array" in str(exc_info.value)


def test_map_attributes_are_copied() -> None:
    links = {"self": {"href": "https://api.bitbucket.org/2.0/x"}}

    attributes = decode(SAMPLE, {"name": "api", "links": links})
    attributes["links"]["self"]["href"] = "changed"

    assert links["self"]["href"] == "https://api.bitbucket.org/2.0/x"


def test_null_list_elements_take_zero_values() -> None:
    attributes = decode(SAMPLE, {"name": "api", "labels": ["a", None]})

    assert attributes["labels"] == ["a", ""]


def test_zero_value_of_object_is_nested() -> None:
    assert zero_value(obj("o", integer("n"), obj("inner", boolean("flag")))) == {
        "n": 0,
        "inner": {"flag": False},
    }
