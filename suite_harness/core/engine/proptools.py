"""
Property helpers — routing declared keys to property structs and
merging appended values into them.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any, TypeVar

from pydantic import AliasChoices, BaseModel

T = TypeVar("T")


def first_unique(items: Iterable[T]) -> list[T]:
    """Drop repeated items, keeping the first occurrence of each."""
    return list(dict.fromkeys(items))


def accepted_keys(model: type[BaseModel]) -> dict[str, str]:
    """Map every key a property struct accepts to its field name.

    A field is reachable by its own name and by any string alias in its
    ``validation_alias``.
    """
    keys: dict[str, str] = {}
    for field_name, info in model.model_fields.items():
        keys[field_name] = field_name
        alias = info.validation_alias
        if isinstance(alias, str):
            keys[alias] = field_name
        elif isinstance(alias, AliasChoices):
            for choice in alias.choices:
                if isinstance(choice, str):
                    keys[choice] = field_name
    return keys


def append_value(key: str, current: Any, value: Any) -> Any:
    """Merge ``value`` onto ``current`` the way declarations compose.

    Lists extend, strings concatenate, booleans OR, unset values are
    replaced.  Anything else is a type error.
    """
    if current is None:
        return list(value) if isinstance(value, (list, tuple)) else value
    if isinstance(current, bool):
        if not isinstance(value, bool):
            raise TypeError(f"property {key!r} expects a bool, got {type(value).__name__}")
        return current or value
    if isinstance(current, list):
        if not isinstance(value, (list, tuple)):
            raise TypeError(f"property {key!r} expects a list, got {type(value).__name__}")
        return current + list(value)
    if isinstance(current, str):
        if not isinstance(value, str):
            raise TypeError(f"property {key!r} expects a string, got {type(value).__name__}")
        return current + value
    raise TypeError(f"property {key!r} of type {type(current).__name__} cannot be appended to")


def append_matching(structs: Iterable[BaseModel], extension: Mapping[str, Any]) -> None:
    """Append ``extension`` onto every struct that has a matching field.

    Raises:
        KeyError: if no struct accepts one of the keys.
        TypeError: if a value cannot be merged onto the existing one.
    """
    structs = list(structs)
    for key, value in extension.items():
        matched = False
        for struct in structs:
            field_name = accepted_keys(type(struct)).get(key)
            if field_name is None:
                continue
            matched = True
            merged = append_value(key, getattr(struct, field_name), value)
            setattr(struct, field_name, merged)
        if not matched:
            raise KeyError(key)
