"""Parse the model definitions file into models, fields and relations."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import IO, Any, Union

import yaml

Source = Union[str, bytes, IO[str], IO[bytes]]


class ModelError(ValueError):
    """Raised when the model definitions cannot be decoded."""


def _string(value: Any, what: str) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    raise ModelError(f"{what} must be a string, got {value!r}")


def _split(value: str) -> tuple[str, str]:
    parts = value.split("/")
    if len(parts) != 2:
        raise ModelError(f"invalid value of `to`, expected one `/`: {value}")
    return parts[0], parts[1]


@dataclass(frozen=True)
class ToField:
    """The field a relation points to."""

    name: str = ""
    type: str = ""

    @classmethod
    def from_yaml(cls, node: Any) -> ToField:
        """Decode a field name or a mapping with name and type."""
        if node is None:
            return cls()
        if isinstance(node, str):
            return cls(name=node, type="normal")
        if isinstance(node, dict):
            try:
                return cls(
                    name=_string(node.get("name"), "name"),
                    type=_string(node.get("type"), "type"),
                )
            except ModelError as err:
                raise ModelError(f"decoding to field: {err}") from err
        raise ModelError(f"decoding to field: unexpected value {node!r}")


@dataclass(frozen=True)
class ToCollectionField:
    """A collection together with the field a relation points to."""

    collection: str = ""
    to_field: ToField = field(default_factory=ToField)

    @classmethod
    def from_yaml(cls, node: Any) -> ToCollectionField:
        """Decode "collection/field" or a mapping with collection and field."""
        if node is None:
            return cls()
        if isinstance(node, str):
            collection, name = _split(node)
            return cls(collection, ToField(name=name))
        if isinstance(node, dict):
            try:
                return cls(
                    collection=_string(node.get("collection"), "collection"),
                    to_field=ToField.from_yaml(node.get("field")),
                )
            except ModelError as err:
                raise ModelError(f"decoding to collection field: {err}") from err
        raise ModelError(f"decoding to collection field: unexpected value {node!r}")


@dataclass(frozen=True)
class AttributeRelation:
    """A relation or relation-list field."""

    to: ToCollectionField = field(default_factory=ToCollectionField)
    is_list: bool = False

    @classmethod
    def from_yaml(cls, node: dict[str, Any], is_list: bool) -> AttributeRelation:
        """Decode the `to` entry of a relation field."""
        to = node.get("to")
        if isinstance(to, str):
            collection, name = _split(to)
            target = ToCollectionField(collection, ToField(name=name))
        else:
            try:
                target = ToCollectionField.from_yaml(to)
            except ModelError as err:
                raise ModelError(f"decoding to field: {err}") from err
        return cls(to=target, is_list=is_list)

    def to_collections(self) -> list[ToCollectionField]:
        """Return the single collection field the relation points to."""
        return [self.to]


@dataclass(frozen=True)
class AttributeGenericRelation:
    """A generic-relation or generic-relation-list field."""

    to: tuple[ToCollectionField, ...] = ()
    is_list: bool = False

    @classmethod
    def from_yaml(cls, node: dict[str, Any], is_list: bool) -> AttributeGenericRelation:
        """Decode the `to` entry of a generic relation field."""
        to = node.get("to")
        if to is None:
            return cls(is_list=is_list)

        if isinstance(to, dict):
            collections = to.get("collections") or []
            if not isinstance(collections, list):
                raise ModelError("decoding to generic field: collections must be a list")
            to_field = ToField.from_yaml(to.get("field"))
            targets = tuple(
                ToCollectionField(_string(c, "collection"), to_field) for c in collections
            )
            return cls(to=targets, is_list=is_list)

        if isinstance(to, list):
            targets = tuple(
                ToCollectionField(*_pair(_string(entry, "collection field")))
                for entry in to
            )
            return cls(to=targets, is_list=is_list)

        raise ModelError(f"decoding to generic field: unexpected value {to!r}")

    def to_collections(self) -> list[ToCollectionField]:
        """Return every collection field the relation may point to."""
        return list(self.to)


def _pair(value: str) -> tuple[str, ToField]:
    collection, name = _split(value)
    return collection, ToField(name=name)


Relation = Union[AttributeRelation, AttributeGenericRelation]

_RELATIONS = {
    "relation": (AttributeRelation, False),
    "relation-list": (AttributeRelation, True),
    "generic-relation": (AttributeGenericRelation, False),
    "generic-relation-list": (AttributeGenericRelation, True),
}


@dataclass
class Field:
    """One field of a model."""

    type: str = ""
    required: bool = False
    _restriction_mode: str = ""
    _relation: Relation | None = None

    @classmethod
    def from_yaml(cls, node: Any) -> Field:
        """Decode a field definition."""
        if not isinstance(node, dict):
            raise ModelError(f"field object without type: {node!r}")
        try:
            typ = _string(node.get("type"), "type")
            mode = _string(node.get("restriction_mode"), "restriction_mode")
        except ModelError as err:
            raise ModelError(f"field object without type: {err}") from err
        required = node.get("required")
        if required is None:
            required = False
        if not isinstance(required, bool):
            raise ModelError(f"field object without type: required must be a bool, got {required!r}")

        relation: Relation | None = None
        if typ in _RELATIONS:
            kind, is_list = _RELATIONS[typ]
            try:
                relation = kind.from_yaml(node, is_list)
            except ModelError as err:
                raise ModelError(f"invalid object of type {typ}: {err}") from err

        return cls(type=typ, required=required, _restriction_mode=mode, _relation=relation)

    def relation(self) -> Relation | None:
        """Return the relation if the field is one, otherwise None."""
        return self._relation

    def restriction_mode(self) -> str:
        """Return the restriction mode the field belongs to."""
        return self._restriction_mode


@dataclass
class Model:
    """One model with its fields."""

    fields: dict[str, Field] = field(default_factory=dict)

    @classmethod
    def from_yaml(cls, node: Any) -> Model:
        """Decode a mapping of field names to field definitions."""
        if node is None:
            return cls()
        if not isinstance(node, dict):
            raise ModelError(f"model must be a mapping, got {node!r}")
        fields = {}
        for name, definition in node.items():
            try:
                fields[str(name)] = Field.from_yaml(definition)
            except ModelError as err:
                raise ModelError(f"field {name}: {err}") from err
        return cls(fields=fields)


def unmarshal(source: Source) -> dict[str, Model]:
    """Parse model definitions from YAML text, bytes or a file object.

    The top-level `_meta` entry is ignored.
    """
    data = source.read() if hasattr(source, "read") else source
    try:
        document = yaml.safe_load(data)
    except yaml.YAMLError as err:
        raise ModelError(f"decoding yaml: {err}") from err

    if not isinstance(document, dict):
        raise ModelError(f"decoding models: expected a mapping, got {document!r}")
    document.pop("_meta", None)

    models = {}
    for name, node in document.items():
        try:
            models[str(name)] = Model.from_yaml(node)
        except ModelError as err:
            raise ModelError(f"decoding models: {name}: {err}") from err
    return models