"""JSON schema documents for combinator trees.

Lets a mapping be described as data (a JSON file, a config blob) and
rebuilt, and lets an existing mapping be dumped for inspection.

Node shapes, selected by ``"type"``::

    {"type": "raw" | "string" | "integer" | "number" | "boolean", "key": "k"}
    {"type": "enum", "key": "k", "values": ["a", "b"]}
    {"type": "constant", "value": ...}
    {"type": "optional", "inner": {...}}
    {"type": "default", "inner": {...}, "value": ...}
    {"type": "array", "item": {...}}
    {"type": "object", "fields": {"name": {...}, ...}}
    {"type": "tagged_union", "tag": {...}, "variants": {"v": {...}}, "tag_field": "type"}
    {"type": "alternative", "left": {...}, "right": {...}}

Functions:

* ``mapping_from_json`` — build a mapping, with depth / node-count guardrails.
* ``mapping_to_json`` — the inverse, for schema-expressible mappings.

Malformed documents raise ``MappingConfigError`` naming the dotted path of
the offending node (e.g. ``fields.num.inner``).
"""
from __future__ import annotations

from collections.abc import Callable
from typing import Any

from querymap.combinators import (
    AlternativeParam,
    ArrayParam,
    BooleanParam,
    DefaultParam,
    EnumParam,
    IntegerParam,
    NumberParam,
    ObjectParam,
    OptionalParam,
    RawParam,
    StringParam,
    TaggedUnionParam,
)
from querymap.errors import MappingConfigError
from querymap.mapping import ParamMapping, PureParam

# ---------------------------------------------------------------------------
# Guardrail constants
# ---------------------------------------------------------------------------

MAX_SCHEMA_DEPTH = 8
MAX_SCHEMA_NODES = 200

_KEYED_TYPES: dict[str, Callable[[str], ParamMapping[Any]]] = {
    "raw": RawParam,
    "string": StringParam,
    "integer": IntegerParam,
    "number": NumberParam,
    "boolean": BooleanParam,
}


def _where(path: str) -> str:
    return f" at {path}" if path else " at <root>"


def _join(path: str, part: str) -> str:
    return f"{path}.{part}" if path else part


# ---------------------------------------------------------------------------
# JSON → mapping
# ---------------------------------------------------------------------------

def mapping_from_json(
    data: Any,
    *,
    max_depth: int = MAX_SCHEMA_DEPTH,
    max_nodes: int = MAX_SCHEMA_NODES,
) -> ParamMapping[Any]:
    """Build a combinator tree from a schema document."""
    nodes_seen = 0

    def _string(node: dict[str, Any], name: str, path: str) -> str:
        value = node.get(name)
        if not isinstance(value, str) or not value:
            raise MappingConfigError(f"Schema node needs a non-empty string {name!r}{_where(path)}")
        return value

    def _child(node: dict[str, Any], name: str, path: str, depth: int) -> ParamMapping[Any]:
        if name not in node:
            raise MappingConfigError(f"Schema node is missing {name!r}{_where(path)}")
        return _parse(node[name], _join(path, name), depth + 1)

    def _named_children(
        node: dict[str, Any], name: str, path: str, depth: int,
    ) -> dict[str, ParamMapping[Any]]:
        raw = node.get(name)
        if not isinstance(raw, dict):
            raise MappingConfigError(f"Schema {name!r} must be an object{_where(path)}")
        children_path = _join(path, name)
        return {
            str(child_name): _parse(child, _join(children_path, str(child_name)), depth + 1)
            for child_name, child in raw.items()
        }

    def _parse(node: Any, path: str, depth: int) -> ParamMapping[Any]:
        nonlocal nodes_seen

        if depth > max_depth:
            raise MappingConfigError(f"Schema depth {depth} exceeds maximum {max_depth}{_where(path)}")
        if not isinstance(node, dict):
            raise MappingConfigError(f"Schema node must be an object{_where(path)}")
        nodes_seen += 1
        if nodes_seen > max_nodes:
            raise MappingConfigError(f"Schema has {nodes_seen} nodes, maximum is {max_nodes}")

        node_type = str(node.get("type", "")).lower()

        if node_type in _KEYED_TYPES:
            return _KEYED_TYPES[node_type](_string(node, "key", path))
        if node_type == "enum":
            values = node.get("values")
            if not isinstance(values, list) or not all(isinstance(v, str) for v in values):
                raise MappingConfigError(f"Enum 'values' must be a list of strings{_where(path)}")
            return EnumParam(_string(node, "key", path), tuple(values))
        if node_type == "constant":
            return PureParam(node.get("value"))
        if node_type == "optional":
            return OptionalParam(_child(node, "inner", path, depth))
        if node_type == "default":
            if "value" not in node:
                raise MappingConfigError(f"Default node is missing 'value'{_where(path)}")
            return DefaultParam(_child(node, "inner", path, depth), node["value"])
        if node_type == "array":
            return ArrayParam(_child(node, "item", path, depth))
        if node_type == "object":
            return ObjectParam(tuple(_named_children(node, "fields", path, depth).items()))
        if node_type == "tagged_union":
            tag_field = node.get("tag_field", "type")
            if not isinstance(tag_field, str):
                raise MappingConfigError(f"'tag_field' must be a string{_where(path)}")
            return TaggedUnionParam(
                _child(node, "tag", path, depth),
                _named_children(node, "variants", path, depth),
                tag_field,
            )
        if node_type == "alternative":
            return AlternativeParam(
                _child(node, "left", path, depth),
                _child(node, "right", path, depth),
            )

        raise MappingConfigError(f"Unrecognised schema node type {node_type!r}{_where(path)}")

    return _parse(data, "", 1)


# ---------------------------------------------------------------------------
# mapping → JSON
# ---------------------------------------------------------------------------

_KEYED_NAMES: dict[type, str] = {cls: name for name, cls in _KEYED_TYPES.items()}  # type: ignore[misc]


def mapping_to_json(mapping: ParamMapping[Any]) -> dict[str, Any]:
    """Describe *mapping* as a schema document.

    Raises ``MappingConfigError`` for mappings built from arbitrary
    callables (``map_param`` / ``bind_param``) or object factories, which
    have no schema form.
    """
    keyed = _KEYED_NAMES.get(type(mapping))
    if keyed is not None:
        return {"type": keyed, "key": mapping.key}  # type: ignore[attr-defined]
    if isinstance(mapping, EnumParam):
        return {"type": "enum", "key": mapping.key, "values": list(mapping.values)}
    if isinstance(mapping, PureParam):
        return {"type": "constant", "value": mapping.value}
    if isinstance(mapping, OptionalParam):
        return {"type": "optional", "inner": mapping_to_json(mapping.inner)}
    if isinstance(mapping, DefaultParam):
        return {"type": "default", "inner": mapping_to_json(mapping.inner), "value": mapping.default}
    if isinstance(mapping, ArrayParam):
        return {"type": "array", "item": mapping_to_json(mapping.item)}
    if isinstance(mapping, ObjectParam):
        if mapping.factory is not None:
            raise MappingConfigError("Object mappings with a factory have no schema form")
        return {
            "type": "object",
            "fields": {name: mapping_to_json(child) for name, child in mapping.fields},
        }
    if isinstance(mapping, TaggedUnionParam):
        d: dict[str, Any] = {
            "type": "tagged_union",
            "tag": mapping_to_json(mapping.tag),
            "variants": {name: mapping_to_json(child) for name, child in mapping.variants.items()},
        }
        if mapping.tag_field != "type":
            d["tag_field"] = mapping.tag_field
        return d
    if isinstance(mapping, AlternativeParam):
        return {
            "type": "alternative",
            "left": mapping_to_json(mapping.left),
            "right": mapping_to_json(mapping.right),
        }
    raise MappingConfigError(f"{type(mapping).__name__} has no schema form")
