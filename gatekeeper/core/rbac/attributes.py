"""Attribute masks and filtering.

A permission's ``attributes`` string is a comma separated list of tokens:

    *            allow every field not otherwise mentioned
    name         allow ``name``
    !name        deny ``name`` (always wins over an allow)
    roles.id     address a field of a nested entity
    !roles.id    deny a field of a nested entity

``"*, !age"`` therefore means "every field except age". An empty
specification is the same as ``"*"``.

Masks are applied to records (mappings). Fields declared by a
:class:`FieldSchema` as nested entities are filtered element-wise with
the child mask; every other value is passed through untouched.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Iterable, List, Mapping, Optional, Tuple


@dataclass(frozen=True)
class FieldDescriptor:
    """A filterable field; ``entity`` is set when the field holds nested records."""
    name: str
    entity: Optional["FieldSchema"] = None


@dataclass(frozen=True)
class FieldSchema:
    """The set of fields a resource type exposes to attribute filtering."""
    name: str
    fields: Tuple[FieldDescriptor, ...] = ()

    @classmethod
    def of(cls, name: str, *fields) -> "FieldSchema":
        """Build a schema from field names and/or descriptors."""
        return cls(name, tuple(
            f if isinstance(f, FieldDescriptor) else FieldDescriptor(f)
            for f in fields
        ))

    @property
    def field_names(self) -> Tuple[str, ...]:
        return tuple(f.name for f in self.fields)

    def get(self, name: str) -> Optional[FieldDescriptor]:
        for descriptor in self.fields:
            if descriptor.name == name:
                return descriptor
        return None

    def __contains__(self, name: object) -> bool:
        return self.get(name) is not None


@dataclass(frozen=True)
class AttributeMask:
    """Compiled allow/deny rule set over field names."""
    allow_all: bool = False
    allowed: FrozenSet[str] = frozenset()
    denied: FrozenSet[str] = frozenset()
    children: Mapping[str, "AttributeMask"] = field(default_factory=dict)

    def permits(self, name: str) -> bool:
        """Check whether a top-level field survives this mask."""
        if name in self.denied:
            return False
        if self.allow_all or name in self.allowed:
            return True
        # A nested rule set keeps its field only if it lets something through
        child = self.children.get(name)
        return child is not None and child.grants_any

    def child(self, name: str) -> Optional["AttributeMask"]:
        """Mask for the value of ``name``, or None when the field is dropped."""
        if not self.permits(name):
            return None
        return self.children.get(name, ALLOW_ALL)

    @property
    def grants_any(self) -> bool:
        """True unless the mask can only ever produce empty records."""
        return (
            self.allow_all
            or bool(self.allowed - self.denied)
            or any(c.grants_any for c in self.children.values())
        )

    @property
    def is_allow_all(self) -> bool:
        return (
            self.allow_all
            and not self.denied
            and all(c.is_allow_all for c in self.children.values())
        )

    def union(self, other: "AttributeMask") -> "AttributeMask":
        """Merge two masks; a field is permitted if either mask permits it."""
        allow_all = self.allow_all or other.allow_all
        names = (
            self.allowed | other.allowed | self.denied | other.denied
            | set(self.children) | set(other.children)
        )
        allowed, denied = set(), set()
        children: Dict[str, AttributeMask] = {}
        for name in names:
            if not (self.permits(name) or other.permits(name)):
                denied.add(name)
                continue
            allowed.add(name)
            parts = [m for m in (self.child(name), other.child(name)) if m is not None]
            merged = merge_masks(parts)
            if not merged.is_allow_all:
                children[name] = merged
        return AttributeMask(allow_all, frozenset(allowed), frozenset(denied), children)

    def tokens(self) -> List[str]:
        """Canonical token list, with nested rules rendered as dotted paths."""
        result = ["*"] if self.allow_all else []
        result.extend(sorted(n for n in self.allowed if n not in self.children))
        for name in sorted(self.children):
            result.extend(
                f"!{name}.{t[1:]}" if t.startswith("!") else f"{name}.{t}"
                for t in self.children[name].tokens()
            )
        result.extend(f"!{n}" for n in sorted(self.denied))
        return result

    def __str__(self) -> str:
        return ", ".join(self.tokens())


ALLOW_ALL = AttributeMask(allow_all=True)


def compile_mask(spec: Optional[str]) -> AttributeMask:
    """Parse an attribute specification string into an :class:`AttributeMask`.

    Raises:
        ValueError: if a token is not a valid field reference
    """
    rules = []
    for raw in (spec or "").split(","):
        token = raw.strip()
        if not token:
            continue
        negated = token.startswith("!")
        path = token[1:].strip() if negated else token
        parts = [p.strip() for p in path.split(".")]
        if not all(parts):
            raise ValueError(f"Invalid attribute token: {token!r}")
        if "*" in parts[:-1] or (parts[-1] == "*" and negated):
            raise ValueError(f"Invalid wildcard in attribute token: {token!r}")
        rules.append((negated, parts))
    if not rules:
        return ALLOW_ALL
    return _build(rules, inherit_all=False)


def _build(rules, inherit_all: bool) -> AttributeMask:
    allow_all = inherit_all
    allowed, denied = set(), set()
    nested: Dict[str, list] = {}
    for negated, parts in rules:
        head, rest = parts[0], parts[1:]
        if head == "*":
            allow_all = True
        elif rest:
            nested.setdefault(head, []).append((negated, rest))
        elif negated:
            denied.add(head)
        else:
            allowed.add(head)

    children = {
        head: _build(sub, inherit_all=allow_all or head in allowed)
        for head, sub in nested.items()
        if head not in denied
    }
    return AttributeMask(allow_all, frozenset(allowed), frozenset(denied), children)


def merge_masks(masks: Iterable[AttributeMask]) -> AttributeMask:
    """Union of several masks. An empty input yields the allow-all mask."""
    merged = None
    for mask in masks:
        merged = mask if merged is None else merged.union(mask)
    return ALLOW_ALL if merged is None else merged


def apply_mask(mask: AttributeMask, data: Any, schema: Optional[FieldSchema] = None) -> Any:
    """Filter a record or a sequence of records.

    Never mutates ``data``; records come back as new dicts. When a schema
    is given only its declared fields are considered.
    """
    if data is None:
        return None
    if isinstance(data, Mapping):
        return _apply_record(mask, data, schema)
    if isinstance(data, (str, bytes)):
        raise TypeError(f"Cannot filter a {type(data).__name__} value")
    return [_apply_record(mask, record, schema) for record in data]


def _apply_record(mask: AttributeMask, record: Mapping, schema: Optional[FieldSchema]) -> dict:
    if not isinstance(record, Mapping):
        raise TypeError(f"Cannot filter a {type(record).__name__} record")
    result = {}
    for name, value in record.items():
        descriptor = schema.get(name) if schema is not None else None
        if schema is not None and descriptor is None:
            continue
        child = mask.child(name)
        if child is None:
            continue
        if descriptor is not None and descriptor.entity is not None and value is not None:
            value = apply_mask(child, value, descriptor.entity)
        result[name] = value
    return result


@dataclass(frozen=True)
class AttributeFilter:
    """A mask bound to the schema of the resource it filters."""
    mask: AttributeMask = ALLOW_ALL
    schema: Optional[FieldSchema] = None

    @classmethod
    def from_spec(cls, spec: Optional[str], schema: Optional[FieldSchema] = None) -> "AttributeFilter":
        return cls(compile_mask(spec), schema)

    def apply(self, data: Any) -> Any:
        return apply_mask(self.mask, data, self.schema)

    __call__ = apply

    def to_dict(self) -> Dict[str, Any]:
        return {
            "attributes": str(self.mask),
            "schema": self.schema.name if self.schema is not None else None,
        }
