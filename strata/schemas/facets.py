"""
Strata Schema Facets — the node-level primitives of a schema.

A Facet is one node of a schema tree. Every facet knows how to:

    inbound:   raw_value → cast() → seal() → validated_value
    document:  to_schema() → JSON-Schema node for the OpenAPI document

Both directions read the same constraint attributes, so the document and
the runtime validator cannot drift apart.

Node kinds:
    primitive   TextFacet, IntFacet, FloatFacet, BoolFacet, UUIDFacet, ...
    object      ObjectFacet (also produced from ``Schema`` classes)
    array       ListFacet
    enum        ChoiceFacet
    union       UnionFacet
"""

from __future__ import annotations

import re
import uuid
from datetime import datetime
from typing import (
    Any,
    Callable,
    Dict,
    List,
    Mapping,
    Optional,
    Sequence,
    TYPE_CHECKING,
)

from .exceptions import CastFault, ValidationFault, ValidationIssue

if TYPE_CHECKING:
    from .adapter import ComponentRegistry


__all__ = [
    "Facet",
    "TextFacet",
    "EmailFacet",
    "IntFacet",
    "FloatFacet",
    "BoolFacet",
    "UUIDFacet",
    "DateTimeFacet",
    "ChoiceFacet",
    "ListFacet",
    "ObjectFacet",
    "UnionFacet",
    "JSONFacet",
    "UNSET",
    "as_facet",
]


# ── Sentinel ─────────────────────────────────────────────────────────────

class _Unset:
    """Sentinel for 'no value provided'."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "<UNSET>"

    def __bool__(self) -> bool:
        return False


UNSET = _Unset()


def _type_name(value: Any) -> str:
    return type(value).__name__


# ── Facet Base ───────────────────────────────────────────────────────────

class Facet:
    """
    Base facet — a single node in a schema tree.

    Attributes:
        required:     Must be present in input (default True unless a
                      default is given)
        default:      Value used when the field is absent
        allow_null:   Accept None as a valid value
        label:        Document title
        help_text:    Document description
        example:      Document example value
        component:    Register this node as a named reusable component
        validators:   Extra validator callables (raise ValueError/TypeError)
    """

    _type_name: Optional[str] = None

    def __init__(
        self,
        *,
        required: bool | None = None,
        default: Any = UNSET,
        allow_null: bool = False,
        label: str | None = None,
        help_text: str | None = None,
        example: Any = UNSET,
        component: str | None = None,
        validators: Sequence[Callable] | None = None,
    ):
        self._required = required
        self.default = default
        self.allow_null = allow_null
        self.label = label
        self.help_text = help_text
        self.example = example
        self.component = component
        self.validators: list[Callable] = list(validators) if validators else []

    @property
    def required(self) -> bool:
        if self._required is not None:
            return self._required
        return self.default is UNSET

    # ── Inbound: Cast ────────────────────────────────────────────────

    def cast(self, value: Any, *, coerce: bool = False) -> Any:
        """
        Cast an incoming value to the internal Python type.

        ``coerce`` is set for string-typed sources (path and query
        parameters) where numbers and booleans arrive as text.
        """
        return value

    # ── Validation: Seal ─────────────────────────────────────────────

    def seal(self, value: Any) -> Any:
        """Run constraint checks and extra validators on a cast value."""
        for validator in self.validators:
            try:
                validator(value)
            except (ValueError, TypeError) as exc:
                raise CastFault(str(exc), kind="custom") from exc
        return value

    def validate(self, value: Any, *, path: tuple = (), coerce: bool = False) -> Any:
        """
        Full inbound pipeline for one value.

        Raises:
            ValidationFault: with every issue found below ``path``
        """
        if value is None:
            if self.allow_null:
                return None
            raise ValidationFault([ValidationIssue(path, "This field may not be null", "nullable")])
        try:
            return self.seal(self.cast(value, coerce=coerce))
        except CastFault as exc:
            raise ValidationFault([ValidationIssue(path, exc.message, exc.kind)]) from exc

    def default_value(self) -> Any:
        return self.default() if callable(self.default) else self.default

    # ── Schema ───────────────────────────────────────────────────────

    def describe(self, registry: ComponentRegistry | None = None) -> Dict[str, Any]:
        """Document node body for this facet (without reference handling)."""
        schema: Dict[str, Any] = {}
        if self._type_name:
            schema["type"] = self._type_name
        if self.label:
            schema["title"] = self.label
        if self.help_text:
            schema["description"] = self.help_text
        if self.default is not UNSET and not callable(self.default):
            schema["default"] = self.default
        if self.example is not UNSET:
            schema["example"] = self.example
        return schema

    def to_schema(self, registry: ComponentRegistry | None = None) -> Dict[str, Any]:
        """
        Generate the JSON-Schema node for this facet.

        Named facets become ``$ref`` nodes when a registry is supplied and
        are inlined otherwise.
        """
        node = self.describe(registry)
        if self.component and registry is not None:
            node = registry.reference(self.component, node)
        if self.allow_null:
            node = _nullable(node)
        return node

    def __repr__(self) -> str:
        name = f" component={self.component!r}" if self.component else ""
        return f"<{type(self).__name__}{name}>"


def _nullable(node: Dict[str, Any]) -> Dict[str, Any]:
    if isinstance(node.get("type"), str):
        node = dict(node)
        node["type"] = [node["type"], "null"]
        if "enum" in node and None not in node["enum"]:
            node["enum"] = list(node["enum"]) + [None]
        return node
    return {"anyOf": [node, {"type": "null"}]}



# ── Text Facets ──────────────────────────────────────────────────────────

class TextFacet(Facet):
    """Text/string facet with length constraints."""

    _type_name = "string"
    _format: Optional[str] = None

    def __init__(
        self,
        *,
        min_length: int | None = None,
        max_length: int | None = None,
        pattern: str | None = None,
        allow_blank: bool = True,
        **kwargs,
    ):
        super().__init__(**kwargs)
        self.min_length = min_length
        self.max_length = max_length
        self.pattern = re.compile(pattern) if pattern else None
        self.allow_blank = allow_blank

    def cast(self, value: Any, *, coerce: bool = False) -> str:
        if not isinstance(value, str):
            raise CastFault(f"Expected string, got {_type_name(value)}")
        return value

    def seal(self, value: str) -> str:
        if not self.allow_blank and value == "":
            raise CastFault("This field may not be blank", kind="min_length")
        if self.min_length is not None and len(value) < self.min_length:
            raise CastFault(f"Must be at least {self.min_length} characters", kind="min_length")
        if self.max_length is not None and len(value) > self.max_length:
            raise CastFault(f"Must be at most {self.max_length} characters", kind="max_length")
        if self.pattern and not self.pattern.search(value):
            raise CastFault("Does not match required pattern", kind="pattern")
        return super().seal(value)

    def describe(self, registry: ComponentRegistry | None = None) -> Dict[str, Any]:
        schema = super().describe(registry)
        if self._format:
            schema["format"] = self._format
        min_length = self.min_length
        if not self.allow_blank and not min_length:
            min_length = 1
        if min_length is not None:
            schema["minLength"] = min_length
        if self.max_length is not None:
            schema["maxLength"] = self.max_length
        if self.pattern:
            schema["pattern"] = self.pattern.pattern
        return schema


class EmailFacet(TextFacet):
    """Email address facet with format validation."""

    _format = "email"
    _EMAIL_RE = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")

    def seal(self, value: str) -> str:
        if not self._EMAIL_RE.match(value):
            raise CastFault("Invalid email address", kind="format")
        return super().seal(value)


class UUIDFacet(TextFacet):
    """UUID facet. Accepts the canonical string form, yields ``uuid.UUID``."""

    _format = "uuid"
    _CANONICAL_RE = re.compile(
        r"[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}"
    )

    def cast(self, value: Any, *, coerce: bool = False) -> uuid.UUID:
        if isinstance(value, uuid.UUID):
            return value
        if not isinstance(value, str):
            raise CastFault(f"Expected UUID string, got {_type_name(value)}")
        if not self._CANONICAL_RE.fullmatch(value):
            raise CastFault("Invalid UUID", kind="format")
        try:
            return uuid.UUID(value)
        except ValueError as exc:
            raise CastFault("Invalid UUID", kind="format") from exc

    def seal(self, value: uuid.UUID) -> uuid.UUID:
        return Facet.seal(self, value)


class DateTimeFacet(TextFacet):
    """DateTime facet (ISO 8601 string in, ``datetime`` out)."""

    _format = "date-time"

    def cast(self, value: Any, *, coerce: bool = False) -> datetime:
        if isinstance(value, datetime):
            return value
        if isinstance(value, str):
            try:
                return datetime.fromisoformat(value)
            except ValueError:
                pass
        raise CastFault("Expected ISO 8601 datetime", kind="format")

    def seal(self, value: datetime) -> datetime:
        return Facet.seal(self, value)


# ── Numeric Facets ───────────────────────────────────────────────────────

class _NumericFacet(Facet):

    def __init__(
        self,
        *,
        min_value: float | None = None,
        max_value: float | None = None,
        **kwargs,
    ):
        super().__init__(**kwargs)
        self.min_value = min_value
        self.max_value = max_value

    def seal(self, value: Any) -> Any:
        if self.min_value is not None and value < self.min_value:
            raise CastFault(f"Must be at least {self.min_value}", kind="minimum")
        if self.max_value is not None and value > self.max_value:
            raise CastFault(f"Must be at most {self.max_value}", kind="maximum")
        return super().seal(value)

    def describe(self, registry: ComponentRegistry | None = None) -> Dict[str, Any]:
        schema = super().describe(registry)
        if self.min_value is not None:
            schema["minimum"] = self.min_value
        if self.max_value is not None:
            schema["maximum"] = self.max_value
        return schema


class IntFacet(_NumericFacet):
    """Integer facet with range constraints."""

    _type_name = "integer"

    def cast(self, value: Any, *, coerce: bool = False) -> int:
        if isinstance(value, bool):
            raise CastFault("Boolean is not a valid integer")
        if isinstance(value, int):
            return value
        if isinstance(value, float) and value.is_integer():
            return int(value)
        if coerce and isinstance(value, str):
            try:
                return int(value.strip())
            except ValueError:
                pass
        raise CastFault(f"Expected integer, got {_type_name(value)}")


class FloatFacet(_NumericFacet):
    """Floating-point facet."""

    _type_name = "number"

    def cast(self, value: Any, *, coerce: bool = False) -> float:
        if isinstance(value, bool):
            raise CastFault("Boolean is not a valid number")
        if isinstance(value, (int, float)):
            return float(value)
        if coerce and isinstance(value, str):
            try:
                return float(value.strip())
            except ValueError:
                pass
        raise CastFault(f"Expected number, got {_type_name(value)}")


# ── Boolean Facet ────────────────────────────────────────────────────────

class BoolFacet(Facet):
    """Boolean facet. Text forms are accepted only when coercing."""

    _type_name = "boolean"

    _TRUE_VALUES = {"true", "1", "yes", "on"}
    _FALSE_VALUES = {"false", "0", "no", "off"}

    def cast(self, value: Any, *, coerce: bool = False) -> bool:
        if isinstance(value, bool):
            return value
        if coerce and isinstance(value, str):
            lower = value.lower().strip()
            if lower in self._TRUE_VALUES:
                return True
            if lower in self._FALSE_VALUES:
                return False
        raise CastFault(f"Expected boolean, got {_type_name(value)}")


# ── Choice Facet ─────────────────────────────────────────────────────────

class ChoiceFacet(Facet):
    """Enum node: a fixed, ordered set of allowed values."""

    def __init__(self, *, choices: Sequence[Any], **kwargs):
        super().__init__(**kwargs)
        if not choices:
            raise ValueError("ChoiceFacet requires at least one choice")
        self.choices = list(choices)

    def cast(self, value: Any, *, coerce: bool = False) -> Any:
        if value in self.choices:
            return value
        if coerce and isinstance(value, str):
            for choice in self.choices:
                if str(choice) == value:
                    return choice
        raise CastFault(
            f"Invalid choice {value!r}. Valid: {', '.join(str(c) for c in self.choices)}",
            kind="enum",
        )

    def describe(self, registry: ComponentRegistry | None = None) -> Dict[str, Any]:
        schema = super().describe(registry)
        if all(isinstance(c, str) for c in self.choices):
            schema["type"] = "string"
        elif all(isinstance(c, int) and not isinstance(c, bool) for c in self.choices):
            schema["type"] = "integer"
        schema["enum"] = list(self.choices)
        return schema


# ── Structured Facets ────────────────────────────────────────────────────

class ListFacet(Facet):
    """Array node with optional child facet."""

    _type_name = "array"

    def __init__(
        self,
        child: Any = None,
        *,
        min_items: int | None = None,
        max_items: int | None = None,
        **kwargs,
    ):
        super().__init__(**kwargs)
        self.child = as_facet(child) if child is not None else None
        self.min_items = min_items
        self.max_items = max_items

    def validate(self, value: Any, *, path: tuple = (), coerce: bool = False) -> Any:
        if value is None:
            return super().validate(value, path=path, coerce=coerce)
        if not isinstance(value, (list, tuple)):
            raise ValidationFault([ValidationIssue(path, f"Expected list, got {_type_name(value)}")])

        issues: List[ValidationIssue] = []
        items = list(value)
        if self.child is not None:
            cast_items = []
            for i, item in enumerate(items):
                try:
                    cast_items.append(self.child.validate(item, path=path + (i,), coerce=coerce))
                except ValidationFault as exc:
                    issues.extend(exc.issues)
            items = cast_items

        try:
            items = self.seal(items)
        except CastFault as exc:
            issues.append(ValidationIssue(path, exc.message, exc.kind))

        if issues:
            raise ValidationFault(issues)
        return items

    def seal(self, value: list) -> list:
        if self.min_items is not None and len(value) < self.min_items:
            raise CastFault(f"Must have at least {self.min_items} items", kind="min_items")
        if self.max_items is not None and len(value) > self.max_items:
            raise CastFault(f"Must have at most {self.max_items} items", kind="max_items")
        return super().seal(value)

    def describe(self, registry: ComponentRegistry | None = None) -> Dict[str, Any]:
        schema = super().describe(registry)
        schema["items"] = self.child.to_schema(registry) if self.child is not None else {}
        if self.min_items is not None:
            schema["minItems"] = self.min_items
        if self.max_items is not None:
            schema["maxItems"] = self.max_items
        return schema


class ObjectFacet(Facet):
    """
    Object node with named child facets.

    Unknown keys in the input are dropped unless ``additional_properties``
    is set. Missing keys fall back to the child's default, or are reported
    with kind ``required``.
    """

    _type_name = "object"

    def __init__(
        self,
        fields: Mapping[str, Any] | None = None,
        *,
        additional_properties: bool = False,
        **kwargs,
    ):
        super().__init__(**kwargs)
        self.fields: Dict[str, Facet] = {
            name: as_facet(child) for name, child in (fields or {}).items()
        }
        self.additional_properties = additional_properties

    def validate(self, value: Any, *, path: tuple = (), coerce: bool = False) -> Any:
        if value is None:
            return super().validate(value, path=path, coerce=coerce)
        if not isinstance(value, Mapping):
            raise ValidationFault([ValidationIssue(path, f"Expected object, got {_type_name(value)}")])

        issues: List[ValidationIssue] = []
        validated: Dict[str, Any] = {}
        if self.additional_properties:
            validated.update((k, v) for k, v in value.items() if k not in self.fields)

        for name, facet in self.fields.items():
            raw = value.get(name, UNSET)
            if raw is UNSET:
                if facet.default is not UNSET:
                    validated[name] = facet.default_value()
                elif facet.required:
                    issues.append(ValidationIssue(path + (name,), "This field is required", "required"))
                continue
            try:
                validated[name] = facet.validate(raw, path=path + (name,), coerce=coerce)
            except ValidationFault as exc:
                issues.extend(exc.issues)

        if not issues:
            try:
                validated = self.seal(validated)
            except CastFault as exc:
                issues.append(ValidationIssue(path, exc.message, exc.kind))

        if issues:
            raise ValidationFault(issues)
        return validated

    def describe(self, registry: ComponentRegistry | None = None) -> Dict[str, Any]:
        schema = super().describe(registry)
        schema["properties"] = {
            name: facet.to_schema(registry) for name, facet in self.fields.items()
        }
        required = [
            name for name, facet in self.fields.items()
            if facet.required and facet.default is UNSET
        ]
        if required:
            schema["required"] = required
        if self.additional_properties:
            schema["additionalProperties"] = True
        return schema


class UnionFacet(Facet):
    """Union node: the first option that validates wins."""

    def __init__(self, options: Sequence[Any], **kwargs):
        super().__init__(**kwargs)
        if len(options) < 2:
            raise ValueError("UnionFacet requires at least two options")
        self.options: List[Facet] = [as_facet(option) for option in options]

    def validate(self, value: Any, *, path: tuple = (), coerce: bool = False) -> Any:
        if value is None and self.allow_null:
            return None
        for option in self.options:
            try:
                return option.validate(value, path=path, coerce=coerce)
            except ValidationFault:
                continue
        raise ValidationFault([ValidationIssue(path, "Value does not match any allowed shape", "union")])

    def describe(self, registry: ComponentRegistry | None = None) -> Dict[str, Any]:
        schema = super().describe(registry)
        schema["anyOf"] = [option.to_schema(registry) for option in self.options]
        return schema


class JSONFacet(Facet):
    """Arbitrary JSON value."""

    def cast(self, value: Any, *, coerce: bool = False) -> Any:
        return value


# ── Coercion ─────────────────────────────────────────────────────────────

def as_facet(schema: Any) -> Facet:
    """
    Normalize a schema declaration to a facet.

    Accepts facet instances and ``Schema`` subclasses.
    """
    if isinstance(schema, Facet):
        return schema
    as_node = getattr(schema, "as_facet", None)
    if isinstance(schema, type) and callable(as_node):
        return as_node()
    raise TypeError(f"Not a schema: {schema!r}")
