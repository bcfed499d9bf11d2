"""
Strata Schema Core — the Schema metaclass and base class.

A Schema is a declarative object node. Facets declared as class
attributes become its properties; the inner ``Spec`` class names the
reusable component.

Example::

    class UserSchema(Schema):
        id = UUIDFacet()
        email = EmailFacet()
        name = TextFacet(max_length=120)

        class Spec:
            name = "User"
            description = "A registered user"
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from .facets import Facet, ObjectFacet, UNSET


__all__ = ["Schema", "SchemaMeta"]


class _SpecData:
    """Parsed ``Spec`` inner class data for a Schema."""

    __slots__ = ("name", "description", "example")

    def __init__(self, spec_cls: type | None = None):
        self.name: Optional[str] = getattr(spec_cls, "name", None)
        self.description: Optional[str] = getattr(spec_cls, "description", None)
        self.example: Any = getattr(spec_cls, "example", UNSET)


class SchemaMeta(type):
    """
    Metaclass for Schema classes.

    Responsibilities:
        1. Collect declared Facets from namespace + parent classes
        2. Parse the Spec inner class
        3. Build the object facet lazily on first use
    """

    def __new__(
        mcs,
        name: str,
        bases: tuple[type, ...],
        namespace: dict[str, Any],
        **kwargs,
    ) -> SchemaMeta:
        declared: Dict[str, Facet] = {}
        for key, value in list(namespace.items()):
            if isinstance(value, Facet):
                declared[key] = value
                namespace.pop(key)

        cls = super().__new__(mcs, name, bases, namespace, **kwargs)

        # Parent facets first so subclass declarations override in place
        all_facets: Dict[str, Facet] = {}
        for base in reversed(cls.__mro__[1:]):
            all_facets.update(getattr(base, "_declared_facets", {}))
        all_facets.update(declared)

        cls._declared_facets = all_facets
        cls._spec = _SpecData(namespace.get("Spec"))
        cls._facet = None
        return cls

    def __repr__(cls) -> str:
        component = f" component={cls._spec.name!r}" if cls._spec.name else ""
        return f"<Schema {cls.__name__}{component}>"


class Schema(metaclass=SchemaMeta):
    """
    Base declarative schema.

    Schemas are never instantiated; they are converted to an
    ``ObjectFacet`` which drives both validation and document generation.
    """

    @classmethod
    def as_facet(cls) -> ObjectFacet:
        if cls.__dict__.get("_facet") is None:
            cls._facet = ObjectFacet(
                cls._declared_facets,
                component=cls._spec.name,
                help_text=cls._spec.description,
                example=cls._spec.example,
            )
        return cls._facet

    @classmethod
    def component_name(cls) -> Optional[str]:
        return cls._spec.name

    @classmethod
    def facet_names(cls) -> list[str]:
        return list(cls._declared_facets)

    @classmethod
    def get_facet(cls, name: str) -> Facet | None:
        return cls._declared_facets.get(name)
