import dataclasses
import types
import typing
from collections.abc import Sequence as AbcSequence
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from typing import (
    Any,
    Callable,
    Dict,
    Iterable,
    List,
    Mapping,
    Optional,
    Tuple,
    Union,
    get_args,
    get_origin,
)

from pydantic import BaseModel

from ..models.errors import HydrationError

WIRE_KEY = "wire_key"


class FieldKind(str, Enum):
    SCALAR = "scalar"
    NESTED_OBJECT = "nested_object"
    OBJECT_ARRAY = "object_array"


@dataclass(frozen=True)
class FieldMapping:
    """How one attribute of a target type maps to one key of the wire payload.

    Attributes:
        wire_key: Key in the decoded payload.
        target_field: Attribute name on the target type.
        kind: Conversion applied to the raw value.
        item_type: Target type of nested objects and array elements.
    """

    wire_key: str
    target_field: str
    kind: FieldKind = FieldKind.SCALAR
    item_type: Optional[type] = None


@dataclass(frozen=True)
class HydrationDescriptor:
    """Ordered field mappings of one target type plus the way to build it."""

    target_type: type
    fields: Tuple[FieldMapping, ...]
    required: frozenset = frozenset()
    factory: Optional[Callable[..., Any]] = None

    def create(self, values: Dict[str, Any]) -> Any:
        missing = self.required - values.keys()
        if missing:
            raise HydrationError(
                f"Cannot build {self.target_type.__name__}: missing required field(s) {sorted(missing)}.",
                self.target_type,
            )
        factory = self.factory or self.target_type
        return factory(**values)


def wire_field(wire_key: str, **kwargs: Any) -> Any:
    """``dataclasses.field`` that reads and writes the attribute under another key.

    Examples:
        ```python
        @dataclass
        class User:
            id: int
            display_name: str = wire_field("displayName", default="")
        ```
    """
    metadata = dict(kwargs.pop("metadata", None) or {})
    metadata[WIRE_KEY] = wire_key
    return dataclasses.field(metadata=metadata, **kwargs)


def is_object_type(tp: Any) -> bool:
    """True for the types the hydrator can derive a descriptor for."""
    if not isinstance(tp, type):
        return False
    return dataclasses.is_dataclass(tp) or issubclass(tp, BaseModel)


def _strip_optional(annotation: Any) -> Any:
    origin = get_origin(annotation)
    if origin is Union or origin is types.UnionType:
        args = [arg for arg in get_args(annotation) if arg is not type(None)]
        if len(args) == 1:
            return args[0]
    return annotation


def _classify(annotation: Any) -> Tuple[FieldKind, Optional[type]]:
    annotation = _strip_optional(annotation)
    origin = get_origin(annotation)
    if origin in (list, List, AbcSequence):
        args = get_args(annotation)
        item_type = _strip_optional(args[0]) if args else None
        if is_object_type(item_type):
            return FieldKind.OBJECT_ARRAY, item_type
        return FieldKind.SCALAR, None
    if is_object_type(annotation):
        return FieldKind.NESTED_OBJECT, annotation
    return FieldKind.SCALAR, None


def _describe_dataclass(target_type: type) -> HydrationDescriptor:
    hints = typing.get_type_hints(target_type)
    mappings = []
    required = set()
    for f in dataclasses.fields(target_type):
        if not f.init:
            continue
        kind, item_type = _classify(hints.get(f.name, Any))
        mappings.append(
            FieldMapping(
                wire_key=f.metadata.get(WIRE_KEY, f.name),
                target_field=f.name,
                kind=kind,
                item_type=item_type,
            )
        )
        if f.default is dataclasses.MISSING and f.default_factory is dataclasses.MISSING:
            required.add(f.name)
    return HydrationDescriptor(
        target_type=target_type, fields=tuple(mappings), required=frozenset(required)
    )


def _describe_model(target_type: type[BaseModel]) -> HydrationDescriptor:
    model_fields = target_type.model_fields
    mappings = []
    required = set()
    for name, info in model_fields.items():
        kind, item_type = _classify(info.annotation)
        mappings.append(
            FieldMapping(
                wire_key=info.alias or name,
                target_field=name,
                kind=kind,
                item_type=item_type,
            )
        )
        if info.is_required():
            required.add(name)

    def construct(**values: Any) -> BaseModel:
        # model_construct resolves aliases first, so pass the alias when there is one
        return target_type.model_construct(
            **{(model_fields[name].alias or name): value for name, value in values.items()}
        )

    return HydrationDescriptor(
        target_type=target_type,
        fields=tuple(mappings),
        required=frozenset(required),
        factory=construct,
    )


@lru_cache(maxsize=None)
def describe(target_type: type) -> HydrationDescriptor:
    """Derive the hydration descriptor of a dataclass or pydantic model.

    Descriptors are computed once per type and cached.

    Raises:
        HydrationError: If ``target_type`` is neither a dataclass nor a pydantic model.
    """
    if isinstance(target_type, type) and issubclass(target_type, BaseModel):
        return _describe_model(target_type)
    if dataclasses.is_dataclass(target_type):
        return _describe_dataclass(target_type)
    raise HydrationError(
        f"Cannot describe {target_type!r}: register a HydrationDescriptor for it.",
        target_type,
    )


class ObjectHydrator:
    """Recursively materializes decoded payloads into typed objects and back.

    Reading:
        - ``None`` hydrates to ``None``.
        - A payload that is not a mapping raises ``HydrationError``.
        - Unknown wire keys are ignored; missing keys keep declared defaults.
        - Nested objects recurse only when the raw value is a mapping; any other
          non-null value leaves the field at its default.
        - Object arrays hydrate each element of a list; any other non-null value
          becomes an empty list.

    Writing (``serialize``) applies the same mappings in reverse, so
    ``hydrate(serialize(x), type(x)) == x`` for values built from declared
    fields only.
    """

    def __init__(self, descriptors: Optional[Iterable[HydrationDescriptor]] = None) -> None:
        self._registry: Dict[type, HydrationDescriptor] = {}
        for descriptor in descriptors or ():
            self.register(descriptor)

    def register(self, descriptor: HydrationDescriptor) -> None:
        """Use ``descriptor`` for its target type instead of the derived one."""
        self._registry[descriptor.target_type] = descriptor

    def can_hydrate(self, target_type: Any) -> bool:
        return target_type in self._registry or is_object_type(target_type)

    def descriptor_for(self, target_type: type) -> HydrationDescriptor:
        registered = self._registry.get(target_type)
        if registered is not None:
            return registered
        return describe(target_type)

    def hydrate(self, value: Any, target_type: type) -> Any:
        if value is None:
            return None
        if not isinstance(value, Mapping):
            raise HydrationError(
                f"Expected an object for {target_type.__name__}, got {type(value).__name__}.",
                target_type,
            )

        descriptor = self.descriptor_for(target_type)
        values: Dict[str, Any] = {}
        for mapping in descriptor.fields:
            if mapping.wire_key not in value:
                continue
            raw = value[mapping.wire_key]
            if raw is None or mapping.kind == FieldKind.SCALAR:
                values[mapping.target_field] = raw
            elif mapping.kind == FieldKind.NESTED_OBJECT:
                if isinstance(raw, Mapping):
                    values[mapping.target_field] = self.hydrate(raw, mapping.item_type)
            elif mapping.kind == FieldKind.OBJECT_ARRAY:
                if isinstance(raw, list):
                    values[mapping.target_field] = self.hydrate_list(raw, mapping.item_type)
                else:
                    values[mapping.target_field] = []

        try:
            return descriptor.create(values)
        except TypeError as e:
            raise HydrationError(
                f"Cannot build {target_type.__name__}: {e}", target_type
            ) from e

    def hydrate_list(self, value: Any, item_type: type) -> Optional[List[Any]]:
        if value is None:
            return None
        if not isinstance(value, list):
            raise HydrationError(
                f"Expected an array of {item_type.__name__}, got {type(value).__name__}.",
                item_type,
            )
        return [self.hydrate(item, item_type) for item in value]

    def serialize(self, value: Any) -> Any:
        """Convert a typed value back to its wire shape.

        Objects with a descriptor become dicts keyed by wire keys, lists and
        dicts are converted element-wise, anything else is returned as-is.
        """
        if value is None:
            return None
        if isinstance(value, list):
            return [self.serialize(item) for item in value]
        if isinstance(value, tuple):
            return [self.serialize(item) for item in value]
        if isinstance(value, dict):
            return {key: self.serialize(item) for key, item in value.items()}
        if not self.can_hydrate(type(value)):
            return value

        descriptor = self.descriptor_for(type(value))
        wire: Dict[str, Any] = {}
        for mapping in descriptor.fields:
            attribute = getattr(value, mapping.target_field)
            if mapping.kind == FieldKind.SCALAR:
                wire[mapping.wire_key] = attribute
            else:
                wire[mapping.wire_key] = self.serialize(attribute)
        return wire
