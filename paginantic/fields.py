"""
Entity field access for paginators.

Paginators read the ordering fields off fetched rows to mint cursors, and
validate decoded cursor values back into field types. Both are resolved once,
at paginator construction, into a FieldBinding per ordering field:

    class User(BaseModel):
        id: int
        created_at: datetime

    bindings = bind_fields(["created_at", "id"], model=User)
    bindings["created_at"].read(user)            # datetime(...)
    bindings["created_at"].coerce("2020-09-13T12:26:40Z")  # datetime(...)
"""

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from operator import attrgetter
from typing import Any

from pydantic import BaseModel, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from .exceptions import ConfigurationError, CursorDecodeError

Accessor = Callable[[Any], Any]


class _Missing:
    """Marker for attributes absent from a record."""

    def __repr__(self) -> str:
        return "MISSING"


MISSING: Any = _Missing()


def read_field(record: Any, name: str) -> Any:
    """
    Reads one attribute off a record, returning MISSING when absent.
    Mappings are indexed, any other object is read with getattr.
    """
    if isinstance(record, Mapping):
        return record.get(name, MISSING)
    return getattr(record, name, MISSING)


def read_path(record: Any, path: str) -> Any:
    """Reads a dotted attribute path (e.g. "author.name") off a record."""
    value = record
    for part in path.split("."):
        if value is MISSING or value is None:
            return MISSING
        value = read_field(value, part)
    return value


def _generic_accessor(name: str) -> Accessor:
    def accessor(entity: Any) -> Any:
        value = read_field(entity, name)
        if value is MISSING:
            raise KeyError(f"Entity {type(entity).__name__} has no field '{name}'")
        return value

    return accessor


@dataclass(frozen=True)
class FieldBinding:
    """
    Resolved access to one ordering field.

    Attributes:
        name: Symbolic field name used in orderings and cursors
        accessor: Reads the field value off a fetched entity
        adapter: Validates decoded cursor values into the field type (None = keep as decoded)
    """

    name: str
    accessor: Accessor
    adapter: TypeAdapter[Any] | None = None

    def read(self, entity: Any) -> Any:
        return self.accessor(entity)

    def coerce(self, value: Any) -> Any:
        """
        Converts a decoded cursor value back into the field type.

        Raises:
            CursorDecodeError: If the value does not validate against the field type
        """
        if self.adapter is None or value is None:
            return value
        try:
            return self.adapter.validate_python(value)
        except PydanticValidationError as e:
            raise CursorDecodeError(
                f"Cursor value for '{self.name}' does not match the field type", original_error=e
            ) from e


def bind_fields(
    names: Iterable[str],
    model: type[BaseModel] | None = None,
    accessors: Mapping[str, Accessor] | None = None,
) -> dict[str, FieldBinding]:
    """
    Resolves a FieldBinding for each field name.

    Accessor precedence: explicit accessor, then attribute access on model
    instances, then a generic reader that handles both mappings and objects.

    Args:
        names: Ordering field names
        model: Optional Pydantic model class of the paginated entities
        accessors: Optional field name -> callable(entity) overrides

    Returns:
        Dict of field name -> FieldBinding, in the order given

    Raises:
        ConfigurationError: If a model is given and a field is neither a model
                            field nor covered by an explicit accessor
    """
    accessors = accessors or {}
    model_fields = model.model_fields if model is not None else {}
    bindings: dict[str, FieldBinding] = {}

    for name in names:
        field_info = model_fields.get(name)
        if model is not None and field_info is None and name not in accessors:
            raise ConfigurationError(
                f"Ordering field '{name}' is not defined on model {model.__name__}",
                option="order_by",
                value=name,
            )

        if name in accessors:
            accessor = accessors[name]
        elif model is not None:
            accessor = attrgetter(name)
        else:
            accessor = _generic_accessor(name)

        adapter = TypeAdapter(field_info.annotation) if field_info is not None else None
        bindings[name] = FieldBinding(name=name, accessor=accessor, adapter=adapter)

    return bindings
