from dataclasses import dataclass
from typing import Any

from .exceptions import ConfigurationError

DEFAULT_TAKE = 20


def _check_int(option: str, value: Any) -> None:
    # bool is an int subclass but never a sensible page size
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigurationError(
            f"Take option '{option}' must be an integer, got {type(value).__name__}",
            option=option,
            value=value,
        )


@dataclass(frozen=True)
class TakeBounds:
    """
    Page size bounds for a paginator.

    A requested take is clamped into [min, max]. A missing or non-positive
    request falls back to ``default``. ``max=None`` means unbounded.

    Attributes:
        default: Page size used when the caller does not ask for one
        min: Lower clamp, floored at 0
        max: Upper clamp, or None for no upper limit
    """

    default: int = DEFAULT_TAKE
    min: int = 0
    max: int | None = None

    def __post_init__(self) -> None:
        _check_int("default", self.default)
        _check_int("min", self.min)
        if self.max is not None:
            _check_int("max", self.max)

        # never negative
        object.__setattr__(self, "min", max(0, self.min))

        if self.default < self.min:
            raise ConfigurationError(
                f"Take default ({self.default}) must not be lower than min ({self.min})",
                option="default",
                value=self.default,
            )
        if self.max is not None and self.max < self.min:
            raise ConfigurationError(
                f"Take max ({self.max}) must not be lower than min ({self.min})",
                option="max",
                value=self.max,
            )

    @classmethod
    def coerce(cls, value: "TakeBounds | int | None") -> "TakeBounds":
        """
        Builds bounds from the forms accepted by paginator constructors.

        Args:
            value: Existing bounds, a bare default page size, or None for library defaults

        Returns:
            TakeBounds instance

        Raises:
            ConfigurationError: If the value cannot describe valid bounds
        """
        if value is None:
            return cls()
        if isinstance(value, TakeBounds):
            return value
        _check_int("take", value)
        return cls(default=value, min=0, max=None)

    def clamp(self, requested: int | None = None) -> int:
        """
        Resolves the effective page size for one call.

        Args:
            requested: Page size asked for by the caller

        Returns:
            The requested size clamped into [min, max], or the default
        """
        take = self.default if requested is None or requested <= 0 else requested
        if self.max is not None:
            take = min(take, self.max)
        return max(self.min, take)
