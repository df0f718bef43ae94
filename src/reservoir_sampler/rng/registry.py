"""Name -> class map of the random sources selectable through configuration.

Sources join the map with the ``@register_random_source`` decorator when
their module is imported. ``ReservoirConfig.random_source_type`` must name
one of them.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from reservoir_sampler.exceptions import ConfigurationError

if TYPE_CHECKING:
    from collections.abc import Callable

    from reservoir_sampler.rng.base import RandomSource

_SOURCES: dict[str, type[RandomSource]] = {}


def register_random_source(name: str) -> Callable[[type[RandomSource]], type[RandomSource]]:
    """Class decorator adding a source to the map under *name*."""

    def decorator(source_cls: type[RandomSource]) -> type[RandomSource]:
        _SOURCES[name] = source_cls
        return source_cls

    return decorator


def get_random_source(name: str) -> type[RandomSource]:
    """Return the source class registered as *name*.

    Raises:
        ConfigurationError: If no source is registered under *name*.
    """
    try:
        return _SOURCES[name]
    except KeyError:
        available = ", ".join(available_random_sources()) or "(none)"
        raise ConfigurationError(
            f"Unknown random source: {name!r}. Available: {available}"
        ) from None


def available_random_sources() -> list[str]:
    """Sorted names accepted by ``random_source_type``."""
    return sorted(_SOURCES)
