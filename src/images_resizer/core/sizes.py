"""The fixed table of derivative sizes produced for every upload."""

from typing import Iterable, Tuple

from .exceptions import ConfigurationError
from .models import FitStrategy, ResizeSpec

DEFAULT_SIZES: Tuple[ResizeSpec, ...] = (
    ResizeSpec(name="thumbnail", width=200, height=200, strategy=FitStrategy.FILL),
    ResizeSpec(name="small", width=500, height=500),
    ResizeSpec(name="medium", width=900, height=900),
    ResizeSpec(name="large", width=1400, height=1400),
)


def validate_sizes(specs: Iterable[ResizeSpec]) -> Tuple[ResizeSpec, ...]:
    """Return the specs as a tuple, rejecting an empty table or duplicate names."""
    specs = tuple(specs)
    if not specs:
        raise ConfigurationError("At least one resize size is required")

    seen = set()
    for spec in specs:
        if spec.name in seen:
            raise ConfigurationError(f"Duplicate resize size name: {spec.name}")
        seen.add(spec.name)
    return specs
