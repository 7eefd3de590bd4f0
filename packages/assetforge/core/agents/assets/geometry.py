"""Detail level → tessellation parameters.

Pure functions. ``parameterize`` maps a detail level to a segment count and
``build_recipe`` turns that count into the concrete geometry arguments for
each primitive shape. Both must stay exact: the renderer's visual parity
across detail levels depends on them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from assetforge.core.agents.assets.models import DetailLevel, ShapeType

SEGMENT_COUNTS: dict[DetailLevel, int] = {
    DetailLevel.LOW: 12,
    DetailLevel.MEDIUM: 32,
    DetailLevel.HIGH: 128,
}

DEFAULT_SEGMENT_COUNT = 32

# Dodecahedron switches from 0 to 1 subdivision above this count
DODECAHEDRON_DETAIL_THRESHOLD = 12


@dataclass(frozen=True)
class GeometryRecipe:
    """Tessellation arguments for one shape at one segment count.

    Attributes:
        shape: Shape family the arguments apply to.
        segment_count: Segment count the arguments were derived from.
        params: Named geometry arguments, in constructor order.
    """

    shape: ShapeType
    segment_count: int
    params: dict[str, float | int] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "shape": self.shape.value,
            "segment_count": self.segment_count,
            "params": dict(self.params),
        }


def parameterize(detail_level: DetailLevel | str) -> int:
    """Map a detail level to a segment count.

    Args:
        detail_level: DetailLevel member or its string value.

    Returns:
        12, 32 or 128; 32 for anything unrecognized.

    Examples:
        >>> parameterize(DetailLevel.HIGH)
        128
        >>> parameterize("Ultra")
        32
    """
    try:
        level = DetailLevel(detail_level)
    except ValueError:
        return DEFAULT_SEGMENT_COUNT
    return SEGMENT_COUNTS.get(level, DEFAULT_SEGMENT_COUNT)


def build_recipe(shape: ShapeType, segment_count: int) -> GeometryRecipe:
    """Derive the tessellation arguments for a shape.

    Args:
        shape: Shape family.
        segment_count: Output of ``parameterize``.

    Returns:
        GeometryRecipe for the renderer.

    Raises:
        ValueError: If shape is not a known ShapeType.
    """
    params: dict[str, float | int]
    match shape:
        case ShapeType.BOX:
            per_axis = segment_count // 4
            params = {
                "width": 1.0,
                "height": 1.0,
                "depth": 1.0,
                "width_segments": per_axis,
                "height_segments": per_axis,
                "depth_segments": per_axis,
            }
        case ShapeType.SPHERE:
            params = {
                "radius": 0.7,
                "width_segments": segment_count,
                "height_segments": segment_count,
            }
        case ShapeType.CYLINDER:
            params = {
                "radius_top": 0.5,
                "radius_bottom": 0.5,
                "height": 1.0,
                "radial_segments": segment_count,
            }
        case ShapeType.TORUS:
            params = {
                "radius": 0.6,
                "tube": 0.2,
                "radial_segments": segment_count,
                "tubular_segments": segment_count,
            }
        case ShapeType.CONE:
            params = {
                "radius": 0.6,
                "height": 1.2,
                "radial_segments": segment_count,
            }
        case ShapeType.CAPSULE:
            params = {
                "radius": 0.5,
                "length": 1.0,
                "cap_segments": 4,
                "radial_segments": segment_count,
            }
        case ShapeType.DODECAHEDRON:
            params = {
                "radius": 0.7,
                "detail": 1 if segment_count > DODECAHEDRON_DETAIL_THRESHOLD else 0,
            }
        case _:
            raise ValueError(f"Unknown shape: {shape!r}")

    return GeometryRecipe(shape=shape, segment_count=segment_count, params=params)


def recipe_for(shape: ShapeType, detail_level: DetailLevel | str) -> GeometryRecipe:
    """Convenience: ``build_recipe(shape, parameterize(detail_level))``."""
    return build_recipe(shape, parameterize(detail_level))
