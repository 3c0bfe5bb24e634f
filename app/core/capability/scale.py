"""Proficiency scale lookup.

Capabilities may carry their own scale. When one is missing, or does not
define a particular level number, labels fall back to the default five-level
scale, and then to a synthesized "Level N" label. Lookups never raise.

The default scale is passed in by callers (it is only the default value of
a parameter), so nothing downstream depends on hidden module state.
"""

from typing import Any, Optional

from app.core.capability.types import ProficiencyLevel, ProficiencyScale

DEFAULT_PROFICIENCY_SCALE = ProficiencyScale(
    id="default",
    name="Default 5-level scale",
    levels=[
        ProficiencyLevel(level=1, name="Novice", description="Basic awareness; needs close guidance"),
        ProficiencyLevel(level=2, name="Intermediate", description="Applies the capability with some support"),
        ProficiencyLevel(level=3, name="Advanced", description="Works independently on complex situations"),
        ProficiencyLevel(level=4, name="Expert", description="Guides others and handles novel problems"),
        ProficiencyLevel(level=5, name="Master", description="Sets direction and shapes practice across the organization"),
    ],
)

# Keys some stored scales use instead of "level"
_LEVEL_KEY_ALIASES = ("level", "level_order", "order")


def resolve_scale(
    scale: Optional[ProficiencyScale] = None,
    default: ProficiencyScale = DEFAULT_PROFICIENCY_SCALE,
) -> ProficiencyScale:
    """Return the custom scale if it defines any level, else the default."""
    if scale is not None and scale.levels:
        return scale
    return default


def get_level_label(
    level: int,
    scale: Optional[ProficiencyScale] = None,
    default: ProficiencyScale = DEFAULT_PROFICIENCY_SCALE,
) -> ProficiencyLevel:
    """
    Look up the display definition of a level number.

    Args:
        level: Level number (exact match, no interpolation)
        scale: Capability-specific scale, if configured
        default: Scale used when the custom one lacks this level

    Returns:
        The matching ProficiencyLevel, or a synthesized "Level N" entry
    """
    for candidate in (scale, default):
        if candidate is None:
            continue
        for defined in candidate.levels:
            if defined.level == level:
                return defined

    # Synthesized labels may describe level 0 or negatives, which the
    # ProficiencyLevel model itself does not allow.
    return ProficiencyLevel.model_construct(level=level, name=f"Level {level}", description=None)


def level_range(
    scale: Optional[ProficiencyScale] = None,
    default: ProficiencyScale = DEFAULT_PROFICIENCY_SCALE,
) -> tuple[int, int]:
    """Return (lowest, highest) level number of the resolved scale."""
    resolved = resolve_scale(scale, default)
    if not resolved.levels:
        return (0, 0)
    return (resolved.levels[0].level, resolved.levels[-1].level)


def parse_scale_levels(
    raw_levels: Any,
    scale_id: Optional[str] = None,
    name: Optional[str] = None,
) -> ProficiencyScale:
    """
    Build a scale from a stored JSON ``levels`` column.

    Entries without a usable level number are skipped. A missing name
    becomes "Level N".
    """
    levels: list[ProficiencyLevel] = []

    for entry in raw_levels or []:
        if not isinstance(entry, dict):
            continue

        number = None
        for key in _LEVEL_KEY_ALIASES:
            if entry.get(key) is not None:
                number = entry[key]
                break
        try:
            number = int(number)
        except (TypeError, ValueError):
            continue
        if number < 1:
            continue

        levels.append(
            ProficiencyLevel(
                level=number,
                name=entry.get("name") or f"Level {number}",
                description=entry.get("description"),
            )
        )

    return ProficiencyScale(id=scale_id, name=name, levels=levels)
