"""Animation presets and settings."""

import dataclasses
import logging
from collections.abc import Mapping
from enum import Enum
from typing import Any, Union

logger = logging.getLogger(__name__)


class AnimationType(str, Enum):
    """Animation presets that can be embedded into an icon.

    The draw family (``draw``, ``draw-reverse``, ``draw-loop``) traces each
    shape's outline and needs an injected script to measure path lengths.
    The rest are plain CSS keyframe animations applied to a wrapper group.
    """

    NONE = "none"
    SPIN = "spin"
    PULSE = "pulse"
    BOUNCE = "bounce"
    SHAKE = "shake"
    FADE = "fade"
    DRAW = "draw"
    DRAW_REVERSE = "draw-reverse"
    DRAW_LOOP = "draw-loop"

    @property
    def is_draw(self) -> bool:
        return self in (
            AnimationType.DRAW,
            AnimationType.DRAW_REVERSE,
            AnimationType.DRAW_LOOP,
        )

    @property
    def is_css(self) -> bool:
        return self is not AnimationType.NONE and not self.is_draw

    def __str__(self) -> str:
        return self.value


@dataclasses.dataclass
class AnimationSettings:
    """Timing parameters of an embedded animation.

    Values are written to the document as given. Range checks (positive
    duration, non-negative delay) belong to whoever collects the values.

    Attributes:
        duration: Duration of one cycle in seconds.
        timing: CSS easing, e.g. ``"ease"``, ``"linear"`` or
            ``"cubic-bezier(0.4, 0, 0.2, 1)"``.
        iteration: Iteration count, or ``"infinite"``.
        direction: One of ``normal``, ``reverse``, ``alternate``,
            ``alternate-reverse``.
        delay: Start delay in seconds.
    """

    duration: float = 1
    timing: str = "ease"
    iteration: Union[int, str] = "infinite"
    direction: str = "normal"
    delay: float = 0

    @classmethod
    def from_dict(cls, values: Mapping[str, Any]) -> "AnimationSettings":
        """Create settings from a loose mapping, ignoring unknown keys."""
        names = {field.name for field in dataclasses.fields(cls)}
        unknown = set(values) - names
        if unknown:
            logger.debug(f"Ignoring unknown animation settings: {sorted(unknown)}")
        return cls(**{k: v for k, v in values.items() if k in names})

    @classmethod
    def defaults_for(cls, animation: AnimationType) -> "AnimationSettings":
        """Default settings of an animation type."""
        if animation is AnimationType.DRAW_LOOP:
            return cls.draw_loop_defaults()
        if animation.is_draw:
            return cls.draw_defaults()
        return cls()

    @classmethod
    def draw_defaults(cls) -> "AnimationSettings":
        """Settings reported for detected draw and draw-reverse animations."""
        return cls(duration=2, timing="ease-in-out", iteration=1)

    @classmethod
    def draw_loop_defaults(cls) -> "AnimationSettings":
        """Settings reported for detected draw-loop animations."""
        return cls(duration=2, timing="ease-in-out", iteration="infinite")

    def to_dict(self) -> dict[str, Any]:
        return dataclasses.asdict(self)


@dataclasses.dataclass
class DetectedAnimation:
    """Animation recovered from a document."""

    type: AnimationType
    settings: AnimationSettings

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type.value, "settings": self.settings.to_dict()}


KEYFRAMES: dict[AnimationType, str] = {
    AnimationType.SPIN: (
        "@keyframes spin { from { transform: rotate(0deg); } "
        "to { transform: rotate(360deg); } }"
    ),
    AnimationType.PULSE: (
        "@keyframes pulse { 0%, 100% { transform: scale(1); opacity: 1; } "
        "50% { transform: scale(1.1); opacity: 0.8; } }"
    ),
    AnimationType.BOUNCE: (
        "@keyframes bounce { 0%, 100% { transform: translateY(0); } "
        "50% { transform: translateY(-8px); } }"
    ),
    AnimationType.SHAKE: (
        "@keyframes shake { 0%, 100% { transform: translateX(0); } "
        "25% { transform: translateX(-4px); } 75% { transform: translateX(4px); } }"
    ),
    AnimationType.FADE: (
        "@keyframes fade { 0%, 100% { opacity: 1; } 50% { opacity: 0.3; } }"
    ),
}


def get_keyframes(animation: Union[AnimationType, str]) -> str | None:
    """Get the keyframes CSS of a CSS-family animation, if it has one."""
    try:
        return KEYFRAMES.get(AnimationType(animation))
    except ValueError:
        return None


def animation_names() -> list[str]:
    """Names of all animation presets, including ``none``."""
    return [animation.value for animation in AnimationType]
