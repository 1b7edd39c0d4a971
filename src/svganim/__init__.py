"""Embed, remove and detect animations in SVG icons.

The document is its own metadata store: everything needed to recover an
animation lives in the SVG text, marked with reserved identifiers.

Example usage::

    import svganim

    animated = svganim.embed(svg, "spin", svganim.AnimationSettings(duration=2))
    svganim.detect(animated)
    # DetectedAnimation(type=<AnimationType.SPIN: 'spin'>, settings=...)
    plain = svganim.strip_owned_artifacts(animated)
"""

from logging import getLogger

from svganim.animation import (
    AnimationSettings,
    AnimationType,
    DetectedAnimation,
    animation_names,
    get_keyframes,
)
from svganim.cleaner import strip_owned_artifacts
from svganim.config import PreviewConfig
from svganim.detector import detect
from svganim.embedder import embed
from svganim.namespace import ensure_namespace
from svganim.preview import (
    PreviewCache,
    clear_previews,
    materialize,
    normalize_for_display,
)
from svganim.version import __version__ as __version__

logger = getLogger(__name__)

__all__ = [
    "AnimationSettings",
    "AnimationType",
    "DetectedAnimation",
    "PreviewCache",
    "PreviewConfig",
    "animation_names",
    "clear_previews",
    "detect",
    "embed",
    "ensure_namespace",
    "get_keyframes",
    "materialize",
    "normalize_for_display",
    "strip_owned_artifacts",
]
