import logging
import re
from re import Pattern
from typing import Optional, Union

from svganim import svg_utils
from svganim.animation import AnimationSettings, AnimationType, DetectedAnimation
from svganim.constants import WRAPPER_CLASS_PREFIX

logger = logging.getLogger(__name__)

NUMBER = r"-?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][-+]?\d+)?"

KEYFRAMES_NAME_RE: Pattern[str] = re.compile(r"@keyframes\s+([\w-]+)")
ANIMATION_NAME_RE: Pattern[str] = re.compile(r"animation\s*:\s*([\w-]+)")
# Positional form written by the embedder, on the wrapper class or, for
# older releases and the text fallback, on a bare svg selector:
#   <selector> { animation: <name> <duration>s <timing> [<delay>s] <iteration> <direction>
ANIMATION_RULE_RE: Pattern[str] = re.compile(
    r"(?:\bsvg|\." + re.escape(WRAPPER_CLASS_PREFIX) + r"[\w-]+)\s*\{\s*"
    r"animation\s*:\s*([\w-]+)\s+"
    rf"({NUMBER})s\s+"
    r"(cubic-bezier\([^)]*\)|steps\([^)]*\)|[\w-]+)"
    rf"(?:\s+({NUMBER})s)?"
    r"\s+([\w.]+)\s+([\w-]+)"
)

DRAW_REVERSE_NAMES = frozenset({"draw-reverse", "undraw"})


def _parse_iteration(value: str) -> Union[int, str]:
    return int(value) if value.isdigit() else value


def _detect_draw(keyframes: set[str]) -> Optional[DetectedAnimation]:
    # TODO: recover draw timing from the rule once callers can handle
    # re-tuning a draw animation instead of reapplying it.
    if "draw-loop" in keyframes:
        return DetectedAnimation(
            AnimationType.DRAW_LOOP, AnimationSettings.draw_loop_defaults()
        )
    if keyframes & DRAW_REVERSE_NAMES:
        return DetectedAnimation(
            AnimationType.DRAW_REVERSE, AnimationSettings.draw_defaults()
        )
    if "draw" in keyframes:
        return DetectedAnimation(AnimationType.DRAW, AnimationSettings.draw_defaults())
    return None


def _detect_css(css: str) -> Optional[DetectedAnimation]:
    name_match = ANIMATION_NAME_RE.search(css)
    if name_match is None:
        return None
    try:
        animation = AnimationType(name_match.group(1))
    except ValueError:
        logger.debug(f"Ignoring foreign animation {name_match.group(1)!r}")
        return None
    if not animation.is_css:
        return None

    rule = ANIMATION_RULE_RE.search(css)
    if rule is None or rule.group(1) != animation.value:
        logger.debug(f"Found {animation.value} without full settings, using defaults")
        return DetectedAnimation(animation, AnimationSettings())

    _, duration, timing, delay, iteration, direction = rule.groups()
    return DetectedAnimation(
        animation,
        AnimationSettings(
            duration=float(duration),
            timing=timing,
            iteration=_parse_iteration(iteration),
            direction=direction,
            delay=float(delay) if delay else 0,
        ),
    )


def analyze_css(css: str) -> Optional[DetectedAnimation]:
    """Recover an animation from CSS text.

    Draw keyframes are checked first since the draw rules also carry an
    ``animation:`` declaration.
    """
    keyframes = set(KEYFRAMES_NAME_RE.findall(css))
    return _detect_draw(keyframes) or _detect_css(css)


def _detect_text(svg: str) -> Optional[DetectedAnimation]:
    """Treat the whole unparsed document as one block of CSS."""
    return analyze_css(svg)


@svg_utils.with_text_fallback(_detect_text, default=None)
def detect(svg: str) -> Optional[DetectedAnimation]:
    """Detect the animation embedded in an SVG document.

    Every <style> element is examined in document order and the first
    recognizable animation wins. CSS-family animations come back with the
    exact settings they were embedded with; draw animations come back with
    fixed default settings.

    Args:
        svg: SVG document text.

    Returns:
        DetectedAnimation, or None when the document carries no animation.
    """
    root = svg_utils.parse_svg(svg)
    for node in root.iter():
        if svg_utils.local_name(node.tag) != "style":
            continue
        detected = analyze_css("".join(node.itertext()))
        if detected is not None:
            return detected
    return None
