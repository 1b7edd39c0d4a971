"""CSS and script generation for the draw animation family.

Draw animations trace each shape's outline by moving ``stroke-dashoffset``
from the shape's length down to zero. That length depends on the rendered
geometry, so it cannot be written into the CSS. A small script measures it
with ``getTotalLength()`` once the document is displayed and publishes it
as the ``--path-length`` custom property, which the CSS then reads.
"""

import dataclasses
import logging

from svganim.animation import AnimationSettings
from svganim.constants import (
    DEFAULT_PATH_LENGTH,
    DRAWABLE_ELEMENTS,
    PATH_LENGTH_PROPERTY,
)
from svganim.svg_utils import num2str

logger = logging.getLogger(__name__)

SELECTOR = ", ".join(DRAWABLE_ELEMENTS)
PATH_LENGTH = f"var({PATH_LENGTH_PROPERTY}, {DEFAULT_PATH_LENGTH})"


@dataclasses.dataclass(frozen=True)
class DrawAnimation:
    """Generated content for one draw animation."""

    css: str
    script: str


def seconds(value: object) -> str:
    """Format a time value in seconds, passing non-numbers through.

    Fractional floats are written in their shortest round-tripping form.
    """
    if isinstance(value, float) and not value.is_integer():
        return f"{value!r}s"
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return f"{num2str(value)}s"
    return f"{value}s"


def build_script() -> str:
    """Build the script that publishes each shape's length as a property."""
    return (
        "(function () {"
        " var svg = document.currentScript ? document.currentScript.parentElement : null;"
        " if (!svg) { return; }"
        f" var elements = svg.querySelectorAll('{SELECTOR}');"
        " Array.prototype.forEach.call(elements, function (el) {"
        f"  var length = {DEFAULT_PATH_LENGTH};"
        "  try { if (el.getTotalLength) { length = el.getTotalLength(); } }"
        f"  catch (e) {{ length = {DEFAULT_PATH_LENGTH}; }}"
        f"  el.style.setProperty('{PATH_LENGTH_PROPERTY}', length);"
        " });"
        " })();"
    )


def build(settings: AnimationSettings, reverse: bool = False) -> DrawAnimation:
    """Build CSS and script for the draw (or draw-reverse) animation.

    Filled shapes fade in with the outline (``fill-in``), or fade out while
    it is erased when ``reverse`` is set (``fill-out``).

    Args:
        settings: Animation timing.
        reverse: Erase the outline instead of drawing it.

    Returns:
        DrawAnimation with the CSS and the path-length script.
    """
    if reverse:
        name, fill_name = "draw-reverse", "fill-out"
        start, end = "0", PATH_LENGTH
        fill_start, fill_end = "1", "0"
    else:
        name, fill_name = "draw", "fill-in"
        start, end = PATH_LENGTH, "0"
        fill_start, fill_end = "0", "1"

    timing = (
        f"{seconds(settings.duration)} {settings.timing} {seconds(settings.delay)} "
        f"{settings.iteration} {settings.direction} forwards"
    )
    css = (
        f"@keyframes {name} {{ from {{ stroke-dashoffset: {start}; }} "
        f"to {{ stroke-dashoffset: {end}; }} }} "
        f"@keyframes {fill_name} {{ 0%, 80% {{ fill-opacity: {fill_start}; }} "
        f"100% {{ fill-opacity: {fill_end}; }} }} "
        f"{SELECTOR} {{ stroke-dasharray: {PATH_LENGTH}; "
        f"stroke-dashoffset: {start}; fill-opacity: {fill_start}; "
        f"animation: {name} {timing}, {fill_name} {timing}; }}"
    )
    return DrawAnimation(css=css, script=build_script())


def build_loop(settings: AnimationSettings) -> DrawAnimation:
    """Build CSS and script for the draw-loop animation.

    The loop draws the outline, holds, then erases it again, so it has no
    direction of its own; ``settings.direction`` is still applied.
    """
    css = (
        "@keyframes draw-loop { "
        f"0% {{ stroke-dashoffset: {PATH_LENGTH}; fill-opacity: 0; }} "
        "45% { stroke-dashoffset: 0; fill-opacity: 1; } "
        "55% { stroke-dashoffset: 0; fill-opacity: 1; } "
        f"100% {{ stroke-dashoffset: {PATH_LENGTH}; fill-opacity: 0; }} }} "
        f"{SELECTOR} {{ stroke-dasharray: {PATH_LENGTH}; "
        f"stroke-dashoffset: {PATH_LENGTH}; fill-opacity: 0; "
        f"animation: draw-loop {seconds(settings.duration)} {settings.timing} "
        f"{seconds(settings.delay)} {settings.iteration} {settings.direction}; }}"
    )
    return DrawAnimation(css=css, script=build_script())
