import logging
import uuid
from collections.abc import Mapping
from typing import Any, Optional, Union

from svganim import draw, svg_utils
from svganim.animation import AnimationSettings, AnimationType, get_keyframes
from svganim.cleaner import strip_owned_artifacts
from svganim.constants import SCRIPT_ID, STYLE_ID, WRAPPER_CLASS_PREFIX
from svganim.namespace import ensure_namespace

logger = logging.getLogger(__name__)

# The unparsed-document fallback has no wrapper group to scope the rule to.
DOCUMENT_SELECTOR = "svg"


def new_wrapper_class() -> str:
    """Create a fresh wrapper class name."""
    return f"{WRAPPER_CLASS_PREFIX}{uuid.uuid4().hex[:12]}"


def build_css_rule(
    animation: AnimationType, settings: AnimationSettings, selector: str
) -> str:
    """Build keyframes plus the rule applying a CSS-family animation."""
    return (
        f"{get_keyframes(animation)} {selector} {{ animation: {animation.value} "
        f"{draw.seconds(settings.duration)} {settings.timing} "
        f"{draw.seconds(settings.delay)} {settings.iteration} {settings.direction}; "
        "transform-origin: center center; transform-box: fill-box; }"
    )


def _build_draw(animation: AnimationType, settings: AnimationSettings) -> draw.DrawAnimation:
    if animation is AnimationType.DRAW_LOOP:
        return draw.build_loop(settings)
    return draw.build(settings, reverse=animation is AnimationType.DRAW_REVERSE)


def _insert_artifacts_text(
    svg: str, animation: AnimationType, settings: AnimationSettings, class_name: str
) -> str:
    """Splice the artifacts right after the root's opening tag."""
    if animation.is_draw:
        content = _build_draw(animation, settings)
        markup = (
            f'<style id="{STYLE_ID}">{content.css}</style>'
            f'<script id="{SCRIPT_ID}">{content.script}</script>'
        )
    else:
        logger.debug(f"Scoping {animation.value} to the whole document")
        css = build_css_rule(animation, settings, DOCUMENT_SELECTOR)
        markup = f'<style id="{STYLE_ID}">{css}</style>'
    return svg_utils.insert_after_open_tag(svg, markup)


@svg_utils.with_text_fallback(_insert_artifacts_text)
def _insert_artifacts(
    svg: str, animation: AnimationType, settings: AnimationSettings, class_name: str
) -> str:
    root = svg_utils.parse_svg(svg)
    style_tag = svg_utils.qualify(root, "style")

    if animation.is_draw:
        content = _build_draw(animation, settings)
        style = svg_utils.create_node(style_tag, id=STYLE_ID, text=content.css)
        script = svg_utils.create_node(
            svg_utils.qualify(root, "script"), id=SCRIPT_ID, text=content.script
        )
        root.insert(0, style)
        root.insert(1, script)
    else:
        wrapper = svg_utils.create_node(svg_utils.qualify(root, "g"), class_=class_name)
        svg_utils.wrap_children(root, wrapper)
        css = build_css_rule(animation, settings, f".{class_name}")
        root.insert(0, svg_utils.create_node(style_tag, id=STYLE_ID, text=css))

    return svg_utils.tostring(root, svg)


def embed(
    svg: str,
    animation: Union[AnimationType, str],
    settings: Optional[Union[AnimationSettings, Mapping[str, Any]]] = None,
    class_suffix: Optional[str] = None,
) -> str:
    """Embed an animation into an SVG document.

    Any animation embedded earlier is removed first, so re-embedding never
    accumulates artifacts. CSS-family animations wrap the root's children in
    a group carrying a fresh class; the draw family injects a <style> and a
    <script> as the first children of the root instead.

    This function does not raise. A document that cannot be parsed gets the
    artifacts spliced in as text with the rule scoped to ``svg``; a document
    that cannot even be located is returned as-is.

    Args:
        svg: SVG document text.
        animation: Animation preset, as AnimationType or its name.
            ``none`` only removes existing animation.
        settings: Animation timing. Defaults to AnimationSettings() for the
            CSS family and to the draw defaults for the draw family.
        class_suffix: Suffix for the wrapper class. Random by default.

    Returns:
        SVG document text with the animation embedded.
    """
    svg = strip_owned_artifacts(svg)
    svg = ensure_namespace(svg)

    try:
        animation = AnimationType(animation)
    except ValueError:
        logger.warning(f"Unknown animation {animation!r}, leaving document unanimated")
        return svg
    if animation is AnimationType.NONE:
        return svg

    if settings is None:
        settings = AnimationSettings.defaults_for(animation)
    elif isinstance(settings, Mapping):
        settings = AnimationSettings.from_dict(settings)

    class_name = (
        f"{WRAPPER_CLASS_PREFIX}{class_suffix}" if class_suffix else new_wrapper_class()
    )
    return _insert_artifacts(svg, animation, settings, class_name)
