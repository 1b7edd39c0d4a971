import logging
import re
import xml.etree.ElementTree as ET
from re import Match, Pattern
from typing import Optional

from svganim import svg_utils
from svganim.constants import (
    LEGACY_SCRIPT_MARKER,
    SCRIPT_ID,
    STYLE_ID,
    WRAPPER_CLASS_PREFIX,
)

logger = logging.getLogger(__name__)

OWNED_IDS: dict[str, str] = {"style": STYLE_ID, "script": SCRIPT_ID}

WRAPPER_SELECTOR_RE: Pattern[str] = re.compile(
    r"\." + re.escape(WRAPPER_CLASS_PREFIX) + r"[\w-]*"
)
LEGACY_SVG_RULE_RE: Pattern[str] = re.compile(
    r"(?:^|[\s};])svg\s*\{\s*animation\s*:", re.IGNORECASE
)

# Text patterns for documents that do not parse.
ELEMENT_RE: dict[str, Pattern[str]] = {
    tag: re.compile(
        rf"<{tag}\b([^>]*?)(?:/>|>(.*?)</{tag}\s*>)", re.IGNORECASE | re.DOTALL
    )
    for tag in OWNED_IDS
}
ID_ATTR_RE: Pattern[str] = re.compile(r"\bid\s*=\s*([\"'])(.*?)\1", re.DOTALL)
WRAPPER_OPEN_RE: Pattern[str] = re.compile(
    r"<g\b[^>]*?\bclass\s*=\s*([\"'])(?:[^\"']*\s)?"
    + re.escape(WRAPPER_CLASS_PREFIX)
    + r"[^\"']*\1[^>]*?(/?)>",
    re.IGNORECASE,
)
G_TAG_RE: Pattern[str] = re.compile(r"<(/?)g\b[^>]*?(/?)>", re.IGNORECASE)


def is_legacy_style(css: str) -> bool:
    """Check for animation styles written by older releases without an id.

    Those carried either a rule on a wrapper class, or keyframes plus a bare
    ``svg { animation: ... }`` rule.
    """
    if WRAPPER_SELECTOR_RE.search(css):
        return True
    return "@keyframes" in css and LEGACY_SVG_RULE_RE.search(css) is not None


def is_owned_artifact(tag: str, id_: Optional[str], content: str) -> bool:
    """Check whether a <style> or <script> element was produced by svganim."""
    if tag not in OWNED_IDS:
        return False
    if id_ == OWNED_IDS[tag]:
        return True
    if tag == "style":
        return is_legacy_style(content)
    return not id_ and LEGACY_SCRIPT_MARKER in content


def is_wrapper_group(node: ET.Element) -> bool:
    """Check whether a node is a wrapper group inserted by the embedder."""
    if svg_utils.local_name(node.tag) != "g":
        return False
    classes = (node.get("class") or "").split()
    return any(name.startswith(WRAPPER_CLASS_PREFIX) for name in classes)


def _remove_owned_elements(root: ET.Element) -> int:
    owned = [
        (parent, node)
        for parent, node in svg_utils.iter_with_parent(root)
        if is_owned_artifact(
            svg_utils.local_name(node.tag), node.get("id"), "".join(node.itertext())
        )
    ]
    for parent, node in owned:
        svg_utils.remove_node(parent, node)
    return len(owned)


def _unwrap_wrapper_groups(root: ET.Element) -> int:
    wrappers = [
        (parent, node)
        for parent, node in svg_utils.iter_with_parent(root)
        if is_wrapper_group(node)
    ]
    # Innermost first, so nested wrappers land in a parent that still exists.
    for parent, node in reversed(wrappers):
        svg_utils.unwrap_element(parent, node)
    return len(wrappers)


def _find_closing_g(svg: str, pos: int) -> Optional[tuple[int, int]]:
    """Find the </g> that balances a <g> opened right before ``pos``."""
    depth = 1
    for match in G_TAG_RE.finditer(svg, pos):
        if match.group(1):
            depth -= 1
            if depth == 0:
                return match.span()
        elif not match.group(2):
            depth += 1
    return None


def _unwrap_wrapper_groups_text(svg: str) -> str:
    while True:
        match = WRAPPER_OPEN_RE.search(svg)
        if match is None:
            return svg
        start, end = match.span()
        closing = None if match.group(2) else _find_closing_g(svg, end)
        if closing is None:
            # Self-closing, or unbalanced in already broken markup.
            svg = svg[:start] + svg[end:]
        else:
            close_start, close_end = closing
            svg = svg[:start] + svg[end:close_start] + svg[close_end:]


def _strip_owned_artifacts_text(svg: str) -> str:
    """Remove owned artifacts with text patterns."""
    result = svg
    for tag, pattern in ELEMENT_RE.items():

        def replace(match: Match[str], tag: str = tag) -> str:
            id_match = ID_ATTR_RE.search(match.group(1))
            id_ = id_match.group(2) if id_match else None
            if is_owned_artifact(tag, id_, match.group(2) or ""):
                return ""
            return match.group(0)

        result = pattern.sub(replace, result)
    result = _unwrap_wrapper_groups_text(result)
    if result != svg:
        logger.debug("Removed animation artifacts with text patterns")
    return result


@svg_utils.with_text_fallback(_strip_owned_artifacts_text)
def strip_owned_artifacts(svg: str) -> str:
    """Remove every animation artifact svganim may have written.

    This covers reserved-id <style> and <script> elements (all of them, at
    any depth), wrapper groups (unwrapped in place), and the style and
    script blocks written by older releases. Any other content is left
    untouched, and a document without artifacts is returned as-is, so the
    operation is stable: running it twice equals running it once.

    Args:
        svg: SVG document text.

    Returns:
        SVG document text without animation artifacts.
    """
    root = svg_utils.parse_svg(svg)
    removed = _remove_owned_elements(root)
    unwrapped = _unwrap_wrapper_groups(root)
    if not (removed or unwrapped):
        return svg
    logger.debug(f"Removed {removed} artifact element(s), unwrapped {unwrapped} group(s)")
    return svg_utils.tostring(root, svg)
