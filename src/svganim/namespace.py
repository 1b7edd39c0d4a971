import logging
import re
from re import Pattern

from svganim import svg_utils
from svganim.svg_utils import NAMESPACE

logger = logging.getLogger(__name__)

# Default namespace declarations only; prefixed ones such as xmlns:xlink are
# left alone.
XMLNS_RE: Pattern[str] = re.compile(r"\s+xmlns\s*=\s*([\"'])(.*?)\1", re.DOTALL)


def _has_svg_declaration(svg: str) -> bool:
    start, end, _ = svg_utils.open_tag_span(svg)
    declarations = [m.group(2) for m in XMLNS_RE.finditer(svg[start:end])]
    return declarations == [NAMESPACE]


def _ensure_namespace_text(svg: str) -> str:
    """Fix the root's namespace declaration with text patterns.

    Only the root's opening tag is inspected. Zero declarations get one
    inserted; several (or a single wrong one) are all stripped and replaced
    by exactly one canonical declaration.
    """
    start, end, _ = svg_utils.open_tag_span(svg)
    tag = svg[start:end]
    declarations = [m.group(2) for m in XMLNS_RE.finditer(tag)]
    if declarations == [NAMESPACE]:
        return svg

    if declarations:
        logger.debug(
            f"Replacing {len(declarations)} namespace declaration(s) on <svg>"
        )
    cleaned = XMLNS_RE.sub("", tag)
    fixed = f'{cleaned[:4]} xmlns="{NAMESPACE}"{cleaned[4:]}'
    return svg[:start] + fixed + svg[end:]


@svg_utils.with_text_fallback(_ensure_namespace_text)
def ensure_namespace(svg: str) -> str:
    """Ensure the root <svg> element declares the SVG namespace exactly once.

    Documents that already declare it are returned as-is. Malformed input is
    repaired with text patterns, and returned unchanged when even that is
    not possible.

    Args:
        svg: SVG document text.

    Returns:
        SVG document text with a single ``xmlns`` declaration on the root.
    """
    root = svg_utils.parse_svg(svg)
    namespace = svg_utils.namespace_of(root.tag)

    if namespace == NAMESPACE:
        if _has_svg_declaration(svg):
            return svg
        # Prefixed form such as <svg:svg xmlns:svg="...">.
        return svg_utils.tostring(root, svg)

    if namespace is None:
        root.set("xmlns", NAMESPACE)
        return svg_utils.tostring(root, svg)

    logger.debug(f"Moving document from namespace {namespace!r} to SVG")
    for node in root.iter():
        if isinstance(node.tag, str) and svg_utils.namespace_of(node.tag) == namespace:
            node.tag = f"{{{NAMESPACE}}}{svg_utils.local_name(node.tag)}"
    return svg_utils.tostring(root, svg)
