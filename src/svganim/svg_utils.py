import functools
import logging
import re
import xml.etree.ElementTree as ET
from collections.abc import Callable, Iterator
from re import Pattern
from typing import Any, Optional, TypeVar

logger = logging.getLogger(__name__)

NAMESPACE = "http://www.w3.org/2000/svg"
XLINK_NAMESPACE = "http://www.w3.org/1999/xlink"

DEFAULT_NUMBER_DIGITS = 6

XML_DECLARATION_RE: Pattern[str] = re.compile(r"^\s*<\?xml[^>]*\?>\s*")
SVG_OPEN_TAG_RE: Pattern[str] = re.compile(r"<svg\b[^>]*?(/?)>", re.IGNORECASE)

# Keep the default namespace unprefixed on output instead of "ns0:".
ET.register_namespace("", NAMESPACE)
ET.register_namespace("xlink", XLINK_NAMESPACE)

T = TypeVar("T")

UNCHANGED: Any = object()


class NotSVGError(ValueError):
    """Raised when a document parses as XML but its root is not <svg>."""


def num2str(num: int | float | bool, digit: int = DEFAULT_NUMBER_DIGITS) -> str:
    """Convert a number to a string, using the specified format for floats."""
    if isinstance(num, bool):
        return "true" if num else "false"
    if isinstance(num, int):
        return str(num)
    if isinstance(num, float):
        if num.is_integer():
            return str(int(num))
        # Format float with specified number of digits, and trim trailing zeros
        number = f"{num:.{digit}f}"
        return f"{number[0]}{number[1:].rstrip('0').rstrip('.')}"
    raise ValueError(f"Unsupported type: {type(num)}")


def local_name(tag: Any) -> str:
    """Return the tag name without its namespace, or "" for comments."""
    if not isinstance(tag, str):
        return ""
    return tag.split("}")[-1] if "}" in tag else tag


def namespace_of(tag: str) -> Optional[str]:
    """Return the namespace URI of a qualified tag, if any."""
    if tag.startswith("{"):
        return tag[1:].split("}")[0]
    return None


def qualify(root: ET.Element, tag: str) -> str:
    """Qualify a tag name with the namespace used by the given root."""
    namespace = namespace_of(root.tag)
    return f"{{{namespace}}}{tag}" if namespace else tag


def fromstring(data: str) -> ET.Element:
    """Parse an XML string to an Element, keeping comments."""
    parser = ET.XMLParser(target=ET.TreeBuilder(insert_comments=True))
    return ET.fromstring(data, parser=parser)


def parse_svg(data: str) -> ET.Element:
    """Parse an SVG string and check the root element.

    Raises:
        xml.etree.ElementTree.ParseError: If the text is not well-formed XML.
        NotSVGError: If the root element is not <svg>.
    """
    root = fromstring(data)
    if local_name(root.tag) != "svg":
        raise NotSVGError(f"Root element is not <svg>: {local_name(root.tag)!r}")
    return root


def tostring(node: ET.Element, source: str = "") -> str:
    """Convert an XML node to a string.

    The XML declaration of the source text, if any, is carried over since
    ElementTree drops it on parse.
    """
    body = ET.tostring(node, encoding="unicode", xml_declaration=False)
    match = XML_DECLARATION_RE.match(source)
    if match:
        return match.group(0) + body
    return body


def create_node(
    tag: str,
    parent: Optional[ET.Element] = None,
    text: str = "",
    **kwargs: Any,
) -> ET.Element:
    """Create an XML node with attributes."""
    node = ET.Element(tag)
    for key, value in kwargs.items():
        if value is None:
            continue
        key = key.rstrip("_")  # allow trailing underscore for keywords
        key = key.replace("_", "-")  # convert underscores to hyphens
        set_attribute(node, key, value)
    if text:
        node.text = text
    if parent is not None:
        parent.append(node)
    return node


def set_attribute(node: ET.Element, key: str, value: Any) -> None:
    """Add an attribute to an XML node."""
    if isinstance(value, (int, float, bool)):
        node.set(key, num2str(value))
    else:
        node.set(key, str(value))


def iter_with_parent(
    root: ET.Element,
) -> Iterator[tuple[ET.Element, ET.Element]]:
    """Iterate (parent, child) pairs in document order.

    ElementTree has no parent pointers, so any removal needs the parent
    collected up front.
    """
    for parent in root.iter():
        for child in parent:
            yield parent, child


def _append_text(parent: ET.Element, index: int, text: Optional[str]) -> None:
    """Append text right before position ``index`` in parent."""
    if not text:
        return
    if index > 0:
        previous = parent[index - 1]
        previous.tail = (previous.tail or "") + text
    else:
        parent.text = (parent.text or "") + text


def remove_node(parent: ET.Element, node: ET.Element) -> None:
    """Remove a node from its parent, keeping its tail text in place."""
    index = list(parent).index(node)
    parent.remove(node)
    _append_text(parent, index, node.tail)


def unwrap_element(parent: ET.Element, wrapper: ET.Element) -> None:
    """Unwrap a wrapper element by moving its children to parent level.

    The children take the wrapper's position, so document order is kept.
    The wrapper's leading text goes before the first child and its tail
    after the last one.
    """
    index = list(parent).index(wrapper)
    children = list(wrapper)
    parent.remove(wrapper)
    _append_text(parent, index, wrapper.text)

    for offset, child in enumerate(children):
        parent.insert(index + offset, child)

    _append_text(parent, index + len(children), wrapper.tail)


def wrap_children(root: ET.Element, wrapper: ET.Element) -> ET.Element:
    """Move every child of root into the wrapper and append the wrapper."""
    children = list(root)
    wrapper.text = root.text
    root.text = None
    for child in children:
        root.remove(child)
        wrapper.append(child)
    root.append(wrapper)
    return wrapper


def open_tag_span(svg: str) -> tuple[int, int, bool]:
    """Locate the opening tag of the root <svg> element in raw text.

    Returns:
        (start, end, self_closing) offsets of the first ``<svg ...>`` tag.

    Raises:
        ValueError: If no <svg> opening tag is present.
    """
    match = SVG_OPEN_TAG_RE.search(svg)
    if match is None:
        raise ValueError("No <svg> opening tag found")
    return match.start(), match.end(), bool(match.group(1))


def insert_after_open_tag(svg: str, content: str) -> str:
    """Splice content right after the root's opening tag.

    A self-closing root is expanded into an open/close pair first.
    """
    start, end, self_closing = open_tag_span(svg)
    if self_closing:
        head = svg[start:end].rstrip(">").rstrip("/").rstrip()
        return f"{svg[:start]}{head}>{content}</svg>{svg[end:]}"
    return svg[:end] + content + svg[end:]


def with_text_fallback(
    fallback: Callable[..., T], default: Any = UNCHANGED
) -> Callable[[Callable[..., T]], Callable[..., T]]:
    """Run a structured operation, falling back to a text-pattern version.

    The decorated function receives the SVG text as its first argument and
    works on the parsed tree. When parsing fails (malformed XML, or
    lone surrogates the parser cannot encode) or the root is not <svg>,
    ``fallback`` is called with the same arguments. If
    the fallback cannot cope either (raises ValueError), the input text is
    returned unchanged, or ``default`` when one is given.

    Usage::

        @with_text_fallback(_ensure_namespace_text)
        def ensure_namespace(svg: str) -> str:
            root = svg_utils.parse_svg(svg)
            ...
    """

    def decorator(structured: Callable[..., T]) -> Callable[..., T]:
        @functools.wraps(structured)
        def wrapper(svg: str, *args: Any, **kwargs: Any) -> T:
            try:
                return structured(svg, *args, **kwargs)
            except (ET.ParseError, NotSVGError, UnicodeError) as e:
                logger.debug(
                    f"{structured.__name__}: structured path failed ({e}), "
                    "using text patterns"
                )
            try:
                return fallback(svg, *args, **kwargs)
            except ValueError as e:
                logger.warning(
                    f"{structured.__name__}: unable to process document ({e}), "
                    "returning it unchanged"
                )
                return svg if default is UNCHANGED else default  # type: ignore[return-value]

        return wrapper

    return decorator
