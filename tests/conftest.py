import re
import xml.etree.ElementTree as ET
from typing import Any

import pytest

from svganim.svg_utils import NAMESPACE

XMLNS_RE = re.compile(r"\sxmlns\s*=\s*([\"'])(.*?)\1")

PLAIN_ICON = '<svg viewBox="0 0 24 24"><path d="M0 0 10 10"/><circle cx="5" cy="5" r="2"/></svg>'
NAMESPACED_ICON = (
    f'<svg xmlns="{NAMESPACE}" viewBox="0 0 24 24">'
    '<path d="M4 12h16" stroke="black"/><rect x="2" y="2" width="4" height="4"/></svg>'
)


def xmlns_declarations(svg: str) -> list[str]:
    """Default namespace declarations found anywhere in the text."""
    return [m.group(2) for m in XMLNS_RE.finditer(svg)]


def local_name(tag: Any) -> str:
    if not isinstance(tag, str):
        return ""
    return tag.split("}")[-1]


def canonical(svg: str) -> tuple:
    """Structure of a document, ignoring attribute order and whitespace."""

    def walk(node: ET.Element) -> tuple:
        return (
            node.tag if isinstance(node.tag, str) else "#comment",
            tuple(sorted(node.attrib.items())),
            (node.text or "").strip(),
            tuple(walk(child) for child in node),
        )

    return walk(ET.fromstring(svg))


def find_all(svg: str, name: str) -> list[ET.Element]:
    """All elements with the given local name."""
    return [node for node in ET.fromstring(svg).iter() if local_name(node.tag) == name]


@pytest.fixture
def plain_icon() -> str:
    return PLAIN_ICON


@pytest.fixture
def namespaced_icon() -> str:
    return NAMESPACED_ICON
