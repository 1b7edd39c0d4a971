"""Preview files for displaying icons outside the editor.

Previews are copies of a document written to a cache directory, normalized
so that they render well in small previews: namespace declared, explicit
size, and monochrome black artwork switched to ``currentColor`` so it
follows the theme's foreground color. Preview files are never the source
of truth; the document text the caller holds is.

The cache is content-addressed. A file name combines the sanitized icon
name with a digest of the content, so the same content always maps to the
same file and changed content always maps to a new one.
"""

import hashlib
import logging
import re
import xml.etree.ElementTree as ET
from re import Match, Pattern
from typing import Optional

from svganim import svg_utils
from svganim.config import DEFAULT_SIZE, PreviewConfig
from svganim.namespace import ensure_namespace
from svganim.storage import BaseStorage, get_storage

logger = logging.getLogger(__name__)

CURRENT_COLOR = "currentColor"
BLACK_COLORS = frozenset({"#000", "#000000", "black", "rgb(0,0,0)"})
NEUTRAL_COLORS = frozenset({"none", "currentcolor"})

UNSAFE_NAME_RE: Pattern[str] = re.compile(r"[^a-z0-9-]", re.IGNORECASE)
PAINT_DECL_RE: Pattern[str] = re.compile(
    r"(?<![\w-])(fill|stroke)(\s*:\s*)([^;}\"'<]+)", re.IGNORECASE
)
PAINT_ATTR_RE: Pattern[str] = re.compile(
    r"(?<![\w:-])(fill|stroke)(\s*=\s*)([\"'])(.*?)\3", re.IGNORECASE | re.DOTALL
)
SIZE_ATTR_RE: dict[str, Pattern[str]] = {
    name: re.compile(rf"\s{name}\s*=", re.IGNORECASE) for name in ("width", "height")
}


def sanitize_name(name: str) -> str:
    """Make an icon name safe to use in a file name."""
    return UNSAFE_NAME_RE.sub("_", name)


def _normalize_color(value: str) -> str:
    return re.sub(r"\s+", "", value).lower()


def is_black(value: str) -> bool:
    return _normalize_color(value) in BLACK_COLORS


def has_real_colors(paints: list[str]) -> bool:
    """Check whether any paint is something other than black or none.

    Gradient and pattern references count as real colors.
    """
    for paint in paints:
        color = _normalize_color(paint)
        if "url(" in color:
            return True
        if color in NEUTRAL_COLORS or color in BLACK_COLORS:
            continue
        return True
    return False


def _replace_black_declaration(match: Match[str]) -> str:
    if is_black(match.group(3)):
        return f"{match.group(1)}{match.group(2)}{CURRENT_COLOR}"
    return match.group(0)


def _normalize_for_display_text(svg: str, size: int) -> str:
    attributes = [m.group(4) for m in PAINT_ATTR_RE.finditer(svg)]
    declarations = [m.group(3) for m in PAINT_DECL_RE.finditer(svg)]
    monochrome = not has_real_colors(attributes + declarations)
    has_fill = any(
        m.group(1).lower() == "fill"
        for pattern in (PAINT_ATTR_RE, PAINT_DECL_RE)
        for m in pattern.finditer(svg)
    )

    if monochrome:

        def replace_attribute(match: Match[str]) -> str:
            if is_black(match.group(4)):
                quote = match.group(3)
                return f"{match.group(1)}{match.group(2)}{quote}{CURRENT_COLOR}{quote}"
            return match.group(0)

        svg = PAINT_ATTR_RE.sub(replace_attribute, svg)
        svg = PAINT_DECL_RE.sub(_replace_black_declaration, svg)

    start, end, _ = svg_utils.open_tag_span(svg)
    tag = svg[start:end]
    extra = [
        f'{name}="{size}"' for name, pattern in SIZE_ATTR_RE.items() if not pattern.search(tag)
    ]
    if monochrome and not has_fill:
        extra.append(f'fill="{CURRENT_COLOR}"')
    if extra:
        tag = f"{tag[:4]} {' '.join(extra)}{tag[4:]}"
    return svg[:start] + tag + svg[end:]


def _iter_paints(root: ET.Element) -> list[tuple[str, str]]:
    """Collect (property, value) paints from attributes and CSS."""
    paints = []
    for node in root.iter():
        for name in ("fill", "stroke"):
            value = node.get(name)
            if value is not None:
                paints.append((name, value))
        css = node.get("style", "")
        if svg_utils.local_name(node.tag) == "style":
            css = "".join(node.itertext())
        for match in PAINT_DECL_RE.finditer(css):
            paints.append((match.group(1).lower(), match.group(3)))
    return paints


@svg_utils.with_text_fallback(_normalize_for_display_text)
def _normalize_for_display(svg: str, size: int) -> str:
    root = svg_utils.parse_svg(svg)
    for name in ("width", "height"):
        if root.get(name) is None:
            root.set(name, str(size))

    paints = _iter_paints(root)
    if not has_real_colors([value for _, value in paints]):
        for node in root.iter():
            for name in ("fill", "stroke"):
                if is_black(node.get(name, "")):
                    node.set(name, CURRENT_COLOR)
            if node.get("style"):
                node.set("style", PAINT_DECL_RE.sub(_replace_black_declaration, node.get("style", "")))
            if svg_utils.local_name(node.tag) == "style" and node.text:
                node.text = PAINT_DECL_RE.sub(_replace_black_declaration, node.text)
        if not any(name == "fill" for name, _ in paints):
            # Unpainted shapes default to black.
            root.set("fill", CURRENT_COLOR)

    return svg_utils.tostring(root, svg)


def normalize_for_display(svg: str, size: int = DEFAULT_SIZE) -> str:
    """Prepare a document for display as a preview.

    Args:
        svg: SVG document text.
        size: Width and height given to a root that has none.

    Returns:
        SVG document text with a namespace, an explicit size and, for
        monochrome black artwork, ``currentColor`` paints.
    """
    return _normalize_for_display(ensure_namespace(svg), size)


class PreviewCache:
    """Content-addressed cache of preview files.

    Lookups go to an in-memory index first, then to the storage (which
    survives process restarts), and only then write a new file.

    Example::

        cache = PreviewCache(PreviewConfig(directory="/tmp/previews"))
        path = cache.materialize("arrow-right", svg_text)

    Concurrent calls for the same key may both write the file. Both write
    the same bytes, so this is harmless. ``clear()`` must not run while
    ``materialize()`` calls are in flight.
    """

    def __init__(
        self,
        config: Optional[PreviewConfig] = None,
        storage: Optional[BaseStorage] = None,
    ) -> None:
        self.config = config or PreviewConfig.default()
        self.storage = (
            storage if storage is not None else get_storage(self.config.directory)
        )
        self._index: dict[str, str] = {}
        self._key_re = re.compile(
            rf"[A-Za-z0-9_-]*_[0-9a-f]{{{min(self.config.digest_length, 32)}}}\.svg"
        )

    def __len__(self) -> int:
        return len(self._index)

    def cache_key(self, name: str, svg: str) -> str:
        """File name for a preview of ``svg`` under ``name``."""
        digest = hashlib.md5(svg.encode("utf-8"), usedforsecurity=False).hexdigest()
        return f"{sanitize_name(name)}_{digest[: self.config.digest_length]}.svg"

    def is_cache_key(self, key: str) -> bool:
        """Check whether a file name has the shape of a preview file."""
        return self._key_re.fullmatch(key) is not None

    def materialize(self, name: str, svg: str) -> str:
        """Get the location of a preview file, writing it if needed.

        Args:
            name: Icon name, used as readable part of the file name.
            svg: SVG document text.

        Returns:
            Location of the preview file (an absolute path for the
            filesystem storage).

        Raises:
            OSError: If the preview cannot be written. Callers should show
                the preview as unavailable; the document itself is unaffected.
        """
        key = self.cache_key(name, svg)
        location = self._index.get(key)
        if location is not None:
            return location

        if self.storage.exists(key):
            logger.debug(f"Found preview {key} in storage")
        else:
            self.storage.put(key, normalize_for_display(svg, self.config.size))
            logger.info(f"Wrote preview {key}")

        location = self.storage.url(key)
        self._index[key] = location
        return location

    def clear(self) -> None:
        """Remove every preview file and empty the index.

        Other files sharing the directory are left alone.
        """
        removed = 0
        for key in list(self.storage.list()):
            if not self.is_cache_key(key):
                continue
            try:
                self.storage.delete(key)
                removed += 1
            except OSError as e:
                logger.warning(f"Failed to remove preview {key}: {e}")
        self._index.clear()
        logger.info(f"Cleared {removed} preview(s)")


_default_cache: Optional[PreviewCache] = None


def get_default_cache() -> PreviewCache:
    """Get the process-wide cache, configured from the environment."""
    global _default_cache
    if _default_cache is None:
        _default_cache = PreviewCache()
    return _default_cache


def materialize(name: str, svg: str) -> str:
    """Get a preview file for ``svg`` from the default cache."""
    return get_default_cache().materialize(name, svg)


def clear_previews() -> None:
    """Remove all preview files of the default cache."""
    get_default_cache().clear()
