# Markers that identify this package's own output inside a document. The
# embedder writes them, the cleaner and the detector look for them; nothing
# else in the document is ever touched.
STYLE_ID = "icon-manager-animation"
SCRIPT_ID = "icon-manager-script"
WRAPPER_CLASS_PREFIX = "icon-anim-"

# Element types that carry a stroke the draw animations can trace.
DRAWABLE_ELEMENTS: tuple[str, ...] = (
    "path",
    "line",
    "polyline",
    "polygon",
    "circle",
    "ellipse",
    "rect",
)

PATH_LENGTH_PROPERTY = "--path-length"
DEFAULT_PATH_LENGTH = 100

# Signature of the path-length script written by older releases, which
# carried no id attribute.
LEGACY_SCRIPT_MARKER = "document.currentScript.parentElement"
