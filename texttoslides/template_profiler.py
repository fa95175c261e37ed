import logging
import posixpath
import re
from datetime import datetime, timezone
from typing import Dict, List, Optional

from lxml import etree

from texttoslides.archive import Archive
from texttoslides.schemas import (
    TemplateAnalysis, LayoutInfo, PartInfo, ImageInfo, ThemeInfo, ColorScheme, FontScheme
)

logger = logging.getLogger(__name__)

LAYOUTS_DIR = "ppt/slideLayouts/"
MASTERS_DIR = "ppt/slideMasters/"
THEME_DIR = "ppt/theme/"
PRIMARY_THEME = "ppt/theme/theme1.xml"
MEDIA_DIR = "ppt/media/"
APP_PROPERTIES = "docProps/app.xml"

MAX_LAYOUTS = 5
IMAGE_RE = re.compile(r"\.(png|jpe?g|gif)$", re.IGNORECASE)
HEX_COLOR_RE = re.compile(r"[0-9A-Fa-f]{6}")

NS = {
    "a": "http://schemas.openxmlformats.org/drawingml/2006/main",
    "p": "http://schemas.openxmlformats.org/presentationml/2006/main",
}

SCHEME_COLOR_NAMES = (
    "dk1", "lt1", "dk2", "lt2",
    "accent1", "accent2", "accent3", "accent4", "accent5", "accent6",
    "hlink", "folHlink",
)

# ColorScheme field -> scheme color it is read from
ROLE_COLORS = {
    "primary": "dk2",
    "secondary": "accent1",
    "accent": "accent3",
    "background": "lt1",
}

DEFAULT_LAYOUTS = [
    {"name": "Title Slide", "type": "title"},
    {"name": "Title and Content", "type": "content"},
    {"name": "Two Content", "type": "two-column"},
]


def _parser():
    return etree.XMLParser(resolve_entities=False, no_network=True)


def default_layouts() -> List[LayoutInfo]:
    return [LayoutInfo(**layout) for layout in DEFAULT_LAYOUTS]


def classify_layout(xml_text: str) -> str:
    """Order matters: a title layout usually also contains a body placeholder."""
    if "ctrTitle" in xml_text:
        return "title"
    if "body" in xml_text:
        return "content"
    if "twoColTx" in xml_text:
        return "two-column"
    return "basic"


def _xml_entries(archive: Archive, directory: str) -> List[str]:
    return [
        name for name in archive.names()
        if name.startswith(directory) and name.lower().endswith(".xml")
        and "/" not in name[len(directory):]
    ]


def _stem(path: str) -> str:
    return posixpath.splitext(posixpath.basename(path))[0]


def _layout_name(xml_text: str, path: str) -> str:
    try:
        root = etree.fromstring(xml_text.encode("utf-8"), _parser())
        c_sld = root.find("p:cSld", NS)
        if c_sld is not None and c_sld.get("name"):
            return c_sld.get("name")
    except (etree.XMLSyntaxError, ValueError):
        pass
    return _stem(path)


def extract_layouts(archive: Archive) -> List[LayoutInfo]:
    layouts = []
    for path in _xml_entries(archive, LAYOUTS_DIR)[:MAX_LAYOUTS]:
        xml_text = archive.read(path)
        layouts.append(LayoutInfo(name=_layout_name(xml_text, path), type=classify_layout(xml_text)))
    return layouts


def extract_master_slides(archive: Archive) -> List[PartInfo]:
    return [PartInfo(name=_stem(path), path=path) for path in _xml_entries(archive, MASTERS_DIR)]


def _find_theme_entry(archive: Archive) -> Optional[str]:
    if PRIMARY_THEME in archive:
        return PRIMARY_THEME
    themes = _xml_entries(archive, THEME_DIR)
    return themes[0] if themes else None


def _color_value(color_elem) -> Optional[str]:
    srgb = color_elem.find("a:srgbClr", NS)
    if srgb is not None and HEX_COLOR_RE.fullmatch(srgb.get("val", "")):
        return f"#{srgb.get('val').lower()}"
    sys_clr = color_elem.find("a:sysClr", NS)
    if sys_clr is not None and HEX_COLOR_RE.fullmatch(sys_clr.get("lastClr", "")):
        return f"#{sys_clr.get('lastClr').lower()}"
    return None


def _font_variants(font_elem) -> Dict[str, str]:
    variants = {}
    if font_elem is None:
        return variants
    for slot in ("latin", "ea", "cs"):
        child = font_elem.find(f"a:{slot}", NS)
        if child is not None and child.get("typeface"):
            variants[slot] = child.get("typeface")
    return variants


def parse_theme(xml_bytes: bytes) -> ThemeInfo:
    """Reads the color and font scheme of a theme part. Missing nodes keep their defaults."""
    root = etree.fromstring(xml_bytes, _parser())

    colors = {}
    clr_scheme = root.find(".//a:clrScheme", NS)
    if clr_scheme is not None:
        for name in SCHEME_COLOR_NAMES:
            elem = clr_scheme.find(f"a:{name}", NS)
            if elem is not None:
                value = _color_value(elem)
                if value:
                    colors[name] = value

    color_scheme = ColorScheme(**{
        role: colors[scheme_name]
        for role, scheme_name in ROLE_COLORS.items() if scheme_name in colors
    })

    font_scheme = FontScheme()
    fnt = root.find(".//a:fontScheme", NS)
    if fnt is not None:
        major = _font_variants(fnt.find("a:majorFont", NS))
        minor = _font_variants(fnt.find("a:minorFont", NS))
        font_scheme = FontScheme(
            major_font=major.get("latin") or font_scheme.major_font,
            minor_font=minor.get("latin") or font_scheme.minor_font,
            major_variants=major,
            minor_variants=minor,
        )

    return ThemeInfo(color_scheme=color_scheme, font_scheme=font_scheme, colors=colors)


def extract_theme(archive: Archive) -> ThemeInfo:
    path = _find_theme_entry(archive)
    if path is None:
        logger.debug("No theme entry found, using default theme")
        return ThemeInfo()
    return parse_theme(archive.read_bytes(path))


def extract_images(archive: Archive) -> List[ImageInfo]:
    images = []
    for path in archive.names():
        if not path.startswith(MEDIA_DIR):
            continue
        match = IMAGE_RE.search(path)
        if match:
            images.append(ImageInfo(name=posixpath.basename(path), path=path, type=match.group(1).lower()))
    return images


def extract_app_properties(archive: Archive) -> Dict[str, str]:
    if APP_PROPERTIES not in archive:
        return {}
    root = etree.fromstring(archive.read_bytes(APP_PROPERTIES), _parser())
    props = {}
    for child in root:
        if not isinstance(child.tag, str):
            continue
        text = (child.text or "").strip()
        if text:
            props[etree.QName(child).localname] = text
    return props


def _safely(step: str, func, archive: Archive, default):
    try:
        return func(archive)
    except Exception as e:
        logger.debug(f"Template {step} step failed, using default: {e}")
        return default() if callable(default) else default


def analyze_template(template_bytes: bytes) -> TemplateAnalysis:
    """Derives layouts, theme, media and metadata from a template package.

    Never raises. Each sub-step falls back to its own default so that a malformed
    template can never block generation. If the package itself cannot be opened the
    result carries empty layouts and ``metadata.analyzed == False``.
    """
    try:
        archive = Archive.from_bytes(template_bytes)
    except Exception as e:
        logger.warning(f"Template analysis failed, package unreadable: {e}")
        return TemplateAnalysis(
            layouts=[],
            theme=ThemeInfo(),
            images=[],
            metadata={"analyzed": False, "error": str(e)},
        )

    layouts = _safely("layouts", extract_layouts, archive, list)
    if not layouts:
        layouts = default_layouts()

    analysis = TemplateAnalysis(
        layouts=layouts,
        master_slides=_safely("masters", extract_master_slides, archive, list),
        theme=_safely("theme", extract_theme, archive, ThemeInfo),
        images=_safely("images", extract_images, archive, list),
        metadata={
            "analyzed": True,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "properties": _safely("metadata", extract_app_properties, archive, dict),
        },
    )
    logger.info(f"Analyzed template: {len(analysis.layouts)} layouts, {len(analysis.images)} images")
    return analysis
