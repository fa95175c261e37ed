import logging
import re
from typing import List, Optional
from xml.sax.saxutils import escape

from texttoslides.archive import Archive
from texttoslides.errors import BuildError
from texttoslides.schemas import SlideStructure, Slide, TemplateAnalysis, ThemeInfo

logger = logging.getLogger(__name__)

NS_A = "http://schemas.openxmlformats.org/drawingml/2006/main"
NS_R = "http://schemas.openxmlformats.org/officeDocument/2006/relationships"
NS_P = "http://schemas.openxmlformats.org/presentationml/2006/main"
NS_PKG_RELS = "http://schemas.openxmlformats.org/package/2006/relationships"
NS_CONTENT_TYPES = "http://schemas.openxmlformats.org/package/2006/content-types"

REL_OFFICE_DOCUMENT = "http://schemas.openxmlformats.org/officeDocument/2006/relationships/officeDocument"
REL_SLIDE = "http://schemas.openxmlformats.org/officeDocument/2006/relationships/slide"

CT_PRESENTATION = "application/vnd.openxmlformats-officedocument.presentationml.presentation.main+xml"
CT_SLIDE = "application/vnd.openxmlformats-officedocument.presentationml.slide+xml"
CT_RELS = "application/vnd.openxmlformats-package.relationships+xml"

XML_DECL = '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>\n'

# Slide IDs below 256 are reserved by the format
FIRST_SLIDE_ID = 256

# 4:3, in EMU
SLIDE_WIDTH = 9144000
SLIDE_HEIGHT = 6858000

TITLE_BOX = (457200, 274638, 8229600, 1143000)
BODY_BOX = (457200, 1600200, 8229600, 4525963)

TITLE_SIZE = 3200  # hundredths of a point
BODY_SIZE = 2000
BULLET = "•"

HEX_COLOR_RE = re.compile(r"[0-9A-Fa-f]{6}")
_ILLEGAL_XML_CHARS = re.compile("[\x00-\x08\x0b\x0c\x0e-\x1f\ud800-\udfff\ufffe\uffff]")


def escape_xml(text: str) -> str:
    """Escapes & < > " ' (ampersand first) after dropping characters XML 1.0 cannot carry."""
    text = _ILLEGAL_XML_CHARS.sub("", text)
    return escape(text, {'"': "&quot;", "'": "&apos;", "\r": "&#13;"})


def slide_path(index: int) -> str:
    """Package path of the 1-based slide ``index``."""
    return f"ppt/slides/slide{index}.xml"


# --- Structural parts ---

def content_types_xml(slide_count: int) -> str:
    overrides = [
        f'<Override PartName="/ppt/presentation.xml" ContentType="{CT_PRESENTATION}"/>'
    ]
    for i in range(1, slide_count + 1):
        overrides.append(f'<Override PartName="/{slide_path(i)}" ContentType="{CT_SLIDE}"/>')
    return (
        XML_DECL
        + f'<Types xmlns="{NS_CONTENT_TYPES}">'
        + f'<Default Extension="rels" ContentType="{CT_RELS}"/>'
        + '<Default Extension="xml" ContentType="application/xml"/>'
        + "".join(overrides)
        + "</Types>"
    )


def root_rels_xml() -> str:
    return (
        XML_DECL
        + f'<Relationships xmlns="{NS_PKG_RELS}">'
        + f'<Relationship Id="rId1" Type="{REL_OFFICE_DOCUMENT}" Target="ppt/presentation.xml"/>'
        + "</Relationships>"
    )


def presentation_xml(slide_count: int) -> str:
    # Slide id at position i is bound to rId{i+1}; presentation_rels_xml must stay aligned
    slide_ids = "".join(
        f'<p:sldId id="{FIRST_SLIDE_ID + i}" r:id="rId{i + 1}"/>' for i in range(slide_count)
    )
    return (
        XML_DECL
        + f'<p:presentation xmlns:a="{NS_A}" xmlns:r="{NS_R}" xmlns:p="{NS_P}">'
        + f"<p:sldIdLst>{slide_ids}</p:sldIdLst>"
        + f'<p:sldSz cx="{SLIDE_WIDTH}" cy="{SLIDE_HEIGHT}" type="screen4x3"/>'
        + f'<p:notesSz cx="{SLIDE_HEIGHT}" cy="{SLIDE_WIDTH}"/>'
        + "</p:presentation>"
    )


def presentation_rels_xml(slide_count: int) -> str:
    rels = "".join(
        f'<Relationship Id="rId{i}" Type="{REL_SLIDE}" Target="slides/slide{i}.xml"/>'
        for i in range(1, slide_count + 1)
    )
    return XML_DECL + f'<Relationships xmlns="{NS_PKG_RELS}">{rels}</Relationships>'


# --- Slide content ---

def body_text(content) -> str:
    """Flattens slide content into bullet text, or '' when there is nothing to show."""
    if isinstance(content, list):
        joined = f"\n{BULLET} ".join(content)
    else:
        joined = content or ""
    if not joined:
        return ""
    return f"{BULLET} {joined}"


def _run_props(size: int, font: str, bold: bool = False, color: Optional[str] = None) -> str:
    attrs = f' lang="en-US" sz="{size}"' + (' b="1"' if bold else "") + ' dirty="0"'
    fill = ""
    rgb = (color or "").lstrip("#")
    if HEX_COLOR_RE.fullmatch(rgb):
        fill = f'<a:solidFill><a:srgbClr val="{rgb.upper()}"/></a:solidFill>'
    typeface = escape_xml(font)
    return f'<a:rPr{attrs}>{fill}<a:latin typeface="{typeface}"/><a:cs typeface="{typeface}"/></a:rPr>'


def _paragraphs(text: str, run_props: str) -> str:
    return "".join(
        f"<a:p><a:r>{run_props}<a:t>{escape_xml(line)}</a:t></a:r></a:p>"
        for line in text.split("\n")
    )


def _shape(shape_id: int, name: str, placeholder: str, box, text: str, run_props: str) -> str:
    x, y, cx, cy = box
    ph = '<p:ph type="title"/>' if placeholder == "title" else f'<p:ph type="{placeholder}" idx="1"/>'
    return (
        "<p:sp>"
        f'<p:nvSpPr><p:cNvPr id="{shape_id}" name="{name}"/>'
        '<p:cNvSpPr><a:spLocks noGrp="1"/></p:cNvSpPr>'
        f"<p:nvPr>{ph}</p:nvPr></p:nvSpPr>"
        f'<p:spPr><a:xfrm><a:off x="{x}" y="{y}"/><a:ext cx="{cx}" cy="{cy}"/></a:xfrm></p:spPr>'
        f"<p:txBody><a:bodyPr/><a:lstStyle/>{_paragraphs(text, run_props)}</p:txBody>"
        "</p:sp>"
    )


def slide_xml(slide: Slide, index: int, theme: ThemeInfo) -> str:
    """Renders one slide. ``index`` is the 1-based output position, not ``slide.slide_number``."""
    fonts = theme.font_scheme
    title = slide.title or f"Slide {index}"
    shapes = [
        _shape(2, "Title 1", "title", TITLE_BOX, title,
               _run_props(TITLE_SIZE, fonts.major_font, bold=True, color=theme.color_scheme.primary))
    ]
    body = body_text(slide.content)
    if body:
        shapes.append(
            _shape(3, "Content Placeholder 2", "body", BODY_BOX, body,
                   _run_props(BODY_SIZE, fonts.minor_font))
        )
    return (
        XML_DECL
        + f'<p:sld xmlns:a="{NS_A}" xmlns:r="{NS_R}" xmlns:p="{NS_P}">'
        + "<p:cSld><p:spTree>"
        + '<p:nvGrpSpPr><p:cNvPr id="1" name=""/><p:cNvGrpSpPr/><p:nvPr/></p:nvGrpSpPr>'
        + "<p:grpSpPr/>"
        + "".join(shapes)
        + "</p:spTree></p:cSld>"
        + '<p:clrMapOvr><a:masterClrMapping/></p:clrMapOvr>'
        + "</p:sld>"
    )


def build_presentation(slide_structure: SlideStructure, template_bytes: bytes,
                       template_analysis: TemplateAnalysis) -> bytes:
    """Synthesizes a new package from the slide structure.

    The template's own slides, masters and media are not copied; only the theme
    fonts and primary color recovered by the analyzer are applied. ``template_bytes``
    is accepted so callers can pass the upload through unchanged.
    """
    slides: List[Slide] = slide_structure.slides
    count = len(slides)
    if count == 0:
        logger.warning("Building a presentation with no slides")
    if slide_structure.total_slides != count:
        logger.debug(f"totalSlides={slide_structure.total_slides} but {count} slides given, using {count}")
    logger.debug(f"Template upload of {len(template_bytes or b'')} bytes is not copied into the output")

    theme = template_analysis.theme if template_analysis is not None else ThemeInfo()

    try:
        archive = Archive()
        archive.write("[Content_Types].xml", content_types_xml(count))
        archive.write("_rels/.rels", root_rels_xml())
        archive.write("ppt/presentation.xml", presentation_xml(count))
        archive.write("ppt/_rels/presentation.xml.rels", presentation_rels_xml(count))

        for index, slide in enumerate(slides, start=1):
            if slide.slide_number and slide.slide_number != index:
                logger.debug(f"Slide at position {index} claims slideNumber={slide.slide_number}")
            archive.write(slide_path(index), slide_xml(slide, index, theme))

        data = archive.serialize()
    except Exception as e:
        logger.error(f"Presentation building error: {e}")
        raise BuildError(f"Failed to build presentation: {e}") from e

    logger.info(f"Built presentation with {count} slides ({len(data)} bytes)")
    return data
