"""
Shared fixtures: in-memory presentation packages and isolated log locations.

Packages are built with zipfile and contain only the parts the deck generator
touches: content types, the presentation part and its relationships, and the
slides with their relationship parts.
"""

import io
import zipfile
from typing import Dict, List, Optional

import pytest
from lxml import etree

NS = {
    "a": "http://schemas.openxmlformats.org/drawingml/2006/main",
    "p": "http://schemas.openxmlformats.org/presentationml/2006/main",
    "r": "http://schemas.openxmlformats.org/officeDocument/2006/relationships",
    "ct": "http://schemas.openxmlformats.org/package/2006/content-types",
    "rel": "http://schemas.openxmlformats.org/package/2006/relationships",
}

XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>\n'

NAMESPACE_DECLARATIONS = f'xmlns:a="{NS["a"]}" xmlns:r="{NS["r"]}" xmlns:p="{NS["p"]}"'

SLIDE_REL_TYPE = "http://schemas.openxmlformats.org/officeDocument/2006/relationships/slide"
LAYOUT_REL_TYPE = "http://schemas.openxmlformats.org/officeDocument/2006/relationships/slideLayout"
NOTES_REL_TYPE = "http://schemas.openxmlformats.org/officeDocument/2006/relationships/notesSlide"

# One candidate slot: bold name, job lines, education lines, and a company loop
SLOT_MARKUP = (
    '<a:p><a:r><a:rPr lang="en-US" sz="1400" b="1"/>'
    "<a:t>{?NAME_%(s)d}{{NAME_%(s)d}}{/?NAME_%(s)d}</a:t></a:r></a:p>"
    '<a:p><a:pPr marL="0"/><a:r><a:rPr lang="en-US" sz="1000"/>'
    "<a:t>{{WORK_HISTORY_TEXT_%(s)d}}</a:t></a:r></a:p>"
    '<a:p><a:r><a:rPr lang="en-US" sz="900" i="1"/>'
    "<a:t>{{EDUCATION_TEXT_%(s)d}}</a:t></a:r></a:p>"
    '<a:p><a:r><a:rPr lang="en-US" sz="800"/>'
    "<a:t>{?WORK_HISTORY_%(s)d}{#WORK_HISTORY_%(s)d}[{{COMPANY}}]{/WORK_HISTORY_%(s)d}{/?WORK_HISTORY_%(s)d}</a:t>"
    "</a:r></a:p>"
)


def make_slide_xml(body: str) -> str:
    """Wrap DrawingML paragraphs in a minimal slide part."""
    return (
        XML_DECLARATION
        + f"<p:sld {NAMESPACE_DECLARATIONS}><p:cSld><p:spTree><p:sp><p:txBody><a:bodyPr/>"
        + body
        + "</p:txBody></p:sp></p:spTree></p:cSld></p:sld>"
    )


def make_candidate_slide(capacity: int = 4) -> str:
    """Slide with ``capacity`` candidate slots."""
    return make_slide_xml("".join(SLOT_MARKUP % {"s": slot} for slot in range(1, capacity + 1)))


def make_static_slide(text: str = "Thank you") -> str:
    """Slide without placeholders."""
    return make_slide_xml(f'<a:p><a:r><a:rPr lang="en-US"/><a:t>{text}</a:t></a:r></a:p>')


def build_pptx(slides: List[str], notes_for: Optional[List[int]] = None) -> bytes:
    """
    Build a minimal presentation package.

    Args:
        slides: Slide part texts; slide N is slides[N - 1]
        notes_for: Slide numbers whose relationships include a notes slide

    Returns:
        Package bytes
    """
    notes_for = notes_for or []
    numbers = range(1, len(slides) + 1)

    overrides = "".join(
        f'<Override PartName="/ppt/slides/slide{n}.xml" '
        'ContentType="application/vnd.openxmlformats-officedocument.presentationml.slide+xml"/>'
        for n in numbers
    )
    parts: Dict[str, str] = {
        "[Content_Types].xml": (
            XML_DECLARATION + f'<Types xmlns="{NS["ct"]}">'
            '<Default Extension="rels" ContentType="application/vnd.openxmlformats-package.relationships+xml"/>'
            '<Default Extension="xml" ContentType="application/xml"/>'
            '<Override PartName="/ppt/presentation.xml" '
            'ContentType="application/vnd.openxmlformats-officedocument.presentationml.presentation.main+xml"/>'
            + overrides
            + "</Types>"
        ),
        "_rels/.rels": (
            XML_DECLARATION + f'<Relationships xmlns="{NS["rel"]}">'
            '<Relationship Id="rId1" '
            'Type="http://schemas.openxmlformats.org/officeDocument/2006/relationships/officeDocument" '
            'Target="ppt/presentation.xml"/></Relationships>'
        ),
        "ppt/presentation.xml": (
            XML_DECLARATION + f"<p:presentation {NAMESPACE_DECLARATIONS}><p:sldIdLst>"
            + "".join(f'<p:sldId id="{255 + n}" r:id="rId{n}"/>' for n in numbers)
            + '</p:sldIdLst><p:sldSz cx="9144000" cy="6858000"/></p:presentation>'
        ),
        "ppt/_rels/presentation.xml.rels": (
            XML_DECLARATION + f'<Relationships xmlns="{NS["rel"]}">'
            + "".join(
                f'<Relationship Id="rId{n}" Type="{SLIDE_REL_TYPE}" Target="slides/slide{n}.xml"/>'
                for n in numbers
            )
            + "</Relationships>"
        ),
    }

    for n, text in zip(numbers, slides):
        parts[f"ppt/slides/slide{n}.xml"] = text
        notes = (
            f'<Relationship Id="rId2" Type="{NOTES_REL_TYPE}" Target="../notesSlides/notesSlide{n}.xml"/>'
            if n in notes_for
            else ""
        )
        parts[f"ppt/slides/_rels/slide{n}.xml.rels"] = (
            XML_DECLARATION + f'<Relationships xmlns="{NS["rel"]}">'
            f'<Relationship Id="rId1" Type="{LAYOUT_REL_TYPE}" Target="../slideLayouts/slideLayout1.xml"/>'
            + notes
            + "</Relationships>"
        )

    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as container:
        for name, text in parts.items():
            info = zipfile.ZipInfo(name, date_time=(2024, 1, 2, 3, 4, 6))
            info.compress_type = zipfile.ZIP_DEFLATED
            container.writestr(info, text.encode("utf-8"))
    return buffer.getvalue()


def read_parts(data: bytes) -> Dict[str, bytes]:
    """All entries of a package, in container order."""
    with zipfile.ZipFile(io.BytesIO(data)) as container:
        return {info.filename: container.read(info) for info in container.infolist()}


def slide_texts(xml: bytes) -> List[str]:
    """Text of every a:t element of a part, in document order."""
    root = etree.fromstring(xml)
    return [node.text or "" for node in root.iter(f"{{{NS['a']}}}t")]


@pytest.fixture
def package_builder():
    """Callable building a package from slide texts."""
    return build_pptx


@pytest.fixture
def candidate_slide():
    """Callable building a slide with N candidate slots."""
    return make_candidate_slide


@pytest.fixture
def static_slide():
    """Callable building a slide without placeholders."""
    return make_static_slide


@pytest.fixture
def slide_body():
    """Callable wrapping DrawingML paragraphs in a slide."""
    return make_slide_xml


@pytest.fixture(autouse=True)
def isolated_logs(tmp_path, monkeypatch):
    """Send run logs and pipeline events to the test's temporary directory."""
    logs = tmp_path / "logs"
    monkeypatch.setattr("longlist.utils.event_logging.PIPELINE_EVENTS_FILE", logs / "events.log")
    monkeypatch.setattr("longlist.contexts.templating.template_engine.LOGS_PATH", logs)
    return logs


@pytest.fixture
def package_parts():
    """Callable returning {name: bytes} for a package."""
    return read_parts


@pytest.fixture
def part_texts():
    """Callable returning the a:t texts of a part."""
    return slide_texts
