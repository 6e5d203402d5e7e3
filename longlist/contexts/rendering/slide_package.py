"""
Slide Package Operations

Slide-level edits on a presentation package: listing slide parts in order and
duplicating a slide so a deck can hold more pages than the template ships with.

A duplicated slide must be registered in three places besides its own part:
[Content_Types].xml (an Override for the new part), the presentation's
relationships, and the slide id list in ppt/presentation.xml. These parts are
edited with lxml; the slide XML itself is copied verbatim.
"""

import re
from typing import List, Optional

from lxml import etree

from longlist.contexts.rendering.archive_store import PackageArchive
from longlist.contexts.rendering.logger import log_slide_added
from longlist.contexts.templating.defaults import SLIDE_PART_PATTERN
from longlist.contexts.templating.exceptions import TemplateLoadError

CONTENT_TYPES_PART = "[Content_Types].xml"
PRESENTATION_PART = "ppt/presentation.xml"
PRESENTATION_RELS_PART = "ppt/_rels/presentation.xml.rels"

SLIDE_CONTENT_TYPE = "application/vnd.openxmlformats-officedocument.presentationml.slide+xml"
SLIDE_RELATIONSHIP_TYPE = "http://schemas.openxmlformats.org/officeDocument/2006/relationships/slide"
NOTES_RELATIONSHIP_TYPE = "http://schemas.openxmlformats.org/officeDocument/2006/relationships/notesSlide"

NS = {
    "ct": "http://schemas.openxmlformats.org/package/2006/content-types",
    "rel": "http://schemas.openxmlformats.org/package/2006/relationships",
    "p": "http://schemas.openxmlformats.org/presentationml/2006/main",
    "r": "http://schemas.openxmlformats.org/officeDocument/2006/relationships",
}

# Slide ids below 256 are reserved
MIN_SLIDE_ID = 256

# Elements that may precede p:sldIdLst inside p:presentation
_SLD_ID_LST_PREDECESSORS = ("sldMasterIdLst", "notesMasterIdLst", "handoutMasterIdLst")

_SLIDE_PART_RE = re.compile(SLIDE_PART_PATTERN)


def slide_number(part_name: str) -> int:
    """
    Number of a slide part (e.g., "ppt/slides/slide3.xml" -> 3).

    Raises:
        ValueError: If the name is not a slide part
    """
    match = _SLIDE_PART_RE.match(part_name)
    if not match:
        raise ValueError(f"Not a slide part: {part_name}")
    return int(match.group(1))


def is_slide_part(part_name: str) -> bool:
    return _SLIDE_PART_RE.match(part_name) is not None


def list_slide_parts(archive: PackageArchive) -> List[str]:
    """Slide part names ordered by slide number."""
    return sorted((name for name in archive.names() if is_slide_part(name)), key=slide_number)


def slide_rels_part(part_name: str) -> str:
    """Relationships part of a slide (ppt/slides/_rels/slideN.xml.rels)."""
    folder, _, filename = part_name.rpartition("/")
    return f"{folder}/_rels/{filename}.rels"


def _parse(archive: PackageArchive, name: str) -> etree._Element:
    try:
        return etree.fromstring(archive.read_bytes(name))
    except etree.XMLSyntaxError as e:
        raise TemplateLoadError("Package part is not well-formed XML", part_name=name, original_error=e)


def _serialize(root: etree._Element) -> bytes:
    return etree.tostring(root, xml_declaration=True, encoding="UTF-8", standalone=True)


def _register_content_type(archive: PackageArchive, part_name: str) -> None:
    root = _parse(archive, CONTENT_TYPES_PART)
    part_uri = f"/{part_name}"

    for override in root.findall("ct:Override", namespaces=NS):
        if override.get("PartName") == part_uri:
            return

    override = etree.SubElement(root, f"{{{NS['ct']}}}Override")
    override.set("PartName", part_uri)
    override.set("ContentType", SLIDE_CONTENT_TYPE)
    archive.write_bytes(CONTENT_TYPES_PART, _serialize(root))


def _add_presentation_relationship(archive: PackageArchive, part_name: str) -> str:
    root = _parse(archive, PRESENTATION_RELS_PART)

    used = set()
    for relationship in root.findall("rel:Relationship", namespaces=NS):
        match = re.fullmatch(r"rId(\d+)", relationship.get("Id", ""))
        if match:
            used.add(int(match.group(1)))
    rel_id = f"rId{max(used, default=0) + 1}"

    relationship = etree.SubElement(root, f"{{{NS['rel']}}}Relationship")
    relationship.set("Id", rel_id)
    relationship.set("Type", SLIDE_RELATIONSHIP_TYPE)
    relationship.set("Target", part_name[len("ppt/") :])
    archive.write_bytes(PRESENTATION_RELS_PART, _serialize(root))
    return rel_id


def _relationship_id_for(archive: PackageArchive, part_name: str) -> Optional[str]:
    root = _parse(archive, PRESENTATION_RELS_PART)
    target = part_name[len("ppt/") :]
    for relationship in root.findall("rel:Relationship", namespaces=NS):
        if (relationship.get("Target") or "").lstrip("/") in (target, part_name):
            return relationship.get("Id")
    return None


def _find_sld_id_lst(root: etree._Element) -> etree._Element:
    sld_id_lst = root.find("p:sldIdLst", namespaces=NS)
    if sld_id_lst is not None:
        return sld_id_lst

    sld_id_lst = etree.Element(f"{{{NS['p']}}}sldIdLst")
    index = 0
    for position, child in enumerate(root):
        if etree.QName(child).localname in _SLD_ID_LST_PREDECESSORS:
            index = position + 1
    root.insert(index, sld_id_lst)
    return sld_id_lst


def _add_slide_id(archive: PackageArchive, rel_id: str, after_rel_id: Optional[str]) -> None:
    root = _parse(archive, PRESENTATION_PART)
    sld_id_lst = _find_sld_id_lst(root)
    entries = sld_id_lst.findall("p:sldId", namespaces=NS)

    next_id = max([int(entry.get("id")) for entry in entries] + [MIN_SLIDE_ID - 1]) + 1

    sld_id = etree.Element(f"{{{NS['p']}}}sldId")
    sld_id.set("id", str(next_id))
    sld_id.set(f"{{{NS['r']}}}id", rel_id)

    position = len(sld_id_lst)
    for index, entry in enumerate(sld_id_lst):
        if after_rel_id and entry.get(f"{{{NS['r']}}}id") == after_rel_id:
            position = index + 1
    sld_id_lst.insert(position, sld_id)
    archive.write_bytes(PRESENTATION_PART, _serialize(root))


def _copy_slide_relationships(archive: PackageArchive, source_part: str, new_part: str) -> None:
    source_rels = slide_rels_part(source_part)
    if not archive.has(source_rels):
        return

    root = _parse(archive, source_rels)
    # A notes slide belongs to exactly one slide, so the copy goes without notes
    for relationship in root.findall("rel:Relationship", namespaces=NS):
        if relationship.get("Type") == NOTES_RELATIONSHIP_TYPE:
            root.remove(relationship)
    archive.write_bytes(slide_rels_part(new_part), _serialize(root))


def duplicate_slide(
    archive: PackageArchive,
    source_part: str,
    after_part: Optional[str] = None,
    text: Optional[str] = None,
) -> str:
    """
    Add a copy of a slide to the package and register it in the presentation.

    Args:
        archive: Package to modify
        source_part: Slide to copy (e.g., "ppt/slides/slide2.xml")
        after_part: Slide the copy is shown after (defaults to source_part)
        text: Content for the new part (defaults to the source part's current bytes)

    Returns:
        Name of the new slide part (numbered after the highest existing slide)

    Raises:
        TemplateLoadError: If the source slide or a presentation part is missing
    """
    if not archive.has(source_part):
        raise TemplateLoadError("Cannot duplicate missing slide", part_name=source_part)

    number = max((slide_number(name) for name in list_slide_parts(archive)), default=0) + 1
    new_part = f"ppt/slides/slide{number}.xml"

    if text is None:
        archive.write_bytes(new_part, archive.read_bytes(source_part))
    else:
        archive.write_text(new_part, text)

    _copy_slide_relationships(archive, source_part, new_part)
    _register_content_type(archive, new_part)

    after_rel_id = _relationship_id_for(archive, after_part or source_part)
    rel_id = _add_presentation_relationship(archive, new_part)
    _add_slide_id(archive, rel_id, after_rel_id)

    log_slide_added(source_part, new_part)
    return new_part
