"""CWA catalog XML/ZIP decoding.

Turns catalog XML into a generic tree where every element's children
are grouped by tag into lists:

    <Data><Earthquake><Shindo><ShindoValue>3</ShindoValue></Shindo></Earthquake></Data>
    →  {"Data": {"Earthquake": [{"Shindo": [{"ShindoValue": ["3"]}]}]}}

Text-only elements become strings; attributes go under ``"$"`` and the
text of an element that also has attributes or children under ``"_"``.
Namespaces are dropped from tag names.
"""

import io
import xml.etree.ElementTree as ET
import zipfile


class CatalogFormatError(ValueError):
    """A catalog payload could not be decoded."""


def _local(tag):
    return tag.rsplit("}", 1)[-1]


def element_to_tree(elem):
    """Convert one element (recursively) into the generic tree shape."""
    children = list(elem)
    text = (elem.text or "").strip()
    if not children and not elem.attrib:
        return text

    node = {}
    if elem.attrib:
        node["$"] = {_local(k): v for k, v in elem.attrib.items()}
    if text:
        node["_"] = text
    for child in children:
        node.setdefault(_local(child.tag), []).append(element_to_tree(child))
    return node


def parse_catalog_xml(data):
    """Parse catalog XML (bytes or str) into ``{root_tag: tree}``.

    Raises:
        CatalogFormatError: If the payload is not well-formed XML.
    """
    try:
        root = ET.fromstring(data)
    except ET.ParseError as e:
        raise CatalogFormatError(f"invalid catalog XML: {e}") from e
    return {_local(root.tag): element_to_tree(root)}


def extract_catalog_xml(archive):
    """Return the bytes of the first file in a catalog ZIP archive.

    The history feed ships as a ZIP holding a single XML document.

    Raises:
        CatalogFormatError: If the archive is unreadable or holds no file.
    """
    try:
        with zipfile.ZipFile(io.BytesIO(archive)) as zf:
            names = [info.filename for info in zf.infolist() if not info.is_dir()]
            if not names:
                raise CatalogFormatError("catalog archive is empty")
            return zf.read(names[0])
    except zipfile.BadZipFile as e:
        raise CatalogFormatError(f"invalid catalog archive: {e}") from e
