from __future__ import annotations

"""XML marshalling for problem details."""

import re
from typing import Any

from lxml import etree

from .detail import FIELD_ORDER, ProblemDetail, ProblemDetailFormatError

ROOT_TAG = "problemDetail"
CAUSE_TAG = "cause"
XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>\n'
REPLACEMENT_CHARACTER = "\ufffd"

# Anything outside the XML 1.0 Char production: control bytes, lone surrogates.
_XML_ILLEGAL_RE = re.compile("[^\t\n\r\u0020-\ud7ff\ue000-\ufffd\U00010000-\U0010ffff]")

# Untrusted bodies: no entity expansion, no DTD or network fetches.
_PARSER = etree.XMLParser(
    resolve_entities=False,
    no_network=True,
    load_dtd=False,
    remove_comments=True,
)


def is_xml_media_type(media_type: str | None) -> bool:
    if not media_type:
        return False
    essence = media_type.split(";", 1)[0].strip().lower()
    return essence.endswith("/xml") or essence.endswith("+xml")


def xml_safe(text: str) -> str:
    """Replace characters XML 1.0 cannot carry with U+FFFD."""

    return _XML_ILLEGAL_RE.sub(REPLACEMENT_CHARACTER, text)


def _to_element(detail: ProblemDetail, tag: str) -> etree._Element:
    element = etree.Element(tag)
    for name in FIELD_ORDER:
        value = getattr(detail, name)
        if value is None:
            continue
        if name == CAUSE_TAG:
            element.append(_to_element(value, CAUSE_TAG))
        else:
            etree.SubElement(element, name).text = xml_safe(str(value))
    return element


def to_xml(detail: ProblemDetail) -> str:
    root = _to_element(detail, ROOT_TAG)
    etree.indent(root, space="    ")
    return XML_DECLARATION + etree.tostring(root, encoding="unicode") + "\n"


def _from_element(element: etree._Element) -> dict[str, Any]:
    data: dict[str, Any] = {}
    for child in element:
        if not isinstance(child.tag, str):
            continue
        name = etree.QName(child).localname
        if name == CAUSE_TAG:
            data[name] = _from_element(child)
        elif name in FIELD_ORDER:
            if child.text:
                data[name] = child.text
    return data


def from_xml(text: str | bytes) -> ProblemDetail:
    raw = text.encode("utf-8") if isinstance(text, str) else text
    if not raw.strip():
        raise ProblemDetailFormatError("empty problem detail xml")
    try:
        root = etree.fromstring(raw, _PARSER)
    except etree.XMLSyntaxError as exc:
        raise ProblemDetailFormatError(f"invalid problem detail xml: {exc}") from exc
    if root is None or etree.QName(root).localname != ROOT_TAG:
        raise ProblemDetailFormatError(f"expected a <{ROOT_TAG}> root element")
    return ProblemDetail.from_dict(_from_element(root))


__all__ = ["ROOT_TAG", "XML_DECLARATION", "from_xml", "is_xml_media_type", "to_xml", "xml_safe"]
