"""
Reading and writing mission XML.

The codec walks the field metadata of the schema binding (see
pymalmo.classes.base), so adding an element to the binding is enough for it to
be parsed and serialized. Elements the binding does not model are kept as
UnknownElement entries on the nearest container and written back in place.
"""

import copy
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field, fields
from typing import Any, Dict, List, Optional, Tuple, Type, Union

from pymalmo.classes.base import XML, SchemaObject, UnknownElement
from pymalmo.classes.mission_objects import (
    Mission, XML_NAMESPACE, XSI_NAMESPACE, SCHEMA_LOCATION
)
from pymalmo.misc.logger import create_logger

_logger = create_logger(verbose=False, name="XMLCodec")

XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8" standalone="no" ?>'


class MissionXMLError(ValueError):
    """Raised when mission XML cannot be read into the schema binding."""


@dataclass
class ParseReport:
    """What the parser saw besides the modelled content. Consumed by the validator."""
    namespace: Optional[str] = None
    unknown_elements: List[str] = field(default_factory=list)
    duplicate_elements: List[str] = field(default_factory=list)
    unknown_attributes: List[str] = field(default_factory=list)


# --- Value helpers ---

def _format_value(val: Any) -> str:
    """Format a Python value as XML schema text."""
    if isinstance(val, bool):
        return "true" if val else "false"
    if isinstance(val, float):
        # Integer-like floats are written without a decimal point (10000.0 -> 10000)
        if val.is_integer():
            return str(int(val))
        return str(val)
    return str(val)


def _parse_value(text: Optional[str], type_: type, where: str) -> Any:
    """Convert XML text to the declared Python type."""
    if type_ is str:
        return text if text is not None else ""
    raw = (text or "").strip()
    if type_ is bool:
        if raw in ("true", "1"):
            return True
        if raw in ("false", "0"):
            return False
        raise MissionXMLError(f"{where}: expected a boolean, got '{raw}'")
    try:
        return type_(raw)
    except ValueError as e:
        raise MissionXMLError(f"{where}: expected {type_.__name__}, got '{raw}'") from e


def _split_tag(tag: str) -> Tuple[Optional[str], str]:
    """Split '{uri}local' into (uri, local)."""
    if tag.startswith("{"):
        uri, local = tag[1:].split("}", 1)
        return uri, local
    return None, tag


def _localize(elem: ET.Element) -> ET.Element:
    """Prepare an unmodelled subtree for re-serialization.

    The mission namespace is dropped so the subtree is written unprefixed, and
    whitespace-only text is cleared so formatting comes from the serializer.
    """
    for node in elem.iter():
        if isinstance(node.tag, str):
            uri, local = _split_tag(node.tag)
            if uri == XML_NAMESPACE:
                node.tag = local
        if node.text is not None and not node.text.strip():
            node.text = None
        if node.tail is not None and not node.tail.strip():
            node.tail = None
    elem.tail = None
    return elem


def _fields_by_tag(cls: Type[SchemaObject]) -> Dict[str, Any]:
    by_tag = {}
    for f in fields(cls):
        kind = f.metadata.get(XML)
        if kind in ("element", "elements"):
            by_tag[f.metadata["name"]] = f
        elif kind in ("child", "children"):
            for tag in f.metadata["types"]:
                by_tag[tag] = f
    return by_tag


# --- Reading ---

def _read_attributes(cls: Type[SchemaObject], elem: ET.Element, report: ParseReport, path: str) -> Dict[str, Any]:
    kwargs: Dict[str, Any] = {}
    known = set()

    for f in fields(cls):
        if f.metadata.get(XML) != "attribute":
            continue
        name = f.metadata["name"]
        known.add(name)
        raw = elem.get(name)
        if raw is not None:
            kwargs[f.name] = _parse_value(raw, f.metadata["type"], f"{path}/@{name}")

    extra = {}
    for name, raw in elem.attrib.items():
        if name in known:
            continue
        uri, local = _split_tag(name)
        if uri == XSI_NAMESPACE:
            # Schema hints; the root's are regenerated on write
            continue
        report.unknown_attributes.append(f"{path}/@{local}")
        extra[name] = raw
    if extra:
        kwargs["unknown_attributes"] = extra
    return kwargs


def _read_object(cls: Type[SchemaObject], elem: ET.Element, report: ParseReport, path: str) -> SchemaObject:
    kwargs = _read_attributes(cls, elem, report, path)
    by_tag = _fields_by_tag(cls)
    last_field: Optional[str] = None

    for sub in elem:
        if not isinstance(sub.tag, str):
            continue
        uri, local = _split_tag(sub.tag)
        f = by_tag.get(local) if uri in (None, XML_NAMESPACE) else None
        sub_path = f"{path}/{local}"

        if f is None:
            report.unknown_elements.append(sub_path)
            previous = kwargs.get(last_field)
            position = len(previous) if isinstance(previous, list) else None
            kwargs.setdefault("unknown", []).append(UnknownElement(last_field, _localize(sub), position))
            _logger.debug(f"Keeping unmodelled element {sub_path}")
            continue

        kind = f.metadata[XML]
        if kind == "element":
            if f.name in kwargs:
                report.duplicate_elements.append(sub_path)
                continue
            kwargs[f.name] = _parse_value(sub.text, f.metadata["type"], sub_path)
        elif kind == "elements":
            kwargs.setdefault(f.name, []).append(_parse_value(sub.text, f.metadata["type"], sub_path))
        elif kind == "child":
            if kwargs.get(f.name) is not None:
                report.duplicate_elements.append(sub_path)
                continue
            kwargs[f.name] = _read_object(f.metadata["types"][local], sub, report, sub_path)
        else:  # children
            kwargs.setdefault(f.name, []).append(_read_object(f.metadata["types"][local], sub, report, sub_path))
        last_field = f.name

    # Missing required values stay None rather than taking the builder defaults
    for f in fields(cls):
        if f.metadata.get("required") and f.name not in kwargs:
            kwargs[f.name] = None

    return cls(**kwargs)


def parse_mission(xml: Union[str, bytes]) -> Tuple[Mission, ParseReport]:
    """
    Parse mission XML into the schema binding.

    Args:
        xml: The full XML document.

    Returns:
        (mission, report) where report lists unknown and duplicated elements
        and unknown attributes.

    Raises:
        MissionXMLError: If the XML is malformed, the root is not a Mission
            element, or a value cannot be converted to its declared type.
    """
    try:
        root = ET.fromstring(xml)
    except ET.ParseError as e:
        raise MissionXMLError(f"Mission XML is not well-formed: {e}") from e

    uri, local = _split_tag(root.tag)
    if local != Mission.TAG:
        raise MissionXMLError(f"Root element must be '{Mission.TAG}', got '{local}'")
    if uri not in (None, XML_NAMESPACE):
        raise MissionXMLError(f"Root element is in namespace '{uri}', expected '{XML_NAMESPACE}'")

    report = ParseReport(namespace=uri)
    mission = _read_object(Mission, root, report, Mission.TAG)
    _logger.debug(
        f"Parsed mission with {len(mission.agent_sections)} agent section(s), "
        f"{len(report.unknown_elements)} unknown element(s), "
        f"{len(report.unknown_attributes)} unknown attribute(s)"
    )
    return mission, report


# --- Writing ---

def _tag_for(types: Dict[str, Type[SchemaObject]], value: SchemaObject) -> str:
    for tag, cls in types.items():
        if type(value) is cls:
            return tag
    raise TypeError(f"{type(value).__name__} is not allowed here; expected one of {sorted(types)}")


def _emit_unknown(elem: ET.Element, unknown: List[UnknownElement], anchor: Optional[str],
                  position: Optional[int] = None):
    for u in unknown:
        if u.after == anchor and u.position == position:
            elem.append(copy.deepcopy(u.element))


def _write_item(elem: ET.Element, kind: str, meta: Dict[str, Any], value: Any):
    if kind in ("element", "elements"):
        ET.SubElement(elem, meta["name"]).text = _format_value(value)
    else:
        elem.append(_write_object(value, _tag_for(meta["types"], value)))


def _write_object(obj: SchemaObject, tag: str, attrib: Optional[Dict[str, str]] = None) -> ET.Element:
    elem = ET.Element(tag, attrib or {})
    obj_fields = fields(obj)

    for f in obj_fields:
        if f.metadata.get(XML) == "attribute":
            val = getattr(obj, f.name)
            if val is not None:
                elem.set(f.metadata["name"], _format_value(val))
    for name, raw in obj.unknown_attributes.items():
        if name not in elem.attrib:
            elem.set(name, raw)

    unknown = obj.unknown
    placed = set()
    _emit_unknown(elem, unknown, None)
    placed.update(id(u) for u in unknown if u.after is None and u.position is None)

    for f in obj_fields:
        kind = f.metadata.get(XML)
        if kind in (None, "attribute", "any", "any-attribute"):
            continue
        val = getattr(obj, f.name)
        if kind in ("elements", "children"):
            for i, v in enumerate(val):
                _write_item(elem, kind, f.metadata, v)
                _emit_unknown(elem, unknown, f.name, i + 1)
            placed.update(id(u) for u in unknown
                          if u.after == f.name and u.position is not None and 1 <= u.position <= len(val))
        elif val is not None:
            _write_item(elem, kind, f.metadata, val)
        _emit_unknown(elem, unknown, f.name)
        placed.update(id(u) for u in unknown if u.after == f.name and u.position is None)

    # Anchors that no longer exist, e.g. a list that was shortened
    for u in unknown:
        if id(u) not in placed:
            elem.append(copy.deepcopy(u.element))
    return elem


def serialize_mission(mission: Mission, pretty_print: bool = True) -> str:
    """
    Serialize the schema binding to an XML string with declaration.

    Args:
        mission: The document root.
        pretty_print: If True, indent nested elements one per line.
    """
    root = _write_object(mission, Mission.TAG, {
        "xmlns": XML_NAMESPACE,
        "xmlns:xsi": XSI_NAMESPACE,
        "xsi:schemaLocation": SCHEMA_LOCATION,
    })
    if pretty_print:
        ET.indent(root, space="    ")
    body = ET.tostring(root, encoding="unicode")
    eol = "\n" if pretty_print else ""
    return f"{XML_DECLARATION}{eol}{body}{eol}"
