# pymalmo/classes/base.py
"""
Building blocks for the Mission schema binding.

Every schema element is a dataclass deriving from SchemaObject. The XML shape of
each field is declared through the helpers below, which store the mapping in the
dataclass field metadata:

    attribute      -> <Tag name="value"/>
    text_element   -> <Tag><Name>value</Name></Tag>
    text_elements  -> <Tag><Name>a</Name><Name>b</Name></Tag>
    child / choice -> a nested schema element (optional, single)
    children       -> repeated nested schema elements, order preserved
    extras         -> unknown child elements, kept verbatim for round trips
    extra_attributes -> unknown attributes, kept verbatim for round trips

Every SchemaObject carries both extras holders, so nothing the binding does
not model is lost between parse and serialize.

Required fields default to None so that a parsed document with a missing value
still builds; the validator reports it.
"""
from dataclasses import dataclass, field
from typing import Any, ClassVar, Dict, Optional, Sequence, Type

XML = "xml"


@dataclass
class UnknownElement:
    """A child element the binding does not model.

    `after` names the last modelled field that preceded it in the source
    document (None when it came first). When that field is a list, `position`
    is how many of its items came before, so the element is written back
    between the same neighbours.
    """
    after: Optional[str]
    element: Any  # xml.etree.ElementTree.Element
    position: Optional[int] = None


def extras():
    """Holder for unrecognized child elements, as UnknownElement entries."""
    return field(default_factory=list, repr=False, compare=False, metadata={XML: "any"})


def extra_attributes():
    """Holder for unrecognized attributes, name -> raw text."""
    return field(default_factory=dict, repr=False, compare=False, metadata={XML: "any-attribute"})


@dataclass
class SchemaObject:
    """Base class for all schema elements."""
    TAG: ClassVar[str] = ""
    unknown: list = extras()
    unknown_attributes: dict = extra_attributes()


def _tag_map(classes: Sequence[Type[SchemaObject]], tag: Optional[str] = None) -> Dict[str, Type[SchemaObject]]:
    if tag is not None:
        return {tag: classes[0]}
    return {cls.TAG: cls for cls in classes}


def attribute(name: str, type_: type = str, default: Any = None, required: bool = False,
              choices: Optional[Sequence[str]] = None):
    """Field stored as an XML attribute."""
    return field(default=default, metadata={
        XML: "attribute", "name": name, "type": type_,
        "required": required, "choices": tuple(choices) if choices else None,
    })


def text_element(name: str, type_: type = str, default: Any = None, required: bool = False,
                 choices: Optional[Sequence[str]] = None):
    """Field stored as the text of a single child element."""
    return field(default=default, metadata={
        XML: "element", "name": name, "type": type_,
        "required": required, "choices": tuple(choices) if choices else None,
    })


def text_elements(name: str, type_: type = str):
    """Field stored as a list of same-named text elements."""
    return field(default_factory=list, metadata={XML: "elements", "name": name, "type": type_})


def child(cls: Type[SchemaObject], required: bool = False, tag: Optional[str] = None, create: bool = False):
    """Single nested schema element. `create` builds a default instance on construction."""
    meta = {XML: "child", "types": _tag_map([cls], tag), "required": required}
    if create:
        return field(default_factory=cls, metadata=meta)
    return field(default=None, metadata=meta)


def choice(*classes: Type[SchemaObject], required: bool = False):
    """Single nested element that may be any one of `classes`."""
    return field(default=None, metadata={XML: "child", "types": _tag_map(classes), "required": required})


def children(*classes: Type[SchemaObject], min_occurs: int = 0):
    """Repeated nested elements of one or more types, kept in document order."""
    return field(default_factory=list, metadata={XML: "children", "types": _tag_map(classes), "min": min_occurs})
