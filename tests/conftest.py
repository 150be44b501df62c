import os
import xml.etree.ElementTree as ET

import pytest

# Headless matplotlib for the plan-view tests
os.environ.setdefault("MPLBACKEND", "Agg")

NS = {"m": "http://ProjectMalmo.microsoft.com"}


def local(tag: str) -> str:
    return tag.split("}", 1)[1] if tag.startswith("{") else tag


def xml_root(spec) -> ET.Element:
    return ET.fromstring(spec.get_as_xml(pretty_print=False))


@pytest.fixture
def spec():
    from pymalmo import MissionSpec
    return MissionSpec(verbose=False)
