# -----------------------------------------------------------------------------
# Copyright (c) 2025 MSA Exporter
# Licensed under the MIT License. See LICENSE in project root for details.
# -----------------------------------------------------------------------------

"""
In-memory model of the XML documents returned by the MSA management API.

A response looks like::

    <RESPONSE>
      <OBJECT name="drive">
        <PROPERTY name="location">0.1</PROPERTY>
        <OBJECT name="drive-statistics"> ... </OBJECT>
      </OBJECT>
    </RESPONSE>

Each OBJECT becomes a Node carrying its PROPERTY leaves in document order and
its nested OBJECT elements as children. Nothing here knows about metrics.
"""

import logging
import xml.etree.ElementTree
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple, Union

from defusedxml import DefusedXmlException
from defusedxml import ElementTree

from msa_exporter.exceptions import ParseError

LOG = logging.getLogger(__name__)

OBJECT_TAG = "OBJECT"
PROPERTY_TAG = "PROPERTY"


@dataclass(frozen=True)
class Node:
    """One OBJECT element of a response document."""
    name: str
    properties: Tuple[Tuple[str, str], ...] = field(default_factory=tuple)
    children: Tuple["Node", ...] = field(default_factory=tuple)


Tree = Union[Node, Iterable[Node]]


def _build_node(element) -> Node:
    properties = []
    children = []
    for child in element:
        if child.tag == PROPERTY_TAG:
            properties.append((child.get("name", ""), child.text or ""))
        elif child.tag == OBJECT_TAG:
            children.append(_build_node(child))
    return Node(name=element.get("name", ""), properties=tuple(properties), children=tuple(children))


def parse_response(body: bytes) -> List[Node]:
    """
    Parse a response body into its top-level nodes.

    Args:
        body: Raw bytes of the HTTP response

    Returns:
        The OBJECT elements directly below the root element, as Nodes

    Raises:
        ParseError: If the body is not well-formed XML
    """
    try:
        root = ElementTree.fromstring(body)
    except (xml.etree.ElementTree.ParseError, DefusedXmlException) as e:
        raise ParseError(f"Malformed XML document: {e}") from e
    return [_build_node(child) for child in root if child.tag == OBJECT_TAG]


def _as_nodes(tree: Tree) -> Iterable[Node]:
    if isinstance(tree, Node):
        return (tree,)
    return tree


def find_nodes_by_name(tree: Tree, name: str) -> List[Node]:
    """
    Depth-first search for every node called ``name``, in document order.

    A match does not stop the descent, so an object nested inside another
    object of the same name is returned as well.
    """
    result = []
    for node in _as_nodes(tree):
        if node.name == name:
            result.append(node)
        result.extend(find_nodes_by_name(node.children, name))
    return result


def find_property(node: Node, property_name: str) -> Optional[str]:
    """
    Return the value of ``property_name`` on the node, or on its first descendant
    carrying it (depth-first, document order). Direct properties always win.
    """
    for name, value in node.properties:
        if name == property_name:
            return value
    for child in node.children:
        value = find_property(child, property_name)
        if value is not None:
            return value
    return None


def extract_labels(node: Node, label_mapping: Dict[str, str]) -> Dict[str, str]:
    """Map the node's own properties listed in ``label_mapping`` to label names."""
    labels = {}
    for name, value in node.properties:
        if name in label_mapping:
            labels[label_mapping[name]] = value
    return labels


def describe_tree(tree: Tree, indent: str = "") -> List[str]:
    """Render the object structure as indented lines for debug logging."""
    lines = []
    for node in _as_nodes(tree):
        lines.append(f"{indent}Object: {node.name} (props: {len(node.properties)}, nested: {len(node.children)})")
        lines.extend(describe_tree(node.children, indent + "  "))
    return lines
