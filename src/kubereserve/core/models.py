#!/usr/bin/env python3
"""
KUBERESERVE CORE MODELS
-----------------------
Defines the fundamental data structures used across KubeReserve.
The kubelet config is held as an untyped YAML tree; these models give
its nodes an explicit kind so that path traversal can switch on it.

Author: KubeReserve Team
Date: 2026-10-19
"""

from enum import Enum
from typing import Any, Sequence, Tuple, Union

# A positional address inside the tree, e.g. ("kubeReserved", "cpu")
FieldPath = Union[Tuple[str, ...], Sequence[str]]


class NodeKind(Enum):
    """The three shapes a node of a YAML document can take."""
    MAPPING = "mapping"
    SEQUENCE = "sequence"
    SCALAR = "scalar"


def classify(node: Any) -> NodeKind:
    """
    Returns the kind of a parsed YAML node.

    ruamel's CommentedMap/CommentedSeq subclass dict/list, so plain
    Python containers built by callers classify the same way.
    """
    if isinstance(node, dict):
        return NodeKind.MAPPING
    if isinstance(node, (list, tuple)):
        return NodeKind.SEQUENCE
    return NodeKind.SCALAR


def format_path(path: FieldPath) -> str:
    """Dotted rendering used in error messages and logs."""
    return ".".join(str(part) for part in path) or "<root>"
