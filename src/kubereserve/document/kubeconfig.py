#!/usr/bin/env python3
"""
KUBERESERVE KUBELET CONFIG - The Document Wrapper
-------------------------------------------------
Holds a parsed GKE kubelet-config.yaml as an untyped tree and exposes
generic get/set-by-path access on top of it.

GKE appends a bare `KUBE_SCHEDULER_CONFIG` line to these files. It is not
YAML content, so it is stripped before parsing and put back verbatim
after the tree has been rendered.

Author: KubeReserve Team
Date: 2026-10-19
"""

import logging
from typing import Any, Optional

from ruamel.yaml.comments import CommentedMap

from kubereserve.core.errors import FieldTypeError, ParseError, PathError
from kubereserve.core.models import FieldPath, NodeKind, classify, format_path
from kubereserve.document.codec import YamlCodec, YamlLayout

logger = logging.getLogger("kubereserve.document")

KUBECONFIG_SUFFIX = "KUBE_SCHEDULER_CONFIG\n"
KUBECONFIG_SUFFIX_CRLF = "KUBE_SCHEDULER_CONFIG\r\n"
KUBE_RESERVED_FIELD = "kubeReserved"
CPU_FIELD = "cpu"
RESERVED_CPU_PATH = (KUBE_RESERVED_FIELD, CPU_FIELD)
UTF8_BOM = b"\xef\xbb\xbf"


class KubeletConfig:
    """
    A single kubelet configuration document.

    Built fresh from bytes for every run, mutated in place by the setters,
    then rendered back with `to_bytes()` in the layout it was read with.
    """

    def __init__(self, tree: Optional[CommentedMap] = None, codec: Optional[YamlCodec] = None,
                 layout: Optional[YamlLayout] = None, suffix: str = KUBECONFIG_SUFFIX,
                 blank_body: Optional[str] = None, bom: bool = False):
        self.tree = tree if tree is not None else CommentedMap()
        self.codec = codec or YamlCodec()
        self.layout = layout or YamlLayout()
        self.suffix = suffix
        # Text of a document with no content (empty or comments only)
        self.blank_body = blank_body
        self.bom = bom

    @classmethod
    def from_bytes(cls, data: bytes, codec: Optional[YamlCodec] = None) -> "KubeletConfig":
        """
        Parses raw kubelet-config.yaml bytes. The trailing marker is optional
        on input and may end in LF or CRLF.
        """
        codec = codec or YamlCodec()
        try:
            text = data.decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise ParseError(f"Kubelet config is not valid UTF-8: {e}") from e

        suffix = KUBECONFIG_SUFFIX
        for candidate in (KUBECONFIG_SUFFIX, KUBECONFIG_SUFFIX_CRLF):
            if text.endswith(candidate):
                text = text[:-len(candidate)]
                suffix = candidate
                break
        else:
            logger.debug("Trailing %r marker not found, parsing as-is", KUBECONFIG_SUFFIX.strip())

        tree = codec.load(text)
        blank_body = None
        if tree is None:
            tree = CommentedMap()
            blank_body = text
        if classify(tree) is not NodeKind.MAPPING:
            raise ParseError(
                f"Top-level kubelet config must be a mapping, got {type(tree).__name__}"
            )
        return cls(tree, codec, layout=codec.guess_layout(text), suffix=suffix,
                   blank_body=blank_body, bom=data.startswith(UTF8_BOM))

    def to_bytes(self) -> bytes:
        """Renders the tree and re-appends the trailing marker."""
        if self.blank_body is not None and len(self.tree) == 0:
            text = self.blank_body
        else:
            text = self.codec.dump(self.tree, self.layout)
        data = (text + self.suffix).encode("utf-8")
        return UTF8_BOM + data if self.bom else data

    def get_path(self, path: FieldPath) -> Any:
        """
        Returns the value at `path`. Missing keys and non-mapping
        intermediates raise PathError; nothing is created.
        """
        node = self.tree
        walked = []
        for field in path:
            if classify(node) is not NodeKind.MAPPING:
                raise PathError(
                    f"Field '{format_path(walked)}' is a {classify(node).value}, "
                    f"cannot look up '{field}'",
                    path,
                )
            if field not in node:
                raise PathError(
                    f"Field '{format_path(walked + [field])}' does not exist", path
                )
            node = node[field]
            walked.append(field)
        return node

    def set_path(self, path: FieldPath, value: Any) -> None:
        """
        Stores `value` at `path`, creating missing intermediate mappings.

        An intermediate that exists but is not a mapping is never replaced:
        the walk stops there with PathError and nothing is written.
        """
        path = list(path)
        if not path:
            raise PathError("Cannot set the document root", path)

        # Validate the whole walk before creating anything, so a failure
        # further down leaves no half-built mappings behind.
        node = self.tree
        missing_from = None
        for depth, field in enumerate(path[:-1]):
            if field not in node:
                missing_from = depth
                break
            child = node[field]
            if classify(child) is not NodeKind.MAPPING:
                raise PathError(
                    f"Field '{format_path(path[:depth + 1])}' is a {classify(child).value}, "
                    f"cannot set '{format_path(path)}'",
                    path,
                )
            node = child

        if missing_from is not None:
            for depth in range(missing_from, len(path) - 1):
                logger.debug("Creating missing mapping '%s'", format_path(path[:depth + 1]))
                node[path[depth]] = CommentedMap()
                node = node[path[depth]]

        node[path[-1]] = value

    def get_as_string(self, path: FieldPath) -> str:
        """Returns the value at `path`, which must be a string."""
        value = self.get_path(path)
        if not isinstance(value, str):
            raise FieldTypeError(
                f"Field '{format_path(path)}' is not a string: {value!r}"
            )
        return value

    def get_reserved_cpu(self) -> str:
        """Returns kubeReserved.cpu."""
        return self.get_as_string(RESERVED_CPU_PATH)

    def set_reserved_cpu(self, reserved: str) -> None:
        """Sets kubeReserved.cpu."""
        self.set_path(RESERVED_CPU_PATH, reserved)
