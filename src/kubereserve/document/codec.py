#!/usr/bin/env python3
"""
KUBERESERVE CODEC - High-Fidelity Round-Trip
--------------------------------------------
General-purpose YAML load/dump built on ruamel's round-trip mode.
Knows nothing about kubelet configs or trailing markers, so the
document wrapper can swap it out without touching its own logic.

The emitter only knows one indentation style per dump, so the style of
the input (indents, `---` header, line terminator) is captured as a
YamlLayout on load and handed back on dump.

Author: KubeReserve Team
Date: 2026-10-19
"""

import io
import logging
import re
from dataclasses import dataclass
from typing import Any, Optional

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError
from ruamel.yaml.util import load_yaml_guess_indent

from kubereserve.core.errors import ParseError, SerializeError

logger = logging.getLogger("kubereserve.codec")

EXPLICIT_START_PATTERN = re.compile(r'^---(\s|$)')


@dataclass
class YamlLayout:
    """
    Formatting of a YAML document. The defaults are kubelet-config.yaml's
    own layout: 2-space mappings, sequences flush with their parent key
    ("clusterDNS:\\n- 10.3.240.10").
    """
    mapping: int = 2
    sequence: int = 2
    offset: int = 0
    explicit_start: bool = False
    line_break: str = "\n"


def _guess_mapping_indent(text: str) -> Optional[int]:
    """Indent of the first nested mapping key below a key-only line."""
    parent = None
    for line in text.splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith('#'):
            continue
        indent = len(line) - len(line.lstrip(' '))
        is_item = stripped.startswith('-')
        if parent is not None and not is_item and indent > parent:
            return indent - parent
        parent = indent if stripped.endswith(':') and not is_item else None
    return None


class YamlCodec:
    """
    The Reconstructor: converts text to CommentedMaps and back, keeping
    key order, quoting and comments intact.
    """

    def __init__(self):
        self.yaml = self._make_yaml(YamlLayout())

    def _make_yaml(self, layout: YamlLayout) -> YAML:
        yaml = YAML(typ='rt')
        yaml.preserve_quotes = True
        yaml.indent(mapping=layout.mapping, sequence=layout.sequence, offset=layout.offset)
        yaml.explicit_start = layout.explicit_start
        yaml.width = 4096
        return yaml

    def load(self, text: str) -> Any:
        """Parses a single YAML document. Empty input yields None."""
        try:
            return self.yaml.load(text.replace('\r\n', '\n'))
        except YAMLError as e:
            raise ParseError(f"Invalid YAML: {e}") from e

    def guess_layout(self, text: str) -> YamlLayout:
        """
        Reads the formatting of `text`. ruamel guesses the sequence style;
        nested mapping indents are measured directly.
        """
        layout = YamlLayout()
        normalized = text.replace('\r\n', '\n')
        if normalized != text:
            layout.line_break = '\r\n'
        layout.explicit_start = bool(EXPLICIT_START_PATTERN.match(normalized))

        try:
            _, indent, block_seq_indent = load_yaml_guess_indent(normalized)
        except YAMLError as e:
            raise ParseError(f"Invalid YAML: {e}") from e
        except IndexError:
            # ruamel's line scanner trips over lines made only of dashes
            logger.debug("Indent guess failed, keeping default layout")
            return layout

        mapping = _guess_mapping_indent(normalized)
        if block_seq_indent is not None:
            layout.offset = block_seq_indent
            layout.sequence = indent if indent is not None else block_seq_indent + 2
        elif mapping is None and indent is not None:
            mapping = indent
        if mapping is not None:
            layout.mapping = mapping
        logger.debug(f"Guessed layout: {layout}")
        return layout

    def dump(self, data: Any, layout: Optional[YamlLayout] = None) -> str:
        """Renders a tree back to YAML text in the given layout."""
        layout = layout or YamlLayout()
        stream = io.StringIO()
        try:
            self._make_yaml(layout).dump(data, stream)
        except YAMLError as e:
            raise SerializeError(f"Unable to render YAML: {e}") from e
        text = stream.getvalue()
        if layout.line_break != '\n':
            text = text.replace('\n', layout.line_break)
        return text
