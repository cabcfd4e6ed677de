"""
A small, forgiving XML reader.

Lyrics TTML from the wild is often not well-formed enough for a strict parser,
and the lyrics parser needs loose character data between spans (that is where
inter-word spacing lives). This reader:

- keeps every run of character data as a synthetic `#text` child, untrimmed,
  with XML entities decoded (CDATA is kept as written);
- keeps attribute order and namespaced names as written (`ttm:agent`);
- accepts self-closing tags, either quote style, unquoted and bare attributes;
- skips comments, processing instructions and doctype, keeps CDATA as text;
- closes unmatched tags as best it can and never raises.

Nodes live in one list and reference each other by index.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Callable, Iterator

logger = logging.getLogger(__name__)

TEXT = "#text"
DOCUMENT = "#document"

_TOKEN_RE = re.compile(
    r"<!--.*?(?:-->|\Z)"
    r"|<!\[CDATA\[(?P<cdata>.*?)(?:\]\]>|\Z)"
    r"|<\?.*?(?:\?>|\Z)"
    r"|<![^>]*>"
    r"|</\s*(?P<close>[^\s>]+)\s*>"
    r"|<(?P<open>[A-Za-z_][\w.:-]*)"
    r"(?P<attrs>(?:[^\"'>/]|\"[^\"]*\"|'[^']*'|/(?!\s*>))*)"
    r"(?P<selfclose>/)?\s*>",
    re.DOTALL,
)
_ATTR_RE = re.compile(
    r"""([^\s=/>"']+)(?:\s*=\s*(?:"([^"]*)"|'([^']*)'|([^\s"'>]+)))?"""
)


_ENTITY_RE = re.compile(r"&(#[0-9]+|#[xX][0-9a-fA-F]+|amp|lt|gt|quot|apos);")
_NAMED = {"amp": "&", "lt": "<", "gt": ">", "quot": "\"", "apos": "'"}


def _decode_entity(m: re.Match[str]) -> str:
    ref = m.group(1)
    if not ref.startswith("#"):
        return _NAMED[ref]
    try:
        code = int(ref[2:], 16) if ref[1] in "xX" else int(ref[1:])
        return chr(code)
    except (ValueError, OverflowError):
        return m.group(0)


def unescape_entities(text: str) -> str:
    """The five XML entities and numeric references, in one pass. Anything else is text."""
    return _ENTITY_RE.sub(_decode_entity, text)


@dataclass(slots=True)
class XmlNode:
    index: int
    name: str
    parent: int
    attributes: tuple[tuple[str, str], ...] = ()
    children: list[int] = field(default_factory=list)
    value: str = ""

    @property
    def is_text(self) -> bool:
        return self.name == TEXT

    def attr(self, name: str, default: str | None = None) -> str | None:
        for k, v in self.attributes:
            if k == name:
                return v
        return default


class XmlTree:
    def __init__(self, nodes: list[XmlNode]):
        self.nodes = nodes

    def __len__(self) -> int:
        return len(self.nodes)

    def __getitem__(self, index: int) -> XmlNode:
        return self.nodes[index]

    @property
    def document(self) -> XmlNode:
        return self.nodes[0]

    @property
    def root(self) -> XmlNode:
        # first element under the document node, or the document node itself
        for i in self.document.children:
            if not self.nodes[i].is_text:
                return self.nodes[i]
        return self.document

    def children(self, node: XmlNode) -> list[XmlNode]:
        return [self.nodes[i] for i in node.children]

    def element_children(self, node: XmlNode) -> list[XmlNode]:
        return [self.nodes[i] for i in node.children if not self.nodes[i].is_text]

    def iter(self, node: XmlNode | None = None) -> Iterator[XmlNode]:
        """Pre-order walk (document order) starting at `node`."""
        stack = [(node or self.document).index]
        while stack:
            n = self.nodes[stack.pop()]
            yield n
            stack.extend(reversed(n.children))

    def find_all(self, predicate: Callable[[XmlNode], bool], node: XmlNode | None = None) -> list[XmlNode]:
        return [n for n in self.iter(node) if not n.is_text and predicate(n)]

    def find_first(self, predicate: Callable[[XmlNode], bool], node: XmlNode | None = None) -> XmlNode | None:
        for n in self.iter(node):
            if not n.is_text and predicate(n):
                return n
        return None

    def text(self, node: XmlNode) -> str:
        """All character data under `node`, concatenated, untrimmed."""
        if node.is_text:
            return node.value
        return "".join(n.value for n in self.iter(node) if n.is_text)


def _parse_attrs(raw: str) -> tuple[tuple[str, str], ...]:
    out: list[tuple[str, str]] = []
    for m in _ATTR_RE.finditer(raw):
        value = next((g for g in m.groups()[1:] if g is not None), "")
        out.append((m.group(1), unescape_entities(value)))
    return tuple(out)


def parse_xml(text: str) -> XmlTree:
    nodes: list[XmlNode] = [XmlNode(index=0, name=DOCUMENT, parent=-1)]
    stack: list[int] = [0]

    def add(name: str, **kw) -> XmlNode:
        parent = stack[-1]
        node = XmlNode(index=len(nodes), name=name, parent=parent, **kw)
        nodes.append(node)
        nodes[parent].children.append(node.index)
        return node

    pos = 0
    for m in _TOKEN_RE.finditer(text):
        if m.start() > pos:
            add(TEXT, value=unescape_entities(text[pos : m.start()]))
        pos = m.end()

        if m.group("cdata") is not None:
            add(TEXT, value=m.group("cdata"))
        elif m.group("close") is not None:
            name = m.group("close")
            for depth in range(len(stack) - 1, 0, -1):
                if nodes[stack[depth]].name == name:
                    if depth != len(stack) - 1:
                        logger.debug("Implicitly closing %d element(s) at </%s>", len(stack) - 1 - depth, name)
                    del stack[depth:]
                    break
            else:
                logger.debug("Ignoring unmatched </%s>", name)
        elif m.group("open") is not None:
            node = add(m.group("open"), attributes=_parse_attrs(m.group("attrs") or ""))
            if not m.group("selfclose"):
                stack.append(node.index)
        # comments, processing instructions and doctype are dropped

    if pos < len(text):
        add(TEXT, value=unescape_entities(text[pos:]))
    if len(stack) > 1:
        logger.debug("Closing %d element(s) left open at end of input", len(stack) - 1)

    return XmlTree(nodes)
