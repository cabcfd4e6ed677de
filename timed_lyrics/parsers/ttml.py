from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from timed_lyrics.model import Alignment, KaraokeLine, LyricsDocument, Syllable
from timed_lyrics.utils.timecodec import parse_time
from timed_lyrics.utils.xmlreader import XmlNode, XmlTree, parse_xml

from .base import LyricsParser

logger = logging.getLogger(__name__)

ROLE_TRANSLATION = "x-translation"
ROLE_BACKGROUND = "x-bg"

# "outside（inside）": background vocals are translated inside the parentheses
_BRACKETED_RE = re.compile(r"^(.*?)（(.*?)）$")


@dataclass(frozen=True, slots=True)
class SplitTranslation:
    outside: str
    inside: str | None


def split_translation(text: str) -> SplitTranslation:
    m = _BRACKETED_RE.search(text)
    if not m:
        return SplitTranslation(text.strip(), None)
    return SplitTranslation(m.group(1).strip(), m.group(2).strip() or None)


def preformat(content: str) -> str:
    # Pretty-printed sources indent with pairs of spaces; a single space between
    # spans is real inter-word spacing and has to survive.
    return (
        content.replace("  ", "")
        .replace(" </span><span", "</span> <span")
        .replace(",</span><span", ",</span> <span")
    )


def _is_named(node: XmlNode, name: str) -> bool:
    return node.name == name or node.name.endswith(":" + name)


def _roles(node: XmlNode) -> set[str]:
    return {v for k, v in node.attributes if k == "role" or k.endswith(":role")}


def _line_key(node: XmlNode) -> str | None:
    return node.attr("itunes:key") or node.attr("key")


class TtmlParser(LyricsParser):
    """
    Apple-style word-timed TTML.

    Every <p begin end> is a line and its plain <span begin end> children are
    syllables. <span ttm:role="x-bg"> children become separate accompaniment
    lines; translations come from x-translation spans or from the iTunes
    metadata table keyed by itunes:key, inline spans taking precedence.
    """

    name = "TTML"

    def parse(self, content: str) -> LyricsDocument:
        tree = parse_xml(preformat(content))
        agents = self._agent_alignments(tree)
        table = self._metadata_translations(tree)

        out: list[KaraokeLine] = []
        for p in tree.find_all(lambda n: n.name == "p"):
            begin, end = p.attr("begin"), p.attr("end")
            if begin is None or end is None:
                logger.debug("Skipping <p> without begin/end")
                continue

            alignment = agents.get(p.attr("ttm:agent") or "", Alignment.START)
            key = _line_key(p)
            from_table = split_translation(table[key]) if key in table else None
            children = tree.children(p)

            syllables = self._syllables(tree, children)
            if syllables:
                inline = self._inline_translation(tree, children, exclude_background=True)
                start = parse_time(begin)
                out.append(
                    KaraokeLine(
                        syllables=tuple(syllables),
                        translation=inline or (from_table.outside if from_table else None) or None,
                        is_accompaniment=False,
                        alignment=alignment,
                        start=start,
                        end=max(parse_time(end), start),
                    )
                )

            for span in children:
                if span.name == "span" and ROLE_BACKGROUND in _roles(span):
                    bg = self._background_line(tree, span, alignment, key, table)
                    if bg is not None:
                        out.append(bg)

        return LyricsDocument.build(out, title=self._title(tree))

    def _background_line(
        self,
        tree: XmlTree,
        span: XmlNode,
        alignment: Alignment,
        parent_key: str | None,
        table: dict[str, str],
    ) -> KaraokeLine | None:
        children = tree.children(span)
        syllables = self._syllables(tree, children)
        if not syllables:
            return None

        translation = self._inline_translation(tree, children, exclude_background=False)
        if not translation:
            key = _line_key(span) or parent_key
            if key in table:
                split = split_translation(table[key])
                translation = split.inside or split.outside or None

        begin, end = span.attr("begin"), span.attr("end")
        start = parse_time(begin) if begin is not None else syllables[0].start
        stop = parse_time(end) if end is not None else syllables[-1].end
        return KaraokeLine(
            syllables=tuple(syllables),
            translation=translation,
            is_accompaniment=True,
            alignment=alignment,
            start=start,
            end=max(stop, start),
        )

    @staticmethod
    def _inline_translation(tree: XmlTree, children: list[XmlNode], *, exclude_background: bool) -> str | None:
        for child in children:
            roles = _roles(child)
            if ROLE_TRANSLATION not in roles:
                continue
            if exclude_background and ROLE_BACKGROUND in roles:
                continue
            text = tree.text(child).strip()
            return text or None
        return None

    @staticmethod
    def _syllables(tree: XmlTree, children: list[XmlNode]) -> list[Syllable]:
        """
        Plain spans are syllables. A loose text node right after a span belongs
        to it: that is where the space between two words lives.
        """
        out: list[Syllable] = []
        for i, child in enumerate(children):
            if child.name != "span" or _roles(child) & {ROLE_TRANSLATION, ROLE_BACKGROUND}:
                continue
            begin, end = child.attr("begin"), child.attr("end")
            text = tree.text(child)
            if begin is None or end is None or not text:
                continue

            content = text
            nxt = children[i + 1] if i + 1 < len(children) else None
            if nxt is not None and nxt.is_text:
                content += nxt.value

            start = parse_time(begin)
            out.append(Syllable(content=content, start=start, end=max(parse_time(end), start)))

        if out:
            last = out[-1]
            out[-1] = Syllable(last.content.rstrip(), last.start, last.end, last.phonetic)
        return out

    @staticmethod
    def _agent_alignments(tree: XmlTree) -> dict[str, Alignment]:
        # first declared agent sings on the start side, everyone else on the end side
        metadata = tree.find_first(lambda n: n.name == "metadata")
        if metadata is None:
            return {}
        out: dict[str, Alignment] = {}
        agents = [n for n in tree.element_children(metadata) if _is_named(n, "agent")]
        for i, agent in enumerate(agents):
            agent_id = agent.attr("xml:id") or agent.attr("id")
            if agent_id:
                out[agent_id] = Alignment.START if i == 0 else Alignment.END
        return out

    @staticmethod
    def _metadata_translations(tree: XmlTree) -> dict[str, str]:
        out: dict[str, str] = {}
        for translation in tree.find_all(lambda n: _is_named(n, "translation")):
            for text in tree.element_children(translation):
                if text.name != "text":
                    continue
                key = text.attr("for")
                value = tree.text(text)
                if key is not None and value.strip():
                    out[key] = value.strip()
        return out

    @staticmethod
    def _title(tree: XmlTree) -> str:
        head = tree.find_first(lambda n: n.name == "head")
        if head is None:
            return ""
        title = tree.find_first(lambda n: _is_named(n, "title"), head)
        return tree.text(title).strip() if title is not None else ""


def parse_ttml(text: str) -> LyricsDocument:
    return TtmlParser().parse(text)
