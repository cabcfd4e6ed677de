from textwrap import dedent

from timed_lyrics.model import Alignment
from timed_lyrics.parsers.ttml import parse_ttml, preformat, split_translation
from timed_lyrics.utils.timecodec import parse_time


def _joined(line) -> str:
    return "".join(s.content for s in line.syllables).strip()


def test_duet_with_background_and_translations():
    ttml = dedent(
        """
        <tt xmlns="http://www.w3.org/ns/ttml" xmlns:ttm="http://www.w3.org/ns/ttml#metadata">
            <head><metadata xmlns="">
                <ttm:agent type="singer" xml:id="v1"/>
                <ttm:agent type="person" xml:id="v2"/>
            </metadata></head>
            <body>
                <div xmlns="">
                    <p begin="00:00.130" end="00:02.820" ttm:agent="v1">
                        <span begin="00:00.130" end="00:00.230">I</span> <span begin="00:00.230" end="00:00.450">promise</span> <span begin="00:00.450" end="00:00.620">that</span>
                        <span ttm:role="x-translation" xml:lang="zh-CN">确信我就是这世间的独一无二</span>
                    </p>
                    <p begin="01:14.650" end="01:17.289" ttm:agent="v2">
                        <span begin="01:14.650" end="01:14.780">I</span> <span begin="01:14.780" end="01:15.010">never</span>
                        <span ttm:role="x-bg" begin="01:15.010" end="01:15.420">
                            <span begin="01:15.010" end="01:15.250">wanna</span> <span begin="01:15.250" end="01:15.420">see</span>
                            <span ttm:role="x-translation" xml:lang="zh-CN">看见过</span>
                        </span>
                        <span ttm:role="x-translation" xml:lang="zh-CN">我从未</span>
                    </p>
                </div>
            </body>
        </tt>
        """
    )
    doc = parse_ttml(ttml)
    assert len(doc.lines) == 3
    first, second, bg = doc.lines

    assert first.alignment is Alignment.START
    assert second.alignment is Alignment.END
    assert bg.alignment is Alignment.END

    assert first.translation == "确信我就是这世间的独一无二"
    assert _joined(first) == "I promise that"
    assert second.translation == "我从未"
    assert _joined(second) == "I never"

    assert bg.is_accompaniment
    assert len(bg.syllables) == 2
    assert _joined(bg) == "wanna see"
    assert bg.syllables[-1].content == "see"
    assert bg.translation == "看见过"


def test_nested_translation_and_spacing():
    ttml = dedent(
        """
        <tt xmlns="http://www.w3.org/ns/ttml" xmlns:ttm="http://www.w3.org/ns/ttml#metadata"><body><div>
        <p begin="00:00.100" end="00:03.000">
            <span begin="00:00.100" end="00:00.500">Main</span> <span begin="00:00.500" end="00:01.000">vocals</span>
            <span ttm:role="x-bg" begin="00:01.500" end="00:02.500">
                <span begin="00:01.500" end="00:02.000">background</span><span begin="00:02.000" end="00:02.500">harmony</span>
                <span ttm:role="x-translation" xml:lang="zh-CN">背景和声</span>
            </span>
            <span ttm:role="x-translation" xml:lang="zh-CN">主歌声</span>
        </p>
        </div></body></tt>
        """
    )
    doc = parse_ttml(ttml)
    assert len(doc.lines) == 2
    main = next(ln for ln in doc.lines if not ln.is_accompaniment)
    bg = next(ln for ln in doc.lines if ln.is_accompaniment)

    assert main.translation == "主歌声"
    assert _joined(main) == "Main vocals"
    assert bg.translation == "背景和声"
    assert _joined(bg) == "backgroundharmony"


def test_background_span_without_timing_takes_syllable_bounds():
    ttml = dedent(
        """
        <tt xmlns="http://www.w3.org/ns/ttml" xmlns:ttm="http://www.w3.org/ns/ttml#metadata"><body><div>
        <p begin="00:00.100" end="00:03.000">
            <span begin="00:00.100" end="00:00.500">Main</span> <span begin="00:00.500" end="00:01.000">vocals</span>
            <span ttm:role="x-bg">
                <span begin="00:01.500" end="00:02.000">background</span> <span begin="00:02.000" end="00:02.500">harmony</span>
                <span ttm:role="x-translation" xml:lang="zh-CN">背景和声</span>
            </span>
            <span ttm:role="x-translation" xml:lang="zh-CN">主歌声</span>
        </p>
        </div></body></tt>
        """
    )
    doc = parse_ttml(ttml)
    assert len(doc.lines) == 2
    bg = next(ln for ln in doc.lines if ln.is_accompaniment)
    assert bg.start == parse_time("00:01.500")
    assert bg.end == parse_time("00:02.500")


ITUNES_HEAD = """
<tt xmlns="http://www.w3.org/ns/ttml" xmlns:itunes="http://music.apple.com/lyric-ttml-internal"
    xmlns:ttm="http://www.w3.org/ns/ttml#metadata" itunes:timing="Word" xml:lang="en">
    <head>
        <metadata>
            <ttm:agent type="person" xml:id="v1" />
            <iTunesMetadata xmlns="http://music.apple.com/lyric-ttml-internal">
                <translations>
                    <translation type="subtitle" xml:lang="zh-Hans">
{texts}
                    </translation>
                </translations>
            </iTunesMetadata>
        </metadata>
    </head>
"""


def test_itunes_metadata_translations():
    texts = (
        '                        <text for="L1">那是两个相爱的人</text>\n'
        '                        <text for="L2">坐在车里 听着《Blonde》 心悄悄靠近彼此</text>\n'
        '                        <text for="L3">粉橙色的天空下 如孩童般纯真 无关 Donald Glover</text>'
    )
    body = """
    <body dur="3:29.260">
        <div begin="15.465" end="30.064">
            <p begin="15.465" end="16.533" itunes:key="L1" ttm:agent="v1">
                <span begin="15.465" end="15.694">It</span>
                <span begin="15.694" end="15.894">was</span>
                <span begin="15.894" end="16.055">just</span>
                <span begin="16.055" end="16.155">two</span>
                <span begin="16.155" end="16.533">lovers</span>
            </p>
            <p begin="16.534" end="17.000" itunes:key="L2" ttm:agent="v1">
                <span begin="16.534" end="17.000">Sitting in the car</span>
            </p>
            <p begin="17.001" end="18.000" ttm:agent="v1">
                <span begin="17.001" end="18.000">No translation here</span>
            </p>
            <p begin="18.001" end="19.000" itunes:key="L3" ttm:agent="v1">
                <span begin="18.001" end="19.000">Under the orange sky</span>
                <span ttm:role="x-translation" xml:lang="zh-CN">行内优先</span>
            </p>
        </div>
    </body>
</tt>
"""
    doc = parse_ttml(ITUNES_HEAD.format(texts=texts) + body)
    assert len(doc.lines) == 4
    assert [ln.translation for ln in doc.lines] == [
        "那是两个相爱的人",
        "坐在车里 听着《Blonde》 心悄悄靠近彼此",
        None,
        "行内优先",
    ]
    assert doc.lines[0].start == 15_465


def test_itunes_metadata_background_translation():
    texts = '                        <text for="L57">宝贝 这就是我的迷人之处（宝贝 这就是我的迷）</text>'
    body = """
    <body dur="3:29.260">
        <div begin="2:25.240" end="2:28.737">
            <p begin="2:25.240" end="2:28.737" itunes:key="L57" ttm:agent="v1000">
                <span begin="2:25.240" end="2:25.719">Baby,</span>
                <span begin="2:25.719" end="2:25.887">that's</span>
                <span begin="2:25.887" end="2:26.052">the</span>
                <span begin="2:26.052" end="2:26.236">fun</span>
                <span begin="2:26.236" end="2:26.404">of</span>
                <span begin="2:26.404" end="2:26.704">me</span>
                <span ttm:role="x-bg">
                    <span begin="2:26.545" end="2:26.970">(Baby,</span>
                    <span begin="2:26.970" end="2:27.154">that's</span>
                    <span begin="2:27.154" end="2:27.420">the</span>
                    <span begin="2:27.420" end="2:27.691">fun</span>
                    <span begin="2:27.691" end="2:27.873">of</span>
                    <span begin="2:27.873" end="2:28.737">me)</span>
                </span>
            </p>
        </div>
    </body>
</tt>
"""
    doc = parse_ttml(ITUNES_HEAD.format(texts=texts) + body)
    assert len(doc.lines) == 2
    main = next(ln for ln in doc.lines if not ln.is_accompaniment)
    bg = next(ln for ln in doc.lines if ln.is_accompaniment)
    assert main.translation == "宝贝 这就是我的迷人之处"
    assert bg.translation == "宝贝 这就是我的迷"
    # unknown agent falls back to the start side
    assert main.alignment is Alignment.START
    assert bg.start == 146_545


def test_title_and_entities():
    ttml = (
        '<tt xmlns="http://www.w3.org/ns/ttml"><head><metadata>'
        "<ttm:title>Rock &amp; Roll</ttm:title></metadata></head><body><div>"
        '<p begin="1.0" end="2.0"><span begin="1.0" end="2.0">R&amp;R</span></p>'
        "</div></body></tt>"
    )
    doc = parse_ttml(ttml)
    assert doc.title == "Rock & Roll"
    assert doc.lines[0].content == "R&R"


def test_paragraph_without_timing_is_skipped():
    ttml = (
        '<tt xmlns="http://www.w3.org/ns/ttml"><body><div>'
        '<p><span begin="1.0" end="2.0">untimed</span></p>'
        '<p begin="3.0" end="4.0"><span begin="3.0" end="4.0">timed</span></p>'
        "</div></body></tt>"
    )
    doc = parse_ttml(ttml)
    assert [ln.content for ln in doc.lines] == ["timed"]


def test_blank_inline_translation_falls_back_to_table():
    ttml = (
        '<tt xmlns="http://www.w3.org/ns/ttml"><head><metadata><translations><translation>'
        '<text for="L1">from table</text></translation></translations></metadata></head>'
        '<body><div><p begin="1.0" end="2.0" itunes:key="L1">'
        '<span begin="1.0" end="2.0">x</span><span ttm:role="x-translation"> </span>'
        "</p></div></body></tt>"
    )
    assert parse_ttml(ttml).lines[0].translation == "from table"


def test_garbage_yields_empty_document():
    assert parse_ttml("not xml at all").is_empty
    assert parse_ttml("").is_empty


def test_split_translation():
    assert split_translation("outside（inside）").outside == "outside"
    assert split_translation("outside（inside）").inside == "inside"
    assert split_translation("plain").inside is None


def test_preformat_keeps_single_spaces_between_spans():
    raw = '<p>\n    <span>a</span> <span>b</span></p>'
    assert preformat(raw) == "<p>\n<span>a</span> <span>b</span></p>"
    assert preformat("<span>a </span><span>b</span>") == "<span>a</span> <span>b</span>"


def test_loose_ampersands_are_not_treated_as_entities():
    ttml = (
        '<tt xmlns="http://www.w3.org/ns/ttml"><body><div><p begin="1.0" end="2.0">'
        '<span begin="1.0" end="2.0">rock&not roll &copy me</span></p></div></body></tt>'
    )
    assert parse_ttml(ttml).lines[0].content == "rock&not roll &copy me"


def test_cdata_syllable_text_is_not_decoded():
    ttml = (
        '<tt xmlns="http://www.w3.org/ns/ttml"><body><div><p begin="1.0" end="2.0">'
        '<span begin="1.0" end="2.0"><![CDATA[R&amp;B]]></span></p></div></body></tt>'
    )
    assert parse_ttml(ttml).lines[0].content == "R&amp;B"


def test_background_span_key_beats_paragraph_key():
    ttml = (
        '<tt xmlns="http://www.w3.org/ns/ttml"><head><metadata><translations><translation>'
        '<text for="L1">main（inside of main）</text><text for="L2">own</text>'
        "</translation></translations></metadata></head><body><div>"
        '<p begin="1.0" end="3.0" itunes:key="L1"><span begin="1.0" end="2.0">a</span>'
        '<span ttm:role="x-bg" itunes:key="L2"><span begin="2.0" end="3.0">b</span></span>'
        "</p></div></body></tt>"
    )
    main, bg = parse_ttml(ttml).lines
    assert main.translation == "main"
    assert bg.is_accompaniment
    assert bg.translation == "own"
