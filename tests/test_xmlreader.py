from timed_lyrics.utils.xmlreader import TEXT, parse_xml


def test_text_between_spans_is_kept_verbatim():
    tree = parse_xml('<p><span a="1" b=\'2\'>I</span> <span>x</span>\n</p>')
    p = tree.root
    assert p.name == "p"
    kids = tree.children(p)
    assert [k.name for k in kids] == ["span", TEXT, "span", TEXT]
    assert kids[1].value == " "
    assert kids[3].value == "\n"
    assert kids[0].attributes == (("a", "1"), ("b", "2"))
    assert tree.text(p) == "I x\n"


def test_self_closing_and_namespaced_names():
    tree = parse_xml('<metadata><ttm:agent type="person" xml:id="v1"/><ttm:agent xml:id="v2" /></metadata>')
    agents = tree.element_children(tree.root)
    assert [a.name for a in agents] == ["ttm:agent", "ttm:agent"]
    assert agents[0].attr("xml:id") == "v1"
    assert agents[1].attr("xml:id") == "v2"
    assert agents[0].children == []


def test_unquoted_and_bare_attributes():
    tree = parse_xml("<span begin=1.5 hidden>x</span>")
    assert tree.root.attributes == (("begin", "1.5"), ("hidden", ""))


def test_declarations_and_comments_are_skipped():
    tree = parse_xml('<?xml version="1.0"?><!DOCTYPE tt><!-- note --><tt>hi<![CDATA[<b>]]></tt>')
    assert tree.root.name == "tt"
    assert tree.text(tree.root) == "hi<b>"


def test_unmatched_close_tags_are_tolerated():
    tree = parse_xml("<a><b>x</a></c><d/>")
    a = tree.root
    assert a.name == "a"
    b = tree.element_children(a)[0]
    assert b.name == "b"
    assert tree.text(b) == "x"
    # <d/> comes after </a> closed both a and b
    assert [n.name for n in tree.element_children(tree.document)] == ["a", "d"]


def test_unclosed_elements_at_end_of_input():
    tree = parse_xml("<a><b>text")
    assert tree.text(tree.root) == "text"


def test_find_all_walks_in_document_order():
    tree = parse_xml("<body><div><p id='1'/><p id='2'><p id='3'/></p></div><p id='4'/></body>")
    assert [p.attr("id") for p in tree.find_all(lambda n: n.name == "p")] == ["1", "2", "3", "4"]


def test_parent_links():
    tree = parse_xml("<a><b/></a>")
    b = tree.element_children(tree.root)[0]
    assert tree[b.parent] is tree.root


def test_attribute_entities_are_decoded():
    tree = parse_xml('<text for="a&amp;b">x</text>')
    assert tree.root.attr("for") == "a&b"


def test_no_markup_at_all():
    tree = parse_xml("just words")
    assert tree.root is tree.document
    assert tree.text(tree.document) == "just words"


def test_only_xml_entities_are_decoded_in_text():
    tree = parse_xml("<s>a &amp; b &lt;3 &#169; &#x263A; rock&not roll &copy me &bogus;</s>")
    assert tree.text(tree.root) == "a & b <3 © ☺ rock&not roll &copy me &bogus;"


def test_cdata_is_kept_as_written():
    tree = parse_xml("<s>x &amp; <![CDATA[&amp; <i>]]></s>")
    assert tree.text(tree.root) == "x & &amp; <i>"
