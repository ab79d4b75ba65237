"""Tests for the strict HTML parser."""

import pytest

from htmlsearch import ElementNode, HtmlParseError, TextNode, parse_html


def only(doc):
    (node,) = doc.children
    return node


class TestStructure:
    def test_document_is_a_forest(self):
        doc = parse_html("<p>a</p>text<div></div>")
        assert [node.name for node in doc.children] == ["p", "#text", "div"]

    def test_nested_elements(self):
        div = only(parse_html("<div><section><h1>x</h1></section></div>"))
        section = div.children[0]
        h1 = section.children[0]
        assert (div.name, section.name, h1.name) == ("div", "section", "h1")
        assert isinstance(h1.children[0], TextNode)
        assert h1.children[0].data == "x"
        assert h1.parent is section

    def test_empty_input(self):
        assert parse_html("").children == []

    def test_whitespace_text_is_kept(self):
        div = only(parse_html("<div> <p></p>\n</div>"))
        assert [child.name for child in div.children] == ["#text", "p", "#text"]

    def test_tag_names_keep_case(self):
        assert only(parse_html("<Div></Div>")).name == "Div"

    def test_entities_in_text(self):
        p = only(parse_html("<p>a &amp; b &lt;c&gt;</p>"))
        assert p.children[0].data == "a & b <c>"

    def test_comments_and_doctype_are_skipped(self):
        doc = parse_html("<!DOCTYPE html><!-- note <p> --><p></p>")
        assert [node.name for node in doc.children] == ["p"]

    def test_byte_order_mark_is_dropped(self):
        assert only(parse_html("\ufeff<p></p>")).name == "p"


class TestAttributes:
    def test_quoted_unquoted_and_valueless(self):
        node = only(parse_html("<input type=\"text\" name='q' value=x disabled>"))
        assert node.attrs == [("type", "text"), ("name", "q"), ("value", "x"), ("disabled", "")]

    def test_duplicates_are_kept_in_order(self):
        node = only(parse_html('<h1 class="a" class="b"></h1>'))
        assert node.attrs == [("class", "a"), ("class", "b")]

    def test_class_value_is_not_split(self):
        node = only(parse_html('<h1 class="title big"></h1>'))
        assert node.attrs == [("class", "title big")]

    def test_spaces_around_equals(self):
        node = only(parse_html('<a href = "/x"></a>'))
        assert node.get("href") == "/x"

    def test_entities_in_values(self):
        node = only(parse_html('<a title="&quot;hi&quot; &amp; bye"></a>'))
        assert node.get("title") == '"hi" & bye'

    def test_get_returns_first_pair(self):
        node = ElementNode("p", [("id", "a"), ("id", "b")])
        assert node.get("id") == "a"
        assert node.get("class") is None


class TestVoidAndRawText:
    def test_void_elements_have_no_end_tag(self):
        div = only(parse_html("<div>a<br>b<img src=x.png></div>"))
        assert [child.name for child in div.children] == ["#text", "br", "#text", "img"]

    def test_self_closing(self):
        doc = parse_html("<widget/><p></p>")
        assert [node.name for node in doc.children] == ["widget", "p"]
        assert doc.children[0].children == []

    def test_self_closing_with_attributes(self):
        node = only(parse_html('<icon name="x" />'))
        assert node.attrs == [("name", "x")]

    def test_script_is_raw_text(self):
        script = only(parse_html("<script>if (a < b) { x = '</p>'; }</script>"))
        assert [child.data for child in script.children] == ["if (a < b) { x = '</p>'; }"]

    def test_style_is_raw_text(self):
        style = only(parse_html("<style>p > a { color: red }</style>"))
        assert style.children[0].data == "p > a { color: red }"

    def test_longer_end_tag_name_is_script_content(self):
        script = only(parse_html('<script>x = "</scripts>";</script>'))
        assert script.children[0].data == 'x = "</scripts>";'

    def test_raw_text_end_tag_with_whitespace(self):
        script = only(parse_html("<script>a</script >"))
        assert script.children[0].data == "a"

    def test_only_longer_end_tag_is_eof(self):
        with pytest.raises(HtmlParseError) as exc_info:
            parse_html("<script>x</scripts>")
        assert exc_info.value.code == "eof-in-raw-text"


class TestErrors:
    @pytest.mark.parametrize(
        ("html", "code"),
        [
            ("<div><div>", "missing-end-tag"),
            ("<div></span>", "mismatched-end-tag"),
            ("<div><p></div></p>", "mismatched-end-tag"),
            ("</div>", "unexpected-end-tag"),
            ("<div", "eof-in-tag"),
            ('<a href="x>', "unterminated-attribute-value"),
            ("<a href=>", "missing-attribute-value"),
            ("<!-- never closed", "eof-in-comment"),
            ("<script>x", "eof-in-raw-text"),
            ("a < b", "invalid-first-character-of-tag-name"),
            ("<a / b>", "unexpected-character-in-tag"),
            ("</a b>", "unexpected-character-in-tag"),
        ],
    )
    def test_error_codes(self, html, code):
        with pytest.raises(HtmlParseError) as exc_info:
            parse_html(html)
        assert exc_info.value.code == code

    def test_position_and_remaining_input(self):
        with pytest.raises(HtmlParseError) as exc_info:
            parse_html("<div>\n  <p></span>\n</div>")
        error = exc_info.value
        assert (error.line, error.column) == (2, 6)
        assert error.got == "</span>\n</div>"

    def test_message_names_the_tag(self):
        with pytest.raises(HtmlParseError) as exc_info:
            parse_html("<section>")
        assert str(exc_info.value) == (
            "(1,10): missing-end-tag - Expected </section> closing tag but reached end of file"
        )

    def test_path_prefixes_message(self):
        error = HtmlParseError("eof-in-tag", line=1, column=1, message="Unexpected end of file in tag", path="a.html")
        assert str(error) == "a.html: (1,1): eof-in-tag - Unexpected end of file in tag"

    def test_is_value_error(self):
        with pytest.raises(ValueError):
            parse_html("<p>")
