"""Tests for the query parser."""

import pytest

from htmlsearch import Child, Descendant, QuerySelector, SelectorError, Union, parse_query


def sel(tag=None, **kwargs):
    return QuerySelector(tag=tag, **kwargs)


class TestCompoundSelectors:
    def test_tag(self):
        assert parse_query("div") == sel("div")

    def test_tag_case_is_kept(self):
        assert parse_query("DIV") == sel("DIV")

    def test_universal(self):
        assert parse_query("*") == sel()

    def test_id_and_classes(self):
        assert parse_query("h1#top.title.big") == sel("h1", ids=["top"], classes=["title", "big"])

    def test_without_tag(self):
        assert parse_query(".title") == sel(classes=["title"])
        assert parse_query("#main") == sel(ids=["main"])

    def test_attribute_unquoted(self):
        assert parse_query("a[href=/index.html]") == sel("a", attributes=[("href", "/index.html")])

    def test_attribute_quoted(self):
        assert parse_query('a[title="two words"]') == sel("a", attributes=[("title", "two words")])
        assert parse_query("a[title='x']") == sel("a", attributes=[("title", "x")])

    def test_attribute_escape(self):
        assert parse_query(r'[data-x="a\"b"]') == sel(attributes=[("data-x", 'a"b')])

    def test_attribute_whitespace(self):
        assert parse_query("[ type = text ]") == sel(attributes=[("type", "text")])

    def test_several_attributes(self):
        assert parse_query("input[type=text][name=q]") == sel("input", attributes=[("type", "text"), ("name", "q")])

    def test_required_attributes_merge_order(self):
        selector = parse_query("p[lang=en].a#b")
        assert selector.required_attributes() == [("id", "b"), ("class", "a"), ("lang", "en")]


class TestCombinatorParsing:
    def test_child(self):
        assert parse_query("div > h1.title") == Child(sel("div"), sel("h1", classes=["title"]))

    def test_child_without_spaces(self):
        assert parse_query("div>h1") == Child(sel("div"), sel("h1"))

    def test_descendant(self):
        assert parse_query("div h1") == Descendant(sel("div"), sel("h1"))

    def test_combinators_are_left_associative(self):
        assert parse_query("a b > c") == Child(Descendant(sel("a"), sel("b")), sel("c"))
        assert parse_query("a > b c") == Descendant(Child(sel("a"), sel("b")), sel("c"))

    def test_union(self):
        assert parse_query("h1, p") == Union(sel("h1"), sel("p"))

    def test_union_has_lowest_precedence(self):
        assert parse_query("div > p, span a") == Union(
            Child(sel("div"), sel("p")),
            Descendant(sel("span"), sel("a")),
        )

    def test_union_is_left_associative(self):
        assert parse_query("a,b,c") == Union(Union(sel("a"), sel("b")), sel("c"))

    def test_surrounding_whitespace(self):
        assert parse_query("  div \n  p  ") == Descendant(sel("div"), sel("p"))

    def test_different_combinators_are_not_equal(self):
        assert Child(sel("a"), sel("b")) != Descendant(sel("a"), sel("b"))

    def test_repr(self):
        assert repr(parse_query("div > h1.title")) == (
            "Child(QuerySelector(tag='div'), QuerySelector(tag='h1', classes=['title']))"
        )


class TestInvalidQueries:
    @pytest.mark.parametrize(
        "query",
        [
            "",
            "   ",
            "div >",
            "> div",
            "div,",
            ", div",
            "div,,p",
            "div > > p",
            "div + p",
            "div ~ p",
            "a:first-child",
            "a[href]",
            "a[href^=x]",
            "a[href*=x]",
            "a[href=]",
            'a[href="x',
            "a[href=x",
            "#",
            ".",
            ".a div.b span!",
        ],
    )
    def test_rejected(self, query):
        with pytest.raises(SelectorError):
            parse_query(query)

    def test_tag_after_class_is_rejected(self):
        with pytest.raises(SelectorError):
            parse_query(".a[x=y]*")

    def test_selector_error_is_value_error(self):
        with pytest.raises(ValueError):
            parse_query("div +")
