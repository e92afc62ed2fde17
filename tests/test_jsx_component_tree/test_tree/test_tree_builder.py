"""Tests for the stack-machine tree builder.

Covers node construction, inline text handling, recovery from unbalanced
markup and the never-fail guarantees of the builder.
"""

import pytest

from jsx_component_tree.attributes import Num, Obj, Raw, Str
from jsx_component_tree.registry import ComponentRegistry
from jsx_component_tree.shared import BuilderConfig, DiagnosticSeverity
from jsx_component_tree.tokenization import JSXTokenizer, tokenize
from jsx_component_tree.tree import (
    ComponentTreeBuilder,
    ParseResult,
    SequentialIdGenerator,
    build_tree,
)


def build(markup, **kwargs):
    return build_tree(JSXTokenizer().tokenize(markup), **kwargs)


class TestWellFormedMarkup:
    """Test building trees from well-formed markup."""

    def test_element_with_inline_text(self) -> None:
        """Test a Card containing a Text with inline content."""
        result = build("<Card><Text>Hello</Text></Card>")

        assert result.success
        assert len(result.roots) == 1
        card = result.roots[0]
        assert card.type == "Card"
        assert len(card.children) == 1
        assert card.children[0].type == "Text"
        assert card.children[0].attrs == {"children": Str("Hello")}
        assert result.warnings == []
        assert result.errors == []

    def test_self_closing_element(self) -> None:
        """Test a self-closing element with attributes."""
        result = build('<Image src="a.png" height={200} />')

        image = result.roots[0]
        assert image.attrs == {"src": Str("a.png"), "height": Num(200)}
        assert image.children == []
        assert image.text is None
        assert image.self_closing is True

    def test_object_attribute(self) -> None:
        """Test an element with a style object."""
        result = build('<Box style={{padding: 10, color: "red"}}></Box>')
        assert result.roots[0].attrs["style"] == Obj({"padding": Num(10), "color": Str("red")})

    def test_sibling_order(self) -> None:
        """Test siblings keep source order."""
        result = build("<Group><Button>A</Button><Button>B</Button></Group>")

        group = result.roots[0]
        assert [child.type for child in group.children] == ["Button", "Button"]
        assert [child.text for child in group.children] == ["A", "B"]

    def test_node_count_matches_tags(self) -> None:
        """Test N open/close pairs plus S self-closing tags give N + S nodes."""
        markup = (
            '<Stack><Card><Image src="a" /><Text>x</Text></Card>'
            "<Button /><Group></Group></Stack>"
        )
        result = build(markup)
        assert result.node_count == 4 + 2

    def test_multiple_roots(self) -> None:
        """Test several top-level elements."""
        result = build("<Title>One</Title><Title>Two</Title>")
        assert [root.text for root in result.roots] == ["One", "Two"]

    def test_empty_element(self) -> None:
        """Test an element with nothing between its tags."""
        result = build("<Group></Group>")
        assert result.roots[0].children == []
        assert result.roots[0].attrs == {}
        assert result.roots[0].self_closing is False


class TestNameResolutionAndIds:
    """Test resolver and id generator integration."""

    def test_unresolved_names_pass_through(self) -> None:
        """Test that without a resolver names are kept with category Other."""
        result = build("<Card.Section />")

        node = result.roots[0]
        assert node.type == "Card.Section"
        assert node.category == "Other"
        assert node.display_name == "Card.Section"

    def test_registry_resolution(self) -> None:
        """Test canonical types, categories and display names."""
        result = build(
            "<Card><Card.Section /><span>x</span></Card>",
            name_resolver=ComponentRegistry.default(),
        )

        card = result.roots[0]
        section, text = card.children
        assert card.category == "Data Display"
        assert section.type == "CardSection"
        assert section.display_name == "Card Section"
        assert text.type == "Text"
        assert text.category == "Typography"

    def test_callable_resolver(self) -> None:
        """Test a plain function as resolver."""
        result = build("<Widget />", name_resolver=lambda name: ("Card", "Layout"))
        assert result.roots[0].type == "Card"
        assert result.roots[0].category == "Layout"

    def test_failing_resolver_falls_back(self) -> None:
        """Test that resolver exceptions become warnings."""
        def broken(name):
            raise RuntimeError("lookup down")

        result = build("<Card />", name_resolver=broken)

        assert result.roots[0].type == "Card"
        assert result.roots[0].category == "Other"
        assert result.warnings == ["Name resolver failed for <Card>: lookup down"]

    def test_sequential_ids(self) -> None:
        """Test default ids follow pre-order creation order."""
        result = build("<Card><Card.Section /><Text>x</Text></Card>")

        ids = [node.id for node in result.iter_nodes()]
        assert ids == ["card-1", "card-section-2", "text-3"]

    def test_fresh_ids_per_build(self) -> None:
        """Test that a reused builder restarts ids on every build."""
        builder = ComponentTreeBuilder()
        first = builder.build(tokenize("<Card />"))
        second = builder.build(tokenize("<Card />"))
        assert first.roots[0].id == second.roots[0].id == "card-1"

    def test_shared_id_generator(self) -> None:
        """Test an explicit generator continues across builds."""
        ids = SequentialIdGenerator(start=10)
        builder = ComponentTreeBuilder(id_generator=ids)
        builder.build(tokenize("<Card />"))
        second = builder.build(tokenize("<Card />"))

        assert second.roots[0].id == "card-11"
        assert ids.issued == 2

    def test_ids_are_unique(self) -> None:
        """Test id uniqueness across a larger tree."""
        result = build("<Stack>" + "<Text>t</Text>Loose<Button />" * 5 + "</Stack>")
        ids = [node.id for node in result.iter_nodes()]
        assert len(ids) == len(set(ids)) == 16


class TestTextHandling:
    """Test inline text and synthetic text nodes."""

    def test_text_before_children_is_inline(self) -> None:
        """Test leading text becomes the inline text attribute."""
        result = build("<Card>Intro<Button>Go</Button></Card>")

        card = result.roots[0]
        assert card.text == "Intro"
        assert [child.type for child in card.children] == ["Button"]

    def test_text_after_children_becomes_text_node(self) -> None:
        """Test text after element children becomes a synthetic node."""
        result = build("<Stack><Title>T</Title>More text</Stack>")

        stack = result.roots[0]
        assert [child.type for child in stack.children] == ["Title", "Text"]
        assert stack.children[1].attrs == {"children": Str("More text")}
        assert stack.text is None

    def test_synthetic_text_node_type(self) -> None:
        """Test the configurable synthetic text node type."""
        result = build(
            "<Stack><Title>T</Title>More</Stack>",
            config=BuilderConfig(text_node_type="span"),
            name_resolver=ComponentRegistry.default(),
        )
        assert result.roots[0].children[1].type == "Text"
        assert result.roots[0].children[1].category == "Typography"

    def test_consecutive_text_is_joined(self) -> None:
        """Test text split by a comment is joined with a space."""
        result = build("<Text>Hello<!-- c -->world</Text>")
        assert result.roots[0].text == "Hello world"

    def test_whitespace_is_collapsed(self) -> None:
        """Test whitespace normalization."""
        result = build("<Text>\n    Hello\n    world\n</Text>")
        assert result.roots[0].text == "Hello world"

    def test_whitespace_kept_when_configured(self) -> None:
        """Test whitespace collapsing can be disabled."""
        result = build(
            "<Text>\n  Hello\n  world\n</Text>",
            config=BuilderConfig(collapse_whitespace=False),
        )
        assert result.roots[0].text == "Hello\n  world"

    def test_whitespace_between_elements_ignored(self) -> None:
        """Test indentation produces no text nodes."""
        result = build("<Group>\n  <Button />\n  <Button />\n</Group>")
        assert [child.type for child in result.roots[0].children] == ["Button", "Button"]

    def test_string_expression_is_unquoted(self) -> None:
        """Test {"..."} text keeps its exact content."""
        result = build('<Text>{"  a < b  "}</Text>')
        assert result.roots[0].text == "  a < b  "

    def test_string_expression_kept_when_configured(self) -> None:
        """Test unquoting can be disabled."""
        result = build(
            '<Text>{"x"}</Text>',
            config=BuilderConfig(unquote_text_expressions=False),
        )
        assert result.roots[0].text == '{"x"}'
        assert result.roots[0].attrs == {"children": Raw('{"x"}')}

    def test_other_expressions_stay_verbatim(self) -> None:
        """Test non-string expressions in text are kept as written."""
        result = build("<Text>{count}</Text>")
        assert result.roots[0].text == "{count}"
        assert result.roots[0].attrs == {"children": Raw("{count}")}

    def test_comment_expressions_are_dropped(self) -> None:
        """Test {/* */} comments produce no text."""
        result = build("<Card>{/* <Old /> */}<Button /></Card>")

        card = result.roots[0]
        assert card.text is None
        assert [child.type for child in card.children] == ["Button"]

    def test_text_replaces_children_attribute(self) -> None:
        """Test a non-text children attribute is replaced with a warning."""
        result = build("<Text children={1}>Hi</Text>")

        assert result.roots[0].text == "Hi"
        assert len(result.warnings) == 1
        assert "replaces the 'children' attribute" in result.warnings[0]

    def test_mixed_text_is_raw_markup(self) -> None:
        """Test text around an expression is kept as markup."""
        result = build("<Text>Hello   {name}\n  today</Text>")
        assert result.roots[0].attrs == {"children": Raw("Hello {name} today")}

    def test_whitespace_inside_expressions_is_kept(self) -> None:
        """Test collapsing stops at expression boundaries."""
        result = build('<Text>{"a  b"}  {c}</Text>')
        assert result.roots[0].attrs == {"children": Raw('{"a  b"} {c}')}

    def test_adjacent_string_literals_stay_separate(self) -> None:
        """Test two literals are not merged into one string."""
        result = build('<Text>{" a "}{" b "}</Text>')
        assert result.roots[0].attrs == {"children": Raw('{" a "}{" b "}')}

    def test_literal_braces_stay_literal(self) -> None:
        """Test a string literal holding braces is plain text."""
        result = build('<Text>{"{x}"}</Text>')
        assert result.roots[0].attrs == {"children": Str("{x}")}

    def test_children_expression_attribute(self) -> None:
        """Test a children expression is stored like text markup."""
        result = build("<Text children={label}></Text>")
        assert result.roots[0].attrs == {"children": Raw("{label}")}
        assert result.roots[0].text == "{label}"

    def test_text_joined_with_expression(self) -> None:
        """Test literal text followed by an expression is joined as markup."""
        result = build("<Text>a < b<!-- c -->{name}</Text>")
        assert result.roots[0].attrs == {"children": Raw('{"a < b"} {name}')}

    def test_self_closing_keeps_children_attribute(self) -> None:
        """Test a self-closing tag never gets inline text."""
        result = build('<A children="x" />')

        node = result.roots[0]
        assert node.self_closing is True
        assert node.attrs == {"children": Str("x")}
        assert node.text is None

    def test_top_level_text(self) -> None:
        """Test text outside any element becomes a root text node."""
        result = build("Hello <Button />")
        assert [root.type for root in result.roots] == ["Text", "Button"]


class TestRecovery:
    """Test recovery from unbalanced markup."""

    def test_missing_close_tag(self) -> None:
        """Test a missing inner closing tag."""
        result = build("<Card><Text>Oops</Card>")

        assert result.success
        assert len(result.roots) == 1
        card = result.roots[0]
        assert card.type == "Card"
        assert [child.type for child in card.children] == ["Text"]
        assert card.children[0].text == "Oops"
        assert len(result.warnings) == 2
        assert "does not match" in result.warnings[0]
        assert result.warnings[1] == "Unclosed tag <Card> closed at end of input"

    def test_crossed_close_tags(self) -> None:
        """Test crossed closing tags pop the innermost element."""
        result = build("<Group><Button>A</Group></Button>")

        assert len(result.roots) == 1
        group = result.roots[0]
        assert group.type == "Group"
        assert [child.type for child in group.children] == ["Button"]
        assert group.children[0].text == "A"
        assert result.warnings == [
            "Closing tag </Group> does not match <Button>; <Button> closed instead",
            "Closing tag </Button> does not match <Group>; <Group> closed instead",
        ]

    def test_unmatched_close(self) -> None:
        """Test a closing tag with nothing open is ignored."""
        result = build("<Card /></Text>")

        assert [root.type for root in result.roots] == ["Card"]
        assert result.warnings == ["Unmatched closing tag </Text> ignored"]

    def test_unclosed_elements_become_roots(self) -> None:
        """Test end-of-input recovery keeps every node and its children."""
        result = build("<Stack><Title>T</Title><Card>")

        assert [root.type for root in result.roots] == ["Card", "Stack"]
        stack = result.roots[1]
        assert [child.type for child in stack.children] == ["Title"]
        assert result.warnings == [
            "Unclosed tag <Card> closed at end of input",
            "Unclosed tag <Stack> closed at end of input",
        ]
        assert result.performance.recovery_operations == 2

    def test_unclosed_after_complete_root(self) -> None:
        """Test recovered nodes follow roots that were already complete."""
        result = build("<Badge /><Card><Text>Hi")
        assert [root.type for root in result.roots] == ["Badge", "Text", "Card"]

    def test_attribute_warnings_are_prefixed(self) -> None:
        """Test attribute warnings name their element."""
        result = build("<Button onClick={handle} />")

        assert result.warnings == [
            "<Button>: Expression 'handle' in 'onClick' was not evaluated; kept verbatim"
        ]
        diagnostic = result.get_diagnostics_by_severity(DiagnosticSeverity.WARNING)[0]
        assert diagnostic.component == "attribute_parser"
        assert diagnostic.position == {"offset": 0, "line": 1, "column": 1}

    def test_tokenizer_diagnostics_are_kept(self) -> None:
        """Test tokenizer warnings reach the result."""
        result = build("<Card><!-- never closed")
        assert "Unterminated comment folded into text" in result.warnings


class TestInvalidInput:
    """Test unusable input."""

    @pytest.mark.parametrize("markup", ["", "   \n  ", "{/* only a comment */}"])
    def test_no_markup(self, markup) -> None:
        """Test that input without content produces an error entry."""
        result = build(markup)

        assert result.roots == []
        assert result.success is False
        assert result.errors == ["Input contains no markup"]

    def test_tokenizer_error_is_not_duplicated(self) -> None:
        """Test that a tokenizer error is the only error reported."""
        result = build(None)
        assert result.errors == ["Expected markup text, got NoneType"]
        assert result.success is False

    def test_bad_token_is_reported(self) -> None:
        """Test exceptions while processing a token become errors."""
        builder = ComponentTreeBuilder(id_generator=lambda type_name: "")
        result = builder.build(tokenize("<Card />"))

        assert result.success is False
        assert result.errors[0].startswith("Error processing token 0:")


class TestParseResult:
    """Test ParseResult helpers."""

    def test_summary_and_dict(self) -> None:
        """Test summary and dictionary conversion."""
        result = build("<Card><Text>Oops</Card>")

        summary = result.summary()
        assert summary["root_count"] == 1
        assert summary["node_count"] == 2
        assert summary["warning_count"] == 2
        assert summary["error_count"] == 0

        data = result.to_dict()
        assert data["roots"][0]["type"] == "Card"
        assert data["roots"][0]["children"][0]["props"] == {"children": "Oops"}
        assert len(data["diagnostics"]) == 2

    def test_default_result(self) -> None:
        """Test an empty result."""
        result = ParseResult()
        assert result.node_count == 0
        assert not result.has_errors()
        result.add_diagnostic(DiagnosticSeverity.ERROR, "bad", "test")
        assert result.has_errors()
        assert result.errors == ["bad"]

    def test_performance_figures(self) -> None:
        """Test metrics recorded while building."""
        markup = "<Card><Text>x</Text></Card>"
        result = build(markup)

        assert result.performance.characters_processed == len(markup)
        assert result.performance.tokens_generated == 5
        assert result.performance.nodes_created == 2
        assert result.processing_time_ms >= 0
