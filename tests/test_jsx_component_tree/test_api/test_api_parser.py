"""Tests for the public parsing API.

Covers the module-level functions and the reusable ComponentTreeParser,
including the never-fail guarantee.
"""

import json
from unittest.mock import patch

import pytest

from jsx_component_tree.api import (
    EVENT_HANDLER_NOTICE,
    INLINE_STYLE_NOTICE,
    ComponentTreeParser,
    parse,
    parse_file,
    serialize,
)
from jsx_component_tree.attributes import Num, Obj, Str
from jsx_component_tree.registry import ComponentRegistry
from jsx_component_tree.shared import DiagnosticSeverity, ParserConfig
from jsx_component_tree.tree import ComponentTreeBuilder, ElementNode, SequentialIdGenerator


def info_messages(result):
    return [
        diag.message
        for diag in result.get_diagnostics_by_severity(DiagnosticSeverity.INFO)
    ]


class TestParseFunction:
    """Test Level 1: module-level parse."""

    def test_nested_elements(self) -> None:
        """Test a card with a text child."""
        result = parse("<Card><Text>Hello</Text></Card>")

        assert result.success
        assert result.warnings == []
        assert result.errors == []
        card = result.roots[0]
        assert (card.type, card.category) == ("Card", "Data Display")
        assert len(card.children) == 1
        text = card.children[0]
        assert (text.type, text.category) == ("Text", "Typography")
        assert text.attrs == {"children": Str("Hello")}

    def test_self_closing_with_attributes(self) -> None:
        """Test a self-closing node with string and number attributes."""
        result = parse('<Image src="a.png" height={200} />')

        image = result.roots[0]
        assert image.attrs == {"src": Str("a.png"), "height": Num(200)}
        assert image.children == []

    def test_style_object(self) -> None:
        """Test an inline style object."""
        result = parse('<Box style={{padding: 10, color: "red"}} />')

        box = result.roots[0]
        assert box.type == "Box"
        assert box.attrs["style"] == Obj({"padding": Num(10), "color": Str("red")})

    def test_malformed_markup_recovers(self) -> None:
        """Test that a missing closing tag still gives a usable tree."""
        result = parse("<Card><Text>Oops</Card>")

        assert result.warnings
        assert result.errors == []
        assert [root.type for root in result.roots] == ["Card"]
        assert result.roots[0].children[0].text == "Oops"

    def test_siblings_keep_order(self) -> None:
        """Test sibling order is preserved."""
        result = parse("<Group><Button>A</Button><Button>B</Button></Group>")

        group = result.roots[0]
        assert [child.type for child in group.children] == ["Button", "Button"]
        assert [child.text for child in group.children] == ["A", "B"]

    @pytest.mark.parametrize("markup", ["", "   \n\t  "])
    def test_empty_input(self, markup) -> None:
        """Test input without any markup."""
        result = parse(markup)

        assert not result.success
        assert result.roots == []
        assert result.errors == ["Input contains no markup"]

    def test_non_string_input(self) -> None:
        """Test that a non-string argument gives an error result."""
        result = parse(None)

        assert not result.success
        assert result.roots == []
        assert result.errors == ["Expected markup text, got NoneType"]

    def test_never_fail_guarantee(self) -> None:
        """Test unexpected failures are reported instead of raised."""
        with patch.object(ComponentTreeBuilder, "build", side_effect=RuntimeError("boom")):
            result = parse("<Card />")

        assert not result.success
        assert result.roots == []
        assert result.errors == ["Parse operation failed: boom"]
        assert result.diagnostics[0].severity == DiagnosticSeverity.CRITICAL

    def test_feature_notices(self) -> None:
        """Test informational notices for styles and event handlers."""
        result = parse(
            '<Button onClick={() => go()} style={{color: "red"}}>Go</Button>'
        )

        assert info_messages(result) == [INLINE_STYLE_NOTICE, EVENT_HANDLER_NOTICE]
        assert INLINE_STYLE_NOTICE not in result.warnings
        assert result.success

    def test_no_notices_for_plain_markup(self) -> None:
        """Test plain markup gets no notices."""
        assert info_messages(parse('<Badge color="pink">New</Badge>')) == []

    def test_custom_id_generator(self) -> None:
        """Test ids come from the supplied generator."""
        result = parse("<Card><Badge /></Card>", id_generator=SequentialIdGenerator(start=10))
        assert [node.id for node in result.iter_nodes()] == ["card-10", "badge-11"]

    def test_ids_are_unique(self) -> None:
        """Test every node gets a distinct id."""
        result = parse("<Stack><Text>a</Text><Text>b</Text>c</Stack>")
        ids = [node.id for node in result.iter_nodes()]
        assert len(ids) == len(set(ids)) == 4

    def test_custom_registry(self) -> None:
        """Test resolution through a caller-supplied resolver."""
        result = parse("<Hero />", registry=lambda raw: ("HeroBanner", "Marketing"))
        assert (result.roots[0].type, result.roots[0].category) == ("HeroBanner", "Marketing")

    def test_default_registry_resolves_aliases(self) -> None:
        """Test literal tags are mapped to canonical types."""
        result = parse("<Card.Section><div /></Card.Section>")

        section = result.roots[0]
        assert section.type == "CardSection"
        assert section.display_name == "Card Section"
        assert section.children[0].type == "Box"

    def test_correlation_id(self) -> None:
        """Test the correlation id is carried to the result and its diagnostics."""
        result = parse("<Card><Text>Oops</Card>", correlation_id="req-42")

        assert result.correlation_id == "req-42"
        builder_diagnostics = [d for d in result.diagnostics if d.component == "tree_builder"]
        assert builder_diagnostics
        assert all(d.correlation_id == "req-42" for d in builder_diagnostics)

    def test_to_dict_is_json_serializable(self) -> None:
        """Test the result dictionary can be dumped as JSON."""
        result = parse('<Card style={{margin: 4}}><Text>Hi</Text></Card>')
        data = json.loads(json.dumps(result.to_dict()))

        assert data["success"] is True
        assert data["node_count"] == 2
        assert data["roots"][0]["props"]["style"] == {"margin": 4}

    def test_strict_preset_keeps_fragments_as_text(self) -> None:
        """Test fragment handling under the strict preset."""
        markup = "<><Card /></>"

        default = parse(markup)
        assert default.warnings == []
        assert [root.type for root in default.roots] == ["Card"]
        assert "Fragment wrapper skipped" in info_messages(default)

        strict = parse(markup, config=ParserConfig.strict())
        assert "Fragment wrapper treated as text" in strict.warnings

    def test_input_size_limit(self) -> None:
        """Test the configured input limit."""
        config = ParserConfig.default().override(tokenizer__max_input_chars=10)
        result = parse("<Card>long enough</Card>", config=config)

        assert not result.success
        assert result.roots == []
        assert result.errors == ["Input of 24 characters exceeds the limit of 10"]

    def test_processing_time_recorded(self) -> None:
        """Test performance metrics are filled in."""
        result = parse("<Card />")
        assert result.processing_time_ms >= 0
        assert result.performance.nodes_created == 1


class TestParseFile:
    """Test file parsing."""

    def test_parse_file(self, tmp_path) -> None:
        """Test parsing a snippet from disk."""
        path = tmp_path / "snippet.jsx"
        path.write_text("<Card><Text>From disk</Text></Card>", encoding="utf-8")

        result = parse_file(path)
        assert result.success
        assert result.roots[0].children[0].text == "From disk"

    def test_parse_file_accepts_strings(self, tmp_path) -> None:
        """Test string paths."""
        path = tmp_path / "snippet.jsx"
        path.write_text("<Badge />", encoding="utf-8")
        assert parse_file(str(path)).roots[0].type == "Badge"

    def test_missing_file(self, tmp_path) -> None:
        """Test unreadable files give an error result."""
        result = parse_file(tmp_path / "missing.jsx")

        assert not result.success
        assert result.roots == []
        assert len(result.errors) == 1
        assert result.errors[0].startswith("Could not read")


class TestSerializeFunction:
    """Test Level 1: module-level serialize."""

    def test_uses_default_registry(self) -> None:
        """Test canonical types are written as literal tags."""
        tree = ElementNode("s-1", "CardSection", children=[ElementNode("b-2", "Box")])
        assert serialize([tree]) == "<Card.Section>\n  <div />\n</Card.Section>"

    def test_uses_serializer_config(self) -> None:
        """Test the serializer section of the configuration."""
        result = parse("<Group><Button>A</Button></Group>")
        assert serialize(result.roots, config=ParserConfig.compact()) == (
            "<Group><Button>A</Button></Group>"
        )

    def test_entries_that_are_not_nodes(self) -> None:
        """Test that non-node entries are skipped instead of raised."""
        assert serialize([{"type": "Card"}, ElementNode("b-1", "Badge")]) == "<Badge />"

    def test_plain_attribute_values(self) -> None:
        """Test an attribute set to a plain value by an editor."""
        roots = parse("<Group gap={1} />").roots
        roots[0].attrs["padding"] = 10
        roots[0].attrs["theme"] = object
        output = serialize(roots)
        assert output == "<Group gap={1} padding={10} theme={<class 'object'>} />"

    def test_never_fail_guarantee(self) -> None:
        """Test unexpected failures give an empty string."""
        assert serialize(None) == ""

    def test_failing_inverse_resolver(self) -> None:
        """Test a registry whose inverse lookup raises."""
        class MissingInverse:
            def resolve(self, raw_name):
                return raw_name, "Other"

            def inverse(self, canonical_type):
                raise KeyError(canonical_type)

        roots = parse("<A />").roots
        assert serialize(roots, registry=MissingInverse()) == "<A />"


class TestComponentTreeParser:
    """Test Level 2: the reusable parser class."""

    def test_defaults(self) -> None:
        """Test default configuration and registry."""
        parser = ComponentTreeParser()
        assert parser.config.name == "default"
        assert isinstance(parser.registry, ComponentRegistry)

    def test_statistics(self) -> None:
        """Test usage statistics across parses."""
        parser = ComponentTreeParser(correlation_id="stats")
        parser.parse("<Card />")
        parser.parse("")

        stats = parser.statistics
        assert stats["total_parses"] == 2
        assert stats["successful_parses"] == 1
        assert stats["success_rate"] == 0.5
        assert stats["correlation_id"] == "stats"

        parser.reset_statistics()
        assert parser.statistics["total_parses"] == 0
        assert parser.statistics["success_rate"] == 0.0

    def test_correlation_id_override(self) -> None:
        """Test per-call correlation ids."""
        parser = ComponentTreeParser(correlation_id="parser")
        assert parser.parse("<Card />").correlation_id == "parser"
        assert parser.parse("<Card />", correlation_id_override="call").correlation_id == "call"

    def test_round_trip_with_config(self) -> None:
        """Test parse and serialize share the configuration."""
        parser = ComponentTreeParser(config=ParserConfig.compact())
        result = parser.parse("<Group>\n  <Button>A</Button>\n</Group>")
        assert parser.serialize(result.roots) == "<Group><Button>A</Button></Group>"

    def test_reconfigure(self) -> None:
        """Test replacing configuration and registry."""
        parser = ComponentTreeParser()
        registry = ComponentRegistry()
        parser.reconfigure(config=ParserConfig.strict(), registry=registry)

        assert parser.config.name == "strict"
        assert parser.registry is registry

        parser.reconfigure()
        assert parser.config.name == "strict"

    def test_validate(self) -> None:
        """Test validation against the parser's registry."""
        parser = ComponentTreeParser()
        result = parser.parse("<Card><Widget /></Card>")

        assert parser.validate(result.roots) == [
            "Node widget-2 has unrecognized type 'Widget'"
        ]

    def test_validate_with_callable_resolver(self) -> None:
        """Test validation skips type checks without a registry."""
        parser = ComponentTreeParser(registry=lambda raw: (raw, "Custom"))
        result = parser.parse("<Widget />")
        assert parser.validate(result.roots) == []
