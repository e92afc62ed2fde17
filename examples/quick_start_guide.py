#!/usr/bin/env python3
"""
Quick Start Guide for the JSX Component Tree parser.

This example walks through the editor workflow: parse a snippet, inspect the
tree and its diagnostics, edit it with the copy-on-write utilities, and write
it back to markup.
"""

import sys
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from jsx_component_tree import (
    ComponentTreeParser,
    ElementNode,
    ParserConfig,
    Str,
    get_path,
    insert_node,
    move_node,
    update_node,
)

SNIPPET = """
<Card shadow="sm" padding={16} style={{margin: 8, padding: [4, 8]}}>
  <Card.Section>
    <Image src="hero.png" height={160} />
  </Card.Section>
  <Group>
    <Title order={3}>Norway Fjord Adventures</Title>
    <Badge color="pink">On Sale</Badge>
  </Group>
  <Button onClick={() => book()} fullWidth>Book now</Button>
</Card>
"""


def quick_start_example():
    """Quick start example showing basic usage."""

    print("QUICK START - JSX Component Tree")
    print("=" * 45)

    # Step 1: Parse
    print("\nStep 1: Parsing")
    print("-" * 30)

    parser = ComponentTreeParser()
    result = parser.parse(SNIPPET)

    print(f"Success: {result.success}")
    print(f"Nodes: {result.node_count}")
    for warning in result.warnings:
        print(f"  warning: {warning}")
    for diag in result.diagnostics:
        if diag.severity.name == "INFO":
            print(f"  note: {diag.message}")

    # Step 2: Inspect
    print("\nStep 2: Tree")
    print("-" * 30)

    def show(node, depth=0):
        text = f' "{node.text}"' if node.text else ""
        print(f"{'  ' * depth}{node.type} [{node.category}] #{node.id}{text}")
        for child in node.children:
            show(child, depth + 1)

    for root in result.roots:
        show(root)

    # Step 3: Edit
    print("\nStep 3: Editing")
    print("-" * 30)

    roots = result.roots
    card = roots[0]
    group = card.children[1]
    badge = group.children[1]

    roots = update_node(roots, badge.id, attrs={"color": "teal", "children": "New"})
    roots = insert_node(
        roots,
        ElementNode(id="text-100", type="Text", attrs={"children": Str("From 199 EUR")}),
        parent_id=group.id,
    )
    roots = move_node(roots, badge.id, parent_id=card.id, index=0)

    print(f"Badge path: {get_path(roots, badge.id)}")
    print(f"Original tree untouched: {group.children[1] is badge}")

    # Step 4: Serialize
    print("\nStep 4: Serializing")
    print("-" * 30)

    print(parser.serialize(roots))

    compact = ComponentTreeParser(config=ParserConfig.compact())
    print("\nCompact form:")
    print(compact.serialize(roots))


if __name__ == "__main__":
    quick_start_example()
