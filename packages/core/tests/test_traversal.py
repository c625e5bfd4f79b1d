"""Tests for the tree-sitter Java traversal and the indexing runner."""

from __future__ import annotations

from pathlib import Path

import pytest
from conftest import make_settings
from lsifmine_core.indexer import (
    DeclarationKind,
    DeclarationRef,
    FragmentOwner,
    NodeKind,
    SourceLocation,
    StaticLanguageModel,
)
from lsifmine_core.pathing import path_to_uri
from lsifmine_core.protocol import JsonLinesSink, Position, TextRange, load_records
from lsifmine_core.treesitter import (
    JavaSourceTraversal,
    TreeSitterLanguage,
    TreeSitterManager,
    detect_language,
)

CALCULATOR_SOURCE = """package com.example;

public class Calculator {
    private int total;

    public int add(int a, int b) {
        int sum = a + b;
        return sum;
    }
}
"""

MAIN_SOURCE = """package com.example;

public class Main {
    public static void main(String[] args) {
        System.out.println(new Calculator().add(1, 2));
    }
}
"""

DECLARATION_KINDS = frozenset(
    {
        NodeKind.TYPE_DECLARATION,
        NodeKind.ENUM_DECLARATION,
        NodeKind.ENUM_CONSTANT,
        NodeKind.METHOD_DECLARATION,
        NodeKind.SINGLE_VARIABLE_DECLARATION,
        NodeKind.VARIABLE_DECLARATION_FRAGMENT,
    }
)


def locate(source: str, needle: str, occurrence: int = 0) -> tuple[int, TextRange]:
    """Byte offset and range of an ASCII needle in ASCII source."""
    offset = -1
    for _ in range(occurrence + 1):
        offset = source.index(needle, offset + 1)
    line = source.count("\n", 0, offset)
    character = offset - (source.rfind("\n", 0, offset) + 1)
    return offset, TextRange.of(line, character, line, character + len(needle))


@pytest.fixture
def traversal() -> JavaSourceTraversal:
    pytest.importorskip("tree_sitter_language_pack")
    TreeSitterManager.reset()
    return JavaSourceTraversal(TreeSitterManager(cache_size=10))


class TestLanguageDetection:
    """Tests for language detection."""

    def test_detect_java(self) -> None:
        assert detect_language("Calculator.java") == TreeSitterLanguage.JAVA
        assert detect_language("/src/com/example/A.JAVA") == TreeSitterLanguage.JAVA

    def test_detect_unsupported(self) -> None:
        assert detect_language("pom.xml") is None
        assert detect_language("A.class") is None


class TestJavaSourceTraversal:
    """Tests for the syntax nodes reported for Java files."""

    def test_declarations_in_order(self, traversal: JavaSourceTraversal) -> None:
        """Declarations are reported in source order with their modifiers."""
        nodes = list(traversal.nodes("Calculator.java", CALCULATOR_SOURCE))
        declarations = [node for node in nodes if node.kind in DECLARATION_KINDS]

        assert [(node.kind, node.text) for node in declarations] == [
            (NodeKind.TYPE_DECLARATION, "Calculator"),
            (NodeKind.VARIABLE_DECLARATION_FRAGMENT, "total"),
            (NodeKind.METHOD_DECLARATION, "add"),
            (NodeKind.SINGLE_VARIABLE_DECLARATION, "a"),
            (NodeKind.SINGLE_VARIABLE_DECLARATION, "b"),
            (NodeKind.VARIABLE_DECLARATION_FRAGMENT, "sum"),
        ]
        assert declarations[0].modifiers == frozenset({"public"})
        assert declarations[1].modifiers == frozenset({"private"})
        assert declarations[1].owner == FragmentOwner.FIELD
        assert declarations[5].owner == FragmentOwner.LOCAL_STATEMENT

    def test_name_ranges(self, traversal: JavaSourceTraversal) -> None:
        """Declarations are located by their name."""
        nodes = list(traversal.nodes("Calculator.java", CALCULATOR_SOURCE))
        calculator = next(node for node in nodes if node.kind == NodeKind.TYPE_DECLARATION)

        assert calculator.range == TextRange.of(2, 13, 2, 23)
        assert calculator.offset == CALCULATOR_SOURCE.index("Calculator")
        assert calculator.length == len("Calculator")

    def test_declaration_precedes_its_name(self, traversal: JavaSourceTraversal) -> None:
        """The name of a declaration is reported right after it."""
        nodes = list(traversal.nodes("Calculator.java", CALCULATOR_SOURCE))
        index = next(i for i, node in enumerate(nodes) if node.kind == NodeKind.METHOD_DECLARATION)
        name = nodes[index + 1]

        assert name.kind == NodeKind.SIMPLE_NAME
        assert name.range == nodes[index].range
        assert name.parent_kind == NodeKind.METHOD_DECLARATION

    def test_enum(self, traversal: JavaSourceTraversal) -> None:
        """Enum declarations and their constants are reported."""
        source = "enum Color { RED, GREEN }\n"
        nodes = list(traversal.nodes("Color.java", source))
        kinds = [(node.kind, node.text) for node in nodes if node.kind in DECLARATION_KINDS]

        assert kinds == [
            (NodeKind.ENUM_DECLARATION, "Color"),
            (NodeKind.ENUM_CONSTANT, "RED"),
            (NodeKind.ENUM_CONSTANT, "GREEN"),
        ]

    def test_interface_constants(self, traversal: JavaSourceTraversal) -> None:
        """Interface constants are reported as field fragments."""
        source = "public interface Api { int LIMIT = 10; public String NAME = \"api\"; }\n"
        nodes = list(traversal.nodes("Api.java", source))
        fragments = [n for n in nodes if n.kind == NodeKind.VARIABLE_DECLARATION_FRAGMENT]

        assert [(n.text, n.owner) for n in fragments] == [
            ("LIMIT", FragmentOwner.FIELD),
            ("NAME", FragmentOwner.FIELD),
        ]
        assert fragments[0].modifiers == frozenset()
        assert fragments[1].modifiers == frozenset({"public"})

    def test_enhanced_for_variable(self, traversal: JavaSourceTraversal) -> None:
        """The variable of an enhanced for loop is a single variable declaration."""
        source = (
            "class Printer {\n"
            "    void print(java.util.List<String> xs) {\n"
            "        for (final String s : xs) { System.out.println(s); }\n"
            "    }\n"
            "}\n"
        )
        nodes = list(traversal.nodes("Printer.java", source))
        variables = [n for n in nodes if n.kind == NodeKind.SINGLE_VARIABLE_DECLARATION]

        assert [n.text for n in variables] == ["xs", "s"]
        loop_variable = variables[1]
        assert loop_variable.modifiers == frozenset({"final"})
        _, expected = locate(source, "s :")
        assert loop_variable.range.start == expected.start
        assert loop_variable.length == 1

    def test_supertypes_need_implementations(self, traversal: JavaSourceTraversal) -> None:
        """Type references in extends clauses belong to the type declaration."""
        source = "class Square extends Shape implements Drawable {}\n"
        nodes = list(traversal.nodes("Square.java", source))
        types = {node.text: node for node in nodes if node.kind == NodeKind.SIMPLE_TYPE}

        assert types["Shape"].parent_kind == NodeKind.TYPE_DECLARATION
        assert types["Drawable"].parent_kind == NodeKind.TYPE_DECLARATION

    def test_utf16_columns(self, traversal: JavaSourceTraversal) -> None:
        """Columns count UTF-16 code units, offsets count bytes."""
        source = 'class A {\n    String a = "é"; int count;\n}\n'
        nodes = list(traversal.nodes("A.java", source))
        count = next(
            node
            for node in nodes
            if node.kind == NodeKind.VARIABLE_DECLARATION_FRAGMENT and node.text == "count"
        )

        assert count.range.start == Position(1, 24)
        assert count.offset == source.encode("utf-8").index(b"count")
        assert count.length == 5


class TestParseCache:
    """Tests for the parse-tree cache."""

    def test_reuses_tree_until_content_changes(self, traversal: JavaSourceTraversal) -> None:
        """Unchanged content is served from the cache."""
        manager = traversal.manager

        first = manager.parse("Calculator.java", CALCULATOR_SOURCE)
        second = manager.parse("Calculator.java", CALCULATOR_SOURCE)
        changed = manager.parse("Calculator.java", CALCULATOR_SOURCE + "\n")

        assert second is first
        assert changed is not first
        stats = manager.get_cache_stats()
        assert stats["hits"] == 1
        assert stats["misses"] == 2
        assert stats["cached_trees"] == 1

    def test_invalidate(self, traversal: JavaSourceTraversal) -> None:
        """Invalidated files are parsed again."""
        manager = traversal.manager
        first = manager.parse("Calculator.java", CALCULATOR_SOURCE)

        manager.invalidate("Calculator.java")

        assert manager.parse("Calculator.java", CALCULATOR_SOURCE) is not first

    def test_unsupported_file(self, traversal: JavaSourceTraversal) -> None:
        """Only Java sources are parsed."""
        with pytest.raises(ValueError):
            traversal.manager.parse("pom.xml", "<project/>")


class TestRunner:
    """End-to-end indexing of a small project."""

    def write_project(self, root: Path) -> tuple[Path, Path]:
        package = root / "src" / "main" / "java" / "com" / "example"
        package.mkdir(parents=True)
        calculator = package / "Calculator.java"
        main = package / "Main.java"
        calculator.write_text(CALCULATOR_SOURCE, encoding="utf-8")
        main.write_text(MAIN_SOURCE, encoding="utf-8")
        return calculator, main

    def make_model(self, calculator: Path, main: Path) -> StaticLanguageModel:
        model = StaticLanguageModel()
        calculator_uri = path_to_uri(calculator)
        main_uri = path_to_uri(main)
        declaration_offset, declaration_range = locate(CALCULATOR_SOURCE, "add")
        call_offset, call_range = locate(MAIN_SOURCE, "add")

        add = model.add_declaration(
            DeclarationRef(
                kind=DeclarationKind.METHOD,
                name="add",
                parent=DeclarationRef(
                    kind=DeclarationKind.TYPE,
                    name="Calculator",
                    qualified_name="com.example.Calculator",
                ),
                signature="(II)I",
            ),
            location=SourceLocation(calculator_uri, declaration_range),
            hover="public int add(int a, int b)",
        )
        model.add_occurrence(calculator_uri, declaration_offset, declaration_range.start, add)
        model.add_occurrence(main_uri, call_offset, call_range.start, add)
        return model

    def test_index_project(self, traversal: JavaSourceTraversal, tmp_path: Path) -> None:
        """Indexing a project writes one consistent graph for ``add``."""
        from lsifmine_core.runner import index_project

        calculator, main = self.write_project(tmp_path / "project")
        model = self.make_model(calculator, main)
        dump = tmp_path / "out" / "dump.lsif"

        with JsonLinesSink(dump) as sink:
            session = index_project(tmp_path / "project", model, make_settings(), sink=sink)

        records = load_records(dump)
        assert session.closed
        assert len(records) == session.emitter.count
        assert session.emitter.elements == []

        def vertices(label: str) -> list[dict]:
            return [r for r in records if r["type"] == "vertex" and r["label"] == label]

        assert len(vertices("document")) == 2
        assert len(vertices("resultSet")) == 1
        assert len(vertices("hoverResult")) == 1
        (moniker,) = vertices("moniker")
        assert moniker["kind"] == "export"
        assert moniker["identifier"] == "com.example.Calculator/add:(II)I"

        items = [r for r in records if r["label"] == "item"]
        assert [i["property"] for i in items if "property" in i] == ["definitions", "references"]

    def test_unreadable_file_is_skipped(
        self, traversal: JavaSourceTraversal, tmp_path: Path
    ) -> None:
        """A missing file does not abort the run."""
        from lsifmine_core.runner import index_sources

        calculator, main = self.write_project(tmp_path)
        model = self.make_model(calculator, main)

        session = index_sources(
            [tmp_path / "Missing.java", calculator, main],
            model,
            settings=make_settings(),
            traversal=traversal,
        )

        assert session.closed
        assert session.repository.find_document(path_to_uri(calculator)) is not None
        assert len(session.repository.symbols) == 1
