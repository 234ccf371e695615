"""Tests for the markdown list parser.

Test organization:
- TestIndentationAndLines: level resolution and single-line classification
- TestParseMarkdownList: document parsing, nesting, titles and errors
- TestNotesAttachment: free-text notes and bullets folded under todo items
- TestValidateMarkdownItems / TestFlatten / TestConvertToOutlineFormat
"""

from lecturelog.config import settings
from lecturelog.services.markdown_parser import (
    ItemKind,
    MarkdownParseResult,
    ParsedMarkdownItem,
    convert_to_outline_format,
    extract_title,
    flatten_markdown_items,
    get_indentation_level,
    parse_markdown_line,
    parse_markdown_list,
    validate_markdown_items,
)


class TestIndentationAndLines:
    def test_indentation_levels(self):
        assert get_indentation_level("- a") == 0
        assert get_indentation_level("  - a") == 1
        assert get_indentation_level("   - a") == 1
        assert get_indentation_level("    - a") == 2
        assert get_indentation_level("\t- a") == 1
        assert get_indentation_level("\t  - a") == 2

    def test_blank_line_is_nothing(self):
        parsed = parse_markdown_line("   ", 0)
        assert parsed.item is None
        assert parsed.error is None

    def test_todo_line(self):
        parsed = parse_markdown_line("- [ ] Write intro", 0)
        assert parsed.item.kind is ItemKind.TODO
        assert parsed.item.completed is False
        assert parsed.item.title == "Write intro"

    def test_todo_completed_is_case_insensitive(self):
        assert parse_markdown_line("- [x] Done", 0).item.completed is True
        assert parse_markdown_line("- [X] Done", 0).item.completed is True

    def test_bullet_has_no_completed_flag(self):
        item = parse_markdown_line("* Point", 0).item
        assert item.kind is ItemKind.BULLET
        assert item.completed is None
        assert item.children == []

    def test_text_line_is_title_candidate(self):
        parsed = parse_markdown_line("Just some text", 0)
        assert parsed.item is None
        assert parsed.error is None

    def test_malformed_bullet_reports_one_based_line(self):
        parsed = parse_markdown_line("-Invalid item without space", 4)
        assert parsed.item is None
        assert parsed.error == 'Line 5: Invalid list format: "-Invalid item without space"'

    def test_lone_dash_is_malformed(self):
        assert parse_markdown_line("  -", 0).error == 'Line 1: Invalid list format: "-"'


class TestParseMarkdownList:
    def test_simple_bullets(self):
        result = parse_markdown_list("# My Outline\n- Item 1\n- Item 2\n- Item 3")
        assert result.errors == []
        assert result.title == "My Outline"
        assert [i.title for i in result.items] == ["Item 1", "Item 2", "Item 3"]
        assert result.items[0].level == 0

    def test_asterisk_bullets(self):
        result = parse_markdown_list("* First item\n* Second item\n* Third item")
        assert result.errors == []
        assert len(result.items) == 3
        assert result.items[0].title == "First item"

    def test_todo_list(self):
        result = parse_markdown_list(
            "# Todo List\n- [ ] Incomplete task\n- [x] Complete task\n- [ ] Another"
        )
        assert result.errors == []
        assert [i.completed for i in result.items] == [False, True, False]

    def test_nested_lists(self):
        content = (
            "# Nested Outline\n"
            "- Topic 1\n"
            "  - Subtopic 1.1\n"
            "  - Subtopic 1.2\n"
            "- Topic 2\n"
            "  - Subtopic 2.1"
        )
        result = parse_markdown_list(content)
        assert result.errors == []
        assert len(result.items) == 2
        assert [c.title for c in result.items[0].children] == ["Subtopic 1.1", "Subtopic 1.2"]
        assert result.items[0].children[0].level == 1

    def test_deep_nesting(self):
        content = "- Level 0\n  - Level 1\n    - Level 2\n      - Level 3\n- Back to Level 0"
        result = parse_markdown_list(content)
        assert len(result.items) == 2
        level3 = result.items[0].children[0].children[0].children
        assert len(level3) == 1
        assert level3[0].title == "Level 3"

    def test_blank_lines_between_items(self):
        content = "# Title\n\n- Item 1\n\n- Item 2\n\n  - Nested item\n\n- Item 3"
        result = parse_markdown_list(content)
        assert result.errors == []
        assert result.title == "Title"
        assert len(result.items) == 3
        assert result.items[1].children[0].title == "Nested item"
        assert result.items[0].notes is None

    def test_invalid_line_is_reported_and_skipped(self):
        result = parse_markdown_list("- Valid item\n-Invalid item without space\n- Another valid item")
        assert len(result.errors) == 1
        assert "Invalid list format" in result.errors[0]
        assert "-Invalid item without space" in result.errors[0]
        assert len(result.items) == 2

    def test_crlf_line_endings(self):
        result = parse_markdown_list("# T\r\n- a\r\n- b\r\n")
        assert result.title == "T"
        assert [i.title for i in result.items] == ["a", "b"]

    def test_item_levels_grow_with_depth(self):
        result = parse_markdown_list("- a\n    - b\n  - c")
        a = result.items[0]
        assert [c.title for c in a.children] == ["b", "c"]
        assert all(c.level > a.level for c in a.children)


class TestExtractTitle:
    def test_heading(self):
        assert extract_title(["## Chapter 1: Introduction", "- Point 1"]) == "Chapter 1: Introduction"

    def test_plain_text_line(self):
        assert extract_title(["", "Lecture notes", "- a"]) == "Lecture notes"

    def test_list_first_means_no_title(self):
        assert extract_title(["- First item", "# Later heading"]) is None

    def test_todo_first_means_no_title(self):
        assert extract_title(["- [ ] Task"]) is None

    def test_dashless_todo_first_means_no_title(self):
        assert extract_title(["[ ] Task"]) is None
        assert extract_title(["[x] Done", "Later text"]) is None

    def test_dashless_todo_document_gets_default_title(self):
        result = parse_markdown_list("[ ] Buy milk\n[x] Eggs")
        assert result.title is None
        assert [i.title for i in result.items] == ["Buy milk", "Eggs"]
        assert convert_to_outline_format(result).title == "Imported Outline"


class TestNotesAttachment:
    def test_notes_are_dedented(self):
        content = (
            "# Notes Import\n"
            "- Topic A\n"
            "  Notes for topic A.\n"
            "\n"
            "  ```js\n"
            '  console.log("A")\n'
            "  ```\n"
            "- Topic B\n"
            "  Notes for topic B."
        )
        result = parse_markdown_list(content)
        topic_a, topic_b = result.items
        assert topic_a.notes == 'Notes for topic A.\n\n```js\nconsole.log("A")\n```'
        assert topic_b.notes == "Notes for topic B."

    def test_bullets_under_todo_become_notes(self):
        content = (
            "- [ ] Predicates backtracking\n"
            "    We start by defining this\n"
            "\n"
            "    ```python\n"
            '    print("hello world")\n'
            "    ```\n"
            "\n"
            "    Then we move into:\n"
            "\n"
            "    - 1\n"
            "    - 2\n"
            "    - 3\n"
            "    - 5\n"
            "    -\n"
            "- [ ] Terms, variables, and values\n"
            "    - [ ] A term is a variable or a value"
        )
        result = parse_markdown_list(content)
        assert result.errors == []
        first, second = result.items
        assert first.children == []
        assert "We start by defining this" in first.notes
        assert "```python" in first.notes
        assert "- 1" in first.notes
        assert "- 5" in first.notes
        assert first.notes.endswith("-")
        assert [c.title for c in second.children] == ["A term is a variable or a value"]

    def test_malformed_bullet_under_todo_folds_into_notes(self):
        result = parse_markdown_list("- [ ] Topic\n  -Invalid item\n- Next")
        assert result.errors == []
        assert [i.title for i in result.items] == ["Topic", "Next"]
        assert result.items[0].notes == "-Invalid item"
        assert result.items[0].children == []

    def test_malformed_bullet_under_plain_bullet_is_still_an_error(self):
        result = parse_markdown_list("- Parent\n  -oops")
        assert result.errors == ['Line 2: Invalid list format: "-oops"']

    def test_nested_todo_under_bullet_is_structural(self):
        result = parse_markdown_list("- Parent\n  - [x] Child")
        child = result.items[0].children[0]
        assert child.completed is True
        assert result.items[0].notes is None


class TestValidateMarkdownItems:
    def test_valid_items(self):
        items = [ParsedMarkdownItem(id="1", title="Valid"), ParsedMarkdownItem(id="2", title="Other")]
        result = validate_markdown_items(items)
        assert result.is_valid
        assert result.errors == []

    def test_empty_list(self):
        result = validate_markdown_items([])
        assert not result.is_valid
        assert result.errors == ["No valid list items found"]

    def test_empty_title(self):
        items = [ParsedMarkdownItem(id="1", title="  "), ParsedMarkdownItem(id="2", title="Valid")]
        result = validate_markdown_items(items)
        assert not result.is_valid
        assert result.errors == ["Item with ID 1 has empty title"]

    def test_nested_empty_title(self):
        parent = ParsedMarkdownItem(
            id="1", title="Parent", children=[ParsedMarkdownItem(id="2", title="", level=1)]
        )
        result = validate_markdown_items([parent])
        assert not result.is_valid
        assert "Item with ID 2 has empty title" in result.errors


class TestFlatten:
    def test_flat_list(self):
        items = [ParsedMarkdownItem(id="1", title="Item 1"), ParsedMarkdownItem(id="2", title="Item 2")]
        flat = flatten_markdown_items(items)
        assert [(i.id, i.title, i.depth) for i in flat] == [("1", "Item 1", 0), ("2", "Item 2", 0)]

    def test_prefix_per_depth(self):
        items = [
            ParsedMarkdownItem(
                id="1",
                title="Level 0",
                children=[
                    ParsedMarkdownItem(
                        id="2",
                        title="Level 1",
                        level=1,
                        children=[ParsedMarkdownItem(id="3", title="Level 2", level=2)],
                    )
                ],
            )
        ]
        flat = flatten_markdown_items(items)
        assert [i.title for i in flat] == ["Level 0", "  Level 1", "    Level 2"]
        assert [i.depth for i in flat] == [0, 1, 2]

    def test_notes_carried_over(self):
        flat = flatten_markdown_items([ParsedMarkdownItem(id="1", title="A", notes="n")])
        assert flat[0].notes == "n"
        assert flat[0].to_dict() == {"id": "1", "title": "A", "depth": 0, "notes": "n"}


class TestConvertToOutlineFormat:
    def test_uses_parsed_title(self):
        result = MarkdownParseResult(items=[ParsedMarkdownItem(id="1", title="Item 1")], title="Test Outline")
        draft = convert_to_outline_format(result)
        assert draft.title == "Test Outline"
        assert draft.items[0].title == "Item 1"

    def test_custom_title_wins(self):
        result = MarkdownParseResult(items=[ParsedMarkdownItem(id="1", title="Item 1")], title="Original")
        assert convert_to_outline_format(result, "Custom Title").title == "Custom Title"

    def test_default_title(self):
        result = MarkdownParseResult(items=[ParsedMarkdownItem(id="1", title="Item 1")])
        assert convert_to_outline_format(result).title == "Imported Outline"

    def test_default_title_is_configurable(self, monkeypatch):
        monkeypatch.setattr(settings, "default_outline_title", "Untitled Lecture")
        result = MarkdownParseResult(items=[ParsedMarkdownItem(id="1", title="Item 1")])
        assert convert_to_outline_format(result).title == "Untitled Lecture"

    def test_end_to_end_example(self):
        result = parse_markdown_list("# My Outline\n- Item 1\n- Item 2\n  - Subitem 2.1\n- [ ] Todo Item")
        draft = convert_to_outline_format(result)
        assert result.errors == []
        assert draft.title == "My Outline"
        assert [i.title for i in draft.items] == ["Item 1", "Item 2", "  Subitem 2.1", "Todo Item"]
