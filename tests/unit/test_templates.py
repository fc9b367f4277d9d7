"""Tests for templates module - splitting, field extraction, instantiation and navigation."""

import pytest

from snippetmanager.buffer import TextBuffer
from snippetmanager.core.config import MarkerConfig, NavigationSettings
from snippetmanager.core.exceptions import NavigationError, TemplateError
from snippetmanager.core.types import Token
from snippetmanager.templates import (
    FieldNavigator,
    SnippetSession,
    TemplateInstantiator,
    TokenSplitter,
    compile_template,
    extract_fields,
    split_template,
)


def field_texts(instance):
    return [instance.field_text(i) for i in range(len(instance.fields))]


def assert_ordered(instance):
    spans = instance.field_spans()
    for (_, end), (start, _) in zip(spans, spans[1:]):
        assert end <= start


class TestTokenSplitter:
    """Tests for the token splitter."""

    def test_basic_template(self):
        """Test splitting every marker kind."""
        tokens = split_template("for $${x} in $${xs}:\n$>$.")
        assert tokens == [
            Token.literal("for "),
            Token.field_start("x", "x"),
            Token.literal(" in "),
            Token.field_start("xs", "xs"),
            Token.literal(":"),
            Token.line_break(),
            Token.indent(),
            Token.exit(),
        ]

    def test_empty_template(self):
        """Test an empty template has no tokens."""
        assert split_template("") == []

    def test_plain_text(self):
        """Test text without markers is one literal."""
        assert split_template("hello world") == [Token.literal("hello world")]

    def test_anonymous_field(self):
        """Test a bare field marker starts an empty field."""
        assert split_template("a$$b") == [
            Token.literal("a"),
            Token.field_start("", ""),
            Token.literal("b"),
        ]

    def test_markers_inside_default_are_verbatim(self):
        """Test marker substrings inside a default payload are not split."""
        assert split_template("$${a$.b}") == [Token.field_start("a$.b", "a$.b")]

    def test_default_runs_to_nearest_end(self):
        """Test the payload ends at the first closing character."""
        assert split_template("$${a}b}") == [
            Token.field_start("a", "a"),
            Token.literal("b}"),
        ]

    def test_unclosed_default_is_literal(self):
        """Test an unclosed payload degrades to literal text."""
        assert split_template("x $${abc") == [Token.literal("x $${abc")]

    def test_unclosed_default_keeps_later_markers(self):
        """Test markers after an unclosed payload are still recognised."""
        assert split_template("$${a$.b") == [
            Token.literal("$${a"),
            Token.exit(),
            Token.literal("b"),
        ]

    def test_custom_markers(self):
        """Test a per-surface marker syntax."""
        config = MarkerConfig(
            line_terminator_marker="%n",
            indent_marker="%>",
            exit_marker="%.",
            field_marker="%%",
            default_begin="<",
            default_end=">",
        )
        assert split_template("a%%<b>%n%>%.", config) == [
            Token.literal("a"),
            Token.field_start("b", "b"),
            Token.line_break(),
            Token.indent(),
            Token.exit(),
        ]
        assert split_template("a\nb $${c}", config) == [Token.literal("a\nb $${c}")]

    def test_longest_marker_wins(self):
        """Test a marker that prefixes another does not shadow it."""
        config = MarkerConfig(field_marker="$", exit_marker="$.")
        assert TokenSplitter(config).split("$.$x") == [
            Token.exit(),
            Token.field_start("", ""),
            Token.literal("x"),
        ]


class TestExtractFields:
    """Tests for field region extraction."""

    def test_field_offsets(self):
        """Test field spans in the flat text."""
        layout = extract_fields(split_template("a $${name} b $${name}$."))
        assert layout.text == "a name b name"
        assert [(f.start, f.end) for f in layout.fields] == [(2, 6), (9, 13)]
        assert [f.ordinal for f in layout.fields] == [0, 1]
        assert layout.exit_offset == 13
        assert layout.linked_groups() == {"name": [0, 1]}

    def test_default_length(self):
        """Test a field's span length equals its default's length."""
        layout = extract_fields(split_template("$${element}"))
        assert layout.fields[0].length == 7

    def test_no_exit(self):
        """Test templates without an exit marker."""
        layout = extract_fields(split_template("$${a} $${b}"))
        assert layout.has_exit is False
        assert [f.name for f in layout.fields] == ["a", "b"]

    def test_first_exit_wins(self):
        """Test only the first exit marker counts."""
        compiled = compile_template("a$.b$.c")
        assert compiled.layout.exit_offset == 1
        assert compiled.exit_count == 2

    def test_indent_points(self):
        """Test indent requests are recorded by offset."""
        layout = extract_fields(split_template("x\n$>y"))
        assert layout.text == "x\ny"
        assert layout.indent_points == [2]


class TestTemplateInstantiator:
    """Tests for template instantiation."""

    def test_fields_and_exit(self):
        """Test inserted text, field spans and the explicit exit."""
        buffer = TextBuffer()
        engine = TemplateInstantiator(buffer)
        instance = engine.instantiate("if $${cond}\n$.\nend")

        assert buffer.text == "if cond\n\nend"
        assert instance.field_spans() == [(3, 7)]
        assert instance.exit_position == 8
        assert buffer.current_position() == 3
        assert instance.current_index == 0
        assert engine.active is instance

    def test_default_span_length(self):
        """Test a field span covers exactly its default."""
        buffer = TextBuffer()
        instance = TemplateInstantiator(buffer).instantiate("<$${element}>")
        start, end = instance.field_span(0)
        assert end - start == 7
        assert buffer.text_between(start, end) == "element"

    def test_field_at_bound_start(self):
        """Test point lands on a field that opens the template."""
        buffer = TextBuffer()
        instance = TemplateInstantiator(buffer).instantiate("$${x} = 1")
        assert instance.field_span(0) == (0, 1)
        assert buffer.current_position() == 0

    def test_inserted_at_point(self):
        """Test instantiation in the middle of existing text."""
        buffer = TextBuffer("ab", position=1)
        instance = TemplateInstantiator(buffer).instantiate("[$${x}]")
        assert buffer.text == "a[x]b"
        assert instance.field_span(0) == (2, 3)
        assert buffer.current_position() == 2
        assert instance.bounds == (1, 5)
        assert instance.contains(1, 5)
        assert not instance.contains(0, 2)

    def test_no_fields_mid_buffer(self):
        """Test a field-less template exits one unit before the extended bound."""
        buffer = TextBuffer("abcXYZ", position=3)
        instance = TemplateInstantiator(buffer).instantiate("hello")
        assert buffer.text == "abchelloXYZ"
        assert buffer.current_position() == 8
        assert instance.active is False

    def test_no_fields_at_buffer_end(self):
        """Test a field-less template at the buffer end exits at the buffer end."""
        buffer = TextBuffer("abc")
        instance = TemplateInstantiator(buffer).instantiate("hi")
        assert buffer.text == "abchi"
        assert buffer.current_position() == 5
        assert instance.active is False

    def test_no_fields_one_unit_before_end(self):
        """Test a bound reaching the buffer end puts the exit at the buffer end."""
        buffer = TextBuffer("X", position=0)
        instance = TemplateInstantiator(buffer).instantiate("abc")
        assert buffer.text == "abcX"
        assert buffer.current_position() == 4
        assert instance.active is False

    def test_empty_template(self):
        """Test an empty template leaves text and point alone."""
        buffer = TextBuffer("abc", position=1)
        instance = TemplateInstantiator(buffer).instantiate("")
        assert buffer.text == "abc"
        assert buffer.current_position() == 1
        assert instance.fields == []

    def test_exit_before_field(self):
        """Test an exit marker may precede the fields."""
        buffer = TextBuffer()
        instance = TemplateInstantiator(buffer).instantiate("$.x = $${v}")
        assert buffer.text == "x = v"
        assert instance.exit_position == 0
        assert buffer.current_position() == 4

    def test_exit_after_field(self):
        """Test an exit right after a field stays after it."""
        buffer = TextBuffer()
        instance = TemplateInstantiator(buffer).instantiate("foo($${arg}$.)")
        assert buffer.text == "foo(arg)"
        assert instance.field_span(0) == (4, 7)
        assert instance.exit_position == 7

    def test_first_exit_wins(self):
        """Test extra exit markers are ignored."""
        buffer = TextBuffer()
        instance = TemplateInstantiator(buffer).instantiate("a$.b$.$${c}")
        assert buffer.text == "abc"
        assert instance.exit_position == 1

    def test_adjacent_fields(self):
        """Test adjacent fields get adjacent, non-overlapping spans."""
        buffer = TextBuffer()
        instance = TemplateInstantiator(buffer).instantiate("$${a}$${b}")
        assert instance.field_spans() == [(0, 1), (1, 2)]

    def test_empty_fields(self):
        """Test anonymous fields are zero-width and keep template order."""
        buffer = TextBuffer()
        instance = TemplateInstantiator(buffer).instantiate("f($$, $$)")
        assert buffer.text == "f(, )"
        assert instance.field_spans() == [(2, 2), (4, 4)]

    def test_indent_request(self):
        """Test indent markers reindent the line being built."""
        buffer = TextBuffer()
        instance = TemplateInstantiator(buffer).instantiate("if $${cond}:\n$>$${body}\n$.")
        assert buffer.text == "if cond:\n    body\n"
        assert field_texts(instance) == ["cond", "body"]
        assert instance.exit_position == len(buffer.text)

    def test_custom_markers(self):
        """Test instantiation with a custom marker syntax."""
        buffer = TextBuffer()
        config = MarkerConfig(field_marker="@@", exit_marker="@.")
        instance = TemplateInstantiator(buffer, config).instantiate("x = @@{val}@.;")
        assert buffer.text == "x = val;"
        assert field_texts(instance) == ["val"]
        assert instance.exit_position == 7

    def test_new_instance_replaces_previous(self):
        """Test starting a new instantiation retires the live one."""
        buffer = TextBuffer()
        engine = TemplateInstantiator(buffer)
        first = engine.instantiate("($${a})")
        buffer.set_position(buffer.length())
        second = engine.instantiate("[$${b}]")

        assert first.active is False
        assert second.active is True
        assert engine.active is second
        assert buffer.text == "(a)[b]"

    def test_failure_releases_spans(self):
        """Test a failing surface leaves no tracked spans behind."""
        class FailingBuffer(TextBuffer):
            def reindent_current_line(self):
                raise RuntimeError("no indenter")

        buffer = FailingBuffer()
        with pytest.raises(TemplateError) as exc_info:
            TemplateInstantiator(buffer).instantiate("a\n$>$${b}")
        assert isinstance(exc_info.value.cause, RuntimeError)
        assert len(buffer.spans) == 0

    def test_failure_removes_partial_text(self):
        """Test text inserted before a failure is removed again."""
        buffer = TextBuffer("ab", position=1, indent_function=lambda buf, line_start: 1 / 0)
        with pytest.raises(TemplateError):
            TemplateInstantiator(buffer).instantiate("if x\n$>body")
        assert buffer.text == "ab"
        assert buffer.current_position() == 1


class TestFieldNavigator:
    """Tests for field navigation."""

    def test_walk_fields_then_exit(self):
        """Test next_field walks fields in order and then exits."""
        buffer = TextBuffer()
        engine = TemplateInstantiator(buffer)
        instance = engine.instantiate("($${a}, $${b})$.")
        navigator = engine.navigator

        assert buffer.current_position() == 1
        assert navigator.next_field(instance) is True
        assert buffer.current_position() == 4
        assert navigator.next_field(instance) is False
        assert buffer.current_position() == 6
        assert instance.active is False
        assert engine.active is None

    def test_previous_field(self):
        """Test previous_field stops at the first field."""
        buffer = TextBuffer()
        engine = TemplateInstantiator(buffer)
        instance = engine.instantiate("($${a}, $${b})$.")
        navigator = engine.navigator

        navigator.next_field(instance)
        assert navigator.previous_field(instance) is True
        assert buffer.current_position() == 1
        assert navigator.previous_field(instance) is False
        assert buffer.current_position() == 1

    def test_follows_point_moved_into_field(self):
        """Test navigation continues from a field point was moved into."""
        buffer = TextBuffer()
        engine = TemplateInstantiator(buffer)
        instance = engine.instantiate("($${a}, $${b}, $${c})")

        buffer.set_position(7)
        assert engine.navigator.previous_field(instance) is True
        assert buffer.current_position() == 4

    def test_goto_field_out_of_range(self):
        """Test invalid field indices raise NavigationError."""
        buffer = TextBuffer()
        engine = TemplateInstantiator(buffer)
        instance = engine.instantiate("$${a}")
        with pytest.raises(NavigationError):
            engine.navigator.goto_field(instance, 3)

    def test_retired_instance(self):
        """Test navigating a retired instance raises NavigationError."""
        buffer = TextBuffer()
        engine = TemplateInstantiator(buffer)
        instance = engine.instantiate("$${a}")
        engine.navigator.exit_snippet(instance)

        with pytest.raises(NavigationError):
            engine.navigator.next_field(instance)

    def test_retire_releases_spans(self):
        """Test retiring releases every tracked span."""
        buffer = TextBuffer()
        engine = TemplateInstantiator(buffer)
        instance = engine.instantiate("$${a} $${b}")
        engine.navigator.cancel(instance)
        assert len(buffer.spans) == 0
        assert buffer.text == "a b"

    def test_on_retire_callback(self):
        """Test the retire callback sees the instance."""
        retired = []
        buffer = TextBuffer()
        navigator = FieldNavigator(buffer, on_retire=retired.append)
        engine = TemplateInstantiator(buffer, navigator=navigator)
        instance = engine.instantiate("$${a}")
        navigator.exit_snippet(instance)
        assert retired == [instance]
        assert engine.active is None


class TestSnippetSession:
    """Tests for live editing of an instantiated snippet."""

    def test_typing_replaces_default(self):
        """Test the first text typed into an untouched field replaces its default."""
        buffer = TextBuffer()
        session = SnippetSession(buffer)
        instance = session.insert("$.x = $${v}")

        session.type_text("value")
        assert buffer.text == "x = value"
        assert field_texts(instance) == ["value"]
        assert session.next_field() is False
        assert buffer.current_position() == 0

    def test_typing_extends_touched_field(self):
        """Test later typing appends to the field."""
        buffer = TextBuffer()
        session = SnippetSession(buffer)
        instance = session.insert("$${a}$${b}")

        session.type_text("Z")
        session.type_text("Y")
        assert buffer.text == "ZYb"
        assert instance.field_spans() == [(0, 2), (2, 3)]

        session.next_field()
        session.type_text("Q")
        assert buffer.text == "ZYQ"
        assert instance.field_spans() == [(0, 2), (2, 3)]
        assert_ordered(instance)

    def test_exit_follows_typed_field(self):
        """Test an exit after a field moves with the field's new text."""
        buffer = TextBuffer()
        session = SnippetSession(buffer)
        instance = session.insert("foo($${arg}$.)")

        session.type_text("x")
        assert buffer.text == "foo(x)"
        assert instance.exit_position == 5
        session.next_field()
        assert buffer.current_position() == 5

    def test_overwrite_disabled(self):
        """Test defaults are kept when overwriting is disabled."""
        buffer = TextBuffer()
        session = SnippetSession(buffer, settings=NavigationSettings(overwrite_defaults=False))
        session.insert("($${a})")
        session.type_text("b")
        assert buffer.text == "(ba)"

    def test_linked_fields_mirror(self):
        """Test edits of a named field are copied to its namesakes."""
        buffer = TextBuffer()
        session = SnippetSession(buffer)
        instance = session.insert("$${name} = $${name}")

        session.type_text("foo")
        assert buffer.text == "foo = foo"
        assert field_texts(instance) == ["foo", "foo"]
        assert buffer.current_position() == 3
        assert_ordered(instance)

        session.next_field()
        assert buffer.current_position() == 6
        session.next_field()
        assert buffer.current_position() == 9

    def test_mirroring_disabled(self):
        """Test namesakes are left alone when mirroring is disabled."""
        buffer = TextBuffer()
        session = SnippetSession(buffer, settings=NavigationSettings(mirror_linked_fields=False))
        session.insert("$${name} = $${name}")
        session.type_text("foo")
        assert buffer.text == "foo = name"

    def test_outside_edit_cancels(self):
        """Test an edit outside the snippet stops tracking it."""
        buffer = TextBuffer("head\n")
        session = SnippetSession(buffer)
        session.insert("($${a})")
        assert session.active is not None

        buffer.set_position(0)
        buffer.insert_text("X")
        assert session.active is None
        assert buffer.text == "Xhead\n(a)"

    def test_outside_edit_kept_when_disabled(self):
        """Test outside edits are tolerated when cancelling is disabled."""
        buffer = TextBuffer("head\n")
        session = SnippetSession(buffer, settings=NavigationSettings(cancel_on_outside_edit=False))
        instance = session.insert("($${a})")

        buffer.set_position(0)
        buffer.insert_text("X")
        assert session.active is instance
        assert field_texts(instance) == ["a"]

    def test_cancel_keeps_text(self):
        """Test cancelling leaves the inserted text and point alone."""
        buffer = TextBuffer()
        session = SnippetSession(buffer)
        session.insert("($${a})")
        session.cancel()
        assert session.active is None
        assert buffer.text == "(a)"
        assert buffer.current_position() == 1

    def test_exit_snippet(self):
        """Test jumping straight to the exit."""
        buffer = TextBuffer()
        session = SnippetSession(buffer)
        session.insert("($${a}, $${b})$.;")
        session.exit_snippet()
        assert session.active is None
        assert buffer.current_position() == 6

    def test_navigation_without_instance(self):
        """Test navigation is a no-op without a live instance."""
        session = SnippetSession(TextBuffer())
        assert session.next_field() is False
        assert session.previous_field() is False
        session.exit_snippet()
        session.cancel()

    def test_close_detaches(self):
        """Test closing stops listening to the surface."""
        buffer = TextBuffer()
        session = SnippetSession(buffer)
        session.insert("($${a})")
        session.close()
        assert session.active is None
        buffer.insert_text("more")
        assert buffer.text == "(morea)"
