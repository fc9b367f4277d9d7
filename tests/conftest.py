"""Shared pytest fixtures for SnippetManager tests."""

import logging
import pytest
import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))


# Sample templates for testing
@pytest.fixture
def if_template():
    """A block template with one field and an explicit exit."""
    return "if $${cond}\n$.\nend"


@pytest.fixture
def call_template():
    """A call template whose exit sits right after its only field."""
    return "foo($${arg}$.)"


@pytest.fixture
def linked_template():
    """A template with two fields sharing a name."""
    return "$${name} = $${name}"


@pytest.fixture
def indented_template():
    """A template that asks the host to reindent its body line."""
    return "if $${cond}:\n$>$${body}\n$."


@pytest.fixture
def sample_templates(if_template, call_template, linked_template, indented_template):
    """Collection of sample templates."""
    return {
        "if": if_template,
        "call": call_template,
        "linked": linked_template,
        "indented": indented_template,
    }


# Buffers and managers
@pytest.fixture
def buffer():
    """An empty in-memory buffer with '#' line comments."""
    from snippetmanager.buffer import TextBuffer
    return TextBuffer()


@pytest.fixture
def settings():
    """Fresh default settings, independent of the cached global ones."""
    from snippetmanager.core.config import Settings
    return Settings()


@pytest.fixture
def manager(buffer, settings):
    """A SnippetManager over the empty buffer."""
    from snippetmanager import SnippetManager
    return SnippetManager(buffer, settings=settings)


@pytest.fixture
def make_manager(settings):
    """Factory building a SnippetManager over a buffer with the given text and point."""
    from snippetmanager import SnippetManager
    from snippetmanager.buffer import TextBuffer

    def _make(text="", position=None, mode=None, **buffer_options):
        surface = TextBuffer(text, position=position, mode=mode, **buffer_options)
        return SnippetManager(surface, settings=settings)
    return _make


# Recording predicate
class CountingPredicate:
    """Predicate that records how often it was evaluated."""

    def __init__(self, result=True, error=None):
        self.result = result
        self.error = error
        self.calls = []

    def __call__(self, facts):
        self.calls.append(facts)
        if self.error is not None:
            raise self.error
        return self.result

    @property
    def call_count(self):
        return len(self.calls)


@pytest.fixture
def counting_predicate():
    """Factory for predicates that count their evaluations."""
    return CountingPredicate


@pytest.fixture
def restore_package_logger():
    """Undo handler changes made to the package logger."""
    logger = logging.getLogger("snippetmanager")
    handlers, level, propagate = list(logger.handlers), logger.level, logger.propagate
    yield logger
    logger.handlers[:] = handlers
    logger.setLevel(level)
    logger.propagate = propagate
