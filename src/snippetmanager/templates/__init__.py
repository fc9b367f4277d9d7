"""Template splitting, field extraction, instantiation and navigation."""

from .tokenizer import TokenSplitter, split_template
from .fields import CompiledTemplate, compile_template, extract_fields
from .navigation import FieldNavigator
from .engine import TemplateInstantiator
from .session import SnippetSession

__all__ = [
    "TokenSplitter",
    "split_template",
    "CompiledTemplate",
    "compile_template",
    "extract_fields",
    "FieldNavigator",
    "TemplateInstantiator",
    "SnippetSession",
]
