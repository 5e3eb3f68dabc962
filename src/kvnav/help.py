"""Function help text for status lines, palettes and the CLI.

The one-line and multi-line formatters are plain string helpers. The full
reference listing is a Jinja2 template grouped by category in the
registry's display order. StrictUndefined makes template mistakes fail
loudly instead of rendering blanks.
"""

from __future__ import annotations

import jinja2

from kvnav.models import FunctionMetadata
from kvnav.registry import FunctionRegistry

_ENV = jinja2.Environment(
    undefined=jinja2.StrictUndefined,
    keep_trailing_newline=True,
    trim_blocks=True,
    lstrip_blocks=True,
)

_HELP_TEMPLATE = _ENV.from_string(
    """\
{% for group in groups %}
{{ group.category }} ({{ group.functions | length }})
{% for fn in group.functions %}
  {{ fn.lines[0] }}
{% for line in fn.lines[1:] %}
    {{ line }}
{% endfor %}
{% endfor %}
{% if not loop.last %}

{% endif %}
{% endfor %}
"""
)


def format_signature(fn: FunctionMetadata) -> str:
    """The declared signature, or ``name()`` when none is set."""
    return fn.signature or f"{fn.name}()"


def format_one_liner(fn: FunctionMetadata) -> str:
    sig = format_signature(fn)
    desc = fn.description.strip()
    if not desc:
        return sig
    return f"{sig} - {desc}"


def format_lines(fn: FunctionMetadata, max_examples: int = 0) -> list[str]:
    """Signature, description and up to *max_examples* indented examples.

    ``max_examples <= 0`` means no limit.
    """
    lines = [format_signature(fn)]
    if fn.description:
        lines.append(fn.description)

    examples = fn.examples if max_examples <= 0 else fn.examples[:max_examples]
    for ex in examples:
        ex = ex.strip()
        if ex:
            lines.append(f"  {ex}")
    return lines


def render_function_help(
    registry: FunctionRegistry,
    category: str | None = None,
    max_examples: int = 2,
) -> str:
    """Render a reference listing of the registry, grouped by category.

    Args:
        registry: Source of function metadata.
        category: Restrict output to one category.
        max_examples: Examples shown per function (``<= 0`` for all).
    """
    categories = registry.get_categories()
    if category is not None:
        categories = [c for c in categories if c == category]

    groups = [
        {
            "category": cat,
            "functions": [
                {"lines": format_lines(fn, max_examples)}
                for fn in registry.get_by_category(cat)
            ],
        }
        for cat in categories
    ]
    return _HELP_TEMPLATE.render(groups=groups)
