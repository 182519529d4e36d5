"""Parameterized SQL templates

A template is an ordered list of literal fragments and placeholders. Each
placeholder is a function of the render context. Rendering concatenates the
fragments with the stringified placeholder values; nothing is escaped, so
quote characters belong in the literal fragments.

    >>> t = QueryTemplate.compile('SELECT * FROM "{database}"."{schema}"."{name}"')
    >>> t.render({"database": "DB", "schema": "PUBLIC", "name": "ORDERS"})
    'SELECT * FROM "DB"."PUBLIC"."ORDERS"'
"""

from collections.abc import Mapping
from dataclasses import dataclass
from string import Formatter
from typing import Any, Callable, Iterable, Union

from snowexplorer.errors import TemplateBindingError

_MISSING = object()


def get_value(context: Any, path: str, default: Any = _MISSING) -> Any:
    """Resolve a dotted path against nested mappings and objects

    Returns ``default`` when any step is missing or None; without a default a
    missing step raises LookupError.
    """
    value = context
    for step in path.split("."):
        if isinstance(value, Mapping):
            value = value.get(step)
        else:
            value = getattr(value, step, None)
        if value is None:
            if default is _MISSING:
                raise LookupError(f"{path!r} is not set on the template context")
            return default
    return value


@dataclass(frozen=True)
class Placeholder:
    """A named function evaluated against the render context"""

    name: str
    func: Callable[[Any], Any]

    @classmethod
    def path(cls, path: str) -> "Placeholder":
        """Placeholder reading a dotted attribute/key path from the context"""
        return cls(path, lambda context: get_value(context, path))

    def __call__(self, context: Any) -> Any:
        return self.func(context)


Part = Union[str, Placeholder, Callable[[Any], Any]]


class QueryTemplate:
    """Literal fragments interleaved with placeholders, rendered against a context"""

    __slots__ = ("_parts",)

    def __init__(self, parts: Iterable[Part]):
        normalized: list[Union[str, Placeholder]] = []
        for part in parts:
            if isinstance(part, (str, Placeholder)):
                normalized.append(part)
            elif callable(part):
                normalized.append(Placeholder(getattr(part, "__name__", "<placeholder>"), part))
            else:
                raise TypeError(f"Template parts must be str or callable, got {type(part).__name__}")
        self._parts: tuple[Union[str, Placeholder], ...] = tuple(normalized)

    @classmethod
    def compile(cls, text: str, **placeholders: Callable[[Any], Any]) -> "QueryTemplate":
        """Build a template from ``{field}`` markers

        A marker named in ``placeholders`` uses that function; any other
        marker is a dotted path looked up on the context. ``{{`` and ``}}``
        produce literal braces.
        """
        parts: list[Part] = []
        used: set[str] = set()
        for literal, field_name, format_spec, conversion in Formatter().parse(text):
            if literal:
                parts.append(literal)
            if field_name is None:
                continue
            if not field_name or format_spec or conversion:
                raise ValueError(f"Unsupported template marker in {text!r}: {{{field_name}}}")
            if field_name in placeholders:
                parts.append(Placeholder(field_name, placeholders[field_name]))
                used.add(field_name)
            else:
                parts.append(Placeholder.path(field_name))

        unused = set(placeholders) - used
        if unused:
            raise ValueError(f"Placeholders not referenced by template: {sorted(unused)}")
        return cls(parts)

    @property
    def placeholders(self) -> tuple[str, ...]:
        """Names of the placeholders in template order"""
        return tuple(p.name for p in self._parts if isinstance(p, Placeholder))

    def render(self, context: Any = None) -> str:
        """Render to SQL text, raising TemplateBindingError if a placeholder fails"""
        out: list[str] = []
        for part in self._parts:
            if isinstance(part, str):
                out.append(part)
                continue
            try:
                value = part(context)
            except Exception as exc:
                raise TemplateBindingError(part.name, exc) from exc
            out.append(str(value))
        return "".join(out)

    def __repr__(self) -> str:
        return f"QueryTemplate(placeholders={list(self.placeholders)})"


def render(template: QueryTemplate, context: Any = None) -> str:
    """Render ``template`` against ``context``"""
    return template.render(context)
