"""Message templates: ``{Name}`` placeholder parsing and the traditional state object.

Template grammar:
    {Name}          positional placeholder, rendered with str()
    {Name:spec}     rendered with format(value, spec)
    {Name,align}    padded to |align| chars; negative aligns left
    {{ and }}       literal braces

Placeholders bind to values by position, not by name. Names only label
the (name, value) pairs a structured logger sees.

FormattedLogValues is what the traditional call path hands to
Logger.log(). Building one boxes every value-typed argument and copies
the arguments into a fresh list. That is the per-call allocation the
benchmark measures, so it happens eagerly in __init__ and not lazily on
first read.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from logbench.errors import TemplateError

NULL_VALUE = "(null)"
ORIGINAL_FORMAT = "{OriginalFormat}"

_MAX_CACHED_FORMATTERS = 1024
_VALUE_TYPES = frozenset({int, float, bool, complex})


# ---------------------------------------------------------------------------
# Boxing
# ---------------------------------------------------------------------------


class Boxed:
    """Heap wrapper around a value-typed argument."""

    __slots__ = ("value",)

    def __init__(self, value: Any) -> None:
        self.value = value

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Boxed):
            return self.value == other.value
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self.value)

    def __repr__(self) -> str:
        return f"Boxed({self.value!r})"


def box(value: Any) -> Any:
    """Box int/float/bool/complex. Everything else passes through."""
    if type(value) in _VALUE_TYPES:
        return Boxed(value)
    return value


def unbox(value: Any) -> Any:
    if type(value) is Boxed:
        return value.value
    return value


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class _Hole:
    index: int
    name: str
    align: int | None
    spec: str

    def render(self, value: Any) -> str:
        text = _stringify(unbox(value), self.spec, self.name)
        if self.align is None:
            return text
        if self.align < 0:
            return text.ljust(-self.align)
        return text.rjust(self.align)


def _stringify(value: Any, spec: str, name: str) -> str:
    if value is None:
        return NULL_VALUE
    if spec:
        try:
            return format(value, spec)
        except (TypeError, ValueError) as e:
            raise TemplateError(
                f"Cannot format {name!r} value {value!r} with spec {spec!r}: {e}"
            ) from e
    if isinstance(value, (str, bytes, Mapping)) or not isinstance(value, Iterable):
        return str(value)
    return ", ".join(
        NULL_VALUE if item is None else str(unbox(item)) for item in value
    )


def _split_hole(hole: str, template: str) -> tuple[str, int | None, str]:
    head, sep, spec = hole.partition(":")
    name, comma, raw_align = head.partition(",")
    if not name:
        raise TemplateError(f"Empty placeholder name in template {template!r}")
    align: int | None = None
    if comma:
        try:
            align = int(raw_align.strip())
        except ValueError as e:
            raise TemplateError(
                f"Invalid alignment {raw_align!r} for {name!r} in template {template!r}"
            ) from e
    return name, align, spec if sep else ""


class LogValuesFormatter:
    """A parsed template. Immutable once built, shared through the cache."""

    __slots__ = ("template", "_segments", "value_names")

    def __init__(self, template: str) -> None:
        self.template = template
        segments: list[str | _Hole] = []
        names: list[str] = []
        literal: list[str] = []
        i = 0
        n = len(template)
        while i < n:
            ch = template[i]
            if ch == "{":
                if template.startswith("{{", i):
                    literal.append("{")
                    i += 2
                    continue
                end = template.find("}", i + 1)
                if end == -1:
                    raise TemplateError(
                        f"Unclosed placeholder at index {i} in template {template!r}"
                    )
                name, align, spec = _split_hole(template[i + 1 : end], template)
                if literal:
                    segments.append("".join(literal))
                    literal = []
                segments.append(_Hole(len(names), name, align, spec))
                names.append(name)
                i = end + 1
            elif ch == "}" and template.startswith("}}", i):
                literal.append("}")
                i += 2
            else:
                literal.append(ch)
                i += 1
        if literal:
            segments.append("".join(literal))
        self._segments = tuple(segments)
        self.value_names: tuple[str, ...] = tuple(names)

    def format(self, values: Sequence[Any]) -> str:
        if len(values) < len(self.value_names):
            raise TemplateError(
                f"Template {self.template!r} expects {len(self.value_names)} "
                f"values, got {len(values)}"
            )
        out: list[str] = []
        for seg in self._segments:
            if isinstance(seg, str):
                out.append(seg)
            else:
                out.append(seg.render(values[seg.index]))
        return "".join(out)

    def __repr__(self) -> str:
        return f"LogValuesFormatter({self.template!r})"


_formatters: dict[str, LogValuesFormatter] = {}


def parse_template(template: str) -> LogValuesFormatter:
    """Parse (or fetch from cache) a message template."""
    cached = _formatters.get(template)
    if cached is not None:
        return cached
    parsed = LogValuesFormatter(template)
    # Past the limit, templates are parsed per call rather than evicting.
    if len(_formatters) < _MAX_CACHED_FORMATTERS:
        _formatters[template] = parsed
    return parsed


def clear_template_cache() -> None:
    """Drop all cached templates. For tests."""
    _formatters.clear()


# ---------------------------------------------------------------------------
# Traditional state object
# ---------------------------------------------------------------------------


class FormattedLogValues(Sequence):
    """Read-only (name, value) pairs for a template and its boxed arguments.

    The last pair is always ("{OriginalFormat}", template).
    """

    __slots__ = ("_template", "_values", "_formatter")

    def __init__(self, template: str, values: Sequence[Any]) -> None:
        self._template = template
        self._values = [box(value) for value in values]
        self._formatter = parse_template(template) if values else None

    @property
    def template(self) -> str:
        return self._template

    @property
    def values(self) -> list[Any]:
        """The arguments, unboxed."""
        return [unbox(value) for value in self._values]

    def __len__(self) -> int:
        if self._formatter is None:
            return 1
        return len(self._formatter.value_names) + 1

    def __getitem__(self, index: int) -> tuple[str, Any]:  # type: ignore[override]
        count = len(self)
        if index < 0:
            index += count
        if index < 0 or index >= count:
            raise IndexError(index)
        if index == count - 1:
            return ORIGINAL_FORMAT, self._template
        name = self._formatter.value_names[index]  # type: ignore[union-attr]
        if index >= len(self._values):
            raise TemplateError(
                f"Template {self._template!r} has no value for {name!r}"
            )
        return name, unbox(self._values[index])

    def __str__(self) -> str:
        if self._formatter is None:
            return self._template
        return self._formatter.format(self._values)

    def __repr__(self) -> str:
        return f"FormattedLogValues({self._template!r}, {self.values!r})"

    @staticmethod
    def formatter(state: Any, exception: BaseException | None) -> str:
        return str(state)
