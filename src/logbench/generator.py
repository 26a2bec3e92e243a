"""Typed log methods, generated once at definition time.

``@logger_message`` plays the role of a source generator. The decorated
stub only declares a signature. At decoration time the template is
parsed, each placeholder is bound to a parameter, and a function with
exactly the stub's signature is compiled:

    @logger_message(event_id=1, level=LogLevel.INFORMATION,
                    message="Handled request {RequestName} for user {UserId}")
    def handle_request(logger, request_name: str, user_id: int) -> None: ...

compiles to

    def handle_request(logger, request_name, user_id):
        if logger.is_enabled(_lb_level):
            logger.log(_lb_level, _lb_event_id,
                       _lb_State(request_name, user_id), None, _lb_State.format)

There is no *args tuple and no boxing. When the logger is disabled, no
state object is built either, so a call does no heap allocation.

Placeholders match parameters by name, ignoring case and underscores
(``{RequestName}`` -> ``request_name``). A parameter named ``exception``
is passed through as the record's exception. If ``level`` is not given
to the decorator, the stub's second parameter must be ``level``.
"""

from __future__ import annotations

import functools
import inspect
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any, Callable, TypeVar

from logbench.abstractions import EventId, LogLevel
from logbench.errors import TemplateError
from logbench.formatting import ORIGINAL_FORMAT, LogValuesFormatter, parse_template

F = TypeVar("F", bound=Callable[..., Any])

EXCEPTION_PARAM = "exception"
LEVEL_PARAM = "level"

_RESERVED = frozenset({"format"})
_PREFIX = "_lb_"


def _normalize(name: str) -> str:
    return name.replace("_", "").lower()


# ---------------------------------------------------------------------------
# Generated state type
# ---------------------------------------------------------------------------


def _state_len(self: Any) -> int:
    return len(self._lb_order) + 1


def _state_getitem(self: Any, index: int) -> tuple[str, Any]:
    count = len(self._lb_order) + 1
    if index < 0:
        index += count
    if index < 0 or index >= count:
        raise IndexError(index)
    if index == count - 1:
        return ORIGINAL_FORMAT, self._lb_formatter.template
    return self._lb_formatter.value_names[index], getattr(self, self._lb_order[index])


def _state_str(self: Any) -> str:
    return self._lb_formatter.format([getattr(self, slot) for slot in self._lb_order])


def _state_repr(self: Any) -> str:
    fields = ", ".join(f"{slot}={getattr(self, slot)!r}" for slot in self.__slots__)
    return f"{type(self).__name__}({fields})"


def _state_format(state: Any, exception: BaseException | None) -> str:
    return str(state)


def _make_state_type(
    name: str,
    module: str,
    slots: tuple[str, ...],
    order: tuple[str, ...],
    formatter: LogValuesFormatter,
    annotations: dict[str, Any],
) -> type:
    """Build the per-definition state class: one typed slot per parameter."""
    init_params = "".join(f", {slot}" for slot in slots)
    init_body = "".join(f"\n    self.{slot} = {slot}" for slot in slots) or "\n    pass"
    namespace: dict[str, Any] = {}
    exec(compile(f"def __init__(self{init_params}):{init_body}\n", f"<{name}>", "exec"), namespace)

    return type(
        name,
        (Sequence,),
        {
            "__slots__": slots,
            "__module__": module,
            "__doc__": f"Typed state for {formatter.template!r}.",
            "__annotations__": {slot: annotations.get(slot, Any) for slot in slots},
            "__init__": namespace["__init__"],
            "__len__": _state_len,
            "__getitem__": _state_getitem,
            "__str__": _state_str,
            "__repr__": _state_repr,
            "format": staticmethod(_state_format),
            "_lb_order": order,
            "_lb_formatter": formatter,
        },
    )


# ---------------------------------------------------------------------------
# Code generation
# ---------------------------------------------------------------------------


@dataclass
class _Plan:
    """Everything needed to compile one typed log method."""

    name: str
    qualname: str
    module: str
    params: list[inspect.Parameter]
    logger_param: str
    value_params: tuple[str, ...]
    order: tuple[str, ...]
    level: LogLevel | None
    event_id: EventId
    formatter: LogValuesFormatter
    exception_param: str | None = None
    skip_enabled_check: bool = False
    annotations: dict[str, Any] = field(default_factory=dict)


def _render_params(params: list[inspect.Parameter]) -> tuple[str, dict[str, Any]]:
    parts: list[str] = []
    defaults: dict[str, Any] = {}
    saw_keyword_only = False
    for i, p in enumerate(params):
        if p.kind is inspect.Parameter.KEYWORD_ONLY and not saw_keyword_only:
            parts.append("*")
            saw_keyword_only = True
        if p.default is inspect.Parameter.empty:
            parts.append(p.name)
        else:
            default_name = f"{_PREFIX}default_{p.name}"
            defaults[default_name] = p.default
            parts.append(f"{p.name}={default_name}")
        is_last_positional_only = p.kind is inspect.Parameter.POSITIONAL_ONLY and (
            i + 1 == len(params)
            or params[i + 1].kind is not inspect.Parameter.POSITIONAL_ONLY
        )
        if is_last_positional_only:
            parts.append("/")
    return ", ".join(parts), defaults


def _compile(plan: _Plan) -> tuple[Callable[..., Any], str]:
    state_type = _make_state_type(
        f"{plan.name}_state",
        plan.module,
        plan.value_params,
        plan.order,
        plan.formatter,
        plan.annotations,
    )
    signature, defaults = _render_params(plan.params)
    level_expr = LEVEL_PARAM if plan.level is None else f"{_PREFIX}level"
    exception_expr = plan.exception_param or "None"
    logger = plan.logger_param
    call = (
        f"{logger}.log({level_expr}, {_PREFIX}event_id, "
        f"{_PREFIX}State({', '.join(plan.value_params)}), "
        f"{exception_expr}, {_PREFIX}State.format)"
    )
    if plan.skip_enabled_check:
        body = f"    {call}\n"
    else:
        body = f"    if {logger}.is_enabled({level_expr}):\n        {call}\n"
    source = f"def {plan.name}({signature}):\n{body}"

    namespace: dict[str, Any] = {
        f"{_PREFIX}level": plan.level,
        f"{_PREFIX}event_id": plan.event_id,
        f"{_PREFIX}State": state_type,
        **defaults,
    }
    code = compile(source, f"<logbench-generated {plan.qualname}>", "exec")
    exec(code, namespace)
    fn = namespace[plan.name]
    fn.__qualname__ = plan.qualname
    fn.__module__ = plan.module
    return fn, source


def _check_name(name: str, where: str) -> None:
    if name in _RESERVED or name.startswith(_PREFIX):
        raise TemplateError(f"Parameter name {name!r} is reserved ({where})")


def _plan_from_stub(
    stub: Callable[..., Any],
    *,
    level: LogLevel | None,
    event_id: EventId,
    formatter: LogValuesFormatter,
    skip_enabled_check: bool,
) -> _Plan:
    where = stub.__qualname__
    params = list(inspect.signature(stub).parameters.values())
    for p in params:
        if p.kind in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD):
            raise TemplateError(f"{where} must not take *args or **kwargs")
        _check_name(p.name, where)
    if not params:
        raise TemplateError(f"{where} must take the logger as its first parameter")

    logger_param = params[0].name
    rest = params[1:]
    if level is None:
        if not rest or rest[0].name != LEVEL_PARAM:
            raise TemplateError(
                f"{where} needs a 'level' parameter after the logger "
                f"when no level is given to @logger_message"
            )
        rest = rest[1:]

    exception_param: str | None = None
    by_key: dict[str, str] = {}
    for p in rest:
        if p.name == EXCEPTION_PARAM:
            exception_param = p.name
            continue
        key = _normalize(p.name)
        if key in by_key:
            raise TemplateError(
                f"Parameters {by_key[key]!r} and {p.name!r} of {where} "
                f"bind to the same placeholder"
            )
        by_key[key] = p.name

    order: list[str] = []
    for placeholder in formatter.value_names:
        param = by_key.get(_normalize(placeholder))
        if param is None:
            raise TemplateError(
                f"Placeholder {{{placeholder}}} in {formatter.template!r} "
                f"has no matching parameter in {where}"
            )
        order.append(param)

    unused = [name for name in by_key.values() if name not in order]
    if unused:
        raise TemplateError(
            f"Parameters {unused} of {where} are not referenced by {formatter.template!r}"
        )

    return _Plan(
        name=stub.__name__,
        qualname=stub.__qualname__,
        module=stub.__module__,
        params=params,
        logger_param=logger_param,
        value_params=tuple(by_key.values()),
        order=tuple(order),
        level=level,
        event_id=event_id,
        formatter=formatter,
        exception_param=exception_param,
        skip_enabled_check=skip_enabled_check,
        annotations=dict(getattr(stub, "__annotations__", {})),
    )


def _as_event_id(event_id: int | EventId, name: str | None) -> EventId:
    if isinstance(event_id, EventId):
        return event_id
    return EventId(event_id, name)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def logger_message(
    *,
    event_id: int | EventId,
    message: str,
    level: LogLevel | None = None,
    event_name: str | None = None,
    skip_enabled_check: bool = False,
) -> Callable[[F], F]:
    """Turn a signature-only stub into a typed, allocation-free log method."""
    formatter = parse_template(message)

    def decorate(stub: F) -> F:
        plan = _plan_from_stub(
            stub,
            level=level,
            event_id=_as_event_id(event_id, event_name or stub.__name__),
            formatter=formatter,
            skip_enabled_check=skip_enabled_check,
        )
        fn, source = _compile(plan)
        functools.update_wrapper(fn, stub)
        fn.event_id = plan.event_id
        fn.level = level
        fn.message = message
        fn.generated_source = source
        return fn  # type: ignore[return-value]

    return decorate


def define(
    level: LogLevel,
    event_id: int | EventId,
    message: str,
    arity: int | None = None,
    *,
    skip_enabled_check: bool = False,
) -> Callable[..., None]:
    """Build a typed log callable at runtime.

    The result takes ``(logger, arg0, ..., argN-1, exception=None)``, with
    one positional argument per placeholder in ``message``.
    """
    formatter = parse_template(message)
    count = len(formatter.value_names)
    if arity is not None and arity != count:
        raise TemplateError(
            f"Template {message!r} has {count} placeholders, expected {arity}"
        )

    value_params = tuple(f"arg{i}" for i in range(count))
    positional = inspect.Parameter.POSITIONAL_OR_KEYWORD
    params = [inspect.Parameter("logger", positional)]
    params += [inspect.Parameter(name, positional) for name in value_params]
    params.append(inspect.Parameter(EXCEPTION_PARAM, positional, default=None))

    plan = _Plan(
        name="log_message",
        qualname=f"define.<{message}>",
        module=__name__,
        params=params,
        logger_param="logger",
        value_params=value_params,
        order=value_params,
        level=level,
        event_id=_as_event_id(event_id, None),
        formatter=formatter,
        exception_param=EXCEPTION_PARAM,
        skip_enabled_check=skip_enabled_check,
    )
    fn, source = _compile(plan)
    fn.event_id = plan.event_id
    fn.level = level
    fn.message = message
    fn.generated_source = source
    return fn
