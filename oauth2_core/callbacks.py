"""
Calling conventions for application-supplied callbacks (issue, validate, immediate).

Each callback kind has a closed set of named strategies, each naming the arguments it
receives. The strategy is picked once when the handler is built: either explicitly by name
or from the number of positional parameters the callback declares. Callbacks may be plain
functions or coroutines.
"""
import inspect
import logging
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Strategy:
    name: str
    args: tuple[str, ...]

    def __len__(self) -> int:
        return len(self.args)


def strategy(name: str, *args: str) -> Strategy:
    return Strategy(name=name, args=tuple(args))


async def maybe_await(value):
    if inspect.isawaitable(value):
        return await value
    return value


def _positional_count(fn: Callable) -> int | None:
    try:
        sig = inspect.signature(fn)
    except (TypeError, ValueError):
        return None
    count = 0
    for param in sig.parameters.values():
        if param.kind is inspect.Parameter.VAR_POSITIONAL:
            return None
        if param.kind in (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD):
            count += 1
    return count


def resolve_strategy(
    fn: Callable,
    strategies: Sequence[Strategy],
    explicit: str | Strategy | None = None,
    owner: str = "handler",
) -> Strategy:
    """
    Pick the calling strategy for fn.
    An explicit name (or Strategy) wins; otherwise the strategy whose argument count equals
    the callback's declared positional parameters. Callbacks taking *args get the richest one.
    """
    if isinstance(explicit, Strategy):
        return explicit
    if explicit is not None:
        for s in strategies:
            if s.name == explicit:
                return s
        names = ", ".join(s.name for s in strategies)
        raise ValueError(f"{owner}: unknown strategy {explicit!r} (expected one of: {names})")

    count = _positional_count(fn)
    if count is None:
        chosen = max(strategies, key=len)
    else:
        matching = [s for s in strategies if len(s) == count]
        if not matching:
            raise TypeError(
                f"{owner}: callback {getattr(fn, '__name__', fn)!r} takes {count} positional "
                f"arguments; pass strategy= explicitly"
            )
        chosen = matching[0]
    logger.debug("%s: using %s strategy %s", owner, chosen.name, chosen.args)
    return chosen


async def invoke(fn: Callable, chosen: Strategy, values: Mapping[str, Any]) -> Any:
    """Call fn with the values named by the strategy, awaiting the result if needed."""
    return await maybe_await(fn(*(values.get(name) for name in chosen.args)))
