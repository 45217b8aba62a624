from __future__ import annotations

from typing import Annotated, Any, ForwardRef, get_args, get_origin


def type_identity(tp: Any) -> Any:
    """Normalise `tp` into the key used for registry lookups.

    Classes and parametrised generics are their own keys. `Annotated[X, ...]`
    collapses to `X`. Strings and unresolved forward references are rejected,
    as they do not identify a type.
    """
    if get_origin(tp) is Annotated:
        tp = get_args(tp)[0]

    if isinstance(tp, (str, ForwardRef)):
        msg = f"Expected a type, got unresolved reference {tp!r}"
        raise TypeError(msg)

    try:
        hash(tp)
    except TypeError as e:
        msg = f"Type identity must be hashable, got {tp!r}"
        raise TypeError(msg) from e

    return tp


def describe(key: Any) -> str:
    if isinstance(key, type):
        return key.__qualname__
    return getattr(key, "__qualname__", None) or repr(key)
