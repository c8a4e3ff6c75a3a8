"""Small shared utility helpers (error suppression, env parsing).

Kept intentionally tiny; widget mutation seams use ``safe_call`` so a failing
toolkit call never escapes into the UI event loop.
"""
from __future__ import annotations
from typing import Type, TypeVar, Callable, Any, Optional, Tuple, Union, List
import os

T = TypeVar('T')
E = TypeVar('E', bound=BaseException)


def safe_call(fn: Callable[..., T], *args: Any, default: Optional[T] = None, suppress: Union[Type[E], Tuple[Type[E], ...]] = Exception, on_error: Optional[Callable[[BaseException], None]] = None, **kwargs: Any) -> Optional[T]:
    """Execute fn(*args, **kwargs) swallowing specified exceptions.

    Parameters
    ----------
    fn : callable
        Function to invoke.
    default : value (optional)
        Value returned when an exception is suppressed (default None).
    suppress : Exception type or tuple
        Exceptions to catch (default: Exception, i.e. broad UI-safety usage).
    on_error : callable(exc) (optional)
        If provided, called with the exception object before returning default.

    Returns
    -------
    The function result or the default on error. Never raises for suppressed types.
    """
    try:
        return fn(*args, **kwargs)
    except suppress as exc:  # type: ignore[misc]
        if on_error:
            try:
                on_error(exc)
            except Exception:
                pass
        return default


def env_paths(name: str) -> List[str]:
    """Split an os.pathsep separated environment variable into non-empty parts."""
    raw = os.environ.get(name) or ''
    return [part.strip() for part in raw.split(os.pathsep) if part.strip()]


__all__ = ['safe_call', 'env_paths']
