"""Functor, applicative and monad combinators for Ok/Err pipelines.

Example:
    >>> from monok import Ok, Err, fmap, bind
    >>>
    >>> def check(n: int):
    ...     return Ok(n) if n >= 10 else Err("too_low")
    >>>
    >>> bind(fmap(Ok(12), lambda n: n - 1), check)
    Ok(11)
    >>> (Ok(7) | (lambda n: n + 1)) >> check
    Err('too_low')

With @pipeline, calls on the right of ``|`` and ``>>`` take the payload as
their first argument:

    @pipeline
    def summed(xs):
        return Ok(xs) | sum() | str()    # summed([1, 2, 3]) == Ok("6")
"""

from .combinators import bind, fmap, lift, pipe
from .errors import ErrorCode, ErrorInfo, MonokError, RewriteError, UnwrapError
from .log import configure_logging, get_logger
from .result import Err, Ok, Result, collect_results, sequence, traverse
from .rewrite import CallSiteRewriter, pipeline, rewrite_source
from .settings import MonokSettings, clear_settings_cache, get_settings

__all__ = [
    # Core type
    "Result", "Ok", "Err",
    # Combinators
    "fmap", "lift", "bind", "pipe",
    # Collection ops
    "sequence", "traverse", "collect_results",
    # Call-site rewriting
    "pipeline", "rewrite_source", "CallSiteRewriter",
    # Errors
    "ErrorCode", "ErrorInfo", "MonokError", "RewriteError", "UnwrapError",
    # Config & logging
    "MonokSettings", "get_settings", "clear_settings_cache", "configure_logging", "get_logger",
]
