"""Hook pipeline for the request/response lifecycle.

Hooks run one at a time in registration order. Parent hooks come first when
an instance is derived with ``extend``. Except for before-request hooks, a
hook may be a plain function or a coroutine function.

Stages:
    before_request: ``options -> options``, each output feeds the next hook
    after_response: ``result -> result``, each output feeds the next hook
    request_error: ``(options, error)``, side effects only; ``False`` stops
        the chain, an exception aborts it
    response_error: ``(result, error) -> value``, the first hook that
        returns instead of raising decides the outcome
"""

from __future__ import annotations

import inspect
from collections.abc import Sequence
from typing import Any

from loguru import logger

from .types import (
    AfterResponseHook,
    BeforeRequestHook,
    FetchResponse,
    RequestErrorHook,
    ResolvedOptions,
    ResponseErrorHook,
)


def _hook_name(hook: Any) -> str:
    return getattr(hook, "__qualname__", None) or repr(hook)


async def _resolve(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


def run_before_request(
    hooks: Sequence[BeforeRequestHook], options: ResolvedOptions
) -> ResolvedOptions:
    for hook in hooks:
        options = hook(options)
    return options


async def run_after_response(hooks: Sequence[AfterResponseHook], result: Any) -> Any:
    for hook in hooks:
        result = await _resolve(hook(result))
    return result


async def run_request_error(
    hooks: Sequence[RequestErrorHook], options: ResolvedOptions, error: Exception
) -> None:
    """Notify request-error hooks of a transport failure.

    The caller re-raises ``error`` afterwards; these hooks cannot swallow it.
    """
    for hook in hooks:
        try:
            outcome = await _resolve(hook(options, error))
        except Exception as hook_error:
            logger.warning(f"Request error hook {_hook_name(hook)} raised {hook_error!r}")
            raise

        if outcome is False:
            logger.debug(f"Request error hook {_hook_name(hook)} stopped the hook chain")
            return


async def run_response_error(
    hooks: Sequence[ResponseErrorHook], result: FetchResponse, error: Exception
) -> tuple[bool, Any]:
    """Offer a response failure to each response-error hook in turn.

    Returns:
        ``(True, value)`` for the first hook that returned, or
        ``(False, None)`` if every hook raised or none is registered
    """
    for hook in hooks:
        try:
            return True, await _resolve(hook(result, error))
        except Exception as hook_error:
            logger.debug(f"Response error hook {_hook_name(hook)} declined: {hook_error!r}")
    return False, None
