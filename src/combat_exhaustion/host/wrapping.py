"""Interception of host rules computations.

The host exposes a narrow set of interceptable computations. Modules
register interceptors ``fn(wrapped, *args, **kwargs)`` against a target
name; ``wrapped`` calls through to whatever was installed before.

Two back ends exist:

* an external wrapping facility (``WrapperChain`` is the reference one),
  used when the host reports it active;
* a direct fallback inside ``InterceptionRegistry`` that chains each new
  interceptor around the previously installed one.

Registration is idempotent per ``(owner, target)`` in both cases.
"""

from __future__ import annotations

from collections import defaultdict
from typing import Any, Callable, Protocol

from combat_exhaustion.core.exceptions import InterceptionError
from combat_exhaustion.core.logging import get_logger
from combat_exhaustion.models.enums import WrapperKind


logger = get_logger(__name__)

Interceptor = Callable[..., Any]
"""Callable taking ``(wrapped, *args, **kwargs)``."""

WRAPPER_FACILITY_ID = "lib-wrapper"


class WrapperFacility(Protocol):
    """External function-wrapping facility."""

    def register(
        self,
        package_id: str,
        target: str,
        fn: Interceptor,
        kind: WrapperKind = WrapperKind.WRAPPER,
    ) -> None: ...

    def call(self, target: str, original: Callable[..., Any], *args: Any, **kwargs: Any) -> Any: ...


def _bind(fn: Interceptor, inner: Callable[..., Any]) -> Callable[..., Any]:
    def bound(*args: Any, **kwargs: Any) -> Any:
        return fn(inner, *args, **kwargs)

    return bound


class WrapperChain:
    """Reference wrapping facility shared by every package in a session.

    Later registrations wrap earlier ones; OVERRIDE interceptors sit
    innermost, directly around the host's own implementation.
    """

    def __init__(self) -> None:
        self._wrappers: dict[str, list[tuple[str, Interceptor, WrapperKind]]] = defaultdict(list)

    def register(
        self,
        package_id: str,
        target: str,
        fn: Interceptor,
        kind: WrapperKind = WrapperKind.WRAPPER,
    ) -> None:
        """Register ``fn`` for ``target`` on behalf of ``package_id``.

        Raises:
            InterceptionError: If the package already wraps the target, or
                another package already overrides it.
        """
        entries = self._wrappers[target]
        if any(pkg == package_id for pkg, _, _ in entries):
            raise InterceptionError(
                f"{package_id} already wraps {target}",
                target=target,
            )
        if kind == WrapperKind.OVERRIDE and any(k == WrapperKind.OVERRIDE for _, _, k in entries):
            raise InterceptionError(
                f"{target} is already overridden",
                target=target,
            )
        entries.append((package_id, fn, kind))
        logger.debug("Wrapper registered", package_id=package_id, target=target, kind=kind)

    def registered(self, target: str) -> list[str]:
        """Package ids wrapping ``target``, in registration order."""
        return [pkg for pkg, _, _ in self._wrappers.get(target, [])]

    def call(self, target: str, original: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
        entries = self._wrappers.get(target, [])
        ordered = [e for e in entries if e[2] == WrapperKind.OVERRIDE] + [
            e for e in entries if e[2] != WrapperKind.OVERRIDE
        ]
        call = original
        for _, fn, _ in ordered:
            call = _bind(fn, call)
        return call(*args, **kwargs)


class InterceptionRegistry:
    """Host-adapter interception layer.

    Owns the choice between an external facility and the direct fallback,
    and the idempotency of registration.

    Example:
        >>> registry = InterceptionRegistry()
        >>> registry.register("my-module", "has_condition_effect", interceptor)
        True
        >>> registry.register("my-module", "has_condition_effect", interceptor)
        False
    """

    def __init__(self, facility: WrapperFacility | None = None) -> None:
        """Initialize the registry.

        Args:
            facility: External wrapping facility, or None to chain directly.
        """
        self._facility = facility
        self._registered: set[tuple[str, str]] = set()
        self._direct: dict[str, Interceptor] = {}

    @property
    def uses_facility(self) -> bool:
        return self._facility is not None

    def is_registered(self, owner: str, target: str) -> bool:
        return (owner, target) in self._registered

    def register(
        self,
        owner: str,
        target: str,
        fn: Interceptor,
        kind: WrapperKind = WrapperKind.WRAPPER,
    ) -> bool:
        """Install ``fn`` around ``target``.

        Args:
            owner: Registering package id.
            target: Interceptable computation name.
            fn: Interceptor ``fn(wrapped, *args, **kwargs)``.
            kind: Wrapper kind, forwarded to an external facility.

        Returns:
            True if installed, False if ``owner`` had already wrapped ``target``.
        """
        key = (owner, target)
        if key in self._registered:
            logger.debug("Interceptor already installed", owner=owner, target=target)
            return False

        if self._facility is not None:
            self._facility.register(owner, target, fn, kind)
        else:
            previous = self._direct.get(target)

            def chained(original: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
                inner = _bind(previous, original) if previous is not None else original
                return fn(inner, *args, **kwargs)

            self._direct[target] = chained

        self._registered.add(key)
        logger.info(
            "Interceptor installed",
            owner=owner,
            target=target,
            via="facility" if self._facility is not None else "direct",
        )
        return True

    def invoke(self, target: str, original: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
        """Run ``target`` through every installed interceptor.

        Args:
            target: Interceptable computation name.
            original: The host's unmodified implementation.
            *args: Positional arguments for the computation.
            **kwargs: Keyword arguments for the computation.

        Returns:
            Whatever the outermost interceptor (or ``original``) returns.
        """
        if self._facility is not None:
            return self._facility.call(target, original, *args, **kwargs)
        chained = self._direct.get(target)
        if chained is None:
            return original(*args, **kwargs)
        return chained(original, *args, **kwargs)


__all__ = [
    "Interceptor",
    "WRAPPER_FACILITY_ID",
    "WrapperFacility",
    "WrapperChain",
    "InterceptionRegistry",
]
