"""Tests for the interception layer and the reference wrapping facility."""

from __future__ import annotations

from typing import Any, Callable

import pytest

from combat_exhaustion.core.exceptions import InterceptionError
from combat_exhaustion.host.wrapping import InterceptionRegistry, WrapperChain
from combat_exhaustion.models.enums import WrapperKind


def tagging(tag: str) -> Callable[..., Any]:
    """Interceptor appending ``tag`` to the wrapped result."""

    def interceptor(wrapped: Callable[..., Any], *args: Any) -> list[str]:
        return [*wrapped(*args), tag]

    return interceptor


def original(*args: Any) -> list[str]:
    return ["original"]


class TestWrapperChain:
    """Tests for the reference wrapping facility."""

    def test_later_registrations_wrap_earlier(self) -> None:
        """Test registration order determines nesting."""
        chain = WrapperChain()
        chain.register("first", "target", tagging("first"))
        chain.register("second", "target", tagging("second"))

        assert chain.call("target", original) == ["original", "first", "second"]
        assert chain.registered("target") == ["first", "second"]

    def test_override_sits_innermost(self) -> None:
        """Test OVERRIDE interceptors run closest to the original."""
        chain = WrapperChain()
        chain.register("wrapper", "target", tagging("wrapper"))
        chain.register("override", "target", tagging("override"), WrapperKind.OVERRIDE)

        assert chain.call("target", original) == ["original", "override", "wrapper"]

    def test_duplicate_package_rejected(self) -> None:
        """Test a package cannot wrap the same target twice."""
        chain = WrapperChain()
        chain.register("pkg", "target", tagging("a"))

        with pytest.raises(InterceptionError):
            chain.register("pkg", "target", tagging("b"))

    def test_second_override_rejected(self) -> None:
        """Test only one OVERRIDE per target."""
        chain = WrapperChain()
        chain.register("a", "target", tagging("a"), WrapperKind.OVERRIDE)

        with pytest.raises(InterceptionError):
            chain.register("b", "target", tagging("b"), WrapperKind.OVERRIDE)

    def test_unwrapped_target_calls_original(self) -> None:
        """Test calling a target with no wrappers."""
        assert WrapperChain().call("target", original) == ["original"]


class TestInterceptionRegistry:
    """Tests for idempotent registration with either back end."""

    @pytest.mark.parametrize("use_facility", [False, True])
    def test_registration_is_idempotent(self, use_facility: bool) -> None:
        """Test registering twice installs once."""
        registry = InterceptionRegistry(WrapperChain() if use_facility else None)
        interceptor = tagging("mod")

        assert registry.register("mod", "target", interceptor) is True
        assert registry.register("mod", "target", interceptor) is False
        assert registry.invoke("target", original) == ["original", "mod"]
        assert registry.uses_facility is use_facility

    def test_direct_fallback_chains_previous(self) -> None:
        """Test the direct fallback calls through to earlier interceptors."""
        registry = InterceptionRegistry()
        registry.register("first", "target", tagging("first"))
        registry.register("second", "target", tagging("second"))

        assert registry.invoke("target", original) == ["original", "first", "second"]
        assert registry.is_registered("first", "target")
        assert not registry.is_registered("first", "other")

    def test_arguments_pass_through(self) -> None:
        """Test positional arguments reach the original."""
        registry = InterceptionRegistry()

        def passthrough(wrapped: Callable[..., int], value: int) -> int:
            return wrapped(value) + 1

        registry.register("mod", "double", passthrough)

        assert registry.invoke("double", lambda value: value * 2, 5) == 11

    def test_uninstalled_target_calls_original(self) -> None:
        """Test invoking a target nothing intercepts."""
        assert InterceptionRegistry().invoke("target", original) == ["original"]
