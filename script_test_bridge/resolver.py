"""Declaring external tests on test functions and resolving them back.

Test functions declare what they bridge with decorators instead of relying on
call-stack inspection::

    @support_file("data/users.csv", "fixtures/users.csv")
    @external_test("scripts/login_test.rb", "test_login")
    def test_login(external_test):
        external_test()

The decorators only attach records to the function; nothing runs until the
bridge resolves them.
"""

from collections.abc import Callable, Sequence
from typing import Any, TypeVar

from script_test_bridge.errors import ConfigurationError, MissingDescriptorError
from script_test_bridge.models.descriptor import (
    ExternalTestBinding,
    Origin,
    SupportFileDescriptor,
    TestDescriptor,
    Variant,
)

TEST_DESCRIPTORS_ATTR = "__external_tests__"
SUPPORT_FILES_ATTR = "__external_support_files__"

F = TypeVar("F", bound=Callable[..., Any])


def _declare(
    attribute: str, record: TestDescriptor | SupportFileDescriptor
) -> Callable[[F], F]:
    def decorator(func: F) -> F:
        existing: Sequence[Any] = getattr(func, attribute, ())
        # Decorators apply bottom-up; prepend to keep top-to-bottom order.
        setattr(func, attribute, (record, *existing))
        return func

    return decorator


def _test_decorator(
    script: str, name: str, origin: Origin | None, variant: Variant
) -> Callable[[F], F]:
    descriptor = TestDescriptor(
        script_locator=script,
        test_method_name=name,
        origin=origin,
        variant=variant,
    )
    return _declare(TEST_DESCRIPTORS_ATTR, descriptor)


def external_test(
    script: str, name: str, *, origin: Origin | None = None
) -> Callable[[F], F]:
    """Bridge the decorated test to ``name`` in the external ``script``."""
    return _test_decorator(script, name, origin, "plain")


def suppressible_test(
    script: str, name: str, *, origin: Origin | None = None
) -> Callable[[F], F]:
    """Like :func:`external_test` for tests that can hide their display."""
    return _test_decorator(script, name, origin, "suppressible")


def support_file(
    source: str, target: str, *, origin: Origin | None = None
) -> Callable[[F], F]:
    """Extract ``source`` to ``target`` in the sandbox before the test runs."""
    descriptor = SupportFileDescriptor(
        source_locator=source, target_path=target, origin=origin
    )
    return _declare(SUPPORT_FILES_ATTR, descriptor)


def get_test_descriptors(target: Callable[..., Any]) -> Sequence[TestDescriptor]:
    """Return the external test descriptors attached to ``target``."""
    return tuple(getattr(_unwrap(target), TEST_DESCRIPTORS_ATTR, ()))


def get_support_files(
    target: Callable[..., Any],
) -> Sequence[SupportFileDescriptor]:
    """Return the support files attached to ``target`` in declaration order."""
    return tuple(getattr(_unwrap(target), SUPPORT_FILES_ATTR, ()))


def resolve_binding(target: Callable[..., Any]) -> ExternalTestBinding:
    """Resolve the single external test declared on ``target``.

    Descriptors without an explicit origin inherit the module that defines
    ``target``.

    Raises:
        MissingDescriptorError: If no external test is declared
        ConfigurationError: If more than one external test is declared

    """
    descriptors = get_test_descriptors(target)
    qualname = getattr(target, "__qualname__", repr(target))

    if not descriptors:
        raise MissingDescriptorError(
            f"{qualname} does not declare an external test "
            "(use @external_test or @suppressible_test)"
        )
    if len(descriptors) > 1:
        raise ConfigurationError(
            f"{qualname} declares {len(descriptors)} external tests; "
            "only one may be bridged per test"
        )

    binding = ExternalTestBinding(
        test=descriptors[0], support_files=get_support_files(target)
    )
    if (module := getattr(_unwrap(target), "__module__", None)) is not None:
        binding = binding.with_default_origin(module)
    return binding


def _unwrap(target: Callable[..., Any]) -> Callable[..., Any]:
    # Bound methods keep their attributes on the underlying function.
    return getattr(target, "__func__", target)
