"""Automation contracts.

These protocols define the seams between workbenchqa's traversal and
lifecycle logic and the concrete automation stack underneath it.
``PlaywrightHandle`` is the shipped AutomationHandle; tests inject in-memory
fakes that satisfy the same protocols.
"""

from __future__ import annotations

import time
from typing import TYPE_CHECKING, Any, Callable, Protocol, runtime_checkable

from workbenchqa.models import POLL_INTERVAL

if TYPE_CHECKING:
    from workbenchqa.engine.tree import TreeItem


class OperationTimeout(Exception):
    """Raised when a bounded wait expires before its condition holds."""

    def __init__(self, message: str, timeout: float) -> None:
        super().__init__(f"{message} (timed out after {timeout:g}s)")
        self.timeout = timeout


def wait_until(
    predicate: Callable[[], Any],
    timeout: float,
    message: str = "condition not met",
    interval: float = POLL_INTERVAL,
) -> Any:
    """Poll *predicate* until it returns a truthy value or *timeout* expires.

    The predicate is always evaluated at least once, so a zero timeout acts
    as a single check. Returns the truthy value.

    Raises:
        OperationTimeout: if the predicate never became truthy.
    """
    deadline = time.monotonic() + timeout
    while True:
        result = predicate()
        if result:
            return result
        if time.monotonic() >= deadline:
            raise OperationTimeout(message, timeout)
        time.sleep(interval)


@runtime_checkable
class AutomationHandle(Protocol):
    """Stateless access to the live UI.

    Nodes are opaque. Every read re-queries the application; nothing is cached
    between calls.
    """

    def find_nodes(self, locator: str, root: Any = None) -> list[Any]: ...

    def find_node(self, locator: str, root: Any = None) -> Any | None: ...

    def get_attribute(self, node: Any, name: str) -> str | None: ...

    def get_text(self, node: Any) -> str: ...

    def click(self, node: Any) -> None: ...

    def send_keys(self, node: Any, keys: str) -> None: ...

    def read_clipboard(self) -> str: ...

    def wait_until(self, predicate: Callable[[], Any], timeout: float, message: str = "") -> Any: ...


@runtime_checkable
class ListContainer(Protocol):
    """A virtualized, scrollable list of tree rows.

    Only the currently scrolled window of rows is materialized.
    ``end_reached`` reports whether the last-row sentinel is among them.
    """

    def materialized_rows(self) -> list[TreeItem]: ...

    def scroll_to_top(self) -> None: ...

    def page_forward(self) -> None: ...

    def end_reached(self) -> bool: ...


@runtime_checkable
class Application(Protocol):
    """The application-under-test process as seen by a Session."""

    @property
    def handle(self) -> AutomationHandle: ...

    def start(self, timeout: float) -> None: ...

    def wait_for_ready(self, timeout: float) -> None: ...

    def stop(self, timeout: float) -> None: ...
