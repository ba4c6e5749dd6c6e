"""Workbench application process management.

Launches the application under test with a remote-debugging port and an
isolated user-data directory, attaches Playwright to it over the Chrome
DevTools Protocol, detects the workbench ready signal, and terminates it.

Playwright is imported lazily in ``start()`` so the traversal modules can be
used (and unit tested) without a browser stack installed.
"""

from __future__ import annotations

import json
import logging
import subprocess
import time
from pathlib import Path
from typing import Any

import requests

from workbenchqa.config import WorkbenchQAConfig
from workbenchqa.engine.driver import PlaywrightHandle
from workbenchqa.engine.protocols import AutomationHandle, wait_until
from workbenchqa.models import DEFAULT_DEBUG_PORT, WORKBENCH_READY_LOCATOR

logger = logging.getLogger("workbenchqa.engine.application")

_PROBE_INTERVAL = 0.25


class WorkbenchApplication:
    """The application-under-test process.

    Usage::

        app = WorkbenchApplication("/usr/bin/code", Path("/tmp/user-data"))
        app.start(timeout=15)
        app.wait_for_ready(timeout=15)
        ...
        app.stop(timeout=15)
    """

    def __init__(
        self,
        binary: str,
        user_data_dir: Path,
        debug_port: int = DEFAULT_DEBUG_PORT,
        settings: dict[str, Any] | None = None,
        extra_args: list[str] | None = None,
        ready_locator: str = WORKBENCH_READY_LOCATOR,
    ) -> None:
        """
        Args:
            binary: Path of the application executable.
            user_data_dir: Profile directory, isolated from the user's own.
            debug_port: Remote-debugging port the application listens on.
            settings: Written to ``<user_data_dir>/User/settings.json`` before launch.
            extra_args: Additional command-line arguments.
            ready_locator: Node whose presence signals the workbench is ready.
        """
        self._binary = binary
        self._user_data_dir = Path(user_data_dir)
        self._debug_port = debug_port
        self._settings = settings or {}
        self._extra_args = list(extra_args or [])
        self._ready_locator = ready_locator

        # Runtime state -- populated by start()
        self._process: subprocess.Popen | None = None
        self._playwright: Any = None
        self._browser: Any = None
        self._handle: PlaywrightHandle | None = None

    @classmethod
    def from_config(cls, config: WorkbenchQAConfig) -> WorkbenchApplication:
        return cls(
            binary=config.binary,
            user_data_dir=config.user_data_dir,
            debug_port=config.debug_port,
            settings=config.settings,
            extra_args=config.extra_args,
            ready_locator=config.ready_locator,
        )

    @property
    def handle(self) -> AutomationHandle:
        if self._handle is None:
            raise RuntimeError("Application is not running. Call start() first.")
        return self._handle

    @property
    def endpoint(self) -> str:
        return f"http://127.0.0.1:{self._debug_port}"

    def command(self) -> list[str]:
        return [
            self._binary,
            f"--remote-debugging-port={self._debug_port}",
            f"--user-data-dir={self._user_data_dir}",
            *self._extra_args,
        ]

    # -- Lifecycle -----------------------------------------------------------

    def start(self, timeout: float) -> None:
        """Spawn the process and attach to it, all within *timeout* seconds.

        Raises ``RuntimeError`` if the process exits during startup and
        ``OperationTimeout`` if the DevTools endpoint or a page does not
        appear in time.
        """
        deadline = time.monotonic() + timeout
        self._write_settings()

        cmd = self.command()
        logger.info("Launching application: %s", " ".join(cmd))
        self._process = subprocess.Popen(cmd, stdout=subprocess.DEVNULL, stderr=subprocess.DEVNULL)

        wait_until(
            self._debugger_listening,
            _remaining(deadline),
            f"DevTools endpoint {self.endpoint} did not answer",
            _PROBE_INTERVAL,
        )

        from playwright.sync_api import sync_playwright

        self._playwright = sync_playwright().start()
        self._browser = self._playwright.chromium.connect_over_cdp(
            self.endpoint,
            timeout=max(_remaining(deadline), 0.1) * 1000,  # 0 would disable the timeout
        )
        page = wait_until(
            self._first_page,
            _remaining(deadline),
            "application opened no window",
            _PROBE_INTERVAL,
        )
        self._handle = PlaywrightHandle(page)
        logger.info("Attached to application pid=%s over %s", self._process.pid, self.endpoint)

    def wait_for_ready(self, timeout: float) -> None:
        """Block until the ready locator is present in the UI."""
        handle = self.handle
        handle.wait_until(
            lambda: handle.find_node(self._ready_locator) is not None,
            timeout,
            f"workbench ready signal {self._ready_locator!r} not observed",
        )

    def stop(self, timeout: float) -> None:
        """Disconnect Playwright and terminate the process.

        Raises ``RuntimeError`` if the process had to be killed after not
        exiting within *timeout* seconds.
        """
        try:
            if self._browser is not None:
                try:
                    self._browser.close()
                except Exception as exc:
                    logger.warning("Failed to disconnect from application: %s", exc)
            if self._playwright is not None:
                try:
                    self._playwright.stop()
                except Exception as exc:
                    logger.warning("Failed to stop Playwright: %s", exc)
            if self._process is not None and self._process.poll() is None:
                self._terminate(self._process, timeout)
        finally:
            self._browser = None
            self._playwright = None
            self._handle = None
            self._process = None

    # -- Helpers -------------------------------------------------------------

    def _terminate(self, process: subprocess.Popen, timeout: float) -> None:
        process.terminate()
        try:
            process.wait(timeout=timeout)
            logger.info("Application pid=%s exited with code %s", process.pid, process.returncode)
        except subprocess.TimeoutExpired:
            logger.warning("Application pid=%s ignored SIGTERM for %.0fs; killing", process.pid, timeout)
            process.kill()
            process.wait()
            raise RuntimeError(f"Application pid={process.pid} did not exit within {timeout:g}s and was killed")

    def _write_settings(self) -> None:
        if not self._settings:
            return
        settings_path = self._user_data_dir / "User" / "settings.json"
        settings_path.parent.mkdir(parents=True, exist_ok=True)
        settings_path.write_text(json.dumps(self._settings, indent=2), encoding="utf-8")
        logger.debug("Wrote %d setting(s) to %s", len(self._settings), settings_path)

    def _debugger_listening(self) -> bool:
        code = self._process.poll() if self._process is not None else None
        if code is not None:
            raise RuntimeError(f"Application exited during startup with code {code}")
        try:
            resp = requests.get(f"{self.endpoint}/json/version", timeout=1)
        except requests.RequestException:
            return False
        return resp.status_code == 200

    def _first_page(self) -> Any:
        for context in self._browser.contexts:
            if context.pages:
                return context.pages[0]
        return None


def _remaining(deadline: float) -> float:
    return max(deadline - time.monotonic(), 0.0)
