"""Session lifecycle for a whole test run.

A ``Session`` is one live instance of the application under test. The
``SessionOrchestrator`` owns it for the duration of a run: it launches the
application once before any test case, hands the active Session to the host
test framework, tears it down exactly once afterwards, and maps the number of
failed cases to a single process exit status.

State machine::

    IDLE -> LAUNCHING -> READY -> ACTIVE -> CLOSING -> CLOSED

A failed launch stops the process and goes from LAUNCHING to CLOSED.
"""

from __future__ import annotations

import enum
import logging
import signal
import threading
import time
from typing import Any, Callable

from workbenchqa.config import WorkbenchQAConfig
from workbenchqa.engine.application import WorkbenchApplication
from workbenchqa.engine.protocols import Application, AutomationHandle
from workbenchqa.models import EXIT_LAUNCH_FAILED, EXIT_OK, EXIT_TESTS_FAILED

logger = logging.getLogger("workbenchqa.engine.session")


class LaunchTimeout(Exception):
    """Raised when the application does not reach the ready state in time."""

    pass


class TeardownFailure(Exception):
    """Raised when the application does not shut down cleanly."""

    pass


class SessionState(enum.Enum):
    IDLE = "idle"
    LAUNCHING = "launching"
    READY = "ready"
    ACTIVE = "active"
    CLOSING = "closing"
    CLOSED = "closed"


class Session:
    """One live instance of the application under test."""

    def __init__(
        self,
        application: Application,
        launch_timeout: float,
        settle_delay: float,
        close_timeout: float,
    ) -> None:
        self._application = application
        self._launch_timeout = launch_timeout
        self._settle_delay = settle_delay
        self._close_timeout = close_timeout
        self._state = SessionState.IDLE
        self._reached_active = False

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def reached_active(self) -> bool:
        return self._reached_active

    @property
    def application(self) -> Application:
        return self._application

    @property
    def handle(self) -> AutomationHandle:
        """The automation handle; only available while ACTIVE."""
        if self._state is not SessionState.ACTIVE:
            raise RuntimeError(f"Session is {self._state.value}, not active")
        return self._application.handle

    def launch(self) -> None:
        """Start the application and wait until it is ready.

        The launch timeout covers both process startup and the ready signal.
        Once ready, waits the settle delay before becoming ACTIVE.

        Raises:
            LaunchTimeout: the application did not become ready. It has been
                stopped and the Session is CLOSED.
        """
        if self._state is not SessionState.IDLE:
            raise RuntimeError(f"Cannot launch a session that is {self._state.value}")

        self._state = SessionState.LAUNCHING
        deadline = time.monotonic() + self._launch_timeout
        try:
            self._application.start(timeout=self._launch_timeout)
            self._application.wait_for_ready(timeout=max(deadline - time.monotonic(), 0.0))
        except Exception as exc:
            self._abort_launch()
            raise LaunchTimeout(
                f"Application did not become ready within {self._launch_timeout:g}s: {exc}"
            ) from exc

        self._state = SessionState.READY
        logger.info("Application ready; settling for %.1fs", self._settle_delay)
        if self._settle_delay > 0:
            time.sleep(self._settle_delay)

        self._state = SessionState.ACTIVE
        self._reached_active = True
        logger.info("Session active")

    def close(self) -> None:
        """Stop the application. Idempotent.

        A no-op before launch, after a failed launch, and after a previous
        close.

        Raises:
            TeardownFailure: the application did not stop cleanly. The
                Session is CLOSED regardless.
        """
        if self._state in (SessionState.IDLE, SessionState.CLOSING, SessionState.CLOSED):
            return

        self._state = SessionState.CLOSING
        logger.info("Closing session")
        try:
            self._application.stop(timeout=self._close_timeout)
        except Exception as exc:
            raise TeardownFailure(f"Application did not shut down cleanly: {exc}") from exc
        finally:
            self._state = SessionState.CLOSED
        logger.info("Session closed")

    def _abort_launch(self) -> None:
        try:
            self._application.stop(timeout=self._close_timeout)
        except Exception as exc:
            logger.warning("Cleanup after failed launch also failed: %s", exc)
        finally:
            self._state = SessionState.CLOSED


ApplicationFactory = Callable[[WorkbenchQAConfig], Application]


class SessionOrchestrator:
    """Brackets a batch of test cases around one Session.

    Host frameworks call ``before_all()`` once before any case,
    ``after_all()`` once after all cases, and ``on_complete(failures)`` to
    obtain the exit status. ``run()`` does all three for hosts that can be
    driven as a single callable.
    """

    def __init__(
        self,
        config: WorkbenchQAConfig,
        application_factory: ApplicationFactory = WorkbenchApplication.from_config,
    ) -> None:
        """
        Args:
            config: WorkbenchQAConfig with the binary and lifecycle timings.
            application_factory: Builds the Application for the Session.
        """
        self._config = config
        self._application_factory = application_factory
        self._session: Session | None = None
        self._finalized = False
        self._exit_status: int | None = None
        self._previous_sigterm: Any = None
        self._sigterm_installed = False

    @property
    def config(self) -> WorkbenchQAConfig:
        return self._config

    @property
    def session(self) -> Session:
        if self._session is None:
            raise RuntimeError("No session; before_all() has not run")
        return self._session

    @property
    def exit_status(self) -> int | None:
        return self._exit_status

    @property
    def before_all_timeout(self) -> float:
        return self._config.launch_timeout + self._config.settle_delay

    @property
    def after_all_timeout(self) -> float:
        return self._config.close_timeout

    # -- Host hooks ----------------------------------------------------------

    def before_all(self) -> Session:
        """Create and launch the Session. Raises LaunchTimeout on failure."""
        if self._session is not None:
            raise RuntimeError("before_all() already ran for this orchestrator")

        logger.info("Starting application under test: %s", self._config.binary)
        self._session = Session(
            self._application_factory(self._config),
            launch_timeout=self._config.launch_timeout,
            settle_delay=self._config.settle_delay,
            close_timeout=self._config.close_timeout,
        )
        self._install_signal_handlers()
        self._session.launch()
        return self._session

    def after_all(self) -> None:
        """Close the Session. Runs at most once; teardown failures are logged."""
        if self._finalized:
            return
        self._finalized = True
        self._restore_signal_handlers()
        if self._session is None:
            return
        try:
            self._session.close()
        except TeardownFailure as exc:
            logger.error("Teardown failed (run status unaffected): %s", exc)

    def on_complete(self, failures: int) -> int:
        """Map the failed-case count to the process exit status."""
        if self._session is None or not self._session.reached_active:
            status = EXIT_LAUNCH_FAILED
        elif failures > 0:
            status = EXIT_TESTS_FAILED
        else:
            status = EXIT_OK
        self._exit_status = status
        logger.info("Run complete: %d failure(s), exit status %d", failures, status)
        return status

    def run(self, execute: Callable[[Session], int]) -> int:
        """Launch, run *execute* against the active Session, always tear down.

        Args:
            execute: Runs the test cases and returns the number that failed.

        Returns:
            The process exit status.
        """
        try:
            session = self.before_all()
        except LaunchTimeout as exc:
            logger.error("Run aborted before any test case: %s", exc)
            self.after_all()
            return self.on_complete(0)

        try:
            failures = execute(session)
        finally:
            self.after_all()
        return self.on_complete(failures)

    # -- Process management --------------------------------------------------

    def _install_signal_handlers(self) -> None:
        """Turn SIGTERM into KeyboardInterrupt so teardown still runs."""
        if threading.current_thread() is not threading.main_thread():
            return

        def _handle_term(signum: int, frame: Any) -> None:
            logger.info("Received signal %d; interrupting run", signum)
            raise KeyboardInterrupt

        self._previous_sigterm = signal.signal(signal.SIGTERM, _handle_term)
        self._sigterm_installed = True

    def _restore_signal_handlers(self) -> None:
        if not self._sigterm_installed:
            return
        # None means the previous handler was not installed from Python
        signal.signal(signal.SIGTERM, self._previous_sigterm or signal.SIG_DFL)
        self._sigterm_installed = False
        self._previous_sigterm = None
