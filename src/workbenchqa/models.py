"""Centralized defaults, locators and exit codes."""

# Session lifecycle timings (seconds)
DEFAULT_LAUNCH_TIMEOUT = 15.0
DEFAULT_SETTLE_DELAY = 2.0
DEFAULT_CLOSE_TIMEOUT = 15.0

# Per-call wait for attribute flips (expand/collapse)
DEFAULT_WAIT_TIMEOUT = 1.0
POLL_INTERVAL = 0.1

# Chrome DevTools Protocol
DEFAULT_DEBUG_PORT = 9222

# Locators (Playwright selector syntax)
WORKBENCH_READY_LOCATOR = ".monaco-workbench"
SECTION_PANE_LOCATOR = ".split-view-view"
SECTION_TITLE_LOCATOR = ".panel-header h3"
PANEL_HEADER_LOCATOR = ".panel-header"
HEADER_ACTION_LOCATOR = ".actions a[role='button']"
LIST_CONTAINER_LOCATOR = ".monaco-list"
LIST_ROW_LOCATOR = ".monaco-list-row"
LAST_ROW_LOCATOR = "[data-last-element='true']"
CONTEXT_VIEW_LOCATOR = ".context-view"
OPTION_TEXT_LOCATOR = ".option-text"

# Keys (Playwright key names)
KEY_HOME = "Home"
KEY_PAGE_DOWN = "PageDown"

# Process exit codes, clear of pytest.ExitCode (0-5)
EXIT_OK = 0
EXIT_TESTS_FAILED = 1
EXIT_LAUNCH_FAILED = 6
EXIT_CONFIG_ERROR = 7
