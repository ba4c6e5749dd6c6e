"""workbenchqa -- session-scoped UI automation for workbench-style desktop apps."""

__version__ = "0.1.0"
