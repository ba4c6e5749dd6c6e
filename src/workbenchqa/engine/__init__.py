"""workbenchqa engine -- traversal and lifecycle modules.

Provides:
- AutomationHandle / ListContainer / Application: the protocols the engine consumes
- PlaywrightHandle: AutomationHandle over a CDP-attached Playwright page
- Section / TreeItem: page objects for side-bar sections and their tree rows
- VirtualListNavigator: label lookup in virtualized lists
- PathResolver: label-path navigation through expandable trees
- WorkbenchApplication: the application-under-test process
- Session / SessionOrchestrator: run-scoped lifecycle and exit status
- ChannelView / TextView / OutputView: bottom-panel views
"""

from workbenchqa.engine.application import WorkbenchApplication
from workbenchqa.engine.driver import PlaywrightHandle
from workbenchqa.engine.navigation import ItemNotFound, PathResolver, VirtualListNavigator
from workbenchqa.engine.protocols import (
    Application,
    AutomationHandle,
    ListContainer,
    OperationTimeout,
    wait_until,
)
from workbenchqa.engine.session import (
    LaunchTimeout,
    Session,
    SessionOrchestrator,
    SessionState,
    TeardownFailure,
)
from workbenchqa.engine.tree import HeaderState, Section, SectionAction, SectionList, TreeItem
from workbenchqa.engine.views import ChannelView, OutputView, TextView

__all__ = [
    "Application",
    "AutomationHandle",
    "ChannelView",
    "HeaderState",
    "ItemNotFound",
    "LaunchTimeout",
    "ListContainer",
    "OperationTimeout",
    "OutputView",
    "PathResolver",
    "PlaywrightHandle",
    "Section",
    "SectionAction",
    "SectionList",
    "Session",
    "SessionOrchestrator",
    "SessionState",
    "TeardownFailure",
    "TextView",
    "TreeItem",
    "VirtualListNavigator",
    "WorkbenchApplication",
    "wait_until",
]
