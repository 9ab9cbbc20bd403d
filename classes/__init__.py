"""
Azure DevOps issue counter classes package.
Contains the work item source, the state transition logic and the report classes.
"""

from .AzureDevOps import AzureDevOps, WorkItemFetchError
from .WorkItemSource import AzureDevOpsWorkItemSource
from .commands import IssueCounterCommands
from .issue_classifier import ItemClassifier
from .report_writer import ReportWriter
from .state_transition_scanner import ClosureResolver, RevisionScanner
from .time_series_builder import TimeSeriesBuilder
from .work_item_models import IssueState, ReportRow, Revision, Transition, WorkItem

__all__ = [
    'AzureDevOps',
    'WorkItemFetchError',
    'AzureDevOpsWorkItemSource',
    'IssueCounterCommands',
    'ItemClassifier',
    'ReportWriter',
    'ClosureResolver',
    'RevisionScanner',
    'TimeSeriesBuilder',
    'IssueState',
    'ReportRow',
    'Revision',
    'Transition',
    'WorkItem'
]
