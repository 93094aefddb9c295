"""Services that run remote effects and hold client-side state."""

from applytrack.services.chat import ChatPanel, ChatState
from applytrack.services.drag_drop import BatchResult, DragDropController
from applytrack.services.explorer import ExplorerService
from applytrack.services.reports import ReportBuilder, default_report_filename, to_csv
from applytrack.services.tree_builder import TreeBuilder, TreeBuildReport, count_nodes
from applytrack.services.viewer import EMPTY_CONTENT_PLACEHOLDER, DocumentViewer, ViewerState

__all__ = [
    "BatchResult",
    "ChatPanel",
    "ChatState",
    "DocumentViewer",
    "DragDropController",
    "EMPTY_CONTENT_PLACEHOLDER",
    "ExplorerService",
    "ReportBuilder",
    "TreeBuildReport",
    "TreeBuilder",
    "ViewerState",
    "count_nodes",
    "default_report_filename",
    "to_csv",
]
