"""Schema exports.

Rather than importing from individual schema files, you can
import everything from applytrack.schemas.
"""

from applytrack.schemas.base import (
    Application,
    ApplicationStatus,
    Document,
    Folder,
)

from applytrack.schemas.response import (
    ApplicationDetail,
    DocumentContent,
    FileListResponse,
    StatusHistoryEntry,
    StatusResponse,
    UploadSummary,
)

from applytrack.schemas.tree import (
    ApplicationNode,
    BreadcrumbItem,
    FolderNode,
    NodeKind,
    NodeRef,
    TreeNode,
)

from applytrack.schemas.chat import (
    ChatMessage,
    ChatRequest,
    ChatResponse,
)

from applytrack.schemas.report import (
    BASE_COLUMNS,
    CustomColumn,
    ReportRequest,
    ReportResult,
    StatusReport,
)

__all__ = [
    # Base
    "Application",
    "ApplicationStatus",
    "Document",
    "Folder",
    # Responses
    "ApplicationDetail",
    "DocumentContent",
    "FileListResponse",
    "StatusHistoryEntry",
    "StatusResponse",
    "UploadSummary",
    # Tree
    "ApplicationNode",
    "BreadcrumbItem",
    "FolderNode",
    "NodeKind",
    "NodeRef",
    "TreeNode",
    # Chat
    "ChatMessage",
    "ChatRequest",
    "ChatResponse",
    # Reports
    "BASE_COLUMNS",
    "CustomColumn",
    "ReportRequest",
    "ReportResult",
    "StatusReport",
]
