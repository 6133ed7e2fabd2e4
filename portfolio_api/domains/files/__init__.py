from portfolio_api.domains.files.entities import (
    UNSET, AccessAction, AccessLogEntry, FileDocument, HistorySnapshot
)
from portfolio_api.domains.files.request_info import RequestInfo, UserAgentInfo, client_ip, parse_user_agent
from portfolio_api.domains.files.schemas import (
    FileSaveRequest, FileUnlockRequest, FileView, SaveResult, MessageResponse,
    HistoryItem, HistoryResponse, AccessLogItem, AccessLogsResponse
)

__all__ = [
    "UNSET", "AccessAction", "AccessLogEntry", "FileDocument", "HistorySnapshot",
    "RequestInfo", "UserAgentInfo", "client_ip", "parse_user_agent",
    "FileSaveRequest", "FileUnlockRequest", "FileView", "SaveResult", "MessageResponse",
    "HistoryItem", "HistoryResponse", "AccessLogItem", "AccessLogsResponse"
]
