"""Content Authority Service native package exports."""

from resources.adapters.hubspot import CmsFailure, ContentType, FailureKind
from services.content.content_authority.audit import (
    InMemoryAuditSink,
    JsonlAuditSink,
    LoggingAuditSink,
    OperationRecord,
    OperationStatus,
    read_records,
)
from services.content.content_authority.config import (
    SERVICE_COMPONENT_ID,
    ContentAuthoritySettings,
    resolve_content_authority_settings,
)
from services.content.content_authority.domain import (
    ContentBodyUpdate,
    MetadataUpdate,
    NewPost,
    NewWidget,
    RemoteObject,
    TreeAddress,
    WidgetContentUpdate,
)
from services.content.content_authority.implementation import (
    DefaultContentAuthorityService,
)
from services.content.content_authority.service import (
    ContentAuthorityService,
    ServiceResult,
)

__all__ = [
    "CmsFailure",
    "ContentAuthorityService",
    "ContentAuthoritySettings",
    "ContentBodyUpdate",
    "ContentType",
    "DefaultContentAuthorityService",
    "FailureKind",
    "InMemoryAuditSink",
    "JsonlAuditSink",
    "LoggingAuditSink",
    "MetadataUpdate",
    "NewPost",
    "NewWidget",
    "OperationRecord",
    "OperationStatus",
    "RemoteObject",
    "SERVICE_COMPONENT_ID",
    "ServiceResult",
    "TreeAddress",
    "WidgetContentUpdate",
    "read_records",
    "resolve_content_authority_settings",
]
