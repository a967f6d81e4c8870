"""HubSpot CMS adapter resource exports."""

from resources.adapters.hubspot.adapter import (
    CmsAdapter,
    ContentType,
    FileAccess,
    FileUpload,
    PostListFilter,
)
from resources.adapters.hubspot.backoff import BackoffPolicy
from resources.adapters.hubspot.config import (
    RESOURCE_COMPONENT_ID,
    HubSpotAdapterSettings,
    resolve_hubspot_adapter_settings,
)
from resources.adapters.hubspot.executor import RequestExecutor, RequestSpec
from resources.adapters.hubspot.failures import (
    CmsFailure,
    FailureKind,
    RemoteErrorItem,
    RequestResult,
    failed,
    success,
)
from resources.adapters.hubspot.hubspot_adapter import HubSpotCmsAdapter
from resources.adapters.hubspot.rate_budget import RateBudget, RateBudgetStatus

__all__ = [
    "BackoffPolicy",
    "CmsAdapter",
    "CmsFailure",
    "ContentType",
    "FailureKind",
    "FileAccess",
    "FileUpload",
    "HubSpotAdapterSettings",
    "HubSpotCmsAdapter",
    "PostListFilter",
    "RESOURCE_COMPONENT_ID",
    "RateBudget",
    "RateBudgetStatus",
    "RemoteErrorItem",
    "RequestExecutor",
    "RequestResult",
    "RequestSpec",
    "failed",
    "resolve_hubspot_adapter_settings",
    "success",
]
