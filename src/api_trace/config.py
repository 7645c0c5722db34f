"""Run configuration for a trace."""
from dataclasses import dataclass
from typing import Optional

# Methods of the HTTP client wrapper that hit the remote API
DEFAULT_API_METHODS = (
    "GET_JWT",
    "POST_JWT",
    "PUT_JWT",
    "PATCH_JWT",
    "DELETE_JWT",
    "ObtenhaBearerToken",
)

DEFAULT_SOURCE_EXTENSIONS = (".cs",)
DEFAULT_MARKUP_EXTENSIONS = (".aspx",)
DEFAULT_EVENT_ATTRIBUTES = ("OnClick",)
CODE_BEHIND_SUFFIX = ".aspx.cs"
DEFAULT_REPORT_NAME = "ApiTraceReport.txt"

NO_PARAMETER = "No parameter"


@dataclass(frozen=True)
class TraceConfig:
    api_methods: frozenset[str] = frozenset(DEFAULT_API_METHODS)
    source_extensions: tuple[str, ...] = DEFAULT_SOURCE_EXTENSIONS
    markup_extensions: tuple[str, ...] = DEFAULT_MARKUP_EXTENSIONS
    event_attributes: tuple[str, ...] = DEFAULT_EVENT_ATTRIBUTES
    code_behind_suffix: str = CODE_BEHIND_SUFFIX
    max_workers: Optional[int] = None  # None -> ThreadPoolExecutor default
