from .client import UpstreamClient, UpstreamResult
from .extraction import (
    AggregatedText,
    ChatChoices,
    EmptyOutput,
    StructuredOutput,
    UpstreamOutput,
    classify_response,
    extract_text,
)
from .payloads import ENDPOINT_PATHS, build_payload

__all__ = [
    "UpstreamClient",
    "UpstreamResult",
    "AggregatedText",
    "ChatChoices",
    "EmptyOutput",
    "StructuredOutput",
    "UpstreamOutput",
    "classify_response",
    "extract_text",
    "ENDPOINT_PATHS",
    "build_payload",
]
