"""HTTP constants for the call executor.

Centralizes status ranges and stage event names shared across modules.
"""

# HTTP Status Code Ranges
HTTP_STATUS_MIN = 100
HTTP_STATUS_MAX = 599
HTTP_STATUS_OK_MIN = 200
HTTP_STATUS_OK_MAX = 299

# Default transport settings
DEFAULT_TIMEOUT_SECONDS = 30.0
DEFAULT_USER_AGENT = "webrepo/0.1"

# Replacement used when a body cannot be rendered as text
EMPTY_RENDERING = ""

# Log event names, one per pipeline stage
EVENT_REQUEST = "request_built"
EVENT_RESPONSE = "response_received"
EVENT_DATA = "response_data"
EVENT_FALLBACK = "decode_fallback_text"
EVENT_ERROR = "call_failed"
