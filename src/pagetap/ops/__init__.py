"""Page operations, one browser session each.

Every operation takes the target URL (plus the script for execute_script) and an
optional ``settings`` keyword, and returns an OperationResult. Exceptions never
escape; they become failure results.

PUBLIC API:
  - OperationResult: Success payload or failure message
  - capture_screenshot: Viewport PNG
  - full_page_screenshot: Whole-document PNG
  - generate_pdf: Letter-size PDF
  - performance_metrics: Performance counters
  - page_info: Title, meta tags, links, images
  - execute_script: Evaluate caller JavaScript
  - storage_snapshot: Cookies, localStorage, sessionStorage
  - accessibility_check: Structural accessibility counts
  - monitor_network: Requests sent during load
  - console_logs: Console messages during load
"""

from pagetap.ops._base import OperationResult
from pagetap.ops.capture import capture_screenshot, full_page_screenshot, generate_pdf
from pagetap.ops.extract import accessibility_check, execute_script, page_info, performance_metrics, storage_snapshot
from pagetap.ops.monitor import console_logs, monitor_network

__all__ = [
    "OperationResult",
    "capture_screenshot",
    "full_page_screenshot",
    "generate_pdf",
    "performance_metrics",
    "page_info",
    "execute_script",
    "storage_snapshot",
    "accessibility_check",
    "monitor_network",
    "console_logs",
]
