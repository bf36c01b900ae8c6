"""Constants for ExecuTask.

This module centralizes default values and limits used throughout the application.
"""

from executask.models.enums import TodoPriority, TodoStatus


# Todo defaults
DEFAULT_PRIORITY = TodoPriority.MEDIUM
DEFAULT_STATUS = TodoStatus.ACTIVE

# Field limits
TITLE_MAX_LENGTH = 255
DESCRIPTION_MAX_LENGTH = 1000
CATEGORY_NAME_MAX_LENGTH = 100
CATEGORY_DESCRIPTION_MAX_LENGTH = 500
COMMENT_MAX_LENGTH = 1000
DEFAULT_CATEGORY_COLOR = "#6366f1"

# Pagination
DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100

# Attachments
MAX_ATTACHMENT_SIZE = 10 * 1024 * 1024  # 10 MiB
ALLOWED_ATTACHMENT_TYPES = {
    "image/jpeg",
    "image/png",
    "image/gif",
    "image/webp",
    "application/pdf",
    "text/plain",
    "text/csv",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "application/vnd.ms-excel",
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
}

# Background jobs
MAX_NOTIFICATION_ATTEMPTS = 3
DEFAULT_REMINDER_WINDOW_HOURS = 24
DEFAULT_JOB_BATCH_SIZE = 100
WEEKLY_REPORT_LOOKBACK_DAYS = 7
