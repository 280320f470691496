#!/usr/bin/env python3
"""Core constants for the EC2 console."""

# Instance state priority used for ordering (lower sorts first)
STATE_ORDER = {
    "running": 0,
    "pending": 1,
    "stopping": 2,
    "stopped": 3,
    "shutting-down": 4,
    "terminated": 5,
    "unknown": 6,
}
UNKNOWN_STATE = "unknown"
FILTER_STATE_ALL = "all"

# Display placeholders
NAME_PLACEHOLDER = "—"
FIELD_PLACEHOLDER = "—"
IP_PLACEHOLDER = "N/A"
NAME_TAG_KEY = "Name"
META_TAG_LIMIT = 2

# Notifications kept for the user before the oldest are dropped
NOTIFICATION_HISTORY = 20

# AWS Service Constants
DEFAULT_AWS_REGION = "eu-west-3"
EC2_API_VERSION = "2016-11-15"
MAX_INSTANCE_RECORDS = 200
MAX_DESCRIBE_PAGES = 50
CONNECT_TIMEOUT_SECONDS = 5
READ_TIMEOUT_SECONDS = 30

# Persistence keys
CREDENTIALS_STORAGE_KEY = "ec2-console-credentials"
FILTERS_STORAGE_KEY = "ec2-console-last-filters"
DEFAULT_STORAGE_FILE = ".ec2-console.json"

# Display format
LAUNCH_TIME_FORMAT = "%Y-%m-%d %H:%M:%S"

# HTTP proxy
DEFAULT_API_HOST = "127.0.0.1"
DEFAULT_API_PORT = 3000

# File and Directory Constants
DEFAULT_REPORT_DIR = "reports"
DEFAULT_REPORT_EXTENSION = ".csv"
