# Artwin Feedback Helpers
# Utility functions used across the services

import re
import time
from datetime import datetime, timezone

SHEET_URL_PATTERN = re.compile(r'/d/([a-zA-Z0-9-_]+)')


def strip_markdown_json(content):
    """Strip markdown code blocks from Claude's JSON response"""
    content = content.strip()
    if content.startswith('```'):
        # Remove first line (```json or ```)
        content = content.split('\n', 1)[1] if '\n' in content else content[3:]
    if content.endswith('```'):
        content = content.rsplit('```', 1)[0]
    return content.strip()


def now_ms():
    """Current time as epoch milliseconds"""
    return int(time.time() * 1000)


def iso_from_ms(ms):
    """Format epoch milliseconds as ISO-8601 UTC (e.g. '2025-01-05T09:30:00.000Z')"""
    dt = datetime.fromtimestamp(ms / 1000, tz=timezone.utc)
    return dt.strftime('%Y-%m-%dT%H:%M:%S.') + f'{dt.microsecond // 1000:03d}Z'


def ms_from_iso(value):
    """Parse an ISO-8601 timestamp into epoch milliseconds.

    Returns None if the value can't be parsed. Naive timestamps are
    treated as UTC.
    """
    if not value:
        return None
    text = str(value).strip()
    if text.endswith('Z'):
        text = text[:-1] + '+00:00'
    try:
        dt = datetime.fromisoformat(text)
    except ValueError:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return int(dt.timestamp() * 1000)


def format_local_datetime(ms):
    """Format epoch milliseconds as 'DD.MM.YYYY, HH:MM:SS' in local time"""
    return datetime.fromtimestamp(ms / 1000).strftime('%d.%m.%Y, %H:%M:%S')


def extract_sheet_id(value):
    """Pull the spreadsheet ID out of a pasted Google Sheets URL.

    Plain IDs are returned unchanged (stripped).
    """
    value = (value or '').strip()
    match = SHEET_URL_PATTERN.search(value)
    if match:
        return match.group(1)
    return value
