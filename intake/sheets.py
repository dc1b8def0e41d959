# Artwin Feedback Sheets
# Google Sheets append/read for departments in dual-backend mode

import logging

import httpx

from .config import ANONYMOUS_MARKER, HTTP_TIMEOUT, SHEET_READ_RANGE, SHEETS_API_BASE
from .errors import RemoteReadFailure, RemoteWriteError
from .helpers import iso_from_ms, ms_from_iso, now_ms
from .models import (
    AIAnalysis,
    Department,
    FeedbackItem,
    FeedbackType,
    Role,
    Sentiment,
    Status,
    Urgency
)

log = logging.getLogger(__name__)

# Column order of a sheet row. item_to_row and row_to_item must agree on it.
COLUMNS = [
    'ID', 'Date', 'Role', 'Type', 'Department', 'Message',
    'Urgency', 'Status', 'Name', 'Contact', 'Sentiment'
]


# ===================
# ROW MAPPING
# ===================

def item_to_row(item):
    """Serialize a feedback item into the 11-column sheet row"""
    return [
        item.id,
        iso_from_ms(item.created_at),
        item.role.value,
        item.type.value,
        item.department.value,
        item.message,
        item.urgency.value,
        item.status.value,
        ANONYMOUS_MARKER if item.is_anonymous else (item.name or ''),
        item.contact or '',
        item.ai_analysis.sentiment.value if item.ai_analysis else ''
    ]


def row_to_item(row, dept):
    """Map a sheet row back to a feedback item.

    Missing or unknown cells fall back to defaults. Comments aren't
    stored in the sheet, so they always come back empty, and only the
    sentiment of any AI analysis survives.
    """
    cells = [str(cell) if cell is not None else '' for cell in row]
    cells += [''] * (len(COLUMNS) - len(cells))

    name = cells[8]
    is_anonymous = name == ANONYMOUS_MARKER
    analysis = None
    if cells[10]:
        analysis = AIAnalysis(
            sentiment=Sentiment.parse(cells[10], Sentiment.NEUTRAL),
            summary='',
            suggested_action='',
            urgency_score=5
        )

    return FeedbackItem(
        id=cells[0],
        created_at=ms_from_iso(cells[1]) or now_ms(),
        role=Role.parse(cells[2], Role.EMPLOYEE),
        type=FeedbackType.parse(cells[3], FeedbackType.COMPLAINT),
        department=Department.parse(cells[4], dept),
        message=cells[5],
        urgency=Urgency.parse(cells[6], Urgency.NORMAL),
        status=Status.parse(cells[7], Status.NEW),
        is_anonymous=is_anonymous,
        name=None if is_anonymous else (name or None),
        contact=cells[9] or None,
        comments=[],
        ai_analysis=analysis
    )


def is_header_row(row):
    return bool(row) and row[0] in ('ID', 'id')


# ===================
# SHEETS CLIENT
# ===================

class SheetsClient:
    """Thin wrapper over the Sheets values API.

    Each call takes the department's SheetConfig, since every department
    can point at its own spreadsheet and token.
    """

    def __init__(self, base_url=SHEETS_API_BASE, timeout=HTTP_TIMEOUT):
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout

    def _get_headers(self, config):
        return {
            'Authorization': f'Bearer {config.access_token}',
            'Content-Type': 'application/json'
        }

    def _values_url(self, config, cell_range):
        return f"{self.base_url}/{config.sheet_id}/values/{config.tab_name}!{cell_range}"

    def append_row(self, config, item):
        """Append one item as a row at the end of the configured tab.

        Raises RemoteWriteError on a transport error or non-2xx status.
        """
        url = self._values_url(config, 'A1:append')
        body = {
            'range': f'{config.tab_name}!A1',
            'majorDimension': 'ROWS',
            'values': [item_to_row(item)]
        }

        try:
            response = httpx.post(
                url,
                headers=self._get_headers(config),
                params={'valueInputOption': 'USER_ENTERED'},
                json=body,
                timeout=self.timeout
            )
        except (httpx.HTTPError, httpx.InvalidURL, ValueError) as e:
            raise RemoteWriteError(f"Google Sheets request failed: {e}") from e

        if not response.is_success:
            raise RemoteWriteError(
                f"Google Sheets API Error: {response.status_code} {response.text}"
            )

        log.info(f"Appended {item.id} to sheet {config.sheet_id}/{config.tab_name}")

    def _get_rows(self, config):
        url = self._values_url(config, SHEET_READ_RANGE)
        try:
            response = httpx.get(url, headers=self._get_headers(config), timeout=self.timeout)
            response.raise_for_status()
            return response.json().get('values') or []
        except (httpx.HTTPError, httpx.InvalidURL, ValueError, AttributeError) as e:
            raise RemoteReadFailure(f"Google Sheets read failed: {e}") from e

    def fetch_all(self, config, dept):
        """Read every item from the department's sheet.

        Returns an empty list when sync isn't configured or the read
        fails; callers treat both as "no remote data".
        """
        if not config or not config.sync_enabled:
            return []

        try:
            rows = self._get_rows(config)
        except RemoteReadFailure as e:
            log.warning(f"Error reading sheet for {dept.value}: {e}")
            return []

        if rows and is_header_row(rows[0]):
            rows = rows[1:]

        items = []
        for row in rows:
            if not isinstance(row, list) or not row or not row[0]:
                continue
            items.append(row_to_item(row, dept))

        log.info(f"Fetched {len(items)} rows from sheet for {dept.value}")
        return items
