# Artwin Feedback Sync
# Keeps local collections and department sheets approximately in step

import logging
from typing import Protocol

from .config import AI_AUTHOR
from .errors import RemoteWriteError
from .models import new_comment

log = logging.getLogger(__name__)


class FeedbackListener(Protocol):
    def feedback_created(self, item): ...


class FeedbackService:
    """Department feedback with optional sheet sync.

    Local storage is always written first and is never blocked by the
    network. The sheet wins wholesale on load when it returns data.
    Status changes and comments stay local: sheet rows have no stable
    address to patch, so they only change through the sheet itself.
    """

    def __init__(self, store, sheets, listeners=()):
        self.store = store
        self.sheets = sheets
        self.listeners = list(listeners)

    def _sync_config(self, dept):
        config = self.store.get_sheet_config(dept)
        if config and config.sync_enabled:
            return config
        return None

    def load(self, dept):
        """Return the department's items, refreshing from the sheet if connected"""
        config = self._sync_config(dept)
        if config:
            try:
                remote_items = self.sheets.fetch_all(config, dept)
            except Exception as e:
                log.error(f"Failed to fetch from sheet for {dept.value}, falling back to local: {e}")
                remote_items = []

            if remote_items:
                self.store.replace_all(dept, remote_items)
                return remote_items

        return self.store.get_by_department(dept)

    def submit(self, item):
        """Save a new item locally, then push it to the sheet and listeners"""
        dept = item.department
        self.store.append(dept, item)

        config = self._sync_config(dept)
        if config:
            try:
                self.sheets.append_row(config, item)
                log.info(f"Synced {item.id} to Google Sheet for {dept.value}")
            except RemoteWriteError as e:
                log.error(f"Failed to sync to sheet: {e}")
            except Exception as e:
                log.exception(f"Unexpected error syncing {item.id} to sheet: {e}")

        for listener in self.listeners:
            try:
                listener.feedback_created(item)
            except Exception as e:
                log.error(f"Listener {type(listener).__name__} failed for {item.id}: {e}")

        return item

    def set_status(self, dept, item_id, status):
        return self.store.update_status(dept, item_id, status)

    def add_comment(self, dept, item_id, author, text):
        """Append a comment; returns it, or None if the item doesn't exist"""
        comment = new_comment(author, text)
        if not self.store.append_comment(dept, item_id, comment):
            return None
        return comment

    def record_analysis(self, dept, item_id, analysis):
        """Store an AI analysis and log it as a system comment"""
        if not self.store.set_analysis(dept, item_id, analysis):
            return None
        text = (
            "[ANALYSIS COMPLETE]\n"
            f"Sentiment: {analysis.sentiment.value}\n"
            f"Action: {analysis.suggested_action}"
        )
        comment = new_comment(AI_AUTHOR, text)
        self.store.append_comment(dept, item_id, comment)
        return comment

    def all_items(self):
        return self.store.all_items()
