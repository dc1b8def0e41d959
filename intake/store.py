# Artwin Feedback Store
# Per-department feedback collections and config records on local disk

import fcntl
import json
import logging
import os
import tempfile
import threading
from contextlib import contextmanager

from .errors import ValidationError
from .helpers import extract_sheet_id
from .models import (
    DEPARTMENT_TABLES,
    Department,
    FeedbackItem,
    SheetConfig,
    TelegramConfig
)

log = logging.getLogger(__name__)

SHEET_CONFIG_KEY = 'artwin_sheet_config_{}'
TELEGRAM_CONFIG_KEY = 'artwin_telegram_config'


class JsonFileStore:
    """Key-value store keeping one JSON document per key in a directory.

    Every set() is a full overwrite through a temp file and os.replace,
    so readers never see a half-written document.
    """

    def __init__(self, directory):
        self.directory = directory
        os.makedirs(directory, exist_ok=True)

    def _path(self, key):
        return os.path.join(self.directory, f'{key}.json')

    def exists(self, key):
        return os.path.exists(self._path(key))

    def get(self, key, default=None):
        try:
            with open(self._path(key), 'r', encoding='utf-8') as f:
                return json.load(f)
        except FileNotFoundError:
            return default
        except json.JSONDecodeError as e:
            log.error(f"Corrupt document for key '{key}': {e}")
            return default

    def set(self, key, value):
        fd, tmp_path = tempfile.mkstemp(dir=self.directory, suffix='.tmp')
        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                json.dump(value, f, ensure_ascii=False)
            os.replace(tmp_path, self._path(key))
        except BaseException:
            os.unlink(tmp_path)
            raise

    def remove(self, key):
        try:
            os.remove(self._path(key))
        except FileNotFoundError:
            pass

    @contextmanager
    def lock(self, key):
        """Hold an exclusive lock on key across processes.

        The lock lives on a sidecar <key>.lock file, so it survives the
        os.replace that swaps the document itself.
        """
        with open(os.path.join(self.directory, f'{key}.lock'), 'w') as lock_f:
            fcntl.flock(lock_f, fcntl.LOCK_EX)
            try:
                yield
            finally:
                fcntl.flock(lock_f, fcntl.LOCK_UN)


class FeedbackStore:
    """Feedback collections, one per department, plus saved configs.

    Each mutation loads the department's whole collection, changes it in
    memory and flushes it back in one write. The submit and dashboard
    services share one data directory, so each department is locked within
    the process and on disk for the whole load-to-flush cycle.
    """

    def __init__(self, kv):
        self.kv = kv
        self._locks = {dept: threading.Lock() for dept in Department}
        self.initialize()

    @contextmanager
    def _locked(self, dept):
        with self._locks[dept], self.kv.lock(DEPARTMENT_TABLES[dept]):
            yield

    def initialize(self):
        """Create any missing department collection as an empty list"""
        for dept, table in DEPARTMENT_TABLES.items():
            if not self.kv.exists(table):
                log.info(f"Creating table: {table}")
                self.kv.set(table, [])

    # ===================
    # READ OPERATIONS
    # ===================

    def _load(self, dept):
        rows = self.kv.get(DEPARTMENT_TABLES[dept], []) or []
        items = []
        for row in rows:
            if not isinstance(row, dict) or not row.get('id'):
                log.warning(f"Skipping stored row without id in {DEPARTMENT_TABLES[dept]}")
                continue
            items.append(FeedbackItem.from_dict(row))
        return items

    def _flush(self, dept, items):
        self.kv.set(DEPARTMENT_TABLES[dept], [item.to_dict() for item in items])

    def get_by_department(self, dept):
        """All items in a department collection, in stored order"""
        return self._load(dept)

    def get_item(self, dept, item_id):
        for item in self._load(dept):
            if item.id == item_id:
                return item
        return None

    def all_items(self):
        """Every department's items combined, newest first"""
        items = []
        for dept in Department:
            items.extend(self._load(dept))
        return sorted(items, key=lambda i: i.created_at, reverse=True)

    # ===================
    # WRITE OPERATIONS
    # ===================

    def append(self, dept, item):
        """Insert a new item at the head of its collection"""
        with self._locked(dept):
            items = self._load(dept)
            self._flush(dept, [item] + items)

    def replace_all(self, dept, items):
        with self._locked(dept):
            self._flush(dept, list(items))

    def _modify(self, dept, item_id, change):
        """Apply change() to the matching item and flush.

        Returns False without writing if the ID isn't in the collection.
        """
        with self._locked(dept):
            items = self._load(dept)
            for item in items:
                if item.id == item_id:
                    change(item)
                    self._flush(dept, items)
                    return True
        log.info(f"Item {item_id} not found in {DEPARTMENT_TABLES[dept]}")
        return False

    def update_status(self, dept, item_id, status):
        def change(item):
            item.status = status
        return self._modify(dept, item_id, change)

    def append_comment(self, dept, item_id, comment):
        def change(item):
            item.comments.append(comment)
        return self._modify(dept, item_id, change)

    def set_analysis(self, dept, item_id, analysis):
        def change(item):
            item.ai_analysis = analysis
        return self._modify(dept, item_id, change)

    # ===================
    # CONFIG RECORDS
    # ===================

    def get_sheet_config(self, dept):
        data = self.kv.get(SHEET_CONFIG_KEY.format(dept.value))
        return SheetConfig.from_dict(data) if data else None

    def save_sheet_config(self, dept, sheet_id, tab_name=None, access_token=None):
        """Validate and save a department's sheet connection.

        Accepts a full sheet URL as well as a bare ID. The tab defaults
        to the department's table name.
        """
        sheet_id = extract_sheet_id(sheet_id)
        if not sheet_id:
            raise ValidationError('Sheet ID is required')

        config = SheetConfig(
            sheet_id=sheet_id,
            tab_name=(tab_name or '').strip() or DEPARTMENT_TABLES[dept],
            access_token=(access_token or '').strip() or None
        )
        self.kv.set(SHEET_CONFIG_KEY.format(dept.value), config.to_dict())
        return config

    def remove_sheet_config(self, dept):
        self.kv.remove(SHEET_CONFIG_KEY.format(dept.value))

    def get_telegram_config(self):
        data = self.kv.get(TELEGRAM_CONFIG_KEY)
        return TelegramConfig.from_dict(data) if data else None

    def save_telegram_config(self, bot_token, chat_id):
        bot_token = (bot_token or '').strip()
        chat_id = str(chat_id or '').strip()
        if not bot_token or not chat_id:
            raise ValidationError('Bot token and chat ID are required')

        config = TelegramConfig(bot_token=bot_token, chat_id=chat_id)
        self.kv.set(TELEGRAM_CONFIG_KEY, config.to_dict())
        return config
