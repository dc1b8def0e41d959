# Artwin Feedback Intake
# Common functions used by the submit and dashboard services

from .config import (
    ANTHROPIC_API_KEY,
    ANTHROPIC_MODEL,
    DATA_DIR,
    setup_logging
)

from .errors import (
    FeedbackError,
    ValidationError,
    RemoteWriteError,
    RemoteReadFailure,
    AIUnavailable
)

from .models import (
    DEPARTMENT_TABLES,
    Role,
    FeedbackType,
    Department,
    Urgency,
    Status,
    Sentiment,
    Comment,
    AIAnalysis,
    FeedbackItem,
    SheetConfig,
    TelegramConfig,
    new_feedback,
    new_comment
)

from .store import JsonFileStore, FeedbackStore
from .sheets import SheetsClient, item_to_row, row_to_item
from .sync import FeedbackService, FeedbackListener
from .telegram import TelegramNotifier
from .ai import ClaudeAssistant, FallbackAssistant, build_assistant
from .export import export_csv, backup_filename


def build_service(data_dir=DATA_DIR):
    """Wire up the store, sheet client and Telegram notifier.

    Returns (service, notifier) so callers can also send reports.
    """
    store = FeedbackStore(JsonFileStore(data_dir))
    notifier = TelegramNotifier(store)
    service = FeedbackService(store, SheetsClient(), listeners=[notifier])
    return service, notifier
