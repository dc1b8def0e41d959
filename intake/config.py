# Artwin Feedback Config
# Central configuration for the submit and dashboard services

import os
import logging

# Local storage
DATA_DIR = os.environ.get('FEEDBACK_DATA_DIR', os.path.join(os.getcwd(), 'data'))

# Google Sheets
SHEETS_API_BASE = os.environ.get('SHEETS_API_BASE', 'https://sheets.googleapis.com/v4/spreadsheets')
SHEET_READ_RANGE = 'A1:Z1000'

# Telegram
TELEGRAM_API_BASE = os.environ.get('TELEGRAM_API_BASE', 'https://api.telegram.org')

# Anthropic
ANTHROPIC_API_KEY = os.environ.get('ANTHROPIC_API_KEY')
ANTHROPIC_MODEL = os.environ.get('ANTHROPIC_MODEL', 'claude-sonnet-4-20250514')

HTTP_TIMEOUT = float(os.environ.get('HTTP_TIMEOUT', '10.0'))
LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')

# Labels written into comments and sheet rows
AI_AUTHOR = 'Claude AI'
ANONYMOUS_MARKER = 'Anonymous'


def setup_logging():
    """Configure root logging once for a service process"""
    logging.basicConfig(
        level=LOG_LEVEL.upper(),
        format='%(asctime)s %(levelname)s %(name)s: %(message)s'
    )
