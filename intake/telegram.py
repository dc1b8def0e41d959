# Artwin Feedback Telegram
# Fire-and-forget alerts to the admins' Telegram chat

import html
import logging

import httpx

from .config import HTTP_TIMEOUT, TELEGRAM_API_BASE
from .errors import ValidationError
from .models import FeedbackType, Urgency

log = logging.getLogger(__name__)

# Telegram rejects messages longer than this
MAX_MESSAGE_LENGTH = 4096


def format_feedback_alert(item):
    """Build the HTML alert for a newly submitted item"""
    icon = '🔴' if item.type == FeedbackType.COMPLAINT else '🟢'
    lines = [
        f"{icon} <b>New {item.type.name.lower()}: {html.escape(item.type.value)}</b>",
        f"Department: {html.escape(item.department.value)}",
        f"From: {html.escape(item.role.value)}",
    ]
    if item.urgency == Urgency.URGENT:
        lines.append(f"⚠️ <b>{html.escape(item.urgency.value)}</b>")

    if item.is_anonymous:
        lines.append('Submitter: Anonymous')
    else:
        submitter = item.name or ''
        if item.contact:
            submitter += f" ({item.contact})"
        lines.append(f"Submitter: {html.escape(submitter)}")

    lines.append('')
    lines.append(html.escape(item.message))

    if item.attachment_name:
        lines.append(f"\n📎 {html.escape(item.attachment_name)}")

    return '\n'.join(lines)


def format_report(report, dept):
    """Wrap a generated management report for sending"""
    header = f"📊 <b>Report: {html.escape(dept.value)}</b>\n\n"
    return header + html.escape(report)


class TelegramNotifier:
    """Sends alerts with whatever Telegram config is currently saved.

    Implements FeedbackListener so the feedback service can notify it on
    every new submission.
    """

    def __init__(self, store, base_url=TELEGRAM_API_BASE, timeout=HTTP_TIMEOUT):
        self.store = store
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout

    def _send(self, config, text):
        """Post one message. Returns False on any failure."""
        url = f"{self.base_url}/bot{config.bot_token}/sendMessage"
        payload = {
            'chat_id': config.chat_id,
            'text': text[:MAX_MESSAGE_LENGTH],
            'parse_mode': 'HTML'
        }

        try:
            response = httpx.post(url, json=payload, timeout=self.timeout)
            response.raise_for_status()
            return True
        except httpx.HTTPError as e:
            # Don't log the URL, it carries the bot token
            log.error(f"Error sending Telegram message to chat {config.chat_id}: {type(e).__name__}")
            return False

    def feedback_created(self, item):
        config = self.store.get_telegram_config()
        if not config:
            return False

        sent = self._send(config, format_feedback_alert(item))
        if sent:
            log.info(f"Sent Telegram alert for {item.id}")
        return sent

    def send_report(self, report, dept):
        """Send a management report. Raises ValidationError if Telegram isn't set up."""
        config = self.store.get_telegram_config()
        if not config:
            raise ValidationError('Please configure Telegram before sending a report')

        return self._send(config, format_report(report, dept))
