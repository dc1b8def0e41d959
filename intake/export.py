# Artwin Feedback Export
# CSV backup of every department's feedback

import csv
import io

from .helpers import format_local_datetime

CSV_HEADERS = [
    'ID', 'Date', 'Role', 'Type', 'Department', 'Message',
    'Urgency', 'Status', 'Name', 'Contact', 'Sentiment'
]

# Excel needs the BOM to open UTF-8 CSVs correctly
BOM = '\ufeff'
ANONYMOUS_LABEL = 'Анонимно'


def export_csv(items):
    """Render items as a CSV backup, newest first.

    Free-text fields are quoted by the csv module whenever they contain
    quotes, commas or line breaks, with inner quotes doubled.
    """
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator='\n')
    writer.writerow(CSV_HEADERS)

    for item in sorted(items, key=lambda i: i.created_at, reverse=True):
        writer.writerow([
            item.id,
            format_local_datetime(item.created_at),
            item.role.value,
            item.type.value,
            item.department.value,
            item.message,
            item.urgency.value,
            item.status.value,
            ANONYMOUS_LABEL if item.is_anonymous else (item.name or ''),
            item.contact or '',
            item.ai_analysis.sentiment.value if item.ai_analysis else ''
        ])

    return BOM + buffer.getvalue()


def backup_filename(today):
    return f"artwin_backup_{today.isoformat()}.csv"
