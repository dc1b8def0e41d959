# Artwin Feedback Models
# Feedback records, comments, AI analysis and per-department config

import uuid
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import List, Optional

from .errors import ValidationError
from .helpers import now_ms


class _ValueEnum(str, Enum):
    """String enum whose values are the stored/wire strings"""

    @classmethod
    def parse(cls, value, default=None):
        """Look up a member by value or name, falling back to default"""
        if isinstance(value, cls):
            return value
        for member in cls:
            if value == member.value or value == member.name:
                return member
        if default is not None:
            return default
        raise ValidationError(f"Invalid {cls.__name__}: {value!r}")


class Role(_ValueEnum):
    EMPLOYEE = 'Сотрудник'
    CLIENT = 'Клиент'
    CONTRACTOR = 'Подрядчик'


class FeedbackType(_ValueEnum):
    COMPLAINT = 'Жалоба'
    PROPOSAL = 'Предложение'


class Department(_ValueEnum):
    HR = 'HR'
    CONSTRUCTION = 'Стройка'
    FINANCE = 'Финансы'
    SUPPLY = 'Снабжение'
    OTHER = 'Прочее'

    @classmethod
    def from_key(cls, key):
        """Resolve a URL key ('CONSTRUCTION', 'construction' or 'Стройка')"""
        if key and key.upper() in cls.__members__:
            return cls[key.upper()]
        return cls.parse(key)


class Urgency(_ValueEnum):
    NORMAL = 'Обычно'
    URGENT = 'Срочно'


class Status(_ValueEnum):
    NEW = 'Новая'
    IN_PROGRESS = 'В работе'
    RESOLVED = 'Решена'
    REJECTED = 'Отклонена'


class Sentiment(_ValueEnum):
    POSITIVE = 'positive'
    NEUTRAL = 'neutral'
    NEGATIVE = 'negative'


# Department -> collection ("table") name. Also the default sheet tab.
DEPARTMENT_TABLES = MappingProxyType({
    Department.HR: 'Artwin_HR_Feedback',
    Department.CONSTRUCTION: 'Artwin_Construction_Feedback',
    Department.FINANCE: 'Artwin_Finance_Feedback',
    Department.SUPPLY: 'Artwin_Supply_Feedback',
    Department.OTHER: 'Artwin_General_Feedback',
})


@dataclass
class Comment:
    id: str
    author: str
    text: str
    timestamp: int

    def to_dict(self):
        return {
            'id': self.id,
            'author': self.author,
            'text': self.text,
            'timestamp': self.timestamp
        }

    @classmethod
    def from_dict(cls, data):
        return cls(
            id=data.get('id', ''),
            author=data.get('author', ''),
            text=data.get('text', ''),
            timestamp=int(data.get('timestamp') or 0)
        )


@dataclass
class AIAnalysis:
    sentiment: Sentiment
    summary: str
    suggested_action: str
    urgency_score: int

    def to_dict(self):
        return {
            'sentiment': self.sentiment.value,
            'summary': self.summary,
            'suggestedAction': self.suggested_action,
            'urgencyScore': self.urgency_score
        }

    @classmethod
    def from_dict(cls, data):
        """Build from a stored or model-produced dict.

        Unknown sentiments become neutral and the urgency score is
        clamped into 1..10.
        """
        try:
            score = int(data.get('urgencyScore', 5))
        except (TypeError, ValueError):
            score = 5
        return cls(
            sentiment=Sentiment.parse(data.get('sentiment'), Sentiment.NEUTRAL),
            summary=str(data.get('summary') or ''),
            suggested_action=str(data.get('suggestedAction') or ''),
            urgency_score=min(10, max(1, score))
        )


@dataclass
class FeedbackItem:
    id: str
    role: Role
    type: FeedbackType
    department: Department
    message: str
    urgency: Urgency
    status: Status
    created_at: int
    is_anonymous: bool = False
    name: Optional[str] = None
    contact: Optional[str] = None
    attachment_name: Optional[str] = None
    comments: List[Comment] = field(default_factory=list)
    ai_analysis: Optional[AIAnalysis] = None

    def to_dict(self):
        data = {
            'id': self.id,
            'role': self.role.value,
            'type': self.type.value,
            'department': self.department.value,
            'message': self.message,
            'urgency': self.urgency.value,
            'status': self.status.value,
            'createdAt': self.created_at,
            'isAnonymous': self.is_anonymous,
            'comments': [c.to_dict() for c in self.comments]
        }
        # Optional fields are left out when empty, like the stored JSON
        if self.name:
            data['name'] = self.name
        if self.contact:
            data['contact'] = self.contact
        if self.attachment_name:
            data['attachmentName'] = self.attachment_name
        if self.ai_analysis:
            data['aiAnalysis'] = self.ai_analysis.to_dict()
        return data

    @classmethod
    def from_dict(cls, data):
        is_anonymous = bool(data.get('isAnonymous', False))
        analysis = data.get('aiAnalysis')
        return cls(
            id=data['id'],
            role=Role.parse(data.get('role'), Role.EMPLOYEE),
            type=FeedbackType.parse(data.get('type'), FeedbackType.COMPLAINT),
            department=Department.parse(data.get('department'), Department.OTHER),
            message=data.get('message', ''),
            urgency=Urgency.parse(data.get('urgency'), Urgency.NORMAL),
            status=Status.parse(data.get('status'), Status.NEW),
            created_at=int(data.get('createdAt') or 0),
            is_anonymous=is_anonymous,
            name=None if is_anonymous else data.get('name') or None,
            contact=None if is_anonymous else data.get('contact') or None,
            attachment_name=data.get('attachmentName') or None,
            comments=[Comment.from_dict(c) for c in data.get('comments') or []],
            ai_analysis=AIAnalysis.from_dict(analysis) if analysis else None
        )


@dataclass
class SheetConfig:
    sheet_id: str
    tab_name: str
    access_token: Optional[str] = None

    @property
    def sync_enabled(self):
        """Dual-backend mode needs both a sheet ID and an access token"""
        return bool(self.sheet_id and self.access_token)

    def to_dict(self):
        data = {'sheetId': self.sheet_id, 'tabName': self.tab_name}
        if self.access_token:
            data['accessToken'] = self.access_token
        return data

    @classmethod
    def from_dict(cls, data):
        return cls(
            sheet_id=data.get('sheetId', ''),
            tab_name=data.get('tabName', ''),
            access_token=data.get('accessToken') or None
        )


@dataclass
class TelegramConfig:
    bot_token: str
    chat_id: str

    def to_dict(self):
        return {'botToken': self.bot_token, 'chatId': self.chat_id}

    @classmethod
    def from_dict(cls, data):
        return cls(bot_token=data.get('botToken', ''), chat_id=data.get('chatId', ''))


def new_feedback(role, type, department, message, urgency=Urgency.NORMAL,
                 is_anonymous=False, name=None, contact=None, attachment_name=None):
    """Create a fresh feedback item from submitted form data.

    Validates the required fields, then stamps a new ID, creation time
    and New status. Name and contact are dropped for anonymous
    submissions whatever the form collected.
    """
    message = (message or '').strip()
    if not message:
        raise ValidationError('Message is required')

    name = (name or '').strip() or None
    contact = (contact or '').strip() or None
    if is_anonymous:
        name = None
        contact = None
    elif not name:
        raise ValidationError('Name is required unless submitting anonymously')

    return FeedbackItem(
        id=str(uuid.uuid4()),
        role=Role.parse(role),
        type=FeedbackType.parse(type),
        department=Department.parse(department),
        message=message,
        urgency=Urgency.parse(urgency),
        status=Status.NEW,
        created_at=now_ms(),
        is_anonymous=bool(is_anonymous),
        name=name,
        contact=contact,
        attachment_name=(attachment_name or '').strip() or None
    )


def new_comment(author, text):
    text = (text or '').strip()
    if not text:
        raise ValidationError('Comment text is required')
    return Comment(id=str(uuid.uuid4()), author=author, text=text, timestamp=now_ms())
