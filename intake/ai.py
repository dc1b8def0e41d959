# Artwin Feedback AI
# Claude-backed categorization, analysis, reply drafts and reports

import logging
import os
from typing import Protocol

import httpx
from anthropic import Anthropic, AnthropicError

from .config import ANTHROPIC_API_KEY, ANTHROPIC_MODEL
from .errors import AIUnavailable
from .helpers import strip_markdown_json
from .models import AIAnalysis, Department, FeedbackType, Sentiment, Urgency

log = logging.getLogger(__name__)

# Fixed results used whenever the AI can't answer
FALLBACK_DEPARTMENT = Department.OTHER
FALLBACK_ANALYSIS = {
    'sentiment': 'neutral',
    'summary': 'AI Analysis unavailable',
    'suggestedAction': 'Review manually',
    'urgencyScore': 5
}
FALLBACK_DRAFT = 'Service unavailable.'
EMPTY_DRAFT = 'Could not generate draft.'
FALLBACK_REPORT = 'Report generation failed.'
EMPTY_REPORT = 'Analysis complete.'
NO_DATA_REPORT = 'No data available to generate a report.'


def _load_prompt(name):
    path = os.path.join(os.path.dirname(__file__), 'prompts', name)
    with open(path, 'r', encoding='utf-8') as f:
        return f.read()


CLASSIFY_PROMPT = _load_prompt('classify.txt')
ANALYZE_PROMPT = _load_prompt('analyze.txt')
DRAFT_PROMPT = _load_prompt('draft.txt')
REPORT_PROMPT = _load_prompt('report.txt')

ANALYSIS_TOOL = {
    'name': 'record_analysis',
    'description': 'Record the analysis of a feedback message',
    'input_schema': {
        'type': 'object',
        'properties': {
            'sentiment': {'type': 'string', 'enum': [s.value for s in Sentiment]},
            'summary': {'type': 'string'},
            'suggestedAction': {'type': 'string'},
            'urgencyScore': {
                'type': 'integer',
                'minimum': 1,
                'maximum': 10,
                'description': 'Rate urgency from 1 to 10 based on content'
            }
        },
        'required': ['sentiment', 'summary', 'suggestedAction', 'urgencyScore']
    }
}


class Classifier(Protocol):
    def suggest_department(self, text): ...


class Analyzer(Protocol):
    def analyze(self, text, declared_urgency): ...


class Drafter(Protocol):
    def draft_reply(self, item): ...


class Summarizer(Protocol):
    def summarize_report(self, items, department): ...


class FallbackAssistant:
    """Answers every request with the fixed fallback values.

    Used when no API key is configured, and in tests.
    """

    def suggest_department(self, text):
        return FALLBACK_DEPARTMENT

    def analyze(self, text, declared_urgency):
        return AIAnalysis.from_dict(FALLBACK_ANALYSIS)

    def draft_reply(self, item):
        return FALLBACK_DRAFT

    def summarize_report(self, items, department):
        if not items:
            return NO_DATA_REPORT
        return FALLBACK_REPORT


class ClaudeAssistant:
    """All four assistant operations against the Anthropic API.

    Every public method swallows failures and returns its fallback
    value; these results are advisory and must never block the admin.
    """

    def __init__(self, api_key=ANTHROPIC_API_KEY, model=ANTHROPIC_MODEL, client=None):
        self.model = model
        self.client = client
        if self.client is None and api_key:
            self.client = Anthropic(
                api_key=api_key,
                http_client=httpx.Client(timeout=60.0, follow_redirects=True)
            )

    def _create(self, **kwargs):
        if self.client is None:
            raise AIUnavailable('No Anthropic API key configured')
        try:
            response = self.client.messages.create(model=self.model, **kwargs)
        except AnthropicError as e:
            raise AIUnavailable(f"Anthropic API error: {e}") from e
        except Exception as e:
            raise AIUnavailable(f"Error calling Claude: {e}") from e
        if not response.content:
            raise AIUnavailable('Claude returned no content')
        return response

    def _text(self, **kwargs):
        response = self._create(**kwargs)
        return getattr(response.content[0], 'text', '') or ''

    def suggest_department(self, text):
        try:
            answer = self._text(
                max_tokens=20,
                temperature=0,
                system=CLASSIFY_PROMPT,
                messages=[{'role': 'user', 'content': f'Message: "{text}"'}]
            )
        except AIUnavailable as e:
            log.warning(f"Department suggestion failed: {e}")
            return FALLBACK_DEPARTMENT

        return Department.parse(strip_markdown_json(answer).strip('."\''), FALLBACK_DEPARTMENT)

    def analyze(self, text, declared_urgency):
        urgency = declared_urgency.value if isinstance(declared_urgency, Urgency) else declared_urgency
        content = f"""User declared urgency: {urgency}

Message: "{text}\""""

        try:
            response = self._create(
                max_tokens=1000,
                temperature=0.2,
                system=ANALYZE_PROMPT,
                tools=[ANALYSIS_TOOL],
                tool_choice={'type': 'tool', 'name': ANALYSIS_TOOL['name']},
                messages=[{'role': 'user', 'content': content}]
            )
            for block in response.content:
                if getattr(block, 'type', None) == 'tool_use' and isinstance(block.input, dict):
                    return AIAnalysis.from_dict(block.input)
            raise AIUnavailable('Claude did not return an analysis')
        except AIUnavailable as e:
            log.warning(f"Claude analysis failed: {e}")
            return AIAnalysis.from_dict(FALLBACK_ANALYSIS)

    def draft_reply(self, item):
        content = f"""Draft a response to this {item.type.value} from a {item.role.value}.
The current status is {item.status.value}.

The user wrote:
{item.message}"""

        try:
            answer = self._text(
                max_tokens=500,
                temperature=0.5,
                system=DRAFT_PROMPT,
                messages=[{'role': 'user', 'content': content}]
            )
        except AIUnavailable as e:
            log.warning(f"Draft reply failed: {e}")
            return FALLBACK_DRAFT

        return answer.strip() or EMPTY_DRAFT

    def summarize_report(self, items, department):
        if not items:
            return NO_DATA_REPORT

        complaints = sum(1 for i in items if i.type == FeedbackType.COMPLAINT)
        proposals = sum(1 for i in items if i.type == FeedbackType.PROPOSAL)
        urgent = sum(1 for i in items if i.urgency == Urgency.URGENT)
        recent = "\n".join(f"- [{i.type.value}] {i.message}" for i in items[:5])

        content = f"""Department: {department.value}

Current data:
- Total feedback items: {len(items)}
- Complaints: {complaints}
- Proposals: {proposals}
- Urgent items: {urgent}

Recent feedback samples:
{recent}"""

        try:
            answer = self._text(
                max_tokens=1500,
                temperature=0.3,
                system=REPORT_PROMPT,
                messages=[{'role': 'user', 'content': content}]
            )
        except AIUnavailable as e:
            log.warning(f"Report generation failed: {e}")
            return FALLBACK_REPORT

        return answer.strip() or EMPTY_REPORT


def build_assistant(api_key=ANTHROPIC_API_KEY, model=ANTHROPIC_MODEL):
    """Claude when a key is configured, otherwise the fallback assistant"""
    if api_key:
        return ClaudeAssistant(api_key=api_key, model=model)
    log.info("No Anthropic API key configured, AI features use fallback values")
    return FallbackAssistant()
