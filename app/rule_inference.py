"""
Rule Inference

Turns a short natural-language sentence into the pieces of an automation
rule: a trigger, an action and a list of conditions.

All functions here are pure. They read only their input text and the static
lexicons in ``app.lexicon``, so repeated calls on the same text always give
the same result and the functions are safe to call from any thread.

Example:
    >>> parsed = parse_rule("When a P1 ticket is created, notify the on-call team")
    >>> parsed.trigger.type, parsed.action.type
    ('TICKET_CREATED', 'SEND_NOTIFICATION')
"""

import re
from dataclasses import dataclass, field
from typing import Dict, List, Any, Optional

from .lexicon import (
    TRIGGER_LEXICON,
    ACTION_LEXICON,
    PRIORITY_LEXICON,
    first_match,
)


# Trigger-side keyword probe (first match only)
TRIGGER_KEYWORD_PATTERN = re.compile(
    r"(?:about|regarding|contains?|mentions?|includes?)\s+[\"']?([^\"']+)[\"']?",
    re.IGNORECASE
)
KEYWORD_SPLIT_PATTERN = re.compile(r"[,\s]+")

# Action-side probes
ASSIGN_PATTERN = re.compile(r"assign(?:\s+to)?\s+[\"']?([^\"',]+)[\"']?", re.IGNORECASE)
NOTIFY_PATTERN = re.compile(r"notify\s+(?:the\s+)?[\"']?([^\"',]+)[\"']?", re.IGNORECASE)
NOTE_PATTERN = re.compile(r"add\s+(?:a\s+)?note[:\s]+[\"']?([^\"']+)[\"']?", re.IGNORECASE)

# Condition probes (all occurrences)
CONDITION_KEYWORD_PATTERNS = (
    re.compile(r"(?:about|regarding|contains?|mentions?|subject)\s+[\"']?([^\"']+)[\"']?", re.IGNORECASE),
    re.compile(r"[\"']([^\"']+)[\"']\s+(?:in\s+)?(?:subject|title|summary)", re.IGNORECASE),
)
CLIENT_PATTERN = re.compile(r"(?:from|for|client)\s+[\"']?([^\"',]+)[\"']?", re.IGNORECASE)


@dataclass
class TriggerConfig:
    priority: Optional[str] = None
    keywords: Optional[List[str]] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {}
        if self.priority is not None:
            data['priority'] = self.priority
        if self.keywords is not None:
            data['keywords'] = list(self.keywords)
        return data


@dataclass
class ActionConfig:
    assign_to: Optional[str] = None
    notify_target: Optional[str] = None
    target_priority: Optional[str] = None
    note_content: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Only populated fields, keyed the way API consumers expect them."""
        data = {}
        if self.assign_to is not None:
            data['assignTo'] = self.assign_to
        if self.notify_target is not None:
            data['notifyTarget'] = self.notify_target
        if self.target_priority is not None:
            data['targetPriority'] = self.target_priority
        if self.note_content is not None:
            data['noteContent'] = self.note_content
        return data


@dataclass
class ExtractedTrigger:
    type: str
    config: TriggerConfig = field(default_factory=TriggerConfig)

    def to_dict(self) -> Dict[str, Any]:
        return {'type': self.type, 'config': self.config.to_dict()}


@dataclass
class ExtractedAction:
    type: str
    config: ActionConfig = field(default_factory=ActionConfig)

    def to_dict(self) -> Dict[str, Any]:
        return {'type': self.type, 'config': self.config.to_dict()}


@dataclass
class ExtractedCondition:
    field: str  # 'priority', 'keywords' or 'client'
    operator: str  # 'equals' or 'contains'
    value: str

    def to_dict(self) -> Dict[str, str]:
        return {'field': self.field, 'operator': self.operator, 'value': self.value}


@dataclass
class ParsedRule:
    """Result of running every extractor over one description."""
    trigger: Optional[ExtractedTrigger]
    action: Optional[ExtractedAction]
    conditions: List[ExtractedCondition] = field(default_factory=list)

    @property
    def complete(self) -> bool:
        return self.trigger is not None and self.action is not None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'trigger': self.trigger.to_dict() if self.trigger else None,
            'action': self.action.to_dict() if self.action else None,
            'conditions': [condition.to_dict() for condition in self.conditions],
            'complete': self.complete
        }


def extract_trigger(text: str) -> Optional[ExtractedTrigger]:
    """
    Find the trigger event in a rule description.

    Args:
        text: Natural-language rule description

    Returns:
        ExtractedTrigger, or None when no trigger phrase is present. The config
        may carry the mentioned priority (last priority phrase wins) and a list
        of keywords taken from an "about ..." style clause.
    """
    text = text or ''
    lower_text = text.lower()

    entry = first_match(TRIGGER_LEXICON, lower_text)
    if entry is None:
        return None

    config = TriggerConfig()

    for priority in PRIORITY_LEXICON:
        if priority.phrase in lower_text:
            config.priority = priority.normalized_type

    keyword_match = TRIGGER_KEYWORD_PATTERN.search(text)
    if keyword_match:
        config.keywords = [word for word in KEYWORD_SPLIT_PATTERN.split(keyword_match.group(1)) if word]

    return ExtractedTrigger(type=entry.normalized_type, config=config)


def extract_action(text: str) -> Optional[ExtractedAction]:
    """
    Find the action to perform in a rule description.

    The four config probes are independent; any combination of them may
    populate the config alongside the matched action type.
    """
    text = text or ''
    lower_text = text.lower()

    entry = first_match(ACTION_LEXICON, lower_text)
    if entry is None:
        return None

    config = ActionConfig()

    assign_match = ASSIGN_PATTERN.search(text)
    if assign_match:
        config.assign_to = assign_match.group(1).strip()

    notify_match = NOTIFY_PATTERN.search(text)
    if notify_match:
        config.notify_target = notify_match.group(1).strip()

    # Plain substring test, unlike the word-anchored condition probes
    for priority in PRIORITY_LEXICON:
        if f'to {priority.phrase}' in lower_text or f'as {priority.phrase}' in lower_text:
            config.target_priority = priority.normalized_type

    note_match = NOTE_PATTERN.search(text)
    if note_match:
        config.note_content = note_match.group(1).strip()

    return ExtractedAction(type=entry.normalized_type, config=config)


def extract_conditions(text: str) -> List[ExtractedCondition]:
    """
    Collect the narrowing conditions mentioned in a rule description.

    Runs regardless of whether a trigger or action could be found and never
    fails. Duplicates are kept: "is critical, priority p1" yields two
    priority conditions.
    """
    text = text or ''
    lower_text = text.lower()
    conditions = []

    for priority in PRIORITY_LEXICON:
        phrase = priority.phrase
        if (f'is {phrase}' in lower_text
                or f'priority {phrase}' in lower_text
                or re.search(rf'\b{re.escape(phrase)} ticket', lower_text)):
            conditions.append(ExtractedCondition('priority', 'equals', priority.normalized_type))

    for pattern in CONDITION_KEYWORD_PATTERNS:
        for match in pattern.finditer(text):
            conditions.append(ExtractedCondition('keywords', 'contains', match.group(1).strip()))

    client_match = CLIENT_PATTERN.search(text)
    if client_match:
        conditions.append(ExtractedCondition('client', 'equals', client_match.group(1).strip()))

    return conditions


def parse_rule(description: str) -> ParsedRule:
    """Run all three extractors over the same description."""
    return ParsedRule(
        trigger=extract_trigger(description),
        action=extract_action(description),
        conditions=extract_conditions(description)
    )
