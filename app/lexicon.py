"""
Automation Lexicons

Static phrase tables used to classify natural-language rule descriptions.

Each lexicon is an ordered tuple, and matching is first-registered-wins:
the first phrase found as a substring of the lowercased text decides the
code, even if a longer phrase further down would also match.
"""

from collections import namedtuple
from typing import Optional, List, Tuple

LexiconEntry = namedtuple('LexiconEntry', ['phrase', 'normalized_type', 'description'])


TRIGGER_LEXICON: Tuple[LexiconEntry, ...] = (
    LexiconEntry('ticket created', 'TICKET_CREATED', 'When a new ticket is created'),
    LexiconEntry('new ticket', 'TICKET_CREATED', 'When a new ticket is created'),
    LexiconEntry('ticket is created', 'TICKET_CREATED', 'When a new ticket is created'),
    LexiconEntry('ticket updated', 'TICKET_UPDATED', 'When a ticket is updated'),
    LexiconEntry('ticket changes', 'TICKET_UPDATED', 'When a ticket is updated'),
    LexiconEntry('status changes', 'TICKET_STATUS_CHANGED', 'When ticket status changes'),
    LexiconEntry('status changed', 'TICKET_STATUS_CHANGED', 'When ticket status changes'),
    LexiconEntry('assigned', 'TICKET_ASSIGNED', 'When ticket is assigned'),
    LexiconEntry('ticket assigned', 'TICKET_ASSIGNED', 'When ticket is assigned'),
    LexiconEntry('priority changes', 'TICKET_PRIORITY_CHANGED', 'When priority changes'),
    LexiconEntry('priority changed', 'TICKET_PRIORITY_CHANGED', 'When priority changes'),
    LexiconEntry('sla warning', 'SLA_BREACH_WARNING', 'Before SLA breach'),
    LexiconEntry('sla about to breach', 'SLA_BREACH_WARNING', 'Before SLA breach'),
    LexiconEntry('sla breach', 'SLA_BREACHED', 'When SLA is breached'),
    LexiconEntry('sla breached', 'SLA_BREACHED', 'When SLA is breached'),
    LexiconEntry('every day', 'SCHEDULED', 'Daily scheduled trigger'),
    LexiconEntry('every hour', 'SCHEDULED', 'Hourly scheduled trigger'),
    LexiconEntry('scheduled', 'SCHEDULED', 'Time-based trigger'),
    # Catches "a ticket about X is created"; kept last so it never shadows the
    # phrases above or changes the suggestion list
    LexiconEntry('is created', 'TICKET_CREATED', 'When a new ticket is created'),
)

ACTION_LEXICON: Tuple[LexiconEntry, ...] = (
    LexiconEntry('assign to', 'ASSIGN_TICKET', 'Assign to agent/team'),
    LexiconEntry('auto-assign', 'ASSIGN_TICKET', 'Assign to agent/team'),
    LexiconEntry('assign', 'ASSIGN_TICKET', 'Assign to agent/team'),
    LexiconEntry('change priority', 'CHANGE_PRIORITY', 'Change ticket priority'),
    LexiconEntry('set priority', 'CHANGE_PRIORITY', 'Change ticket priority'),
    LexiconEntry('escalate priority', 'CHANGE_PRIORITY', 'Change ticket priority'),
    LexiconEntry('change status', 'CHANGE_STATUS', 'Change ticket status'),
    LexiconEntry('set status', 'CHANGE_STATUS', 'Change ticket status'),
    LexiconEntry('add note', 'ADD_NOTE', 'Add a note to ticket'),
    LexiconEntry('add comment', 'ADD_NOTE', 'Add a note to ticket'),
    LexiconEntry('notify', 'SEND_NOTIFICATION', 'Send email/notification'),
    LexiconEntry('send notification', 'SEND_NOTIFICATION', 'Send email/notification'),
    LexiconEntry('email', 'SEND_NOTIFICATION', 'Send email/notification'),
    LexiconEntry('alert', 'SEND_NOTIFICATION', 'Send email/notification'),
    LexiconEntry('add tag', 'ADD_TAG', 'Add tag/category'),
    LexiconEntry('tag', 'ADD_TAG', 'Add tag/category'),
    LexiconEntry('categorize', 'ADD_TAG', 'Add tag/category'),
    LexiconEntry('escalate', 'ESCALATE', 'Escalate the ticket'),
    LexiconEntry('create task', 'CREATE_TASK', 'Create a task'),
    LexiconEntry('webhook', 'WEBHOOK', 'Call external webhook'),
)

PRIORITY_LEXICON: Tuple[LexiconEntry, ...] = (
    LexiconEntry('p1', 'P1', 'Priority 1'),
    LexiconEntry('p2', 'P2', 'Priority 2'),
    LexiconEntry('p3', 'P3', 'Priority 3'),
    LexiconEntry('p4', 'P4', 'Priority 4'),
    LexiconEntry('critical', 'P1', 'Critical'),
    LexiconEntry('high', 'P2', 'High'),
    LexiconEntry('medium', 'P3', 'Medium'),
    LexiconEntry('low', 'P4', 'Low'),
    LexiconEntry('urgent', 'P1', 'Urgent'),
    LexiconEntry('emergency', 'P1', 'Emergency'),
)

TRIGGER_TYPES = tuple(dict.fromkeys(entry.normalized_type for entry in TRIGGER_LEXICON))
ACTION_TYPES = tuple(dict.fromkeys(entry.normalized_type for entry in ACTION_LEXICON))
PRIORITY_CODES = tuple(dict.fromkeys(entry.normalized_type for entry in PRIORITY_LEXICON))


def first_match(lexicon: Tuple[LexiconEntry, ...], lowered_text: str) -> Optional[LexiconEntry]:
    """Return the first entry whose phrase occurs in ``lowered_text``."""
    for entry in lexicon:
        if entry.phrase in lowered_text:
            return entry
    return None


def suggestions(lexicon: Tuple[LexiconEntry, ...], count: int = 5) -> List[str]:
    """Sample phrases offered back to the user when nothing matched."""
    return [entry.phrase for entry in lexicon[:count]]
