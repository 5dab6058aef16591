"""
Tests for natural-language rule inference.

Covers the trigger, action and condition extractors on their own and the
documented example sentences end to end.
"""

from app.lexicon import TRIGGER_LEXICON, ACTION_LEXICON, PRIORITY_LEXICON, first_match, suggestions
from app.rule_inference import (
    extract_trigger,
    extract_action,
    extract_conditions,
    parse_rule,
    ExtractedCondition,
    TriggerConfig,
    ActionConfig,
)


# ==================== Lexicons ====================

def test_first_registered_phrase_wins():
    """Earlier entries win even when a longer phrase would also match."""
    entry = first_match(TRIGGER_LEXICON, 'when a ticket assigned event fires')
    assert entry.phrase == 'assigned', f"Expected 'assigned', got {entry.phrase!r}"
    assert entry.normalized_type == 'TICKET_ASSIGNED'


def test_first_match_returns_none_without_phrase():
    assert first_match(ACTION_LEXICON, 'nothing to see here') is None


def test_suggestions_are_first_five_phrases():
    assert suggestions(TRIGGER_LEXICON) == [
        'ticket created', 'new ticket', 'ticket is created', 'ticket updated', 'ticket changes'
    ]
    assert suggestions(ACTION_LEXICON) == [
        'assign to', 'auto-assign', 'assign', 'change priority', 'set priority'
    ]


def test_priority_lexicon_codes():
    codes = {entry.phrase: entry.normalized_type for entry in PRIORITY_LEXICON}
    assert codes['critical'] == 'P1'
    assert codes['urgent'] == 'P1'
    assert codes['high'] == 'P2'
    assert codes['low'] == 'P4'


# ==================== Trigger extraction ====================

def test_trigger_with_priority():
    trigger = extract_trigger("When a P1 ticket is created, notify the on-call team")

    assert trigger.type == 'TICKET_CREATED'
    assert trigger.config.priority == 'P1'
    assert trigger.config.keywords is None


def test_trigger_priority_last_lexicon_hit_wins():
    """Priority phrases are scanned in lexicon order; the last hit overwrites."""
    trigger = extract_trigger("When a new ticket is high or critical priority, notify the team")

    assert trigger.type == 'TICKET_CREATED'
    assert trigger.config.priority == 'P2', f"Expected 'high' (later in lexicon) to win, got {trigger.config.priority}"


def test_trigger_keywords_split_on_commas_and_spaces():
    trigger = extract_trigger("When a new ticket mentions printer, scanner, notify support")

    assert trigger.config.keywords == ['printer', 'scanner', 'notify', 'support']


def test_trigger_keywords_keep_original_case():
    trigger = extract_trigger("When a ticket about VPN is created, add the networking tag")

    assert trigger.type == 'TICKET_CREATED'
    assert 'VPN' in trigger.config.keywords


def test_trigger_types_for_common_phrases():
    cases = {
        'When the status changes, add note: check it': 'TICKET_STATUS_CHANGED',
        'If the priority changed, notify the manager': 'TICKET_PRIORITY_CHANGED',
        'On sla warning notify the lead': 'SLA_BREACH_WARNING',
        'When an SLA breach happens, escalate': 'SLA_BREACHED',
        'Every day at 9, email the report': 'SCHEDULED',
        'When a ticket updated event happens, add a comment': 'TICKET_UPDATED',
    }
    for text, expected in cases.items():
        trigger = extract_trigger(text)
        assert trigger is not None, f"No trigger found in {text!r}"
        assert trigger.type == expected, f"{text!r}: expected {expected}, got {trigger.type}"


def test_no_trigger_phrase():
    assert extract_trigger("Auto-assign printer issues to John") is None
    assert extract_trigger("") is None
    assert extract_trigger(None) is None


# ==================== Action extraction ====================

def test_notify_action():
    action = extract_action("When a P1 ticket is created, notify the on-call team")

    assert action.type == 'SEND_NOTIFICATION'
    assert action.config.notify_target == 'on-call team'
    assert action.config.to_dict() == {'notifyTarget': 'on-call team'}


def test_assign_action_target():
    action = extract_action("Auto-assign printer issues to John")

    assert action.type == 'ASSIGN_TICKET'
    assert action.config.assign_to == 'printer issues to John'


def test_assign_target_stops_at_comma():
    action = extract_action("When a new ticket arrives, assign to Network Team, then notify the lead")

    assert action.type == 'ASSIGN_TICKET'
    assert action.config.assign_to == 'Network Team'
    assert action.config.notify_target == 'lead'


def test_note_action_with_target_priority():
    action = extract_action("When status changes to P1 add note: escalate immediately")

    assert action.type == 'ADD_NOTE'
    assert action.config.note_content == 'escalate immediately'
    assert action.config.target_priority == 'P1'


def test_target_priority_is_plain_substring():
    """'to high' matches inside 'to highest'; the action probe is not word-anchored."""
    action = extract_action("When a new ticket arrives, set priority to highest")

    assert action.type == 'CHANGE_PRIORITY'
    assert action.config.target_priority == 'P2'


def test_first_action_phrase_wins_over_later_match():
    """'assigned' contains 'assign', which is registered before 'add note'."""
    action = extract_action("When a ticket is assigned, add a note: Please review")

    assert action.type == 'ASSIGN_TICKET'
    assert action.config.assign_to is None
    assert action.config.note_content == 'Please review'


def test_tag_action():
    action = extract_action("When a ticket about VPN is created, add the networking tag")

    assert action.type == 'ADD_TAG'
    assert action.config.to_dict() == {}


def test_no_action_phrase():
    assert extract_action("When a new ticket comes in") is None
    assert extract_action("   ") is None


# ==================== Condition extraction ====================

def test_priority_condition_from_adjective():
    conditions = extract_conditions("When a P1 ticket is created, notify the on-call team")

    assert ExtractedCondition('priority', 'equals', 'P1') in conditions


def test_adjective_priority_needs_whole_word():
    conditions = extract_conditions("When a slow ticket is created, notify the team")

    assert all(c.field != 'priority' for c in conditions), f"Unexpected conditions: {conditions}"


def test_priority_conditions_are_not_deduplicated():
    conditions = extract_conditions("When a ticket is urgent or priority p1, escalate")
    priority_conditions = [c for c in conditions if c.field == 'priority']

    assert priority_conditions == [
        ExtractedCondition('priority', 'equals', 'P1'),
        ExtractedCondition('priority', 'equals', 'P1'),
    ]


def test_quoted_subject_keyword_condition():
    conditions = extract_conditions('When a new ticket has "printer" in subject, add tag Printing')

    assert ExtractedCondition('keywords', 'contains', 'printer') in conditions
    assert all(c.field != 'client' for c in conditions)


def test_about_clause_becomes_keyword_condition():
    conditions = extract_conditions("When a ticket about VPN is created, add the networking tag")

    assert conditions == [
        ExtractedCondition('keywords', 'contains', 'VPN is created, add the networking tag')
    ]


def test_every_keyword_match_but_only_first_client():
    conditions = extract_conditions(
        'When a ticket about "VPN" or regarding "DNS" is created, from Acme, for Globex'
    )

    assert [c.value for c in conditions if c.field == 'keywords'] == ['VPN', 'DNS']
    assert [c for c in conditions if c.field == 'client'] == [
        ExtractedCondition('client', 'equals', 'Acme')
    ]


def test_conditions_without_trigger_or_action():
    """Condition extraction does not depend on trigger/action matching."""
    text = "Tickets from Acme Corp, priority high"

    assert extract_trigger(text) is None
    assert extract_action(text) is None
    assert extract_conditions(text) == [
        ExtractedCondition('priority', 'equals', 'P2'),
        ExtractedCondition('client', 'equals', 'Acme Corp'),
    ]


def test_no_conditions():
    assert extract_conditions("") == []
    assert extract_conditions("When status changes to P1 add note: escalate immediately") == []


# ==================== Whole descriptions ====================

def test_parse_rule_is_repeatable():
    text = "When a P1 ticket is created, notify the on-call team about outages"
    first = parse_rule(text).to_dict()

    for _ in range(3):
        assert parse_rule(text).to_dict() == first


def test_parse_rule_complete_flag():
    assert parse_rule("When a P1 ticket is created, notify the on-call team").complete
    assert not parse_rule("Auto-assign printer issues to John").complete
    assert not parse_rule("").complete


def test_config_dicts_only_hold_populated_fields():
    assert TriggerConfig().to_dict() == {}
    assert TriggerConfig(priority='P3').to_dict() == {'priority': 'P3'}
    assert ActionConfig(assign_to='John', note_content='hi').to_dict() == {
        'assignTo': 'John', 'noteContent': 'hi'
    }
