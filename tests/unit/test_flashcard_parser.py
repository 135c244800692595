import json

import pytest

from core import ValidationError
from flashcards.parser import (
    extract_card_list,
    match_shape,
    normalize_proposals,
    parse_flashcard_proposals,
)


@pytest.mark.unit
def test_wrapped_object(sample_cards):
    proposals = parse_flashcard_proposals(json.dumps({'flashcards': sample_cards}))
    assert [p.front for p in proposals] == [c['front'] for c in sample_cards]
    assert all(p.source == 'ai-full' for p in proposals)


@pytest.mark.unit
def test_bare_array(sample_cards):
    proposals = parse_flashcard_proposals(json.dumps(sample_cards))
    assert len(proposals) == len(sample_cards)


@pytest.mark.unit
def test_single_card_object():
    proposals = parse_flashcard_proposals(json.dumps({'front': 'Q', 'back': 'A'}))
    assert len(proposals) == 1
    assert proposals[0].front == 'Q'
    assert proposals[0].back == 'A'


@pytest.mark.unit
def test_first_array_valued_key(sample_cards):
    proposals = parse_flashcard_proposals(json.dumps({'note': 'x', 'cards': sample_cards}))
    assert len(proposals) == len(sample_cards)


@pytest.mark.unit
def test_shape_order_prefers_flashcards_key(sample_cards):
    value = {'other': [{'front': 'X', 'back': 'Y'}], 'flashcards': sample_cards}
    assert match_shape(value) == sample_cards


@pytest.mark.unit
def test_object_embedded_in_prose(sample_cards):
    content = 'Here are your flashcards:\n```json\n' + json.dumps({'flashcards': sample_cards}) + '\n```\nEnjoy!'
    proposals = parse_flashcard_proposals(content)
    assert len(proposals) == len(sample_cards)


@pytest.mark.unit
def test_array_embedded_in_prose(sample_cards):
    content = 'Sure! ' + json.dumps(sample_cards) + ' Good luck.'
    assert extract_card_list(content) == sample_cards


@pytest.mark.unit
@pytest.mark.parametrize('content', [
    'I cannot help with that.',
    '{"front": "unterminated',
    '42',
])
def test_unparseable_output(content):
    with pytest.raises(ValidationError) as exc:
        parse_flashcard_proposals(content)
    assert exc.value.message == 'Could not parse the AI response. Please try again.'


@pytest.mark.unit
def test_invalid_entries_are_dropped():
    cards = [
        {'front': 'Q1', 'back': 'A1'},
        {'front': '', 'back': 'A2'},
        {'front': 'Q3'},
        {'front': 'Q4', 'back': 7},
        'not a card',
        {'front': '  Q5  ', 'back': '  A5 '},
    ]
    proposals = normalize_proposals(cards)
    assert [(p.front, p.back) for p in proposals] == [('Q1', 'A1'), ('  Q5  ', '  A5 ')]


@pytest.mark.unit
def test_long_sides_are_truncated():
    card = {'front': 'F' * 250, 'back': 'B' * 650}
    proposals = parse_flashcard_proposals(json.dumps([card]))
    assert len(proposals[0].front) == 200
    assert len(proposals[0].back) == 500


@pytest.mark.unit
@pytest.mark.parametrize('content', [
    json.dumps({'flashcards': []}),
    json.dumps([{'front': '', 'back': ''}]),
    json.dumps({'flashcards': [{'question': 'Q', 'answer': 'A'}]}),
])
def test_no_valid_cards_is_an_error(content):
    with pytest.raises(ValidationError) as exc:
        parse_flashcard_proposals(content)
    assert 'did not produce any valid flashcards' in exc.value.message


@pytest.mark.unit
def test_truncation_keeps_model_text_untrimmed():
    card = {'front': '  ' + 'F' * 250, 'back': '\n' + 'B' * 600}
    proposal = normalize_proposals([card])[0]
    assert proposal.front == ('  ' + 'F' * 250)[:200]
    assert proposal.back == ('\n' + 'B' * 600)[:500]
    assert proposal.front.startswith('  ')


@pytest.mark.unit
def test_whitespace_only_sides_are_dropped():
    assert normalize_proposals([{'front': '   ', 'back': 'A'}, {'front': 'Q', 'back': '\n\t'}]) == []
