from fabula.core.loader import build_text
from fabula.core.text import render_text


def fragments(*frags):
    return build_text({"fragments": list(frags)})


def test_plain_string_interpolates_turns(context):
    state, registry = context
    state.turn_count = 7
    assert render_text("Turn {turns}.", state, registry) == "Turn 7."
    assert render_text(None, state, registry) == ""


def test_group_keeps_first_declared(context):
    state, registry = context
    text = fragments(
        {"say": "One.", "group": "g"},
        {"say": "Two.", "group": "g"},
        {"say": "Loose."},
    )
    assert render_text(text, state, registry) == "One.\n\nLoose."


def test_only_highest_priority_tier_is_kept(context):
    state, registry = context
    text = fragments(
        {"say": "Low.", "priority": 0},
        {"say": "High A.", "priority": 2},
        {"say": "Mid.", "priority": 1},
        {"say": "High B.", "priority": 2},
    )
    assert render_text(text, state, registry) == "High A.\n\nHigh B."


def test_failed_conditions_drop_fragments(context):
    state, registry = context
    text = fragments(
        {"say": "Locked.", "when": [{"falsy": "DOOR_UNLOCKED"}]},
        {"say": "Open.", "when": [{"truthy": "DOOR_UNLOCKED"}], "priority": 5},
    )
    assert render_text(text, state, registry) == "Locked."
    state.flags["DOOR_UNLOCKED"] = True
    assert render_text(text, state, registry) == "Open."


def test_no_passing_fragment_renders_empty(context):
    state, registry = context
    text = fragments({"say": "Never.", "when": [{"has": "key"}]})
    assert render_text(text, state, registry) == ""


def test_once_fragment_shows_only_once(context):
    state, registry = context
    text = fragments({"say": "First visit."}, {"say": "A chill runs down your spine.", "when": [{"once": "chill"}]})
    assert render_text(text, state, registry) == "First visit.\n\nA chill runs down your spine."
    assert render_text(text, state, registry) == "First visit."


def test_once_not_consumed_when_fragment_is_dropped(context):
    state, registry = context
    text = fragments(
        {"say": "Grouped winner.", "group": "g"},
        {"say": "Loser.", "group": "g", "when": [{"once": "lost"}]},
        {"say": "Low tier.", "priority": -1, "when": [{"once": "low"}]},
    )
    assert render_text(text, state, registry) == "Grouped winner."
    assert state.once == []


def test_fragment_text_interpolates_turns(context):
    state, registry = context
    state.turn_count = 3
    text = fragments({"say": "{turns} turns in."})
    assert render_text(text, state, registry) == "3 turns in."
