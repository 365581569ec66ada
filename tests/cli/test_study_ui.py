"""
Unit tests for the flashdeck.cli.study_ui module.
"""

from unittest.mock import patch

import pytest

from flashdeck.cli.study_ui import render_view, start_study_flow
from flashdeck.session import StudySession


def _run(session: StudySession, inputs, tag=None) -> None:
    with patch("rich.console.Console.input", side_effect=inputs):
        start_study_flow(session, tag=tag)


def test_quit_immediately(session, capsys):
    _run(session, ["q"])
    output = capsys.readouterr().out
    assert "Starting study session..." in output
    assert "Card 1 of 2" in output
    assert "What is the capital of France?" in output
    assert "Paris" not in output
    assert "Study session finished." in output


def test_reveal_and_navigate(session, capsys):
    _run(session, ["r", "n", "p", "q"])
    output = capsys.readouterr().out
    assert "Paris" in output
    assert "Card 2 of 2" in output
    assert "What is 2 + 2?" in output
    assert session.view().position == 0
    assert session.view().revealed is False


def test_filter_and_clear_filter(session, capsys):
    _run(session, ["f Math", "q"])
    assert session.view().filter_tag == "Math"
    assert "Card 1 of 1" in capsys.readouterr().out

    _run(session, ["f", "q"])
    assert session.view().filter_tag is None

    _run(session, ["f Math", "f All", "q"])
    assert session.view().filter_tag is None


def test_start_with_tag(session, capsys):
    _run(session, ["q"], tag="Geography")
    assert session.view().count == 1


def test_add_card(session, capsys):
    _run(session, ["a", "Q3", "A3", "x, y", "q"])
    output = capsys.readouterr().out
    assert "Card added." in output
    assert "Card 3 of 3" in output
    assert session.deck.cards[-1].tags == ["x", "y"]


def test_add_card_validation_error(session, capsys):
    _run(session, ["a", "", "A", "", "q"])
    output = capsys.readouterr().out
    assert "Validation: Question and Answer cannot be empty." in output
    assert len(session.deck) == 2


def test_edit_card_keeps_defaults(session, capsys):
    _run(session, ["e", "", "Lyon", "", "q"])
    card = session.deck.get("1")
    assert card.question == "What is the capital of France?"
    assert card.answer == "Lyon"
    assert card.tags == ["Geography"]
    assert "Card updated." in capsys.readouterr().out


def test_delete_confirmed(session, capsys):
    _run(session, ["d", "y", "q"])
    assert [c.id for c in session.deck.cards] == ["2"]
    assert "Card deleted." in capsys.readouterr().out


def test_delete_declined(session, capsys):
    _run(session, ["d", "n", "q"])
    assert len(session.deck) == 2
    assert "Delete cancelled." in capsys.readouterr().out


@pytest.mark.parametrize("command", ["e", "d"])
def test_edit_or_delete_without_card(session, capsys, command):
    _run(session, ["f Nope", command, "q"])
    output = capsys.readouterr().out
    assert "No flashcards available." in output
    assert "No card selected." in output


def test_toggle_theme(session, capsys):
    _run(session, ["t", "q"])
    assert session.view().dark_mode is True


def test_unknown_command_prints_help(session, capsys):
    _run(session, ["x", "q"])
    output = capsys.readouterr().out
    assert output.count("quit") >= 2


def test_render_view_marks_selected_filter(session, capsys):
    render_view(session.set_filter("Math"))
    output = capsys.readouterr().out
    assert "All" in output
    assert "Geography" in output
    assert "What is 2 + 2?" in output
    assert "Tags: Math" in output
