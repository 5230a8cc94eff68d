from __future__ import annotations

import json

import pytest

from collapse.engine import actions as act
from collapse.main import CommandError, main, parse_command, render_status, run_shell
from collapse.services.storage import BuilderStore
from collapse.services.telemetry import TelemetryService


@pytest.mark.parametrize(
    "line, expected",
    [
        ("base base_strike 2", act.AdjustBaseCount(card_id="base_strike", delta=2)),
        ("mod mod_chain -1", act.AdjustModCount(card_id="mod_chain", delta=-1)),
        ("nulls 1", act.AdjustNullCount(delta=1)),
        ("capacity -3", act.AdjustModifierCapacity(delta=-3)),
        ("build noshuffle", act.GenerateDeck(shuffle=False)),
        ("BUILD", act.GenerateDeck()),
        ("mill", act.DiscardFromDeck(count=1)),
        ("mill 3", act.DiscardFromDeck(count=3)),
        ("discard null all", act.DiscardFromHand(card_id="null", all_copies=True)),
        ("to-deck null one", act.ReturnDiscardGroupToDeck(card_id="null", all_copies=False)),
        ("to-deck #2", act.ReturnDiscardItemToDeck(index=1)),
        ("to-hand base_dash", act.ReturnDiscardGroupToHand(card_id="base_dash")),
        ("to-hand #1", act.ReturnDiscardItemToHand(index=0)),
        ("recycle noshuffle bottom", act.ReturnDiscardToDeck(shuffle=False, to_top=False)),
        ("play base_guard", act.StartPlay(card_id="base_guard")),
        ("save Late Game", act.SaveDeck(name="Late Game")),
        ('load "Late Game"', act.LoadSavedDeck(name="Late Game")),
        ("limit 7", act.SetHandLimit(limit=7)),
    ],
)
def test_parse_command(line, expected) -> None:
    assert parse_command(line) == expected


def test_blank_line_is_nothing() -> None:
    assert parse_command("   ") is None


def test_parse_errors() -> None:
    with pytest.raises(CommandError, match="Unknown command"):
        parse_command("summon dragon")
    with pytest.raises(CommandError, match="Expected a number"):
        parse_command("nulls many")
    with pytest.raises(CommandError, match="Usage"):
        parse_command("base base_strike")


def test_shell_session(tmp_path, legal_session) -> None:
    store = BuilderStore(tmp_path / "state.json", legal_session.catalog)
    telemetry = TelemetryService(tmp_path / "telemetry.jsonl", session_seed=legal_session.seed)
    out: list[str] = []
    lines = ["draw", "build noshuffle", "lock", "draw", "bogus", "quit", "draw"]

    assert run_shell(legal_session, store, lines, out=out.append, telemetry=telemetry) == 0

    assert out[0] == "Refused: Lock the deck before drawing."
    assert out[1].startswith("Drew ")
    assert out[2].startswith("Unknown command: bogus")
    assert len(legal_session.state.hand) == 1

    saved = json.loads(store.path.read_text(encoding="utf-8"))
    assert saved["is_locked"] is True
    assert len(saved["hand"]) == 1

    records = [json.loads(x) for x in (tmp_path / "telemetry.jsonl").read_text(encoding="utf-8").splitlines()]
    assert [r["type"] for r in records] == ["GENERATE_DECK", "TOGGLE_LOCK", "CARD_DRAWN"]
    assert records[-1]["seed"] == legal_session.seed


def test_status_lines(legal_session) -> None:
    text = "\n".join(render_status(legal_session))
    assert "Ready" in text
    assert "Base 26/26" in text
    assert "Capacity 0/10 (10 left)" in text

    legal_session.state.null_count = 4
    text = "\n".join(render_status(legal_session))
    assert "Needs Attention" in text
    assert "Minimum of 5 Nulls required." in text


def test_main_validate_content(capsys) -> None:
    assert main(["validate-content"]) == 0
    assert capsys.readouterr().out.startswith("OK:")


def test_main_status_with_missing_state(tmp_path, capsys) -> None:
    assert main(["--state", str(tmp_path / "none.json"), "--seed", "5", "status"]) == 0
    out = capsys.readouterr().out
    assert "Base 0/26" in out
    assert not (tmp_path / "none.json").exists()


def test_status_shows_remaining_capacity(session) -> None:
    session.state.mod_counts["mod_overclock"] = 3  # 15 used, over capacity
    text = "\n".join(render_status(session))
    assert "Capacity 15/10 (0 left)" in text
    assert "Base 0/26" in text
