from __future__ import annotations

import argparse
import logging
import random
import shlex
import sys
from pathlib import Path
from typing import Callable, Iterable

from collapse.engine import actions as act
from collapse.engine.builder import deck_status
from collapse.engine.capacity import capacity_remaining
from collapse.engine.deck import discard_stacks, hand_stacks
from collapse.engine.rules import BASE_TARGET
from collapse.engine.session import Session, new_session, step
from collapse.paths import get_paths
from collapse.services.content import ContentError, ContentService
from collapse.services.storage import BuilderStore
from collapse.services.telemetry import TelemetryService

logger = logging.getLogger(__name__)

Output = Callable[[str], None]

HELP = """\
Builder:   base ID N | mod ID N | nulls N | capacity N | reset-builder
Deck:      build [noshuffle] | shuffle | lock | draw | reset | limit N | mill [N]
Hand:      discard ID [all]
Discard:   to-deck ID [one] | to-deck #I | to-hand ID [all] | to-hand #I | recycle [noshuffle] [bottom]
Play:      play ID | attach ID | finalize | cancel
Saved:     save NAME | load NAME | delete NAME
Info:      status | mods [TEXT] | help | quit"""


class CommandError(ValueError):
    pass


def _int(tok: str) -> int:
    try:
        return int(tok)
    except ValueError as e:
        raise CommandError(f"Expected a number, got {tok!r}") from e


def _need(args: list[str], n: int, usage: str) -> None:
    if len(args) < n:
        raise CommandError(f"Usage: {usage}")


def _index(tok: str) -> int | None:
    # "#3" addresses the third discard entry (1-based, as displayed)
    if tok.startswith("#"):
        return _int(tok[1:]) - 1
    return None


def parse_command(line: str) -> act.Action | None:
    """Translate one shell line into an engine action.

    Returns None for blank lines; raises CommandError for anything that
    is not an engine command.
    """
    try:
        toks = shlex.split(line)
    except ValueError as e:
        raise CommandError(str(e)) from e
    if not toks:
        return None
    cmd, args = toks[0].lower(), toks[1:]
    flags = {a.lower() for a in args[1:]}

    if cmd == "base":
        _need(args, 2, "base ID N")
        return act.AdjustBaseCount(card_id=args[0], delta=_int(args[1]))
    if cmd == "mod":
        _need(args, 2, "mod ID N")
        return act.AdjustModCount(card_id=args[0], delta=_int(args[1]))
    if cmd == "nulls":
        _need(args, 1, "nulls N")
        return act.AdjustNullCount(delta=_int(args[0]))
    if cmd == "capacity":
        _need(args, 1, "capacity N")
        return act.AdjustModifierCapacity(delta=_int(args[0]))
    if cmd == "reset-builder":
        return act.ResetBuilder()
    if cmd == "build":
        return act.GenerateDeck(shuffle="noshuffle" not in {a.lower() for a in args})
    if cmd == "shuffle":
        return act.ShuffleDeck()
    if cmd == "lock":
        return act.ToggleLock()
    if cmd == "draw":
        return act.Draw()
    if cmd == "reset":
        return act.ResetDeck()
    if cmd == "limit":
        _need(args, 1, "limit N")
        return act.SetHandLimit(limit=_int(args[0]))
    if cmd == "mill":
        return act.DiscardFromDeck(count=_int(args[0]) if args else 1)
    if cmd == "discard":
        _need(args, 1, "discard ID [all]")
        return act.DiscardFromHand(card_id=args[0], all_copies="all" in flags)
    if cmd == "to-deck":
        _need(args, 1, "to-deck ID [one] | to-deck #I")
        idx = _index(args[0])
        if idx is not None:
            return act.ReturnDiscardItemToDeck(index=idx)
        return act.ReturnDiscardGroupToDeck(card_id=args[0], all_copies="one" not in flags)
    if cmd == "to-hand":
        _need(args, 1, "to-hand ID [all] | to-hand #I")
        idx = _index(args[0])
        if idx is not None:
            return act.ReturnDiscardItemToHand(index=idx)
        return act.ReturnDiscardGroupToHand(card_id=args[0], all_copies="all" in flags)
    if cmd == "recycle":
        lowered = {a.lower() for a in args}
        return act.ReturnDiscardToDeck(shuffle="noshuffle" not in lowered, to_top="bottom" not in lowered)
    if cmd == "play":
        _need(args, 1, "play ID")
        return act.StartPlay(card_id=args[0])
    if cmd == "attach":
        _need(args, 1, "attach ID")
        return act.ToggleAttach(card_id=args[0])
    if cmd == "finalize":
        return act.FinalizePlay()
    if cmd == "cancel":
        return act.CancelPlay()
    if cmd in ("save", "load", "delete"):
        _need(args, 1, f"{cmd} NAME")
        name = " ".join(args)
        if cmd == "save":
            return act.SaveDeck(name=name)
        if cmd == "load":
            return act.LoadSavedDeck(name=name)
        return act.DeleteSavedDeck(name=name)
    raise CommandError(f"Unknown command: {cmd} (try 'help')")


def render_status(session: Session) -> list[str]:
    state = session.state
    cards = session.catalog
    st = deck_status(state, cards)

    def name(cid: str) -> str:
        card = cards.find(cid)
        return card.name if card is not None else cid

    lines = [
        f"Deck {state.deck_name or '(unsaved)'}: {'Ready' if st.is_valid else 'Needs Attention'}"
        f"{' [locked]' if state.is_locked else ''}",
        f"  Base {st.base_total}/{BASE_TARGET}  Nulls {st.null_count}  Capacity {st.capacity_used}/{st.modifier_capacity}"
        f" ({capacity_remaining(state.mod_counts, state.modifier_capacity, cards)} left)",
    ]
    lines.extend(f"  ! {w}" for w in st.warnings)
    lines.append(f"  Deck {len(state.deck)}  Discard {len(state.discard)}  Hand {len(state.hand)}/{state.hand_limit}")
    for s in hand_stacks(state):
        lines.append(f"    hand: {name(s.card_id)} x{s.count}")
    for s in discard_stacks(state):
        lines.append(f"    discard: {name(s.card_id)} x{s.count} (#{', #'.join(str(i + 1) for i in s.indices)})")
    if session.play is not None:
        mods = ", ".join(name(m) for m in sorted(session.play.mods)) or "none"
        lines.append(f"  Active play: {name(session.play.base_id)} + [{mods}]")
    if state.saved_decks:
        lines.append(f"  Saved decks: {', '.join(sorted(state.saved_decks))}")
    return lines


def run_shell(
    session: Session,
    store: BuilderStore | None,
    lines: Iterable[str],
    out: Output = print,
    telemetry: TelemetryService | None = None,
) -> int:
    """Apply commands line by line, saving after every applied command."""
    for line in lines:
        stripped = line.strip()
        word = stripped.split(" ", 1)[0].lower() if stripped else ""
        if word in ("quit", "exit"):
            break
        if word == "help":
            out(HELP)
            continue
        if word == "status":
            for ln in render_status(session):
                out(ln)
            continue
        if word == "mods":
            needle = stripped[len(word):].strip()
            for card in session.catalog.search_modifiers(needle):
                out(f"{card.id:16} cost {card.cost}  {card.text}")
            continue
        try:
            action = parse_command(stripped)
        except CommandError as e:
            out(str(e))
            continue
        if action is None:
            continue
        result = step(session, action)
        if not result.ok:
            out(f"Refused: {result.reason}")
            continue
        for ev in result.events:
            if ev.get("type") == "CARD_DRAWN":
                out(f"Drew {ev.get('card_id')}")
        if store is not None:
            store.save(session.state)
        if telemetry is not None:
            telemetry.log_events(result.events)
    return 0


def _interactive_lines() -> Iterable[str]:
    while True:
        try:
            yield input("collapse> ")
        except EOFError:
            return


def main(argv: list[str] | None = None) -> int:
    paths = get_paths()
    parser = argparse.ArgumentParser(prog="collapse-deck")
    parser.add_argument("--state", type=Path, default=paths.state_file, help="builder state file")
    parser.add_argument("--telemetry", type=Path, default=paths.telemetry_file)
    parser.add_argument("--no-telemetry", action="store_true")
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("-v", "--verbose", action="store_true")
    parser.add_argument("command", nargs="?", default="shell", choices=["shell", "status", "validate-content"])
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)

    content = ContentService(data_dir=paths.data_dir, schema_dir=paths.schema_dir)
    try:
        catalog = content.load_catalog()
    except ContentError as e:
        print(e, file=sys.stderr)
        return 1
    if args.command == "validate-content":
        print(f"OK: {len(catalog.cards)} cards")
        return 0

    store = BuilderStore(args.state, catalog)
    seed = args.seed if args.seed is not None else random.randrange(1, 2**31 - 1)
    session = new_session(catalog, seed, state=store.load())
    logger.debug("Session seed %d, state file %s", seed, store.path)

    if args.command == "status":
        for ln in render_status(session):
            print(ln)
        return 0

    telemetry = None if args.no_telemetry else TelemetryService(args.telemetry, session_seed=seed)
    return run_shell(session, store, _interactive_lines(), telemetry=telemetry)


if __name__ == "__main__":
    raise SystemExit(main())
