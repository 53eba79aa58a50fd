import json
import logging
import os
from typing import Dict, Iterable, Iterator, List, Optional, Tuple
from automaton import Automaton, Builder

logger = logging.getLogger(__name__)

INITIAL_MARKERS = {"S", "SF", "FS"}
FINAL_MARKERS = {"F", "SF", "FS"}


class AutomatonParseError(ValueError):
    """Raised when an automaton description cannot be read."""

    def __init__(self, message: str, line: int = -1) -> None:
        self.line = line
        super().__init__(message)

    def __str__(self) -> str:
        if self.line >= 0:
            return f"{super().__str__()} (line {self.line})"
        return super().__str__()


def _significant_lines(lines: Iterable[str]) -> Iterator[Tuple[int, str]]:
    for lineno, raw in enumerate(lines, start=1):
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        yield lineno, line


def parse_text_automaton(lines: Iterable[str], name: str = "automaton") -> Automaton[str, str]:
    """Read the ``states:`` / ``transitions:`` text format.

    ::

        states:
        A S
        B F
        transitions:
        A x B
    """
    it = _significant_lines(lines)

    header = next(it, None)
    if header is None:
        raise AutomatonParseError("Empty input")
    lineno, line = header
    if line.lower() != "states:":
        raise AutomatonParseError('"states:" expected', lineno)

    states: List[str] = []
    accept_states: List[str] = []
    start_state: Optional[str] = None
    for lineno, line in it:
        if line.lower() == "transitions:":
            break
        fields = line.split()
        state = fields[0]
        states.append(state)
        if len(fields) > 1:
            marker = fields[1]
            if marker not in INITIAL_MARKERS | FINAL_MARKERS:
                raise AutomatonParseError(f"Unknown state marker {marker!r}", lineno)
            if marker in INITIAL_MARKERS:
                if start_state is not None:
                    raise AutomatonParseError("Just one initial state allowed", lineno)
                start_state = state
            if marker in FINAL_MARKERS:
                accept_states.append(state)
    else:
        raise AutomatonParseError('No transitions section, "transitions:" expected')

    if start_state is None:
        raise AutomatonParseError("The automaton must have an initial state")

    builder: Builder[str, str] = Builder(name)
    builder.set_states(states).add_final_states(accept_states).set_initial_state(start_state)

    declared = set(states)
    symbols: List[str] = []
    for lineno, line in it:
        fields = line.split()
        if len(fields) < 3:
            raise AutomatonParseError(
                "Expected three fields for transition: <from state> <symbol> <to state>",
                lineno,
            )
        frm, sym, to = fields[:3]
        for s in (frm, to):
            if s not in declared:
                raise AutomatonParseError(f'Non-declared state "{s}"', lineno)
        if sym not in symbols:
            symbols.append(sym)
        builder.add_transition(frm, sym, to)
    builder.set_symbols(symbols)

    automaton = builder.build()
    logger.debug(
        "Parsed %s: %d states, %d symbols, %d transitions",
        name,
        len(automaton.states),
        len(automaton.alphabet),
        len(automaton.transitions),
    )
    return automaton


def read_text_automaton(path: str) -> Automaton[str, str]:
    name = os.path.splitext(os.path.basename(path))[0]
    with open(path, "r", encoding="utf-8") as f:
        return parse_text_automaton(f, name)


def _check_token(value: str) -> str:
    if not value or value.startswith("#") or any(c.isspace() for c in value):
        raise ValueError(f"{value!r} cannot be written in the text format")
    return value


def automaton_to_text(a: Automaton) -> str:
    lines = ["states:"]
    for s in a.states:
        marker = ""
        if a.is_start_state(s):
            marker += "S"
        if a.is_accept_state(s):
            marker += "F"
        token = _check_token(str(s))
        lines.append(f"{token} {marker}" if marker else token)
    lines.append("transitions:")
    for t in a.transitions:
        lines.append(
            " ".join(_check_token(str(v)) for v in (t.state_in, t.symbol, t.state_out))
        )
    return "\n".join(lines) + "\n"


def parse_json_automaton(path: str) -> Automaton[str, str]:
    with open(path, "r", encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise AutomatonParseError(f"Invalid JSON: {e.msg}", e.lineno) from None
    return automaton_from_json_dict(data, os.path.splitext(os.path.basename(path))[0])


def _string_list(value, what: str) -> List[str]:
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise AutomatonParseError(f"{what} must be a list of strings")
    return list(value)


def automaton_from_json_dict(data: Dict, name: str = "automaton") -> Automaton[str, str]:
    if not isinstance(data, dict):
        raise AutomatonParseError("JSON automaton must be an object")
    try:
        states = _string_list(data["states"], "states")
        start_state = data["start_state"]
        accept_states = _string_list(data["accept_states"], "accept_states")
    except KeyError as e:
        raise AutomatonParseError(f"Missing key {e.args[0]!r} in JSON automaton") from None
    if not isinstance(start_state, str):
        raise AutomatonParseError("start_state must be a string")
    # Alphabet is optional, symbols found in transitions are appended
    alphabet = _string_list(data.get("alphabet", []), "alphabet")
    transitions = data.get("transitions", {})
    if not isinstance(transitions, dict):
        raise AutomatonParseError("transitions must be an object")

    builder: Builder[str, str] = Builder(data.get("name", name))
    for s, symbol_map in transitions.items():
        if not isinstance(symbol_map, dict):
            raise AutomatonParseError(f"transitions of {s!r} must be an object")
        for sym, dests in symbol_map.items():
            if isinstance(dests, str):
                dests = [dests]
            dests = _string_list(dests, f"destinations of {s!r} on {sym!r}")
            for d in dests:
                builder.add_transition(s, sym, d)
                states.extend([s, d])
            alphabet.append(sym)

    builder.set_states(states).set_symbols(alphabet)
    builder.add_final_states(accept_states).set_initial_state(start_state)
    return builder.build()


def automaton_to_json_dict(a: Automaton) -> dict:
    trans_dict: Dict[str, Dict[str, List[str]]] = {}
    for t in a.transitions:
        sym_map = trans_dict.setdefault(str(t.state_in), {})
        sym_map.setdefault(str(t.symbol), []).append(str(t.state_out))
    for sym_map in trans_dict.values():
        for sym, dests in sym_map.items():
            if len(dests) == 1:
                sym_map[sym] = dests[0]
    return {
        "name": a.name,
        "states": [str(s) for s in a.states],
        "alphabet": [str(sym) for sym in a.alphabet],
        "start_state": str(a.start_state),
        "accept_states": [str(s) for s in a.accept_states],
        "is_dfa": a.is_deterministic,
        "transitions": trans_dict,
    }
