import argparse
import json
import logging
import os
import sys
from automaton import Automaton
from conversion import join_states, nfa_to_dfa
from parsing import (
    AutomatonParseError,
    automaton_from_json_dict,
    automaton_to_json_dict,
    automaton_to_text,
    parse_json_automaton,
    parse_text_automaton,
    read_text_automaton,
)
from visualization import AutomatonVisualizer, to_dot_graph

logger = logging.getLogger(__name__)

EXIT_REJECTED = 1
EXIT_BAD_INPUT = 2


def detect_format_from_ext(path: str) -> str:
    ext = os.path.splitext(path)[1].lower()
    if ext in (".json", ".jsn"):
        return "json"
    return "text"


def read_automaton(path: str = None, fmt: str = None) -> Automaton:
    if not path or path == "-":
        if fmt == "json":
            return automaton_from_stdin_json()
        return parse_text_automaton(sys.stdin, "stdin")
    fmt = fmt or detect_format_from_ext(path)
    if fmt == "json":
        return parse_json_automaton(path)
    elif fmt == "text":
        return read_text_automaton(path)
    else:
        raise ValueError(f"Unsupported format: {fmt}")


def automaton_from_stdin_json() -> Automaton:
    try:
        data = json.load(sys.stdin)
    except json.JSONDecodeError as e:
        raise AutomatonParseError(f"Invalid JSON: {e.msg}", e.lineno) from None
    return automaton_from_json_dict(data, "stdin")


def render_automaton(a: Automaton, fmt: str) -> str:
    if fmt == "json":
        return json.dumps(automaton_to_json_dict(a), ensure_ascii=False, indent=2) + "\n"
    return automaton_to_text(a)


def write_automaton(a: Automaton, path: str = None, fmt: str = "text") -> None:
    text = render_automaton(a, fmt)
    if not path or path == "-":
        sys.stdout.write(text)
        return
    dirname = os.path.dirname(path)
    if dirname:
        os.makedirs(dirname, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        f.write(text)


def build_arg_parser():
    p = argparse.ArgumentParser(
        prog="automata",
        description="Simulate a finite automaton or convert it to a DFA by subset construction.",
    )
    p.add_argument("symbols", nargs="*", help="Input symbols for the simulation modes")
    p.add_argument("-i", "--input", help="Automaton description (default: stdin)")
    p.add_argument("--in-format", choices=["text", "json"], help="Force input format (auto by extension)")
    p.add_argument("-o", "--output", help="Output file for --nfa2dfa (default: stdout)")
    p.add_argument("--out-format", choices=["text", "json"], help="Output format for --nfa2dfa")
    p.add_argument("--separator", default=",", help="Separator joining NFA states in DFA state names")
    p.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging level (default: WARNING)",
    )

    mode = p.add_mutually_exclusive_group(required=True)
    mode.add_argument("--transitions", action="store_true", help="Print every state visited from the initial state")
    mode.add_argument("--transition", action="store_true", help="Print the state reached after all symbols")
    mode.add_argument("--accept", action="store_true", help="Exit 0 if the symbols are accepted, 1 otherwise")
    mode.add_argument("--nfa2dfa", action="store_true", help="Convert to a DFA and write it out")
    mode.add_argument("--dot-graph", action="store_true", help="Print the automaton as a DOT graph")
    mode.add_argument("--plot", metavar="PATH", help="Save a picture of the automaton")
    return p


def main(argv=None) -> int:
    argv = argv if argv is not None else sys.argv[1:]
    args = build_arg_parser().parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(levelname)s: %(message)s",
    )

    try:
        a = read_automaton(args.input, args.in_format)
    except ValueError as e:
        logger.error("Invalid input! %s", e)
        return EXIT_BAD_INPUT
    except OSError as e:
        logger.error("Cannot read %s: %s", args.input, e)
        return EXIT_BAD_INPUT
    logger.info("Loaded %s: %s", a.name, a.get_stats())

    if args.transitions:
        for state in a.trace(a.start_state, args.symbols):
            print(state)
    elif args.transition:
        state = a.transition(a.start_state, args.symbols)
        if state is None:
            logger.info("No transition for %s", " ".join(args.symbols))
            return EXIT_REJECTED
        print(state)
    elif args.accept:
        accepted = a.accept(args.symbols)
        print("accepted" if accepted else "rejected")
        return 0 if accepted else EXIT_REJECTED
    elif args.nfa2dfa:
        dfa = nfa_to_dfa(a, join_states(a, args.separator))
        logger.info("DFA conversion complete: %s", dfa.get_stats())
        out_fmt = args.out_format or (detect_format_from_ext(args.output) if args.output else "text")
        try:
            write_automaton(dfa, args.output, out_fmt)
        except ValueError as e:
            logger.error("Cannot write DFA: %s", e)
            return EXIT_BAD_INPUT
        except OSError as e:
            logger.error("Cannot write %s: %s", args.output, e)
            return EXIT_BAD_INPUT
    elif args.dot_graph:
        print(to_dot_graph(a))
    elif args.plot:
        try:
            AutomatonVisualizer(a).save(args.plot)
        except (OSError, ValueError) as e:
            logger.error("Cannot write %s: %s", args.plot, e)
            return EXIT_BAD_INPUT
        logger.info("Picture saved to %s", args.plot)
    return 0


if __name__ == "__main__":
    sys.exit(main())
