from typing import Callable, Dict, FrozenSet, List, Optional, TypeVar
from automaton import A, Automaton, Q, Transition


R = TypeVar("R")  # Label type for converted states


def subset_construction(
    nfa: Automaton[Q, A], name: Optional[str] = None
) -> Automaton[FrozenSet[Q], A]:
    """Build the deterministic automaton whose states are sets of ``nfa`` states.

    Only non-empty reachable subsets are created; a (subset, symbol) pair with
    no successor gets no edge instead of a sink state.
    """
    start = frozenset([nfa.start_state])
    dfa_states: List[FrozenSet[Q]] = [start]
    index_of: Dict[FrozenSet[Q], int] = {start: 0}
    dfa_trans: List[Transition] = []

    i = 0
    while i < len(dfa_states):
        T = dfa_states[i]
        for a in nfa.alphabet:
            U = nfa.move(T, a)
            if not U:
                continue
            if U not in index_of:
                index_of[U] = len(dfa_states)
                dfa_states.append(U)
            dfa_trans.append(Transition(T, a, dfa_states[index_of[U]]))
        i += 1

    nfa_accepts = frozenset(nfa.accept_states)
    dfa_accepts = [j for j, T in enumerate(dfa_states) if T & nfa_accepts]

    return Automaton(
        states=dfa_states,
        alphabet=nfa.alphabet,
        start_index=0,
        accept_indexes=dfa_accepts,
        transitions=dfa_trans,
        name=nfa.name if name is None else name,
    )


def relabel(
    dfa: Automaton[FrozenSet[Q], A],
    converter: Callable[[FrozenSet[Q]], R],
    name: Optional[str] = None,
) -> Automaton[R, A]:
    labels = {T: converter(T) for T in dfa.states}
    if len(set(labels.values())) != len(labels):
        raise ValueError("State converter produced the same label for different states")

    accept_indexes = [i for i, T in enumerate(dfa.states) if dfa.is_accept_state(T)]
    return Automaton(
        states=[labels[T] for T in dfa.states],
        alphabet=dfa.alphabet,
        start_index=dfa.states.index(dfa.start_state),
        accept_indexes=accept_indexes,
        transitions=[
            Transition(labels[t.state_in], t.symbol, labels[t.state_out])
            for t in dfa.transitions
        ],
        name=dfa.name if name is None else name,
    )


def nfa_to_dfa(
    nfa: Automaton[Q, A],
    converter: Optional[Callable[[FrozenSet[Q]], R]] = None,
    name_suffix: str = "__DFA",
) -> Automaton:
    name = f"{nfa.name}{name_suffix}"
    dfa = subset_construction(nfa, name)
    if converter is not None:
        dfa = relabel(dfa, converter, name)
    return dfa


def join_states(nfa: Automaton[Q, A], separator: str = ",") -> Callable[[FrozenSet[Q]], str]:
    """Converter naming a set of ``nfa`` states by its members.

    Members are joined in the order ``nfa`` declares its states, so the same
    set always gets the same label.
    """
    order = {s: i for i, s in enumerate(nfa.states)}

    def convert(state_set: FrozenSet[Q]) -> str:
        members = sorted(state_set, key=lambda s: order.get(s, len(order)))
        return separator.join(str(s) for s in members)

    return convert
