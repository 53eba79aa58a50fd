from dataclasses import dataclass
from typing import (
    Dict,
    FrozenSet,
    Generic,
    Hashable,
    Iterable,
    List,
    Optional,
    Sequence,
    Tuple,
    TypeVar,
)


Q = TypeVar("Q", bound=Hashable)  # State type
A = TypeVar("A", bound=Hashable)  # Symbol type


@dataclass(frozen=True)
class Transition(Generic[Q, A]):
    state_in: Q
    symbol: A
    state_out: Q


class Automaton(Generic[Q, A]):
    """Immutable finite automaton.

    The transition relation is a set of edges, so the same automaton can be
    walked deterministically (first matching edge) or nondeterministically
    (all matching edges). Instances are normally produced by ``Builder``.
    """

    def __init__(
        self,
        states: Sequence[Q],
        alphabet: Sequence[A],
        start_index: int,
        accept_indexes: Sequence[int],
        transitions: Sequence[Transition],
        name: str = "automaton",
    ):
        self._states: Tuple[Q, ...] = tuple(states)
        self._alphabet: Tuple[A, ...] = tuple(alphabet)
        self._start_index = start_index
        self._accept_indexes: Tuple[int, ...] = tuple(accept_indexes)
        self._transitions: Tuple[Transition, ...] = tuple(transitions)
        self._name = name

        self._accept_set: FrozenSet[Q] = frozenset(
            self._states[i] for i in self._accept_indexes
        )
        # (state, symbol) -> targets, in edge order
        self._delta: Dict[Tuple[Q, A], Tuple[Q, ...]] = {}
        for t in self._transitions:
            key = (t.state_in, t.symbol)
            self._delta[key] = self._delta.get(key, ()) + (t.state_out,)

    def __repr__(self) -> str:
        return (
            f"Automaton(name={self.name!r}, states={len(self._states)}, "
            f"alphabet={len(self._alphabet)}, transitions={len(self._transitions)})"
        )

    def __len__(self) -> int:
        return len(self._states)

    @property
    def name(self) -> str:
        return self._name

    @property
    def states(self) -> Tuple[Q, ...]:
        return self._states

    @property
    def alphabet(self) -> Tuple[A, ...]:
        return self._alphabet

    @property
    def start_state(self) -> Q:
        return self._states[self._start_index]

    @property
    def accept_states(self) -> Tuple[Q, ...]:
        return tuple(self._states[i] for i in self._accept_indexes)

    @property
    def transitions(self) -> Tuple[Transition, ...]:
        return self._transitions

    @property
    def is_deterministic(self) -> bool:
        return all(len(dests) == 1 for dests in self._delta.values())

    def get_state(self, index: int) -> Q:
        return self._states[index]

    def get_symbol(self, index: int) -> A:
        return self._alphabet[index]

    def is_start_state(self, state: Q) -> bool:
        return self.start_state == state

    def is_accept_state(self, state: Optional[Q]) -> bool:
        return state in self._accept_set

    def get_stats(self) -> Dict:
        return {
            "states": len(self._states),
            "alphabet_size": len(self._alphabet),
            "accept_states": len(self._accept_indexes),
            "total_transitions": len(self._transitions),
            "is_dfa": self.is_deterministic,
        }

    # Deterministic walk

    def transition(self, state: Q, symbols: Iterable[A]) -> Optional[Q]:
        """Follow ``symbols`` from ``state`` taking the first matching edge.

        Returns ``None`` as soon as a step has no edge. When several edges
        share a (state, symbol) pair the one added first to the builder wins.
        """
        current_state = state
        for symbol in symbols:
            dests = self._delta.get((current_state, symbol))
            if not dests:
                return None
            current_state = dests[0]
        return current_state

    def trace(self, state: Q, symbols: Iterable[A]) -> List[Q]:
        visited = [state]
        for symbol in symbols:
            dests = self._delta.get((visited[-1], symbol))
            if not dests:
                break
            visited.append(dests[0])
        return visited

    def transitions_from(self, state: Q) -> Dict[A, Q]:
        # later edges overwrite earlier ones for the same symbol
        result: Dict[A, Q] = {}
        for t in self._transitions:
            if t.state_in == state:
                result[t.symbol] = t.state_out
        return result

    def accept(self, symbols: Iterable[A]) -> bool:
        state = self.transition(self.start_state, symbols)
        return state is not None and self.is_accept_state(state)

    # Nondeterministic walk

    def move(self, state_set: Iterable[Q], symbol: A) -> FrozenSet[Q]:
        result = set()
        for s in set(state_set):
            result.update(self._delta.get((s, symbol), ()))
        return frozenset(result)

    def transition_nfa(self, state_set: Iterable[Q], symbols: Iterable[A]) -> FrozenSet[Q]:
        current_states = frozenset(state_set)
        for symbol in symbols:
            current_states = self.move(current_states, symbol)
        return current_states

    def accept_nfa(self, symbols: Iterable[A]) -> bool:
        reached = self.transition_nfa({self.start_state}, symbols)
        return not reached.isdisjoint(self._accept_set)


def _unique(items: Iterable) -> List:
    return list(dict.fromkeys(items))


class Builder(Generic[Q, A]):
    """Mutable accumulator for an ``Automaton``.

    Declarations may contain duplicates; ``build`` removes them keeping the
    first occurrence and leaves the builder untouched, so it can be reused.
    """

    def __init__(self, name: str = "automaton"):
        self.name = name
        self._states: List[Q] = []
        self._alphabet: List[A] = []
        self._start_state: Optional[Q] = None
        self._has_start_state = False
        self._accept_states: List[Q] = []
        self._transitions: List[Transition] = []

    def set_states(self, states: Iterable[Q]) -> "Builder[Q, A]":
        self._states = list(states)
        return self

    def set_symbols(self, symbols: Iterable[A]) -> "Builder[Q, A]":
        self._alphabet = list(symbols)
        return self

    def add_final_states(self, states: Iterable[Q]) -> "Builder[Q, A]":
        self._accept_states.extend(states)
        return self

    def set_initial_state(self, state: Q) -> "Builder[Q, A]":
        self._start_state = state
        self._has_start_state = True
        return self

    def add_transition(self, state_in: Q, symbol: A, state_out: Q) -> "Builder[Q, A]":
        self._transitions.append(Transition(state_in, symbol, state_out))
        return self

    def build(self) -> Automaton[Q, A]:
        states = _unique(self._states)
        if not states:
            raise ValueError("An automaton needs at least one state")
        if not self._has_start_state:
            raise ValueError("No initial state declared")
        try:
            start_index = states.index(self._start_state)
        except ValueError:
            raise ValueError(
                f"Initial state {self._start_state!r} is not a declared state"
            ) from None

        accept_set = set(self._accept_states)
        accept_indexes = [i for i, s in enumerate(states) if s in accept_set]

        return Automaton(
            states=states,
            alphabet=_unique(self._alphabet),
            start_index=start_index,
            accept_indexes=accept_indexes,
            transitions=_unique(self._transitions),
            name=self.name,
        )
