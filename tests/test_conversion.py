"""Subset construction tests."""

import itertools
import random

import pytest

from automaton import Builder, Transition
from conversion import join_states, nfa_to_dfa, relabel, subset_construction
from parsing import automaton_to_text, parse_text_automaton


def random_nfa(seed, n_states=4, symbols="ab", n_edges=9):
    rng = random.Random(seed)
    builder = Builder(f"random{seed}").set_states(range(n_states)).set_symbols(symbols)
    builder.set_initial_state(rng.randrange(n_states))
    builder.add_final_states(rng.sample(range(n_states), rng.randint(0, n_states)))
    for _ in range(n_edges):
        builder.add_transition(rng.randrange(n_states), rng.choice(symbols), rng.randrange(n_states))
    return builder.build()


def words(symbols, max_length=5):
    for length in range(max_length + 1):
        yield from itertools.product(symbols, repeat=length)


class TestSubsetConstruction:
    def test_nondeterministic_fork_becomes_one_set_state(self, forked):
        dfa = subset_construction(forked)
        start = frozenset({"A"})
        bc = frozenset({"B", "C"})
        assert dfa.states == (start, bc)
        assert dfa.start_state == start
        assert dfa.transitions == (Transition(start, "x", bc),)
        assert dfa.accept_states == (bc,)

    def test_no_sink_state_is_created(self, forked):
        dfa = subset_construction(forked)
        assert dfa.transition(frozenset({"B", "C"}), ["x"]) is None
        assert not dfa.accept(["x", "x"])

    def test_discovery_order_follows_symbol_order(self, abcd):
        dfa = subset_construction(abcd)
        assert dfa.states == (
            frozenset({"A"}),
            frozenset({"D"}),
            frozenset({"B"}),
        )
        assert dfa.alphabet == abcd.alphabet
        assert dfa.accept_states == (frozenset({"D"}), frozenset({"B"}))

    def test_set_equality_ignores_member_order(self):
        nfa = (
            Builder()
            .set_states(["A", "B", "C"])
            .set_initial_state("A")
            .set_symbols(["x", "y"])
            .add_transition("A", "x", "B")
            .add_transition("A", "x", "C")
            .add_transition("A", "y", "C")
            .add_transition("A", "y", "B")
            .build()
        )
        dfa = subset_construction(nfa)
        assert len(dfa.states) == 2
        assert dfa.transition(frozenset({"A"}), ["x"]) == dfa.transition(frozenset({"A"}), ["y"])

    def test_result_is_deterministic(self):
        for seed in range(10):
            assert subset_construction(random_nfa(seed)).is_deterministic

    @pytest.mark.parametrize("seed", range(25))
    def test_accepts_the_same_words(self, seed):
        nfa = random_nfa(seed)
        dfa = nfa_to_dfa(nfa)
        for word in words(nfa.alphabet):
            assert nfa.accept_nfa(word) == dfa.accept(word), word

    @pytest.mark.parametrize("n_states", [1, 2, 3, 5])
    def test_state_count_is_bounded(self, n_states):
        for seed in range(10):
            nfa = random_nfa(seed, n_states=n_states, n_edges=3 * n_states)
            dfa = subset_construction(nfa)
            assert 1 <= len(dfa) <= 2 ** n_states - 1
            assert all(dfa_state for dfa_state in dfa.states)

    def test_blowup_of_nth_from_last_symbol(self):
        # the third symbol from the end is "a"
        builder = Builder().set_states([0, 1, 2, 3]).set_symbols("ab").set_initial_state(0)
        builder.add_final_states([3])
        builder.add_transition(0, "a", 0).add_transition(0, "b", 0).add_transition(0, "a", 1)
        for i in (1, 2):
            builder.add_transition(i, "a", i + 1).add_transition(i, "b", i + 1)
        dfa = subset_construction(builder.build())
        assert len(dfa) == 8
        assert dfa.accept("abb")
        assert not dfa.accept("bab")

    def test_name_suffix(self, forked):
        assert nfa_to_dfa(forked).name == "forked__DFA"
        assert nfa_to_dfa(forked, name_suffix="_d").name == "forked_d"

    def test_name_is_given_at_construction(self, forked):
        assert subset_construction(forked).name == "forked"
        assert subset_construction(forked, "sets").name == "sets"
        labelled = nfa_to_dfa(forked, join_states(forked))
        assert labelled.name == "forked__DFA"
        assert forked.name == "forked"


class TestConverters:
    def test_join_states_uses_declaration_order(self, forked):
        dfa = nfa_to_dfa(forked, join_states(forked, ","))
        assert dfa.states == ("A", "B,C")
        assert dfa.transitions == (Transition("A", "x", "B,C"),)
        assert dfa.accept_states == ("B,C",)
        assert dfa.start_state == "A"

    def test_join_states_with_empty_separator(self, forked):
        assert nfa_to_dfa(forked, join_states(forked, "")).states == ("A", "BC")

    def test_custom_converter(self, forked):
        dfa = nfa_to_dfa(forked, lambda s: len(s))
        assert dfa.states == (1, 2)
        assert dfa.accept(["x"])

    def test_converter_must_not_merge_states(self, forked):
        with pytest.raises(ValueError, match="same label"):
            relabel(subset_construction(forked), lambda s: "X")

    @pytest.mark.parametrize("seed", range(10))
    def test_text_round_trip_keeps_behaviour(self, seed):
        nfa = random_nfa(seed)
        raw = nfa_to_dfa(nfa)
        labelled = nfa_to_dfa(nfa, join_states(nfa, ","))
        reread = parse_text_automaton(automaton_to_text(labelled).splitlines())
        for word in words(nfa.alphabet, 4):
            assert reread.accept(word) == raw.accept(word), word
