import matplotlib
import pytest

from automaton import Builder

matplotlib.use("Agg")


@pytest.fixture
def abcd():
    """Deterministic automaton over x, y, z with finals B and D."""
    return (
        Builder("abcd")
        .set_states(["A", "B", "C", "D"])
        .add_final_states(["B", "D"])
        .set_initial_state("A")
        .set_symbols(["x", "y", "z"])
        .add_transition("A", "x", "A")
        .add_transition("A", "y", "D")
        .add_transition("A", "z", "D")
        .add_transition("D", "x", "B")
        .add_transition("B", "y", "D")
        .add_transition("B", "z", "A")
        .build()
    )


@pytest.fixture
def forked():
    """Nondeterministic automaton: A goes to both B and C on x."""
    return (
        Builder("forked")
        .set_states(["A", "B", "C"])
        .add_final_states(["C"])
        .set_initial_state("A")
        .set_symbols(["x"])
        .add_transition("A", "x", "B")
        .add_transition("A", "x", "C")
        .build()
    )


ABCD_TEXT = """\
# four states, three symbols
states:
A S
B F
C
D F

transitions:
A x A
A y D
A z D
D x B
B y D
B z A
"""


@pytest.fixture
def abcd_file(tmp_path):
    path = tmp_path / "abcd.txt"
    path.write_text(ABCD_TEXT, encoding="utf-8")
    return path


@pytest.fixture
def abcd_text():
    return ABCD_TEXT
