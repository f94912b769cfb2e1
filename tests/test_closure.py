import operator
import random

import pytest

from dfakit.automata.fsa import (
    DFA,
    AlphabetMismatchError,
    accepts,
    complement,
    difference,
    explore,
    intersect,
    intersection,
    intersection_all,
    product,
    reachable_from,
    renumber_dfa,
    run,
    symmetric_difference,
    union,
    union_all,
)
from dfakit.util.testing import (
    ends_in_one,
    even_length,
    random_dfa,
    random_sequences,
)


def random_pairs(seed, count=15):
    rng = random.Random(seed)
    for _ in range(count):
        dfa1 = random_dfa(rng, size=rng.randint(1, 5), prefix="p")
        dfa2 = random_dfa(rng, size=rng.randint(1, 5), prefix="q")
        yield dfa1, dfa2, random_sequences(rng, count=30)


def div_by(n):
    # On-demand automaton with no declared state space
    return DFA(
        0,
        lambda state: state == 0,
        lambda state, bit: (state * 2 + bit) % n,
        alphabet=(0, 1),
    )


def test_complement_scenario():
    dfa = complement(ends_in_one())
    assert accepts(dfa, [1, 0])
    assert not accepts(dfa, [1, 0, 1])
    assert accepts(dfa, [])


def test_intersection_scenario():
    dfa = intersection(ends_in_one(), even_length())
    assert accepts(dfa, [1, 0, 1, 1])
    assert not accepts(dfa, [1, 0, 1])
    assert not accepts(dfa, [1, 0])
    assert intersect is intersection


def test_union_scenario():
    dfa = union(ends_in_one(), even_length())
    assert accepts(dfa, [1, 0, 1])
    assert accepts(dfa, [1, 0])
    assert accepts(dfa, [])
    assert not accepts(dfa, [0])
    assert dfa.start() == ("A", "even")


def test_complement_structure():
    dfa = ends_in_one()
    comp = complement(dfa)
    assert comp.start() == dfa.start()
    assert comp.transitions is dfa.transitions
    assert comp.final_states == frozenset(["A"])
    assert dfa.final_states == frozenset(["B"])


def test_complement_correctness():
    for dfa1, _, seqs in random_pairs(10):
        comp = complement(dfa1)
        for seq in seqs:
            assert accepts(comp, seq) == (not accepts(dfa1, seq))


def test_double_complement():
    for dfa1, _, seqs in random_pairs(11):
        twice = complement(complement(dfa1))
        assert twice.final_states == dfa1.final_states
        for seq in seqs:
            assert accepts(twice, seq) == accepts(dfa1, seq)


def test_complement_of_predicate():
    dfa = div_by(3)
    comp = ~dfa
    assert comp.states is None
    assert comp.accept([1])
    assert not comp.accept([1, 1])
    assert not (~comp).accept([1])


def test_product_structure():
    dfa1 = ends_in_one()
    dfa2 = even_length()
    prod = intersection(dfa1, dfa2)
    assert prod.start() == ("A", "even")
    assert len(prod) == 4
    assert prod.final_states == frozenset([("B", "even")])
    assert prod.alphabet == frozenset([0, 1])
    assert prod.next_state(("A", "even"), 1) == ("B", "odd")


def test_product_runs_components_in_lockstep():
    for dfa1, dfa2, seqs in random_pairs(12):
        prod = product(dfa1, operator.and_, dfa2)
        assert len(prod) == len(dfa1) * len(dfa2)
        for state1 in dfa1.states:
            for state2 in dfa2.states:
                for seq in seqs[:5]:
                    assert run(prod, (state1, state2), seq) == (
                        run(dfa1, state1, seq),
                        run(dfa2, state2, seq),
                    )


def test_closure_correctness():
    for dfa1, dfa2, seqs in random_pairs(13):
        both = dfa1 & dfa2
        either = dfa1 | dfa2
        minus = dfa1 - dfa2
        xor = dfa1 ^ dfa2
        for seq in seqs:
            a = accepts(dfa1, seq)
            b = accepts(dfa2, seq)
            assert accepts(both, seq) == (a and b)
            assert accepts(either, seq) == (a or b)
            assert accepts(minus, seq) == (a and not b)
            assert accepts(xor, seq) == (a != b)


def test_named_constructions_match_operators():
    dfa1 = ends_in_one()
    dfa2 = even_length()
    for seq in random_sequences(random.Random(14), count=40):
        assert difference(dfa1, dfa2).accept(seq) == (dfa1 - dfa2).accept(seq)
        assert symmetric_difference(dfa1, dfa2).accept(seq) == (dfa1 ^ dfa2).accept(
            seq
        )


def test_alphabet_mismatch():
    ternary = DFA("x", {"x"}, {"x": {0: "x", 1: "x", 2: "x"}})
    with pytest.raises(AlphabetMismatchError):
        intersection(ends_in_one(), ternary)
    with pytest.raises(AlphabetMismatchError):
        union(ends_in_one(), ternary)


def test_on_demand_product():
    prod = intersection(div_by(3), div_by(5))
    assert prod.states is None
    assert prod.alphabet == frozenset([0, 1])
    # 15 is 1111 in binary
    assert prod.accept([1, 1, 1, 1])
    assert not prod.accept([1, 1])
    assert not prod.accept([1, 0, 1])

    either = union(div_by(3), div_by(5))
    assert either.accept([1, 1])
    assert either.accept([1, 0, 1])
    assert not either.accept([1, 1, 1])


def test_mixed_product():
    prod = intersection(ends_in_one(), div_by(3))
    assert prod.states is None
    # 3 ends in 1 and is divisible by 3, 6 is not odd
    assert prod.accept([1, 1])
    assert not prod.accept([1, 1, 0])


def test_explore():
    prod = intersection(div_by(3), div_by(5))
    small = explore(prod)
    assert small.start() == (0, 0)
    assert len(small) == 15
    for seq in random_sequences(random.Random(15), count=50):
        assert small.accept(seq) == prod.accept(seq)


def test_explore_prunes_unreachable_pairs():
    dfa = DFA("a", {"b"}, {"a": {0: "a", 1: "a"}, "b": {0: "b", 1: "b"}})
    prod = intersection(dfa, ends_in_one())
    assert len(prod) == 4
    small = explore(prod)
    assert small.states == frozenset([("a", "A"), ("a", "B")])
    assert small.final_states == frozenset()


def test_renumber():
    for dfa1, dfa2, seqs in random_pairs(16, count=5):
        prod = dfa1 | dfa2
        numbered = renumber_dfa(prod, base=10)
        assert numbered.start() == 10
        assert numbered.states == frozenset(range(10, 10 + len(prod)))
        for seq in seqs:
            assert numbered.accept(seq) == prod.accept(seq)


def test_fold_many():
    dfas = [ends_in_one(), even_length(), complement(ends_in_one())]
    assert not intersection_all(dfas).accept([1, 1])
    assert intersection_all(dfas[1:]).accept([1, 0])
    assert union_all(dfas).accept([1])
    assert union_all(dfas[:1]) is dfas[0]
    with pytest.raises(ValueError):
        union_all([])


def test_reachable_from():
    dfa = DFA(
        "a",
        {"c"},
        {"a": {0: "a", 1: "b"}, "b": {0: "b", 1: "b"}, "c": {0: "a", 1: "c"}},
    )
    assert reachable_from(dfa, "a") == {"a", "b"}
    assert reachable_from(dfa, "b", inclusive=False) == {"b"}
    assert reachable_from(dfa, "c") == {"a", "b", "c"}
    assert reachable_from(dfa, "c", inclusive=False) == {"a", "b", "c"}
