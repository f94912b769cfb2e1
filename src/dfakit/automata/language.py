# Copyright 2026 The dfakit Authors. All rights reserved.
#
# Redistribution and use in source and binary forms, with or without
# modification, are permitted provided that the following conditions are met:
#
#    1. Redistributions of source code must retain the above copyright notice,
#       this list of conditions and the following disclaimer.
#
#    2. Redistributions in binary form must reproduce the above copyright
#       notice, this list of conditions and the following disclaimer in the
#       documentation and/or other materials provided with the distribution.
#
# THIS SOFTWARE IS PROVIDED BY THE DFAKIT AUTHORS ``AS IS'' AND ANY EXPRESS
# OR IMPLIED WARRANTIES, INCLUDING, BUT NOT LIMITED TO, THE IMPLIED
# WARRANTIES OF MERCHANTABILITY AND FITNESS FOR A PARTICULAR PURPOSE ARE
# DISCLAIMED. IN NO EVENT SHALL THE DFAKIT AUTHORS OR CONTRIBUTORS BE LIABLE
# FOR ANY DIRECT, INDIRECT, INCIDENTAL, SPECIAL, EXEMPLARY, OR CONSEQUENTIAL
# DAMAGES (INCLUDING, BUT NOT LIMITED TO, PROCUREMENT OF SUBSTITUTE GOODS OR
# SERVICES; LOSS OF USE, DATA, OR PROFITS; OR BUSINESS INTERRUPTION) HOWEVER
# CAUSED AND ON ANY THEORY OF LIABILITY, WHETHER IN CONTRACT, STRICT
# LIABILITY, OR TORT (INCLUDING NEGLIGENCE OR OTHERWISE) ARISING IN ANY WAY
# OUT OF THE USE OF THIS SOFTWARE, EVEN IF ADVISED OF THE POSSIBILITY OF SUCH
# DAMAGE.
#
# The views and conclusions contained in the software and documentation are
# those of the authors and should not be interpreted as representing official
# policies, either expressed or implied, of the dfakit authors.


"""
Queries about the languages recognized by DFAs.

All of these functions explore the automaton from its initial state and so need
a DFA with a known alphabet. The state space need not be known: on-demand
products built from transition functions work as long as their alphabet is
known.
"""

from collections import deque
from concurrent.futures import ThreadPoolExecutor

from loguru import logger

from dfakit.automata.fsa import (
    difference,
    explore,
    intersection,
    sort_if_possible,
    symmetric_difference,
)
from dfakit.util import now


def _path_to(parents, state):
    path = []
    while parents[state] is not None:
        state, label = parents[state]
        path.append(label)
    path.reverse()
    return tuple(path)


def find_example(dfa):
    """
    Returns a shortest sequence accepted by the automaton, or None if the
    automaton accepts nothing.

    The search is breadth-first from the initial state, trying labels in sorted
    order when they are comparable, so the result is also the first such
    sequence in that order.

    Args:
        dfa (DFA): The automaton to search.

    Returns:
        tuple or None: The labels of an accepted sequence.

    Example:
        >>> find_example(ends_in_one)
        (1,)
    """
    labels = sort_if_possible(dfa.all_labels())
    start = dfa.start()
    if dfa.is_final(start):
        return ()

    parents = {start: None}
    frontier = deque([start])
    while frontier:
        src = frontier.popleft()
        for label in labels:
            dest = dfa.next_state(src, label)
            if dest in parents:
                continue
            parents[dest] = (src, label)
            if dfa.is_final(dest):
                return _path_to(parents, dest)
            frontier.append(dest)
    return None


def is_empty(dfa):
    """Returns True if the automaton accepts no sequence at all."""
    return find_example(dfa) is None


def find_counterexample(dfa1, dfa2):
    """
    Returns a shortest sequence accepted by exactly one of the two automata,
    or None if they recognize the same language.
    """
    return find_example(symmetric_difference(dfa1, dfa2))


def equivalent(dfa1, dfa2):
    """Returns True if both automata recognize the same language."""
    return find_counterexample(dfa1, dfa2) is None


def issubset(dfa1, dfa2):
    """Returns True if every sequence accepted by dfa1 is accepted by dfa2."""
    return is_empty(difference(dfa1, dfa2))


def isdisjoint(dfa1, dfa2):
    """Returns True if no sequence is accepted by both automata."""
    return is_empty(intersection(dfa1, dfa2))


def live_states(dfa):
    """
    Returns the set of states reachable from the initial state from which some
    terminal state can still be reached.
    """
    reachable = explore(dfa)

    incoming = {}
    for src, trans in reachable.transitions.items():
        for dest in trans.values():
            incoming.setdefault(dest, set()).add(src)

    live = set(reachable.final_states)
    stack = list(live)
    while stack:
        state = stack.pop()
        for src in incoming.get(state, ()):
            if src not in live:
                live.add(src)
                stack.append(src)
    return live


def generate_all(dfa, maxlen):
    """
    Generates every sequence of at most ``maxlen`` labels accepted by the
    automaton.

    Sequences are yielded shortest first, and in sorted label order within a
    length when labels are comparable. Branches that can no longer reach a
    terminal state are not expanded.

    Args:
        dfa (DFA): The automaton.
        maxlen (int): The maximum sequence length.

    Yields:
        tuple: The labels of an accepted sequence.

    Raises:
        ValueError: If maxlen is negative.
    """
    if maxlen < 0:
        raise ValueError(f"maxlen must not be negative, got {maxlen}")

    labels = sort_if_possible(dfa.all_labels())
    live = live_states(dfa)

    level = [((), dfa.start())] if dfa.start() in live else []
    length = 0
    while level:
        for seq, state in level:
            if dfa.is_final(state):
                yield seq
        if length == maxlen:
            break
        length += 1

        nextlevel = []
        for seq, state in level:
            for label in labels:
                dest = dfa.next_state(state, label)
                if dest in live:
                    nextlevel.append((seq + (label,), dest))
        level = nextlevel


def accept_all(dfa, sequences, workers=None):
    """
    Checks a batch of sequences against the same automaton.

    Each sequence is run on its own; when ``workers`` is greater than one the
    sequences are distributed over a thread pool. A single sequence is never
    split, since every step depends on the state left by the previous one.

    Args:
        dfa (DFA): The automaton.
        sequences (iterable): The sequences to check.
        workers (int, optional): The number of threads to use. Defaults to
            None, which checks the sequences in the calling thread.

    Returns:
        list: One bool per sequence, in the order of ``sequences``.
    """
    t = now()
    if workers is None or workers <= 1:
        results = [dfa.accept(seq) for seq in sequences]
    else:
        with ThreadPoolExecutor(max_workers=workers) as executor:
            results = list(executor.map(dfa.accept, sequences))
    logger.debug(
        "Checked {} sequences against {!r} in {:0.4f}s",
        len(results),
        dfa,
        now() - t,
    )
    return results
