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


import random

from dfakit.automata.fsa import DFA


def random_dfa(rng=None, size=4, alphabet=(0, 1), prefix="q"):
    """
    Returns a random table-backed DFA with ``size`` states named
    ``prefix + number`` over the given alphabet. Every state has a transition
    on every label, so the result is always well formed.

    Args:
        rng (random.Random, optional): The random source. Defaults to a new
            unseeded generator.
        size (int, optional): The number of states. Defaults to 4.
        alphabet (sequence, optional): The labels. Defaults to ``(0, 1)``.
        prefix (str, optional): The prefix of the state names. Defaults to "q".
    """
    rng = rng or random.Random()
    states = [f"{prefix}{i}" for i in range(size)]
    transitions = {
        src: {label: rng.choice(states) for label in alphabet} for src in states
    }
    final_states = {state for state in states if rng.random() < 0.5}
    return DFA(rng.choice(states), final_states, transitions, alphabet=alphabet)


def random_sequences(rng=None, count=50, maxlen=12, alphabet=(0, 1)):
    """Returns ``count`` random label lists of length 0 to ``maxlen``."""
    rng = rng or random.Random()
    return [
        [rng.choice(alphabet) for _ in range(rng.randint(0, maxlen))]
        for _ in range(count)
    ]


def ends_in_one():
    """The two-state DFA over {0, 1} accepting sequences ending in 1."""
    return DFA(
        "A",
        {"B"},
        {"A": {0: "A", 1: "B"}, "B": {0: "A", 1: "B"}},
    )


def even_length():
    """The two-state DFA over {0, 1} accepting sequences of even length."""
    return DFA(
        "even",
        {"even"},
        {"even": {0: "odd", 1: "odd"}, "odd": {0: "even", 1: "even"}},
    )
