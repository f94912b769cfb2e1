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

import itertools
import operator
from collections import deque
from types import MappingProxyType

from cached_property import cached_property
from loguru import logger

from dfakit.util import make_binary_tree

# Exceptions


class AutomatonError(Exception):
    """
    Base class for errors raised by the automata package.

    Attributes:
        message -- explanation of the error
    """

    def __init__(self, message):
        self.message = message
        super().__init__(message)

    def __str__(self):
        return self.message


class MalformedAutomatonError(AutomatonError):
    """
    Raised when a DFA is constructed from an inconsistent description.

    A well-formed DFA has a total transition function over its state space and
    alphabet, and all of its initial, terminal and destination states belong to
    the state space. Any violation is reported when the DFA is built, never when
    it is run.
    """


class IncompleteTransitionError(MalformedAutomatonError):
    """
    Raised when the transition function is not defined for every state/label
    pair.

    Attributes:
        missing -- list of the (state, label) pairs with no transition
    """

    def __init__(self, message, missing=()):
        super().__init__(message)
        self.missing = list(missing)


class UnknownStateError(MalformedAutomatonError):
    """Raised when a DFA refers to a state outside its state space."""


class AlphabetMismatchError(AutomatonError):
    """Raised when two automata over different alphabets are combined."""


class UnknownLabelError(AutomatonError, KeyError):
    """
    Raised when a table DFA is asked to step on a label (or from a state) that
    lies outside the domain of its transition table.

    This is a subclass of ``KeyError``, so code that treats the transition
    table as a mapping can catch it the usual way.
    """


class UnboundedAutomatonError(AutomatonError):
    """
    Raised when an operation needs the state space or the alphabet of a DFA
    but the DFA was built from a transition function without them.
    """


# Helpers


def _describe_pairs(pairs, limit=10):
    shown = ", ".join(f"({src!r}, {label!r})" for src, label in pairs[:limit])
    if len(pairs) > limit:
        shown += f", ... ({len(pairs) - limit} more)"
    return shown


def _freeze_table(transitions):
    return MappingProxyType(
        {src: MappingProxyType(dict(trans)) for src, trans in transitions.items()}
    )


def sort_if_possible(items):
    """
    Returns the given labels or states as a list, sorted when they are
    mutually comparable and in iteration order otherwise.
    """
    items = list(items)
    try:
        return sorted(items)
    except TypeError:
        return items


# Automaton


class DFA:
    """
    Deterministic Finite Automaton (DFA) class.

    A DFA is defined by an initial state, a set of terminal (accepting) states
    and a total transition function that maps every (state, label) pair to
    exactly one successor state. States and labels may be any hashable values.

    A DFA is immutable once constructed. The operations that combine automata
    (:func:`complement`, :func:`product`, :func:`intersection`, :func:`union`)
    always return a new DFA and reuse the transition functions of their
    operands by composition.

    Attributes:
        initial (object): The initial state of the DFA.
        transitions (mapping or None): The read-only transition table, mapping
            source states to mappings of labels and destination states, or None
            when the DFA was built from a transition function.
        states (frozenset or None): The state space, or None if unknown.
        alphabet (frozenset or None): The alphabet, or None if unknown.

    Methods:
        start(): Returns the initial state of the DFA.
        next_state(src, label): Returns the successor of a state on a label.
        is_final(state): Checks if a state is a terminal state.
        run(state, labels, debug=False): Returns the state reached from a
            state after consuming a sequence of labels.
        accept(labels, debug=False): Checks if a sequence is accepted.
        all_states(): Returns a set of all states.
        all_labels(): Returns a set of all labels.

    Example:
        >>> ends_in_one = DFA(
        ...     "A",
        ...     {"B"},
        ...     {"A": {0: "A", 1: "B"}, "B": {0: "A", 1: "B"}},
        ... )
        >>> ends_in_one.accept([1, 0, 1])
        True
        >>> ends_in_one.accept([1, 0])
        False
    """

    def __init__(
        self, initial, final_states, transition, states=None, alphabet=None, check=True
    ):
        """
        Initializes a new instance of the DFA class.

        Args:
            initial (object): The initial state of the DFA.
            final_states (iterable or callable): Either the terminal states, or
                a total predicate taking a state and returning a bool.
            transition (dict or callable): Either a transition table of the
                form ``{src: {label: dest}}``, or a total function taking a
                state and a label and returning the successor state.
            states (iterable, optional): The state space. Inferred from the
                table when a table is given.
            alphabet (iterable, optional): The alphabet. Inferred from the table
                when a table is given.
            check (bool, optional): Whether to validate the description. The
                combinators pass False because their operands are already
                validated. Defaults to True.

        Raises:
            IncompleteTransitionError: If the transition function is not total
                over the state space and alphabet.
            UnknownStateError: If the initial state, a terminal state or a
                destination state is outside the state space.
            MalformedAutomatonError: If the table uses a label outside an
                explicitly given alphabet, or the terminal predicate does not
                return a bool.
        """
        self.initial = initial

        if callable(transition):
            self.transitions = None
            self._step = transition
            self.states = frozenset(states) if states is not None else None
            self.alphabet = frozenset(alphabet) if alphabet is not None else None
        else:
            if check or not isinstance(transition, MappingProxyType):
                transition = _freeze_table(transition)
            self.transitions = transition
            self._step = self._table_step

            if states is None:
                states = {initial}
                states.update(transition)
                for trans in transition.values():
                    states.update(trans.values())
            if alphabet is None:
                alphabet = set()
                for trans in transition.values():
                    alphabet.update(trans)
            self.states = frozenset(states)
            self.alphabet = frozenset(alphabet)

        if callable(final_states):
            self._final_set = None
            self._final_test = final_states
        else:
            self._final_set = frozenset(final_states)
            self._final_test = self._final_set.__contains__

        if check:
            self._validate()

    def __repr__(self):
        size = len(self.states) if self.states is not None else "?"
        return f"<{type(self).__name__} initial={self.initial!r} states={size}>"

    def __len__(self):
        """
        Returns the number of states in the state space.

        Raises:
            UnboundedAutomatonError: If the state space is unknown.
        """
        return len(self.all_states())

    def __bool__(self):
        return True

    # Language operators

    def __invert__(self):
        return complement(self)

    def __and__(self, other):
        return intersection(self, other)

    def __or__(self, other):
        return union(self, other)

    def __sub__(self, other):
        return difference(self, other)

    def __xor__(self, other):
        return symmetric_difference(self, other)

    # Validation

    def _validate(self):
        states = self.states
        initial = self.initial

        if states is not None and initial not in states:
            raise UnknownStateError(
                f"Initial state {initial!r} is not in the state space"
            )

        if self.transitions is not None:
            self._validate_table()
        elif states is not None and self.alphabet is not None:
            self._validate_function()

        if states is not None:
            if self._final_set is not None:
                unknown = self._final_set - states
                if unknown:
                    raise UnknownStateError(
                        "Terminal states not in the state space: "
                        + ", ".join(repr(s) for s in unknown)
                    )
            else:
                for state in states:
                    result = self._final_test(state)
                    if not isinstance(result, bool):
                        raise MalformedAutomatonError(
                            f"Terminal predicate returned {result!r} for state "
                            f"{state!r}, expected a bool"
                        )

    def _validate_table(self):
        transitions = self.transitions
        states = self.states
        alphabet = self.alphabet

        for src, trans in transitions.items():
            if src not in states:
                raise UnknownStateError(
                    f"Transition source {src!r} is not in the state space"
                )
            for label, dest in trans.items():
                if label not in alphabet:
                    raise MalformedAutomatonError(
                        f"Transition {src!r} -{label!r}-> {dest!r} uses a label "
                        f"outside the alphabet"
                    )
                if dest not in states:
                    raise UnknownStateError(
                        f"Transition {src!r} -{label!r}-> {dest!r} leads outside "
                        f"the state space"
                    )

        missing = []
        for src in states:
            trans = transitions.get(src, {})
            for label in alphabet:
                if label not in trans:
                    missing.append((src, label))
        if missing:
            raise IncompleteTransitionError(
                f"No transition for {len(missing)} state/label pair(s): "
                + _describe_pairs(missing),
                missing,
            )

    def _validate_function(self):
        states = self.states
        step = self._step

        missing = []
        for src in states:
            for label in self.alphabet:
                try:
                    dest = step(src, label)
                except LookupError:
                    missing.append((src, label))
                    continue
                if dest not in states:
                    raise UnknownStateError(
                        f"Transition {src!r} -{label!r}-> {dest!r} leads outside "
                        f"the state space"
                    )
        if missing:
            raise IncompleteTransitionError(
                f"Transition function is undefined for {len(missing)} "
                f"state/label pair(s): " + _describe_pairs(missing),
                missing,
            )

    # Stepping

    def _table_step(self, src, label):
        try:
            trans = self.transitions[src]
        except KeyError:
            raise UnknownLabelError(
                f"State {src!r} is not in the transition table"
            ) from None
        try:
            return trans[label]
        except KeyError:
            raise UnknownLabelError(
                f"Label {label!r} is not in the alphabet of this automaton"
            ) from None

    def start(self):
        """
        Returns the initial state of the DFA.

        Returns:
            object: The initial state of the DFA.
        """
        return self.initial

    def next_state(self, src, label):
        """
        Returns the next state of the DFA given the current state and the
        input label.

        Args:
            src (object): The current state.
            label (object): The input label.

        Returns:
            object: The next state. Since the transition function is total,
                this is never a missing value.

        Raises:
            UnknownLabelError: If the DFA is backed by a table and the state or
                label is outside its domain.

        Example:
            >>> dfa = DFA("A", {"B"}, {"A": {"a": "B"}, "B": {"a": "A"}})
            >>> dfa.next_state("A", "a")
            'B'
        """
        return self._step(src, label)

    def is_final(self, state):
        """
        Checks if the specified state is a terminal state of the DFA.

        Args:
            state (object): The state to check.

        Returns:
            bool: True if the state is a terminal state, False otherwise.
        """
        return bool(self._final_test(state))

    def run(self, state, labels, debug=False):
        """
        Returns the state reached by starting at ``state`` and consuming
        ``labels`` one at a time.

        The result is a left fold of :meth:`next_state` over the labels, so it
        is unique for the given arguments and an empty sequence returns
        ``state`` unchanged. Running ``left + right`` is the same as running
        ``right`` from the state reached after ``left``.

        Args:
            state (object): The state to start from. This need not be the
                initial state.
            labels (iterable): The finite sequence of labels to consume.
            debug (bool, optional): Whether to log each step at DEBUG level.
                Defaults to False.

        Returns:
            object: The resulting state.
        """
        step = self._step
        for label in labels:
            dest = step(state, label)
            if debug:
                logger.debug("{!r} -> {!r} -> {!r}", state, label, dest)
            state = dest
        return state

    def accept(self, labels, debug=False):
        """
        Checks if a given sequence of labels is accepted by the automaton.

        Args:
            labels (iterable): The sequence to check. A string is treated as a
                sequence of characters.
            debug (bool, optional): Whether to log each step. Defaults to False.

        Returns:
            bool: True if running the sequence from the initial state ends in a
                terminal state, False otherwise.
        """
        return self.is_final(self.run(self.initial, labels, debug=debug))

    # Finite views

    def all_states(self):
        """
        Returns a set of all states in the automaton.

        Raises:
            UnboundedAutomatonError: If the DFA was built without a state space.
        """
        if self.states is None:
            raise UnboundedAutomatonError(f"{self!r} has no known state space")
        return set(self.states)

    def all_labels(self):
        """
        Returns a set of all labels in the alphabet of the automaton.

        Raises:
            UnboundedAutomatonError: If the DFA was built without an alphabet.
        """
        if self.alphabet is None:
            raise UnboundedAutomatonError(f"{self!r} has no known alphabet")
        return set(self.alphabet)

    @cached_property
    def final_states(self):
        """
        The terminal states as a frozenset. Computed from the terminal predicate
        when the DFA was built with one.
        """
        if self._final_set is not None:
            return self._final_set
        test = self._final_test
        return frozenset(state for state in self.all_states() if test(state))

    @cached_property
    def table(self):
        """
        The transition function tabulated as ``{src: {label: dest}}`` over the
        whole state space and alphabet.
        """
        if self.transitions is not None:
            return self.transitions
        labels = self.all_labels()
        step = self._step
        return _freeze_table(
            {
                src: {label: step(src, label) for label in labels}
                for src in self.all_states()
            }
        )


# Execution functions


def run(dfa, state, labels, debug=False):
    """
    Returns the state reached by ``dfa`` from ``state`` after consuming
    ``labels``. See :meth:`DFA.run`.
    """
    return dfa.run(state, labels, debug=debug)


def run_stepwise(dfa, state, labels):
    """
    Yields every state visited while running ``labels`` from ``state``,
    starting with ``state`` itself. The last state yielded is the result of
    :func:`run`.
    """
    yield state
    for label in labels:
        state = dfa.next_state(state, label)
        yield state


def accepts(dfa, labels, debug=False):
    """
    Checks if ``dfa`` accepts the sequence ``labels``. See :meth:`DFA.accept`.
    """
    return dfa.accept(labels, debug=debug)


# Useful functions


def reachable_from(dfa, src, inclusive=True):
    """
    Returns the set of states that can be reached from the specified source
    state by following transitions on any label.

    Args:
        dfa (DFA): The automaton to explore.
        src (object): The source state.
        inclusive (bool, optional): Specifies whether the source state should
            be included in the result even when no path leads back to it.
            Defaults to True.

    Returns:
        set: The set of reachable states.

    Raises:
        UnboundedAutomatonError: If the DFA has no known alphabet.
    """
    labels = dfa.all_labels()

    reached = set()
    if inclusive:
        reached.add(src)

    stack = [src]
    seen = {src}
    while stack:
        state = stack.pop()
        for label in labels:
            dest = dfa.next_state(state, label)
            reached.add(dest)
            if dest not in seen:
                seen.add(dest)
                stack.append(dest)
    return reached


def explore(dfa):
    """
    Materializes the part of an automaton that is reachable from its initial
    state as a new table-backed DFA.

    This is the on-demand alternative to the full Cartesian product built by
    :func:`product`: only the state pairs actually reachable on some input are
    created. The result accepts exactly the same language as ``dfa``.

    Args:
        dfa (DFA): The automaton to explore. It may be built from a transition
            function without a known state space, but needs a known alphabet.

    Returns:
        DFA: A table-backed DFA over the reachable states.

    Raises:
        UnboundedAutomatonError: If the DFA has no known alphabet.
    """
    labels = sort_if_possible(dfa.all_labels())
    start = dfa.start()

    transitions = {}
    frontier = deque([start])
    seen = {start}
    while frontier:
        src = frontier.popleft()
        trans = transitions[src] = {}
        for label in labels:
            dest = dfa.next_state(src, label)
            trans[label] = dest
            if dest not in seen:
                seen.add(dest)
                frontier.append(dest)

    final_states = {state for state in seen if dfa.is_final(state)}
    logger.debug(
        "Explored {} reachable states of {!r} ({} terminal)",
        len(seen),
        dfa,
        len(final_states),
    )
    return DFA(
        start,
        final_states,
        transitions,
        states=seen,
        alphabet=dfa.alphabet,
        check=False,
    )


def renumber_dfa(dfa, base=0):
    """
    Renumber the states of a DFA with consecutive integers starting from a
    given base number.

    States reachable from the initial state are numbered first in
    breadth-first order, so the initial state always receives ``base``. Any
    unreachable states of a known state space are numbered after them.

    Args:
        dfa (DFA): The DFA to renumber.
        base (int, optional): The base number to start renumbering from.
            Defaults to 0.

    Returns:
        DFA: A table-backed DFA over integer states accepting the same
            language.

    Example:
        >>> dfa = DFA("A", {"B"}, {"A": {"a": "B"}, "B": {"a": "A"}})
        >>> renumbered = renumber_dfa(dfa, base=10)
        >>> renumbered.start(), sorted(renumbered.final_states)
        (10, [11])
    """
    c = itertools.count(base)
    mapping = {}

    def remap(state):
        if state in mapping:
            newnum = mapping[state]
        else:
            newnum = next(c)
            mapping[state] = newnum
        return newnum

    reachable = explore(dfa)
    transitions = {}
    for src, trans in reachable.transitions.items():
        newsrc = remap(src)
        transitions[newsrc] = {label: dest for label, dest in trans.items()}
    if dfa.states is not None:
        for state in sort_if_possible(dfa.states - reachable.states):
            remap(state)
            transitions[mapping[state]] = {
                label: dfa.next_state(state, label) for label in reachable.alphabet
            }

    for trans in transitions.values():
        for label, dest in trans.items():
            trans[label] = remap(dest)

    final_states = {mapping[state] for state in mapping if dfa.is_final(state)}
    return DFA(
        mapping[dfa.start()],
        final_states,
        transitions,
        states=mapping.values(),
        alphabet=dfa.alphabet,
        check=False,
    )


# Construction functions


def complement(dfa):
    """
    Compute the complement of a DFA.

    The result has the same initial state and shares the transition function of
    ``dfa``; only the terminal states change. When the terminal states and the
    state space are both explicit, the new terminal set is their difference,
    otherwise the terminal predicate is negated.

    Parameters:
    - dfa (DFA): The DFA to complement.

    Returns:
    - DFA: A DFA accepting exactly the sequences ``dfa`` rejects.

    Example:
    >>> dfa = DFA("A", {"B"}, {"A": {0: "A", 1: "B"}, "B": {0: "A", 1: "B"}})
    >>> complement(dfa).accept([1, 0])
    True
    """
    if dfa.states is not None and dfa._final_set is not None:
        final_states = dfa.states - dfa._final_set
    else:
        is_final = dfa.is_final

        def final_states(state):
            return not is_final(state)

    if dfa.transitions is not None:
        transition = dfa.transitions
    else:
        transition = dfa.next_state

    logger.debug("Built complement of {!r}", dfa)
    return DFA(
        dfa.start(),
        final_states,
        transition,
        states=dfa.states,
        alphabet=dfa.alphabet,
        check=False,
    )


def _common_alphabet(dfa1, dfa2):
    a1 = dfa1.alphabet
    a2 = dfa2.alphabet
    if a1 is None:
        return a2
    if a2 is not None and a1 != a2:
        raise AlphabetMismatchError(
            f"Cannot combine automata over different alphabets: "
            f"{sort_if_possible(a1)!r} and {sort_if_possible(a2)!r}"
        )
    return a1


def product(dfa1, op, dfa2):
    """
    Compute the product of two DFAs.

    The product runs both automata in lockstep: its states are pairs
    ``(state1, state2)``, it starts at the pair of initial states, and on each
    label both components take one step. A pair is terminal when
    ``op(dfa1.is_final(state1), dfa2.is_final(state2))`` is true.

    When both operands have a known state space the product's state space is
    their full Cartesian product, with no reachability pruning, and its
    terminal states are computed eagerly. Otherwise pairs are produced on
    demand as the product is run. Use :func:`explore` to keep only the
    reachable pairs.

    Parameters:
    - dfa1 (DFA): The first DFA.
    - op (function): A binary boolean operator combining terminal-ness of the
      two components, for example ``operator.and_``.
    - dfa2 (DFA): The second DFA.

    Returns:
    - DFA: The product DFA.

    Raises:
    - AlphabetMismatchError: If both alphabets are known and differ.

    Example usage:
    ```
    both = product(ends_in_one, operator.and_, even_length)
    both.accept([1, 0, 1, 1])  # True
    ```
    """
    alphabet = _common_alphabet(dfa1, dfa2)
    next1 = dfa1.next_state
    next2 = dfa2.next_state
    final1 = dfa1.is_final
    final2 = dfa2.is_final

    def transition(state, label):
        state1, state2 = state
        return (next1(state1, label), next2(state2, label))

    def is_final(state):
        state1, state2 = state
        return bool(op(final1(state1), final2(state2)))

    start = (dfa1.start(), dfa2.start())
    if dfa1.states is not None and dfa2.states is not None:
        states = frozenset(itertools.product(dfa1.states, dfa2.states))
        final_states = frozenset(state for state in states if is_final(state))
        logger.debug(
            "Built product of {!r} and {!r} over {} states ({} terminal)",
            dfa1,
            dfa2,
            len(states),
            len(final_states),
        )
    else:
        states = None
        final_states = is_final
        logger.debug("Built on-demand product of {!r} and {!r}", dfa1, dfa2)

    return DFA(
        start, final_states, transition, states=states, alphabet=alphabet, check=False
    )


def intersection(dfa1, dfa2):
    """
    Compute the intersection of two deterministic finite automata (DFAs).

    The result accepts exactly the sequences accepted by both ``dfa1`` and
    ``dfa2``.

    Parameters:
    - dfa1 (DFA): The first DFA.
    - dfa2 (DFA): The second DFA.

    Returns:
    - DFA: The product DFA representing the intersection.
    """
    return product(dfa1, operator.and_, dfa2)


intersect = intersection


def union(dfa1, dfa2):
    """
    Computes the union of two deterministic finite automata (DFAs).

    The union is derived from the other constructions by De Morgan's law,
    ``L | M == ~(~L & ~M)``, so its states are pairs just like an intersection.

    Parameters:
    - dfa1 (DFA): The first DFA.
    - dfa2 (DFA): The second DFA.

    Returns:
    - DFA: A DFA accepting the sequences accepted by either operand.
    """
    return complement(intersection(complement(dfa1), complement(dfa2)))


def difference(dfa1, dfa2):
    """Returns a DFA accepting what ``dfa1`` accepts and ``dfa2`` rejects."""
    return product(dfa1, lambda a, b: a and not b, dfa2)


def symmetric_difference(dfa1, dfa2):
    """Returns a DFA accepting what exactly one of the operands accepts."""
    return product(dfa1, operator.xor, dfa2)


def intersection_all(dfas):
    """
    Intersects a non-empty list of DFAs, combining them as a balanced binary
    tree of products.

    Raises:
        ValueError: If the list is empty.
    """
    return make_binary_tree(intersection, list(dfas))


def union_all(dfas):
    """
    Unites a non-empty list of DFAs, combining them as a balanced binary tree.

    Raises:
        ValueError: If the list is empty.
    """
    return make_binary_tree(union, list(dfas))
