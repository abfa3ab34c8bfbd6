from __future__ import annotations

from typing import Iterable, Iterator, Optional, Protocol

import attr
import dfa
import funcy as fn
import networkx as nx

from mealy_etf import Input, Output, State, Transition
from mealy_etf.index_map import tagged


__all__ = ['Alphabet', 'ExplicitMealy', 'MealyMachine']


MealyDict = dict[State, dict[Input, tuple[Output, State]]]


class MealyMachine(Protocol):
    @property
    def initial_state(self) -> Optional[State]:
        ...

    def states(self) -> Iterable[State]:
        """Yields every state once, in a stable order."""
        ...

    def transition(self, state: State, symbol: Input) -> Transition:
        """Returns (output, successor) or None if undefined."""
        ...


@attr.frozen
class Alphabet:
    """Totally ordered input alphabet.

    Like `IndexMap`, symbols of different types are distinct even if they
    compare equal.
    """
    symbols: tuple[Input, ...] = attr.ib(converter=tuple)
    _positions: dict[tuple[type, Input], int] = attr.ib(
        init=False, eq=False, repr=False
    )

    @_positions.default
    def _index_symbols(self) -> dict[tuple[type, Input], int]:
        return {tagged(symbol): i for i, symbol in enumerate(self.symbols)}

    @symbols.validator
    def _check_distinct(self, _, symbols: tuple[Input, ...]) -> None:
        if len(set(map(tagged, symbols))) != len(symbols):
            raise ValueError(f'Alphabet has repeated symbols: {symbols}')

    def __len__(self) -> int:
        return len(self.symbols)

    def __iter__(self) -> Iterator[Input]:
        return iter(self.symbols)

    def __getitem__(self, idx: int) -> Input:
        return self.symbols[idx]

    def __contains__(self, symbol: Input) -> bool:
        return tagged(symbol) in self._positions

    def index(self, symbol: Input) -> int:
        return self._positions[tagged(symbol)]


def add_transition(
        graph: MealyDict,
        state: State,
        symbol: Input,
        output: Output,
        successor: State,
    ) -> None:
    kids = graph.setdefault(state, {})
    graph.setdefault(successor, {})
    if kids.get(symbol, (output, successor)) != (output, successor):
        raise ValueError(f'{state=} has two transitions on {symbol=}.')
    kids[symbol] = (output, successor)


@attr.frozen
class ExplicitMealy:
    """Mealy machine with an explicit (possibly partial) transition table.

    States are the keys of `graph`, in insertion order.
    """
    start: Optional[State]
    graph: MealyDict

    @property
    def initial_state(self) -> Optional[State]:
        return self.start

    def states(self) -> Iterable[State]:
        return iter(self.graph)

    def transition(self, state: State, symbol: Input) -> Transition:
        return self.graph[state].get(symbol)

    def alphabet(self) -> Alphabet:
        """Inputs used by the machine, in order of first appearance."""
        return Alphabet(fn.distinct(fn.cat(self.graph.values())))

    @staticmethod
    def from_transitions(
            start: State,
            transitions: Iterable[tuple[State, Input, Output, State]],
        ) -> ExplicitMealy:
        """Builds a machine from (state, input, output, successor) tuples.

        The start state comes first; other states follow in order of
        first appearance.
        """
        graph: MealyDict = {start: {}}
        for state, symbol, output, successor in transitions:
            add_transition(graph, state, symbol, output, successor)
        return ExplicitMealy(start=start, graph=graph)

    @staticmethod
    def from_graph(graph: nx.MultiDiGraph, start: State) -> ExplicitMealy:
        """Reads a machine from edges annotated with `input` and `output`."""
        if start not in graph:
            raise ValueError(f'{start=} is not a node of the graph.')

        machine: MealyDict = {node: {} for node in graph.nodes}
        for state, successor, data in graph.edges(data=True):
            add_transition(
                machine, state, data['input'], data['output'], successor
            )
        return ExplicitMealy(start=start, graph=machine)

    @staticmethod
    def from_dfa(lang: dfa.DFA) -> ExplicitMealy:
        """Views a DFA as a Mealy machine emitting the successor's label."""
        graph, start = dfa.dfa2dict(lang)
        machine: MealyDict = {state: {} for state in graph}
        for state, (_, kids) in graph.items():
            for symbol, successor in kids.items():
                machine[state][symbol] = (graph[successor][0], successor)
        return ExplicitMealy(start=start, graph=machine)
