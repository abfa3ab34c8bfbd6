"""Mealy machines in ETF with alternating edge semantics.

Alternating means every edge of the written transition system carries a
single label. A Mealy transition s --i/o--> t is split in two:

    s --i--> (o, t) --o--> t

where (o, t) is an intermediate node shared by all transitions that emit o
and lead to t. Inputs and outputs are written as one extended alphabet of
sort `letter`: inputs first, in alphabet order, then outputs in the order
they are discovered. Note that alternating semantics may change the outcome
of temporal formulae checked against the written system.
"""
from __future__ import annotations

import logging
from typing import Iterable, Optional, TextIO

import attr

from mealy_etf import Input, LetterId, NodeId, Output, State
from mealy_etf.errors import MissingInitialState, UnknownStateError
from mealy_etf.errors import WriteError
from mealy_etf.index_map import IndexMap
from mealy_etf.mealy import Alphabet, MealyMachine


__all__ = [
    'ExtendedAlphabet',
    'IntermediateNodes',
    'index_states',
    'initial_id',
    'write_alternating',
]


logger = logging.getLogger(__name__)


def emit(sink: TextIO, line: str) -> None:
    # Closed sinks raise ValueError rather than OSError.
    try:
        sink.write(f'{line}\n')
    except (OSError, ValueError) as exc:
        logger.error('ETF sink rejected %r: %s', line, exc)
        raise WriteError(f'Unable to write ETF output: {exc}') from exc


def write_section(
        sink: TextIO,
        name: str,
        lines: Iterable[str],
        end: Optional[str] = None,
    ) -> None:
    emit(sink, f'begin {name}')
    for line in lines:
        emit(sink, line)
    emit(sink, f'end {name if end is None else end}')


def index_states(machine: MealyMachine) -> IndexMap:
    """Numbers states 0..n-1 in the machine's iteration order."""
    states = IndexMap()
    for state in machine.states():
        states.id_of(state)
    logger.debug('Indexed %d states.', len(states))
    return states


def initial_id(machine: MealyMachine, states: IndexMap) -> NodeId:
    start = machine.initial_state
    idx = None if start is None else states.get(start)
    if idx is None:
        raise MissingInitialState(f'{start=} is not a state of the machine.')
    return idx


@attr.define
class ExtendedAlphabet:
    """Inputs followed by outputs, numbered as one alphabet."""
    inputs: Alphabet
    outputs: IndexMap = attr.ib()

    @outputs.default
    def _outputs(self) -> IndexMap:
        return IndexMap(offset=len(self.inputs))

    @property
    def size(self) -> int:
        return len(self.inputs) + len(self.outputs)

    def input_index(self, symbol: Input) -> LetterId:
        return self.inputs.index(symbol)

    def index_of(self, output: Output) -> LetterId:
        """Returns the letter of output, allocating it on first sight."""
        return self.outputs.id_of(output)

    def label(self, letter: LetterId) -> Input | Output:
        if 0 <= letter < len(self.inputs):
            return self.inputs[letter]
        return self.outputs.key_of(letter)

    def labels(self) -> Iterable[Input | Output]:
        yield from self.inputs
        yield from self.outputs


@attr.define
class IntermediateNodes:
    """Intermediate nodes, one per distinct (output, successor).

    Nodes are keyed by the output's letter and the successor's state id,
    so outputs are told apart exactly as the alphabet tells them apart.
    Node ids continue after the original states. The single outgoing edge
    of a node is written to the sink when the node is allocated, so it
    always precedes the first input edge pointing at it.
    """
    sink: TextIO
    states: IndexMap
    letters: ExtendedAlphabet
    nodes: IndexMap = attr.ib()

    @nodes.default
    def _nodes(self) -> IndexMap:
        return IndexMap(offset=len(self.states))

    def __len__(self) -> int:
        return len(self.nodes)

    def resolve(self, output: Output, successor: State) -> NodeId:
        target = self.states.get(successor)
        if target is None:
            raise UnknownStateError(f'{successor=} is not an indexed state.')

        # A new output always comes with a new node, so letters are still
        # allocated in node discovery order.
        letter = self.letters.index_of(output)
        key = (letter, target)
        node = self.nodes.get(key)
        if node is not None:
            return node

        node = self.nodes.id_of(key)
        logger.debug('New intermediate node %d for %r.', node, key)
        emit(self.sink, f'{node}/{target} {letter}')
        return node

    def labels(self) -> Iterable[str]:
        inverse = self.nodes.inverse
        for node in self.nodes.ids():
            key = inverse.get(node)
            assert key is not None, f'Intermediate node {node} has no key.'
            letter, target = key
            output = self.letters.label(letter)
            successor = self.states.key_of(target)
            yield f'({output},{successor})'


def write_transitions(
        sink: TextIO,
        machine: MealyMachine,
        states: IndexMap,
        letters: ExtendedAlphabet,
    ) -> tuple[IntermediateNodes, int]:
    """Writes the trans section. Returns the nodes and the edge count.

    States are visited in id order and inputs in alphabet order. This
    order fixes the ids given to outputs and intermediate nodes.
    """
    nodes = IntermediateNodes(sink=sink, states=states, letters=letters)
    n_edges = 0

    emit(sink, 'begin trans')
    for state in states:
        source = states.id_of(state)
        for symbol in letters.inputs:
            transition = machine.transition(state, symbol)
            if transition is None:
                continue
            output, successor = transition
            node = nodes.resolve(output, successor)
            emit(sink, f'{source}/{node} {letters.input_index(symbol)}')
            n_edges += 1
    emit(sink, 'end trans')

    return nodes, n_edges + len(nodes)


def quoted(labels: Iterable[object]) -> Iterable[str]:
    return (f'"{label}"' for label in labels)


def write_alternating(
        sink: TextIO,
        machine: MealyMachine,
        inputs: Alphabet,
        states: Optional[IndexMap] = None,
    ) -> None:
    """Writes the init, trans, sort id and sort letter sections.

    A prebuilt state index may be passed in; it must come from
    `index_states(machine)`.
    """
    if states is None:
        states = index_states(machine)
    start = initial_id(machine, states)

    write_section(sink, 'init', [str(start)])

    letters = ExtendedAlphabet(inputs)
    nodes, n_edges = write_transitions(sink, machine, states, letters)

    node_labels = [*map(str, states), *nodes.labels()]
    write_section(sink, 'sort id', quoted(node_labels), end='sort')
    write_section(sink, 'sort letter', quoted(letters.labels()), end='sort')

    logger.debug(
        'Wrote %d states, %d intermediate nodes, %d inputs, '
        '%d outputs and %d edges.',
        len(states), len(nodes), len(inputs), len(letters.outputs), n_edges,
    )
