from __future__ import annotations

import io
import logging
from contextlib import contextmanager
from typing import BinaryIO, Iterator, TextIO, Union

from mealy_etf.alternating import emit, index_states, initial_id
from mealy_etf.alternating import write_alternating
from mealy_etf.errors import WriteError
from mealy_etf.mealy import Alphabet, MealyMachine


__all__ = ['dumps', 'write_etf', 'write_header', 'write_model']


logger = logging.getLogger(__name__)

# State vectors are a single `id` slot. Edges carry one label named
# `letter` of sort `letter`, shared by inputs and outputs.
HEADER = (
    'begin state',
    'id:id',
    'end state',
    'begin edge',
    'letter:letter',
    'end edge',
)


def write_header(sink: TextIO) -> None:
    for line in HEADER:
        emit(sink, line)


def write_etf(
        sink: TextIO,
        machine: MealyMachine,
        inputs: Alphabet,
        *,
        header: bool = True,
    ) -> None:
    """Writes machine to an open text sink. The sink is left open."""
    states = index_states(machine)
    initial_id(machine, states)  # Fail before anything reaches the sink.
    if header:
        write_header(sink)
    write_alternating(sink, machine, inputs, states=states)


def is_binary(stream: Union[TextIO, BinaryIO]) -> bool:
    """Tells byte streams apart from text streams, including proxies such
    as `tempfile.NamedTemporaryFile` that are not `io` subclasses."""
    if isinstance(stream, (io.RawIOBase, io.BufferedIOBase)):
        return True
    if isinstance(stream, io.TextIOBase):
        return False
    return 'b' in getattr(stream, 'mode', '')


@contextmanager
def text_sink(stream: Union[TextIO, BinaryIO]) -> Iterator[TextIO]:
    """Yields a UTF-8 text view of stream and closes it on exit."""
    if is_binary(stream):
        sink = io.TextIOWrapper(stream, encoding='utf-8', newline='\n')
    else:
        sink = stream

    try:
        yield sink
    finally:
        try:
            sink.close()
        except OSError as exc:
            logger.error('Unable to flush ETF output: %s', exc)
            raise WriteError(f'Unable to flush ETF output: {exc}') from exc


def write_model(
        stream: Union[TextIO, BinaryIO],
        machine: MealyMachine,
        inputs: Alphabet,
        *,
        header: bool = True,
    ) -> None:
    """Writes machine as an ETF file to stream, then closes stream.

    Binary streams are encoded as UTF-8. The stream is closed even if
    writing fails, in which case the written bytes are not a valid model.
    """
    with text_sink(stream) as sink:
        write_etf(sink, machine, inputs, header=header)


def dumps(
        machine: MealyMachine,
        inputs: Alphabet,
        *,
        header: bool = True,
    ) -> str:
    buff = io.StringIO()
    write_etf(buff, machine, inputs, header=header)
    return buff.getvalue()
