import io
import tempfile

import pytest

from mealy_etf import Alphabet, ExplicitMealy
from mealy_etf import MissingInitialState, WriteError
from mealy_etf import dumps, write_model


MACHINE = ExplicitMealy.from_transitions('A', [
    ('A', 'x', 1, 'B'),
    ('B', 'x', 1, 'B'),
])
INPUTS = Alphabet(['x'])

HEADER = [
    'begin state',
    'id:id',
    'end state',
    'begin edge',
    'letter:letter',
    'end edge',
]
BODY = [
    'begin init',
    '0',
    'end init',
    'begin trans',
    '2/1 1',
    '0/2 0',
    '1/2 0',
    'end trans',
    'begin sort id',
    '"A"',
    '"B"',
    '"(1,B)"',
    'end sort',
    'begin sort letter',
    '"x"',
    '"1"',
    'end sort',
]


class FlakySink(io.StringIO):
    """Fails after accepting `budget` writes."""

    def __init__(self, budget):
        super().__init__()
        self.budget = budget

    def write(self, text):
        if self.budget == 0:
            raise OSError('device full')
        self.budget -= 1
        return super().write(text)


def test_dumps():
    assert dumps(MACHINE, INPUTS).splitlines() == HEADER + BODY
    assert dumps(MACHINE, INPUTS, header=False).splitlines() == BODY


def test_write_model_binary(tmp_path):
    path = tmp_path / 'mealy.etf'
    stream = open(path, 'wb')
    write_model(stream, MACHINE, INPUTS)

    assert stream.closed
    assert path.read_bytes().decode('utf-8').splitlines() == HEADER + BODY


def test_write_model_text(tmp_path):
    path = tmp_path / 'mealy.etf'
    machine = ExplicitMealy.from_transitions('→', [('→', 'ä', 'ö', '→')])
    stream = open(path, 'w', encoding='utf-8')
    write_model(stream, machine, Alphabet(['ä']), header=False)

    assert stream.closed
    lines = path.read_text(encoding='utf-8').splitlines()
    assert lines[-8:] == [
        'begin sort id',
        '"→"',
        '"(ö,→)"',
        'end sort',
        'begin sort letter',
        '"ä"',
        '"ö"',
        'end sort',
    ]


def test_write_model_failure_closes_sink():
    sink = FlakySink(budget=10)
    with pytest.raises(WriteError) as info:
        write_model(sink, MACHINE, INPUTS)

    assert isinstance(info.value.__cause__, OSError)
    assert sink.closed


def test_missing_initial_state_writes_nothing():
    machine = ExplicitMealy(start='Q', graph={'A': {}})
    sink = io.StringIO()
    with pytest.raises(MissingInitialState):
        dumps(machine, INPUTS)

    with pytest.raises(MissingInitialState):
        write_model(sink, machine, INPUTS)
    assert sink.closed


class BrokenDisk(io.BytesIO):
    def write(self, data):
        raise OSError('disk gone')


def test_write_model_named_temporary_file(tmp_path):
    stream = tempfile.NamedTemporaryFile(
        'w', encoding='utf-8', dir=tmp_path, suffix='.etf', delete=False
    )
    write_model(stream, MACHINE, INPUTS)

    assert stream.closed
    with open(stream.name, encoding='utf-8') as etf:
        assert etf.read().splitlines() == HEADER + BODY


def test_write_model_spooled_text():
    stream = tempfile.SpooledTemporaryFile(mode='w')
    write_model(stream, MACHINE, INPUTS)
    assert stream.closed


def test_write_model_flush_failure_closes_stream():
    # Lines are buffered by the UTF-8 wrapper and only reach the
    # stream when it is flushed on close.
    stream = BrokenDisk()
    with pytest.raises(WriteError) as info:
        write_model(stream, MACHINE, INPUTS)

    assert isinstance(info.value.__cause__, OSError)
    assert stream.closed
