from typing import Any, Optional

State = Any
Input = Any
Output = Any
Transition = Optional[tuple[Output, State]]  # (output, successor) or None.
NodeId = int    # Node of the ETF transition system.
LetterId = int  # Entry of the extended (input + output) alphabet.

from mealy_etf.errors import *
from mealy_etf.index_map import *
from mealy_etf.mealy import *
from mealy_etf.alternating import *
from mealy_etf.writer import *

__all__ = [
    'Alphabet',
    'ETFError',
    'ExplicitMealy',
    'ExtendedAlphabet',
    'IndexMap',
    'Input',
    'IntermediateNodes',
    'LetterId',
    'MealyMachine',
    'MissingInitialState',
    'NodeId',
    'Output',
    'State',
    'Transition',
    'UnknownStateError',
    'WriteError',
    'dumps',
    'index_states',
    'write_alternating',
    'write_etf',
    'write_header',
    'write_model',
]
