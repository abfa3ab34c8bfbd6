from __future__ import annotations

from typing import Any, Hashable, Iterator, Mapping, Optional

import attr
from bidict import bidict


__all__ = ['IndexMap']


def tagged(key: Hashable) -> tuple[type, Hashable]:
    return type(key), key


@attr.define
class IndexMap:
    """Assigns dense, insertion ordered integer ids to hashable keys.

    Ids start at `offset` and grow by one for each new key. The map is
    append-only: `id_of` is the only mutation and keys are never removed.

    Keys of different types never share an id, even if they compare equal
    (e.g. `1` and `True`). Only the key's own type is considered, not the
    types of values nested inside it.
    """
    offset: int = 0
    _ids: bidict = attr.ib(factory=bidict, init=False, repr=False)

    def __len__(self) -> int:
        return len(self._ids)

    def __contains__(self, key: Hashable) -> bool:
        return tagged(key) in self._ids

    def __iter__(self) -> Iterator[Any]:
        """Yields keys in id order."""
        for idx in self.ids():
            yield self._ids.inverse[idx][1]

    def ids(self) -> range:
        return range(self.offset, self.offset + len(self))

    @property
    def inverse(self) -> Mapping[int, Any]:
        return {idx: key for (_, key), idx in self._ids.items()}

    def get(self, key: Hashable) -> Optional[int]:
        """Returns the id of key without allocating one."""
        return self._ids.get(tagged(key))

    def id_of(self, key: Hashable) -> int:
        """Returns the id of key, allocating the next one if key is new."""
        idx = self.get(key)
        if idx is None:
            idx = self._ids[tagged(key)] = self.offset + len(self._ids)
        return idx

    def key_of(self, idx: int) -> Any:
        if idx not in self._ids.inverse:
            raise KeyError(f'{idx=} was never allocated.')
        return self._ids.inverse[idx][1]
