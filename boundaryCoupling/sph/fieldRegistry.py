# -- Per-Particle Field Registry -- #

'''
Named, typed descriptors for per-particle data.

A FieldDescription tells generic tooling (persistence, exporters,
visualization) how to reach one per-particle quantity without knowing
about it at import time. The source of the data is either an array
(or a zero-argument callable returning the owner's current array) or a
getter/setter pair working on single particle indices.

The registry only holds metadata. It never resizes or reorders the
arrays a descriptor points to; that belongs to the owner of the array
(see ResortSynchronizer).

Sean Bowman [02/06/2026]
'''

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Iterator, Union

import numpy as np

from boundaryCoupling.errors import DuplicateFieldError, FieldNotFoundError


class FieldType(Enum):
    '''Kind of per-particle value, with the per-particle component shape.'''

    SCALAR = 'scalar'
    VECTOR3 = 'vector3'
    UINT = 'uint'

    @property
    def componentShape(self) -> tuple[int, ...]:
        return _componentShapes[self]

    @property
    def dtype(self) -> type:
        return np.uint32 if self is FieldType.UINT else np.float64


_componentShapes: dict[FieldType, tuple[int, ...]] = {
    FieldType.SCALAR: (),
    FieldType.VECTOR3: (3,),
    FieldType.UINT: (),
}


ArraySource = Union[np.ndarray, Callable[[], np.ndarray]]


@dataclass(eq=False)
class FieldDescription:
    '''
    Descriptor of one per-particle field.

    Exactly one of `array` or `getter` must be given. Array-backed
    fields take part in resorting; accessor-backed fields are
    computed on demand and cannot be permuted.

    Parameters:
    -----------
    name : str
        Unique field name
    fieldType : FieldType
        Kind of per-particle value
    array : np.ndarray | Callable[[], np.ndarray] | None
        The data array, or a callable returning the current array
        (use a callable when the owner may reallocate on resize)
    getter : Callable[[int], Any] | None
        Per-index read accessor
    setter : Callable[[int, Any], None] | None
        Per-index write accessor (optional, read-only without it)
    storeData : bool
        Whether exporters should write this field
    '''

    name: str
    fieldType: FieldType
    array: ArraySource | None = None
    getter: Callable[[int], Any] | None = None
    setter: Callable[[int, Any], None] | None = None
    storeData: bool = False

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError('Field name must not be empty')
        if (self.array is None) == (self.getter is None):
            raise ValueError(
                f'Field {self.name!r} needs exactly one of array or getter'
            )
        if self.setter is not None and self.getter is None:
            raise ValueError(f'Field {self.name!r} has a setter without a getter')

    @property
    def isArrayBacked(self) -> bool:
        return self.array is not None

    def data(self) -> np.ndarray | None:
        '''The current backing array, or None for accessor-backed fields.'''
        if self.array is None:
            return None
        if callable(self.array):
            return self.array()
        return self.array

    def get(self, i: int) -> Any:
        if self.getter is not None:
            return self.getter(i)
        return self.data()[i]

    def set(self, i: int, value: Any) -> None:
        if self.array is not None:
            self.data()[i] = value
        elif self.setter is not None:
            self.setter(i, value)
        else:
            raise AttributeError(f'Field {self.name!r} is read-only')


class FieldRegistry:
    '''
    Insertion-ordered collection of uniquely named field descriptors.
    '''

    def __init__(self) -> None:
        self._fields: list[FieldDescription] = []
        self._byName: dict[str, FieldDescription] = {}

    def addField(self, field: FieldDescription) -> None:
        '''
        Append a descriptor.

        Raises:
        -------
        DuplicateFieldError : If a field with the same name exists
        '''
        if field.name in self._byName:
            raise DuplicateFieldError(f'Field {field.name!r} is already registered')
        self._fields.append(field)
        self._byName[field.name] = field

    def getField(self, key: str | int) -> FieldDescription:
        '''
        Look up a descriptor by name or by ordinal position.

        Lookup by position does not validate the index beyond what
        list indexing does.

        Raises:
        -------
        FieldNotFoundError : If no field has the given name
        '''
        if isinstance(key, str):
            try:
                return self._byName[key]
            except KeyError:
                raise FieldNotFoundError(f'No field named {key!r}') from None
        return self._fields[key]

    def getFields(self) -> tuple[FieldDescription, ...]:
        return tuple(self._fields)

    def removeFieldByName(self, name: str) -> None:
        '''Remove the named descriptor; unknown names are ignored.'''
        field = self._byName.pop(name, None)
        if field is not None:
            self._fields.remove(field)

    def numberOfFields(self) -> int:
        return len(self._fields)

    def fieldNames(self) -> list[str]:
        return [f.name for f in self._fields]

    def arrayFields(self) -> list[FieldDescription]:
        '''Descriptors whose data lives in an array.'''
        return [f for f in self._fields if f.isArrayBacked]

    def __contains__(self, name: object) -> bool:
        return name in self._byName

    def __len__(self) -> int:
        return len(self._fields)

    def __iter__(self) -> Iterator[FieldDescription]:
        return iter(list(self._fields))
