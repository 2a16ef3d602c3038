# -- Binary Stream Reader / Writer -- #

'''
Sequential binary I/O for simulation state.

Untyped, headerless streams: the writer appends scalars and raw
array buffers, the reader must request the same dtypes and shapes in
the same order. Values are stored little-endian via NumPy's
tobytes / frombuffer, so files are portable across platforms.

Works on any binary file object (open file, io.BytesIO) or opens a
path itself:

    with BinaryFileWriter.open('state.bin') as writer:
        model.saveState(writer)

Sean Bowman [02/06/2026]
'''

from __future__ import annotations

from typing import BinaryIO

import numpy as np


def _littleEndian(dtype: np.dtype | type) -> np.dtype:
    return np.dtype(dtype).newbyteorder('<')


class BinaryFileWriter:
    '''
    Appends scalars and buffers to a binary stream.

    Parameters:
    -----------
    stream : BinaryIO
        Writable binary file object
    '''

    def __init__(self, stream: BinaryIO) -> None:
        self._stream = stream
        self._ownsStream = False

    @classmethod
    def open(cls, path: str) -> BinaryFileWriter:
        writer = cls(open(path, 'wb'))
        writer._ownsStream = True
        return writer

    def write(self, value: float | int | bool, dtype: np.dtype | type) -> None:
        '''Write one scalar with the given dtype.'''
        self._stream.write(np.array(value, dtype=_littleEndian(dtype)).tobytes())

    def writeBuffer(self, array: np.ndarray) -> None:
        '''Write the raw contents of an array (C order, no shape info).'''
        array = np.asarray(array)
        self._stream.write(
            np.ascontiguousarray(array, dtype=_littleEndian(array.dtype)).tobytes()
        )

    def close(self) -> None:
        if self._ownsStream:
            self._stream.close()

    def __enter__(self) -> BinaryFileWriter:
        return self

    def __exit__(self, *excInfo) -> None:
        self.close()


class BinaryFileReader:
    '''
    Reads scalars and buffers written by BinaryFileWriter.

    Parameters:
    -----------
    stream : BinaryIO
        Readable binary file object
    '''

    def __init__(self, stream: BinaryIO) -> None:
        self._stream = stream
        self._ownsStream = False

    @classmethod
    def open(cls, path: str) -> BinaryFileReader:
        reader = cls(open(path, 'rb'))
        reader._ownsStream = True
        return reader

    def _readExact(self, nBytes: int) -> bytes:
        data = self._stream.read(nBytes)
        if len(data) != nBytes:
            raise EOFError(f'Expected {nBytes} bytes, stream ended after {len(data)}')
        return data

    def read(self, dtype: np.dtype | type) -> float | int | bool:
        '''Read one scalar of the given dtype.'''
        dt = _littleEndian(dtype)
        return np.frombuffer(self._readExact(dt.itemsize), dtype=dt)[0].item()

    def readBuffer(self, dtype: np.dtype | type, shape: tuple[int, ...]) -> np.ndarray:
        '''Read a buffer and return it as a new native-endian array of the given shape.'''
        dt = _littleEndian(dtype)
        count = int(np.prod(shape, dtype=np.int64))
        data = self._readExact(count * dt.itemsize)
        return np.frombuffer(data, dtype=dt).reshape(shape).astype(np.dtype(dtype))

    def close(self) -> None:
        if self._ownsStream:
            self._stream.close()

    def __enter__(self) -> BinaryFileReader:
        return self

    def __exit__(self, *excInfo) -> None:
        self.close()
