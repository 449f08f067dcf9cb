"""
The image extent, and the pixel location of the scene center point.
"""

__classification__ = "UNCLASSIFIED"
__author__ = "Thomas McCullough"

from typing import List

import numpy

from .base import Serializable, DEFAULT_STRICT
from .descriptors import IntegerDescriptor, SerializableDescriptor, SerializableListDescriptor
from .blocks import RowColType


class ImageDataType(Serializable):
    """
    The pixel extent of the image. Pixel indices are global, so the first
    pixel of the image is (`FirstRow`, `FirstCol`).
    """

    _collections_tags = {'ValidData': {'array': False, 'child_tag': 'Vertex'}}
    _fields = ('NumRows', 'NumCols', 'FirstRow', 'FirstCol', 'SCPPixel', 'ValidData')
    _required = _fields[:-1]
    NumRows = IntegerDescriptor(
        'NumRows', _required, strict=True, bounds=(1, None),
        docstring='Row count.')  # type: int
    NumCols = IntegerDescriptor(
        'NumCols', _required, strict=True, bounds=(1, None),
        docstring='Column count.')  # type: int
    FirstRow = IntegerDescriptor(
        'FirstRow', _required, strict=DEFAULT_STRICT, default_value=0,
        docstring='Global index of the first row, 0 unless the image is a chip.')  # type: int
    FirstCol = IntegerDescriptor(
        'FirstCol', _required, strict=DEFAULT_STRICT, default_value=0,
        docstring='Global index of the first column, 0 unless the image is a chip.')  # type: int
    SCPPixel = SerializableDescriptor(
        'SCPPixel', RowColType, _required, strict=DEFAULT_STRICT,
        docstring='Global pixel index of the scene center point.')  # type: RowColType
    ValidData = SerializableListDescriptor(
        'ValidData', RowColType, _collections_tags, _required, strict=DEFAULT_STRICT,
        docstring='Clockwise vertices, relative to the first row and column, of a polygon '
                  'enclosing the valid data.')  # type: List[RowColType]

    def __init__(self, NumRows=None, NumCols=None, FirstRow=None, FirstCol=None,
                 SCPPixel=None, ValidData=None, **kwargs):
        self.NumRows, self.NumCols = NumRows, NumCols
        self.FirstRow, self.FirstCol = FirstRow, FirstCol
        self.SCPPixel = SCPPixel
        self.ValidData = ValidData
        super(ImageDataType, self).__init__(**kwargs)

    def _basic_validity_check(self):
        condition = super(ImageDataType, self)._basic_validity_check()
        if self.ValidData is not None and len(self.ValidData) < 3:
            self.log_validity_error(
                'ValidData has {} vertices, but a polygon needs at least 3'.format(len(self.ValidData)))
            condition = False
        return condition

    def get_valid_vertex_data(self, dtype=numpy.int64):
        """
        The `ValidData` vertices as an `(N, 2)` array of `[row, col]`.

        Parameters
        ----------
        dtype : str|numpy.dtype

        Returns
        -------
        None|numpy.ndarray
        """

        if not self.ValidData:
            return None
        return numpy.array([entry.get_array(dtype=dtype) for entry in self.ValidData], dtype=dtype)

    def get_full_vertex_data(self, dtype=numpy.int64):
        """
        The four image corners, clockwise from `[0, 0]`.

        Parameters
        ----------
        dtype : str|numpy.dtype

        Returns
        -------
        None|numpy.ndarray
        """

        if self.NumRows is None or self.NumCols is None:
            return None
        last_row, last_col = self.NumRows - 1, self.NumCols - 1
        return numpy.array([[0, 0], [0, last_col], [last_row, last_col], [last_row, 0]], dtype=dtype)

    def get_vertex_data(self, dtype=numpy.int64):
        """
        The valid data vertices, if declared, and otherwise the four image corners.

        Parameters
        ----------
        dtype : str|numpy.dtype

        Returns
        -------
        None|numpy.ndarray
        """

        vertices = self.get_valid_vertex_data(dtype=dtype)
        return self.get_full_vertex_data(dtype=dtype) if vertices is None else vertices
