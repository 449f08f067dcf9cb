"""
Output grid geometry definitions, mapping output grid coordinates to ECF.
"""

__classification__ = "UNCLASSIFIED"
__author__ = "Thomas McCullough"


from abc import ABCMeta, abstractmethod

import numpy


def _validate_vector(value, name):
    if not isinstance(value, numpy.ndarray):
        value = numpy.array(value, dtype='float64')
    if value.shape != (3, ):
        raise ValueError('{} must have shape (3, ). Got {}'.format(name, value.shape))
    return numpy.copy(value).astype('float64')


class GridGeometry(object, metaclass=ABCMeta):
    """
    Abstract output grid geometry.
    """

    @abstractmethod
    def row_col_to_ecf(self, row_col):
        """
        Map grid coordinates, in meters from the reference point, to ECF.

        Parameters
        ----------
        row_col : numpy.ndarray|list|tuple
            Of shape `(2, )` or `(N, 2)`.

        Returns
        -------
        numpy.ndarray
            Of shape `(3, )` or `(N, 3)`.
        """

        raise NotImplementedError


class PlanarGridGeometry(GridGeometry):
    """
    A planar grid, spanned by row and column unit vectors through a reference point.
    """

    __slots__ = ('_row_vector', '_col_vector', '_reference_point')

    def __init__(self, row_vector, col_vector, reference_point):
        """

        Parameters
        ----------
        row_vector : numpy.ndarray|list|tuple
        col_vector : numpy.ndarray|list|tuple
        reference_point : numpy.ndarray|list|tuple
        """

        row_vector = _validate_vector(row_vector, 'row_vector')
        col_vector = _validate_vector(col_vector, 'col_vector')
        for name, vec in [('row_vector', row_vector), ('col_vector', col_vector)]:
            if numpy.linalg.norm(vec) == 0:
                raise ValueError('{} must have non-zero length'.format(name))
        self._row_vector = row_vector/numpy.linalg.norm(row_vector)
        self._col_vector = col_vector/numpy.linalg.norm(col_vector)
        self._reference_point = _validate_vector(reference_point, 'reference_point')

    @property
    def row_vector(self):
        """
        numpy.ndarray: The row unit vector.
        """

        return self._row_vector

    @property
    def col_vector(self):
        """
        numpy.ndarray: The column unit vector.
        """

        return self._col_vector

    @property
    def reference_point(self):
        """
        numpy.ndarray: The ECF reference point.
        """

        return self._reference_point

    def row_col_to_ecf(self, row_col):
        row_col = numpy.asarray(row_col, dtype='float64')
        if row_col.shape[-1] != 2:
            raise ValueError('row_col must have final dimension of size 2. Got shape {}'.format(row_col.shape))
        return self._reference_point + \
            row_col[..., 0, numpy.newaxis]*self._row_vector + \
            row_col[..., 1, numpy.newaxis]*self._col_vector
