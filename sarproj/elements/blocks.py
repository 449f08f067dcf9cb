"""
Point, pixel index and polynomial building blocks shared by the metadata structures.

The polynomial types are immutable. Their coefficient arrays are private,
read-only copies, and every operation producing a different polynomial
returns a new instance.
"""

__classification__ = "UNCLASSIFIED"
__author__ = "Thomas McCullough"


from collections import OrderedDict
from numbers import Number

import numpy
from numpy.polynomial import polynomial

from .base import Serializable, Arrayable, DEFAULT_STRICT
from .descriptors import IntegerDescriptor, FloatDescriptor, SerializableDescriptor


class _FieldVector(Serializable, Arrayable):
    """
    A fixed length vector whose entries are the fields of the structure, in order.
    """

    _array_dtype = numpy.float64

    @classmethod
    def from_array(cls, array):
        """
        Construct from a sequence with one entry per field.

        Parameters
        ----------
        array : None|numpy.ndarray|list|tuple

        Returns
        -------
        None|_FieldVector
        """

        if array is None:
            return None
        if not isinstance(array, (numpy.ndarray, list, tuple)):
            raise ValueError(
                '{} requires a numpy.ndarray, list, or tuple, got {}'.format(cls.__name__, type(array)))
        if len(array) < len(cls._fields):
            raise ValueError(
                '{} requires {} entries {}, got {}'.format(cls.__name__, len(cls._fields), cls._fields, array))
        return cls(**dict(zip(cls._fields, array)))

    def get_array(self, dtype=None):
        """
        The field values as an array, in field order.

        Parameters
        ----------
        dtype : None|str|numpy.dtype

        Returns
        -------
        numpy.ndarray
        """

        return numpy.array(
            [getattr(self, field) for field in self._fields],
            dtype=self._array_dtype if dtype is None else dtype)


class XYZType(_FieldVector):
    """An Earth Centered Fixed point, in meters."""
    _fields = ('X', 'Y', 'Z')
    _required = _fields
    X = FloatDescriptor('X', _required, strict=True, docstring='ECF X coordinate.')  # type: float
    Y = FloatDescriptor('Y', _required, strict=True, docstring='ECF Y coordinate.')  # type: float
    Z = FloatDescriptor('Z', _required, strict=True, docstring='ECF Z coordinate.')  # type: float

    def __init__(self, X=None, Y=None, Z=None, **kwargs):
        self.X, self.Y, self.Z = X, Y, Z
        super(XYZType, self).__init__(**kwargs)


class RowColType(_FieldVector):
    """An integer (row, column) pixel location."""
    _fields = ('Row', 'Col')
    _required = _fields
    _array_dtype = numpy.int64
    Row = IntegerDescriptor('Row', _required, strict=True, docstring='Row index.')  # type: int
    Col = IntegerDescriptor('Col', _required, strict=True, docstring='Column index.')  # type: int

    def __init__(self, Row=None, Col=None, **kwargs):
        self.Row, self.Col = Row, Col
        super(RowColType, self).__init__(**kwargs)


###############
# polynomials

class _Polynomial(Serializable, Arrayable):
    """
    Common behavior of the polynomial types. The coefficient array dimension
    is the number of variables, and the coefficient of
    :math:`x_1^{i}x_2^{j}` is found at index `[i, j]`.
    """

    __slots__ = ('_coefs', )
    _required = ('Coefs', )
    _ndim = 1

    def __init__(self, Coefs=None, **kwargs):
        self._coefs = self._freeze(Coefs)
        super(_Polynomial, self).__init__(**kwargs)

    @classmethod
    def _freeze(cls, value):
        if value is None:
            raise ValueError('{} requires a coefficient array.'.format(cls.__name__))
        if not isinstance(value, (numpy.ndarray, list, tuple)):
            raise ValueError(
                '{} coefficients must be given as a numpy.ndarray, list, or tuple, '
                'got {}'.format(cls.__name__, type(value)))

        coefs = numpy.array(value, dtype=numpy.float64)
        if coefs.ndim != cls._ndim:
            raise ValueError(
                '{} coefficients must be a {}-dimensional array, got shape {}'.format(
                    cls.__name__, cls._ndim, coefs.shape))
        if coefs.size == 0:
            raise ValueError('{} coefficients must not be empty.'.format(cls.__name__))
        coefs.flags.writeable = False
        return coefs

    @property
    def Coefs(self):
        """
        numpy.ndarray: The read-only float64 coefficient array.
        """

        return self._coefs

    def __getitem__(self, item):
        return self._coefs[item]

    @classmethod
    def from_array(cls, array):
        """
        Construct from a coefficient array.

        Parameters
        ----------
        array : None|numpy.ndarray|list|tuple

        Returns
        -------
        None|_Polynomial
        """

        return None if array is None else cls(Coefs=array)

    def get_array(self, dtype=numpy.float64):
        """
        A writable copy of the coefficient array.

        Parameters
        ----------
        dtype : str|numpy.dtype

        Returns
        -------
        numpy.ndarray
        """

        return numpy.array(self._coefs, dtype=dtype)

    def to_dict(self, check_validity=False, strict=DEFAULT_STRICT, exclude=()):
        return OrderedDict([('Coefs', self._coefs.tolist()), ])


class Poly1DType(_Polynomial):
    """
    A polynomial in one variable.
    """

    __slots__ = ()
    _fields = ('Coefs', 'order1')
    _ndim = 1

    @property
    def order1(self):
        """
        int: The largest exponent represented in the coefficient array.
        """

        return self._coefs.size - 1

    def __call__(self, x):
        """
        Evaluate at `x`, with the shape of `x` preserved.

        Parameters
        ----------
        x : float|numpy.ndarray

        Returns
        -------
        float|numpy.ndarray
        """

        return polynomial.polyval(x, self._coefs)

    def derivative(self, der_order=1, return_poly=False):
        """
        The derivative of the given order. Differentiating a constant yields
        the zero polynomial, rather than an empty one.

        Parameters
        ----------
        der_order : int
        return_poly : bool
            Return a :class:`Poly1DType`, otherwise the coefficient array.

        Returns
        -------
        Poly1DType|numpy.ndarray
        """

        coefs = polynomial.polyder(self._coefs, der_order)
        if coefs.size == 0:
            coefs = numpy.zeros((1, ), dtype=numpy.float64)
        return Poly1DType(Coefs=coefs) if return_poly else coefs

    def derivative_eval(self, x, der_order=1):
        """
        Evaluate the derivative of the given order at `x`.

        Parameters
        ----------
        x : float|numpy.ndarray
        der_order : int

        Returns
        -------
        float|numpy.ndarray
        """

        return polynomial.polyval(x, self.derivative(der_order=der_order))


def _padded_sum(coefs1, coefs2, sign):
    shape = (max(coefs1.shape[0], coefs2.shape[0]), max(coefs1.shape[1], coefs2.shape[1]))
    out = numpy.zeros(shape, dtype=numpy.float64)
    out[:coefs1.shape[0], :coefs1.shape[1]] += coefs1
    out[:coefs2.shape[0], :coefs2.shape[1]] += sign*coefs2
    return out


class Poly2DType(_Polynomial):
    """
    A polynomial in two variables. The first variable runs along the first
    axis of the coefficient array. Sums, differences and scalar multiples
    produce new instances.
    """

    __slots__ = ()
    _fields = ('Coefs', 'order1', 'order2')
    _ndim = 2

    @property
    def order1(self):
        """
        int: The largest exponent of the first variable.
        """

        return self._coefs.shape[0] - 1

    @property
    def order2(self):
        """
        int: The largest exponent of the second variable.
        """

        return self._coefs.shape[1] - 1

    def __call__(self, x, y):
        """
        Evaluate at the points (`x`, `y`), which broadcast against each other.

        Parameters
        ----------
        x : float|numpy.ndarray
        y : float|numpy.ndarray

        Returns
        -------
        float|numpy.ndarray
        """

        return polynomial.polyval2d(x, y, self._coefs)

    def _combine(self, other, sign):
        if isinstance(other, Poly2DType):
            return Poly2DType(Coefs=_padded_sum(self._coefs, other.Coefs, sign))
        if isinstance(other, Number):
            out = numpy.array(self._coefs)
            out[0, 0] += sign*other
            return Poly2DType(Coefs=out)
        return NotImplemented

    def __add__(self, other):
        return self._combine(other, 1)

    def __radd__(self, other):
        return self._combine(other, 1)

    def __sub__(self, other):
        return self._combine(other, -1)

    def __mul__(self, other):
        if isinstance(other, Number):
            return Poly2DType(Coefs=other*self._coefs)
        return NotImplemented

    def __rmul__(self, other):
        return self.__mul__(other)

    def __neg__(self):
        return Poly2DType(Coefs=-self._coefs)

    def is_scalar(self):
        """
        Whether only the constant term can be nonzero.

        Returns
        -------
        bool
        """

        return not numpy.any(self._coefs.ravel()[1:])


class XYZPolyType(Serializable, Arrayable):
    """
    An ECF position as a function of one variable, given by a polynomial per coordinate.
    """

    _fields = ('X', 'Y', 'Z')
    _required = _fields
    X = SerializableDescriptor(
        'X', Poly1DType, _required, strict=True, docstring='ECF X coordinate polynomial.')  # type: Poly1DType
    Y = SerializableDescriptor(
        'Y', Poly1DType, _required, strict=True, docstring='ECF Y coordinate polynomial.')  # type: Poly1DType
    Z = SerializableDescriptor(
        'Z', Poly1DType, _required, strict=True, docstring='ECF Z coordinate polynomial.')  # type: Poly1DType

    def __init__(self, X=None, Y=None, Z=None, **kwargs):
        self.X, self.Y, self.Z = X, Y, Z
        super(XYZPolyType, self).__init__(**kwargs)

    def _components(self):
        return self.X, self.Y, self.Z

    def __call__(self, t):
        """
        Evaluate the position at `t`.

        Parameters
        ----------
        t : float|numpy.ndarray

        Returns
        -------
        numpy.ndarray
            The coordinates run along the final axis, so the shape is `t.shape + (3, )`.
        """

        values = [numpy.asarray(comp(t), dtype=numpy.float64) for comp in self._components()]
        return numpy.stack(values, axis=-1)

    @classmethod
    def from_array(cls, array):
        """
        Construct from the three coordinate coefficient arrays.

        Parameters
        ----------
        array : None|numpy.ndarray|list|tuple
            Of the form `[X, Y, Z]`.

        Returns
        -------
        None|XYZPolyType
        """

        if array is None:
            return None
        if not isinstance(array, (numpy.ndarray, list, tuple)) or len(array) < 3:
            raise ValueError('XYZPolyType requires three coefficient arrays, got {}'.format(array))
        return cls(X=array[0], Y=array[1], Z=array[2])

    def get_array(self, dtype='object'):
        """
        The component polynomials, or their zero padded coefficients.

        Parameters
        ----------
        dtype : str|numpy.dtype
            For `object`, the array of :class:`Poly1DType` components. Otherwise
            the coefficients, in an array of shape `(3, N)`.

        Returns
        -------
        numpy.ndarray
        """

        if dtype in ['object', numpy.dtype('object')]:
            return numpy.array(self._components(), dtype='object')

        length = max(comp.Coefs.size for comp in self._components())
        out = numpy.zeros((3, length), dtype=dtype)
        for row, comp in enumerate(self._components()):
            out[row, :comp.Coefs.size] = comp.Coefs
        return out

    def derivative(self, der_order=1, return_poly=False):
        """
        The derivative of each coordinate polynomial.

        Parameters
        ----------
        der_order : int
        return_poly : bool
            Return an :class:`XYZPolyType`, otherwise a list of coefficient arrays.

        Returns
        -------
        XYZPolyType|List[numpy.ndarray]
        """

        coefs = [comp.derivative(der_order=der_order) for comp in self._components()]
        return XYZPolyType.from_array(coefs) if return_poly else coefs

    def derivative_eval(self, t, der_order=1):
        """
        Evaluate the derivative of the given order at `t`.

        Parameters
        ----------
        t : float|numpy.ndarray
        der_order : int

        Returns
        -------
        numpy.ndarray
        """

        return self.derivative(der_order=der_order, return_poly=True)(t)
