"""
Typed field descriptors for the metadata structures.

Each descriptor converts the assigned value to its field type. A value which
cannot be used is either rejected with an exception (a `strict` field), or
logged and stored as the best available value.
"""

__classification__ = "UNCLASSIFIED"
__author__ = "Thomas McCullough"

import logging
from weakref import WeakKeyDictionary

import numpy

from .base import DEFAULT_STRICT, Arrayable, ParametersCollection, parse_str, parse_bool, parse_int, \
    parse_float, parse_serializable, parse_serializable_list

logger = logging.getLogger(__name__)


class _Unusable(Exception):
    """Signals a value which could not be converted, and is stored as None."""


class BasicDescriptor(object):
    """
    Base field descriptor. Values are held per owning instance, without
    keeping that instance alive, so owners must be hashable.

    Extensions override :meth:`_convert` to produce the stored value.
    """

    _typ_string = None

    def __init__(self, name, required, strict=DEFAULT_STRICT, default_value=None, docstring=None):
        self.data = WeakKeyDictionary()
        self.name = name
        self.required = (name in required)
        self.strict = strict
        self.default_value = default_value

        parts = [docstring or '', '**Required.**' if self.required else '**Optional.**']
        if self._typ_string is not None:
            parts.insert(0, self._typ_string)
        self.__doc__ = ' '.join(part for part in parts if part)

    def _where(self, instance):
        return 'field {} of {}'.format(self.name, instance.__class__.__name__)

    def _complain(self, instance, msg, level=logging.ERROR):
        """
        Raise for a strict field, otherwise log.
        """

        msg = '{}: {}'.format(self._where(instance), msg)
        if self.strict:
            raise ValueError(msg)
        logger.log(level, msg)

    def _convert(self, instance, value):
        return value

    def __get__(self, instance, owner):
        if instance is None:
            return self

        value = self.data.get(instance, self.default_value)
        if value is None and self.required:
            if self.strict:
                raise AttributeError('Required {} is not populated.'.format(self._where(instance)))
            logger.debug('Required {} is not populated.'.format(self._where(instance)))
        return value

    def __set__(self, instance, value):
        if value is None:
            if self.default_value is None and self.required:
                if self.strict:
                    raise ValueError('Required {} cannot be set to None.'.format(self._where(instance)))
                logger.debug('Required {} set to None.'.format(self._where(instance)))
            self.data[instance] = self.default_value
            return

        try:
            self.data[instance] = self._convert(instance, value)
        except _Unusable as e:
            logger.error('{}: {} The value is set to None.'.format(self._where(instance), e))
            self.data[instance] = None

    def _parse(self, parser, instance, value, *args):
        """
        Apply a base parser. A failure of a lenient field is reported as unusable.
        """

        try:
            return parser(value, self.name, instance, *args)
        except (ValueError, TypeError) as e:
            if self.strict:
                raise
            raise _Unusable('could not convert {} of type {} ({}).'.format(value, type(value), e))


class StringDescriptor(BasicDescriptor):
    """A string field."""
    _typ_string = 'str:'

    def _convert(self, instance, value):
        return parse_str(value, self.name, instance)


class StringEnumDescriptor(BasicDescriptor):
    """An upper case string field restricted to the given values."""
    _typ_string = 'str:'

    def __init__(self, name, values, required, strict=DEFAULT_STRICT, default_value=None, docstring=None):
        self.values = values
        if default_value not in values:
            default_value = None
        super(StringEnumDescriptor, self).__init__(
            name, required, strict=strict, default_value=default_value,
            docstring='{} One of {}.'.format(docstring or '', values))

    def _convert(self, instance, value):
        upper = parse_str(value, self.name, instance).upper()
        if upper not in self.values:
            self._complain(instance, 'value {} is not one of {}'.format(value, self.values))
        return upper


class BooleanDescriptor(BasicDescriptor):
    """A boolean field."""
    _typ_string = 'bool:'

    def _convert(self, instance, value):
        return self._parse(parse_bool, instance, value)


class _BoundedDescriptor(BasicDescriptor):
    """A numeric field with optional inclusive `(lower, upper)` bounds, either of which may be None."""

    _parser = None

    def __init__(self, name, required, strict=DEFAULT_STRICT, bounds=None, default_value=None, docstring=None):
        self.bounds = bounds
        if default_value is not None and not self._in_bounds(default_value):
            default_value = None
        if bounds is not None:
            docstring = '{} Bounded by {}.'.format(docstring or '', bounds)
        super(_BoundedDescriptor, self).__init__(
            name, required, strict=strict, default_value=default_value, docstring=docstring)

    def _in_bounds(self, value):
        if self.bounds is None:
            return True
        lower, upper = self.bounds
        return (lower is None or lower <= value) and (upper is None or value <= upper)

    def _convert(self, instance, value):
        parsed = self._parse(self._parser, instance, value)
        if not self._in_bounds(parsed):
            self._complain(instance, 'value {} is outside of the bounds {}'.format(parsed, self.bounds))
        return parsed


class IntegerDescriptor(_BoundedDescriptor):
    """An integer field."""
    _typ_string = 'int:'
    _parser = staticmethod(parse_int)


class FloatDescriptor(_BoundedDescriptor):
    """A float field."""
    _typ_string = 'float:'
    _parser = staticmethod(parse_float)


class IntegerEnumDescriptor(BasicDescriptor):
    """An integer field restricted to the given values."""
    _typ_string = 'int:'

    def __init__(self, name, values, required, strict=DEFAULT_STRICT, default_value=None, docstring=None):
        self.values = values
        if default_value not in values:
            default_value = None
        super(IntegerEnumDescriptor, self).__init__(
            name, required, strict=strict, default_value=default_value,
            docstring='{} One of {}.'.format(docstring or '', values))

    def _convert(self, instance, value):
        parsed = self._parse(parse_int, instance, value)
        if parsed not in self.values:
            self._complain(instance, 'value {} is not one of {}'.format(parsed, self.values))
        return parsed


class FloatArrayDescriptor(BasicDescriptor):
    """A one-dimensional float64 array field, with optional length limits."""
    _typ_string = 'numpy.ndarray[float64]:'

    def __init__(self, name, required, strict=DEFAULT_STRICT, minimum_length=None, maximum_length=None,
                 docstring=None):
        self.minimum_length = 0 if minimum_length is None else int(minimum_length)
        self.maximum_length = None if maximum_length is None else int(maximum_length)
        if self.maximum_length is not None and self.minimum_length > self.maximum_length:
            raise ValueError(
                'minimum_length {} exceeds maximum_length {}'.format(self.minimum_length, self.maximum_length))
        super(FloatArrayDescriptor, self).__init__(name, required, strict=strict, docstring=docstring)

    def _convert(self, instance, value):
        if not isinstance(value, (numpy.ndarray, list, tuple)):
            raise TypeError('{} requires an array, got type {}'.format(self._where(instance), type(value)))
        array = numpy.array(value, dtype=numpy.float64)
        if array.ndim != 1:
            raise ValueError(
                '{} requires a one-dimensional array, got shape {}'.format(self._where(instance), array.shape))

        if array.size < self.minimum_length:
            self._complain(
                instance, 'array of size {} must have size at least {}'.format(array.size, self.minimum_length))
        if self.maximum_length is not None and array.size > self.maximum_length:
            self._complain(
                instance, 'array of size {} must have size at most {}'.format(array.size, self.maximum_length))
        return array


class SerializableDescriptor(BasicDescriptor):
    """A field holding an instance of the given :class:`Serializable` extension."""

    def __init__(self, name, the_type, required, strict=DEFAULT_STRICT, docstring=None):
        self.the_type = the_type
        self._typ_string = '{}:'.format(the_type.__name__)
        super(SerializableDescriptor, self).__init__(name, required, strict=strict, docstring=docstring)

    def _convert(self, instance, value):
        return self._parse(parse_serializable, instance, value, self.the_type)


class UnitVectorDescriptor(SerializableDescriptor):
    """
    A field holding an :class:`Arrayable` vector type, normalized to unit
    length on assignment. A zero vector is unusable.
    """

    def __init__(self, name, the_type, required, strict=DEFAULT_STRICT, docstring=None):
        if not issubclass(the_type, Arrayable):
            raise TypeError('Unit vector field {} requires an Arrayable type, got {}'.format(name, the_type))
        super(UnitVectorDescriptor, self).__init__(name, the_type, required, strict=strict, docstring=docstring)

    def _convert(self, instance, value):
        vector = super(UnitVectorDescriptor, self)._convert(instance, value)
        coords = vector.get_array(dtype=numpy.float64)
        magnitude = numpy.linalg.norm(coords)
        if magnitude == 0:
            raise _Unusable('the norm of the input is 0, so it cannot be normalized.')
        if magnitude == 1:
            return vector
        return self.the_type.from_array(coords/magnitude)


class ParametersDescriptor(BasicDescriptor):
    """A field holding a :class:`ParametersCollection` of named string values."""
    _typ_string = 'ParametersCollection:'

    def _convert(self, instance, value):
        if isinstance(value, ParametersCollection):
            return value
        current = self.data.get(instance, None)
        if current is None:
            return ParametersCollection(collection=value, name=self.name)
        current.set_collection(value)
        return current


class SerializableListDescriptor(BasicDescriptor):
    """A field holding a list of instances of the given :class:`Serializable` extension."""

    def __init__(self, name, child_type, tag_dict, required, strict=DEFAULT_STRICT, docstring=None):
        self.child_type = child_type
        self.child_tag = tag_dict[name]['child_tag']
        self._typ_string = 'List[{}]:'.format(child_type.__name__)
        super(SerializableListDescriptor, self).__init__(name, required, strict=strict, docstring=docstring)

    def _convert(self, instance, value):
        return self._parse(parse_serializable_list, instance, value, self.child_type)
