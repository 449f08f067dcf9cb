"""
This module contains the base objects for the metadata structures, and the
diagnostic collection used by the validation routines.
"""

__classification__ = "UNCLASSIFIED"
__author__ = "Thomas McCullough"

import logging
from collections import OrderedDict, namedtuple
import copy

import numpy


logger = logging.getLogger(__name__)
valid_logger = logging.getLogger('validation')

DEFAULT_STRICT = False


#################
# validation diagnostics

DiagnosticRecord = namedtuple('DiagnosticRecord', ('severity', 'source', 'message'))
"""
A single validation finding. `severity` is one of `'error'`, `'warning'` or `'info'`,
`source` is the name of the class which produced it.
"""


class ValidationReport(object):
    """
    An accumulating collection of :class:`DiagnosticRecord` entries produced by
    the validation methods. A report is considered valid when it holds no
    error records.
    """

    __slots__ = ('_records', )

    def __init__(self, records=None):
        """

        Parameters
        ----------
        records : None|list[DiagnosticRecord]
        """

        self._records = []
        if records is not None:
            self.extend(records)

    @property
    def records(self):
        """
        List[DiagnosticRecord]: A copy of the records in the order they were added.
        """

        return list(self._records)

    @property
    def errors(self):
        """
        List[DiagnosticRecord]: The error severity records.
        """

        return [entry for entry in self._records if entry.severity == 'error']

    @property
    def warnings(self):
        """
        List[DiagnosticRecord]: The warning severity records.
        """

        return [entry for entry in self._records if entry.severity == 'warning']

    @property
    def is_valid(self):
        """
        bool: `True` if no error has been recorded.
        """

        return len(self.errors) == 0

    def add(self, severity, source, message):
        """
        Append a new record.

        Parameters
        ----------
        severity : str
        source : str
        message : str

        Returns
        -------
        DiagnosticRecord
        """

        if severity not in ('error', 'warning', 'info'):
            raise ValueError('Got unexpected diagnostic severity {}'.format(severity))
        record = DiagnosticRecord(severity, source, message)
        self._records.append(record)
        return record

    def extend(self, other):
        """
        Append all records from another report, or an iterable of records.

        Parameters
        ----------
        other : ValidationReport|list[DiagnosticRecord]
        """

        if isinstance(other, ValidationReport):
            other = other.records
        for entry in other:
            if not isinstance(entry, DiagnosticRecord):
                raise TypeError('Expected DiagnosticRecord, got type {}'.format(type(entry)))
            self._records.append(entry)

    def messages(self, severity=None):
        """
        Gets the message strings, optionally restricted to the given severity.

        Parameters
        ----------
        severity : None|str

        Returns
        -------
        List[str]
        """

        return [entry.message for entry in self._records if severity is None or entry.severity == severity]

    def __len__(self):
        return len(self._records)

    def __iter__(self):
        return iter(self._records)

    def __repr__(self):
        return 'ValidationReport(errors={}, warnings={}, total={})'.format(
            len(self.errors), len(self.warnings), len(self._records))


def _record_validity(severity, source, msg, report):
    if severity == 'error':
        valid_logger.error('{}: {}'.format(source, msg))
    elif severity == 'warning':
        valid_logger.warning('{}: {}'.format(source, msg))
    else:
        valid_logger.info('{}: {}'.format(source, msg))
    if report is not None:
        report.add(severity, source, msg)

#################
# value parsing helper functions

def _owner(instance):
    return instance.__class__.__name__


def parse_str(value, name, instance):
    if value is None or isinstance(value, str):
        return value
    raise TypeError('{}.{} expects a string, got type {}'.format(_owner(instance), name, type(value)))


_BOOL_STRINGS = {'0': False, 'false': False, '1': True, 'true': True}


def parse_bool(value, name, instance):
    if value is None or isinstance(value, bool):
        return value
    if isinstance(value, (int, numpy.bool_)):
        return bool(value)
    if isinstance(value, str):
        try:
            return _BOOL_STRINGS[value.strip().lower()]
        except KeyError:
            raise ValueError(
                '{}.{} cannot interpret string {} as a boolean, '
                'expected one of {}'.format(_owner(instance), name, value, list(_BOOL_STRINGS)))
    raise ValueError('{}.{} cannot interpret type {} as a boolean'.format(_owner(instance), name, type(value)))


def parse_int(value, name, instance):
    if value is None or isinstance(value, int):
        return value
    if not isinstance(value, str):
        return int(value)

    try:
        return int(value)
    except ValueError:
        # permit '3.0' and similar, with a complaint
        as_float = float(value)
        logger.warning('{}.{} got non-integer string {}, which is truncated'.format(
            _owner(instance), name, value))
        return int(as_float)


# noinspection PyUnusedLocal
def parse_float(value, name, instance):
    return None if value is None else float(value)


def _incompatible(name, instance, expected, value):
    return TypeError('{}.{} expects {}, got type {}'.format(_owner(instance), name, expected, type(value)))


def parse_serializable(value, name, instance, the_type):
    if value is None or isinstance(value, the_type):
        return value
    if isinstance(value, dict):
        return the_type(**value)
    if isinstance(value, (numpy.ndarray, list, tuple)) and issubclass(the_type, Arrayable):
        return the_type.from_array(value)
    raise _incompatible(name, instance, the_type.__name__, value)


def parse_serializable_list(value, name, instance, child_type):
    if value is None:
        return None
    if isinstance(value, child_type):
        return [value, ]
    if not isinstance(value, (list, tuple, numpy.ndarray)):
        raise _incompatible(name, instance, 'a list of {}'.format(child_type.__name__), value)
    return [parse_serializable(entry, name, instance, child_type) for entry in value]


def parse_parameters_collection(value, name, instance):
    if value is None:
        return None
    if isinstance(value, dict):
        pairs = value.items()
    elif isinstance(value, (list, tuple)):
        pairs = value
        for entry in pairs:
            if len(entry) != 2:
                raise ValueError('{}.{} expects (name, value) pairs, got {}'.format(_owner(instance), name, entry))
    else:
        raise _incompatible(name, instance, 'a dict or a sequence of pairs', value)
    return OrderedDict((str(key), str(entry)) for key, entry in pairs)


class ParametersCollection(object):
    """
    An ordered collection of named string parameters.
    """

    __slots__ = ('_name', '_dict')

    def __init__(self, collection=None, name=None):
        if name is None:
            raise ValueError('A ParametersCollection requires a name.')
        if not isinstance(name, str):
            raise TypeError('A ParametersCollection name must be a str, got {}'.format(type(name)))
        self._name = name
        self._dict = None
        self.set_collection(collection)

    def __len__(self):
        return 0 if self._dict is None else len(self._dict)

    def __getitem__(self, key):
        if self._dict is None:
            raise KeyError(key)
        return self._dict[key]

    def __setitem__(self, name, value):
        if not (isinstance(name, str) and isinstance(value, str)):
            raise ValueError(
                'Parameter names and values must be str, got {} and {}'.format(type(name), type(value)))
        if self._dict is None:
            self._dict = OrderedDict()
        self._dict[name] = value

    def get(self, key, default=None):
        return default if self._dict is None else self._dict.get(key, default)

    def set_collection(self, value):
        self._dict = parse_parameters_collection(value, self._name, self)

    def get_collection(self):
        return self._dict

    def to_dict(self):
        return None if self._dict is None else OrderedDict(self._dict)


##################
# the metadata structure base

class Serializable(object):
    """
    Base class of the metadata structures.

    Notes
    -----
    Every field is named in `_fields`, and `_required` is a subset of `_fields`.
    The values themselves are held by the class level descriptors.
    """

    _fields = ()
    """The field names, in serialization order."""
    _required = ()
    """The fields which must be populated for the structure to be valid."""
    _collections_tags = {}
    """For list fields, `{<field name>: {'array': False, 'child_tag': <child name>}}`."""
    _choice = ()
    """
    Mutually exclusive field groups, each `{'required': bool, 'collection': <field names>}`.
    At most one member of a group may be populated, and exactly one when required.
    """

    def __init__(self, **kwargs):
        """
        Assign each field given in `kwargs`. Unknown keyword arguments are rejected.

        Parameters
        ----------
        kwargs
        """

        unexpected = [key for key in kwargs if key not in self._fields and not key.startswith('_')]
        if unexpected:
            raise ValueError(
                '{} received unexpected construction argument(s) {}, '
                'the fields are {}'.format(self.__class__.__name__, unexpected, self._fields))

        for attribute in self._fields:
            if attribute not in kwargs:
                continue
            try:
                setattr(self, attribute, kwargs[attribute])
            except AttributeError:
                # read only property
                pass

    def __repr__(self):
        return '{}(**{})'.format(self.__class__.__name__, dict(self.to_dict(check_validity=False)))

    def __setattr__(self, key, value):
        known = key.startswith('_') or key in self._fields or hasattr(self.__class__, key) or hasattr(self, key)
        if not known:
            logger.warning(
                '{} has no field {}, check for a misspelled field name'.format(self.__class__.__name__, key))
        object.__setattr__(self, key, value)

    def __getstate__(self):
        return self.to_dict(check_validity=False, strict=False)

    def __setstate__(self, the_dict):
        self.__init__(**the_dict)

    def log_validity_error(self, msg, report=None):
        """
        Log a validity check error message, recording it in `report` if given.

        Parameters
        ----------
        msg : str
        report : None|ValidationReport
        """

        _record_validity('error', self.__class__.__name__, msg, report)

    def log_validity_warning(self, msg, report=None):
        """
        Log a validity check warning message, recording it in `report` if given.

        Parameters
        ----------
        msg : str
        report : None|ValidationReport
        """

        _record_validity('warning', self.__class__.__name__, msg, report)

    def log_validity_info(self, msg, report=None):
        _record_validity('info', self.__class__.__name__, msg, report)

    def is_valid(self, recursive=False, stack=False):
        """
        Whether the required fields are populated and the field choices respected.

        Parameters
        ----------
        recursive : bool
            Also check the populated child structures.
        stack : bool
            Log the name of each field holding an invalid child.

        Returns
        -------
        bool
        """

        valid = self._basic_validity_check()
        if recursive:
            valid &= self._recursive_validity_check(stack=stack)
        return valid

    def _basic_validity_check(self):
        valid = True
        for attribute in self._required:
            if getattr(self, attribute) is None:
                self.log_validity_error('Missing required attribute {}'.format(attribute))
                valid = False

        for entry in self._choice:
            collection = entry['collection']
            populated = [attribute for attribute in collection if getattr(self, attribute) is not None]
            if len(populated) > 1:
                self.log_validity_error(
                    'At most one of {} may be populated, but {} are'.format(collection, populated))
                valid = False
            elif not populated and entry.get('required', False):
                self.log_validity_error('One of {} must be populated, but none are'.format(collection))
                valid = False
        return valid

    def _recursive_validity_check(self, stack=False):
        valid = True
        for attribute in self._fields:
            value = getattr(self, attribute)
            children = value if isinstance(value, list) else [value, ]
            good = all([child.is_valid(recursive=True, stack=stack)
                        for child in children if isinstance(child, Serializable)])
            if not good and stack:
                self.log_validity_error('Invalid content in field {}'.format(attribute))
            valid &= good
        return valid

    def _serialize_value(self, attribute, value, check_validity, strict):
        if isinstance(value, Serializable):
            return value.to_dict(check_validity=check_validity, strict=strict)
        if isinstance(value, ParametersCollection):
            return value.to_dict()
        if isinstance(value, numpy.ndarray):
            if value.ndim != 1:
                raise ValueError(
                    '{}.{} must be a one-dimensional array to serialize, got shape {}'.format(
                        self.__class__.__name__, attribute, value.shape))
            return value.tolist()
        if isinstance(value, (bool, int, str, float)):
            return value
        raise ValueError('{}.{} has type {}, which cannot be serialized'.format(
            self.__class__.__name__, attribute, type(value)))

    def to_dict(self, check_validity=False, strict=DEFAULT_STRICT, exclude=()):
        """
        The populated fields as a dictionary of plain python values, suitable
        for json serialization and for passing back to the constructor.

        Parameters
        ----------
        check_validity : bool
            Check :meth:`is_valid` first.
        strict : bool
            When checking validity, raise a `ValueError` for an invalid structure
            rather than logging a warning.
        exclude : tuple
            Fields to omit.

        Returns
        -------
        OrderedDict
        """

        if check_validity and not self.is_valid():
            msg = '{} is not valid, so its dictionary form may be incomplete'.format(self.__class__.__name__)
            if strict:
                raise ValueError(msg)
            logger.warning(msg)

        out = OrderedDict()
        for attribute in self._fields:
            value = getattr(self, attribute)
            if attribute in exclude or value is None:
                continue
            if isinstance(value, list):
                out[attribute] = [
                    self._serialize_value(attribute, entry, check_validity, strict)
                    for entry in value if entry is not None]
            else:
                out[attribute] = self._serialize_value(attribute, value, check_validity, strict)
        return out

    def copy(self):
        """
        Create a deep copy.

        Returns
        -------
        Serializable
        """

        return self.__class__(**copy.deepcopy(self.to_dict(check_validity=False)))


class Arrayable(object):
    """Mixin for structures which convert to and from an array."""

    @classmethod
    def from_array(cls, array):
        """
        Create from an array.

        Parameters
        ----------
        array : numpy.ndarray|list|tuple

        Returns
        -------
        Arrayable
        """

        raise NotImplementedError

    def get_array(self, dtype=numpy.float64):
        """
        The array form.

        Parameters
        ----------
        dtype : str|numpy.dtype

        Returns
        -------
        numpy.ndarray
        """

        raise NotImplementedError

    def __getitem__(self, item):
        return self.get_array()[item]
