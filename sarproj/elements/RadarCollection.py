"""
The collection radar parameters used by the projection and grid derivations.
"""

__classification__ = "UNCLASSIFIED"
__author__ = "Thomas McCullough"


from .base import Serializable, DEFAULT_STRICT
from .blocks import _FieldVector
from .descriptors import FloatDescriptor, IntegerDescriptor, SerializableDescriptor


class TxFrequencyType(_FieldVector):
    """Transmitted frequency band, in Hz."""
    _fields = ('Min', 'Max')
    _required = _fields
    Min = FloatDescriptor('Min', _required, strict=DEFAULT_STRICT, docstring='Lowest frequency.')  # type: float
    Max = FloatDescriptor('Max', _required, strict=DEFAULT_STRICT, docstring='Highest frequency.')  # type: float

    def __init__(self, Min=None, Max=None, **kwargs):
        self.Min, self.Max = Min, Max
        super(TxFrequencyType, self).__init__(**kwargs)

    def _basic_validity_check(self):
        valid = super(TxFrequencyType, self)._basic_validity_check()
        if None not in (self.Min, self.Max) and self.Min > self.Max:
            self.log_validity_error('Min ({}) exceeds Max ({})'.format(self.Min, self.Max))
            valid = False
        return valid


class RadarCollectionType(Serializable):
    """
    Radar collection parameters.
    """

    _fields = ('TxFrequency', 'RefFreqIndex')
    _required = ('TxFrequency', )
    TxFrequency = SerializableDescriptor(
        'TxFrequency', TxFrequencyType, _required, strict=DEFAULT_STRICT,
        docstring='Transmitted frequency band.')  # type: TxFrequencyType
    RefFreqIndex = IntegerDescriptor(
        'RefFreqIndex', _required, strict=DEFAULT_STRICT,
        docstring='When populated and nonzero, frequencies are given relative to an undisclosed '
                  'reference frequency, and are not absolute.')  # type: int

    def __init__(self, TxFrequency=None, RefFreqIndex=None, **kwargs):
        """

        Parameters
        ----------
        TxFrequency : TxFrequencyType|numpy.ndarray|list|tuple
        RefFreqIndex : None|int
        kwargs
        """

        self.TxFrequency = TxFrequency
        self.RefFreqIndex = RefFreqIndex
        super(RadarCollectionType, self).__init__(**kwargs)

    @property
    def has_reference_offset(self):
        """
        bool: Are frequencies given as offsets from a reference frequency?
        """

        return self.RefFreqIndex not in (None, 0)
