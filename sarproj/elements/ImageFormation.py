"""
The image formation parameters used by the projection and grid derivations.
"""

__classification__ = "UNCLASSIFIED"
__author__ = "Thomas McCullough"


from .base import Serializable, DEFAULT_STRICT
from .blocks import _FieldVector
from .descriptors import FloatDescriptor, StringEnumDescriptor, SerializableDescriptor


class TxFrequencyProcType(_FieldVector):
    """Processed frequency band, in Hz."""
    _fields = ('MinProc', 'MaxProc')
    _required = _fields
    MinProc = FloatDescriptor(
        'MinProc', _required, strict=DEFAULT_STRICT, docstring='Lowest processed frequency.')  # type: float
    MaxProc = FloatDescriptor(
        'MaxProc', _required, strict=DEFAULT_STRICT, docstring='Highest processed frequency.')  # type: float

    def __init__(self, MinProc=None, MaxProc=None, **kwargs):
        self.MinProc, self.MaxProc = MinProc, MaxProc
        super(TxFrequencyProcType, self).__init__(**kwargs)

    @property
    def center_frequency(self):
        """
        None|float: The midpoint of the processed band.
        """

        if None in (self.MinProc, self.MaxProc):
            return None
        return 0.5*(self.MinProc + self.MaxProc)

    def _basic_validity_check(self):
        valid = super(TxFrequencyProcType, self)._basic_validity_check()
        if None not in (self.MinProc, self.MaxProc) and self.MinProc > self.MaxProc:
            self.log_validity_error('MinProc ({}) exceeds MaxProc ({})'.format(self.MinProc, self.MaxProc))
            valid = False
        return valid


class ImageFormationType(Serializable):
    """
    Image formation parameters.
    """

    _fields = ('ImageFormAlgo', 'TxFrequencyProc')
    _required = _fields
    ImageFormAlgo = StringEnumDescriptor(
        'ImageFormAlgo', ('PFA', 'RMA', 'RGAZCOMP', 'OTHER'), _required, strict=DEFAULT_STRICT,
        docstring='Image formation algorithm; polar format, range migration, range/azimuth '
                  'compensation, or another algorithm.')  # type: str
    TxFrequencyProc = SerializableDescriptor(
        'TxFrequencyProc', TxFrequencyProcType, _required, strict=DEFAULT_STRICT,
        docstring='Processed frequency band.')  # type: TxFrequencyProcType

    def __init__(self, ImageFormAlgo=None, TxFrequencyProc=None, **kwargs):
        """

        Parameters
        ----------
        ImageFormAlgo : str
        TxFrequencyProc : TxFrequencyProcType|numpy.ndarray|list|tuple
        kwargs
        """

        self.ImageFormAlgo = ImageFormAlgo
        self.TxFrequencyProc = TxFrequencyProc
        super(ImageFormationType, self).__init__(**kwargs)
