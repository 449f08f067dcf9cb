"""
The PositionType definition.
"""

__classification__ = "UNCLASSIFIED"
__author__ = "Thomas McCullough"


from .base import Serializable, DEFAULT_STRICT
from .descriptors import SerializableDescriptor
from .blocks import XYZPolyType


class PositionType(Serializable):
    """The details for platform and ground reference positions as a function of time since collection start."""
    _fields = ('ARPPoly', )
    _required = ('ARPPoly',)
    # descriptors
    ARPPoly = SerializableDescriptor(
        'ARPPoly', XYZPolyType, _required, strict=DEFAULT_STRICT,
        docstring='Aperture Reference Point (ARP) position polynomial in ECF as a function of elapsed '
                  'seconds since start of collection.')  # type: XYZPolyType

    def __init__(self, ARPPoly=None, **kwargs):
        """

        Parameters
        ----------
        ARPPoly : XYZPolyType|dict
        kwargs : dict
        """

        self.ARPPoly = ARPPoly
        super(PositionType, self).__init__(**kwargs)
