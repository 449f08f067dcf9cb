"""
The GeoData definition.
"""

__classification__ = "UNCLASSIFIED"
__author__ = "Thomas McCullough"


from .base import Serializable, DEFAULT_STRICT
from .descriptors import StringEnumDescriptor, SerializableDescriptor
from .blocks import XYZType


class SCPType(Serializable):
    """
    Scene Center Point (SCP) in full (global) image. This should be the the precise location.
    """

    _fields = ('ECF', )
    _required = _fields
    # descriptors
    ECF = SerializableDescriptor(
        'ECF', XYZType, _required, strict=DEFAULT_STRICT,
        docstring='The ECF coordinates.')  # type: XYZType

    def __init__(self, ECF=None, **kwargs):
        """

        Parameters
        ----------
        ECF : XYZType|numpy.ndarray|list|tuple
        kwargs : dict
        """

        self.ECF = ECF
        super(SCPType, self).__init__(**kwargs)


class GeoDataType(Serializable):
    """Container specifying the scene reference location in geographic coordinates."""
    _fields = ('EarthModel', 'SCP')
    _required = _fields
    # other class variables
    _EARTH_MODEL_VALUES = ('WGS_84', )
    # descriptors
    EarthModel = StringEnumDescriptor(
        'EarthModel', _EARTH_MODEL_VALUES, _required, strict=True, default_value='WGS_84',
        docstring='The Earth Model.')  # type: str
    SCP = SerializableDescriptor(
        'SCP', SCPType, _required, strict=DEFAULT_STRICT,
        docstring='The Scene Center Point *(SCP)* in full (global) image. This is the '
                  'precise location.')  # type: SCPType

    def __init__(self, EarthModel='WGS_84', SCP=None, **kwargs):
        """

        Parameters
        ----------
        EarthModel : str
        SCP : SCPType|dict
        kwargs : dict
        """

        self.EarthModel = EarthModel
        self.SCP = SCP
        super(GeoDataType, self).__init__(**kwargs)

    def get_scp_array(self):
        """
        Gets the ECF coordinates of the scene center point, if populated.

        Returns
        -------
        None|numpy.ndarray
        """

        if self.SCP is None or self.SCP.ECF is None:
            return None
        return self.SCP.ECF.get_array()
