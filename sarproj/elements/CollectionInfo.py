"""
Collection identification, and the imaging mode which the grid checks depend upon.
"""

__classification__ = "UNCLASSIFIED"
__author__ = "Thomas McCullough"


from .base import Serializable, DEFAULT_STRICT
from .descriptors import StringDescriptor, StringEnumDescriptor, SerializableDescriptor


class RadarModeType(Serializable):
    """
    The imaging mode, with an optional collector specific identifier.
    """

    _fields = ('ModeType', 'ModeID')
    _required = ('ModeType', )
    ModeType = StringEnumDescriptor(
        'ModeType', ('SPOTLIGHT', 'STRIPMAP', 'DYNAMIC STRIPMAP'), _required, strict=True,
        docstring='Spotlight, stripmap or dynamic stripmap.')  # type: str
    ModeID = StringDescriptor(
        'ModeID', _required, strict=DEFAULT_STRICT,
        docstring='Collector specific mode identifier.')  # type: str

    def __init__(self, ModeID=None, ModeType=None, **kwargs):
        self.ModeID, self.ModeType = ModeID, ModeType
        super(RadarModeType, self).__init__(**kwargs)


class CollectionInfoType(Serializable):
    _fields = ('CollectorName', 'CoreName', 'RadarMode')
    _required = ('RadarMode', )
    CollectorName = StringDescriptor(
        'CollectorName', _required, strict=DEFAULT_STRICT,
        docstring='Name of the collecting platform.')  # type: str
    CoreName = StringDescriptor(
        'CoreName', _required, strict=DEFAULT_STRICT,
        docstring='Identifier of the collection.')  # type: str
    RadarMode = SerializableDescriptor(
        'RadarMode', RadarModeType, _required, strict=DEFAULT_STRICT,
        docstring='The imaging mode.')  # type: RadarModeType

    def __init__(self, CollectorName=None, CoreName=None, RadarMode=None, **kwargs):
        self.CollectorName, self.CoreName = CollectorName, CoreName
        self.RadarMode = RadarMode
        super(CollectionInfoType, self).__init__(**kwargs)

    @property
    def mode_type(self):
        """
        None|str: The imaging mode type, if populated.
        """

        return None if self.RadarMode is None else self.RadarMode.ModeType
