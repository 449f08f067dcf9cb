"""
The aperture state at the center of aperture time of the scene center point,
and the geometry derived from it.
"""

__classification__ = "UNCLASSIFIED"
__author__ = "Thomas McCullough"


import logging

import numpy
from numpy.linalg import norm

from .base import Serializable, DEFAULT_STRICT
from .descriptors import StringEnumDescriptor, FloatDescriptor, SerializableDescriptor
from .blocks import XYZType

logger = logging.getLogger(__name__)

SLANT_RANGE_TOL = 1e-6
"""
float: Permitted relative difference between the populated and derived slant range.
"""

DOPPLER_CONE_TOL = 1e-3
"""
float: Permitted difference (degrees) between the populated and derived Doppler cone angle.
"""


def _make_unit(vec):
    vec_norm = norm(vec)
    if vec_norm < 1e-6:
        logger.error('Normalizing a vector of norm {}, which is likely a mistake'.format(vec_norm))
    return vec/vec_norm


class GeometryCalculator(object):
    """
    The collection geometry determined by the scene center point and the
    aperture position and velocity, all ECF.
    """

    def __init__(self, SCP, ARPPos, ARPVel):
        self.SCP, self.ARP, self.ARP_vel = SCP, ARPPos, ARPVel
        self.LOS = SCP - ARPPos
        self.uARP_vel = _make_unit(ARPVel)
        self.uLOS = _make_unit(self.LOS)
        self.look = numpy.sign(numpy.cross(_make_unit(ARPPos), self.uARP_vel).dot(self.uLOS))
        # slant plane normal, pointing away from the earth
        self.uSPZ = _make_unit(self.look*numpy.cross(ARPVel, self.uLOS))

    @property
    def ROV(self):
        """
        float: Slant range divided by speed.
        """

        return float(norm(self.LOS)/norm(self.ARP_vel))

    @property
    def SideOfTrack(self):
        return 'L' if self.look > 0 else 'R'

    @property
    def SlantRange(self):
        return float(norm(self.LOS))

    @property
    def DopplerConeAng(self):
        """
        float: Angle (degrees) between the velocity and the line of sight.
        """

        return float(numpy.rad2deg(numpy.arccos(self.uARP_vel.dot(self.uLOS))))


class SCPCOAType(Serializable):
    """
    The scene center point center of aperture time, with the aperture state
    and collection geometry at that time.
    """

    _fields = (
        'SCPTime', 'ARPPos', 'ARPVel', 'ARPAcc', 'SideOfTrack', 'SlantRange', 'DopplerConeAng')
    _required = ('SCPTime', 'ARPPos', 'ARPVel', 'SideOfTrack')
    SCPTime = FloatDescriptor(
        'SCPTime', _required, strict=DEFAULT_STRICT,
        docstring='Center of aperture time (s from collection start) of the scene center point.')  # type: float
    ARPPos = SerializableDescriptor(
        'ARPPos', XYZType, _required, strict=DEFAULT_STRICT,
        docstring='ECF aperture position at SCPTime.')  # type: XYZType
    ARPVel = SerializableDescriptor(
        'ARPVel', XYZType, _required, strict=DEFAULT_STRICT,
        docstring='ECF aperture velocity at SCPTime.')  # type: XYZType
    ARPAcc = SerializableDescriptor(
        'ARPAcc', XYZType, _required, strict=DEFAULT_STRICT,
        docstring='ECF aperture acceleration at SCPTime.')  # type: XYZType
    SideOfTrack = StringEnumDescriptor(
        'SideOfTrack', ('L', 'R'), _required, strict=DEFAULT_STRICT,
        docstring='Left or right looking.')  # type: str
    SlantRange = FloatDescriptor(
        'SlantRange', _required, strict=DEFAULT_STRICT, bounds=(0., None),
        docstring='Distance (m) from the aperture to the scene center point.')  # type: float
    DopplerConeAng = FloatDescriptor(
        'DopplerConeAng', _required, strict=DEFAULT_STRICT, bounds=(0., 180.),
        docstring='Doppler cone angle (degrees) to the scene center point.')  # type: float

    def __init__(self, SCPTime=None, ARPPos=None, ARPVel=None, ARPAcc=None, SideOfTrack=None,
                 SlantRange=None, DopplerConeAng=None, **kwargs):
        self._ROV = None
        self.SCPTime = SCPTime
        self.ARPPos, self.ARPVel, self.ARPAcc = ARPPos, ARPVel, ARPAcc
        self.SideOfTrack = SideOfTrack
        self.SlantRange, self.DopplerConeAng = SlantRange, DopplerConeAng
        super(SCPCOAType, self).__init__(**kwargs)

    @property
    def look(self):
        """
        None|int: `1` for left looking, `-1` for right looking, `None` when
        SideOfTrack is unset.
        """

        if self.SideOfTrack is None:
            return None
        return 1 if self.SideOfTrack == 'L' else -1

    @property
    def ROV(self):
        """
        None|float: Slant range over speed, set by the geometry derivation.
        """

        return self._ROV

    def get_ulos(self, scp):
        """
        The unit line of sight from the aperture position to `scp`.

        Parameters
        ----------
        scp : numpy.ndarray|list|tuple

        Returns
        -------
        None|numpy.ndarray
        """

        if self.ARPPos is None or scp is None:
            return None
        return _make_unit(numpy.asarray(scp, dtype='float64') - self.ARPPos.get_array())

    def get_slant_plane_normal(self, scp):
        """
        The unit slant plane normal, pointing away from the earth for either
        side of track.

        Parameters
        ----------
        scp : numpy.ndarray|list|tuple

        Returns
        -------
        None|numpy.ndarray
        """

        ulos = self.get_ulos(scp)
        if ulos is None or self.ARPVel is None or self.look is None:
            return None
        return _make_unit(self.look*numpy.cross(self.ARPVel.get_array(), ulos))

    def _calculator(self, GeoData):
        scp = None if GeoData is None else GeoData.get_scp_array()
        if scp is None or self.ARPPos is None or self.ARPVel is None:
            return None
        return GeometryCalculator(scp, self.ARPPos.get_array(), self.ARPVel.get_array())

    def _derive_scp_time(self, Grid, overwrite=False):
        """
        SCPTime is the constant term of the grid TimeCOAPoly. Invoked by the
        parent :class:`SICDType`.
        """

        if Grid is None or Grid.TimeCOAPoly is None:
            return
        if overwrite or self.SCPTime is None:
            self.SCPTime = Grid.TimeCOAPoly.Coefs[0, 0]

    def _derive_position(self, Position, overwrite=False):
        """
        Evaluate the aperture position polynomial and its derivatives at SCPTime.
        """

        if Position is None or Position.ARPPoly is None or self.SCPTime is None:
            return
        if self.ARPPos is not None and not overwrite:
            return

        arp_poly, scp_time = Position.ARPPoly, self.SCPTime
        self.ARPPos = XYZType.from_array(arp_poly(scp_time))
        self.ARPVel = XYZType.from_array(arp_poly.derivative_eval(scp_time, 1))
        self.ARPAcc = XYZType.from_array(arp_poly.derivative_eval(scp_time, 2))

    def _derive_geometry_parameters(self, GeoData, overwrite=False):
        calculator = self._calculator(GeoData)
        if calculator is None:
            return

        self._ROV = calculator.ROV
        for attribute in ['SideOfTrack', 'SlantRange', 'DopplerConeAng']:
            if overwrite or getattr(self, attribute) is None:
                setattr(self, attribute, getattr(calculator, attribute))

    def rederive(self, Grid, Position, GeoData):
        """
        Recompute every derived quantity, replacing the populated values.

        Parameters
        ----------
        Grid : sarproj.elements.Grid.GridType
        Position : sarproj.elements.Position.PositionType
        GeoData : sarproj.elements.GeoData.GeoDataType
        """

        self._derive_scp_time(Grid, overwrite=True)
        self._derive_position(Position, overwrite=True)
        self._derive_geometry_parameters(GeoData, overwrite=True)

    def check_values(self, GeoData, report=None):
        """
        Compare SideOfTrack, SlantRange and DopplerConeAng with the values
        derived from the aperture state.

        Parameters
        ----------
        GeoData : sarproj.elements.GeoData.GeoDataType
        report : None|sarproj.elements.base.ValidationReport

        Returns
        -------
        bool
        """

        calculator = self._calculator(GeoData)
        if calculator is None:
            return True

        cond = True
        if calculator.SideOfTrack != self.SideOfTrack:
            self.log_validity_error(
                'SideOfTrack is expected to be {}, and is populated as {}'.format(
                    calculator.SideOfTrack, self.SideOfTrack), report=report)
            cond = False

        mismatches = []
        if self.SlantRange is not None and abs(self.SlantRange/calculator.SlantRange - 1) > SLANT_RANGE_TOL:
            mismatches.append(('SlantRange', calculator.SlantRange, self.SlantRange))
        if self.DopplerConeAng is not None and \
                abs(self.DopplerConeAng - calculator.DopplerConeAng) > DOPPLER_CONE_TOL:
            mismatches.append(('DopplerConeAng', calculator.DopplerConeAng, self.DopplerConeAng))
        for name, expected, populated in mismatches:
            self.log_validity_error(
                '{} is expected to be {}, but is populated as {}'.format(name, expected, populated), report=report)
            cond = False
        return cond
