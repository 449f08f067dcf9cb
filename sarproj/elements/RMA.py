"""
The range migration algorithm parameters, and the slant plane unit vectors
implied by each of the RMAT, RMCR and INCA image types.
"""

__classification__ = "UNCLASSIFIED"
__author__ = "Thomas McCullough"


import numpy
from numpy.linalg import norm

from .base import Serializable, DEFAULT_STRICT
from .descriptors import StringEnumDescriptor, FloatDescriptor, \
    BooleanDescriptor, SerializableDescriptor
from .blocks import XYZType, Poly1DType, Poly2DType
from .utils import get_center_frequency


def _unit(vec):
    return vec/norm(vec)


def _look_geometry(scp, position, velocity):
    """
    The unit line of sight from `position` to `scp`, the unit velocity, and
    the look direction (+1 left, -1 right).
    """

    ulos = _unit(numpy.asarray(scp, dtype='float64') - position)
    uvel = _unit(velocity)
    look = numpy.sign(numpy.cross(_unit(position), uvel).dot(ulos))
    return ulos, uvel, look


class RMRefType(Serializable):
    """
    The reference platform state of the RMAT and RMCR image types.
    """

    _fields = ('PosRef', 'VelRef', 'DopConeAngRef')
    _required = _fields
    PosRef = SerializableDescriptor(
        'PosRef', XYZType, _required, strict=DEFAULT_STRICT,
        docstring='ECF reference position defining the reference slant plane.')  # type: XYZType
    VelRef = SerializableDescriptor(
        'VelRef', XYZType, _required, strict=DEFAULT_STRICT,
        docstring='ECF reference velocity defining the reference slant plane.')  # type: XYZType
    DopConeAngRef = FloatDescriptor(
        'DopConeAngRef', _required, strict=DEFAULT_STRICT,
        docstring='Doppler cone angle (degrees) at the reference state.')  # type: float

    def __init__(self, PosRef=None, VelRef=None, DopConeAngRef=None, **kwargs):
        self.PosRef, self.VelRef = PosRef, VelRef
        self.DopConeAngRef = DopConeAngRef
        super(RMRefType, self).__init__(**kwargs)

    def _reference_geometry(self, scp):
        if self.PosRef is None or self.VelRef is None:
            raise ValueError('Both PosRef and VelRef must be populated to derive the reference geometry.')
        return _look_geometry(scp, self.PosRef.get_array(), self.VelRef.get_array())

    def u_yat(self, scp):
        """
        The RMAT along track unit vector, opposite the velocity when
        right looking.

        Parameters
        ----------
        scp : numpy.ndarray

        Returns
        -------
        numpy.ndarray
        """

        _, uvel, look = self._reference_geometry(scp)
        return -look*uvel

    def u_xct(self, scp):
        """
        The RMAT cross track unit vector, in the reference slant plane and
        perpendicular to :meth:`u_yat`.

        Parameters
        ----------
        scp : numpy.ndarray

        Returns
        -------
        numpy.ndarray
        """

        ulos, uvel, look = self._reference_geometry(scp)
        uyat = -look*uvel
        return numpy.cross(uyat, _unit(numpy.cross(ulos, uyat)))

    def u_xrg(self, scp):
        """
        The RMCR range unit vector, along the reference line of sight.

        Parameters
        ----------
        scp : numpy.ndarray

        Returns
        -------
        numpy.ndarray
        """

        return self._reference_geometry(scp)[0]

    def u_ycr(self, scp):
        """
        The RMCR cross range unit vector.

        Parameters
        ----------
        scp : numpy.ndarray

        Returns
        -------
        numpy.ndarray
        """

        ulos, uvel, look = self._reference_geometry(scp)
        return numpy.cross(_unit(look*numpy.cross(uvel, ulos)), ulos)


class INCAType(Serializable):
    """
    Imaging near closest approach parameters. The image column coordinate
    determines the time of closest approach.
    """

    _fields = (
        'TimeCAPoly', 'R_CA_SCP', 'FreqZero', 'DRateSFPoly', 'DopCentroidPoly', 'DopCentroidCOA')
    _required = ('TimeCAPoly', 'R_CA_SCP', 'FreqZero', 'DRateSFPoly')
    TimeCAPoly = SerializableDescriptor(
        'TimeCAPoly', Poly1DType, _required, strict=DEFAULT_STRICT,
        docstring='Time of closest approach (s from collection start) in terms of the '
                  'column coordinate (m).')  # type: Poly1DType
    R_CA_SCP = FloatDescriptor(
        'R_CA_SCP', _required, strict=DEFAULT_STRICT,
        docstring='Range (m) at closest approach for the scene center point.')  # type: float
    FreqZero = FloatDescriptor(
        'FreqZero', _required, strict=DEFAULT_STRICT,
        docstring='RF frequency (Hz) used for the Doppler centroid values, typically '
                  'the center transmit frequency.')  # type: float
    DRateSFPoly = SerializableDescriptor(
        'DRateSFPoly', Poly2DType, _required, strict=DEFAULT_STRICT,
        docstring='Doppler rate scale factor in terms of the row and column coordinates, '
                  'giving the Doppler rate at closest approach.')  # type: Poly2DType
    DopCentroidPoly = SerializableDescriptor(
        'DopCentroidPoly', Poly2DType, _required, strict=DEFAULT_STRICT,
        docstring='Doppler centroid (Hz), the Doppler frequency of the peak response, in terms '
                  'of the row and column coordinates. Stripmap and dynamic stripmap '
                  'only.')  # type: Poly2DType
    DopCentroidCOA = BooleanDescriptor(
        'DopCentroidCOA', _required, strict=DEFAULT_STRICT,
        docstring='Whether every pixel has its center of aperture at the Doppler centroid. '
                  'Stripmap and dynamic stripmap only.')  # type: bool

    def __init__(self, TimeCAPoly=None, R_CA_SCP=None, FreqZero=None, DRateSFPoly=None,
                 DopCentroidPoly=None, DopCentroidCOA=None, **kwargs):
        self.TimeCAPoly = TimeCAPoly
        self.R_CA_SCP, self.FreqZero = R_CA_SCP, FreqZero
        self.DRateSFPoly = DRateSFPoly
        self.DopCentroidPoly, self.DopCentroidCOA = DopCentroidPoly, DopCentroidCOA
        super(INCAType, self).__init__(**kwargs)

    @property
    def scp_time_ca(self):
        """
        None|float: The time of closest approach of the scene center point.
        """

        return None if self.TimeCAPoly is None else float(self.TimeCAPoly.Coefs[0])

    def _closest_approach_geometry(self, scp, arp_poly):
        if self.TimeCAPoly is None or arp_poly is None:
            raise ValueError('Both TimeCAPoly and the aperture position polynomial are required.')
        t_zero = self.scp_time_ca
        return _look_geometry(scp, arp_poly(t_zero), arp_poly.derivative_eval(t_zero, der_order=1))

    def u_rg(self, scp, arp_poly):
        """
        The range unit vector at closest approach.

        Parameters
        ----------
        scp : numpy.ndarray
        arp_poly : sarproj.elements.blocks.XYZPolyType

        Returns
        -------
        numpy.ndarray
        """

        return self._closest_approach_geometry(scp, arp_poly)[0]

    def u_az(self, scp, arp_poly):
        """
        The azimuth unit vector at closest approach.

        Parameters
        ----------
        scp : numpy.ndarray
        arp_poly : sarproj.elements.blocks.XYZPolyType

        Returns
        -------
        numpy.ndarray
        """

        urg, uvel, look = self._closest_approach_geometry(scp, arp_poly)
        return numpy.cross(_unit(-look*numpy.cross(urg, uvel)), urg)


class RMAType(Serializable):
    """
    Range migration algorithm parameters. Exactly one of `RMAT`, `RMCR` and
    `INCA` is expected, and determines :attr:`ImageType`.
    """

    _fields = ('RMAlgoType', 'ImageType', 'RMAT', 'RMCR', 'INCA')
    _required = ('RMAlgoType', 'ImageType')
    _choice = ({'required': True, 'collection': ('RMAT', 'RMCR', 'INCA')}, )
    RMAlgoType = StringEnumDescriptor(
        'RMAlgoType', ('OMEGA_K', 'CSA', 'RG_DOP'), _required, strict=DEFAULT_STRICT,
        docstring='The migration algorithm: Stolt interpolation (OMEGA_K), chirp scaling (CSA), '
                  'or range-Doppler with compressed range migration correction (RG_DOP).')  # type: str
    RMAT = SerializableDescriptor(
        'RMAT', RMRefType, _required, strict=DEFAULT_STRICT,
        docstring='Along track motion compensation reference.')  # type: RMRefType
    RMCR = SerializableDescriptor(
        'RMCR', RMRefType, _required, strict=DEFAULT_STRICT,
        docstring='Cross range motion compensation reference.')  # type: RMRefType
    INCA = SerializableDescriptor(
        'INCA', INCAType, _required, strict=DEFAULT_STRICT,
        docstring='Imaging near closest approach parameters.')  # type: INCAType

    def __init__(self, RMAlgoType=None, RMAT=None, RMCR=None, INCA=None, **kwargs):
        """

        Parameters
        ----------
        RMAlgoType : str
        RMAT : None|RMRefType|dict
        RMCR : None|RMRefType|dict
        INCA : None|INCAType|dict
        kwargs
        """

        self.RMAlgoType = RMAlgoType
        self.RMAT, self.RMCR, self.INCA = RMAT, RMCR, INCA
        super(RMAType, self).__init__(**kwargs)

    @property
    def ImageType(self):
        """
        None|str: The first populated of `'RMAT'`, `'RMCR'` and `'INCA'`. Read only.
        """

        return next(
            (attribute for attribute in self._choice[0]['collection'] if getattr(self, attribute) is not None),
            None)

    def _derive_parameters(self, SCPCOA, Position, RadarCollection, ImageFormation, GeoData):
        """
        Populate the unset reference state, Doppler cone angle, closest approach
        range and zero frequency. Invoked by the parent :class:`SICDType`.

        Parameters
        ----------
        SCPCOA : sarproj.elements.SCPCOA.SCPCOAType
        Position : sarproj.elements.Position.PositionType
        RadarCollection : sarproj.elements.RadarCollection.RadarCollectionType
        ImageFormation : sarproj.elements.ImageFormation.ImageFormationType
        GeoData : sarproj.elements.GeoData.GeoDataType
        """

        if SCPCOA is None:
            return
        scp = None if GeoData is None else GeoData.get_scp_array()

        im_type = self.ImageType
        if im_type in ['RMAT', 'RMCR']:
            self._derive_reference(getattr(self, im_type), SCPCOA, scp)
        elif im_type == 'INCA':
            inca = self.INCA
            have_arp = Position is not None and Position.ARPPoly is not None
            if inca.R_CA_SCP is None and scp is not None and have_arp and inca.TimeCAPoly is not None:
                inca.R_CA_SCP = float(norm(Position.ARPPoly(inca.scp_time_ca) - scp))
            if inca.FreqZero is None:
                inca.FreqZero = get_center_frequency(RadarCollection, ImageFormation)

    @staticmethod
    def _derive_reference(rm_ref, SCPCOA, scp):
        if rm_ref.PosRef is None and SCPCOA.ARPPos is not None:
            rm_ref.PosRef = SCPCOA.ARPPos.copy()
        if rm_ref.VelRef is None and SCPCOA.ARPVel is not None:
            rm_ref.VelRef = SCPCOA.ARPVel.copy()
        if rm_ref.DopConeAngRef is not None or scp is None or rm_ref.PosRef is None or rm_ref.VelRef is None:
            return

        los = scp - rm_ref.PosRef.get_array()
        # the reference position may coincide with the scene center point
        if norm(los) > 0:
            cos_angle = numpy.dot(_unit(rm_ref.VelRef.get_array()), _unit(los))
            rm_ref.DopConeAngRef = float(numpy.rad2deg(numpy.arccos(cos_angle)))
