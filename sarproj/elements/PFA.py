"""
The polar format algorithm parameters.
"""

__classification__ = "UNCLASSIFIED"
__author__ = "Thomas McCullough"

from sarpy.geometry.geocoords import wgs_84_norm

from .base import Serializable, DEFAULT_STRICT
from .descriptors import BooleanDescriptor, FloatDescriptor, \
    SerializableDescriptor, UnitVectorDescriptor
from .blocks import Poly1DType, Poly2DType, XYZType


POLAR_ANGLE_TOL = 1e-4
"""
float: Permitted magnitude (radians) of the polar angle at the reference time.
"""


class STDeskewType(Serializable):
    """
    Slow time deskew, applied in the image domain.
    """

    _fields = ('Applied', 'STDSPhasePoly')
    _required = _fields
    Applied = BooleanDescriptor(
        'Applied', _required, strict=DEFAULT_STRICT,
        docstring='Whether the deskew phase has been applied.')  # type: bool
    STDSPhasePoly = SerializableDescriptor(
        'STDSPhasePoly', Poly2DType, _required, strict=DEFAULT_STRICT,
        docstring='Deskew phase (cycles) in terms of the image row and column '
                  'coordinates.')  # type: Poly2DType

    def __init__(self, Applied=None, STDSPhasePoly=None, **kwargs):
        self.Applied, self.STDSPhasePoly = Applied, STDSPhasePoly
        super(STDeskewType, self).__init__(**kwargs)


class PFAType(Serializable):
    """
    Polar format algorithm parameters. The rectangular spatial frequency
    bounds of the resampled output are `[Krg1, Krg2]` in range and `[Kaz1, Kaz2]`
    in azimuth.
    """

    _fields = (
        'FPN', 'IPN', 'PolarAngRefTime', 'PolarAngPoly', 'SpatialFreqSFPoly', 'Krg1', 'Krg2', 'Kaz1', 'Kaz2',
        'STDeskew')
    _required = _fields[:-1]
    FPN = UnitVectorDescriptor(
        'FPN', XYZType, _required, strict=DEFAULT_STRICT,
        docstring='Outward unit normal of the focus plane.')  # type: XYZType
    IPN = UnitVectorDescriptor(
        'IPN', XYZType, _required, strict=DEFAULT_STRICT,
        docstring='Outward unit normal of the image formation plane.')  # type: XYZType
    PolarAngRefTime = FloatDescriptor(
        'PolarAngRefTime', _required, strict=DEFAULT_STRICT,
        docstring='Time (s) from collection start at which the polar angle is zero.')  # type: float
    PolarAngPoly = SerializableDescriptor(
        'PolarAngPoly', Poly1DType, _required, strict=DEFAULT_STRICT,
        docstring='Polar angle (radians) in terms of time from collection start.')  # type: Poly1DType
    SpatialFreqSFPoly = SerializableDescriptor(
        'SpatialFreqSFPoly', Poly1DType, _required, strict=DEFAULT_STRICT,
        docstring=r'Spatial frequency scale factor :math:`KSF` in terms of polar angle, where the '
                  r'aperture spatial frequency is :math:`f_x\cdot (2/c)\cdot KSF`.')  # type: Poly1DType
    Krg1 = FloatDescriptor(
        'Krg1', _required, strict=DEFAULT_STRICT, docstring='Lower range spatial frequency.')  # type: float
    Krg2 = FloatDescriptor(
        'Krg2', _required, strict=DEFAULT_STRICT, docstring='Upper range spatial frequency.')  # type: float
    Kaz1 = FloatDescriptor(
        'Kaz1', _required, strict=DEFAULT_STRICT, docstring='Lower azimuth spatial frequency.')  # type: float
    Kaz2 = FloatDescriptor(
        'Kaz2', _required, strict=DEFAULT_STRICT, docstring='Upper azimuth spatial frequency.')  # type: float
    STDeskew = SerializableDescriptor(
        'STDeskew', STDeskewType, _required, strict=DEFAULT_STRICT,
        docstring='Slow time deskew parameters.')  # type: STDeskewType

    def __init__(self, FPN=None, IPN=None, PolarAngRefTime=None, PolarAngPoly=None,
                 SpatialFreqSFPoly=None, Krg1=None, Krg2=None, Kaz1=None, Kaz2=None,
                 STDeskew=None, **kwargs):
        self.FPN, self.IPN = FPN, IPN
        self.PolarAngRefTime, self.PolarAngPoly = PolarAngRefTime, PolarAngPoly
        self.SpatialFreqSFPoly = SpatialFreqSFPoly
        self.Krg1, self.Krg2 = Krg1, Krg2
        self.Kaz1, self.Kaz2 = Kaz1, Kaz2
        self.STDeskew = STDeskew
        super(PFAType, self).__init__(**kwargs)

    @property
    def st_deskew_applied(self):
        """
        bool: Whether slow time deskew is present and applied.
        """

        return self.STDeskew is not None and bool(self.STDeskew.Applied)

    @staticmethod
    def _band(direction):
        if direction is None or direction.KCtr is None or direction.ImpRespBW is None:
            return None
        half = 0.5*direction.ImpRespBW
        return direction.KCtr - half, direction.KCtr + half

    def _derive_parameters(self, Grid, SCPCOA, GeoData):
        """
        Populate the unset reference time, plane normals and spatial frequency
        bounds. Invoked by the parent :class:`SICDType`.

        Parameters
        ----------
        Grid : sarproj.elements.Grid.GridType
        SCPCOA : sarproj.elements.SCPCOA.SCPCOAType
        GeoData : sarproj.elements.GeoData.GeoDataType
        """

        if self.PolarAngRefTime is None and SCPCOA is not None and SCPCOA.SCPTime is not None:
            self.PolarAngRefTime = SCPCOA.SCPTime

        scp = None if GeoData is None else GeoData.get_scp_array()
        if scp is None:
            return

        have_state = SCPCOA is not None and None not in (SCPCOA.ARPPos, SCPCOA.ARPVel, SCPCOA.look)
        if have_state:
            ground_normal = wgs_84_norm(scp)
            image_plane = None if Grid is None else Grid.ImagePlane
            if self.IPN is None:
                if image_plane in (None, 'SLANT'):
                    # slant is the usual formation plane
                    self.IPN = XYZType.from_array(SCPCOA.get_slant_plane_normal(scp))
                elif image_plane == 'GROUND':
                    self.IPN = XYZType.from_array(ground_normal)
            if self.FPN is None:
                self.FPN = XYZType.from_array(ground_normal)

        if Grid is None:
            return
        row_band = self._band(Grid.Row)
        if row_band is not None:
            self.Krg1 = row_band[0] if self.Krg1 is None else self.Krg1
            self.Krg2 = row_band[1] if self.Krg2 is None else self.Krg2
        col_band = self._band(Grid.Col)
        if col_band is not None:
            self.Kaz1 = col_band[0] if self.Kaz1 is None else self.Kaz1
            self.Kaz2 = col_band[1] if self.Kaz2 is None else self.Kaz2

    def _check_polar_ang_ref(self):
        """
        The polar angle should vanish at the reference time.

        Returns
        -------
        bool
        """

        if self.PolarAngPoly is None or self.PolarAngRefTime is None:
            return True

        polar_angle_ref = self.PolarAngPoly(self.PolarAngRefTime)
        if abs(polar_angle_ref) > POLAR_ANGLE_TOL:
            self.log_validity_error(
                'The PolarAngPoly evaluated at PolarAngRefTime yields {}, which should be 0'.format(polar_angle_ref))
            return False
        return True

    def _basic_validity_check(self):
        condition = super(PFAType, self)._basic_validity_check()
        return self._check_polar_ang_ref() and condition
