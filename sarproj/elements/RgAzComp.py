"""
Range, Doppler compensation parameters.
"""

__classification__ = "UNCLASSIFIED"
__author__ = "Thomas McCullough"


import logging

import numpy

from .base import Serializable, DEFAULT_STRICT
from .descriptors import FloatDescriptor, SerializableDescriptor
from .blocks import Poly1DType


logger = logging.getLogger(__name__)


class RgAzCompType(Serializable):
    """
    Parameters of an image formed by range, Doppler compensation. The azimuth
    image coordinate is proportional to the change in Doppler cone angle cosine.
    """

    _fields = ('AzSF', 'KazPoly')
    _required = _fields
    AzSF = FloatDescriptor(
        'AzSF', _required, strict=DEFAULT_STRICT,
        docstring='Scale factor (1/m) from the azimuth coordinate (m) to the change in Doppler '
                  'cone angle cosine at the center of aperture.')  # type: float
    KazPoly = SerializableDescriptor(
        'KazPoly', Poly1DType, _required, strict=DEFAULT_STRICT,
        docstring='Azimuth spatial frequency (cycles/m) in terms of time (s) from collection start.')  # type: Poly1DType

    def __init__(self, AzSF=None, KazPoly=None, **kwargs):
        self.AzSF, self.KazPoly = AzSF, KazPoly
        super(RgAzCompType, self).__init__(**kwargs)

    @staticmethod
    def _get_az_sf(SCPCOA):
        if SCPCOA is None or SCPCOA.look is None or SCPCOA.DopplerConeAng is None or \
                SCPCOA.SlantRange is None:
            return None
        return float(-SCPCOA.look*numpy.sin(numpy.deg2rad(SCPCOA.DopplerConeAng))/SCPCOA.SlantRange)

    def _derive_parameters(self, SCPCOA):
        """
        Populate AzSF from the center of aperture geometry, or warn when the
        populated value differs. Invoked by the parent :class:`SICDType`.
        """

        az_sf = self._get_az_sf(SCPCOA)
        if az_sf is None:
            return
        if self.AzSF is None:
            self.AzSF = az_sf
        elif abs(self.AzSF - az_sf) > 1e-3:
            logger.warning(
                'The derived value for RgAzComp.AzSF is {}, but {} is populated'.format(az_sf, self.AzSF))

    def check_parameters(self, SCPCOA, report=None):
        """
        Check the azimuth scale factor against the value derived from the
        center of aperture geometry.

        Parameters
        ----------
        SCPCOA : sarproj.elements.SCPCOA.SCPCOAType
        report : None|sarproj.elements.base.ValidationReport

        Returns
        -------
        bool
        """

        az_sf = self._get_az_sf(SCPCOA)
        if az_sf is None or self.AzSF is None:
            return True
        if abs(self.AzSF - az_sf) > 1e-6:
            self.log_validity_error(
                'AzSF is expected to be {}, and is populated as {}'.format(az_sf, self.AzSF), report=report)
            return False
        return True
