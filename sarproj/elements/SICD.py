"""
The SICDType definition, aggregating the metadata elements and orchestrating
the grid derivation, validation, and projection.
"""

__classification__ = "UNCLASSIFIED"
__author__ = "Thomas McCullough"


import logging

from sarproj.geometry import point_projection

from .base import Serializable, ValidationReport
from .descriptors import SerializableDescriptor
from .CollectionInfo import CollectionInfoType
from .ImageData import ImageDataType
from .GeoData import GeoDataType
from .Grid import GridType, DEFAULT_WEIGHT_SIZE
from .Position import PositionType
from .RadarCollection import RadarCollectionType
from .ImageFormation import ImageFormationType
from .SCPCOA import SCPCOAType
from .RgAzComp import RgAzCompType
from .PFA import PFAType
from .RMA import RMAType
from .utils import get_center_frequency


logger = logging.getLogger(__name__)


def _element(name, the_type, required, doc):
    return SerializableDescriptor(name, the_type, required, strict=False, docstring=doc)


class SICDType(Serializable):
    """
    Sensor Independent Complex Data metadata, containing the elements relevant
    to the image grid and its projection.
    """

    _fields = (
        'CollectionInfo', 'ImageData', 'GeoData', 'Grid', 'Position',
        'RadarCollection', 'ImageFormation', 'SCPCOA', 'RgAzComp', 'PFA', 'RMA')
    _required = _fields[:-3]
    _choice = ({'required': False, 'collection': ('RgAzComp', 'PFA', 'RMA')}, )
    CollectionInfo = _element(
        'CollectionInfo', CollectionInfoType, _required,
        'Collector and radar mode.')  # type: CollectionInfoType
    ImageData = _element(
        'ImageData', ImageDataType, _required,
        'Image size, offsets, and scene center pixel.')  # type: ImageDataType
    GeoData = _element(
        'GeoData', GeoDataType, _required,
        'The scene center point.')  # type: GeoDataType
    Grid = _element(
        'Grid', GridType, _required,
        'The output sample grid and its spatial frequency support.')  # type: GridType
    Position = _element(
        'Position', PositionType, _required,
        'Aperture position in terms of time.')  # type: PositionType
    RadarCollection = _element(
        'RadarCollection', RadarCollectionType, _required,
        'Transmit frequency band.')  # type: RadarCollectionType
    ImageFormation = _element(
        'ImageFormation', ImageFormationType, _required,
        'Image formation algorithm and processed band.')  # type: ImageFormationType
    SCPCOA = _element(
        'SCPCOA', SCPCOAType, _required,
        'Aperture state at the scene center point center of aperture time.')  # type: SCPCOAType
    RgAzComp = _element(
        'RgAzComp', RgAzCompType, _required,
        'Range, Doppler compensation parameters.')  # type: RgAzCompType
    PFA = _element(
        'PFA', PFAType, _required,
        'Polar format algorithm parameters.')  # type: PFAType
    RMA = _element(
        'RMA', RMAType, _required,
        'Range migration algorithm parameters.')  # type: RMAType

    def __init__(self, CollectionInfo=None, ImageData=None, GeoData=None, Grid=None, Position=None,
                 RadarCollection=None, ImageFormation=None, SCPCOA=None,
                 RgAzComp=None, PFA=None, RMA=None, **kwargs):
        self.CollectionInfo, self.ImageData, self.GeoData = CollectionInfo, ImageData, GeoData
        self.Grid, self.Position = Grid, Position
        self.RadarCollection, self.ImageFormation = RadarCollection, ImageFormation
        self.SCPCOA = SCPCOA
        self.RgAzComp, self.PFA, self.RMA = RgAzComp, PFA, RMA
        super(SICDType, self).__init__(**kwargs)

    def _get_image_form_algo(self):
        if self.ImageFormation is None or self.ImageFormation.ImageFormAlgo is None:
            return None
        return self.ImageFormation.ImageFormAlgo.upper()

    def _get_scp(self):
        return None if self.GeoData is None else self.GeoData.get_scp_array()

    def _get_arp_poly(self):
        return None if self.Position is None else self.Position.ARPPoly

    def get_center_frequency(self):
        """
        The center processed frequency, when given in absolute terms.

        Returns
        -------
        None|float
        """

        return get_center_frequency(self.RadarCollection, self.ImageFormation)

    #########
    # derivation

    def fill_derived_fields(self, weight_size=DEFAULT_WEIGHT_SIZE):
        """
        Populates any unset grid fields which may be derived from the other
        metadata. This modifies the structure in place.

        Parameters
        ----------
        weight_size : int
            The size of weighting functions generated from a named window.

        Returns
        -------
        None
        """

        if self.Grid is None:
            logger.error('Grid is not populated, so no grid fields can be derived.')
            return

        # each step reads what the previous steps populated
        if self.SCPCOA is None:
            self.SCPCOA = SCPCOAType()
        self.Grid.fill_time_coa_poly(self.CollectionInfo, self.SCPCOA)

        # noinspection PyProtectedMember
        self.SCPCOA._derive_scp_time(self.Grid)
        # noinspection PyProtectedMember
        self.SCPCOA._derive_position(self.Position)
        # noinspection PyProtectedMember
        self.SCPCOA._derive_geometry_parameters(self.GeoData)

        scp = self._get_scp()
        im_form_algo = self._get_image_form_algo()
        if im_form_algo == 'RMA' or (im_form_algo is None and self.RMA is not None):
            if self.RMA is not None:
                # noinspection PyProtectedMember
                self.RMA._derive_parameters(
                    self.SCPCOA, self.Position, self.RadarCollection, self.ImageFormation, self.GeoData)
                if self.RMA.ImageType is not None:
                    self.Grid.fill_derived_fields_rma(self.RMA, scp, self._get_arp_poly())
        elif im_form_algo == 'RGAZCOMP':
            self.Grid.fill_derived_fields_rg_az_comp(self.GeoData, self.SCPCOA, self.get_center_frequency())
            if self.RgAzComp is None:
                self.RgAzComp = RgAzCompType()
            # noinspection PyProtectedMember
            self.RgAzComp._derive_parameters(self.SCPCOA)
        elif im_form_algo == 'PFA' and self.PFA is not None:
            # noinspection PyProtectedMember
            self.PFA._derive_parameters(self.Grid, self.SCPCOA, self.GeoData)

        self.Grid.fill_derived_fields(self.CollectionInfo, self.ImageData, self.SCPCOA, weight_size=weight_size)

    def fill_default_fields(self):
        """
        Populates the grid fields with the defaults expected for the image
        formation algorithm, where not already set.

        Returns
        -------
        None
        """

        if self.Grid is None:
            logger.error('Grid is not populated, so no default fields can be populated.')
            return

        fc = self.get_center_frequency()
        im_form_algo = self._get_image_form_algo()
        if im_form_algo == 'RMA' and self.RMA is not None:
            self.Grid.fill_default_fields_rma(self.RMA, fc)
        elif im_form_algo == 'PFA' and self.PFA is not None:
            self.Grid.fill_default_fields_pfa(self.PFA, fc)

    #########
    # validation

    def validate_grid(self):
        """
        Performs the generic grid checks, followed by the check specific to
        the image formation algorithm.

        Returns
        -------
        ValidationReport
        """

        report = ValidationReport()
        if self.Grid is None:
            self.log_validity_error('Grid is not populated, so cannot be validated', report=report)
            return report

        self.Grid.validate(self.CollectionInfo, self.ImageData, report=report)

        fc = self.get_center_frequency()
        im_form_algo = self._get_image_form_algo()
        if im_form_algo in ['RMA', 'PFA', 'RGAZCOMP']:
            attribute = 'RgAzComp' if im_form_algo == 'RGAZCOMP' else im_form_algo
            if getattr(self, attribute) is None:
                self.log_validity_error(
                    'ImageFormation.ImageFormAlgo is {}, but the {} parameter is not populated'.format(
                        im_form_algo, attribute), report=report)
                return report

        if im_form_algo == 'RMA':
            self.Grid.validate_rma(self.RMA, self._get_scp(), self._get_arp_poly(), fc, report=report)
        elif im_form_algo == 'PFA':
            self.Grid.validate_pfa(self.PFA, self.RadarCollection, fc, report=report)
        elif im_form_algo == 'RGAZCOMP':
            self.Grid.validate_rg_az_comp(self.RgAzComp, self.GeoData, self.SCPCOA, fc, report=report)
            self.RgAzComp.check_parameters(self.SCPCOA, report=report)
        return report

    #########
    # projection

    def _missing_projection_element(self):
        """
        The first element needed for projection which is not populated, or
        `None` when all are present.

        Returns
        -------
        None|str
        """

        if self._get_scp() is None:
            return 'GeoData.SCP'
        image_data = self.ImageData
        if image_data is None or None in (image_data.FirstRow, image_data.FirstCol, image_data.SCPPixel):
            return 'ImageData.FirstRow, ImageData.FirstCol or ImageData.SCPPixel'
        if self._get_arp_poly() is None:
            return 'Position.ARPPoly'
        scpcoa = self.SCPCOA
        if scpcoa is None or None in (scpcoa.ARPPos, scpcoa.ARPVel, scpcoa.SideOfTrack):
            return 'SCPCOA.ARPPos, SCPCOA.ARPVel or SCPCOA.SideOfTrack'

        grid = self.Grid
        if grid is None:
            return 'Grid'
        for attribute in ['Row', 'Col']:
            direction = getattr(grid, attribute)
            if direction is None or direction.SS is None or direction.UVectECF is None:
                return 'Grid.{0:s}.SS or Grid.{0:s}.UVectECF'.format(attribute)
        if grid.Type is None:
            return 'Grid.Type'

        if grid.Type == 'RGAZIM':
            im_form_algo = self._get_image_form_algo()
            if im_form_algo == 'PFA':
                if self.PFA is None or self.PFA.PolarAngPoly is None or self.PFA.SpatialFreqSFPoly is None:
                    return 'PFA.PolarAngPoly or PFA.SpatialFreqSFPoly parameter'
            elif im_form_algo == 'RGAZCOMP':
                if self.RgAzComp is None or self.RgAzComp.AzSF is None:
                    return 'RgAzComp.AzSF parameter'
            else:
                return 'PFA or RGAZCOMP ImageFormation.ImageFormAlgo for Grid.Type RGAZIM'
        elif grid.Type == 'RGZERO':
            inca = None if self.RMA is None else self.RMA.INCA
            if inca is None or None in (inca.R_CA_SCP, inca.TimeCAPoly, inca.DRateSFPoly):
                return 'RMA.INCA R_CA_SCP, TimeCAPoly or DRateSFPoly parameter'
        return None

    def can_project_coordinates(self):
        """
        Whether enough is populated to project between image and scene
        coordinates. When not, the first missing element is logged as an error.

        Returns
        -------
        bool
        """

        missing = self._missing_projection_element()
        if missing is not None:
            logger.error('Formulating a projection is not feasible, because the {} is not populated.'.format(missing))
            return False
        if self.Grid.Type not in ['RGAZIM', 'RGZERO', 'XRGYCR', 'XCTYAT', 'PLANE']:
            logger.error('Unhandled Grid.Type {}, so no projection can be formulated.'.format(self.Grid.Type))
            return False
        if self.Grid.TimeCOAPoly is None:
            logger.warning(
                'Grid.TimeCOAPoly is not populated, so the projection uses a constant '
                'center of aperture time and may be inaccurate.')
        return True

    def get_projection_model(self, **kwargs):
        """
        Gets the projection model for this structure.

        Parameters
        ----------
        kwargs
            The keyword arguments for :func:`sarproj.geometry.point_projection.get_projection_model`.

        Returns
        -------
        sarproj.geometry.projection_model.ProjectionModel
        """

        return point_projection.get_projection_model(self, **kwargs)

    def project_ground_to_image(self, coords, **kwargs):
        """
        Project ECF scene points to pixel (row, column) coordinates.

        Parameters
        ----------
        coords : numpy.ndarray|tuple|list
            ECF coordinates, of shape `(3, )` or `(N, 3)`.
        kwargs
            The keyword arguments for :func:`sarproj.geometry.point_projection.ground_to_image`.

        Returns
        -------
        Tuple[numpy.ndarray, numpy.ndarray|float, numpy.ndarray|int]
            The image points, residual ground plane displacement (m), and the
            number of iterations performed.
        """

        return point_projection.ground_to_image(coords, self, **kwargs)

    def project_image_to_ground(self, im_points, **kwargs):
        """
        Project pixel (row, column) coordinates to ECF points in a ground plane.

        Parameters
        ----------
        im_points : numpy.ndarray|list|tuple
        kwargs
            The keyword arguments for :func:`sarproj.geometry.point_projection.image_to_ground_plane`.

        Returns
        -------
        numpy.ndarray
        """

        return point_projection.image_to_ground_plane(im_points, self, **kwargs)
