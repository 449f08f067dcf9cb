"""
The GridType definition, along with the derivation and validation of the
direction parameters against the image formation algorithm details.
"""

__classification__ = "UNCLASSIFIED"
__author__ = "Thomas McCullough"


import logging
from functools import partial

import numpy
from numpy.linalg import norm
from scipy.constants import speed_of_light

from sarpy.processing.sicd.windows import general_hamming, kaiser, find_half_power, \
    get_hamming_broadening_factor

from .base import Serializable, ParametersCollection, DEFAULT_STRICT
from .descriptors import StringDescriptor, StringEnumDescriptor, FloatDescriptor, \
    FloatArrayDescriptor, IntegerEnumDescriptor, SerializableDescriptor, \
    UnitVectorDescriptor, ParametersDescriptor
from .blocks import XYZType, Poly2DType


logger = logging.getLogger(__name__)


DEFAULT_WEIGHT_SIZE = 512
"""
int: Number of samples when WgtFunct is generated from the window name.
"""

DK_TOL = 1e-2
"""
float: relative tolerance for the populated DeltaK1/DeltaK2 against the estimated values.
"""

WGT_TOL = 1e-3
"""
float: absolute tolerance for the WgtFunct samples against the named window.
"""

UVECT_TOL = 1e-3
"""
float: tolerance on the norm of the difference of populated and derived unit vectors.
"""

WF_TOL = 1e-3
"""
float: relative tolerance for waveform derived center spatial frequency.
"""

IFP_POLY_TOL = 1e-5
"""
float: tolerance for image formation polynomial comparisons.
"""

BOUNDS_EPSILON = numpy.finfo(numpy.float64).eps


def _uniform_weights(size):
    # uniform weighting is signified by an empty sample array
    return numpy.zeros((0, ), dtype='float64')


def _relative_mismatch(value, reference, tolerance, scale=0.0):
    denominator = max(abs(value), abs(reference), abs(scale))
    if denominator == 0:
        return False
    return abs(value - reference) > tolerance*denominator


def _kfc(fc):
    return fc*2/speed_of_light


def get_vertex_coordinates(image_data, row_ss, col_ss):
    """
    Gets the physical coordinates, in meters from the scene center point, of
    the valid data vertices if declared and of the four image corners otherwise.

    Parameters
    ----------
    image_data : sarproj.elements.ImageData.ImageDataType
    row_ss : float
    col_ss : float

    Returns
    -------
    (None, None)|(numpy.ndarray, numpy.ndarray)
    """

    if image_data is None or row_ss is None or col_ss is None:
        return None, None
    vertices = image_data.get_vertex_data()
    if vertices is None:
        return None, None
    try:
        x_coords = row_ss*(vertices[:, 0] - (image_data.SCPPixel.Row - image_data.FirstRow))
        y_coords = col_ss*(vertices[:, 1] - (image_data.SCPPixel.Col - image_data.FirstCol))
    except (AttributeError, TypeError, ValueError):
        return None, None
    return x_coords, y_coords


class WgtTypeType(Serializable):
    """
    The named aperture weighting window, with its free form parameters.
    """

    _fields = ('WindowName', 'Parameters')
    _required = ('WindowName',)
    WindowName = StringDescriptor(
        'WindowName', _required, strict=DEFAULT_STRICT,
        docstring='Name of the spatial frequency weighting window, such as UNIFORM, HAMMING, '
                  'HANNING, KAISER or TAYLOR.')  # type: str
    Parameters = ParametersDescriptor(
        'Parameters', _required, strict=DEFAULT_STRICT,
        docstring='Window parameters, keyed by name.')  # type: ParametersCollection

    def __init__(self, WindowName=None, Parameters=None, **kwargs):
        self.WindowName, self.Parameters = WindowName, Parameters
        super(WgtTypeType, self).__init__(**kwargs)

    @property
    def window_name(self):
        """
        None|str: The upper case window name.
        """

        return None if self.WindowName is None else self.WindowName.upper()

    def get_parameter_value(self, param_name, default=None):
        """
        Look up a window parameter.

        Parameters
        ----------
        param_name : None|str
            `None` selects the first parameter.
        default : None|str

        Returns
        -------
        None|str
        """

        if self.Parameters is None:
            return default
        collection = self.Parameters.get_collection()
        if not collection:
            return default
        if param_name is None:
            return next(iter(collection.values()))
        return collection.get(param_name, default)

    def get_float_parameter(self, default):
        """
        Gets the first parameter value as a float, falling back to `default`
        when absent or not parseable.

        Parameters
        ----------
        default : float

        Returns
        -------
        float
        """

        try:
            # noinspection PyTypeChecker
            return float(self.get_parameter_value(None, default))
        except (TypeError, ValueError):
            return default


class DirParamType(Serializable):
    """
    The image formation grid parameters of one image direction, row or column.
    """

    _fields = (
        'UVectECF', 'SS', 'ImpRespWid', 'Sgn', 'ImpRespBW', 'KCtr', 'DeltaK1', 'DeltaK2', 'DeltaKCOAPoly',
        'WgtType', 'WgtFunct')
    _required = ('UVectECF', 'SS', 'ImpRespWid', 'Sgn', 'ImpRespBW', 'KCtr', 'DeltaK1', 'DeltaK2')
    UVectECF = UnitVectorDescriptor(
        'UVectECF', XYZType, _required, strict=DEFAULT_STRICT,
        docstring='ECF unit vector of increasing image coordinate at the scene center point.')  # type: XYZType
    SS = FloatDescriptor(
        'SS', _required, strict=DEFAULT_STRICT,
        docstring='Sample spacing (m) at the scene center point.')  # type: float
    ImpRespWid = FloatDescriptor(
        'ImpRespWid', _required, strict=DEFAULT_STRICT,
        docstring='Half power width (m) of the impulse response at the scene center point.')  # type: float
    Sgn = IntegerEnumDescriptor(
        'Sgn', (1, -1), _required, strict=DEFAULT_STRICT,
        docstring='Exponent sign of the transform from image to spatial frequency coordinates.')  # type: int
    ImpRespBW = FloatDescriptor(
        'ImpRespBW', _required, strict=DEFAULT_STRICT,
        docstring='Spatial bandwidth (cycles/m) forming the impulse response at the scene center point.')  # type: float
    KCtr = FloatDescriptor(
        'KCtr', _required, strict=DEFAULT_STRICT,
        docstring='Spatial frequency (cycles/m) at the transform zero frequency.')  # type: float
    DeltaK1 = FloatDescriptor(
        'DeltaK1', _required, strict=DEFAULT_STRICT,
        docstring='Lower bound (cycles/m), relative to KCtr, of the image spatial frequency support.')  # type: float
    DeltaK2 = FloatDescriptor(
        'DeltaK2', _required, strict=DEFAULT_STRICT,
        docstring='Upper bound (cycles/m), relative to KCtr, of the image spatial frequency support.')  # type: float
    DeltaKCOAPoly = SerializableDescriptor(
        'DeltaKCOAPoly', Poly2DType, _required, strict=DEFAULT_STRICT,
        docstring='Center of support offset from KCtr, in terms of the row and column '
                  'coordinates (m).')  # type: Poly2DType
    WgtType = SerializableDescriptor(
        'WgtType', WgtTypeType, _required, strict=DEFAULT_STRICT,
        docstring='The named spatial frequency weighting.')  # type: WgtTypeType
    WgtFunct = FloatArrayDescriptor(
        'WgtFunct', _required, strict=DEFAULT_STRICT, minimum_length=1,
        docstring='Sampled spatial frequency amplitude weights.')  # type: numpy.ndarray

    def __init__(self, UVectECF=None, SS=None, ImpRespWid=None, Sgn=None, ImpRespBW=None,
                 KCtr=None, DeltaK1=None, DeltaK2=None, DeltaKCOAPoly=None,
                 WgtType=None, WgtFunct=None, **kwargs):
        self.UVectECF, self.SS, self.Sgn = UVectECF, SS, Sgn
        self.ImpRespWid, self.ImpRespBW = ImpRespWid, ImpRespBW
        self.KCtr = KCtr
        self.DeltaK1, self.DeltaK2, self.DeltaKCOAPoly = DeltaK1, DeltaK2, DeltaKCOAPoly
        self.WgtType, self.WgtFunct = WgtType, WgtFunct
        super(DirParamType, self).__init__(**kwargs)

    @property
    def has_weights(self):
        """
        bool: Is a non-empty WgtFunct populated?
        """

        return self.WgtFunct is not None and self.WgtFunct.size > 0

    def get_unit_vector(self):
        """
        Gets the unit vector as an array, if populated.

        Returns
        -------
        None|numpy.ndarray
        """

        return None if self.UVectECF is None else self.UVectECF.get_array()

    #########
    # derivation

    def calculate_weight_function(self, report=None):
        """
        Gets the weight generating function associated with the named window
        in `WgtType`. The generator returned for a uniform window produces an
        empty array, which signifies constant weights.

        Parameters
        ----------
        report : None|sarproj.elements.base.ValidationReport

        Returns
        -------
        None|callable
            The function `f(size) -> numpy.ndarray`, or `None` if the window is
            not recognized.
        """

        if self.WgtType is None or self.WgtType.WindowName is None:
            return None

        window_name = self.WgtType.window_name
        if window_name == 'UNIFORM':
            return _uniform_weights
        elif window_name == 'HAMMING':
            # the parameter, when present, is the generalized raised cosine coefficient
            coef = self.WgtType.get_float_parameter(0.54)
            return partial(general_hamming, alpha=coef, sym=True)
        elif window_name == 'HANNING':
            return partial(general_hamming, alpha=0.5, sym=True)
        elif window_name == 'KAISER':
            beta = self.WgtType.get_float_parameter(14.0)
            return partial(kaiser, beta=beta, sym=True)

        if self.has_weights:
            self.log_validity_warning(
                'Window {} is not supported, and determining the weighting\n\t'
                'function by interpolation of the provided WgtFunct samples '
                'is not supported'.format(self.WgtType.WindowName), report=report)
        return None

    def calculate_delta_ks(self, x_coords, y_coords):
        """
        Estimate the `DeltaK1` and `DeltaK2` values from `DeltaKCOAPoly` evaluated at
        the given vertex coordinates, expanded by half the bandwidth and
        clamped to the Nyquist limit.

        Parameters
        ----------
        x_coords : None|numpy.ndarray
            Row coordinates (m) of the image vertices.
        y_coords : None|numpy.ndarray
            Column coordinates (m) of the image vertices.

        Returns
        -------
        None|(float, float)
        """

        if self.ImpRespBW is None or self.SS is None:
            return None

        half_bw = 0.5*self.ImpRespBW
        if self.DeltaKCOAPoly is None or x_coords is None:
            lower, upper = -half_bw, half_bw
        else:
            support_centers = self.DeltaKCOAPoly(x_coords, y_coords)
            lower = float(numpy.amin(support_centers)) - half_bw
            upper = float(numpy.amax(support_centers)) + half_bw

        nyquist = 0.5/abs(self.SS)
        if lower < -nyquist or upper > nyquist:
            return -nyquist, nyquist
        return lower, upper

    def _get_broadening_factor(self):
        """
        The ratio of impulse response width to bandwidth, from the named
        raised cosine window if possible and otherwise from the WgtFunct samples.

        Returns
        -------
        None|float
        """

        if self.WgtType is not None and self.WgtType.WindowName is not None:
            window_name = self.WgtType.window_name
            coef = None
            if window_name == 'UNIFORM':
                coef = 1.0
            elif window_name == 'HAMMING':
                coef = self.WgtType.get_float_parameter(0.54)
            elif window_name == 'HANNING':
                coef = 0.5

            if coef is not None:
                return get_hamming_broadening_factor(coef)

        if not self.has_weights:
            return None
        return find_half_power(self.WgtFunct, oversample=1024)

    def define_response_widths(self, populate=False):
        """
        Determine whichever of `ImpRespBW` and `ImpRespWid` is missing from the
        other and the broadening factor.

        Parameters
        ----------
        populate : bool
            Replace a populated value with the derived one.

        Returns
        -------
        None|(float, float)
            The `(ImpRespBW, ImpRespWid)` pair, if determined.
        """

        broadening_factor = self._get_broadening_factor()
        if broadening_factor is None:
            return None

        if self.ImpRespBW is not None:
            resp_width = broadening_factor/self.ImpRespBW
            if populate or self.ImpRespWid is None:
                self.ImpRespWid = resp_width
            return self.ImpRespBW, resp_width
        elif self.ImpRespWid is not None:
            resp_bw = broadening_factor/self.ImpRespWid
            if populate or self.ImpRespBW is None:
                self.ImpRespBW = resp_bw
            return resp_bw, self.ImpRespWid
        return None

    def fill_derived_fields(self, x_coords, y_coords, weight_size=DEFAULT_WEIGHT_SIZE):
        """
        Populate `DeltaK1/DeltaK2` and `WgtFunct`, when not already populated.
        Populated values are never overwritten.

        Parameters
        ----------
        x_coords : None|numpy.ndarray
        y_coords : None|numpy.ndarray
        weight_size : int
            The size of the generated weights.

        Returns
        -------
        None
        """

        if self.DeltaK1 is None and self.DeltaK2 is None:
            deltaks = self.calculate_delta_ks(x_coords, y_coords)
            if deltaks is not None:
                self.DeltaK1, self.DeltaK2 = deltaks

        if self.WgtType is not None and not self.has_weights and self.WgtType.window_name != 'UNKNOWN':
            weight_function = self.calculate_weight_function()
            if weight_function is not None:
                weights = weight_function(weight_size)
                if weights.size == 0:
                    weights = numpy.ones((weight_size, ), dtype='float64')
                self.WgtFunct = weights

        if self.ImpRespWid is None:
            self.define_response_widths(populate=False)

    def fill_derived_fields_rg_az_comp(self, offset):
        """
        Derive `KCtr` and `DeltaKCOAPoly` from each other for the range azimuth
        compression image formation algorithm.

        Parameters
        ----------
        offset : float
            The center spatial frequency of the direction, so `0` for the
            column and `2*fc/c` for the row.

        Returns
        -------
        None
        """

        if self.KCtr is None:
            if self.DeltaKCOAPoly is not None:
                self.KCtr = offset - self.DeltaKCOAPoly[0, 0]
            else:
                self.KCtr = offset
        if self.DeltaKCOAPoly is None:
            self.DeltaKCOAPoly = Poly2DType(Coefs=[[offset - self.KCtr, ], ])

    #########
    # validation

    def validate_weights(self, weight_function, report=None):
        """
        Checks the WgtFunct samples against the given weight generating function.

        Parameters
        ----------
        weight_function : callable
        report : None|sarproj.elements.base.ValidationReport

        Returns
        -------
        bool
        """

        if not self.has_weights:
            return True

        weights = self.WgtFunct
        if weight_function(5).size == 0:
            consistent = bool(numpy.all(weights == weights[0]))
        else:
            expected = weight_function(weights.size)
            consistent = not numpy.any(numpy.abs(expected - weights) > WGT_TOL)

        if not consistent:
            self.log_validity_warning(
                'WgtFunct values inconsistent with WgtType {}'.format(self.WgtType.WindowName), report=report)
        return consistent

    def _check_deltak_bounds(self, report):
        cond = True
        if self.DeltaK1 is not None and self.DeltaK2 is not None and self.DeltaK2 <= self.DeltaK1:
            self.log_validity_error(
                'DeltaK2 ({}) must be greater than DeltaK1 ({})'.format(self.DeltaK2, self.DeltaK1), report=report)
            cond = False

        if self.SS is not None and self.SS != 0:
            nyquist = 0.5/abs(self.SS)
            if self.DeltaK2 is not None and self.DeltaK2 > nyquist + BOUNDS_EPSILON:
                self.log_validity_error(
                    'DeltaK2 ({}) must be <= 1/(2*SS) ({})'.format(self.DeltaK2, nyquist), report=report)
                cond = False
            if self.DeltaK1 is not None and self.DeltaK1 < -nyquist - BOUNDS_EPSILON:
                self.log_validity_error(
                    'DeltaK1 ({}) must be >= -1/(2*SS) ({})'.format(self.DeltaK1, -nyquist), report=report)
                cond = False

        if self.ImpRespBW is not None and self.DeltaK1 is not None and self.DeltaK2 is not None and \
                self.ImpRespBW > (self.DeltaK2 - self.DeltaK1) + BOUNDS_EPSILON:
            self.log_validity_error(
                'ImpRespBW ({}) must be <= DeltaK2 - DeltaK1 '
                '({})'.format(self.ImpRespBW, self.DeltaK2 - self.DeltaK1), report=report)
            cond = False
        return cond

    def _check_deltak_estimates(self, x_coords, y_coords, report):
        deltaks = self.calculate_delta_ks(x_coords, y_coords)
        if deltaks is None:
            return True

        cond = True
        for attribute, estimate in zip(['DeltaK1', 'DeltaK2'], deltaks):
            value = getattr(self, attribute)
            if value is not None and _relative_mismatch(value, estimate, DK_TOL):
                self.log_validity_error(
                    'The {} value is populated as {}, but estimated to be {}'.format(attribute, value, estimate),
                    report=report)
                cond = False
        return cond

    def _check_weighting(self, report):
        if self.WgtType is None or self.WgtType.WindowName is None:
            return True

        cond = True
        window_name = self.WgtType.window_name
        weight_function = self.calculate_weight_function(report=report)
        if weight_function is not None:
            cond &= self.validate_weights(weight_function, report=report)
        elif window_name != 'UNKNOWN':
            self.log_validity_warning(
                'Unrecognized weighting description {}'.format(self.WgtType.WindowName), report=report)
            cond = False

        if window_name not in ['UNIFORM', 'UNKNOWN'] and not self.has_weights:
            self.log_validity_warning(
                'Non-uniform weighting {} indicated, but no WgtFunct provided'.format(self.WgtType.WindowName),
                report=report)
        return cond

    def validate(self, x_coords, y_coords, report=None):
        """
        Checks the spatial frequency support bounds, their consistency with the
        values estimated from `DeltaKCOAPoly`, and the weighting for validity.

        Parameters
        ----------
        x_coords : None|numpy.ndarray
            Row coordinates (m) of the image vertices.
        y_coords : None|numpy.ndarray
            Column coordinates (m) of the image vertices.
        report : None|sarproj.elements.base.ValidationReport

        Returns
        -------
        bool
        """

        cond = self._check_deltak_bounds(report)
        cond &= self._check_deltak_estimates(x_coords, y_coords, report)
        cond &= self._check_weighting(report)
        return cond

    def validate_rg_az_comp(self, offset, report=None):
        """
        Checks `KCtr` and `DeltaKCOAPoly` for the range azimuth compression
        image formation algorithm.

        Parameters
        ----------
        offset : float
        report : None|sarproj.elements.base.ValidationReport

        Returns
        -------
        bool
        """

        cond = True
        if self.KCtr is not None:
            derived = offset if self.DeltaKCOAPoly is None else offset - self.DeltaKCOAPoly[0, 0]
            if abs(self.KCtr - derived) > BOUNDS_EPSILON*max(1.0, abs(derived)):
                self.log_validity_error(
                    'KCtr is populated as {}, but expected to be {}'.format(self.KCtr, derived), report=report)
                cond = False

        if self.DeltaKCOAPoly is not None and not self.DeltaKCOAPoly.is_scalar():
            self.log_validity_error(
                'DeltaKCOAPoly must be a single value for RGAZCOMP data', report=report)
            cond = False
        return cond

    def _check_unit_vector(self, derived, label, report):
        populated = self.get_unit_vector()
        if populated is None or derived is None:
            return True
        if norm(populated - derived) > UVECT_TOL:
            self.log_validity_error(
                'UVectECF fields inconsistent.\n\t'
                'UVectECF is populated as {}, but the derived {} is {}'.format(populated, label, derived),
                report=report)
            return False
        return True

    def _check_kctr(self, derived, label, report, tolerance=WF_TOL, scale=0.0, error=True):
        if self.KCtr is None or derived is None:
            return True
        if _relative_mismatch(self.KCtr, derived, tolerance, scale=scale):
            msg = 'Waveform fields not consistent.\n\t' \
                  'KCtr is populated as {}, but {} is {}'.format(self.KCtr, label, derived)
            if error:
                self.log_validity_error(msg, report=report)
            else:
                self.log_validity_warning(msg, report=report)
            return False
        return True

    def _basic_validity_check(self):
        condition = super(DirParamType, self)._basic_validity_check()
        for attribute in ['SS', 'ImpRespBW', 'ImpRespWid']:
            value = getattr(self, attribute)
            if value is not None and value <= 0:
                self.log_validity_error(
                    '{} must be positive, but is populated as {}'.format(attribute, value))
                condition = False
        return condition


class GridType(Serializable):
    """
    The image sample grid, with the center of aperture time of each pixel
    and the parameters of the row and column directions.
    """

    _fields = ('ImagePlane', 'Type', 'TimeCOAPoly', 'Row', 'Col')
    _required = _fields
    _IMAGE_PLANE_VALUES = ('SLANT', 'GROUND', 'OTHER')
    _TYPE_VALUES = ('RGAZIM', 'RGZERO', 'XRGYCR', 'XCTYAT', 'PLANE')
    ImagePlane = StringEnumDescriptor(
        'ImagePlane', _IMAGE_PLANE_VALUES, _required, strict=DEFAULT_STRICT,
        docstring='The plane best describing the sample grid. The row and column unit vectors '
                  'define it precisely.')  # type: str
    Type = StringEnumDescriptor(
        'Type', _TYPE_VALUES, _required, strict=DEFAULT_STRICT,
        docstring="""
        The sample grid type, row coordinate first:

        * `RGAZIM` - range and azimuth, for range, Doppler and polar format images.

        * `RGZERO` - range and azimuth at zero Doppler, for INCA range migration images.

        * `XRGYCR` - slant plane range and cross range relative to a reference state.

        * `XCTYAT` - slant plane cross track and along track relative to a reference state.

        * `PLANE` - any other plane.
        """)  # type: str
    TimeCOAPoly = SerializableDescriptor(
        'TimeCOAPoly', Poly2DType, _required, strict=DEFAULT_STRICT,
        docstring='Center of aperture time (s from collection start) in terms of the row and '
                  'column coordinates (m).')  # type: Poly2DType
    Row = SerializableDescriptor(
        'Row', DirParamType, _required, strict=DEFAULT_STRICT,
        docstring='Row direction parameters.')  # type: DirParamType
    Col = SerializableDescriptor(
        'Col', DirParamType, _required, strict=DEFAULT_STRICT,
        docstring='Column direction parameters.')  # type: DirParamType

    def __init__(self, ImagePlane=None, Type=None, TimeCOAPoly=None, Row=None, Col=None, **kwargs):
        self.ImagePlane, self.Type = ImagePlane, Type
        self.TimeCOAPoly = TimeCOAPoly
        self.Row, self.Col = Row, Col
        super(GridType, self).__init__(**kwargs)

    def _ensure_directions(self):
        if self.Row is None:
            self.Row = DirParamType()
        if self.Col is None:
            self.Col = DirParamType()

    def get_vertex_coordinates(self, image_data):
        """
        Gets the physical vertex coordinates for the given image data, using
        the row and column sample spacing.

        Parameters
        ----------
        image_data : sarproj.elements.ImageData.ImageDataType

        Returns
        -------
        (None, None)|(numpy.ndarray, numpy.ndarray)
        """

        row_ss = None if self.Row is None else self.Row.SS
        col_ss = None if self.Col is None else self.Col.SS
        return get_vertex_coordinates(image_data, row_ss, col_ss)

    @staticmethod
    def default_grid_type(rma):
        """
        The grid type expected for the given range migration parameters.

        Parameters
        ----------
        rma : sarproj.elements.RMA.RMAType

        Returns
        -------
        str
        """

        if rma is None:
            raise ValueError('The RMA parameters are required')
        image_type = rma.ImageType
        if image_type == 'RMAT':
            return 'XCTYAT'
        elif image_type == 'RMCR':
            return 'XRGYCR'
        elif image_type == 'INCA':
            return 'RGZERO'
        raise ValueError('The RMA parameters have none of RMAT, RMCR, or INCA populated')

    def default_plane_type(self, rma):
        """
        The image plane expected for the given range migration parameters.
        INCA places no constraint, so the current value is returned.

        Parameters
        ----------
        rma : sarproj.elements.RMA.RMAType

        Returns
        -------
        None|str
        """

        if rma is None:
            raise ValueError('The RMA parameters are required')
        if rma.ImageType in ['RMAT', 'RMCR']:
            return 'SLANT'
        return self.ImagePlane

    #########
    # derivation

    def fill_time_coa_poly(self, collection_info, scpcoa):
        """
        For spotlight collections, the time of center of aperture is constant.

        Parameters
        ----------
        collection_info : sarproj.elements.CollectionInfo.CollectionInfoType
        scpcoa : sarproj.elements.SCPCOA.SCPCOAType

        Returns
        -------
        None
        """

        if self.TimeCOAPoly is not None:
            return  # nothing needs to be done
        if collection_info is None or scpcoa is None or scpcoa.SCPTime is None:
            return
        if collection_info.mode_type == 'SPOTLIGHT':
            self.TimeCOAPoly = Poly2DType(Coefs=[[scpcoa.SCPTime, ], ])

    def fill_derived_fields(self, collection_info, image_data, scpcoa, weight_size=DEFAULT_WEIGHT_SIZE):
        """
        Populate the time of center of aperture polynomial and the generic row
        and column direction parameters, if necessary. Populated values are
        never overwritten.

        Parameters
        ----------
        collection_info : sarproj.elements.CollectionInfo.CollectionInfoType
        image_data : sarproj.elements.ImageData.ImageDataType
        scpcoa : sarproj.elements.SCPCOA.SCPCOAType
        weight_size : int

        Returns
        -------
        None
        """

        self.fill_time_coa_poly(collection_info, scpcoa)
        x_coords, y_coords = self.get_vertex_coordinates(image_data)
        for attribute in ['Row', 'Col']:
            value = getattr(self, attribute)  # type: DirParamType
            if value is not None:
                value.fill_derived_fields(x_coords, y_coords, weight_size=weight_size)

    def fill_derived_fields_rma(self, rma, scp, arp_poly):
        """
        Populate the row and column unit vectors, and center spatial frequencies
        where possible, from the range migration parameters.

        Parameters
        ----------
        rma : sarproj.elements.RMA.RMAType
        scp : numpy.ndarray
        arp_poly : None|sarproj.elements.blocks.XYZPolyType

        Returns
        -------
        None
        """

        image_type = None if rma is None else rma.ImageType
        if image_type is None:
            raise ValueError('The RMA parameters with one of RMAT, RMCR, or INCA populated are required')

        self._ensure_directions()
        unset = self.Row.UVectECF is None and self.Col.UVectECF is None
        if image_type in ['RMAT', 'RMCR']:
            rm_ref = getattr(rma, image_type)
            if unset and scp is not None and rm_ref.PosRef is not None and rm_ref.VelRef is not None:
                if image_type == 'RMAT':
                    self.Row.UVectECF = XYZType.from_array(rm_ref.u_xct(scp))
                    self.Col.UVectECF = XYZType.from_array(rm_ref.u_yat(scp))
                else:
                    self.Row.UVectECF = XYZType.from_array(rm_ref.u_xrg(scp))
                    self.Col.UVectECF = XYZType.from_array(rm_ref.u_ycr(scp))
        else:
            inca = rma.INCA
            if unset and scp is not None and arp_poly is not None and inca.TimeCAPoly is not None:
                self.Row.UVectECF = XYZType.from_array(inca.u_rg(scp, arp_poly))
                self.Col.UVectECF = XYZType.from_array(inca.u_az(scp, arp_poly))
            if self.Col.KCtr is None:
                self.Col.KCtr = 0.
            if self.Row.KCtr is None and inca.FreqZero is not None:
                self.Row.KCtr = _kfc(inca.FreqZero)

    def fill_derived_fields_rg_az_comp(self, geo_data, scpcoa, fc):
        """
        Populate the grid for range azimuth compression image formation.

        Parameters
        ----------
        geo_data : sarproj.elements.GeoData.GeoDataType
        scpcoa : sarproj.elements.SCPCOA.SCPCOAType
        fc : None|float
            The center processed frequency.

        Returns
        -------
        None
        """

        if self.ImagePlane is None:
            self.ImagePlane = 'SLANT'
        if self.Type is None:
            self.Type = 'RGAZIM'

        self._ensure_directions()
        scp = None if geo_data is None else geo_data.get_scp_array()
        if scpcoa is not None and scp is not None:
            ulos = scpcoa.get_ulos(scp)
            uspn = scpcoa.get_slant_plane_normal(scp)
            if self.Row.UVectECF is None and ulos is not None:
                self.Row.UVectECF = XYZType.from_array(ulos)
            if self.Col.UVectECF is None and ulos is not None and uspn is not None:
                self.Col.UVectECF = XYZType.from_array(numpy.cross(uspn, ulos))

        if fc is not None:
            self.Row.fill_derived_fields_rg_az_comp(_kfc(fc))
        self.Col.fill_derived_fields_rg_az_comp(0.)

    def fill_default_fields_rma(self, rma, fc):
        """
        Populate the image plane, grid type, and center spatial frequencies
        implied by the range migration image type.

        Parameters
        ----------
        rma : sarproj.elements.RMA.RMAType
        fc : None|float

        Returns
        -------
        None
        """

        if rma.ImageType is None:
            logger.error('The RMA parameters have none of RMAT, RMCR, or INCA populated, so no defaults can be set.')
            return

        if self.ImagePlane is None:
            self.ImagePlane = self.default_plane_type(rma)
        if self.Type is None:
            self.Type = self.default_grid_type(rma)

        if fc is None:
            return
        self._ensure_directions()
        kfc = _kfc(fc)
        image_type = rma.ImageType
        if image_type == 'RMAT':
            dca = rma.RMAT.DopConeAngRef
            if dca is not None:
                if self.Row.KCtr is None:
                    self.Row.KCtr = kfc*numpy.sin(numpy.deg2rad(dca))
                if self.Col.KCtr is None:
                    self.Col.KCtr = kfc*numpy.cos(numpy.deg2rad(dca))
        elif image_type == 'RMCR':
            if self.Row.KCtr is None:
                self.Row.KCtr = kfc
            if self.Col.KCtr is None:
                self.Col.KCtr = 0.

    def fill_default_fields_pfa(self, pfa, fc):
        """
        Populate the grid type and center spatial frequencies for polar format
        image formation.

        Parameters
        ----------
        pfa : sarproj.elements.PFA.PFAType
        fc : None|float

        Returns
        -------
        None
        """

        if pfa is None:
            raise ValueError('The PFA parameters are required')
        if self.Type is None:
            self.Type = 'RGAZIM'

        self._ensure_directions()
        if self.Col.KCtr is None:
            self.Col.KCtr = 0.
        if self.Row.KCtr is None:
            if pfa.Krg1 is not None and pfa.Krg2 is not None:
                self.Row.KCtr = 0.5*(pfa.Krg1 + pfa.Krg2)
            elif fc is not None and pfa.SpatialFreqSFPoly is not None:
                self.Row.KCtr = _kfc(fc)*pfa.SpatialFreqSFPoly[0]

    #########
    # validation

    def validate_time_coa_poly(self, collection_info, report=None):
        """
        The time of center of aperture polynomial is constant exactly for
        spotlight collections.

        Parameters
        ----------
        collection_info : sarproj.elements.CollectionInfo.CollectionInfoType
        report : None|sarproj.elements.base.ValidationReport

        Returns
        -------
        bool
        """

        mode_type = None if collection_info is None else collection_info.mode_type
        if self.TimeCOAPoly is None or mode_type is None:
            return True

        if mode_type == 'SPOTLIGHT':
            if not self.TimeCOAPoly.is_scalar():
                self.log_validity_error(
                    'SPOTLIGHT data should only have scalar TimeCOAPoly.', report=report)
                return False
        elif self.TimeCOAPoly.is_scalar():
            self.log_validity_warning(
                '{} data should have 2-D TimeCOAPoly.'.format(mode_type), report=report)
            return False
        return True

    def validate_fft_signs(self, report=None):
        """
        Checks that the row and column FFT signs agree.

        Parameters
        ----------
        report : None|sarproj.elements.base.ValidationReport

        Returns
        -------
        bool
        """

        if self.Row is None or self.Col is None or self.Row.Sgn is None or self.Col.Sgn is None:
            return True
        if self.Row.Sgn != self.Col.Sgn:
            self.log_validity_error(
                'Row.Sgn ({}) and Col.Sgn ({}) should almost certainly be the same'.format(
                    self.Row.Sgn, self.Col.Sgn), report=report)
            return False
        return True

    def validate(self, collection_info, image_data, report=None):
        """
        The generic grid checks: the time of center of aperture polynomial,
        the FFT signs, and each of the direction parameters.

        Parameters
        ----------
        collection_info : sarproj.elements.CollectionInfo.CollectionInfoType
        image_data : sarproj.elements.ImageData.ImageDataType
        report : None|sarproj.elements.base.ValidationReport

        Returns
        -------
        bool
        """

        cond = self.validate_time_coa_poly(collection_info, report=report)
        cond &= self.validate_fft_signs(report=report)
        x_coords, y_coords = self.get_vertex_coordinates(image_data)
        for attribute in ['Row', 'Col']:
            value = getattr(self, attribute)  # type: DirParamType
            if value is not None:
                cond &= value.validate(x_coords, y_coords, report=report)
        return cond

    def validate_rma(self, rma, scp, arp_poly, fc, report=None):
        """
        Checks the grid against the range migration parameters, dispatching on
        the populated image type.

        Parameters
        ----------
        rma : sarproj.elements.RMA.RMAType
        scp : numpy.ndarray
        arp_poly : None|sarproj.elements.blocks.XYZPolyType
        fc : None|float
        report : None|sarproj.elements.base.ValidationReport

        Returns
        -------
        bool
        """

        image_type = rma.ImageType
        if image_type is None:
            self.log_validity_error(
                'The RMA parameters have none of RMAT, RMCR, or INCA populated', report=report)
            return False

        expected_type = self.default_grid_type(rma)
        cond = True
        if self.Type != expected_type:
            self.log_validity_error(
                'Given image formation algorithm expects Type {}, '
                'but populated as {}'.format(expected_type, self.Type), report=report)
            cond = False

        if image_type == 'RMAT':
            cond &= self.validate_rmat(rma.RMAT, scp, fc, report=report)
        elif image_type == 'RMCR':
            cond &= self.validate_rmcr(rma.RMCR, scp, fc, report=report)
        else:
            cond &= self.validate_inca(rma.INCA, scp, arp_poly, report=report)
        return cond

    def validate_rmat(self, rmat, scp, fc, report=None):
        """
        Checks the unit vectors and center spatial frequencies against the
        RMAT reference geometry.

        Parameters
        ----------
        rmat : sarproj.elements.RMA.RMRefType
        scp : numpy.ndarray
        fc : None|float
        report : None|sarproj.elements.base.ValidationReport

        Returns
        -------
        bool
        """

        if rmat is None:
            raise ValueError('The RMAT parameters are required')
        self._ensure_directions()

        cond = True
        if scp is not None and rmat.PosRef is not None and rmat.VelRef is not None:
            cond &= self.Row._check_unit_vector(rmat.u_xct(scp), 'cross track unit vector', report)
            cond &= self.Col._check_unit_vector(rmat.u_yat(scp), 'along track unit vector', report)

        if fc is not None and rmat.DopConeAngRef is not None:
            kfc = _kfc(fc)
            dca = numpy.deg2rad(rmat.DopConeAngRef)
            cond &= self.Row._check_kctr(
                kfc*numpy.sin(dca), 'derived from DopConeAngRef', report, scale=kfc, error=False)
            cond &= self.Col._check_kctr(
                kfc*numpy.cos(dca), 'derived from DopConeAngRef', report, scale=kfc, error=False)
        return cond

    def validate_rmcr(self, rmcr, scp, fc, report=None):
        """
        Checks the unit vectors and center spatial frequencies against the
        RMCR reference geometry.

        Parameters
        ----------
        rmcr : sarproj.elements.RMA.RMRefType
        scp : numpy.ndarray
        fc : None|float
        report : None|sarproj.elements.base.ValidationReport

        Returns
        -------
        bool
        """

        if rmcr is None:
            raise ValueError('The RMCR parameters are required')
        self._ensure_directions()

        cond = True
        if scp is not None and rmcr.PosRef is not None and rmcr.VelRef is not None:
            cond &= self.Row._check_unit_vector(rmcr.u_xrg(scp), 'range unit vector', report)
            cond &= self.Col._check_unit_vector(rmcr.u_ycr(scp), 'cross range unit vector', report)

        if self.Col.KCtr is not None and self.Col.KCtr != 0:
            self.log_validity_error(
                'Col.KCtr must be zero for RMCR data, but populated as {}'.format(self.Col.KCtr), report=report)
            cond = False

        if fc is not None:
            cond &= self.Row._check_kctr(_kfc(fc), 'fc*2/c', report, error=False)
        return cond

    def validate_inca(self, inca, scp, arp_poly, report=None):
        """
        Checks the column Doppler centroid polynomial, the unit vectors, and
        the center spatial frequencies against the INCA parameters.

        Parameters
        ----------
        inca : sarproj.elements.RMA.INCAType
        scp : numpy.ndarray
        arp_poly : None|sarproj.elements.blocks.XYZPolyType
        report : None|sarproj.elements.base.ValidationReport

        Returns
        -------
        bool
        """

        if inca is None:
            raise ValueError('The INCA parameters are required')
        self._ensure_directions()

        cond = True
        if inca.DopCentroidPoly is not None and inca.DopCentroidCOA and inca.TimeCAPoly is not None:
            kcoa_poly = self.Col.DeltaKCOAPoly
            centroid_poly = inca.DopCentroidPoly
            if kcoa_poly is None:
                self.log_validity_error(
                    'Col.DeltaKCOAPoly must be populated when INCA.DopCentroidCOA is true', report=report)
                cond = False
            elif kcoa_poly.order1 != centroid_poly.order1 or kcoa_poly.order2 != centroid_poly.order2:
                self.log_validity_error(
                    'Col.DeltaKCOAPoly and INCA.DopCentroidPoly have different sizes', report=report)
                cond = False
            else:
                # a constant TimeCAPoly has no linear term
                time_ca_rate = inca.TimeCAPoly[1] if inca.TimeCAPoly.order1 >= 1 else 0.
                difference = kcoa_poly - centroid_poly*time_ca_rate
                if norm(difference.Coefs) > IFP_POLY_TOL:
                    self.log_validity_error(
                        'Col.DeltaKCOAPoly and INCA.DopCentroidPoly*INCA.TimeCAPoly[1] '
                        'are inconsistent', report=report)
                    cond = False

        if scp is not None and arp_poly is not None and inca.TimeCAPoly is not None:
            cond &= self.Row._check_unit_vector(inca.u_rg(scp, arp_poly), 'range unit vector', report)
            cond &= self.Col._check_unit_vector(inca.u_az(scp, arp_poly), 'azimuth unit vector', report)

        if self.Col.KCtr is not None and self.Col.KCtr != 0:
            self.log_validity_error(
                'Col.KCtr must be zero for INCA data, but populated as {}'.format(self.Col.KCtr), report=report)
            cond = False

        if inca.FreqZero is not None:
            cond &= self.Row._check_kctr(_kfc(inca.FreqZero), 'INCA.FreqZero*2/c', report)
        return cond

    def validate_pfa(self, pfa, radar_collection, fc, report=None):
        """
        Checks the grid against the polar format parameters.

        Parameters
        ----------
        pfa : sarproj.elements.PFA.PFAType
        radar_collection : None|sarproj.elements.RadarCollection.RadarCollectionType
        fc : None|float
        report : None|sarproj.elements.base.ValidationReport

        Returns
        -------
        bool
        """

        if pfa is None:
            raise ValueError('The PFA parameters are required')
        self._ensure_directions()
        row, col = self.Row, self.Col

        cond = True
        if self.Type != 'RGAZIM':
            self.log_validity_error(
                'PFA image formation should result in a RGAZIM grid, '
                'but Type is populated as {}'.format(self.Type), report=report)
            cond = False

        ref_freq_index = None if radar_collection is None else radar_collection.RefFreqIndex
        if ref_freq_index is None and fc is not None and pfa.SpatialFreqSFPoly is not None \
                and row.KCtr is not None and col.ImpRespBW is not None:
            kap_ctr = _kfc(fc)*pfa.SpatialFreqSFPoly[0]
            # polar inscription allows kap_ctr and Row.KCtr to differ somewhat
            theta = numpy.arctan(0.5*col.ImpRespBW/row.KCtr)
            tolerance = max(0.01, 1 - numpy.cos(theta))
            if abs(row.KCtr/kap_ctr - 1) > tolerance:
                self.log_validity_error(
                    'Waveform fields not consistent.\n\t'
                    'Row.KCtr is populated as {}, but derived from the center frequency '
                    'as {}'.format(row.KCtr, kap_ctr), report=report)
                cond = False

        # slow time deskew compresses the azimuth bandwidth from the polar annulus
        if not pfa.st_deskew_applied:
            cond &= self._check_pfa_bounds(col, pfa.Kaz1, pfa.Kaz2, 'Kaz', report)
        cond &= self._check_pfa_bounds(row, pfa.Krg1, pfa.Krg2, 'Krg', report)

        for direction, k1, k2, name in [(col, pfa.Kaz1, pfa.Kaz2, 'Kaz'), (row, pfa.Krg1, pfa.Krg2, 'Krg')]:
            if direction.ImpRespBW is not None and k1 is not None and k2 is not None and \
                    direction.ImpRespBW > k2 - k1 + BOUNDS_EPSILON:
                self.log_validity_error(
                    'ImpRespBW ({}) must be <= PFA.{}2 - PFA.{}1 ({})'.format(
                        direction.ImpRespBW, name, name, k2 - k1), report=report)
                cond = False

        if col.KCtr is not None and col.KCtr != 0 and pfa.Kaz1 is not None and pfa.Kaz2 is not None and \
                abs(col.KCtr - 0.5*(pfa.Kaz1 + pfa.Kaz2)) > IFP_POLY_TOL:
            self.log_validity_error(
                'Col.KCtr is populated as {}, but the mean of PFA.Kaz1 and PFA.Kaz2 is {}'.format(
                    col.KCtr, 0.5*(pfa.Kaz1 + pfa.Kaz2)), report=report)
            cond = False
        return cond

    def _check_pfa_bounds(self, direction, k1, k2, name, report):
        if direction.KCtr is None or direction.SS is None:
            return True
        cond = True
        nyquist = 0.5/direction.SS
        if k2 is not None and k2 - direction.KCtr > nyquist + BOUNDS_EPSILON:
            self.log_validity_error(
                'PFA.{}2 - KCtr ({}) must be <= 1/(2*SS) ({})'.format(name, k2 - direction.KCtr, nyquist),
                report=report)
            cond = False
        if k1 is not None and k1 - direction.KCtr < -nyquist - BOUNDS_EPSILON:
            self.log_validity_error(
                'PFA.{}1 - KCtr ({}) must be >= -1/(2*SS) ({})'.format(name, k1 - direction.KCtr, -nyquist),
                report=report)
            cond = False
        return cond

    def validate_rg_az_comp(self, rg_az_comp, geo_data, scpcoa, fc, report=None):
        """
        Checks the grid against the range azimuth compression parameters.

        Parameters
        ----------
        rg_az_comp : sarproj.elements.RgAzComp.RgAzCompType
        geo_data : sarproj.elements.GeoData.GeoDataType
        scpcoa : sarproj.elements.SCPCOA.SCPCOAType
        fc : None|float
        report : None|sarproj.elements.base.ValidationReport

        Returns
        -------
        bool
        """

        if rg_az_comp is None:
            raise ValueError('The RgAzComp parameters are required')
        self._ensure_directions()

        cond = True
        if self.ImagePlane != 'SLANT':
            self.log_validity_error(
                'RGAZCOMP image formation should result in a SLANT plane image, '
                'but ImagePlane is populated as {}'.format(self.ImagePlane), report=report)
            cond = False
        if self.Type != 'RGAZIM':
            self.log_validity_error(
                'RGAZCOMP image formation should result in a RGAZIM grid, '
                'but Type is populated as {}'.format(self.Type), report=report)
            cond = False

        cond &= self.Col.validate_rg_az_comp(0., report=report)
        if fc is not None:
            cond &= self.Row.validate_rg_az_comp(_kfc(fc), report=report)

        scp = None if geo_data is None else geo_data.get_scp_array()
        if scpcoa is not None and scp is not None:
            ulos = scpcoa.get_ulos(scp)
            uspn = scpcoa.get_slant_plane_normal(scp)
            if ulos is not None:
                cond &= self.Row._check_unit_vector(ulos, 'line of sight', report)
                if uspn is not None:
                    cond &= self.Col._check_unit_vector(
                        numpy.cross(uspn, ulos), 'slant plane azimuth unit vector', report)
        return cond
