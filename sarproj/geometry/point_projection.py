"""
Functions to construct the projection model for a SICD structure, and to map
between image pixel coordinates and scene coordinates.
"""

__classification__ = "UNCLASSIFIED"
__author__ = "Thomas McCullough"


import logging

import numpy

from sarpy.geometry.geocoords import wgs_84_norm

from sarproj.elements.blocks import Poly2DType
from .projection_model import DELTA_GP_MAX, MAX_ITER, RangeAzimuthProjectionModel, \
    RgAzCompProjectionModel, RangeZeroProjectionModel, PlaneProjectionModel


logger = logging.getLogger(__name__)

EARTH_ROTATION_RATE = 7292115.1467E-11
"""
float: The WGS-84 earth rotation rate, radians/second.
"""


#############
# adjustable parameters

def _validate_adj_param(value, name):
    """
    An aperture offset as a float64 array of shape `(3, )`, zero when `None`.
    """

    out = numpy.zeros((3, ), dtype='float64') if value is None else numpy.asarray(value, dtype='float64')
    if out.shape != (3, ):
        raise ValueError('{} must have shape (3, ). Got {}'.format(name, out.shape))
    return out


def _ric_ecf_mat(rarp, varp, frame_type):
    """
    The radial, in-track, cross-track frame at the given aperture state.

    Parameters
    ----------
    rarp : numpy.ndarray
    varp : numpy.ndarray
    frame_type : str
        `'RIC_ECF'`, or `'RIC_ECI'` to take the in-track direction from the
        inertial velocity.

    Returns
    -------
    numpy.ndarray
        The matrix whose rows are the R, I and C unit vectors in ECF.
    """

    if frame_type.upper().endswith('ECI'):
        varp = varp + numpy.cross([0, 0, EARTH_ROTATION_RATE], rarp)

    radial = rarp/numpy.linalg.norm(rarp)
    cross_track = numpy.cross(radial, varp)
    cross_track /= numpy.linalg.norm(cross_track)
    in_track = numpy.cross(cross_track, radial)
    return numpy.vstack([radial, in_track, cross_track])


def _get_adjustment_params(sicd, delta_arp, delta_varp, adj_params_frame):
    """
    The aperture position and velocity offsets, expressed in ECF.

    Parameters
    ----------
    sicd : sarproj.elements.SICD.SICDType
    delta_arp : None|numpy.ndarray|list|tuple
    delta_varp : None|numpy.ndarray|list|tuple
    adj_params_frame : str

    Returns
    -------
    (numpy.ndarray, numpy.ndarray)
    """

    delta_arp = _validate_adj_param(delta_arp, 'delta_arp')
    delta_varp = _validate_adj_param(delta_varp, 'delta_varp')
    if adj_params_frame == 'ECF':
        return delta_arp, delta_varp
    if adj_params_frame not in ['RIC_ECI', 'RIC_ECF']:
        raise ValueError('Got unhandled adj_params_frame {}'.format(adj_params_frame))

    scpcoa = sicd.SCPCOA
    if scpcoa is None or scpcoa.ARPPos is None or scpcoa.ARPVel is None:
        raise ValueError(
            'The adj_params_frame {} is of RIC type, which requires SCPCOA.ARPPos '
            'and SCPCOA.ARPVel'.format(adj_params_frame))
    # the rows are orthonormal, so the transpose maps RIC to ECF
    ric_matrix = _ric_ecf_mat(scpcoa.ARPPos.get_array(), scpcoa.ARPVel.get_array(), adj_params_frame)
    return ric_matrix.T.dot(delta_arp), ric_matrix.T.dot(delta_varp)


#############
# model construction

def _get_time_coa_poly(sicd):
    if sicd.Grid.TimeCOAPoly is not None:
        return sicd.Grid.TimeCOAPoly
    if sicd.SCPCOA is None or sicd.SCPCOA.SCPTime is None:
        raise ValueError('Neither Grid.TimeCOAPoly nor SCPCOA.SCPTime is populated.')
    logger.warning('Grid.TimeCOAPoly is not populated, so the constant SCPCOA.SCPTime is used.')
    return Poly2DType(Coefs=[[sicd.SCPCOA.SCPTime, ], ])


def get_projection_model(sicd, delta_arp=None, delta_varp=None, range_bias=None, adj_params_frame='ECF'):
    """
    Construct the projection model appropriate for the grid type and image
    formation algorithm of the given SICD structure.

    Parameters
    ----------
    sicd : sarproj.elements.SICD.SICDType
    delta_arp : None|numpy.ndarray|list|tuple
        Aperture position offset (m), zero by default.
    delta_varp : None|numpy.ndarray|list|tuple
        Aperture velocity offset (m/s), zero by default.
    range_bias : None|float|int
        Range bias (m), zero by default.
    adj_params_frame : str
        The frame of `delta_arp` and `delta_varp`, one of `'ECF'`, `'RIC_ECF'`
        or `'RIC_ECI'`.

    Returns
    -------
    sarproj.geometry.projection_model.ProjectionModel
    """

    if not sicd.can_project_coordinates():
        raise ValueError('The SICD structure is not sufficiently populated to permit projection.')

    scp = sicd.GeoData.get_scp_array()
    row_vector = sicd.Grid.Row.get_unit_vector()
    col_vector = sicd.Grid.Col.get_unit_vector()
    slant_plane_normal = sicd.SCPCOA.get_slant_plane_normal(scp)
    arp_poly = sicd.Position.ARPPoly
    time_coa_poly = _get_time_coa_poly(sicd)
    look = sicd.SCPCOA.look
    common = (slant_plane_normal, row_vector, col_vector, scp, arp_poly, time_coa_poly, look)

    grid_type = sicd.Grid.Type
    if grid_type == 'RGAZIM':
        image_form_algo = sicd.ImageFormation.ImageFormAlgo
        if image_form_algo == 'PFA':
            model = RangeAzimuthProjectionModel(sicd.PFA.PolarAngPoly, sicd.PFA.SpatialFreqSFPoly, *common)
        elif image_form_algo == 'RGAZCOMP':
            model = RgAzCompProjectionModel(sicd.RgAzComp.AzSF, *common)
        else:
            raise ValueError('Grid.Type is RGAZIM, but got unhandled ImageFormAlgo {}'.format(image_form_algo))
    elif grid_type == 'RGZERO':
        inca = sicd.RMA.INCA
        model = RangeZeroProjectionModel(inca.TimeCAPoly, inca.DRateSFPoly, inca.R_CA_SCP, *common)
    elif grid_type in ['XRGYCR', 'XCTYAT', 'PLANE']:
        model = PlaneProjectionModel(*common)
    else:
        raise ValueError('Unhandled Grid.Type {}'.format(grid_type))

    delta_arp, delta_varp = _get_adjustment_params(sicd, delta_arp, delta_varp, adj_params_frame)
    model.set_arp_position_offset(delta_arp)
    model.set_arp_velocity_offset(delta_varp)
    model.set_range_bias_offset(0.0 if range_bias is None else float(range_bias))
    return model


def _get_outward_norm(sicd, gref):
    # the focus plane for PFA, otherwise the ellipsoid normal
    pfa = sicd.PFA
    if sicd.ImageFormation is not None and sicd.ImageFormation.ImageFormAlgo == 'PFA' and \
            pfa is not None and pfa.FPN is not None:
        return pfa.FPN.get_array()
    return wgs_84_norm(gref)


def _pixel_offsets(sicd):
    image_data = sicd.ImageData
    scp_pixel = image_data.SCPPixel.get_array(dtype='float64')
    first = numpy.array([image_data.FirstRow, image_data.FirstCol], dtype='float64')
    sample_spacing = numpy.array([sicd.Grid.Row.SS, sicd.Grid.Col.SS], dtype='float64')
    return scp_pixel - first, sample_spacing


#############
# projections

def ground_to_image(coords, sicd, tolerance=DELTA_GP_MAX, max_iterations=MAX_ITER, ugpn=None, **proj_args):
    """
    Project ECF scene points to pixel (row, column) coordinates, where the
    first pixel of the image is `[0, 0]`.

    Parameters
    ----------
    coords : numpy.ndarray|tuple|list
        ECF coordinates, of shape `(3, )` or `(N, 3)`.
    sicd : sarproj.elements.SICD.SICDType
    tolerance : float|int
        The ground plane displacement (m) accepted as converged.
    max_iterations : int
        At most :data:`sarproj.geometry.projection_model.MAX_ITER`.
    ugpn : None|numpy.ndarray|list|tuple
        Overrides the ground plane normal at each point, which defaults to the
        normalized point direction.
    proj_args
        The keyword arguments for :func:`get_projection_model`.

    Returns
    -------
    Tuple[numpy.ndarray, numpy.ndarray|float, numpy.ndarray|int]
        The pixel coordinates, the residual ground plane displacement (m),
        and the iterations used, per point.
    """

    model = get_projection_model(sicd, **proj_args)
    result = model.scene_to_image(
        coords, ground_plane_normal=ugpn, tolerance=tolerance, max_iterations=max_iterations)
    offset, sample_spacing = _pixel_offsets(sicd)
    return result.image_points/sample_spacing + offset, result.delta_gp, result.iterations


def image_to_ground_plane(im_points, sicd, gref=None, ugpn=None, **proj_args):
    """
    Project pixel (row, column) coordinates to ECF points in a ground plane.

    Parameters
    ----------
    im_points : numpy.ndarray|list|tuple
        Of shape `(2, )` or `(N, 2)`.
    sicd : sarproj.elements.SICD.SICDType
    gref : None|numpy.ndarray|list|tuple
        A point (ECF, m) of the ground plane, the scene center point by default.
    ugpn : None|numpy.ndarray|list|tuple
        The ground plane normal. The default is the focus plane normal for
        PFA, and the WGS-84 normal at `gref` otherwise.
    proj_args
        The keyword arguments for :func:`get_projection_model`.

    Returns
    -------
    numpy.ndarray
        The ECF ground plane points, with the leading shape of `im_points`.
    """

    model = get_projection_model(sicd, **proj_args)

    gref = sicd.GeoData.get_scp_array() if gref is None else numpy.asarray(gref, dtype='float64')
    if gref.size != 3:
        raise ValueError('gref must have three elements.')
    gref = gref.reshape((3, ))
    if ugpn is None:
        ugpn = _get_outward_norm(sicd, gref)

    im_points = numpy.asarray(im_points, dtype='float64')
    if im_points.shape[-1] != 2:
        raise ValueError('im_points must have final dimension of size 2. Got shape {}'.format(im_points.shape))
    offset, sample_spacing = _pixel_offsets(sicd)
    return model.image_to_scene((im_points - offset)*sample_spacing, ground_ref_point=gref, ground_plane_normal=ugpn)
