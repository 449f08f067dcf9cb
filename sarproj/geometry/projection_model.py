"""
The image projection model, relating continuous image coordinates to scene
(ground) coordinates through the range/range rate contour of the image
formation algorithm.

Image coordinates are physical, in meters from the scene center point along
the row and column unit vectors, matching the variables of the time center of
aperture polynomial.
"""

__classification__ = "UNCLASSIFIED"
__author__ = "Thomas McCullough"


import logging
from abc import ABCMeta, abstractmethod

import numpy
from numpy.polynomial import polynomial
from scipy.linalg import lstsq

from sarpy.geometry.geocoords import wgs_84_norm

from sarproj.elements.blocks import Poly1DType, Poly2DType, XYZPolyType
from .grid_geometry import GridGeometry


logger = logging.getLogger(__name__)

DELTA_GP_MAX = 1e-3
"""
float: The default ground plane displacement tolerance (m) for scene to image projection.
"""

MAX_ITER = 50
"""
int: The default, and largest permitted, number of scene to image iterations.
"""

_NUM_POLY_POINTS = 10


def _validate_vector(value, name):
    if not isinstance(value, numpy.ndarray):
        value = numpy.array(value, dtype='float64')
    if value.shape != (3, ):
        raise ValueError('{} must have shape (3, ). Got {}'.format(name, value.shape))
    value = value.astype('float64')
    the_norm = numpy.linalg.norm(value)
    if the_norm == 0:
        raise ValueError('{} must have non-zero length'.format(name))
    return value, the_norm


def _validate_unit_vector(value, name):
    value, the_norm = _validate_vector(value, name)
    return value/the_norm


def _validate_points(points, dimension):
    if not isinstance(points, numpy.ndarray):
        points = numpy.array(points, dtype='float64')
    orig_shape = points.shape
    if points.shape[-1] != dimension:
        raise ValueError(
            'The final dimension of the points array must have length {}. '
            'Have shape {}'.format(dimension, orig_shape))
    return numpy.reshape(points.astype('float64'), (-1, dimension)), orig_shape


def _restore_shape(values, orig_shape, final=None):
    lead = orig_shape[:-1]
    if final is None:
        return values[0] if len(lead) == 0 else numpy.reshape(values, lead)
    return numpy.reshape(values, lead + (final, ))


def _broadcast_vectors(values, count, name):
    values = numpy.asarray(values, dtype='float64')
    if values.shape[-1] != 3:
        raise ValueError('{} must have final dimension 3. Got shape {}'.format(name, values.shape))
    return numpy.broadcast_to(numpy.reshape(values, (-1, 3)), (count, 3))


class SceneToImageResult(object):
    """
    The result of a scene to image projection.
    """

    __slots__ = ('image_points', 'time_coa', 'delta_gp', 'iterations', 'converged')

    def __init__(self, image_points, time_coa, delta_gp, iterations, converged):
        """

        Parameters
        ----------
        image_points : numpy.ndarray
            The continuous image coordinates (meters from the SCP).
        time_coa : numpy.ndarray|float
            The center of aperture time at the image points.
        delta_gp : numpy.ndarray|float
            The residual ground plane displacement (m).
        iterations : numpy.ndarray|int
            The number of iterations performed.
        converged : numpy.ndarray|bool
            Was the displacement tolerance achieved?
        """

        self.image_points = image_points
        self.time_coa = time_coa
        self.delta_gp = delta_gp
        self.iterations = iterations
        self.converged = converged

    def __iter__(self):
        yield self.image_points
        yield self.time_coa


class ProjectionPolynomials(object):
    """
    The fitted output pixel to slant pixel and center of aperture time polynomials.
    """

    __slots__ = ('row_poly', 'col_poly', 'time_coa_poly', 'row_residual', 'col_residual', 'time_coa_residual')

    def __init__(self, row_poly, col_poly, time_coa_poly,
                 row_residual=None, col_residual=None, time_coa_residual=None):
        """

        Parameters
        ----------
        row_poly : Poly2DType
        col_poly : Poly2DType
        time_coa_poly : Poly2DType
        row_residual : None|float
            Mean squared residual of the row fit.
        col_residual : None|float
        time_coa_residual : None|float
        """

        self.row_poly = row_poly
        self.col_poly = col_poly
        self.time_coa_poly = time_coa_poly
        self.row_residual = row_residual
        self.col_residual = col_residual
        self.time_coa_residual = time_coa_residual


class ProjectionModel(object, metaclass=ABCMeta):
    """
    The common projection functionality, with the algorithm specific range/range
    rate contour provided by each subclass.
    """

    __slots__ = (
        '_slant_plane_normal', '_row_vector', '_col_vector', '_image_plane_normal',
        '_scp', '_scale_factor', '_ipp_transform', '_arp_poly', '_varp_poly', '_time_coa_poly',
        '_look', '_delta_arp', '_delta_varp', '_range_bias')

    def __init__(self, slant_plane_normal, row_vector, col_vector, scp, arp_poly, time_coa_poly, look):
        """

        Parameters
        ----------
        slant_plane_normal : numpy.ndarray|list|tuple
        row_vector : numpy.ndarray|list|tuple
            The image plane row unit vector.
        col_vector : numpy.ndarray|list|tuple
            The image plane column unit vector.
        scp : numpy.ndarray|list|tuple
            The scene center point.
        arp_poly : XYZPolyType
            The aperture position polynomial.
        time_coa_poly : Poly2DType
            The center of aperture time polynomial, in image coordinates.
        look : int
            The look direction, `1` for left and `-1` for right.
        """

        if not isinstance(arp_poly, XYZPolyType):
            raise TypeError('arp_poly must be an XYZPolyType instance.')
        if not isinstance(time_coa_poly, Poly2DType):
            raise TypeError('time_coa_poly must be a Poly2DType instance.')
        if look not in (1, -1):
            raise ValueError('look must be one of 1 or -1, got {}'.format(look))

        self._slant_plane_normal = _validate_unit_vector(slant_plane_normal, 'slant_plane_normal')
        self._row_vector = _validate_unit_vector(row_vector, 'row_vector')
        self._col_vector = _validate_unit_vector(col_vector, 'col_vector')
        self._scp, _ = _validate_vector(scp, 'scp')

        image_plane_normal = numpy.cross(self._row_vector, self._col_vector)
        ipn_norm = numpy.linalg.norm(image_plane_normal)
        if ipn_norm == 0:
            raise ValueError('row_vector and col_vector must not be parallel')
        # NB: only outward pointing if row/col are a right handed system
        self._image_plane_normal = image_plane_normal/ipn_norm
        self._scale_factor = float(numpy.dot(self._slant_plane_normal, self._image_plane_normal))
        if self._scale_factor == 0:
            raise ValueError('The slant plane normal must not lie in the image plane')

        cos_theta = numpy.dot(self._row_vector, self._col_vector)
        sin_theta2 = 1 - cos_theta*cos_theta
        self._ipp_transform = numpy.array(
            [[1, -cos_theta], [-cos_theta, 1]], dtype='float64')/sin_theta2

        self._arp_poly = arp_poly.copy()  # type: XYZPolyType
        self._varp_poly = arp_poly.derivative(der_order=1, return_poly=True)  # type: XYZPolyType
        self._time_coa_poly = time_coa_poly.copy()  # type: Poly2DType
        self._look = int(look)

        self._delta_arp = numpy.zeros((3, ), dtype='float64')
        self._delta_varp = numpy.zeros((3, ), dtype='float64')
        self._range_bias = 0.0

    @property
    def slant_plane_normal(self):
        """
        numpy.ndarray: The slant plane unit normal.
        """

        return self._slant_plane_normal

    @property
    def row_vector(self):
        """
        numpy.ndarray: The image plane row unit vector.
        """

        return self._row_vector

    @property
    def col_vector(self):
        """
        numpy.ndarray: The image plane column unit vector.
        """

        return self._col_vector

    @property
    def image_plane_normal(self):
        """
        numpy.ndarray: The image plane unit normal.
        """

        return self._image_plane_normal

    @property
    def scp(self):
        """
        numpy.ndarray: The scene center point.
        """

        return self._scp

    @property
    def look(self):
        """
        int: The look direction.
        """

        return self._look

    @property
    def arp_poly(self):
        """
        XYZPolyType: The aperture position polynomial.
        """

        return self._arp_poly

    @property
    def varp_poly(self):
        """
        XYZPolyType: The aperture velocity polynomial.
        """

        return self._varp_poly

    @property
    def time_coa_poly(self):
        """
        Poly2DType: The center of aperture time polynomial.
        """

        return self._time_coa_poly

    @property
    def arp_position_offset(self):
        return self._delta_arp

    @property
    def arp_velocity_offset(self):
        return self._delta_varp

    @property
    def range_bias_offset(self):
        return self._range_bias

    #######
    # adjustable parameters

    def set_arp_position_offset(self, offset):
        """
        Set the aperture position adjustable parameter (ECF, m).

        Parameters
        ----------
        offset : numpy.ndarray|list|tuple
        """

        offset = numpy.asarray(offset, dtype='float64')
        if offset.shape != (3, ):
            raise ValueError('offset must have shape (3, ). Got {}'.format(offset.shape))
        self._delta_arp = offset

    def set_arp_velocity_offset(self, offset):
        """
        Set the aperture velocity adjustable parameter (ECF, m/s).

        Parameters
        ----------
        offset : numpy.ndarray|list|tuple
        """

        offset = numpy.asarray(offset, dtype='float64')
        if offset.shape != (3, ):
            raise ValueError('offset must have shape (3, ). Got {}'.format(offset.shape))
        self._delta_varp = offset

    def set_range_bias_offset(self, offset):
        """
        Set the range bias adjustable parameter (m).

        Parameters
        ----------
        offset : float
        """

        self._range_bias = float(offset)

    #######
    # basic evaluations

    def compute_image_time(self, im_points):
        """
        Evaluate the center of aperture time polynomial at the given image points.

        Parameters
        ----------
        im_points : numpy.ndarray|list|tuple
            Of shape `(2, )` or `(..., 2)`.

        Returns
        -------
        numpy.ndarray|float
        """

        points, orig_shape = _validate_points(im_points, 2)
        return _restore_shape(self._time_coa_poly(points[:, 0], points[:, 1]), orig_shape)

    def compute_arp_position(self, time):
        """
        Evaluate the aperture position polynomial.

        Parameters
        ----------
        time : numpy.ndarray|float

        Returns
        -------
        numpy.ndarray
        """

        return self._arp_poly(time)

    def compute_arp_velocity(self, time):
        """
        Evaluate the aperture velocity polynomial.

        Parameters
        ----------
        time : numpy.ndarray|float

        Returns
        -------
        numpy.ndarray
        """

        return self._varp_poly(time)

    def compute_image_coordinates(self, image_plane_points):
        """
        Gets the image coordinates for points in the image plane. The row and
        column vectors need not be orthogonal.

        Parameters
        ----------
        image_plane_points : numpy.ndarray|list|tuple
            Of shape `(3, )` or `(..., 3)`.

        Returns
        -------
        numpy.ndarray
            Of shape `(2, )` or `(..., 2)`.
        """

        points, orig_shape = _validate_points(image_plane_points, 3)
        delta = points - self._scp
        projections = numpy.stack([delta.dot(self._row_vector), delta.dot(self._col_vector)], axis=-1)
        return _restore_shape(projections.dot(self._ipp_transform), orig_shape, final=2)

    def compute_image_plane_points(self, im_points):
        """
        Gets the image plane points for the given image coordinates.

        Parameters
        ----------
        im_points : numpy.ndarray|list|tuple
            Of shape `(2, )` or `(..., 2)`.

        Returns
        -------
        numpy.ndarray
            Of shape `(3, )` or `(..., 3)`.
        """

        points, orig_shape = _validate_points(im_points, 2)
        out = self._scp + numpy.outer(points[:, 0], self._row_vector) + \
            numpy.outer(points[:, 1], self._col_vector)
        return _restore_shape(out, orig_shape, final=3)

    @abstractmethod
    def compute_contour(self, arp_coa, varp_coa, time_coa, im_points):
        """
        The image formation algorithm specific range/range rate contour.

        Parameters
        ----------
        arp_coa : numpy.ndarray
            The aperture position at center of aperture time, of shape `(N, 3)`.
        varp_coa : numpy.ndarray
            The aperture velocity at center of aperture time, of shape `(N, 3)`.
        time_coa : numpy.ndarray
            The center of aperture time, of shape `(N, )`.
        im_points : numpy.ndarray
            The image coordinates, of shape `(N, 2)`.

        Returns
        -------
        (numpy.ndarray, numpy.ndarray)
            The range and range rate, each of shape `(N, )`.
        """

        raise NotImplementedError

    def _coa_state(self, im_points):
        """
        Gets the contour and center of aperture state for the `(N, 2)` image points,
        with adjustable parameters applied.

        Returns
        -------
        (numpy.ndarray, numpy.ndarray, numpy.ndarray, numpy.ndarray, numpy.ndarray)
            `(r_tgt_coa, r_dot_tgt_coa, time_coa, arp_coa, varp_coa)`
        """

        time_coa = self._time_coa_poly(im_points[:, 0], im_points[:, 1])
        arp_coa = numpy.reshape(self._arp_poly(time_coa), (-1, 3))
        varp_coa = numpy.reshape(self._varp_poly(time_coa), (-1, 3))
        r_tgt_coa, r_dot_tgt_coa = self.compute_contour(arp_coa, varp_coa, time_coa, im_points)
        # adjust parameters
        arp_coa = arp_coa + self._delta_arp
        varp_coa = varp_coa + self._delta_varp
        r_tgt_coa = r_tgt_coa + self._range_bias
        return r_tgt_coa, r_dot_tgt_coa, time_coa, arp_coa, varp_coa

    def contour_to_ground_plane(self, r_coa, r_dot_coa, arp_coa, varp_coa, time_coa,
                                ground_plane_normal, ground_ref_point):
        """
        Solve for the intersection of a range/range rate contour and a ground
        plane. Combinations with no intersection yield `NaN` entries.

        Parameters
        ----------
        r_coa : numpy.ndarray|float
        r_dot_coa : numpy.ndarray|float
        arp_coa : numpy.ndarray
            Of shape `(3, )` or `(N, 3)`.
        varp_coa : numpy.ndarray
            Of shape `(3, )` or `(N, 3)`.
        time_coa : numpy.ndarray|float
            Unused by the closed form solution, accepted for signature symmetry.
        ground_plane_normal : numpy.ndarray
            Of shape `(3, )`, or `(N, 3)` for a plane per point.
        ground_ref_point : numpy.ndarray
            Of shape `(3, )`, or `(N, 3)` for a plane per point.

        Returns
        -------
        numpy.ndarray
            Of shape `(3, )` or `(N, 3)`.
        """

        single = numpy.ndim(arp_coa) == 1
        arp_coa = numpy.reshape(numpy.asarray(arp_coa, dtype='float64'), (-1, 3))
        varp_coa = numpy.reshape(numpy.asarray(varp_coa, dtype='float64'), (-1, 3))
        count = arp_coa.shape[0]
        r_coa = numpy.reshape(numpy.asarray(r_coa, dtype='float64'), (-1, ))
        r_dot_coa = numpy.reshape(numpy.asarray(r_dot_coa, dtype='float64'), (-1, ))
        uZ = _broadcast_vectors(ground_plane_normal, count, 'ground_plane_normal')
        uZ = uZ/numpy.linalg.norm(uZ, axis=-1)[:, numpy.newaxis]
        gref = _broadcast_vectors(ground_ref_point, count, 'ground_ref_point')

        with numpy.errstate(invalid='ignore', divide='ignore'):
            arpZ = numpy.sum((arp_coa - gref)*uZ, axis=-1)
            arpZ = numpy.where(arpZ > r_coa, numpy.nan, arpZ)
            # ARP ground plane nadir
            aGPN = arp_coa - arpZ[:, numpy.newaxis]*uZ
            # ground plane distance from ARP nadir to circle of constant range
            gd = numpy.sqrt(r_coa*r_coa - arpZ*arpZ)
            cosGraz = gd/r_coa
            sinGraz = arpZ/r_coa

            # velocity components normal to and parallel to the ground plane
            vMag = numpy.linalg.norm(varp_coa, axis=-1)
            vZ = numpy.sum(varp_coa*uZ, axis=-1)
            vX = numpy.sqrt(vMag*vMag - vZ*vZ)  # NB: for vX = 0, no solution
            # orient X such that vX > 0
            uX = (varp_coa - vZ[:, numpy.newaxis]*uZ)/vX[:, numpy.newaxis]
            uY = numpy.cross(uZ, uX)
            # cosine of azimuth angle to ground plane point
            cosAz = (-r_dot_coa + vZ*sinGraz)/(vX*cosGraz)
            cosAz = numpy.where(numpy.abs(cosAz) > 1, numpy.nan, cosAz)
            sinAz = self._look*numpy.sqrt(1 - cosAz*cosAz)

            out = aGPN + uX*(gd*cosAz)[:, numpy.newaxis] + uY*(gd*sinAz)[:, numpy.newaxis]
        return out[0] if single else out

    #######
    # projections

    def image_to_scene(self, im_points, ground_ref_point=None, ground_plane_normal=None, return_time_coa=False):
        """
        Project image coordinates to the given ground plane. This is a single
        pass, with no iteration.

        Parameters
        ----------
        im_points : numpy.ndarray|list|tuple
            Of shape `(2, )` or `(..., 2)`.
        ground_ref_point : None|numpy.ndarray|list|tuple
            The ground plane reference point, defaults to the SCP.
        ground_plane_normal : None|numpy.ndarray|list|tuple
            The ground plane normal, defaults to the WGS-84 normal at `ground_ref_point`.
        return_time_coa : bool
            Also return the center of aperture time?

        Returns
        -------
        numpy.ndarray|(numpy.ndarray, numpy.ndarray)
        """

        points, orig_shape = _validate_points(im_points, 2)
        if ground_ref_point is None:
            ground_ref_point = self._scp
        gref, _ = _validate_vector(ground_ref_point, 'ground_ref_point')
        if ground_plane_normal is None:
            ground_plane_normal = wgs_84_norm(gref)
        ugpn = _validate_unit_vector(ground_plane_normal, 'ground_plane_normal')

        r_coa, r_dot_coa, time_coa, arp_coa, varp_coa = self._coa_state(points)
        coords = self.contour_to_ground_plane(r_coa, r_dot_coa, arp_coa, varp_coa, time_coa, ugpn, gref)
        coords = _restore_shape(coords, orig_shape, final=3)
        if return_time_coa:
            return coords, _restore_shape(time_coa, orig_shape)
        return coords

    def scene_to_image(self, scene_points, ground_plane_normal=None, tolerance=DELTA_GP_MAX, max_iterations=MAX_ITER):
        """
        Iteratively project scene points to continuous image coordinates.

        Each scene point is treated as lying in its own ground plane, with
        normal given by the normalized point direction unless
        `ground_plane_normal` is provided.

        Parameters
        ----------
        scene_points : numpy.ndarray|list|tuple
            ECF coordinates, of shape `(3, )` or `(..., 3)`.
        ground_plane_normal : None|numpy.ndarray|list|tuple
        tolerance : float
            Ground plane displacement tolerance (m).
        max_iterations : int
            The maximum number of iterations, capped at :const:`MAX_ITER`.
            Each point stops updating once within `tolerance`, and reports the
            iteration count at which that happened.

        Returns
        -------
        SceneToImageResult
        """

        coords, orig_shape = _validate_points(scene_points, 3)
        count = coords.shape[0]
        if ground_plane_normal is None:
            point_norms = numpy.linalg.norm(coords, axis=-1)
            if numpy.any(point_norms == 0):
                raise ValueError('Scene points must be non-zero to determine the ground plane normal')
            ugpn = coords/point_norms[:, numpy.newaxis]
        else:
            ugpn = _broadcast_vectors(ground_plane_normal, count, 'ground_plane_normal')
            ugpn = ugpn/numpy.linalg.norm(ugpn, axis=-1)[:, numpy.newaxis]

        max_iterations = int(max_iterations)
        if max_iterations < 1:
            raise ValueError('max_iterations must be positive, got {}'.format(max_iterations))
        if max_iterations > MAX_ITER:
            logger.warning(
                'Requested max_iterations {} exceeds the limit {}, '
                'which will be used instead'.format(max_iterations, MAX_ITER))
            max_iterations = MAX_ITER

        g_n = coords.copy()
        im_points = numpy.zeros((count, 2), dtype='float64')
        time_coa = numpy.zeros((count, ), dtype='float64')
        delta_gp = numpy.zeros((count, ), dtype='float64')
        iterations = numpy.zeros((count, ), dtype='int64')
        converged = numpy.zeros((count, ), dtype='bool')

        iteration = 0
        while True:
            iteration += 1
            # converged points keep the state of the iteration in which they converged
            active = numpy.flatnonzero(~converged)
            g_active = g_n[active]
            # project the ground point estimate to the image plane along the slant plane normal
            dist_n = numpy.dot(self._scp - g_active, self._image_plane_normal)/self._scale_factor
            i_n = g_active + numpy.outer(dist_n, self._slant_plane_normal)
            im_active = self.compute_image_coordinates(i_n)
            r_coa, r_dot_coa, time_active, arp_coa, varp_coa = self._coa_state(im_active)
            # the point of the contour in the plane of each scene point
            p_n = self.contour_to_ground_plane(
                r_coa, r_dot_coa, arp_coa, varp_coa, time_active, ugpn[active], coords[active])
            diff_n = coords[active] - p_n

            im_points[active] = im_active
            time_coa[active] = time_active
            delta_gp[active] = numpy.linalg.norm(diff_n, axis=1)
            iterations[active] = iteration
            converged[active] = delta_gp[active] <= tolerance
            if numpy.all(converged) or iteration >= max_iterations:
                break
            g_n[active] = g_active + diff_n

        if not numpy.all(converged):
            logger.warning(
                'Scene to image projection did not converge to tolerance {} for {} of {} points\n\t'
                'after {} iterations'.format(tolerance, int(numpy.sum(~converged)), count, iteration))

        return SceneToImageResult(
            _restore_shape(im_points, orig_shape, final=2),
            _restore_shape(time_coa, orig_shape),
            _restore_shape(delta_gp, orig_shape),
            _restore_shape(iterations, orig_shape),
            _restore_shape(converged, orig_shape))

    def compute_projection_polynomials(
            self, grid_geometry, in_pixel_start, interim_scene_center, interim_sample_spacing,
            out_scene_center, out_sample_spacing, out_extent, poly_order=3):
        """
        Samples a 10x10 grid of points spanning the output extent, projects each
        to the slant image, and fits polynomials mapping output pixel to slant
        row, output pixel to slant column, and output pixel to center of aperture time.

        Parameters
        ----------
        grid_geometry : GridGeometry
            The output grid geometry.
        in_pixel_start : numpy.ndarray|list|tuple
            The `(row, col)` input start pixel, non-zero for an area of interest.
        interim_scene_center : numpy.ndarray|list|tuple
            The `(row, col)` scene center pixel of the slant image to which the
            polynomials apply.
        interim_sample_spacing : numpy.ndarray|list|tuple
            The `(row, col)` sample spacing of the slant image to which the
            polynomials apply.
        out_scene_center : numpy.ndarray|list|tuple
            The `(row, col)` output scene center pixel.
        out_sample_spacing : numpy.ndarray|list|tuple
            The `(row, col)` output sample spacing.
        out_extent : numpy.ndarray|list|tuple
            The `(rows, cols)` output size.
        poly_order : int
            The order of each variable for the fitted polynomials.

        Returns
        -------
        ProjectionPolynomials
        """

        if not isinstance(grid_geometry, GridGeometry):
            raise TypeError('grid_geometry must be a GridGeometry instance, got {}'.format(type(grid_geometry)))
        in_pixel_start = numpy.asarray(in_pixel_start, dtype='float64')
        interim_scene_center = numpy.asarray(interim_scene_center, dtype='float64')
        interim_sample_spacing = numpy.asarray(interim_sample_spacing, dtype='float64')
        out_scene_center = numpy.asarray(out_scene_center, dtype='float64')
        out_sample_spacing = numpy.asarray(out_sample_spacing, dtype='float64')
        out_extent = numpy.asarray(out_extent, dtype='int64')
        poly_order = int(poly_order)

        out_rows, out_cols = numpy.meshgrid(
            numpy.linspace(0, out_extent[0] - 1, _NUM_POLY_POINTS),
            numpy.linspace(0, out_extent[1] - 1, _NUM_POLY_POINTS), indexing='ij')
        out_pixels = numpy.stack([out_rows.flatten(), out_cols.flatten()], axis=-1)
        out_meters = (out_pixels - out_scene_center)*out_sample_spacing
        scene_points = grid_geometry.row_col_to_ecf(out_meters)

        result = self.scene_to_image(scene_points)
        slant_pixels = result.image_points/interim_sample_spacing + interim_scene_center - in_pixel_start

        x_scale = 1./max(1, out_extent[0])
        y_scale = 1./max(1, out_extent[1])
        fits = [
            _fit_poly2d(out_pixels[:, 0], out_pixels[:, 1], values, poly_order, x_scale, y_scale)
            for values in [slant_pixels[:, 0], slant_pixels[:, 1], result.time_coa]]

        return ProjectionPolynomials(
            fits[0][0], fits[1][0], fits[2][0],
            row_residual=fits[0][1], col_residual=fits[1][1], time_coa_residual=fits[2][1])


def _fit_poly2d(x, y, values, order, x_scale, y_scale):
    """
    Least squares fit of a polynomial of the given order in each of two variables.
    The fit is performed in scaled variables, for conditioning.

    Returns
    -------
    (Poly2DType, float)
        The polynomial in the unscaled variables, and the mean squared residual.
    """

    design = polynomial.polyvander2d(x*x_scale, y*y_scale, [order, order])
    solution = lstsq(design, values)[0]
    powers = numpy.arange(order + 1)
    coefs = numpy.outer(x_scale**powers, y_scale**powers)*numpy.reshape(solution, (order + 1, order + 1))
    poly = Poly2DType(Coefs=coefs)
    return poly, float(numpy.mean((poly(x, y) - values)**2))


def _scp_range_state(scp, arp_coa, varp_coa):
    arp_minus_scp = arp_coa - scp
    r_scp_coa = numpy.linalg.norm(arp_minus_scp, axis=-1)
    r_dot_scp_coa = numpy.sum(varp_coa*arp_minus_scp, axis=-1)/r_scp_coa
    return r_scp_coa, r_dot_scp_coa


class RangeAzimuthProjectionModel(ProjectionModel):
    """
    The range/azimuth grid projection for polar format image formation.
    """

    __slots__ = ('_polar_angle_poly', '_polar_angle_poly_der', '_ksf_poly', '_ksf_poly_der')

    def __init__(self, polar_angle_poly, ksf_poly, slant_plane_normal, row_vector, col_vector,
                 scp, arp_poly, time_coa_poly, look):
        """

        Parameters
        ----------
        polar_angle_poly : Poly1DType
            Polar angle as a function of time.
        ksf_poly : Poly1DType
            Spatial frequency scale factor as a function of polar angle.
        slant_plane_normal : numpy.ndarray|list|tuple
        row_vector : numpy.ndarray|list|tuple
        col_vector : numpy.ndarray|list|tuple
        scp : numpy.ndarray|list|tuple
        arp_poly : XYZPolyType
        time_coa_poly : Poly2DType
        look : int
        """

        if not isinstance(polar_angle_poly, Poly1DType):
            raise TypeError('polar_angle_poly must be a Poly1DType instance.')
        if not isinstance(ksf_poly, Poly1DType):
            raise TypeError('ksf_poly must be a Poly1DType instance.')
        super(RangeAzimuthProjectionModel, self).__init__(
            slant_plane_normal, row_vector, col_vector, scp, arp_poly, time_coa_poly, look)
        self._polar_angle_poly = polar_angle_poly.copy()
        self._polar_angle_poly_der = polar_angle_poly.derivative(der_order=1, return_poly=True)
        self._ksf_poly = ksf_poly.copy()
        self._ksf_poly_der = ksf_poly.derivative(der_order=1, return_poly=True)

    def compute_contour(self, arp_coa, varp_coa, time_coa, im_points):
        r_scp_coa, r_dot_scp_coa = _scp_range_state(self._scp, arp_coa, varp_coa)
        row_transform = im_points[:, 0]
        col_transform = im_points[:, 1]

        theta = self._polar_angle_poly(time_coa)
        d_theta_dt = self._polar_angle_poly_der(time_coa)
        # polar aperture scale factor and derivative with respect to polar angle
        ksf = self._ksf_poly(theta)
        d_ksf_d_theta = self._ksf_poly_der(theta)
        # spatial frequency domain phase slopes in the Ka and Kc directions
        d_phi_d_ka = row_transform*numpy.cos(theta) + col_transform*numpy.sin(theta)
        d_phi_d_kc = -row_transform*numpy.sin(theta) + col_transform*numpy.cos(theta)
        delta_r = ksf*d_phi_d_ka
        delta_r_dot = (d_ksf_d_theta*d_phi_d_ka + ksf*d_phi_d_kc)*d_theta_dt
        return r_scp_coa + delta_r, r_dot_scp_coa + delta_r_dot


class RgAzCompProjectionModel(ProjectionModel):
    """
    The range/azimuth grid projection for range azimuth compression image formation.
    """

    __slots__ = ('_az_sf', )

    def __init__(self, az_sf, slant_plane_normal, row_vector, col_vector,
                 scp, arp_poly, time_coa_poly, look):
        """

        Parameters
        ----------
        az_sf : float
            The azimuth scale factor.
        slant_plane_normal : numpy.ndarray|list|tuple
        row_vector : numpy.ndarray|list|tuple
        col_vector : numpy.ndarray|list|tuple
        scp : numpy.ndarray|list|tuple
        arp_poly : XYZPolyType
        time_coa_poly : Poly2DType
        look : int
        """

        super(RgAzCompProjectionModel, self).__init__(
            slant_plane_normal, row_vector, col_vector, scp, arp_poly, time_coa_poly, look)
        self._az_sf = float(az_sf)

    def compute_contour(self, arp_coa, varp_coa, time_coa, im_points):
        r_scp_coa, r_dot_scp_coa = _scp_range_state(self._scp, arp_coa, varp_coa)
        delta_r = im_points[:, 0]
        delta_r_dot = -numpy.linalg.norm(varp_coa, axis=-1)*self._az_sf*im_points[:, 1]
        return r_scp_coa + delta_r, r_dot_scp_coa + delta_r_dot


class RangeZeroProjectionModel(ProjectionModel):
    """
    The range/zero Doppler grid projection, for imaging near closest approach.
    """

    __slots__ = ('_time_ca_poly', '_drate_sf_poly', '_range_ca')

    def __init__(self, time_ca_poly, drate_sf_poly, range_ca, slant_plane_normal, row_vector, col_vector,
                 scp, arp_poly, time_coa_poly, look):
        """

        Parameters
        ----------
        time_ca_poly : Poly1DType
            Time of closest approach as a function of column coordinate.
        drate_sf_poly : Poly2DType
            Doppler rate scale factor as a function of image coordinates.
        range_ca : float
            Range at closest approach for the SCP.
        slant_plane_normal : numpy.ndarray|list|tuple
        row_vector : numpy.ndarray|list|tuple
        col_vector : numpy.ndarray|list|tuple
        scp : numpy.ndarray|list|tuple
        arp_poly : XYZPolyType
        time_coa_poly : Poly2DType
        look : int
        """

        if not isinstance(time_ca_poly, Poly1DType):
            raise TypeError('time_ca_poly must be a Poly1DType instance.')
        if not isinstance(drate_sf_poly, Poly2DType):
            raise TypeError('drate_sf_poly must be a Poly2DType instance.')
        super(RangeZeroProjectionModel, self).__init__(
            slant_plane_normal, row_vector, col_vector, scp, arp_poly, time_coa_poly, look)
        self._time_ca_poly = time_ca_poly.copy()
        self._drate_sf_poly = drate_sf_poly.copy()
        self._range_ca = float(range_ca)

    def compute_contour(self, arp_coa, varp_coa, time_coa, im_points):
        row_transform = im_points[:, 0]
        col_transform = im_points[:, 1]
        # range and time of closest approach
        r_ca_tgt = self._range_ca + row_transform
        t_ca_tgt = self._time_ca_poly(col_transform)
        # squared aperture velocity magnitude at closest approach
        vel2_ca_tgt = numpy.sum(numpy.reshape(self._varp_poly(t_ca_tgt), (-1, 3))**2, axis=-1)
        drsf_tgt = self._drate_sf_poly(row_transform, col_transform)
        dt_coa_tgt = time_coa - t_ca_tgt
        r_tgt_coa = numpy.sqrt(r_ca_tgt*r_ca_tgt + drsf_tgt*vel2_ca_tgt*dt_coa_tgt*dt_coa_tgt)
        r_dot_tgt_coa = (drsf_tgt/r_tgt_coa)*vel2_ca_tgt*dt_coa_tgt
        return r_tgt_coa, r_dot_tgt_coa


class PlaneProjectionModel(ProjectionModel):
    """
    The projection for an arbitrary image plane grid, with contour determined
    directly by the image plane point.
    """

    __slots__ = ()

    def compute_contour(self, arp_coa, varp_coa, time_coa, im_points):
        ipp = self._scp + numpy.outer(im_points[:, 0], self._row_vector) + \
            numpy.outer(im_points[:, 1], self._col_vector)
        arp_minus_ipp = arp_coa - ipp
        r_tgt_coa = numpy.linalg.norm(arp_minus_ipp, axis=-1)
        r_dot_tgt_coa = numpy.sum(varp_coa*arp_minus_ipp, axis=-1)/r_tgt_coa
        return r_tgt_coa, r_dot_tgt_coa


XRGYCRProjectionModel = PlaneProjectionModel
XCTYATProjectionModel = PlaneProjectionModel
