#
# Copyright 2023 Valkyrie Systems Corporation
#
# Licensed under MIT License.  See LICENSE.
#
import numpy as np
import pytest
from scipy.constants import speed_of_light

from sarproj.elements.SICD import SICDType
from sarproj.geometry.projection_model import RangeAzimuthProjectionModel, RgAzCompProjectionModel, \
    RangeZeroProjectionModel, PlaneProjectionModel


ALGORITHMS = ['PFA', 'RGAZCOMP', 'INCA', 'RMAT', 'RMCR']
PIXELS = np.array([[100, 100], [125, 60], [40, 175], [190, 190]], dtype='float64')


@pytest.mark.parametrize('algorithm', ALGORITHMS)
def test_filled_grid_is_valid(sicd_builder, algorithm):
    sicd = sicd_builder(algorithm)
    report = sicd.validate_grid()
    assert report.is_valid, report.messages()
    assert len(report.warnings) == 0, report.messages()


@pytest.mark.parametrize('algorithm', ALGORITHMS)
def test_fill_is_idempotent(sicd_builder, algorithm):
    sicd = sicd_builder(algorithm)
    first = sicd.to_dict()
    sicd.fill_derived_fields()
    sicd.fill_default_fields()
    assert sicd.to_dict() == first


def test_filled_scpcoa(sicd_builder, geometry):
    sicd = sicd_builder('RGAZCOMP')
    assert sicd.SCPCOA.SCPTime == 0.
    assert sicd.SCPCOA.SideOfTrack == 'R'
    assert sicd.SCPCOA.SlantRange == pytest.approx(geometry['slant_range'])
    assert sicd.SCPCOA.DopplerConeAng == pytest.approx(90.)
    assert sicd.RgAzComp.AzSF == pytest.approx(1./geometry['slant_range'])


def test_filled_pfa(sicd_builder, geometry):
    kfc = 2*10e9/speed_of_light
    sicd = sicd_builder('PFA')
    grid = sicd.Grid
    assert grid.Row.KCtr == pytest.approx(kfc)
    assert grid.Col.KCtr == 0
    assert (sicd.PFA.Krg1, sicd.PFA.Krg2) == pytest.approx((kfc - 0.25, kfc + 0.25))
    assert (sicd.PFA.Kaz1, sicd.PFA.Kaz2) == pytest.approx((-0.25, 0.25))
    assert sicd.PFA.IPN.get_array() == pytest.approx(geometry['slant_plane_normal'], abs=1e-12)
    assert sicd.PFA.FPN.get_array() == pytest.approx([1., 0., 0.], abs=1e-12)
    assert (grid.Row.DeltaK1, grid.Row.DeltaK2) == pytest.approx((-0.25, 0.25))
    assert grid.Row.WgtFunct.shape == (512, )
    assert grid.Row.ImpRespWid == pytest.approx(0.886/0.5, rel=1e-3)


def test_filled_rg_az_comp(sicd_builder, geometry):
    kfc = 2*10e9/speed_of_light
    grid = sicd_builder('RGAZCOMP').Grid
    assert grid.Row.get_unit_vector() == pytest.approx(geometry['row_vector'], abs=1e-12)
    assert grid.Col.get_unit_vector() == pytest.approx(geometry['col_vector'], abs=1e-12)
    assert grid.Row.KCtr == pytest.approx(kfc)
    assert grid.Col.KCtr == 0
    assert grid.Row.DeltaKCOAPoly.Coefs == pytest.approx(np.zeros((1, 1)))


@pytest.mark.parametrize('algorithm,grid_type', [('RMAT', 'XCTYAT'), ('RMCR', 'XRGYCR'), ('INCA', 'RGZERO')])
def test_filled_rma(sicd_builder, geometry, algorithm, grid_type):
    kfc = 2*10e9/speed_of_light
    sicd = sicd_builder(algorithm)
    grid = sicd.Grid
    assert grid.Type == grid_type
    assert grid.ImagePlane == 'SLANT'
    assert grid.Row.get_unit_vector() == pytest.approx(geometry['row_vector'], abs=1e-12)
    assert grid.Col.get_unit_vector() == pytest.approx(geometry['col_vector'], abs=1e-12)
    assert grid.Row.KCtr == pytest.approx(kfc)
    assert grid.Col.KCtr == pytest.approx(0., abs=1e-12)


def test_filled_inca(sicd_builder, geometry):
    inca = sicd_builder('INCA').RMA.INCA
    assert inca.R_CA_SCP == pytest.approx(geometry['slant_range'])
    assert inca.FreqZero == pytest.approx(10e9)


def test_filled_rmat(sicd_builder):
    rmat = sicd_builder('RMAT').RMA.RMAT
    assert rmat.DopConeAngRef == pytest.approx(90.)
    assert rmat.PosRef is not None and rmat.VelRef is not None


def test_inconsistent_grid(sicd_builder, caplog):
    sicd = sicd_builder('RMCR')
    sicd.Grid.Col.KCtr = 0.5
    sicd.Grid.Row.UVectECF = [0., 1., 0.]
    report = sicd.validate_grid()
    assert not report.is_valid
    messages = report.messages('error')
    assert 'Col.KCtr must be zero for RMCR data, but populated as 0.5' in messages
    assert any(message.startswith('UVectECF fields inconsistent') for message in messages)
    assert 'GridType: Col.KCtr must be zero for RMCR data' in caplog.text


def test_missing_substructure(sicd_builder):
    sicd = sicd_builder('PFA')
    sicd.PFA = None
    report = sicd.validate_grid()
    assert report.messages('error') == [
        'ImageFormation.ImageFormAlgo is PFA, but the PFA parameter is not populated']
    assert report.errors[0].source == 'SICDType'


def test_rma_without_image_type(sicd_builder, caplog):
    sicd = sicd_builder('RMCR')
    sicd.RMA.RMCR = None
    report = sicd.validate_grid()
    assert not report.is_valid
    assert 'The RMA parameters have none of RMAT, RMCR, or INCA populated' in report.messages('error')
    assert 'GridType: The RMA parameters have none of RMAT, RMCR, or INCA populated' in caplog.text

    sicd.fill_derived_fields()
    sicd.fill_default_fields()
    assert 'so no defaults can be set' in caplog.text


def test_missing_grid(caplog):
    sicd = SICDType()
    report = sicd.validate_grid()
    assert report.messages('error') == ['Grid is not populated, so cannot be validated']
    sicd.fill_derived_fields()
    sicd.fill_default_fields()
    assert 'Grid is not populated, so no grid fields can be derived.' in caplog.text
    assert not sicd.can_project_coordinates()


def test_can_project(sicd_builder, caplog):
    sicd = sicd_builder('PFA')
    assert sicd.can_project_coordinates()

    sicd.PFA.PolarAngPoly = None
    assert not sicd.can_project_coordinates()
    assert 'PFA.PolarAngPoly or PFA.SpatialFreqSFPoly parameter is not populated' in caplog.text

    sicd = sicd_builder('RGAZCOMP', fill=False)
    assert not sicd.can_project_coordinates()

    sicd = sicd_builder('INCA')
    sicd.Grid = None
    assert not sicd.can_project_coordinates()


@pytest.mark.parametrize('algorithm,model_type', [
    ('PFA', RangeAzimuthProjectionModel), ('RGAZCOMP', RgAzCompProjectionModel),
    ('INCA', RangeZeroProjectionModel), ('RMAT', PlaneProjectionModel), ('RMCR', PlaneProjectionModel)])
def test_projection_model_type(sicd_builder, algorithm, model_type):
    model = sicd_builder(algorithm).get_projection_model()
    assert isinstance(model, model_type)
    assert model.look == -1


@pytest.mark.parametrize('algorithm', ALGORITHMS)
def test_scp_pixel_projection(sicd_builder, geometry, algorithm):
    sicd = sicd_builder(algorithm)
    ground = sicd.project_image_to_ground([100, 100])
    assert ground.shape == (3, )
    assert ground == pytest.approx(geometry['scp'], abs=1e-6)

    image_points, delta_gp, iterations = sicd.project_ground_to_image(geometry['scp'])
    assert image_points == pytest.approx([100., 100.], abs=1e-6)
    assert delta_gp <= 1e-3


@pytest.mark.parametrize('algorithm', ALGORITHMS)
def test_round_trip(sicd_builder, algorithm):
    sicd = sicd_builder(algorithm)
    ground = sicd.project_image_to_ground(PIXELS)
    assert ground.shape == (4, 3)
    assert not np.any(np.isnan(ground))

    image_points, delta_gp, iterations = sicd.project_ground_to_image(ground, tolerance=1e-6)
    assert image_points.shape == (4, 2)
    assert image_points == pytest.approx(PIXELS, abs=1e-3)
    assert np.all(delta_gp <= 1e-6)
    assert np.all(iterations >= 1)
