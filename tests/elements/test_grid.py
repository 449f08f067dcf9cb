#
# Copyright 2023 Valkyrie Systems Corporation
#
# Licensed under MIT License.  See LICENSE.
#
import numpy as np
import pytest
from scipy.constants import speed_of_light

from sarproj.elements.base import ValidationReport
from sarproj.elements.blocks import Poly2DType
from sarproj.elements.CollectionInfo import CollectionInfoType, RadarModeType
from sarproj.elements.Grid import GridType, DirParamType, WgtTypeType, \
    DEFAULT_WEIGHT_SIZE, get_vertex_coordinates
from sarproj.elements.ImageData import ImageDataType
from sarproj.elements.PFA import PFAType, STDeskewType
from sarproj.elements.RgAzComp import RgAzCompType
from sarproj.elements.RMA import RMAType, RMRefType, INCAType
from sarpy.processing.sicd.windows import general_hamming, kaiser


def _direction(**kwargs):
    the_dict = {'SS': 1.0, 'ImpRespBW': 0.5, 'Sgn': -1, 'KCtr': 0.0}
    the_dict.update(kwargs)
    return DirParamType(**the_dict)


def _collection_info(mode_type):
    return CollectionInfoType(CollectorName='SYNTHETIC', RadarMode=RadarModeType(ModeType=mode_type))


@pytest.fixture
def image_data():
    return ImageDataType(NumRows=101, NumCols=201, FirstRow=0, FirstCol=0, SCPPixel=[50, 100])


def test_vertex_coordinates(image_data):
    x_coords, y_coords = get_vertex_coordinates(image_data, 0.5, 2.0)
    assert x_coords == pytest.approx([-25., -25., 25., 25.])
    assert y_coords == pytest.approx([-200., 200., 200., -200.])

    assert get_vertex_coordinates(None, 0.5, 2.0) == (None, None)
    assert get_vertex_coordinates(image_data, None, 2.0) == (None, None)


def test_delta_ks_nyquist_clamp():
    """Support wider than the sample rate is clamped to the Nyquist band"""
    assert _direction(SS=1.0, ImpRespBW=2.0).calculate_delta_ks(None, None) == pytest.approx((-0.5, 0.5))
    assert _direction(SS=0.5, ImpRespBW=1.5).calculate_delta_ks(None, None) == pytest.approx((-0.75, 0.75))
    assert _direction(SS=-0.5, ImpRespBW=1.5).calculate_delta_ks(None, None) == pytest.approx((-0.75, 0.75))


def test_delta_ks_from_poly():
    direction = _direction(SS=1.0, ImpRespBW=0.5, DeltaKCOAPoly=[[0.1, ], ])
    x_coords = np.array([-10., 10.])
    y_coords = np.array([-5., 5.])
    assert direction.calculate_delta_ks(x_coords, y_coords) == pytest.approx((-0.15, 0.35))
    # without vertices, the support is centered
    assert direction.calculate_delta_ks(None, None) == pytest.approx((-0.25, 0.25))

    direction = _direction(SS=1.0, ImpRespBW=0.5, DeltaKCOAPoly=[[0., ], [0.01, ]])
    assert direction.calculate_delta_ks(x_coords, y_coords) == pytest.approx((-0.35, 0.35))


def test_delta_ks_undetermined():
    assert _direction(ImpRespBW=None).calculate_delta_ks(None, None) is None
    assert _direction(SS=None).calculate_delta_ks(None, None) is None


def test_delta_k_bounds(caplog):
    report = ValidationReport()
    direction = _direction(SS=1.0, ImpRespBW=0.5, DeltaK1=0.3, DeltaK2=0.2)
    assert not direction.validate(None, None, report=report)
    assert 'DeltaK2 (0.2) must be greater than DeltaK1 (0.3)' in caplog.text
    assert not report.is_valid
    assert all(entry.source == 'DirParamType' for entry in report)

    report = ValidationReport()
    direction = _direction(SS=1.0, ImpRespBW=0.5, DeltaK1=-0.6, DeltaK2=0.6)
    assert not direction.validate(None, None, report=report)
    messages = report.messages('error')
    assert any('must be <= 1/(2*SS)' in message for message in messages)
    assert any('must be >= -1/(2*SS)' in message for message in messages)

    report = ValidationReport()
    direction = _direction(SS=1.0, ImpRespBW=0.5, DeltaK1=-0.1, DeltaK2=0.1)
    assert not direction.validate(None, None, report=report)
    assert any('must be <= DeltaK2 - DeltaK1' in message for message in report.messages('error'))


def test_delta_k_estimates():
    report = ValidationReport()
    direction = _direction(SS=1.0, ImpRespBW=0.5, DeltaK1=-0.25, DeltaK2=0.25)
    assert direction.validate(None, None, report=report)
    assert len(report) == 0

    direction = _direction(SS=1.0, ImpRespBW=0.5, DeltaK1=-0.3, DeltaK2=0.3)
    assert not direction.validate(None, None, report=report)
    assert len(report.errors) == 2
    assert 'The DeltaK1 value is populated as -0.3' in report.errors[0].message


def test_fft_signs(caplog):
    report = ValidationReport()
    grid = GridType(Row=_direction(Sgn=-1), Col=_direction(Sgn=1))
    assert not grid.validate_fft_signs(report=report)
    assert 'GridType: Row.Sgn (-1) and Col.Sgn (1) should almost certainly be the same' in caplog.text
    assert len(report.errors) == 1
    assert report.errors[0].source == 'GridType'

    grid.Col.Sgn = -1
    assert grid.validate_fft_signs()


def test_uniform_weights():
    direction = _direction(WgtType=WgtTypeType(WindowName='UNIFORM'), WgtFunct=np.full((16, ), 0.25))
    report = ValidationReport()
    assert direction.validate(None, None, report=report)
    assert len(report) == 0

    direction.WgtFunct[3] = 0.3
    assert not direction.validate(None, None, report=report)
    assert report.is_valid
    assert report.messages('warning') == ['WgtFunct values inconsistent with WgtType UNIFORM']


def test_named_weights():
    direction = _direction(
        WgtType=WgtTypeType(WindowName='HAMMING', Parameters={'COEFFICIENT': '0.6'}),
        WgtFunct=general_hamming(64, 0.6))
    report = ValidationReport()
    assert direction.validate(None, None, report=report)
    assert len(report) == 0

    # the default hamming coefficient does not match
    direction.WgtType = WgtTypeType(WindowName='HAMMING')
    assert not direction.validate(None, None, report=report)
    assert len(report.warnings) == 1

    direction = _direction(WgtType=WgtTypeType(WindowName='KAISER', Parameters={'BETA': '3.5'}),
                           WgtFunct=kaiser(32, 3.5))
    assert direction.validate(None, None)
    direction = _direction(WgtType=WgtTypeType(WindowName='HANNING'), WgtFunct=general_hamming(32, 0.5))
    assert direction.validate(None, None)


def test_unrecognized_weighting():
    """An unsupported window is reported, but only as warnings"""
    direction = _direction(WgtType=WgtTypeType(WindowName='TAYLOR'), WgtFunct=np.ones((8, )))
    report = ValidationReport()
    assert not direction.validate(None, None, report=report)
    assert report.is_valid
    assert len(report.warnings) == 2
    assert 'is not supported' in report.warnings[0].message
    assert report.warnings[1].message == 'Unrecognized weighting description TAYLOR'

    direction = _direction(WgtType=WgtTypeType(WindowName='TAYLOR'))
    report = ValidationReport()
    assert not direction.validate(None, None, report=report)
    assert report.messages('warning') == [
        'Unrecognized weighting description TAYLOR',
        'Non-uniform weighting TAYLOR indicated, but no WgtFunct provided']


def test_unknown_weighting():
    direction = _direction(WgtType=WgtTypeType(WindowName='UNKNOWN'))
    report = ValidationReport()
    assert direction.validate(None, None, report=report)
    assert len(report) == 0


def test_fill_weights():
    direction = _direction(WgtType=WgtTypeType(WindowName='UNIFORM'))
    direction.fill_derived_fields(None, None, weight_size=64)
    assert direction.WgtFunct.shape == (64, )
    assert np.all(direction.WgtFunct == 1)
    assert direction.DeltaK1 == pytest.approx(-0.25)
    assert direction.DeltaK2 == pytest.approx(0.25)
    assert direction.ImpRespWid == pytest.approx(0.886/0.5, rel=1e-3)

    direction = _direction(WgtType=WgtTypeType(WindowName='HAMMING'))
    direction.fill_derived_fields(None, None)
    assert direction.WgtFunct.shape == (DEFAULT_WEIGHT_SIZE, )
    assert direction.WgtFunct == pytest.approx(general_hamming(DEFAULT_WEIGHT_SIZE, 0.54))
    assert direction.ImpRespWid > 0.886/0.5

    direction = _direction(WgtType=WgtTypeType(WindowName='UNKNOWN'))
    direction.fill_derived_fields(None, None)
    assert direction.WgtFunct is None


def test_fill_never_overwrites():
    direction = _direction(
        DeltaK1=-0.2, DeltaK2=0.2, ImpRespWid=3.0,
        WgtType=WgtTypeType(WindowName='HAMMING'), WgtFunct=np.ones((8, )))
    direction.fill_derived_fields(None, None)
    assert direction.DeltaK1 == -0.2
    assert direction.DeltaK2 == 0.2
    assert direction.ImpRespWid == 3.0
    assert np.all(direction.WgtFunct == np.ones((8, )))


def test_fill_is_idempotent(image_data):
    grid = GridType(
        ImagePlane='SLANT', Type='RGAZIM', TimeCOAPoly=[[0., 0.005], ],
        Row=_direction(WgtType=WgtTypeType(WindowName='UNIFORM'), DeltaKCOAPoly=[[0.01, ], ]),
        Col=_direction(WgtType=WgtTypeType(WindowName='KAISER')))
    collection_info = _collection_info('STRIPMAP')
    grid.fill_derived_fields(collection_info, image_data, None)
    first = grid.to_dict()
    grid.fill_derived_fields(collection_info, image_data, None)
    assert grid.to_dict() == first
    assert grid.Row.DeltaK1 == pytest.approx(-0.24)
    assert grid.Row.DeltaK2 == pytest.approx(0.26)

    report = ValidationReport()
    assert grid.validate(collection_info, image_data, report=report)
    assert len(report) == 0


def test_time_coa_poly(caplog):
    grid = GridType(TimeCOAPoly=[[0., 0.005], ])
    report = ValidationReport()
    assert not grid.validate_time_coa_poly(_collection_info('SPOTLIGHT'), report=report)
    assert 'GridType: SPOTLIGHT data should only have scalar TimeCOAPoly.' in caplog.text
    assert grid.validate_time_coa_poly(_collection_info('STRIPMAP'), report=report)
    assert len(report.errors) == 1

    grid = GridType(TimeCOAPoly=[[1.5, ], ])
    report = ValidationReport()
    assert grid.validate_time_coa_poly(_collection_info('SPOTLIGHT'), report=report)
    assert not grid.validate_time_coa_poly(_collection_info('STRIPMAP'), report=report)
    assert report.is_valid
    assert len(report.warnings) == 1

    assert grid.validate_time_coa_poly(None)


def test_fill_spotlight_time_coa_poly():
    class SCPCOA(object):
        SCPTime = 2.5

    grid = GridType()
    grid.fill_time_coa_poly(_collection_info('STRIPMAP'), SCPCOA())
    assert grid.TimeCOAPoly is None
    grid.fill_time_coa_poly(_collection_info('SPOTLIGHT'), SCPCOA())
    assert grid.TimeCOAPoly.Coefs == pytest.approx(np.array([[2.5, ], ]))


def test_default_grid_type():
    assert GridType.default_grid_type(RMAType(RMAT=RMRefType())) == 'XCTYAT'
    assert GridType.default_grid_type(RMAType(RMCR=RMRefType())) == 'XRGYCR'
    assert GridType.default_grid_type(RMAType(INCA=INCAType())) == 'RGZERO'

    with pytest.raises(ValueError):
        GridType.default_grid_type(None)
    with pytest.raises(ValueError):
        GridType.default_grid_type(RMAType(RMAlgoType='OMEGA_K'))

    grid = GridType(ImagePlane='GROUND')
    assert grid.default_plane_type(RMAType(RMAT=RMRefType())) == 'SLANT'
    assert grid.default_plane_type(RMAType(INCA=INCAType())) == 'GROUND'


def test_missing_substructures_raise():
    grid = GridType(Row=_direction(), Col=_direction())
    with pytest.raises(ValueError):
        grid.validate_rmat(None, None, None)
    with pytest.raises(ValueError):
        grid.validate_rmcr(None, None, None)
    with pytest.raises(ValueError):
        grid.validate_inca(None, None, None)
    with pytest.raises(ValueError):
        grid.validate_pfa(None, None, None)
    with pytest.raises(ValueError):
        grid.validate_rg_az_comp(None, None, None, None)
    with pytest.raises(ValueError):
        grid.fill_derived_fields_rma(RMAType(RMAlgoType='OMEGA_K'), None, None)


def test_rg_az_comp_fill():
    fc = 10e9
    kfc = 2*fc/speed_of_light
    grid = GridType(Row=_direction(KCtr=None), Col=_direction(KCtr=None))
    grid.fill_derived_fields_rg_az_comp(None, None, fc)
    assert grid.ImagePlane == 'SLANT'
    assert grid.Type == 'RGAZIM'
    assert grid.Row.KCtr == pytest.approx(kfc)
    assert grid.Row.DeltaKCOAPoly.Coefs == pytest.approx(np.array([[0., ], ]))
    assert grid.Col.KCtr == 0

    # an offset poly determines the center frequency
    direction = _direction(KCtr=None, DeltaKCOAPoly=[[0.2, ], ])
    direction.fill_derived_fields_rg_az_comp(0.)
    assert direction.KCtr == pytest.approx(-0.2)


def test_rg_az_comp_validation():
    fc = 10e9
    kfc = 2*fc/speed_of_light
    rg_az_comp = RgAzCompType(AzSF=1e-4, KazPoly=[0., ])
    grid = GridType(
        ImagePlane='SLANT', Type='RGAZIM',
        Row=_direction(KCtr=kfc, DeltaKCOAPoly=[[0., ], ]),
        Col=_direction(KCtr=0., DeltaKCOAPoly=[[0., ], ]))
    report = ValidationReport()
    assert grid.validate_rg_az_comp(rg_az_comp, None, None, fc, report=report)
    assert len(report) == 0

    grid.Row.KCtr = kfc + 1e-3
    grid.Col.DeltaKCOAPoly = [[0., 1e-3], ]
    assert not grid.validate_rg_az_comp(rg_az_comp, None, None, fc, report=report)
    messages = report.messages('error')
    assert len(messages) == 2
    assert messages[0] == 'DeltaKCOAPoly must be a single value for RGAZCOMP data'
    assert messages[1].startswith('KCtr is populated as')

    grid.ImagePlane = 'GROUND'
    grid.Type = 'PLANE'
    report = ValidationReport()
    assert not grid.validate_rg_az_comp(rg_az_comp, None, None, None, report=report)
    assert len(report.errors) == 3


def _pfa_grid(kfc):
    return GridType(
        ImagePlane='SLANT', Type='RGAZIM',
        Row=_direction(KCtr=kfc, SS=1.0, ImpRespBW=0.5),
        Col=_direction(KCtr=0., SS=1.0, ImpRespBW=0.5))


def test_pfa_validation():
    fc = 10e9
    kfc = 2*fc/speed_of_light
    grid = _pfa_grid(kfc)
    pfa = PFAType(
        PolarAngRefTime=0., PolarAngPoly=[0., 0.01], SpatialFreqSFPoly=[1., ],
        Krg1=kfc - 0.25, Krg2=kfc + 0.25, Kaz1=-0.25, Kaz2=0.25)
    report = ValidationReport()
    assert grid.validate_pfa(pfa, None, fc, report=report)
    assert len(report) == 0

    pfa.Kaz2 = 0.6
    assert not grid.validate_pfa(pfa, None, fc, report=report)
    assert any(message.startswith('PFA.Kaz2 - KCtr (0.6) must be <= 1/(2*SS)')
               for message in report.messages('error'))

    # slow time deskew exempts the azimuth bounds
    pfa.STDeskew = STDeskewType(Applied=True, STDSPhasePoly=[[0., ], ])
    report = ValidationReport()
    assert grid.validate_pfa(pfa, None, fc, report=report)
    assert len(report) == 0


def test_pfa_validation_center_frequency():
    fc = 10e9
    kfc = 2*fc/speed_of_light
    grid = _pfa_grid(1.1*kfc)
    grid.Type = 'RGZERO'
    pfa = PFAType(SpatialFreqSFPoly=[1., ])
    report = ValidationReport()
    assert not grid.validate_pfa(pfa, None, fc, report=report)
    assert len(report.errors) == 2
    assert report.errors[0].message.startswith('PFA image formation should result in a RGAZIM grid')
    assert report.errors[1].message.startswith('Waveform fields not consistent.')


def test_fill_default_fields_pfa():
    fc = 10e9
    kfc = 2*fc/speed_of_light
    grid = GridType()
    grid.fill_default_fields_pfa(PFAType(SpatialFreqSFPoly=[0.99, ]), fc)
    assert grid.Type == 'RGAZIM'
    assert grid.Row.KCtr == pytest.approx(0.99*kfc)
    assert grid.Col.KCtr == 0

    grid = GridType()
    grid.fill_default_fields_pfa(PFAType(Krg1=60., Krg2=70.), fc)
    assert grid.Row.KCtr == pytest.approx(65.)

    with pytest.raises(ValueError):
        grid.fill_default_fields_pfa(None, fc)


def test_fill_default_fields_rma():
    fc = 10e9
    kfc = 2*fc/speed_of_light

    grid = GridType()
    grid.fill_default_fields_rma(RMAType(RMAT=RMRefType(DopConeAngRef=60.)), fc)
    assert grid.ImagePlane == 'SLANT'
    assert grid.Type == 'XCTYAT'
    assert grid.Row.KCtr == pytest.approx(kfc*np.sin(np.deg2rad(60.)))
    assert grid.Col.KCtr == pytest.approx(kfc*0.5)

    grid = GridType()
    grid.fill_default_fields_rma(RMAType(RMCR=RMRefType()), fc)
    assert grid.Type == 'XRGYCR'
    assert grid.Row.KCtr == pytest.approx(kfc)
    assert grid.Col.KCtr == 0

    grid = GridType(Type='PLANE')
    grid.fill_default_fields_rma(RMAType(INCA=INCAType()), None)
    assert grid.Type == 'PLANE'
    assert grid.Row is None


def test_rma_type_mismatch():
    grid = GridType(Type='RGZERO', Row=_direction(), Col=_direction())
    rma = RMAType(RMAlgoType='OMEGA_K', RMCR=RMRefType())
    report = ValidationReport()
    assert not grid.validate_rma(rma, None, None, None, report=report)
    assert report.errors[0].message == \
        'Given image formation algorithm expects Type XRGYCR, but populated as RGZERO'


def test_rmcr_column_center(caplog):
    fc = 10e9
    kfc = 2*fc/speed_of_light
    grid = GridType(Type='XRGYCR', Row=_direction(KCtr=kfc), Col=_direction(KCtr=0.1))
    report = ValidationReport()
    assert not grid.validate_rmcr(RMRefType(), None, fc, report=report)
    assert report.messages('error') == ['Col.KCtr must be zero for RMCR data, but populated as 0.1']

    # a row center frequency mismatch is only a warning
    grid.Col.KCtr = 0.
    grid.Row.KCtr = 1.1*kfc
    report = ValidationReport()
    assert not grid.validate_rmcr(RMRefType(), None, fc, report=report)
    assert report.is_valid
    assert len(report.warnings) == 1


def test_inca_doppler_centroid():
    grid = GridType(
        Type='RGZERO', Row=_direction(),
        Col=_direction(DeltaKCOAPoly=[[0.2, 0.4], ]))
    inca = INCAType(TimeCAPoly=[0., 0.5], DopCentroidPoly=[[0.4, 0.8], ], DopCentroidCOA=True)
    report = ValidationReport()
    assert grid.validate_inca(inca, None, None, report=report)
    assert len(report) == 0

    inca.DopCentroidPoly = [[0.4, 0.7], ]
    assert not grid.validate_inca(inca, None, None, report=report)
    assert report.messages('error') == [
        'Col.DeltaKCOAPoly and INCA.DopCentroidPoly*INCA.TimeCAPoly[1] are inconsistent']

    inca.DopCentroidPoly = [[0.4, ], ]
    report = ValidationReport()
    assert not grid.validate_inca(inca, None, None, report=report)
    assert report.messages('error') == ['Col.DeltaKCOAPoly and INCA.DopCentroidPoly have different sizes']

    grid.Col.DeltaKCOAPoly = None
    report = ValidationReport()
    assert not grid.validate_inca(inca, None, None, report=report)
    assert len(report.errors) == 1


def test_inca_constant_time_ca(sicd_builder):
    # no linear TimeCAPoly term, so DeltaKCOAPoly must vanish
    grid = GridType(Type='RGZERO', Row=_direction(), Col=_direction(DeltaKCOAPoly=[[0.], ]))
    inca = INCAType(TimeCAPoly=[0., ], DopCentroidPoly=[[0., ], ], DopCentroidCOA=True)
    report = ValidationReport()
    assert grid.validate_inca(inca, None, None, report=report)
    assert len(report) == 0

    grid.Col.DeltaKCOAPoly = [[0.2, ], ]
    assert not grid.validate_inca(inca, None, None, report=report)
    assert report.messages('error') == [
        'Col.DeltaKCOAPoly and INCA.DopCentroidPoly*INCA.TimeCAPoly[1] are inconsistent']

    sicd = sicd_builder('INCA')
    sicd.RMA.INCA.TimeCAPoly = [0., ]
    sicd.RMA.INCA.DopCentroidPoly = [[0., ], ]
    sicd.RMA.INCA.DopCentroidCOA = True
    sicd.Grid.Col.DeltaKCOAPoly = [[0., ], ]
    report = sicd.validate_grid()
    assert not any(message.startswith('Col.DeltaKCOAPoly') for message in report.messages())


def test_basic_validity_positive_values(caplog):
    direction = DirParamType(
        UVectECF=[1, 0, 0], SS=-1.0, ImpRespWid=1.0, Sgn=-1, ImpRespBW=1.0, KCtr=0., DeltaK1=-0.5, DeltaK2=0.5)
    assert not direction.is_valid()
    assert 'SS must be positive, but is populated as -1.0' in caplog.text


def test_validation_accumulates(image_data):
    """All checks run, even after the first failure"""
    grid = GridType(
        ImagePlane='SLANT', Type='RGAZIM', TimeCOAPoly=Poly2DType(Coefs=[[0., 0.005], ]),
        Row=_direction(Sgn=1, DeltaK1=0.3, DeltaK2=0.2),
        Col=_direction(Sgn=-1, WgtType=WgtTypeType(WindowName='TAYLOR')))
    report = ValidationReport()
    assert not grid.validate(_collection_info('SPOTLIGHT'), image_data, report=report)
    sources = set(entry.source for entry in report)
    assert sources == {'GridType', 'DirParamType'}
    assert len(report.errors) >= 3
    assert len(report.warnings) == 2
