#
# Copyright 2023 Valkyrie Systems Corporation
#
# Licensed under MIT License.  See LICENSE.
#
import numpy as np
import pytest

from sarproj.elements.blocks import Poly1DType, Poly2DType, XYZPolyType
from sarproj.elements.CollectionInfo import CollectionInfoType, RadarModeType
from sarproj.elements.GeoData import GeoDataType, SCPType
from sarproj.elements.Grid import GridType, DirParamType, WgtTypeType
from sarproj.elements.ImageData import ImageDataType
from sarproj.elements.ImageFormation import ImageFormationType, TxFrequencyProcType
from sarproj.elements.PFA import PFAType
from sarproj.elements.Position import PositionType
from sarproj.elements.RadarCollection import RadarCollectionType, TxFrequencyType
from sarproj.elements.RgAzComp import RgAzCompType
from sarproj.elements.RMA import RMAType, RMRefType, INCAType
from sarproj.elements.SICD import SICDType
from sarproj.geometry import projection_model

# A right looking, straight and level collection over the equator. The aperture
# moves north and the scene center point is broadside at the center of aperture.
EARTH_RADIUS = 6378137.0
ALTITUDE = 5000.0
GROUND_OFFSET = 10000.0
SPEED = 200.0
SLANT_RANGE = float(np.hypot(ALTITUDE, GROUND_OFFSET))
CENTER_FREQUENCY = 10e9
BANDWIDTH = 1e9
IMP_RESP_BW = 0.5

SCP = np.array([EARTH_RADIUS, 0.0, 0.0])
ROW_VECTOR = np.array([-ALTITUDE, GROUND_OFFSET, 0.0])/SLANT_RANGE
COL_VECTOR = np.array([0.0, 0.0, 1.0])
SLANT_PLANE_NORMAL = np.array([GROUND_OFFSET, ALTITUDE, 0.0])/SLANT_RANGE


def make_arp_poly():
    return XYZPolyType(X=[EARTH_RADIUS + ALTITUDE, ], Y=[-GROUND_OFFSET, ], Z=[0.0, SPEED])


def make_time_coa_poly():
    return Poly2DType(Coefs=[[0.0, 1./SPEED], ])


def _common_args():
    return (SLANT_PLANE_NORMAL, ROW_VECTOR, COL_VECTOR, SCP, make_arp_poly(), make_time_coa_poly(), -1)


def make_model(name):
    if name == 'PFA':
        return projection_model.RangeAzimuthProjectionModel(
            Poly1DType(Coefs=[0.0, -SPEED/SLANT_RANGE]), Poly1DType(Coefs=[1.0, ]), *_common_args())
    elif name == 'RGAZCOMP':
        return projection_model.RgAzCompProjectionModel(1./SLANT_RANGE, *_common_args())
    elif name == 'INCA':
        return projection_model.RangeZeroProjectionModel(
            Poly1DType(Coefs=[0.0, 1./SPEED]), Poly2DType(Coefs=[[1.0, ], ]), SLANT_RANGE, *_common_args())
    elif name == 'PLANE':
        return projection_model.PlaneProjectionModel(*_common_args())
    raise ValueError('Unhandled model name {}'.format(name))


def _direction(unit_vector=None):
    return DirParamType(
        UVectECF=unit_vector, SS=1.0, ImpRespBW=IMP_RESP_BW, Sgn=-1,
        WgtType=WgtTypeType(WindowName='UNIFORM'))


def make_sicd(algorithm, fill=True):
    """
    Build the metadata for the synthetic collection, formed by the given algorithm.
    One of 'PFA', 'RGAZCOMP', 'INCA', 'RMAT', or 'RMCR'.
    """

    grid = GridType(
        ImagePlane='SLANT', TimeCOAPoly=make_time_coa_poly(), Row=_direction(), Col=_direction())
    extra = {}
    if algorithm == 'PFA':
        grid.Type = 'RGAZIM'
        grid.Row.UVectECF = ROW_VECTOR
        grid.Col.UVectECF = COL_VECTOR
        extra['PFA'] = PFAType(
            PolarAngPoly=Poly1DType(Coefs=[0.0, -SPEED/SLANT_RANGE]),
            SpatialFreqSFPoly=Poly1DType(Coefs=[1.0, ]))
        image_form_algo = 'PFA'
    elif algorithm == 'RGAZCOMP':
        grid.Type = 'RGAZIM'
        extra['RgAzComp'] = RgAzCompType()
        image_form_algo = 'RGAZCOMP'
    elif algorithm == 'INCA':
        extra['RMA'] = RMAType(
            RMAlgoType='OMEGA_K',
            INCA=INCAType(TimeCAPoly=[0.0, 1./SPEED], DRateSFPoly=[[1.0, ], ]))
        image_form_algo = 'RMA'
    elif algorithm in ['RMAT', 'RMCR']:
        extra['RMA'] = RMAType(RMAlgoType='OMEGA_K', **{algorithm: RMRefType()})
        image_form_algo = 'RMA'
    else:
        raise ValueError('Unhandled algorithm {}'.format(algorithm))

    sicd = SICDType(
        CollectionInfo=CollectionInfoType(
            CollectorName='SYNTHETIC', CoreName='SYNTHETIC_CORE', RadarMode=RadarModeType(ModeType='STRIPMAP')),
        ImageData=ImageDataType(NumRows=201, NumCols=201, FirstRow=0, FirstCol=0, SCPPixel=[100, 100]),
        GeoData=GeoDataType(SCP=SCPType(ECF=SCP)),
        Grid=grid,
        Position=PositionType(ARPPoly=make_arp_poly()),
        RadarCollection=RadarCollectionType(
            TxFrequency=TxFrequencyType(
                Min=CENTER_FREQUENCY - 0.5*BANDWIDTH, Max=CENTER_FREQUENCY + 0.5*BANDWIDTH)),
        ImageFormation=ImageFormationType(
            ImageFormAlgo=image_form_algo,
            TxFrequencyProc=TxFrequencyProcType(
                MinProc=CENTER_FREQUENCY - 0.5*BANDWIDTH, MaxProc=CENTER_FREQUENCY + 0.5*BANDWIDTH)),
        **extra)

    if fill:
        if algorithm == 'PFA':
            # the row center frequency seeds the PFA range bounds
            sicd.fill_default_fields()
            sicd.fill_derived_fields()
        else:
            # the RMAT reference cone angle seeds the center frequencies
            sicd.fill_derived_fields()
            sicd.fill_default_fields()
    return sicd


@pytest.fixture
def geometry():
    return {
        'scp': SCP.copy(),
        'arp_poly': make_arp_poly(),
        'time_coa_poly': make_time_coa_poly(),
        'row_vector': ROW_VECTOR.copy(),
        'col_vector': COL_VECTOR.copy(),
        'slant_plane_normal': SLANT_PLANE_NORMAL.copy(),
        'slant_range': SLANT_RANGE,
        'speed': SPEED,
        'look': -1,
    }


@pytest.fixture
def model_builder():
    return make_model


@pytest.fixture
def sicd_builder():
    return make_sicd
