#
# Copyright 2023 Valkyrie Systems Corporation
#
# Licensed under MIT License.  See LICENSE.
#
import pytest

from sarproj.elements.GeoData import GeoDataType, SCPType
from sarproj.elements.Grid import GridType, DirParamType
from sarproj.elements.PFA import PFAType, STDeskewType
from sarproj.elements.SCPCOA import SCPCOAType


@pytest.fixture
def scpcoa(geometry):
    arp_poly = geometry['arp_poly']
    return SCPCOAType(
        SCPTime=0., ARPPos=arp_poly(0.), ARPVel=arp_poly.derivative_eval(0.), SideOfTrack='R')


def test_derive_parameters(geometry, scpcoa):
    grid = GridType(
        ImagePlane='SLANT',
        Row=DirParamType(KCtr=60., ImpRespBW=0.5),
        Col=DirParamType(KCtr=0., ImpRespBW=0.25))
    pfa = PFAType()
    pfa._derive_parameters(grid, scpcoa, GeoDataType(SCP=SCPType(ECF=geometry['scp'])))

    assert pfa.PolarAngRefTime == 0.
    assert pfa.IPN.get_array() == pytest.approx(geometry['slant_plane_normal'], abs=1e-12)
    assert pfa.FPN.get_array() == pytest.approx([1., 0., 0.], abs=1e-12)
    assert (pfa.Krg1, pfa.Krg2) == pytest.approx((59.75, 60.25))
    assert (pfa.Kaz1, pfa.Kaz2) == pytest.approx((-0.125, 0.125))


def test_derive_ground_plane(geometry, scpcoa):
    pfa = PFAType()
    pfa._derive_parameters(GridType(ImagePlane='GROUND'), scpcoa, GeoDataType(SCP=SCPType(ECF=geometry['scp'])))
    assert pfa.IPN.get_array() == pytest.approx([1., 0., 0.], abs=1e-12)
    assert pfa.Krg1 is None


def test_derive_keeps_populated(geometry, scpcoa):
    pfa = PFAType(PolarAngRefTime=1.5, Krg1=50., FPN=[0., 0., 1.])
    grid = GridType(Row=DirParamType(KCtr=60., ImpRespBW=0.5))
    pfa._derive_parameters(grid, scpcoa, GeoDataType(SCP=SCPType(ECF=geometry['scp'])))
    assert pfa.PolarAngRefTime == 1.5
    assert pfa.Krg1 == 50.
    assert pfa.Krg2 == pytest.approx(60.25)
    assert pfa.FPN.get_array() == pytest.approx([0., 0., 1.])


def test_polar_angle_reference(caplog):
    pfa = PFAType(PolarAngRefTime=0., PolarAngPoly=[0.1, 0.01])
    assert not pfa._check_polar_ang_ref()
    assert 'PFAType: The PolarAngPoly evaluated at PolarAngRefTime yields 0.1, which should be 0' in caplog.text

    pfa.PolarAngPoly = [0., 0.01]
    assert pfa._check_polar_ang_ref()


def test_st_deskew_applied():
    assert not PFAType().st_deskew_applied
    assert not PFAType(STDeskew=STDeskewType(Applied=False)).st_deskew_applied
    assert PFAType(STDeskew=STDeskewType(Applied=True)).st_deskew_applied
