#
# Copyright 2023 Valkyrie Systems Corporation
#
# Licensed under MIT License.  See LICENSE.
#
import logging

import numpy as np
import pytest

from sarproj.elements.base import ValidationReport, DiagnosticRecord, ParametersCollection
from sarproj.elements.blocks import XYZType
from sarproj.elements.Grid import DirParamType, WgtTypeType
from sarproj.elements.RgAzComp import RgAzCompType


def test_report_accumulates():
    report = ValidationReport()
    assert report.is_valid
    assert len(report) == 0

    report.add('warning', 'GridType', 'first')
    assert report.is_valid
    report.add('error', 'DirParamType', 'second')
    report.add('info', 'PFAType', 'third')
    assert not report.is_valid
    assert len(report) == 3
    assert report.messages() == ['first', 'second', 'third']
    assert report.messages('error') == ['second']
    assert [entry.source for entry in report.warnings] == ['GridType']
    assert [entry.severity for entry in report] == ['warning', 'error', 'info']


def test_report_severity():
    report = ValidationReport()
    with pytest.raises(ValueError, match="unexpected diagnostic severity"):
        report.add('fatal', 'GridType', 'message')
    assert len(report) == 0


def test_report_extend():
    first = ValidationReport()
    first.add('error', 'GridType', 'bad')
    second = ValidationReport(records=[DiagnosticRecord('warning', 'DirParamType', 'odd')])
    second.extend(first)
    assert second.messages() == ['odd', 'bad']
    assert not second.is_valid

    with pytest.raises(TypeError):
        second.extend(['not a record', ])

    # the records property is a copy
    records = second.records
    records.clear()
    assert len(second) == 2


def test_log_validity_records(caplog):
    """Validation messages go to the validation logger and any provided report"""
    report = ValidationReport()
    item = RgAzCompType()
    with caplog.at_level(logging.INFO, logger='validation'):
        item.log_validity_error('error message', report=report)
        item.log_validity_warning('warning message', report=report)
        item.log_validity_info('info message', report=report)
        item.log_validity_error('unreported message')

    assert 'RgAzCompType: error message' in caplog.text
    assert 'RgAzCompType: warning message' in caplog.text
    assert 'RgAzCompType: info message' in caplog.text
    assert 'RgAzCompType: unreported message' in caplog.text
    assert len(report) == 3
    assert report.records[0] == DiagnosticRecord('error', 'RgAzCompType', 'error message')
    assert report.records[1].severity == 'warning'
    assert report.records[2].severity == 'info'


def test_unexpected_construction_argument():
    with pytest.raises(ValueError, match="unexpected construction argument"):
        XYZType(X=1, Y=2, Z=3, W=4)


def test_basic_validity(caplog):
    item = RgAzCompType(AzSF=1e-4)
    assert not item.is_valid()
    assert 'RgAzCompType: Missing required attribute KazPoly' in caplog.text
    assert RgAzCompType(AzSF=1e-4, KazPoly=[0.1, 0.2]).is_valid()

    with pytest.raises(ValueError):
        XYZType(X=1, Y=2)


def test_copy_is_independent():
    item = DirParamType(SS=0.5, ImpRespBW=1.5, Sgn=-1, UVectECF=[0, 0, 2], DeltaKCOAPoly=[[0.1, ], ])
    duplicate = item.copy()
    assert duplicate is not item
    assert duplicate.to_dict() == item.to_dict()
    assert duplicate.UVectECF.get_array() == pytest.approx([0., 0., 1.])

    duplicate.DeltaKCOAPoly = [[0.2, ], ]
    assert item.DeltaKCOAPoly[0, 0] == pytest.approx(0.1)


def test_unit_vector_normalization(caplog):
    item = DirParamType(UVectECF=[3, 4, 0])
    assert item.get_unit_vector() == pytest.approx([0.6, 0.8, 0.])

    item.UVectECF = [0, 0, 0]
    assert item.UVectECF is None
    assert 'the norm of the input is 0' in caplog.text


def test_weight_array_minimum_length(caplog):
    item = DirParamType(WgtFunct=[])
    assert 'must have size at least 1' in caplog.text
    assert item.WgtFunct is not None
    assert not item.has_weights

    item.WgtFunct = np.ones((4, ))
    assert item.has_weights


def test_parameters_collection():
    params = ParametersCollection(collection={'COEFFICIENT': 0.6}, name='Parameters')
    assert params['COEFFICIENT'] == '0.6'
    assert len(params) == 1
    params['OTHER'] = 'value'
    assert params.get('OTHER') == 'value'
    assert params.get('MISSING', 'default') == 'default'
    with pytest.raises(ValueError):
        params['BAD'] = 1.0

    with pytest.raises(ValueError):
        ParametersCollection(collection=None, name=None)


def test_weight_type_parameters():
    wgt_type = WgtTypeType(WindowName='hamming', Parameters={'COEFFICIENT': '0.6'})
    assert wgt_type.window_name == 'HAMMING'
    assert wgt_type.get_parameter_value('COEFFICIENT') == '0.6'
    assert wgt_type.get_parameter_value(None) == '0.6'
    assert wgt_type.get_parameter_value('Junk', default='default') == 'default'
    assert wgt_type.get_float_parameter(0.54) == pytest.approx(0.6)

    unparseable = WgtTypeType(WindowName='KAISER', Parameters={'BETA': 'large'})
    assert unparseable.get_float_parameter(14.0) == 14.0
    assert WgtTypeType(WindowName='KAISER').get_float_parameter(14.0) == 14.0
