from __future__ import annotations

import pytest

from app.crs.engine import ProjContext
from app.crs.equivalence import is_equivalent, is_equivalent_to, is_equivalent_to_relaxed
from app.crs.errors import CellError, ResolutionFailed


def test_same_crs_is_equivalent():
    assert is_equivalent_to([[4326]], [[4326]]) is True


def test_different_crs_is_not_equivalent():
    assert is_equivalent_to([[4326]], [[3857]]) is False
    assert is_equivalent_to_relaxed([[4326]], [[3857]]) is False


def test_spec_forms_resolve_to_equivalent_crs():
    assert is_equivalent_to([["EPSG", 4326]], [[4326]]) is True
    assert is_equivalent_to([["4326"]], [[4326.0]]) is True


def test_axis_order_only_difference():
    # OGC:CRS84 is WGS 84 with longitude first
    assert is_equivalent_to([[4326]], [["OGC:CRS84"]]) is False
    assert is_equivalent_to_relaxed([[4326]], [["OGC:CRS84"]]) is True


def test_unresolvable_side_is_value_error():
    res = is_equivalent_to([[4326]], [[999999]])
    assert isinstance(res, CellError) and res.code == CellError.VALUE
    res = is_equivalent_to_relaxed([[True]], [[4326]])
    assert isinstance(res, CellError) and res.code == CellError.VALUE


def test_resolution_failure_raises_before_comparing():
    with pytest.raises(ResolutionFailed):
        is_equivalent([[4326]], [[999999]], relaxed_axis_order=False)


def test_null_engine_handle_is_value_error(monkeypatch):
    monkeypatch.setattr(ProjContext, "create_from_epsg", lambda self, code: None)
    res = is_equivalent_to([[4326]], [[3857]])
    assert isinstance(res, CellError) and res.code == CellError.VALUE
    assert "no CRS" in res.detail
