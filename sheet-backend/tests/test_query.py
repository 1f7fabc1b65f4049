from __future__ import annotations

import json

import pytest

from app.crs import query
from app.crs.errors import INDEX_OUT_OF_RANGE, NOT_FOUND, CellError

PROJ_LONGLAT = "+proj=longlat +datum=WGS84 +no_defs"


def test_crs_names_and_types():
    assert query.name([[4326]]) == "WGS 84"
    assert query.name([["EPSG", 28992]]) == "Amersfoort / RD New"
    assert query.crs_type([[4326]]) == "Geographic 2D CRS"
    assert query.crs_type([[3857]]) == "Projected CRS"
    assert query.scope([[4326]]) != NOT_FOUND


def test_deprecated_flag():
    assert query.is_deprecated([[3785]]) is True
    assert query.is_deprecated([[3857]]) is False


def test_axes_are_read_normalized():
    assert query.axis_count([[4326]]) == 2
    assert query.axis_abbreviation([[4326]], 0) == "Lon"
    assert query.axis_direction([[4326]], 0) == "east"
    assert query.axis_direction([[4326]], 1) == "north"
    assert query.axis_abbreviation([[4326]]) == "Lon"  # index defaults to 0


def test_axis_units():
    assert query.axis_unit_name([[28992]], 0) == "metre"
    assert query.axis_unit_auth_name([[28992]], 0) == "EPSG"
    assert query.axis_unit_code([[28992]], 1) == "9001"
    assert query.axis_unit_conversion_factor([[28992]], 0) == pytest.approx(1.0)


@pytest.mark.parametrize("index", [-1, 2, 99, "5"])
def test_axis_index_out_of_range(index):
    for fn in (
        query.axis_abbreviation,
        query.axis_direction,
        query.axis_name,
        query.axis_unit_name,
        query.axis_unit_conversion_factor,
        query.coordinate_system_axis_name,
    ):
        assert fn([[4326]], index) == INDEX_OUT_OF_RANGE


def test_compound_crs_counts_all_axes():
    assert query.axis_count([[7415]]) == 3


def test_coordinate_system():
    assert query.coordinate_system_axis_count([[28992]]) == 2
    assert query.coordinate_system_type([[28992]]) == "Cartesian"
    assert query.coordinate_system_type([[4326]]) == "ellipsoidal"
    assert query.coordinate_system_kind([[28992]]) == "CoordinateSystem"
    assert query.coordinate_system_axis_direction([[4326]], 0) == "east"
    assert isinstance(query.coordinate_system_name([[28992]]), str)


def test_datum_and_ellipsoid():
    assert query.datum_name([[28992]]) == "Amersfoort"
    assert query.datum_type([[28992]]) == "GeodeticReferenceFrame"
    assert query.ellipsoid_name([[28992]]) == "Bessel 1841"
    assert query.ellipsoid_semi_major_metre([[28992]]) == pytest.approx(6377397.155)
    assert query.ellipsoid_inverse_flattening([[28992]]) == pytest.approx(299.1528128)
    assert query.ellipsoid_semi_minor_metre([[4326]]) == pytest.approx(6356752.314, abs=1e-3)
    assert query.ellipsoid_is_semi_minor_computed([[4326]]) is True


def test_prime_meridian():
    assert query.prime_meridian_name([[4326]]) == "Greenwich"
    assert query.prime_meridian_longitude([[4326]]) == 0
    assert query.prime_meridian_unit_name([[4326]]) == "degree"
    assert query.prime_meridian_unit_conversion_factor([[4326]]) == pytest.approx(0.0174532925199433)


def test_identifiers():
    assert query.identifiers_count([[28992]]) == 1
    assert query.identifiers_authority([[28992]], 0) == "EPSG"
    assert query.identifiers_code([["EPSG", "28992"]], 0) == "28992"
    assert query.identifiers_code([[3857]]) == "3857"
    assert query.identifiers_code([[28992]], 1) == INDEX_OUT_OF_RANGE
    assert query.identifiers_count([[PROJ_LONGLAT]]) == 0
    assert query.identifiers_authority([[PROJ_LONGLAT]], 0) == INDEX_OUT_OF_RANGE


def test_reordered_crs_has_no_identifiers():
    # 4326 is latitude first; its longitude-first copy is not EPSG:4326
    assert query.identifiers_count([[4326]]) == 0
    assert query.identifiers_authority([[4326]], 0) == INDEX_OUT_OF_RANGE
    assert query.identifiers_code([["EPSG", 4326]], 0) == INDEX_OUT_OF_RANGE


def test_geodetic_crs():
    assert query.geodetic_crs_name([[28992]]) == "Amersfoort"
    assert query.geodetic_crs_type([[28992]]) == "Geographic 2D CRS"


def test_usage_area_geographic_bounds():
    assert query.usage_area_name([[28992]]).startswith("Netherlands")
    assert query.usage_area_west_longitude([[28992]]) == pytest.approx(3.2, abs=0.05)
    assert query.usage_area_north_latitude([[28992]]) == pytest.approx(53.7, abs=0.05)
    assert query.usage_area_south_latitude([[28992]]) < query.usage_area_north_latitude([[28992]])


def test_usage_area_in_crs_units():
    min_x = query.usage_area_min_x([[28992]])
    max_x = query.usage_area_max_x([[28992]])
    min_y = query.usage_area_min_y([[28992]])
    max_y = query.usage_area_max_y([[28992]])
    cx = query.usage_area_center_x([[28992]])
    cy = query.usage_area_center_y([[28992]])
    assert min_x < cx < max_x
    assert min_y < cy < max_y
    # RD New false origin keeps the Netherlands in positive metres
    assert 250_000 < max_y < 700_000
    assert query.usage_area_center_has_values([[28992]]) is True
    assert query.usage_area_center([[28992]]) == [[cx, cy]]


def test_usage_area_of_geographic_crs():
    assert query.usage_area_min_x([[4326]]) == pytest.approx(-180.0)
    assert query.usage_area_max_y([[4326]]) == pytest.approx(90.0)


def test_missing_usage_area():
    assert query.usage_area_name([[PROJ_LONGLAT]]) == NOT_FOUND
    assert query.usage_area_west_longitude([[PROJ_LONGLAT]]) == NOT_FOUND
    assert query.usage_area_min_x([[PROJ_LONGLAT]]) == NOT_FOUND
    for fn in (query.usage_area_center_x, query.usage_area_center_y):
        res = fn([[PROJ_LONGLAT]])
        assert isinstance(res, CellError) and res.code == CellError.VALUE
    assert query.usage_area_center_has_values([[PROJ_LONGLAT]]) is False
    res = query.usage_area_center([[PROJ_LONGLAT]])
    assert isinstance(res, CellError) and res.code == CellError.VALUE
    assert query.scope([[PROJ_LONGLAT]]) == NOT_FOUND


def test_text_renderings():
    wkt = query.as_wkt_string([[4326]])
    assert wkt.startswith("GEOGCRS")
    # normalized: longitude axis comes first
    assert wkt.lower().index("longitude") < wkt.lower().index("latitude")
    assert "+proj=longlat" in query.as_proj_string([[4326]])
    assert json.loads(query.as_json_string([[3857]]))["type"] == "ProjectedCRS"


@pytest.mark.parametrize("cells", [[[True]], [[None]], [[999999]], [[4326, 3857, 2583]], [["not a crs at all"]]])
def test_bad_input_becomes_value_error(cells):
    res = query.name(cells)
    assert isinstance(res, CellError)
    assert res.code == CellError.VALUE
    assert res.detail


def test_bad_index_is_value_error():
    res = query.axis_name([[4326]], "first")
    assert isinstance(res, CellError) and res.code == CellError.VALUE


def test_properties_keep_their_names():
    assert query.axis_unit_code.__name__ == "axis_unit_code"
    assert query.axis_unit_code.cell_function
    assert "unit" in query.axis_unit_code.__doc__
