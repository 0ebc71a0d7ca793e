from decimal import Decimal

from courserep.staff.services.geofence import check_radius, distance_meters


def test_same_point_is_zero_metres():
    assert distance_meters((6.5, 3.3), (6.5, 3.3)) == 0


def test_classroom_example_is_within_fifty_metres():
    distance, inside = check_radius((6.5, 3.3), (6.5002, 3.3001))
    assert 20 <= distance <= 30
    assert inside


def test_distance_is_rounded_to_whole_metres():
    distance = distance_meters((6.5, 3.3), (6.5002, 3.3001))
    assert isinstance(distance, int)


def test_one_degree_of_latitude_is_about_111_km():
    distance = distance_meters((0, 0), (1, 0))
    assert 111_000 < distance < 111_400


def test_radius_boundary():
    # 0.0004 deg of longitude at the equator is ~45 m, 0.0005 deg ~56 m
    assert check_radius((0, 0), (0, 0.0004), 50) == (45, True)
    assert check_radius((0, 0), (0, 0.0005), 50) == (56, False)


def test_exactly_on_the_radius_is_inside():
    distance = distance_meters((0, 0), (0, 0.0004))

    assert check_radius((0, 0), (0, 0.0004), distance) == (distance, True)


def test_accepts_decimal_coordinates():
    distance = distance_meters((Decimal("6.50000000"), Decimal("3.30000000")), (6.5002, 3.3001))
    assert distance == distance_meters((6.5, 3.3), (6.5002, 3.3001))
