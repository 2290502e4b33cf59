from queuesurvey.survey.geometry import (
    box_center,
    cosine_similarity,
    ground_point,
    point_in_polygon,
    scale_bbox,
)

SQUARE = [(0, 0), (10, 0), (10, 10), (0, 10)]


def test_point_in_square():
    assert point_in_polygon((5, 5), SQUARE)
    assert not point_in_polygon((15, 5), SQUARE)
    assert not point_in_polygon((5, -1), SQUARE)


def test_point_in_concave_polygon():
    # U shape open at the top: the notch between the arms is outside.
    u_shape = [(0, 0), (10, 0), (10, 10), (7, 10), (7, 3), (3, 3), (3, 10), (0, 10)]
    assert point_in_polygon((1, 8), u_shape)
    assert point_in_polygon((9, 8), u_shape)
    assert not point_in_polygon((5, 8), u_shape)
    assert point_in_polygon((5, 1), u_shape)


def test_degenerate_polygon_admits_nothing():
    assert not point_in_polygon((0, 0), [])
    assert not point_in_polygon((5, 0), [(0, 0), (10, 0)])


def test_ground_point_is_near_bottom_of_box():
    assert box_center((0, 0, 10, 20)) == (5.0, 10.0)
    assert ground_point((0, 0, 10, 20)) == (5.0, 18.0)


def test_scale_bbox():
    assert scale_bbox((10, 20, 30, 40), (2.0, 0.5)) == (20.0, 10.0, 60.0, 20.0)


def test_cosine_similarity():
    assert cosine_similarity(1, 0, 5, 0) == 1.0
    assert cosine_similarity(0, -3, 0, 10) == -1.0
    assert abs(cosine_similarity(1, 0, 0, 1)) < 1e-12


def test_cosine_similarity_zero_vector_has_no_direction():
    assert cosine_similarity(0, 0, 1, 1) is None
    assert cosine_similarity(1, 1, 0, 0) is None
