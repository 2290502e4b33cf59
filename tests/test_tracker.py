from queuesurvey.core.types import Candidate, FlowVector, Phase
from queuesurvey.survey.cycle import CycleAccumulator
from queuesurvey.survey.tracker import TrackedVehicle, VehicleTracker


def cand(x, y, label="car"):
    return Candidate(x=float(x), y=float(y), w=40.0, h=20.0, class_label=label)


def make_tracker(**kw):
    return VehicleTracker(cycle=CycleAccumulator(), **kw)


def test_spawn_assigns_increasing_ids_and_provisional_speed():
    t = make_tracker()
    t.update([cand(100, 100), cand(300, 100)], Phase.GREEN)
    ids = [v.track_id for v in t.vehicles]
    assert ids == [1, 2]
    assert all(v.speed == 5.0 and v.frames_seen == 1 for v in t.vehicles)
    assert not any(v.has_joined_queue for v in t.vehicles)
    assert t.frame_idx == 1


def test_speed_smoothing_and_stop_detection():
    t = make_tracker()
    t.update([cand(100, 100)], Phase.RED)
    t.update([cand(100, 104)], Phase.RED)
    (v,) = t.vehicles
    assert v.speed == 0.5 * 5.0 + 0.5 * 4.0
    assert v.frames_seen == 2
    assert not v.is_stopped

    for _ in range(4):
        t.update([cand(100, 104)], Phase.RED)
    (v,) = t.vehicles
    assert v.speed < 0.8
    assert v.is_stopped
    assert v.track_id == 1


def test_greedy_match_prefers_first_track_on_tie():
    t = make_tracker()
    t.update([cand(100, 100), cand(140, 100)], Phase.RED)

    t.update([cand(120, 100)], Phase.RED)
    by_id = {v.track_id: v for v in t.vehicles}
    assert by_id[1].position == (120.0, 100.0)
    assert by_id[1].missing_frames == 0
    assert by_id[2].position == (140.0, 100.0)
    assert by_id[2].missing_frames == 1


def test_track_matches_at_most_one_candidate():
    t = make_tracker()
    t.update([cand(100, 100)], Phase.RED)
    t.update([cand(101, 100), cand(102, 100)], Phase.RED)
    assert sorted(v.track_id for v in t.vehicles) == [1, 2]
    by_id = {v.track_id: v for v in t.vehicles}
    assert by_id[1].position == (101.0, 100.0)
    assert by_id[2].frames_seen == 1


def test_gating_radius_is_strict():
    t = make_tracker()
    t.update([cand(100, 100)], Phase.RED)
    t.update([cand(160, 100)], Phase.RED)
    assert sorted(v.track_id for v in t.vehicles) == [1, 2]


def test_empty_frame_only_increments_missing_frames():
    t = make_tracker()
    t.update([cand(100, 100), cand(400, 200)], Phase.GREEN)
    before = t.vehicles

    t.update([], Phase.GREEN)
    after = t.vehicles

    assert [v.track_id for v in after] == [v.track_id for v in before]
    for a, b in zip(before, after):
        assert a.position == b.position
        assert b.missing_frames == a.missing_frames + 1
        assert b.speed == a.speed
        assert b.frames_seen == a.frames_seen


def test_update_builds_new_generation():
    t = make_tracker()
    t.update([cand(100, 100)], Phase.GREEN)
    first = t.vehicles
    t.update([cand(102, 100)], Phase.GREEN)
    assert first[0].position == (100.0, 100.0)
    assert t.vehicles is not first


def test_ids_never_reused_after_expiry():
    t = make_tracker(max_missing_frames=2)
    t.update([cand(100, 100)], Phase.RED)
    for _ in range(3):
        t.update([], Phase.RED)
    assert t.vehicles == ()

    t.update([cand(100, 100)], Phase.RED)
    assert [v.track_id for v in t.vehicles] == [2]
    assert t.next_id == 3


def test_ghost_persists_until_limit_then_departure_logged():
    t = make_tracker()
    y = 100
    for _ in range(6):
        t.update([cand(500, y)], Phase.GREEN)
        y += 5
    (v,) = t.vehicles
    assert v.frames_seen == 6
    assert not v.is_stopped

    for _ in range(15):
        t.update([], Phase.GREEN)
    (ghost,) = t.vehicles
    assert ghost.missing_frames == 15
    assert t.cycle.exits.frames == []

    t.update([], Phase.GREEN)
    assert t.vehicles == ()
    assert t.cycle.exits.frames == [22]


def test_short_lived_track_is_not_a_departure():
    t = make_tracker()
    y = 100
    for _ in range(5):
        t.update([cand(500, y)], Phase.GREEN)
        y += 5
    for _ in range(16):
        t.update([], Phase.GREEN)
    assert t.vehicles == ()
    assert t.cycle.exits.frames == []


def test_no_departures_during_red():
    t = make_tracker()
    y = 100
    for _ in range(8):
        t.update([cand(500, y)], Phase.RED)
        y += 5
    for _ in range(16):
        t.update([], Phase.RED)
    assert t.cycle.exits.frames == []


def test_queue_join_counts_once_during_green():
    t = make_tracker()
    for _ in range(10):
        t.update([cand(200, 200)], Phase.GREEN)
    (v,) = t.vehicles
    assert v.has_joined_queue
    assert t.cycle.arrivals == 1


def test_no_queue_join_during_red():
    t = make_tracker()
    for _ in range(10):
        t.update([cand(200, 200)], Phase.RED)
    (v,) = t.vehicles
    assert not v.has_joined_queue
    assert t.cycle.arrivals == 0


def test_wrong_way_against_flow():
    flow = FlowVector(start=(0.0, 0.0), end=(0.0, 10.0))
    t = make_tracker(flow=flow)
    y = 400
    for _ in range(3):
        t.update([cand(300, y)], Phase.GREEN)
        y -= 3
    (v,) = t.vehicles
    assert v.speed > 1.5
    assert v.wrong_way
    assert t.valid() == ()


def test_with_flow_is_not_wrong_way():
    flow = FlowVector(start=(0.0, 0.0), end=(0.0, 10.0))
    t = make_tracker(flow=flow)
    y = 400
    for _ in range(3):
        t.update([cand(300, y)], Phase.GREEN)
        y += 3
    (v,) = t.vehicles
    assert not v.wrong_way


def test_wrong_way_kept_below_speed_gate_and_never_joins_queue():
    flow = FlowVector(start=(0.0, 0.0), end=(0.0, 10.0))
    t = make_tracker(flow=flow)
    t.update([cand(300, 400)], Phase.GREEN)
    t.update([cand(300, 397)], Phase.GREEN)
    assert t.vehicles[0].wrong_way

    for _ in range(10):
        t.update([cand(300, 397)], Phase.GREEN)
    (v,) = t.vehicles
    assert v.speed < 1.5
    assert v.wrong_way
    assert not v.has_joined_queue
    assert t.cycle.arrivals == 0


def test_zero_displacement_keeps_previous_direction():
    flow = FlowVector(start=(0.0, 0.0), end=(0.0, 10.0))
    t = make_tracker(flow=flow)
    t.vehicles = (TrackedVehicle(track_id=7, x=50.0, y=50.0, w=10.0, h=10.0, speed=5.0, wrong_way=True),)

    t.update([cand(50, 50)], Phase.RED)
    (v,) = t.vehicles
    assert v.speed == 2.5
    assert v.wrong_way


def test_reset_queue_membership_only_touches_valid_tracks():
    t = make_tracker()
    t.vehicles = (
        TrackedVehicle(track_id=1, x=0, y=0, w=1, h=1, speed=0.2, is_stopped=True),
        TrackedVehicle(track_id=2, x=0, y=0, w=1, h=1, speed=6.0, has_joined_queue=True),
        TrackedVehicle(track_id=3, x=0, y=0, w=1, h=1, speed=0.1, wrong_way=True, has_joined_queue=True),
    )
    joined = t.reset_queue_membership(lambda v: v.is_stopped)
    assert joined == 1
    flags = {v.track_id: v.has_joined_queue for v in t.vehicles}
    assert flags == {1: True, 2: False, 3: True}
