from queuesurvey.survey.cycle import NO_GAP, CycleAccumulator, ExitTimeLog, SurveyRow


def test_average_gap_in_seconds():
    log = ExitTimeLog()
    for f in (40, 10, 30):
        log.record(f)
    # sorted 10, 30, 40 -> gaps 20, 10 -> 15 frames at 10 fps
    assert log.average_gap(10.0) == 1.5


def test_single_exit_has_no_gap():
    log = ExitTimeLog()
    log.record(12)
    assert log.average_gap(10.0) is None
    assert ExitTimeLog().average_gap(10.0) is None


def test_zero_gap_is_not_unavailable():
    log = ExitTimeLog(frames=[7, 7])
    assert log.average_gap(10.0) == 0.0


def test_close_emits_row_and_carries_overflow():
    acc = CycleAccumulator(ni=2)
    acc.open_green(4)
    acc.record_arrival()
    acc.record_arrival()
    acc.record_exit(100)
    acc.record_exit(120)
    assert acc.nb == 6

    row = acc.close(3, timestamp=65.0, frame_rate=10.0)
    assert (row.cycle_number, row.ni, row.nr, row.ng, row.no) == (1, 2, 4, 2, 3)
    assert row.nb == row.nr + row.ng == 6
    assert row.avg_gap == 2.0

    assert acc.ni == 3
    assert (acc.nr, acc.arrivals, acc.no) == (0, 0, 0)
    assert len(acc.exits) == 0

    row2 = acc.close(0, timestamp=130.0, frame_rate=10.0)
    assert row2.cycle_number == 2
    assert row2.ni == row.no


def test_open_green_resets_arrivals_and_exits():
    acc = CycleAccumulator()
    acc.record_arrival()
    acc.record_exit(5)
    acc.open_green(1)
    assert (acc.nr, acc.arrivals, len(acc.exits)) == (1, 0, 0)


def test_row_serialization():
    row = SurveyRow(cycle_number=3, timestamp=3725.4, ni=1, nr=5, ng=2, no=0, avg_gap=None, start_hour=7)
    d = row.to_dict()
    assert d["Nb"] == 7
    assert d["avgGap"] == NO_GAP
    assert d["time"] == "08:02:05"

    row = SurveyRow(cycle_number=1, timestamp=0.0, ni=0, nr=0, ng=0, no=0, avg_gap=2.04)
    assert row.to_dict()["avgGap"] == 2.0
