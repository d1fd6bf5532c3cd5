import random

from domain.models import Coordinates, Place
from services.candidate_filter import dedupe_by_name, filter_open, process_candidates

LOC = Coordinates(latitude=0.0, longitude=0.0)


def _place(pid: str, name: str, is_open=None) -> Place:
    return Place(id=pid, name=name, uri=f"https://example.com/{pid}", location=LOC, is_open=is_open)


def _sample():
    return [
        _place("1", "A", True),
        _place("2", "B", False),
        _place("3", "C", None),
        _place("4", "A", False),
        _place("5", "D", True),
        _place("6", "C", True),
        _place("7", "E", False),
    ]


def test_filter_open_keeps_unknown():
    kept = filter_open(_sample())
    assert [p.id for p in kept] == ["1", "3", "5", "6"]


def test_dedupe_keeps_first_occurrence_in_order():
    unique = dedupe_by_name(_sample())
    assert [p.id for p in unique] == ["1", "2", "3", "5", "7"]


def test_dedupe_is_idempotent():
    once = dedupe_by_name(_sample())
    assert dedupe_by_name(once) == once


def test_only_open_output_is_subset_of_unfiltered_output():
    for seed in range(20):
        places = _sample()
        random.Random(seed).shuffle(places)
        open_names = {p.name for p in process_candidates(places, True, 50, random.Random(seed))}
        all_names = {p.name for p in process_candidates(places, False, 50, random.Random(seed))}
        assert open_names <= all_names


def test_only_open_drops_closed_duplicate_before_dedupe():
    # "A" closed copy first, open copy later: open-only keeps the open one
    places = [_place("1", "A", False), _place("2", "A", True)]
    result = process_candidates(places, True, 50, random.Random(0))
    assert [p.id for p in result] == ["2"]


def test_output_never_exceeds_cap():
    places = [_place(str(i), f"Place {i}") for i in range(120)]
    assert len(process_candidates(places, False, 50, random.Random(1))) == 50
    assert len(process_candidates(places[:3], False, 50, random.Random(1))) == 3
    assert process_candidates(places, False, 0, random.Random(1)) == []


def test_shuffle_is_driven_by_rng():
    places = [_place(str(i), f"Place {i}") for i in range(30)]
    first = process_candidates(places, False, 50, random.Random(7))
    again = process_candidates(places, False, 50, random.Random(7))
    assert first == again
    assert sorted(p.id for p in first) == sorted(p.id for p in places)
    assert first != places


def test_empty_input_is_a_valid_outcome():
    assert process_candidates([], True, 50) == []
    assert process_candidates([_place("1", "X", False)], True, 50) == []
