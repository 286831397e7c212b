import numpy as np
import pytest

from varprot.interval import Interval


class TestInit:
    def test_end_before_start(self):
        with pytest.raises(AttributeError):
            Interval(4, 3)

    def test_single_position(self):
        itvl = Interval('5')
        assert (itvl.start, itvl.end) == (5, 5)
        assert len(itvl) == 1


class TestAccess:
    def test_getitem(self):
        itvl = Interval(3, 9)
        assert (itvl[0], itvl[1]) == (3, 9)
        assert (itvl[-2], itvl[-1]) == (3, 9)

    def test_getitem_out_of_range(self):
        with pytest.raises(IndexError):
            Interval(3, 9)[2]
        with pytest.raises(IndexError):
            Interval(3, 9)['start']

    def test_length(self):
        assert Interval(11, 20).length() == 10
        assert len(Interval(11, 20)) == 10


class TestCompare:
    def test_eq(self):
        assert Interval(1, 2) == Interval(1, 2)
        assert Interval(1, 2) == (1, 2)
        assert Interval(1, 2) != Interval(1, 3)
        assert Interval(1, 2) != None  # noqa: E711
        assert Interval(1, 2) != 1

    def test_ordering(self):
        assert Interval(1, 10) < Interval(2, 3)
        assert Interval(1, 3) < Interval(1, 10)
        assert Interval(2, 3) > Interval(1, 10)
        assert sorted([Interval(5, 6), Interval(1, 9), Interval(1, 2)]) == [(1, 2), (1, 9), (5, 6)]

    def test_hash(self):
        assert len({Interval(1, 2), Interval(1, 2), Interval(1, 3)}) == 2


class TestContains:
    def test_position(self):
        itvl = Interval(1, 7)
        assert 1 in itvl
        assert 7 in itvl
        assert 0 not in itvl
        assert 8 not in itvl

    def test_numpy_position(self):
        assert np.int64(4) in Interval(1, 7)

    def test_interval(self):
        assert Interval(1, 2) in Interval(1, 7)
        assert (3, 7) in Interval(1, 7)
        assert Interval(1, 7) not in Interval(1, 2)
        assert Interval(0, 3) not in Interval(1, 7)


class TestOverlaps:
    def test_adjacent(self):
        assert not Interval.overlaps(Interval(1, 4), Interval(5, 7))
        assert not Interval.overlaps((5, 7), (1, 4))

    def test_shared_end(self):
        assert Interval.overlaps((1, 10), (10, 11))
        assert Interval.overlaps((10, 11), (1, 10))

    def test_nested(self):
        assert Interval.overlaps(Interval(1, 10), Interval(4, 5))
        assert Interval.overlaps(Interval(4, 5), Interval(1, 10))
