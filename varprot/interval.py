import numbers


class Interval:
    """
    closed integer interval of 1-based genomic positions. Both the start and the end belong to the interval

    Example:
        >>> Interval(10, 12).length()
        3
        >>> Interval(7)
        Interval(7, 7)
    """

    def __init__(self, start, end=None):
        """
        Args:
            start (int): the first position
            end (int): the last position, defaults to the start

        Raises:
            AttributeError: the start is after the end
        """
        self.start = int(start)
        self.end = self.start if end is None else int(end)
        if self.end < self.start:
            raise AttributeError('interval cannot end before it starts', self.start, self.end)

    def __getitem__(self, index):
        if index in (0, -2):
            return self.start
        elif index in (1, -1):
            return self.end
        raise IndexError('intervals only have a start (0) and an end (1)', index)

    @classmethod
    def overlaps(cls, first, other):
        """
        True if the two intervals (or start/end pairs) share at least one position

        Example:
            >>> Interval.overlaps(Interval(1, 4), Interval(5, 7))
            False
            >>> Interval.overlaps((1, 10), (10, 11))
            True
        """
        return first[0] <= other[1] and other[0] <= first[1]

    def length(self):
        return self.end - self.start + 1

    def __len__(self):
        return self.length()

    def __contains__(self, other):
        """
        a position is contained if it lies between the start and end, an interval if it lies entirely inside

        Example:
            >>> 5 in Interval(1, 10)
            True
            >>> Interval(4, 12) in Interval(1, 10)
            False
        """
        if isinstance(other, numbers.Integral):
            return self.start <= other <= self.end
        return self.start <= other[0] and other[1] <= self.end

    def __eq__(self, other):
        try:
            return (self.start, self.end) == (other[0], other[1])
        except (TypeError, IndexError, KeyError):
            return False

    def __lt__(self, other):
        return (self.start, self.end) < (other[0], other[1])

    def __hash__(self):
        return hash((self.start, self.end))

    def __repr__(self):
        return '{}({}, {})'.format(self.__class__.__name__, self.start, self.end)
