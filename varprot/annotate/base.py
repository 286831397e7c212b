from copy import copy
import re

from intervaltree import IntervalTree

from ..constants import STRAND
from ..error import IntervalForestError, NotSpecifiedError
from ..interval import Interval


class ReferenceName(str):
    """
    Class for reference sequence names. Ensures that hg19/hg38 chromosome names match and that the
    mitochondrial aliases (M, MT, chrM) are treated as the same reference

    Example:
        >>> ReferenceName('chr1') == ReferenceName('1')
        True
        >>> ReferenceName('chrM') == 'MT'
        True
    """
    @staticmethod
    def normalize(name):
        name = re.sub('^chr', '', str(name), flags=re.IGNORECASE).upper()
        if name == 'M':
            return 'MT'
        return name

    def __eq__(self, other):
        if other is None:
            return False
        return ReferenceName.normalize(self) == ReferenceName.normalize(other)

    def __ne__(self, other):
        return not self.__eq__(other)

    def __hash__(self):
        return hash(ReferenceName.normalize(self))

    def __lt__(self, other):
        return ReferenceName.normalize(self) < ReferenceName.normalize(other)

    def __gt__(self, other):
        return ReferenceName.normalize(self) > ReferenceName.normalize(other)

    def __ge__(self, other):
        return self == other or self > other

    def __le__(self, other):
        return self == other or self < other


class BioInterval:

    def __init__(self, reference_object, start, end=None, name=None, seq=None, data=None, strand=None):
        """
        Args:
            reference_object: the object this interval is on
            start (int) start of the interval (inclusive)
            end (int): end of the interval (inclusive)
            name: optional
            seq (str): the seq relating to this interval (wrt the forward strand)

        Example:
            >>> b = BioInterval('1', 12572784, 12578898, 'q22.2')
            >>> b[0]
            12572784
            >>> b[1]
            12578898
        """
        self.reference_object = reference_object
        self.name = name
        self.position = Interval(start, end)
        self.seq = seq if not seq else str(seq).upper()
        self.data = {}
        self.data.update({} if data is None else data)
        self.strand = strand
        self.variants = []

    @property
    def start(self):
        """*int*: the start position"""
        return self.position.start

    @property
    def end(self):
        """*int*: the end position"""
        return self.position.end

    def __getitem__(self, index):
        return Interval.__getitem__(self, index)

    def __len__(self):
        """
        Example:
            >>> b = BioInterval('1', 12572784, 12578898, 'q22.2')
            >>> len(b)
            6115
        """
        return self.position.length()

    def key(self):
        """:class:`tuple`: a tuple representing the items expected to be unique. for hashing and comparing"""
        return (self.__class__.__name__, self.reference_object, self.position, self.name)

    def __eq__(self, other):
        if not hasattr(other, 'key'):
            return False
        return self.key() == other.key()

    def __lt__(self, other):
        return self.position < other.position

    def __hash__(self):
        return hash(self.key())

    def lineage(self):
        """
        yields this interval then each reference object above it, stopping at the first object without a parent
        or at a cycle
        """
        seen = set()
        node = self
        while node is not None and id(node) not in seen:
            yield node
            seen.add(id(node))
            node = getattr(node, 'reference_object', None)

    def get_strand(self):
        """
        Returns:
            STRAND: the strand set on this interval or, failing that, the closest reference object with one

        Raises:
            AttributeError: no interval in the lineage has a strand
        """
        for node in self.lineage():
            if getattr(node, 'strand', None) is not None:
                return node.strand
        raise AttributeError('strand has not been defined', self)

    @property
    def is_reverse(self):
        """True if the interval is on the reverse/negative strand.

        Raises:
            NotSpecifiedError: if the strand is not specified
        """
        strand = self.get_strand()
        if strand == STRAND.NEG:
            return True
        elif strand == STRAND.POS:
            return False
        raise NotSpecifiedError('strand has not been defined', self)

    def get_chr(self):
        """
        Returns:
            ReferenceName: the chromosome of the closest interval in the lineage which names one. A plain string
            reference object is taken as the chromosome name

        Raises:
            AttributeError: no interval in the lineage has a chromosome
        """
        for node in self.lineage():
            if isinstance(node, str):
                return ReferenceName(node)
            if getattr(node, 'chr', None) is not None:
                return node.chr
        raise AttributeError('chr has not been defined', self)

    def intersects(self, other):
        """
        True if the two intervals share at least one base on the same chromosome
        """
        try:
            if self.get_chr() != other.get_chr():
                return False
        except AttributeError:
            pass
        return Interval.overlaps(self, other)

    def includes(self, other):
        """
        True if the other interval (or position) lies entirely within the current interval
        """
        try:
            if self.get_chr() != other.get_chr():
                return False
        except AttributeError:
            pass
        return other in self.position

    def applied_span(self, variant):
        """
        computes where this interval lies, and what sequence it holds, once the reference bases of a variant
        have been replaced by its alternate allele. The alleles are left aligned: the i-th alternate base replaces the
        i-th reference base and any extra alternate bases belong to the interval holding the last reference base

        Args:
            variant (Variant): the variant to apply

        Returns:
            tuple: the new start, end, and seq (None if this interval has no sequence). Returns None if the
            interval is removed entirely
        """
        alt = variant.alt
        net = len(alt) - len(variant.ref)
        if variant.end < self.start:
            return self.start + net, self.end + net, self.seq
        elif variant.start > self.end:
            return self.start, self.end, self.seq

        overlap_start = max(variant.start, self.start)
        overlap_end = min(variant.end, self.end)
        ref_before = overlap_start - variant.start
        if overlap_end == variant.end:
            alt_piece = alt[ref_before:]
        else:
            alt_piece = alt[ref_before:overlap_end - variant.start + 1]

        new_length = len(self) - (overlap_end - overlap_start + 1) + len(alt_piece)
        if new_length <= 0:
            return None
        new_start = self.start - ref_before + min(ref_before, len(alt))
        seq = self.seq
        if seq:
            seq = seq[:overlap_start - self.start] + alt_piece + seq[overlap_end - self.start + 1:]
        return new_start, new_start + new_length - 1, seq

    def apply_variant(self, variant):
        """
        returns a new interval with the alternate allele of the variant applied. The current interval is not modified

        Returns:
            BioInterval: the new interval or None if the variant removes it
        """
        span = self.applied_span(variant)
        if span is None:
            return None
        start, end, seq = span
        result = copy(self)
        result.position = Interval(start, end)
        result.seq = seq
        result.data = dict(self.data)
        result.variants = self.variants[:]
        if self.intersects(variant):
            result.variants.append(variant)
        return result

    def __repr__(self):
        refname = getattr(self.reference_object, 'name', self.reference_object)
        return '{}({}:{}-{}, name={})'.format(self.__class__.__name__, refname, self.start, self.end, self.name)


class IntervalForest:
    """
    collection of interval trees, one per chromosome, used to find every interval containing a position.
    All intervals must be added before the forest is built and the forest must be built before it is queried

    Example:
        >>> forest = IntervalForest()
        >>> forest.add(BioInterval('1', 10, 20))
        >>> forest.build()
        >>> forest.stab('chr1', 15)
        [BioInterval(1:10-20, name=None)]
    """

    def __init__(self):
        self.pending = {}
        self.forest = {}
        self.built = False

    def add(self, interval):
        """
        Args:
            interval (BioInterval): interval to be indexed. Must be resolvable to a chromosome

        Raises:
            IntervalForestError: the forest has already been built
        """
        if self.built:
            raise IntervalForestError('cannot add intervals to a forest which has already been built', interval)
        self.pending.setdefault(ReferenceName(interval.get_chr()), []).append(interval)

    def build(self):
        for chrom, intervals in self.pending.items():
            self.forest[chrom] = IntervalTree.from_tuples((i.start, i.end + 1, i) for i in intervals)
        self.pending = {}
        self.built = True

    def _tree(self, chrom):
        if not self.built:
            raise IntervalForestError('interval forest must be built before it can be queried')
        return self.forest.get(ReferenceName(chrom))

    def stab(self, chrom, position):
        """
        Args:
            chrom (str): the chromosome name
            position (int): 1-based genomic position

        Returns:
            :class:`list` of :class:`BioInterval`: every interval on the chromosome containing the position

        Raises:
            IntervalForestError: the forest has not been built
        """
        tree = self._tree(chrom)
        if tree is None:
            return []
        return [itvl.data for itvl in tree.at(position)]

    def overlapping(self, chrom, start, end):
        """
        Args:
            chrom (str): the chromosome name
            start (int): 1-based first position of the range
            end (int): 1-based last position of the range (inclusive)

        Returns:
            :class:`list` of :class:`BioInterval`: every interval on the chromosome sharing at least one position
            with the range

        Raises:
            IntervalForestError: the forest has not been built
        """
        tree = self._tree(chrom)
        if tree is None:
            return []
        return [itvl.data for itvl in tree.overlap(start, end + 1)]

    def chromosomes(self):
        return sorted(self.forest.keys())

    def __len__(self):
        return sum([len(tree) for tree in self.forest.values()]) + sum([len(i) for i in self.pending.values()])
