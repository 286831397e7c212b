from intervaltree import IntervalTree
import numpy as np

from .base import BioInterval, ReferenceName
from .constants import DEFAULTS
from ..constants import (
    CODON_SIZE, CODON_TABLE, ERROR_WARNING, STOP_AA, STRAND, reverse_complement, start_codons, translate
)
from ..error import InvalidFeatureModelError
from ..util import LOG


class Chromosome(BioInterval):
    """
    a reference sequence (template) which genes are defined on
    """

    def __init__(self, name, seq='', friendly_name=None, mitochondrial=None):
        """
        Args:
            name (str): the chromosome name, as given in the reference genome
            seq (str): the full sequence of the chromosome
            friendly_name (str): display name, defaults to the name
            mitochondrial (bool): True if the vertebrate mitochondrial codon table should be used for
                transcripts on this chromosome. By default this is determined from the name

        Example:
            >>> Chromosome('chrM', 'ACGT').mitochondrial
            True
        """
        name = ReferenceName(name)
        BioInterval.__init__(self, None, 1, max(1, len(seq)), name=name, seq=seq)
        self.friendly_name = friendly_name if friendly_name else str(name)
        if mitochondrial is None:
            mitochondrial = any([name == alias for alias in DEFAULTS.mitochondrial_names])
        self.mitochondrial = mitochondrial

    @property
    def chr(self):
        return self.name

    @property
    def codon_table(self):
        return CODON_TABLE.VERTEBRATE_MITOCHONDRIAL if self.mitochondrial else CODON_TABLE.STANDARD

    def __len__(self):
        return len(self.seq) if self.seq else 0

    def get_seq(self, start, end):
        """
        Returns:
            str: the forward strand sequence for the 1-based inclusive range
        """
        return self.seq[start - 1:end] if self.seq else ''

    def __str__(self):
        return str(self.name)

    def __eq__(self, other):
        return str(self) == str(other) or self.name == other

    def __hash__(self):
        return hash(self.name)


class IntergenicRegion(BioInterval):

    def __init__(self, chr, start, end, strand):
        """
        Args:
            chr (str): the reference object/chromosome for this region
            start (int): the start of the IntergenicRegion
            end (int): the end of the IntergenicRegion
            strand (STRAND): the strand the region is defined on

        Example:
            >>> IntergenicRegion('1', 1, 100, '+')
        """
        BioInterval.__init__(self, ReferenceName(chr), start, end)
        self.strand = STRAND.enforce(strand)

    def key(self):
        """see :func:`varprot.annotate.base.BioInterval.key`"""
        return BioInterval.key(self), self.strand

    @property
    def chr(self):
        """returns the name of the chromosome that this region resides on"""
        return self.reference_object

    def __repr__(self):
        return 'IntergenicRegion({}:{}_{}{})'.format(self.chr, self.start, self.end, self.strand)


class Gene(BioInterval):
    """
    """

    def __init__(self, chromosome, start, end, name=None, strand=STRAND.NS, attributes=None):
        """
        Args:
            chromosome (Chromosome or str): the chromosome. The sequence is only available if a Chromosome is given
            name (str): the gene name/id i.e. ENSG0001
            strand (STRAND): the genomic strand '+' or '-'
            attributes (dict): the free-text attributes from the gene model source

        Example:
            >>> Gene('X', 1, 1000, 'ENG0001', '+')
        """
        self.chromosome = chromosome if isinstance(chromosome, Chromosome) else None
        BioInterval.__init__(self, ReferenceName(str(chromosome)), start, end, name=name, data=attributes)
        self.strand = STRAND.enforce(strand)
        self.transcripts = []
        self.transcript_tree = None

    @property
    def chr(self):
        """returns the name of the chromosome that this gene resides on"""
        return self.reference_object

    @property
    def attributes(self):
        return self.data

    def key(self):
        """see :func:`varprot.annotate.base.BioInterval.key`"""
        return BioInterval.key(self), self.strand

    def build_transcript_tree(self):
        """
        index the transcripts of this gene for containment queries. Must be re-run if transcripts are added
        """
        self.transcript_tree = IntervalTree.from_tuples((t.start, t.end + 1, t) for t in self.transcripts)
        return self.transcript_tree

    def transcripts_at(self, pos):
        """
        Returns:
            :class:`list` of :class:`Transcript`: transcripts of this gene which contain the genomic position
        """
        if self.transcript_tree is None:
            self.build_transcript_tree()
        return [itvl.data for itvl in self.transcript_tree.at(pos)]


class Transcript(BioInterval):
    """
    a transcript of a gene, with its exons and coding segments. Derived regions (UTRs, introns, and the upstream
    and downstream flanking regions) are recomputed by :meth:`set_regions`

    Applying a variant to a transcript never modifies it, a new transcript is returned instead
    """

    def __init__(
        self, gene, start, end, name=None, version=None, protein_id=None, strand=None,
        up_down_length=None
    ):
        """
        Args:
            gene (Gene): the gene this transcript belongs to
            start (int): the genomic start of the transcript
            end (int): the genomic end of the transcript
            name (str): the transcript id i.e. ENST0001
            version (str): the transcript version
            protein_id (str): the id of the protein this transcript codes for
            strand (STRAND): the strand, defaults to the strand of the gene
            up_down_length (int): the length of the flanking regions
        """
        BioInterval.__init__(self, gene, start, end, name=name, strand=strand)
        self.version = version
        self.protein_id = protein_id
        self.up_down_length = DEFAULTS.up_down_length if up_down_length is None else up_down_length
        self.exons = []
        self.cds = []
        self.utrs = []
        self.introns = []
        self.upstream = None
        self.downstream = None
        self.variant_annotations = []
        self._reset_cache()

    def _reset_cache(self):
        self._coding_seq = None
        self._cds_start = None
        self._cds_end = None
        self._cds_to_genomic = None
        self._warnings = None

    @property
    def gene(self):
        return self.reference_object

    @property
    def chromosome(self):
        try:
            return self.gene.chromosome
        except AttributeError:
            return None

    @property
    def accession(self):
        """*str*: the protein id if given, otherwise the transcript id"""
        return self.protein_id if self.protein_id else self.name

    @property
    def codon_table(self):
        chrom = self.chromosome
        return chrom.codon_table if chrom is not None else CODON_TABLE.STANDARD

    def key(self):
        return BioInterval.key(self), self.version, self.protein_id, tuple(self.variant_annotations)

    @property
    def is_reverse(self):
        """
        True unless the transcript is on the forward strand. A transcript on an unknown strand is laid out the way a
        reverse strand transcript is
        """
        return self.get_strand() != STRAND.POS

    def is_protein_coding(self):
        return len(self.cds) > 0

    def exons_sorted_strand(self):
        """
        Returns:
            :class:`list` of :class:`Exon`: exons in transcription order, by start on the forward strand and by
            descending end on the reverse strand
        """
        if self.is_reverse:
            return sorted(self.exons, key=lambda x: x.end, reverse=True)
        return sorted(self.exons, key=lambda x: x.start)

    def add_exon(self, exon):
        exon.reference_object = self
        self.exons.append(exon)
        self._reset_cache()
        return exon

    def add_cds(self, cds):
        cds.reference_object = self
        self.cds.append(cds)
        self._reset_cache()
        return cds

    def set_regions(self):
        """
        (re)derive the introns, the UTRs, and the flanking regions of this transcript from its exons and coding segments
        """
        self.exons.sort(key=lambda x: x.start)
        self.cds.sort(key=lambda x: x.start)
        self.create_introns()
        self.create_utrs()
        self.create_up_down()
        self._reset_cache()

    def create_utrs(self):
        """
        create the UTR regions from the exonic bases outside the outermost coding segments. UTRs never include
        coding bases
        """
        self.utrs = []
        if not self.cds:
            return self.utrs
        coding_left = min([c.start for c in self.cds])
        coding_right = max([c.end for c in self.cds])
        left_type, right_type = (UTR3Prime, UTR5Prime) if self.is_reverse else (UTR5Prime, UTR3Prime)

        for exon in sorted(self.exons, key=lambda x: x.start):
            if exon.start < coding_left:
                self.utrs.append(left_type(exon, exon.start, min(exon.end, coding_left - 1)))
            if exon.end > coding_right:
                self.utrs.append(right_type(exon, max(exon.start, coding_right + 1), exon.end))
        return self.utrs

    def create_introns(self):
        self.introns = []
        exons = sorted(self.exons, key=lambda x: x.start)
        for previous, current in zip(exons, exons[1:]):
            if current.start - previous.end > 1:
                self.introns.append(Intron(self, previous.end + 1, current.start - 1))
        return self.introns

    def create_up_down(self):
        """
        create the flanking regions. The upstream region is always 5' of the transcript (before the start on the
        forward strand and after the end on the reverse strand). Regions are clipped to the chromosome
        """
        self.upstream = None
        self.downstream = None
        before = after = None
        if self.start > 1:
            before = (max(1, self.start - self.up_down_length), self.start - 1)
        chrom = self.chromosome
        chr_max = len(chrom) if chrom is not None and len(chrom) else self.end + self.up_down_length
        if self.end < chr_max:
            after = (self.end + 1, min(chr_max, self.end + self.up_down_length))

        upstream, downstream = (after, before) if self.is_reverse else (before, after)
        if upstream:
            self.upstream = Upstream(self, *upstream)
        if downstream:
            self.downstream = Downstream(self, *downstream)
        return self.upstream, self.downstream

    def regions(self):
        """
        Returns:
            :class:`list` of :class:`BioInterval`: all exons, coding segments, UTRs, introns and flanking regions
        """
        result = self.exons + self.cds + self.utrs + self.introns
        return result + [r for r in [self.upstream, self.downstream] if r is not None]

    def find_exon(self, marker):
        """
        Args:
            marker (int or BioInterval): a genomic position or an interval

        Returns:
            Exon: the first exon intersecting the position/interval, None if there are none
        """
        for exon in self.exons:
            if isinstance(marker, int):
                if marker in exon.position:
                    return exon
            elif exon.intersects(marker):
                return exon
        return None

    def find_cds(self, exon):
        """returns the coding segment contained in the given exon, None if there is not one"""
        for cds in self.cds:
            if exon.includes(cds):
                return cds
        return None

    def _first_exon_position_after(self, pos):
        for exon in sorted(self.exons, key=lambda x: x.start):
            if pos <= exon.start:
                return exon.start
            if pos <= exon.end:
                return pos
        LOG.warning('cannot find the first exonic position after', pos, 'for transcript', self.name)
        return -1

    def _last_exon_position_before(self, pos):
        last = -1
        for exon in sorted(self.exons, key=lambda x: x.start):
            if pos < exon.start:
                break
            elif pos <= exon.end:
                return pos
            last = exon.end
        if last < 0:
            LOG.warning('cannot find the last exonic position before', pos, 'for transcript', self.name)
        return last

    def _calc_cds_bounds(self):
        if self._cds_start is not None:
            return
        if not self.exons:
            self._cds_start, self._cds_end = (self.end, self.start) if self.is_reverse else (self.start, self.end)
            return
        exon_min = min([e.start for e in self.exons])
        exon_max = max([e.end for e in self.exons])
        cds_start, cds_end = (exon_max, exon_min) if self.is_reverse else (exon_min, exon_max)

        if self.utrs:
            raw_start = cds_start
            for utr in self.utrs:
                if isinstance(utr, UTR5Prime):
                    cds_start = min(cds_start, utr.start - 1) if self.is_reverse else max(cds_start, utr.end + 1)
                else:
                    cds_end = max(cds_end, utr.end + 1) if self.is_reverse else min(cds_end, utr.start - 1)
            if self.is_reverse:
                cds_start = self._last_exon_position_before(cds_start)
                cds_end = self._first_exon_position_after(cds_end)
            else:
                cds_start = self._first_exon_position_after(cds_start)
                cds_end = self._last_exon_position_before(cds_end)
            if cds_start < 0 or cds_end < 0:
                cds_start = cds_end = raw_start
        self._cds_start, self._cds_end = cds_start, cds_end

    @property
    def cds_start(self):
        """
        *int*: genomic position of the first coding base (the 5' end of the CDS, the larger coordinate on the reverse
        strand)
        """
        self._calc_cds_bounds()
        return self._cds_start

    @property
    def cds_end(self):
        """*int*: genomic position of the last coding base"""
        self._calc_cds_bounds()
        return self._cds_end

    def mrna_position(self, pos):
        """
        Args:
            pos (int): genomic position

        Returns:
            int: the 0-based offset of the position from the 5' end of the spliced transcript, -1 if the
            position is not exonic

        Raises:
            InvalidFeatureModelError: the distance computed is negative
        """
        distance = 0
        for exon in self.exons_sorted_strand():
            if pos in exon.position:
                offset = exon.end - pos if self.is_reverse else pos - exon.start
                if offset < 0:
                    raise InvalidFeatureModelError(
                        'negative distance for position', pos, exon, transcript_name=self.name)
                return distance + offset
            distance += len(exon)
        return -1

    def cds_position(self, pos, use_prev_base_intron=False):
        """
        Args:
            pos (int): genomic position
            use_prev_base_intron (bool): when the position is intronic, return the last coding base before the
                intron instead of the first coding base after it

        Returns:
            int: the 0-based coding base number for the position, -1 if it is outside the transcript or in a UTR
        """
        if pos not in self.position:
            return -1
        if any([pos in utr.position for utr in self.utrs]):
            return -1
        cds_start = self.cds_start
        first_cds_base_in_exon = 0
        for exon in self.exons_sorted_strand():
            if pos in exon.position:
                if self.is_reverse:
                    cds_base_in_exon = min(exon.end, cds_start) - pos
                else:
                    cds_base_in_exon = pos - max(exon.start, cds_start)
                return first_cds_base_in_exon + max(0, cds_base_in_exon)
            elif (not self.is_reverse and pos < exon.start) or (self.is_reverse and pos > exon.end):
                return first_cds_base_in_exon - (1 if use_prev_base_intron else 0)

            if self.is_reverse:
                first_cds_base_in_exon += max(0, min(cds_start, exon.end) - exon.start + 1)
            else:
                first_cds_base_in_exon += max(0, exon.end - max(exon.start, cds_start) + 1)
        return first_cds_base_in_exon - 1

    def cds_to_genomic(self):
        """
        Returns:
            numpy.ndarray: genomic position of every coding base, indexed by coding base number
        """
        if self._cds_to_genomic is not None:
            return self._cds_to_genomic
        cds_min, cds_max = sorted([self.cds_start, self.cds_end])
        segments = []
        for exon in self.exons_sorted_strand():
            low, high = max(exon.start, cds_min), min(exon.end, cds_max)
            if low > high:
                continue
            if self.is_reverse:
                segments.append(np.arange(high, low - 1, -1, dtype=np.int64))
            else:
                segments.append(np.arange(low, high + 1, dtype=np.int64))
        positions = np.concatenate(segments) if segments else np.array([], dtype=np.int64)
        self._cds_to_genomic = positions[:len(self.get_coding_seq())]
        return self._cds_to_genomic

    def codon(self, cds_base):
        """
        Returns:
            str: the codon containing the 0-based coding base, None if the codon is incomplete
        """
        seq = self.get_coding_seq()
        start = (cds_base // CODON_SIZE) * CODON_SIZE
        if start < 0 or start + CODON_SIZE > len(seq):
            return None
        return seq[start:start + CODON_SIZE]

    def spliced_seq(self):
        """
        Returns:
            str: the concatenated exon sequences wrt the transcript strand. Empty if any exon is missing its sequence
        """
        exons = self.exons_sorted_strand()
        if not exons or any([not exon.seq for exon in exons]):
            return ''
        if self.is_reverse:
            return ''.join([reverse_complement(exon.seq) for exon in exons])
        return ''.join([exon.seq for exon in exons])

    def get_coding_seq(self):
        """
        Returns:
            str: the spliced sequence without the 5' and 3' UTRs. Empty if the sequence cannot be resolved
        """
        if self._coding_seq is not None:
            return self._coding_seq
        spliced = self.spliced_seq()
        utr5_length = sum([len(u) for u in self.utrs if isinstance(u, UTR5Prime)])
        utr3_length = sum([len(u) for u in self.utrs if isinstance(u, UTR3Prime)])
        sub_end = len(spliced) - utr3_length
        self._coding_seq = '' if utr5_length > sub_end else spliced[utr5_length:sub_end]
        return self._coding_seq

    def sanity_check(self):
        """
        checks the coding sequence of protein coding transcripts for signs of a bad annotation

        Returns:
            :class:`list` of :class:`ERROR_WARNING`: the warnings which apply, in order of severity
        """
        if not self.is_protein_coding():
            return []
        if self._warnings is not None:
            return self._warnings
        warnings = []
        seq = self.get_coding_seq()
        protein = translate(seq, table=self.codon_table)
        if protein[:-1].count(STOP_AA) > 1:
            warnings.append(ERROR_WARNING.WARNING_TRANSCRIPT_MULTIPLE_STOP_CODONS)
        if len(seq) % CODON_SIZE != 0:
            warnings.append(ERROR_WARNING.WARNING_TRANSCRIPT_INCOMPLETE)
        if len(seq) < CODON_SIZE or seq[:CODON_SIZE] not in start_codons(self.codon_table):
            warnings.append(ERROR_WARNING.WARNING_TRANSCRIPT_NO_START_CODON)
        if not protein.endswith(STOP_AA):
            warnings.append(ERROR_WARNING.WARNING_TRANSCRIPT_NO_STOP_CODON)
        self._warnings = warnings
        return warnings

    def apply_variant(self, variant):
        """
        apply the alternate (second) allele of a variant. The current transcript is unchanged

        Args:
            variant (Variant): the variant to apply

        Returns:
            Transcript: a new transcript with updated exons and coding segments and recomputed regions. None if
            the variant removes the transcript entirely
        """
        span = self.applied_span(variant)
        if span is None:
            return None
        result = Transcript(
            self.gene, span[0], span[1], name=self.name, version=self.version, protein_id=self.protein_id,
            strand=self.strand, up_down_length=self.up_down_length
        )
        result.data.update(self.data)
        result.variants = self.variants[:]
        for exon in self.exons:
            new_exon = exon.apply_variant(variant)
            if new_exon is not None:
                result.add_exon(new_exon)
        for cds in self.cds:
            new_cds = cds.apply_variant(variant)
            if new_cds is not None:
                result.add_cds(new_cds)
        result.variant_annotations = self.variant_annotations[:]
        result.set_regions()
        return result

    def copy(self):
        """
        Returns:
            Transcript: a new transcript sharing the regions of the current one, with its own variant annotations
        """
        result = Transcript(
            self.gene, self.start, self.end, name=self.name, version=self.version, protein_id=self.protein_id,
            strand=self.strand, up_down_length=self.up_down_length
        )
        result.data.update(self.data)
        result.variants = self.variants[:]
        result.exons = self.exons[:]
        result.cds = self.cds[:]
        result.utrs = self.utrs[:]
        result.introns = self.introns[:]
        result.upstream, result.downstream = self.upstream, self.downstream
        result.variant_annotations = self.variant_annotations[:]
        return result

    def apply_first_allele(self, variant):
        """
        apply the first allele of a variant, for when it does not match the reference
        """
        return self.apply_variant(variant.first_allele_variant())

    def __repr__(self):
        return 'Transcript({}:{}-{}{}, name={}, protein_id={})'.format(
            self.get_chr(), self.start, self.end, self.get_strand(), self.name, self.protein_id)


class Exon(BioInterval):
    """
    exon of a transcript. The sequence is always stored wrt the forward strand
    """

    def __init__(self, start, end, transcript=None, name=None, seq=None):
        """
        Args:
            start (int): the genomic start position
            end (int): the genomic end position
            name (str): the exon id
            transcript (Transcript): the 'parent' transcript this exon belongs to
            seq (str): the forward strand sequence of the exon

        Example:
            >>> Exon(15, 78)
        """
        BioInterval.__init__(self, name=name, reference_object=transcript, start=start, end=end, seq=seq)

    @property
    def transcript(self):
        """:class:`Transcript`: the transcript this exon belongs to"""
        return self.reference_object

    def strand_seq(self):
        """*str*: the exon sequence wrt the transcript strand"""
        reverse = self.transcript.is_reverse if self.transcript is not None else self.is_reverse
        if self.seq and reverse:
            return reverse_complement(self.seq)
        return self.seq

    def check_reference(self, variant):
        """
        Returns:
            str: ERROR_WARNING.WARNING_REF_DOES_NOT_MATCH_GENOME if the reference allele disagrees with the exon
            sequence where they overlap, otherwise ERROR_WARNING.NONE
        """
        if not self.seq:
            return ERROR_WARNING.NONE
        start = max(self.start, variant.start)
        end = min(self.end, variant.end)
        if start > end:
            return ERROR_WARNING.NONE
        expected = variant.ref[start - variant.start:end - variant.start + 1]
        if self.seq[start - self.start:end - self.start + 1] != expected:
            return ERROR_WARNING.WARNING_REF_DOES_NOT_MATCH_GENOME
        return ERROR_WARNING.NONE


class CDS(BioInterval):
    """
    coding segment of a transcript
    """

    def __init__(self, start, end, transcript=None, name=None):
        BioInterval.__init__(self, name=name, reference_object=transcript, start=start, end=end)


class UTR(BioInterval):
    """
    untranslated region of an exon. Always derived from the exon and the coding segments of the transcript
    """

    def __init__(self, exon, start, end):
        BioInterval.__init__(self, exon, start, end)

    @property
    def exon(self):
        return self.reference_object

    def is_5prime(self):
        raise NotImplementedError('abstract method must be overidden')

    def is_3prime(self):
        return not self.is_5prime()


class UTR5Prime(UTR):

    def is_5prime(self):
        return True


class UTR3Prime(UTR):

    def is_5prime(self):
        return False


class Intron(BioInterval):

    def __init__(self, transcript, start, end):
        BioInterval.__init__(self, transcript, start, end)


class Upstream(BioInterval):
    """5' flanking region of a transcript"""

    def __init__(self, transcript, start, end):
        BioInterval.__init__(self, transcript, start, end)


class Downstream(BioInterval):
    """3' flanking region of a transcript"""

    def __init__(self, transcript, start, end):
        BioInterval.__init__(self, transcript, start, end)
