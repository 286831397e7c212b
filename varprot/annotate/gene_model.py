from collections import namedtuple
from concurrent import futures
from functools import partial

from intervaltree import IntervalTree

from .base import IntervalForest, ReferenceName
from .constants import DEFAULTS, FEATURE_KIND
from .genomic import CDS, Exon, Gene, IntergenicRegion, Transcript
from .haplotype import expand_transcript, order_variants
from .protein import Protein, safe_accession, translate_to_stop, translate_transcript
from ..constants import CODON_SIZE, STRAND
from ..error import InvalidFeatureModelError
from ..interval import Interval
from ..util import DEVNULL


GeneFeature = namedtuple('GeneFeature', ['kind', 'chr', 'start', 'end', 'strand', 'attributes'])
"""
a single record of a gene model file

- ``kind`` (:class:`FEATURE_KIND`): gene, transcript, exon, or CDS
- ``chr`` (:class:`str`): the chromosome name
- ``start``, ``end`` (:class:`int`): 1-based inclusive genomic positions
- ``strand`` (:class:`STRAND`): the genomic strand
- ``attributes`` (:class:`dict`): the free-text key/value attributes of the record
"""


def _grow(interval, start, end):
    if start < interval.start or end > interval.end:
        interval.position = Interval(min(start, interval.start), max(end, interval.end))


def annotated_start_codons(model):
    """
    index the start codons of the protein coding transcripts of a gene model. Transcripts sharing a start codon are
    indexed once, under the first accession seen

    Returns:
        :class:`dict` of :class:`IntervalTree` by :class:`tuple` of :class:`ReferenceName` and :class:`STRAND`: the
        intervals cover the 3 codon bases and hold the 5' codon base and the protein accession
    """
    trees = {}
    seen = set()
    for transcript in model.transcripts():
        strand = transcript.get_strand()
        if not transcript.is_protein_coding() or strand not in (STRAND.POS, STRAND.NEG):
            continue
        chrom = ReferenceName(transcript.get_chr())
        pos = transcript.cds_start
        if (chrom, strand, pos) in seen:
            continue
        seen.add((chrom, strand, pos))
        start, end = (pos - CODON_SIZE + 1, pos) if strand == STRAND.NEG else (pos, pos + CODON_SIZE - 1)
        trees.setdefault((chrom, strand), IntervalTree()).addi(start, end + 1, (pos, transcript.accession))
    return trees


class GeneModel:
    """
    the genes and transcripts of a reference genome, indexed for finding every gene, transcript and intergenic region
    containing a genomic position

    Example:
        >>> model = GeneModel.from_features(genome, read_features('annotations.gtf'))
        >>> transcripts = model.apply_variants(variants)
        >>> proteins = model.translate(transcripts)
    """

    def __init__(self, genome=None, up_down_length=None):
        """
        Args:
            genome (dict of Chromosome by ReferenceName): the reference genome
            up_down_length (int): the length of the upstream and downstream flanking regions of each transcript
        """
        self.genome = {} if genome is None else genome
        self.up_down_length = DEFAULTS.up_down_length if up_down_length is None else up_down_length
        self.genes = []
        self.intergenic_regions = []
        self.forest = IntervalForest()
        self.combinatorial_failures = []
        self.skipped_features = 0
        self._gene = None
        self._transcript = None

    @classmethod
    def from_features(cls, genome, features, up_down_length=None, log=DEVNULL):
        """
        build a gene model from a stream of feature records, where every record follows the gene and transcript
        it belongs to
        """
        model = cls(genome, up_down_length=up_down_length)
        for feature in features:
            model.add_feature(feature)
        if model.skipped_features:
            log.warning('skipped', model.skipped_features, 'records on chromosomes missing from the reference genome')
        model.build()
        unstranded = [t.name for t in model.transcripts() if t.get_strand() not in (STRAND.POS, STRAND.NEG)]
        if unstranded:
            log.warning(len(unstranded), 'transcripts have no strand and are laid out as reverse strand transcripts')
        log('loaded', len(model.genes), 'genes and', len(model.transcripts()), 'transcripts')
        return model

    def get_chromosome(self, name):
        return self.genome.get(ReferenceName(name))

    def add_feature(self, feature):
        """
        add a single record to the model. A new gene is opened whenever the gene id changes and a new transcript
        whenever the transcript id changes. Exons and coding segments are added to the open transcript

        Returns:
            BioInterval: the gene, transcript, exon, or coding segment created. None if the record was skipped

        Raises:
            InvalidFeatureModelError: the record needs an open gene or transcript and there is none
        """
        if self.forest.built:
            raise InvalidFeatureModelError('cannot add records to a gene model which has already been built')
        chrom = self.get_chromosome(feature.chr)
        if chrom is None:
            self.skipped_features += 1
            return None
        attrs = feature.attributes
        gene_id = attrs.get('gene_id') or (attrs.get('ID') if feature.kind == FEATURE_KIND.GENE else None)
        transcript_id = attrs.get('transcript_id') or (
            attrs.get('ID') if feature.kind == FEATURE_KIND.TRANSCRIPT else None)

        if gene_id and (self._gene is None or gene_id != self._gene.name):
            self._gene = Gene(chrom, feature.start, feature.end, name=gene_id, strand=feature.strand, attributes=attrs)
            self.genes.append(self._gene)
            self._transcript = None
        if feature.kind == FEATURE_KIND.GENE:
            return self._gene

        if transcript_id and (self._transcript is None or transcript_id != self._transcript.name):
            if self._gene is None:
                raise InvalidFeatureModelError(
                    'transcript record does not belong to a gene', transcript_id, transcript_name=transcript_id)
            version = attrs.get('transcript_version')
            if version is None and feature.kind == FEATURE_KIND.TRANSCRIPT:
                version = attrs.get('version')
            self._transcript = Transcript(
                self._gene, feature.start, feature.end, name=transcript_id, version=version,
                up_down_length=self.up_down_length
            )
            self._transcript.data.update(attrs)
            self._gene.transcripts.append(self._transcript)
        if self._transcript is None:
            raise InvalidFeatureModelError('{} record does not belong to a transcript'.format(feature.kind), attrs)
        _grow(self._gene, feature.start, feature.end)
        if feature.kind == FEATURE_KIND.TRANSCRIPT:
            return self._transcript
        _grow(self._transcript, feature.start, feature.end)

        if feature.kind == FEATURE_KIND.EXON:
            exon = Exon(
                feature.start, feature.end, name=attrs.get('exon_id'), seq=chrom.get_seq(feature.start, feature.end))
            return self._transcript.add_exon(exon)
        elif feature.kind == FEATURE_KIND.CDS:
            if attrs.get('protein_id'):
                self._transcript.protein_id = attrs['protein_id']
            return self._transcript.add_cds(CDS(feature.start, feature.end))
        raise InvalidFeatureModelError('unsupported record kind', feature.kind)

    def transcripts(self):
        """
        Returns:
            :class:`list` of :class:`Transcript`: all transcripts, in gene and then transcript order
        """
        return [t for gene in self.genes for t in gene.transcripts]

    def build(self):
        """
        derive the transcript regions and the intergenic regions and index the genes, transcripts and intergenic regions
        """
        for gene in self.genes:
            for transcript in gene.transcripts:
                transcript.set_regions()
            gene.build_transcript_tree()
        self.intergenic_regions = self.create_intergenic_regions()
        for gene in self.genes:
            self.forest.add(gene)
            for transcript in gene.transcripts:
                self.forest.add(transcript)
        for region in self.intergenic_regions:
            self.forest.add(region)
        self.forest.build()
        self._gene = self._transcript = None

    def create_intergenic_regions(self):
        """
        create a region between each pair of consecutive genes on the same chromosome and strand which do not overlap.
        Genes on an unknown strand are not used
        """
        regions = []
        genes_by_strand = {}
        for gene in self.genes:
            if gene.strand not in (STRAND.POS, STRAND.NEG):
                continue
            genes_by_strand.setdefault((gene.chr, gene.strand), []).append(gene)
        for (chrom, strand), genes in sorted(genes_by_strand.items()):
            genes = sorted(genes, key=lambda g: (g.start, g.end))
            previous_end = None
            for gene in genes:
                if previous_end is not None and gene.start - previous_end > 1:
                    regions.append(IntergenicRegion(chrom, previous_end + 1, gene.start - 1, strand))
                previous_end = gene.end if previous_end is None else max(previous_end, gene.end)
        return regions

    def clear_variants(self):
        for gene in self.genes:
            gene.variants = []
            for transcript in gene.transcripts:
                transcript.variants = []
        for region in self.intergenic_regions:
            region.variants = []

    def attach_variants(self, variants):
        """
        add each variant to the variant list of every gene, transcript, and intergenic region it overlaps.
        Variants are visited by descending start
        """
        self.clear_variants()
        self.combinatorial_failures = []
        for variant in order_variants(variants):
            for interval in self.forest.overlapping(variant.chr, variant.start, variant.end):
                interval.variants.append(variant)

    def apply_variants(self, variants, threads=None, max_heterozygous_variants=None, log=DEVNULL):
        """
        combinatorially apply the variants to every transcript they overlap

        Args:
            variants (list of Variant): the variants
            threads (int): number of worker threads used to expand the transcripts
            max_heterozygous_variants (int): transcripts with more heterozygous variants than this are not expanded
            log (Log): logging function

        Returns:
            :class:`list` of :class:`Transcript`: the expanded transcripts, in gene and then transcript order.
            Transcripts without variants are returned unmodified

        Raises:
            InvalidFeatureModelError: a transcript has an invalid feature model
        """
        threads = DEFAULTS.threads if threads is None else threads
        if max_heterozygous_variants is None:
            max_heterozygous_variants = DEFAULTS.max_heterozygous_variants
        self.attach_variants(variants)
        transcripts = self.transcripts()
        expand = partial(expand_transcript, max_heterozygous_variants=max_heterozygous_variants, log=log)
        if threads > 1:
            with futures.ThreadPoolExecutor(max_workers=threads) as pool:
                expansions = list(pool.map(expand, transcripts))
        else:
            expansions = [expand(transcript) for transcript in transcripts]

        result = []
        for transcript, (expanded, overflow) in zip(transcripts, expansions):
            if overflow:
                self.combinatorial_failures.append('{} {}'.format(transcript.name, transcript.protein_id))
            result.extend(expanded)
        log('expanded', len(transcripts), 'transcripts to', len(result), 'transcripts')
        return result

    def translate(self, transcripts, selenocysteine=None, skip_accessions=None, organism=None, threads=None):
        """
        translate the protein coding transcripts

        Args:
            transcripts (list of Transcript): the transcripts to translate
            selenocysteine (dict of str by str): known selenocysteine containing protein sequences by accession
            skip_accessions (set of str): protein accessions to skip
            organism (str): the organism name attached to each protein
            threads (int): number of worker threads

        Returns:
            :class:`list` of :class:`tuple` of :class:`Transcript` and :class:`Protein`: the transcript and protein
            pairs
        """
        threads = DEFAULTS.threads if threads is None else threads
        skip_accessions = set() if skip_accessions is None else skip_accessions
        transcripts = [
            t for t in transcripts if t.is_protein_coding() and t.accession not in skip_accessions
        ]
        func = partial(translate_transcript, selenocysteine=selenocysteine, organism=organism)
        if threads > 1:
            with futures.ThreadPoolExecutor(max_workers=threads) as pool:
                proteins = list(pool.map(func, transcripts))
        else:
            proteins = [func(t) for t in transcripts]
        return list(zip(transcripts, proteins))

    def translate_using_annotated_starts(self, reference_model, selenocysteine=None, min_length=None, organism=None):
        """
        translate the transcripts without coding segments (e.g. assembled transcripts) from the start codons of
        the protein coding transcripts of another gene model. Every annotated start codon on the same chromosome and
        strand whose bases all lie in a single exon of the transcript gives one protein, translated from the start
        codon to the first stop

        Args:
            reference_model (GeneModel): the model the start codons are taken from
            selenocysteine (dict of str by str): known selenocysteine containing protein sequences by the accession
                of the annotated start
            min_length (int): proteins shorter than this are dropped
            organism (str): the organism name attached to each protein

        Returns:
            :class:`list` of :class:`tuple` of :class:`Transcript` and :class:`Protein`: the transcript and protein
            pairs. The protein accession joins the transcript id and the accession of the annotated start
        """
        min_length = DEFAULTS.min_peptide_length if min_length is None else min_length
        selenocysteine = {} if selenocysteine is None else selenocysteine
        starts = annotated_start_codons(reference_model)
        result = []
        for transcript in self.transcripts():
            if transcript.is_protein_coding() or not transcript.exons:
                continue
            tree = starts.get((ReferenceName(transcript.get_chr()), transcript.get_strand()))
            spliced = transcript.spliced_seq()
            if tree is None or not spliced:
                continue
            exon_min = min([e.start for e in transcript.exons])
            exon_max = max([e.end for e in transcript.exons])
            codons = sorted(tree.overlap(exon_min, exon_max + 1), key=lambda i: i.begin, reverse=transcript.is_reverse)
            for codon in codons:
                if not any([codon.begin in e.position and codon.end - 1 in e.position for e in transcript.exons]):
                    continue
                pos, accession = codon.data
                aa_seq = translate_to_stop(
                    spliced[transcript.mrna_position(pos):], transcript.codon_table, selenocysteine.get(accession))
                if len(aa_seq) < min_length:
                    continue
                protein = Protein(
                    aa_seq, safe_accession('{}_{}'.format(transcript.name, accession)),
                    ' '.join(transcript.variant_annotations), organism=organism, transcript=transcript
                )
                result.append((transcript, protein))
        return result
