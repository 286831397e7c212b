"""
module which holds all functions relating to loading reference files and writing the protein output
"""
import gzip
import re
from urllib.parse import unquote

from Bio import SeqIO
import pysam

from .base import ReferenceName
from .constants import DEFAULTS, FEATURE_KIND, TRANSCRIPT_FEATURES
from .gene_model import GeneFeature, GeneModel
from .genomic import Chromosome
from .variant import Variant
from ..constants import GENOTYPE, STRAND
from ..error import InvalidVariantError
from ..util import DEVNULL, LOG, WeakVarprotNamespace, filepath


REFERENCE_DEFAULTS = WeakVarprotNamespace()
REFERENCE_DEFAULTS.add(
    'reference_genome', [], cast_type=filepath, listable=True,
    defn='path to the reference genome fasta file(s)')
REFERENCE_DEFAULTS.add(
    'annotations', [], cast_type=filepath, listable=True,
    defn='path to the gene model (GTF or GFF3) of genes, transcripts, exons and coding segments')
REFERENCE_DEFAULTS.add(
    'selenocysteine', None, cast_type=filepath, nullable=True,
    defn='protein fasta file containing the known selenocysteine containing proteins (marked with U)')

GTF_ATTRIBUTE_PATTERN = re.compile(r'(\w+)\s+"([^"]*)"')
FEATURE_COLUMNS = 9


def _open(path):
    if str(path).endswith('.gz'):
        return gzip.open(path, 'rt')
    return open(path, 'r')


def parse_attributes(text):
    """
    parse the attributes column of a GTF or GFF3 record. The GFF3 dialect (key=value) is used if the column contains
    an equals sign, and its percent-encoded characters (e.g. %3B for ;) are decoded. The first occurrence of a key wins

    Example:
        >>> parse_attributes('gene_id "ENSG01"; transcript_id "ENST01";')
        {'gene_id': 'ENSG01', 'transcript_id': 'ENST01'}
        >>> parse_attributes('ID=transcript:ENST01;Parent=gene:ENSG01;version=2')
        {'ID': 'transcript:ENST01', 'Parent': 'gene:ENSG01', 'version': '2'}
    """
    attributes = {}
    if '=' in text:
        for part in text.strip().split(';'):
            if '=' not in part:
                continue
            key, value = part.split('=', 1)
            attributes.setdefault(unquote(key.strip()), unquote(value.strip()))
    else:
        for key, value in GTF_ATTRIBUTE_PATTERN.findall(text):
            attributes.setdefault(key, value)
    return attributes


def feature_kind(feature_type):
    """
    Returns:
        FEATURE_KIND: the kind of record, or None if records of this type are not used

    Example:
        >>> feature_kind('mRNA')
        'transcript'
        >>> feature_kind('five_prime_utr') is None
        True
    """
    if feature_type == 'CDS':
        return FEATURE_KIND.CDS
    lowered = feature_type.lower()
    if lowered == 'gene':
        return FEATURE_KIND.GENE
    elif lowered == 'exon':
        return FEATURE_KIND.EXON
    elif lowered in TRANSCRIPT_FEATURES:
        return FEATURE_KIND.TRANSCRIPT
    return None


def read_features(*filepaths):
    """
    read the gene, transcript, exon and CDS records from GTF or GFF3 files

    Args:
        filepaths (list of str): paths to the gene model files (may be gzipped)

    Returns:
        :class:`~collections.abc.Iterable` of :class:`GeneFeature`: the records in file order
    """
    for path in filepaths:
        with _open(path) as fh:
            for line_number, line in enumerate(fh, 1):
                line = line.rstrip('\r\n')
                if not line or line.startswith('#'):
                    continue
                cols = line.split('\t')
                if len(cols) < FEATURE_COLUMNS:
                    raise ValueError('expected {} tab delimited columns'.format(FEATURE_COLUMNS), path, line_number)
                kind = feature_kind(cols[2])
                if kind is None:
                    continue
                strand = cols[6] if cols[6] in [STRAND.POS, STRAND.NEG] else STRAND.NS
                yield GeneFeature(kind, cols[0], int(cols[3]), int(cols[4]), strand, parse_attributes(cols[8]))


def load_reference_genome(*filepaths, log=DEVNULL):
    """
    Args:
        filepaths (list of str): the paths to the files containing the input fasta genomes

    Returns:
        :class:`dict` of :class:`Chromosome` by :class:`ReferenceName`: the reference genome

    Example:
        >>> genome = load_reference_genome('hg19.fa')
        >>> genome[ReferenceName('chr1')] is genome[ReferenceName('1')]
        True
    """
    reference_genome = {}
    for path in filepaths:
        with _open(path) as fh:
            for record in SeqIO.parse(fh, 'fasta'):
                name = ReferenceName(record.id)
                if name in reference_genome:
                    raise KeyError('Duplicate chromosome name', name, path)
                reference_genome[name] = Chromosome(record.id, str(record.seq))
        log('loaded', len(reference_genome), 'sequences from', path)
    return reference_genome


def load_gene_model(genome, *filepaths, up_down_length=None, log=DEVNULL):
    """
    build the gene model from one or more GTF or GFF3 files

    Returns:
        GeneModel: the gene model, built and ready for applying variants
    """
    return GeneModel.from_features(genome, read_features(*filepaths), up_down_length=up_down_length, log=log)


def _is_symbolic(allele):
    return allele is None or allele.startswith('<') or '[' in allele or ']' in allele or allele in ['*', '.']


def genotype_from_indices(first, second):
    """
    Example:
        >>> genotype_from_indices(0, 1)
        'HETEROZYGOUS'
        >>> genotype_from_indices(2, 2)
        'HOMOZYGOUS_ALT2'
    """
    if first is None or second is None:
        return GENOTYPE.UNKNOWN
    elif first != second:
        return GENOTYPE.HETEROZYGOUS
    elif first == 0:
        return GENOTYPE.HOMOZYGOUS_REF
    elif first == 1:
        return GENOTYPE.HOMOZYGOUS_ALT
    return GENOTYPE.HOMOZYGOUS_ALT2


def load_variants(path, sample=None, log=DEVNULL):
    """
    read the variant calls of a single sample from a VCF file. No-calls and homozygous reference calls are skipped, as
    are calls with symbolic alleles

    Args:
        path (str): path to the VCF file
        sample (str): the sample name, defaults to the first sample in the file
        log (Log): logging function

    Returns:
        :class:`list` of :class:`Variant`: the variants

    Raises:
        KeyError: the sample is not in the file
    """
    variants = []
    skipped = 0
    with pysam.VariantFile(path) as vcf:
        samples = list(vcf.header.samples)
        if sample is None:
            if not samples:
                raise KeyError('the VCF does not contain any samples', path)
            sample = samples[0]
        elif sample not in samples:
            raise KeyError('sample is not in the VCF', sample, samples)

        for record in vcf:
            call = record.samples[sample]
            indices = call.get('GT')
            if not indices or any([i is None for i in indices]):
                continue
            indices = sorted(indices)
            first, second = indices[0], indices[-1]
            genotype = genotype_from_indices(first, second)
            if genotype == GENOTYPE.HOMOZYGOUS_REF:
                continue
            alleles = record.alleles
            if _is_symbolic(alleles[first]) or _is_symbolic(alleles[second]):
                skipped += 1
                continue
            try:
                depths = call['AD']
            except KeyError:
                depths = None
            depths = list(depths) if depths else []
            depths.extend([None] * (len(alleles) - len(depths)))
            try:
                variants.append(Variant(
                    record.chrom, record.pos, record.ref, alleles[first], alleles[second],
                    first_allele_depth=depths[first], second_allele_depth=depths[second],
                    genotype=genotype, structural='SVTYPE' in record.info, name=record.id
                ))
            except InvalidVariantError as err:
                log.warning('skipping variant', record.chrom, record.pos, err)
                skipped += 1
    if skipped:
        log.warning('skipped', skipped, 'variants with symbolic or empty alleles')
    log('loaded', len(variants), 'variants for', sample, 'from', path)
    return variants


def load_selenocysteine_map(path):
    """
    Returns:
        :class:`dict` of :class:`str` by :class:`str`: sequences of the proteins containing selenocysteine (U) by id
    """
    result = {}
    with _open(path) as fh:
        for record in SeqIO.parse(fh, 'fasta'):
            seq = str(record.seq).upper()
            if 'U' in seq:
                result[record.id] = seq
    return result


def write_protein_fasta(path, proteins, min_length=None, log=LOG):
    """
    write the proteins to a fasta file. Proteins shorter than the minimum length are dropped

    Args:
        path (str): the output file path
        proteins (list of Protein): the proteins to write
        min_length (int): the minimum protein length written

    Returns:
        int: the number of proteins written
    """
    min_length = DEFAULTS.min_peptide_length if min_length is None else min_length
    records = [p.to_seq_record() for p in proteins if len(p) >= min_length]
    with open(path, 'w') as fh:
        count = SeqIO.write(records, fh, 'fasta')
    log('wrote', count, 'proteins to', path)
    return count
