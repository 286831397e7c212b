import itertools
import os

from varprot.annotate.base import ReferenceName
from varprot.annotate.gene_model import GeneFeature, GeneModel
from varprot.annotate.genomic import Chromosome
from varprot.constants import reverse_complement

DATA_DIR = os.path.join(os.path.dirname(__file__), 'data')


def get_data(*paths):
    return os.path.join(DATA_DIR, *paths)


# mock chromosome with a single two-exon protein coding transcript on the forward strand
#   11-20   5' UTR
#   21-40   coding (first 20 coding bases)
#   41-60   intron
#   61-91   coding (last 31 coding bases, ends with the TAA stop)
#   92-100  3' UTR
MOCK_SEQ = ''.join([
    'CCCCCCCCCC',
    'GACGACGACG',
    'ATGGCTTTTAAAGGGCCCGA',
    'GTAAGTCCCCCCCCCCCCAG',
    'ATTCCGTACGTGGCATGATAACCTGAGCTAA',
    'CACACACAC',
    'TTTTTTTTTTTTTTTTTTTT',
])
MOCK_CODING_SEQ = 'ATGGCTTTTAAAGGGCCCGAATTCCGTACGTGGCATGATAACCTGAGCTAA'
MOCK_PROTEIN = 'MAFKGPEFRTWHDNLS'


def mirror(pos):
    """position on the reverse complemented mock chromosome"""
    return len(MOCK_SEQ) + 1 - pos


def forward_features(chrom='1', gene='G1', transcript='T1', protein='P1'):
    ids = {'gene_id': gene, 'transcript_id': transcript}
    return [
        GeneFeature('gene', chrom, 11, 100, '+', {'gene_id': gene}),
        GeneFeature('transcript', chrom, 11, 100, '+', dict(ids, transcript_version='2')),
        GeneFeature('exon', chrom, 11, 40, '+', dict(ids, exon_id=transcript + '.1')),
        GeneFeature('CDS', chrom, 21, 40, '+', dict(ids, protein_id=protein)),
        GeneFeature('exon', chrom, 61, 100, '+', dict(ids, exon_id=transcript + '.2')),
        GeneFeature('CDS', chrom, 61, 91, '+', dict(ids, protein_id=protein)),
    ]


def reverse_features(chrom='2', gene='G2', transcript='T2', protein='P2'):
    """
    the forward transcript mirrored onto the reverse complemented chromosome, so it codes for the same protein
    """
    ids = {'gene_id': gene, 'transcript_id': transcript}
    return [
        GeneFeature('gene', chrom, mirror(100), mirror(11), '-', {'gene_id': gene}),
        GeneFeature('transcript', chrom, mirror(100), mirror(11), '-', dict(ids)),
        GeneFeature('exon', chrom, mirror(40), mirror(11), '-', dict(ids, exon_id=transcript + '.1')),
        GeneFeature('CDS', chrom, mirror(40), mirror(21), '-', dict(ids, protein_id=protein)),
        GeneFeature('exon', chrom, mirror(100), mirror(61), '-', dict(ids, exon_id=transcript + '.2')),
        GeneFeature('CDS', chrom, mirror(91), mirror(61), '-', dict(ids, protein_id=protein)),
    ]


def mock_genome():
    chromosomes = [
        Chromosome('1', MOCK_SEQ),
        Chromosome('2', reverse_complement(MOCK_SEQ)),
        Chromosome('MT', MOCK_SEQ),
    ]
    return {ReferenceName(c.name): c for c in chromosomes}


def mock_gene_model(*feature_sets, up_down_length=None):
    if not feature_sets:
        feature_sets = [
            forward_features(),
            reverse_features(),
            forward_features('MT', 'GMT', 'TMT', 'PMT'),
        ]
    return GeneModel.from_features(mock_genome(), itertools.chain(*feature_sets), up_down_length=up_down_length)


def get_transcript(model, name):
    for transcript in model.transcripts():
        if transcript.name == name:
            return transcript
    raise KeyError('transcript not found', name)
