import gzip
import shutil
import unittest

from Bio import SeqIO
import pytest

from varprot.annotate.base import ReferenceName
from varprot.annotate.constants import FEATURE_KIND
from varprot.annotate.file_io import (
    feature_kind, genotype_from_indices, load_gene_model, load_reference_genome, load_selenocysteine_map,
    load_variants, parse_attributes, read_features, write_protein_fasta
)
from varprot.annotate.protein import Protein
from varprot.constants import GENOTYPE, STRAND

from ..util import MOCK_PROTEIN, MOCK_SEQ, get_data, get_transcript


class TestParseAttributes(unittest.TestCase):

    def test_gtf(self):
        attrs = parse_attributes('gene_id "G1"; transcript_id "T1"; tag "basic"; tag "CCDS";')
        self.assertEqual({'gene_id': 'G1', 'transcript_id': 'T1', 'tag': 'basic'}, attrs)

    def test_gff3(self):
        attrs = parse_attributes('ID=transcript:T1;Parent=gene:G1;Name=ONE-201;version=2;')
        self.assertEqual('transcript:T1', attrs['ID'])
        self.assertEqual('gene:G1', attrs['Parent'])
        self.assertEqual('2', attrs['version'])
        self.assertEqual(4, len(attrs))

    def test_gff3_percent_encoded(self):
        attrs = parse_attributes('ID=T1;Note=a%3Bb%3Dc%26d%2Ce;Name=x%25y')
        self.assertEqual('a;b=c&d,e', attrs['Note'])
        self.assertEqual('x%y', attrs['Name'])
        self.assertEqual(3, len(attrs))

    def test_empty(self):
        self.assertEqual({}, parse_attributes(''))
        self.assertEqual({}, parse_attributes('.'))


class TestFeatureKind(unittest.TestCase):

    def test_used(self):
        self.assertEqual(FEATURE_KIND.GENE, feature_kind('gene'))
        self.assertEqual(FEATURE_KIND.TRANSCRIPT, feature_kind('transcript'))
        self.assertEqual(FEATURE_KIND.TRANSCRIPT, feature_kind('mRNA'))
        self.assertEqual(FEATURE_KIND.TRANSCRIPT, feature_kind('lnc_RNA'))
        self.assertEqual(FEATURE_KIND.EXON, feature_kind('exon'))
        self.assertEqual(FEATURE_KIND.CDS, feature_kind('CDS'))

    def test_ignored(self):
        for feature_type in ['start_codon', 'stop_codon', 'five_prime_UTR', 'three_prime_utr', 'Selenocysteine']:
            self.assertIsNone(feature_kind(feature_type))


class TestReadFeatures(unittest.TestCase):

    def test_gtf(self):
        features = list(read_features(get_data('mini.gtf')))
        self.assertEqual(
            ['gene', 'transcript', 'exon', 'CDS', 'exon', 'CDS', 'gene', 'transcript'] +
            ['gene', 'transcript', 'exon', 'CDS', 'exon', 'CDS'],
            [f.kind for f in features])
        cds = features[3]
        self.assertEqual(('1', 21, 40, STRAND.POS), (cds.chr, cds.start, cds.end, cds.strand))
        self.assertEqual('P1', cds.attributes['protein_id'])
        self.assertEqual(STRAND.NEG, features[6].strand)

    def test_gff3(self):
        features = list(read_features(get_data('mini.gff3')))
        self.assertEqual(['gene', 'transcript', 'exon', 'CDS', 'exon', 'CDS'], [f.kind for f in features])
        self.assertEqual('T1', features[1].attributes['transcript_id'])
        self.assertEqual('transcript:T1', features[2].attributes['Parent'])

    def test_multiple_files(self):
        features = list(read_features(get_data('mini.gff3'), get_data('mini.gtf')))
        self.assertEqual(20, len(features))

    def test_too_few_columns(self):
        with self.assertRaises(ValueError):
            list(read_features(get_data('mini_genome.fa')))


class TestLoadReferenceGenome(unittest.TestCase):

    def test_load(self):
        genome = load_reference_genome(get_data('mini_genome.fa'))
        self.assertEqual(2, len(genome))
        self.assertEqual(MOCK_SEQ, genome[ReferenceName('chr1')].seq)
        self.assertEqual(MOCK_SEQ, genome[ReferenceName('chrM')].seq)
        self.assertTrue(genome['MT'].mitochondrial)
        self.assertFalse(genome['1'].mitochondrial)

    def test_duplicate_chromosome(self):
        with self.assertRaises(KeyError):
            load_reference_genome(get_data('mini_genome.fa'), get_data('mini_genome.fa'))


class TestLoadGeneModel(unittest.TestCase):

    def setUp(self):
        self.genome = load_reference_genome(get_data('mini_genome.fa'))

    def test_gtf(self):
        model = load_gene_model(self.genome, get_data('mini.gtf'))
        self.assertEqual(['G1', 'GMT'], [g.name for g in model.genes])
        self.assertEqual(2, model.skipped_features)
        transcript = get_transcript(model, 'T1')
        self.assertEqual('2', transcript.version)
        self.assertEqual('P1', transcript.protein_id)
        self.assertEqual(2, len(transcript.exons))
        self.assertEqual(2, len(transcript.cds))
        self.assertEqual(
            [MOCK_PROTEIN, MOCK_PROTEIN], [p.seq for _, p in model.translate(model.transcripts())])

    def test_gff3(self):
        model = load_gene_model(self.genome, get_data('mini.gff3'))
        self.assertEqual(['G1'], [g.name for g in model.genes])
        transcript = get_transcript(model, 'T1')
        self.assertEqual('2', transcript.version)
        self.assertEqual('P1', transcript.protein_id)
        self.assertEqual(['T1.1', 'T1.2'], [e.name for e in transcript.exons_sorted_strand()])
        self.assertEqual(0, model.skipped_features)


class TestGenotypeFromIndices(unittest.TestCase):

    def test_genotypes(self):
        self.assertEqual(GENOTYPE.HOMOZYGOUS_REF, genotype_from_indices(0, 0))
        self.assertEqual(GENOTYPE.HETEROZYGOUS, genotype_from_indices(0, 1))
        self.assertEqual(GENOTYPE.HETEROZYGOUS, genotype_from_indices(1, 2))
        self.assertEqual(GENOTYPE.HOMOZYGOUS_ALT, genotype_from_indices(1, 1))
        self.assertEqual(GENOTYPE.HOMOZYGOUS_ALT2, genotype_from_indices(2, 2))
        self.assertEqual(GENOTYPE.UNKNOWN, genotype_from_indices(None, 1))


class TestLoadVariants(unittest.TestCase):

    def test_first_sample(self):
        variants = load_variants(get_data('mini.vcf'))
        self.assertEqual(
            [('1', 28), ('1', 32), ('1', 95), ('MT', 73)], [(str(v.chr), v.start) for v in variants])
        self.assertEqual(
            [GENOTYPE.HETEROZYGOUS, GENOTYPE.HOMOZYGOUS_ALT, GENOTYPE.HETEROZYGOUS, GENOTYPE.HOMOZYGOUS_ALT],
            [v.genotype for v in variants])
        self.assertEqual('rs1', variants[0].name)
        self.assertEqual((12, 8), (variants[0].first_allele_depth, variants[0].second_allele_depth))
        multi = variants[2]
        self.assertEqual(('A', 'C', 'G'), (multi.ref, multi.first_allele, multi.second_allele))
        self.assertEqual((4, 6), (multi.first_allele_depth, multi.second_allele_depth))

    def test_named_sample(self):
        variants = load_variants(get_data('mini.vcf'), sample='SAMPLE2')
        self.assertEqual([23, 28, 32, 50, 95], [v.start for v in variants])
        self.assertEqual(GENOTYPE.HOMOZYGOUS_ALT2, variants[-1].genotype)
        self.assertEqual(('G', 'G'), (variants[-1].first_allele, variants[-1].second_allele))
        self.assertIsNone(variants[3].second_allele_depth)
        self.assertFalse(any([v.structural for v in variants]))

    def test_missing_sample(self):
        with self.assertRaises(KeyError):
            load_variants(get_data('mini.vcf'), sample='SAMPLE3')


class TestLoadSelenocysteineMap(unittest.TestCase):

    def test_load(self):
        result = load_selenocysteine_map(get_data('mini_selenocysteine.fa'))
        self.assertEqual({'P1': 'MAFKGPEFRTUHDNLS'}, result)


class TestWriteProteinFasta:
    def test_min_length(self, tmp_path):
        path = str(tmp_path / 'proteins.fa')
        proteins = [Protein(MOCK_PROTEIN, 'P1', '1:28 T>G'), Protein('MAK', 'P2')]
        assert write_protein_fasta(path, proteins, min_length=7) == 1
        records = list(SeqIO.parse(path, 'fasta'))
        assert [r.id for r in records] == ['P1']
        assert str(records[0].seq) == MOCK_PROTEIN
        assert records[0].description == 'P1 1:28 T>G OS=Homo sapiens'

    def test_empty(self, tmp_path):
        path = str(tmp_path / 'proteins.fa')
        assert write_protein_fasta(path, [], min_length=1) == 0
        assert list(SeqIO.parse(path, 'fasta')) == []


class TestGzipInput:
    @pytest.fixture
    def gzipped(self, tmp_path):
        def compress(name):
            path = str(tmp_path / (name + '.gz'))
            with open(get_data(name), 'rb') as fh_in, gzip.open(path, 'wb') as fh_out:
                shutil.copyfileobj(fh_in, fh_out)
            return path
        return compress

    def test_genome_and_annotations(self, gzipped):
        genome = load_reference_genome(gzipped('mini_genome.fa'))
        assert genome['1'].seq == MOCK_SEQ
        model = load_gene_model(genome, gzipped('mini.gtf'))
        assert [t.name for t in model.transcripts()] == ['T1', 'TMT']
