import unittest

from varprot.annotate.effect import VariantEffect, VariantEffects, annotate_variant
from varprot.annotate.variant import Variant
from varprot.constants import EFFECT_IMPACT, EFFECT_TYPE, ERROR_WARNING, FUNCTIONAL_CLASS

from ..util import MOCK_SEQ, forward_features, get_transcript, mock_gene_model


def effect_types(effects):
    return [e.effect_type for e in effects]


class TestVariantEffect(unittest.TestCase):

    def setUp(self):
        self.variant = Variant('1', 69640, 'T', 'G', 'G')

    def test_impact_and_class(self):
        effect = VariantEffect(self.variant, effect_type=EFFECT_TYPE.STOP_GAINED)
        self.assertEqual(EFFECT_IMPACT.HIGH, effect.impact)
        self.assertEqual(FUNCTIONAL_CLASS.NONSENSE, effect.functional_class)
        effect = VariantEffect(self.variant, effect_type=EFFECT_TYPE.INTRON)
        self.assertEqual(EFFECT_IMPACT.MODIFIER, effect.impact)
        self.assertEqual(FUNCTIONAL_CLASS.NONE, effect.functional_class)

    def test_invalid_type(self):
        with self.assertRaises(KeyError):
            VariantEffect(self.variant, effect_type='MISSENSE')

    def test_str(self):
        effect = VariantEffect(
            self.variant, effect_type=EFFECT_TYPE.NON_SYNONYMOUS_CODING, codon_num=183, ref_codons='TTT',
            alt_codons='TGT', ref_aa='F', alt_aa='C')
        self.assertEqual('TTT/TGT', effect.codon_change())
        self.assertEqual('F184C', effect.aa_change())
        self.assertEqual('NON_SYNONYMOUS_CODING(MODERATE|MISSENSE|TTT/TGT|F184C)', str(effect))

    def test_str_non_coding(self):
        effect = VariantEffect(self.variant, effect_type=EFFECT_TYPE.INTRON)
        self.assertEqual('INTRON(MODIFIER|NONE||)', str(effect))

    def test_warnings_unique(self):
        incomplete = ERROR_WARNING.WARNING_TRANSCRIPT_INCOMPLETE
        effect = VariantEffect(self.variant, warnings=[ERROR_WARNING.NONE, incomplete, incomplete])
        self.assertEqual([ERROR_WARNING.WARNING_TRANSCRIPT_INCOMPLETE], effect.warnings)


class TestVariantEffects(unittest.TestCase):

    def test_functional_class_most_severe(self):
        variant = Variant('1', 28, 'T', 'G', 'G')
        effects = VariantEffects(variant, None)
        self.assertEqual(FUNCTIONAL_CLASS.NONE, effects.functional_class())
        effects.add(VariantEffect(variant, effect_type=EFFECT_TYPE.SYNONYMOUS_CODING))
        self.assertFalse(effects.is_missense_or_nonsense())
        effects.add(VariantEffect(variant, effect_type=EFFECT_TYPE.STOP_GAINED))
        effects.add(VariantEffect(variant, effect_type=EFFECT_TYPE.NON_SYNONYMOUS_CODING))
        self.assertEqual(FUNCTIONAL_CLASS.NONSENSE, effects.functional_class())
        self.assertTrue(effects.is_missense_or_nonsense())
        self.assertEqual(3, len(effects))


class TestAnnotateForward(unittest.TestCase):

    @classmethod
    def setUpClass(cls):
        cls.model = mock_gene_model()
        cls.transcript = get_transcript(cls.model, 'T1')
        cls.mt_transcript = get_transcript(cls.model, 'TMT')

    def annotate(self, *pos, transcript=None, **kwargs):
        transcript = self.transcript if transcript is None else transcript
        chrom = transcript.get_chr()
        return annotate_variant(transcript, Variant(chrom, *pos, **kwargs))

    def test_not_overlapping(self):
        self.assertIsNone(self.annotate(5, 'C', 'C', 'G'))
        self.assertIsNone(annotate_variant(self.transcript, Variant('2', 28, 'T', 'G', 'G')))

    def test_missense(self):
        effects = self.annotate(28, 'T', 'G', 'G')
        self.assertEqual([EFFECT_TYPE.NON_SYNONYMOUS_CODING], effect_types(effects))
        effect = effects.effects[0]
        self.assertEqual(2, effect.codon_num)
        self.assertEqual(1, effect.codon_index)
        self.assertEqual('TTT/TGT', effect.codon_change())
        self.assertEqual('F3C', effect.aa_change())
        self.assertEqual([], effect.warnings)
        self.assertEqual(
            '1:28 T>G HOMOZYGOUS_ALT NON_SYNONYMOUS_CODING(MODERATE|MISSENSE|TTT/TGT|F3C)',
            effects.transcript_annotation())

    def test_synonymous(self):
        effects = self.annotate(32, 'A', 'A', 'G')
        self.assertEqual([EFFECT_TYPE.SYNONYMOUS_CODING], effect_types(effects))
        self.assertEqual('K4K', effects.effects[0].aa_change())
        self.assertEqual(FUNCTIONAL_CLASS.SILENT, effects.functional_class())

    def test_stop_gained(self):
        effects = self.annotate(73, 'G', 'A', 'A')
        self.assertEqual([EFFECT_TYPE.STOP_GAINED], effect_types(effects))
        self.assertEqual('TGG/TGA', effects.effects[0].codon_change())
        self.assertEqual('W11*', effects.effects[0].aa_change())

    def test_stop_gained_mitochondrial(self):
        effects = self.annotate(73, 'G', 'A', 'A', transcript=self.mt_transcript)
        self.assertEqual([EFFECT_TYPE.SYNONYMOUS_CODING], effect_types(effects))

    def test_stop_lost(self):
        effects = self.annotate(89, 'T', 'C', 'C')
        self.assertEqual([EFFECT_TYPE.STOP_LOST], effect_types(effects))
        self.assertEqual('TAA/CAA', effects.effects[0].codon_change())

    def test_synonymous_stop(self):
        effects = self.annotate(91, 'A', 'G', 'G')
        self.assertEqual([EFFECT_TYPE.SYNONYMOUS_STOP], effect_types(effects))

    def test_start_lost(self):
        effects = self.annotate(23, 'G', 'A', 'A')
        self.assertEqual([EFFECT_TYPE.START_LOST], effect_types(effects))
        self.assertEqual(FUNCTIONAL_CLASS.MISSENSE, effects.functional_class())

    def test_start_lost_mitochondrial(self):
        effects = self.annotate(23, 'G', 'A', 'A', transcript=self.mt_transcript)
        self.assertEqual([EFFECT_TYPE.SYNONYMOUS_START], effect_types(effects))

    def test_alternative_start(self):
        effects = self.annotate(21, 'A', 'C', 'C')
        self.assertEqual([EFFECT_TYPE.NON_SYNONYMOUS_START], effect_types(effects))

    def test_frame_shift(self):
        effects = self.annotate(30, 'A', 'A', 'AT')
        self.assertEqual([EFFECT_TYPE.FRAME_SHIFT], effect_types(effects))
        self.assertEqual(FUNCTIONAL_CLASS.NONSENSE, effects.functional_class())
        self.assertTrue(effects.transcript_annotation().startswith('1:30 A>AT HETEROZYGOUS FRAME_SHIFT('))

    def test_codon_insertion(self):
        effects = self.annotate(32, 'A', 'AGGG', 'AGGG')
        self.assertEqual([EFFECT_TYPE.CODON_INSERTION], effect_types(effects))
        self.assertEqual('AAA/AAAGGG', effects.effects[0].codon_change())

    def test_codon_change_plus_insertion(self):
        effects = self.annotate(30, 'A', 'AGGG', 'AGGG')
        self.assertEqual([EFFECT_TYPE.CODON_CHANGE_PLUS_CODON_INSERTION], effect_types(effects))

    def test_codon_deletion(self):
        effects = self.annotate(26, 'TTTT', 'TTTT', 'T')
        self.assertEqual([EFFECT_TYPE.CODON_DELETION], effect_types(effects))
        self.assertEqual('GCTTTT/GCT', effects.effects[0].codon_change())

    def test_intron(self):
        effects = self.annotate(50, 'C', 'T', 'T')
        self.assertEqual([EFFECT_TYPE.INTRON], effect_types(effects))
        self.assertEqual(FUNCTIONAL_CLASS.NONE, effects.functional_class())

    def test_splice_donor(self):
        self.assertEqual([EFFECT_TYPE.SPLICE_SITE_DONOR], effect_types(self.annotate(41, 'G', 'C', 'C')))
        self.assertEqual([EFFECT_TYPE.SPLICE_SITE_DONOR], effect_types(self.annotate(42, 'T', 'C', 'C')))

    def test_splice_acceptor(self):
        self.assertEqual([EFFECT_TYPE.SPLICE_SITE_ACCEPTOR], effect_types(self.annotate(60, 'G', 'C', 'C')))
        self.assertEqual([EFFECT_TYPE.INTRON], effect_types(self.annotate(58, 'C', 'T', 'T')))

    def test_utr(self):
        self.assertEqual([EFFECT_TYPE.UTR_5_PRIME], effect_types(self.annotate(15, 'A', 'C', 'C')))
        self.assertEqual([EFFECT_TYPE.UTR_3_PRIME], effect_types(self.annotate(95, 'A', 'C', 'C')))

    def test_reference_mismatch_warning(self):
        effects = self.annotate(28, 'C', 'G', 'G')
        self.assertIn(ERROR_WARNING.WARNING_REF_DOES_NOT_MATCH_GENOME, effects.effects[0].warnings)

    def test_structural_deletion_of_transcript(self):
        effects = self.annotate(10, MOCK_SEQ[9:101], 'C', 'C', structural=True)
        self.assertEqual([EFFECT_TYPE.TRANSCRIPT_DELETED], effect_types(effects))
        self.assertIs(self.transcript, effects.effects[0].marker)

    def test_mixed_across_exons(self):
        effects = self.annotate(39, MOCK_SEQ[38:62], 'CC', 'CC')
        self.assertEqual([EFFECT_TYPE.FRAME_SHIFT], effect_types(effects))
        self.assertIs(self.transcript, effects.effects[0].marker)

    def test_non_coding_transcript(self):
        model = mock_gene_model([f for f in forward_features() if f.kind != 'CDS'])
        effects = annotate_variant(get_transcript(model, 'T1'), Variant('1', 28, 'T', 'G', 'G'))
        self.assertEqual([EFFECT_TYPE.TRANSCRIPT], effect_types(effects))


class TestAnnotateReverse(unittest.TestCase):

    @classmethod
    def setUpClass(cls):
        cls.transcript = get_transcript(mock_gene_model(), 'T2')

    def test_missense(self):
        effects = annotate_variant(self.transcript, Variant('2', 93, 'A', 'C', 'C'))
        self.assertEqual([EFFECT_TYPE.NON_SYNONYMOUS_CODING], effect_types(effects))
        self.assertEqual('TTT/TGT', effects.effects[0].codon_change())
        self.assertEqual('F3C', effects.effects[0].aa_change())

    def test_splice_sites(self):
        # the intron is 61-80, so the donor is at the higher coordinate
        donor = annotate_variant(self.transcript, Variant('2', 80, 'C', 'G', 'G'))
        self.assertEqual([EFFECT_TYPE.SPLICE_SITE_DONOR], effect_types(donor))
        acceptor = annotate_variant(self.transcript, Variant('2', 61, 'C', 'G', 'G'))
        self.assertEqual([EFFECT_TYPE.SPLICE_SITE_ACCEPTOR], effect_types(acceptor))

    def test_utr(self):
        effects = annotate_variant(self.transcript, Variant('2', 105, 'G', 'C', 'C'))
        self.assertEqual([EFFECT_TYPE.UTR_5_PRIME], effect_types(effects))
