"""
classification of the effect of a variant on a transcript. Coding effects are found by applying the variant to
the transcript and comparing the reference and alternate coding sequences
"""
from .constants import SPLICE_SITE_RADIUS
from .genomic import UTR5Prime
from ..constants import (
    CODON_SIZE, EFFECT_IMPACT, EFFECT_TYPE, EFFECT_TYPE_FUNCTIONAL_CLASS, EFFECT_TYPE_IMPACT, ERROR_WARNING,
    FUNCTIONAL_CLASS, STOP_AA, VARIANT_TYPE, start_codons, translate
)


class VariantEffect:
    """
    a single effect of a variant on a transcript or one of its regions
    """

    def __init__(
        self, variant, marker=None, effect_type=EFFECT_TYPE.NONE, codon_num=-1, codon_index=-1,
        ref_codons='', alt_codons='', ref_aa='', alt_aa='', warnings=None
    ):
        """
        Args:
            variant (Variant): the variant causing the effect
            marker (BioInterval): the region of the transcript affected
            effect_type (EFFECT_TYPE): the kind of effect
            codon_num (int): 0-based number of the first codon affected, -1 if not coding
            codon_index (int): 0-based position of the first changed base within its codon
            ref_codons (str): the reference codon(s)
            alt_codons (str): the alternate codon(s)
            ref_aa (str): the amino acid(s) coded by the reference codons
            alt_aa (str): the amino acid(s) coded by the alternate codons
            warnings (list of ERROR_WARNING): diagnostics on the transcript or the reference allele
        """
        self.variant = variant
        self.marker = marker
        self.effect_type = EFFECT_TYPE.enforce(effect_type)
        self.codon_num = codon_num
        self.codon_index = codon_index
        self.ref_codons = ref_codons
        self.alt_codons = alt_codons
        self.ref_aa = ref_aa
        self.alt_aa = alt_aa
        self.warnings = []
        for warning in warnings or []:
            self.add_warning(warning)

    @property
    def impact(self):
        return EFFECT_TYPE_IMPACT.get(self.effect_type, EFFECT_IMPACT.MODIFIER)

    @property
    def functional_class(self):
        return EFFECT_TYPE_FUNCTIONAL_CLASS.get(self.effect_type, FUNCTIONAL_CLASS.NONE)

    def add_warning(self, warning):
        if warning != ERROR_WARNING.NONE and warning not in self.warnings:
            self.warnings.append(ERROR_WARNING.enforce(warning))

    def codon_change(self):
        """
        Example:
            >>> VariantEffect(v, effect_type='NON_SYNONYMOUS_CODING', ref_codons='TTT', alt_codons='TGT').codon_change()
            'TTT/TGT'
        """
        if not self.ref_codons and not self.alt_codons:
            return ''
        return '{}/{}'.format(self.ref_codons, self.alt_codons)

    def aa_change(self):
        """
        the amino acid change in short notation with a 1-based codon number. For example F184C
        """
        if self.codon_num < 0 or (not self.ref_aa and not self.alt_aa):
            return ''
        return '{}{}{}'.format(self.ref_aa, self.codon_num + 1, self.alt_aa)

    def __str__(self):
        return '{}({}|{}|{}|{})'.format(
            self.effect_type, self.impact, self.functional_class, self.codon_change(), self.aa_change())

    def __repr__(self):
        return 'VariantEffect({})'.format(str(self))


class VariantEffects:
    """
    the collection of effects one variant has on one transcript
    """

    def __init__(self, variant, transcript):
        self.variant = variant
        self.transcript = transcript
        self.effects = []
        self.coding_annotated = False

    def add(self, effect):
        self.effects.append(effect)
        return effect

    def __iter__(self):
        return iter(self.effects)

    def __len__(self):
        return len(self.effects)

    def functional_class(self):
        """
        Returns:
            FUNCTIONAL_CLASS: the most severe functional class of all effects
        """
        result = FUNCTIONAL_CLASS.NONE
        for effect in self.effects:
            if FUNCTIONAL_CLASS.rank(effect.functional_class) > FUNCTIONAL_CLASS.rank(result):
                result = effect.functional_class
        return result

    def is_missense_or_nonsense(self):
        return FUNCTIONAL_CLASS.rank(self.functional_class()) >= FUNCTIONAL_CLASS.rank(FUNCTIONAL_CLASS.MISSENSE)

    def transcript_annotation(self):
        """
        Returns:
            str: the annotation appended to the transcript when the variant is applied

        Example:
            >>> effects.transcript_annotation()
            '1:69640 T>G HOMOZYGOUS_ALT NON_SYNONYMOUS_CODING(MODERATE|MISSENSE|TTT/TGT|F184C)'
        """
        return '{} {} {}'.format(
            self.variant.description(), self.variant.genotype, ','.join([str(e) for e in self.effects]))


def _set_effect(effects, marker, effect_type, **kwargs):
    """
    create an effect, attach the transcript level and reference allele warnings, and add it to the collection
    """
    transcript = effects.transcript
    effect = VariantEffect(effects.variant, marker, effect_type, **kwargs)
    for warning in transcript.sanity_check():
        effect.add_warning(warning)
    exon = transcript.find_exon(effects.variant)
    if exon is not None:
        effect.add_warning(exon.check_reference(effects.variant))
    return effects.add(effect)


def _coding_bounds(transcript):
    return tuple(sorted([transcript.cds_start, transcript.cds_end]))


def codon_change(effects, exon):
    """
    effect of a variant on the coding sequence, by comparing the codons of the reference transcript with those of the
    transcript where the variant has been applied

    Returns:
        bool: True if any coding base is affected
    """
    transcript, variant = effects.transcript, effects.variant
    ref_seq = transcript.get_coding_seq()
    if not ref_seq:
        _set_effect(effects, exon, EFFECT_TYPE.CODON_CHANGE)
        return True

    cds_min, cds_max = _coding_bounds(transcript)
    low, high = max(variant.start, cds_min), min(variant.end, cds_max)
    if transcript.is_reverse:
        first = transcript.cds_position(high)
        last = transcript.cds_position(low, use_prev_base_intron=True)
    else:
        first = transcript.cds_position(low)
        last = transcript.cds_position(high, use_prev_base_intron=True)
    if first < 0 or last < first:
        return False

    alternate = transcript.apply_variant(variant)
    alt_seq = alternate.get_coding_seq() if alternate is not None else ''
    net = len(alt_seq) - len(ref_seq)
    codon_num = first // CODON_SIZE
    codon_start = codon_num * CODON_SIZE
    codon_end = (last // CODON_SIZE + 1) * CODON_SIZE

    ref_codons = ref_seq[codon_start:codon_end]
    alt_codons = alt_seq[codon_start:max(codon_start, codon_end + net)]
    table = transcript.codon_table
    ref_aa = translate(ref_codons, table=table)
    alt_aa = translate(alt_codons, table=table)
    starts = start_codons(table)

    if net % CODON_SIZE != 0:
        effect_type = EFFECT_TYPE.FRAME_SHIFT
    elif codon_num == 0 and ref_codons[:CODON_SIZE] in starts and alt_codons[:CODON_SIZE] not in starts:
        effect_type = EFFECT_TYPE.START_LOST
    elif STOP_AA in alt_aa and STOP_AA not in ref_aa:
        effect_type = EFFECT_TYPE.STOP_GAINED
    elif STOP_AA in ref_aa and STOP_AA not in alt_aa:
        effect_type = EFFECT_TYPE.STOP_LOST
    elif net > 0:
        if alt_aa.startswith(ref_aa) or alt_aa.endswith(ref_aa):
            effect_type = EFFECT_TYPE.CODON_INSERTION
        else:
            effect_type = EFFECT_TYPE.CODON_CHANGE_PLUS_CODON_INSERTION
    elif net < 0:
        if ref_aa.startswith(alt_aa) or ref_aa.endswith(alt_aa):
            effect_type = EFFECT_TYPE.CODON_DELETION
        else:
            effect_type = EFFECT_TYPE.CODON_CHANGE_PLUS_CODON_DELETION
    elif ref_aa == alt_aa:
        if codon_num == 0:
            effect_type = EFFECT_TYPE.SYNONYMOUS_START
        elif STOP_AA in ref_aa:
            effect_type = EFFECT_TYPE.SYNONYMOUS_STOP
        else:
            effect_type = EFFECT_TYPE.SYNONYMOUS_CODING
    elif codon_num == 0:
        effect_type = EFFECT_TYPE.NON_SYNONYMOUS_START
    else:
        effect_type = EFFECT_TYPE.NON_SYNONYMOUS_CODING

    _set_effect(
        effects, exon, effect_type, codon_num=codon_num, codon_index=first % CODON_SIZE,
        ref_codons=ref_codons, alt_codons=alt_codons, ref_aa=ref_aa, alt_aa=alt_aa
    )
    return True


def whole_codon_change(effects):
    """
    effect of a structural variant, or of a variant spanning several exons, found by comparing the full
    reference and alternate proteins
    """
    transcript, variant = effects.transcript, effects.variant
    if variant.includes(transcript):
        if variant.size_change < 0:
            _set_effect(effects, transcript, EFFECT_TYPE.TRANSCRIPT_DELETED)
        else:
            _set_effect(effects, transcript, EFFECT_TYPE.TRANSCRIPT)
        return

    if variant.size_change < 0:
        for exon in transcript.exons:
            if variant.includes(exon):
                _set_effect(effects, exon, EFFECT_TYPE.EXON_DELETED)

    ref_seq = transcript.get_coding_seq()
    cds_min, cds_max = _coding_bounds(transcript)
    if not ref_seq or variant.end < cds_min or variant.start > cds_max:
        return
    alternate = transcript.apply_variant(variant)
    alt_seq = alternate.get_coding_seq() if alternate is not None else ''
    net = len(alt_seq) - len(ref_seq)

    table = transcript.codon_table
    ref_aa = translate(ref_seq, table=table)
    alt_aa = translate(alt_seq, table=table)
    codon_num = 0
    while codon_num < min(len(ref_aa), len(alt_aa)) and ref_aa[codon_num] == alt_aa[codon_num]:
        codon_num += 1

    if net % CODON_SIZE != 0:
        effect_type = EFFECT_TYPE.FRAME_SHIFT
    elif ref_aa == alt_aa:
        effect_type = EFFECT_TYPE.SYNONYMOUS_CODING
    elif alt_aa[:-1].count(STOP_AA) > ref_aa[:-1].count(STOP_AA):
        effect_type = EFFECT_TYPE.STOP_GAINED
    else:
        effect_type = EFFECT_TYPE.CODON_CHANGE
    codon_start = codon_num * CODON_SIZE
    _set_effect(
        effects, transcript, effect_type, codon_num=codon_num,
        ref_codons=ref_seq[codon_start:codon_start + CODON_SIZE],
        alt_codons=alt_seq[codon_start:codon_start + CODON_SIZE],
        ref_aa=ref_aa[codon_num:codon_num + 1], alt_aa=alt_aa[codon_num:codon_num + 1]
    )


def exon_effect(effects, exon):
    """
    Returns:
        bool: True if the variant changes the coding sequence through this exon
    """
    transcript, variant = effects.transcript, effects.variant
    if not transcript.is_protein_coding():
        return False
    cds_min, cds_max = _coding_bounds(transcript)
    if variant.end < cds_min or variant.start > cds_max:
        return False
    if effects.coding_annotated:
        return True
    effects.coding_annotated = codon_change(effects, exon)
    return effects.coding_annotated


def utr_effect(effects, utr):
    effect_type = EFFECT_TYPE.UTR_5_PRIME if isinstance(utr, UTR5Prime) else EFFECT_TYPE.UTR_3_PRIME
    _set_effect(effects, utr, effect_type)


def intron_effect(effects, intron):
    """
    splice site effects for variants within a few bases of either end of the intron, otherwise an intron effect.
    The donor site is at the 5' end of the intron wrt the transcript strand
    """
    variant = effects.variant
    near_start = variant.start <= intron.start + SPLICE_SITE_RADIUS - 1 and variant.end >= intron.start
    near_end = variant.end >= intron.end - SPLICE_SITE_RADIUS + 1 and variant.start <= intron.end
    if effects.transcript.is_reverse:
        donor, acceptor = near_end, near_start
    else:
        donor, acceptor = near_start, near_end
    if donor:
        _set_effect(effects, intron, EFFECT_TYPE.SPLICE_SITE_DONOR)
    if acceptor:
        _set_effect(effects, intron, EFFECT_TYPE.SPLICE_SITE_ACCEPTOR)
    if not donor and not acceptor:
        _set_effect(effects, intron, EFFECT_TYPE.INTRON)


def annotate_variant(transcript, variant):
    """
    classify the effects of a variant on a transcript

    Args:
        transcript (Transcript): the transcript
        variant (Variant): the variant

    Returns:
        VariantEffects: the effects, or None if the variant does not intersect the transcript
    """
    if not transcript.intersects(variant):
        return None
    effects = VariantEffects(variant, transcript)

    if variant.structural and variant.includes(transcript):
        whole_codon_change(effects)
        return effects
    if variant.structural or variant.variant_type in [VARIANT_TYPE.MIXED, VARIANT_TYPE.MNV]:
        if len([exon for exon in transcript.exons if exon.intersects(variant)]) > 1:
            whole_codon_change(effects)
            return effects

    exon_annotated = False
    for exon in transcript.exons:
        if exon.intersects(variant):
            exon_annotated = exon_effect(effects, exon) or exon_annotated

    included = False
    for utr in transcript.utrs:
        if utr.intersects(variant):
            utr_effect(effects, utr)
            included = included or utr.includes(variant)
    if included:
        return effects

    for intron in transcript.introns:
        if intron.intersects(variant):
            intron_effect(effects, intron)
            included = included or intron.includes(variant)
    if included:
        return effects

    if not exon_annotated:
        _set_effect(effects, transcript, EFFECT_TYPE.TRANSCRIPT)
    return effects
