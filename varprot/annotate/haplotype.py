"""
combinatorial expansion of a transcript over the variants overlapping it. Every heterozygous variant which
changes the protein splits the expansion into one branch per allele
"""
from collections import deque

from .constants import DEFAULTS
from .effect import annotate_variant
from ..constants import GENOTYPE
from ..error import InvalidFeatureModelError
from ..util import DEVNULL


def order_variants(variants):
    """
    sort variants by descending start so that applying one never shifts the coordinates of those still to be applied
    """
    return sorted(variants, key=lambda v: (v.start, v.end), reverse=True)


def count_heterozygous(variants):
    return len([v for v in variants if v.genotype == GENOTYPE.HETEROZYGOUS])


def expand_transcript(transcript, variants=None, max_heterozygous_variants=None, log=DEVNULL):
    """
    apply all combinations of the alleles of the variants to a transcript

    Args:
        transcript (Transcript): the reference transcript
        variants (list of Variant): the variants to apply, defaults to the variants attached to the transcript
        max_heterozygous_variants (int): the transcript is not expanded if it has more heterozygous variants than this
        log (Log): logging function

    Returns:
        tuple: the list of resulting transcripts and a flag which is True if the transcript was not expanded because
        it has too many heterozygous variants. The unmodified transcript is the only result when there are no variants

    Raises:
        InvalidFeatureModelError: the feature model of the transcript is invalid
    """
    if max_heterozygous_variants is None:
        max_heterozygous_variants = DEFAULTS.max_heterozygous_variants
    variants = order_variants(transcript.variants if variants is None else variants)

    if count_heterozygous(variants) > max_heterozygous_variants:
        log.warning(
            'too many heterozygous variants to expand', transcript.name, '({} > {})'.format(
                count_heterozygous(variants), max_heterozygous_variants))
        return [transcript], True

    result = []
    queue = deque([(transcript, 0)])
    try:
        while queue:
            current, index = queue.popleft()
            if index >= len(variants):
                result.append(current)
                continue
            variant = variants[index]
            effects = annotate_variant(current, variant)
            if effects is None:
                queue.append((current, index + 1))
                continue
            annotation = effects.transcript_annotation()

            alternate = current.apply_variant(variant)
            if alternate is None:
                log('variant', variant.description(), 'removes transcript', transcript.name)
            else:
                alternate.variant_annotations.append(annotation)
                queue.append((alternate, index + 1))

            if variant.genotype == GENOTYPE.HETEROZYGOUS and effects.is_missense_or_nonsense():
                if variant.first_allele != variant.ref:
                    first = current.apply_first_allele(variant)
                else:
                    first = current.copy()
                if first is not None:
                    first.variant_annotations.append(annotation)
                    queue.append((first, index + 1))
    except InvalidFeatureModelError as err:
        if err.transcript_name is None:
            err.transcript_name = transcript.name
        raise err
    return result, False
