import os
import time

from .constants import DEFAULTS
from .file_io import (
    load_gene_model, load_reference_genome, load_selenocysteine_map, load_variants, write_protein_fasta
)
from ..util import LOG, mkdirp


def reference_output_path(output):
    """
    Example:
        >>> reference_output_path('/path/to/sample.fasta')
        '/path/to/sample.reference.fasta'
    """
    stem, _ = os.path.splitext(output)
    return stem + '.reference.fasta'


def main(
    reference_genome, annotations, variants, output,
    sample=None, selenocysteine=None, start_time=int(time.time()),
    **kwargs
):
    """
    Args:
        reference_genome (list of str): path(s) to the reference genome fasta file(s)
        annotations (list of str): path(s) to the GTF or GFF3 gene model file(s)
        variants (str): path to the VCF file
        output (str): path to the output protein fasta file
        sample (str): the VCF sample to use
        selenocysteine (str): path to the fasta file of known selenocysteine containing proteins

    Returns:
        list: the combinatorial failures, one ``"<transcript id> <protein id>"`` string per transcript not expanded
    """
    config = DEFAULTS.to_dict()
    config.update(kwargs)
    output_dir = os.path.dirname(os.path.abspath(output))
    if not os.path.exists(output_dir):
        mkdirp(output_dir)

    LOG('loading:', reference_genome, time_stamp=True)
    genome = load_reference_genome(*reference_genome, log=LOG.indent())
    LOG('loading:', annotations, time_stamp=True)
    model = load_gene_model(genome, *annotations, up_down_length=config['up_down_length'], log=LOG.indent())
    LOG('loading:', variants, time_stamp=True)
    calls = load_variants(variants, sample=sample, log=LOG.indent())
    selenocysteine_map = {}
    if selenocysteine:
        LOG('loading:', selenocysteine, time_stamp=True)
        selenocysteine_map = load_selenocysteine_map(selenocysteine)
        LOG('loaded', len(selenocysteine_map), 'selenocysteine containing proteins', indent_level=1)

    LOG('translating the reference gene model', time_stamp=True)
    reference_proteins = model.translate(
        model.transcripts(), selenocysteine=selenocysteine_map, organism=config['organism'], threads=config['threads'])
    write_protein_fasta(
        reference_output_path(output), [p for _, p in reference_proteins], min_length=config['min_peptide_length'],
        log=LOG.indent())

    LOG('applying', len(calls), 'variants', time_stamp=True)
    transcripts = model.apply_variants(
        calls, threads=config['threads'], max_heterozygous_variants=config['max_heterozygous_variants'],
        log=LOG.indent())
    for failure in model.combinatorial_failures:
        LOG.warning('too many heterozygous variants to expand:', failure, indent_level=1)

    variant_transcripts = [t for t in transcripts if t.variant_annotations]
    LOG('translating', len(variant_transcripts), 'variant transcripts', time_stamp=True)
    variant_proteins = model.translate(
        variant_transcripts, selenocysteine=selenocysteine_map, organism=config['organism'], threads=config['threads'])
    write_protein_fasta(
        output, [p for _, p in variant_proteins], min_length=config['min_peptide_length'], log=LOG.indent())
    LOG('run time (s):', int(time.time()) - start_time, time_stamp=True)
    return model.combinatorial_failures
