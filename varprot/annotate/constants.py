from ..constants import VarprotNamespace, positive_int
from ..util import WeakVarprotNamespace


DEFAULTS = WeakVarprotNamespace()
""":class:`WeakVarprotNamespace`: tunable annotation defaults. Each can be overridden by the matching VARPROT_ prefixed
environment variable or command line option
"""
DEFAULTS.add(
    'up_down_length', 5000, cast_type=positive_int,
    defn='length (in base pairs) of the upstream and downstream regions flanking each transcript')
DEFAULTS.add(
    'max_heterozygous_variants', 5, cast_type=int,
    defn='transcripts overlapping more heterozygous variants than this are not expanded combinatorially')
DEFAULTS.add(
    'min_peptide_length', 7, cast_type=int,
    defn='proteins shorter than this (in amino acids) are not written to the output')
DEFAULTS.add('organism', 'Homo sapiens', defn='organism name attached to every protein record')
DEFAULTS.add(
    'threads', 1, cast_type=positive_int,
    defn='number of worker threads used to expand and translate transcripts')
DEFAULTS.add(
    'mitochondrial_names', ['MT', 'M'], cast_type=str, listable=True,
    defn='chromosome names which use the vertebrate mitochondrial codon table')


SPLICE_SITE_RADIUS = 2
""":class:`int`: number of intronic bases next to an exon boundary considered to be part of the splice site"""

FEATURE_KIND = VarprotNamespace(GENE='gene', TRANSCRIPT='transcript', EXON='exon', CDS='CDS')
""":class:`VarprotNamespace`: kinds of gene model records used in building the feature model"""

TRANSCRIPT_FEATURES = {
    'transcript', 'mrna', 'ncrna', 'lnc_rna', 'mirna', 'snrna', 'snorna', 'rrna', 'trna', 'pseudogenic_transcript',
    'primary_transcript', 'unconfirmed_transcript', 'v_gene_segment', 'j_gene_segment', 'c_gene_segment',
    'd_gene_segment', 'nmd_transcript_variant', 'processed_transcript'
}
""":class:`set`: lowercased feature type names treated as transcript records"""
