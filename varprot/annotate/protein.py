import re

from Bio.Seq import Seq
from Bio.SeqRecord import SeqRecord

from .constants import DEFAULTS
from ..constants import SELENOCYSTEINE_AA, STOP_AA, translate


def safe_accession(accession):
    """
    replace characters which are not allowed in FASTA identifiers or file names

    Example:
        >>> safe_accession('ENSP0001|alt/1')
        'ENSP0001_alt_1'
    """
    return re.sub(r'[^\w.\-]', '_', str(accession))


def recode_selenocysteine(aa_seq, selenocysteine_seq):
    """
    replace stops in the translated sequence which are at selenocysteine positions of the known protein

    Args:
        aa_seq (str): the translated amino acid sequence
        selenocysteine_seq (str): the known protein sequence, with U at selenocysteine positions

    Example:
        >>> recode_selenocysteine('MA*K*', 'MAUKX')
        'MAUK*'
    """
    if not selenocysteine_seq:
        return aa_seq
    result = []
    for i, aa in enumerate(aa_seq):
        if aa == STOP_AA and i < len(selenocysteine_seq) and selenocysteine_seq[i] == SELENOCYSTEINE_AA:
            result.append(SELENOCYSTEINE_AA)
        else:
            result.append(aa)
    return ''.join(result)


class Protein:
    """
    amino acid sequence produced by translating a transcript, along with the variant annotations of the transcript
    """

    def __init__(self, seq, accession, annotation='', organism=None, transcript=None):
        """
        Args:
            seq (str): the amino acid sequence (up to and excluding the first stop)
            accession (str): the protein accession
            annotation (str): the variant annotations of the transcript, space delimited
            organism (str): the organism name
            transcript (Transcript): the transcript this protein was translated from
        """
        self.seq = seq
        self.accession = accession
        self.annotation = annotation
        self.organism = DEFAULTS.organism if organism is None else organism
        self.transcript = transcript

    def __len__(self):
        return len(self.seq)

    def description(self):
        """
        Example:
            >>> Protein('MAK', 'ENSP1', '1:69640 T>G HOMOZYGOUS_ALT ...').description()
            '1:69640 T>G HOMOZYGOUS_ALT ... OS=Homo sapiens'
        """
        parts = [self.annotation] if self.annotation else []
        parts.append('OS={}'.format(self.organism))
        return ' '.join(parts)

    def to_seq_record(self):
        return SeqRecord(Seq(self.seq), id=self.accession, name=self.accession, description=self.description())

    def __repr__(self):
        return 'Protein({}, length={}, annotation={})'.format(self.accession, len(self), repr(self.annotation))


def translate_to_stop(dna_seq, table, selenocysteine_seq=None):
    """
    translate a DNA sequence up to (and excluding) its first stop, keeping known selenocysteines

    Example:
        >>> translate_to_stop('ATGGCTTAAGGG', 1)
        'MA'
    """
    aa_seq = translate(dna_seq, table=table)
    return recode_selenocysteine(aa_seq, selenocysteine_seq).split(STOP_AA)[0]


def translate_transcript(transcript, selenocysteine=None, organism=None):
    """
    translate the coding sequence of a transcript. Transcripts on mitochondrial chromosomes use the vertebrate
    mitochondrial codon table

    Args:
        transcript (Transcript): the transcript to translate
        selenocysteine (dict of str by str): known protein sequences containing selenocysteine, by accession
        organism (str): the organism name

    Returns:
        Protein: the protein truncated at the first stop
    """
    known = (selenocysteine or {}).get(transcript.accession)
    aa_seq = translate_to_stop(transcript.get_coding_seq(), transcript.codon_table, known)
    return Protein(
        aa_seq, safe_accession(transcript.accession), ' '.join(transcript.variant_annotations),
        organism=organism, transcript=transcript
    )
