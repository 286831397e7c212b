class NotSpecifiedError(Exception):
    """
    raised when information is required for a function but has not been given

    for example if strand was required but had been set to STRAND.NS then this
    error would be raised
    """
    pass


class InvalidFeatureModelError(Exception):
    """
    raised when the genomic feature model is internally inconsistent (for example a negative distance
    while mapping a genomic position onto a transcript). Processing of the affected transcript must stop
    """
    def __init__(self, *pos, transcript_name=None):
        Exception.__init__(self, *pos)
        self.transcript_name = transcript_name

    def __str__(self):
        msg = Exception.__str__(self)
        if self.transcript_name:
            return '{} (transcript: {})'.format(msg, self.transcript_name)
        return msg


class IntervalForestError(Exception):
    """
    raised when an interval forest is queried before it is built, or modified after
    """
    pass


class InvalidVariantError(Exception):
    pass
