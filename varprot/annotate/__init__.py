"""
Sub-package Documentation
==========================


Types of Output Files
------------------------

+-----------------------------------+------------------+--------------------------------------------------+
| expected name/suffix              | file type/format | content                                          |
+===================================+==================+==================================================+
| ``<output>``                      | FASTA            | proteins translated from the variant transcripts |
+-----------------------------------+------------------+--------------------------------------------------+
| ``<output stem>.reference.fasta`` | FASTA            | proteins translated from the reference model     |
+-----------------------------------+------------------+--------------------------------------------------+

Each protein record is written as

.. code-block:: text

    >ENSP00000334393 1:69640 T>G HOMOZYGOUS_ALT NON_SYNONYMOUS_CODING(MODERATE|MISSENSE|TTT/TGT|F184C) OS=Homo sapiens
"""
