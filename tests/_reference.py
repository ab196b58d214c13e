"""Reference assay shared by the test modules.

KD = 1 µM, conc = 0.6 µM, 500 s association + 500 s dissociation.
"""

T0 = 500.0
CONC = 6e-7
KON = 1e4
KOFF = 0.01
RMAX = 0.8
