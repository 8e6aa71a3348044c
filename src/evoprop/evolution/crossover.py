"""
Crossover Module

Single-cut recombination of two parent genomes (the connection weights of
two networks with the same topology, in connection order).

Functions:
    crossover: Create a child genome from a father and a mother genome
"""

import random

import numpy as np

def crossover(father, mother, cut_length_percentage: float) -> np.ndarray:
    """
    Create a child genome combining the genes of two parents.

    A window of 'cut_length_percentage' percent of the genes is placed at a
    random position [cut_start, cut_end]. Genes strictly inside the window come
    from the father, all others (the window boundaries included) from the mother.

    Parameters:
        father:                the father genome
        mother:                the mother genome
        cut_length_percentage: size of the father's window, in percent of the genome length

    Returns:
        the child genome; empty if the parents have different lengths
    """
    father = np.asarray(father, dtype=float)
    mother = np.asarray(mother, dtype=float)
    if len(father) != len(mother):
        return np.array([])     # parents with different topologies cannot be combined

    total_genes = len(father)
    cut_length  = int(total_genes * cut_length_percentage / 100)
    cut_start   = random.randint(0, max(total_genes - cut_length, 0))
    cut_end     = cut_start + cut_length

    indices = np.arange(total_genes)
    inside  = (indices > cut_start) & (indices < cut_end)
    return np.where(inside, father, mother)
