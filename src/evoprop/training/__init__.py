"""
Training Package

Supervised training of layered networks by backpropagation.

Exported Classes:
    Trainer: Trains the network bound to a dataset
"""

from evoprop.training.trainer import Trainer

__all__ = ['Trainer']
