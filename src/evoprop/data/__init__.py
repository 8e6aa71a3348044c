"""
Data Package

Interfaces and implementations of the data consumed by networks: attribute
values for input nodes, and target values for the trainer.

Exported Classes:
    DataSource:   Provides attribute values
    Dataset:      A DataSource made of selectable samples
    TableDataset: In-memory Dataset backed by a numpy array
"""

from evoprop.data.data_source import DataSource, Dataset
from evoprop.data.table       import TableDataset

__all__ = ['DataSource',
           'Dataset',
           'TableDataset']
