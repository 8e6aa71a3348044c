"""
Table Dataset Module

An in-memory dataset of numeric rows. Each row is one sample; its columns are
the attributes read by input nodes (feature columns) and by the trainer
(target columns, conventionally the last ones).

Classes:
    TableDataset: Dataset entity backed by a 2D numpy array
"""

import numpy as np
from typing import Sequence

from evoprop.data.data_source import Dataset
from evoprop.store            import Entity, EventListener

# Attribute value reported by a table without any data
MISSING_VALUE = -1.0

class TableDataset(Entity, Dataset, EventListener):
    """
    A dataset held as a table of numbers, one row per sample.

    No sample is selected initially (selected_sample_index == -1); attributes
    are then read from the first row. Column indices outside the table are
    clamped to the nearest column.

    Public Properties:
        rows:                  The table, as a (samples, attributes) numpy array
        selected_sample_index: The index of the selected sample (-1 if none)

    Events:
        NEXT:     select the next sample
        PREVIOUS: select the previous sample
    """

    def __init__(self, rows: Sequence[Sequence[float]] | np.ndarray = ()):
        """
        Parameters:
            rows: the samples of the dataset, all with the same number of columns
        """
        Entity.__init__(self)
        self._selected_sample_index: int = -1
        self.rows = rows

    @property
    def rows(self) -> np.ndarray:
        """The table, as a (samples, attributes) numpy array."""
        return self._rows

    @rows.setter
    def rows(self, rows: Sequence[Sequence[float]] | np.ndarray) -> None:
        table = np.array(rows, dtype=float)
        if table.size == 0:
            table = np.zeros((0, 0))
        elif table.ndim != 2:
            raise ValueError(f"Expected a 2D table of samples, got an array of shape {table.shape}")
        self._rows = table

    @property
    def selected_sample_index(self) -> int:
        return self._selected_sample_index

    def attribute_count(self) -> int:
        """The number of columns per row."""
        return self._rows.shape[1]

    def attribute_value(self, index: int = 0) -> float:
        """The value of the selected sample at the given column index."""
        num_rows, num_cols = self._rows.shape
        if num_rows == 0 or num_cols == 0:
            return MISSING_VALUE
        row = min(max(self._selected_sample_index, 0), num_rows - 1)
        col = min(max(index, 0), num_cols - 1)
        return float(self._rows[row, col])

    def sample_count(self) -> int:
        return self._rows.shape[0]

    def is_last_sample_selected(self) -> bool:
        return self._selected_sample_index == self.sample_count() - 1

    def select_first_sample(self) -> None:
        self._selected_sample_index = 0

    def select_next_sample(self) -> None:
        if self.sample_count() == 0:
            return
        self._selected_sample_index = (self._selected_sample_index + 1) % self.sample_count()

    def select_previous_sample(self) -> None:
        if self.sample_count() == 0:
            return
        if self._selected_sample_index - 1 < 0:
            self._selected_sample_index = self.sample_count() - 1
        else:
            self._selected_sample_index -= 1

    def handle_event(self, message: str) -> None:
        if message == "NEXT":
            self.select_next_sample()
        elif message == "PREVIOUS":
            self.select_previous_sample()

    def __repr__(self):
        return f"TableDataset(id={self.id}, samples={self.sample_count()}, attributes={self.attribute_count()})"
