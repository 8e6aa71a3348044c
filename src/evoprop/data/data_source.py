"""
Data Source Module

Interfaces through which networks read their inputs and trainers read their
target values.

Classes:
    DataSource: Provides attribute values (e.g. to the input nodes of a network)
    Dataset:    A DataSource made of selectable samples (rows)
"""

from abc import ABC, abstractmethod

class DataSource(ABC):
    """
    General interface to provide attribute data for a network.
    """

    @abstractmethod
    def attribute_count(self) -> int:
        """The number of available attributes."""
        pass

    @abstractmethod
    def attribute_value(self, index: int = 0) -> float:
        """The value of the attribute at the given index."""
        pass

class Dataset(DataSource):
    """
    A DataSource whose attribute values come from the currently selected sample.
    """

    @property
    @abstractmethod
    def selected_sample_index(self) -> int:
        """The index of the selected sample."""
        pass

    @abstractmethod
    def sample_count(self) -> int:
        """The number of samples in the dataset."""
        pass

    @abstractmethod
    def is_last_sample_selected(self) -> bool:
        """Whether the currently selected sample is the last sample of the dataset."""
        pass

    @abstractmethod
    def select_first_sample(self) -> None:
        """Select the first sample of the dataset."""
        pass

    @abstractmethod
    def select_next_sample(self) -> None:
        """Select the next sample, wrapping over to the first one after the last."""
        pass

    @abstractmethod
    def select_previous_sample(self) -> None:
        """Select the previous sample, wrapping over to the last one before the first."""
        pass
