"""
Backpropagation Trainer Module

This module implements supervised training of a layered network against the
samples of a Dataset, using gradient descent with momentum and mini-batches.

Training does not run once per simulation tick: the trainer converts its
'iterations_per_second' into a time budget, accumulates the elapsed time of
every tick and runs as many whole iterations (one dataset sample each) as fit
in it. Given the same sequence of elapsed times, training is deterministic.

Classes:
    Trainer: Entity training the network bound to a dataset by backpropagation
"""

from collections import defaultdict

from loguru import logger

from evoprop.data        import Dataset
from evoprop.network     import (Connection, DriveMode, Network, Node,
                                 build_from_outputs, find_output_node_ids,
                                 incoming_connections, propagate, randomize_weights)
from evoprop.run.config  import Config
from evoprop.store       import Entity, EntityStore, EventListener

class Trainer(Entity, EventListener):
    """
    Trains a layered network by backpropagation.

    Every iteration processes the currently selected sample of the dataset:
    forward pass, output error, backward pass accumulating weight corrections,
    and, at the end of a batch (or of the dataset), application of the
    accumulated corrections with momentum. It then moves to the next sample.

    Public Attributes:
        dataset_id:            ID of the Dataset providing inputs and targets
        training:              Whether training iterations are being run
        iterations_per_second: The number of training iterations per second
        learning_rate:         Fraction of the accumulated correction applied to weights
        momentum:              Fraction of the previous correction carried over
        batch_size:            Number of samples per weight update
        epoch:                 Number of complete passes over the dataset
        trained_batches:       Number of weight updates applied
        mean_squared_error:    MSE over the samples of the last batch
        history:               (batch number, mean squared error) for every batch

    Public Properties:
        network:          The cached layered network being trained
        drive_mode:       TRAINED while training, AUTONOMOUS otherwise
        last_corrections: The correction applied last to each connection

    Public Methods:
        start():                Build the cached network and select the first sample
        update(elapsed_ms):     Run the iterations that fit in the elapsed time
        train_one_iteration():  Train on the currently selected sample
        reset_network():        Randomize the weights and reset all training state

    Events:
        START:    start training
        STOP:     stop training and restore the configured iteration rate
        RESET:    reset_network()
        SPEED_UP: multiply the iteration rate by the configured factor
    """

    def __init__(self,
                 store     : EntityStore,
                 dataset_id: int,
                 config    : Config | None  = None,
                 network   : Network | None = None):
        """
        Parameters:
            store:      the store holding the network and the dataset
            dataset_id: ID of the Dataset to train against
            config:     training parameters (default Config if None)
            network:    the network to train; if None, the network is discovered at start,
                        from the output nodes whose targets are in the dataset
        """
        super().__init__()
        config = config if config is not None else Config()

        self._store         = store
        self._config        = config
        self._given_network = network

        self.dataset_id           : int   = dataset_id
        self.training             : bool  = False
        self.iterations_per_second: float = config.iterations_per_second
        self.learning_rate        : float = config.learning_rate
        self.momentum             : float = config.momentum
        self.batch_size           : int   = config.batch_size
        if self.batch_size < 1:
            raise ValueError(f"The batch size must be at least 1, got {self.batch_size}")

        self.epoch             : int                       = 0
        self.trained_batches   : int                       = 0
        self.mean_squared_error: float                     = 0.0
        self.history           : list[tuple[int, float]]   = []

        self._network                 : Network              = Network.EMPTY
        self._incoming                : dict[int, list[int]] = {}
        self._outgoing                : dict[int, list[int]] = {}
        self._node_error              : dict[int, float]     = {}
        self._accumulated_correction  : dict[int, float]     = {}
        self._last_correction         : dict[int, float]     = {}
        self._accumulated_time        : float                = 0.0
        self._accumulated_squared_error: float               = 0.0
        self._trained_samples         : int                  = 0

    @property
    def network(self) -> Network:
        return self._network

    @property
    def drive_mode(self) -> DriveMode:
        return DriveMode.TRAINED if self.training else DriveMode.AUTONOMOUS

    @property
    def last_corrections(self) -> dict[int, float]:
        """Connection ID => last weight correction applied to it."""
        return dict(self._last_correction)

    def _dataset(self) -> Dataset | None:
        return self._store.get_of_type(self.dataset_id, Dataset)

    def start(self) -> None:
        """Build the cached layered network, select the first sample and clear the time budget."""
        if self._given_network is not None:
            self._network = self._given_network
        else:
            output_ids    = find_output_node_ids(self._store, self.dataset_id)
            self._network = build_from_outputs(self._store, output_ids)

        self._incoming = incoming_connections(self._store, self._network)
        self._outgoing = defaultdict(list)
        for conn_id in self._network.connection_ids:
            conn = self._store.get_of_type(conn_id, Connection)
            if conn is not None:
                self._outgoing[conn.from_node_id].append(conn_id)

        dataset = self._dataset()
        if dataset is not None:
            dataset.select_first_sample()

        self._accumulated_time = 0.0
        logger.info("[Trainer][{}] Started on {} with dataset {}", self.id, self._network, self.dataset_id)

    def update(self, elapsed_ms: float) -> None:
        """
        Per-tick entry point: run as many training iterations as fit in the accumulated time.

        Parameters:
            elapsed_ms: the time elapsed since the previous tick, in milliseconds
        """
        if self.iterations_per_second <= 0:
            return

        millis_per_iteration = 1000.0 / self.iterations_per_second
        self._accumulated_time += elapsed_ms

        while self._accumulated_time >= millis_per_iteration:
            self._accumulated_time = max(0.0, self._accumulated_time - millis_per_iteration)
            if self.training and not self._network.is_empty:
                self.train_one_iteration()

    def train_one_iteration(self) -> None:
        """Calculate, and possibly apply, the weight corrections for the selected sample."""
        dataset = self._dataset()
        if dataset is None or dataset.sample_count() == 0 or self._network.is_empty:
            return

        is_last_sample    = dataset.is_last_sample_selected()
        apply_corrections = is_last_sample or (self._trained_samples + 1 >= self.batch_size)
        store             = self._store
        layers            = self._network.layers

        # Update the output values of all nodes (forward propagation)
        propagate(store, self._network, self._incoming)

        # Difference between the network output and the target value (loss function)
        for node_id in layers[-1]:
            node = store.get_of_type(node_id, Node)
            if node is None:
                continue
            if not node.is_output_bound:
                self._node_error[node_id] = 0.0    # no target to learn
                continue
            error = dataset.attribute_value(node.target_index) - node.output_value
            self._accumulated_squared_error += error * error
            self._node_error[node_id] = error * node.activation.derivative(node.weighted_sum)

        # Propagate the error from the second to last layer backwards (backward propagation)
        for layer in reversed(layers[:-1]):
            for node_id in layer:
                node = store.get_of_type(node_id, Node)
                if node is None:
                    continue

                outgoing = [conn for conn in (store.get_of_type(conn_id, Connection)
                                              for conn_id in self._outgoing.get(node_id, []))
                            if conn is not None]

                weighted_error = sum(conn.weight * self._node_error.get(conn.to_node_id, 0.0)
                                     for conn in outgoing)
                self._node_error[node_id] = weighted_error * node.activation.derivative(node.weighted_sum)

                # Accumulate the corrections over the samples of the batch
                for conn in outgoing:
                    correction = node.output_value * self._node_error.get(conn.to_node_id, 0.0)
                    self._accumulated_correction[conn.id] = self._accumulated_correction.get(conn.id, 0.0) + correction

        self._trained_samples += 1

        if apply_corrections:
            self._apply_corrections()

        # When the last sample is reached, a new epoch begins
        if is_last_sample:
            self.epoch += 1

        dataset.select_next_sample()

    def _apply_corrections(self) -> None:
        """Apply the accumulated corrections to the connection weights and record the batch."""
        for conn_id, accumulated in self._accumulated_correction.items():
            conn = self._store.get_of_type(conn_id, Connection)
            if conn is None:
                continue
            correction = self.learning_rate * accumulated + self.momentum * self._last_correction.get(conn_id, 0.0)
            conn.weight += correction
            self._last_correction[conn_id] = correction
            self._accumulated_correction[conn_id] = 0.0

        self.trained_batches   += 1
        self.mean_squared_error = self._accumulated_squared_error / self._trained_samples
        self.history.append((self.trained_batches, self.mean_squared_error))
        self._accumulated_squared_error = 0.0
        self._trained_samples           = 0

        logger.debug("[Trainer][{}] Batch {}: mse={:.6f}", self.id, self.trained_batches, self.mean_squared_error)

    def reset_network(self) -> None:
        """Re-randomize the network weights and rewind the training to the first sample."""
        randomize_weights(self._store, self._network)

        self.history.clear()
        self._node_error.clear()
        self._accumulated_correction.clear()
        self._last_correction.clear()
        self._accumulated_time          = 0.0
        self._accumulated_squared_error = 0.0
        self._trained_samples           = 0
        self.epoch                      = 0
        self.trained_batches            = 0
        self.mean_squared_error         = 0.0

        dataset = self._dataset()
        if dataset is not None:
            dataset.select_first_sample()

        logger.info("[Trainer][{}] Network reset", self.id)

    def handle_event(self, message: str) -> None:
        if message == "START":
            self.training = True
            logger.info("[Trainer][{}] Training started", self.id)
        elif message == "STOP":
            self.training = False
            self.iterations_per_second = self._config.iterations_per_second
            logger.info("[Trainer][{}] Training stopped after {} batches", self.id, self.trained_batches)
        elif message == "RESET":
            self.reset_network()
        elif message == "SPEED_UP":
            self.iterations_per_second *= self._config.speed_up_factor
