"""
Logic Gate Training Example

This example trains a template network by backpropagation on one of the
2-input logic gates. The dataset is a table with two input columns and one
target column; the network's output node targets the last column.

    Input (0, 0) -> AND 0, OR 0, XOR 0
    Input (0, 1) -> AND 0, OR 1, XOR 1
    Input (1, 0) -> AND 0, OR 1, XOR 1
    Input (1, 1) -> AND 1, OR 1, XOR 0

AND and OR are linearly separable and are learned even without a hidden
layer ("2+1,1"); XOR needs the hidden layer of the default template.

The trainer runs inside a Simulation at the configured tick rate, so the
number of training iterations depends on simulated time only.

Classes:
    Trial_Gates: Trains a network on a logic gate and reports the error

Usage:
    config = Config("examples/configs/config_gates.ini")
    trial  = Trial_Gates(config, gate='xor')
    trial.run(seconds=60)
"""

from loguru import logger

from evoprop.data     import TableDataset
from evoprop.network  import Node, build_from_template, propagate
from evoprop.run      import Config, Simulation
from evoprop.store    import EntityStore, EventChannel
from evoprop.training import Trainer

GATES = {
    'and': [0.0, 0.0, 0.0, 1.0],
    'or' : [0.0, 1.0, 1.0, 1.0],
    'xor': [0.0, 1.0, 1.0, 0.0],
    }

INPUTS = [(0.0, 0.0), (0.0, 1.0), (1.0, 0.0), (1.0, 1.0)]

class Trial_Gates:
    """
    Trains a network on one logic gate.

    Public Attributes:
        config:  The configuration of network and trainer
        store:   The store holding dataset, network and trainer
        dataset: The gate's truth table
        network: The trained network
        trainer: The backpropagation trainer
    """

    def __init__(self, config: Config, gate: str = 'xor'):
        if gate not in GATES:
            raise ValueError(f"Unknown gate '{gate}', expected one of {sorted(GATES)}")

        self.config = config
        self.gate   = gate
        self.store  = EntityStore()

        rows = [[x1, x2, target] for (x1, x2), target in zip(INPUTS, GATES[gate])]
        self.dataset = TableDataset(rows)
        self.store.insert(self.dataset)

        self.network = build_from_template(self.store,
                                           config.network_template,
                                           data_source_id    = self.dataset.id,
                                           hidden_activation = config.hidden_activation,
                                           output_activation = config.output_activation)

        self.trainer = Trainer(self.store, self.dataset.id, config, network=self.network)
        self.store.insert(self.trainer)

    def outputs(self) -> list[float]:
        """The network output for every row of the truth table."""
        output  = self.store.get_of_type(self.network.output_node_id(0), Node)
        results = []
        self.dataset.select_first_sample()
        for _ in range(self.dataset.sample_count()):
            propagate(self.store, self.network)
            results.append(output.output_value)
            self.dataset.select_next_sample()
        return results

    def run(self, seconds: float = 60.0) -> float:
        """
        Train for the given number of simulated seconds.

        Returns:
            the mean squared error of the last batch
        """
        self.trainer.start()
        EventChannel(self.store).send(self.trainer.id, "START")

        simulation = Simulation(self.store, tick_rate=self.config.tick_rate)
        simulation.add(self.trainer)

        ticks_per_report = self.config.tick_rate * 10
        total_ticks      = int(seconds * self.config.tick_rate)
        while simulation.ticks < total_ticks:
            simulation.run(min(ticks_per_report, total_ticks - simulation.ticks))
            logger.info("[{}] {:6.1f}s  epoch {:5d}  mse={:.6f}", self.gate.upper(),
                        simulation.elapsed_ms / 1000.0, self.trainer.epoch, self.trainer.mean_squared_error)

        for (x1, x2), target, value in zip(INPUTS, GATES[self.gate], self.outputs()):
            logger.info("[{}] ({:.0f}, {:.0f}) -> {:.4f}  (target {:.0f})", self.gate.upper(), x1, x2, value, target)

        return self.trainer.mean_squared_error
