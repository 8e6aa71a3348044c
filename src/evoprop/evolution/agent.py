"""
Agent Module

This module implements the agents evolved by the genetic algorithm: vehicles
driven by a neural network that reads the agent's sensors and produces a
throttle and a steering value. Physics and sensing happen outside the core;
the environment moves the agent (x, y) and feeds its sensor readings.

Classes:
    FitnessRecord: Progress of an agent during the current generation
    Agent:         A network-driven agent, providing its sensor values as a DataSource
"""

from dataclasses import dataclass

import numpy as np

from evoprop.data    import DataSource
from evoprop.network import ForwardPropagator, Network, Node
from evoprop.store   import Entity, EntityStore, EventListener

@dataclass
class FitnessRecord:
    """
    Progress of an agent along the path of the current generation.

    Attributes:
        fitness:        Distance travelled along the path
        last_fitness:   The fitness at the last time the agent made progress
        stagnant_ticks: Ticks since the agent last made progress
        finished:       Whether the agent reached the end of the path
        crashed:        Whether the agent stopped making progress (or collided)
    """
    fitness       : float = 0.0
    last_fitness  : float = 0.0
    stagnant_ticks: int   = 0
    finished      : bool  = False
    crashed       : bool  = False

    @property
    def is_terminal(self) -> bool:
        """Whether the agent is done for the remainder of the generation."""
        return self.crashed or self.finished

class Agent(Entity, DataSource, EventListener):
    """
    An agent driven by the neural network it owns.

    The agent is the data source of its network's input layer: attribute i is
    the value of sensor i, in [0, 1] (0.0 for indices beyond the sensors).
    While autonomous, every update evaluates the network and reads the
    throttle and steering from output nodes 0 and 1.

    Public Attributes:
        x, y:       Position of the agent
        generation: The generation the agent was created in
        record:     The agent's FitnessRecord
        throttle:   Throttle in range -1.0 to 1.0
        steering:   Steering direction in range -1.0 to 1.0
        autonomous: Whether the network (rather than manual input) drives the agent

    Public Properties:
        network:       The network driving the agent
        sensor_values: Copy of the current sensor readings
        fitness:       Shortcut to record.fitness

    Public Methods:
        set_sensor_values(values): Store new sensor readings
        update(store):             Evaluate the network and read the controls
        crash():                   Mark the agent as crashed

    Events:
        AUTO, MANUAL:               switch between network and manual control
        FORWARD_ON / FORWARD_OFF:   manual throttle forward
        BACKWARD_ON / BACKWARD_OFF: manual throttle backward
        RIGHT_ON / RIGHT_OFF:       manual steering right
        LEFT_ON / LEFT_OFF:         manual steering left
    """

    def __init__(self, sensor_count: int = 10, x: float = 0.0, y: float = 0.0):
        """
        Parameters:
            sensor_count: the number of sensors of the agent
            x, y:         the starting position
        """
        super().__init__()
        self.x         : float         = x
        self.y         : float         = y
        self.generation: int           = 0
        self.record    : FitnessRecord = FitnessRecord()
        self.throttle  : float         = 0.0
        self.steering  : float         = 0.0
        self.autonomous: bool          = True

        self._sensor_values = np.zeros(sensor_count)
        self._network       = Network.EMPTY
        self._propagator    = None

    @property
    def network(self) -> Network:
        return self._network

    @network.setter
    def network(self, network: Network) -> None:
        self._network    = network
        self._propagator = None     # rebuilt on next update

    @property
    def sensor_values(self) -> np.ndarray:
        return self._sensor_values.copy()

    @property
    def fitness(self) -> float:
        return self.record.fitness

    def set_sensor_values(self, values) -> None:
        """Store sensor readings, clipped to [0, 1]."""
        self._sensor_values = np.clip(np.asarray(values, dtype=float), 0.0, 1.0)

    def attribute_count(self) -> int:
        return len(self._sensor_values)

    def attribute_value(self, index: int = 0) -> float:
        if 0 <= index < len(self._sensor_values):
            return float(self._sensor_values[index])
        return 0.0

    def crash(self) -> None:
        self.record.crashed = True

    def update(self, store: EntityStore) -> None:
        """
        Evaluate the agent's network, and take over its outputs as controls.
        Nothing happens under manual control, or once the agent is crashed.
        """
        if not self.autonomous or self.record.crashed or self._network.is_empty:
            return

        if self._propagator is None:
            self._propagator = ForwardPropagator(store, self._network)
        self._propagator.propagate()

        throttle_node = store.get_of_type(self._network.output_node_id(0), Node)
        steering_node = store.get_of_type(self._network.output_node_id(1), Node)
        if throttle_node is not None and steering_node is not None:
            self.throttle = throttle_node.output_value
            self.steering = steering_node.output_value

    def handle_event(self, message: str) -> None:
        if message == "AUTO":
            self.autonomous = True
        elif message == "MANUAL":
            self.autonomous = False
        elif message == "FORWARD_ON":
            self.throttle = 1.0
        elif message == "FORWARD_OFF":
            self.throttle = min(self.throttle, 0.0)
        elif message == "BACKWARD_ON":
            self.throttle = -1.0
        elif message == "BACKWARD_OFF":
            self.throttle = max(self.throttle, 0.0)
        elif message == "RIGHT_ON":
            self.steering = 1.0
        elif message == "RIGHT_OFF":
            self.steering = min(self.steering, 0.0)
        elif message == "LEFT_ON":
            self.steering = -1.0
        elif message == "LEFT_OFF":
            self.steering = max(self.steering, 0.0)

    def __repr__(self):
        return (f"Agent(id={self.id}, generation={self.generation}, fitness={self.record.fitness:.2f}, "
                f"crashed={self.record.crashed}, finished={self.record.finished})")
