"""
evoprop - Weights for small feed-forward networks, by backpropagation or by evolution.

This package represents layered neural networks as graphs of nodes and weighted
connections living in an entity store, and produces their weights in two ways:
supervised training by backpropagation against a dataset, and evolution of a
population of network-driven agents by a genetic algorithm.

Main components:
- store: Entity store with generation-checked handles, and event messages
- data: DataSource / Dataset interfaces and an in-memory table dataset
- activations: Activation functions and their derivatives
- network: Graph model, network builders and forward propagation
- training: Backpropagation trainer with momentum and mini-batches
- evolution: Fitness tracking, roulette wheel selection, crossover and the generation loop
- run: Configuration, logging setup and the simulation tick loop

Example:
    >>> from evoprop import Config, EntityStore, TableDataset, Trainer, build_from_template
    >>> store   = EntityStore()
    >>> dataset = TableDataset([[0, 0, 0], [0, 1, 1], [1, 0, 1], [1, 1, 0]])
    >>> store.insert(dataset)
    >>> network = build_from_template(store, "2+1,2+1,1", dataset.id)
    >>> trainer = Trainer(store, dataset.id, Config())
    >>> trainer.start()
    >>> trainer.train_one_iteration()
"""

__version__ = "0.1.0"

# Import main classes for convenient access
from evoprop.run.config import Config
from evoprop.run.simulation import Simulation
from evoprop.store import EntityStore, EventChannel, INVALID_ID
from evoprop.data import TableDataset
from evoprop.activations import ActivationFunction
from evoprop.network import Node, Connection, Network, ForwardPropagator, DriveMode, build_from_template, build_from_outputs
from evoprop.training import Trainer
from evoprop.evolution import (Agent, Checkpoint, FitnessTracker, RouletteWheel,
                               GeneticAlgorithm, AgentPool, StateMachine, crossover)

__all__ = [
    "Config",
    "Simulation",
    "EntityStore",
    "EventChannel",
    "INVALID_ID",
    "TableDataset",
    "ActivationFunction",
    "Node",
    "Connection",
    "Network",
    "ForwardPropagator",
    "DriveMode",
    "build_from_template",
    "build_from_outputs",
    "Trainer",
    "Agent",
    "Checkpoint",
    "FitnessTracker",
    "RouletteWheel",
    "GeneticAlgorithm",
    "AgentPool",
    "StateMachine",
    "crossover",
]
