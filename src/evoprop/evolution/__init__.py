"""
Evolution Package

Evolution of network-driven agents by a genetic algorithm: fitness tracking
along a path, fitness-proportionate parent selection, crossover of network
weights, and the state machine running the generation loop.

Exported Classes:
    Agent:            A network-driven agent
    FitnessRecord:    Progress of an agent during a generation
    Checkpoint:       A point of the path followed by agents
    FitnessTracker:   Updates the fitness of agents
    RouletteWheel:    Fitness-proportionate parent selection
    GeneticAlgorithm: Breeds children of the selected parents
    AgentPool:        The current and next generation of agents
    StateMachine:     Runs the generation loop

Exported Functions:
    crossover:       Single-cut recombination of two genomes
    weighted_sample: Fitness-proportionate independent draws
"""

from evoprop.evolution.agent             import Agent, FitnessRecord
from evoprop.evolution.fitness           import Checkpoint, FitnessTracker
from evoprop.evolution.roulette          import RouletteWheel, weighted_sample
from evoprop.evolution.crossover         import crossover
from evoprop.evolution.population        import AgentPool
from evoprop.evolution.genetic_algorithm import GeneticAlgorithm
from evoprop.evolution.state_machine     import StateMachine

__all__ = ['Agent',
           'FitnessRecord',
           'Checkpoint',
           'FitnessTracker',
           'RouletteWheel',
           'GeneticAlgorithm',
           'AgentPool',
           'StateMachine',
           'crossover',
           'weighted_sample']
