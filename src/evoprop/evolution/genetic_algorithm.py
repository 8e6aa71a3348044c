"""
Genetic Algorithm Module

Classes:
    GeneticAlgorithm: Breeds children of the agents selected by the roulette wheel
"""

import numpy as np
from loguru import logger

from evoprop.evolution.agent      import Agent
from evoprop.evolution.crossover  import crossover
from evoprop.evolution.population import AgentPool
from evoprop.evolution.roulette   import RouletteWheel
from evoprop.run.config           import Config
from evoprop.store                import Entity, EntityStore, EventListener, INVALID_ID

class GeneticAlgorithm(Entity, EventListener):
    """
    Creates child genomes from two parent agents and submits them to the pool.

    The parents are the agents currently selected by the RouletteWheel; when
    no wheel is configured, the fixed 'father_id' and 'mother_id' are used.
    Parent genomes are read from their networks, and cached until the
    selected parent changes.

    Public Attributes:
        wheel_id:              ID of the RouletteWheel selecting the parents
        pool_id:               ID of the AgentPool receiving the children
        father_id:             Father used when there is no wheel
        mother_id:             Mother used when there is no wheel
        cut_length_percentage: Percentage of the genes inherited from the father
        child_genome:          The last generated child genome (empty if none)

    Public Properties:
        father_genome: Genome of the selected father (empty if unresolved)
        mother_genome: Genome of the selected mother (empty if unresolved)

    Events:
        RESET:         discard the child genome
        GENERATE:      create a child genome from the selected parents
        SUBMIT:        add an agent with the child genome to the next generation
        SUBMIT_RANDOM: add an agent with random weights to the next generation
    """

    def __init__(self,
                 store   : EntityStore,
                 config  : Config | None = None,
                 wheel_id: int           = INVALID_ID,
                 pool_id : int           = INVALID_ID):
        super().__init__()
        config = config if config is not None else Config()

        self._store = store
        self.wheel_id             : int        = wheel_id
        self.pool_id              : int        = pool_id
        self.father_id            : int        = INVALID_ID
        self.mother_id            : int        = INVALID_ID
        self.cut_length_percentage: float      = config.cut_length_percentage
        self.child_genome         : np.ndarray = np.array([])

        self._cached_parents = {}   # role => (agent ID, genome)

    def _selected_parents(self) -> tuple[int, int]:
        wheel = self._store.get_of_type(self.wheel_id, RouletteWheel)
        if wheel is None:
            return self.father_id, self.mother_id
        return wheel.select()

    def _genome(self, role: str, agent_id: int) -> np.ndarray:
        cached = self._cached_parents.get(role)
        if cached is not None and cached[0] == agent_id:
            return cached[1]

        agent  = self._store.get_of_type(agent_id, Agent)
        genome = agent.network.get_weights(self._store) if agent is not None else np.array([])
        self._cached_parents[role] = (agent_id, genome)
        return genome

    @property
    def father_genome(self) -> np.ndarray:
        return self._genome("father", self._selected_parents()[0])

    @property
    def mother_genome(self) -> np.ndarray:
        return self._genome("mother", self._selected_parents()[1])

    def generate(self) -> np.ndarray:
        """Create a new child genome from the selected parents."""
        father_id, mother_id = self._selected_parents()
        father = self._genome("father", father_id)
        mother = self._genome("mother", mother_id)

        if len(father) == 0 or len(mother) == 0:
            logger.warning("[GeneticAlgorithm][{}] Missing parent (father={}, mother={}), no child created",
                           self.id, father_id, mother_id)
            self.child_genome = np.array([])
        else:
            self.child_genome = crossover(father, mother, self.cut_length_percentage)
        return self.child_genome

    def submit(self) -> int:
        """
        Add an agent carrying the child genome to the next generation.

        Returns:
            the ID of the new agent; INVALID_ID if there is no child or no pool
        """
        pool = self._store.get_of_type(self.pool_id, AgentPool)
        if pool is None or len(self.child_genome) == 0:
            return INVALID_ID
        return pool.add_next_generation_agent(self.child_genome)

    def submit_random(self) -> int:
        """Add an agent with random weights to the next generation (INVALID_ID if there is no pool)."""
        pool = self._store.get_of_type(self.pool_id, AgentPool)
        if pool is None:
            return INVALID_ID
        return pool.add_next_generation_agent()

    def handle_event(self, message: str) -> None:
        if message == "RESET":
            self.child_genome = np.array([])
        elif message == "GENERATE":
            self.generate()
        elif message == "SUBMIT":
            self.submit()
        elif message == "SUBMIT_RANDOM":
            self.submit_random()
