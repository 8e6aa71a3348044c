"""
Agent Pool Module

This module implements the AgentPool, which creates the agents of the next
generation, drives the agents of the current one, and swaps the two at each
generation change.

Classes:
    AgentPool: Keeps track of the current and next generation of agents
"""

from loguru import logger

from evoprop.activations       import ActivationFunction
from evoprop.evolution.agent   import Agent
from evoprop.evolution.fitness import Checkpoint
from evoprop.network           import build_from_template
from evoprop.run.config        import Config
from evoprop.store             import Entity, EntityStore, EventListener, INVALID_ID

class AgentPool(Entity, EventListener):
    """
    The population of agents, split in a current and a next generation.

    Agents of the next generation are created "parked" (under manual control)
    and only start driving once their generation is promoted. Promoting a
    generation destroys the previous one, agents and networks alike; as removal
    from the store is deferred to the end of the tick, the agents can still be
    read by every other component during that tick.

    Public Attributes:
        spawn_count:            The number of agents in a generation
        start_checkpoint_id:    ID of the Checkpoint where agents spawn (spawn at the origin if none)
        generation:             The generation counter, incremented at every promotion
        current_generation_ids: IDs of the agents being simulated
        next_generation_ids:    IDs of the agents waiting for the next generation

    Public Properties:
        remaining_slots: The number of agents still missing in the next generation

    Public Methods:
        add_next_generation_agent(weights): Create an agent for the next generation
        create_random_generation():         Fill the next generation with random agents
        start_next_generation():            Destroy the current generation and promote the next one
        discard_next_generation():          Destroy the agents waiting for the next generation
        update(elapsed_ms):                 Drive the agents of the current generation

    Events:
        START_NEXT_GEN:   create a random generation if none is waiting, then promote it
        DISCARD_NEXT_GEN: discard_next_generation()
    """

    def __init__(self, store: EntityStore, config: Config | None = None):
        super().__init__()
        config = config if config is not None else Config()

        self._store  = store
        self._config = config

        self.spawn_count           : int       = config.spawn_count
        self.start_checkpoint_id   : int       = INVALID_ID
        self.generation            : int       = 1
        self.current_generation_ids: list[int] = []
        self.next_generation_ids   : list[int] = []

    @property
    def remaining_slots(self) -> int:
        return self.spawn_count - len(self.next_generation_ids)

    def add_next_generation_agent(self, weights=None) -> int:
        """
        Create a new agent with its own network, and add it to the next generation.

        Parameters:
            weights: genome to load into the new network; if None, the network
                     keeps its random Xavier-initialized weights

        Returns:
            the ID of the new agent
        """
        agent = Agent(sensor_count=self._config.sensor_count)
        agent.generation = self.generation
        agent.autonomous = False

        start = self._store.get_of_type(self.start_checkpoint_id, Checkpoint)
        if start is not None:
            agent.x, agent.y = start.x, start.y

        self._store.insert(agent)

        # Throttle and steering range from -1 to 1
        agent.network = build_from_template(self._store,
                                            self._config.agent_template,
                                            data_source_id    = agent.id,
                                            hidden_activation = self._config.hidden_activation,
                                            output_activation = ActivationFunction.TANH)
        if weights is not None:
            agent.network.set_weights(self._store, weights)

        self.next_generation_ids.append(agent.id)
        return agent.id

    def create_random_generation(self) -> None:
        for _ in range(self.spawn_count):
            self.add_next_generation_agent()

    def _destroy_agents(self, agent_ids: list[int]) -> None:
        for agent_id in agent_ids:
            agent = self._store.get_of_type(agent_id, Agent)
            if agent is None:
                continue
            agent.network.destroy(self._store)
            self._store.remove(agent_id)

    def start_next_generation(self) -> None:
        """Destroy the current generation and let the next generation drive."""
        self._destroy_agents(self.current_generation_ids)

        for agent_id in self.next_generation_ids:
            agent = self._store.get_of_type(agent_id, Agent)
            if agent is not None:
                agent.autonomous = True

        self.current_generation_ids = list(self.next_generation_ids)
        self.next_generation_ids.clear()
        self.generation += 1

        logger.info("[AgentPool][{}] Generation {} started with {} agents",
                    self.id, self.generation, len(self.current_generation_ids))

    def discard_next_generation(self) -> None:
        if self.next_generation_ids:
            logger.info("[AgentPool][{}] Discarding {} agents of the next generation",
                        self.id, len(self.next_generation_ids))
        self._destroy_agents(self.next_generation_ids)
        self.next_generation_ids.clear()

    def update(self, elapsed_ms: float = 0.0) -> None:
        for agent_id in self.current_generation_ids:
            agent = self._store.get_of_type(agent_id, Agent)
            if agent is not None:
                agent.update(self._store)

    def handle_event(self, message: str) -> None:
        if message == "START_NEXT_GEN":
            if not self.next_generation_ids:
                self.create_random_generation()
            self.start_next_generation()
        elif message == "DISCARD_NEXT_GEN":
            self.discard_next_generation()
