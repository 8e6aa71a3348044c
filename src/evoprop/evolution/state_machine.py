"""
Evolution State Machine Module

This module orchestrates the generation loop of the genetic algorithm:

    Idle -> Initializing -> Simulating -> Selecting <-> CreateChild -> Initializing -> ...

Every transition (except an explicit STOP) goes through a Wait state holding
the machine for 'state_change_time_ms', to pace the loop for an audience.
The states command the AgentPool, the RouletteWheel and the GeneticAlgorithm
through event messages.

Classes:
    State:        Base class of all states
    StateMachine: Entity running the generation loop
"""

from abc import ABC, abstractmethod

from loguru import logger

from evoprop.evolution.agent             import Agent
from evoprop.evolution.genetic_algorithm import GeneticAlgorithm
from evoprop.evolution.population        import AgentPool
from evoprop.evolution.roulette          import RouletteWheel
from evoprop.run.config                  import Config
from evoprop.store                       import Entity, EntityStore, EventChannel, EventListener, INVALID_ID

class State(ABC):
    """
    A state of the evolution loop.

    Public Methods:
        update(elapsed_ms):    Run the state; returns the next state (self to stay)
        handle_event(message): React to an event message (ignored by default)
    """

    name = "State"

    def __init__(self, machine: 'StateMachine'):
        self.machine = machine

    @abstractmethod
    def update(self, elapsed_ms: float) -> 'State':
        pass

    def handle_event(self, message: str) -> None:
        pass

    def __repr__(self):
        return self.name

class IdleState(State):
    """Waits for a START message."""

    name = "Idle"

    def __init__(self, machine: 'StateMachine'):
        super().__init__(machine)
        self._next_state: State = self

    def update(self, elapsed_ms: float) -> State:
        return self._next_state

    def handle_event(self, message: str) -> None:
        if message == "START":
            self._next_state = InitializingState(self.machine)

class WaitState(State):
    """Holds the machine for 'state_change_time_ms' before entering the next state."""

    name = "Wait"

    def __init__(self, machine: 'StateMachine', next_state: State):
        super().__init__(machine)
        self.next_state = next_state
        self._elapsed   = 0.0

    def update(self, elapsed_ms: float) -> State:
        self._elapsed += elapsed_ms
        return self.next_state if self._elapsed >= self.machine.state_change_time_ms else self

class InitializingState(State):
    """Promotes the next generation (random when none was bred) to the current one."""

    name = "Initializing"

    def update(self, elapsed_ms: float) -> State:
        if self.machine.pool is None:
            return IdleState(self.machine)
        self.machine.send(self.machine.pool_id, "START_NEXT_GEN")
        return SimulatingState(self.machine)

class SimulatingState(State):
    """Waits until every agent of the current generation has crashed or finished."""

    name = "Simulating"

    def update(self, elapsed_ms: float) -> State:
        pool = self.machine.pool
        if pool is None:
            return IdleState(self.machine)

        store = self.machine.store
        all_terminal = True
        for agent_id in pool.current_generation_ids:
            agent = store.get_of_type(agent_id, Agent)
            if agent is not None and not agent.record.is_terminal:
                all_terminal = False
                break

        return SelectingState(self.machine) if all_terminal else self

class SelectingState(State):
    """Spins the roulette wheel and waits for it to stop."""

    name = "Selecting"

    def __init__(self, machine: 'StateMachine'):
        super().__init__(machine)
        self._has_spun = False

    def update(self, elapsed_ms: float) -> State:
        wheel = self.machine.wheel
        if wheel is None:
            return IdleState(self.machine)

        if not self._has_spun:
            message = "SPIN_INSTANT_STOP" if self.machine.state_change_time_ms == 0 else "SPIN"
            self.machine.send(self.machine.wheel_id, message)
            self._has_spun = True
        elif not wheel.is_spinning:
            return CreateChildState(self.machine)

        return self

class CreateChildState(State):
    """
    Adds one agent to the next generation: a child of the selected parents,
    or a random agent once few slots remain (or when no child could be bred).
    """

    name = "CreateChild"

    def update(self, elapsed_ms: float) -> State:
        machine = self.machine
        ga      = machine.genetic_algorithm
        pool    = machine.pool
        if ga is None or pool is None:
            return IdleState(machine)

        if pool.remaining_slots <= 0:
            return InitializingState(machine)

        if pool.remaining_slots > machine.random_agent_count:
            machine.send(machine.genetic_algorithm_id, "GENERATE")
            if len(ga.child_genome) > 0:
                machine.send(machine.genetic_algorithm_id, "SUBMIT")
            else:
                logger.warning("[StateMachine][{}] No child bred, adding a random agent instead", machine.id)
                machine.send(machine.genetic_algorithm_id, "SUBMIT_RANDOM")
        else:
            machine.send(machine.genetic_algorithm_id, "SUBMIT_RANDOM")

        return InitializingState(machine) if pool.remaining_slots <= 0 else SelectingState(machine)

class StateMachine(Entity, EventListener):
    """
    Runs the generation loop of the genetic algorithm.

    Public Attributes:
        pool_id:              ID of the AgentPool
        wheel_id:             ID of the RouletteWheel
        genetic_algorithm_id: ID of the GeneticAlgorithm
        state_change_time_ms: Time each state is held before advancing (0 for no delay)
        random_agent_count:   Slots of the next generation filled with random agents
        state:                The current State

    Public Properties:
        state_name:        Name of the current state
        pool:              The AgentPool (None if it does not resolve)
        wheel:             The RouletteWheel (None if it does not resolve)
        genetic_algorithm: The GeneticAlgorithm (None if it does not resolve)

    Public Methods:
        update(elapsed_ms): Run the current state, moving to the next one when it is done

    Events:
        STOP:     abandon the current generation loop and return to Idle
        NO_DELAY: stop pausing between states
        other:    forwarded to the current state (e.g. START while Idle)
    """

    def __init__(self,
                 store               : EntityStore,
                 events              : EventChannel | None = None,
                 config              : Config | None       = None,
                 pool_id             : int                 = INVALID_ID,
                 wheel_id            : int                 = INVALID_ID,
                 genetic_algorithm_id: int                 = INVALID_ID):
        super().__init__()
        config = config if config is not None else Config()

        self.store   = store
        self._events = events if events is not None else EventChannel(store)

        self.pool_id             : int   = pool_id
        self.wheel_id            : int   = wheel_id
        self.genetic_algorithm_id: int   = genetic_algorithm_id
        self.state_change_time_ms: float = config.state_change_time_ms
        self.random_agent_count  : int   = config.random_agent_count
        self.state               : State = IdleState(self)

    @property
    def state_name(self) -> str:
        return self.state.name

    @property
    def pool(self) -> AgentPool | None:
        return self.store.get_of_type(self.pool_id, AgentPool)

    @property
    def wheel(self) -> RouletteWheel | None:
        return self.store.get_of_type(self.wheel_id, RouletteWheel)

    @property
    def genetic_algorithm(self) -> GeneticAlgorithm | None:
        return self.store.get_of_type(self.genetic_algorithm_id, GeneticAlgorithm)

    def send(self, target_id: int, message: str) -> bool:
        return self._events.send(target_id, message)

    def update(self, elapsed_ms: float = 0.0) -> None:
        next_state = self.state.update(elapsed_ms)
        if next_state is self.state:
            return

        if not isinstance(self.state, WaitState) and self.state_change_time_ms > 0:
            next_state = WaitState(self, next_state)

        logger.debug("[StateMachine][{}] {} -> {}", self.id, self.state, next_state)
        self.state = next_state

    def handle_event(self, message: str) -> None:
        if message == "STOP":
            logger.info("[StateMachine][{}] Stopped in state {}", self.id, self.state)
            self.state = IdleState(self)
            if self.genetic_algorithm is not None:
                self.send(self.genetic_algorithm_id, "RESET")
            if self.pool is not None:
                self.send(self.pool_id, "DISCARD_NEXT_GEN")
        elif message == "NO_DELAY":
            self.state_change_time_ms = 0
        else:
            self.state.handle_event(message)
