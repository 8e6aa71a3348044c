import configparser
import os
from evoprop.activations import ActivationFunction, get_activation

class Config:

    def __init__(self, config_file: str | None = None):
        """
        Initialize Config by parsing an INI file, or create a default Config.

        Parameters:
            config_file: Path to the INI configuration file.
                         If None, creates a Config holding default values,
                         which can be changed by manual attribute setting.
        """

        # Default config for testing/manual setup
        if config_file is None:
            self.network_template  = "2+1,2+1,1"
            self.hidden_activation = ActivationFunction.TANH
            self.output_activation = ActivationFunction.SIGMOID

            # Set defaults for the backpropagation trainer
            self.iterations_per_second = 2.0
            self.learning_rate         = 0.1
            self.momentum              = 0.8
            self.batch_size            = 100
            self.speed_up_factor       = 1.5

            # Set defaults for fitness tracking
            self.tick_rate                    = 60
            self.max_seconds_without_progress = 3.0
            self.progress_delta               = 50.0
            self.min_fitness                  = 2.0
            self.finish_distance              = 10.0

            # Set defaults for the roulette wheel
            self.wheel_friction    = 0.05
            self.spin_acceleration = 0.5
            self.min_velocity      = 0.001

            # Set defaults for the genetic algorithm
            self.cut_length_percentage = 30

            # Set defaults for the evolution loop
            self.spawn_count          = 10
            self.sensor_count         = 10
            self.hidden_layer_size    = 5
            self.random_agent_count   = 2
            self.state_change_time_ms = 1000

            return

        if not os.path.exists(config_file):
            raise FileNotFoundError(f"Configuration file '{config_file}' not found")

        parser = configparser.ConfigParser()
        parser.read(config_file)

        # Sentinel for missing default values
        _NO_DEFAULT = object()

        # Helper function to safely parse values
        def get_value(section, key, value_type, default=_NO_DEFAULT):
            try:
                raw_value = parser.get(section, key)
                if raw_value.lower() == 'none':
                    return None
                if value_type == int:
                    return parser.getint(section, key)
                elif value_type == float:
                    return parser.getfloat(section, key)
                elif value_type == bool:
                    return parser.getboolean(section, key)
                elif value_type == str:
                    return raw_value
            except (configparser.NoSectionError, configparser.NoOptionError):
                if default is not _NO_DEFAULT:
                    return default
                raise

        # [NETWORK]

        # The template used to generate a layered network.
        # A comma-separated list of layers, each one written as "count[+biasCount]".
        # Example: '2+1,2+1,1' generates a network with 2 normal nodes and 1 bias
        # node in the first and second layer, and a last layer with only 1 node.
        self.network_template = get_value('NETWORK', 'network_template', str, default="2+1,2+1,1")

        # Activation functions of the hidden and output layers.
        # Allowed values: identity, sigmoid, tanh.
        # Input layer and bias nodes always use identity.
        self.hidden_activation = get_activation(get_value('NETWORK', 'hidden_activation', str, default='tanh'))
        self.output_activation = get_activation(get_value('NETWORK', 'output_activation', str, default='sigmoid'))

        # [TRAINER]

        # The number of training iterations (one dataset sample each) per second.
        # Independent of the simulation tick rate.
        self.iterations_per_second = get_value('TRAINER', 'iterations_per_second', float, default=2.0)

        # The amount of accumulated weight correction applied to connections (1.0 = 100%).
        self.learning_rate = get_value('TRAINER', 'learning_rate', float, default=0.1)

        # The fraction of the previous weight correction carried over to the next one.
        self.momentum = get_value('TRAINER', 'momentum', float, default=0.8)

        # How many samples to accumulate corrections for before they are applied.
        # Corrections are always applied at the last sample of the dataset.
        self.batch_size = get_value('TRAINER', 'batch_size', int, default=100)

        # The factor applied to 'iterations_per_second' by a SPEED_UP event.
        self.speed_up_factor = get_value('TRAINER', 'speed_up_factor', float, default=1.5)

        # [FITNESS]

        # The number of fixed simulation ticks per second.
        self.tick_rate = get_value('FITNESS', 'tick_rate', int, default=60)

        # The number of seconds without any progress before an agent is 'crashed'.
        self.max_seconds_without_progress = get_value('FITNESS', 'max_seconds_without_progress', float, default=3.0)

        # The increase in fitness (distance along the path) that counts as progress.
        self.progress_delta = get_value('FITNESS', 'progress_delta', float, default=50.0)

        # The lowest fitness an evaluated agent can have; keeps it
        # distinguishable from agents that were never evaluated.
        self.min_fitness = get_value('FITNESS', 'min_fitness', float, default=2.0)

        # Agents closer than this to the last path segment are 'finished'.
        self.finish_distance = get_value('FITNESS', 'finish_distance', float, default=10.0)

        # [ROULETTE]

        # The fraction of angular velocity lost every tick.
        self.wheel_friction = get_value('ROULETTE', 'wheel_friction', float, default=0.05)

        # The maximum angular velocity added by a single spin.
        self.spin_acceleration = get_value('ROULETTE', 'spin_acceleration', float, default=0.5)

        # Angular velocities below this value stop the wheel.
        self.min_velocity = get_value('ROULETTE', 'min_velocity', float, default=0.001)

        # [GENETIC]

        # The amount of genes (in percentage) transferred from the father when creating child genes.
        self.cut_length_percentage = get_value('GENETIC', 'cut_length_percentage', int, default=30)

        # [EVOLUTION]

        # The number of agents in each generation.
        self.spawn_count = get_value('EVOLUTION', 'spawn_count', int, default=10)

        # The number of sensors of each agent (the size of the network input layer).
        self.sensor_count = get_value('EVOLUTION', 'sensor_count', int, default=10)

        # The number of nodes in the hidden layer of agent networks.
        self.hidden_layer_size = get_value('EVOLUTION', 'hidden_layer_size', int, default=5)

        # When this few (or fewer) slots are left in the next generation,
        # they are filled with random agents instead of offspring.
        self.random_agent_count = get_value('EVOLUTION', 'random_agent_count', int, default=2)

        # The time (in milliseconds) each state of the evolution loop is held
        # before advancing. Use 0 to advance immediately.
        self.state_change_time_ms = get_value('EVOLUTION', 'state_change_time_ms', int, default=1000)

    @property
    def agent_template(self) -> str:
        """Template of the networks driving the agents: sensors, hidden layer, throttle & steering."""
        return f"{self.sensor_count},{self.hidden_layer_size},2"

    def __setattr__(self, name, value):
        """
        Override 'setattr' to automatically parse activation functions when set.
        This allows users to write config.hidden_activation = "sigmoid" and have
        it automatically converted to the corresponding ActivationFunction.
        """
        if name in ('hidden_activation', 'output_activation'):
            value = get_activation(value)
        super().__setattr__(name, value)
