#!/usr/bin/env python3
"""
Utility script to run evoprop examples easily.

Usage:
    python scripts/run_example.py gates --gate xor --seconds 60
    python scripts/run_example.py evolution --generations 20
"""

import sys
import argparse
import random
from pathlib import Path

import numpy as np

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from evoprop import Config
from evoprop.run import setup_logger
from examples.trial_gates import Trial_Gates, GATES
from examples.trial_evolution import Trial_Evolution


EXAMPLES = {
    'gates': {
        'config': 'examples/configs/config_gates.ini',
        'description': 'Backpropagation on a logic gate'
    },
    'evolution': {
        'config': 'examples/configs/config_evolution.ini',
        'description': 'Genetic algorithm evolving road agents'
    }
}


def main():
    parser = argparse.ArgumentParser(description='Run evoprop examples')
    parser.add_argument('example', choices=EXAMPLES.keys(),
                        help='Example to run')
    parser.add_argument('--config', default=None,
                        help='INI file to use instead of the example default')
    parser.add_argument('--gate', choices=sorted(GATES), default='xor',
                        help='Logic gate to learn (gates example)')
    parser.add_argument('--seconds', type=float, default=60.0,
                        help='Simulated seconds of training (gates example)')
    parser.add_argument('--generations', type=int, default=20,
                        help='Number of generations (evolution example)')
    parser.add_argument('--seed', type=int, default=None,
                        help='Random seed for reproducible runs')
    parser.add_argument('--log-level', default='INFO',
                        help='Logging level (DEBUG, INFO, WARNING, ...)')
    parser.add_argument('--log-file', default=None,
                        help='Also write the log to this file')

    args = parser.parse_args()
    setup_logger(level=args.log_level, log_file=args.log_file)

    if args.seed is not None:
        random.seed(args.seed)
        np.random.seed(args.seed)

    example = EXAMPLES[args.example]
    print(f"Running {example['description']}...")

    config = Config(args.config or example['config'])

    if args.example == 'gates':
        trial = Trial_Gates(config, gate=args.gate)
        mse = trial.run(seconds=args.seconds)
        print(f"\nFinal mean squared error: {mse:.6f}")
    else:
        trial = Trial_Evolution(config)
        trial.run(generations=args.generations)
        print(f"\nGenerations: {trial.pool.generation - 1}, ticks: {trial.simulation.ticks}")


if __name__ == '__main__':
    main()
