"""
Run Package

Configuration, logging setup and the tick loop driving simulations.

Exported Classes:
    Config:     Configuration parameters, from an INI file or defaults
    Simulation: Fixed-rate tick loop

Exported Functions:
    setup_logger: Install the console (and file) logging sinks
"""

from evoprop.run.config       import Config
from evoprop.run.logger_setup import setup_logger
from evoprop.run.simulation   import Simulation

__all__ = ['Config',
           'Simulation',
           'setup_logger']
