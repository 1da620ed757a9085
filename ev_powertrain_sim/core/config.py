"""
Configuration for EV powertrain simulation.

Configuration is read from and written to YAML. Every section is optional; missing
values keep their defaults.

    parameters:          # SimulationParameters fields
      battery_voltage: 400.0
      drive_mode: Normal
    engine:              # EngineConfig fields
      max_step: 0.1
      thermal_model: true
    scheduler:
      timing_mode: wall_clock   # or 'fixed'
      nominal_step: 0.01667
    history:
      capacity: 200
    output:
      directory: data/output
"""

import os
import math
import logging
from typing import Dict, Optional, Any

import yaml

from ..exceptions import ConfigurationError, ParameterError
from ..utils.constants import (
    TimingMode, DEFAULT_NOMINAL_STEP, DEFAULT_HISTORY_CAPACITY
)
from .parameters import SimulationParameters
from .physics import EngineConfig

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

logger = logging.getLogger("Config")


class SimulationConfig:
    """Simulation configuration with defaults, loadable from a YAML file."""

    def __init__(self, config_path: Optional[str] = None):
        """
        Initialize configuration with default values or from file.

        Args:
            config_path: Optional path to YAML configuration file
        """
        self.parameters = SimulationParameters()
        self.engine = EngineConfig()
        self.timing_mode = TimingMode.WALL_CLOCK
        self.nominal_step = DEFAULT_NOMINAL_STEP   # s
        self.history_capacity = DEFAULT_HISTORY_CAPACITY
        self.output_directory = os.path.join('data', 'output')

        if config_path:
            self.load_from_file(config_path)

    def load_from_file(self, config_path: str):
        """
        Load configuration from YAML file.

        Args:
            config_path: Path to YAML configuration file

        Raises:
            FileNotFoundError: If the file does not exist
            ConfigurationError: If the file content is invalid
        """
        if not os.path.exists(config_path):
            raise FileNotFoundError(f"Simulation configuration file not found: {config_path}")

        with open(config_path, 'r') as f:
            try:
                config = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ConfigurationError(f"Invalid YAML in {config_path}: {str(e)}") from e

        self.update_from_dict(config or {})
        logger.info(f"Simulation configuration loaded from {config_path}")

    def update_from_dict(self, config: Dict[str, Any]):
        """
        Update configuration from a dictionary with the YAML layout.

        Every section is validated before any of them is applied, so a rejected
        configuration leaves this object unchanged.

        Raises:
            ConfigurationError: If a section or value is invalid
        """
        if not isinstance(config, dict):
            raise ConfigurationError("Configuration must be a mapping")

        parameters = self.parameters
        engine = self.engine
        timing_mode = self.timing_mode
        nominal_step = self.nominal_step
        history_capacity = self.history_capacity
        output_directory = self.output_directory

        try:
            if 'parameters' in config:
                parameters = parameters.with_values(**_section(config, 'parameters'))

            if 'engine' in config:
                engine_values = engine.to_dict()
                engine_values.update(_section(config, 'engine'))
                engine = EngineConfig.from_dict(engine_values)

            if 'scheduler' in config:
                scheduler = _section(config, 'scheduler')
                mode = scheduler.get('timing_mode', timing_mode.name)
                try:
                    timing_mode = TimingMode[str(mode).upper()]
                except KeyError:
                    raise ConfigurationError(f"Unknown timing mode: {mode}") from None
                nominal_step = float(scheduler.get('nominal_step', nominal_step))
                if not math.isfinite(nominal_step) or nominal_step <= 0:
                    raise ConfigurationError(f"Scheduler nominal_step must be a positive number, got {nominal_step!r}")

            if 'history' in config:
                history_capacity = _section(config, 'history').get('capacity', history_capacity)
                if isinstance(history_capacity, bool) or not isinstance(history_capacity, int) \
                        or history_capacity <= 0:
                    raise ConfigurationError(
                        f"History capacity must be a positive integer, got {history_capacity!r}")

            if 'output' in config:
                output_directory = str(_section(config, 'output').get('directory', output_directory))

        except ParameterError as e:
            raise ConfigurationError(f"Invalid parameter in configuration: {str(e)}") from e
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"Invalid configuration value: {str(e)}") from e

        self.parameters = parameters
        self.engine = engine
        self.timing_mode = timing_mode
        self.nominal_step = nominal_step
        self.history_capacity = history_capacity
        self.output_directory = output_directory

    def save_to_file(self, config_path: str):
        """
        Save configuration to YAML file.

        Args:
            config_path: Path to save configuration
        """
        directory = os.path.dirname(config_path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        with open(config_path, 'w') as f:
            yaml.dump(self.to_dict(), f, default_flow_style=False, sort_keys=False)

        logger.info(f"Simulation configuration saved to {config_path}")

    def to_dict(self) -> Dict:
        """
        Convert configuration to dictionary.

        Returns:
            Dictionary with the YAML layout
        """
        return {
            'parameters': self.parameters.to_dict(),
            'engine': self.engine.to_dict(),
            'scheduler': {
                'timing_mode': self.timing_mode.name.lower(),
                'nominal_step': self.nominal_step,
            },
            'history': {
                'capacity': self.history_capacity,
            },
            'output': {
                'directory': self.output_directory,
            },
        }


def _section(config: Dict, name: str) -> Dict:
    section = config[name]
    if section is None:
        return {}
    if not isinstance(section, dict):
        raise ConfigurationError(f"Configuration section '{name}' must be a mapping")
    return section
