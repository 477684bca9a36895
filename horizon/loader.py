"""
YAML configuration loader with schema validation.

Loads simulation parameters from a YAML file and validates them against
the bundled JSON schema before building a SimulationConfig.
"""

import yaml
import json
from pathlib import Path
from typing import Optional
import jsonschema

from .data_types import SimulationConfig
from .errors import ConfigLoadError, InvalidArgumentError

SCHEMA_DIR = Path(__file__).parent / "schemas"
CONFIG_SCHEMA = "simulation.schema.json"


def load_yaml(file_path: Path) -> dict:
    """Load YAML file and return parsed dict"""
    file_path = Path(file_path)
    if not file_path.exists():
        raise ConfigLoadError(f"File not found: {file_path}")

    try:
        with open(file_path, 'r') as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigLoadError(f"YAML parse error in {file_path}: {e}")

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigLoadError(f"Expected a mapping at top level of {file_path}")
    return data


def validate_against_schema(data: dict, schema_path: Path, data_path: Path):
    """Validate data dict against JSON schema"""
    if not schema_path.exists():
        print(f"[WARN] Schema {schema_path} not found, skipping validation of {data_path}")
        return

    try:
        with open(schema_path, 'r') as f:
            schema = json.load(f)
        jsonschema.validate(instance=data, schema=schema)
    except jsonschema.ValidationError as e:
        raise ConfigLoadError(f"Validation error in {data_path}: {e.message}")
    except json.JSONDecodeError as e:
        raise ConfigLoadError(f"Invalid JSON schema {schema_path}: {e}")


def config_from_dict(data: dict) -> SimulationConfig:
    """Build SimulationConfig from a parsed 'simulation' section"""
    try:
        return SimulationConfig(**data)
    except (TypeError, InvalidArgumentError) as e:
        raise ConfigLoadError(f"Invalid simulation config: {e}")


def load_config(file_path: Path, schema_dir: Optional[Path] = SCHEMA_DIR) -> SimulationConfig:
    """
    Load simulation configuration from YAML.

    The file holds a top-level 'simulation' mapping; keys left out fall
    back to the defaults in constants.py.

    Args:
        file_path: Path to YAML file
        schema_dir: Directory with JSON schemas (None disables validation)

    Returns:
        SimulationConfig
    """
    data = load_yaml(file_path)

    if schema_dir:
        schema_path = Path(schema_dir) / CONFIG_SCHEMA
        validate_against_schema(data, schema_path, file_path)

    return config_from_dict(data.get('simulation', {}))
