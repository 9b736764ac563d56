import os
import re
import yaml
from pathlib import Path
from typing import Any, Dict

ENV_VAR_PATTERN = re.compile(r"\$\{([^}:]+)(?::([^}]+))?\}")

CONFIG_FILE_NAME = "keelson.yaml"

ALLOWED_SECTIONS = {"keelson", "site", "aliases", "config", "databases"}

def interpolate_env_vars(content: str) -> str:
    """Replace ${VAR} or ${VAR:default} with environment variables."""
    def replace_match(match: re.Match) -> str:
        var_name = match.group(1)
        default_value = match.group(2) if match.group(2) is not None else ""
        return os.environ.get(var_name, default_value)

    return ENV_VAR_PATTERN.sub(replace_match, content)

def load_config(path: Path) -> Dict[str, Any]:
    """
    Load keelson.yaml with environment variable interpolation.

    Keeps only the known sections: keelson, site, aliases, config, databases.
    A missing file yields an empty dict; a malformed one raises yaml.YAMLError.
    """
    if not path.is_file():
        return {}

    content = path.read_text()
    interpolated_content = interpolate_env_vars(content)
    full_config = yaml.safe_load(interpolated_content) or {}

    if not isinstance(full_config, dict):
        raise yaml.YAMLError(f"{path} must contain a mapping at the top level.")

    return {k: v for k, v in full_config.items() if k in ALLOWED_SECTIONS}
