import os
from pathlib import Path

import yaml
from pydantic import ValidationError

from src.core.errors import ConfigurationError
from src.rules.models import Rules

RULES_PATH_ENV = "SEO_RULES_PATH"
DEFAULT_RULES_FILENAME = "rules.yaml"


def default_rules_path(base_dir: Path | None = None) -> Path:
    """Rules path from the environment, else rules.yaml under base_dir."""
    override = os.environ.get(RULES_PATH_ENV)
    if override:
        return Path(override)
    return (base_dir or Path.cwd()) / DEFAULT_RULES_FILENAME


def _extract_yaml(content: str) -> str:
    # Rules files may be markdown documents with a single ```yaml block
    lines = content.splitlines()
    yaml_lines = []
    in_block = False
    found_block = False

    for line in lines:
        s_line = line.strip()
        if s_line.startswith("```yaml"):
            in_block = True
            found_block = True
            continue
        if in_block and s_line.startswith("```"):
            break
        if in_block:
            yaml_lines.append(line)

    return "\n".join(yaml_lines) if found_block else content


def parse_rules(content: str) -> Rules:
    """
    Parse and validate rules from text.
    Raises ConfigurationError on bad YAML or schema violations.
    """
    try:
        data = yaml.safe_load(_extract_yaml(content))
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML syntax in rules file: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigurationError("Rules file must contain a mapping at the top level")

    try:
        return Rules.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError(f"Rules validation failed:\n{e}") from e


def load_rules(path: Path) -> Rules:
    """
    Load and validate the rules file.
    Raises ConfigurationError if the file is missing or invalid.
    """
    if not path.exists():
        raise ConfigurationError(f"Rules file not found at: {path}")

    with open(path) as f:
        content = f.read()

    return parse_rules(content)
