import os
from pathlib import Path

import yaml
from pydantic import ValidationError

from footprint.rules.models import Rules

RULES_ENV_VAR = "FOOTPRINT_RULES_PATH"


def default_rules_path() -> Path:
    """Rules path from FOOTPRINT_RULES_PATH, else ./rules.yaml."""
    return Path(os.environ.get(RULES_ENV_VAR, "rules.yaml")).resolve()


def _extract_yaml(content: str) -> str:
    """
    Return the first ```yaml fenced block if the file has one,
    otherwise the whole file.
    """
    block: list[str] = []
    in_block = False

    for line in content.splitlines():
        stripped = line.strip()
        if not in_block and stripped.startswith("```yaml"):
            in_block = True
            continue
        if in_block and stripped.startswith("```"):
            return "\n".join(block)
        if in_block:
            block.append(line)

    # Unterminated fence still counts as a block
    return "\n".join(block) if in_block else content


def load_rules(path: Path | None = None) -> Rules:
    """
    Load and validate the rules file.
    Raises FileNotFoundError if file missing.
    Raises ValueError if the YAML or the schema is invalid.
    """
    path = path or default_rules_path()
    if not path.exists():
        raise FileNotFoundError(f"Rules file not found at: {path}")

    clean_content = _extract_yaml(path.read_text(encoding="utf-8"))

    try:
        data = yaml.safe_load(clean_content)
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML syntax in rules file: {e}") from e

    try:
        return Rules.model_validate(data)
    except ValidationError as e:
        raise ValueError(f"Rules validation failed:\n{e}") from e
