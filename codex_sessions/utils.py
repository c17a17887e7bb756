"""Small shared helpers."""

import os
import re

# ${VAR} or ${VAR:-fallback}
_ENV_REF = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)(?::-([^}]*))?\}")


def expand_env_vars(value: object) -> object:
    """Recursively expand `${VAR}` references in parsed YAML.

    `${VAR:-fallback}` uses the fallback when VAR is unset or empty. Unknown
    references without a fallback are left as written.
    """
    if isinstance(value, dict):
        return {k: expand_env_vars(v) for k, v in value.items()}  # type: ignore[misc]
    if isinstance(value, list):
        return [expand_env_vars(item) for item in value]
    if not isinstance(value, str):
        return value

    def _replace(match: re.Match[str]) -> str:
        name, fallback = match.group(1), match.group(2)
        resolved = os.getenv(name)
        if resolved:
            return resolved
        if fallback is not None:
            return fallback
        return resolved if resolved is not None else match.group(0)

    return _ENV_REF.sub(_replace, value)
