"""Runtime configuration resolved from the environment.

Settings are read from `KREPKO_*` environment variables. Command-line
options take priority: the CLI passes explicit values as init arguments,
which pydantic-settings prefers over environment sources.
"""

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from krepko.models import SettingsModel
from krepko.names import Mode

DEFAULT_BASE_URL = 'http://localhost:3000'
DEFAULT_PATTERN = '**/*.krepko.py'


class RunSettings(SettingsModel):
    """Configuration of a single run."""

    model_config = SettingsConfigDict(
        env_prefix='KREPKO_',
        frozen=True,
        extra='ignore',
    )

    base_url: str = Field(
        default=DEFAULT_BASE_URL,
        title='Base URL',
        description=(
            'Default base URL for flows declared without an explicit one. '
            'Read from `KREPKO_BASE_URL`.'
        ),
    )

    mode: Mode = Field(
        default=Mode.CI,
        title='Run mode',
        description=(
            'Controls how draft flows affect the exit code. '
            'Read from `KREPKO_MODE`.'
        ),
    )

    pattern: str = Field(
        default=DEFAULT_PATTERN,
        title='Flow files pattern',
        description='Recursive glob pattern used to discover flow files.',
    )
