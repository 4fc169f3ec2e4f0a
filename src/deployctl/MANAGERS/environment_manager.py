"""
Validation of the application's environment file before anything is
built or deployed.
"""
import logging
import os
import shutil
from typing import Dict, Iterable, List, Mapping, Optional, Set

from jinja2 import Template

from ..MODELS.orchestration_config import EnvironmentSpec, SettingKind
from ..PARSERS.env_parser import EnvParser
from ..exceptions import InvalidValue, MissingConfigFile, MissingKey, PlaceholderValue

logger = logging.getLogger(__name__)

DEFAULT_ENV_TEMPLATE = """# API Keys
{% for key in required_keys -%}
{{ key }}={{ placeholder_for(key) }}
{% endfor %}
# Frontend API URL
VITE_API_URL={{ api_url }}

# Database (if using)
POSTGRES_DB=rfq_alchemy
POSTGRES_USER=user
POSTGRES_PASSWORD=password
"""

_TRUE_VALUES = {"1", "true", "yes", "y", "on"}
_FALSE_VALUES = {"0", "false", "no", "n", "off"}


def placeholder_for(key: str) -> str:
    """The placeholder written for `key` into a freshly created env file."""
    return f"your_{key.lower()}_here"


class EnvironmentValidator:
    """
    Checks that the environment file exists, holds every required key and
    no key still carries a placeholder value.
    """

    def __init__(
        self,
        spec: EnvironmentSpec,
        base_dir: str = ".",
        environ: Optional[Mapping[str, str]] = None,
        api_url: str = "http://localhost:8000",
    ):
        """
        Initializes the validator.

        :param spec: Which file to read and what it must contain.
        :param base_dir: Directory the env file and template are relative to.
        :param environ: Process environment; defaults to os.environ.
        :param api_url: Backend URL written into a freshly created env file.
        """
        self.spec = spec
        self.base_dir = base_dir
        self.environ = environ if environ is not None else os.environ
        self.api_url = api_url
        self.parser = EnvParser()
        self._materialized = False

    @property
    def env_path(self) -> str:
        return os.path.join(self.base_dir, self.spec.file)

    @property
    def template_path(self) -> str:
        return os.path.join(self.base_dir, self.spec.template)

    def load(self, keys: Iterable[str] = ()) -> Dict[str, str]:
        """
        Loads the env file. Process environment values only fill in
        `keys` the file does not define.

        :param keys: Keys that may come from the process environment.
        :return: The merged values.
        """
        values: Dict[str, str] = {}
        if os.path.exists(self.env_path):
            values.update(self.parser.parse(self.env_path))
        for key in keys:
            if key not in values and key in self.environ:
                values[key] = self.environ[key]
        return values

    def validate(
        self,
        required_keys: Optional[Iterable[str]] = None,
        placeholders: Optional[Iterable[str]] = None,
    ) -> Dict[str, str]:
        """
        Validates the environment configuration.

        :param required_keys: Keys that must be set; defaults to the spec's.
        :param placeholders: Sentinel values that count as unset; defaults to the spec's.
        :return: The validated values.
        :raises MissingConfigFile: If the env file does not exist (it is created first).
        :raises MissingKey: If a required key is absent.
        :raises PlaceholderValue: If a required key still holds a placeholder.
        :raises InvalidValue: If a typed setting does not parse.
        """
        required = list(self.spec.required_keys if required_keys is None else required_keys)
        sentinels = self._sentinels(required, placeholders)
        keys = required + list(self.spec.typed_keys)

        if not os.path.exists(self.env_path):
            values = self.load(keys)
            if self._satisfied(required, sentinels, values):
                logger.debug("%s not found, using process environment", self.env_path)
                self._check_typed(values)
                return values
            created_from = self.materialize()
            raise MissingConfigFile(self.spec.file, created_from)

        values = self.load(keys)
        for key in required:
            if key not in values:
                raise MissingKey(key, self.spec.file)
        for key in required:
            if values[key] in sentinels:
                raise PlaceholderValue(key, self.spec.file)
        self._check_typed(values)
        return values

    def materialize(self) -> Optional[str]:
        """
        Creates the env file from the template, or from the built-in
        defaults when there is no template. Runs at most once per
        validator and never overwrites an existing file.

        :return: What the file was created from, or None if nothing was written.
        """
        if self._materialized or os.path.exists(self.env_path):
            return None
        self._materialized = True

        parent = os.path.dirname(self.env_path)
        if parent:
            os.makedirs(parent, exist_ok=True)

        if os.path.exists(self.template_path):
            logger.info("Copying %s to %s", self.template_path, self.env_path)
            shutil.copyfile(self.template_path, self.env_path)
            return self.spec.template

        content = Template(DEFAULT_ENV_TEMPLATE).render(
            required_keys=self.spec.required_keys,
            placeholder_for=placeholder_for,
            api_url=self.api_url,
        )
        with open(self.env_path, "w") as f:
            f.write(content)
        logger.info("Created %s from built-in defaults", self.env_path)
        return "built-in defaults"

    def _sentinels(self, required: List[str], placeholders: Optional[Iterable[str]]) -> Set[str]:
        sentinels = set(self.spec.placeholders if placeholders is None else placeholders)
        # Whatever materialize() writes must never validate
        sentinels.update(placeholder_for(key) for key in required)
        return sentinels

    @staticmethod
    def _satisfied(required: List[str], sentinels: Set[str], values: Mapping[str, str]) -> bool:
        return all(key in values and values[key] not in sentinels for key in required)

    def _check_typed(self, values: Mapping[str, str]):
        for key, kind in self.spec.typed_keys.items():
            if key not in values:
                continue
            value = values[key]
            if kind == SettingKind.BOOL:
                if value.strip().lower() not in _TRUE_VALUES | _FALSE_VALUES:
                    raise InvalidValue(key, kind.value, value)
            elif kind == SettingKind.INT:
                try:
                    int(value.strip())
                except ValueError:
                    raise InvalidValue(key, kind.value, value) from None
            elif kind == SettingKind.PATH:
                if not value.strip():
                    raise InvalidValue(key, kind.value, value)
