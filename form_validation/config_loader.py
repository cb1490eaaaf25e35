"""Form definition loading with URI fetching, caching and schema checking."""

import hashlib
import json
import logging
import os
import time
import urllib.parse
import urllib.request
from importlib.resources import files
from pathlib import Path
from typing import Any, Dict, List, Optional

import jsonschema
import yaml

from .errors import ConfigError

logger = logging.getLogger(__name__)


def _load_schema() -> Dict[str, Any]:
    schema_file = files('form_validation').joinpath('form-config.schema.json')
    with schema_file.open('r') as f:
        return json.load(f)


class ConfigLoader:
    """
    Loads a YAML form definition and checks it against the bundled schema.

    Example definition:

        form: signup
        fields:
          username:
            - type: required
            - type: length
              min: 3
    """

    # Remote definitions are cached here, keyed by URI hash
    CACHE_DIR = Path.home() / ".cache" / "form-validation"

    def __init__(self, uri: str, cache_dir: Optional[Path] = None, use_cache: bool = True):
        """
        Load and check a form definition.

        Args:
            uri: Relative or absolute path, file:// URI or http(s):// URI
            cache_dir: Where remote definitions are cached (default CACHE_DIR)
            use_cache: Reuse a cached copy of a remote definition if present

        Raises:
            ConfigError: If the definition cannot be read, parsed, or does not
                match the form definition schema
        """
        self.uri = uri
        self.cache_dir = Path(cache_dir) if cache_dir else self.CACHE_DIR
        self.use_cache = use_cache

        self.form_config = self._load_config_from_uri(uri)
        self._check_schema(self.form_config)
        self.form_config_loaded_at = time.time()

        logger.info(
            "Form definition loaded",
            extra={'uri': uri, 'form': self.get_form_name(), 'fields': len(self.get_fields())}
        )

    def _load_yaml(self, path: str) -> Dict[str, Any]:
        """Load YAML file from disk."""
        try:
            with open(path) as f:
                return self._parse_yaml(f.read(), path)
        except OSError as e:
            raise ConfigError(f"Failed to read form definition {path}: {e}") from e

    def _parse_yaml(self, content: str, source: str) -> Dict[str, Any]:
        try:
            return yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {source}: {e}") from e

    def _load_config_from_uri(self, uri: str) -> Dict[str, Any]:
        """
        Load config from URI (with caching for remote URIs).

        Supports:
        - Relative paths - forms/signup.yaml (resolved against the working directory)
        - file:// - Local filesystem (absolute paths)
        - https:// - Remote HTTP/HTTPS
        - http:// - Remote HTTP

        Args:
            uri: Config URI or path

        Returns:
            Parsed YAML config
        """
        parsed = urllib.parse.urlparse(uri)

        if not parsed.scheme or len(parsed.scheme) == 1:
            # Plain path (a one-letter scheme is a Windows drive)
            return self._load_yaml(os.path.abspath(uri))

        if parsed.scheme == 'file':
            path = urllib.parse.unquote(parsed.path)
            return self._load_yaml(path)

        elif parsed.scheme in ('http', 'https'):
            cache_key = hashlib.sha256(uri.encode()).hexdigest()
            cache_path = self.cache_dir / f"form_{cache_key}.yaml"

            if self.use_cache and cache_path.exists():
                logger.debug("Using cached form definition", extra={'uri': uri, 'cache_path': str(cache_path)})
                return self._load_yaml(str(cache_path))

            content = self._fetch_uri(uri)
            config = self._parse_yaml(content, uri)
            self.cache_dir.mkdir(parents=True, exist_ok=True)
            cache_path.write_text(content)
            return config

        else:
            raise ConfigError(f"Unsupported URI scheme: {parsed.scheme} in {uri}")

    def _fetch_uri(self, uri: str) -> str:
        """Fetch content from HTTP/HTTPS URI."""
        try:
            with urllib.request.urlopen(uri, timeout=10) as response:
                return response.read().decode('utf-8')
        except Exception as e:
            raise ConfigError(f"Failed to fetch form definition from {uri}: {e}") from e

    def _check_schema(self, config: Any) -> None:
        """Raise ConfigError if config does not match the form definition schema."""
        try:
            jsonschema.validate(instance=config, schema=_load_schema())
        except jsonschema.ValidationError as e:
            error_path = " -> ".join(str(p) for p in e.path) if e.path else "root"
            raise ConfigError(
                f"Form definition {self.uri} is invalid at {error_path}: {e.message}"
            ) from e

    def get_form_config(self) -> Dict[str, Any]:
        """Get the whole form definition."""
        return self.form_config

    def get_form_name(self) -> Optional[str]:
        return self.form_config.get('form')

    def get_fields(self) -> Dict[str, List[Dict[str, Any]]]:
        """Get field name -> list of rule configs, in definition order."""
        return self.form_config.get('fields', {})

    def get_remote_checks_config(self) -> Dict[str, Any]:
        """Get defaults applied to every remote rule (timeout_ms, headers)."""
        return self.form_config.get('remote_checks', {})

    def get_config_age(self) -> Optional[float]:
        """
        Get age of the form definition in seconds since it was loaded.

        Returns:
            Age in seconds, or None if not loaded
        """
        if hasattr(self, 'form_config_loaded_at'):
            return time.time() - self.form_config_loaded_at
        return None
