"""Config parser use case for leasekeeper."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Any

import yaml

from leasekeeper.domain.exceptions import LeaseConfigError
from leasekeeper.domain.settings import (
    ElectorSettings,
    LeaseKeeperSettings,
    MongoStoreSettings,
)

if TYPE_CHECKING:
    from leasekeeper.adapters.ports import CandidateIDResolverPort

_DURATION_FIELDS = ("lease_duration", "retry_period")


class ConfigParser:
    """Parses leasekeeper YAML configuration to settings.

    Expected layout:

        elector:
          candidate_id: node-1      # optional, falls back to the resolver
          lease_duration: 15
          retry_period: 2
          release_on_cancel: true
        store:                      # optional
          uri: mongodb://localhost:27017
          database: app
          collection: leases
          lease_key: scheduler
          operation_timeout: 1.5
    """

    def __init__(self, candidate_id_resolver: CandidateIDResolverPort | None = None) -> None:
        """Initialize the parser.

        Args:
            candidate_id_resolver: Used when elector.candidate_id is absent.
                                  Defaults to EnvironmentCandidateIDResolver.
        """
        if candidate_id_resolver is None:
            from leasekeeper.adapters.ports import EnvironmentCandidateIDResolver

            candidate_id_resolver = EnvironmentCandidateIDResolver()
        self._resolver = candidate_id_resolver

    def parse_file(self, path: Path | str) -> LeaseKeeperSettings:
        """Read and parse a YAML config file.

        Raises:
            LeaseConfigError: If the file cannot be read or is invalid.
        """
        try:
            yaml_str = Path(path).read_text(encoding="utf-8")
        except OSError as e:
            raise LeaseConfigError(f"Cannot read config file {path}: {e}") from e
        return self.parse(yaml_str)

    def parse(self, yaml_str: str) -> LeaseKeeperSettings:
        """Parse leasekeeper YAML config to settings.

        Args:
            yaml_str: YAML string representing leasekeeper configuration

        Returns:
            LeaseKeeperSettings domain object

        Raises:
            LeaseConfigError: If YAML is invalid or required fields are missing
        """
        try:
            config = yaml.safe_load(yaml_str)
        except yaml.YAMLError as e:
            raise LeaseConfigError(f"Invalid YAML: {e}") from e

        if not isinstance(config, dict):
            raise LeaseConfigError("Config must be a dictionary")

        elector_config = config.get("elector")
        if not isinstance(elector_config, dict):
            raise LeaseConfigError("Missing required section in config: 'elector'")

        store_config = config.get("store")
        if store_config is not None and not isinstance(store_config, dict):
            raise LeaseConfigError("'store' section must be a dictionary")

        return LeaseKeeperSettings(
            elector=self._parse_elector(elector_config),
            store=self._parse_store(store_config) if store_config else None,
        )

    def _parse_elector(self, section: dict[str, Any]) -> ElectorSettings:
        candidate_id = section.get("candidate_id")
        if candidate_id is None:
            try:
                candidate_id = self._resolver.resolve_candidate_id()
            except (KeyError, ValueError) as e:
                raise LeaseConfigError(
                    f"elector.candidate_id not set and could not be resolved: {e}"
                ) from e

        kwargs: dict[str, Any] = {"candidate_id": str(candidate_id)}
        for name in _DURATION_FIELDS:
            if name in section:
                kwargs[name] = _as_seconds(name, section[name])

        if "release_on_cancel" in section:
            release = section["release_on_cancel"]
            if not isinstance(release, bool):
                raise LeaseConfigError(
                    f"release_on_cancel must be a boolean, got: {release!r}"
                )
            kwargs["release_on_cancel"] = release

        return ElectorSettings(**kwargs)

    def _parse_store(self, section: dict[str, Any]) -> MongoStoreSettings:
        try:
            uri = section["uri"]
            database = section["database"]
            collection = section["collection"]
            lease_key = section["lease_key"]
        except KeyError as e:
            raise LeaseConfigError(f"Missing required field in config: store.{e.args[0]}") from e

        kwargs: dict[str, Any] = {}
        if "operation_timeout" in section:
            # An explicit null disables the per-call timeout.
            timeout = section["operation_timeout"]
            kwargs["operation_timeout"] = (
                None if timeout is None else _as_seconds("operation_timeout", timeout)
            )

        if "server_selection_timeout_ms" in section:
            value = section["server_selection_timeout_ms"]
            if isinstance(value, bool) or not isinstance(value, int):
                raise LeaseConfigError(
                    f"server_selection_timeout_ms must be an integer, got: {value!r}"
                )
            kwargs["server_selection_timeout_ms"] = value

        return MongoStoreSettings(
            uri=str(uri),
            database=str(database),
            collection=str(collection),
            lease_key=str(lease_key),
            **kwargs,
        )


def _as_seconds(name: str, value: Any) -> float:
    """Accept plain numbers of seconds."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise LeaseConfigError(f"{name} must be a number of seconds, got: {value!r}")
    return float(value)
