#!/usr/bin/env python3
"""
Configuration Manager for the award audit

Holds one entry per audited target (a Respect1155 deployment plus the
ornode database mirroring it) with:
1. Environment variable substitution (${VAR} patterns)
2. Per-target validation
3. Network-level public RPC lists shared by targets
4. Audit defaults (block range, step size)
"""

import os
import json
import re
from typing import Dict, Any, List, Optional
from pathlib import Path

from dotenv import load_dotenv

from audit_models import ConfigError

# load environment variables from the .env file in the repository root
load_dotenv(Path(__file__).parent.parent / '.env')


CONFIG_ENV_VAR = 'AWARDWATCH_CONFIG'
ALL_TARGETS = 'all'

DEFAULT_AUDIT_SETTINGS = {
    'from_block': 0,
    'to_block': 'latest',
    'step_range': 50000,
}

REQUIRED_TARGET_FIELDS = ['respect_contract', 'network', 'mongo_url', 'mongo_db']


def _is_rpc_url(s: Any) -> bool:
    return isinstance(s, str) and s.startswith(('http://', 'https://', 'ws://', 'wss://'))


class ConfigManager:
    """Configuration manager supporting multiple audit targets"""

    def __init__(self, config_file: Optional[str] = None):
        self.config_path = self._resolve_config_path(config_file)
        self._config_data: Dict[str, Any] = {}
        self._load_config()

    @staticmethod
    def _resolve_config_path(config_file: Optional[str]) -> Path:
        config_file = config_file or os.getenv(CONFIG_ENV_VAR)
        if config_file:
            return Path(config_file)
        return Path(__file__).parent.parent / 'config.json'

    def _load_config(self):
        """Load configuration from JSON file"""
        try:
            with open(self.config_path, 'r') as f:
                content = f.read()
        except FileNotFoundError:
            raise ConfigError(f"Config file {self.config_path} not found")

        # substitute environment variables
        content = self._substitute_env_vars(content)
        try:
            self._config_data = json.loads(content)
        except json.JSONDecodeError as e:
            raise ConfigError(f"Invalid JSON in config file {self.config_path}: {e}")

    def _substitute_env_vars(self, content: str) -> str:
        """Substitute ${VAR} patterns with environment variables"""
        def replace_var(match):
            var_name = match.group(1)
            env_value = os.getenv(var_name)
            if env_value is None:
                raise ConfigError(f"Environment variable {var_name} is not set")
            return env_value

        # pattern to match ${VAR_NAME}
        pattern = r'\$\{([A-Z_][A-Z0-9_]*)\}'
        return re.sub(pattern, replace_var, content)

    # targets

    def get_available_targets(self) -> Dict[str, Any]:
        """Get all configured audit targets"""
        return self._config_data.get("targets", {})

    def get_target_ids(self, requested: Optional[List[str]] = None) -> List[str]:
        """Expand a target selection; 'all' (or nothing) selects every target"""
        available = self.get_available_targets()
        if not requested or ALL_TARGETS in requested:
            return list(available.keys())

        unknown = [t for t in requested if t not in available]
        if unknown:
            raise ConfigError(f"Unknown target(s) {unknown}. Available: {list(available.keys())}")
        return list(requested)

    def get_target(self, target_id: str) -> Dict[str, Any]:
        targets = self.get_available_targets()
        if target_id not in targets:
            raise ConfigError(f"Target '{target_id}' not found. Available: {list(targets.keys())}")
        return dict(targets[target_id])

    def validate_target(self, target_id: str) -> Dict[str, Any]:
        """Validate a target configuration and return validation results"""
        target = self.get_available_targets().get(target_id)
        if not target:
            return {"valid": False, "errors": ["Target not found"], "target": target_id}

        errors = []
        for field in REQUIRED_TARGET_FIELDS:
            if not target.get(field):
                errors.append(f"Missing required field: {field}")

        contract = target.get('respect_contract')
        if contract and (not contract.startswith('0x') or len(contract) != 42):
            errors.append("respect_contract must be a valid Ethereum address (0x...)")

        provider_url = target.get('provider_url')
        if provider_url is not None and not _is_rpc_url(provider_url):
            errors.append("provider_url must be an HTTP(S) or WS(S) URL")

        network = target.get('network')
        if network and not self.get_network_rpc_urls(network) and not provider_url:
            errors.append(f"No RPC URL available: network '{network}' has no rpc_urls and no provider_url is set")

        return {"valid": len(errors) == 0, "errors": errors, "target": target_id}

    def require_valid_target(self, target_id: str) -> Dict[str, Any]:
        validation = self.validate_target(target_id)
        if not validation["valid"]:
            raise ConfigError(f"Invalid configuration for target '{target_id}': {'; '.join(validation['errors'])}")
        return self.get_target(target_id)

    def get_display_name(self, target_id: str) -> str:
        return self.get_target(target_id).get('display_name', target_id)

    # networks and RPCs

    def get_network_rpc_urls(self, network: str) -> List[str]:
        """Public RPC URLs for a network, in preference order"""
        urls = self._config_data.get("networks", {}).get(network, {}).get('rpc_urls', [])
        return [u for u in urls if _is_rpc_url(u)]

    def get_rpc_urls(self, target_id: str, rpc_override: Optional[str] = None) -> List[str]:
        """
        RPC URLs to try for a target: the CLI override alone if given,
        otherwise the network's public HTTP RPCs, then the target's provider_url.
        Public HTTP endpoints come first since WS endpoints often reject eth_getLogs.
        """
        if rpc_override:
            return [rpc_override]

        target = self.get_target(target_id)
        urls = list(self.get_network_rpc_urls(target.get('network', '')))
        provider_url = target.get('provider_url')
        if provider_url and provider_url not in urls:
            urls.append(provider_url)
        if not urls:
            raise ConfigError(f"No RPC URL available for target '{target_id}'")
        return urls

    # audit defaults

    def get_audit_settings(self) -> Dict[str, Any]:
        settings = dict(DEFAULT_AUDIT_SETTINGS)
        settings.update(self._config_data.get("audit", {}))
        return settings

    def get_from_block(self) -> int:
        return int(self.get_audit_settings()['from_block'])

    def get_to_block(self) -> str:
        return str(self.get_audit_settings()['to_block'])

    def get_step_range(self) -> int:
        return int(self.get_audit_settings()['step_range'])
