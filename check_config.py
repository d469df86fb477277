#!/usr/bin/env python3
"""Check mcprest configuration and API availability."""

import os
import sys
from typing import Tuple

from dotenv import load_dotenv

from mcprest.core.auth import create_authentication_strategy
from mcprest.core.config import ServerConfig, get_timeout_secs, load_config, validate_required_env_vars
from mcprest.core.errors import ConfigurationError

SECRET_VARS = {"API_AUTH_TOKEN", "API_BASIC_AUTH_PASSWORD"}


def check_env_var(name: str, required: bool = False) -> Tuple[bool, str]:
    """Check if environment variable is set."""
    value = os.getenv(name)
    if value:
        shown = "***" if name in SECRET_VARS else value[:50]
        return True, f"✓ {name}={shown}"
    elif required:
        return False, f"✗ {name} (REQUIRED - not set)"
    else:
        return False, f"○ {name} (optional - not set)"


def check_auth(config: ServerConfig) -> Tuple[bool, str]:
    """Validate the authentication strategy the server would use."""
    strategy = create_authentication_strategy(config)
    try:
        strategy.validate()
    except ConfigurationError as e:
        return False, f"✗ Auth ({strategy.get_auth_type()}): {e}"
    return True, f"✓ Auth: {strategy.get_auth_type()}"


def test_api(config: ServerConfig) -> Tuple[bool, str]:
    """Test API base URL connectivity with the configured credentials."""
    try:
        import requests
        strategy = create_authentication_strategy(config)
        headers = strategy.apply_auth({"headers": {"Accept": "application/json"}})["headers"]
        resp = requests.get(config.base_url, headers=headers, timeout=min(get_timeout_secs(), 5))
        if resp.status_code < 500:
            return True, f"✓ API: {config.base_url} (reachable, HTTP {resp.status_code})"
        return False, f"✗ API: {config.base_url} (HTTP {resp.status_code})"
    except Exception as e:
        return False, f"✗ API: {config.base_url} ({str(e)[:60]})"


def main():
    """Run all configuration checks."""
    load_dotenv()
    print("🔍 mcprest Configuration Check\n")
    print("=" * 60)

    print("\n📋 Environment:")
    print("-" * 60)
    env_vars = [
        ("API_BASE_URL", True),
        ("API_AUTH_TYPE", True),
        ("API_AUTH_TOKEN", False),
        ("API_BASIC_AUTH_USERNAME", False),
        ("API_BASIC_AUTH_PASSWORD", False),
        ("API_TIMEOUT_SECS", False),
    ]
    for name, required in env_vars:
        status, msg = check_env_var(name, required)
        print(f"  {msg}")

    missing = validate_required_env_vars()
    if missing:
        print(f"\n  ✗ Missing: {', '.join(missing)}")

    print("\n🔐 Configuration:")
    print("-" * 60)
    try:
        config = load_config()
    except ConfigurationError as e:
        print(f"  ✗ {e}")
        print()
        sys.exit(1)

    auth_ok, msg = check_auth(config)
    print(f"  {msg}")

    print("\n🌐 Connectivity:")
    print("-" * 60)
    api_ok, msg = test_api(config)
    print(f"  {msg}")

    print()
    if not (auth_ok and api_ok):
        sys.exit(1)


if __name__ == "__main__":
    main()
