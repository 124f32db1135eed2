"""
Pytest configuration and fixtures for nodeworks tests.
"""

import sys
from pathlib import Path

import pytest

# Add the repository root to path for imports
repo_root = Path(__file__).parent.parent
if str(repo_root) not in sys.path:
    sys.path.insert(0, str(repo_root))

from nodeworks.config import CredentialStore
from nodeworks.integrations.clockify import ClockifyClient, ClockifyConfig
from nodeworks.integrations.mattermost import MattermostClient, MattermostConfig


@pytest.fixture
def credential_store():
    """Credential store holding test credentials for both services."""
    return CredentialStore({
        "mattermostApi": {
            "base_url": "https://chat.example.com/",
            "access_token": "mm-test-token",
        },
        "clockifyApi": {
            "api_key": "clockify-test-key",
        },
    })


@pytest.fixture
def mattermost_client():
    """Mattermost client with retries disabled."""
    return MattermostClient(MattermostConfig(
        base_url="https://chat.example.com",
        access_token="mm-test-token",
        max_retries=0,
    ))


@pytest.fixture
def clockify_client():
    """Clockify client with retries disabled."""
    return ClockifyClient(ClockifyConfig(
        api_key="clockify-test-key",
        max_retries=0,
    ))


@pytest.fixture
def raw_attachment():
    """Attachment as collected by the message form."""
    return {
        "color": "#ff0000",
        "text": "Build failed",
        "fields": {
            "item": [
                {"title": "Branch", "value": "main", "short": True},
            ],
        },
        "actions": {
            "item": [
                {
                    "type": "button",
                    "data_source": "custom",
                    "name": "Retry",
                    "integration": {
                        "item": {
                            "url": "https://ci.example.com/hooks/retry",
                            "context": {
                                "property": [
                                    {"name": "build", "value": "1234"},
                                    {"name": "branch", "value": "main"},
                                ],
                            },
                        },
                    },
                },
                {
                    "type": "select",
                    "data_source": "custom",
                    "name": "Assign",
                    "options": {
                        "option": [
                            {"text": "Alice", "value": "alice"},
                            {"text": "Bob", "value": "bob"},
                        ],
                    },
                    "integration": {},
                },
            ],
        },
    }
