"""Platform row normalization and mock platform fetchers."""

from budget_pacing.api.mock_platform_api import MockPlatformAPI

__all__ = [
    "MockPlatformAPI",
]
