"""
Pytest configuration and fixtures for Herald tests.
"""

from typing import Any

import pytest

from herald.config import MailConfig
from herald.core import ActionRequest, TriggerResult


@pytest.fixture
def mail_config() -> MailConfig:
    """Configuration with credentials."""
    return MailConfig(
        server_host="smtp.example.com",
        server_port=2525,
        from_address="alerts@example.com",
        from_password="secret",
    )


@pytest.fixture
def hits_response() -> dict[str, Any]:
    """Search response with two hits."""
    return {
        "hits": {
            "total": 2,
            "hits": [
                {"_id": "1", "_source": {"msg": "a", "level": "error"}},
                {"_id": "2", "_source": {"msg": "b", "level": "warn"}},
            ],
        }
    }


@pytest.fixture
def trigger_result(hits_response: dict[str, Any]) -> TriggerResult:
    """Trigger result for a query over two indices."""
    return TriggerResult(
        trigger="hits.total > 1",
        action_request=ActionRequest(
            indices=["logs-1", "logs-2"],
            source={"query": {"match_all": {}}},
        ),
        action_response=hits_response,
        trigger_response=hits_response,
    )
