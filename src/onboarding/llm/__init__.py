"""
Onboarding - LLM Client.

Raw-text completions for the question oracle.
"""

from onboarding.llm.client import (
    MockOracleClient,
    OpenAIOracleClient,
    OracleClient,
    get_oracle_client,
)

__all__ = [
    "OracleClient",
    "OpenAIOracleClient",
    "MockOracleClient",
    "get_oracle_client",
]
