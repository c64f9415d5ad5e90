"""Error taxonomy.

Only :class:`ToolError` is recovered inside the loop; everything else ends the run.
"""

from __future__ import annotations


class AgentError(RuntimeError):
    """Base class for agent errors."""


class ConfigError(AgentError):
    """A collaborator is missing a credential or endpoint."""


class ToolError(AgentError):
    """A search or scrape call failed."""


class WebSearchError(ToolError):
    pass


class ScrapeError(ToolError):
    pass


class PlanError(AgentError):
    """The reasoning step produced output that is not a valid action plan."""


class CollaboratorContractError(AgentError):
    """A collaborator returned something outside its declared contract."""
