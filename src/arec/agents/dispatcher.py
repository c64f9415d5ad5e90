"""Action dispatcher.

Turns a plan into a tool call. Tool failures come back as ``TOOL_ERROR:`` observations
so the planner can reflect on them; they never abort the run.
"""

from __future__ import annotations

from typing import Awaitable, Callable, assert_never

from arec.agents.actions import ActionPlan, FinishAction, ScrapeAction, SearchAction
from arec.errors import CollaboratorContractError
from arec.logging import get_logger
from arec.models.observation import Observation
from arec.tools.protocol import ScrapeTool, SearchTool

logger = get_logger(__name__)


class Dispatcher:
    """Execute the action of an :class:`ActionPlan`."""

    def __init__(self, search_tool: SearchTool, scrape_tool: ScrapeTool) -> None:
        self._search_tool = search_tool
        self._scrape_tool = scrape_tool

    async def dispatch(self, plan: ActionPlan) -> Observation | None:
        """Run one action.

        Returns:
            The next observation, or ``None`` when the plan finishes the run.

        Raises:
            CollaboratorContractError: If a tool returns something that is not an
                :class:`Observation`.
        """

        action = plan.action
        match action:
            case SearchAction():
                return await self._invoke("Search", self._search_tool.search, action.query)
            case ScrapeAction():
                return await self._invoke("Scrape", self._scrape_tool.scrape, action.url)
            case FinishAction():
                logger.info("Agent halt: goal achieved", extra={"final_answer": action.final_answer})
                return None
            case _:
                assert_never(action)

    def close(self) -> None:
        """Close both tools; the dispatcher is unusable afterwards."""

        self._search_tool.close()
        self._scrape_tool.close()

    async def _invoke(
        self,
        tool_name: str,
        call: Callable[[str], Awaitable[Observation]],
        argument: str,
    ) -> Observation:
        try:
            result = await call(argument)
        except Exception as e:
            logger.warning(
                "Tool failed; returning error observation",
                extra={"tool": tool_name, "error_type": type(e).__name__, "error": str(e)},
            )
            return Observation.tool_error(tool_name, e)

        if not isinstance(result, Observation):
            raise CollaboratorContractError(
                f"{tool_name} tool returned {type(result).__name__}, expected Observation"
            )
        return result
