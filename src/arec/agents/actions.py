"""Agent action types.

The action set is closed: every plan carries exactly one of Search / Scrape / Finish.
Adding a variant means touching the union below, the JSON schema handed to the LLM
(generated from it) and the exhaustive match in the dispatcher.
"""

from __future__ import annotations

import json
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from arec.errors import PlanError


class _FrozenModel(BaseModel):
    model_config = ConfigDict(frozen=True)


class SearchArguments(_FrozenModel):
    query: str = Field(min_length=1)


class ScrapeArguments(_FrozenModel):
    url: str = Field(min_length=1)


class FinishArguments(_FrozenModel):
    final_answer: str = Field(min_length=1)


class SearchAction(_FrozenModel):
    """Planner requests a web search."""

    type: Literal["Search"] = "Search"
    arguments: SearchArguments

    @classmethod
    def create(cls, query: str) -> SearchAction:
        return cls(arguments=SearchArguments(query=query))

    @property
    def query(self) -> str:
        return self.arguments.query


class ScrapeAction(_FrozenModel):
    """Planner requests the text of a page."""

    type: Literal["Scrape"] = "Scrape"
    arguments: ScrapeArguments

    @classmethod
    def create(cls, url: str) -> ScrapeAction:
        return cls(arguments=ScrapeArguments(url=url))

    @property
    def url(self) -> str:
        return self.arguments.url


class FinishAction(_FrozenModel):
    """Planner declares the goal achieved."""

    type: Literal["Finish"] = "Finish"
    arguments: FinishArguments

    @classmethod
    def create(cls, final_answer: str) -> FinishAction:
        return cls(arguments=FinishArguments(final_answer=final_answer))

    @property
    def final_answer(self) -> str:
        return self.arguments.final_answer


AgentAction = Annotated[SearchAction | ScrapeAction | FinishAction, Field(discriminator="type")]


class ActionPlan(_FrozenModel):
    """One reasoning step: an explanation plus the single action to take.

    ``reasoning`` is informational only; the dispatcher looks at ``action`` alone.
    """

    reasoning: str = Field(
        min_length=1,
        description="Your detailed thought process (chain of thought) for the next action.",
    )
    action: AgentAction

    @classmethod
    def from_payload(cls, payload: Any) -> ActionPlan:
        """Validate a decoded JSON payload.

        Raises:
            PlanError: If the payload does not describe a valid plan.
        """

        try:
            return cls.model_validate(payload)
        except ValidationError as e:
            raise PlanError(f"Invalid action plan: {e}") from e


def render_action(action: SearchAction | ScrapeAction | FinishAction) -> str:
    """Render an action as its compact JSON wire form."""

    return json.dumps(action.model_dump(mode="json"), ensure_ascii=False)


def action_plan_schema() -> dict[str, Any]:
    """JSON schema of :class:`ActionPlan`, used in the planner system prompt."""

    return ActionPlan.model_json_schema()
