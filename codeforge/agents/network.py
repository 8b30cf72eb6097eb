"""Agent network: the control loop that routes turns to agents until it halts."""

from __future__ import annotations

import inspect
import logging
from collections.abc import Callable
from enum import Enum

from pydantic import BaseModel

from ..core.context import WorkflowContext
from ..core.state import RunState
from ..types.types import Usage
from .agent import Agent
from .stop_conditions import (
    MaxStepsConfig,
    StopConditionContext,
    evaluate_stop_conditions,
    max_steps,
    summary_recorded,
)

logger = logging.getLogger(__name__)

DEFAULT_MAX_ITER = 15


class RouterStatus(str, Enum):
    """State of a network run."""

    RUNNING = "running"
    HALTED = "halted"


class RouterContext(BaseModel):
    """Context passed to a custom router."""

    state: RunState
    iteration: int
    agent_names: list[str]


Router = Callable[[RouterContext], "Agent | str | None"]


class NetworkRun(BaseModel):
    """Outcome of ``Network.run``.

    Attributes:
        status: Always HALTED once run returns
        iterations: Number of agent turns taken
        halt_reason: Name of the stop condition that halted the run, or
            "router" if the router declined to pick an agent
        usage: Token usage summed over the turns of this run
    """

    status: RouterStatus
    iterations: int
    halt_reason: str | None = None
    usage: Usage = Usage()


class Network:
    """
    A two-state machine (RUNNING, HALTED) that drives agents over a shared RunState.

    Before every iteration the stop conditions are evaluated; if any holds the
    network halts. Otherwise the router picks the agent for the next turn
    (the default router always picks the first agent; a router returning None
    halts the network). Turns are strictly sequential. The network always
    stops on a recorded summary and after ``max_iter`` turns, whatever other
    stop conditions are given; reaching the cap is a normal termination.
    """

    def __init__(
        self,
        name: str,
        agents: list[Agent],
        max_iter: int = DEFAULT_MAX_ITER,
        router: Router | None = None,
        stop_conditions: list[Callable] | None = None,
    ):
        if not agents:
            raise ValueError(f"Network '{name}' needs at least one agent")
        if max_iter < 1:
            raise ValueError("max_iter must be at least 1")
        self.name = name
        self.agents = list(agents)
        self._agents_by_name = {agent.name: agent for agent in self.agents}
        self.max_iter = max_iter
        self.router = router
        self.stop_conditions: list[Callable] = [
            summary_recorded,
            max_steps(MaxStepsConfig(count=max_iter)),
            *(stop_conditions or []),
        ]

    async def _route(self, state: RunState, iteration: int) -> Agent | None:
        if self.router is None:
            return self.agents[0]

        selected = self.router(
            RouterContext(
                state=state,
                iteration=iteration,
                agent_names=[agent.name for agent in self.agents],
            )
        )
        if inspect.isawaitable(selected):
            selected = await selected
        if selected is None or isinstance(selected, Agent):
            return selected
        agent = self._agents_by_name.get(selected)
        if agent is None:
            raise ValueError(f"Router selected unknown agent '{selected}'")
        return agent

    async def run(self, ctx: WorkflowContext, input: str, state: RunState) -> NetworkRun:
        """Run agents against ``state`` until the network halts."""
        status = RouterStatus.RUNNING
        iteration = 0
        halt_reason: str | None = None
        usage = Usage()

        while status is RouterStatus.RUNNING:
            halt_reason = await evaluate_stop_conditions(
                self.stop_conditions, StopConditionContext(state=state, iteration=iteration)
            )
            if halt_reason is not None:
                status = RouterStatus.HALTED
                break

            agent = await self._route(state, iteration)
            if agent is None:
                halt_reason = "router"
                status = RouterStatus.HALTED
                break

            logger.debug("Network %s: turn %d -> %s", self.name, iteration + 1, agent.name)
            result = await agent.run_turn(ctx, input, state)
            state.results.append(result)
            usage = usage + result.usage
            iteration += 1

        logger.info(
            "Network %s halted after %d turn(s) (%s), %d tokens used",
            self.name,
            iteration,
            halt_reason,
            usage.total_tokens,
        )
        return NetworkRun(
            status=status, iterations=iteration, halt_reason=halt_reason, usage=usage
        )
