"""Run-scoped state shared by the agent network and its tools."""

from pydantic import BaseModel, ConfigDict

from ..types.types import AgentResult, ConversationTurn


class WorkflowState(BaseModel):
    """Base class for workflow state.

    Workflow state is a Pydantic model owned by one execution. It is created
    fresh when the execution starts and discarded when it ends.
    """

    model_config = ConfigDict(validate_assignment=True)


class RunState(WorkflowState):
    """State of one code-agent run.

    Attributes:
        summary: Completion summary. Empty until the agent emits the completion
            marker, then fixed for the rest of the run.
        files: Every file written in the run, by path. Later writes to a path
            overwrite earlier ones; paths are never removed.
        history: Prior conversation turns, oldest first.
        results: Agent turns taken in this run, oldest first.
    """

    summary: str = ""
    files: dict[str, str] = {}
    history: list[ConversationTurn] = []
    results: list[AgentResult] = []

    def record_summary(self, text: str) -> bool:
        """Store ``text`` as the summary unless one is already recorded.

        Returns:
            True if the summary was recorded by this call
        """
        if self.summary or not text:
            return False
        self.summary = text
        return True

    def commit_files(self, files: dict[str, str]) -> None:
        """Replace the file map with ``files``, which must extend the current one."""
        missing = set(self.files) - set(files)
        if missing:
            raise ValueError(f"Committed file map drops paths: {sorted(missing)}")
        self.files = dict(files)
