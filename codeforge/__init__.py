__version__ = "0.1.0"

# Core imports
from .agents.agent import Agent
from .agents.network import Network, NetworkRun, RouterContext, RouterStatus
from .agents.stop_conditions import (
    MaxStepsConfig,
    StopConditionContext,
    max_steps,
    stop_condition,
    summary_recorded,
)
from .core.context import WorkflowContext
from .core.state import RunState, WorkflowState
from .core.step import RetryPolicy, Step
from .core.store import InMemoryStepStore, StepStore
from .core.workflow import (
    StepExecutionError,
    Workflow,
    get_all_workflows,
    get_workflow,
    workflow,
)
from .execution import (
    CommandError,
    E2BSandboxConfig,
    LocalSandbox,
    LocalSandboxConfig,
    LocalSandboxProvider,
    ProvisioningError,
    SandboxHandle,
    SandboxInfo,
    SandboxProvider,
    get_sandbox,
    sandbox_provider_from_settings,
    sandbox_tools,
)
from .features.events import Event
from .functions.code_agent import (
    CodeAgentEvent,
    CodeAgentResult,
    capture_task_summary,
    code_agent_function,
    extract_text,
)
from .llm import llm_generate
from .llm.providers import LLMProvider, LLMResponse, get_provider, register_provider
from .middleware.hook import HookAction, HookContext, HookResult, hook
from .persistence import (
    Fragment,
    HttpMessageStore,
    InMemoryMessageStore,
    Message,
    MessageRole,
    MessageStore,
    MessageType,
    PersistenceError,
)
from .runtime.worker import Worker
from .tools.tool import Tool, ToolExecutionError
from .types.types import (
    AgentResult,
    ConversationTurn,
    TextMessage,
    ToolCall,
    ToolCallMessage,
    ToolFailure,
    ToolResult,
    ToolSuccess,
    Usage,
)
from .usage import (
    Plan,
    UsageLimitExceededError,
    UsageStatus,
    UsageTracker,
    trigger_code_agent,
)
from .utils.config import ConfigurationError, Settings

__all__ = [
    # Agents
    "Agent",
    "Network",
    "NetworkRun",
    "RouterContext",
    "RouterStatus",
    "StopConditionContext",
    "stop_condition",
    "summary_recorded",
    "max_steps",
    "MaxStepsConfig",
    # Workflows
    "WorkflowContext",
    "RunState",
    "WorkflowState",
    "Step",
    "RetryPolicy",
    "StepStore",
    "InMemoryStepStore",
    "StepExecutionError",
    "Workflow",
    "workflow",
    "get_workflow",
    "get_all_workflows",
    "Worker",
    "Event",
    # Code agent
    "code_agent_function",
    "CodeAgentEvent",
    "CodeAgentResult",
    "capture_task_summary",
    "extract_text",
    # Sandboxes
    "SandboxHandle",
    "SandboxProvider",
    "SandboxInfo",
    "LocalSandbox",
    "LocalSandboxProvider",
    "LocalSandboxConfig",
    "E2BSandboxConfig",
    "ProvisioningError",
    "CommandError",
    "get_sandbox",
    "sandbox_tools",
    "sandbox_provider_from_settings",
    # Tools
    "Tool",
    "ToolExecutionError",
    # LLM
    "LLMProvider",
    "LLMResponse",
    "get_provider",
    "register_provider",
    "llm_generate",
    # Hooks
    "hook",
    "HookAction",
    "HookContext",
    "HookResult",
    # Persistence
    "Fragment",
    "Message",
    "MessageRole",
    "MessageType",
    "MessageStore",
    "InMemoryMessageStore",
    "HttpMessageStore",
    "PersistenceError",
    # Types
    "AgentResult",
    "ConversationTurn",
    "TextMessage",
    "ToolCall",
    "ToolCallMessage",
    "ToolSuccess",
    "ToolFailure",
    "ToolResult",
    "Usage",
    # Usage
    "Plan",
    "UsageStatus",
    "UsageTracker",
    "UsageLimitExceededError",
    "trigger_code_agent",
    # Config
    "Settings",
    "ConfigurationError",
]
