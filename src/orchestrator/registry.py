"""
src/orchestrator/registry.py

Tool registry: name -> ToolDefinition (argument model, description, handler).
Builds the OpenAI function specs handed to the model.
"""


import logging
from typing import Any, Callable, Dict, Iterator, List, Optional, Type

from pydantic import BaseModel, ConfigDict
from rapidfuzz import fuzz, process


logger = logging.getLogger(__name__)

ToolHandler = Callable[[Any], Any]


class NoArguments(BaseModel):
    """Argument model for tools that take nothing."""

    model_config = ConfigDict(extra="forbid")


class ToolDefinition(BaseModel):

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    name: str
    description: str
    args_model: Type[BaseModel] = NoArguments
    handler: ToolHandler
    strict: bool = False

    def parameters(self) -> Dict[str, Any]:
        """JSON schema for the arguments, trimmed to what the API expects."""

        schema = self.args_model.model_json_schema()
        params: Dict[str, Any] = {
            "type": "object",
            "properties": schema.get("properties", {}),
            "required": schema.get("required", []),
            "additionalProperties": False,
        }
        if "$defs" in schema:
            params["$defs"] = schema["$defs"]

        return params

    def spec(self) -> Dict[str, Any]:
        """Build an OpenAI function spec."""

        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.parameters(),
                "strict": self.strict,
            },
        }

    def parse_arguments(self, raw: str) -> BaseModel:
        """Validate a raw JSON payload. Raises pydantic.ValidationError."""

        return self.args_model.model_validate_json(raw)

    def execute(self, args: BaseModel) -> Any:

        return self.handler(args)


class ToolRegistry:
    """Name-keyed tool mapping. Names are case-sensitive; registering a name again replaces it."""

    def __init__(self, tools: Optional[List[ToolDefinition]] = None):

        self._tools: Dict[str, ToolDefinition] = {}
        for tool in tools or []:
            self.register(tool)

    def __contains__(self, name: object) -> bool:

        return name in self._tools

    def __len__(self) -> int:

        return len(self._tools)

    def __iter__(self) -> Iterator[ToolDefinition]:

        return iter(self._tools.values())

    def register(self, tool: ToolDefinition) -> None:

        if tool.name in self._tools:
            logger.debug("Replacing tool definition %s", tool.name)
        self._tools[tool.name] = tool

    def get(self, name: str) -> Optional[ToolDefinition]:
        """Exact-match lookup; None when absent."""

        return self._tools.get(name)

    def names(self) -> List[str]:

        return list(self._tools)

    def specs(self) -> List[Dict[str, Any]]:

        return [t.spec() for t in self._tools.values()]

    def suggest(self, name: str, cutoff: int = 70) -> Optional[str]:
        """Closest registered name for an error hint. Never used for dispatch."""

        if not self._tools:
            return None
        match = process.extractOne(name, self.names(), scorer=fuzz.WRatio, score_cutoff=cutoff)
        if not match:
            return None

        return match[0]
