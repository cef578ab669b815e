"""
src/tools/basic.py — small deterministic tools

Provides:
- get_constants: returns the configured X and Y
- add: integer addition
- number_guess: compares a guess against a hidden target

Each builder returns a ToolDefinition; handlers take the parsed argument model.
"""


from typing import Any, Dict, Literal

from pydantic import BaseModel, ConfigDict, Field

from config import CONSTANT_X, CONSTANT_Y
from orchestrator.registry import NoArguments, ToolDefinition


GuessResult = Literal["low", "high", "correct", "out_of_range"]


# --- Argument models -----------------------------------------------------------
class AddArgs(BaseModel):

    model_config = ConfigDict(extra="forbid")

    x: int = Field(description="First integer to add")
    y: int = Field(description="Second integer to add")


class GuessArgs(BaseModel):

    model_config = ConfigDict(extra="forbid")

    guess: int = Field(description="Your guessed integer between 1 and MAX (inclusive)")


# --- Builders ------------------------------------------------------------------
def build_get_constants_tool(x: int = CONSTANT_X, y: int = CONSTANT_Y) -> ToolDefinition:

    def handler(_args: NoArguments) -> Dict[str, Any]:
        return {"X": x, "Y": y}

    return ToolDefinition(
        name="get_constants",
        description="Return constants X and Y as JSON",
        args_model=NoArguments,
        handler=handler,
    )


def build_add_tool() -> ToolDefinition:

    def handler(args: AddArgs) -> Dict[str, Any]:
        return {"sum": args.x + args.y}

    return ToolDefinition(
        name="add",
        description="Add two integers and return the sum as JSON",
        args_model=AddArgs,
        handler=handler,
    )


def compare_guess(guess: int, target: int, max_value: int) -> GuessResult:

    if not 1 <= guess <= max_value:
        return "out_of_range"
    if guess < target:
        return "low"
    if guess > target:
        return "high"

    return "correct"


def build_number_guess_tool(target: int, max_value: int) -> ToolDefinition:
    """
    Number guessing game. `max_value` is raised to at least 1 and `target`
    clamped into 1..max_value so the game is always winnable.
    """

    max_value = max(max_value, 1)
    target = min(max(target, 1), max_value)

    def handler(args: GuessArgs) -> Dict[str, Any]:
        return {"result": compare_guess(args.guess, target, max_value)}

    return ToolDefinition(
        name="number_guess",
        description=(
            f"Number guessing game: compare 'guess' with the hidden target (1..{max_value}) "
            "and return whether it is low, high, or correct."
        ),
        args_model=GuessArgs,
        handler=handler,
    )
