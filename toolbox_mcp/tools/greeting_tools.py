from __future__ import annotations

from typing import Any, Dict

from ..models import FieldSpec, InputContract, OutputContract, TextResult
from . import ToolRegistry

GREETINGS: Dict[str, str] = {
    "ko": "안녕하세요, {name}님!",
    "en": "Hey there, {name}! 👋 Nice to meet you!",
}


def greet(name: str, language: str = "en") -> str:
    return GREETINGS[language].format(name=name)


async def _handle_greet(arguments: Dict[str, Any]) -> TextResult:
    return TextResult(greet(arguments["name"], arguments["language"]))


def register_tools(registry: ToolRegistry) -> None:
    input_contract = InputContract(
        parameters=(
            FieldSpec(name="name", kind="string", description="Name of the person to greet"),
            FieldSpec(
                name="language",
                kind="string",
                description="Greeting language (default: en)",
                required=False,
                default="en",
                enum=tuple(GREETINGS),
            ),
        )
    )

    registry.add_tool(
        "greet",
        "Return a greeting for the given name in the selected language.",
        _handle_greet,
        error_prefix="Greeting failed",
        input_contract=input_contract,
        output_contract=OutputContract(description="Greeting"),
    )
