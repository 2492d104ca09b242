from __future__ import annotations

import operator as _op
from typing import Any, Callable, Dict

from ..errors import DivisionByZeroError
from ..formatting import format_number
from ..models import FieldSpec, InputContract, OutputContract, TextResult
from . import ToolRegistry

OPERATORS: Dict[str, Callable[[float, float], float]] = {
    "+": _op.add,
    "-": _op.sub,
    "*": _op.mul,
    "/": _op.truediv,
}


def calculate(number1: float, number2: float, operator: str) -> str:
    """Apply `operator` and render "<n1> <op> <n2> = <result>"."""
    if operator == "/" and number2 == 0:
        raise DivisionByZeroError("Cannot divide by zero.")
    result = OPERATORS[operator](number1, number2)
    return (
        f"{format_number(number1)} {operator} {format_number(number2)}"
        f" = {format_number(result)}"
    )


async def _handle_calculate(arguments: Dict[str, Any]) -> TextResult:
    return TextResult(
        calculate(arguments["number1"], arguments["number2"], arguments["operator"])
    )


def register_tools(registry: ToolRegistry) -> None:
    input_contract = InputContract(
        parameters=(
            FieldSpec(name="number1", kind="number", description="First operand"),
            FieldSpec(name="number2", kind="number", description="Second operand"),
            FieldSpec(
                name="operator",
                kind="string",
                description="Operator (+, -, *, /)",
                enum=tuple(OPERATORS),
            ),
        )
    )

    registry.add_tool(
        "calculator",
        "Apply one of the four basic arithmetic operators to two numbers.",
        _handle_calculate,
        error_prefix="Calculation failed",
        input_contract=input_contract,
        output_contract=OutputContract(description="Calculation result"),
    )
