from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional
from zoneinfo import ZoneInfo

from ..errors import InvalidTimezoneError
from ..models import FieldSpec, InputContract, OutputContract, TextResult
from . import ToolRegistry

DISPLAY_FORMAT = "%Y-%m-%d %H:%M:%S"


def current_time(timezone: str, now: Optional[datetime] = None) -> str:
    """
    Render the current wall-clock time in an IANA timezone.

    Any failure while resolving or rendering the zone is reported as
    InvalidTimezoneError.
    """
    try:
        zone = ZoneInfo(timezone)
        instant = (now or datetime.now(tz=zone)).astimezone(zone)
        formatted = instant.strftime(DISPLAY_FORMAT)
    except Exception as e:
        raise InvalidTimezoneError(f"Invalid timezone: {timezone}") from e
    return f"Current time in {timezone}: {formatted}"


async def _handle_time(arguments: Dict[str, Any]) -> TextResult:
    return TextResult(current_time(arguments["timezone"]))


def register_tools(registry: ToolRegistry) -> None:
    input_contract = InputContract(
        parameters=(
            FieldSpec(
                name="timezone",
                kind="string",
                description="IANA timezone name (e.g. Asia/Seoul, America/New_York, Europe/London)",
            ),
        )
    )

    registry.add_tool(
        "time",
        "Return the current time in a given timezone.",
        _handle_time,
        error_prefix="Time lookup failed",
        input_contract=input_contract,
        output_contract=OutputContract(description="Current time"),
    )
