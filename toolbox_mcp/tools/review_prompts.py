from __future__ import annotations

from typing import Any, Dict, Optional

from ..models import FieldSpec, InputContract, TextResult
from . import CapabilityDescriptor, CapabilityKind, ToolRegistry

CODE_REVIEW_TEMPLATE = """Please review the following code, paying particular attention to these points:

## Review checklist

### 1. Code quality
- [ ] Is the code clear and easy to read?
- [ ] Are variable and function names meaningful?
- [ ] Is there duplicated code?
- [ ] Are there unnecessary comments or dead code?

### 2. Bugs and potential issues
- [ ] Are potential bugs and exceptional cases handled?
- [ ] Is error handling appropriate?
- [ ] Are boundary conditions handled correctly?

### 3. Performance
- [ ] Are there parts that need optimization?
- [ ] Are there unnecessary computations or loops?

### 4. Security
- [ ] Are there security vulnerabilities?
- [ ] Is input validation adequate?

### 5. Best practices
- [ ] Does the code follow the best practices of its language/framework?
- [ ] Is the code style consistent?

## Code to review

```
{code}
```

Please write a detailed review based on the checklist above. Where improvements are possible, give concrete examples."""

LANGUAGE_GUIDELINES: Dict[str, str] = {
    "typescript": (
        "\n### TypeScript checklist"
        "\n- [ ] Are types defined appropriately?"
        "\n- [ ] Is the `any` type avoided?"
        "\n- [ ] Are generics used well?"
    ),
    "javascript": (
        "\n### JavaScript checklist"
        "\n- [ ] Is ES6+ syntax used appropriately?"
        "\n- [ ] Is asynchronous code handled correctly?"
        "\n- [ ] Are there possible memory leaks?"
    ),
    "python": (
        "\n### Python checklist"
        "\n- [ ] Does the code follow PEP 8?"
        "\n- [ ] Is exception handling appropriate?"
        "\n- [ ] Are comprehensions used where they help?"
    ),
    "java": (
        "\n### Java checklist"
        "\n- [ ] Are naming conventions followed?"
        "\n- [ ] Is exception handling appropriate?"
        "\n- [ ] Is unnecessary object creation avoided?"
    ),
}

FOCUS_GUIDELINES: Dict[str, str] = {
    "performance": (
        "\n### Performance focus"
        "\n- [ ] Is the algorithmic complexity optimal?"
        "\n- [ ] Are there unnecessary database queries?"
        "\n- [ ] Could caching help anywhere?"
    ),
    "security": (
        "\n### Security focus"
        "\n- [ ] Is SQL injection prevented?"
        "\n- [ ] Is XSS prevented?"
        "\n- [ ] Are authentication and authorization handled correctly?"
        "\n- [ ] Is sensitive information kept from leaking?"
    ),
    "bugs": (
        "\n### Bug focus"
        "\n- [ ] Are null/None checks sufficient?"
        "\n- [ ] Are index bounds checked?"
        "\n- [ ] Can type conversions fail?"
    ),
}

FOCUS_ALIASES: Dict[str, str] = {
    "성능": "performance",
    "보안": "security",
    "버그": "bugs",
    "bug": "bugs",
}


def build_review_prompt(
    code: str,
    language: Optional[str] = None,
    focus: Optional[str] = None,
) -> str:
    # str.replace, not str.format: the snippet may contain braces.
    prompt = CODE_REVIEW_TEMPLATE.replace("{code}", code, 1)

    if language:
        prompt += LANGUAGE_GUIDELINES.get(language.lower(), "")

    if focus:
        key = focus.strip().lower()
        prompt += FOCUS_GUIDELINES.get(FOCUS_ALIASES.get(key, key), "")

    if language:
        prompt += f"\n\n**Note**: this code is written in {language}."

    return prompt


async def _handle_code_review(arguments: Dict[str, Any]) -> TextResult:
    return TextResult(
        build_review_prompt(arguments["code"], arguments.get("language"), arguments.get("focus"))
    )


def register_tools(registry: ToolRegistry) -> None:
    input_contract = InputContract(
        parameters=(
            FieldSpec(name="code", kind="string", description="Code to review"),
            FieldSpec(
                name="language",
                kind="string",
                description="Code language (e.g. typescript, javascript, python)",
                required=False,
            ),
            FieldSpec(
                name="focus",
                kind="string",
                description="Review area to focus on (performance, security, bugs)",
                required=False,
            ),
        )
    )

    registry.register(
        CapabilityDescriptor(
            kind=CapabilityKind.PROMPT,
            name="code-review",
            title="Code review",
            description="Combine a code snippet with a predefined review checklist.",
            input_contract=input_contract,
            handler=_handle_code_review,
            error_prefix="Code review prompt failed",
        )
    )
