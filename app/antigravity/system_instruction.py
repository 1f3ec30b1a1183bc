import json

from app.antigravity import raw_json

ANTIGRAVITY_SYSTEM_INSTRUCTION = """<identity>
You are Antigravity, a powerful agentic AI coding assistant designed by the Google DeepMind team working on Advanced Agentic Coding.
You are pair programming with a USER to solve their coding task. The task may require creating a new codebase, modifying or debugging an existing codebase, or simply answering a question.
The USER will send you requests, which you must always prioritize addressing. Along with each USER request, we will attach additional metadata about their current state, such as what files they have open and where their cursor is.
This information may or may not be relevant to the coding task, it is up for you to decide.
</identity>

<tool_calling>
Call tools as you normally would. The following list provides additional guidance to help you avoid errors:
  - **Absolute paths only**. When using tools that accept file path arguments, ALWAYS use the absolute file path.
</tool_calling>"""

# Role Antigravity expects on systemInstruction, same as user turns in contents
SYSTEM_INSTRUCTION_ROLE = "user"

FIXED_PREAMBLE = {"text": ANTIGRAVITY_SYSTEM_INSTRUCTION}


class SystemInstructionError(ValueError):
    """Raised when a payload cannot carry an injected system instruction."""


def inject_system_instruction(payload: bytes | str) -> bytes:
    """Prepend the Antigravity preamble to ``request.systemInstruction.parts``.

    Creates the system instruction when the payload has none. Caller-supplied
    parts keep their order after the preamble, and every byte outside the
    edited member is left as it was.

    Not idempotent: each call adds another preamble, so apply it once per
    outbound request.

    Raises:
        SystemInstructionError: payload is not a JSON object with a ``request``
            object, or ``systemInstruction``/``parts`` have the wrong type.
    """
    try:
        text = payload.decode("utf-8") if isinstance(payload, bytes) else payload
        data = json.loads(text)
    except (ValueError, TypeError, AttributeError, RecursionError) as e:
        raise SystemInstructionError(f"Payload is not valid JSON: {e}") from e

    if not isinstance(data, dict):
        raise SystemInstructionError("Payload is not a JSON object")
    request = data.get("request")
    if not isinstance(request, dict):
        raise SystemInstructionError("Payload has no 'request' object")

    root_start = raw_json.skip_whitespace(text, 0)
    request_span = raw_json.member_spans(text, root_start)["request"]
    request_start = request_span[0]
    preamble = raw_json.dump(FIXED_PREAMBLE)

    instruction = request.get("systemInstruction")
    if instruction is None:
        created = raw_json.dump({"role": SYSTEM_INSTRUCTION_ROLE, "parts": [FIXED_PREAMBLE]})
        if "systemInstruction" in request:
            # explicit null
            span = raw_json.member_spans(text, request_start)["systemInstruction"]
            text = raw_json.replace_span(text, span, created)
        else:
            text = raw_json.insert_member(text, request_start, "systemInstruction", created, empty=not request)
        return text.encode("utf-8")

    if not isinstance(instruction, dict):
        raise SystemInstructionError("'request.systemInstruction' is not an object")

    parts = instruction.get("parts")
    if parts is not None and not isinstance(parts, list):
        raise SystemInstructionError("'request.systemInstruction.parts' is not an array")

    instruction_start = raw_json.member_spans(text, request_start)["systemInstruction"][0]
    instruction_spans = raw_json.member_spans(text, instruction_start)

    # Edit back to front so earlier indexes stay valid
    if parts is not None:
        parts_start = instruction_spans["parts"][0]
        text = raw_json.insert_array_item(text, parts_start, preamble, empty=not parts)
    elif "parts" in instruction:
        text = raw_json.replace_span(text, instruction_spans["parts"], f"[{preamble}]")
    else:
        text = raw_json.insert_member(text, instruction_start, "parts", f"[{preamble}]", empty=not instruction)
        instruction = {**instruction, "parts": [FIXED_PREAMBLE]}

    if "role" not in instruction:
        text = raw_json.insert_member(
            text, instruction_start, "role", raw_json.dump(SYSTEM_INSTRUCTION_ROLE), empty=not instruction
        )

    return text.encode("utf-8")
