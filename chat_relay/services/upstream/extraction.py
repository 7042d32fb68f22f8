"""
Text extraction from provider responses.

The provider has returned generated text in several shapes over its API
revisions. Each shape is a member of the ``UpstreamOutput`` union;
``classify_response`` picks the member and ``extract_text`` reads it.
"""
from typing import Annotated, Any, List, Literal, Union

from pydantic import BaseModel, Field


class AggregatedText(BaseModel):
    """Responses API convenience field: ``{"output_text": "..."}``."""
    kind: Literal["aggregated_text"] = "aggregated_text"
    text: str


class StructuredOutput(BaseModel):
    """Responses API ``output`` list; fragments already filtered to output_text."""
    kind: Literal["structured_output"] = "structured_output"
    fragments: List[str]


class ChatChoices(BaseModel):
    """Legacy Chat Completions shape: ``choices[0].message.content``."""
    kind: Literal["chat_choices"] = "chat_choices"
    content: str


class EmptyOutput(BaseModel):
    """No recognizable text in the response."""
    kind: Literal["empty"] = "empty"


UpstreamOutput = Annotated[
    Union[AggregatedText, StructuredOutput, ChatChoices, EmptyOutput],
    Field(discriminator="kind"),
]


def _output_text_fragments(output: Any) -> List[str]:
    fragments = []
    if not isinstance(output, list):
        return fragments
    for item in output:
        if not isinstance(item, dict):
            continue
        content = item.get("content")
        if not isinstance(content, list):
            continue
        for part in content:
            if isinstance(part, dict) and part.get("type") == "output_text":
                text = part.get("text")
                if isinstance(text, str):
                    fragments.append(text)
    return fragments


def _first_choice_content(choices: Any) -> Any:
    if not isinstance(choices, list) or not choices:
        return None
    first = choices[0]
    if not isinstance(first, dict):
        return None
    message = first.get("message")
    if not isinstance(message, dict):
        return None
    return message.get("content")


def classify_response(body: Any) -> UpstreamOutput:
    """Identify which response shape ``body`` carries, in priority order."""
    if not isinstance(body, dict):
        return EmptyOutput()

    output_text = body.get("output_text")
    if isinstance(output_text, str) and output_text:
        return AggregatedText(text=output_text)

    fragments = _output_text_fragments(body.get("output"))
    if fragments and "".join(fragments):
        return StructuredOutput(fragments=fragments)

    content = _first_choice_content(body.get("choices"))
    if isinstance(content, str) and content:
        return ChatChoices(content=content)

    return EmptyOutput()


def extract_text(output: UpstreamOutput) -> str:
    """Return the generated text held by a classified response."""
    if isinstance(output, AggregatedText):
        return output.text
    if isinstance(output, StructuredOutput):
        return "".join(output.fragments)
    if isinstance(output, ChatChoices):
        return output.content
    return ""
