from __future__ import annotations

import logging
import re
from typing import Any

from pydantic import ValidationError

from gradtrack.config import Settings, get_settings
from gradtrack.errors import ModelOutputError
from gradtrack.llm.prompts import RESEARCH_AUTOFILL_PROMPT
from gradtrack.llm.providers import LLMProvider
from gradtrack.types import ResearchAutofill

logger = logging.getLogger(__name__)

_NUMBER = re.compile(r"\d+")


class ResearchAutofiller:
    def __init__(self, *, provider: LLMProvider, settings: Settings | None = None):
        self.provider = provider
        self.settings = settings or get_settings()

    def autofill(self, *, university_name: str, program_name: str, country: str | None = None) -> ResearchAutofill:
        prompt = RESEARCH_AUTOFILL_PROMPT.format(
            university_name=university_name,
            program_name=program_name,
            country=country or "unknown",
        )
        data = self.provider.complete_json(model=self.settings.llm_model, prompt=prompt)
        try:
            return ResearchAutofill.model_validate(normalize_autofill(data))
        except ValidationError as exc:
            logger.warning("Auto-fill output for %s / %s did not validate", university_name, program_name)
            raise ModelOutputError("Auto-fill returned an unexpected shape", details=str(exc)) from exc


def normalize_autofill(data: dict[str, Any]) -> dict[str, Any]:
    values: dict[str, Any] = {}
    for key in ResearchAutofill.model_fields:
        value = data.get(key)
        if isinstance(value, str):
            value = value.strip() or None
        if isinstance(value, list):
            value = "\n".join(str(item) for item in value) or None
        values[key] = value

    ranking = values.get("ranking")
    if isinstance(ranking, str):
        match = _NUMBER.search(ranking)
        values["ranking"] = int(match.group(0)) if match else None
    return values
