"""Property copy generation for the "sell your property" form.

The form posts the attributes, an LLM writes a description and a short
summary. This is a single call; there is no retry and the user only ever
sees a generic error.
"""

from __future__ import annotations

import json
from typing import Any, Mapping, Optional, Protocol

import anthropic
from pydantic import BaseModel, ConfigDict, ValidationError
from pydantic.alias_generators import to_camel

from four_seasons_catalog.config import CatalogSettings, get_settings
from four_seasons_catalog.log import get_logger


logger = get_logger("ai")

INVALID_INPUT_MESSAGE = "Invalid input."
GENERATION_FAILED_MESSAGE = "Failed to generate description. Please try again."


class PropertyDescriptionInput(BaseModel):
    # Accepts both the form's camelCase keys and snake_case.
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    property_type: str
    area: str
    number_of_rooms: int
    number_of_bathrooms: int
    finishing_level: str
    selling_type: str
    delivery_date: str
    special_features: str
    payment_plan: str
    location_description: str
    amenities: str


class PropertyDescription(BaseModel):
    description: str
    summary: str


class DescriptionGenerator(Protocol):
    async def generate(self, data: PropertyDescriptionInput) -> PropertyDescription:
        ...


def build_prompt(data: PropertyDescriptionInput) -> str:
    return f"""You are an expert real estate copywriter. Generate an engaging and informative property description and a summary of key features based on the following data:

Property Type: {data.property_type}
Area: {data.area} square meters
Number of Rooms: {data.number_of_rooms}
Number of Bathrooms: {data.number_of_bathrooms}
Finishing Level: {data.finishing_level}
Selling Type: {data.selling_type}
Delivery Date: {data.delivery_date}
Special Features: {data.special_features}
Payment Plan: {data.payment_plan}
Location Description: {data.location_description}
Amenities: {data.amenities}

Return ONLY valid JSON in this exact structure:

{{"description": "...", "summary": "..."}}
"""


def parse_reply(text: str) -> PropertyDescription:
    start = text.find("{")
    end = text.rfind("}")
    if start < 0 or end <= start:
        raise ValueError("no JSON object in model reply")
    return PropertyDescription.model_validate(json.loads(text[start:end + 1]))


class AnthropicDescriptionGenerator:
    def __init__(
        self,
        settings: Optional[CatalogSettings] = None,
        client: Optional[Any] = None,
        max_tokens: int = 1024,
    ):
        self.settings = settings or get_settings()
        self.max_tokens = max_tokens
        if client is None:
            if not self.settings.anthropic_api_key:
                raise RuntimeError("ANTHROPIC_API_KEY is not set")
            client = anthropic.AsyncAnthropic(api_key=self.settings.anthropic_api_key)
        self.client = client

    async def generate(self, data: PropertyDescriptionInput) -> PropertyDescription:
        message = await self.client.messages.create(
            model=self.settings.ai_model,
            max_tokens=self.max_tokens,
            messages=[{"role": "user", "content": build_prompt(data)}],
        )
        return parse_reply(message.content[0].text)


def _failure(error: str) -> dict:
    return {"error": error, "description": "", "summary": ""}


async def generate_description_action(
    payload: Mapping[str, Any], generator: Optional[DescriptionGenerator] = None
) -> dict:
    try:
        data = PropertyDescriptionInput.model_validate(dict(payload or {}))
    except ValidationError:
        return _failure(INVALID_INPUT_MESSAGE)

    try:
        generator = generator or AnthropicDescriptionGenerator()
        result = await generator.generate(data)
    except Exception:
        logger.exception("Property description generation failed")
        return _failure(GENERATION_FAILED_MESSAGE)
    return {"error": None, "description": result.description, "summary": result.summary}
