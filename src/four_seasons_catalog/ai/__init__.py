from .description import (
    AnthropicDescriptionGenerator,
    PropertyDescription,
    PropertyDescriptionInput,
    generate_description_action,
)

__all__ = [
    "AnthropicDescriptionGenerator",
    "PropertyDescription",
    "PropertyDescriptionInput",
    "generate_description_action",
]
