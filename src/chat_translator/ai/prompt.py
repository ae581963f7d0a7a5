"""Prompt template rendering."""

SOURCE_LANGUAGE_PLACEHOLDER = "{source_language}"
TARGET_LANGUAGE_PLACEHOLDER = "{target_language}"
TEXT_PLACEHOLDER = "{text}"


def render(template: str, source_language: str, target_language: str, text: str) -> str:
    """
    Fill the three placeholders of a user-editable prompt template.

    Plain substring replacement, not str.format: templates may contain other
    braces (JSON examples and the like) that must survive untouched. The text
    is substituted last so placeholder tokens inside it are kept literally.
    Placeholders missing from the template are simply skipped.
    """
    prompt = template.replace(SOURCE_LANGUAGE_PLACEHOLDER, source_language)
    prompt = prompt.replace(TARGET_LANGUAGE_PLACEHOLDER, target_language)
    return prompt.replace(TEXT_PLACEHOLDER, text)
