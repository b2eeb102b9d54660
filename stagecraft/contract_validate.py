import jsonschema

from .schema_loader import load_schema


def validate_script_document(data: dict) -> None:
    """Validate a play document dict against the canonical Script.v1.json contract.

    Raises jsonschema.ValidationError if non-conformant.
    """
    schema = load_schema("Script.v1.json")
    jsonschema.validate(data, schema)


def validate_script_model(script) -> None:
    """Validate a Script by projecting it to its document form first.

    Raises jsonschema.ValidationError if the projected document is non-conformant.
    """
    validate_script_document(script.to_json())
