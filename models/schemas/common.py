from marshmallow import ValidationError


def normalize_identifier(value):
    """Usernames and emails are compared trimmed and lower-cased."""
    return value.strip().lower() if isinstance(value, str) else value


def not_blank(value: str) -> None:
    if value is None or not str(value).strip():
        raise ValidationError("Field may not be blank.")


def alias_keys(data, aliases: dict):
    """Copy alternate wire names onto the canonical key when it is absent."""
    if not isinstance(data, dict):
        return data
    data = dict(data)
    for alias, canonical in aliases.items():
        if alias in data and canonical not in data:
            data[canonical] = data.pop(alias)
        else:
            data.pop(alias, None)
    return data
