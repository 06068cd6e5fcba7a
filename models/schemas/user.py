from marshmallow import Schema, fields, pre_load, validates, ValidationError, EXCLUDE

from models.schemas.common import normalize_identifier, not_blank, alias_keys


class UserCreateSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    username = fields.String(required=True, validate=not_blank)
    email = fields.Email(required=True)
    full_name = fields.String(required=True, data_key="fullName", validate=not_blank)
    password = fields.String(required=True, load_only=True, validate=not_blank)

    @pre_load
    def normalize(self, data, **kwargs):
        data = alias_keys(data, {"secret": "password"})
        if isinstance(data, dict):
            for key in ("username", "email"):
                if key in data:
                    data[key] = normalize_identifier(data[key])
            if isinstance(data.get("fullName"), str):
                data["fullName"] = data["fullName"].strip()
        return data

    @validates("username")
    def validate_username(self, value, **kwargs):
        if "@" in value:
            raise ValidationError("Username may not contain '@'.")


class UserLoginSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    identifier = fields.String(required=True, data_key="usernameOrEmail", validate=not_blank)
    password = fields.String(required=True, load_only=True, validate=not_blank)

    @pre_load
    def normalize(self, data, **kwargs):
        data = alias_keys(data, {"identifier": "usernameOrEmail", "secret": "password"})
        if isinstance(data, dict) and "usernameOrEmail" in data:
            data["usernameOrEmail"] = normalize_identifier(data["usernameOrEmail"])
        return data


class ChangePasswordSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    current_password = fields.String(required=True, data_key="currentPassword", validate=not_blank)
    new_password = fields.String(required=True, data_key="newPassword", validate=not_blank)

    @pre_load
    def aliases(self, data, **kwargs):
        return alias_keys(data, {"currentSecret": "currentPassword", "newSecret": "newPassword"})


class UserUpdateSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    full_name = fields.String(required=True, data_key="fullName", validate=not_blank)
    email = fields.Email(required=True)

    @pre_load
    def normalize(self, data, **kwargs):
        if isinstance(data, dict) and "email" in data:
            data = dict(data)
            data["email"] = normalize_identifier(data["email"])
        return data


class UserOutSchema(Schema):
    id = fields.String(allow_none=False)
    username = fields.String()
    email = fields.String()
    full_name = fields.String(data_key="fullName")
    created_at = fields.DateTime(data_key="createdAt")
    updated_at = fields.DateTime(data_key="updatedAt")
