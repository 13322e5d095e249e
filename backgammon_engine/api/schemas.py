# backgammon_engine/api/schemas.py

from marshmallow import Schema, fields, pre_load, validates_schema, ValidationError
from marshmallow.validate import OneOf

from ..game_core import constants as c

# --- Позиция на доске: 1..24, 'bar' или 'off' ---

class LocationField(fields.Field):
    """
    Принимает номер пункта (int или строку из цифр), 'bar' или 'off'.
    Сериализует как есть.
    """
    default_error_messages = {
        'invalid': "Location must be a point 1-24, 'bar' or 'off'.",
    }

    def _deserialize(self, value, attr, data, **kwargs):
        if isinstance(value, bool):
            raise self.make_error('invalid')

        if isinstance(value, str):
            text = value.strip().lower()
            if text in (c.LOCATION_BAR, c.LOCATION_OFF):
                return text
            if not text.isdigit():
                raise self.make_error('invalid')
            value = int(text)

        if not isinstance(value, int):
            raise self.make_error('invalid')
        if not c.POINT_1 <= value <= c.POINT_24:
            raise self.make_error('invalid')
        return value

    def _serialize(self, value, attr, obj, **kwargs):
        return value


# --- Схема команды хода ---

class MoveCommandSchema(Schema):
    """
    Команда propose_move: {'from': ..., 'to': ...}.
    Выброс не может быть началом хода, бар не может быть его концом.
    """
    origin = LocationField(required=True, data_key='from')
    destination = LocationField(required=True, data_key='to')

    @pre_load
    def strip_whitespace(self, data, **kwargs):
        return {
            key: value.strip() if isinstance(value, str) else value
            for key, value in data.items()
        }

    @validates_schema
    def validate_direction(self, data, **kwargs):
        if data.get('origin') == c.LOCATION_OFF:
            raise ValidationError("A move cannot start from 'off'.", 'from')
        if data.get('destination') == c.LOCATION_BAR:
            raise ValidationError("A move cannot end on the 'bar'.", 'to')
        if data.get('origin') == data.get('destination'):
            raise ValidationError("Origin and destination must differ.", 'to')


# --- Снимок партии ---

class StepSchema(Schema):
    origin = LocationField(data_key='from')
    destination = LocationField(data_key='to')
    die = fields.Int()
    hit = fields.Bool()


class SideCountSchema(Schema):
    white = fields.Int(required=True)
    black = fields.Int(required=True)


class GameSnapshotSchema(Schema):
    """Снимок состояния партии для слоя представления."""
    game_id = fields.Str(required=True)
    state = fields.Str(required=True)
    current_player = fields.Int(allow_none=True, validate=OneOf([c.PLAYER_WHITE, c.PLAYER_BLACK]))
    winner = fields.Int(allow_none=True, validate=OneOf([c.PLAYER_WHITE, c.PLAYER_BLACK]))
    dice = fields.List(fields.Int())
    remaining_dice = fields.List(fields.Int())
    points = fields.List(fields.Int(), required=True)
    bar = fields.Nested(SideCountSchema, required=True)
    off = fields.Nested(SideCountSchema, required=True)
    history = fields.List(fields.Nested(StepSchema))
