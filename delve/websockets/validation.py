"""Lightweight websocket payload validation utilities.

Minimal schema-like checking with clear, consistent error responses.
Returns (ok, value_or_error) tuples; the caller decides whether to emit an
error event.

Schema Mini-Language (Python dict):
{
  'field_name': ('str', required: bool, extras: dict)
}
Every game payload field is a string.
Extras:
  max_len / min_len, allow_empty
  choices (value must be one of them, compared lower-cased)

If invalid: (False, {'field': 'action', 'error': 'not allowed', 'code': 'choices'})
If valid: (True, normalized_data)
"""
from __future__ import annotations

from typing import Any, Dict, Tuple

from delve.dungeon.config import DIFFICULTY_SETTINGS, SURVIVAL
from delve.services.game_session import ACTIONS
from delve.services.turn_engine import DIRECTION_VECTORS

PRIMITIVES = {
    'str': str,
}


def _fail(field: str, message: str, code: str) -> Tuple[bool, Dict[str, Any]]:
    return False, {'field': field, 'error': message, 'code': code}


def validate(payload: Any, schema: Dict[str, tuple]) -> Tuple[bool, Dict[str, Any]]:
    if not isinstance(payload, dict):
        return _fail('__root__', 'payload must be an object', 'type')
    out = {}
    for name, spec in schema.items():
        if not isinstance(spec, tuple) or len(spec) < 2:
            return _fail('__schema__', f'invalid spec for {name}', 'schema')
        type_name, required = spec[0], spec[1]
        extras = spec[2] if len(spec) > 2 else {}
        if type_name not in PRIMITIVES:
            return _fail('__schema__', f'unsupported type {type_name}', 'schema')
        if name not in payload or payload[name] is None:
            if required:
                return _fail(name, 'missing required field', 'required')
            continue
        value = payload[name]
        if not isinstance(value, PRIMITIVES[type_name]):
            return _fail(name, f'expected {type_name}', 'type')
        s = value.strip() if not extras.get('allow_empty') else value
        if not extras.get('allow_empty') and len(s) == 0:
            return _fail(name, 'must not be empty', 'empty')
        if 'max_len' in extras and len(value) > extras['max_len']:
            return _fail(name, 'too long', 'max_len')
        if 'min_len' in extras and len(value) < extras['min_len']:
            return _fail(name, 'too short', 'min_len')
        if 'choices' in extras and s.lower() not in extras['choices']:
            return _fail(name, 'not allowed', 'choices')
        out[name] = s.lower() if 'choices' in extras else s
    return True, out


# Predefined schemas used by handlers
DIFFICULTY_CHOICES = frozenset(DIFFICULTY_SETTINGS) | {SURVIVAL}

JOIN_GAME = {
    'room': ('str', True, {'min_len': 1, 'max_len': 64})
}
LEAVE_GAME = JOIN_GAME
GAME_ACTION = {
    'room': ('str', True, {'min_len': 1, 'max_len': 64}),
    'action': ('str', True, {'min_len': 1, 'max_len': 32, 'choices': frozenset(ACTIONS)}),
    'direction': ('str', False, {'max_len': 16, 'choices': frozenset(DIRECTION_VECTORS)}),
    'difficulty': ('str', False, {'max_len': 32, 'choices': DIFFICULTY_CHOICES}),
}
