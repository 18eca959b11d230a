"""JSON schema definition for game definition files.

Defines the structure authors must follow. Conditions are recursive through
``#/definitions/condition``; cross references (room ids, item ids) are not
expressible here and are checked by ``loader.find_reference_issues``.
"""

_PATH = {"type": "string", "minLength": 1}
_SCALAR = {"type": ["string", "number", "boolean"]}


def _single(key, value_schema):
    return {
        "type": "object",
        "required": [key],
        "properties": {key: value_schema},
        "additionalProperties": False,
    }


def _pair(first, second):
    return {
        "type": "array",
        "items": [first, second],
        "minItems": 2,
        "maxItems": 2,
    }


_CONDITION_LIST = {"type": "array", "items": {"$ref": "#/definitions/condition"}}
_EFFECT_LIST = {"type": "array", "items": {"$ref": "#/definitions/effect"}}
_TEXT = {"$ref": "#/definitions/text"}

GAME_DEFINITION_SCHEMA = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "definitions": {
        "condition": {
            "oneOf": [
                _single("eq", _pair(_PATH, _SCALAR)),
                _single("ne", _pair(_PATH, _SCALAR)),
                _single("gt", _pair(_PATH, {"type": "number"})),
                _single("gte", _pair(_PATH, {"type": "number"})),
                _single("lt", _pair(_PATH, {"type": "number"})),
                _single("lte", _pair(_PATH, {"type": "number"})),
                _single("truthy", _PATH),
                _single("falsy", _PATH),
                _single("has", _PATH),
                _single("lacks", _PATH),
                _single("present", _PATH),
                _single("absent", _PATH),
                _single("once", _PATH),
                _single("is_at", _pair(_PATH, _PATH)),
                _single("and", _CONDITION_LIST),
                _single("or", _CONDITION_LIST),
                _single("not", {"$ref": "#/definitions/condition"}),
            ]
        },
        "effect": {
            "oneOf": [
                _single("set", _pair(_PATH, _SCALAR)),
                _single("add", _pair(_PATH, {"type": "number"})),
                _single("subtract", _pair(_PATH, {"type": "number"})),
                _single("consume", _PATH),
                _single("markOnce", _PATH),
                _single("addItem", {"type": "string"}),
                _single("removeItem", {"type": "string"}),
            ]
        },
        "fragment": {
            "type": "object",
            "required": ["say"],
            "properties": {
                "say": {"type": "string"},
                "when": _CONDITION_LIST,
                "priority": {"type": "number"},
                "group": {"type": "string"},
            },
        },
        "text": {
            "oneOf": [
                {"type": "string"},
                {
                    "type": "object",
                    "required": ["fragments"],
                    "properties": {
                        "id": {"type": "string"},
                        "fragments": {"type": "array", "items": {"$ref": "#/definitions/fragment"}},
                    },
                },
            ]
        },
        "trigger": {
            "type": "object",
            "required": ["when", "effects"],
            "properties": {
                "id": {"type": "string"},
                "when": _CONDITION_LIST,
                "effects": _EFFECT_LIST,
                "message": _TEXT,
            },
        },
        "useAction": {
            "type": "object",
            "required": ["response"],
            "properties": {
                "targetId": {"type": "string"},
                "number": {"type": "number"},
                "numberAny": {"type": "boolean"},
                "requires": _CONDITION_LIST,
                "response": _TEXT,
                "effects": _EFFECT_LIST,
            },
        },
        "item": {
            "type": "object",
            "required": ["id", "name", "description", "examineText", "takeable"],
            "properties": {
                "id": {"type": "string", "minLength": 1},
                "name": {"type": "string"},
                "description": _TEXT,
                "examineText": _TEXT,
                "takeable": {"type": "boolean"},
                "aliases": {"type": "array", "items": {"type": "string"}},
                "location": {"type": "string"},
                "takeWhen": _CONDITION_LIST,
                "takeBlockedText": {"type": "string"},
                "onTake": _EFFECT_LIST,
                "onTakeText": _TEXT,
                "useActions": {"type": "array", "items": {"$ref": "#/definitions/useAction"}},
            },
        },
        "dialogueLine": {
            "type": "object",
            "required": ["playerLine", "response"],
            "properties": {
                "when": _CONDITION_LIST,
                "playerLine": {"type": "string"},
                "response": _TEXT,
                "effects": _EFFECT_LIST,
                "setsFlag": {"type": "string"},
                "givesItem": {"type": "string"},
            },
        },
        "npc": {
            "type": "object",
            "required": ["id", "name", "description", "dialogue"],
            "properties": {
                "id": {"type": "string", "minLength": 1},
                "name": {"type": "string"},
                "description": {"type": "string"},
                "dialogue": {"type": "array", "items": {"$ref": "#/definitions/dialogueLine"}},
                "aliases": {"type": "array", "items": {"type": "string"}},
            },
        },
        "exit": {
            "type": "object",
            "required": ["targetRoomId"],
            "properties": {
                "targetRoomId": {"type": "string"},
                "aliases": {"type": "array", "items": {"type": "string"}},
                "direction": {"type": "string"},  # legacy, folded into aliases
                "locked": {"type": "boolean"},
                "requiredItem": {"type": "string"},
                "description": {"type": "string"},
                "requires": _CONDITION_LIST,
                "blockedMessage": _TEXT,
            },
        },
        "room": {
            "type": "object",
            "required": ["id", "name", "description", "items", "npcs", "exits"],
            "properties": {
                "id": {"type": "string", "minLength": 1},
                "name": {"type": "string"},
                "description": _TEXT,
                "items": {"type": "array", "items": {"$ref": "#/definitions/item"}},
                "npcs": {"type": "array", "items": {"$ref": "#/definitions/npc"}},
                "exits": {"type": "array", "items": {"$ref": "#/definitions/exit"}},
                "triggers": {"type": "array", "items": {"$ref": "#/definitions/trigger"}},
            },
        },
        "hint": {
            "type": "object",
            "required": ["id", "text"],
            "properties": {
                "id": {"type": "string"},
                "text": _TEXT,
                "when": _CONDITION_LIST,
            },
        },
    },
    "type": "object",
    "required": [
        "id", "name", "version", "rooms", "startingRoom",
        "initialFlags", "introText", "winMessage", "hints",
    ],
    "properties": {
        "id": {"type": "string"},
        "name": {"type": "string"},
        "version": {"type": "string"},
        "description": {"type": "string"},
        "rooms": {"type": "array", "minItems": 1, "items": {"$ref": "#/definitions/room"}},
        "startingRoom": {"type": "string"},
        "initialFlags": {"type": "object", "additionalProperties": _SCALAR},
        "introText": _TEXT,
        "winMessage": _TEXT,
        "hints": {"type": "array", "items": {"$ref": "#/definitions/hint"}},
        "globalTriggers": {"type": "array", "items": {"$ref": "#/definitions/trigger"}},
    },
}

GAME_STATE_SCHEMA = {
    "type": "object",
    "properties": {
        "currentRoomId": {"type": "string"},
        "inventoryIds": {"type": "array", "items": {"type": "string"}},
        "takenItemIds": {"type": "array", "items": {"type": "string"}},
        "flags": {"type": "object", "additionalProperties": _SCALAR},
        "visitedRooms": {"type": "array", "items": {"type": "string"}},
        "gameOver": {"type": "boolean"},
        "won": {"type": "boolean"},
        "turnCount": {"type": "number"},
        "once": {"type": "array", "items": {"type": "string"}},
    },
}
