"""Request schemas.

Schemas check shape and types only; game and wallet rules (card count,
amount limits, balance) are enforced by the services so they hold for
every caller.
"""

from __future__ import annotations

from marshmallow import EXCLUDE, Schema, fields, validate


class JoinSessionSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    userId = fields.String(required=True, validate=validate.Length(min=1, max=128))
    sessionId = fields.String(required=False, load_default=None, allow_none=True)
    # Count and range are checked by the registry (InvalidSelection)
    cardIndices = fields.List(fields.Integer(strict=True), required=True)
    cardCost = fields.Float(required=True, validate=validate.Range(min=0))


class WalletRequestSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    userId = fields.String(required=True, validate=validate.Length(min=1, max=128))
    amount = fields.Float(required=True, validate=validate.Range(min=0, min_inclusive=False))


class HistoryQuerySchema(Schema):
    class Meta:
        unknown = EXCLUDE

    userId = fields.String(required=True, validate=validate.Length(min=1, max=128))
    limit = fields.Integer(required=False, load_default=10, validate=validate.Range(min=1, max=100))
    offset = fields.Integer(required=False, load_default=0, validate=validate.Range(min=0))


class UserQuerySchema(Schema):
    class Meta:
        unknown = EXCLUDE

    userId = fields.String(required=True, validate=validate.Length(min=1, max=128))


class PollQuerySchema(Schema):
    class Meta:
        unknown = EXCLUDE

    lastDrawIndex = fields.Integer(required=False, load_default=0, validate=validate.Range(min=0))
