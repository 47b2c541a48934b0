"""Constants for the jsonvalidator package."""

# Keywords that carry no constraint of their own. They are either informative
# or consumed as arguments by another keyword's validator.
IGNORED_KEYWORDS = frozenset([
    # informative
    'id',
    '$id',
    'default',
    'description',
    'title',
    # arguments to other keywords
    'exclusiveMinimum',
    'exclusiveMaximum',
    'additionalItems',
    # handled by the orchestrator itself
    '$schema',
    '$ref',
    'extends',
    'definitions',
])

# Order in which keyword validators run against a schema node. Errors are
# reported in this order.
KEYWORD_ORDER = (
    'type',
    'disallow',
    'not',
    'enum',
    'properties',
    'patternProperties',
    'additionalProperties',
    'required',
    'dependencies',
    'minProperties',
    'maxProperties',
    'items',
    'minItems',
    'maxItems',
    'uniqueItems',
    'minimum',
    'maximum',
    'divisibleBy',
    'multipleOf',
    'minLength',
    'maxLength',
    'pattern',
    'format',
    'allOf',
    'anyOf',
    'oneOf',
)

# Placeholder for an absent member when no id, title or $ref is available.
SUBSCHEMA_LABEL = '<subschema>'
