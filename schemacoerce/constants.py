""" Constants shared by the schemacoerce modules """

# Schema kinds accepted in the "type" keyword
BOOLEAN = 'boolean'
INTEGER = 'integer'
NUMBER = 'number'
STRING = 'string'
ARRAY = 'array'
OBJECT = 'object'
NULL = 'null'

KINDS = (BOOLEAN, INTEGER, NUMBER, STRING, ARRAY, OBJECT, NULL)

# Error codes emitted by the validation core
ERROR_TYPE = 'type'
ERROR_MISSING_FIELD = 'missingField'
ERROR_UNEXPECTED_PROPERTIES = 'unexpectedProperties'
ERROR_INVALID = 'invalid'
ERROR_ENUM = 'enum'
ERROR_FORMAT = 'format'
ERROR_PATTERN = 'pattern'
ERROR_MIN_LENGTH = 'minLength'
ERROR_MAX_LENGTH = 'maxLength'
ERROR_MAX_BYTE_LENGTH = 'maxByteLength'
ERROR_MINIMUM = 'minimum'
ERROR_MAXIMUM = 'maximum'
ERROR_MULTIPLE_OF = 'multipleOf'
ERROR_MIN_ITEMS = 'minItems'
ERROR_MAX_ITEMS = 'maxItems'
ERROR_UNIQUE_ITEMS = 'uniqueItems'
ERROR_MIN_PROPERTIES = 'minProperties'
ERROR_MAX_PROPERTIES = 'maxProperties'

# Default HTTP-style statuses of the engine's own error codes
ERROR_STATUSES = {
    ERROR_MISSING_FIELD: 400,
    ERROR_TYPE: 422,
    ERROR_UNEXPECTED_PROPERTIES: 422,
    ERROR_INVALID: 422,
    ERROR_ENUM: 422,
    ERROR_FORMAT: 422,
    ERROR_PATTERN: 422,
    ERROR_MIN_LENGTH: 422,
    ERROR_MAX_LENGTH: 422,
    ERROR_MAX_BYTE_LENGTH: 422,
    ERROR_MINIMUM: 422,
    ERROR_MAXIMUM: 422,
    ERROR_MULTIPLE_OF: 422,
    ERROR_MIN_ITEMS: 422,
    ERROR_MAX_ITEMS: 422,
    ERROR_UNIQUE_ITEMS: 422,
    ERROR_MIN_PROPERTIES: 422,
    ERROR_MAX_PROPERTIES: 422,
}

STATUS_OK = 200
STATUS_BAD_REQUEST = 400
STATUS_NOT_FOUND = 404
STATUS_SERVER_ERROR = 500
STATUS_LOOP_DETECTED = 508

# Ref hops allowed while resolving a single data level
MAX_REF_DEPTH = 50

# Prefix under which format-scoped extensions are registered
FORMAT_KEY_PREFIX = '/format/'

# Location used for ref-less discriminator targets and recursive serialization
COMPONENTS_SCHEMAS = '#/components/schemas/'

# Formats whose string form is replaced by a richer value
COERCED_FORMATS = ('date-time', 'uuid')

# Human readable names used in type errors
TYPE_LABELS = {
    'date-time': 'date/time',
    'uuid': 'UUID',
    'timestamp': 'timestamp',
}

FORMAT_LABELS = {
    'email': 'email',
    'ipv4': 'IPv4 address',
    'ipv6': 'IPv6 address',
    'ip': 'IP address',
    'uri': 'URI',
}

BOOLEAN_TRUE_STRINGS = ('1', 'true', 'yes', 'on')
BOOLEAN_FALSE_STRINGS = ('0', 'false', 'no', 'off', '')

ARRAY_STYLE_SEPARATORS = {
    'form': ',',
    'spaceDelimited': ' ',
    'pipeDelimited': '|',
}

MAX_VALUE_DISPLAY = 20
