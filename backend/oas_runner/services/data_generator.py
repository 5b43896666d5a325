"""
Synthetic request data generation from OpenAPI schemas.
"""
import logging
import math
import random
import string
import uuid
from datetime import date, datetime, timezone
from typing import Any, Dict, Optional

from faker import Faker

from oas_runner.core.config import settings as default_settings
from oas_runner.services.schema_resolver import resolve

logger = logging.getLogger(__name__)

SYNTHETIC_PREFIX = 'sample-'
DEFAULT_MIN_LENGTH = 5
DEFAULT_MAX_LENGTH = 10
DEFAULT_MINIMUM = 0
DEFAULT_MAXIMUM = 100
PLACEHOLDER_PASSWORD = 'securePassword123!'
PLACEHOLDER_BINARY = 'dGVzdCBiaW5hcnkgZGF0YQ=='

_ALPHANUMERIC = string.ascii_lowercase + string.digits


class SyntheticDataGenerator:
    """
    Generate values that conform to a schema node.

    The shape of a generated value only depends on the schema; the concrete
    values (optional properties, array lengths, numbers, strings) come from
    the injected random source.
    """

    def __init__(
        self,
        rng: Optional[random.Random] = None,
        optional_probability: Optional[float] = None,
        max_depth: Optional[int] = None,
        faker: Optional[Faker] = None,
    ):
        """
        Initialize generator.

        Args:
            rng: Random source; pass a seeded instance for reproducible output
            optional_probability: Chance that an optional property is emitted
            max_depth: Hard nesting limit after which references and objects collapse to {}
            faker: Faker instance used for the path-keyword fallback
        """
        self.rng = rng or random.Random()
        self.optional_probability = (
            default_settings.OPTIONAL_PROPERTY_PROBABILITY
            if optional_probability is None else optional_probability
        )
        self.max_depth = default_settings.MAX_SCHEMA_DEPTH if max_depth is None else max_depth
        self.faker = faker or Faker()
        self.faker.seed_instance(self.rng.getrandbits(32))

    def generate(self, schema: Optional[Dict[str, Any]], document: Optional[Dict[str, Any]] = None) -> Any:
        """
        Generate a value for a schema node.

        Args:
            schema: Schema node (may be a $ref)
            document: Full specification, used to resolve references

        Returns:
            Generated value; {} for unresolvable or untyped nodes
        """
        return self._generate(schema, document or {}, 0, frozenset())

    def _generate(self, schema: Any, document: Dict[str, Any], depth: int, active_refs: frozenset) -> Any:
        if not isinstance(schema, dict) or not schema:
            return {}

        if '$ref' in schema:
            ref = schema['$ref']
            # A reference already being expanded further up is a cycle
            if ref in active_refs:
                logger.debug(f"Cyclic reference cut at {ref}")
                return {}
            if depth >= self.max_depth:
                logger.debug(f"Depth limit reached at {ref}")
                return {}
            resolved = resolve(ref, document)
            if resolved is None:
                logger.warning(f"Could not resolve schema reference {ref}")
                return {}
            return self._generate(resolved, document, depth + 1, active_refs | {ref})

        schema_type = schema.get('type')

        if schema_type == 'object':
            return self._generate_object(schema, document, depth, active_refs)
        elif schema_type == 'array':
            return self._generate_array(schema, document, depth, active_refs)
        elif schema_type == 'string':
            return self._generate_string(schema)
        elif schema_type in ('integer', 'number'):
            return self._generate_number(schema)
        elif schema_type == 'boolean':
            return self.rng.random() < 0.5

        logger.debug(f"Unknown schema type: {schema_type}")
        return {}

    def _generate_object(
        self, schema: Dict[str, Any], document: Dict[str, Any], depth: int, active_refs: frozenset
    ) -> Dict[str, Any]:
        result: Dict[str, Any] = {}
        if depth >= self.max_depth:
            return result

        properties = schema.get('properties') or {}
        required = schema.get('required') or []

        for prop_name, prop_schema in properties.items():
            if prop_name in required or self.rng.random() < self.optional_probability:
                result[prop_name] = self._generate(prop_schema, document, depth + 1, active_refs)

        # Required names without a declared schema still have to be present
        for prop_name in required:
            if prop_name not in result:
                result[prop_name] = {}

        return result

    def _generate_array(
        self, schema: Dict[str, Any], document: Dict[str, Any], depth: int, active_refs: frozenset
    ) -> list:
        items = schema.get('items')
        # items: {} is a valid any-schema, only a missing items gives []
        if items is None:
            return []
        count = self.rng.randint(1, 3)
        return [self._generate(items, document, depth + 1, active_refs) for _ in range(count)]

    def _generate_string(self, schema: Dict[str, Any]) -> str:
        enum_values = schema.get('enum')
        if enum_values:
            return self.rng.choice(enum_values)

        fmt = schema.get('format')
        if fmt == 'date':
            return date.today().isoformat()
        if fmt == 'date-time':
            return datetime.now(timezone.utc).isoformat()
        if fmt == 'email':
            return f"test-{self.rng.randint(0, 999999)}@example.com"
        if fmt == 'uuid':
            return str(uuid.UUID(int=self.rng.getrandbits(128), version=4))
        if fmt in ('uri', 'url'):
            return f"https://example.com/resource/{self.rng.randint(0, 999)}"
        if fmt == 'password':
            return PLACEHOLDER_PASSWORD
        if fmt == 'binary':
            return PLACEHOLDER_BINARY

        min_length = schema.get('minLength')
        max_length = schema.get('maxLength')
        high = DEFAULT_MAX_LENGTH if max_length is None else int(max_length)
        low = min(DEFAULT_MIN_LENGTH, high) if min_length is None else int(min_length)
        if high < low:
            high = low
        length = self.rng.randint(low, high)
        body = ''.join(self.rng.choice(_ALPHANUMERIC) for _ in range(length))

        value = f"{SYNTHETIC_PREFIX}{body}"
        if max_length is not None and len(value) > int(max_length):
            return body
        return value

    def _generate_number(self, schema: Dict[str, Any]):
        is_integer = schema.get('type') == 'integer'

        enum_values = schema.get('enum')
        if enum_values:
            return self.rng.choice(enum_values)

        minimum = schema.get('minimum')
        maximum = schema.get('maximum')
        low = DEFAULT_MINIMUM if minimum is None else minimum
        high = DEFAULT_MAXIMUM if maximum is None else maximum

        if low == high:
            return int(low) if is_integer else low
        if low > high:
            high = low + 10

        value = self.rng.random() * (high - low) + low
        if is_integer:
            result = math.floor(value)
            if result < low:
                result = math.ceil(low)
            return int(result)
        return min(max(round(value, 2), low), high)

    def generate_for_endpoint(
        self,
        path: str,
        schema: Optional[Dict[str, Any]],
        document: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """
        Generate a request body for an endpoint.

        Uses the request body schema when the specification declares one,
        otherwise falls back to a plausible object guessed from the path.
        """
        if schema:
            return self.generate(schema, document)
        return self.generate_from_path(path)

    def generate_from_path(self, path: str) -> Dict[str, Any]:
        """Best-effort payload for endpoints without a request body schema."""
        lowered = (path or '').lower()
        fake = self.faker

        if 'user' in lowered or 'account' in lowered or 'profile' in lowered:
            user_id = self.rng.randint(1, 999)
            return {
                'id': user_id,
                'username': f"user{user_id}",
                'email': f"user{user_id}@example.com",
                'password': PLACEHOLDER_PASSWORD,
            }
        if 'pet' in lowered:
            return {
                'id': self.rng.randint(1, 999),
                'name': fake.first_name(),
                'status': self.rng.choice(['available', 'pending', 'sold']),
                'category': {'id': self.rng.randint(1, 10), 'name': fake.word().capitalize()},
                'tags': [{'id': self.rng.randint(1, 10), 'name': fake.word()}],
            }
        if 'order' in lowered or 'store' in lowered:
            return {
                'id': self.rng.randint(1, 999),
                'petId': self.rng.randint(1, 999),
                'quantity': self.rng.randint(1, 5),
                'shipDate': datetime.now(timezone.utc).isoformat(),
                'status': self.rng.choice(['placed', 'approved', 'delivered']),
                'complete': False,
            }
        if 'product' in lowered or 'item' in lowered:
            return {
                'id': self.rng.randint(1, 999),
                'name': fake.word().capitalize(),
                'price': round(self.rng.uniform(1, 500), 2),
                'description': fake.sentence(nb_words=6),
            }
        return {}
