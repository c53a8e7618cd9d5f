"""Request payload validation for the JSON API.

Each validator collects every problem it finds and raises a single
VALIDATION_ERROR whose details list one {path, message} entry per field.
"""
from datetime import date
from decimal import Decimal, InvalidOperation

from gymdesk.exceptions import InvalidInputError
from gymdesk.models import SKILL_LEVELS


def _fail(errors):
    raise InvalidInputError('Request validation failed', 'VALIDATION_ERROR', details=errors)


def _is_int(value):
    return isinstance(value, int) and not isinstance(value, bool)


def parse_date(value, field, required=True):
    """Parse a YYYY-MM-DD string; None is allowed when required=False."""
    if value is None or value == '':
        if required:
            _fail([{'path': field, 'message': f'{field} is required'}])
        return None
    if isinstance(value, date):
        return value
    try:
        # Accept full ISO timestamps too; only the calendar date is used
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        _fail([{'path': field, 'message': f'Invalid date {value!r}, expected YYYY-MM-DD'}])


def parse_positive_int(value, field):
    try:
        number = int(value)
    except (TypeError, ValueError):
        _fail([{'path': field, 'message': f'{field} must be an integer'}])
    if number < 1:
        _fail([{'path': field, 'message': f'{field} must be positive'}])
    return number


def parse_pagination(args, default_limit=20, max_limit=100):
    page = parse_positive_int(args.get('page', 1), 'page')
    limit = parse_positive_int(args.get('limit', default_limit), 'limit')
    if limit > max_limit:
        _fail([{'path': 'limit', 'message': f'limit must be at most {max_limit}'}])
    return page, limit


def _validate_coach_ids(value, errors):
    if not isinstance(value, list) or not value:
        errors.append({'path': 'coachIds', 'message': 'At least one coach is required'})
        return None
    if not all(_is_int(item) and item > 0 for item in value):
        errors.append({'path': 'coachIds', 'message': 'coachIds must be a list of user ids'})
        return None
    return list(value)


def _validate_price(value, errors):
    try:
        price = Decimal(str(value))
    except (InvalidOperation, ValueError):
        errors.append({'path': 'pricePerMonth', 'message': 'pricePerMonth must be a number'})
        return None
    if isinstance(value, bool) or not price.is_finite() or price <= 0:
        errors.append({'path': 'pricePerMonth', 'message': 'Price must be positive'})
        return None
    return price.quantize(Decimal('0.01'))


def validate_class_payload(data, partial=False):
    """Map a camelCase class payload to Class column values.

    With partial=True only the fields present are validated and returned.
    """
    errors = []
    cleaned = {}

    def present(key):
        return key in data if partial else True

    if present('name'):
        name = data.get('name')
        if not isinstance(name, str) or not name.strip() or len(name) > 100:
            errors.append({'path': 'name', 'message': 'Class name is required (max 100 characters)'})
        else:
            cleaned['name'] = name.strip()

    if 'description' in data:
        description = data.get('description')
        if description is not None and (not isinstance(description, str) or len(description) > 1000):
            errors.append({'path': 'description', 'message': 'description must be text (max 1000 characters)'})
        else:
            cleaned['description'] = description or None

    if present('skillLevel'):
        skill_level = data.get('skillLevel')
        if skill_level not in SKILL_LEVELS:
            errors.append({'path': 'skillLevel', 'message': f'skillLevel must be one of {", ".join(SKILL_LEVELS)}'})
        else:
            cleaned['skill_level'] = skill_level

    if present('maxCapacity'):
        capacity = data.get('maxCapacity')
        if not _is_int(capacity) or capacity < 1:
            errors.append({'path': 'maxCapacity', 'message': 'Capacity must be a positive integer'})
        else:
            cleaned['max_capacity'] = capacity

    for key, column in (('minAgeMonths', 'min_age_months'), ('maxAgeMonths', 'max_age_months')):
        if key in data:
            value = data.get(key)
            if value is not None and (not _is_int(value) or value < 0):
                errors.append({'path': key, 'message': f'{key} must be a non-negative integer'})
            else:
                cleaned[column] = value

    if present('coachIds'):
        coach_ids = _validate_coach_ids(data.get('coachIds'), errors)
        if coach_ids is not None:
            cleaned['coach_ids'] = coach_ids

    if present('pricePerMonth'):
        price = _validate_price(data.get('pricePerMonth'), errors)
        if price is not None:
            cleaned['price_per_month'] = price

    min_age = cleaned.get('min_age_months')
    max_age = cleaned.get('max_age_months')
    if min_age is not None and max_age is not None and max_age < min_age:
        errors.append({'path': 'maxAgeMonths', 'message': 'maxAgeMonths must not be below minAgeMonths'})

    if errors:
        _fail(errors)
    return cleaned


def validate_student_payload(data):
    errors = []
    cleaned = {}
    for key, column in (('firstName', 'first_name'), ('lastName', 'last_name')):
        value = data.get(key)
        if not isinstance(value, str) or not value.strip() or len(value) > 100:
            errors.append({'path': key, 'message': f'{key} is required (max 100 characters)'})
        else:
            cleaned[column] = value.strip()

    skill_level = data.get('skillLevel', 'beginner')
    if skill_level not in SKILL_LEVELS:
        errors.append({'path': 'skillLevel', 'message': f'skillLevel must be one of {", ".join(SKILL_LEVELS)}'})
    else:
        cleaned['skill_level'] = skill_level

    if errors:
        _fail(errors)

    cleaned['date_of_birth'] = parse_date(data.get('dateOfBirth'), 'dateOfBirth', required=False)
    return cleaned
