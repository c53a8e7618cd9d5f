import logging

from gymdesk.extensions import db
from gymdesk.exceptions import InvalidInputError, NotFoundError
from gymdesk.models import Class, ClassTemplate
from gymdesk.utils.schedule_registry import add_schedule, validate_schedule_fields
from gymdesk.validators import validate_class_payload

logger = logging.getLogger(__name__)


def _validate_template_schedules(raw_schedules):
    """Validate the embedded schedule list and return it in canonical form."""
    if raw_schedules is None:
        return []
    if not isinstance(raw_schedules, list):
        raise InvalidInputError('schedules must be a list', 'VALIDATION_ERROR')

    cleaned = []
    for index, entry in enumerate(raw_schedules):
        if not isinstance(entry, dict):
            raise InvalidInputError(f'schedules[{index}] must be an object', 'VALIDATION_ERROR')
        try:
            day_of_week, start_text, end_text, rule = validate_schedule_fields(
                entry.get('dayOfWeek'),
                entry.get('startTime'),
                entry.get('endTime'),
                entry.get('recurrenceRule'),
            )
        except InvalidInputError as exc:
            exc.details = {'path': f'schedules[{index}]'}
            raise
        cleaned.append({
            'dayOfWeek': day_of_week,
            'startTime': start_text,
            'endTime': end_text,
            'recurrenceRule': rule,
        })
    return cleaned


def create_template(facility_id, data):
    fields = validate_class_payload(data)
    template = ClassTemplate(
        facility_id=facility_id,
        name=fields['name'],
        description=fields.get('description'),
        schedules=_validate_template_schedules(data.get('schedules')),
        skill_level=fields['skill_level'],
        max_capacity=fields['max_capacity'],
        coach_ids=fields['coach_ids'],
        price_per_month=fields['price_per_month'],
    )
    db.session.add(template)
    db.session.commit()
    logger.info('Created class template %s (%s) with %d schedules',
                template.id, template.name, len(template.schedules))
    return template


def get_template(facility_id, template_id):
    template = ClassTemplate.query.filter(
        ClassTemplate.facility_id == facility_id,
        ClassTemplate.id == template_id,
        ClassTemplate.deleted_at.is_(None),
    ).first()
    if template is None:
        raise NotFoundError('Template not found', 'TEMPLATE_NOT_FOUND')
    return template


def list_templates(facility_id):
    return (
        ClassTemplate.query
        .filter(ClassTemplate.facility_id == facility_id, ClassTemplate.deleted_at.is_(None))
        .order_by(ClassTemplate.name, ClassTemplate.id)
        .all()
    )


def apply_template(facility_id, template_id, name, coach_ids=None, price_per_month=None):
    """Create a class from a template, copying its schedules.

    The class and its schedules are committed together.
    """
    template = get_template(facility_id, template_id)
    overrides = validate_class_payload({
        'name': name,
        'description': template.description,
        'skillLevel': template.skill_level,
        'maxCapacity': template.max_capacity,
        'coachIds': coach_ids if coach_ids is not None else list(template.coach_ids or []),
        'pricePerMonth': price_per_month if price_per_month is not None else str(template.price_per_month),
    })
    new_class = Class(facility_id=facility_id, **overrides)
    db.session.add(new_class)
    db.session.flush()

    for entry in template.schedules or []:
        add_schedule(
            facility_id,
            new_class.id,
            entry['dayOfWeek'],
            entry['startTime'],
            entry['endTime'],
            entry['recurrenceRule'],
            commit=False,
        )

    db.session.commit()
    logger.info('Applied template %s to new class %s', template.id, new_class.id)
    return new_class
