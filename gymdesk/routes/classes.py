import logging
from datetime import timedelta
from io import BytesIO

from flask import Blueprint, request, current_app, send_file
from flask_login import login_required, current_user
from openpyxl import Workbook
from openpyxl.styles import Alignment, Font
from openpyxl.utils import get_column_letter

from gymdesk.decorators import admin_required, admin_or_manager_required, staff_required
from gymdesk.exceptions import InvalidInputError
from gymdesk.extensions import db, limiter
from gymdesk.models import Class, Enrollment, Facility, Student, ENROLLMENT_STATUSES
from gymdesk.utils import class_templates, enrollment_allocator, schedule_exceptions, schedule_registry
from gymdesk.utils.instance_generator import generate_instances
from gymdesk.utils.instance_lifecycle import list_instances, transition_instance
from gymdesk.utils.responses import success_response
from gymdesk.utils.timezone import facility_today, utc_now_naive
from gymdesk.validators import parse_date, parse_pagination, validate_class_payload

logger = logging.getLogger(__name__)

classes_bp = Blueprint('classes', __name__, url_prefix='/classes')


def _get_json():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise InvalidInputError('Request body must be a JSON object', 'INVALID_JSON')
    return data


def _pagination_args():
    return parse_pagination(
        request.args,
        current_app.config['DEFAULT_PAGE_SIZE'],
        current_app.config['MAX_PAGE_SIZE'],
    )


# Classes

@classes_bp.route('/api', methods=['POST'])
@login_required
@admin_or_manager_required
def create_class():
    fields = validate_class_payload(_get_json())
    new_class = Class(facility_id=current_user.facility_id, **fields)
    db.session.add(new_class)
    db.session.commit()
    logger.info('Created class %s (%s) with capacity %d', new_class.id, new_class.name, new_class.max_capacity)
    return success_response(new_class.to_dict(), 201)


@classes_bp.route('/api', methods=['GET'])
@login_required
def list_classes():
    page, limit = _pagination_args()
    pagination = (
        Class.query
        .filter(Class.facility_id == current_user.facility_id, Class.deleted_at.is_(None))
        .order_by(Class.created_at.desc(), Class.id.desc())
        .paginate(page=page, per_page=limit, error_out=False)
    )
    return success_response({
        'items': [cls.to_dict() for cls in pagination.items],
        'total': pagination.total,
        'page': page,
        'limit': limit,
        'pages': pagination.pages,
    })


@classes_bp.route('/api/<int:class_id>', methods=['GET'])
@login_required
def get_class(class_id):
    cls = Class.get_for_facility(current_user.facility_id, class_id)
    class_data = cls.to_dict()
    class_data['enrolledCount'] = enrollment_allocator.count_active_enrollments(cls.id)
    class_data['schedules'] = [
        schedule.to_dict() for schedule in schedule_registry.list_schedules(current_user.facility_id, cls.id)
    ]
    return success_response(class_data)


@classes_bp.route('/api/<int:class_id>', methods=['PATCH'])
@login_required
@admin_or_manager_required
def update_class(class_id):
    cls = Class.get_for_facility(current_user.facility_id, class_id)
    fields = validate_class_payload(_get_json(), partial=True)

    # Capacity edits do not revisit waitlist flags of existing enrollments
    for column, value in fields.items():
        setattr(cls, column, value)
    cls.updated_at = utc_now_naive()
    db.session.commit()
    logger.info('Updated class %s: %s', cls.id, ', '.join(sorted(fields)) or 'no changes')
    return success_response(cls.to_dict())


@classes_bp.route('/api/<int:class_id>', methods=['DELETE'])
@login_required
@admin_required
def delete_class(class_id):
    cls = Class.get_for_facility(current_user.facility_id, class_id)
    cls.deleted_at = utc_now_naive()
    db.session.commit()
    logger.info('Deleted class %s', cls.id)
    return success_response({'message': 'Class deleted successfully'})


# Schedules

@classes_bp.route('/api/<int:class_id>/schedules', methods=['POST'])
@login_required
@admin_or_manager_required
def add_schedule(class_id):
    data = _get_json()
    schedule = schedule_registry.add_schedule(
        current_user.facility_id,
        class_id,
        data.get('dayOfWeek'),
        data.get('startTime'),
        data.get('endTime'),
        data.get('recurrenceRule'),
    )
    return success_response(schedule.to_dict(), 201)


@classes_bp.route('/api/<int:class_id>/schedules', methods=['GET'])
@login_required
def get_schedules(class_id):
    schedules = schedule_registry.list_schedules(current_user.facility_id, class_id)
    return success_response([schedule.to_dict() for schedule in schedules])


@classes_bp.route('/api/<int:class_id>/schedules/<int:schedule_id>', methods=['DELETE'])
@login_required
@admin_or_manager_required
def remove_schedule(class_id, schedule_id):
    schedule_registry.remove_schedule(current_user.facility_id, class_id, schedule_id)
    return success_response({'message': 'Schedule removed'})


@classes_bp.route('/api/<int:class_id>/schedules/<int:schedule_id>/exceptions', methods=['POST'])
@login_required
@admin_or_manager_required
def add_schedule_exception(class_id, schedule_id):
    data = _get_json()
    exception = schedule_exceptions.add_exception(
        current_user.facility_id,
        class_id,
        schedule_id,
        parse_date(data.get('exceptionDate'), 'exceptionDate'),
        reason=data.get('reason'),
        is_cancelled=data.get('isCancelled', True),
    )
    return success_response(exception.to_dict(), 201)


@classes_bp.route('/api/<int:class_id>/schedules/<int:schedule_id>/exceptions', methods=['GET'])
@login_required
def get_schedule_exceptions(class_id, schedule_id):
    exceptions = schedule_exceptions.list_exceptions(current_user.facility_id, class_id, schedule_id)
    return success_response([exception.to_dict() for exception in exceptions])


# Instances

def _generation_window(data):
    """Requested window, defaulting to today (facility time) plus INSTANCE_GENERATION_DAYS."""
    days_ahead = current_app.config['INSTANCE_GENERATION_DAYS']
    start_date = parse_date(data.get('startDate'), 'startDate', required=False)
    end_date = parse_date(data.get('endDate'), 'endDate', required=False)
    if start_date is None:
        facility = db.session.get(Facility, current_user.facility_id)
        start_date = facility_today(facility.time_zone if facility else None)
    if end_date is None:
        end_date = start_date + timedelta(days=days_ahead)
    return start_date, end_date


@classes_bp.route('/api/<int:class_id>/generate-instances', methods=['POST'])
@login_required
@admin_or_manager_required
@limiter.limit('30 per minute')
def generate_class_instances(class_id):
    data = request.get_json(silent=True)
    start_date, end_date = _generation_window(data if isinstance(data, dict) else {})
    summary = generate_instances(current_user.facility_id, class_id, start_date, end_date)
    return success_response({
        'instancesCreated': summary['instances_created'],
        'skippedExisting': summary['skipped_existing'],
        'skippedCancelled': summary['skipped_cancelled'],
        'failedSchedules': summary['failed_schedules'],
        'startDate': start_date.isoformat(),
        'endDate': end_date.isoformat(),
    }, 201)


@classes_bp.route('/api/<int:class_id>/instances', methods=['GET'])
@login_required
def get_class_instances(class_id):
    instances = list_instances(
        current_user.facility_id,
        class_id,
        start_date=parse_date(request.args.get('startDate'), 'startDate', required=False),
        end_date=parse_date(request.args.get('endDate'), 'endDate', required=False),
        status=request.args.get('status') or None,
    )
    return success_response([instance.to_dict() for instance in instances])


@classes_bp.route('/api/instances/<int:instance_id>/status', methods=['PATCH'])
@login_required
@staff_required
def update_instance_status(instance_id):
    data = _get_json()
    instance = transition_instance(current_user.facility_id, instance_id, data.get('status'))
    return success_response(instance.to_dict())


# Enrollments

@classes_bp.route('/api/<int:class_id>/enrollments', methods=['POST'])
@login_required
def enroll_student(class_id):
    data = _get_json()
    student_id = data.get('studentId')
    if not isinstance(student_id, int) or isinstance(student_id, bool):
        raise InvalidInputError('studentId must be an integer', 'VALIDATION_ERROR')

    enrollment = enrollment_allocator.enroll(
        current_user.facility_id,
        class_id,
        student_id,
        parse_date(data.get('startDate'), 'startDate'),
        parse_date(data.get('endDate'), 'endDate', required=False),
    )
    return success_response(enrollment.to_dict(), 201)


@classes_bp.route('/api/<int:class_id>/enrollments', methods=['GET'])
@login_required
def get_class_enrollments(class_id):
    page, limit = _pagination_args()
    result = enrollment_allocator.list_enrollments(current_user.facility_id, class_id, page, limit)
    result['items'] = [enrollment.to_dict() for enrollment in result['items']]
    return success_response(result)


@classes_bp.route('/api/<int:class_id>/enrollments/<int:student_id>', methods=['PATCH'])
@login_required
@admin_or_manager_required
def update_enrollment_status(class_id, student_id):
    status = _get_json().get('status')
    if status not in ENROLLMENT_STATUSES:
        raise InvalidInputError(
            f'status must be one of {", ".join(ENROLLMENT_STATUSES)}',
            'VALIDATION_ERROR',
        )
    enrollment = enrollment_allocator.set_enrollment_status(current_user.facility_id, class_id, student_id, status)
    return success_response(enrollment.to_dict())


@classes_bp.route('/api/<int:class_id>/enrollments/<int:student_id>', methods=['DELETE'])
@login_required
@admin_or_manager_required
def unenroll_student(class_id, student_id):
    enrollment_allocator.unenroll(current_user.facility_id, class_id, student_id)
    return success_response({'message': 'Student unenrolled successfully'})


@classes_bp.route('/api/<int:class_id>/roster/export', methods=['GET'])
@login_required
@admin_or_manager_required
def export_roster(class_id):
    """Export the live roster of a class as an Excel file, in position order."""
    cls = Class.get_for_facility(current_user.facility_id, class_id)
    rows = (
        db.session.query(Enrollment, Student)
        .join(Student, Enrollment.student_id == Student.id)
        .filter(Enrollment.class_id == cls.id, Enrollment.deleted_at.is_(None))
        .order_by(Enrollment.position, Enrollment.created_at, Enrollment.id)
        .all()
    )

    wb = Workbook()
    ws = wb.active
    ws.title = 'Roster'

    headers = ['Position', 'Student ID', 'First Name', 'Last Name', 'Status', 'Waitlisted', 'Start Date', 'End Date']
    for col_num, header in enumerate(headers, 1):
        cell = ws.cell(row=1, column=col_num, value=header)
        cell.font = Font(bold=True)

    for row_num, (enrollment, student) in enumerate(rows, 2):
        ws.cell(row=row_num, column=1, value=enrollment.position)
        ws.cell(row=row_num, column=2, value=student.id)
        ws.cell(row=row_num, column=3, value=student.first_name)
        ws.cell(row=row_num, column=4, value=student.last_name)
        ws.cell(row=row_num, column=5, value=enrollment.status)
        ws.cell(row=row_num, column=6, value='yes' if enrollment.is_waitlisted else 'no')
        ws.cell(row=row_num, column=7, value=enrollment.start_date)
        ws.cell(row=row_num, column=8, value=enrollment.end_date)

    column_widths = [10, 12, 20, 20, 12, 12, 14, 14]
    for col_num, width in enumerate(column_widths, 1):
        ws.column_dimensions[get_column_letter(col_num)].width = width
    for row in ws.iter_rows(min_row=2):
        for cell in row:
            cell.alignment = Alignment(horizontal='left')

    excel_buffer = BytesIO()
    wb.save(excel_buffer)
    excel_buffer.seek(0)

    logger.info('Exported roster of class %s (%d rows)', cls.id, len(rows))
    return send_file(
        excel_buffer,
        mimetype='application/vnd.openxmlformats-officedocument.spreadsheetml.sheet',
        as_attachment=True,
        download_name=f'class_{cls.id}_roster.xlsx',
    )


# Templates

@classes_bp.route('/api/templates', methods=['POST'])
@login_required
@admin_or_manager_required
def create_class_template():
    template = class_templates.create_template(current_user.facility_id, _get_json())
    return success_response(template.to_dict(), 201)


@classes_bp.route('/api/templates', methods=['GET'])
@login_required
@admin_or_manager_required
def get_class_templates():
    templates = class_templates.list_templates(current_user.facility_id)
    return success_response([template.to_dict() for template in templates])


@classes_bp.route('/api/templates/<int:template_id>/apply', methods=['POST'])
@login_required
@admin_or_manager_required
def apply_class_template(template_id):
    data = _get_json()
    new_class = class_templates.apply_template(
        current_user.facility_id,
        template_id,
        data.get('name'),
        coach_ids=data.get('coachIds'),
        price_per_month=data.get('pricePerMonth'),
    )
    class_data = new_class.to_dict()
    class_data['schedules'] = [
        schedule.to_dict() for schedule in schedule_registry.list_schedules(current_user.facility_id, new_class.id)
    ]
    return success_response(class_data, 201)
