from flask import Blueprint, request, current_app
from flask_login import login_required, current_user

from gymdesk.decorators import admin_required, admin_or_manager_required
from gymdesk.exceptions import InvalidInputError
from gymdesk.extensions import db
from gymdesk.models import Student
from gymdesk.utils.responses import success_response
from gymdesk.utils.timezone import utc_now_naive
from gymdesk.validators import parse_pagination, validate_student_payload

students_bp = Blueprint('students', __name__, url_prefix='/students')


@students_bp.route('/api', methods=['POST'])
@login_required
@admin_or_manager_required
def create_student():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise InvalidInputError('Request body must be a JSON object', 'INVALID_JSON')

    student = Student(facility_id=current_user.facility_id, **validate_student_payload(data))
    db.session.add(student)
    db.session.commit()
    current_app.logger.info('Created student %s in facility %s', student.id, student.facility_id)
    return success_response(student.to_dict(), 201)


@students_bp.route('/api', methods=['GET'])
@login_required
def list_students():
    page, limit = parse_pagination(
        request.args,
        current_app.config['DEFAULT_PAGE_SIZE'],
        current_app.config['MAX_PAGE_SIZE'],
    )
    pagination = (
        Student.query
        .filter(Student.facility_id == current_user.facility_id, Student.deleted_at.is_(None))
        .order_by(Student.last_name, Student.first_name, Student.id)
        .paginate(page=page, per_page=limit, error_out=False)
    )
    return success_response({
        'items': [student.to_dict() for student in pagination.items],
        'total': pagination.total,
        'page': page,
        'limit': limit,
        'pages': pagination.pages,
    })


@students_bp.route('/api/<int:student_id>', methods=['GET'])
@login_required
def get_student(student_id):
    student = Student.get_for_facility(current_user.facility_id, student_id)
    return success_response(student.to_dict())


@students_bp.route('/api/<int:student_id>', methods=['DELETE'])
@login_required
@admin_required
def delete_student(student_id):
    student = Student.get_for_facility(current_user.facility_id, student_id)
    student.deleted_at = utc_now_naive()
    db.session.commit()
    return success_response({'message': 'Student deleted successfully'})
