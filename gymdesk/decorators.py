from functools import wraps

from flask_login import current_user

from gymdesk.exceptions import AuthenticationError, ForbiddenError


def roles_required(*roles):
    """Decorate routes to require one of the given roles."""
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            if not current_user.is_authenticated:
                raise AuthenticationError('Authentication required', 'MISSING_AUTH')
            if current_user.role not in roles:
                raise ForbiddenError(
                    f'This action requires one of these roles: {", ".join(roles)}',
                    'INSUFFICIENT_PERMISSIONS',
                )
            return f(*args, **kwargs)
        return decorated_function
    return decorator


admin_required = roles_required('admin')
admin_or_manager_required = roles_required('admin', 'manager')
staff_required = roles_required('admin', 'manager', 'coach')
