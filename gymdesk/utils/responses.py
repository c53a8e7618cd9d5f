from flask import jsonify


def success_response(data, status_code=200):
    """Wrap a payload in the {success, data} envelope."""
    return jsonify({'success': True, 'data': data}), status_code


def error_response(code, message, status_code, details=None):
    error = {'code': code, 'message': message}
    if details is not None:
        error['details'] = details
    return jsonify({'success': False, 'error': error}), status_code
